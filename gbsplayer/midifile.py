"""Standard MIDI file writer shared by the MIDI output plugins."""

from __future__ import annotations

from typing import BinaryIO, Callable, Iterable, Optional

from gbsplayer.util import fpack, fpackat

TRACK_LENGTH_OFFSET = 18
TRACK_START_OFFSET = 22

_TICK_SHIFT = 14
_DIVISION = 124
_END_OF_TRACK = bytes((0xFF, 0x2F, 0x00))
_MASK64 = (1 << 64) - 1

Opener = Callable[[str, int], BinaryIO]


def _varlen(value: int) -> bytes:
    """Big endian variable length quantity; groups that are zero are left out."""
    value &= 0xFFFFFFFF
    out = bytearray()
    for shift in (21, 14, 7):
        v = (value >> shift) & 0x7F
        if v:
            out.append(v | 0x80)
    out.append(value & 0x7F)
    return bytes(out)


class MidiFile:
    """A single-track MIDI file per subsong, with one MIDI channel per sound channel.

    ``opener(extension, subsong)`` must return a writable, seekable binary file.
    """

    def __init__(self, opener: Opener) -> None:
        self._opener = opener
        self._file: Optional[BinaryIO] = None
        self._cycles_prev = 0
        self.mute = [False, False, False, False]
        self.notes = [0, 0, 0, 0]

    def is_closed(self) -> bool:
        """True when no track file is open."""
        return self._file is None

    def update_mute(self, channels: Iterable[object]) -> None:
        """Copy the mute flags from a sequence of channel status objects."""
        for index, channel in enumerate(channels):
            if index >= 4:
                break
            self.mute[index] = bool(getattr(channel, "mute"))

    def _require_file(self) -> BinaryIO:
        if self._file is None:
            raise RuntimeError("no MIDI track is open")
        return self._file

    def _write_event(self, cycles: int, data: bytes) -> None:
        f = self._require_file()
        delta = (cycles - self._cycles_prev) & _MASK64
        timestamp = delta >> _TICK_SHIFT
        f.write(_varlen(timestamp))
        f.write(data)
        # Advance only by what the timestamp resolution records, so dropped
        # low bits do not accumulate into a timing error.
        self._cycles_prev += timestamp << _TICK_SHIFT

    def note_on(self, cycles: int, channel: int, note: int, velocity: int) -> None:
        """Start ``note`` on ``channel`` unless the channel is muted."""
        if self.mute[channel]:
            return
        self._write_event(cycles, bytes((0x90 | channel, note, velocity)))
        self.notes[channel] = note

    def note_off(self, cycles: int, channel: int) -> None:
        """Stop the note playing on ``channel``, if any."""
        note = self.notes[channel]
        if not note:
            return
        self._write_event(cycles, bytes((0x80 | channel, note, 0)))
        self.notes[channel] = 0

    def pan(self, cycles: int, channel: int, pan: int) -> None:
        """Set the stereo position of ``channel`` (0 left, 64 centre, 127 right)."""
        if self.mute[channel]:
            return
        self._write_event(cycles, bytes((0xB0 | channel, 0x0A, pan)))

    def _open_track(self, subsong: int) -> None:
        f = self._opener("mid", subsong)
        try:
            fpack(f, ">{MThd}dwww", 6, 0, 1, _DIVISION)
            fpack(f, ">{MTrk}d", 0)  # length placeholder
        except Exception:
            f.close()
            raise
        self._file = f

    def _close_track(self) -> None:
        f = self._require_file()
        try:
            self._write_event(self._cycles_prev, _END_OF_TRACK)
            end = f.tell()
            if end > 0xFFFFFFFF:
                raise ValueError("MIDI track too long")
            fpackat(f, TRACK_LENGTH_OFFSET, ">d", end - TRACK_START_OFFSET)
        finally:
            self._file = None
            f.close()

    def skip(self, subsong: int) -> None:
        """Finish the current track, if any, and start a new file for ``subsong``."""
        if not self.is_closed():
            self._close_track()
        self._cycles_prev = 0
        self.notes = [0, 0, 0, 0]
        self._open_track(subsong)

    def close(self) -> None:
        """Stop all notes and finish the current track."""
        if self.is_closed():
            return
        for channel in range(4):
            self.note_off(self._cycles_prev + 1, channel)
        self._close_track()