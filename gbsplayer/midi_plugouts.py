"""MIDI output plugins: one driven by register writes, one by channel status."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from gbsplayer.midifile import MidiFile, Opener
from gbsplayer.notes import midi_note

_NOTE_LIMIT = 0x80
_DIV_BASE = 2048


def _note(div: int, channel: int) -> Optional[int]:
    """MIDI note for a divisor, or None when it cannot be played as MIDI."""
    if div <= 0:
        return None
    note = midi_note(div, channel)
    if 0 <= note < _NOTE_LIMIT:
        return note
    return None


def _pan_all(midi: MidiFile, cycles: int, value: int) -> None:
    """Translate the NR51 panning register into MIDI pan events."""
    for channel in range(4):
        bits = (value >> channel) & 0x11
        if bits == 0x10:
            midi.pan(cycles, channel, 0)
        elif bits == 0x01:
            midi.pan(cycles, channel, 127)
        else:
            midi.pan(cycles, channel, 64)


def _require_open(midi: MidiFile) -> None:
    if midi.is_closed():
        raise RuntimeError("no MIDI track is open")


class MidiPlugout:
    """MIDI file writer that follows the sound register writes."""

    name = "midi"
    description = "MIDI file writer"
    uses_stdout = False

    def __init__(self, opener: Opener) -> None:
        self.midi = MidiFile(opener)
        self._div = [0, 0, 0, 0]
        self._volume = [0, 0, 0, 0]
        self._running = [False, False, False, False]
        self._master = [False, False, False, False]

    def skip(self, subsong: int) -> None:
        """Start a new MIDI file for ``subsong``."""
        self.midi.skip(subsong)

    def _channel_note(self, channel: int) -> Optional[int]:
        return _note(_DIV_BASE - self._div[channel], channel)

    def _restart(self, cycles: int, channel: int) -> None:
        """Start the current note again after the volume became non-zero."""
        if self._running[channel] and not self.midi.notes[channel]:
            note = self._channel_note(channel)
            if note is not None:
                self.midi.note_on(cycles, channel, note, self._volume[channel])

    def _retrigger(self, cycles: int, channel: int) -> None:
        """Portamento: replace the playing note when the pitch changed."""
        note = self._channel_note(channel)
        if note != self.midi.notes[channel]:
            self.midi.note_off(cycles, channel)
            if note is not None:
                self.midi.note_on(cycles, channel, note, self._volume[channel])

    def io(self, cycles: int, addr: int, value: int) -> None:
        """Handle a write of ``value`` to the IO register ``addr``."""
        _require_open(self.midi)
        value &= 0xFF
        midi = self.midi
        chan = (addr - 0xFF10) // 5

        if addr in (0xFF12, 0xFF17):
            self._volume[chan] = 8 * (value >> 4)
            self._master[chan] = (value & 0xF8) != 0
            if not self._master[chan] and self._running[chan]:
                # DAC turned off, disable channel
                midi.note_off(cycles, chan)
                self._running[chan] = False
            if self._volume[chan]:
                self._restart(cycles, chan)
            else:
                midi.note_off(cycles, chan)
        elif addr in (0xFF13, 0xFF18, 0xFF1D):
            self._div[chan] = (self._div[chan] & 0xFF00) | value
            if self._running[chan]:
                self._retrigger(cycles, chan)
        elif addr in (0xFF14, 0xFF19, 0xFF1E):
            self._div[chan] = (self._div[chan] & 0x00FF) | ((value & 7) << 8)
            if value & 0x80:
                # channel start trigger
                midi.note_off(cycles, chan)
                note = self._channel_note(chan)
                if note is not None and self._master[chan]:
                    midi.note_on(cycles, chan, note, self._volume[chan])
                    self._running[chan] = True
            elif self._running[chan]:
                self._retrigger(cycles, chan)
        elif addr == 0xFF1A:
            self._master[2] = (value & 0x80) == 0x80
            if not self._master[2] and self._running[2]:
                midi.note_off(cycles, 2)
                self._running[2] = False
        elif addr == 0xFF1C:
            self._volume[2] = 32 * ((4 - (value >> 5)) & 3)
            if self._volume[2]:
                self._restart(cycles, 2)
            else:
                midi.note_off(cycles, 2)
        elif addr == 0xFF25:
            _pan_all(midi, cycles, value)
        elif addr == 0xFF26 and not value & 0x80:
            for channel in range(4):
                self._div[channel] = 0
                self._volume[channel] = 0
                self._running[channel] = False
                self._master[channel] = True
                midi.note_off(cycles, channel)

    def step(self, cycles: int, channels: Iterable[object]) -> None:
        """Take over the mute flags of the channels."""
        self.midi.update_mute(channels)

    def close(self) -> None:
        """Finish the current MIDI file."""
        self.midi.close()


class AltMidiPlugout:
    """MIDI file writer that follows the inferred channel status."""

    name = "altmidi"
    description = "alternative MIDI file writer"
    uses_stdout = False

    def __init__(self, opener: Opener) -> None:
        self.midi = MidiFile(opener)
        self._volume = [0, 0, 0, 0]
        self._playing = [False, False, False, False]

    def skip(self, subsong: int) -> None:
        """Start a new MIDI file for ``subsong``."""
        self.midi.skip(subsong)

    def io(self, cycles: int, addr: int, value: int) -> None:
        """Handle a write of ``value`` to the IO register ``addr``."""
        _require_open(self.midi)
        value &= 0xFF
        chan = (addr - 0xFF10) // 5

        if addr in (0xFF12, 0xFF17):
            self._volume[chan] = 8 * (value >> 4)
        elif addr in (0xFF14, 0xFF19, 0xFF1E):
            if value & 0x80:
                # channel start trigger
                self.midi.note_off(cycles, chan)
                self._playing[chan] = False
        elif addr == 0xFF1C:
            self._volume[2] = 32 * ((4 - (value >> 5)) & 3)
        elif addr == 0xFF25:
            _pan_all(self.midi, cycles, value)

    def step(self, cycles: int, channels: Iterable[object]) -> None:
        """Start and stop notes following the status of the tone and wave channels."""
        status: Sequence[object] = list(channels)
        midi = self.midi
        midi.update_mute(status)

        for c, ch in enumerate(status[:3]):
            new_playing = bool(getattr(ch, "playing"))
            div_tc = getattr(ch, "div_tc")
            if self._playing[c]:
                if new_playing:
                    note = _note(div_tc, c)
                    if note != midi.notes[c]:
                        midi.note_off(cycles, c)
                        if note is None:
                            continue
                        midi.note_on(cycles, c, note, self._volume[c])
                else:
                    midi.note_off(cycles, c)
                    self._playing[c] = False
            elif new_playing:
                note = _note(div_tc, c)
                if note is None:
                    continue
                midi.note_on(cycles, c, note, self._volume[c])
                self._playing[c] = True

    def close(self) -> None:
        """Finish the current MIDI file."""
        self.midi.close()