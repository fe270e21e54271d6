"""File writing output plugins: VGM register logs, WAV audio and IO dumps."""

from __future__ import annotations

import sys
from typing import BinaryIO, Optional, TextIO

from gbsplayer.midifile import Opener
from gbsplayer.status import Endian
from gbsplayer.util import fpack, fpackat

VGM_FILE_VERSION = 0x161
VGM_DMG_CLOCK = 0x400000
VGM_WAITSAMPLES_MAX = 0xFFFF
VGM_TICKS_PER_SECOND = 44100

VGM_OFS_NUMSAMPLES = 0x18
VGM_OFS_DATA_START = 0x34
VGM_OFS_DMG_CLOCK = 0x80
VGM_HDR_LEN = 0x84

VGM_CMD_WAITSAMPLES = 0x61
VGM_CMD_WAITSAMPLES_SHORT = 0x70
VGM_CMD_END = 0x66
VGM_CMD_DMGWRITE = 0xB3

VGM_DATA_START_REL = VGM_HDR_LEN - VGM_OFS_DATA_START

WAV_HEADER_LEN = 44

_MASK64 = (1 << 64) - 1


class VgmWriter:
    """Writes the sound register writes of each subsong to a VGM file."""

    name = "vgm"
    description = "VGM file writer"
    uses_stdout = False

    def __init__(self, opener: Opener) -> None:
        self._opener = opener
        self._file: Optional[BinaryIO] = None
        self._samples_total = 0.0
        self._samples_prev = 0.0
        self._sample_diff_acc = 0.0

    def _finalize(self, f: BinaryIO) -> None:
        # a second of delay at the end for sounds to finish, then the end marker
        fpack(f, "<bwb", VGM_CMD_WAITSAMPLES, VGM_TICKS_PER_SECOND, VGM_CMD_END)
        eof_offset = f.tell() - 4
        fpackat(f, 0, "<{Vgm }dd", eof_offset, VGM_FILE_VERSION)
        fpackat(f, VGM_OFS_DMG_CLOCK, "<d", VGM_DMG_CLOCK)
        fpackat(f, VGM_OFS_DATA_START, "<d", VGM_DATA_START_REL)
        fpackat(f, VGM_OFS_NUMSAMPLES, "<d", int(self._samples_total) & 0xFFFFFFFF)

    def _close_file(self) -> None:
        f = self._file
        if f is None:
            return
        self._file = None
        try:
            self._finalize(f)
        finally:
            f.close()

    def skip(self, subsong: int) -> None:
        """Finish the current file, if any, and start one for ``subsong``."""
        self._close_file()
        f = self._opener("vgm", subsong)
        f.write(bytes(VGM_HDR_LEN))  # header is filled in when the file is finished
        self._file = f
        self._sample_diff_acc = 0.0
        self._samples_prev = 0.0

    def io(self, cycles: int, addr: int, value: int) -> None:
        """Log a register write, preceded by the wait since the previous one."""
        f = self._file
        if f is None:
            raise RuntimeError("no VGM file is open")

        # VGM counts time in 44100Hz samples; keep the fractional part around.
        self._samples_total = cycles * VGM_TICKS_PER_SECOND / VGM_DMG_CLOCK
        self._sample_diff_acc += self._samples_total - self._samples_prev
        wait = int(self._sample_diff_acc)
        self._sample_diff_acc -= wait

        while wait > 0:
            if wait < 17:
                f.write(bytes((VGM_CMD_WAITSAMPLES_SHORT | (wait - 1),)))
            else:
                fpack(f, "<bw", VGM_CMD_WAITSAMPLES, min(wait, VGM_WAITSAMPLES_MAX))
            wait -= VGM_WAITSAMPLES_MAX

        if addr >= 0xFF10:
            fpack(f, "<bbb", VGM_CMD_DMGWRITE, (addr - 0xFF10) & 0xFF, value & 0xFF)

        self._samples_prev = self._samples_total

    def close(self) -> None:
        """Finish the current file."""
        self._close_file()


class WavWriter:
    """Writes the rendered samples of each subsong to a 16 bit stereo WAV file."""

    name = "wav"
    description = "WAV file writer"
    uses_stdout = False
    endian = Endian.LITTLE

    def __init__(self, opener: Opener, rate: int) -> None:
        self._opener = opener
        self.rate = rate
        self._file: Optional[BinaryIO] = None

    def _write_header(self, f: BinaryIO) -> None:
        num_channels = 2
        bits_per_sample = 16
        byte_rate = self.rate * num_channels * bits_per_sample // 8
        block_align = num_channels * bits_per_sample // 8

        filesize = f.tell()
        if filesize > 0xFFFFFFFF:
            raise ValueError("WAV file too large")

        fpackat(
            f,
            0,
            "<{RIFF}d{WAVE}<{fmt }dwwddww{data}d",
            (filesize - 8) & 0xFFFFFFFF,
            16,  # fmt subchunk length
            1,  # uncompressed PCM
            num_channels,
            self.rate,
            byte_rate,
            block_align,
            bits_per_sample,
            (filesize - WAV_HEADER_LEN) & 0xFFFFFFFF,
        )

    def _close_file(self) -> None:
        f = self._file
        if f is None:
            return
        self._file = None
        try:
            self._write_header(f)
        finally:
            f.close()

    def skip(self, subsong: int) -> None:
        """Finish the current file, if any, and start one for ``subsong``."""
        self._close_file()
        f = self._opener("wav", subsong)
        f.write(bytes(WAV_HEADER_LEN))
        self._file = f

    def write(self, data: bytes) -> int:
        """Append little endian sample data; return the number of bytes written."""
        if self._file is None:
            raise RuntimeError("no WAV file is open")
        self._file.write(data)
        return len(data)

    def close(self) -> None:
        """Finish the current file."""
        self._close_file()


class IoDumper:
    """Dumps every IO register write as text, with cycle deltas in hex."""

    name = "iodumper"
    description = "STDOUT io dumper"
    uses_stdout = True

    def __init__(self, stream: TextIO, log: Optional[TextIO] = None) -> None:
        self._stream = stream
        self._log = log if log is not None else sys.stderr
        self._cycles_prev = 0

    def skip(self, subsong: int) -> None:
        """Mark the start of ``subsong`` in the dump."""
        self._cycles_prev = 0
        self._stream.write(f"\nsubsong {subsong}\n")
        self._log.write(f"dumping subsong {subsong}\n")

    def io(self, cycles: int, addr: int, value: int) -> None:
        """Dump one register write."""
        diff = (cycles - self._cycles_prev) & _MASK64
        self._stream.write(f"{diff:08x} {addr:04x}={value:02x}\n")
        self._cycles_prev = cycles

    def close(self) -> None:
        """Flush and close the dump stream."""
        self._stream.flush()
        self._stream.close()