"""Registry of the available output plugins and the raw stdout writer."""

from __future__ import annotations

import io
import sys
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional, TextIO, Tuple

from gbsplayer.filewriters import IoDumper, VgmWriter, WavWriter
from gbsplayer.midi_plugouts import AltMidiPlugout, MidiPlugout
from gbsplayer.midifile import Opener
from gbsplayer.status import Endian

PluginFactory = Callable[[int, Opener, BinaryIO], object]


class StdoutWriter:
    """Writes raw sample data to a binary stream."""

    name = "stdout"
    description = "STDOUT file writer"
    uses_stdout = True

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def write(self, data: bytes) -> int:
        """Write sample data; return the number of bytes written."""
        written = self._stream.write(data)
        return len(data) if written is None else written

    def close(self) -> None:
        """Flush and close the stream."""
        self._stream.flush()
        self._stream.close()


@dataclass(frozen=True)
class OutputPlugin:
    """Description of an output plugin and how to open it.

    ``open(rate, opener, stdout)`` returns the plugin instance; ``endian`` is
    the only byte order the plugin accepts, or None when any will do.
    """

    name: str
    description: str
    open: PluginFactory
    uses_stdout: bool = False
    endian: Optional[Endian] = None


def _open_stdout(rate: int, opener: Opener, stdout: BinaryIO) -> object:
    return StdoutWriter(stdout)


def _open_midi(rate: int, opener: Opener, stdout: BinaryIO) -> object:
    return MidiPlugout(opener)


def _open_altmidi(rate: int, opener: Opener, stdout: BinaryIO) -> object:
    return AltMidiPlugout(opener)


def _open_iodumper(rate: int, opener: Opener, stdout: BinaryIO) -> object:
    text = io.TextIOWrapper(stdout, encoding="ascii", newline="\n", write_through=True)
    return IoDumper(text, sys.stderr)


def _open_vgm(rate: int, opener: Opener, stdout: BinaryIO) -> object:
    return VgmWriter(opener)


def _open_wav(rate: int, opener: Opener, stdout: BinaryIO) -> object:
    return WavWriter(opener, rate)


# in order of preference
_PLUGINS: Tuple[OutputPlugin, ...] = (
    OutputPlugin("stdout", "STDOUT file writer", _open_stdout, uses_stdout=True),
    OutputPlugin("midi", "MIDI file writer", _open_midi),
    OutputPlugin("altmidi", "alternative MIDI file writer", _open_altmidi),
    OutputPlugin("iodumper", "STDOUT io dumper", _open_iodumper, uses_stdout=True),
    OutputPlugin("vgm", "VGM file writer", _open_vgm),
    OutputPlugin("wav", "WAV file writer", _open_wav, endian=Endian.LITTLE),
)


def available_plugins() -> Tuple[OutputPlugin, ...]:
    """All output plugins, in order of preference."""
    return _PLUGINS


def list_plugins(out: TextIO) -> None:
    """Print the names and descriptions of the available plugins to ``out``."""
    out.write("Available output plugins:\n\n")
    if not _PLUGINS:
        out.write("No output plugins available.\n\n")
        return
    for plugin in _PLUGINS:
        out.write(f"{plugin.name:<8} - {plugin.description}\n")
    out.write("\n")


def select_by_name(name: str) -> OutputPlugin:
    """Return the plugin called ``name``; raise KeyError when there is none."""
    for plugin in _PLUGINS:
        if plugin.name == name:
            return plugin
    raise KeyError(f'"{name}" is not a known output plugin.')