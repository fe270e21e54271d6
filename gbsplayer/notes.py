"""Note, volume and register display helpers for the player status line."""

from __future__ import annotations

import math
from typing import Callable

C0HZ = 16.35
C0MIDI = 12
C6GBRAW = 1923  # first note of the startup sound, 1048.576Hz
C6GB = 2048 - C6GBRAW
C6MIDI = 84  # 1046.50Hz in equal temperament

MAXOCTAVE = 9

_BASENOTES = ("C-", "C#", "D-", "D#", "E-", "F-", "F#", "G-", "G#", "A-", "A#", "B-")
_VOLS = " -=#%"


def _lround(x: float) -> int:
    """Round half away from zero."""
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def frequency(div: int, channel: int) -> float:
    """Frequency in Hz of a channel playing with divisor ``div``.

    The wave channel (and above) produces half the frequency.
    """
    if div <= 0:
        raise ValueError("divisor must be positive")
    return 131072.0 / (div << (1 if channel > 1 else 0))


def freq_to_note(freq: float) -> int:
    """MIDI note number closest to ``freq``."""
    if freq <= 0:
        raise ValueError("frequency must be positive")
    return _lround(math.log2(freq / C0HZ) * 12) + C0MIDI


def midi_note(div: int, channel: int) -> int:
    """MIDI note number of a channel playing with divisor ``div``."""
    return freq_to_note(frequency(div, channel))


def note_label(note: int) -> str:
    """Tracker-style three character name of a MIDI note, "rge" when out of range."""
    index = note - C0MIDI
    if not 0 <= index < MAXOCTAVE * 12:
        return "rge"
    octave, step = divmod(index, 12)
    return f"{_BASENOTES[step]}{octave}"


def volume_label(volume: int) -> str:
    """Four character volume bar for a volume between 0 and 15."""
    volume = max(0, min(15, volume))
    full, rest = divmod(volume, 4)
    return _VOLS[4] * full + _VOLS[rest] + " " * (3 - full)


def reversed_volume_label(volume: int) -> str:
    """Volume bar growing to the left, for the left master volume."""
    return volume_label(volume)[::-1]


def channel_label(mute: bool, volume: int, div_tc: int, channel: int) -> str:
    """Short text for what a channel is currently playing."""
    if mute:
        return "-M-"
    if volume == 0:
        return "---"
    if channel == 3:
        return "nse"
    return note_label(midi_note(div_tc, channel))


def register_dump(peek: Callable[[int], int]) -> str:
    """Dump the sound registers read through ``peek`` as terminal text.

    The text ends with cursor-up sequences so that it overwrites itself
    on the next refresh.
    """
    parts = []
    for channel in range(4):
        values = " ".join(f"{peek(0xFF10 + channel * 5 + k):02x}" for k in range(5))
        parts.append(f"CH{channel + 1}: {values}\n")
    misc = " ".join(f"{peek(addr):02x}" for addr in range(0xFF24, 0xFF27))
    parts.append(f"MISC: {misc}")
    wave = "".join(f"{peek(0xFF30 + k):02x}" for k in range(16))
    parts.append(f"\nWAVE: {wave}")
    parts.append("\n" + "\033[A" * 6)
    return "".join(parts)