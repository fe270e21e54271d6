"""Player status types: loop and filter modes, endianness and channel state."""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass

GBS_LEN_SHIFT = 10
GBS_LEN_DIV = 1 << GBS_LEN_SHIFT  # subsong lengths count 1024 units per second

GBHW_CLOCK = 0x400000  # Game Boy master clock in Hz

_NO_TOTAL = 99


class LoopMode(enum.IntEnum):
    """How playback continues when a subsong has finished."""

    OFF = 0  # no looping
    RANGE = 1  # loop the selected subsong range
    SINGLE = 2  # loop a single subsong

    def cycle(self) -> "LoopMode":
        """Return the mode that follows this one: off, range, single, off, ..."""
        members = list(LoopMode)
        return members[(members.index(self) + 1) % len(members)]


class FilterType(enum.IntEnum):
    """High-pass filters emulating the different hardware variants."""

    OFF = 0  # no filter
    DMG = 1  # Game Boy classic high-pass filter
    CGB = 2  # Game Boy Color high-pass filter


class Endian(enum.IntEnum):
    """Byte order of the sample data handed to an output plugin."""

    BIG = 0
    LITTLE = 1
    AUTOSELECT = 2


NATIVE_ENDIAN = Endian.LITTLE if sys.byteorder == "little" else Endian.BIG


@dataclass
class ChannelStatus:
    """Current state of one of the four emulated sound channels."""

    mute: bool = False
    vol: int = 0
    div_tc: int = 0
    playing: bool = False


@dataclass(frozen=True)
class DisplayTime:
    """Played and total time of a subsong split into minutes and seconds."""

    played_min: int
    played_sec: int
    total_min: int
    total_sec: int


def display_time(ticks: int, subsong_len: int) -> DisplayTime:
    """Turn emulated clock ticks and a subsong length into display time.

    A subsong length of zero means "unknown" and shows as 99:99.
    """
    played = ticks // GBHW_CLOCK
    total = subsong_len // GBS_LEN_DIV
    played_min, played_sec = divmod(played, 60)
    if total:
        total_min, total_sec = divmod(total, 60)
    else:
        total_min = total_sec = _NO_TOTAL
    return DisplayTime(played_min, played_sec, total_min, total_sec)


def loop_mode_label(mode: LoopMode) -> str:
    """Suffix shown in the status line for the given loop mode."""
    if mode == LoopMode.RANGE:
        return " [loop range]"
    if mode == LoopMode.SINGLE:
        return " [loop single]"
    return ""