"""Player logic shared by the frontends: options, playlists and subsong order."""

from __future__ import annotations

import enum
import getopt
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from gbsplayer.plugout import available_plugins
from gbsplayer.status import NATIVE_ENDIAN, Endian, FilterType, LoopMode
from gbsplayer.util import XorShift64

DEFAULT_REFRESH_DELAY = 33  # milliseconds
DEFAULT_PLUGIN = available_plugins()[0].name
CONFIG_FILE = ".gbsplayrc"

_OPTSTRING = "1234c:E:f:g:hH:lLo:qr:R:t:T:vVzZ"
_LONG_RE = re.compile(r"\s*([+-]?\d+)")

_FILTERS = {
    "off": FilterType.OFF,
    "dmg": FilterType.DMG,
    "cgb": FilterType.CGB,
}

_ENDIANS = {
    "b": Endian.BIG,
    "l": Endian.LITTLE,
    "n": NATIVE_ENDIAN,
}


class UsageError(ValueError):
    """The command line could not be understood."""


class PlayMode(enum.IntEnum):
    """Order in which subsongs are played."""

    LINEAR = 1
    RANDOM = 2  # repetitions possible
    SHUFFLE = 3


def setup_playlist(songs: int, seed: int) -> List[int]:
    """Return all subsong numbers shuffled reproducibly with ``seed``."""
    if songs <= 0:
        raise ValueError("a playlist needs at least one song")
    playlist = list(range(songs))
    XorShift64(seed).shuffle(playlist)
    return playlist


class Playlist:
    """Chooses the subsong to play next and previously for a play mode.

    ``next`` and ``previous`` return the raw choice: in linear mode that may
    lie outside the range of subsongs, which the caller uses to detect the
    end of the range and wraps around itself.
    """

    def __init__(self, songs: int, mode: PlayMode = PlayMode.LINEAR, seed: int = 0) -> None:
        if songs <= 0:
            raise ValueError("a playlist needs at least one song")
        self.songs = songs
        self.mode = PlayMode(mode)
        self.seed = seed
        self._rng = XorShift64(seed)
        self._index = 0
        self._order: List[int] = (
            setup_playlist(songs, seed) if self.mode is PlayMode.SHUFFLE else list(range(songs))
        )

    @property
    def order(self) -> Tuple[int, ...]:
        """The current shuffled order of subsongs."""
        return tuple(self._order)

    def _regenerate(self) -> None:
        self._order = setup_playlist(self.songs, self.seed)

    def start(self, subsong: int, default_song: int) -> int:
        """Prepare the play mode and return the subsong to start with.

        ``subsong`` is -1 when none was requested; ``default_song`` is the
        one-based default subsong of the file.
        """
        if self.mode is PlayMode.RANDOM:
            if subsong == -1:
                subsong = self.next(subsong)
        elif self.mode is PlayMode.SHUFFLE:
            self._regenerate()
            self._index = 0
            if subsong == -1:
                subsong = self._order[0]
            else:
                if not 0 <= subsong < self.songs:
                    raise ValueError(f"subsong {subsong} out of range")
                # Reshuffle (not rotate) until the wanted song comes first, so
                # the order stays reproducible from the seed alone.
                while self._order[0] != subsong:
                    self.seed += 1
                    self._regenerate()
        elif subsong == -1:
            subsong = default_song - 1
        return subsong

    def next(self, current: int) -> int:
        """Return the subsong to play after ``current``."""
        if self.mode is PlayMode.RANDOM:
            return self._rng.rand_long(self.songs)
        if self.mode is PlayMode.SHUFFLE:
            self._index += 1
            if self._index == self.songs:
                self.seed += 1
                self._regenerate()
                self._index = 0
            return self._order[self._index]
        return current + 1

    def previous(self, current: int) -> int:
        """Return the subsong that was played before ``current``."""
        if self.mode is PlayMode.RANDOM:
            return self._rng.rand_long(self.songs)
        if self.mode is PlayMode.SHUFFLE:
            self._index -= 1
            if self._index == -1:
                self.seed -= 1
                self._regenerate()
                self._index = self.songs - 1
            return self._order[self._index]
        return current - 1


@dataclass
class PlayerOptions:
    """Settings of the player, from defaults, configuration and command line."""

    endian: Endian = Endian.AUTOSELECT
    fadeout: int = 3
    subsong_gap: int = 2
    filter_type: str = "dmg"
    loop_mode: LoopMode = LoopMode.OFF
    output_plugin: str = DEFAULT_PLUGIN
    verbosity: int = 3
    rate: int = 44100
    refresh_delay: int = DEFAULT_REFRESH_DELAY
    silence_timeout: int = 2
    subsong_timeout: int = 2 * 60
    playmode: PlayMode = PlayMode.LINEAR
    mute: List[bool] = field(default_factory=lambda: [False, False, False, False])
    config_files: List[str] = field(default_factory=list)
    file: Optional[str] = None
    subsong_start: int = -1
    subsong_stop: int = -1
    show_help: bool = False
    show_version: bool = False


def swap_endian(data: bytes) -> bytes:
    """Swap the two bytes of every 16 bit sample; a trailing odd byte is kept."""
    out = bytearray(data)
    even = len(out) - len(out) % 2
    out[0:even:2], out[1:even:2] = out[1:even:2], out[0:even:2]
    return bytes(out)


def parse_filter(name: str) -> FilterType:
    """Filter type for a case-insensitive name: off, dmg or cgb."""
    try:
        return _FILTERS[name.lower()]
    except KeyError:
        raise ValueError(f'Invalid filter type "{name}"') from None


def parse_endian(text: str) -> Endian:
    """Endian for b (big), l (little) or n (native), case-insensitive."""
    try:
        return _ENDIANS[text.lower()]
    except KeyError:
        raise UsageError(f'"{text}" is not a valid endian.') from None


def endian_str(endian: int) -> str:
    """Name of an endian setting as shown in the help text."""
    if endian == Endian.BIG:
        return "big"
    if endian == Endian.LITTLE:
        return "little"
    if endian == Endian.AUTOSELECT:
        return "default"
    return "invalid"


def filename_only(path: str) -> str:
    """The part of ``path`` after the last slash."""
    return path.rsplit("/", 1)[-1]


def usage_text(myname: str, options: PlayerOptions) -> str:
    """Help text showing the current settings as defaults."""
    return (
        f"Usage: {myname} [option(s)] <gbs-file> [start_at_subsong [stop_at_subsong] ]\n"
        "\n"
        "Available options are:\n"
        f"  -E        endian, b == big, l == little, n == native ({endian_str(options.endian)})\n"
        f"  -f        set fadeout ({options.fadeout} seconds)\n"
        f"  -g        set subsong gap ({options.subsong_gap} seconds)\n"
        "  -h        display this help and exit\n"
        f"  -H        set output high-pass type ({options.filter_type})\n"
        "  -l        set loop mode to range\n"
        "  -L        set loop mode to single\n"
        f"  -o        select output plugin ({options.output_plugin})\n"
        "            'list' shows available plugins\n"
        "  -q        reduce verbosity\n"
        f"  -r        set samplerate ({options.rate}Hz)\n"
        f"  -R        set refresh delay ({options.refresh_delay} milliseconds)\n"
        f"  -t        set subsong timeout ({options.subsong_timeout} seconds)\n"
        f"  -T        set silence timeout ({options.silence_timeout} seconds)\n"
        "  -v        increase verbosity\n"
        "  -V        print version and exit\n"
        "  -z        play subsongs in shuffle mode\n"
        "  -Z        play subsongs in random mode (repetitions possible)\n"
        "  -1 to -4  mute a channel on startup\n"
    )


def _scan_long(text: str, current: int) -> int:
    """Leading integer of ``text``, or ``current`` when there is none."""
    match = _LONG_RE.match(text)
    return int(match.group(1)) if match else current


_NUMERIC = {
    "-f": "fadeout",
    "-g": "subsong_gap",
    "-r": "rate",
    "-R": "refresh_delay",
    "-t": "subsong_timeout",
    "-T": "silence_timeout",
}


def parse_args(argv: Sequence[str]) -> PlayerOptions:
    """Parse command line arguments (without the program name).

    ``-h`` and ``-V`` stop parsing and set ``show_help`` or
    ``show_version``. Raises UsageError on invalid input.
    """
    opts = PlayerOptions()
    try:
        parsed, rest = getopt.gnu_getopt(list(argv), _OPTSTRING)
    except getopt.GetoptError as exc:
        raise UsageError(str(exc)) from None

    for flag, value in parsed:
        if flag in ("-1", "-2", "-3", "-4"):
            channel = int(flag[1]) - 1
            opts.mute[channel] = not opts.mute[channel]
        elif flag == "-c":
            opts.config_files.append(value)
        elif flag == "-E":
            opts.endian = parse_endian(value)
        elif flag in _NUMERIC:
            attr = _NUMERIC[flag]
            setattr(opts, attr, _scan_long(value, getattr(opts, attr)))
        elif flag == "-h":
            opts.show_help = True
            return opts
        elif flag == "-H":
            opts.filter_type = value
        elif flag == "-l":
            opts.loop_mode = LoopMode.RANGE
        elif flag == "-L":
            opts.loop_mode = LoopMode.SINGLE
        elif flag == "-o":
            opts.output_plugin = value
        elif flag == "-q":
            opts.verbosity -= 1
        elif flag == "-v":
            opts.verbosity += 1
        elif flag == "-V":
            opts.show_version = True
            return opts
        elif flag == "-z":
            opts.playmode = PlayMode.SHUFFLE
        elif flag == "-Z":
            opts.playmode = PlayMode.RANDOM

    if not rest:
        raise UsageError("no gbs file given")
    opts.file = rest[0]
    if len(rest) >= 2:
        opts.subsong_start = _scan_long(rest[1], opts.subsong_start) - 1
    if len(rest) >= 3:
        opts.subsong_stop = _scan_long(rest[2], opts.subsong_stop) - 1
    return opts


def clamp_subsongs(start: int, stop: int, songs: int) -> Tuple[int, int]:
    """Bring zero-based start and stop subsongs into the range of the file.

    A start of -1 means "not given"; a stop of -1 means "no stop".
    """
    if start < -1:
        start = 0
    elif start >= songs:
        start = songs - 1
    if stop < 0 or stop >= songs:
        stop = -1
    return start, stop