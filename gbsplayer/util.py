"""Binary packing helpers and a small deterministic random number generator."""

from __future__ import annotations

import operator
import sys
from typing import BinaryIO, Callable, Iterable, MutableSequence

_MASK64 = (1 << 64) - 1
_SEED_OFFSET = 88172645463325252

_SIZES = {
    "b": 1,  # byte
    "w": 2,  # word
    "d": 4,  # doubleword
    "q": 8,  # quadword
}


def _pack(fmt: str, args: Iterable[object], emit: Callable[[int], None]) -> int:
    """Walk a pack format, handing every produced byte to ``emit``.

    Format characters:
      ``<`` little endian, ``>`` big endian, ``=`` native endian,
      ``{`` start and ``}`` end of a verbatim section,
      ``b`` 8 bit, ``w`` 16 bit, ``d`` 32 bit, ``q`` 64 bit values.
    Any other character outside a verbatim section is ignored.
    """
    little_endian = sys.byteorder == "little"
    verbatim = False
    values = iter(args)
    written = 0

    for ch in fmt:
        if verbatim and ch != "}":
            value, size = ord(ch) & 0xFF, 1
        elif ch == "{":
            verbatim = True
            continue
        elif ch == "}":
            verbatim = False
            continue
        elif ch == "=":
            little_endian = sys.byteorder == "little"
            continue
        elif ch == "<":
            little_endian = True
            continue
        elif ch == ">":
            little_endian = False
            continue
        elif ch in _SIZES:
            try:
                value = operator.index(next(values))
            except StopIteration:
                raise TypeError(f"not enough arguments for format {fmt!r}") from None
            size = _SIZES[ch]
        else:
            continue

        for i in range(size):
            shift = i if little_endian else size - i - 1
            emit((value >> (shift * 8)) & 0xFF)
            written += 1

    return written


def spack(fmt: str, *args: int) -> bytes:
    """Pack ``args`` according to ``fmt`` and return the resulting bytes."""
    out = bytearray()
    _pack(fmt, args, out.append)
    return bytes(out)


def fpack(f: BinaryIO, fmt: str, *args: int) -> int:
    """Pack ``args`` into the binary file ``f``; return the number of bytes written."""
    data = spack(fmt, *args)
    f.write(data)
    return len(data)


def fpackat(f: BinaryIO, offset: int, fmt: str, *args: int) -> int:
    """Seek ``f`` to ``offset`` and pack ``args`` there; return the bytes written."""
    f.seek(offset)
    return fpack(f, fmt, *args)


def xorshift64(state: int) -> int:
    """Advance a 64 bit xorshift state once and return the new state."""
    x = state & _MASK64
    x ^= (x << 13) & _MASK64
    x ^= x >> 7
    x ^= (x << 17) & _MASK64
    return x


class XorShift64:
    """Reproducible xorshift64 generator used for shuffled and random playlists."""

    def __init__(self, seed: int = 0) -> None:
        self.state = _SEED_OFFSET
        self.seed(seed)

    def seed(self, seed: int) -> None:
        """Reset the generator so that the same seed yields the same sequence."""
        self.state = (seed + _SEED_OFFSET) & _MASK64

    def next(self) -> int:
        """Return the next raw 64 bit value."""
        self.state = xorshift64(self.state)
        return self.state

    def rand_long(self, maximum: int) -> int:
        """Return a random integer from the half-open range [0, maximum)."""
        if maximum <= 0:
            raise ValueError("maximum must be positive")
        return self.next() % maximum

    def shuffle(self, items: MutableSequence[object]) -> None:
        """Shuffle ``items`` in place."""
        for i in range(len(items) - 1, 0, -1):
            j = self.rand_long(i)
            items[i], items[j] = items[j], items[i]