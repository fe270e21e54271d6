"""Generation of band-limited step impulse tables for the sound synthesis."""

from __future__ import annotations

import math
import sys
from typing import Sequence

IMPULSE_HEIGHT = 1 << 24

IMPULSE_N_SHIFT = 7  # 128 shifted impulses
IMPULSE_W_SHIFT = 5  # 32 samples per impulse
IMPULSE_CUTOFF = 1.0  # cutoff at the nyquist limit (no cutoff)

_MAX_CORRECTIONS = 20


def _sinc(x: float) -> float:
    a = math.pi * x
    if a == 0.0:
        return 1.0
    return math.sin(a) / a


def _blackman(n: float, m: float) -> float:
    return 0.42 - 0.5 * math.cos(2 * n * math.pi / m) + 0.08 * math.cos(4 * n * math.pi / m)


def _impulse_row(j: float, dcorr: float, cutoff: float, width: int) -> list[int]:
    m = width // 2
    return [
        round(dcorr * IMPULSE_HEIGHT * _sinc((i - j) * cutoff) * _blackman(i - j + width // 2, width))
        for i in range(-m + 1, m + 1)
    ]


def gen_impulsetab(w_shift: int, n_shift: int, cutoff: float) -> list[int]:
    """Return ``2**n_shift`` impulses of ``2**w_shift`` samples each, flattened.

    Every impulse is a windowed sinc shifted by a fraction of a sample and
    normalised so that its samples sum to ``IMPULSE_HEIGHT``.
    """
    if w_shift < 1 or n_shift < 0:
        raise ValueError("w_shift must be at least 1 and n_shift non-negative")

    width = 1 << w_shift
    n = 1 << n_shift
    m = width // 2

    first = [0] * width
    first[m - 1] = IMPULSE_HEIGHT
    table = first

    for j_l in range(1, n):
        j = j_l / n
        div = float(IMPULSE_HEIGHT)
        dcorr = cutoff
        attempts = 0
        while True:
            corr = IMPULSE_HEIGHT - sum(_impulse_row(j, dcorr, cutoff, width))
            dcorr *= 1.0 + corr / div
            div *= 1.3
            if corr == 0 or attempts >= _MAX_CORRECTIONS:
                break
            attempts += 1

        row = _impulse_row(j, dcorr, cutoff, width)
        row[m] += IMPULSE_HEIGHT - sum(row)
        table.extend(row)

    return table


def _format_table(table: Sequence[int], width: int) -> str:
    parts = []
    for i, value in enumerate(table):
        if i % width == 0:
            parts.append("\n\t")
        parts.append(f"{value:9d},")
    return "".join(parts)


def render_impulse_header(w_shift: int, n_shift: int, cutoff: float) -> str:
    """Render the impulse table as a C header defining ``base_impulse``."""
    table = gen_impulsetab(w_shift, n_shift, cutoff)
    return (
        f"#define IMPULSE_N_SHIFT {n_shift}\n"
        f"#define IMPULSE_W_SHIFT {w_shift}\n"
        "static const int32_t base_impulse[] = {"
        + _format_table(table, 1 << w_shift)
        + "\n};\n"
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Write the default impulse header to standard output."""
    sys.stdout.write(render_impulse_header(IMPULSE_W_SHIFT, IMPULSE_N_SHIFT, IMPULSE_CUTOFF))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())