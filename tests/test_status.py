import sys

import pytest

from gbsplayer.status import (
    GBHW_CLOCK,
    GBS_LEN_DIV,
    NATIVE_ENDIAN,
    ChannelStatus,
    DisplayTime,
    Endian,
    FilterType,
    LoopMode,
    display_time,
    loop_mode_label,
)


def test_loop_mode_values_match_api():
    assert [LoopMode(v) for v in (0, 1, 2)] == [LoopMode.OFF, LoopMode.RANGE, LoopMode.SINGLE]


def test_loop_mode_cycle_order():
    assert LoopMode.OFF.cycle() is LoopMode.RANGE
    assert LoopMode.RANGE.cycle() is LoopMode.SINGLE
    assert LoopMode.SINGLE.cycle() is LoopMode.OFF


@pytest.mark.parametrize("value", [0, 1, 2])
def test_loop_mode_cycle_returns_to_start(value):
    assert LoopMode(value).cycle().cycle().cycle() is LoopMode(value)
    assert LoopMode(value).cycle() is not LoopMode(value)


def test_filter_type_order():
    assert [FilterType(v).name for v in (0, 1, 2)] == ["OFF", "DMG", "CGB"]


def test_endian_values():
    assert (Endian(0), Endian(1), Endian(2)) == (Endian.BIG, Endian.LITTLE, Endian.AUTOSELECT)


def test_native_endian_follows_machine():
    expected = Endian.LITTLE if sys.byteorder == "little" else Endian.BIG
    assert Endian(int(NATIVE_ENDIAN)) is expected


def test_channel_status_defaults():
    status = ChannelStatus()
    assert (status.mute, status.vol, status.div_tc, status.playing) == (False, 0, 0, False)


def test_display_time_splits_minutes_and_seconds():
    result = display_time(GBHW_CLOCK * 75, GBS_LEN_DIV * 130)
    assert result == DisplayTime(75 // 60, 75 % 60, 130 // 60, 130 % 60)


def test_display_time_truncates_partial_seconds():
    result = display_time(GBHW_CLOCK * 5 + GBHW_CLOCK - 1, GBS_LEN_DIV * 10 + 1)
    assert result.played_sec == 5
    assert result.total_sec == 10


def test_display_time_unknown_length():
    result = display_time(0, 0)
    assert (result.total_min, result.total_sec) == (99, 99)
    assert (result.played_min, result.played_sec) == (0, 0)


def test_loop_mode_labels():
    assert loop_mode_label(LoopMode.OFF) == ""
    assert loop_mode_label(LoopMode.RANGE) == " [loop range]"
    assert loop_mode_label(LoopMode.SINGLE) == " [loop single]"