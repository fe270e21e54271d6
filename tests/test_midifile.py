import struct

import pytest

from gbsplayer.midifile import MidiFile
from gbsplayer.status import ChannelStatus


@pytest.fixture
def opener(tmp_path):
    def _open(ext, subsong):
        return open(tmp_path / f"gbsplay-{subsong}.{ext}", "w+b")

    return _open


def read_file(tmp_path, subsong):
    return (tmp_path / f"gbsplay-{subsong}.mid").read_bytes()


def body(data):
    return data[22:]


def test_header_layout(tmp_path, opener):
    midi = MidiFile(opener)
    midi.skip(0)
    assert not midi.is_closed()
    midi.close()
    assert midi.is_closed()
    data = read_file(tmp_path, 0)
    assert data[:4] == b"MThd"
    assert struct.unpack(">IHHH", data[4:14]) == (6, 0, 1, 124)
    assert data[14:18] == b"MTrk"
    assert struct.unpack(">I", data[18:22])[0] == len(data) - 22


def test_empty_track(tmp_path, opener):
    midi = MidiFile(opener)
    midi.skip(1)
    assert midi.notes == [0, 0, 0, 0]
    midi.close()
    assert midi.is_closed()
    assert body(read_file(tmp_path, 1)) == b"\x00\xff\x2f\x00"


def test_note_on_and_closing_note_off(tmp_path, opener):
    midi = MidiFile(opener)
    midi.skip(0)
    midi.note_on(3 << 14, 0, 60, 100)
    assert midi.notes[0] == 60
    midi.close()
    expected = bytes([3, 0x90, 60, 100, 0, 0x80, 60, 0, 0, 0xFF, 0x2F, 0])
    assert body(read_file(tmp_path, 0)) == expected


def test_multi_byte_delta(tmp_path, opener):
    midi = MidiFile(opener)
    midi.skip(0)
    midi.note_on(200 << 14, 1, 64, 8)
    assert midi.notes[1] == 64
    midi.close()
    assert midi.is_closed()
    assert body(read_file(tmp_path, 0))[:5] == bytes([0x81, 0x48, 0x91, 64, 8])


def test_timing_does_not_accumulate_error(tmp_path, opener):
    midi = MidiFile(opener)
    midi.skip(0)
    midi.pan((1 << 14) + 16000, 0, 64)
    midi.pan((2 << 14) + 1000, 0, 127)
    assert midi.notes == [0, 0, 0, 0]
    midi.close()
    assert midi.is_closed()
    data = body(read_file(tmp_path, 0))
    assert data[:8] == bytes([1, 0xB0, 0x0A, 64, 1, 0xB0, 0x0A, 127])


def test_mute_suppresses_events(tmp_path, opener):
    midi = MidiFile(opener)
    midi.skip(0)
    midi.update_mute([ChannelStatus(mute=True), ChannelStatus(), ChannelStatus(), ChannelStatus()])
    midi.note_on(0, 0, 60, 100)
    midi.pan(0, 0, 0)
    assert midi.notes[0] == 0
    midi.close()
    assert body(read_file(tmp_path, 0)) == b"\x00\xff\x2f\x00"


def test_note_off_without_note_writes_nothing(tmp_path, opener):
    midi = MidiFile(opener)
    midi.skip(0)
    midi.note_off(1 << 20, 2)
    assert midi.notes[2] == 0
    midi.close()
    assert midi.is_closed()
    assert body(read_file(tmp_path, 0)) == b"\x00\xff\x2f\x00"


def test_skip_finishes_previous_file(tmp_path, opener):
    midi = MidiFile(opener)
    midi.skip(0)
    midi.note_on(0, 2, 50, 32)
    midi.skip(1)
    assert midi.notes == [0, 0, 0, 0]
    first = read_file(tmp_path, 0)
    assert struct.unpack(">I", first[18:22])[0] == len(first) - 22
    assert first.endswith(b"\xff\x2f\x00")
    midi.close()
    assert body(read_file(tmp_path, 1)) == b"\x00\xff\x2f\x00"


def test_is_closed_transitions(opener):
    midi = MidiFile(opener)
    assert midi.is_closed()
    midi.skip(0)
    assert not midi.is_closed()
    midi.close()
    assert midi.is_closed()
    midi.close()
    assert midi.is_closed()


def test_events_without_open_track_raise(opener):
    midi = MidiFile(opener)
    with pytest.raises(RuntimeError):
        midi.note_on(0, 0, 60, 100)
    with pytest.raises(RuntimeError):
        midi.pan(0, 1, 64)