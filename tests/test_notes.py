import pytest

from gbsplayer.notes import (
    C0HZ,
    C0MIDI,
    C6GB,
    C6MIDI,
    MAXOCTAVE,
    channel_label,
    freq_to_note,
    frequency,
    midi_note,
    note_label,
    register_dump,
    reversed_volume_label,
    volume_label,
)


def test_c0_frequency_is_c0_note():
    assert freq_to_note(C0HZ) == C0MIDI


def test_startup_sound_note():
    assert midi_note(C6GB, 0) == C6MIDI


def test_wave_channel_is_an_octave_lower():
    for div in (100, 500, 1500):
        assert midi_note(div, 2) == midi_note(div, 0) - 12
        assert frequency(div, 2) * 2 == frequency(div, 1)


def test_frequency_rejects_zero_divisor():
    with pytest.raises(ValueError):
        frequency(0, 0)


def test_freq_to_note_rejects_non_positive():
    with pytest.raises(ValueError):
        freq_to_note(0.0)


def test_note_label_bounds():
    assert note_label(C0MIDI) == "C-0"
    assert note_label(C6MIDI) == "C-6"
    assert note_label(C0MIDI - 1) == "rge"
    assert note_label(C0MIDI + MAXOCTAVE * 12) == "rge"
    assert note_label(C0MIDI + MAXOCTAVE * 12 - 1).endswith(str(MAXOCTAVE - 1))


def test_note_labels_are_unique():
    labels = [note_label(n) for n in range(C0MIDI, C0MIDI + MAXOCTAVE * 12)]
    assert len(set(labels)) == len(labels)
    assert all(len(label) == 3 for label in labels)


def test_volume_label_shape():
    for v in range(16):
        label = volume_label(v)
        assert len(label) == 4
        assert label.count("%") == v // 4


def test_volume_label_full():
    assert volume_label(15) == "%%%#"


def test_volume_label_clamps():
    assert volume_label(-5) == volume_label(0)
    assert volume_label(40) == volume_label(15)


def test_reversed_volume_label():
    for v in range(16):
        assert reversed_volume_label(v) == volume_label(v)[::-1]


def test_channel_label_states():
    assert channel_label(True, 10, C6GB, 0) == "-M-"
    assert channel_label(False, 0, C6GB, 0) == "---"
    assert channel_label(False, 5, C6GB, 3) == "nse"
    assert channel_label(False, 5, C6GB, 0) == note_label(C6MIDI)


def test_register_dump():
    seen = []

    def peek(addr):
        seen.append(addr)
        return addr & 0xFF

    dump = register_dump(peek)
    lines = dump.split("\n")
    assert lines[0] == "CH1: 10 11 12 13 14"
    assert lines[3] == "CH4: 1f 20 21 22 23"
    assert lines[4] == "MISC: 24 25 26"
    assert lines[5] == "WAVE: 303132333435363738393a3b3c3d3e3f"
    assert lines[6] == "\033[A" * 6
    expected = set(range(0xFF10, 0xFF27)) | set(range(0xFF30, 0xFF40))
    assert set(seen) == expected
    assert len(seen) == len(expected)