import warnings

import pytest

from gbsplayer.mapper import Bank, mapper_gb, mapper_gbr, mapper_gbs


def make_rom(banks):
    return b"".join(bytes([i & 0xFF]) * 0x4000 for i in range(banks))


def test_gbs_initial_banks():
    m = mapper_gbs(make_rom(8))
    assert m.read(0x0000) == 0
    assert m.read(0x3FFF) == 0
    assert m.read(0x4000) == 1
    assert m.read(0x7FFF) == 1


def test_gbs_bank_switch():
    m = mapper_gbs(make_rom(8))
    m.write(0x2000, 3)
    assert m.read(0x4000) == 3
    m.write(0x3FFF, 0)
    assert m.read(0x4000) == 1


def test_gbs_rom_write_outside_select_range_ignored():
    m = mapper_gbs(make_rom(8))
    with pytest.warns(RuntimeWarning):
        m.write(0x0000, 5)
    assert m.read(0x4000) == 1
    assert m.read(0x0000) == 0


def test_gbs_extram_read_write():
    m = mapper_gbs(make_rom(2))
    m.write(0xA000, 0x42)
    m.write(0xBFFF, 0x17)
    assert m.read(0xA000) == 0x42
    assert m.read(0xBFFF) == 0x17


def test_gbs_out_of_range_bank_reads_ff():
    m = mapper_gbs(make_rom(4))
    with pytest.warns(RuntimeWarning):
        m.write(0x2000, 9)
    assert m.read(0x4000) == 0xFF


def test_unmapped_address_raises():
    m = mapper_gbs(make_rom(2))
    with pytest.raises(ValueError):
        m.read(0x8000)
    with pytest.raises(ValueError):
        m.write(0xC000, 1)


def test_gbr_fixed_banks_and_disabled_ram():
    m = mapper_gbr(make_rom(8), 2, 5)
    assert m.read(0x0000) == 2
    assert m.read(0x4000) == 5
    m.write(0xA000, 0x11)
    assert m.read(0xA000) == 0xFF


def test_gb_unsupported_cart_type():
    with pytest.raises(ValueError):
        mapper_gb(make_rom(2), 0x05, 0, 0)


def test_gb_ram_needs_enable():
    m = mapper_gb(make_rom(8), 0x03, 0, 0x02)
    m.write(0xA000, 0x33)
    assert m.read(0xA000) == 0xFF
    m.write(0x0000, 0x0A)
    m.write(0xA000, 0x33)
    assert m.read(0xA000) == 0x33
    m.write(0x0000, 0x00)
    assert m.read(0xA000) == 0xFF


def test_gb_without_ram_has_no_extram_region():
    m = mapper_gb(make_rom(2), 0x00, 0, 0x00)
    with pytest.raises(ValueError):
        m.read(0xA000)


def test_mbc1_rom_bank_select():
    m = mapper_gb(make_rom(64), 0x01, 0, 0x02)
    m.write(0x2000, 5)
    assert m.read(0x4000) == 5
    m.write(0x2000, 0)
    assert m.read(0x4000) == 1
    m.write(0x2000, 0x25)
    assert m.read(0x4000) == 0x25 & 0x1F


def test_mbc1_simple_mode_high_bits():
    m = mapper_gb(make_rom(64), 0x01, 0, 0x02)
    m.write(0x4000, 1)
    assert m.read(0x0000) == 0
    assert m.read(0x4000) == (1 << 5) | 1


def test_mbc1_advanced_rom_mode_moves_lower_bank():
    m = mapper_gb(make_rom(64), 0x01, 0, 0x02)
    m.write(0x4000, 1)
    m.write(0x6000, 1)
    assert m.read(0x0000) == 1 << 5
    assert m.read(0x4000) == (1 << 5) | 1


def test_mbc1_ram_banking_mode():
    m = mapper_gb(make_rom(8), 0x03, 0, 0x03)
    m.write(0x0000, 0x0A)
    m.write(0x6000, 1)
    m.write(0x4000, 2)
    m.write(0xA000, 0x5A)
    m.write(0x4000, 0)
    assert m.read(0xA000) == 0
    m.write(0x4000, 2)
    assert m.read(0xA000) == 0x5A
    assert m.read(0x0000) == 0


def test_mbc3_uses_seven_bank_bits():
    m = mapper_gb(make_rom(64), 0x13, 0, 0x03)
    m.write(0x2000, 0x25)
    assert m.read(0x4000) == 0x25
    assert m.read(0x0000) == 0


def test_mbc3_ram_banks():
    m = mapper_gb(make_rom(8), 0x13, 0, 0x03)
    m.write(0x0000, 0x0A)
    m.write(0x4000, 3)
    m.write(0xA123, 0x77)
    m.write(0x4000, 1)
    assert m.read(0xA123) == 0
    m.write(0x4000, 3)
    assert m.read(0xA123) == 0x77


def test_bank_disabled_reads_ff_and_ignores_writes():
    bank = Bank(0x2000)
    data = bytearray(0x2000)
    bank._map(data, len(data), 0)
    bank.write(0x10, 0x99)
    assert bank.read(0x10) == 0x99
    bank.enable = False
    bank.write(0x10, 0x01)
    assert bank.read(0x10) == 0xFF
    bank.enable = True
    assert bank.read(0x10) == 0x99


def test_bank_address_masked():
    bank = Bank(0x2000)
    data = bytearray(range(256)) * 32
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        bank._map(data, len(data), 0)
    assert bank.read(0xA005) == bank.read(0x0005) == 5