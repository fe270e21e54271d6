"""Cartridge memory bank controllers for GBS, GBR and GB images."""

from __future__ import annotations

import enum
import warnings
from typing import Union

ROMBANK_SIZE = 0x4000
MAX_EXTRAM_SIZE = 0x8000
RAMBANK_SIZE = 0x2000

Buffer = Union[bytes, bytearray]

_RAM_SIZES = {
    0x01: 0x00800,  # 2 KiB
    0x02: 0x02000,  # 8 KiB
    0x03: 0x08000,  # 32 KiB
}

_MBC1_TYPES = {0x00, 0x01, 0x02, 0x03, 0x08, 0x09}
_MBC3_TYPES = {0x11, 0x12, 0x13}


class _Controller(enum.Enum):
    GBS = "gbs"
    MBC1 = "mbc1"
    MBC3 = "mbc3"


class Bank:
    """A window of ``banksize`` bytes into a ROM or RAM buffer."""

    def __init__(self, banksize: int, enable: bool = True) -> None:
        self.banksize = banksize
        self.mask = banksize - 1
        self.enable = enable
        self.data: Buffer = b""
        self.offset = 0
        self.size = 0

    def _map(self, data: Buffer, size: int, bank: int) -> None:
        offset = bank * self.banksize
        self.data = data
        if offset >= size:
            warnings.warn(
                f"Bank {bank} out of range (0-{size // self.banksize})!",
                RuntimeWarning,
                stacklevel=3,
            )
            self.offset = 0
            self.size = 0
            return
        self.offset = offset
        self.size = size - offset

    def read(self, addr: int) -> int:
        """Read a byte; disabled or unmapped locations read as 0xff."""
        maddr = addr & self.mask
        if not self.enable or maddr >= self.size:
            return 0xFF
        return self.data[self.offset + maddr]

    def write(self, addr: int, value: int) -> None:
        """Write a byte; ignored when the bank is disabled or unmapped."""
        maddr = addr & self.mask
        if not self.enable or maddr >= self.size:
            return
        self.data[self.offset + maddr] = value & 0xFF  # type: ignore[index]


class Mapper:
    """Address decoding and bank switching for the cartridge address space."""

    def __init__(self, rom: Buffer, ram_size: int, controller: _Controller) -> None:
        if ram_size > MAX_EXTRAM_SIZE:
            raise ValueError("external RAM larger than supported")
        self.rom = bytes(rom)
        self.ram_size = ram_size
        self.ram = bytearray(MAX_EXTRAM_SIZE)
        self.rom_lower = Bank(ROMBANK_SIZE)
        self.rom_upper = Bank(ROMBANK_SIZE)
        self.extram = Bank(RAMBANK_SIZE, enable=False)
        self.regs = [0, 0, 0, 0]
        self._controller = controller
        self._has_extram = True

    def _map_rom(self, bank: Bank, number: int) -> None:
        bank._map(self.rom, len(self.rom), number)

    def _map_ram(self, number: int) -> None:
        self.extram._map(self.ram, self.ram_size, number)

    def _region(self, addr: int) -> Bank:
        page = (addr >> 8) & 0xFF
        if page <= 0x3F and 0 <= addr <= 0xFFFF:
            return self.rom_lower
        if 0x40 <= page <= 0x7F:
            return self.rom_upper
        if 0xA0 <= page <= 0xBF and self._has_extram:
            return self.extram
        raise ValueError(f"address {addr:#06x} is not handled by the mapper")

    def read(self, addr: int) -> int:
        """Read a byte from a cartridge address."""
        return self._region(addr).read(addr)

    def write(self, addr: int, value: int) -> None:
        """Write a byte to a cartridge address, switching banks for ROM writes."""
        bank = self._region(addr)
        value &= 0xFF
        if bank is self.extram:
            bank.write(addr, value)
        elif self._controller is _Controller.GBS:
            self._gbs_rom_put(addr, value)
        elif self._controller is _Controller.MBC1:
            self._mbc1_rom_put(addr, value)
        else:
            self._mbc3_rom_put(addr, value)

    def _gbs_rom_put(self, addr: int, value: int) -> None:
        if 0x2000 <= addr <= 0x3FFF:
            self._map_rom(self.rom_upper, value + (value == 0))
        else:
            warnings.warn(
                f"rom write of {value:02x} to {addr:04x} ignored",
                RuntimeWarning,
                stacklevel=3,
            )

    def _mbc1_rom_put(self, addr: int, value: int) -> None:
        self.regs[addr // 0x2000] = value
        self.extram.enable = self.regs[0] == 0x0A
        rombank = self.regs[1] & 0x1F
        rombank += rombank == 0
        rambank = self.regs[2] & 0x03

        if self.regs[3] == 1 and self.ram_size > RAMBANK_SIZE:
            # RAM banking mode
            self._map_rom(self.rom_lower, 0)
            self._map_rom(self.rom_upper, rombank)
            self._map_ram(rambank)
        elif self.regs[3] == 1:
            # advanced ROM banking mode
            rombank |= rambank << 5
            self._map_rom(self.rom_lower, rambank << 5)
            self._map_rom(self.rom_upper, rombank)
            self._map_ram(0)
        else:
            # simple ROM banking mode
            rombank |= rambank << 5
            self._map_rom(self.rom_lower, 0)
            self._map_rom(self.rom_upper, rombank)
            self._map_ram(0)

    def _mbc3_rom_put(self, addr: int, value: int) -> None:
        # RTC registers are not supported.
        self.regs[addr // 0x2000] = value
        self.extram.enable = self.regs[0] == 0x0A
        rombank = self.regs[1] & 0x7F
        rombank += rombank == 0
        rambank = self.regs[2] & 0x03
        self._map_rom(self.rom_lower, 0)
        self._map_rom(self.rom_upper, rombank)
        self._map_ram(rambank)


def mapper_gbs(rom: Buffer) -> Mapper:
    """Mapper for a GBS image: bank writes to 0x2000-0x3fff select the upper bank."""
    mapper = Mapper(rom, RAMBANK_SIZE, _Controller.GBS)
    mapper.extram.enable = True
    mapper._map_rom(mapper.rom_lower, 0)
    mapper._map_rom(mapper.rom_upper, 1)
    mapper._map_ram(0)
    return mapper


def mapper_gbr(rom: Buffer, bank_lower: int, bank_upper: int) -> Mapper:
    """Mapper for a GBR image with fixed initial lower and upper banks."""
    mapper = Mapper(rom, RAMBANK_SIZE, _Controller.GBS)
    mapper._map_rom(mapper.rom_lower, bank_lower)
    mapper._map_rom(mapper.rom_upper, bank_upper)
    mapper._map_ram(0)
    return mapper


def mapper_gb(rom: Buffer, cart_type: int, rom_type: int, ram_type: int) -> Mapper:
    """Mapper for a GB cartridge image, chosen from its header type bytes.

    Raises ValueError for cartridge types without a supported controller.
    """
    if cart_type in _MBC1_TYPES:
        controller = _Controller.MBC1
    elif cart_type in _MBC3_TYPES:
        controller = _Controller.MBC3
    else:
        raise ValueError(f"unsupported cartridge type {cart_type:#04x}")

    ram_size = _RAM_SIZES.get(ram_type, 0)
    mapper = Mapper(rom, ram_size, controller)
    mapper._map_rom(mapper.rom_lower, 0)
    mapper._map_rom(mapper.rom_upper, 1)
    mapper._has_extram = ram_size > 0
    if ram_size > 0:
        mapper._map_ram(0)
    return mapper