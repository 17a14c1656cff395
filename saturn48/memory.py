"""Nibble-addressed memory bus of the Saturn CPU."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Iterable, Optional

from saturn48.devices import DeviceIO
from saturn48.state import SaturnState

ADDRESS_MASK = 0xFFFFF

MCTL_MMIO_SX = 0
MCTL_SYSRAM_SX = 1
MCTL_PORT1_SX = 2
MCTL_PORT2_SX = 3
MCTL_EXTRA_SX = 4
MCTL_SYSROM_SX = 5

MCTL_MMIO_GX = 0
MCTL_SYSRAM_GX = 1
MCTL_BANK_GX = 2
MCTL_PORT1_GX = 3
MCTL_PORT2_GX = 4
MCTL_SYSROM_GX = 5

DisplaySink = Callable[[int, int], None]


def calc_crc(crc: int, nibble: int) -> int:
    """Return the CRC register after feeding it one nibble."""
    return ((crc >> 4) ^ (((crc ^ nibble) & 0xF) * 0x1081)) & 0xFFFF


class PortCard:
    """A memory card plugged into one of the two ports."""

    def __init__(self, nibbles: Iterable[int], is_ram: bool) -> None:
        self.nibbles = nibbles if isinstance(nibbles, bytearray) else bytearray(nibbles)
        self.is_ram = bool(is_ram)
        self.mask = len(self.nibbles) - 1 if self.nibbles else 0

    @property
    def size(self) -> int:
        """Number of nibbles on the card."""
        return len(self.nibbles)


class Bus(ABC):
    """Address decoding shared by the models; subclasses supply the memory map."""

    def __init__(
        self,
        state: SaturnState,
        io: DeviceIO,
        rom: Iterable[int],
        ram: Iterable[int],
        port1: Optional[PortCard] = None,
        port2: Optional[PortCard] = None,
        display_sink: Optional[DisplaySink] = None,
    ) -> None:
        self.state = state
        self.io = io
        self.rom = rom if isinstance(rom, bytearray) else bytearray(rom)
        self.ram = ram if isinstance(ram, bytearray) else bytearray(ram)
        self.port1 = port1
        self.port2 = port2
        self.display_sink = display_sink

    def _config(self, index: int) -> list[int]:
        return self.state.mem_cntl[index].config

    def _rom_read(self, addr: int) -> int:
        return self.rom[addr] if addr < len(self.rom) else 0

    @staticmethod
    def _port_read(card: Optional[PortCard], offset: int) -> int:
        if card is None or not card.nibbles:
            return 0
        return card.nibbles[offset & card.mask]

    @staticmethod
    def _port_write(card: Optional[PortCard], offset: int, val: int) -> None:
        if card is not None and card.is_ram and card.nibbles:
            card.nibbles[offset & card.mask] = val

    @abstractmethod
    def _fetch(self, addr: int) -> tuple[int, bool]:
        """Return the nibble at ``addr`` and whether it feeds the CRC."""

    @abstractmethod
    def _store(self, addr: int, val: int) -> bool:
        """Store a nibble; return True when it landed in system RAM."""

    def read_nibble(self, addr: int) -> int:
        """Read one nibble."""
        value, _ = self._fetch(addr & ADDRESS_MASK)
        return value

    def read_nibble_crc(self, addr: int) -> int:
        """Read one nibble and feed it into the CRC register."""
        value, feeds_crc = self._fetch(addr & ADDRESS_MASK)
        if feeds_crc:
            self.state.crc = calc_crc(self.state.crc, value)
        return value

    def write_nibble(self, addr: int, val: int) -> None:
        """Write one nibble; writes to system RAM are passed on to the display."""
        addr &= ADDRESS_MASK
        val &= 0x0F
        if self._store(addr, val) and self.display_sink is not None:
            self.display_sink(addr, val)

    def read_nibbles(self, addr: int, length: int) -> int:
        """Read ``length`` nibbles as a number, lowest address least significant."""
        value = 0
        for a in reversed(range(addr, addr + length)):
            value = (value << 4) | self.read_nibble(a)
        return value

    def write_nibbles(self, addr: int, value: int, length: int) -> None:
        """Write the low ``length`` nibbles of ``value``, least significant first."""
        for a in range(addr, addr + length):
            self.write_nibble(a, value)
            value >>= 4


class SXBus(Bus):
    """Memory map of the 48SX."""

    def _sysram_at_7(self, addr: int) -> bool:
        c0, c1 = self._config(MCTL_SYSRAM_SX)
        if c0 != 0x70000:
            return False
        return (
            (c1 == 0xFC000 and addr < 0x74000)
            or (c1 == 0xFE000 and addr < 0x72000)
            or c1 == 0xF0000
        )

    def _port_for(self, base: int) -> Optional[tuple[Optional[PortCard], int]]:
        if self._config(MCTL_PORT1_SX)[0] == base:
            return self.port1, base
        if self._config(MCTL_PORT2_SX)[0] == base:
            return self.port2, base
        return None

    def _fetch(self, addr: int) -> tuple[int, bool]:
        bank = (addr >> 16) & 0x0F
        if bank == 0:
            if 0x100 <= addr < 0x140:
                if self._config(MCTL_MMIO_SX)[0] == 0x100:
                    return self.io.read(addr), False
                return 0x00, True
            return self._rom_read(addr), True
        if bank <= 6:
            return self._rom_read(addr), True
        if bank == 7:
            if self._sysram_at_7(addr):
                return self.ram[addr - 0x70000], True
            return self._rom_read(addr), True
        if bank == 0xF and self._config(MCTL_SYSRAM_SX)[0] == 0xF0000:
            return self.ram[addr - 0xF0000], True
        port = self._port_for(0x80000 if bank <= 0xB else 0xC0000)
        if port is None:
            return 0x00, False
        card, base = port
        return self._port_read(card, addr - base), True

    def _store(self, addr: int, val: int) -> bool:
        bank = (addr >> 16) & 0x0F
        if bank == 0:
            if 0x100 <= addr < 0x140 and self._config(MCTL_MMIO_SX)[0] == 0x100:
                self.io.write(addr, val)
            return False
        if bank <= 6:
            return False
        if bank == 7:
            if self._sysram_at_7(addr):
                self.ram[addr - 0x70000] = val
                return True
            return False
        if bank == 0xF and self._config(MCTL_SYSRAM_SX)[0] == 0xF0000:
            self.ram[addr - 0xF0000] = val
            return True
        port = self._port_for(0x80000 if bank <= 0xB else 0xC0000)
        if port is not None:
            card, base = port
            self._port_write(card, addr - base, val)
        return False