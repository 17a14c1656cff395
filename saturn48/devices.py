"""Memory-mapped I/O registers of the Saturn at 0x100-0x13f."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from saturn48.state import DeviceFlags, SaturnState

log = logging.getLogger(__name__)

NIBBLES_PER_ROW = 0x22
DISP_INSTR_OFF = 0x10
MENU_SIZE = 0x110
MIN_PIXEL_LINES = 110

_Handler = Callable[[int, int], None]
_Reader = Callable[[int], int]


def _with_nibble(value: int, index: int, val: int) -> int:
    shift = 4 * index
    return (value & ~(0xF << shift)) | (val << shift)


@dataclass
class DisplayRegisters:
    """Display geometry derived from the I/O registers."""

    on: int = 0
    disp_start: int = 0
    disp_end: int = 0
    offset: int = 0
    lines: int = 63
    nibs_per_line: int = NIBBLES_PER_ROW
    contrast: int = 0
    menu_start: int = 0
    menu_end: int = MENU_SIZE
    annunc: int = 0
    pixel_offset: int = 0
    pixel_lines: int = MIN_PIXEL_LINES

    @staticmethod
    def from_state(state: SaturnState) -> "DisplayRegisters":
        """Build the display geometry from the saved registers."""
        display = DisplayRegisters()
        display.on = (state.disp_io & 0x8) >> 3
        display.disp_start = state.disp_addr & 0xFFFFE
        display.offset = state.disp_io & 0x7
        display.pixel_offset = 2 * display.offset
        display.lines = (state.line_count & 0x3F) or 63
        display.pixel_lines = max(2 * display.lines, MIN_PIXEL_LINES)
        display.recompute_nibs_per_line(state.line_offset)
        display.menu_start = state.menu_addr
        display.menu_end = state.menu_addr + MENU_SIZE
        display.contrast = state.contrast_ctrl | ((state.disp_test & 0x1) << 4)
        display.annunc = state.annunc
        return display

    def recompute_nibs_per_line(self, line_offset: int) -> None:
        """Recompute the line stride and the end of the display area."""
        extra = 2 if self.offset > 3 else 0
        self.nibs_per_line = (NIBBLES_PER_ROW + line_offset + extra) & 0xFFF
        self.update_end()

    def update_end(self) -> None:
        """Recompute the end address of the display area."""
        self.disp_end = self.disp_start + self.nibs_per_line * (self.lines + 1)


# (base address, nibble count, state attribute, device flag)
_SIMPLE_WRITES = [
    (0x104, 4, "crc", None),
    (0x108, 1, "power_status", "power_status_touched"),
    (0x109, 1, "power_ctrl", "power_ctrl_touched"),
    (0x10A, 1, "mode", "mode_touched"),
    (0x10D, 1, "baud", "baud_touched"),
    (0x110, 1, "io_ctrl", "ioc_touched"),
    (0x111, 1, "rcs", None),
    (0x112, 1, "tcs", None),
    (0x118, 2, "sreq", "sreq_touched"),
    (0x11A, 1, "ir_ctrl", "ir_ctrl_touched"),
    (0x11B, 1, "base_off", "base_off_touched"),
    (0x11C, 1, "lcr", "lcr_touched"),
    (0x11D, 1, "lbr", "lbr_touched"),
    (0x11E, 1, "scratch", "scratch_touched"),
    (0x11F, 1, "base_nibble", "base_nibble_touched"),
    (0x12A, 4, "unknown", "unknown_touched"),
    (0x12E, 1, "t1_ctrl", "t1_ctrl_touched"),
    (0x12F, 1, "t2_ctrl", "t2_ctrl_touched"),
    (0x135, 2, "unknown2", "unknown2_touched"),
    (0x137, 1, "timer1", "t1_touched"),
    (0x138, 8, "timer2", "t2_touched"),
]

# (base address, nibble count, state attribute)
_SIMPLE_READS = [
    (0x100, 1, "disp_io"),
    (0x101, 1, "contrast_ctrl"),
    (0x102, 2, "disp_test"),
    (0x104, 4, "crc"),
    (0x108, 1, "power_status"),
    (0x109, 1, "power_ctrl"),
    (0x10A, 1, "mode"),
    (0x10B, 2, "annunc"),
    (0x10D, 1, "baud"),
    (0x10E, 1, "card_ctrl"),
    (0x10F, 1, "card_status"),
    (0x110, 1, "io_ctrl"),
    (0x111, 1, "rcs"),
    (0x112, 1, "tcs"),
    (0x118, 2, "sreq"),
    (0x11A, 1, "ir_ctrl"),
    (0x11B, 1, "base_off"),
    (0x11C, 1, "lcr"),
    (0x11D, 1, "lbr"),
    (0x11E, 1, "scratch"),
    (0x11F, 1, "base_nibble"),
    (0x120, 5, "disp_addr"),
    (0x125, 3, "line_offset"),
    (0x12A, 4, "unknown"),
    (0x12E, 1, "t1_ctrl"),
    (0x12F, 1, "t2_ctrl"),
    (0x130, 5, "menu_addr"),
    (0x135, 2, "unknown2"),
    (0x137, 1, "timer1"),
    (0x138, 8, "timer2"),
]


class DeviceIO:
    """Reads and writes of the memory-mapped device registers."""

    def __init__(
        self,
        state: SaturnState,
        display: DisplayRegisters,
        devices: DeviceFlags,
        interrupt: Optional[Callable[[], None]] = None,
    ) -> None:
        self.state = state
        self.display = display
        self.devices = devices
        self.interrupt = interrupt
        self.device_check = False
        self.schedule_event = 0
        self.line_counter = -1
        self._old_line_offset = -1
        self._writers: dict[int, tuple[_Handler, int]] = {}
        self._readers: dict[int, tuple[_Reader, int]] = {}
        self._build_tables()

    def _build_tables(self) -> None:
        def span(table: dict, base: int, count: int, handler) -> None:
            for index in range(count):
                table[base + index] = (handler, index)

        for base, count, attr, flag in _SIMPLE_WRITES:
            span(self._writers, base, count, self._simple_writer(attr, flag, count == 1))
        span(self._writers, 0x100, 1, self._write_disp_io)
        span(self._writers, 0x101, 1, self._write_contrast)
        span(self._writers, 0x102, 2, self._write_disp_test)
        span(self._writers, 0x10B, 2, self._write_annunc)
        span(self._writers, 0x10E, 1, self._write_card_ctrl)
        span(self._writers, 0x10F, 1, lambda index, val: None)
        span(self._writers, 0x113, 1, self._write_crer)
        span(self._writers, 0x114, 2, lambda index, val: None)
        span(self._writers, 0x116, 2, self._write_tbr)
        span(self._writers, 0x120, 5, self._write_disp_addr)
        span(self._writers, 0x125, 3, self._write_line_offset)
        span(self._writers, 0x128, 2, self._write_line_count)
        span(self._writers, 0x130, 5, self._write_menu_addr)

        for base, count, attr in _SIMPLE_READS:
            span(self._readers, base, count, self._simple_reader(attr))
        span(self._readers, 0x113, 1, lambda index: 0x00)
        span(self._readers, 0x114, 2, self._read_rbr)
        span(self._readers, 0x116, 2, lambda index: 0x00)
        span(self._readers, 0x128, 2, self._read_line_count)

    def _simple_writer(self, attr: str, flag: Optional[str], single: bool) -> _Handler:
        def write(index: int, val: int) -> None:
            if single:
                setattr(self.state, attr, val)
            else:
                setattr(self.state, attr, _with_nibble(getattr(self.state, attr), index, val))
            if attr in ("unknown", "unknown2"):
                log.warning("unknown device @0x%x: %x", getattr(self.state, attr), val)
            if flag:
                setattr(self.devices, flag, 1)

        return write

    def _simple_reader(self, attr: str) -> _Reader:
        def read(index: int) -> int:
            return (getattr(self.state, attr) >> (4 * index)) & 0x0F

        return read

    def write(self, addr: int, val: int) -> None:
        """Store ``val`` into the device register at ``addr``."""
        self.device_check = True
        self.schedule_event = 0
        entry = self._writers.get(addr)
        if entry is None:
            log.warning("%.5x: unknown device write at 0x%x", self.state.PC, addr)
            return
        handler, index = entry
        handler(index, val & 0x0F)

    def read(self, addr: int) -> int:
        """Return the nibble held by the device register at ``addr``."""
        entry = self._readers.get(addr)
        if entry is None:
            log.warning("%.5x: unknown device read at 0x%x", self.state.PC, addr)
            return 0x00
        reader, index = entry
        return reader(index)

    def _write_disp_io(self, index: int, val: int) -> None:
        if val == self.state.disp_io:
            return
        display = self.display
        self.state.disp_io = val
        display.on = (val & 0x8) >> 3
        display.offset = val & 0x7
        display.pixel_offset = 2 * display.offset
        display.recompute_nibs_per_line(self.state.line_offset)
        self.devices.display_touched = DISP_INSTR_OFF

    def _write_contrast(self, index: int, val: int) -> None:
        self.state.contrast_ctrl = val
        self.display.contrast = (self.display.contrast & ~0x0F) | val
        self.devices.contrast_touched = 1

    def _write_disp_test(self, index: int, val: int) -> None:
        if index == 0:
            self.display.contrast = (self.display.contrast & ~0xF0) | ((val & 0x1) << 4)
            self.devices.contrast_touched = 1
        self.state.disp_test = _with_nibble(self.state.disp_test, index, val)
        self.devices.disp_test_touched = 1

    def _write_annunc(self, index: int, val: int) -> None:
        self.state.annunc = _with_nibble(self.state.annunc, index, val)
        self.display.annunc = self.state.annunc
        self.devices.ann_touched = 1

    def _write_card_ctrl(self, index: int, val: int) -> None:
        self.state.card_ctrl = val
        if val & 0x02:
            self.state.MP = 1
        if val & 0x01 and self.interrupt is not None:
            self.interrupt()
        self.devices.card_ctrl_touched = 1

    def _write_crer(self, index: int, val: int) -> None:
        self.state.rcs &= 0x0B

    def _write_tbr(self, index: int, val: int) -> None:
        self.state.tbr = _with_nibble(self.state.tbr, index, val)
        self.state.tcs |= 0x01
        self.devices.tbr_touched = 1

    def _write_disp_addr(self, index: int, val: int) -> None:
        self.state.disp_addr = _with_nibble(self.state.disp_addr, index, val)
        start = self.state.disp_addr & 0xFFFFE
        if self.display.disp_start != start:
            self.display.disp_start = start
            self.display.update_end()
            self.devices.display_touched = DISP_INSTR_OFF

    def _write_line_offset(self, index: int, val: int) -> None:
        self.state.line_offset = _with_nibble(self.state.line_offset, index, val)
        if self.state.line_offset != self._old_line_offset:
            self._old_line_offset = self.state.line_offset
            self.display.recompute_nibs_per_line(self.state.line_offset)
            self.devices.display_touched = DISP_INSTR_OFF

    def _write_line_count(self, index: int, val: int) -> None:
        self.state.line_count = _with_nibble(self.state.line_count, index, val)
        self.line_counter = -1
        lines = self.state.line_count & 0x3F
        if self.display.lines != lines:
            self.display.lines = lines or 63
            self.display.pixel_lines = 2 * self.display.lines
            self.display.update_end()
            self.devices.display_touched = DISP_INSTR_OFF

    def _write_menu_addr(self, index: int, val: int) -> None:
        self.state.menu_addr = _with_nibble(self.state.menu_addr, index, val)
        if self.display.menu_start != self.state.menu_addr:
            self.display.menu_start = self.state.menu_addr
            self.display.menu_end = self.display.menu_start + MENU_SIZE
            self.devices.display_touched = DISP_INSTR_OFF

    def _read_rbr(self, index: int) -> int:
        self.state.rcs &= 0x0E
        self.devices.rbr_touched = 1
        self.device_check = True
        self.schedule_event = 0
        return (self.state.rbr >> (4 * index)) & 0x0F

    def _read_line_count(self, index: int) -> int:
        self.line_counter += 1
        if self.line_counter > 0x3F:
            self.line_counter = -1
        value = (self.state.line_count & 0xC0) | (self.line_counter & 0x3F)
        return (value >> (4 * index)) & 0x0F