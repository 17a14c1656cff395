"""Nibble-level LCD model rendering the display into a 16-bit pixel buffer."""

from __future__ import annotations

from enum import IntEnum
from typing import Callable, Optional

from saturn48.devices import NIBBLES_PER_ROW, DisplayRegisters
from saturn48.state import DeviceFlags

DISP_ROWS = 64
NIBS_PER_BUFFER_ROW = NIBBLES_PER_ROW + 2
PIXEL_ROWS = DISP_ROWS * 2
ROW_PIXELS = 262
BODY_LENGTH = PIXEL_ROWS * ROW_PIXELS
HEADER_LENGTH = 14 * ROW_PIXELS
BLANK_COLOR = 0x842D
DARK_COLOR = 0x0000

_UNDRAWN = 0xF0

NibbleReader = Callable[[int], int]


class Annunciator(IntEnum):
    """Annunciator bits of the annunciator register, in display order."""

    LEFT = 0x81
    RIGHT = 0x82
    ALPHA = 0x84
    BATTERY = 0x88
    BUSY = 0x90
    IO = 0xA0


def _trunc_divmod(a: int, b: int) -> tuple[int, int]:
    """Division truncating towards zero, with the matching remainder."""
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return q, a - q * b


def _grid(fill: int) -> list[list[int]]:
    return [[fill] * NIBS_PER_BUFFER_ROW for _ in range(DISP_ROWS)]


class Lcd:
    """Tracks the displayed nibbles and renders changes into pixel rows."""

    def __init__(
        self,
        display: DisplayRegisters,
        devices: DeviceFlags,
        reader: NibbleReader,
    ) -> None:
        self.display = display
        self.devices = devices
        self.reader = reader
        self.mapped = True
        self.flipable = False
        self.annunciators = [False] * len(Annunciator)
        self._nibble_pixels = [
            [DARK_COLOR if (v >> (i // 2)) & 1 else BLANK_COLOR for i in range(8)]
            for v in range(16)
        ]
        self._header = [0] * HEADER_LENGTH
        self._pixels = [0] * BODY_LENGTH
        self._disp_buf = _grid(_UNDRAWN)
        self._lcd_buf = _grid(_UNDRAWN)
        self._last_annunc = -1
        self._old_offset = -1
        self._old_lines = -1

    def _fill_pixels(self, x: int, y: int, v: int) -> None:
        xx = x * 8
        yy = y * 2
        if xx >= ROW_PIXELS or yy >= PIXEL_ROWS:
            return
        width = 6 if xx == ROW_PIXELS - 6 else 8
        src = self._nibble_pixels[v][:width]
        for row in (yy, yy + 1):
            start = row * ROW_PIXELS + xx
            self._pixels[start:start + width] = src
        self.flipable = True

    def _draw_nibble(self, c: int, r: int, val: int) -> None:
        val &= 0x0F
        if val != self._lcd_buf[r][c]:
            self._lcd_buf[r][c] = val
            self._fill_pixels(c, r, val)

    def _draw_row(self, addr: int, row: int) -> None:
        length = NIBBLES_PER_ROW
        if self.display.offset > 3 and row <= self.display.lines:
            length += 2
        buf = self._disp_buf[row]
        for i in range(length):
            v = self.reader(addr + i)
            if v != buf[i]:
                buf[i] = v
                self._draw_nibble(i, row, v)

    def _mark_rows(self, rows: range) -> None:
        for r in rows:
            self._disp_buf[r] = [_UNDRAWN] * NIBS_PER_BUFFER_ROW
            self._lcd_buf[r] = [_UNDRAWN] * NIBS_PER_BUFFER_ROW

    def update(self) -> None:
        """Re-read display memory and redraw every nibble that changed."""
        display = self.display
        if not display.on:
            self._disp_buf = _grid(_UNDRAWN)
            for r in range(DISP_ROWS):
                for c in range(NIBBLES_PER_ROW):
                    self._draw_nibble(c, r, 0x00)
            return
        if display.offset != self._old_offset:
            self._mark_rows(range(min(display.lines + 1, DISP_ROWS)))
            self._old_offset = display.offset
        if display.lines != self._old_lines:
            self._mark_rows(range(56, DISP_ROWS))
            self._old_lines = display.lines
        addr = display.disp_start
        row = 0
        while row <= display.lines and row < DISP_ROWS:
            self._draw_row(addr, row)
            addr += display.nibs_per_line
            row += 1
        addr = display.menu_start
        for r in range(row, DISP_ROWS):
            self._draw_row(addr, r)
            addr += NIBBLES_PER_ROW

    def redraw(self) -> None:
        """Forget what is shown and draw the whole display again."""
        self._disp_buf = _grid(0)
        self._lcd_buf = _grid(0)
        self.update()

    def draw_display_nibble(self, addr: int, val: int) -> None:
        """Draw one nibble written into the main display area."""
        display = self.display
        val &= 0x0F
        offset = addr - display.disp_start
        npl = display.nibs_per_line
        if npl != 0:
            y, x = _trunc_divmod(offset, npl)
        else:
            y, x = 0, offset
        if x < 0 or x > 35:
            return
        if npl != 0:
            if y < 0 or y > 63:
                return
            if val != self._disp_buf[y][x]:
                self._disp_buf[y][x] = val
                self._draw_nibble(x, y, val)
            return
        for row in range(min(display.lines, DISP_ROWS)):
            if val != self._disp_buf[row][x]:
                self._disp_buf[row][x] = val
                self._draw_nibble(x, row, val)

    def draw_menu_nibble(self, addr: int, val: int) -> None:
        """Draw one nibble written into the menu area below the main display."""
        val &= 0x0F
        offset = addr - self.display.menu_start
        q, x = _trunc_divmod(offset, NIBBLES_PER_ROW)
        y = self.display.lines + q + 1
        if not (0 <= y < DISP_ROWS and 0 <= x < NIBS_PER_BUFFER_ROW):
            return
        if val != self._disp_buf[y][x]:
            self._disp_buf[y][x] = val
            self._draw_nibble(x, y, val)

    def on_write(self, addr: int, val: int) -> None:
        """Pass a system RAM write on to the display areas it falls in."""
        display = self.display
        if self.devices.display_touched or not self.mapped:
            return
        if display.disp_start <= addr < display.disp_end:
            self.draw_display_nibble(addr, val)
        if display.lines == 63:
            return
        if display.menu_start <= addr < display.menu_end:
            self.draw_menu_nibble(addr, val)

    def set_blank_color(self, color: int) -> None:
        """Use ``color`` for unlit pixels, recolouring what is already shown."""
        color &= 0xFFFF
        self._header = [color] * HEADER_LENGTH
        self._nibble_pixels = [
            [color if p > 0 else p for p in row] for row in self._nibble_pixels
        ]
        self._pixels = [color if p > 0 else p for p in self._pixels]
        self.flipable = True

    def flip(self) -> None:
        """Mark the screen as needing to be handed out again."""
        self.flipable = True

    def fill_screen_data(self) -> Optional[tuple[list[int], list[bool]]]:
        """Return the pixels and annunciator states if anything changed, else None."""
        if not self.flipable:
            return None
        self.flipable = False
        return self._header + self._pixels, list(self.annunciators)

    def draw_annunc(self) -> None:
        """Update the annunciator states from the annunciator register."""
        val = self.display.annunc
        if val == self._last_annunc:
            return
        self._last_annunc = val
        self.annunciators = [(bit & val) == bit for bit in Annunciator]
        self.flipable = True

    def redraw_annunc(self) -> None:
        """Update the annunciator states even if the register is unchanged."""
        self._last_annunc = -1
        self.draw_annunc()