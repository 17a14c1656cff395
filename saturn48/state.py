"""Processor and I/O register state of the emulated Saturn CPU."""

from __future__ import annotations

from dataclasses import dataclass, field, fields

X48_MAGIC = 0x48503438
NR_PSTAT = 16
NR_RSTK = 8
NR_MCTL = 6
NR_KEY_ROWS = 9
HEX = 16
DEC = 10


@dataclass(frozen=True)
class Version:
    """Version stamp stored in the state file."""

    major: int = 0
    minor: int = 0
    patchlevel: int = 0
    compile_version: int = 0

    def packed(self) -> int:
        """Return the version as one 32-bit number, one byte per part."""
        return (
            (self.major & 0xFF) << 24
            | (self.minor & 0xFF) << 16
            | (self.patchlevel & 0xFF) << 8
            | (self.compile_version & 0xFF)
        )


CURRENT_VERSION = Version(0, 4, 0, 0)


@dataclass
class MemController:
    """One memory controller: whether it is configured and its two config words."""

    unconfigured: int = 0
    config: list[int] = field(default_factory=lambda: [0, 0])


@dataclass
class DeviceFlags:
    """Marks which memory-mapped devices have been touched since the last check."""

    display_touched: int = 0
    contrast_touched: int = 0
    disp_test_touched: int = 0
    crc_touched: int = 0
    power_status_touched: int = 0
    power_ctrl_touched: int = 0
    mode_touched: int = 0
    ann_touched: int = 0
    baud_touched: int = 0
    card_ctrl_touched: int = 0
    card_status_touched: int = 0
    ioc_touched: int = 0
    tcs_touched: int = 0
    rcs_touched: int = 0
    rbr_touched: int = 0
    tbr_touched: int = 0
    sreq_touched: int = 0
    ir_ctrl_touched: int = 0
    base_off_touched: int = 0
    lcr_touched: int = 0
    lbr_touched: int = 0
    scratch_touched: int = 0
    base_nibble_touched: int = 0
    unknown_touched: int = 0
    t1_ctrl_touched: int = 0
    t2_ctrl_touched: int = 0
    unknown2_touched: int = 0
    t1_touched: int = 0
    t2_touched: int = 0

    def clear(self) -> None:
        """Reset every flag to zero."""
        for f in fields(self):
            setattr(self, f.name, 0)


def _register() -> list[int]:
    return [0] * 16


def _default_mem_cntl() -> list[MemController]:
    return [MemController() for _ in range(NR_MCTL)]


@dataclass
class SaturnState:
    """Every register of the CPU and of its memory-mapped devices."""

    magic: int = 0
    version: Version = field(default_factory=Version)
    A: list[int] = field(default_factory=_register)
    B: list[int] = field(default_factory=_register)
    C: list[int] = field(default_factory=_register)
    D: list[int] = field(default_factory=_register)
    d: list[int] = field(default_factory=lambda: [0, 0])
    P: int = 0
    PC: int = 0
    R0: list[int] = field(default_factory=_register)
    R1: list[int] = field(default_factory=_register)
    R2: list[int] = field(default_factory=_register)
    R3: list[int] = field(default_factory=_register)
    R4: list[int] = field(default_factory=_register)
    IN: list[int] = field(default_factory=lambda: [0] * 4)
    OUT: list[int] = field(default_factory=lambda: [0] * 3)
    CARRY: int = 0
    PSTAT: list[int] = field(default_factory=lambda: [0] * NR_PSTAT)
    XM: int = 0
    SB: int = 0
    SR: int = 0
    MP: int = 0
    hexmode: int = 0
    rstk: list[int] = field(default_factory=lambda: [0] * NR_RSTK)
    rstkp: int = 0
    keybuf: list[int] = field(default_factory=lambda: [0] * NR_KEY_ROWS)
    intenable: int = 0
    int_pending: int = 0
    kbd_ien: int = 0
    disp_io: int = 0
    contrast_ctrl: int = 0
    disp_test: int = 0
    crc: int = 0
    power_status: int = 0
    power_ctrl: int = 0
    mode: int = 0
    annunc: int = 0
    baud: int = 0
    card_ctrl: int = 0
    card_status: int = 0
    io_ctrl: int = 0
    rcs: int = 0
    tcs: int = 0
    rbr: int = 0
    tbr: int = 0
    sreq: int = 0
    ir_ctrl: int = 0
    base_off: int = 0
    lcr: int = 0
    lbr: int = 0
    scratch: int = 0
    base_nibble: int = 0
    disp_addr: int = 0
    line_offset: int = 0
    line_count: int = 0
    unknown: int = 0
    t1_ctrl: int = 0
    t2_ctrl: int = 0
    menu_addr: int = 0
    unknown2: int = 0
    timer1: int = 0
    timer2: int = 0
    t1_instr: int = 0
    t2_instr: int = 0
    t1_tick: int = 0
    t2_tick: int = 0
    i_per_s: int = 0
    bank_switch: int = 0
    mem_cntl: list[MemController] = field(default_factory=_default_mem_cntl)

    def reset(self) -> None:
        """Clear every register and apply the power-on values."""
        blank = SaturnState()
        for f in fields(self):
            setattr(self, f.name, getattr(blank, f.name))
        self.PC = 0x00000
        self.magic = X48_MAGIC
        self.t1_tick = 8192
        self.t2_tick = 16
        self.i_per_s = 0
        self.version = CURRENT_VERSION
        self.hexmode = HEX
        self.rstkp = -1
        self.intenable = 1
        self.int_pending = 0
        self.kbd_ien = 1
        self.timer1 = 0
        self.timer2 = 0x2000
        self.bank_switch = 0
        for index, ctl in enumerate(self.mem_cntl):
            if index == 0:
                ctl.unconfigured = 1
            elif index == 5:
                ctl.unconfigured = 0
            else:
                ctl.unconfigured = 2
            ctl.config = [0, 0]

    def config_init(self, devices: DeviceFlags) -> None:
        """Stamp the current version and mark the visible devices for refresh."""
        self.version = CURRENT_VERSION
        devices.clear()
        devices.display_touched = 1
        devices.contrast_touched = 1
        devices.baud_touched = 1
        devices.ann_touched = 1
        self.rcs = 0x0
        self.tcs = 0x0
        self.lbr = 0x0