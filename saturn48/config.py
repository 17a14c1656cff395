"""Memory-map and card configuration rules."""

from __future__ import annotations

from saturn48.state import NR_MCTL, MemController

RAM_SIZE_SX = 0x10000
RAM_SIZE_GX = 0x40000

_GX_MEM_CONFIG = [
    (0, 0x00100, 0x00000),
    (0, 0x80000, 0xC0000),
    (0, 0x7F000, 0xFF000),
    (0, 0xC0000, 0xC0000),
    (0, 0xC0000, 0xC0000),
    (0, 0x00000, 0x00000),
]

_SX_RAM32K = {
    0x70000: (0x70000, 0xF0000),
    0xF0000: (0xF0000, 0xF0000),
    0xFC000: (0x70000, 0xFC000),
    0xFE000: (0x70000, 0xFE000),
}


def legacy_mem_config(gx: bool, devices: int, ram32k: int) -> list[MemController]:
    """Derive the memory controllers from the fields of an old state file."""
    if gx:
        return [MemController(u, [c0, c1]) for u, c0, c1 in _GX_MEM_CONFIG]

    ctls = [MemController() for _ in range(NR_MCTL)]
    if devices == 0x100:
        ctls[0] = MemController(0, [devices, 0])
    else:
        ctls[0] = MemController(1, [0x00000, 0])
    if ram32k in _SX_RAM32K:
        ctls[1] = MemController(0, list(_SX_RAM32K[ram32k]))
    else:
        ctls[1] = MemController(2, [0x00000, 0x00000])
    ctls[2] = MemController(0, [0x80000, 0xC0000])
    ctls[3] = MemController(0, [0xC0000, 0xC0000])
    ctls[4] = MemController(0, [0xD0000, 0xFF000])
    ctls[5] = MemController(0, [0x00000, 0x80000])
    return ctls


def ram_size(gx: bool) -> int:
    """Number of RAM nibbles of the model."""
    return RAM_SIZE_GX if gx else RAM_SIZE_SX


def port_size_ok(gx: bool, port: int, size: int) -> bool:
    """Whether a card of ``size`` nibbles is accepted in ``port`` (1 or 2)."""
    if port not in (1, 2):
        raise ValueError(f"no such port: {port}")
    if port == 2 and gx:
        return size % 0x40000 == 0
    return size in (0x10000, 0x40000)


def card_status(
    gx: bool,
    port1_size: int,
    port1_is_ram: bool,
    port2_size: int,
    port2_is_ram: bool,
) -> int:
    """Card status bits reporting which ports hold a card and which are writable."""
    status = 0
    if gx:
        status |= 2 if port1_size > 0 else 0
        status |= 8 if port1_is_ram else 0
        status |= 1 if port2_size > 0 else 0
        status |= 4 if port2_is_ram else 0
    else:
        status |= 1 if port1_size > 0 else 0
        status |= 4 if port1_is_ram else 0
        status |= 2 if port2_size > 0 else 0
        status |= 8 if port2_is_ram else 0
    return status