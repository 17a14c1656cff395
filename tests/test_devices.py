import pytest

from saturn48.devices import DISP_INSTR_OFF, DeviceIO, DisplayRegisters
from saturn48.state import DeviceFlags, SaturnState


def make_io(interrupt=None):
    state = SaturnState()
    state.reset()
    display = DisplayRegisters.from_state(state)
    devices = DeviceFlags()
    return DeviceIO(state, display, devices, interrupt), state, display, devices


def write_value(io, base, count, value):
    for index in range(count):
        io.write(base + index, (value >> (4 * index)) & 0xF)


def read_value(io, base, count):
    return sum(io.read(base + index) << (4 * index) for index in range(count))


@pytest.mark.parametrize(
    "base,count,value",
    [
        (0x104, 4, 0xBEEF),
        (0x118, 2, 0x5A),
        (0x120, 5, 0x7A5C3),
        (0x125, 3, 0x123),
        (0x12A, 4, 0x4321),
        (0x130, 5, 0x8F120),
        (0x135, 2, 0x9C),
        (0x138, 8, 0x12345678),
    ],
)
def test_multi_nibble_round_trip(base, count, value):
    io, _, _, _ = make_io()
    write_value(io, base, count, value)
    assert read_value(io, base, count) == value


def test_timer2_stored_in_state():
    io, state, _, devices = make_io()
    write_value(io, 0x138, 8, 0x0BADF00D)
    assert state.timer2 == 0x0BADF00D
    assert devices.t2_touched == 1


def test_write_sets_device_check():
    io, _, _, _ = make_io()
    assert io.device_check is False
    io.write(0x108, 3)
    assert io.device_check is True


def test_unknown_address_reads_zero():
    io, state, _, _ = make_io()
    snapshot = SaturnState(**vars(state))
    io.write(0x150, 7)
    assert io.read(0x150) == 0x00
    assert state.mode == snapshot.mode


def test_card_ctrl_sets_mp_and_interrupts():
    calls = []
    io, state, _, devices = make_io(lambda: calls.append(True))
    io.write(0x10E, 0x3)
    assert state.MP == 1
    assert calls == [True]
    assert devices.card_ctrl_touched == 1


def test_card_ctrl_without_interrupt_bit():
    calls = []
    io, _, _, _ = make_io(lambda: calls.append(True))
    io.write(0x10E, 0x2)
    assert calls == []


def test_card_status_write_is_ignored():
    io, state, _, _ = make_io()
    state.card_status = 0x5
    io.write(0x10F, 0xA)
    assert io.read(0x10F) == 0x5


def test_rbr_read_clears_receive_flag():
    io, state, _, devices = make_io()
    state.rcs = 0xF
    state.rbr = 0xA7
    assert io.read(0x114) == state.rbr & 0xF
    assert state.rcs == 0x0E
    assert devices.rbr_touched == 1
    assert io.device_check is True


def test_crer_clears_bit():
    io, state, _, _ = make_io()
    state.rcs = 0xF
    io.write(0x113, 0)
    assert state.rcs == 0x0B
    assert io.read(0x113) == 0x00


def test_tbr_write_marks_transmit_busy():
    io, state, _, devices = make_io()
    write_value(io, 0x116, 2, 0x4D)
    assert state.tbr == 0x4D
    assert state.tcs & 0x01
    assert devices.tbr_touched == 1
    assert io.read(0x116) == 0x00


def test_contrast_and_display_test():
    io, state, display, devices = make_io()
    io.write(0x101, 0x9)
    assert display.contrast & 0x0F == 0x9
    assert state.contrast_ctrl == 0x9
    io.write(0x102, 0x1)
    assert display.contrast & 0x10 == 0x10
    assert display.contrast & 0x0F == 0x9
    assert state.disp_test & 0xF == 0x1
    assert devices.contrast_touched == 1
    assert devices.disp_test_touched == 1


def test_annunc_updates_display():
    io, state, display, devices = make_io()
    write_value(io, 0x10B, 2, 0x81)
    assert state.annunc == 0x81
    assert display.annunc == state.annunc
    assert devices.ann_touched == 1


def test_disp_io_turns_display_on():
    io, state, display, devices = make_io()
    io.write(0x100, 0x8 | 0x2)
    assert display.on == 1
    assert display.offset == 0x2
    assert display.pixel_offset == 2 * display.offset
    assert devices.display_touched == DISP_INSTR_OFF


def test_large_offset_widens_line():
    io, state, display, _ = make_io()
    io.write(0x100, 0x2)
    narrow = display.nibs_per_line
    io.write(0x100, 0x5)
    assert display.nibs_per_line == narrow + 2
    assert display.disp_end == display.disp_start + display.nibs_per_line * (display.lines + 1)


def test_disp_addr_moves_display_start():
    io, state, display, devices = make_io()
    write_value(io, 0x120, 5, 0x2E3F1)
    assert state.disp_addr == 0x2E3F1
    assert display.disp_start == state.disp_addr & 0xFFFFE
    assert devices.display_touched == DISP_INSTR_OFF


def test_line_count_zero_means_full_screen():
    io, state, display, _ = make_io()
    write_value(io, 0x128, 2, 0x38)
    assert display.lines == 0x38
    assert display.pixel_lines == 2 * display.lines
    write_value(io, 0x128, 2, 0x00)
    assert display.lines == 63


def test_line_counter_counts_reads():
    io, state, _, _ = make_io()
    reads = [io.read(0x128) for _ in range(5)]
    assert reads[0] == 0
    assert reads == list(range(reads[0], reads[0] + 5))
    io.write(0x128, 0)
    assert io.read(0x128) == reads[0]


def test_menu_addr_sets_menu_window():
    io, state, display, _ = make_io()
    write_value(io, 0x130, 5, 0x70A00)
    assert display.menu_start == 0x70A00
    assert display.menu_end - display.menu_start == 0x110


def test_from_state_minimum_pixel_lines():
    state = SaturnState()
    state.reset()
    state.line_count = 0x10
    display = DisplayRegisters.from_state(state)
    assert display.lines == 0x10
    assert display.pixel_lines >= 110
    assert display.menu_end == state.menu_addr + 0x110


def test_from_state_zero_lines():
    state = SaturnState()
    state.reset()
    display = DisplayRegisters.from_state(state)
    assert display.lines == 63