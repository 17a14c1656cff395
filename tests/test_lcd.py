from saturn48.devices import NIBBLES_PER_ROW, DisplayRegisters
from saturn48.lcd import (
    BLANK_COLOR,
    BODY_LENGTH,
    HEADER_LENGTH,
    ROW_PIXELS,
    Annunciator,
    Lcd,
)
from saturn48.state import DeviceFlags


def make_lcd():
    display = DisplayRegisters(on=1, disp_start=0, lines=63, nibs_per_line=NIBBLES_PER_ROW)
    display.update_end()
    memory = {}
    devices = DeviceFlags()
    lcd = Lcd(display, devices, lambda addr: memory.get(addr, 0))
    return lcd, display, devices, memory


def body(lcd):
    pixels, _ = lcd.fill_screen_data()
    return pixels[HEADER_LENGTH:]


def test_fresh_lcd_has_nothing_to_hand_out():
    lcd, _, _, _ = make_lcd()
    assert lcd.fill_screen_data() is None


def test_screen_data_sizes():
    lcd, _, _, _ = make_lcd()
    lcd.update()
    pixels, ann = lcd.fill_screen_data()
    assert len(pixels) == HEADER_LENGTH + BODY_LENGTH
    assert len(ann) == len(Annunciator)


def test_blank_memory_renders_blank():
    lcd, _, _, _ = make_lcd()
    lcd.update()
    assert all(p == BLANK_COLOR for p in body(lcd))


def test_set_nibble_renders_dark_pixels():
    lcd, _, _, memory = make_lcd()
    memory[0] = 1
    lcd.update()
    px = body(lcd)
    assert px[0:2] == [0, 0]
    assert all(p == BLANK_COLOR for p in px[2:8])
    assert px[ROW_PIXELS:ROW_PIXELS + 2] == [0, 0]


def test_second_row_uses_line_stride():
    lcd, _, _, memory = make_lcd()
    memory[NIBBLES_PER_ROW] = 0xF
    lcd.update()
    px = body(lcd)
    assert px[2 * ROW_PIXELS:2 * ROW_PIXELS + 8] == [0] * 8
    assert px[3 * ROW_PIXELS:3 * ROW_PIXELS + 8] == [0] * 8
    assert all(p == BLANK_COLOR for p in px[0:8])


def test_data_handed_out_only_once():
    lcd, _, _, memory = make_lcd()
    memory[0] = 0xF
    lcd.update()
    assert lcd.fill_screen_data() is not None
    assert lcd.fill_screen_data() is None
    lcd.update()
    assert lcd.fill_screen_data() is None


def test_flip_forces_handout():
    lcd, _, _, _ = make_lcd()
    lcd.flip()
    pixels, _ = lcd.fill_screen_data()
    assert len(pixels) == HEADER_LENGTH + BODY_LENGTH


def test_redraw_draws_again():
    lcd, _, _, memory = make_lcd()
    memory[0] = 0xF
    lcd.update()
    lcd.fill_screen_data()
    lcd.redraw()
    assert body(lcd)[0:8] == [0] * 8


def test_blank_color_recolours():
    lcd, _, _, memory = make_lcd()
    memory[0] = 1
    lcd.update()
    lcd.fill_screen_data()
    lcd.set_blank_color(0x1234)
    pixels, _ = lcd.fill_screen_data()
    assert all(p == 0x1234 for p in pixels[:HEADER_LENGTH])
    px = pixels[HEADER_LENGTH:]
    assert px[0] == 0
    assert px[2] == 0x1234


def test_display_off_blanks_everything():
    lcd, display, _, memory = make_lcd()
    memory[0] = 0xF
    lcd.update()
    lcd.fill_screen_data()
    display.on = 0
    lcd.update()
    assert all(p == BLANK_COLOR for p in body(lcd))


def test_annunciators_follow_register():
    lcd, display, _, _ = make_lcd()
    display.annunc = Annunciator.LEFT | Annunciator.BUSY
    lcd.draw_annunc()
    _, ann = lcd.fill_screen_data()
    assert ann == [True, False, False, False, True, False]


def test_annunciators_need_enable_bit():
    lcd, display, _, _ = make_lcd()
    display.annunc = 0x01
    lcd.draw_annunc()
    _, ann = lcd.fill_screen_data()
    assert ann == [False] * len(Annunciator)


def test_redraw_annunc_forces_update():
    lcd, display, _, _ = make_lcd()
    display.annunc = Annunciator.ALPHA
    lcd.draw_annunc()
    lcd.fill_screen_data()
    lcd.draw_annunc()
    assert lcd.fill_screen_data() is None
    lcd.redraw_annunc()
    _, ann = lcd.fill_screen_data()
    assert ann[2] is True


def test_on_write_ignored_while_display_touched():
    lcd, _, devices, _ = make_lcd()
    devices.display_touched = 1
    lcd.on_write(0, 0xF)
    assert lcd.fill_screen_data() is None
    devices.display_touched = 0
    lcd.on_write(0, 0xF)
    assert body(lcd)[0:8] == [0] * 8


def test_write_outside_display_ignored():
    lcd, display, _, _ = make_lcd()
    display.disp_start = 0x100
    display.update_end()
    lcd.draw_display_nibble(0xFF, 0xF)
    assert lcd.fill_screen_data() is None


def test_menu_write_lands_below_display():
    lcd, display, _, _ = make_lcd()
    display.lines = 55
    display.update_end()
    display.menu_start = 0x2000
    display.menu_end = 0x2000 + 0x110
    lcd.on_write(0x2000 + NIBBLES_PER_ROW, 0xF)
    px = body(lcd)
    row = 2 * (display.lines + 2)
    assert px[row * ROW_PIXELS:row * ROW_PIXELS + 8] == [0] * 8


def test_last_column_is_clipped():
    lcd, _, _, _ = make_lcd()
    lcd.update()
    lcd.fill_screen_data()
    lcd.draw_display_nibble(32, 0xF)
    px = body(lcd)
    assert px[256:ROW_PIXELS] == [0] * 6
    assert len(px) == BODY_LENGTH