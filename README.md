# saturn48

Building blocks for the machine side of an HP-48 calculator emulator. The
package holds the CPU and device register state and the nibble-addressed
memory bus of the 48SX. It also provides the memory-mapped I/O registers, an
LCD frame buffer, memory image files and the calculator's character set.

## Modules

- `saturn48.state` holds the register state.
  - `SaturnState` has every CPU and device register and the six memory
    controllers (`MemController`).
  - `SaturnState.reset()` applies the power-on values.
  - `SaturnState.config_init(devices)` stamps `CURRENT_VERSION` and marks the
    display, contrast, baud and annunciator devices as touched.
  - `Version.packed()` gives the version stamp as one 32-bit number.
  - `DeviceFlags` holds the "touched" markers; `clear()` resets them all.
- `saturn48.config` holds the memory-map and card rules.
  - `legacy_mem_config(gx, devices, ram32k)` derives the memory controllers
    from the fields of an older saved state.
  - `ram_size(gx)` returns the number of RAM nibbles (`0x10000` on SX,
    `0x40000` on GX).
  - `port_size_ok(gx, port, size)` says whether a card size is accepted.
  - `card_status(...)` returns the card status bits.
- `saturn48.devices` covers the I/O registers at `0x100`–`0x13f`.
  - `DeviceIO.read(addr)` and `DeviceIO.write(addr, val)` access them.
  - Writes keep the display geometry in `DisplayRegisters` up to date and set
    the matching `DeviceFlags`.
  - `DisplayRegisters.from_state(state)` builds the geometry from saved
    registers.
- `saturn48.memory` is the memory bus.
  - `Bus` is the abstract address decoder and `SXBus` is the 48SX memory map.
  - Plug-in cards are `PortCard(nibbles, is_ram)`.
  - A bus offers `read_nibble`, `read_nibble_crc`, `write_nibble`,
    `read_nibbles` and `write_nibbles`.
  - `read_nibble_crc` feeds the CRC register through `calc_crc(crc, nibble)`.
  - A write that lands in system RAM is passed on to the optional
    `display_sink(addr, val)`.
- `saturn48.lcd` holds the LCD model.
  - `Lcd(display, devices, reader)` renders display memory into a 16-bit
    colour pixel buffer and tracks six `Annunciator` flags.
  - `update()` re-reads display memory and redraws what changed.
  - `on_write(addr, val)` draws single RAM writes.
  - `set_blank_color(color)` recolours unlit pixels.
  - `fill_screen_data()` returns `(pixels, annunciators)` only when something
    changed since the last call; otherwise it returns `None`.
- `saturn48.memfile` reads and writes memory images.
  - `write_mem_file(path, nibbles)` writes an image packed two nibbles per
    byte, low nibble first.
  - `read_mem_file(path, size)` accepts either that packed form or one nibble
    per byte. It raises `MemFileError` for any other file size, a short read
    or an open failure.
  - `pack_nibbles` and `unpack_nibbles` do the conversion in memory.
- `saturn48.charset` converts between the HP-48 character set and ASCII with
  escapes such as `\->` and `\GS`.
  - The functions are `translate_char`, `to_ascii` and `from_ascii`.
  - `from_ascii` raises `ValueError` for characters the calculator lacks.

## Example

```python
from saturn48.charset import from_ascii, to_ascii
from saturn48.config import legacy_mem_config, ram_size
from saturn48.devices import DeviceIO, DisplayRegisters
from saturn48.lcd import Lcd
from saturn48.memory import SXBus
from saturn48.state import DeviceFlags, SaturnState

state = SaturnState()
state.reset()
state.mem_cntl = legacy_mem_config(False, 0x100, 0x70000)  # I/O at 0x100, RAM at 0x70000

devices = DeviceFlags()
display = DisplayRegisters.from_state(state)
io = DeviceIO(state, display, devices)
bus = SXBus(state, io, rom=bytes(0x80000), ram=bytes(ram_size(False)))
lcd = Lcd(display, devices, bus.read_nibble)
bus.display_sink = lcd.on_write

bus.write_nibbles(0x70000, 0x12345, 5)
assert bus.read_nibbles(0x70000, 5) == 0x12345

print(to_ascii(bytes([141, 65])))   # \->A
print(from_ascii("\\GS"))           # b'\x85'
```

## What it does not do

- The package has no CPU: nothing executes Saturn instructions.
- Only the 48SX memory map is implemented. There is no bus for the 48GX, and
  no GX bank switching.
- There is no reading or writing of the saved configuration file. Saved state
  is not assembled into a running session, and there is no command to start
  one.
- Memory images and the LCD pixel buffer are handled in memory. Nothing is
  drawn on a screen.

## Tests

```
pip install -e ".[test]"
pytest
```