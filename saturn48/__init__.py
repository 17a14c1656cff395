"""Register state, 48SX memory bus, device registers, LCD buffer, memory images and charset for an HP-48 emulator."""

__version__ = "0.1.0"