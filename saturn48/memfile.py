"""Memory image files: one nibble per byte, or two nibbles packed per byte."""

from __future__ import annotations

import logging
import os
from typing import Iterable, Union

log = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class MemFileError(Exception):
    """Raised when a memory image cannot be read or written."""


def pack_nibbles(nibbles: Iterable[int]) -> bytes:
    """Pack nibbles two per byte, the first of each pair in the low half."""
    it = iter(nibbles)
    return bytes((lo & 0x0F) | ((hi << 4) & 0xF0) for lo, hi in zip(it, it))


def unpack_nibbles(data: bytes) -> bytearray:
    """Split each byte into its low and high nibble, low first."""
    out = bytearray()
    for byte in data:
        out.append(byte & 0x0F)
        out.append((byte >> 4) & 0x0F)
    return out


def read_mem_file(path: PathLike, size: int) -> bytearray:
    """Read a memory image of ``size`` nibbles, in either file form."""
    try:
        with open(path, "rb") as fp:
            file_size = os.fstat(fp.fileno()).st_size
            if file_size == size:
                data = fp.read(size)
                if len(data) != size:
                    raise MemFileError(f"can't read {path}")
                result = bytearray(data)
            elif file_size == size // 2:
                data = fp.read(size // 2)
                if len(data) != size // 2:
                    raise MemFileError(f"can't read {path}")
                result = unpack_nibbles(data)
            else:
                raise MemFileError(
                    f"strange size {path}, expected {size // 2}, found {file_size}"
                )
    except OSError as exc:
        raise MemFileError(f"can't open {path}") from exc
    log.debug("read %s", path)
    return result


def write_mem_file(path: PathLike, nibbles: Iterable[int]) -> None:
    """Write nibbles to ``path`` in packed form."""
    data = pack_nibbles(nibbles)
    try:
        with open(path, "wb") as fp:
            fp.write(data)
    except OSError as exc:
        raise MemFileError(f"can't write {path}") from exc
    log.debug("wrote %s", path)