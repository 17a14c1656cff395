"""Translation between the calculator's character set and escaped ASCII text."""

from __future__ import annotations

_SPECIAL = {
    0: "0",
    8: "b",
    9: "t",
    10: "n",
    12: "f",
    13: "r",
    171: "<<",
    176: "^o",
    181: "Gm",
    187: ">>",
    215: ".x",
    216: "O/",
    247: ":-",
}

_HIGH = [
    "<)", "x-", ".V", "v/", ".S", "GS", "|>", "pi",
    ".d", "<=", ">=", "=/", "Ga", "->", "<-", "|v",
    "|^", "Gg", "Gd", "Ge", "Gn", "Gh", "Gl", "Gr",
    "Gs", "Gt", "Gw", "GD", "PI", "GW", "[]", "oo",
]
_SPECIAL.update({128 + i: name for i, name in enumerate(_HIGH)})


def _entry(code: int) -> str:
    if code in _SPECIAL:
        return "\\" + _SPECIAL[code]
    if 32 <= code <= 126:
        return chr(code)
    return f"\\{code:03d}"


_TABLE = [_entry(code) for code in range(256)]
_ESCAPES = {text: code for code, text in enumerate(_TABLE) if text.startswith("\\") and len(text) > 1}
_LONGEST = max(len(text) for text in _ESCAPES)


def translate_char(code: int) -> str:
    """ASCII form of one calculator character."""
    if not 0 <= code <= 255:
        raise ValueError(f"not a character code: {code}")
    return _TABLE[code]


def to_ascii(data: bytes) -> str:
    """ASCII form of a calculator string."""
    return "".join(_TABLE[b] for b in data)


def from_ascii(text: str) -> bytes:
    """Calculator string for escaped ASCII text; the longest escape wins."""
    out = bytearray()
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            for length in range(_LONGEST, 1, -1):
                code = _ESCAPES.get(text[i:i + length])
                if code is not None:
                    out.append(code)
                    i += length
                    break
            else:
                out.append(ord("\\"))
                i += 1
            continue
        code = ord(ch)
        if not 32 <= code <= 126:
            raise ValueError(f"character {ch!r} has no calculator code")
        out.append(code)
        i += 1
    return bytes(out)