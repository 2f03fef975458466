"""Canonical display forms for literal words."""

from __future__ import annotations

from decimal import Decimal

# Escape letter -> character, shared with the lexer.
UNESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "\\": "\\",
    "'": "'",
    '"': '"',
}

_ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\0": "\\0",
}


def format_number(value: float) -> str:
    """Shortest positional rendering; never uses exponent notation."""
    value = float(value)
    if value.is_integer():
        return str(int(value))

    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text


def escape_text(text: str, quote: str) -> str:
    parts: list[str] = []

    for ch in text:
        if ch == quote:
            parts.append("\\" + ch)
        elif ch in _ESCAPES:
            parts.append(_ESCAPES[ch])
        elif not ch.isprintable():
            parts.append(f"\\u{{{ord(ch):x}}}")
        else:
            parts.append(ch)

    return "".join(parts)


def format_char(ch: str) -> str:
    return "'" + escape_text(ch, "'") + "'"


def format_string(text: str) -> str:
    return '"' + escape_text(text, '"') + '"'
