"""Built-in primitive registry.

Every primitive has a lowercase name and, usually, a one-character glyph.
Source may spell a primitive either way; the formatter always writes the
glyph unless the name has been rebound by user code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional


class PrimKind(Enum):
    STACK = "stack"
    CONSTANT = "constant"
    MONADIC = "monadic"
    DYADIC = "dyadic"
    MODIFIER = "modifier"


@dataclass(frozen=True)
class Primitive:
    name: str
    glyph: Optional[str]
    kind: PrimKind

    @property
    def display(self) -> str:
        """Canonical display form: the glyph when there is one."""
        return self.glyph if self.glyph is not None else self.name

    @property
    def starts_alpha(self) -> bool:
        return self.display[:1].isalpha()

    @property
    def is_modifier(self) -> bool:
        return self.kind is PrimKind.MODIFIER

    def __str__(self) -> str:
        return self.display


# Characters the lexer claims for its own tokens; no glyph may use them.
RESERVED_CHARS = frozenset("_[]()|=#'\":")

_TABLE = [
    # Stack
    ("dup", "⋅", PrimKind.STACK),
    ("over", ",", PrimKind.STACK),
    ("flip", "∶", PrimKind.STACK),
    ("pop", ";", PrimKind.STACK),
    # Constants
    ("pi", None, PrimKind.CONSTANT),
    ("infinity", "∞", PrimKind.CONSTANT),
    ("now", None, PrimKind.CONSTANT),
    ("rand", None, PrimKind.CONSTANT),
    # Monadic
    ("not", "¬", PrimKind.MONADIC),
    ("sign", "±", PrimKind.MONADIC),
    ("negate", "¯", PrimKind.MONADIC),
    ("abs", "⌵", PrimKind.MONADIC),
    ("sqrt", "√", PrimKind.MONADIC),
    ("floor", "⌊", PrimKind.MONADIC),
    ("ceiling", "⌈", PrimKind.MONADIC),
    ("round", "⁅", PrimKind.MONADIC),
    ("length", "⧻", PrimKind.MONADIC),
    ("shape", "△", PrimKind.MONADIC),
    ("range", "⇡", PrimKind.MONADIC),
    ("first", "⊢", PrimKind.MONADIC),
    ("reverse", "⇌", PrimKind.MONADIC),
    ("deshape", "♭", PrimKind.MONADIC),
    ("transpose", "⍉", PrimKind.MONADIC),
    ("grade", "⍋", PrimKind.MONADIC),
    ("show", None, PrimKind.MONADIC),
    ("trace", None, PrimKind.MONADIC),
    # Dyadic
    ("add", "+", PrimKind.DYADIC),
    ("subtract", "-", PrimKind.DYADIC),
    ("multiply", "×", PrimKind.DYADIC),
    ("divide", "÷", PrimKind.DYADIC),
    ("modulus", "◿", PrimKind.DYADIC),
    ("power", "^", PrimKind.DYADIC),
    ("less", "<", PrimKind.DYADIC),
    ("greater", ">", PrimKind.DYADIC),
    ("minimum", "↧", PrimKind.DYADIC),
    ("maximum", "↥", PrimKind.DYADIC),
    ("match", "≅", PrimKind.DYADIC),
    ("join", "⊂", PrimKind.DYADIC),
    ("couple", "⊟", PrimKind.DYADIC),
    ("pick", "⊡", PrimKind.DYADIC),
    ("select", "⊏", PrimKind.DYADIC),
    ("take", "↙", PrimKind.DYADIC),
    ("drop", "↘", PrimKind.DYADIC),
    ("rotate", "↻", PrimKind.DYADIC),
    ("assert", None, PrimKind.DYADIC),
    # Modifiers
    ("reduce", "/", PrimKind.MODIFIER),
    ("scan", "\\", PrimKind.MODIFIER),
    ("each", "∵", PrimKind.MODIFIER),
    ("rows", "≡", PrimKind.MODIFIER),
    ("table", "⊞", PrimKind.MODIFIER),
    ("repeat", "⍥", PrimKind.MODIFIER),
]


def _build() -> tuple[Mapping[str, Primitive], Mapping[str, Primitive]]:
    by_name: Dict[str, Primitive] = {}
    by_glyph: Dict[str, Primitive] = {}

    for name, glyph, kind in _TABLE:
        prim = Primitive(name, glyph, kind)
        if name in by_name:
            raise ValueError(f"Duplicate primitive name '{name}'")
        by_name[name] = prim

        if glyph is None:
            continue
        if len(glyph) != 1 or glyph.isalnum() or glyph in RESERVED_CHARS or glyph.isspace():
            raise ValueError(f"Invalid glyph {glyph!r} for primitive '{name}'")
        if glyph in by_glyph:
            raise ValueError(f"Duplicate glyph {glyph!r}")
        by_glyph[glyph] = prim

    return MappingProxyType(by_name), MappingProxyType(by_glyph)


PRIMITIVES_BY_NAME, PRIMITIVES_BY_GLYPH = _build()


def from_name(name: str) -> Optional[Primitive]:
    return PRIMITIVES_BY_NAME.get(name)


def from_glyph(glyph: str) -> Optional[Primitive]:
    return PRIMITIVES_BY_GLYPH.get(glyph)


def is_glyph(ch: str) -> bool:
    return ch in PRIMITIVES_BY_GLYPH
