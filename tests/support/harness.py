from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Set, Tuple

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from glyph_ref.compiler import BindingOracle
from glyph_ref.diagnostics import Diagnostic, FormatError
from glyph_ref.formatter import format_source
from glyph_ref.lexer_rd import LexError, Lexer, tokenize
from glyph_ref.parser_rd import ParseError, parse
from glyph_ref.tree import Item

__all__ = [
    "FormatError",
    "LexError",
    "Lexer",
    "ParseError",
    "RecordingOracle",
    "diagnostics_of",
    "fmt",
    "parse_ok",
    "tokenize",
]


@dataclass(frozen=True)
class FormatCase:
    """Source text and the canonical text it must format to."""

    name: str
    source: str
    expected: str


@dataclass
class RecordingOracle(BindingOracle):
    """Stand-in oracle: a fixed bound set plus a log of every call."""

    bound: Set[str] = field(default_factory=set)
    bind_on_register: bool = True
    registered: List[Item] = field(default_factory=list)
    queries: List[Tuple[str, int]] = field(default_factory=list)
    errors: List[Diagnostic] = field(default_factory=list)

    def is_bound(self, name: str) -> bool:
        # Remember how many items had been registered when the query ran
        self.queries.append((name, len(self.registered)))
        return name in self.bound

    def item(self, item: Item) -> None:
        self.registered.append(item)
        name = getattr(item, "name", None)
        if self.bind_on_register and name is not None:
            self.bound.add(name)

    def diagnostics(self) -> List[Diagnostic]:
        return list(self.errors)


def parse_ok(source: str) -> List[Item]:
    """Parse source that must be free of diagnostics."""
    items, errors = parse(source)
    assert not errors, f"unexpected diagnostics: {[str(e) for e in errors]}"
    return items


def fmt(source: str) -> str:
    """Format source and check the result is a fixed point."""
    once = format_source(source)
    twice = format_source(once)
    assert once == twice, f"not idempotent:\n{once!r}\n{twice!r}"
    return once


def diagnostics_of(source: str) -> List[Diagnostic]:
    try:
        format_source(source)
    except FormatError as exc:
        return exc.diagnostics
    raise AssertionError(f"expected diagnostics for {source!r}")
