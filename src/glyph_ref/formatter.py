"""Canonical formatter for Glyph source.

Items are rendered one at a time into a single buffer. Each rendered item is
then registered with the binding oracle, so later items see the names it
binds while its own right-hand side does not.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .compiler import BindingOracle, Compiler
from .diagnostics import Diagnostic, FormatError, LoadError, WriteError
from .io_atomic import atomic_write_text, read_text_exact
from .literals import format_char, format_number, format_string
from .parser_rd import parse
from .primitives import Primitive, from_name
from .tree import (
    Array,
    Binding,
    Char,
    Comment,
    Func,
    FuncArray,
    Ident,
    Item,
    Modified,
    Newlines,
    Number,
    Prim,
    SelectorWord,
    Strand,
    String,
    Word,
    Words,
)

log = logging.getLogger(__name__)


class FormatState:
    """Output buffer plus the spacing state threaded through one run."""

    def __init__(self, oracle: BindingOracle):
        self.string = ""
        self.was_strand = False
        self.oracle = oracle

    def push(self, text: str) -> None:
        self.was_strand = False
        self.string += text

    def space_if_alphanumeric(self) -> None:
        self.space_if_was_strand()
        if self.string[-1:].isalnum():
            self.push(" ")

    def space_if_alphabetic(self) -> None:
        self.space_if_was_strand()
        if self.string[-1:].isalpha():
            self.push(" ")

    def space_if_was_strand(self) -> None:
        if self.was_strand:
            self.push(" ")


# ============================================================================
# Serializer
# ============================================================================

def format_item(item: Item, state: FormatState) -> None:
    match item:
        case Words(words=words):
            format_words(words, state)
        case Binding(name=name, words=words):
            state.push(name)
            state.push(" = ")
            format_words(words, state)
        case Comment(text=text):
            state.push("# ")
            state.push(text)
        case Newlines():
            pass

    state.oracle.item(item)
    state.push("\n")


def format_words(words: Iterable[Word], state: FormatState) -> None:
    for word in words:
        format_word(word, state)


def format_word(word: Word, state: FormatState) -> None:
    match word:
        case Number(value=value):
            state.space_if_alphanumeric()
            state.push(format_number(value))
        case Char(value=value):
            state.space_if_alphanumeric()
            state.push(format_char(value))
        case String(value=value):
            state.space_if_alphanumeric()
            state.push(format_string(value))
        case Ident(name=name):
            if not state.oracle.is_bound(name):
                prim = from_name(name)
                if prim is not None:
                    format_primitive(prim, state)
                    return
            state.space_if_alphabetic()
            state.push(name)
        case Strand(items=items):
            for i, member in enumerate(items):
                if i > 0:
                    state.push("_")
                format_word(member, state)
            state.was_strand = True
        case Array(items=items):
            state.push("[")
            format_words(items, state)
            state.push("]")
        case Func(body=body):
            state.push("(")
            format_words(body, state)
            state.push(")")
        case FuncArray(bodies=bodies):
            state.push("(")
            for i, body in enumerate(bodies):
                if i > 0:
                    state.push("|")
                format_words(body, state)
            state.push(")")
        case SelectorWord(selector=selector):
            state.space_if_alphabetic()
            state.push(str(selector))
        case Prim(primitive=prim):
            format_primitive(prim, state)
        case Modified(modifier=modifier, word=operand):
            format_word(modifier, state)
            format_word(operand, state)
        case _:
            raise TypeError(f"Not a word: {word!r}")


def format_primitive(prim: Primitive, state: FormatState) -> None:
    text = prim.display
    if prim.starts_alpha:
        state.space_if_alphanumeric()
    state.push(text)


# ============================================================================
# Driver
# ============================================================================

def format_items(items: Iterable[Item], oracle: Optional[BindingOracle] = None) -> str:
    """
    Render items in order and return the canonical text.

    Raises ``FormatError`` with the oracle's diagnostics if it reported any;
    no partial text is returned in that case.
    """
    state = FormatState(oracle if oracle is not None else Compiler())
    for item in items:
        format_item(item, state)

    errors = state.oracle.diagnostics()
    if errors:
        log.debug("resolution produced %d diagnostic(s)", len(errors))
        raise FormatError(errors)

    return state.string.rstrip() + "\n"


def format_source(source: str, path: Optional[Path] = None) -> str:
    """Parse and format ``source``; ``path`` only labels diagnostics."""
    items, errors = parse(source, path)
    log.debug("parsed %d item(s) from %s", len(items), path or "<input>")
    if errors:
        raise FormatError(errors)

    try:
        return format_items(items)
    except FormatError as exc:
        merged: List[Diagnostic] = list(errors)
        merged.extend(exc.diagnostics)
        raise FormatError(merged) from None


def _load(path: Path) -> str:
    try:
        return read_text_exact(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(path, exc) from exc


def check_file(path: Union[str, Path]) -> bool:
    """Return True when the file is already in canonical form. Never writes."""
    path = Path(path)
    source = _load(path)
    return format_source(source, path) == source


def format_file(path: Union[str, Path]) -> str:
    """
    Format a file in place and return the formatted text.

    The file is written only when the text changes, so clean input keeps its
    content and modification time.
    """
    path = Path(path)
    source = _load(path)

    formatted = format_source(source, path)
    if formatted == source:
        log.debug("%s unchanged", path)
        return formatted

    try:
        atomic_write_text(path, formatted)
    except OSError as exc:
        raise WriteError(path, exc) from exc

    log.debug("wrote %s", path)
    return formatted
