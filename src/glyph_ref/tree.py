"""Syntax tree nodes for Glyph items and words.

Nodes are frozen dataclasses with tuple children, so a tree is immutable and
can be handed to several consumers without copying. Every node carries a
``span`` that is excluded from equality: two trees compare equal when they
have the same structure, wherever they came from.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Sequence, Tuple, Union

from lark import Token, Tree
from typing_extensions import TypeAlias

from .diagnostics import Span
from .literals import format_char, format_number, format_string
from .primitives import Primitive


def _span() -> Any:
    return field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Selector:
    """Stack selector such as ``:aba``; letter ``a`` is slot 0."""

    slots: Tuple[int, ...]

    @classmethod
    def from_letters(cls, letters: str) -> Selector:
        return cls(tuple(ord(ch) - ord("a") for ch in letters))

    def __str__(self) -> str:
        return ":" + "".join(chr(ord("a") + slot) for slot in self.slots)


# ============================================================================
# Words
# ============================================================================

@dataclass(frozen=True)
class Number:
    value: float
    span: Optional[Span] = _span()


@dataclass(frozen=True)
class Char:
    value: str
    span: Optional[Span] = _span()


@dataclass(frozen=True)
class String:
    value: str
    span: Optional[Span] = _span()


@dataclass(frozen=True)
class Ident:
    name: str
    span: Optional[Span] = _span()


@dataclass(frozen=True)
class Strand:
    items: Tuple[Word, ...]
    span: Optional[Span] = _span()


@dataclass(frozen=True)
class Array:
    items: Tuple[Word, ...]
    span: Optional[Span] = _span()


@dataclass(frozen=True)
class Func:
    body: Tuple[Word, ...]
    span: Optional[Span] = _span()


@dataclass(frozen=True)
class FuncArray:
    bodies: Tuple[Tuple[Word, ...], ...]
    span: Optional[Span] = _span()


@dataclass(frozen=True)
class SelectorWord:
    selector: Selector
    span: Optional[Span] = _span()


@dataclass(frozen=True)
class Prim:
    primitive: Primitive
    span: Optional[Span] = _span()


@dataclass(frozen=True)
class Modified:
    modifier: Word
    word: Word
    span: Optional[Span] = _span()


Word: TypeAlias = Union[
    Number, Char, String, Ident, Strand, Array, Func, FuncArray, SelectorWord, Prim, Modified
]

# ============================================================================
# Items
# ============================================================================

@dataclass(frozen=True)
class Words:
    words: Tuple[Word, ...]
    span: Optional[Span] = _span()


@dataclass(frozen=True)
class Binding:
    name: str
    words: Tuple[Word, ...]
    name_span: Optional[Span] = _span()
    span: Optional[Span] = _span()


@dataclass(frozen=True)
class Comment:
    text: str
    span: Optional[Span] = _span()


@dataclass(frozen=True)
class Newlines:
    span: Optional[Span] = _span()


Item: TypeAlias = Union[Words, Binding, Comment, Newlines]
Node: TypeAlias = Union[Item, Word]


# ============================================================================
# Traversal
# ============================================================================

def child_words(word: Word) -> Sequence[Word]:
    """Direct children of a word, in document order."""
    match word:
        case Strand(items=items) | Array(items=items):
            return items
        case Func(body=body):
            return body
        case FuncArray(bodies=bodies):
            return [w for body in bodies for w in body]
        case Modified(modifier=modifier, word=operand):
            return [modifier, operand]
    return ()


def iter_words(words: Sequence[Word]) -> Iterator[Word]:
    """Depth-first, pre-order walk over words and everything nested in them."""
    for word in words:
        yield word
        yield from iter_words(child_words(word))


def item_words(item: Item) -> Sequence[Word]:
    if isinstance(item, (Words, Binding)):
        return item.words
    return ()


# ============================================================================
# Lark dumps
# ============================================================================

def _token(type_: str, value: str, span: Optional[Span]) -> Token:
    if span is None:
        return Token(type_, value)
    return Token(
        type_, value,
        line=span.line, column=span.column,
        end_line=span.end_line, end_column=span.end_column,
    )


def _words_tree(label: str, words: Sequence[Word]) -> Tree:
    return Tree(label, [to_lark(w) for w in words])


def to_lark(node: Node) -> Union[Tree, Token]:
    """Convert a node into lark ``Tree``/``Token`` form for ``pretty()`` dumps."""
    match node:
        case Words(words=words):
            return _words_tree("words", words)
        case Binding(name=name, words=words, name_span=name_span):
            return Tree("binding", [_token("IDENT", name, name_span), _words_tree("words", words)])
        case Comment(text=text, span=span):
            return Tree("comment", [_token("COMMENT", text, span)])
        case Newlines():
            return Tree("newlines", [])
        case Number(value=value, span=span):
            return _token("NUMBER", format_number(value), span)
        case Char(value=value, span=span):
            return _token("CHAR", format_char(value), span)
        case String(value=value, span=span):
            return _token("STRING", format_string(value), span)
        case Ident(name=name, span=span):
            return _token("IDENT", name, span)
        case SelectorWord(selector=selector, span=span):
            return _token("SELECTOR", str(selector), span)
        case Prim(primitive=prim, span=span):
            return _token("PRIMITIVE", prim.name, span)
        case Strand(items=items):
            return _words_tree("strand", items)
        case Array(items=items):
            return _words_tree("array", items)
        case Func(body=body):
            return _words_tree("func", body)
        case FuncArray(bodies=bodies):
            return Tree("func_array", [_words_tree("body", body) for body in bodies])
        case Modified(modifier=modifier, word=operand):
            return Tree("modified", [to_lark(modifier), to_lark(operand)])

    raise TypeError(f"Not a syntax node: {node!r}")


def items_to_lark(items: Sequence[Item]) -> Tree:
    children: List[Union[Tree, Token]] = [to_lark(item) for item in items]
    return Tree("start", children)
