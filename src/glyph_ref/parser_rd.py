"""
Recursive Descent Parser for Glyph

Structure:
- Lexer: Token stream from source
- Parser: one top-level item per line, recursive descent for words
- AST: frozen dataclass nodes from ``tree``

Grammar (one line at a time):
    line     := COMMENT | binding COMMENT? | words COMMENT?
    binding  := IDENT '=' words
    word     := modifier word | strand
    strand   := term ('_' term)*
    term     := NUMBER | CHAR | STRING | IDENT | SELECTOR | PRIMITIVE
              | '[' words ']' | '(' words ('|' words)* ')'

A parse error aborts only the line it occurs in; the parser records a
diagnostic and resumes after the next top-level newline.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from .diagnostics import Diagnostic, Span
from .lexer_rd import tokenize_or_error
from .primitives import from_name
from .token_types import TT, Tok
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
    Selector,
    SelectorWord,
    Strand,
    String,
    Word,
    Words,
)

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        self.line = token.line if token else 0
        self.column = token.column if token else 0
        super().__init__(
            f"{message} at line {token.line}, col {token.column}" if token else message
        )


_WORD_START = (
    TT.NUMBER, TT.CHAR, TT.STRING, TT.IDENT, TT.SELECTOR, TT.PRIMITIVE, TT.LSQB, TT.LPAR,
)


def describe(tok: Tok) -> str:
    """Human-readable name of a token for error messages"""
    if tok.type == TT.EOF:
        return "end of input"
    if tok.type == TT.NEWLINE:
        return "end of line"
    if tok.type == TT.COMMENT:
        return "comment"
    if tok.type == TT.PRIMITIVE:
        return f"'{tok.value}'"
    if tok.type in (TT.NUMBER, TT.CHAR, TT.STRING, TT.SELECTOR):
        return tok.type.name.lower()
    return f"'{tok.value}'"


class Parser:
    """
    Recursive descent parser for Glyph.

    ``depth`` counts open brackets: inside brackets newlines are
    insignificant and comments are rejected.
    """

    def __init__(self, tokens: List[Tok], path: Optional[Path] = None):
        self.tokens = tokens
        self.path = path
        self.pos = 0
        self.current = tokens[0] if tokens else Tok(TT.EOF, None, 0, 0)
        self.previous = self.current
        self.depth = 0

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return Tok(TT.EOF, None, 0, 0)

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        self.previous = prev
        self.pos += 1
        if self.pos < len(self.tokens):
            self.current = self.tokens[self.pos]
        else:
            self.current = Tok(TT.EOF, None, prev.end_line, prev.end_column)
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: Optional[str] = None) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            msg = message or f"Expected {token_type.name}, got {describe(self.current)}"
            raise ParseError(msg, self.current)
        return self.advance()

    def span_of(self, tok: Tok) -> Span:
        return Span(self.path, tok.line, tok.column, tok.end_line, tok.end_column)

    def span_from(self, start: Tok) -> Span:
        """Span from ``start`` through the last consumed token"""
        end = self.previous
        return Span(self.path, start.line, start.column, end.end_line, end.end_column)

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Tuple[List[Item], List[Diagnostic]]:
        """Parse entire program, collecting one diagnostic per malformed line"""
        items: List[Item] = []
        errors: List[Diagnostic] = []
        blank: Optional[Tok] = None

        while not self.check(TT.EOF):
            if self.check(TT.NEWLINE):
                tok = self.advance()
                # Runs of blank lines collapse; leading ones are dropped
                if (items or errors) and blank is None:
                    blank = tok
                continue

            if blank is not None:
                items.append(Newlines(span=self.span_of(blank)))
                blank = None

            try:
                items.extend(self.parse_line())
            except ParseError as exc:
                tok = exc.token or self.current
                errors.append(Diagnostic(exc.message, self.span_of(tok), "parse"))
                self.recover()

        return items, errors

    def recover(self) -> None:
        """Skip to the start of the next top-level line, past any open brackets"""
        while not self.check(TT.EOF):
            if self.check(TT.NEWLINE) and self.depth <= 0:
                break
            tok = self.advance()
            if tok.type in (TT.LSQB, TT.LPAR):
                self.depth += 1
            elif tok.type in (TT.RSQB, TT.RPAR):
                self.depth -= 1
        self.depth = 0
        self.match(TT.NEWLINE)

    def parse_line(self) -> List[Item]:
        """Parse one line into its item plus an optional trailing comment"""
        start = self.current

        if self.check(TT.COMMENT):
            tok = self.advance()
            self.expect_line_end()
            return [Comment(tok.value, span=self.span_of(tok))]

        item: Item
        if self.check(TT.IDENT) and self.peek(1).type == TT.ASSIGN:
            name_tok = self.advance()
            self.advance()  # '='
            words = self.parse_words()
            item = Binding(
                name_tok.value,
                words,
                name_span=self.span_of(name_tok),
                span=self.span_from(start),
            )
        else:
            words = self.parse_words()
            item = Words(words, span=self.span_from(start))

        items: List[Item] = [item]
        if self.check(TT.COMMENT):
            tok = self.advance()
            items.append(Comment(tok.value, span=self.span_of(tok)))

        self.expect_line_end()
        return items

    def expect_line_end(self) -> None:
        if self.match(TT.NEWLINE) or self.check(TT.EOF):
            return
        raise ParseError(f"Unexpected {describe(self.current)}", self.current)

    # ========================================================================
    # Words
    # ========================================================================

    def skip_layout(self) -> None:
        """Inside brackets, newlines are insignificant and comments are errors"""
        if self.depth == 0:
            return

        while self.check(TT.NEWLINE, TT.COMMENT):
            if self.check(TT.COMMENT):
                raise ParseError("Comments are not allowed inside brackets", self.current)
            self.advance()

    def starts_word(self) -> bool:
        return self.check(*_WORD_START)

    def parse_words(self) -> Tuple[Word, ...]:
        words: List[Word] = []

        while True:
            self.skip_layout()
            if not self.starts_word():
                return tuple(words)
            words.append(self.parse_word())

    def is_modifier(self) -> bool:
        tok = self.current
        if tok.type == TT.PRIMITIVE:
            return tok.value.is_modifier
        if tok.type == TT.IDENT:
            prim = from_name(tok.value)
            return prim is not None and prim.is_modifier
        return False

    def parse_word(self) -> Word:
        """
        word := modifier word | strand

        Modifiers may be spelled by glyph or by name; the name form stays an
        identifier so the formatter can tell whether it was rebound.
        """
        if not self.is_modifier():
            return self.parse_strand()

        start = self.advance()
        modifier: Word
        if start.type == TT.PRIMITIVE:
            modifier = Prim(start.value, span=self.span_of(start))
        else:
            modifier = Ident(start.value, span=self.span_of(start))

        self.skip_layout()
        if not self.starts_word():
            raise ParseError(f"Modifier '{start.value}' is missing its operand", start)

        operand = self.parse_word()
        return Modified(modifier, operand, span=self.span_from(start))

    def parse_strand(self) -> Word:
        start = self.current
        items = [self.parse_term()]

        while self.match(TT.UNDERSCORE):
            self.skip_layout()
            items.append(self.parse_term())

        if len(items) == 1:
            return items[0]
        return Strand(tuple(items), span=self.span_from(start))

    def parse_term(self) -> Word:
        tok = self.current

        match tok.type:
            case TT.NUMBER:
                self.advance()
                return Number(tok.value, span=self.span_of(tok))
            case TT.CHAR:
                self.advance()
                return Char(tok.value, span=self.span_of(tok))
            case TT.STRING:
                self.advance()
                return String(tok.value, span=self.span_of(tok))
            case TT.IDENT:
                self.advance()
                return Ident(tok.value, span=self.span_of(tok))
            case TT.SELECTOR:
                self.advance()
                return SelectorWord(Selector.from_letters(tok.value), span=self.span_of(tok))
            case TT.PRIMITIVE:
                self.advance()
                return Prim(tok.value, span=self.span_of(tok))
            case TT.LSQB:
                return self.parse_array()
            case TT.LPAR:
                return self.parse_func()

        raise ParseError(f"Expected a word, got {describe(tok)}", tok)

    def close_bracket(self, open_tok: Tok, closer: TT, text: str) -> None:
        if self.check(closer):
            self.advance()
            self.depth -= 1
            return
        if self.check(TT.EOF):
            raise ParseError(f"Unclosed '{open_tok.value}'", open_tok)
        raise ParseError(
            f"Expected '{text}' to close '{open_tok.value}', got {describe(self.current)}",
            self.current,
        )

    def parse_array(self) -> Word:
        """Array literal: [ words ]"""
        start = self.expect(TT.LSQB)
        self.depth += 1
        items = self.parse_words()
        self.close_bracket(start, TT.RSQB, "]")
        return Array(items, span=self.span_from(start))

    def parse_func(self) -> Word:
        """
        Function literal: ( words )
        Function alternation: ( words | words ... )
        """
        start = self.expect(TT.LPAR)
        self.depth += 1
        bodies = [self.parse_words()]

        while self.match(TT.PIPE):
            bodies.append(self.parse_words())

        self.close_bracket(start, TT.RPAR, ")")
        if len(bodies) == 1:
            return Func(bodies[0], span=self.span_from(start))
        return FuncArray(tuple(bodies), span=self.span_from(start))


def parse(source: str, path: Optional[Path] = None) -> Tuple[List[Item], List[Diagnostic]]:
    """
    Parse Glyph source into top-level items.

    Never raises for malformed input: lexical and syntax errors come back as
    diagnostics. A lexical error ends the scan, so it is the only diagnostic.
    """
    tokens, lex_error = tokenize_or_error(source)
    if lex_error is not None:
        span = Span(path, lex_error.line, lex_error.column, lex_error.line, lex_error.column + 1)
        return [], [Diagnostic(lex_error.message, span, "lex")]

    parser = Parser(tokens, path=path)
    return parser.parse()
