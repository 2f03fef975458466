"""
Lexer for Glyph - Recursive Descent Parser

Tokenizes Glyph source code into a stream of tokens.

Features:
- Single-pass tokenization
- Line-oriented (emits NEWLINE, keeps comments as tokens)
- Position tracking (line, column)
- Character and string literal unescaping
"""

from typing import List, Optional

from .literals import UNESCAPES
from .primitives import from_glyph
from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

def is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


class LexError(Exception):
    """Lexical analysis error"""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"{message} at line {line}, col {column}")


class Lexer:
    """
    Glyph lexer.

    Whitespace other than newlines is insignificant. Glyph characters are
    matched before identifiers so a glyph never starts a name.
    """

    PUNCTUATION = {
        '_': TT.UNDERSCORE,
        '[': TT.LSQB,
        ']': TT.RSQB,
        '(': TT.LPAR,
        ')': TT.RPAR,
        '|': TT.PIPE,
        '=': TT.ASSIGN,
    }

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []

        # Start of the token being scanned
        self.start_line = 1
        self.start_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.mark()
        self.emit(TT.EOF, None)
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        # Skip whitespace (not newlines)
        if self.skip_whitespace():
            return

        self.mark()
        ch = self.peek()

        if ch == '#':
            self.scan_comment()
            return

        if ch in ('\n', '\r'):
            self.scan_newline()
            return

        if ch == '"':
            self.scan_string()
            return

        if ch == "'":
            self.scan_char()
            return

        if is_digit(ch):
            self.scan_number()
            return

        if ch == ':':
            self.scan_selector()
            return

        prim = from_glyph(ch)
        if prim is not None:
            self.advance()
            self.emit(TT.PRIMITIVE, prim)
            return

        if ch.isalpha():
            self.scan_identifier()
            return

        if ch in self.PUNCTUATION:
            self.advance()
            self.emit(self.PUNCTUATION[ch], ch)
            return

        raise self.error(f"Unexpected character '{ch}'")

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_newline(self):
        """Scan newline character"""
        if self.peek() == '\r':
            if self.peek(1) != '\n':
                raise self.error("Bare carriage return")
            self.advance(2)  # consume CRLF
        else:
            self.advance()

        self.emit(TT.NEWLINE, '\n')
        self.line += 1
        self.column = 1

    def scan_comment(self):
        """Scan comment until end of line, dropping one leading space"""
        self.advance()  # '#'
        text = ''
        while self.pos < len(self.source) and self.peek() not in ('\n', '\r'):
            text += self.advance()

        if text.startswith(' '):
            text = text[1:]
        self.emit(TT.COMMENT, text)

    def scan_quoted(self, quote: str, what: str) -> str:
        """Scan a quoted literal body and return its unescaped content"""
        self.advance()  # opening quote
        content = ''

        while True:
            if self.pos >= len(self.source) or self.peek() in ('\n', '\r'):
                raise LexError(f"Unterminated {what}", self.start_line, self.start_column)

            ch = self.advance()
            if ch == quote:
                return content

            if ch == '\\':
                content += self.scan_escape()
            else:
                content += ch

    def scan_escape(self) -> str:
        """Scan the remainder of an escape sequence after the backslash"""
        esc_line, esc_column = self.line, self.column - 1
        if self.pos >= len(self.source):
            raise LexError("Unterminated escape sequence", esc_line, esc_column)

        ch = self.advance()
        if ch in UNESCAPES:
            return UNESCAPES[ch]

        if ch == 'u' and self.peek() == '{':
            self.advance()
            digits = ''
            while self.peek() not in ('}', '\0', '\n'):
                digits += self.advance()

            if self.peek() != '}':
                raise LexError("Unterminated unicode escape", esc_line, esc_column)
            self.advance()

            try:
                code = int(digits, 16)
                return chr(code)
            except (ValueError, OverflowError):
                raise LexError(f"Invalid unicode escape '{digits}'", esc_line, esc_column) from None

        raise LexError(f"Invalid escape sequence '\\{ch}'", esc_line, esc_column)

    def scan_string(self):
        """Scan string literal: "..." """
        self.emit(TT.STRING, self.scan_quoted('"', "string"))

    def scan_char(self):
        """Scan character literal: 'c'"""
        content = self.scan_quoted("'", "character literal")
        if len(content) != 1:
            raise LexError(
                "Character literal must hold exactly one character",
                self.start_line,
                self.start_column,
            )
        self.emit(TT.CHAR, content)

    def scan_number(self):
        """Scan number literal"""
        value = ''

        # Integer part
        while is_digit(self.peek()):
            value += self.advance()

        # Decimal part
        if self.peek() == '.' and is_digit(self.peek(1)):
            value += self.advance()  # .
            while is_digit(self.peek()):
                value += self.advance()

        number = float(value)
        if number == float('inf'):
            raise self.error("Number literal out of range")

        self.emit(TT.NUMBER, number)

    def scan_identifier(self):
        """Scan identifier"""
        value = ''

        while self.peek().isalpha():
            value += self.advance()

        self.emit(TT.IDENT, value)

    def scan_selector(self):
        """Scan stack selector: ':' followed by lowercase letters"""
        self.advance()  # ':'
        letters = ''
        while 'a' <= self.peek() <= 'z':
            letters += self.advance()

        if not letters:
            raise self.error("Empty selector")

        self.emit(TT.SELECTOR, letters)

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = ''
        for _ in range(n):
            ch = self.source[self.pos] if self.pos < len(self.source) else '\0'
            result += ch
            self.pos += 1
            self.column += 1
        return result

    def skip_whitespace(self) -> bool:
        """Skip whitespace (not newlines), return True if any skipped"""
        skipped = False
        while self.peek() in (' ', '\t'):
            self.advance()
            skipped = True
        return skipped

    def mark(self):
        """Record where the next token starts"""
        self.start_line = self.line
        self.start_column = self.column

    def error(self, message: str) -> LexError:
        return LexError(message, self.start_line, self.start_column)

    def emit(self, token_type: TT, value):
        """Emit a token spanning from the last mark to the current position"""
        tok = Tok(
            type=token_type,
            value=value,
            line=self.start_line,
            column=self.start_column,
            end_line=self.line,
            end_column=self.column,
        )
        self.tokens.append(tok)


def tokenize(source: str) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source)
    return lexer.tokenize()


def tokenize_or_error(source: str) -> tuple[List[Tok], Optional[LexError]]:
    """Tokenize, returning the tokens scanned so far alongside any error"""
    lexer = Lexer(source)
    try:
        return lexer.tokenize(), None
    except LexError as exc:
        return lexer.tokens, exc
