"""
Token Types for the Glyph lexer and parser

Shared between lexer and parser to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types"""

    # Literals
    NUMBER = auto()
    CHAR = auto()
    STRING = auto()
    IDENT = auto()
    SELECTOR = auto()

    # Built-in glyphs (value is the Primitive)
    PRIMITIVE = auto()

    # Punctuation
    UNDERSCORE = auto()  # strand separator
    LSQB = auto()
    RSQB = auto()
    LPAR = auto()
    RPAR = auto()
    PIPE = auto()  # function alternation divider
    ASSIGN = auto()  # =

    # Special
    NEWLINE = auto()
    COMMENT = auto()
    EOF = auto()


@dataclass
class Tok:
    """Token with position info"""

    type: TT
    value: Any
    line: int = 0
    column: int = 0
    end_line: int = 0
    end_column: int = 0

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
