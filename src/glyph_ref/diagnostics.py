from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional


@dataclass(frozen=True)
class Span:
    """Source region, 1-based lines and columns, end exclusive."""

    path: Optional[Path]
    line: int
    column: int
    end_line: int
    end_column: int

    def merge(self, other: Span) -> Span:
        return Span(self.path, self.line, self.column, other.end_line, other.end_column)

    def __str__(self) -> str:
        where = str(self.path) if self.path is not None else "<input>"
        return f"{where}:{self.line}:{self.column}"


@dataclass(frozen=True)
class Diagnostic:
    message: str
    span: Span
    kind: str = "parse"

    def __str__(self) -> str:
        return f"{self.span}: {self.message}"


class GlyphError(Exception):
    """Base exception for the formatter."""

    pass


class FormatError(GlyphError):
    """Formatting produced diagnostics; no output text exists."""

    def __init__(self, diagnostics: Iterable[Diagnostic]):
        self.diagnostics: List[Diagnostic] = list(diagnostics)
        count = len(self.diagnostics)
        first = f": {self.diagnostics[0]}" if self.diagnostics else ""
        super().__init__(f"{count} diagnostic(s){first}")


class GlyphIOError(GlyphError):
    """Reading or writing a source file failed; never carries diagnostics."""

    action = "I/O failure on"

    def __init__(self, path: Path, cause: Exception):
        self.path = path
        self.cause = cause
        reason = getattr(cause, "strerror", None) or cause
        super().__init__(f"{self.action} {path}: {reason}")


class LoadError(GlyphIOError):
    action = "Failed to read"


class WriteError(GlyphIOError):
    action = "Failed to write"
