"""Binding oracle: tracks which names user code has bound so far.

Items are registered one at a time in document order. The formatter asks
``is_bound`` while rendering an item and registers the item afterwards, so
a binding is invisible inside its own definition.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .diagnostics import Diagnostic, Span
from .primitives import from_name
from .tree import Binding, Ident, Item, item_words, iter_words

log = logging.getLogger(__name__)


class BindingOracle(ABC):
    """Abstracts name resolution so the formatter can run against a stand-in."""

    @abstractmethod
    def is_bound(self, name: str) -> bool: ...

    @abstractmethod
    def item(self, item: Item) -> None: ...

    @abstractmethod
    def diagnostics(self) -> List[Diagnostic]: ...


class Compiler(BindingOracle):
    """Resolves identifiers against user bindings and the primitive registry."""

    def __init__(self):
        self.bindings: Dict[str, Optional[Span]] = {}
        self.errors: List[Diagnostic] = []

    def is_bound(self, name: str) -> bool:
        return name in self.bindings

    def item(self, item: Item) -> None:
        for word in iter_words(item_words(item)):
            if isinstance(word, Ident):
                self.resolve(word)

        if isinstance(item, Binding):
            self.bind(item)

    def resolve(self, ident: Ident) -> None:
        if self.is_bound(ident.name) or from_name(ident.name) is not None:
            return
        self.error(f"Unknown identifier '{ident.name}'", ident.span)

    def bind(self, binding: Binding) -> None:
        if not binding.words:
            self.error(f"Binding '{binding.name}' has no value", binding.span)

        if binding.name in self.bindings:
            log.debug("rebinding '%s'", binding.name)
        elif from_name(binding.name) is not None:
            log.debug("'%s' now shadows the primitive of the same name", binding.name)

        self.bindings[binding.name] = binding.name_span

    def error(self, message: str, span: Optional[Span]) -> None:
        if span is None:
            span = Span(None, 0, 0, 0, 0)
        self.errors.append(Diagnostic(message, span, "resolve"))

    def diagnostics(self) -> List[Diagnostic]:
        return list(self.errors)
