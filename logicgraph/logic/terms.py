"""
Term Registry - Named symbolic variables referenced by logic.

Every item, flag, counter or state that logic may mention is registered
here exactly once, with its kind. Terms are immutable after registration.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from .errors import DuplicateTermError, WorldDefinitionError


class TermType(Enum):
    """Kinds of terms."""
    BOOL = "Bool"
    COUNTER = "Counter"
    STATE = "State"


@dataclass(frozen=True)
class Term:
    """A registered symbolic variable."""
    name: str
    kind: TermType

    @property
    def is_state(self) -> bool:
        return self.kind == TermType.STATE


class TermRegistry:
    """
    Registry of terms, in registration order.

    Usage:
        terms = TermRegistry()
        terms.register("Dash", TermType.BOOL)
        terms.register("Town", TermType.STATE)
        terms.kind_of("Town")  # TermType.STATE
    """

    def __init__(self):
        self._terms: dict[str, Term] = {}

    def register(self, name: str, kind: TermType) -> Term:
        """Register a new term. Fails if the name is taken."""
        if name in self._terms:
            raise DuplicateTermError(name)
        term = Term(name=name, kind=kind)
        self._terms[name] = term
        return term

    def get_or_add(self, name: str, kind: TermType) -> Term:
        """
        Return the existing term or register it.

        An existing term with a different kind is a conflicting
        registration and fails like a duplicate.
        """
        existing = self._terms.get(name)
        if existing is None:
            return self.register(name, kind)
        if existing.kind != kind:
            raise DuplicateTermError(name)
        return existing

    def get(self, name: str) -> Term | None:
        return self._terms.get(name)

    def kind_of(self, name: str) -> TermType | None:
        term = self._terms.get(name)
        return term.kind if term else None

    def is_state(self, name: str) -> bool:
        return self.kind_of(name) == TermType.STATE

    def __contains__(self, name: object) -> bool:
        return name in self._terms

    def __iter__(self) -> Iterator[Term]:
        return iter(self._terms.values())

    def __len__(self) -> int:
        return len(self._terms)

    @classmethod
    def from_mapping(cls, mapping: dict[str, list[str]]) -> TermRegistry:
        """
        Build a registry from {"Bool": [...], "Counter": [...], "State": [...]}.

        Unknown kind keys are rejected.
        """
        registry = cls()
        for kind_name, names in mapping.items():
            try:
                kind = TermType(kind_name)
            except ValueError:
                raise WorldDefinitionError(f"Unknown term kind '{kind_name}'") from None
            for name in names:
                registry.register(name, kind)
        return registry
