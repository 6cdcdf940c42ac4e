"""
Variable Resolvers - Decide which $-prefixed state calls logic may use.

Resolvers form a closed set selected by configuration. Saved logic
snapshots carry a resolver type tag; loading substitutes the tag of the
configured strategy instead of loading whatever type the tag names.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable

from .expression import StateCall


class ResolverStrategy(str, Enum):
    """Available variable resolver strategies."""
    DUMMY = "dummy"
    STRICT = "strict"


RESOLVER_TYPE_TAGS = {
    ResolverStrategy.DUMMY: "logicgraph.logic.variables.DummyVariableResolver",
    ResolverStrategy.STRICT: "logicgraph.logic.variables.StrictVariableResolver",
}


class VariableResolver(ABC):
    """Accepts or rejects state calls found in logic text."""

    strategy: ResolverStrategy

    @abstractmethod
    def resolve(self, call: StateCall) -> bool:
        """Return True if the state call is known."""
        ...


class DummyVariableResolver(VariableResolver):
    """Accepts every state call without interpreting it."""

    strategy = ResolverStrategy.DUMMY

    def resolve(self, call: StateCall) -> bool:
        return True


class StrictVariableResolver(VariableResolver):
    """Accepts only state calls whose name was declared."""

    strategy = ResolverStrategy.STRICT

    def __init__(self, known: Iterable[str] = ()):
        self.known = set(known)

    def resolve(self, call: StateCall) -> bool:
        return call.name in self.known


def create_resolver(
    strategy: ResolverStrategy,
    known: Iterable[str] = (),
) -> VariableResolver:
    """Instantiate the resolver for a strategy."""
    if strategy == ResolverStrategy.STRICT:
        return StrictVariableResolver(known)
    return DummyVariableResolver()
