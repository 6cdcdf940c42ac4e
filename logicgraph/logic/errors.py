"""
Logic errors - every fatal condition raised by the logic pipeline.

All errors derive from LogicGraphError so callers (CLI, API service,
extractor) can catch one type and report a clean message.
"""

from __future__ import annotations


class LogicGraphError(Exception):
    """Base class for all logicgraph errors."""


class DuplicateTermError(LogicGraphError):
    """Raised when a term name is registered twice."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Term '{name}' is already registered")


class DuplicateLogicObjectError(LogicGraphError):
    """Raised when two logic objects share a name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Logic object '{name}' is defined more than once")


class CyclicMacroError(LogicGraphError):
    """Raised when macro expansion never reaches a fixed point."""

    def __init__(self, chain: list[str]):
        self.chain = chain
        super().__init__(f"Cyclic macro reference: {' -> '.join(chain)}")


class UnresolvedReferenceError(LogicGraphError):
    """Raised when an expression names a symbol that is neither a term nor a macro."""

    def __init__(self, name: str, missing_symbol: str):
        self.name = name
        self.missing_symbol = missing_symbol
        super().__init__(
            f"Logic for '{name}' references unknown symbol '{missing_symbol}'"
        )


class UndefinedLogicObjectError(LogicGraphError):
    """Raised when a logic object is looked up but was never defined."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Logic object '{name}' is not defined")


class ExpressionError(LogicGraphError):
    """Raised for malformed logic text or unsupported expression shapes."""


class PhaseOrderError(LogicGraphError):
    """Raised when the region graph builder is driven out of phase order."""


class RebaseError(LogicGraphError):
    """Raised when no region matches the requested start term."""

    def __init__(self, start_term: str):
        self.start_term = start_term
        super().__init__(f"No region matches start term '{start_term}'")


class WorldDefinitionError(LogicGraphError):
    """Raised when an input world definition is missing or invalid."""

    def __init__(self, message: str, errors: list[str] | None = None):
        self.errors = errors or []
        super().__init__(message)


class ExtractionCancelled(LogicGraphError):
    """Raised when extraction is cancelled at a phase boundary."""

    def __init__(self, phase: str):
        self.phase = phase
        super().__init__(f"Extraction cancelled before {phase}")
