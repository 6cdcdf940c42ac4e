"""
DNF Normalizer - Turns expressions into ordered lists of clauses.

A clause is one conjunction of a disjunctive normal form. Normalization:
1. Reuses a precomputed DNF when given one; otherwise pushes NOT down to
   the operands (De Morgan) and distributes AND over OR
2. Discards conjunctions containing FALSE or both X and !X
3. Strips TRUE and duplicate operands; drops repeated clauses
4. Returns the sentinel FALSE clause when nothing survives, and only the
   empty clause when a trivially true conjunction survives
5. Keeps clauses in discovery order (left to right through the tree)
6. Records which operands name State terms

Distribution is exponential in the worst case; no minimization is done
beyond the literal simplification above.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from itertools import product
from typing import Callable, Iterable, Sequence, Union
import hashlib
import logging

from .errors import ExpressionError
from .expression import (
    FALSE,
    TRUE,
    And,
    Atom,
    Expression,
    Literal,
    Not,
    Operand,
    Or,
    Symbol,
    parse_operand,
)
from .terms import TermRegistry

logger = logging.getLogger(__name__)


class LogicHandling(Enum):
    """How a logic object takes part in graph construction."""
    DEFAULT = "Default"
    LOCATION = "Location"
    TRANSITION = "Transition"


@dataclass(frozen=True, eq=False)
class StatefulClause:
    """
    One conjunction of a DNF.

    operands keeps discovery order; equality ignores order.
    state_terms lists the (non-negated) State term literals, in order.
    The first of them is the clause's state provider.
    """
    operands: tuple[Operand, ...]
    state_terms: tuple[str, ...] = ()

    @property
    def references_state(self) -> bool:
        return bool(self.state_terms)

    @property
    def state_provider(self) -> str | None:
        return self.state_terms[0] if self.state_terms else None

    @property
    def is_sentinel(self) -> bool:
        return self.operands == (FALSE,)

    @property
    def is_trivially_true(self) -> bool:
        return not self.operands

    @property
    def conditions(self) -> tuple[Operand, ...]:
        """Operands other than the state provider."""
        provider = self.state_provider
        if provider is None:
            return self.operands
        anchor = Literal(provider)
        return tuple(op for op in self.operands if op != anchor)

    def without_provider(self) -> StatefulClause:
        """The clause as seen from inside its provider's region."""
        return StatefulClause(operands=self.conditions, state_terms=self.state_terms[1:])

    def tokens(self) -> list[str]:
        return [str(op) for op in self.operands]

    def canonical_key(self, resolve: Callable[[str], str] | None = None) -> tuple[str, ...]:
        """Sorted tokens. resolve, when given, renames the state provider."""
        provider = self.state_provider
        if resolve is None or provider is None:
            return tuple(sorted(self.tokens()))
        return tuple(sorted([resolve(provider)] + [str(op) for op in self.conditions]))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatefulClause):
            return NotImplemented
        return (
            frozenset(self.operands) == frozenset(other.operands)
            and frozenset(self.state_terms) == frozenset(other.state_terms)
        )

    def __hash__(self) -> int:
        return hash((frozenset(self.operands), frozenset(self.state_terms)))

    def __str__(self) -> str:
        return " + ".join(self.tokens()) if self.operands else "TRUE"


SENTINEL_FALSE_CLAUSE = StatefulClause(operands=(FALSE,))


@dataclass(frozen=True)
class LogicObjectDefinition:
    """A named logic object and its normalized clauses."""
    name: str
    clauses: tuple[StatefulClause, ...]
    handling: LogicHandling = LogicHandling.DEFAULT

    @property
    def is_unreachable(self) -> bool:
        return len(self.clauses) == 1 and self.clauses[0].is_sentinel


PrecomputedDNF = Sequence[Sequence[Union[Operand, str]]]


def canonical_hash(
    clauses: Iterable[StatefulClause],
    resolve: Callable[[str], str] | None = None,
) -> str:
    """
    Stable hash of a clause list, independent of clause and operand order.

    Used as the merge key for regions. resolve maps state providers to
    their current region names, so clauses anchored on merged names hash
    alike.
    """
    keys = sorted({" + ".join(c.canonical_key(resolve)) for c in clauses})
    content = "\n".join(keys).encode("utf-8")
    return hashlib.sha256(content).hexdigest()


# =============================================================================
# DNF transform
# =============================================================================

def push_negations(expr: Expression, negate: bool = False) -> Expression:
    """Move every NOT onto an operand (negation normal form)."""
    if isinstance(expr, Not):
        return push_negations(expr.child, not negate)
    if isinstance(expr, Atom):
        return Atom(expr.operand.negate()) if negate else expr
    if isinstance(expr, (And, Or)):
        children = tuple(push_negations(c, negate) for c in expr.children)
        if negate:
            return Or(children) if isinstance(expr, And) else And(children)
        return type(expr)(children)
    if isinstance(expr, Symbol):
        raise ExpressionError(f"Unresolved symbol '{expr.name}' reached normalization")
    raise ExpressionError(f"Unknown expression node: {expr!r}")


def distribute(expr: Expression) -> list[tuple[Operand, ...]]:
    """
    Distribute AND over OR on an expression in negation normal form.

    Returns raw conjunctions in discovery order, constants included.
    """
    if isinstance(expr, Atom):
        return [(expr.operand,)]
    if isinstance(expr, Or):
        conjunctions: list[tuple[Operand, ...]] = []
        for child in expr.children:
            conjunctions.extend(distribute(child))
        return conjunctions
    if isinstance(expr, And):
        # empty AND is TRUE: one empty conjunction
        conjunctions = [()]
        for child in expr.children:
            child_dnf = distribute(child)
            conjunctions = [left + right for left, right in product(conjunctions, child_dnf)]
        return conjunctions
    raise ExpressionError(f"Expression is not in negation normal form: {expr!r}")


def to_dnf(expr: Expression) -> list[tuple[Operand, ...]]:
    return distribute(push_negations(expr))


def clauses_to_expression(clauses: Iterable[StatefulClause]) -> Expression:
    """Rebuild an OR-of-ANDs expression from clauses."""
    return Or(tuple(And(tuple(Atom(op) for op in c.operands)) for c in clauses))


# =============================================================================
# Normalizer
# =============================================================================

@dataclass
class DNFNormalizer:
    """
    Normalizes named expressions into clause lists.

    The term registry is used to tell which literals name State terms.
    Without one, no clause references state.
    """
    terms: TermRegistry | None = None
    state_terms: set[str] = field(default_factory=set)

    def normalize(
        self,
        name: str,
        source: Expression | PrecomputedDNF,
    ) -> list[StatefulClause]:
        if isinstance(source, (Atom, Symbol, And, Or, Not)):
            raw = to_dnf(source)
        else:
            raw = [tuple(self._coerce(op) for op in conj) for conj in source]

        clauses: list[StatefulClause] = []
        seen: set[StatefulClause] = set()
        for conjunction in raw:
            clause = self._simplify(conjunction)
            if clause is None or clause in seen:
                continue
            if clause.is_trivially_true:
                # TRUE absorbs every other disjunct
                return [clause]
            seen.add(clause)
            clauses.append(clause)

        if not clauses:
            logger.debug("Logic for %s is unsatisfiable", name)
            return [SENTINEL_FALSE_CLAUSE]
        return clauses

    def normalize_object(
        self,
        name: str,
        handling: LogicHandling,
        expression: Expression | None = None,
        dnf: PrecomputedDNF | None = None,
    ) -> LogicObjectDefinition:
        """
        Normalize a logic object, preferring its precomputed DNF.

        Missing DNF is not an error; it is computed from the expression.
        """
        if dnf is None:
            if expression is None:
                raise ExpressionError(f"Logic object '{name}' has neither logic nor DNF")
            logger.warning("Logic definition for %s was not available in DNF form, creating", name)
            source = expression
        else:
            source = dnf
        return LogicObjectDefinition(
            name=name,
            clauses=tuple(self.normalize(name, source)),
            handling=handling,
        )

    def _coerce(self, operand: Operand | str) -> Operand:
        return parse_operand(operand) if isinstance(operand, str) else operand

    def _simplify(self, conjunction: tuple[Operand, ...]) -> StatefulClause | None:
        if FALSE in conjunction:
            return None

        operands: list[Operand] = []
        for op in conjunction:
            if op == TRUE or op in operands:
                continue
            operands.append(op)

        literals = {op for op in operands if isinstance(op, Literal)}
        if any(lit.negate() in literals for lit in literals):
            return None

        state_terms = tuple(
            op.term for op in operands
            if isinstance(op, Literal) and not op.negated and self._is_state(op.term)
        )
        return StatefulClause(operands=tuple(operands), state_terms=state_terms)

    def _is_state(self, term: str) -> bool:
        if term in self.state_terms:
            return True
        return self.terms is not None and self.terms.is_state(term)


def normalize(
    name: str,
    source: Expression | PrecomputedDNF,
    terms: TermRegistry | None = None,
) -> list[StatefulClause]:
    """Convenience wrapper around DNFNormalizer.normalize."""
    return DNFNormalizer(terms=terms).normalize(name, source)
