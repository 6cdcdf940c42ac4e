"""
Logic Preprocessor - Compiles raw logic text into resolved expressions.

The preprocessor:
1. Holds the term registry and macro table
2. Collects raw waypoint, transition and location definitions
3. Expands macros to a fixed point (rejecting cycles)
4. Compiles a named definition into an expression tree whose leaves are
   all registered terms, comparisons, constants or accepted state calls

All terms must be registered before the first compile.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from .errors import (
    CyclicMacroError,
    DuplicateLogicObjectError,
    PhaseOrderError,
    UndefinedLogicObjectError,
    UnresolvedReferenceError,
)
from .expression import (
    And,
    Atom,
    Comparison,
    Expression,
    Literal,
    Not,
    Or,
    StateCall,
    Symbol,
    parse_expression,
)
from .terms import Term, TermRegistry, TermType
from .variables import DummyVariableResolver, VariableResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawLogicDef:
    """Raw logic for a transition or location."""
    name: str
    logic: str


@dataclass(frozen=True)
class RawWaypointDef:
    """
    Raw logic for a waypoint.

    Stateless waypoints are plain boolean flags; the rest carry state and
    define regions.
    """
    name: str
    logic: str
    stateless: bool = False


class LogicPreprocessor:
    """
    Resolves macros and term references in raw logic.

    Usage:
        lp = LogicPreprocessor()
        lp.register_term("Dash", TermType.BOOL)
        lp.set_macros({"CANDASH": "Dash"})
        lp.add_waypoint(RawWaypointDef("Town", "TRUE"))
        lp.add_logic_def(RawLogicDef("Shop", "Town + CANDASH"))
        expr = lp.compile("Shop")
    """

    def __init__(
        self,
        terms: TermRegistry | None = None,
        variable_resolver: VariableResolver | None = None,
    ):
        self.terms = terms if terms is not None else TermRegistry()
        self.variable_resolver = variable_resolver or DummyVariableResolver()
        self._macros: dict[str, str] = {}
        self._expanded: dict[str, Expression] | None = None
        self._definitions: dict[str, RawLogicDef | RawWaypointDef] = {}
        self.waypoints: list[RawWaypointDef] = []
        self.transitions: list[RawLogicDef] = []
        self.locations: list[RawLogicDef] = []
        self._compiling = False

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register_term(self, name: str, kind: TermType) -> Term:
        self._check_open()
        return self.terms.register(name, kind)

    def set_macro(self, name: str, text: str):
        self._macros[name] = text
        self._expanded = None

    def set_macros(self, macros: dict[str, str]):
        for name, text in macros.items():
            self.set_macro(name, text)

    def add_waypoint(self, waypoint: RawWaypointDef):
        """Add a waypoint. Stateful waypoints get a State term of their name."""
        self._check_open()
        kind = TermType.BOOL if waypoint.stateless else TermType.STATE
        self.terms.get_or_add(waypoint.name, kind)
        self._add_definition(waypoint)
        self.waypoints.append(waypoint)

    def add_transition(self, transition: RawLogicDef):
        """Add a transition. Transitions always get a State term of their name."""
        self._check_open()
        self.terms.get_or_add(transition.name, TermType.STATE)
        self._add_definition(transition)
        self.transitions.append(transition)

    def add_logic_def(self, definition: RawLogicDef):
        """Add a location (or any other plain logic definition)."""
        self._add_definition(definition)
        self.locations.append(definition)

    def _add_definition(self, definition: RawLogicDef | RawWaypointDef):
        if definition.name in self._definitions:
            raise DuplicateLogicObjectError(definition.name)
        self._definitions[definition.name] = definition

    def _check_open(self):
        if self._compiling:
            raise PhaseOrderError("Terms must be registered before compiling logic")

    # -------------------------------------------------------------------------
    # Macro expansion
    # -------------------------------------------------------------------------

    def expand_macros(self) -> dict[str, Expression]:
        """
        Expand every macro until no macro reference remains.

        Returns the expanded macro bodies. Term symbols are left for
        compile to resolve.
        """
        if self._expanded is not None:
            return self._expanded

        expanded: dict[str, Expression] = {}
        for name in self._macros:
            self._expand_macro(name, [], expanded)
        self._expanded = expanded
        logger.debug("Expanded %d macros", len(expanded))
        return expanded

    def _expand_macro(
        self,
        name: str,
        stack: list[str],
        expanded: dict[str, Expression],
    ) -> Expression:
        if name in expanded:
            return expanded[name]
        if name in stack:
            raise CyclicMacroError(stack[stack.index(name):] + [name])

        body = parse_expression(self._macros[name])
        result = self._substitute_macros(body, stack + [name], expanded)
        expanded[name] = result
        return result

    def _substitute_macros(
        self,
        expr: Expression,
        stack: list[str],
        expanded: dict[str, Expression],
    ) -> Expression:
        if isinstance(expr, Symbol):
            if expr.name not in self.terms and expr.name in self._macros:
                return self._expand_macro(expr.name, stack, expanded)
            return expr
        if isinstance(expr, Not):
            return Not(self._substitute_macros(expr.child, stack, expanded))
        if isinstance(expr, (And, Or)):
            children = tuple(
                self._substitute_macros(c, stack, expanded) for c in expr.children
            )
            return type(expr)(children)
        return expr

    # -------------------------------------------------------------------------
    # Compilation
    # -------------------------------------------------------------------------

    def compile(self, name: str) -> Expression:
        """Compile the named definition into a resolved expression."""
        definition = self._definitions.get(name)
        if definition is None:
            raise UndefinedLogicObjectError(name)
        return self.compile_text(name, definition.logic)

    def compile_text(self, name: str, text: str) -> Expression:
        """Compile ad-hoc logic text, reporting errors against `name`."""
        self._compiling = True
        expanded = self.expand_macros()
        body = self._substitute_macros(parse_expression(text), [], expanded)
        return self._resolve(name, body)

    def _resolve(self, name: str, expr: Expression) -> Expression:
        if isinstance(expr, Symbol):
            if expr.name in self.terms:
                return Atom(Literal(expr.name))
            raise UnresolvedReferenceError(name, expr.name)
        if isinstance(expr, Atom):
            operand = expr.operand
            if isinstance(operand, Comparison) and operand.term not in self.terms:
                raise UnresolvedReferenceError(name, operand.term)
            if isinstance(operand, StateCall) and not self.variable_resolver.resolve(operand):
                raise UnresolvedReferenceError(name, str(operand))
            return expr
        if isinstance(expr, Not):
            return Not(self._resolve(name, expr.child))
        return type(expr)(tuple(self._resolve(name, c) for c in expr.children))
