"""
Logic Expressions - Operands, expression trees and the logic text parser.

Logic text syntax:
- Term names: Dash, Town[left1], Grubs
- Constants: TRUE / ANY, FALSE / NONE
- Comparisons against integers: Grubs>5, Keys<=2, Charms!=0
- State calls: $BENCHRESET, $CASTSPELL[1,before:ROOMSOUL]
- Operators: + (and), | (or), ! (not), parentheses

Precedence from tightest: !, +, |.

Bare names parse to Symbol nodes. The preprocessor later resolves each
Symbol to a term literal or to the body of a macro.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Union
import re

from .errors import ExpressionError


# =============================================================================
# Operands
# =============================================================================

@dataclass(frozen=True)
class Constant:
    """TRUE or FALSE."""
    value: bool

    def negate(self) -> Constant:
        return Constant(not self.value)

    def __str__(self) -> str:
        return "TRUE" if self.value else "FALSE"


@dataclass(frozen=True)
class Literal:
    """A term, possibly negated."""
    term: str
    negated: bool = False

    def negate(self) -> Literal:
        return Literal(self.term, not self.negated)

    def __str__(self) -> str:
        return f"!{self.term}" if self.negated else self.term


NEGATED_OPS = {
    ">": "<=",
    "<=": ">",
    "<": ">=",
    ">=": "<",
    "=": "!=",
    "!=": "=",
}


@dataclass(frozen=True)
class Comparison:
    """A counter compared against an integer."""
    term: str
    op: str
    value: int

    def negate(self) -> Comparison:
        return Comparison(self.term, NEGATED_OPS[self.op], self.value)

    def __str__(self) -> str:
        return f"{self.term}{self.op}{self.value}"


@dataclass(frozen=True)
class StateCall:
    """A state-changing token such as $BENCHRESET or $CASTSPELL[1]."""
    name: str
    args: tuple[str, ...] = ()

    def negate(self) -> StateCall:
        raise ExpressionError(f"State call '{self}' cannot be negated")

    def __str__(self) -> str:
        if self.args:
            return f"${self.name}[{','.join(self.args)}]"
        return f"${self.name}"


Operand = Union[Constant, Literal, Comparison, StateCall]

TRUE = Constant(True)
FALSE = Constant(False)


# =============================================================================
# Expression tree
# =============================================================================

@dataclass(frozen=True)
class Atom:
    """Leaf wrapping a resolved operand."""
    operand: Operand


@dataclass(frozen=True)
class Symbol:
    """Unresolved name; either a term or a macro."""
    name: str


@dataclass(frozen=True)
class And:
    children: tuple[Expression, ...]


@dataclass(frozen=True)
class Or:
    children: tuple[Expression, ...]


@dataclass(frozen=True)
class Not:
    child: Expression


Expression = Union[Atom, Symbol, And, Or, Not]


def to_text(expr: Expression) -> str:
    """Render an expression back to logic text."""
    if isinstance(expr, Atom):
        return str(expr.operand)
    if isinstance(expr, Symbol):
        return expr.name
    if isinstance(expr, Not):
        inner = to_text(expr.child)
        if isinstance(expr.child, (And, Or)):
            inner = f"({inner})"
        return f"!{inner}"
    if isinstance(expr, And):
        parts = []
        for child in expr.children:
            text = to_text(child)
            parts.append(f"({text})" if isinstance(child, Or) else text)
        return " + ".join(parts) if parts else "TRUE"
    if isinstance(expr, Or):
        parts = [to_text(child) for child in expr.children]
        return " | ".join(parts) if parts else "FALSE"
    raise ExpressionError(f"Unknown expression node: {expr!r}")


# =============================================================================
# Parser
# =============================================================================

_TOKEN_RE = re.compile(
    r"\s*(?:(?P<cmp>>=|<=|!=|[<>=])|(?P<op>[()+|!])|(?P<word>[^\s()+|!<>=]+))"
)

_CONSTANTS = {
    "TRUE": TRUE,
    "ANY": TRUE,
    "FALSE": FALSE,
    "NONE": FALSE,
}

_STATE_CALL_RE = re.compile(r"^\$(?P<name>[^\[\]]+)(?:\[(?P<args>[^\]]*)\])?$")


def tokenize(text: str) -> list[tuple[str, str]]:
    """Split logic text into (kind, value) tokens."""
    tokens = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if not match or match.end() == pos:
            raise ExpressionError(f"Unexpected character at {pos} in '{text}'")
        kind = match.lastgroup
        tokens.append((kind, match.group(kind)))
        pos = match.end()
    return tokens


def parse_state_call(word: str) -> StateCall:
    match = _STATE_CALL_RE.match(word)
    if not match:
        raise ExpressionError(f"Malformed state call '{word}'")
    args = match.group("args")
    arg_list = tuple(a.strip() for a in args.split(",")) if args else ()
    return StateCall(name=match.group("name"), args=arg_list)


class _Parser:
    """Recursive descent parser over a token list."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0

    def parse(self) -> Expression:
        if not self.tokens:
            raise ExpressionError("Empty logic expression")
        expr = self._parse_or()
        if self.pos != len(self.tokens):
            raise ExpressionError(
                f"Unexpected token '{self.tokens[self.pos][1]}' in '{self.text}'"
            )
        return expr

    def _peek(self) -> tuple[str, str] | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take(self) -> tuple[str, str]:
        token = self._peek()
        if token is None:
            raise ExpressionError(f"Unexpected end of '{self.text}'")
        self.pos += 1
        return token

    def _parse_or(self) -> Expression:
        children = [self._parse_and()]
        while self._peek() == ("op", "|"):
            self._take()
            children.append(self._parse_and())
        return children[0] if len(children) == 1 else Or(tuple(children))

    def _parse_and(self) -> Expression:
        children = [self._parse_unary()]
        while self._peek() == ("op", "+"):
            self._take()
            children.append(self._parse_unary())
        return children[0] if len(children) == 1 else And(tuple(children))

    def _parse_unary(self) -> Expression:
        if self._peek() == ("op", "!"):
            self._take()
            return Not(self._parse_unary())
        return self._parse_primary()

    def _parse_primary(self) -> Expression:
        kind, value = self._take()
        if (kind, value) == ("op", "("):
            expr = self._parse_or()
            if self._take() != ("op", ")"):
                raise ExpressionError(f"Expected ')' in '{self.text}'")
            return expr
        if kind != "word":
            raise ExpressionError(f"Unexpected token '{value}' in '{self.text}'")

        next_token = self._peek()
        if next_token and next_token[0] == "cmp":
            _, op = self._take()
            _, rhs = self._take()
            try:
                number = int(rhs)
            except ValueError:
                raise ExpressionError(
                    f"Comparison '{value}{op}{rhs}' needs an integer right-hand side"
                ) from None
            return Atom(Comparison(term=value, op=op, value=number))

        if value in _CONSTANTS:
            return Atom(_CONSTANTS[value])
        if value.startswith("$"):
            return Atom(parse_state_call(value))
        return Symbol(value)


def parse_expression(text: str) -> Expression:
    """Parse logic text into an unresolved expression tree."""
    return _Parser(text).parse()


def parse_operand(token: str) -> Operand:
    """
    Parse a single operand token, as written by str(operand).

    Bare names become (possibly negated) literals.
    """
    expr = parse_expression(token)
    negated = False
    if isinstance(expr, Not):
        negated = True
        expr = expr.child
    if isinstance(expr, Symbol):
        return Literal(expr.name, negated)
    if isinstance(expr, Atom):
        return expr.operand.negate() if negated else expr.operand
    raise ExpressionError(f"'{token}' is not a single operand")
