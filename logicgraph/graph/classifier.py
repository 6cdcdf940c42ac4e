"""
State Modifier Classifiers - Tag operands that change logic state.

Classification is annotation only: it decides which operands of a clause
are reported as state modifiers in the exported graph. It never changes
the graph's topology.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterable

from ..logic.expression import Operand, StateCall


class StateModifierClassifier(ABC):
    """Decides whether an operand modifies state."""

    @abstractmethod
    def is_state_modifier(self, operand: Operand) -> bool:
        ...

    def split(self, operands: Iterable[Operand]) -> tuple[list[Operand], list[Operand]]:
        """Split operands into (conditions, state modifiers), keeping order."""
        conditions: list[Operand] = []
        modifiers: list[Operand] = []
        for operand in operands:
            if self.is_state_modifier(operand):
                modifiers.append(operand)
            else:
                conditions.append(operand)
        return conditions, modifiers


class StateCallClassifier(StateModifierClassifier):
    """Every $-prefixed state call is a state modifier."""

    def is_state_modifier(self, operand: Operand) -> bool:
        return isinstance(operand, StateCall)


class NullClassifier(StateModifierClassifier):
    """Reports no state modifiers."""

    def is_state_modifier(self, operand: Operand) -> bool:
        return False
