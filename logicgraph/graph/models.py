"""
World Documents - Pydantic models for world definitions and region graphs.

Two documents cross the boundary of the builder:
- StringWorldDefinition: normalized logic objects (input)
- GraphWorldDefinition: the finalized region graph (output)

Both serialize with PascalCase keys, e.g. {"LogicObjects": [...]}.
"""

from __future__ import annotations
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_pascal

from ..logic.expression import FALSE, TRUE, Literal, parse_operand
from ..logic.normalizer import (
    SENTINEL_FALSE_CLAUSE,
    LogicHandling,
    LogicObjectDefinition,
    StatefulClause,
)
from .classifier import NullClassifier, StateModifierClassifier


class WorldDocument(BaseModel):
    """Base for all world documents."""
    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        frozen=True,
    )


# =============================================================================
# Clauses
# =============================================================================

class ClauseModel(WorldDocument):
    """
    One clause as written to documents.

    The state provider names the region the clause is evaluated from.
    Conditions and state modifiers are operand tokens.
    """
    state_provider: Optional[str] = None
    conditions: tuple[str, ...] = ()
    state_modifiers: tuple[str, ...] = ()

    @classmethod
    def from_clause(
        cls,
        clause: StatefulClause,
        classifier: StateModifierClassifier | None = None,
        rename: Callable[[str], str] | None = None,
    ) -> ClauseModel:
        classifier = classifier or NullClassifier()
        conditions, modifiers = classifier.split(clause.conditions)
        provider = clause.state_provider
        if provider is not None and rename is not None:
            provider = rename(provider)
        return cls(
            state_provider=provider,
            conditions=tuple(str(op) for op in conditions),
            state_modifiers=tuple(str(op) for op in modifiers),
        )

    def to_clause(self) -> StatefulClause:
        operands = []
        state_terms = []
        if self.state_provider:
            operands.append(Literal(self.state_provider))
            state_terms.append(self.state_provider)
        for token in self.conditions + self.state_modifiers:
            operand = parse_operand(token)
            if operand == TRUE or operand in operands:
                continue
            if operand == FALSE:
                return SENTINEL_FALSE_CLAUSE
            operands.append(operand)
        return StatefulClause(operands=tuple(operands), state_terms=tuple(state_terms))


def clauses_to_models(
    clauses,
    classifier: StateModifierClassifier | None = None,
    rename: Callable[[str], str] | None = None,
) -> tuple[ClauseModel, ...]:
    return tuple(ClauseModel.from_clause(c, classifier, rename) for c in clauses)


# =============================================================================
# Input: normalized logic objects
# =============================================================================

class LogicObjectModel(WorldDocument):
    name: str
    clauses: tuple[ClauseModel, ...] = ()
    handling: LogicHandling = LogicHandling.DEFAULT

    @classmethod
    def from_definition(cls, definition: LogicObjectDefinition) -> LogicObjectModel:
        return cls(
            name=definition.name,
            clauses=clauses_to_models(definition.clauses),
            handling=definition.handling,
        )

    def to_definition(self) -> LogicObjectDefinition:
        """Rebuild the definition, restoring clause hygiene."""
        clauses: list[StatefulClause] = []
        for model in self.clauses:
            clause = model.to_clause()
            if clause.is_sentinel or clause in clauses:
                continue
            if clause.is_trivially_true:
                clauses = [clause]
                break
            clauses.append(clause)
        if not clauses:
            clauses = [SENTINEL_FALSE_CLAUSE]
        return LogicObjectDefinition(
            name=self.name,
            clauses=tuple(clauses),
            handling=self.handling,
        )


class StringWorldDefinition(WorldDocument):
    """A world as a flat list of normalized logic objects."""
    logic_objects: tuple[LogicObjectModel, ...] = ()

    @classmethod
    def from_definitions(cls, definitions) -> StringWorldDefinition:
        return cls(
            logic_objects=tuple(LogicObjectModel.from_definition(d) for d in definitions)
        )

    def to_definitions(self) -> list[LogicObjectDefinition]:
        return [obj.to_definition() for obj in self.logic_objects]


# =============================================================================
# Output: region graph
# =============================================================================

class RegionModel(WorldDocument):
    name: str
    entry_requirement: Optional[tuple[ClauseModel, ...]] = None
    locations: tuple[str, ...] = ()
    outgoing_transitions: tuple[str, ...] = ()
    incoming_transitions: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.locations and not self.outgoing_transitions and not self.incoming_transitions


class TransitionModel(WorldDocument):
    name: str
    source: str
    target: str
    requirement: tuple[ClauseModel, ...] = ()


class LocationModel(WorldDocument):
    name: str
    region: str
    requirement: tuple[ClauseModel, ...] = ()


class GraphWorldDefinition(WorldDocument):
    """Finalized region graph. Every sequence is in first-seen order."""
    regions: tuple[RegionModel, ...] = ()
    transitions: tuple[TransitionModel, ...] = ()
    locations: tuple[LocationModel, ...] = ()

    def get_region(self, name: str) -> RegionModel | None:
        for region in self.regions:
            if region.name == name:
                return region
        return None

    def get_transition(self, source: str, target: str) -> TransitionModel | None:
        for transition in self.transitions:
            if transition.source == source and transition.target == target:
                return transition
        return None

    def get_location(self, name: str) -> LocationModel | None:
        for location in self.locations:
            if location.name == name:
                return location
        return None

    @property
    def empty_region_count(self) -> int:
        return sum(1 for r in self.regions if r.is_empty)
