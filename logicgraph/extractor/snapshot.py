"""
Logic Manager Snapshots - Loads logic from a saved randomizer context.

A saved context holds a serialized logic manager under "LM". Its
variable resolver is stored as a type tag naming a class from the
program that saved it, which cannot be reconstructed here. Before
validation the tag is overwritten with the tag of the configured
resolver strategy; only tags from that closed set are accepted.

Snapshot layout:
    {"LM": {
        "VariableResolver": {"$type": "..."},
        "Terms": {"Bool": [...], "Counter": [...], "State": [...]},
        "Macros": {"NAME": "logic"},
        "StateModifiers": ["BENCHRESET", ...],
        "Waypoints": [{"Name": "Town"}],
        "Transitions": ["Town[left1]"],
        "Logic": [{"Name": "...", "Logic": "...", "DNF": [["Town", "Dash"]]}]
    }}
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Optional
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_pascal

from ..logic.errors import WorldDefinitionError
from ..logic.normalizer import DNFNormalizer, LogicHandling, LogicObjectDefinition
from ..logic.preprocessor import LogicPreprocessor
from ..logic.terms import TermRegistry
from ..logic.variables import RESOLVER_TYPE_TAGS, ResolverStrategy, create_resolver
from .loader import read_json

logger = logging.getLogger(__name__)


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)


class ResolverTag(_SnapshotModel):
    type_tag: str = Field(alias="$type")

    @field_validator("type_tag")
    @classmethod
    def _known_tag(cls, value: str) -> str:
        if value not in RESOLVER_TYPE_TAGS.values():
            raise ValueError(f"Unsupported variable resolver '{value}'")
        return value

    @property
    def strategy(self) -> ResolverStrategy:
        for strategy, tag in RESOLVER_TYPE_TAGS.items():
            if tag == self.type_tag:
                return strategy
        raise ValueError(self.type_tag)


class WaypointEntry(_SnapshotModel):
    name: str


class LogicEntry(_SnapshotModel):
    name: str
    logic: Optional[str] = None
    dnf: Optional[list[list[str]]] = Field(default=None, alias="DNF")


class LogicManagerSnapshot(_SnapshotModel):
    variable_resolver: ResolverTag
    terms: dict[str, list[str]] = Field(default_factory=dict)
    macros: dict[str, str] = Field(default_factory=dict)
    state_modifiers: list[str] = Field(default_factory=list)
    waypoints: list[WaypointEntry] = Field(default_factory=list)
    transitions: list[str] = Field(default_factory=list)
    logic: list[LogicEntry] = Field(default_factory=list)


class SavedContext(_SnapshotModel):
    lm: LogicManagerSnapshot = Field(alias="LM")


def apply_resolver_shim(document: Any, strategy: ResolverStrategy) -> Any:
    """Overwrite the saved variable resolver tag with the strategy's tag."""
    try:
        document["LM"]["VariableResolver"]["$type"] = RESOLVER_TYPE_TAGS[strategy]
    except (KeyError, TypeError):
        raise WorldDefinitionError(
            "Saved context has no LM.VariableResolver section"
        ) from None
    return document


def load_saved_context(
    path: str | Path,
    strategy: ResolverStrategy = ResolverStrategy.DUMMY,
) -> LogicManagerSnapshot:
    document = read_json(path)
    if document is None:
        raise WorldDefinitionError("Got null value deserializing saved context")

    apply_resolver_shim(document, strategy)
    try:
        return SavedContext.model_validate(document).lm
    except ValidationError as e:
        raise WorldDefinitionError(f"Invalid saved context: {e}") from e


def infer_handling(
    name: str,
    transitions: set[str],
    waypoints: set[str],
    terms: TermRegistry,
) -> LogicHandling:
    """
    Infer how a snapshot logic object takes part in the graph.

    Transitions are transitions; waypoints whose term is a State term are
    regions; stateless waypoints and everything else are locations.
    """
    if name in transitions:
        return LogicHandling.TRANSITION
    if name in waypoints and terms.is_state(name):
        return LogicHandling.DEFAULT
    return LogicHandling.LOCATION


def snapshot_to_definitions(snapshot: LogicManagerSnapshot) -> list[LogicObjectDefinition]:
    """Normalize every logic object of a snapshot."""
    terms = TermRegistry.from_mapping(snapshot.terms)
    resolver = create_resolver(snapshot.variable_resolver.strategy, snapshot.state_modifiers)
    preprocessor = LogicPreprocessor(terms=terms, variable_resolver=resolver)
    preprocessor.set_macros(snapshot.macros)
    normalizer = DNFNormalizer(terms=terms)

    transitions = set(snapshot.transitions)
    waypoints = {w.name for w in snapshot.waypoints}

    objects = []
    for entry in snapshot.logic:
        handling = infer_handling(entry.name, transitions, waypoints, terms)
        expression = None
        if entry.dnf is None and entry.logic is not None:
            expression = preprocessor.compile_text(entry.name, entry.logic)
        objects.append(normalizer.normalize_object(
            entry.name,
            handling,
            expression=expression,
            dnf=entry.dnf,
        ))
    logger.info("Loaded %d logic objects from saved context", len(objects))
    return objects
