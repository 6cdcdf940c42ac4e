"""
Region Graph Builder - Builds the region graph from normalized logic objects.

The builder is a phase machine. Phases run strictly in order and cannot
be re-entered:

    WAYPOINTS -> TRANSITIONS -> LOCATIONS -> REBASED -> FINALIZED

Endpoint contract:
- A clause's anchor (state provider) is its first non-negated literal
  naming a State term. It names the region the clause is evaluated from.
- A Default or Transition object named N defines region N, with its
  clauses as entry requirement. Each anchored clause becomes an edge
  anchor -> N requiring the rest of the clause.
- Unanchored clauses leave a Default region as a root. For Transition
  objects they become edges from the start region, Menu. Unanchored
  locations live in Menu. Menu is created on first use.
- Anchors naming regions that do not exist yet become placeholders
  (entry requirement None) until their own object arrives.

Regions with equal entry requirements are merged by a canonical hash of
their clause set, with state providers resolved through merge aliases;
the name registered first wins. Keys are recomputed after each merge.
Regions live in an arena keyed by name and edges only hold names, so
merging and renaming just redirect names.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable
import logging

from ..logic.errors import (
    DuplicateLogicObjectError,
    PhaseOrderError,
    RebaseError,
    UndefinedLogicObjectError,
)
from ..logic.normalizer import (
    LogicHandling,
    LogicObjectDefinition,
    StatefulClause,
    canonical_hash,
)
from .classifier import StateCallClassifier, StateModifierClassifier
from .models import (
    GraphWorldDefinition,
    LocationModel,
    RegionModel,
    TransitionModel,
    clauses_to_models,
)

logger = logging.getLogger(__name__)

MENU = "Menu"


class BuildPhase(Enum):
    """Builder phases, in execution order."""
    WAYPOINTS = "waypoints"
    TRANSITIONS = "transitions"
    LOCATIONS = "locations"
    REBASED = "rebased"
    FINALIZED = "finalized"


_PHASE_ORDER = list(BuildPhase)

HANDLING_PHASES = {
    LogicHandling.DEFAULT: BuildPhase.WAYPOINTS,
    LogicHandling.TRANSITION: BuildPhase.TRANSITIONS,
    LogicHandling.LOCATION: BuildPhase.LOCATIONS,
}


def phase_rank(obj: LogicObjectDefinition) -> int:
    """Sort key putting logic objects in builder phase order."""
    return _PHASE_ORDER.index(HANDLING_PHASES[obj.handling])


@dataclass
class Region:
    """A region in the builder arena. entry_requirement None marks a placeholder."""
    name: str
    entry_requirement: list[StatefulClause] | None = None
    locations: list[str] = field(default_factory=list)

    @property
    def is_placeholder(self) -> bool:
        return self.entry_requirement is None


@dataclass
class Transition:
    """A directed edge between two regions, keyed by (source, target)."""
    source: str
    target: str
    requirement: list[StatefulClause] = field(default_factory=list)

    @property
    def name(self) -> str:
        return f"{self.source} -> {self.target}"

    def add_requirement(self, clause: StatefulClause):
        if clause not in self.requirement:
            self.requirement.append(clause)


@dataclass
class Location:
    """A leaf attached to one region."""
    name: str
    region: str
    requirement: list[StatefulClause] = field(default_factory=list)


@dataclass(frozen=True)
class GraphView:
    """Read-only topology snapshot for visualization."""
    nodes: tuple[str, ...]
    edges: tuple[tuple[str, str, str], ...]


class RegionGraphBuilder:
    """
    Incrementally builds, merges, rebases and prunes the region graph.

    Usage:
        builder = RegionGraphBuilder()
        for obj in sorted(objects, key=phase_rank):
            builder.add_or_update(obj)
        builder.label_region_as_menu("Start_State")
        world = builder.build(StateCallClassifier(), keep={"Dirtmouth"})

    Not safe for concurrent mutation.
    """

    def __init__(self):
        self.phase = BuildPhase.WAYPOINTS
        self._regions: dict[str, Region] = {}
        self._aliases: dict[str, str] = {}
        self._by_hash: dict[str, str] = {}
        self._transitions: dict[tuple[str, str], Transition] = {}
        self._locations: dict[str, Location] = {}
        self._object_names: set[str] = set()
        self.pruned_regions: list[str] = []

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def resolve(self, name: str) -> str:
        """Follow merge and rename aliases to the current region name."""
        while name in self._aliases:
            name = self._aliases[name]
        return name

    @property
    def regions(self) -> list[Region]:
        return list(self._regions.values())

    @property
    def transitions(self) -> list[Transition]:
        return list(self._transitions.values())

    @property
    def locations(self) -> list[Location]:
        return list(self._locations.values())

    def get_region(self, name: str) -> Region | None:
        return self._regions.get(self.resolve(name))

    def get_transition(self, source: str, target: str) -> Transition | None:
        return self._transitions.get((self.resolve(source), self.resolve(target)))

    # -------------------------------------------------------------------------
    # Adding logic objects
    # -------------------------------------------------------------------------

    def add_or_update(self, obj: LogicObjectDefinition):
        """Add one logic object in the phase its handling belongs to."""
        self._advance_to(HANDLING_PHASES[obj.handling])
        if obj.name in self._object_names:
            raise DuplicateLogicObjectError(obj.name)
        self._object_names.add(obj.name)

        if obj.handling == LogicHandling.LOCATION:
            self._add_location(obj)
        else:
            self._add_region_object(obj, from_menu=obj.handling == LogicHandling.TRANSITION)

    def add_all(self, objects: Iterable[LogicObjectDefinition]):
        for obj in objects:
            self.add_or_update(obj)

    def _advance_to(self, phase: BuildPhase):
        current = _PHASE_ORDER.index(self.phase)
        wanted = _PHASE_ORDER.index(phase)
        if wanted < current or self.phase in (BuildPhase.REBASED, BuildPhase.FINALIZED):
            raise PhaseOrderError(
                f"Cannot add {phase.value} objects during the {self.phase.value} phase"
            )
        if wanted > current:
            logger.info("Region graph builder entering %s phase", phase.value)
            self.phase = phase

    def _add_region_object(self, obj: LogicObjectDefinition, from_menu: bool):
        name = self._ensure_region(obj.name)
        region = self._regions[name]
        region.entry_requirement = list(obj.clauses)

        merge_into = None
        if not obj.is_unreachable:
            key = canonical_hash(obj.clauses, self.resolve)
            existing = self._by_hash.get(key)
            if existing is not None and self.resolve(existing) != name:
                merge_into = self.resolve(existing)
            else:
                self._by_hash[key] = name

        for clause in obj.clauses:
            if clause.is_sentinel:
                continue
            provider = clause.state_provider
            if provider is not None:
                self._add_edge(provider, name, clause.without_provider())
            elif from_menu:
                self._add_edge(MENU, name, clause)

        if merge_into is not None:
            self._merge(name, merge_into)

    def _add_location(self, obj: LogicObjectDefinition):
        owner = None
        for clause in obj.clauses:
            if clause.state_provider is not None:
                owner = self.resolve(clause.state_provider)
                if owner not in self._regions:
                    raise UndefinedLogicObjectError(clause.state_provider)
                break
        if owner is None:
            owner = self._ensure_region(MENU)

        requirement: list[StatefulClause] = []
        for clause in obj.clauses:
            provider = clause.state_provider
            if provider is not None and self.resolve(provider) == owner:
                clause = clause.without_provider()
            if clause not in requirement:
                requirement.append(clause)

        self._locations[obj.name] = Location(name=obj.name, region=owner, requirement=requirement)
        self._regions[owner].locations.append(obj.name)

    def _ensure_region(self, name: str) -> str:
        resolved = self.resolve(name)
        if resolved not in self._regions:
            self._regions[resolved] = Region(name=resolved)
        return resolved

    def _add_edge(self, source: str, target: str, requirement: StatefulClause):
        source = self._ensure_region(source)
        target = self.resolve(target)
        if source == target:
            return
        transition = self._transitions.get((source, target))
        if transition is None:
            transition = Transition(source=source, target=target)
            self._transitions[(source, target)] = transition
        transition.add_requirement(requirement)

    # -------------------------------------------------------------------------
    # Merging and renaming
    # -------------------------------------------------------------------------

    def _merge(self, old: str, into: str):
        """Fold region `old` into region `into`, which keeps its position."""
        old_region = self._regions.pop(old)
        target = self._regions[into]
        if target.entry_requirement is None:
            target.entry_requirement = old_region.entry_requirement
        for location_name in old_region.locations:
            self._locations[location_name].region = into
            target.locations.append(location_name)

        self._aliases[old] = into
        self._redirect(old, into)
        logger.debug("Merged region %s into %s", old, into)

    def _rename(self, old: str, new: str):
        """Rename region `old` in place, or merge it into an existing `new`."""
        if new in self._regions:
            self._merge(old, new)
            return
        self._regions = {
            (new if name == old else name): region
            for name, region in self._regions.items()
        }
        region = self._regions[new]
        region.name = new
        for location_name in region.locations:
            self._locations[location_name].region = new
        self._aliases[old] = new
        self._redirect(old, new)
        logger.debug("Renamed region %s to %s", old, new)

    def _redirect(self, old: str, new: str):
        redirected: dict[tuple[str, str], Transition] = {}
        for transition in self._transitions.values():
            if transition.source == old:
                transition.source = new
            if transition.target == old:
                transition.target = new
            if transition.source == transition.target:
                continue
            key = (transition.source, transition.target)
            if key in redirected:
                for clause in transition.requirement:
                    redirected[key].add_requirement(clause)
            else:
                redirected[key] = transition
        self._transitions = redirected
        self._rehash()

    def _rehash(self):
        """
        Recompute merge keys under the current aliases.

        A rename can make two existing entry requirements equal; the later
        region is then merged into the earlier one.
        """
        rebuilt: dict[str, str] = {}
        collision = None
        for name in self._by_hash.values():
            name = self.resolve(name)
            region = self._regions.get(name)
            if region is None or region.entry_requirement is None:
                continue
            key = canonical_hash(region.entry_requirement, self.resolve)
            existing = rebuilt.setdefault(key, name)
            if existing != name and collision is None:
                collision = (name, existing)
        self._by_hash = rebuilt
        if collision is not None:
            self._merge(*collision)

    # -------------------------------------------------------------------------
    # Rebase
    # -------------------------------------------------------------------------

    def label_region_as_menu(self, start_term: str):
        """
        Rebase the start region onto Menu.

        The start region is the first region entered by holding exactly
        start_term, or else the region named start_term if it is
        unconditionally reachable.
        """
        if self.phase in (BuildPhase.REBASED, BuildPhase.FINALIZED):
            raise PhaseOrderError(f"Cannot rebase during the {self.phase.value} phase")

        match = None
        for region in self._regions.values():
            entry = region.entry_requirement
            if entry is not None and len(entry) == 1 and entry[0].canonical_key() == (start_term,):
                match = region.name
                break
        if match is None:
            region = self.get_region(start_term)
            entry = region.entry_requirement if region else None
            if entry is not None and len(entry) == 1 and entry[0].is_trivially_true:
                match = region.name
        if match is None:
            raise RebaseError(start_term)

        logger.info("Rebasing start region %s onto %s", match, MENU)
        if match != MENU:
            self._rename(match, MENU)
        self.phase = BuildPhase.REBASED

    # -------------------------------------------------------------------------
    # Finalization
    # -------------------------------------------------------------------------

    def build(
        self,
        classifier: StateModifierClassifier | None = None,
        keep: Iterable[str] | None = None,
    ) -> GraphWorldDefinition:
        """
        Classify clauses, prune empty regions and emit the final graph.

        Regions with no locations and no transitions are dropped unless
        kept explicitly or named Menu. Runs once.
        """
        if self.phase == BuildPhase.FINALIZED:
            raise PhaseOrderError("Region graph has already been built")
        classifier = classifier or StateCallClassifier()
        keep_names = {self.resolve(name) for name in keep or ()}

        outgoing: dict[str, list[str]] = {name: [] for name in self._regions}
        incoming: dict[str, list[str]] = {name: [] for name in self._regions}
        for transition in self._transitions.values():
            outgoing[transition.source].append(transition.name)
            incoming[transition.target].append(transition.name)

        regions = []
        pruned = []
        for name, region in self._regions.items():
            empty = not region.locations and not outgoing[name] and not incoming[name]
            if empty and name not in keep_names and name != MENU:
                pruned.append(name)
                continue
            entry = None
            if region.entry_requirement is not None:
                entry = clauses_to_models(region.entry_requirement, classifier, self.resolve)
            regions.append(RegionModel(
                name=name,
                entry_requirement=entry,
                locations=tuple(region.locations),
                outgoing_transitions=tuple(outgoing[name]),
                incoming_transitions=tuple(incoming[name]),
            ))

        transitions = [
            TransitionModel(
                name=t.name,
                source=t.source,
                target=t.target,
                requirement=clauses_to_models(t.requirement, classifier, self.resolve),
            )
            for t in self._transitions.values()
        ]
        locations = [
            LocationModel(
                name=loc.name,
                region=loc.region,
                requirement=clauses_to_models(loc.requirement, classifier, self.resolve),
            )
            for loc in self._locations.values()
        ]

        world = GraphWorldDefinition(
            regions=tuple(regions),
            transitions=tuple(transitions),
            locations=tuple(locations),
        )
        self.pruned_regions = pruned
        self.phase = BuildPhase.FINALIZED
        for name in pruned:
            logger.debug("Pruned empty region %s", name)
        logger.info(
            "Built region graph with %d regions (%d pruned), %d transitions, %d locations",
            len(regions), len(pruned), len(transitions), len(locations),
        )
        return world

    def build_visualization(self) -> GraphView:
        """
        Current topology as nodes and labelled edges. Does not mutate.

        After build, pruned regions are left out.
        """
        pruned = set(self.pruned_regions)
        edges = tuple(
            (t.source, t.target, " | ".join(str(c) for c in t.requirement))
            for t in self._transitions.values()
        )
        nodes = tuple(name for name in self._regions if name not in pruned)
        return GraphView(nodes=nodes, edges=edges)
