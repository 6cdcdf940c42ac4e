"""
World Sources - The three ways to obtain normalized logic objects.

Every source works in two steps so the driver can stop between them:
1. load(): read and materialize the input
2. to_definitions(): preprocess and normalize into LogicObjectDefinitions

All sources produce the same list[LogicObjectDefinition] contract.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
import logging

from pydantic import ValidationError

from ..config import ExtractorOptions
from ..graph.models import StringWorldDefinition
from ..logic.errors import WorldDefinitionError
from ..logic.normalizer import DNFNormalizer, LogicHandling, LogicObjectDefinition
from ..logic.preprocessor import LogicPreprocessor
from ..logic.terms import TermRegistry
from ..logic.variables import ResolverStrategy, create_resolver
from .loader import RawLogicData, RawLogicLoader, read_json
from .snapshot import LogicManagerSnapshot, load_saved_context, snapshot_to_definitions

logger = logging.getLogger(__name__)


class WorldSource(ABC):
    """A source of normalized logic objects."""

    description: str = "world source"

    @abstractmethod
    def load(self):
        """Read the input. Must finish before to_definitions()."""
        ...

    @abstractmethod
    def to_definitions(self) -> list[LogicObjectDefinition]:
        ...


class WorldDefinitionSource(WorldSource):
    """A world definition document of already-normalized logic objects."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.description = f"world definition file at {self.path}"
        self.document: StringWorldDefinition | None = None

    def load(self):
        raw = read_json(self.path)
        if raw is None:
            raise WorldDefinitionError("Got null value deserializing world definition")
        try:
            self.document = StringWorldDefinition.model_validate(raw)
        except ValidationError as e:
            raise WorldDefinitionError(f"Invalid world definition: {e}") from e

    def to_definitions(self) -> list[LogicObjectDefinition]:
        if self.document is None:
            raise WorldDefinitionError("World definition was not loaded")
        return self.document.to_definitions()


class SnapshotSource(WorldSource):
    """A saved logic-manager snapshot."""

    def __init__(self, path: str | Path, strategy: ResolverStrategy = ResolverStrategy.DUMMY):
        self.path = Path(path)
        self.strategy = strategy
        self.description = f"saved context at {self.path}"
        self.snapshot: LogicManagerSnapshot | None = None

    def load(self):
        self.snapshot = load_saved_context(self.path, self.strategy)

    def to_definitions(self) -> list[LogicObjectDefinition]:
        if self.snapshot is None:
            raise WorldDefinitionError("Saved context was not loaded")
        return snapshot_to_definitions(self.snapshot)


class RawLogicSource(WorldSource):
    """Raw term, macro and logic files, preprocessed here."""

    def __init__(
        self,
        loader: RawLogicLoader,
        strategy: ResolverStrategy = ResolverStrategy.DUMMY,
        ref_name: str | None = None,
    ):
        self.loader = loader
        self.strategy = strategy
        self.description = f"raw logic ref {ref_name}" if ref_name else f"raw logic at {loader.logic_dir}"
        self.data: RawLogicData | None = None

    def load(self):
        self.data = self.loader.load()

    def build_preprocessor(self) -> LogicPreprocessor:
        if self.data is None:
            raise WorldDefinitionError("Raw logic was not loaded")
        data = self.data
        preprocessor = LogicPreprocessor(
            terms=TermRegistry.from_mapping(data.terms),
            variable_resolver=create_resolver(self.strategy),
        )
        preprocessor.set_macros(data.macros)
        for waypoint in data.waypoints:
            preprocessor.add_waypoint(waypoint)
        for transition in data.transitions:
            preprocessor.add_transition(transition)
        for location in data.locations:
            preprocessor.add_logic_def(location)
        return preprocessor

    def to_definitions(self) -> list[LogicObjectDefinition]:
        logger.info("Preparing logic preprocessor")
        preprocessor = self.build_preprocessor()
        normalizer = DNFNormalizer(terms=preprocessor.terms)

        def normalized(name: str, handling: LogicHandling) -> LogicObjectDefinition:
            clauses = normalizer.normalize(name, preprocessor.compile(name))
            return LogicObjectDefinition(name=name, clauses=tuple(clauses), handling=handling)

        objects = []
        # waypoints go first: their names win when regions merge
        for waypoint in preprocessor.waypoints:
            handling = LogicHandling.LOCATION if waypoint.stateless else LogicHandling.DEFAULT
            objects.append(normalized(waypoint.name, handling))
        for transition in preprocessor.transitions:
            objects.append(normalized(transition.name, LogicHandling.TRANSITION))
        for location in preprocessor.locations:
            objects.append(normalized(location.name, LogicHandling.LOCATION))
        return objects


def select_source(options: ExtractorOptions) -> WorldSource:
    """Pick the single world source the options describe."""
    if options.world_definition_path is not None:
        return WorldDefinitionSource(options.world_definition_path)
    if options.rando_context_path is not None:
        return SnapshotSource(options.rando_context_path, options.variable_resolver)
    if options.raw_logic_dir is None:
        raise WorldDefinitionError(
            "No world source configured: set a world definition, a saved context or a raw logic directory"
        )
    loader = RawLogicLoader(
        options.raw_logic_dir,
        ref_name=options.ref_name,
        max_workers=options.max_workers,
    )
    return RawLogicSource(loader, options.variable_resolver, ref_name=options.ref_name)
