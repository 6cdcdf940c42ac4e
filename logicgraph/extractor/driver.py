"""
Region Extractor - Runs the whole pipeline from world source to outputs.

Flow:
1. Skip unless region extraction is among the requested jobs
2. Select and load exactly one world source
3. Preprocess and normalize into logic objects
4. Build the region graph phase by phase, rebase onto Menu
5. Build the final graph, then write regions.json, region_data.py and
   regionGraph.dot

A cancellation event is checked at every phase boundary. Nothing is
written until build() has returned. Outputs are staged in a temporary
directory and published together, so any fatal error leaves no output.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import logging
import threading

from ..config import ExtractorOptions
from ..export.dot import write_dot
from ..export.json_writer import write_world_json
from ..export.pythonizer import Pythonizer
from ..graph.builder import HANDLING_PHASES, RegionGraphBuilder, phase_rank
from ..graph.classifier import StateCallClassifier, StateModifierClassifier
from ..graph.models import GraphWorldDefinition
from ..graph.validation import validate_world_definition
from ..logic.errors import ExtractionCancelled, WorldDefinitionError
from ..logic.normalizer import LogicObjectDefinition
from .loader import read_json
from .output import OutputManager
from .sources import select_source

logger = logging.getLogger(__name__)

OUTPUT_FILES = ("regions.json", "region_data.py", "regionGraph.dot")


@dataclass
class ExtractionReport:
    """What a successful run produced."""
    world: GraphWorldDefinition
    region_count: int
    empty_region_count: int
    location_count: int
    pruned_regions: list[str] = field(default_factory=list)
    outputs: list[Path] = field(default_factory=list)


def load_keep_set(path: str | Path | None) -> set[str] | None:
    """Load the JSON array of empty region names to keep."""
    if path is None:
        return None
    names = read_json(path)
    if names is None:
        raise WorldDefinitionError("Got null value deserializing regions to keep")
    return set(names)


def build_world(
    objects: list[LogicObjectDefinition],
    start_state_term: str | None = None,
    keep: set[str] | None = None,
    classifier: StateModifierClassifier | None = None,
    checkpoint=None,
) -> tuple[GraphWorldDefinition, RegionGraphBuilder]:
    """
    Feed logic objects through the builder and finalize the graph.

    Objects are stably sorted into phase order first. checkpoint(phase)
    is called before each builder phase and before finalization.
    """
    checkpoint = checkpoint or (lambda phase: None)
    builder = RegionGraphBuilder()
    current_phase = None
    for obj in sorted(objects, key=phase_rank):
        phase = HANDLING_PHASES[obj.handling]
        if phase != current_phase:
            checkpoint(f"{phase.value} phase")
            current_phase = phase
        builder.add_or_update(obj)

    if start_state_term is not None:
        checkpoint("rebase")
        logger.info("Rebasing start state from %s onto Menu", start_state_term)
        builder.label_region_as_menu(start_state_term)

    checkpoint("finalization")
    world = builder.build(classifier or StateCallClassifier(), keep)
    return world, builder


class RegionExtractor:
    """
    Region extraction job.

    Usage:
        options = ExtractorOptions(world_definition_path="world.json")
        report = RegionExtractor(options).run()
    """

    def __init__(
        self,
        options: ExtractorOptions,
        classifier: StateModifierClassifier | None = None,
        output_manager: OutputManager | None = None,
    ):
        self.options = options
        self.classifier = classifier or StateCallClassifier()
        self.output_manager = output_manager or OutputManager(options.output_dir)
        self.pythonizer = Pythonizer()

    def run(self, cancel_event: threading.Event | None = None) -> ExtractionReport | None:
        """Run the job. Returns None when region extraction was not requested."""
        def checkpoint(phase: str):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Cancellation requested before %s", phase)
                raise ExtractionCancelled(phase)

        logger.info("Validating options")
        if not self.options.job_requested:
            logger.info("Job not requested, skipping")
            return None

        logger.info("Beginning region extraction")
        checkpoint("source selection")
        source = select_source(self.options)
        logger.info("Loading world from %s", source.description)
        source.load()

        checkpoint("preprocessing")
        objects = source.to_definitions()
        validation = validate_world_definition(objects)
        for warning in validation.warnings:
            logger.warning(warning)
        validation.raise_for_errors()

        keep = load_keep_set(self.options.empty_regions_to_keep_path)

        logger.info("Creating initial region graph")
        world, builder = build_world(
            objects,
            start_state_term=self.options.start_state_term,
            keep=keep,
            classifier=self.classifier,
            checkpoint=checkpoint,
        )

        logger.info("Beginning final output")
        view = builder.build_visualization()
        manager = self.output_manager
        with manager.staged():
            with manager.create_output_file_text("regions.json") as f:
                write_world_json(world, f)
            with manager.create_output_file_text("region_data.py") as f:
                self.pythonizer.write(world, f)
            with manager.create_output_file_text("regionGraph.dot") as f:
                write_dot(view, f)
        outputs = [manager.path_for(name) for name in OUTPUT_FILES]

        report = ExtractionReport(
            world=world,
            region_count=len(world.regions),
            empty_region_count=world.empty_region_count,
            location_count=len(world.locations),
            pruned_regions=list(builder.pruned_regions),
            outputs=outputs,
        )
        logger.info(
            "Successfully exported %d regions (%d empty) and %d locations",
            report.region_count,
            report.empty_region_count,
            report.location_count,
        )
        return report
