"""
Tests for the pipeline driver.

Tests:
- Options and the job gate
- Full runs producing the three outputs
- Cancellation at phase boundaries
- No partial output on fatal errors or failed writes
"""

import json
import threading

import pytest
from pydantic import ValidationError

from ..config import ExtractorOptions, JobType
from ..export.pythonizer import Pythonizer
from ..extractor.driver import OUTPUT_FILES, RegionExtractor, build_world, load_keep_set
from ..extractor.output import OutputManager
from ..graph.models import StringWorldDefinition
from ..logic.errors import ExtractionCancelled, RebaseError, WorldDefinitionError
from ..logic.normalizer import LogicHandling
from ..logic.variables import ResolverStrategy


class CountdownEvent(threading.Event):
    """An event that reports set after a number of checks."""

    def __init__(self, checks_before_set: int):
        super().__init__()
        self.remaining = checks_before_set

    def is_set(self) -> bool:
        if self.remaining <= 0:
            return True
        self.remaining -= 1
        return False


@pytest.fixture
def world_path(tmp_path, e2e_objects):
    """The end-to-end world written as a world definition."""
    path = tmp_path / "world.json"
    path.write_text(StringWorldDefinition.from_definitions(e2e_objects).model_dump_json(by_alias=True))
    return path


class TestOptions:
    """Tests for ExtractorOptions."""

    def test_sources_mutually_exclusive(self, tmp_path):
        """A world definition and a saved context cannot both be given."""
        with pytest.raises(ValidationError):
            ExtractorOptions(world_definition_path=tmp_path / "a", rando_context_path=tmp_path / "b")

    def test_job_gate(self):
        """No jobs or ExtractRegions means region extraction runs."""
        assert ExtractorOptions().job_requested
        assert ExtractorOptions(jobs=["ExtractRegions", "ExtractItems"]).job_requested
        assert not ExtractorOptions(jobs=[JobType.EXTRACT_ITEMS]).job_requested

    def test_from_env(self, monkeypatch, tmp_path):
        """Environment variables fill options; explicit values win."""
        monkeypatch.setenv("LOGICGRAPH_RAW_LOGIC_DIR", str(tmp_path))
        monkeypatch.setenv("LOGICGRAPH_JOBS", "ExtractItems, ExtractRegions")
        monkeypatch.setenv("LOGICGRAPH_VARIABLE_RESOLVER", "strict")
        monkeypatch.setenv("LOGICGRAPH_START_STATE_TERM", "Start")

        options = ExtractorOptions.from_env(start_state_term="Menu_Start", ref_name=None)

        assert options.raw_logic_dir == tmp_path
        assert options.jobs == [JobType.EXTRACT_ITEMS, JobType.EXTRACT_REGIONS]
        assert options.variable_resolver == ResolverStrategy.STRICT
        assert options.start_state_term == "Menu_Start"
        assert options.ref_name is None

    def test_unknown_job(self):
        """Jobs outside the closed set are rejected."""
        with pytest.raises(ValidationError):
            ExtractorOptions(jobs=["ExtractEverything"])


class TestKeepSet:
    """Tests for load_keep_set."""

    def test_load(self, tmp_path):
        path = tmp_path / "keep.json"
        path.write_text(json.dumps(["Orphan", "Other"]))
        assert load_keep_set(path) == {"Orphan", "Other"}

    def test_none(self):
        assert load_keep_set(None) is None

    def test_null(self, tmp_path):
        """A null keep-set document is rejected."""
        path = tmp_path / "keep.json"
        path.write_text("null")
        with pytest.raises(WorldDefinitionError):
            load_keep_set(path)


class TestBuildWorld:
    """Tests for build_world."""

    def test_sorts_objects_into_phases(self, e2e_objects):
        """Objects in any order are fed in phase order."""
        world, builder = build_world(list(reversed(e2e_objects)))
        assert [r.name for r in world.regions] == ["A", "B"]
        assert builder.pruned_regions == []

    def test_checkpoints(self, e2e_objects, make_object):
        """checkpoint is called before each phase, rebase and finalization."""
        phases = []
        objects = [make_object("Start", "TRUE")] + e2e_objects
        build_world(objects, start_state_term="Start", checkpoint=phases.append)

        assert phases == [
            "waypoints phase",
            "transitions phase",
            "locations phase",
            "rebase",
            "finalization",
        ]


class TestRegionExtractor:
    """Tests for RegionExtractor.run."""

    def test_run(self, tmp_path, world_path, caplog):
        """A full run writes all three outputs and logs the summary."""
        output_dir = tmp_path / "out"
        options = ExtractorOptions(world_definition_path=world_path, output_dir=output_dir)

        with caplog.at_level("INFO"):
            report = RegionExtractor(options).run()

        assert report.region_count == 2
        assert report.empty_region_count == 0
        assert report.location_count == 1
        assert [p.name for p in report.outputs] == list(OUTPUT_FILES)
        for name in OUTPUT_FILES:
            assert (output_dir / name).exists()
        regions = json.loads((output_dir / "regions.json").read_text())
        assert [r["Name"] for r in regions["Regions"]] == ["A", "B"]
        assert (output_dir / "regionGraph.dot").read_text().startswith("digraph RegionGraph {")
        assert "regions = " in (output_dir / "region_data.py").read_text()
        assert "Successfully exported 2 regions (0 empty) and 1 locations" in caplog.text

    def test_job_not_requested(self, tmp_path, world_path):
        """Without ExtractRegions in jobs nothing runs."""
        output_dir = tmp_path / "out"
        options = ExtractorOptions(
            world_definition_path=world_path,
            output_dir=output_dir,
            jobs=[JobType.EXTRACT_LOCATIONS],
        )

        assert RegionExtractor(options).run() is None
        assert not output_dir.exists()

    def test_keep_set(self, tmp_path, make_object, e2e_objects):
        """Regions in the keep-set file survive pruning."""
        world_path = tmp_path / "world.json"
        objects = [make_object("Orphan", "Dash")] + e2e_objects
        world_path.write_text(StringWorldDefinition.from_definitions(objects).model_dump_json(by_alias=True))
        keep_path = tmp_path / "keep.json"
        keep_path.write_text(json.dumps(["Orphan"]))

        options = ExtractorOptions(
            world_definition_path=world_path,
            empty_regions_to_keep_path=keep_path,
            output_dir=tmp_path / "out",
        )
        report = RegionExtractor(options).run()

        assert report.region_count == 3
        assert report.empty_region_count == 1
        assert report.pruned_regions == []

    def test_raw_logic_run(self, tmp_path, raw_logic_dir):
        """Raw logic runs through preprocessing and rebasing."""
        options = ExtractorOptions(
            raw_logic_dir=raw_logic_dir,
            start_state_term="Start",
            output_dir=tmp_path / "out",
        )
        report = RegionExtractor(options).run()

        assert [r.name for r in report.world.regions] == ["Start", "Menu", "Crossroads"]
        assert report.location_count == 3

    def test_cancel_before_start(self, tmp_path, world_path):
        """A set cancellation event stops the run before anything is read."""
        output_dir = tmp_path / "out"
        options = ExtractorOptions(world_definition_path=world_path, output_dir=output_dir)
        event = threading.Event()
        event.set()

        with pytest.raises(ExtractionCancelled) as exc_info:
            RegionExtractor(options).run(cancel_event=event)
        assert exc_info.value.phase == "source selection"
        assert not output_dir.exists()

    def test_cancel_between_phases(self, tmp_path, world_path):
        """Cancellation between builder phases leaves no output."""
        output_dir = tmp_path / "out"
        options = ExtractorOptions(world_definition_path=world_path, output_dir=output_dir)

        with pytest.raises(ExtractionCancelled) as exc_info:
            RegionExtractor(options).run(cancel_event=CountdownEvent(3))
        assert exc_info.value.phase == "transitions phase"
        assert not output_dir.exists()

    def test_cancel_before_finalization(self, tmp_path, world_path):
        """Cancellation just before build still leaves no output."""
        output_dir = tmp_path / "out"
        options = ExtractorOptions(world_definition_path=world_path, output_dir=output_dir)

        with pytest.raises(ExtractionCancelled) as exc_info:
            RegionExtractor(options).run(cancel_event=CountdownEvent(5))
        assert exc_info.value.phase == "finalization"
        assert not output_dir.exists()

    def test_rebase_failure_writes_nothing(self, tmp_path, world_path):
        """A fatal error during building leaves no output."""
        output_dir = tmp_path / "out"
        options = ExtractorOptions(
            world_definition_path=world_path,
            start_state_term="Nowhere",
            output_dir=output_dir,
        )

        with pytest.raises(RebaseError):
            RegionExtractor(options).run()
        assert not output_dir.exists()

    def test_invalid_world_writes_nothing(self, tmp_path, make_object):
        """Validation errors stop the run before building."""
        world_path = tmp_path / "world.json"
        objects = [make_object("Shop", "Town + Dash", LogicHandling.LOCATION)]
        world_path.write_text(StringWorldDefinition.from_definitions(objects).model_dump_json(by_alias=True))
        output_dir = tmp_path / "out"

        with pytest.raises(WorldDefinitionError) as exc_info:
            RegionExtractor(ExtractorOptions(world_definition_path=world_path, output_dir=output_dir)).run()
        assert exc_info.value.errors
        assert not output_dir.exists()


class TestOutputManager:
    """Tests for OutputManager."""

    def test_directory_created_on_write(self, tmp_path):
        """The output directory does not exist until the first write."""
        manager = OutputManager(tmp_path / "out")
        assert not manager.output_dir.exists()

        path = manager.write_text("regions.json", "{}")
        assert path.read_text() == "{}"
        assert manager.written == [path]

    def test_staged_writes_published_together(self, tmp_path):
        """Staged files appear in the output directory only after the block."""
        manager = OutputManager(tmp_path / "out")
        with manager.staged():
            manager.write_text("regions.json", "{}")
            assert not manager.output_dir.exists()

        assert (tmp_path / "out" / "regions.json").read_text() == "{}"
        assert [p.name for p in tmp_path.iterdir()] == ["out"]

    def test_staged_failure_leaves_existing_output(self, tmp_path):
        """A failure while staging keeps the previous outputs untouched."""
        output_dir = tmp_path / "out"
        output_dir.mkdir()
        (output_dir / "regions.json").write_text("old")
        manager = OutputManager(output_dir)

        with pytest.raises(OSError):
            with manager.staged():
                manager.write_text("regions.json", "new")
                raise OSError("disk full")

        assert (output_dir / "regions.json").read_text() == "old"
        assert [p.name for p in tmp_path.iterdir()] == ["out"]
        assert manager.written == []


class FailingPythonizer(Pythonizer):
    """A pythonizer whose write fails after regions.json is written."""

    def write(self, world, stream):
        raise OSError("disk full")


class TestPartialOutput:
    """A failure while writing outputs publishes none of them."""

    def test_no_output_directory(self, tmp_path, world_path):
        output_dir = tmp_path / "out"
        extractor = RegionExtractor(ExtractorOptions(world_definition_path=world_path, output_dir=output_dir))
        extractor.pythonizer = FailingPythonizer()

        with pytest.raises(OSError):
            extractor.run()

        assert not output_dir.exists()
        assert sorted(p.name for p in tmp_path.iterdir()) == ["world.json"]

    def test_existing_outputs_kept(self, tmp_path, world_path):
        output_dir = tmp_path / "out"
        output_dir.mkdir()
        (output_dir / "regions.json").write_text("old")
        extractor = RegionExtractor(ExtractorOptions(world_definition_path=world_path, output_dir=output_dir))
        extractor.pythonizer = FailingPythonizer()

        with pytest.raises(OSError):
            extractor.run()

        assert [p.name for p in output_dir.iterdir()] == ["regions.json"]
        assert (output_dir / "regions.json").read_text() == "old"

    def test_rerun_replaces_outputs(self, tmp_path, world_path):
        """A successful run into an existing directory replaces the files."""
        output_dir = tmp_path / "out"
        output_dir.mkdir()
        (output_dir / "regions.json").write_text("old")

        RegionExtractor(ExtractorOptions(world_definition_path=world_path, output_dir=output_dir)).run()

        assert sorted(p.name for p in output_dir.iterdir()) == sorted(OUTPUT_FILES)
        assert json.loads((output_dir / "regions.json").read_text())["Regions"]
