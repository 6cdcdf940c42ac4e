"""
Configuration - Options for a region extraction run.

Options come from the CLI or from LOGICGRAPH_* environment variables.
Exactly one world source is used per run:
- world_definition_path: a normalized world definition document
- rando_context_path: a saved logic-manager snapshot
- otherwise: raw logic files under raw_logic_dir (optionally ref_name)
"""

from __future__ import annotations
from enum import Enum
from pathlib import Path
from typing import Optional
import os

from pydantic import BaseModel, Field, model_validator

from .logic.variables import ResolverStrategy


class JobType(str, Enum):
    """Extraction jobs. Only region extraction is served by this package."""
    EXTRACT_REGIONS = "ExtractRegions"
    EXTRACT_ITEMS = "ExtractItems"
    EXTRACT_LOCATIONS = "ExtractLocations"


class ExtractorOptions(BaseModel):
    """Options for RegionExtractor."""
    world_definition_path: Optional[Path] = None
    rando_context_path: Optional[Path] = None
    ref_name: Optional[str] = None
    raw_logic_dir: Optional[Path] = None
    start_state_term: Optional[str] = None
    empty_regions_to_keep_path: Optional[Path] = None
    jobs: list[JobType] = Field(default_factory=list)
    output_dir: Path = Path("output")
    variable_resolver: ResolverStrategy = ResolverStrategy.DUMMY
    max_workers: int = Field(default=4, ge=1)

    @model_validator(mode="after")
    def _check_sources(self) -> ExtractorOptions:
        if self.world_definition_path and self.rando_context_path:
            raise ValueError(
                "world_definition_path and rando_context_path are mutually exclusive"
            )
        return self

    @property
    def job_requested(self) -> bool:
        return not self.jobs or JobType.EXTRACT_REGIONS in self.jobs

    @classmethod
    def from_env(cls, **overrides) -> ExtractorOptions:
        """Build options from LOGICGRAPH_* environment variables."""
        values = {
            "world_definition_path": os.getenv("LOGICGRAPH_WORLD_DEFINITION_PATH"),
            "rando_context_path": os.getenv("LOGICGRAPH_RANDO_CONTEXT_PATH"),
            "ref_name": os.getenv("LOGICGRAPH_REF_NAME"),
            "raw_logic_dir": os.getenv("LOGICGRAPH_RAW_LOGIC_DIR"),
            "start_state_term": os.getenv("LOGICGRAPH_START_STATE_TERM"),
            "empty_regions_to_keep_path": os.getenv("LOGICGRAPH_EMPTY_REGIONS_TO_KEEP_PATH"),
            "output_dir": os.getenv("LOGICGRAPH_OUTPUT_DIR"),
            "variable_resolver": os.getenv("LOGICGRAPH_VARIABLE_RESOLVER"),
        }
        jobs = os.getenv("LOGICGRAPH_JOBS")
        if jobs:
            values["jobs"] = [j.strip() for j in jobs.split(",") if j.strip()]
        values = {k: v for k, v in values.items() if v is not None}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
