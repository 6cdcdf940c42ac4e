"""
Extractor - Runs region extraction end to end.

The extractor:
1. Selects one world source (world definition, saved context, raw logic)
2. Normalizes it into logic objects
3. Builds the region graph
4. Writes the exports once the graph is final
"""

from .loader import RawLogicLoader, RawLogicData
from .snapshot import load_saved_context, snapshot_to_definitions, infer_handling
from .sources import (
    WorldSource,
    WorldDefinitionSource,
    SnapshotSource,
    RawLogicSource,
    select_source,
)
from .output import OutputManager
from .driver import RegionExtractor, ExtractionReport, build_world, load_keep_set

__all__ = [
    "RawLogicLoader",
    "RawLogicData",
    "load_saved_context",
    "snapshot_to_definitions",
    "infer_handling",
    "WorldSource",
    "WorldDefinitionSource",
    "SnapshotSource",
    "RawLogicSource",
    "select_source",
    "OutputManager",
    "RegionExtractor",
    "ExtractionReport",
    "build_world",
    "load_keep_set",
]
