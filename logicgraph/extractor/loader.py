"""
Raw Logic Loader - Reads raw term, macro and logic files from disk.

Expected files under the logic directory:
    terms.json        {"Bool": [...], "Counter": [...], "State": [...]}
    macros.json       {"NAME": "logic", ...}
    waypoints.json    [{"name": ..., "logic": ..., "stateless": false}, ...]
    transitions.json  [{"name": ..., "logic": ...}, ...]
    locations.json    [{"name": ..., "logic": ...}, ...]

The files are independent, so they are read in parallel threads. load()
returns only once everything is materialized.
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
import json
import logging

from ..logic.errors import WorldDefinitionError
from ..logic.preprocessor import RawLogicDef, RawWaypointDef

logger = logging.getLogger(__name__)

RAW_FILES = ("terms", "macros", "waypoints", "transitions", "locations")


@dataclass
class RawLogicData:
    """Fully loaded raw logic."""
    terms: dict[str, list[str]] = field(default_factory=dict)
    macros: dict[str, str] = field(default_factory=dict)
    waypoints: list[RawWaypointDef] = field(default_factory=list)
    transitions: list[RawLogicDef] = field(default_factory=list)
    locations: list[RawLogicDef] = field(default_factory=list)


class RawLogicLoader:
    """
    Loads raw logic from a directory.

    Usage:
        loader = RawLogicLoader("data/logic", ref_name="v1.5")
        data = loader.load()
    """

    def __init__(
        self,
        logic_dir: str | Path,
        ref_name: str | None = None,
        max_workers: int = 4,
    ):
        base = Path(logic_dir)
        self.logic_dir = base / ref_name if ref_name else base
        self.max_workers = max_workers

    def load(self) -> RawLogicData:
        if not self.logic_dir.is_dir():
            raise WorldDefinitionError(f"Raw logic directory not found: {self.logic_dir}")

        logger.info("Loading raw logic from %s", self.logic_dir)
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {name: pool.submit(self._read, name) for name in RAW_FILES}
            raw = {name: future.result() for name, future in futures.items()}

        try:
            return RawLogicData(
                terms=raw["terms"] or {},
                macros=raw["macros"] or {},
                waypoints=[
                    RawWaypointDef(
                        name=w["name"],
                        logic=w["logic"],
                        stateless=bool(w.get("stateless", False)),
                    )
                    for w in raw["waypoints"] or []
                ],
                transitions=[RawLogicDef(name=t["name"], logic=t["logic"]) for t in raw["transitions"] or []],
                locations=[RawLogicDef(name=loc["name"], logic=loc["logic"]) for loc in raw["locations"] or []],
            )
        except KeyError as e:
            raise WorldDefinitionError(f"Raw logic entry in {self.logic_dir} is missing {e}") from e
        except (TypeError, AttributeError) as e:
            raise WorldDefinitionError(f"Malformed raw logic in {self.logic_dir}: {e}") from e

    def _read(self, name: str) -> Any:
        path = self.logic_dir / f"{name}.json"
        if not path.exists():
            logger.debug("No %s file at %s", name, path)
            return None
        return read_json(path)


def read_json(path: str | Path) -> Any:
    """Read a JSON document. Malformed JSON is a WorldDefinitionError."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise WorldDefinitionError(f"Invalid JSON in {path}: {e}") from e
