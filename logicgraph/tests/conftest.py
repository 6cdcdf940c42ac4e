"""
Pytest fixtures for LogicGraph tests.
"""

import json

import pytest

from ..logic.normalizer import DNFNormalizer, LogicHandling, LogicObjectDefinition
from ..logic.preprocessor import LogicPreprocessor
from ..logic.terms import TermRegistry


@pytest.fixture
def terms() -> TermRegistry:
    """A small registry covering every term kind."""
    return TermRegistry.from_mapping({
        "Bool": ["Dash", "Claw", "Wings", "X", "Y"],
        "Counter": ["Grubs", "Keys"],
        "State": ["Town", "Crossroads", "Start", "A", "B", "C"],
    })


@pytest.fixture
def make_object(terms):
    """
    Factory compiling logic text into a normalized logic object.

    Usage:
        obj = make_object("B", "A + X", LogicHandling.TRANSITION)
    """
    normalizer = DNFNormalizer(terms=terms)

    def _make(name: str, logic: str, handling: LogicHandling = LogicHandling.DEFAULT):
        preprocessor = LogicPreprocessor(terms=terms)
        expression = preprocessor.compile_text(name, logic)
        clauses = normalizer.normalize(name, expression)
        return LogicObjectDefinition(name=name, clauses=tuple(clauses), handling=handling)

    return _make


@pytest.fixture
def e2e_objects(make_object) -> list[LogicObjectDefinition]:
    """
    Waypoint A (always reachable), transition into B gated on X from A,
    location L in B gated on Y.
    """
    return [
        make_object("A", "TRUE", LogicHandling.DEFAULT),
        make_object("B", "A + X", LogicHandling.TRANSITION),
        make_object("L", "B + Y", LogicHandling.LOCATION),
    ]


@pytest.fixture
def raw_logic_dir(tmp_path):
    """A raw logic directory with a start waypoint, two rooms and one location."""
    logic_dir = tmp_path / "logic"
    logic_dir.mkdir()
    files = {
        "terms.json": {
            "Bool": ["Dash", "Claw"],
            "Counter": ["Grubs"],
            "State": [],
        },
        "macros.json": {
            "CANDASH": "Dash",
            "ANYMOVE": "CANDASH | Claw",
        },
        "waypoints.json": [
            {"name": "Start", "logic": "TRUE"},
            {"name": "Lever_Pulled", "logic": "Town", "stateless": True},
        ],
        "transitions.json": [
            {"name": "Town", "logic": "Start"},
            {"name": "Crossroads", "logic": "Town + ANYMOVE"},
        ],
        "locations.json": [
            {"name": "Shop", "logic": "Town + Grubs>2"},
            {"name": "Vault", "logic": "Crossroads + Lever_Pulled"},
        ],
    }
    for name, content in files.items():
        (logic_dir / name).write_text(json.dumps(content), encoding="utf-8")
    return logic_dir
