"""
Pythonizer - Writes the region graph as importable Python literal data.

The generated module defines three dicts, each in first-seen order:
- regions: name -> entry logic, locations, exits, entrances
- transitions: name -> source, target, logic
- locations: name -> region, logic

Logic is a list of clauses, each a dict with state_provider, conditions
and state_modifiers.
"""

from __future__ import annotations
from dataclasses import dataclass
from pprint import pformat
from typing import Any, TextIO

from .. import __version__
from ..graph.models import ClauseModel, GraphWorldDefinition


def _logic(clauses: tuple[ClauseModel, ...] | None) -> list[dict[str, Any]] | None:
    if clauses is None:
        return None
    return [
        {
            "state_provider": c.state_provider,
            "conditions": list(c.conditions),
            "state_modifiers": list(c.state_modifiers),
        }
        for c in clauses
    ]


@dataclass
class Pythonizer:
    """
    Renders a GraphWorldDefinition as Python source.

    Usage:
        with open("region_data.py", "w") as f:
            Pythonizer().write(world, f)
    """
    width: int = 100

    def to_data(self, world: GraphWorldDefinition) -> dict[str, dict[str, Any]]:
        regions = {
            r.name: {
                "logic": _logic(r.entry_requirement),
                "locations": list(r.locations),
                "exits": list(r.outgoing_transitions),
                "entrances": list(r.incoming_transitions),
            }
            for r in world.regions
        }
        transitions = {
            t.name: {
                "source": t.source,
                "target": t.target,
                "logic": _logic(t.requirement),
            }
            for t in world.transitions
        }
        locations = {
            loc.name: {
                "region": loc.region,
                "logic": _logic(loc.requirement),
            }
            for loc in world.locations
        }
        return {"regions": regions, "transitions": transitions, "locations": locations}

    def render(self, world: GraphWorldDefinition) -> str:
        lines = [f"# Generated by logicgraph {__version__}. Do not edit.", ""]
        for name, value in self.to_data(world).items():
            lines.append(f"{name} = {pformat(value, width=self.width, sort_dicts=False)}")
            lines.append("")
        return "\n".join(lines)

    def write(self, world: GraphWorldDefinition, stream: TextIO):
        stream.write(self.render(world))
