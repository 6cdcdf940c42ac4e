"""
JSON Export - Writes the region graph as an indented JSON document.

Keys use the documents' PascalCase aliases so the output mirrors
GraphWorldDefinition field for field.
"""

from __future__ import annotations
from typing import TextIO

from ..graph.models import GraphWorldDefinition


def world_to_json(world: GraphWorldDefinition) -> str:
    return world.model_dump_json(by_alias=True, indent=2)


def write_world_json(world: GraphWorldDefinition, stream: TextIO):
    stream.write(world_to_json(world))
    stream.write("\n")
