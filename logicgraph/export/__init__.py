"""Exporters - JSON document, generated Python data and DOT graph."""

from .json_writer import world_to_json, write_world_json
from .pythonizer import Pythonizer
from .dot import to_dot, write_dot

__all__ = [
    "world_to_json",
    "write_world_json",
    "Pythonizer",
    "to_dot",
    "write_dot",
]
