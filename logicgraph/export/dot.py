"""
DOT Export - Renders the region graph topology in Graphviz DOT format.

Regions are nodes, transitions are edges labelled with their requirement.
"""

from __future__ import annotations
from typing import TextIO

from ..graph.builder import GraphView


def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def to_dot(view: GraphView, name: str = "RegionGraph") -> str:
    """
    Render a graph view in Graphviz DOT format.

    Returns:
        DOT format string representation
    """
    lines = [
        f"digraph {name} {{",
        "    rankdir=LR;",
        '    node [shape=box, style="rounded"];',
        "",
    ]

    for node in view.nodes:
        lines.append(f"    {_quote(node)};")

    lines.append("")

    for source, target, label in view.edges:
        if label:
            lines.append(f"    {_quote(source)} -> {_quote(target)} [label={_quote(label)}];")
        else:
            lines.append(f"    {_quote(source)} -> {_quote(target)};")

    lines.append("}")
    return "\n".join(lines)


def write_dot(view: GraphView, stream: TextIO):
    stream.write(to_dot(view))
    stream.write("\n")
