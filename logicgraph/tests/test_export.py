"""
Tests for exporters.

Tests:
- regions.json document structure
- Generated Python data module
- DOT rendering
"""

import ast
import io
import json

import pytest

from ..export.dot import to_dot, write_dot
from ..export.json_writer import world_to_json, write_world_json
from ..export.pythonizer import Pythonizer
from ..graph.builder import GraphView, RegionGraphBuilder
from ..logic.normalizer import LogicHandling


@pytest.fixture
def built(e2e_objects, make_object):
    """Builder and final world for the end-to-end objects plus a state call."""
    builder = RegionGraphBuilder()
    builder.add_all(e2e_objects)
    builder.add_or_update(make_object("Bench", "A + $BENCHRESET", LogicHandling.LOCATION))
    return builder, builder.build()


class TestJsonExport:
    """Tests for the regions.json document."""

    def test_structure(self, built):
        """The document mirrors GraphWorldDefinition with PascalCase keys."""
        _, world = built
        data = json.loads(world_to_json(world))

        assert set(data) == {"Regions", "Transitions", "Locations"}
        region_b = data["Regions"][1]
        assert region_b["Name"] == "B"
        assert region_b["Locations"] == ["L"]
        assert region_b["IncomingTransitions"] == ["A -> B"]
        assert data["Transitions"][0] == {
            "Name": "A -> B",
            "Source": "A",
            "Target": "B",
            "Requirement": [{"StateProvider": None, "Conditions": ["X"], "StateModifiers": []}],
        }

    def test_write(self, built):
        """write_world_json ends with a newline."""
        _, world = built
        stream = io.StringIO()
        write_world_json(world, stream)
        assert stream.getvalue().endswith("}\n")


class TestPythonizer:
    """Tests for the generated Python data module."""

    def test_renders_valid_python(self, built):
        """The output parses and defines the three dicts."""
        _, world = built
        source = Pythonizer().render(world)
        tree = ast.parse(source)

        names = [node.targets[0].id for node in tree.body if isinstance(node, ast.Assign)]
        assert names == ["regions", "transitions", "locations"]
        assert source.startswith("# Generated by logicgraph")

    def test_data(self, built):
        """Logic is written as clause dicts."""
        _, world = built
        data = Pythonizer().to_data(world)

        assert list(data["regions"]) == ["A", "B"]
        assert data["regions"]["A"]["exits"] == ["A -> B"]
        assert data["transitions"]["A -> B"]["logic"] == [
            {"state_provider": None, "conditions": ["X"], "state_modifiers": []}
        ]
        assert data["locations"]["Bench"] == {
            "region": "A",
            "logic": [{"state_provider": None, "conditions": [], "state_modifiers": ["$BENCHRESET"]}],
        }

    def test_placeholder_logic_is_none(self, make_object):
        """Placeholder regions have no entry logic."""
        builder = RegionGraphBuilder()
        builder.add_or_update(make_object("B", "C + X", LogicHandling.TRANSITION))
        data = Pythonizer().to_data(builder.build())
        assert data["regions"]["C"]["logic"] is None

    def test_executes(self, built):
        """The generated module runs and yields the same data."""
        _, world = built
        pythonizer = Pythonizer()
        namespace: dict = {}
        exec(pythonizer.render(world), namespace)
        assert namespace["locations"] == pythonizer.to_data(world)["locations"]


class TestDot:
    """Tests for DOT rendering."""

    def test_nodes_and_edges(self, built):
        """Regions are nodes and transitions labelled edges."""
        builder, _ = built
        dot = to_dot(builder.build_visualization())

        assert dot.startswith("digraph RegionGraph {")
        assert '    "A";' in dot
        assert '    "A" -> "B" [label="X"];' in dot
        assert dot.endswith("}")

    def test_quoting(self):
        """Names with quotes are escaped."""
        view = GraphView(nodes=('Room "1"',), edges=(('Room "1"', "Other", ""),))
        dot = to_dot(view, name="G")

        assert '"Room \\"1\\""' in dot
        assert '"Room \\"1\\"" -> "Other";' in dot

    def test_write(self):
        """write_dot ends with a newline."""
        stream = io.StringIO()
        write_dot(GraphView(nodes=(), edges=()), stream)
        assert stream.getvalue() == "digraph RegionGraph {\n    rankdir=LR;\n    node [shape=box, style=\"rounded\"];\n\n\n}\n"

