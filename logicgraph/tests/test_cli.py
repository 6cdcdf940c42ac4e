"""
Tests for the command-line interface.

Tests:
- normalize, validate and extract commands
- Exit status on errors
"""

import json

import pytest

from ..cli import main
from ..graph.models import StringWorldDefinition
from ..logic.normalizer import LogicHandling


@pytest.fixture
def terms_file(tmp_path):
    path = tmp_path / "terms.json"
    path.write_text(json.dumps({"Bool": ["Dash", "Claw"], "State": ["Town"]}))
    return path


@pytest.fixture
def world_file(tmp_path, e2e_objects):
    path = tmp_path / "world.json"
    path.write_text(StringWorldDefinition.from_definitions(e2e_objects).model_dump_json(by_alias=True))
    return path


class TestNormalizeCommand:
    """Tests for `logicgraph normalize`."""

    def test_prints_clauses(self, terms_file, capsys):
        main(["normalize", "Town + (Dash | Claw)", "--terms", str(terms_file)])

        out = capsys.readouterr().out.splitlines()
        assert out == ["Town + Dash [from Town]", "Town + Claw [from Town]"]

    def test_macros(self, terms_file, tmp_path, capsys):
        macros = tmp_path / "macros.json"
        macros.write_text(json.dumps({"MOVE": "Dash | Claw"}))

        main(["normalize", "!MOVE", "--terms", str(terms_file), "--macros", str(macros)])

        assert capsys.readouterr().out.splitlines() == ["!Dash + !Claw"]

    def test_unknown_symbol(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["normalize", "Lantern"])

        assert exc_info.value.code == 1
        assert "Lantern" in capsys.readouterr().err

    def test_unknown_term_kind(self, tmp_path, capsys):
        terms = tmp_path / "terms.json"
        terms.write_text(json.dumps({"Float": ["Speed"]}))

        with pytest.raises(SystemExit) as exc_info:
            main(["normalize", "Speed", "--terms", str(terms)])

        assert exc_info.value.code == 1
        assert "Float" in capsys.readouterr().err

    def test_malformed_macros(self, terms_file, tmp_path, capsys):
        macros = tmp_path / "macros.json"
        macros.write_text("{")

        with pytest.raises(SystemExit) as exc_info:
            main(["normalize", "Dash", "--terms", str(terms_file), "--macros", str(macros)])

        assert exc_info.value.code == 1
        assert "macros.json" in capsys.readouterr().err


class TestValidateCommand:
    """Tests for `logicgraph validate`."""

    def test_valid(self, world_file, capsys):
        main(["validate", str(world_file)])
        assert "World definition is valid" in capsys.readouterr().out

    def test_invalid(self, tmp_path, make_object, capsys):
        path = tmp_path / "bad.json"
        objects = [make_object("Shop", "Town + Dash", LogicHandling.LOCATION)]
        path.write_text(StringWorldDefinition.from_definitions(objects).model_dump_json(by_alias=True))

        with pytest.raises(SystemExit) as exc_info:
            main(["validate", str(path)])

        assert exc_info.value.code == 1
        assert "undefined logic object 'Town'" in capsys.readouterr().out


class TestExtractCommand:
    """Tests for `logicgraph extract`."""

    def test_extract(self, world_file, tmp_path, capsys):
        output_dir = tmp_path / "out"
        main(["extract", "--world-definition", str(world_file), "--output", str(output_dir)])

        out = capsys.readouterr().out
        assert "regions.json" in out
        assert (output_dir / "regionGraph.dot").exists()

    def test_job_not_requested(self, world_file, tmp_path, capsys):
        output_dir = tmp_path / "out"
        main([
            "extract",
            "--world-definition", str(world_file),
            "--jobs", "ExtractItems",
            "--output", str(output_dir),
        ])

        assert "not requested" in capsys.readouterr().out
        assert not output_dir.exists()

    def test_rebase_failure(self, world_file, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([
                "extract",
                "--world-definition", str(world_file),
                "--start-state-term", "Nowhere",
                "--output", str(tmp_path / "out"),
            ])

        assert exc_info.value.code == 1
        assert "Nowhere" in capsys.readouterr().err

    def test_no_command(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1
