# tests/test_cli.py
"""
Tests for the ``andersen`` command-line interface.
"""

import json
import logging

import pytest

from andersen import __version__
from andersen.main import EXIT_ERROR, EXIT_INFRA, EXIT_INTERNAL, EXIT_OK, main
from tests.conftest import BROKEN_LINE_PROGRAM, README_PROGRAM


@pytest.fixture(autouse=True)
def _reset_cli_logger():
    yield
    logger = logging.getLogger("andersen")
    for handler in list(logger.handlers):
        if getattr(handler, "_andersen_cli", False):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


class TestSuccess:

    def test_writes_dot(self, write_program, tmp_path):
        src = write_program(README_PROGRAM)
        out = tmp_path / "pointsto.gv"
        assert main([str(src), str(out)]) == EXIT_OK
        dot = out.read_text(encoding="utf-8")
        assert dot.startswith("digraph PointsTo {")
        assert '"t" -> "b";' in dot

    def test_creates_output_directory(self, write_program, tmp_path):
        src = write_program("p = &a")
        out = tmp_path / "nested" / "dir" / "out.gv"
        assert main([str(src), str(out)]) == EXIT_OK
        assert out.is_file()

    def test_json_format(self, write_program, tmp_path):
        src = write_program(README_PROGRAM)
        out = tmp_path / "pointsto.json"
        assert main([str(src), str(out), "--format", "json"]) == EXIT_OK
        data = json.loads(out.read_text(encoding="utf-8"))
        (t,) = [n for n in data["nodes"] if n["name"] == "t"]
        assert t["points_to"] == ["b"]

    def test_text_format_with_lifo(self, write_program, tmp_path):
        src = write_program("p = &a; q = p")
        out = tmp_path / "pointsto.txt"
        assert main([str(src), str(out), "--format", "text", "--strategy", "lifo"]) == EXIT_OK
        assert out.read_text(encoding="utf-8") == "a -> {}\np -> {a}\nq -> {a}\n"

    def test_constraints_flag(self, write_program, tmp_path):
        src = write_program(README_PROGRAM)
        out = tmp_path / "pointsto.gv"
        assert main([str(src), str(out), "--constraints"]) == EXIT_OK
        assert 'label="derived"' in out.read_text(encoding="utf-8")

    def test_verbose_logs_summary(self, write_program, tmp_path, caplog):
        src = write_program(README_PROGRAM)
        with caplog.at_level(logging.INFO, logger="andersen"):
            assert main([str(src), str(tmp_path / "o.gv"), "-v"]) == EXIT_OK
        assert "Fixpoint reached" in caplog.text


class TestFailures:

    def test_syntax_error(self, write_program, tmp_path, capsys):
        src = write_program(BROKEN_LINE_PROGRAM)
        out = tmp_path / "pointsto.gv"
        assert main([str(src), str(out)]) == EXIT_ERROR
        assert not out.exists()
        err = capsys.readouterr().err
        assert "PTA-1001" in err
        assert ":3:1: error:" in err
        assert "foo bar" in err

    def test_syntax_error_keeps_existing_output(self, write_program, tmp_path):
        src = write_program("*p = &a\n")
        out = tmp_path / "pointsto.gv"
        out.write_text("previous", encoding="utf-8")
        assert main([str(src), str(out)]) == EXIT_ERROR
        assert out.read_text(encoding="utf-8") == "previous"

    def test_missing_input(self, tmp_path):
        out = tmp_path / "pointsto.gv"
        assert main([str(tmp_path / "absent.txt"), str(out)]) == EXIT_INFRA
        assert not out.exists()

    def test_internal_error(self, write_program, tmp_path, capsys):
        src = write_program(README_PROGRAM)
        out = tmp_path / "pointsto.gv"
        assert main([str(src), str(out), "--max-iterations", "0"]) == EXIT_INTERNAL
        assert not out.exists()
        assert "internal error" in capsys.readouterr().err

    def test_negative_iteration_bound_is_a_usage_error(self, write_program, tmp_path, capsys):
        src = write_program("p = &a")
        out = tmp_path / "o.gv"
        with pytest.raises(SystemExit) as info:
            main([str(src), str(out), "--max-iterations", "-1"])
        assert info.value.code == 2
        assert "must be >= 0" in capsys.readouterr().err
        assert not out.exists()

    def test_bad_format_rejected_by_argparse(self, write_program, tmp_path):
        src = write_program("p = &a")
        with pytest.raises(SystemExit) as info:
            main([str(src), str(tmp_path / "o"), "--format", "svg"])
        assert info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--version"])
        assert info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestRender:

    @pytest.mark.parametrize("name, image", [
        ("pointsto", "pointsto.svg"),
        ("pointsto.gv", "pointsto.svg"),
        ("graph.svg", "graph.svg.svg"),
    ])
    def test_output_survives_render(self, write_program, tmp_path, graphviz_render, name, image):
        src = write_program(README_PROGRAM)
        out = tmp_path / name
        assert main([str(src), str(out), "--render", "svg"]) == EXIT_OK
        assert out.read_text(encoding="utf-8").startswith("digraph PointsTo {")
        assert (tmp_path / image).read_text(encoding="utf-8") == "<svg/>"

    def test_json_output_survives_render(self, write_program, tmp_path, graphviz_render):
        src = write_program(README_PROGRAM)
        out = tmp_path / "pointsto"
        assert main([str(src), str(out), "--format", "json", "--render", "svg"]) == EXIT_OK
        data = json.loads(out.read_text(encoding="utf-8"))
        assert {n["name"] for n in data["nodes"]} >= {"p", "t"}
        assert (tmp_path / "pointsto.svg").is_file()
        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "pointsto", "pointsto.svg", "program.txt",
        ]
