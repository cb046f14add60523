"""Tests for the ``laser-post`` command-line entry point."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from laser_post.scripts.post import main
from laser_post.utils.logging_config import pop_context


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo the handlers and context installed by ``main``."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    pop_context()


def _program_file(tmp_path: Path, name: object = 12) -> Path:
    path = tmp_path / "part.yaml"
    path.write_text(yaml.safe_dump({
        "schema": "program.v1",
        "name": name,
        "comment": "PART",
        "operations": [
            {"op": "section", "initial_position": [0, 0, 0]},
            {"op": "power", "enabled": True},
            {"op": "linear", "x": 25, "y": 0, "feed": 2500},
            {"op": "power", "enabled": False},
            {"op": "section_end"},
        ],
    }))
    return path


class TestPostCli:
    def test_pattern_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--pattern", "square", "--no-sequence-numbers"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[:3] == ["O1000", "G21", "G90"]
        assert "(TEST SQUARE)" in lines
        assert lines[-1] == "%"

    def test_sequence_numbers_from_config(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--pattern", "circle"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[1] == "N10 G21"

    def test_pattern_size(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--pattern", "circle", "--size", "20", "--no-sequence-numbers"]) == 0
        assert "G17 G3 I-10.000 F3000.0" in capsys.readouterr().out.splitlines()

    def test_program_file_to_output(self, tmp_path: Path) -> None:
        out = tmp_path / "nc" / "O0012.nc"
        rc = main([
            "--file", str(_program_file(tmp_path)),
            "--output", str(out),
            "--no-sequence-numbers",
            "--no-separate-words",
        ])
        assert rc == 0
        lines = out.read_text().splitlines()
        assert lines[0] == "O0012"
        assert "(PART)" in lines
        assert "G1X25.000Z0.000F2500.0" in lines

    def test_custom_config(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        cfg = tmp_path / "post.yaml"
        cfg.write_text("output:\n  sequence_numbers: false\nlaser:\n  through_mode: 120\n")
        assert main(["--pattern", "square", "--config", str(cfg)]) == 0
        assert "M120" in capsys.readouterr().out.splitlines()

    def test_log_file(self, tmp_path: Path) -> None:
        log = tmp_path / "post.log"
        rc = main([
            "--pattern", "square", "--program-name", "8500",
            "--output", str(tmp_path / "out.nc"),
            "--log-file", str(log),
        ])
        assert rc == 0
        assert "reserved by tool builder" in log.read_text()

    def test_fatal_error_exit_code(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--pattern", "square", "--program-name", "0"]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "out of range" in captured.err

    @pytest.mark.parametrize("option", ["--size", "--feed"])
    def test_zero_pattern_value_rejected(
        self, option: str, capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main(["--pattern", "square", option, "0"]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "must be > 0" in captured.err

    def test_nan_dwell_in_program_file(self, tmp_path: Path) -> None:
        path = tmp_path / "nan.yaml"
        path.write_text(
            "schema: program.v1\nname: 12\noperations:\n"
            "  - {op: section, initial_position: [0, 0, 0]}\n"
            "  - {op: dwell, seconds: .nan}\n"
        )
        assert main(["--file", str(path)]) == 1

    def test_missing_program_file(self, tmp_path: Path) -> None:
        assert main(["--file", str(tmp_path / "missing.yaml")]) == 1

    def test_invalid_program_file(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("schema: program.v1\nname: 12\noperations:\n  - op: nope\n")
        assert main(["--file", str(path)]) == 1

    def test_invalid_config(self, tmp_path: Path) -> None:
        cfg = tmp_path / "post.yaml"
        cfg.write_text("machine:\n  tolerance_mm: -1\n")
        assert main(["--pattern", "square", "--config", str(cfg)]) == 1

    def test_mode_code_missing(self, tmp_path: Path) -> None:
        cfg = tmp_path / "post.yaml"
        cfg.write_text("laser:\n  etch_mode: 0\n")
        assert main(["--pattern", "etch-mark", "--config", str(cfg)]) == 1

    def test_source_required(self) -> None:
        with pytest.raises(SystemExit):
            main([])
