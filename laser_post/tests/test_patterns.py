"""Tests for test-cut pattern generators.

Every pattern must form one complete section and post cleanly with the
default configuration.
"""

from __future__ import annotations

import pytest

from laser_post.configs.loader import load_config
from laser_post.gcode.generator import GCodeGenerator
from laser_post.job_ir.operations import (
    CircularMove,
    JetMode,
    Power,
    Program,
    Section,
    SectionEnd,
)
from laser_post.patterns import PATTERNS, circle, etch_mark, slot, square


def _post(ops) -> list[str]:
    cfg = load_config().with_overrides(output={"sequence_numbers": False})
    return GCodeGenerator(cfg).generate(Program(name="1000", operations=tuple(ops))).splitlines()


class TestStructure:
    @pytest.mark.parametrize("name", list(PATTERNS))
    def test_single_section(self, name: str) -> None:
        ops = PATTERNS[name]()
        assert isinstance(ops[0], Section)
        assert isinstance(ops[-1], SectionEnd)
        assert ops[-2] == Power(enabled=False)
        assert sum(isinstance(op, Section) for op in ops) == 1

    @pytest.mark.parametrize("name", list(PATTERNS))
    def test_posts_cleanly(self, name: str) -> None:
        lines = _post(PATTERNS[name]())
        assert lines[0] == "O1000"
        assert lines[-1] == "%"

    def test_square_closes(self) -> None:
        ops = square(size_mm=20.0, origin=(5.0, 5.0))
        last = ops[-3]
        assert (last.x, last.y) == (5.0, 5.0)

    @pytest.mark.parametrize(
        "call",
        [
            lambda: square(size_mm=0),
            lambda: circle(diameter_mm=-1),
            lambda: slot(length_mm=10.0, width_mm=10.0),
            lambda: etch_mark(size_mm=0),
        ],
    )
    def test_invalid_size(self, call) -> None:
        with pytest.raises(ValueError):
            call()

    @pytest.mark.parametrize("name", list(PATTERNS))
    def test_zero_feed_rejected(self, name: str) -> None:
        with pytest.raises(ValueError, match="feed must be > 0"):
            PATTERNS[name](feed=0.0)


class TestOutput:
    def test_circle_is_single_arc(self) -> None:
        lines = _post(circle(diameter_mm=50.0, origin=(35.0, 35.0)))
        assert "G17 G3 I-25.000 F3000.0" in lines

    def test_circle_clockwise(self) -> None:
        ops = circle(clockwise=True)
        arc = next(op for op in ops if isinstance(op, CircularMove))
        assert arc.clockwise

    def test_slot_has_two_arcs(self) -> None:
        lines = _post(slot())
        arcs = [line for line in lines if "G3" in line.split()]
        assert len(arcs) == 2

    def test_etch_mark_uses_etch_code(self) -> None:
        ops = etch_mark()
        assert ops[0].jet_mode is JetMode.ETCHING
        lines = _post(ops)
        assert lines.count("M101") == 2
