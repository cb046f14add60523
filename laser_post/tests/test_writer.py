"""Tests for the block writer and sequence counter."""

from __future__ import annotations

from io import StringIO

import pytest

from laser_post.gcode.formats import NumberFormat
from laser_post.gcode.writer import BlockState, BlockWriter, SequenceCounter


def _writer(**kwargs) -> tuple[BlockWriter, StringIO]:
    buf = StringIO()
    return BlockWriter(buf, **kwargs), buf


class TestSequenceCounter:
    def test_progression(self) -> None:
        c = SequenceCounter(10, 5)
        assert [c.next() for _ in range(4)] == [10, 15, 20, 25]

    @pytest.mark.parametrize("start, increment", [(10, 0), (-1, 5)])
    def test_invalid(self, start: int, increment: int) -> None:
        with pytest.raises(ValueError):
            SequenceCounter(start, increment)


class TestBlockWriter:
    def test_empty_words_dropped(self) -> None:
        w, buf = _writer()
        assert w.write_block("G0", "", "X1.000", "") is True
        assert buf.getvalue() == "G0 X1.000\n"

    def test_all_empty_writes_nothing(self) -> None:
        w, buf = _writer(sequence_numbers=True)
        assert w.write_block("", "") is False
        assert buf.getvalue() == ""
        assert w.state is BlockState.IDLE
        w.write_block("G90")
        assert buf.getvalue() == "N10 G90\n"

    def test_compact_words(self) -> None:
        w, buf = _writer(separate_words=False)
        w.write_block("G1", "X1.000", "F100.0")
        assert buf.getvalue() == "G1X1.000F100.0\n"

    def test_sequence_numbers(self) -> None:
        w, buf = _writer(sequence_numbers=True, sequence_start=5, sequence_increment=2)
        w.write_block("G21")
        w.write_block("G90")
        w.write_block("M30")
        assert buf.getvalue().splitlines() == ["N5 G21", "N7 G90", "N9 M30"]

    def test_sequence_numbers_compact(self) -> None:
        w, buf = _writer(sequence_numbers=True, separate_words=False)
        w.write_block("G21")
        assert buf.getvalue() == "N10G21\n"

    def test_sequence_format(self) -> None:
        w, buf = _writer(
            sequence_numbers=True, sequence_format=NumberFormat(prefix="N", width=4),
        )
        w.write_block("G21")
        assert buf.getvalue() == "N0010 G21\n"

    def test_comment(self) -> None:
        w, buf = _writer(sequence_numbers=True)
        w.write_comment("PART (A) 1")
        assert buf.getvalue() == "(PART A 1)\n"

    def test_empty_comment_skipped(self) -> None:
        w, buf = _writer()
        w.write_comment("()")
        w.write_comment("   ")
        assert buf.getvalue() == ""
        assert w.lines_written == 0

    def test_raw_line_unnumbered(self) -> None:
        w, buf = _writer(sequence_numbers=True)
        w.write_line("%")
        w.write_line()
        assert buf.getvalue() == "%\n\n"

    def test_state_and_line_count(self) -> None:
        w, _ = _writer()
        assert w.state is BlockState.IDLE
        w.write_block("G0")
        assert w.state is BlockState.FLUSHED
        w.write_comment("X")
        w.write_line("%")
        assert w.lines_written == 3
