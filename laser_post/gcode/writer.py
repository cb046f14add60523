"""Block writer -- assemble words into numbered output lines."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TextIO

from laser_post.gcode.formats import NumberFormat

logger = logging.getLogger(__name__)


class BlockState(Enum):
    """Where the writer is within one block."""

    IDLE = "idle"
    BUILDING = "building"
    FLUSHED = "flushed"


class SequenceCounter:
    """Arithmetic ``N`` word sequence.

    Parameters
    ----------
    start : int
        First sequence number.
    increment : int
        Step between consecutive blocks.  Must be >= 1.
    """

    def __init__(self, start: int = 10, increment: int = 5) -> None:
        if increment < 1:
            raise ValueError(f"increment must be >= 1, got {increment}")
        if start < 0:
            raise ValueError(f"start must be >= 0, got {start}")
        self.start = start
        self.increment = increment
        self.value = start

    def next(self) -> int:
        """Return the current number and advance."""
        n = self.value
        self.value += self.increment
        return n


class BlockWriter:
    """Write blocks, comments and raw lines to a text stream.

    Parameters
    ----------
    stream : TextIO
        Destination.
    separate_words : bool
        Join words with a space (``G0 X1.000``) or nothing (``G0X1.000``).
    sequence_numbers : bool
        Prefix each block with ``N<n>``.
    sequence_start, sequence_increment : int
        Sequence number progression.
    sequence_format : NumberFormat, optional
        Format of the sequence word; plain ``N<n>`` by default.
    """

    def __init__(
        self,
        stream: TextIO,
        separate_words: bool = True,
        sequence_numbers: bool = False,
        sequence_start: int = 10,
        sequence_increment: int = 5,
        sequence_format: NumberFormat | None = None,
    ) -> None:
        self._stream = stream
        self.separator = " " if separate_words else ""
        self.sequence_numbers = sequence_numbers
        self.counter = SequenceCounter(sequence_start, sequence_increment)
        self.sequence_format = sequence_format or NumberFormat(prefix="N")
        self.state = BlockState.IDLE
        self.lines_written = 0

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def write_block(self, *words: str) -> bool:
        """Write one block from the non-empty *words*.

        Returns
        -------
        bool
            ``False`` when every word was empty and nothing was written.
        """
        self.state = BlockState.BUILDING
        tokens = [w for w in words if w]
        if not tokens:
            self.state = BlockState.IDLE
            return False

        if self.sequence_numbers:
            tokens.insert(0, self.sequence_format.format(self.counter.next()))

        self._write(self.separator.join(tokens))
        self.state = BlockState.FLUSHED
        return True

    def write_comment(self, text: str) -> None:
        """Write ``(text)`` with any parentheses in *text* removed."""
        cleaned = text.replace("(", "").replace(")", "").strip()
        if not cleaned:
            return
        self._write(f"({cleaned})")

    def write_line(self, text: str = "") -> None:
        """Write *text* verbatim, without a sequence number."""
        self._write(text)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _write(self, line: str) -> None:
        self._stream.write(line + "\n")
        self.lines_written += 1
        logger.debug("emit: %s", line)
