"""G-code generator -- tool-path events to Fanuc laser G-code.

One handler per event (``on_open``, ``on_section``, ``on_rapid``...).
``generate()`` walks a :class:`~laser_post.job_ir.operations.Program` and
calls them in program order; a host that fires events itself can call
``begin()`` and then the handlers directly.

Modal output:
    Every word goes through the ``EmitterState`` channels, so unchanged
    coordinates, feeds and G-codes are never repeated.  The only words
    forced on every block are ``S`` (beam power) and whatever was reset
    by a section start or a rapid move.

Feed deferral:
    A linear move that changes only the feed is not written when the
    next event is a motion; the feed channel is reset instead, so ``F``
    rides on that next motion block.

Arcs:
    G2/G3 is written only in the XY plane.  Arcs in other planes and
    helical full circles are linearized within
    ``machine.tolerance_mm``.

Fatal conditions raise :class:`GCodeError` at the point of detection.
Advisories are logged and collected in :attr:`GCodeGenerator.advisories`.
"""

from __future__ import annotations

import logging
import math
import re
from io import StringIO
from typing import TextIO

from laser_post.configs.loader import PostConfig
from laser_post.gcode.arcs import is_full_circle, is_helical, linearize_arc
from laser_post.gcode.formats import FormatRegistry, format_code
from laser_post.gcode.modal import EmitterState
from laser_post.gcode.writer import BlockWriter
from laser_post.job_ir.operations import (
    CircularMove,
    Command,
    CommandKind,
    Comment,
    Compensation,
    Cycle,
    Dwell,
    JetMode,
    LinearMove,
    LinearMove5D,
    Operation,
    Plane,
    Position,
    Power,
    Program,
    RadiusCompensation,
    RapidMove,
    RapidMove5D,
    Section,
    SectionEnd,
    ToolType,
    Unit,
    is_motion,
)

logger = logging.getLogger(__name__)


class GCodeError(Exception):
    """Raised when a program cannot be posted for this machine."""

    pass


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PROGRAM_NUMBER_MIN = 1
PROGRAM_NUMBER_MAX = 9999
RESERVED_PROGRAM_MIN = 8000

DWELL_MIN_S = 0.001
DWELL_MAX_S = 99999.999

MM_PER_INCH = 25.4

_PROGRAM_NUMBER_RE = re.compile(r"[0-9]+")

_ARC_PLANES = frozenset({Plane.XY, Plane.ZX, Plane.YZ})

_STOP_CODES: dict[CommandKind, int] = {
    CommandKind.STOP: 0,
    CommandKind.OPTIONAL_STOP: 1,
    CommandKind.END: 2,
}

_SILENT_COMMANDS = frozenset({
    CommandKind.LOCK_MULTI_AXIS,
    CommandKind.UNLOCK_MULTI_AXIS,
    CommandKind.BREAK_CONTROL,
    CommandKind.TOOL_MEASURE,
    CommandKind.COOLANT_OFF,
})

_UNSUPPORTED_COMMANDS = frozenset({
    CommandKind.COOLANT_ON,
    CommandKind.LOAD_TOOL,
    CommandKind.SPINDLE_CLOCKWISE,
    CommandKind.SPINDLE_COUNTERCLOCKWISE,
})


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class GCodeGenerator:
    """Convert tool-path events to Fanuc laser G-code.

    Parameters
    ----------
    config : PostConfig
        Validated post configuration.
    """

    def __init__(self, config: PostConfig) -> None:
        self._cfg = config
        self.advisories: list[str] = []
        self._writer: BlockWriter | None = None
        self._state: EmitterState | None = None
        self._unit = Unit.MM
        self._section: Section | None = None
        self._mode_code: int | None = None
        self._work_offset: str | None = None
        self._pending_compensation: Compensation | None = None
        self._position: Position | None = None
        self._beam_on = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self, program: Program) -> str:
        """Generate the complete G-code text for *program*.

        Raises
        ------
        GCodeError
            If the program uses anything the machine cannot do.  No
            partial output is returned.
        """
        logger.info(
            "Posting program %s (%d operations)",
            program.name,
            len(program.operations),
        )
        buf = StringIO()
        self.begin(buf, program.unit)
        self.on_open(program.name, program.comment)

        ops = program.operations
        for idx, op in enumerate(ops):
            next_op = ops[idx + 1] if idx + 1 < len(ops) else None
            self._generate_op(op, next_op)

        if self._section is not None:
            self.on_section_end()
        self.on_close()
        return buf.getvalue()

    def begin(self, stream: TextIO, unit: Unit = Unit.MM) -> None:
        """Reset all state and direct output to *stream*."""
        out = self._cfg.output
        formats = FormatRegistry.for_unit(unit)
        self._writer = BlockWriter(
            stream,
            separate_words=out.separate_words,
            sequence_numbers=out.sequence_numbers,
            sequence_start=out.sequence_start,
            sequence_increment=out.sequence_increment,
            sequence_format=formats.n,
        )
        self._state = EmitterState.create(formats, use_feed=out.use_feed)
        self._unit = unit
        self.advisories = []
        self._section = None
        self._mode_code = None
        self._work_offset = None
        self._pending_compensation = None
        self._position = None
        self._beam_on = False

    @property
    def position(self) -> Position | None:
        """Last commanded position."""
        return self._position

    # ------------------------------------------------------------------
    # Internal: per-operation dispatch
    # ------------------------------------------------------------------

    def _generate_op(self, op: Operation, next_op: Operation | None) -> None:
        if isinstance(op, Section):
            self.on_section(op)
        elif isinstance(op, SectionEnd):
            self.on_section_end()
        elif isinstance(op, RapidMove):
            self.on_rapid(op.x, op.y, op.z)
        elif isinstance(op, LinearMove):
            self.on_linear(op.x, op.y, op.z, op.feed, is_motion(next_op))
        elif isinstance(op, CircularMove):
            self.on_circular(
                op.clockwise, op.cx, op.cy, op.cz,
                op.x, op.y, op.z, op.feed, op.plane,
            )
        elif isinstance(op, RapidMove5D):
            self.on_rapid_5d()
        elif isinstance(op, LinearMove5D):
            self.on_linear_5d()
        elif isinstance(op, Cycle):
            self.on_cycle(op.kind)
        elif isinstance(op, Dwell):
            self.on_dwell(op.seconds)
        elif isinstance(op, Power):
            self.on_power(op.enabled)
        elif isinstance(op, RadiusCompensation):
            self.on_radius_compensation(op.side)
        elif isinstance(op, Command):
            self.on_command(op.kind)
        elif isinstance(op, Comment):
            self.on_comment(op.text)
        else:
            raise GCodeError(f"Unsupported operation: {type(op).__name__}")

    # ------------------------------------------------------------------
    # Program start / end
    # ------------------------------------------------------------------

    def on_open(self, name: str | None, comment: str | None = None) -> None:
        """Write the program header."""
        w, s = self._require_started()
        number = _parse_program_number(name)
        if number >= RESERVED_PROGRAM_MIN:
            self._advise("Program number is reserved by tool builder.")

        w.write_line(s.formats.o.format(number))
        w.write_block(s.units.format(20 if self._unit is Unit.IN else 21))
        w.write_block(s.abs_inc.format(90))

        if comment:
            w.write_comment(comment)
        if self._cfg.machine.description:
            w.write_comment(self._cfg.machine.description)

    def on_close(self) -> None:
        """Write the program trailer."""
        w, _ = self._require_started()
        if self._beam_on:
            self.on_power(False)
        w.write_line()
        w.write_comment("END OF SHEET")
        w.write_block(format_code("M", 30))
        w.write_line("%")

    def on_comment(self, text: str) -> None:
        w, _ = self._require_started()
        w.write_comment(text)

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def on_section(self, section: Section) -> None:
        """Start a cutting section.

        Raises
        ------
        GCodeError
            For a non-laser tool, a rotated work plane, an unknown
            cutting mode or a mode without a configured M-code.
        """
        w, s = self._require_started()
        if section.tool_type is not ToolType.LASER_CUTTER:
            raise GCodeError(
                "The CNC does not support the required tool/process. "
                "Only laser cutting is supported."
            )
        if not section.is_identity_orientation:
            raise GCodeError("Tool orientation is not supported.")

        _require_finite(*section.initial_position)
        if section.power is not None:
            _require_finite(section.power)

        self._mode_code = self._resolve_mode_code(section.jet_mode)
        self._section = section
        logger.debug(
            "Section: %s mode, M%d", section.jet_mode.value, self._mode_code,
        )

        if section.comment:
            w.write_comment(section.comment)

        offset = _work_offset_words(section.work_offset)
        if offset != self._work_offset:
            w.write_block(*offset.split(" "))
            self._work_offset = offset
        w.write_block(s.feed_mode.format(94))

        s.force_any()
        x, y, z = section.initial_position
        w.write_block(
            s.abs_inc.format(90),
            s.motion.format(0),
            s.x.format(x),
            s.y.format(y),
        )
        self._position = (x, y, z)

    def on_section_end(self) -> None:
        _, s = self._require_started()
        s.force_any()
        self._section = None

    def _resolve_mode_code(self, mode: JetMode) -> int:
        las = self._cfg.laser
        if mode is JetMode.THROUGH:
            return las.through_mode
        if mode is JetMode.ETCHING:
            if not las.etch_mode:
                raise GCodeError("Etch mode code has not been specified.")
            return las.etch_mode
        if mode is JetMode.VAPORIZE:
            if not las.vaporize_mode:
                raise GCodeError("Vaporize mode code has not been specified.")
            return las.vaporize_mode
        raise GCodeError("Unsupported cutting mode.")

    # ------------------------------------------------------------------
    # Machine state
    # ------------------------------------------------------------------

    def on_dwell(self, seconds: float) -> None:
        """Write ``G4 P<seconds>``, clamped to the control's range.

        Raises
        ------
        GCodeError
            If *seconds* is NaN or infinite.
        """
        w, s = self._require_started()
        if not math.isfinite(seconds):
            raise GCodeError(f"Dwelling time is not a finite number: {seconds}.")
        if seconds < DWELL_MIN_S or seconds > DWELL_MAX_S:
            self._advise("Dwelling time is out of range.")
        seconds = min(max(seconds, DWELL_MIN_S), DWELL_MAX_S)
        w.write_block(
            s.feed_mode.format(94),
            format_code("G", 4),
            "P" + s.formats.sec.format_number(seconds),
        )

    def on_power(self, enabled: bool) -> None:
        """Switch the beam with the cutting-mode M-code or the off code."""
        w, s = self._require_started()
        if enabled:
            if self._section is None or self._mode_code is None:
                raise GCodeError(
                    "Beam cannot be switched on outside a cutting section."
                )
            words = [format_code("M", self._mode_code)]
            if self._section.power is not None:
                words.append(s.power.format(self._section.power))
            w.write_block(*words)
            self._beam_on = True
        else:
            w.write_block(format_code("M", self._cfg.laser.beam_off_code))
            self._beam_on = False

    def on_radius_compensation(self, side: Compensation) -> None:
        """Record a compensation change for the next linear move."""
        self._pending_compensation = side

    def on_command(self, kind: CommandKind) -> None:
        """Handle a machine command.

        Raises
        ------
        GCodeError
            For commands a laser cannot carry out.
        """
        w, _ = self._require_started()
        if kind is CommandKind.POWER_ON:
            self.on_power(True)
        elif kind is CommandKind.POWER_OFF:
            self.on_power(False)
        elif kind in _STOP_CODES:
            w.write_block(format_code("M", _STOP_CODES[kind]))
        elif kind in _SILENT_COMMANDS:
            logger.debug("Command %s produces no output", kind.value)
        elif kind in _UNSUPPORTED_COMMANDS:
            raise GCodeError(f"Unsupported command: {kind.value}")
        else:
            raise GCodeError(f"Unknown command: {kind!r}")

    # ------------------------------------------------------------------
    # Motion
    # ------------------------------------------------------------------

    def on_rapid(self, x: float, y: float, z: float) -> None:
        """Write a G0 move for the changed coordinates."""
        w, s = self._require_started()
        _require_finite(x, y, z)
        xw, yw, zw = s.x.format(x), s.y.format(y), s.z.format(z)
        if xw or yw or zw:
            if self._pending_compensation is not None:
                raise GCodeError(
                    "Radius compensation mode cannot be changed at rapid "
                    "traversal."
                )
            w.write_block(s.motion.format(0), xw, yw, zw)
            s.force_feed()
        self._position = (x, y, z)

    def on_linear(
        self,
        x: float,
        y: float,
        z: float,
        feed: float,
        next_is_motion: bool = False,
    ) -> None:
        """Write a G1 move.

        Parameters
        ----------
        x, y, z : float
            End point.
        feed : float
            Feed rate.
        next_is_motion : bool
            Whether the following event moves the machine.  A move that
            changes only the feed is then deferred to that event.
        """
        w, s = self._require_started()
        _require_finite(x, y, z, feed)
        xw, yw, zw = s.x.format(x), s.y.format(y), s.z.format(z)
        fw = s.feed.format(feed)

        if xw or yw or zw:
            if self._pending_compensation is not None:
                side = self._pending_compensation
                self._pending_compensation = None
                w.write_block(
                    s.motion.format(1),
                    format_code("G", side.value),
                    xw, yw, zw, fw,
                )
            else:
                w.write_block(s.motion.format(1), xw, yw, zw, fw)
        elif fw:
            if next_is_motion:
                s.force_feed()
            else:
                w.write_block(s.motion.format(1), fw)
        self._position = (x, y, z)

    def on_circular(
        self,
        clockwise: bool,
        cx: float,
        cy: float,
        cz: float,
        x: float,
        y: float,
        z: float,
        feed: float,
        plane: Plane = Plane.XY,
    ) -> None:
        """Write a G2/G3 arc, or line segments where G2/G3 cannot be used.

        Raises
        ------
        GCodeError
            If radius compensation is pending, the plane is not XY, ZX or
            YZ, or a coordinate or the feed is not finite.
        """
        w, s = self._require_started()
        if self._pending_compensation is not None:
            raise GCodeError(
                "Radius compensation cannot be activated/deactivated for a "
                "circular move."
            )
        if plane not in _ARC_PLANES:
            raise GCodeError("Circular interpolation plane is not supported.")
        _require_finite(cx, cy, cz, x, y, z, feed)
        start = self._require_position()
        end = (x, y, z)
        center = (cx, cy, cz)

        if plane is not Plane.XY:
            self._linearize(start, center, end, clockwise, plane, feed)
            return

        if is_full_circle(start, end, plane):
            if is_helical(start, end, plane):
                self._linearize(start, center, end, clockwise, plane, feed)
                return
            w.write_block(
                s.abs_inc.format(90),
                s.plane.format(17),
                s.motion.format(2 if clockwise else 3),
                s.i.format(cx - start[0], 0.0),
                s.j.format(cy - start[1], 0.0),
                s.feed.format(feed),
            )
        else:
            w.write_block(
                s.abs_inc.format(90),
                s.plane.format(17),
                s.motion.format(2 if clockwise else 3),
                s.x.format(x),
                s.y.format(y),
                s.z.format(z),
                s.i.format(cx - start[0], 0.0),
                s.j.format(cy - start[1], 0.0),
                s.feed.format(feed),
            )
        self._position = end

    def on_rapid_5d(self) -> None:
        raise GCodeError(
            "This post configuration has not been customized for 5-axis "
            "simultaneous toolpath."
        )

    def on_linear_5d(self) -> None:
        raise GCodeError(
            "This post configuration has not been customized for 5-axis "
            "simultaneous toolpath."
        )

    def on_cycle(self, kind: str) -> None:
        raise GCodeError(f"Canned cycles are not supported ({kind}).")

    def _linearize(
        self,
        start: Position,
        center: Position,
        end: Position,
        clockwise: bool,
        plane: Plane,
        feed: float,
    ) -> None:
        tolerance = self._cfg.machine.tolerance_mm
        if self._unit is Unit.IN:
            tolerance /= MM_PER_INCH
        points = linearize_arc(start, center, end, clockwise, plane, tolerance)
        logger.debug(
            "Linearizing %s arc into %d segments", plane.name, len(points),
        )
        for px, py, pz in points:
            self.on_linear(px, py, pz, feed)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_started(self) -> tuple[BlockWriter, EmitterState]:
        if self._writer is None or self._state is None:
            raise GCodeError("Generator not started; call begin() first.")
        return self._writer, self._state

    def _require_position(self) -> Position:
        if self._position is None:
            raise GCodeError("Arc start position is unknown.")
        return self._position

    def _advise(self, message: str) -> None:
        logger.warning(message)
        self.advisories.append(message)


# ---------------------------------------------------------------------------
# Module helpers
# ---------------------------------------------------------------------------


def _parse_program_number(name: str | None) -> int:
    """Validate a Fanuc program name and return its number.

    Raises
    ------
    GCodeError
        If the name is missing, not a number, or outside [1, 9999].
    """
    if name is None or not str(name).strip():
        raise GCodeError("Program name has not been specified.")
    text = str(name).strip()
    # digits only; int() alone would take "+12" and "1_000"
    if not _PROGRAM_NUMBER_RE.fullmatch(text):
        raise GCodeError(f"Program name must be a number, got {name!r}.")
    number = int(text)
    if number < PROGRAM_NUMBER_MIN or number > PROGRAM_NUMBER_MAX:
        raise GCodeError("Program number is out of range.")
    return number


def _require_finite(*values: float) -> None:
    for v in values:
        if not math.isfinite(v):
            raise GCodeError(f"Coordinate or feed is not a finite number: {v}.")


def _work_offset_words(offset: int) -> str:
    """Words selecting work offset *offset* (0 and 1 are both G54).

    Raises
    ------
    GCodeError
        Above the 48 extended offsets of ``G54.1 P1-48``.
    """
    if offset <= 1:
        return "G54"
    if offset <= 6:
        return format_code("G", 53 + offset)
    if offset <= 54:
        return f"{format_code('G', 54.1)} P{offset - 6}"
    raise GCodeError("Work offset out of range.")
