"""Job IR operations -- the vocabulary between the CAM kernel and G-code.

Every tool-path event is an immutable, slotted dataclass.  A post run walks
a flat ``list[Operation]`` in program order; the G-code generator calls one
handler per operation.

Coordinates are absolute work coordinates in the program unit (mm or
inch).  Arc centres are absolute too; the generator turns them into
start-relative I/J offsets.

Grouping
--------
A *Section* opens one cutting operation (tool, cutting mode, work offset,
initial position).  Everything up to the matching ``SectionEnd`` belongs
to that section.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

Position = tuple[float, float, float]
"""Absolute ``(x, y, z)`` position in program units."""

Orientation = tuple[
    tuple[float, float, float],
    tuple[float, float, float],
    tuple[float, float, float],
]
"""Work-plane rotation matrix, row major."""

IDENTITY: Orientation = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Unit(Enum):
    """Program unit."""

    MM = "mm"
    IN = "in"


class Plane(Enum):
    """Circular interpolation plane."""

    XY = 17
    ZX = 18
    YZ = 19
    OTHER = 0


class ToolType(Enum):
    """Tool families a CAM kernel may hand over."""

    LASER_CUTTER = "laser_cutter"
    WATER_JET = "water_jet"
    PLASMA_CUTTER = "plasma_cutter"
    MILLING = "milling"


class JetMode(Enum):
    """Cutting mode of a jet/beam tool."""

    THROUGH = "through"
    ETCHING = "etching"
    VAPORIZE = "vaporize"
    NONE = "none"


class Compensation(Enum):
    """Tool radius compensation side."""

    OFF = 40
    LEFT = 41
    RIGHT = 42


class CommandKind(Enum):
    """Machine commands a tool path may request."""

    POWER_ON = "power_on"
    POWER_OFF = "power_off"
    LOCK_MULTI_AXIS = "lock_multi_axis"
    UNLOCK_MULTI_AXIS = "unlock_multi_axis"
    BREAK_CONTROL = "break_control"
    TOOL_MEASURE = "tool_measure"
    STOP = "stop"
    OPTIONAL_STOP = "optional_stop"
    END = "end"
    COOLANT_OFF = "coolant_off"
    COOLANT_ON = "coolant_on"
    LOAD_TOOL = "load_tool"
    SPINDLE_CLOCKWISE = "spindle_clockwise"
    SPINDLE_COUNTERCLOCKWISE = "spindle_counterclockwise"


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Operation(ABC):
    """Base class for all tool-path operations."""

    pass


# ---------------------------------------------------------------------------
# Section operations
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Section(Operation):
    """Start of a cutting section.

    Parameters
    ----------
    tool_type : ToolType
        Tool family.  Only ``LASER_CUTTER`` can be posted.
    jet_mode : JetMode
        Through cutting, etching or vaporizing.
    initial_position : Position
        First position of the section, reached with a rapid move.
    work_offset : int
        Work coordinate system; 0 and 1 both select G54.
    orientation : Orientation
        Work-plane rotation.  Must be the identity for a 2-axis laser.
    power : float | None
        Beam power (``S`` word) written with the power-on code.
    comment : str | None
        Section description written as a comment.
    """

    tool_type: ToolType
    jet_mode: JetMode
    initial_position: Position
    work_offset: int = 0
    orientation: Orientation = IDENTITY
    power: float | None = None
    comment: str | None = None

    def __post_init__(self) -> None:
        if len(self.initial_position) != 3:
            raise ValueError(
                "initial_position must have 3 coordinates, "
                f"got {len(self.initial_position)}"
            )
        if self.work_offset < 0:
            raise ValueError(
                f"work_offset must be >= 0, got {self.work_offset}"
            )

    @property
    def is_identity_orientation(self) -> bool:
        """True when the work plane is not rotated."""
        return all(
            abs(self.orientation[r][c] - IDENTITY[r][c]) < 1e-9
            for r in range(3)
            for c in range(3)
        )


@dataclass(frozen=True, slots=True)
class SectionEnd(Operation):
    """End of the current cutting section."""

    pass


# ---------------------------------------------------------------------------
# Motion operations
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RapidMove(Operation):
    """Rapid traverse (G0) -- beam must be off."""

    x: float
    y: float
    z: float


@dataclass(frozen=True, slots=True)
class LinearMove(Operation):
    """Straight cut at feed rate (G1).

    Parameters
    ----------
    x, y, z : float
        End point.
    feed : float
        Feed rate in program units per minute.
    """

    x: float
    y: float
    z: float
    feed: float


@dataclass(frozen=True, slots=True)
class CircularMove(Operation):
    """Circular arc at feed rate (G2/G3).

    Parameters
    ----------
    clockwise : bool
        ``True`` for G2, ``False`` for G3.
    cx, cy, cz : float
        Absolute arc centre.
    x, y, z : float
        End point.  Equal to the start point for a full circle.
    feed : float
        Feed rate in program units per minute.
    plane : Plane
        Interpolation plane.
    """

    clockwise: bool
    cx: float
    cy: float
    cz: float
    x: float
    y: float
    z: float
    feed: float
    plane: Plane = Plane.XY


@dataclass(frozen=True, slots=True)
class RapidMove5D(Operation):
    """Simultaneous 5-axis rapid.  Cannot be posted on a 2-axis laser."""

    x: float
    y: float
    z: float
    a: float
    b: float
    c: float


@dataclass(frozen=True, slots=True)
class LinearMove5D(Operation):
    """Simultaneous 5-axis cut.  Cannot be posted on a 2-axis laser."""

    x: float
    y: float
    z: float
    a: float
    b: float
    c: float
    feed: float


@dataclass(frozen=True, slots=True)
class Cycle(Operation):
    """Canned cycle request.  Not supported by the laser."""

    kind: str
    parameters: dict[str, float] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Machine state operations
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Dwell(Operation):
    """Pause for *seconds*."""

    seconds: float


@dataclass(frozen=True, slots=True)
class Power(Operation):
    """Switch the beam on or off."""

    enabled: bool


@dataclass(frozen=True, slots=True)
class RadiusCompensation(Operation):
    """Request radius compensation, applied on the next linear move."""

    side: Compensation


@dataclass(frozen=True, slots=True)
class Command(Operation):
    """Machine command."""

    kind: CommandKind


@dataclass(frozen=True, slots=True)
class Comment(Operation):
    """Free text written as a comment line."""

    text: str


# ---------------------------------------------------------------------------
# Program container
# ---------------------------------------------------------------------------


MOTION_OPERATIONS = (
    RapidMove,
    LinearMove,
    CircularMove,
    RapidMove5D,
    LinearMove5D,
)


def is_motion(op: Operation | None) -> bool:
    """True when *op* moves the machine."""
    return isinstance(op, MOTION_OPERATIONS)


@dataclass(frozen=True, slots=True)
class Program:
    """A complete tool-path program.

    Parameters
    ----------
    name : str
        Program name.  Must be a number in [1, 9999] for Fanuc controls.
    operations : tuple[Operation, ...]
        Events in program order.
    unit : Unit
        Program unit.
    comment : str | None
        Program comment written after the ``O`` line.
    """

    name: str
    operations: tuple[Operation, ...] = ()
    unit: Unit = Unit.MM
    comment: str | None = None

