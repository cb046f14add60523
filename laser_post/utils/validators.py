"""YAML schema validation for tool-path program files.

A program file (schema ``program.v1``) is the on-disk form of a
:class:`~laser_post.job_ir.operations.Program`: a header plus a flat list of
operations tagged by ``op``.  Validation uses pydantic so that a bad file
fails before any G-code is written, with the offending entry named.

Example::

    schema: program.v1
    name: 12
    unit: mm
    comment: BRACKET 3MM
    operations:
      - {op: section, jet_mode: through, initial_position: [0, 0, 0]}
      - {op: power, enabled: true}
      - {op: linear, x: 50, y: 0, z: 0, feed: 3000}
      - {op: circular, clockwise: false, cx: 50, cy: 10, cz: 0,
         x: 60, y: 10, z: 0, feed: 3000}
      - {op: power, enabled: false}
      - {op: section_end}

Usage:
    from laser_post.utils import validators
    program = validators.load_program("bracket.yaml")
"""

from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from laser_post.job_ir.operations import (
    IDENTITY,
    CircularMove,
    Command,
    CommandKind,
    Comment,
    Compensation,
    Cycle,
    Dwell,
    JetMode,
    LinearMove,
    Operation,
    Plane,
    Power,
    Program,
    RadiusCompensation,
    RapidMove,
    Section,
    SectionEnd,
    ToolType,
    Unit,
)

Vector3 = Tuple[float, float, float]


def _by_name(enum_cls, value: Any) -> Any:
    """Accept enum member names (``"left"``, ``"xy"``) as well as values."""
    if isinstance(value, str) and value.upper() in enum_cls.__members__:
        return enum_cls[value.upper()]
    return value


# ============================================================================
# OPERATION SCHEMAS
# ============================================================================

class _OperationModel(BaseModel):
    # NaN and inf would be written verbatim as `Xnan`, `G4 Pinf`
    model_config = ConfigDict(allow_inf_nan=False)


class SectionV1(_OperationModel):
    """Start of a cutting section."""
    op: Literal["section"]
    tool_type: ToolType = Field(ToolType.LASER_CUTTER, description="Tool family")
    jet_mode: JetMode = Field(JetMode.THROUGH, description="Cutting mode")
    initial_position: Vector3 = Field(..., description="First position (x, y, z)")
    work_offset: int = Field(0, ge=0, description="Work coordinate system")
    orientation: Tuple[Vector3, Vector3, Vector3] = Field(IDENTITY, description="Work-plane rotation")
    power: Optional[float] = Field(None, ge=0.0, description="Beam power (S word)")
    comment: Optional[str] = None

    def to_operation(self) -> Operation:
        return Section(
            tool_type=self.tool_type,
            jet_mode=self.jet_mode,
            initial_position=self.initial_position,
            work_offset=self.work_offset,
            orientation=self.orientation,
            power=self.power,
            comment=self.comment,
        )


class SectionEndV1(_OperationModel):
    op: Literal["section_end"]

    def to_operation(self) -> Operation:
        return SectionEnd()


class RapidV1(_OperationModel):
    op: Literal["rapid"]
    x: float
    y: float
    z: float = 0.0

    def to_operation(self) -> Operation:
        return RapidMove(x=self.x, y=self.y, z=self.z)


class LinearV1(_OperationModel):
    op: Literal["linear"]
    x: float
    y: float
    z: float = 0.0
    feed: float = Field(..., gt=0.0, description="Feed rate (units/min)")

    def to_operation(self) -> Operation:
        return LinearMove(x=self.x, y=self.y, z=self.z, feed=self.feed)


class CircularV1(_OperationModel):
    """Arc with absolute centre and end point."""
    op: Literal["circular"]
    clockwise: bool
    cx: float
    cy: float
    cz: float = 0.0
    x: float
    y: float
    z: float = 0.0
    feed: float = Field(..., gt=0.0)
    plane: Plane = Plane.XY

    @field_validator('plane', mode='before')
    @classmethod
    def plane_by_name(cls, v: Any) -> Any:
        return _by_name(Plane, v)

    def to_operation(self) -> Operation:
        return CircularMove(
            clockwise=self.clockwise,
            cx=self.cx, cy=self.cy, cz=self.cz,
            x=self.x, y=self.y, z=self.z,
            feed=self.feed,
            plane=self.plane,
        )


class DwellV1(_OperationModel):
    op: Literal["dwell"]
    seconds: float

    def to_operation(self) -> Operation:
        return Dwell(seconds=self.seconds)


class PowerV1(_OperationModel):
    op: Literal["power"]
    enabled: bool

    def to_operation(self) -> Operation:
        return Power(enabled=self.enabled)


class CompensationV1(_OperationModel):
    op: Literal["compensation"]
    side: Compensation

    @field_validator('side', mode='before')
    @classmethod
    def side_by_name(cls, v: Any) -> Any:
        return _by_name(Compensation, v)

    def to_operation(self) -> Operation:
        return RadiusCompensation(side=self.side)


class CommandV1(_OperationModel):
    op: Literal["command"]
    kind: CommandKind

    def to_operation(self) -> Operation:
        return Command(kind=self.kind)


class CommentV1(_OperationModel):
    op: Literal["comment"]
    text: str

    def to_operation(self) -> Operation:
        return Comment(text=self.text)


class CycleV1(_OperationModel):
    op: Literal["cycle"]
    kind: str
    parameters: Dict[str, float] = Field(default_factory=dict)

    def to_operation(self) -> Operation:
        return Cycle(kind=self.kind, parameters=dict(self.parameters))


OperationV1 = Annotated[
    Union[
        SectionV1,
        SectionEndV1,
        RapidV1,
        LinearV1,
        CircularV1,
        DwellV1,
        PowerV1,
        CompensationV1,
        CommandV1,
        CommentV1,
        CycleV1,
    ],
    Field(discriminator="op"),
]


# ============================================================================
# PROGRAM SCHEMA V1
# ============================================================================

class ProgramV1(BaseModel):
    """Program file (program.v1 schema)."""
    model_config = ConfigDict(populate_by_name=True)

    schema_version: str = Field("program.v1", alias="schema", description="Schema version")
    name: str = Field(..., description="Program number, 1-9999")
    unit: Unit = Unit.MM
    comment: Optional[str] = None
    operations: List[OperationV1] = Field(default_factory=list)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "program.v1":
            raise ValueError(f"Expected schema 'program.v1', got '{v}'")
        return v

    @field_validator('name', mode='before')
    @classmethod
    def name_as_text(cls, v: Any) -> Any:
        # YAML reads `name: 12` as an int
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    def to_program(self) -> Program:
        return Program(
            name=self.name,
            operations=tuple(op.to_operation() for op in self.operations),
            unit=self.unit,
            comment=self.comment,
        )


# ============================================================================
# PUBLIC API
# ============================================================================

def parse_program(data: Dict[str, Any]) -> Program:
    """Validate an already-loaded program mapping.

    Raises
    ------
    ValueError
        If validation fails.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Program must be a mapping, got {type(data).__name__}")
    try:
        return ProgramV1(**data).to_program()
    except ValidationError as e:
        raise ValueError(f"Program validation failed: {e}") from e


def load_program(path: Union[str, Path]) -> Program:
    """Load and validate a program file from YAML.

    Parameters
    ----------
    path : Union[str, Path]
        Path to a program.v1 YAML file

    Returns
    -------
    Program
        Validated program

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (with actionable error message)
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Program file not found: {path}")

    data = fs.load_yaml(path)
    try:
        return parse_program(data)
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e
