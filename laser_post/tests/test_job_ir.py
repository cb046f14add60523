"""Tests for Job IR operations module.

Validates dataclass creation, immutability, validation and the motion
helper.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from laser_post.job_ir.operations import (
    IDENTITY,
    CircularMove,
    Command,
    CommandKind,
    Comment,
    Dwell,
    JetMode,
    LinearMove,
    Operation,
    Plane,
    Power,
    Program,
    RapidMove,
    RapidMove5D,
    Section,
    SectionEnd,
    ToolType,
    Unit,
    is_motion,
)


def _section(**kwargs) -> Section:
    kwargs.setdefault("tool_type", ToolType.LASER_CUTTER)
    kwargs.setdefault("jet_mode", JetMode.THROUGH)
    kwargs.setdefault("initial_position", (0.0, 0.0, 0.0))
    return Section(**kwargs)


# ---------------------------------------------------------------------------
# Dataclass creation and immutability
# ---------------------------------------------------------------------------


class TestOperationDataclasses:
    def test_section_defaults(self) -> None:
        s = _section()
        assert isinstance(s, Operation)
        assert s.work_offset == 0
        assert s.orientation == IDENTITY
        assert s.power is None
        assert s.is_identity_orientation

    def test_section_rotated(self) -> None:
        s = _section(orientation=((0.0, -1.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 1.0)))
        assert not s.is_identity_orientation

    def test_section_near_identity(self) -> None:
        s = _section(orientation=((1.0, 1e-12, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)))
        assert s.is_identity_orientation

    def test_section_bad_position(self) -> None:
        with pytest.raises(ValueError, match="3 coordinates"):
            _section(initial_position=(0.0, 0.0))

    def test_section_negative_offset(self) -> None:
        with pytest.raises(ValueError, match="work_offset"):
            _section(work_offset=-1)

    def test_circular_default_plane(self) -> None:
        arc = CircularMove(
            clockwise=True, cx=0.0, cy=0.0, cz=0.0,
            x=1.0, y=0.0, z=0.0, feed=100.0,
        )
        assert arc.plane is Plane.XY

    def test_frozen(self) -> None:
        move = LinearMove(x=1.0, y=2.0, z=0.0, feed=100.0)
        with pytest.raises(FrozenInstanceError):
            move.x = 5.0  # type: ignore[misc]

    def test_equality(self) -> None:
        assert Power(enabled=True) == Power(enabled=True)
        assert Command(kind=CommandKind.STOP) != Command(kind=CommandKind.END)

    def test_program_defaults(self) -> None:
        p = Program(name="12")
        assert p.operations == ()
        assert p.unit is Unit.MM
        assert p.comment is None


class TestEnums:
    def test_plane_codes(self) -> None:
        assert [Plane.XY.value, Plane.ZX.value, Plane.YZ.value] == [17, 18, 19]

    def test_command_values_unique(self) -> None:
        values = [k.value for k in CommandKind]
        assert len(values) == len(set(values))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_is_motion(self) -> None:
        assert is_motion(RapidMove(x=0.0, y=0.0, z=0.0))
        assert is_motion(LinearMove(x=0.0, y=0.0, z=0.0, feed=1.0))
        assert is_motion(RapidMove5D(x=0, y=0, z=0, a=0, b=0, c=0))
        assert not is_motion(Power(enabled=False))
        assert not is_motion(Dwell(seconds=1.0))
        assert not is_motion(None)
