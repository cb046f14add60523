"""Tests for arc geometry helpers.

Linearized arcs must end exactly on the arc end point and never deviate
from the true arc by more than the tolerance.
"""

from __future__ import annotations

import math

import pytest

from laser_post.gcode.arcs import (
    arc_sweep,
    is_full_circle,
    is_helical,
    linearize_arc,
    segment_count,
)
from laser_post.job_ir.operations import Plane


class TestClassification:
    def test_full_circle(self) -> None:
        assert is_full_circle((1.0, 2.0, 0.0), (1.0, 2.0, 0.0))
        assert not is_full_circle((1.0, 2.0, 0.0), (1.0, 2.5, 0.0))

    def test_full_circle_ignores_normal_axis(self) -> None:
        assert is_full_circle((1.0, 2.0, 0.0), (1.0, 2.0, -3.0), Plane.XY)
        assert not is_full_circle((1.0, 2.0, 0.0), (1.0, 2.0, -3.0), Plane.ZX)

    def test_helical(self) -> None:
        assert is_helical((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), Plane.XY)
        assert not is_helical((0.0, 0.0, 0.0), (5.0, 5.0, 0.0), Plane.XY)
        assert is_helical((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), Plane.ZX)

    def test_unknown_plane(self) -> None:
        with pytest.raises(ValueError, match="Cannot resolve arc plane"):
            is_full_circle((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), Plane.OTHER)


class TestSweep:
    def test_quarter_ccw(self) -> None:
        sweep = arc_sweep((1.0, 0.0, 0.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0), False)
        assert sweep == pytest.approx(math.pi / 2)

    def test_quarter_cw_goes_the_long_way(self) -> None:
        sweep = arc_sweep((1.0, 0.0, 0.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0), True)
        assert sweep == pytest.approx(3 * math.pi / 2)

    def test_full_turn(self) -> None:
        sweep = arc_sweep((1.0, 0.0, 0.0), (0.0, 0.0, 0.0), (1.0, 0.0, 0.0), True)
        assert sweep == pytest.approx(2 * math.pi)


class TestSegmentCount:
    def test_tighter_tolerance_more_segments(self) -> None:
        assert segment_count(10.0, math.pi, 0.001) > segment_count(10.0, math.pi, 0.1)

    def test_tiny_radius(self) -> None:
        assert segment_count(0.005, 2 * math.pi, 0.01) == 1

    @pytest.mark.parametrize("tolerance", [0.0, -0.01])
    def test_invalid_tolerance(self, tolerance: float) -> None:
        with pytest.raises(ValueError, match="tolerance must be > 0"):
            segment_count(10.0, math.pi, tolerance)


class TestLinearize:
    @pytest.mark.parametrize(
        "plane, start",
        [
            (Plane.XY, (5.0, 0.0, 0.0)),
            (Plane.ZX, (5.0, 0.0, 0.0)),
            (Plane.YZ, (0.0, 5.0, 0.0)),
        ],
    )
    def test_full_circle_within_tolerance(
        self, plane: Plane, start: tuple[float, float, float],
    ) -> None:
        center = (0.0, 0.0, 0.0)
        tol = 0.01
        points = linearize_arc(start, center, start, False, plane, tol)

        assert points[-1] == start
        assert len(points) == segment_count(5.0, 2 * math.pi, tol)
        assert start not in points[:-1]

        prev = start
        for p in points:
            mid = tuple((a + b) / 2 for a, b in zip(prev, p))
            assert math.dist(mid, center) >= 5.0 - tol - 1e-9
            prev = p

    def test_zx_circle_stays_in_plane(self) -> None:
        start = (0.0, 2.0, 0.0)
        center = (0.0, 2.0, -5.0)
        points = linearize_arc(start, center, start, False, Plane.ZX, 0.01)
        assert all(p[1] == pytest.approx(2.0) for p in points)
        assert all(math.hypot(p[0], p[2] + 5.0) == pytest.approx(5.0) for p in points)

    def test_helix_moves_monotonically(self) -> None:
        start = (10.0, 0.0, 0.0)
        end = (10.0, 0.0, -2.0)
        points = linearize_arc(start, (0.0, 0.0, 0.0), end, True, Plane.XY, 0.01)
        zs = [p[2] for p in points]
        assert zs == sorted(zs, reverse=True)
        assert points[-1] == end

    def test_direction(self) -> None:
        start = (1.0, 0.0, 0.0)
        end = (-1.0, 0.0, 0.0)
        ccw = linearize_arc(start, (0.0, 0.0, 0.0), end, False, Plane.XY, 0.001)
        cw = linearize_arc(start, (0.0, 0.0, 0.0), end, True, Plane.XY, 0.001)
        assert all(p[1] >= -1e-12 for p in ccw)
        assert all(p[1] <= 1e-12 for p in cw)
