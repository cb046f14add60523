"""Arc geometry helpers -- full-circle detection and linearization.

Arcs the control cannot take as G2/G3 (planes other than XY, helical full
circles) are replaced by short line segments whose chordal deviation from
the true arc stays within a tolerance::

    step = 2 * acos(1 - tolerance / radius)
    segments = ceil(sweep / step)

Each plane is handled in its own (u, v, w) frame where (u, v) span the
plane and w is the normal, so that "clockwise" means a negative rotation
about w::

    XY: (x, y, z)    ZX: (z, x, y)    YZ: (y, z, x)
"""

from __future__ import annotations

import math

from laser_post.job_ir.operations import Plane, Position

_EPS = 1e-9

# Index of (u, v, w) inside an (x, y, z) tuple.
_AXES: dict[Plane, tuple[int, int, int]] = {
    Plane.XY: (0, 1, 2),
    Plane.ZX: (2, 0, 1),
    Plane.YZ: (1, 2, 0),
}


def _frame(plane: Plane) -> tuple[int, int, int]:
    if plane not in _AXES:
        raise ValueError(f"Cannot resolve arc plane {plane.name}")
    return _AXES[plane]


def is_full_circle(start: Position, end: Position, plane: Plane = Plane.XY) -> bool:
    """True when *start* and *end* coincide within the arc plane."""
    u, v, _ = _frame(plane)
    return abs(start[u] - end[u]) < _EPS and abs(start[v] - end[v]) < _EPS


def is_helical(start: Position, end: Position, plane: Plane = Plane.XY) -> bool:
    """True when the arc also moves along the plane normal."""
    _, _, w = _frame(plane)
    return abs(start[w] - end[w]) >= _EPS


def arc_sweep(
    start: Position,
    center: Position,
    end: Position,
    clockwise: bool,
    plane: Plane = Plane.XY,
) -> float:
    """Swept angle in radians, in (0, 2*pi].

    Coinciding start and end angles are taken as a full turn.
    """
    u, v, _ = _frame(plane)
    a0 = math.atan2(start[v] - center[v], start[u] - center[u])
    a1 = math.atan2(end[v] - center[v], end[u] - center[u])
    sweep = (a0 - a1) if clockwise else (a1 - a0)
    sweep %= 2.0 * math.pi
    if sweep < _EPS:
        sweep = 2.0 * math.pi
    return sweep


def segment_count(radius: float, sweep: float, tolerance: float) -> int:
    """Number of chords keeping the deviation within *tolerance*."""
    if tolerance <= 0:
        raise ValueError(f"tolerance must be > 0, got {tolerance}")
    if radius <= tolerance:
        return 1
    step = 2.0 * math.acos(1.0 - tolerance / radius)
    return max(1, math.ceil(sweep / step))


def linearize_arc(
    start: Position,
    center: Position,
    end: Position,
    clockwise: bool,
    plane: Plane,
    tolerance: float,
) -> list[Position]:
    """Approximate an arc by line segments.

    Parameters
    ----------
    start, center, end : Position
        Absolute arc start, centre and end.
    clockwise : bool
        Direction about the plane normal.
    plane : Plane
        ``XY``, ``ZX`` or ``YZ``.
    tolerance : float
        Maximum chordal deviation.

    Returns
    -------
    list[Position]
        Segment end points, excluding *start*; the last one is *end*.
    """
    u, v, w = _frame(plane)
    r0 = math.hypot(start[u] - center[u], start[v] - center[v])
    r1 = math.hypot(end[u] - center[u], end[v] - center[v])
    a0 = math.atan2(start[v] - center[v], start[u] - center[u])
    sweep = arc_sweep(start, center, end, clockwise, plane)
    direction = -1.0 if clockwise else 1.0

    n = segment_count(max(r0, r1), sweep, tolerance)
    points: list[Position] = []
    for step in range(1, n):
        t = step / n
        angle = a0 + direction * sweep * t
        radius = r0 + (r1 - r0) * t
        p = [0.0, 0.0, 0.0]
        p[u] = center[u] + radius * math.cos(angle)
        p[v] = center[v] + radius * math.sin(angle)
        p[w] = start[w] + (end[w] - start[w]) * t
        points.append((p[0], p[1], p[2]))
    points.append((float(end[0]), float(end[1]), float(end[2])))
    return points
