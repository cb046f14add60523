"""Test-cut pattern generators.

Each function returns a flat ``list[Operation]`` forming one complete
cutting section (section start, pierce, cut, beam off, section end), ready
to wrap in a :class:`~laser_post.job_ir.operations.Program`.

Common parameters accepted by every pattern:

    origin : tuple[float, float]
        Reference point of the pattern on the sheet (mm).
    feed : float
        Cutting feed (mm/min).
    mode : JetMode
        Cutting mode; ``THROUGH`` by default.
"""

from __future__ import annotations

from laser_post.job_ir.operations import (
    CircularMove,
    Comment,
    JetMode,
    LinearMove,
    Operation,
    Power,
    RapidMove,
    Section,
    SectionEnd,
    ToolType,
)

_DEFAULT_FEED = 3000.0


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _section(
    start: tuple[float, float],
    mode: JetMode,
    comment: str,
) -> list[Operation]:
    """Section start at *start*, then pierce."""
    return [
        Section(
            tool_type=ToolType.LASER_CUTTER,
            jet_mode=mode,
            initial_position=(start[0], start[1], 0.0),
            comment=comment,
        ),
        Power(enabled=True),
    ]


def _check_feed(feed: float) -> None:
    if feed <= 0:
        raise ValueError(f"feed must be > 0, got {feed}")


def _finish() -> list[Operation]:
    return [Power(enabled=False), SectionEnd()]


def _polyline(points: list[tuple[float, float]], feed: float) -> list[Operation]:
    return [LinearMove(x=x, y=y, z=0.0, feed=feed) for x, y in points]


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------


def square(
    size_mm: float = 50.0,
    origin: tuple[float, float] = (10.0, 10.0),
    feed: float = _DEFAULT_FEED,
    mode: JetMode = JetMode.THROUGH,
) -> list[Operation]:
    """Square with its lower-left corner at *origin* -- verify XY scaling."""
    if size_mm <= 0:
        raise ValueError(f"size_mm must be > 0, got {size_mm}")
    _check_feed(feed)
    x0, y0 = origin
    pts = [
        (x0 + size_mm, y0),
        (x0 + size_mm, y0 + size_mm),
        (x0, y0 + size_mm),
        (x0, y0),
    ]
    return (
        _section((x0, y0), mode, f"SQUARE {size_mm:g}MM")
        + _polyline(pts, feed)
        + _finish()
    )


def circle(
    diameter_mm: float = 50.0,
    origin: tuple[float, float] = (35.0, 35.0),
    feed: float = _DEFAULT_FEED,
    mode: JetMode = JetMode.THROUGH,
    clockwise: bool = False,
) -> list[Operation]:
    """Full circle centred on *origin* -- verify roundness.

    Posted as a single G2/G3 block with I/J offsets.
    """
    if diameter_mm <= 0:
        raise ValueError(f"diameter_mm must be > 0, got {diameter_mm}")
    _check_feed(feed)
    cx, cy = origin
    start = (cx + diameter_mm / 2.0, cy)
    arc = CircularMove(
        clockwise=clockwise,
        cx=cx, cy=cy, cz=0.0,
        x=start[0], y=start[1], z=0.0,
        feed=feed,
    )
    return (
        _section(start, mode, f"CIRCLE D{diameter_mm:g}MM")
        + [arc]
        + _finish()
    )


def slot(
    length_mm: float = 40.0,
    width_mm: float = 10.0,
    origin: tuple[float, float] = (10.0, 80.0),
    feed: float = _DEFAULT_FEED,
    mode: JetMode = JetMode.THROUGH,
) -> list[Operation]:
    """Obround slot -- verify line/arc transitions.

    *origin* is the centre of the left end radius; the slot runs along +X.
    """
    if width_mm <= 0 or length_mm <= width_mm:
        raise ValueError(
            f"slot needs 0 < width < length, got width={width_mm}, "
            f"length={length_mm}"
        )
    _check_feed(feed)
    r = width_mm / 2.0
    x0, y0 = origin
    x1 = x0 + length_mm - width_mm
    ops = _section((x0, y0 - r), mode, f"SLOT {length_mm:g}X{width_mm:g}MM")
    ops += [
        LinearMove(x=x1, y=y0 - r, z=0.0, feed=feed),
        CircularMove(
            clockwise=False, cx=x1, cy=y0, cz=0.0,
            x=x1, y=y0 + r, z=0.0, feed=feed,
        ),
        LinearMove(x=x0, y=y0 + r, z=0.0, feed=feed),
        CircularMove(
            clockwise=False, cx=x0, cy=y0, cz=0.0,
            x=x0, y=y0 - r, z=0.0, feed=feed,
        ),
    ]
    return ops + _finish()


def etch_mark(
    size_mm: float = 10.0,
    origin: tuple[float, float] = (100.0, 100.0),
    feed: float = _DEFAULT_FEED,
) -> list[Operation]:
    """Etched cross centred on *origin* -- part marking check."""
    if size_mm <= 0:
        raise ValueError(f"size_mm must be > 0, got {size_mm}")
    _check_feed(feed)
    half = size_mm / 2.0
    cx, cy = origin
    ops = _section((cx - half, cy), JetMode.ETCHING, "ETCH MARK")
    ops += _polyline([(cx + half, cy)], feed)
    ops += [
        Power(enabled=False),
        Comment(text="SECOND STROKE"),
        RapidMove(x=cx, y=cy - half, z=0.0),
        Power(enabled=True),
        LinearMove(x=cx, y=cy + half, z=0.0, feed=feed),
    ]
    return ops + _finish()


PATTERNS = {
    "square": square,
    "circle": circle,
    "slot": slot,
    "etch-mark": etch_mark,
}
