"""Number formats -- numeric values to G-code word tokens.

A format is stateless: the same value always renders to the same text.
Rendering goes through Python's fixed-point formatting, so the output is
locale-independent (``.`` as decimal point, no grouping separators).

Precision follows the program unit::

    MM: coordinates 3 decimals, feed 1 decimal
    IN: coordinates 4 decimals, feed 2 decimals

Usage::

    from laser_post.gcode.formats import FormatRegistry
    fmts = FormatRegistry.for_unit(Unit.MM)
    fmts.xyz.format(3)      # "3.000"
    fmts.o.format(12)       # "O0012"
"""

from __future__ import annotations

from dataclasses import dataclass

from laser_post.job_ir.operations import Unit


@dataclass(frozen=True, slots=True)
class NumberFormat:
    """Fixed-precision numeric format.

    Parameters
    ----------
    prefix : str
        Text placed before the number (``"O"``, ``"N"``...).  Channel
        prefixes such as ``X`` live on the output variable, not here.
    decimals : int
        Digits after the decimal point.
    force_decimal : bool
        Print the decimal point even when ``decimals == 0``.
    width : int
        Minimum number of integer digits, zero padded.
    force_sign : bool
        Prefix ``+`` on non-negative values.
    scale : float
        Multiplier applied before rounding.
    """

    prefix: str = ""
    decimals: int = 0
    force_decimal: bool = False
    width: int = 0
    force_sign: bool = False
    scale: float = 1.0

    def __post_init__(self) -> None:
        if self.decimals < 0:
            raise ValueError(f"decimals must be >= 0, got {self.decimals}")
        if self.width < 0:
            raise ValueError(f"width must be >= 0, got {self.width}")

    def format(self, value: float) -> str:
        """Render *value* as ``prefix + number``."""
        return self.prefix + self.format_number(value)

    def format_number(self, value: float) -> str:
        """Render *value* without the prefix."""
        v = round(float(value) * self.scale, self.decimals)
        if v == 0:
            v = 0.0  # drop the sign of negative zero
        text = f"{abs(v):.{self.decimals}f}"
        if self.width:
            int_part, dot, frac = text.partition(".")
            text = int_part.zfill(self.width) + dot + frac
        if self.force_decimal and self.decimals == 0:
            text += "."
        if v < 0:
            return "-" + text
        if self.force_sign:
            return "+" + text
        return text


def format_code(prefix: str, code: float) -> str:
    """Render a G/M code word, keeping one decimal only when needed.

    >>> format_code("G", 17)
    'G17'
    >>> format_code("G", 54.1)
    'G54.1'
    """
    c = round(float(code), 1)
    if c == int(c):
        return f"{prefix}{int(c)}"
    return f"{prefix}{c:.1f}"


@dataclass(frozen=True, slots=True)
class FormatRegistry:
    """The set of number formats used by one post-processing run."""

    o: NumberFormat
    n: NumberFormat
    xyz: NumberFormat
    feed: NumberFormat
    power: NumberFormat
    sec: NumberFormat

    @classmethod
    def for_unit(cls, unit: Unit) -> FormatRegistry:
        """Build the registry for a program unit."""
        metric = unit is Unit.MM
        return cls(
            o=NumberFormat(prefix="O", width=4),
            n=NumberFormat(prefix="N"),
            xyz=NumberFormat(decimals=3 if metric else 4),
            feed=NumberFormat(decimals=1 if metric else 2),
            power=NumberFormat(),
            sec=NumberFormat(decimals=3, force_decimal=True),
        )
