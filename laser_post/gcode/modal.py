"""Modal output cache -- suppress words the control already knows.

Modal G-code keeps every address value until it is overwritten, so a word
whose value did not change is redundant.  Each channel remembers the last
token it emitted and returns an empty string for a repeat.

Comparison happens on the *formatted* token, so two values that round to
the same text at output precision count as equal.

Three kinds of channel:

    OutputVariable     X, Y, Z, F, S -- emit on change
    ReferenceVariable  I, J, K       -- emit when different from a reference
    Modal              G/M groups    -- emit on change, optional callback

All channels of one run are owned by an ``EmitterState``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from laser_post.gcode.formats import FormatRegistry, NumberFormat, format_code

logger = logging.getLogger(__name__)


class OutputVariable:
    """One modal output channel (X, Y, Z, F, S).

    Parameters
    ----------
    prefix : str
        Address letter.
    fmt : NumberFormat
        Number format for the value.
    force : bool
        Emit on every call, even for an unchanged value.
    """

    def __init__(self, prefix: str, fmt: NumberFormat, force: bool = False) -> None:
        self.prefix = prefix
        self.fmt = fmt
        self.force = force
        self._last: str | None = None
        self._current: float | None = None
        self._enabled = True

    @property
    def current(self) -> float | None:
        """Last emitted value, or ``None`` after a reset."""
        return self._current

    @property
    def enabled(self) -> bool:
        return self._enabled

    def format(self, value: float) -> str:
        """Return ``prefix + token`` if it must be emitted, else ``""``."""
        if not self._enabled:
            return ""
        token = self.fmt.format_number(value)
        if not self.force and token == self._last:
            return ""
        self._last = token
        self._current = value
        return self.prefix + token

    def reset(self) -> None:
        """Forget the last emitted value; the next ``format`` emits."""
        self._last = None
        self._current = None

    def disable(self) -> None:
        """Never emit this channel again."""
        self._enabled = False

    def enable(self) -> None:
        self._enabled = True


class ReferenceVariable:
    """Channel emitted only when its value differs from a reference.

    Used for arc centre offsets: an I or J of zero is implied.
    """

    def __init__(self, prefix: str, fmt: NumberFormat) -> None:
        self.prefix = prefix
        self.fmt = fmt

    def format(self, value: float, reference: float = 0.0) -> str:
        token = self.fmt.format_number(value)
        if token == self.fmt.format_number(reference):
            return ""
        return self.prefix + token


class Modal:
    """A group of mutually exclusive codes (G0/G1/G2/G3, G17/G18/G19...).

    Parameters
    ----------
    prefix : str
        ``"G"`` or ``"M"``.
    force : bool
        Emit on every call.
    on_change : Callable[[], None] | None
        Called after the active code changes.
    """

    def __init__(
        self,
        prefix: str = "G",
        force: bool = False,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.prefix = prefix
        self.force = force
        self.on_change = on_change
        self._active: str | None = None

    @property
    def active(self) -> str | None:
        """Active code word, e.g. ``"G17"``."""
        return self._active

    def format(self, code: float) -> str:
        word = format_code(self.prefix, code)
        if not self.force and word == self._active:
            return ""
        changed = word != self._active
        self._active = word
        if changed and self.on_change is not None:
            self.on_change()
        return word

    def reset(self) -> None:
        """Force the next ``format`` to emit."""
        self._active = None


# ---------------------------------------------------------------------------
# Emitter state
# ---------------------------------------------------------------------------


@dataclass
class EmitterState:
    """All output channels of one post-processing run.

    Build with :meth:`create`.  Owned by the generator; nothing here is
    module-level.
    """

    formats: FormatRegistry
    x: OutputVariable
    y: OutputVariable
    z: OutputVariable
    feed: OutputVariable
    power: OutputVariable
    i: ReferenceVariable
    j: ReferenceVariable
    k: ReferenceVariable
    motion: Modal
    plane: Modal
    abs_inc: Modal
    feed_mode: Modal
    units: Modal

    @classmethod
    def create(cls, formats: FormatRegistry, use_feed: bool = True) -> EmitterState:
        """Build fresh channels for one run.

        Parameters
        ----------
        formats : FormatRegistry
            Unit-dependent number formats.
        use_feed : bool
            ``False`` disables the F channel entirely.
        """
        motion = Modal("G")
        # A plane change invalidates the active motion code.
        plane = Modal("G", on_change=motion.reset)
        feed = OutputVariable("F", formats.feed)
        if not use_feed:
            feed.disable()
            logger.debug("Feed output disabled")
        return cls(
            formats=formats,
            x=OutputVariable("X", formats.xyz),
            y=OutputVariable("Y", formats.xyz),
            z=OutputVariable("Z", formats.xyz),
            feed=feed,
            power=OutputVariable("S", formats.power, force=True),
            i=ReferenceVariable("I", formats.xyz),
            j=ReferenceVariable("J", formats.xyz),
            k=ReferenceVariable("K", formats.xyz),
            motion=motion,
            plane=plane,
            abs_inc=Modal("G"),
            feed_mode=Modal("G"),
            units=Modal("G"),
        )

    def force_xyz(self) -> None:
        self.x.reset()
        self.y.reset()
        self.z.reset()

    def force_feed(self) -> None:
        self.feed.reset()

    def force_any(self) -> None:
        """Force every coordinate, the feed and the motion code."""
        self.force_xyz()
        self.force_feed()
        self.motion.reset()
