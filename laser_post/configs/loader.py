"""Configuration loader for the laser post-processor.

Loads and validates ``post.yaml`` into typed, frozen dataclasses.  The
configuration is built once at startup; a changed setting means a new
``PostConfig`` (see :meth:`PostConfig.with_overrides`), never a mutation.

Usage::

    from laser_post.configs.loader import load_config
    cfg = load_config()                     # default path
    cfg = load_config("/custom/post.yaml")  # explicit path
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from laser_post.utils.fs import load_yaml

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OutputConfig:
    """Block formatting options.

    Parameters
    ----------
    sequence_numbers : bool
        Prefix blocks with ``N`` words.
    sequence_start : int
        First sequence number.
    sequence_increment : int
        Step between sequence numbers.
    separate_words : bool
        Separate words with a space.
    use_feed : bool
        Output ``F`` words.
    """

    sequence_numbers: bool = False
    sequence_start: int = 10
    sequence_increment: int = 5
    separate_words: bool = True
    use_feed: bool = True


@dataclass(frozen=True)
class LaserConfig:
    """M-code macros selecting the cutting mode.

    ``through_mode`` pierces and cuts through the sheet.  ``etch_mode`` and
    ``vaporize_mode`` are optional; 0 means "not available on this machine"
    and posting a section in that mode fails.
    """

    through_mode: int = 100
    etch_mode: int = 0
    vaporize_mode: int = 0
    beam_off_code: int = 5


@dataclass(frozen=True)
class MachineConfig:
    """Machine description and geometry tolerances."""

    description: str = ""
    tolerance_mm: float = 0.01


@dataclass(frozen=True)
class PostConfig:
    """Complete post configuration loaded from ``post.yaml``."""

    output: OutputConfig
    laser: LaserConfig
    machine: MachineConfig

    def with_overrides(self, **sections: dict[str, Any]) -> PostConfig:
        """Return a copy with some fields of some sections replaced.

        >>> cfg.with_overrides(output={"sequence_numbers": False})
        """
        changes: dict[str, Any] = {}
        for name, values in sections.items():
            if name not in ("output", "laser", "machine"):
                raise ConfigError(f"Unknown config section '{name}'")
            current = getattr(self, name)
            allowed = {f.name for f in fields(current)}
            unknown = set(values) - allowed
            if unknown:
                raise ConfigError(
                    f"Unknown {name} field(s): {sorted(unknown)}"
                )
            changes[name] = replace(current, **values)
        cfg = replace(self, **changes)
        _validate_config(cfg)
        return cfg


# ---------------------------------------------------------------------------
# Internal parsing helpers
# ---------------------------------------------------------------------------


def _parse_output(data: dict[str, Any]) -> OutputConfig:
    """Parse the ``output`` section."""
    defaults = OutputConfig()
    return OutputConfig(
        sequence_numbers=bool(data.get("sequence_numbers", defaults.sequence_numbers)),
        sequence_start=int(data.get("sequence_start", defaults.sequence_start)),
        sequence_increment=int(
            data.get("sequence_increment", defaults.sequence_increment)
        ),
        separate_words=bool(data.get("separate_words", defaults.separate_words)),
        use_feed=bool(data.get("use_feed", defaults.use_feed)),
    )


def _parse_laser(data: dict[str, Any]) -> LaserConfig:
    """Parse the ``laser`` section."""
    defaults = LaserConfig()
    return LaserConfig(
        through_mode=int(data.get("through_mode", defaults.through_mode)),
        etch_mode=int(data.get("etch_mode") or 0),
        vaporize_mode=int(data.get("vaporize_mode") or 0),
        beam_off_code=int(data.get("beam_off_code", defaults.beam_off_code)),
    )


def _parse_machine(data: dict[str, Any]) -> MachineConfig:
    """Parse the ``machine`` section."""
    defaults = MachineConfig()
    return MachineConfig(
        description=str(data.get("description", defaults.description) or ""),
        tolerance_mm=float(data.get("tolerance_mm", defaults.tolerance_mm)),
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate_config(cfg: PostConfig) -> None:
    """Validate value ranges.

    Raises
    ------
    ConfigError
        On any invalid value.
    """
    o = cfg.output
    if o.sequence_start < 0:
        raise ConfigError(
            f"sequence_start must be >= 0, got {o.sequence_start}"
        )
    if o.sequence_increment < 1:
        raise ConfigError(
            f"sequence_increment must be >= 1, got {o.sequence_increment}"
        )

    las = cfg.laser
    if las.through_mode < 1:
        raise ConfigError(
            f"through_mode must be a positive M-code, got {las.through_mode}"
        )
    for name in ("etch_mode", "vaporize_mode", "beam_off_code"):
        value = getattr(las, name)
        if value < 0:
            raise ConfigError(f"{name} must be >= 0, got {value}")

    if cfg.machine.tolerance_mm <= 0:
        raise ConfigError(
            f"tolerance_mm must be > 0, got {cfg.machine.tolerance_mm}"
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def default_config() -> PostConfig:
    """Configuration with built-in defaults, no file involved."""
    return PostConfig(
        output=OutputConfig(),
        laser=LaserConfig(),
        machine=MachineConfig(),
    )


def load_config(path: str | Path | None = None) -> PostConfig:
    """Load and validate post configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``post.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    PostConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field has the wrong type or fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    if path is None:
        path = Path(__file__).parent / "post.yaml"
    else:
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from %s", path)

    data: dict[str, Any] = load_yaml(path)
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")

    try:
        cfg = PostConfig(
            output=_parse_output(data.get("output") or {}),
            laser=_parse_laser(data.get("laser") or {}),
            machine=_parse_machine(data.get("machine") or {}),
        )
    except (TypeError, ValueError, AttributeError) as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    _validate_config(cfg)
    logger.debug("Configuration loaded: %s", cfg)
    return cfg
