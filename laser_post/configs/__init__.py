"""Post configuration loading and validation."""

from laser_post.configs.loader import (
    ConfigError,
    LaserConfig,
    MachineConfig,
    OutputConfig,
    PostConfig,
    default_config,
    load_config,
)

__all__ = [
    "ConfigError",
    "LaserConfig",
    "MachineConfig",
    "OutputConfig",
    "PostConfig",
    "default_config",
    "load_config",
]
