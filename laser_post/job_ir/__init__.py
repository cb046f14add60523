"""
Job Intermediate Representation module.

Defines all tool-path events as immutable dataclasses. This vocabulary is
the contract between the CAM kernel output and G-code generation.
"""

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
    LinearMove5D,
    Operation,
    Plane,
    Power,
    Program,
    RadiusCompensation,
    RapidMove,
    RapidMove5D,
    Section,
    SectionEnd,
    ToolType,
    Unit,
    is_motion,
)

__all__ = [
    "IDENTITY",
    "CircularMove",
    "Command",
    "CommandKind",
    "Comment",
    "Compensation",
    "Cycle",
    "Dwell",
    "JetMode",
    "LinearMove",
    "LinearMove5D",
    "Operation",
    "Plane",
    "Power",
    "Program",
    "RadiusCompensation",
    "RapidMove",
    "RapidMove5D",
    "Section",
    "SectionEnd",
    "ToolType",
    "Unit",
    "is_motion",
]
