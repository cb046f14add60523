"""
G-code generation module.

Line emitter (number formats, modal output cache, block writer) and the
event-driven generator that turns tool-path events into Fanuc laser G-code.
"""

from laser_post.gcode.formats import FormatRegistry, NumberFormat, format_code
from laser_post.gcode.generator import GCodeError, GCodeGenerator
from laser_post.gcode.modal import EmitterState, Modal, OutputVariable, ReferenceVariable
from laser_post.gcode.writer import BlockState, BlockWriter, SequenceCounter

__all__ = [
    "BlockState",
    "BlockWriter",
    "EmitterState",
    "FormatRegistry",
    "GCodeError",
    "GCodeGenerator",
    "Modal",
    "NumberFormat",
    "OutputVariable",
    "ReferenceVariable",
    "SequenceCounter",
    "format_code",
]
