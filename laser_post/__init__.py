"""
Laser Post Package.

Post-processor for Fanuc-dialect laser cutting machines. Translates a
tool-path program (already computed by a CAM kernel) into G-code text.

Subpackages:
    job_ir: Intermediate representation for tool-path events
    gcode: Line emitter (formats, modal cache, block writer) and generator
    configs: Post configuration loading and validation
    utils: Filesystem, logging and program-file validation helpers
    scripts: Command-line entry points
"""

__version__ = "0.1.0"

__all__ = ["job_ir", "gcode", "configs", "utils", "scripts", "patterns"]
