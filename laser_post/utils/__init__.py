"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Atomic I/O and YAML loading (fs)
    - Unified logging (logging_config)
    - Program-file validation (validators)

Convenience imports:
    from laser_post.utils import fs, validators
    from laser_post.utils.logging_config import setup_logging
"""
