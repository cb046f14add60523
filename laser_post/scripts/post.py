#!/usr/bin/env python3
"""
Post Script.

Post a tool-path program file or a test-cut pattern to Fanuc laser G-code.

Usage:
    python -m laser_post.scripts.post --file bracket.yaml -o O0012.nc
    python -m laser_post.scripts.post --pattern circle --size 30
    laser-post --pattern square --program-name 1001 --no-sequence-numbers

Available patterns:
    square, circle, slot, etch-mark
"""

from __future__ import annotations

import argparse
import logging
import sys

import yaml

from laser_post.configs.loader import ConfigError, load_config
from laser_post.gcode.generator import GCodeError, GCodeGenerator
from laser_post.job_ir.operations import Program, Unit
from laser_post.patterns import PATTERNS
from laser_post.utils import fs
from laser_post.utils.logging_config import pop_context, push_context, setup_logging
from laser_post.utils.validators import load_program

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="laser-post",
        description="Post a tool-path program to Fanuc laser G-code",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Available patterns: {', '.join(PATTERNS.keys())}",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Post configuration file (default: bundled post.yaml)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Write G-code to this file instead of stdout",
    )

    # Program source
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--file",
        "-f",
        type=str,
        help="Program file to post (program.v1 YAML)",
    )
    source.add_argument(
        "--pattern",
        "-p",
        type=str,
        choices=list(PATTERNS.keys()),
        help="Test-cut pattern to post",
    )

    # Pattern options
    parser.add_argument(
        "--program-name",
        type=str,
        default="1000",
        help="Program number for patterns (default: 1000)",
    )
    parser.add_argument(
        "--size",
        type=float,
        help="Pattern size in mm (side, diameter or slot length)",
    )
    parser.add_argument(
        "--feed",
        type=float,
        help="Cutting feed override (mm/min)",
    )

    # Output overrides
    parser.add_argument(
        "--sequence-numbers",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Override sequence numbering",
    )
    parser.add_argument(
        "--separate-words",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Override word separation",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level (default: WARNING)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Also log to this file (JSON lines)",
    )
    return parser


def _pattern_program(args: argparse.Namespace) -> Program:
    pattern_fn = PATTERNS[args.pattern]

    kwargs = {}
    if args.feed is not None:
        kwargs["feed"] = args.feed
    if args.size is not None:
        if args.pattern == "circle":
            kwargs["diameter_mm"] = args.size
        elif args.pattern == "slot":
            kwargs["length_mm"] = args.size
        else:
            kwargs["size_mm"] = args.size

    return Program(
        name=args.program_name,
        operations=tuple(pattern_fn(**kwargs)),
        unit=Unit.MM,
        comment=f"TEST {args.pattern.upper()}",
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(
        log_level=args.log_level,
        log_file=args.log_file,
        json_format=True,
        context={"app": "laser-post"},
    )

    try:
        config = load_config(args.config)
        overrides = {}
        if args.sequence_numbers is not None:
            overrides["sequence_numbers"] = args.sequence_numbers
        if args.separate_words is not None:
            overrides["separate_words"] = args.separate_words
        if overrides:
            config = config.with_overrides(output=overrides)

        if args.file:
            program = load_program(args.file)
        else:
            program = _pattern_program(args)

        push_context(program=program.name)
        try:
            gcode = GCodeGenerator(config).generate(program)
        finally:
            pop_context(keys=["program"])

    except (
        ConfigError, GCodeError, ValueError, FileNotFoundError, yaml.YAMLError,
    ) as e:
        logger.error("%s", e)
        return 1

    if args.output:
        try:
            fs.atomic_write_text(args.output, gcode)
        except RuntimeError as e:
            logger.error("%s", e)
            return 1
        logger.info("G-code written to %s", args.output)
    else:
        sys.stdout.write(gcode)
    return 0


if __name__ == "__main__":
    sys.exit(main())
