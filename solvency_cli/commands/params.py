"""
Solvency CLI - Params Command

Show the per-level overflow bounds of a tree shape and whether the root
bound stays below the field modulus.

Usage:
    solvency params --byte-width 14 --depth 20 [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from typing import Any

from solvency.crypto.field import FIELD_MODULUS
from solvency.merkle.bounds import is_sound_configuration, level_bounds, max_sound_depth


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class ParamsSummary:
    """Bounds report for one (byte_width, depth) pair."""
    byte_width: int = 0
    depth: int = 0
    sound: bool = False
    max_sound_depth: int = 0
    level_bounds: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        # 254-bit values lose precision as JSON numbers in most consumers
        d["level_bounds"] = [str(b) for b in self.level_bounds]
        d["field_modulus"] = str(FIELD_MODULUS)
        return d


def build_summary(byte_width: int, depth: int) -> ParamsSummary:
    return ParamsSummary(
        byte_width=byte_width,
        depth=depth,
        sound=is_sound_configuration(byte_width, depth),
        max_sound_depth=max_sound_depth(byte_width),
        level_bounds=level_bounds(byte_width, depth),
    )


def print_summary_human(summary: ParamsSummary) -> None:
    print(f"byte_width: {summary.byte_width}")
    print(f"depth: {summary.depth}")
    print(f"sound: {str(summary.sound).lower()}")
    print(f"max_sound_depth: {summary.max_sound_depth}")
    print("\nlevel bounds:")
    for level, bound in enumerate(summary.level_bounds):
        marker = "✓" if bound < FIELD_MODULUS else "✗"
        print(f"  {marker} level {level}: {bound}")


def params_cmd(args: Namespace) -> int:
    """
    Execute the params command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (EXIT_VERIFICATION_FAILED when the shape is unsound)
    """
    tree_config = args.runtime_config.tree
    byte_width = args.byte_width if args.byte_width is not None else tree_config.byte_width
    depth = args.depth if args.depth is not None else tree_config.depth

    if depth is None:
        print("Error: --depth is required when no depth is configured", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    if byte_width < 1 or depth < 0:
        print(
            f"Error: byte_width must be positive and depth non-negative, "
            f"got byte_width={byte_width}, depth={depth}",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    summary = build_summary(byte_width, depth)
    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    if summary.sound:
        return EXIT_SUCCESS
    logger.warning(f"Root bound for byte_width={byte_width}, depth={depth} reaches the field modulus")
    return EXIT_VERIFICATION_FAILED
