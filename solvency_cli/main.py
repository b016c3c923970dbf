"""
Solvency CLI - Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m solvency_cli params --byte-width 14 --depth 20 [--json]
    python -m solvency_cli verify proof.json [--root HEX] [--expected-total HEX ...] [--json]
    python -m solvency_cli config --init solvency.yaml
    python -m solvency_cli config --show

Environment Variables:
    SOLVENCY_N_CURRENCIES       Balances per entry (default: 2)
    SOLVENCY_BYTE_WIDTH         Byte width of leaf balances (default: 14)
    SOLVENCY_TREE_DEPTH         Fixed tree depth
    SOLVENCY_WORKERS            Worker processes per build (default: 0)
    SOLVENCY_LOG_LEVEL          Log level (default: INFO)
    SOLVENCY_LOG_FILE           Optional log file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from solvency.config import RuntimeConfig, get_default_config_template, set_default_config
from solvency_cli.commands import params, verify


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def load_config(path: Path | None) -> RuntimeConfig:
    """Load the YAML config at `path` (or defaults), then overlay SOLVENCY_* variables."""
    if path is None:
        return RuntimeConfig.from_env()
    return RuntimeConfig.from_yaml(path).with_env_overrides()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="solvency",
        description="Merkle sum tree tooling - check tree parameters and verify inclusion proofs.",
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s 0.1.0"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to a YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- params command ---
    params_parser = subparsers.add_parser(
        "params",
        help="Show per-level overflow bounds for a tree shape",
        description="Print the aggregate bound of every level and whether the root bound fits the field.",
    )
    params_parser.add_argument(
        "--byte-width",
        type=int,
        default=None,
        help="Byte width of leaf balances (default: from config)",
    )
    params_parser.add_argument(
        "--depth",
        type=int,
        default=None,
        help="Tree depth (default: from config)",
    )
    params_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    params_parser.set_defaults(func=params.params_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a serialized inclusion proof",
        description="Fold the proof up to its root and check it against trusted values.",
    )
    verify_parser.add_argument(
        "proof_path",
        type=str,
        help="Path to the proof JSON file",
    )
    verify_parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Trusted root hash (0x-prefixed hex) the proof must commit to",
    )
    verify_parser.add_argument(
        "--expected-total",
        type=str,
        nargs="+",
        default=None,
        help="Published grand sums, one hex field element per currency",
    )
    verify_parser.add_argument(
        "--byte-width",
        type=int,
        default=None,
        help="Also check every recomputed level against its overflow bound",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    verify_parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on errors",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage configuration",
        description="Create a template configuration file or show the effective configuration.",
    )
    config_group = config_parser.add_mutually_exclusive_group()
    config_group.add_argument(
        "--init",
        type=str,
        default=None,
        metavar="PATH",
        help="Write a template configuration file to PATH",
    )
    config_group.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show the effective configuration",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.init)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR
        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("You can also use environment variables (SOLVENCY_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.runtime_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: solvency config [--init PATH|--show]")
    print("  --init PATH  Create a template configuration file")
    print("  --show       Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    setup_logging(
        level=args.log_level or config.logging.level,
        log_file=config.logging.file,
    )
    set_default_config(config)

    # Attach config to args for commands to use
    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
