"""
Solvency CLI - Verify Command

Verify a serialized inclusion proof offline:
- Parse and validate the proof JSON
- Optionally pin the root to a trusted, published value
- Fold the path and compare against the root (and expected grand sums)

Usage:
    solvency verify proof.json [--root HEX] [--expected-total HEX ...] [--byte-width N] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from solvency.crypto.field import from_field_hex, to_field_hex
from solvency.merkle.proofs import verify_proof
from solvency.schemas.errors import ErrorCodes, SolvencyError, SolvencyException
from solvency.schemas.wire import MerkleProofModel


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of proof verification for CLI output."""
    proof_path: str = ""
    root_hash: str = ""
    leaf_hash: str = ""
    leaf_index: int = 0
    depth: int = 0
    root_ok: bool | None = None
    proof_ok: bool = False
    errors: list[SolvencyError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if self.root_ok is None:
            del d["root_ok"]
        if self.errors:
            d["errors"] = [e.model_dump() for e in self.errors]
        else:
            del d["errors"]
        return d

    @property
    def all_ok(self) -> bool:
        if self.root_ok is not None and not self.root_ok:
            return False
        return self.proof_ok


def print_summary_human(summary: VerifySummary) -> None:
    """Print summary in human-readable format."""
    print(f"proof: {summary.proof_path}")
    print(f"root_hash: {summary.root_hash}")
    print(f"leaf_hash: {summary.leaf_hash}")
    print(f"leaf_index: {summary.leaf_index}")
    print(f"depth: {summary.depth}")
    if summary.root_ok is not None:
        print(f"root_ok: {str(summary.root_ok).lower()}")
    print(f"proof_ok: {str(summary.proof_ok).lower()}")

    if summary.errors:
        print(f"\nerrors ({len(summary.errors)}):")
        for err in summary.errors:
            print(f"  ✗ [{err.code}] {err.message}")


def print_summary_json(summary: VerifySummary) -> None:
    """Print summary as JSON."""
    print(json.dumps(summary.to_dict(), indent=2))


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    proof_path = Path(args.proof_path)

    if not proof_path.exists():
        print(f"Error: Proof not found: {proof_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        model = MerkleProofModel.from_json(proof_path.read_text())
        trusted_root = from_field_hex(args.root) if args.root else None
        expected_total = (
            tuple(from_field_hex(v) for v in args.expected_total)
            if args.expected_total
            else None
        )
    except (SolvencyException, ValueError, OSError) as e:
        if args.debug:
            raise
        print(f"Error loading proof: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    proof = model.to_proof()
    logger.info(f"Verifying proof for leaf {proof.leaf_index} at depth {proof.depth}")

    summary = VerifySummary(
        proof_path=str(proof_path),
        root_hash=model.root_hash,
        leaf_hash=model.leaf.hash,
        leaf_index=proof.leaf_index,
        depth=proof.depth,
    )

    if trusted_root is not None:
        summary.root_ok = proof.root_hash == trusted_root
        if not summary.root_ok:
            summary.errors.append(
                SolvencyError(
                    code=ErrorCodes.ROOT_MISMATCH,
                    message="Proof root differs from the trusted root",
                    details={
                        "proof_root": model.root_hash,
                        "trusted_root": to_field_hex(trusted_root),
                    },
                )
            )

    summary.proof_ok = verify_proof(
        proof,
        expected_total=expected_total,
        byte_width=args.byte_width,
    )
    if not summary.proof_ok:
        summary.errors.append(
            SolvencyError(
                code=ErrorCodes.MERKLE_PROOF_INVALID,
                message="Proof does not fold to its root with the expected totals",
            )
        )

    if args.json:
        print_summary_json(summary)
    else:
        print_summary_human(summary)

    if summary.all_ok:
        logger.info("Verification passed")
        return EXIT_SUCCESS
    logger.warning("Verification failed")
    return EXIT_VERIFICATION_FAILED
