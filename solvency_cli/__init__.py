"""
Solvency CLI

Command-line interface for Merkle sum tree parameters and proofs.

Usage:
    python -m solvency_cli params --byte-width 14 --depth 20
    python -m solvency_cli verify proof.json --root 0x...
    python -m solvency_cli config --show
"""

__version__ = "0.1.0"
