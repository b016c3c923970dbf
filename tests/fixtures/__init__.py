"""
Test fixtures package for Merkle sum tree tests.

This package provides factory functions for creating test objects.

Usage:
    from fixtures import make_entries, make_tree

    def test_something():
        tree = make_tree(make_entries(4))
"""

from .common import (
    make_entries,
    make_tree,
)

__all__ = [
    "make_entries",
    "make_tree",
]
