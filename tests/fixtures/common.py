"""
Common test fixtures shared by all test modules.

Provides factory functions for:
- Entry lists with predictable usernames and balances
- MerkleSumTree instances built from them
"""

from typing import Optional, Sequence

from solvency.merkle import Entry, MerkleSumTree


def make_entries(
    count: int = 4,
    n_currencies: int = 2,
    balances: Optional[Sequence[Sequence[int]]] = None,
    prefix: str = "user",
) -> list[Entry]:
    """
    Create entries named user0, user1, ...

    Unless given, entry i holds balances [10 * i + 1, 10 * i + 2, ...].
    """
    if balances is None:
        balances = [
            [10 * i + c + 1 for c in range(n_currencies)] for i in range(count)
        ]
    return [
        Entry(f"{prefix}{i}", list(balances[i]), n_currencies) for i in range(count)
    ]


def make_tree(
    entries: Optional[Sequence[Entry]] = None,
    byte_width: int = 8,
    **kwargs,
) -> MerkleSumTree:
    """Build a tree over `entries` (default: four two-currency entries)."""
    if entries is None:
        entries = make_entries()
    return MerkleSumTree.from_entries(entries, byte_width=byte_width, **kwargs)
