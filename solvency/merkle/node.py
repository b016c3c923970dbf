"""
Merkle Sum Tree - Node
One position of the tree: a hash plus the per-currency balance sums of
the subtree below it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from solvency.crypto.field import FIELD_MODULUS
from solvency.crypto.hashing import SumTreeHasher, get_hasher


@dataclass(frozen=True)
class Node:
    """
    Immutable tree node.

    Attributes:
        hash: Field element binding either leaf data or both children
        balances: One field element per currency (subtree sums)
    """
    hash: int
    balances: tuple[int, ...]

    def __post_init__(self) -> None:
        # Accept any sequence, store a tuple so nodes stay immutable
        if not isinstance(self.balances, tuple):
            object.__setattr__(self, "balances", tuple(self.balances))

    @property
    def n_currencies(self) -> int:
        return len(self.balances)

    @classmethod
    def leaf(
        cls,
        identity: int,
        balances: Sequence[int],
        hasher: SumTreeHasher | None = None,
    ) -> "Node":
        """Leaf node for one user; balances are lifted into the field."""
        hasher = hasher or get_hasher(len(balances))
        lifted = tuple(b % FIELD_MODULUS for b in balances)
        return cls(hash=hasher.leaf_hash(identity, lifted), balances=lifted)

    @classmethod
    def middle(
        cls,
        left: "Node",
        right: "Node",
        hasher: SumTreeHasher | None = None,
    ) -> "Node":
        """
        Parent of two nodes: hash over both children, field sum of balances.

        Overflow policing is the builder's job; this only does field arithmetic.
        """
        hasher = hasher or get_hasher(len(left.balances))
        return cls(
            hash=hasher.middle_hash(left.hash, left.balances, right.hash, right.balances),
            balances=tuple(
                (l + r) % FIELD_MODULUS for l, r in zip(left.balances, right.balances)
            ),
        )


__all__ = ["Node"]
