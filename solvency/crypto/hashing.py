"""
Crypto - Hash Aggregator
Leaf and middle-node hashing for the Merkle sum tree.

Commitment Rules (Hard Contracts):
1. Leaf hash:   H_entry(identity, b_0, ..., b_{C-1})          arity 1 + C
2. Middle hash: H_node(hl, bl_0..bl_{C-1}, hr, br_0..br_{C-1})  arity 2 * (1 + C)
3. All inputs and outputs are canonical BN254 scalar field elements
4. The permutation must be the one used when the root is re-derived
   inside the proving system

The hasher is pluggable: builder, prover and verifier accept any object
implementing SumTreeHasher. PoseidonSumTreeHasher is the default.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Protocol, Sequence, runtime_checkable

from solvency.crypto.poseidon import MAX_WIDTH, PoseidonHasher


def entry_arity(n_currencies: int) -> int:
    """Number of hash inputs for a leaf (identity + balances)."""
    return 1 + n_currencies


def node_arity(n_currencies: int) -> int:
    """Number of hash inputs for a middle node (two hashes + two balance vectors)."""
    return 2 * (1 + n_currencies)


# Largest C whose middle-node state still fits a supported Poseidon width
MAX_CURRENCIES: int = (MAX_WIDTH - 1) // 2 - 1


@runtime_checkable
class SumTreeHasher(Protocol):
    """Hash primitive consumed by the tree builder, prover and verifier."""

    n_currencies: int

    def leaf_hash(self, identity: int, balances: Sequence[int]) -> int:
        ...

    def middle_hash(
        self,
        left_hash: int,
        left_balances: Sequence[int],
        right_hash: int,
        right_balances: Sequence[int],
    ) -> int:
        ...


class PoseidonSumTreeHasher:
    """
    Poseidon-based aggregator for a fixed number of currencies.

    Holds one Poseidon instance per arity. Pickling keeps only the
    currency count, so each worker process builds (and caches) its own.
    """

    def __init__(self, n_currencies: int) -> None:
        if n_currencies < 1 or n_currencies > MAX_CURRENCIES:
            raise ValueError(
                f"n_currencies must be between 1 and {MAX_CURRENCIES}, got {n_currencies}"
            )
        self.n_currencies = n_currencies
        self._entry = PoseidonHasher(entry_arity(n_currencies))
        self._node = PoseidonHasher(node_arity(n_currencies))

    def __reduce__(self):
        return get_hasher, (self.n_currencies,)

    def __repr__(self) -> str:
        return f"PoseidonSumTreeHasher(n_currencies={self.n_currencies})"

    def _check_width(self, balances: Sequence[int]) -> None:
        if len(balances) != self.n_currencies:
            raise ValueError(
                f"Expected {self.n_currencies} balances, got {len(balances)}"
            )

    def leaf_hash(self, identity: int, balances: Sequence[int]) -> int:
        self._check_width(balances)
        return self._entry.hash([identity, *balances])

    def middle_hash(
        self,
        left_hash: int,
        left_balances: Sequence[int],
        right_hash: int,
        right_balances: Sequence[int],
    ) -> int:
        self._check_width(left_balances)
        self._check_width(right_balances)
        return self._node.hash([left_hash, *left_balances, right_hash, *right_balances])


@lru_cache(maxsize=None)
def get_hasher(n_currencies: int) -> PoseidonSumTreeHasher:
    """Shared default hasher for C currencies (constants are built once)."""
    return PoseidonSumTreeHasher(n_currencies)


def leaf_hash(identity: int, balances: Sequence[int]) -> int:
    """
    Hash a user's identity and balances into a leaf hash.

    Args:
        identity: Username encoding, already range-checked
        balances: One non-negative field element per currency

    Returns:
        Leaf hash as a canonical field element
    """
    return get_hasher(len(balances)).leaf_hash(identity, balances)


def middle_hash(
    left_hash: int,
    left_balances: Sequence[int],
    right_hash: int,
    right_balances: Sequence[int],
) -> int:
    """
    Hash two children (hash and balance vector each) into their parent's hash.

    Raises:
        ValueError: If the balance vectors differ in width
    """
    if len(left_balances) != len(right_balances):
        raise ValueError(
            f"Balance width mismatch: {len(left_balances)} != {len(right_balances)}"
        )
    return get_hasher(len(left_balances)).middle_hash(
        left_hash, left_balances, right_hash, right_balances
    )


__all__ = [
    "MAX_CURRENCIES",
    "SumTreeHasher",
    "PoseidonSumTreeHasher",
    "entry_arity",
    "node_arity",
    "get_hasher",
    "leaf_hash",
    "middle_hash",
]
