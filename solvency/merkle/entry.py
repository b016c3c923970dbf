"""
Merkle Sum Tree - Entry
A single user's record in the liabilities tree: username plus one
balance per currency.
"""
from __future__ import annotations

from typing import Sequence

from solvency.crypto.field import (
    FIELD_MODULUS,
    big_intify_username,
    check_identity_range,
)
from solvency.crypto.hashing import SumTreeHasher
from solvency.merkle.node import Node


def _validate_balances(
    balances: Sequence[int],
    n_currencies: int | None,
) -> tuple[int, ...]:
    values = tuple(balances)
    if n_currencies is not None and len(values) != n_currencies:
        raise ValueError(
            f"Entry must hold {n_currencies} balances, got {len(values)}"
        )
    if not values:
        raise ValueError("Entry must hold at least one balance")
    for i, value in enumerate(values):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Balance {i} must be an int, got {type(value).__name__}")
        if value < 0:
            raise ValueError(f"Balance {i} must be non-negative, got {value}")
        if value >= FIELD_MODULUS:
            raise ValueError(f"Balance {i} does not fit in the field")
    return values


class Entry:
    """
    A user entry.

    The identity is derived from the username once, at construction, and
    range-checked against the field modulus. Balances only change through
    recompute_leaf().

    Example:
        >>> entry = Entry("alice", [100, 25])
        >>> entry.balances
        (100, 25)
    """

    __slots__ = ("_username", "_identity", "_balances")

    def __init__(
        self,
        username: str,
        balances: Sequence[int],
        n_currencies: int | None = None,
    ) -> None:
        identity = check_identity_range(big_intify_username(username), username)
        self._username = username
        self._identity = identity
        self._balances = _validate_balances(balances, n_currencies)

    @classmethod
    def init_empty(cls, n_currencies: int) -> "Entry":
        """Padding entry: empty username, all-zero balances."""
        return cls("", [0] * n_currencies, n_currencies)

    @property
    def username(self) -> str:
        return self._username

    @property
    def identity(self) -> int:
        return self._identity

    @property
    def balances(self) -> tuple[int, ...]:
        return self._balances

    @property
    def n_currencies(self) -> int:
        return len(self._balances)

    @property
    def is_empty(self) -> bool:
        return self._identity == 0 and not any(self._balances)

    def compute_leaf(self, hasher: SumTreeHasher | None = None) -> Node:
        return Node.leaf(self._identity, self._balances, hasher)

    def recompute_leaf(
        self,
        updated_balances: Sequence[int],
        hasher: SumTreeHasher | None = None,
    ) -> Node:
        """
        Store new balances and return the refreshed leaf.

        The number of currencies cannot change.
        """
        self._balances = _validate_balances(updated_balances, self.n_currencies)
        return self.compute_leaf(hasher)

    def copy(self) -> "Entry":
        clone = Entry.__new__(Entry)
        clone._username = self._username
        clone._identity = self._identity
        clone._balances = self._balances
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return self._username == other._username and self._balances == other._balances

    def __repr__(self) -> str:
        return f"Entry(username={self._username!r}, balances={list(self._balances)!r})"


__all__ = ["Entry"]
