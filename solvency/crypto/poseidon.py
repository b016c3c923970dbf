"""
Crypto - Poseidon Hash
Fixed-arity Poseidon over the BN254 scalar field.

Parameters:
    p                       = BN254 scalar field modulus
    security level          = 128
    alpha                   = 5 (x^5 S-box)
    t (state width)         = arity + 1
    round constants, MDS    = the reference Grain LFSR constants and
                              Cauchy matrix, as generated by poseidon-hash
    round counts            = derived by poseidon-hash for (p, t, alpha)

Inputs fill the state from position 0, the last (capacity) element
starts at zero, and the digest is state[1] after the permutation.

A PoseidonHasher keeps the permutation state between calls, so one
instance must not be shared between threads. Worker processes rebuild
their own instance (see PoseidonSumTreeHasher.__reduce__).
"""
from __future__ import annotations

from typing import Sequence

from poseidon import Poseidon

from solvency.crypto.field import FIELD_MODULUS, is_field_element

SECURITY_LEVEL = 128
ALPHA = 5

# Largest state width offered; the widest node hash (C = 6) needs 15
MAX_WIDTH = 16


class PoseidonHasher:
    """
    Poseidon hash with a fixed number of inputs.

    Example:
        >>> h = PoseidonHasher(arity=2)
        >>> h.hash([1, 2]) == h.hash([1, 2])
        True
    """

    def __init__(self, arity: int) -> None:
        width = arity + 1
        if arity < 1 or width > MAX_WIDTH:
            raise ValueError(
                f"Unsupported Poseidon arity {arity}: state width must be "
                f"between 2 and {MAX_WIDTH}"
            )
        self.arity = arity
        self.width = width
        self._poseidon = Poseidon(FIELD_MODULUS, SECURITY_LEVEL, ALPHA, arity, width)

    def __repr__(self) -> str:
        return f"PoseidonHasher(arity={self.arity})"

    def hash(self, inputs: Sequence[int]) -> int:
        """
        Hash exactly `arity` field elements into one.

        Raises:
            ValueError: If the number of inputs differs from the arity, or
                an input is not a canonical field element
        """
        if len(inputs) != self.arity:
            raise ValueError(
                f"Poseidon arity mismatch: expected {self.arity} inputs, got {len(inputs)}"
            )
        if not all(is_field_element(x) for x in inputs):
            raise ValueError("Poseidon inputs must be integers in [0, p)")
        # run_hash pads the list in place with the zero capacity element
        return int(self._poseidon.run_hash([int(x) for x in inputs]))


__all__ = [
    "SECURITY_LEVEL",
    "ALPHA",
    "MAX_WIDTH",
    "PoseidonHasher",
]
