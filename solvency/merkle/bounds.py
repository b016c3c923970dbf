"""
Merkle Sum Tree - Overflow Bounds
Largest aggregate balance permitted at each tree level.

A leaf balance is range-checked to `byte_width` bytes by the circuit,
so it is at most 2^(8 * byte_width) - 1. The aggregate bound at level L
is that maximum times (L + 1). This is looser than the worst case of a
balanced tree and is kept as is. The bound at the root must stay
strictly below the field modulus, otherwise a sum could wrap around the
field without any leaf range check noticing.
"""
from __future__ import annotations

from solvency.crypto.field import FIELD_MODULUS
from solvency.schemas.errors import BalanceOverflowException


def max_leaf_value(byte_width: int) -> int:
    """
    Largest per-currency leaf balance representable in `byte_width` bytes.

    Example:
        >>> max_leaf_value(1)
        255
    """
    if byte_width < 1:
        raise ValueError(f"byte_width must be positive, got {byte_width}")
    return (1 << (8 * byte_width)) - 1


def max_balance_at_level(byte_width: int, level: int) -> int:
    """
    Bound on any per-currency aggregate at `level` (0 = leaves).

    Example:
        >>> max_balance_at_level(1, 1)
        510
    """
    if level < 0:
        raise ValueError(f"level must be non-negative, got {level}")
    return max_leaf_value(byte_width) * (level + 1)


def level_bounds(byte_width: int, depth: int) -> list[int]:
    """Bounds for every level from the leaves (index 0) to the root (index depth)."""
    return [max_balance_at_level(byte_width, level) for level in range(depth + 1)]


def is_sound_configuration(byte_width: int, depth: int) -> bool:
    """True iff the root-level bound stays strictly below the field modulus."""
    return max_balance_at_level(byte_width, depth) < FIELD_MODULUS


def max_sound_depth(byte_width: int) -> int:
    """
    Deepest tree whose root bound stays below the field modulus, or -1 if
    not even a single leaf fits.
    """
    return (FIELD_MODULUS - 1) // max_leaf_value(byte_width) - 1


def validate_tree_parameters(byte_width: int, depth: int) -> None:
    """
    Check a (byte_width, depth) pair before any build.

    Raises:
        ValueError: If byte_width < 1 or depth < 0
        BalanceOverflowException: If the root-level bound reaches the
            field modulus (currency is None in that case)
    """
    if depth < 0:
        raise ValueError(f"depth must be non-negative, got {depth}")
    bound = max_balance_at_level(byte_width, depth)
    if bound >= FIELD_MODULUS:
        raise BalanceOverflowException(
            f"Root bound for byte_width={byte_width}, depth={depth} "
            f"does not fit below the field modulus",
            level=depth,
            currency=None,
            value=bound,
            bound=FIELD_MODULUS - 1,
        )


__all__ = [
    "max_leaf_value",
    "max_balance_at_level",
    "level_bounds",
    "is_sound_configuration",
    "max_sound_depth",
    "validate_tree_parameters",
]
