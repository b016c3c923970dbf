"""
Crypto - Field Arithmetic
Scalar field of the BN254 curve, the native field of the proving system
that later re-derives the tree inside a circuit.

This module provides:
- Fp: py_ecc field element type over the BN254 scalar field
- Username -> identity encoding with the range check enforced
- Fixed-width hex encoding of field elements for publication

Security Notes:
- A username whose integer encoding is >= FIELD_MODULUS would alias
  another identity once lifted into the field. Such usernames are
  rejected, never reduced.
"""
from __future__ import annotations

from py_ecc import bn128
from py_ecc.fields.field_elements import FQ

from solvency.schemas.errors import IdentityRangeException


FIELD_MODULUS: int = bn128.curve_order

# Width of a serialized field element (big-endian)
FIELD_BYTES: int = 32


class Fp(FQ):
    """Element of the BN254 scalar field."""
    field_modulus = FIELD_MODULUS


def big_int_to_fp(value: int) -> Fp:
    """Lift a non-negative integer into the field (reducing modulo p)."""
    return Fp(value)


def fp_to_big_uint(value: Fp) -> int:
    """Canonical representative of a field element, in [0, p)."""
    return int(value.n)


def is_field_element(value: object) -> bool:
    """True iff value is a plain int in [0, FIELD_MODULUS)."""
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return 0 <= value < FIELD_MODULUS


def big_intify_username(username: str) -> int:
    """
    Encode a username as an integer by big-endian packing of its UTF-8 bytes.

    The encoding is injective on strings without leading NUL characters;
    "" encodes to 0, which is the identity of padding entries.

    Example:
        >>> big_intify_username("A")
        65
        >>> big_intify_username("AB") == 0x4142
        True
    """
    return int.from_bytes(username.encode("utf-8"), "big")


def check_identity_range(identity: int, username: str | None = None) -> int:
    """
    Ensure an identity fits strictly below the field modulus.

    Args:
        identity: Integer encoding of a username
        username: Original username, for error reporting

    Returns:
        The identity, unchanged

    Raises:
        IdentityRangeException: If identity >= FIELD_MODULUS
    """
    if identity < 0 or identity >= FIELD_MODULUS:
        raise IdentityRangeException(
            "The value that converted username should not exceed field modulus",
            username=username,
            details={"identity_bits": identity.bit_length()},
        )
    return identity


def to_field_hex(value: int) -> str:
    """
    Encode a field element as a 0x-prefixed, 32-byte big-endian hex string.

    Raises:
        ValueError: If value is not a canonical field element
    """
    if not is_field_element(value):
        raise ValueError(f"Not a canonical field element: {value!r}")
    return "0x" + value.to_bytes(FIELD_BYTES, "big").hex()


def from_field_hex(hex_string: str) -> int:
    """
    Decode a 0x-prefixed, 32-byte big-endian hex string into a field element.

    Raises:
        ValueError: If the prefix or width is wrong, the string holds
                    invalid hex characters, or the value is >= FIELD_MODULUS
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]
    if len(hex_content) != 2 * FIELD_BYTES:
        raise ValueError(
            f"Field element must be {FIELD_BYTES} bytes, "
            f"got {len(hex_content)} hex characters"
        )

    try:
        value = int.from_bytes(bytes.fromhex(hex_content), "big")
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e

    if value >= FIELD_MODULUS:
        raise ValueError("Encoded value is not below the field modulus")
    return value


__all__ = [
    "FIELD_MODULUS",
    "FIELD_BYTES",
    "Fp",
    "big_int_to_fp",
    "fp_to_big_uint",
    "is_field_element",
    "big_intify_username",
    "check_identity_range",
    "to_field_hex",
    "from_field_hex",
]
