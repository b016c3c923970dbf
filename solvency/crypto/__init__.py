"""
Cryptographic primitives for the Merkle sum tree.

Field arithmetic over the BN254 scalar field, the Poseidon hash,
and the leaf/middle hash aggregator built on it.
"""
from .field import (
    FIELD_MODULUS,
    FIELD_BYTES,
    Fp,
    big_int_to_fp,
    fp_to_big_uint,
    is_field_element,
    big_intify_username,
    check_identity_range,
    to_field_hex,
    from_field_hex,
)
from .poseidon import PoseidonHasher
from .hashing import (
    MAX_CURRENCIES,
    SumTreeHasher,
    PoseidonSumTreeHasher,
    entry_arity,
    node_arity,
    get_hasher,
    leaf_hash,
    middle_hash,
)

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
    "PoseidonHasher",
    "MAX_CURRENCIES",
    "SumTreeHasher",
    "PoseidonSumTreeHasher",
    "entry_arity",
    "node_arity",
    "get_hasher",
    "leaf_hash",
    "middle_hash",
]
