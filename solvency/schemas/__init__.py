"""
Schemas - Errors & Canonicalization
File: __init__.py

Purpose: Export the error hierarchy and canonical JSON helpers.

The wire models live in solvency.schemas.wire and are imported from
there; they depend on the merkle types, which themselves raise the
errors defined here.
"""

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonicalize_value,
    dumps_canonical,
    loads_canonical,
)

# Error models and exceptions
from .errors import (
    BalanceOverflowException,
    CanonicalizationException,
    ErrorCodes,
    IdentityRangeException,
    LeafIndexException,
    OverflowErrorModel,
    ParameterException,
    SchemaValidationException,
    SolvencyError,
    SolvencyException,
)

__all__ = [
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonicalize_value",
    "dumps_canonical",
    "loads_canonical",
    # Errors
    "BalanceOverflowException",
    "CanonicalizationException",
    "ErrorCodes",
    "IdentityRangeException",
    "LeafIndexException",
    "OverflowErrorModel",
    "ParameterException",
    "SchemaValidationException",
    "SolvencyError",
    "SolvencyException",
]
