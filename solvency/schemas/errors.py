"""
Schemas - Errors
File: errors.py

Purpose: Error taxonomy for the Merkle sum tree.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Every exception also derives from the matching builtin (ValueError,
OverflowError, IndexError) so callers that only know the builtin
taxonomy can still catch them.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Entry construction
    IDENTITY_OUT_OF_RANGE = "IDENTITY_OUT_OF_RANGE"

    # Tree build
    BALANCE_OVERFLOW = "BALANCE_OVERFLOW"
    INVALID_PARAMETERS = "INVALID_PARAMETERS"

    # Proof requests
    LEAF_INDEX_OUT_OF_RANGE = "LEAF_INDEX_OUT_OF_RANGE"

    # Serialization
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"

    # Verification
    MERKLE_PROOF_INVALID = "MERKLE_PROOF_INVALID"
    ROOT_MISMATCH = "ROOT_MISMATCH"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class SolvencyError(BaseModel):
    """
    Base error model for structured error communication.

    Lets a caller report a failed build or a rejected record without
    carrying the exception object around (e.g. in a JSON report).
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.BALANCE_OVERFLOW],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried with other parameters",
    )


class OverflowErrorModel(SolvencyError):
    """Error model for an aggregate balance exceeding its level bound."""

    code: str = Field(default=ErrorCodes.BALANCE_OVERFLOW)
    level: int = Field(..., ge=0)
    currency: Optional[int] = Field(
        default=None,
        description="Currency index, or None when the configuration itself is unsound",
    )
    value: int = Field(..., description="Offending aggregate value")
    bound: int = Field(..., description="Largest value permitted at this level")


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class SolvencyException(Exception):
    """
    Base exception for all Merkle sum tree errors.

    Carries structured error information and can be converted
    to a SolvencyError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "SOLVENCY_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> SolvencyError:
        """Convert this exception to a SolvencyError model."""
        return SolvencyError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class IdentityRangeException(SolvencyException, ValueError):
    """Raised when a username encodes to an integer >= the field modulus."""

    def __init__(
        self,
        message: str,
        username: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if username is not None:
            full_details["username"] = username
        super().__init__(
            message=message,
            code=ErrorCodes.IDENTITY_OUT_OF_RANGE,
            details=full_details,
            retryable=False,
        )
        self.username = username


class BalanceOverflowException(SolvencyException, OverflowError):
    """
    Raised when an aggregate balance exceeds the bound of its tree level.

    currency is None when the configuration alone is unsound, i.e. the
    root-level bound does not fit below the field modulus.
    """

    def __init__(
        self,
        message: str,
        level: int = 0,
        currency: int | None = None,
        value: int = 0,
        bound: int = 0,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.BALANCE_OVERFLOW,
            details={
                "level": level,
                "currency": currency,
                "value": value,
                "bound": bound,
            },
            retryable=True,
        )
        self.level = level
        self.currency = currency
        self.value = value
        self.bound = bound

    def to_error_model(self) -> OverflowErrorModel:
        return OverflowErrorModel(
            message=self.message,
            details=self.details,
            retryable=self.retryable,
            level=self.level,
            currency=self.currency,
            value=self.value,
            bound=self.bound,
        )


class LeafIndexException(SolvencyException, IndexError):
    """Raised when a proof or entry is requested for a missing leaf."""

    def __init__(
        self,
        message: str,
        index: int | None = None,
        leaf_count: int | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if index is not None:
            details["index"] = index
        if leaf_count is not None:
            details["leaf_count"] = leaf_count
        super().__init__(
            message=message,
            code=ErrorCodes.LEAF_INDEX_OUT_OF_RANGE,
            details=details,
            retryable=False,
        )
        self.index = index
        self.leaf_count = leaf_count


class ParameterException(SolvencyException, ValueError):
    """Raised when deployment parameters are structurally invalid."""

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if parameter:
            full_details["parameter"] = parameter
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_PARAMETERS,
            details=full_details,
            retryable=True,
        )


class CanonicalizationException(SolvencyException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
            retryable=False,
        )


class SchemaValidationException(SolvencyException):
    """Exception raised when a serialized tree artifact fails validation."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=ErrorCodes.SCHEMA_VALIDATION_ERROR,
            details=full_details,
            retryable=False,
        )
