"""
Schemas - Wire Formats
File: wire.py

Purpose: Pydantic models for the artifacts an exchange publishes: the
root commitment (root hash, tree shape, grand sums) and per-user
inclusion proofs.

Encoding Rules:
1. Every field element is a 0x-prefixed, 64-character big-endian hex string
2. Balance vectors are lists of such strings, one per currency
3. path_bits are JSON integers 0 or 1, ordered from the leaf upwards
4. Serialization goes through dumps_canonical, so equal artifacts are
   byte-identical
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from solvency.crypto.field import from_field_hex, to_field_hex
from solvency.merkle.node import Node
from solvency.merkle.proofs import MerkleProof

from .canonical import dumps_canonical, loads_canonical
from .errors import SchemaValidationException

if TYPE_CHECKING:
    from solvency.merkle.tree import MerkleSumTree


def _check_hex(value: str) -> str:
    from_field_hex(value)
    return value.lower()


def _encode_balances(balances: tuple[int, ...]) -> list[str]:
    return [to_field_hex(b) for b in balances]


def _decode_balances(balances: list[str]) -> tuple[int, ...]:
    return tuple(from_field_hex(b) for b in balances)


class _WireModel(BaseModel):
    """Shared canonical JSON encode/decode for published artifacts."""

    model_config = ConfigDict(extra="forbid")

    def to_json(self) -> str:
        return dumps_canonical(self)

    @classmethod
    def from_json(cls, json_str: str) -> Any:
        """
        Parse and validate a serialized artifact.

        Raises:
            SchemaValidationException: If the text is not JSON or does not
                match the model
        """
        try:
            return cls.model_validate(loads_canonical(json_str))
        except ValueError as e:
            # pydantic.ValidationError and json.JSONDecodeError are both ValueErrors
            raise SchemaValidationException(
                f"Invalid {cls.__name__}: {e}",
                details={"model": cls.__name__},
            ) from e


class NodeModel(_WireModel):
    """A tree node: hash plus per-currency balance sums."""

    hash: str = Field(..., description="Node hash as a 32-byte hex field element")
    balances: list[str] = Field(
        ...,
        description="Per-currency balance sums as hex field elements",
        min_length=1,
    )

    @field_validator("hash")
    @classmethod
    def validate_hash(cls, v: str) -> str:
        return _check_hex(v)

    @field_validator("balances")
    @classmethod
    def validate_balances(cls, v: list[str]) -> list[str]:
        return [_check_hex(b) for b in v]

    @classmethod
    def from_node(cls, node: Node) -> "NodeModel":
        return cls(hash=to_field_hex(node.hash), balances=_encode_balances(node.balances))

    def to_node(self) -> Node:
        return Node(hash=from_field_hex(self.hash), balances=_decode_balances(self.balances))


class MerkleProofModel(_WireModel):
    """
    Serialized inclusion proof handed to one user.

    Structural checks (matching lengths, 0/1 bits, uniform balance widths)
    run at parse time; cryptographic validity is left to verify_proof().
    """

    leaf: NodeModel = Field(..., description="The user's leaf node")
    root_hash: str = Field(..., description="Root hash the proof folds up to")
    sibling_hashes: list[str] = Field(
        default_factory=list,
        description="Sibling hash per level, leaf to root",
    )
    sibling_balances: list[list[str]] = Field(
        default_factory=list,
        description="Sibling balance vector per level, leaf to root",
    )
    path_bits: list[int] = Field(
        default_factory=list,
        description="0 if the running node is a left child at that level, else 1",
    )

    @field_validator("root_hash")
    @classmethod
    def validate_root_hash(cls, v: str) -> str:
        return _check_hex(v)

    @field_validator("sibling_hashes")
    @classmethod
    def validate_sibling_hashes(cls, v: list[str]) -> list[str]:
        return [_check_hex(h) for h in v]

    @field_validator("sibling_balances")
    @classmethod
    def validate_sibling_balances(cls, v: list[list[str]]) -> list[list[str]]:
        return [[_check_hex(b) for b in level] for level in v]

    @model_validator(mode="after")
    def validate_shape(self) -> "MerkleProofModel":
        depth = len(self.sibling_hashes)
        if len(self.sibling_balances) != depth or len(self.path_bits) != depth:
            raise ValueError(
                f"sibling_hashes, sibling_balances and path_bits must have equal "
                f"length, got {depth}, {len(self.sibling_balances)}, {len(self.path_bits)}"
            )
        if any(bit not in (0, 1) for bit in self.path_bits):
            raise ValueError("path_bits must only contain 0 or 1")
        width = len(self.leaf.balances)
        for level, balances in enumerate(self.sibling_balances):
            if len(balances) != width:
                raise ValueError(
                    f"Sibling balances at level {level} hold {len(balances)} "
                    f"values, expected {width}"
                )
        return self

    @property
    def depth(self) -> int:
        return len(self.sibling_hashes)

    @classmethod
    def from_proof(cls, proof: MerkleProof) -> "MerkleProofModel":
        return cls(
            leaf=NodeModel.from_node(proof.leaf),
            root_hash=to_field_hex(proof.root_hash),
            sibling_hashes=[to_field_hex(h) for h in proof.sibling_hashes],
            sibling_balances=[_encode_balances(b) for b in proof.sibling_balances],
            path_bits=list(proof.path_bits),
        )

    def to_proof(self) -> MerkleProof:
        return MerkleProof(
            leaf=self.leaf.to_node(),
            root_hash=from_field_hex(self.root_hash),
            sibling_hashes=tuple(from_field_hex(h) for h in self.sibling_hashes),
            sibling_balances=tuple(_decode_balances(b) for b in self.sibling_balances),
            path_bits=tuple(self.path_bits),
        )


class RootCommitmentModel(_WireModel):
    """Public commitment to a whole tree."""

    root_hash: str = Field(..., description="Root hash as a hex field element")
    depth: int = Field(..., description="Number of levels above the leaves", ge=0)
    n_currencies: int = Field(..., description="Balances per entry", ge=1)
    byte_width: int = Field(..., description="Byte width of leaf balances", ge=1)
    grand_sums: list[str] = Field(
        ...,
        description="Total liabilities per currency as hex field elements",
        min_length=1,
    )

    @field_validator("root_hash")
    @classmethod
    def validate_root_hash(cls, v: str) -> str:
        return _check_hex(v)

    @field_validator("grand_sums")
    @classmethod
    def validate_grand_sums(cls, v: list[str]) -> list[str]:
        return [_check_hex(s) for s in v]

    @model_validator(mode="after")
    def validate_width(self) -> "RootCommitmentModel":
        if len(self.grand_sums) != self.n_currencies:
            raise ValueError(
                f"grand_sums holds {len(self.grand_sums)} values, "
                f"expected n_currencies={self.n_currencies}"
            )
        return self

    @classmethod
    def from_tree(cls, tree: "MerkleSumTree") -> "RootCommitmentModel":
        return cls(
            root_hash=to_field_hex(tree.root.hash),
            depth=tree.depth,
            n_currencies=tree.n_currencies,
            byte_width=tree.byte_width,
            grand_sums=_encode_balances(tree.grand_sums),
        )

    @property
    def root_hash_int(self) -> int:
        return from_field_hex(self.root_hash)

    @property
    def grand_sums_int(self) -> tuple[int, ...]:
        return _decode_balances(self.grand_sums)


__all__ = [
    "NodeModel",
    "MerkleProofModel",
    "RootCommitmentModel",
]
