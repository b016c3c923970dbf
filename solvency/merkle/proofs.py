"""
Merkle Sum Tree - Inclusion Proofs
Proof generation for one user and proof verification against a root.

Proof Rules (Hard Contracts):
1. One sibling per level, ordered from the leaf upwards
2. path_bits[level] = 0: the running node is the left child at that level,
   path_bits[level] = 1: the running node is the right child
3. Parent = (middle_hash(left, right), left.balances + right.balances)
4. A proof is valid iff folding all levels reproduces root_hash (and,
   when requested, the expected grand sums)

Verification never raises: a malformed proof (mismatched lengths, bits
other than 0/1, wrong balance widths, values outside the field) is
simply invalid.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

from solvency.crypto.field import FIELD_MODULUS, is_field_element
from solvency.crypto.hashing import MAX_CURRENCIES, SumTreeHasher, get_hasher
from solvency.merkle.bounds import max_balance_at_level
from solvency.merkle.node import Node
from solvency.schemas.errors import LeafIndexException

if TYPE_CHECKING:
    from solvency.merkle.entry import Entry
    from solvency.merkle.tree import MerkleSumTree


def _as_tuple(value: object) -> object:
    return tuple(value) if isinstance(value, (list, tuple)) else value


@dataclass(frozen=True)
class MerkleProof:
    """
    Inclusion proof for a single leaf of a Merkle sum tree.

    Attributes:
        leaf: The leaf node being proven
        root_hash: Root hash of the tree at generation time
        sibling_hashes: Sibling hash per level, leaf to root
        sibling_balances: Sibling balance vector per level, leaf to root
        path_bits: 0 if the running node is a left child at that level, else 1
    """
    leaf: Node
    root_hash: int
    sibling_hashes: tuple[int, ...]
    sibling_balances: tuple[tuple[int, ...], ...]
    path_bits: tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "sibling_hashes", _as_tuple(self.sibling_hashes))
        object.__setattr__(self, "path_bits", _as_tuple(self.path_bits))
        balances = self.sibling_balances
        if isinstance(balances, (list, tuple)):
            object.__setattr__(
                self, "sibling_balances", tuple(_as_tuple(b) for b in balances)
            )

    @property
    def depth(self) -> int:
        return len(self.sibling_hashes)

    @property
    def leaf_index(self) -> int:
        """Leaf position encoded by the path bits."""
        return sum(bit << level for level, bit in enumerate(self.path_bits))


def build_merkle_proof(levels: Sequence[Sequence[Node]], index: int) -> MerkleProof:
    """
    Extract the sibling path of leaf `index` from a level matrix.

    Args:
        levels: Node levels, leaves first, root last
        index: 0-based leaf index

    Returns:
        MerkleProof including the current root hash

    Raises:
        LeafIndexException: If index is outside [0, leaf_count)
    """
    leaf_count = len(levels[0]) if levels else 0
    if index < 0 or index >= leaf_count:
        raise LeafIndexException(
            f"Leaf index {index} out of range for {leaf_count} leaves",
            index=index,
            leaf_count=leaf_count,
        )

    depth = len(levels) - 1
    sibling_hashes: list[int] = []
    sibling_balances: list[tuple[int, ...]] = []
    path_bits: list[int] = []
    current_index = index

    for level in range(depth):
        sibling = levels[level][current_index ^ 1]
        path_bits.append(current_index % 2)
        sibling_hashes.append(sibling.hash)
        sibling_balances.append(sibling.balances)
        current_index //= 2

    return MerkleProof(
        leaf=levels[0][index],
        root_hash=levels[depth][0].hash,
        sibling_hashes=tuple(sibling_hashes),
        sibling_balances=tuple(sibling_balances),
        path_bits=tuple(path_bits),
    )


def generate_proof(tree: "MerkleSumTree", user_index: int) -> MerkleProof:
    """Generate the inclusion proof of user `user_index` in `tree`."""
    return build_merkle_proof(tree.nodes, user_index)


def _is_balance_vector(value: object, width: int) -> bool:
    return (
        isinstance(value, tuple)
        and len(value) == width
        and all(is_field_element(b) for b in value)
    )


def _is_well_formed(proof: MerkleProof, hasher: Optional[SumTreeHasher]) -> bool:
    leaf = proof.leaf
    if not isinstance(leaf, Node) or not isinstance(leaf.balances, tuple):
        return False
    width = len(leaf.balances)
    if hasher is None:
        if width < 1 or width > MAX_CURRENCIES:
            return False
    elif width != hasher.n_currencies:
        return False
    if not is_field_element(leaf.hash) or not _is_balance_vector(leaf.balances, width):
        return False
    if not is_field_element(proof.root_hash):
        return False

    hashes, balances, bits = proof.sibling_hashes, proof.sibling_balances, proof.path_bits
    if not all(isinstance(seq, tuple) for seq in (hashes, balances, bits)):
        return False
    if not len(hashes) == len(balances) == len(bits):
        return False
    return (
        all(is_field_element(h) for h in hashes)
        and all(_is_balance_vector(b, width) for b in balances)
        and all(isinstance(bit, int) and bit in (0, 1) for bit in bits)
    )


def verify_proof(
    proof: MerkleProof,
    expected_total: Sequence[int] | None = None,
    byte_width: int | None = None,
    hasher: SumTreeHasher | None = None,
) -> bool:
    """
    Verify a Merkle sum tree inclusion proof.

    Args:
        proof: MerkleProof to verify
        expected_total: Optional grand sums the root must carry (list or
                        tuple; anything else fails verification)
        byte_width: Optional leaf width; when given, every recomputed
                    ancestor must also respect its level bound
        hasher: Hash aggregator (defaults to Poseidon for the leaf width)

    Returns:
        True if the proof reproduces root_hash (and the expected totals),
        False otherwise, including for malformed proofs
    """
    if not _is_well_formed(proof, hasher):
        return False
    if byte_width is not None and (not isinstance(byte_width, int) or byte_width < 1):
        return False
    hasher = hasher or get_hasher(len(proof.leaf.balances))

    current_hash = proof.leaf.hash
    current_balances = proof.leaf.balances

    for level, (sibling_hash, sibling_balances, bit) in enumerate(
        zip(proof.sibling_hashes, proof.sibling_balances, proof.path_bits)
    ):
        if bit == 0:
            current_hash = hasher.middle_hash(
                current_hash, current_balances, sibling_hash, sibling_balances
            )
        else:
            current_hash = hasher.middle_hash(
                sibling_hash, sibling_balances, current_hash, current_balances
            )
        sums = tuple(a + b for a, b in zip(current_balances, sibling_balances))
        if byte_width is not None:
            bound = max_balance_at_level(byte_width, level + 1)
            if any(value > bound for value in sums):
                return False
        current_balances = tuple(value % FIELD_MODULUS for value in sums)

    if current_hash != proof.root_hash:
        return False
    if expected_total is not None:
        if not isinstance(expected_total, (list, tuple)):
            return False
        return current_balances == tuple(expected_total)
    return True


def verify_entry_inclusion(
    entry: "Entry",
    proof: MerkleProof,
    expected_total: Sequence[int] | None = None,
    byte_width: int | None = None,
    hasher: SumTreeHasher | None = None,
) -> bool:
    """
    Verify that `proof` is an inclusion proof for this user's record.

    The check a user runs: recompute the own leaf from username and
    balances, then verify the path to the published root.
    """
    if not isinstance(proof.leaf, Node) or len(proof.leaf.balances) != entry.n_currencies:
        return False
    if entry.compute_leaf(hasher) != proof.leaf:
        return False
    return verify_proof(proof, expected_total, byte_width, hasher)


class MerkleProver:
    """
    Convenience class for generating proofs.

    Example:
        >>> proof = MerkleProver.prove(tree, index=1)
        >>> MerkleVerifier.verify(proof)
        True
    """

    @staticmethod
    def prove(tree: "MerkleSumTree", index: int) -> MerkleProof:
        return generate_proof(tree, index)

    @staticmethod
    def prove_user(tree: "MerkleSumTree", username: str, balances: Sequence[int]) -> MerkleProof:
        """
        Generate a proof for the user holding exactly these balances.

        Raises:
            LeafIndexException: If no such leaf exists
        """
        index = tree.index_of(username, balances)
        if index is None:
            raise LeafIndexException(
                f"No leaf for user {username!r} with the given balances",
                leaf_count=tree.leaf_count,
            )
        return generate_proof(tree, index)


class MerkleVerifier:
    """Convenience class for verifying proofs."""

    @staticmethod
    def verify(proof: MerkleProof, expected_total: Sequence[int] | None = None) -> bool:
        return verify_proof(proof, expected_total)

    @staticmethod
    def verify_against_root(proof: MerkleProof, trusted_root: int) -> bool:
        """Verify a proof whose root must match an independently trusted root."""
        return proof.root_hash == trusted_root and verify_proof(proof)


__all__ = [
    "MerkleProof",
    "build_merkle_proof",
    "generate_proof",
    "verify_proof",
    "verify_entry_inclusion",
    "MerkleProver",
    "MerkleVerifier",
]
