"""
Merkle Sum Tree
Liabilities accumulator for proof of solvency.

This package provides:
- Entry: one user's username and per-currency balances
- Node: hash plus per-currency subtree sums
- max_balance_at_level / validate_tree_parameters: overflow bounds
- build_leaves / build_tree: level-synchronous construction
- MerkleSumTree: the built, immutable tree
- MerkleProof, generate_proof, verify_proof: inclusion proofs

Commitment Rules:
1. Leaf:   (H_entry(identity, balances), balances)
2. Parent: (H_node(left.hash, left.balances, right.hash, right.balances),
            left.balances + right.balances)
3. Leaf count is a power of two; padding uses empty entries
4. Every aggregate at level L is at most (2^(8 * byte_width) - 1) * (L + 1)

Usage:
    from solvency.merkle import Entry, MerkleSumTree, verify_proof

    entries = [Entry("alice", [10, 3]), Entry("bob", [7, 0])]
    tree = MerkleSumTree.from_entries(entries, byte_width=8)

    proof = tree.generate_proof(1)
    assert verify_proof(proof, expected_total=tree.grand_sums)
"""
from .node import Node
from .entry import Entry
from .bounds import (
    max_leaf_value,
    max_balance_at_level,
    level_bounds,
    is_sound_configuration,
    max_sound_depth,
    validate_tree_parameters,
)
from .builder import (
    is_power_of_two,
    next_power_of_two,
    pad_entries,
    build_leaves,
    build_tree,
    rebuild_path,
)
from .proofs import (
    MerkleProof,
    build_merkle_proof,
    generate_proof,
    verify_proof,
    verify_entry_inclusion,
    MerkleProver,
    MerkleVerifier,
)
from .tree import MerkleSumTree
from .dummy import generate_dummy_entries


__all__ = [
    # Core types
    "Entry",
    "Node",
    "MerkleSumTree",
    "MerkleProof",
    # Bounds
    "max_leaf_value",
    "max_balance_at_level",
    "level_bounds",
    "is_sound_configuration",
    "max_sound_depth",
    "validate_tree_parameters",
    # Construction
    "is_power_of_two",
    "next_power_of_two",
    "pad_entries",
    "build_leaves",
    "build_tree",
    "rebuild_path",
    # Proofs
    "build_merkle_proof",
    "generate_proof",
    "verify_proof",
    "verify_entry_inclusion",
    "MerkleProver",
    "MerkleVerifier",
    # Test data
    "generate_dummy_entries",
]
