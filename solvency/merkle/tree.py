"""
Merkle Sum Tree - Tree
Immutable Merkle sum tree over a padded list of user entries.

Layout:
    nodes[0]      leaves, 2^depth of them, index-aligned with entries
    nodes[l][i]   parent of nodes[l-1][2i] and nodes[l-1][2i+1]
    nodes[depth]  the root, alone

Once built, neither the entries nor the node matrix change. update_leaf()
returns a new tree; proofs taken from the old tree keep verifying against
the old root only.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Sequence

from solvency.crypto.hashing import SumTreeHasher, get_hasher
from solvency.merkle.builder import (
    make_executor,
    build_leaves,
    build_tree,
    is_power_of_two,
    pad_entries,
    rebuild_path,
)
from solvency.merkle.entry import Entry
from solvency.merkle.node import Node
from solvency.merkle.proofs import MerkleProof, build_merkle_proof, verify_proof
from solvency.schemas.errors import LeafIndexException, ParameterException

if TYPE_CHECKING:
    from solvency.config.runtime import RuntimeConfig
    from solvency.schemas.wire import RootCommitmentModel


logger = logging.getLogger(__name__)


class MerkleSumTree:
    """
    Liabilities accumulator: every node commits to a hash and to the
    per-currency balance sums of its subtree.

    Build with from_entries() or from_config().

    Example:
        >>> entries = [Entry("alice", [10, 1]), Entry("bob", [20, 2])]
        >>> tree = MerkleSumTree.from_entries(entries, byte_width=8)
        >>> tree.grand_sums
        (30, 3)
    """

    def __init__(
        self,
        entries: Sequence[Entry],
        nodes: Sequence[Sequence[Node]],
        byte_width: int,
        hasher: SumTreeHasher,
    ) -> None:
        self._entries = tuple(entries)
        self._nodes = tuple(tuple(level) for level in nodes)
        self._byte_width = byte_width
        self._hasher = hasher

    @classmethod
    def from_entries(
        cls,
        entries: Sequence[Entry],
        byte_width: int,
        n_currencies: int | None = None,
        workers: int = 0,
        hasher: SumTreeHasher | None = None,
        pad: bool = False,
    ) -> "MerkleSumTree":
        """
        Build a tree from user entries.

        Args:
            entries: User entries in leaf order
            byte_width: Leaf balance width driving the overflow bounds
            n_currencies: Expected balances per entry (default: first entry's)
            workers: Worker processes per level; 0 or 1 builds serially
            hasher: Hash aggregator (default: Poseidon for n_currencies)
            pad: Pad with empty entries up to the next power of two

        Raises:
            ValueError: On empty input, mixed balance widths, or a
                non-power-of-two count with pad=False
            BalanceOverflowException: If an aggregate exceeds its level bound
        """
        if not entries:
            raise ValueError("Cannot build a tree without entries")
        n_currencies = n_currencies or entries[0].n_currencies
        for index, entry in enumerate(entries):
            if entry.n_currencies != n_currencies:
                raise ValueError(
                    f"Entry {index} holds {entry.n_currencies} balances, "
                    f"expected {n_currencies}"
                )

        if pad:
            entries = pad_entries(entries, n_currencies)
        elif not is_power_of_two(len(entries)):
            raise ValueError(
                f"Entry count must be a power of two, got {len(entries)} "
                f"(pass pad=True to pad with empty entries)"
            )

        hasher = hasher or get_hasher(n_currencies)
        owned = [entry.copy() for entry in entries]
        with make_executor(workers) as pool:
            leaves = build_leaves(owned, hasher, workers, executor=pool)
            nodes = build_tree(leaves, byte_width, hasher, workers, executor=pool)
        return cls(owned, nodes, byte_width, hasher)

    @classmethod
    def from_config(
        cls,
        entries: Sequence[Entry],
        config: "RuntimeConfig",
        hasher: SumTreeHasher | None = None,
        pad: bool = False,
    ) -> "MerkleSumTree":
        """
        Build a tree with parameters taken from a validated RuntimeConfig.

        Raises:
            ParameterException: If the config is invalid or fixes a depth
                that does not match the number of entries
        """
        config.validate()
        tree_config = config.tree
        if pad:
            entries = pad_entries(entries, tree_config.n_currencies)
        if tree_config.depth is not None and len(entries) != 1 << tree_config.depth:
            raise ParameterException(
                f"Configured depth {tree_config.depth} requires "
                f"{1 << tree_config.depth} entries, got {len(entries)}",
                parameter="depth",
            )
        return cls.from_entries(
            entries,
            byte_width=tree_config.byte_width,
            n_currencies=tree_config.n_currencies,
            workers=config.build.workers,
            hasher=hasher,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def root(self) -> Node:
        return self._nodes[-1][0]

    @property
    def depth(self) -> int:
        return len(self._nodes) - 1

    @property
    def leaves(self) -> tuple[Node, ...]:
        return self._nodes[0]

    @property
    def nodes(self) -> tuple[tuple[Node, ...], ...]:
        return self._nodes

    @property
    def entries(self) -> tuple[Entry, ...]:
        return self._entries

    @property
    def leaf_count(self) -> int:
        return len(self._nodes[0])

    @property
    def n_currencies(self) -> int:
        return self.root.n_currencies

    @property
    def byte_width(self) -> int:
        return self._byte_width

    @property
    def hasher(self) -> SumTreeHasher:
        return self._hasher

    @property
    def grand_sums(self) -> tuple[int, ...]:
        """Total liabilities per currency."""
        return self.root.balances

    def get_entry(self, index: int) -> Entry:
        if index < 0 or index >= len(self._entries):
            raise LeafIndexException(
                f"Entry index {index} out of range for {len(self._entries)} entries",
                index=index,
                leaf_count=len(self._entries),
            )
        return self._entries[index]

    def penultimate_level_data(self) -> tuple[Node, Node]:
        """The two children of the root."""
        if self.depth < 1:
            raise ValueError("A tree of depth 0 has no level below the root")
        left, right = self._nodes[self.depth - 1]
        return left, right

    def index_of(self, username: str, balances: Sequence[int]) -> Optional[int]:
        """Leaf index of the user with exactly these balances, or None."""
        leaf = Entry(username, balances, self.n_currencies).compute_leaf(self._hasher)
        for index, node in enumerate(self.leaves):
            if node.hash == leaf.hash:
                return index
        return None

    # ------------------------------------------------------------------
    # Proofs
    # ------------------------------------------------------------------

    def generate_proof(self, index: int) -> MerkleProof:
        """
        Inclusion proof for the leaf at `index`.

        Raises:
            LeafIndexException: If index is outside [0, leaf_count)
        """
        return build_merkle_proof(self._nodes, index)

    def verify_proof(self, proof: MerkleProof, check_total: bool = False) -> bool:
        """
        Verify a proof against this tree's root.

        With check_total, the proof must also reproduce this tree's grand sums.
        """
        if proof.root_hash != self.root.hash:
            return False
        return verify_proof(
            proof,
            expected_total=self.grand_sums if check_total else None,
            byte_width=self._byte_width,
            hasher=self._hasher,
        )

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def update_leaf(self, username: str, balances: Sequence[int]) -> "MerkleSumTree":
        """
        Return a new tree in which `username` holds `balances`.

        Only the leaf and its ancestors are recomputed; this tree is not
        modified.

        Raises:
            LeafIndexException: If no entry has this username
            BalanceOverflowException: If an updated ancestor exceeds its bound
        """
        index = next(
            (i for i, entry in enumerate(self._entries) if username and entry.username == username),
            None,
        )
        if index is None:
            raise LeafIndexException(
                f"No entry for user {username!r}",
                leaf_count=self.leaf_count,
            )

        entry = self._entries[index].copy()
        leaf = entry.recompute_leaf(balances, self._hasher)
        nodes = rebuild_path(self._nodes, index, leaf, self._byte_width, self._hasher)
        entries = list(self._entries)
        entries[index] = entry
        logger.info(f"Updated leaf {index}; new root {nodes[-1][0].hash:#066x}")
        return MerkleSumTree(entries, nodes, self._byte_width, self._hasher)

    def summary(self) -> "RootCommitmentModel":
        """Publishable commitment: root hash, shape parameters and grand sums."""
        from solvency.schemas.wire import RootCommitmentModel

        return RootCommitmentModel.from_tree(self)

    def __repr__(self) -> str:
        return (
            f"MerkleSumTree(depth={self.depth}, n_currencies={self.n_currencies}, "
            f"root={self.root.hash:#066x})"
        )


__all__ = ["MerkleSumTree"]
