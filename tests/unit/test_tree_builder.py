"""
Tree Builder Unit Tests
Tests for solvency/merkle/builder.py

Covers:
1. Root determinism - same entries, same root
2. Structure - every parent hashes and sums its two children
3. Padding - empty entries share one deterministic leaf
4. Overflow - aggregates above the level bound abort the build
5. Parallelism - a pooled build equals the serial build
"""
import pytest

from fixtures import make_entries, make_tree

from solvency.merkle import (
    Entry,
    MerkleSumTree,
    Node,
    build_leaves,
    build_tree,
    is_power_of_two,
    next_power_of_two,
    pad_entries,
)
from solvency.schemas.errors import BalanceOverflowException, ErrorCodes


class TestHelpers:
    """Tests for power-of-two helpers."""

    def test_is_power_of_two(self):
        assert [n for n in range(10) if is_power_of_two(n)] == [1, 2, 4, 8]

    def test_next_power_of_two(self):
        assert next_power_of_two(0) == 1
        assert next_power_of_two(1) == 1
        assert next_power_of_two(3) == 4
        assert next_power_of_two(8) == 8
        assert next_power_of_two(9) == 16

    def test_pad_entries(self):
        padded = pad_entries(make_entries(3), 2)
        assert len(padded) == 4
        assert padded[3].is_empty
        assert padded[:3] == make_entries(3)


class TestStructure:
    """Tests for the node matrix."""

    def test_level_sizes(self, tree):
        assert [len(level) for level in tree.nodes] == [4, 2, 1]
        assert tree.depth == 2

    def test_parents_combine_children(self, tree, entries):
        leaves = [entry.compute_leaf() for entry in entries]
        assert list(tree.leaves) == leaves
        left = Node.middle(leaves[0], leaves[1])
        right = Node.middle(leaves[2], leaves[3])
        assert tree.nodes[1] == (left, right)
        assert tree.root == Node.middle(left, right)

    def test_root_holds_grand_sums(self, tree, entries):
        expected = tuple(sum(e.balances[c] for e in entries) for c in range(2))
        assert tree.grand_sums == expected == (64, 68)

    def test_every_level_sums_to_total(self, tree):
        for level in tree.nodes:
            totals = tuple(sum(node.balances[c] for node in level) for c in range(2))
            assert totals == tree.grand_sums

    def test_single_leaf_tree(self):
        entries = make_entries(1)
        tree = make_tree(entries)
        assert tree.depth == 0
        assert tree.root == entries[0].compute_leaf()


class TestDeterminism:
    """Tests for deterministic roots."""

    def test_same_entries_same_root(self, tree):
        assert make_tree(make_entries(4)).root == tree.root

    def test_order_matters(self, tree, entries):
        swapped = [entries[1], entries[0], entries[2], entries[3]]
        assert make_tree(swapped).root.hash != tree.root.hash

    def test_balance_change_changes_root(self, tree):
        other = make_entries(4, balances=[[1, 2], [11, 12], [21, 22], [31, 33]])
        assert make_tree(other).root.hash != tree.root.hash


class TestPadding:
    """Tests for empty-entry padding."""

    def test_non_power_of_two_rejected(self):
        with pytest.raises(ValueError, match="power of two"):
            make_tree(make_entries(3))

    def test_padding_is_deterministic(self):
        first = make_tree(make_entries(3), pad=True)
        second = make_tree(make_entries(3), pad=True)
        assert first.leaf_count == 4
        assert first.root == second.root

    def test_padding_leaf_is_empty_entry_leaf(self):
        tree = make_tree(make_entries(3), pad=True)
        assert tree.leaves[3] == Entry.init_empty(2).compute_leaf()
        assert tree.entries[3].is_empty

    def test_padding_does_not_change_sums(self):
        tree = make_tree(make_entries(3), pad=True)
        assert tree.grand_sums == (33, 36)

    def test_build_tree_rejects_bad_leaf_count(self):
        leaves = build_leaves(make_entries(3))
        with pytest.raises(ValueError, match="power of two"):
            build_tree(leaves, byte_width=8)


class TestOverflow:
    """Tests for level-bound enforcement."""

    def test_overflow_at_level_one(self):
        # Leaves are not range-checked here; 256 + 256 = 512 > 510 at level 1.
        entries = [Entry("alice", [256, 0]), Entry("bob", [256, 0])]
        with pytest.raises(BalanceOverflowException) as exc_info:
            MerkleSumTree.from_entries(entries, byte_width=1)
        err = exc_info.value
        assert err.level == 1
        assert err.currency == 0
        assert err.value == 512
        assert err.bound == 510
        assert err.code == ErrorCodes.BALANCE_OVERFLOW

    def test_overflow_is_overflow_error(self):
        entries = [Entry("alice", [0, 300]), Entry("bob", [0, 300])]
        with pytest.raises(OverflowError):
            MerkleSumTree.from_entries(entries, byte_width=1)

    def test_sum_at_bound_accepted(self):
        entries = [Entry("alice", [255, 0]), Entry("bob", [255, 0])]
        tree = MerkleSumTree.from_entries(entries, byte_width=1)
        assert tree.grand_sums == (510, 0)

    def test_unsound_configuration_rejected(self):
        with pytest.raises(BalanceOverflowException) as exc_info:
            make_tree(make_entries(2), byte_width=32)
        assert exc_info.value.currency is None

    def test_error_model(self):
        entries = [Entry("alice", [256, 0]), Entry("bob", [256, 0])]
        with pytest.raises(BalanceOverflowException) as exc_info:
            MerkleSumTree.from_entries(entries, byte_width=1)
        model = exc_info.value.to_error_model()
        assert model.level == 1
        assert model.value == 512
        assert model.retryable


class TestParallelBuild:
    """Tests for the worker-pool build."""

    @pytest.mark.slow
    def test_pooled_build_matches_serial(self, tree, entries):
        pooled = make_tree(entries, workers=2)
        assert pooled.nodes == tree.nodes

    def test_workers_one_is_serial(self, tree, entries):
        assert make_tree(entries, workers=1).root == tree.root
