"""
Entry Unit Tests
Tests for solvency/merkle/entry.py and solvency/merkle/node.py
"""
import pytest

from solvency.crypto.field import FIELD_MODULUS, big_intify_username
from solvency.crypto.hashing import get_hasher
from solvency.merkle import Entry, Node
from solvency.schemas.errors import IdentityRangeException


class TestEntryConstruction:
    """Tests for Entry validation."""

    def test_identity_from_username(self):
        entry = Entry("userA", [1, 2])
        assert entry.identity == big_intify_username("userA")
        assert entry.balances == (1, 2)
        assert entry.n_currencies == 2

    def test_long_username_rejected(self):
        with pytest.raises(IdentityRangeException):
            Entry("userABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789", [1, 2])

    def test_wrong_balance_count(self):
        with pytest.raises(ValueError, match="2 balances"):
            Entry("alice", [1, 2, 3], n_currencies=2)

    def test_no_balances(self):
        with pytest.raises(ValueError):
            Entry("alice", [])

    def test_negative_balance(self):
        with pytest.raises(ValueError, match="non-negative"):
            Entry("alice", [1, -1])

    def test_balance_outside_field(self):
        with pytest.raises(ValueError):
            Entry("alice", [FIELD_MODULUS])

    def test_non_int_balance(self):
        with pytest.raises(TypeError):
            Entry("alice", [1.5, 2])

    def test_empty_entry(self):
        entry = Entry.init_empty(3)
        assert entry.username == ""
        assert entry.identity == 0
        assert entry.balances == (0, 0, 0)
        assert entry.is_empty

    def test_zero_balances_named_user_not_empty(self):
        assert not Entry("alice", [0, 0]).is_empty


class TestLeaf:
    """Tests for leaf computation."""

    def test_compute_leaf(self):
        entry = Entry("alice", [5, 7])
        leaf = entry.compute_leaf()
        assert leaf.balances == (5, 7)
        assert leaf.hash == get_hasher(2).leaf_hash(entry.identity, [5, 7])

    def test_leaf_deterministic(self):
        assert Entry("alice", [5, 7]).compute_leaf() == Entry("alice", [5, 7]).compute_leaf()

    def test_recompute_leaf_updates_balances(self):
        entry = Entry("alice", [5, 7])
        before = entry.compute_leaf()
        after = entry.recompute_leaf([6, 7])
        assert entry.balances == (6, 7)
        assert after.balances == (6, 7)
        assert after.hash != before.hash
        assert after == Entry("alice", [6, 7]).compute_leaf()

    def test_recompute_leaf_keeps_width(self):
        entry = Entry("alice", [5, 7])
        with pytest.raises(ValueError):
            entry.recompute_leaf([1, 2, 3])
        assert entry.balances == (5, 7)

    def test_copy_is_independent(self):
        entry = Entry("alice", [5, 7])
        clone = entry.copy()
        clone.recompute_leaf([9, 9])
        assert entry.balances == (5, 7)
        assert clone.username == "alice"

    def test_equality(self):
        assert Entry("alice", [1, 2]) == Entry("alice", [1, 2])
        assert Entry("alice", [1, 2]) != Entry("alice", [1, 3])


class TestNode:
    """Tests for Node."""

    def test_balances_stored_as_tuple(self):
        node = Node(hash=1, balances=[2, 3])
        assert node.balances == (2, 3)
        assert node.n_currencies == 2

    def test_frozen(self):
        node = Node(hash=1, balances=(2, 3))
        with pytest.raises(AttributeError):
            node.hash = 5

    def test_middle_sums_balances(self):
        left = Entry("a", [1, 2]).compute_leaf()
        right = Entry("b", [3, 4]).compute_leaf()
        parent = Node.middle(left, right)
        assert parent.balances == (4, 6)
        assert parent.hash == get_hasher(2).middle_hash(
            left.hash, left.balances, right.hash, right.balances
        )
