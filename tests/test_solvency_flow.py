"""
Solvency Flow Tests

End-to-end: an exchange builds a tree over its liabilities, publishes the
root commitment, hands each user a serialized proof, and every user
checks their own record against the published root and totals.
"""
import pytest

from solvency.config import RuntimeConfig, TreeConfig
from solvency.merkle import MerkleSumTree, generate_dummy_entries, verify_entry_inclusion
from solvency.schemas.wire import MerkleProofModel, RootCommitmentModel

pytestmark = pytest.mark.integration


@pytest.fixture(scope="module")
def users():
    return generate_dummy_entries(5, 2, seed=42)


@pytest.fixture(scope="module")
def published(users):
    config = RuntimeConfig(tree=TreeConfig(n_currencies=2, byte_width=4, depth=3))
    tree = MerkleSumTree.from_config(users, config, pad=True)
    return tree, tree.summary().to_json()


class TestSolvencyFlow:
    """Publish, distribute and verify."""

    def test_commitment_totals(self, users, published):
        tree, commitment_json = published
        commitment = RootCommitmentModel.from_json(commitment_json)
        expected = tuple(sum(u.balances[c] for u in users) for c in range(2))
        assert commitment.grand_sums_int == expected
        assert commitment.depth == 3
        assert tree.leaf_count == 8

    def test_every_user_verifies(self, users, published):
        tree, commitment_json = published
        commitment = RootCommitmentModel.from_json(commitment_json)

        for user in users:
            index = tree.index_of(user.username, user.balances)
            assert index is not None
            proof_json = MerkleProofModel.from_proof(tree.generate_proof(index)).to_json()

            proof = MerkleProofModel.from_json(proof_json).to_proof()
            assert proof.root_hash == commitment.root_hash_int
            assert verify_entry_inclusion(
                user,
                proof,
                expected_total=commitment.grand_sums_int,
                byte_width=commitment.byte_width,
            )

    def test_balance_update_republishes(self, users, published):
        tree, commitment_json = published
        user = users[0]
        updated = tree.update_leaf(user.username, [b + 1 for b in user.balances])

        old = RootCommitmentModel.from_json(commitment_json)
        new = updated.summary()
        assert new.root_hash != old.root_hash
        assert new.grand_sums_int == tuple(s + 1 for s in old.grand_sums_int)

        # A proof from the old tree does not verify against the new root
        stale = tree.generate_proof(0)
        assert not updated.verify_proof(stale)
        assert updated.verify_proof(updated.generate_proof(0), check_total=True)
