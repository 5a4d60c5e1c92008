"""
Tests for the leaf encoding.
"""

import pytest
from eth_utils import keccak, to_canonical_address

from merkle_claims.leaf import encode_leaf
from tests.conftest import ACCOUNT_A, ACCOUNT_B


class TestEncodeLeaf:
    """Tests for encode_leaf."""

    def test_packed_layout(self):
        """Leaf is keccak over uint256 || address || uint256 with no separators."""
        expected = keccak(
            (7).to_bytes(32, "big") + to_canonical_address(ACCOUNT_A) + (100).to_bytes(32, "big")
        )
        assert encode_leaf(7, ACCOUNT_A, 100) == expected

    def test_leaf_is_32_bytes(self):
        assert len(encode_leaf(0, ACCOUNT_A, 1)) == 32

    def test_deterministic(self):
        assert encode_leaf(3, ACCOUNT_B, 10 ** 18) == encode_leaf(3, ACCOUNT_B, 10 ** 18)

    def test_raw_bytes_account_matches_hex(self):
        assert encode_leaf(1, to_canonical_address(ACCOUNT_A), 5) == encode_leaf(1, ACCOUNT_A, 5)

    def test_account_case_does_not_change_leaf(self):
        account = "0x" + "ab" * 20
        assert encode_leaf(0, account, 1) == encode_leaf(0, account.upper().replace("0X", "0x"), 1)

    def test_distinct_fields_give_distinct_leaves(self):
        leaves = {
            encode_leaf(0, ACCOUNT_A, 100),
            encode_leaf(1, ACCOUNT_A, 100),
            encode_leaf(0, ACCOUNT_B, 100),
            encode_leaf(0, ACCOUNT_A, 101),
        }
        assert len(leaves) == 4

    def test_max_uint256_accepted(self):
        assert len(encode_leaf(2 ** 256 - 1, ACCOUNT_A, 2 ** 256 - 1)) == 32

    @pytest.mark.parametrize("index,amount", [(-1, 1), (2 ** 256, 1), (0, -1), (0, 2 ** 256)])
    def test_out_of_range_integers_rejected(self, index, amount):
        with pytest.raises(ValueError):
            encode_leaf(index, ACCOUNT_A, amount)

    def test_wrong_width_account_rejected(self):
        with pytest.raises(ValueError):
            encode_leaf(0, b"\x01" * 19, 1)
        with pytest.raises(ValueError):
            encode_leaf(0, "0x1234", 1)
