"""Tests for ERC-20 approve calldata."""

import pytest
from eth_abi import decode
from web3 import Web3

from aggregator.config import UNISWAP_V3
from aggregator.encoding import APPROVE_SELECTOR, approval_amount, encode_approve
from aggregator.models.route import ApprovalMode
from aggregator.models.types import UINT256_MAX
from tests.helpers import USDC_2500


class TestEncodeApprove:
    """Tests for encode_approve()."""

    def test_selector(self):
        assert APPROVE_SELECTOR == bytes(Web3.keccak(text="approve(address,uint256)")[:4])

    def test_fields(self):
        data = encode_approve(UNISWAP_V3.router, USDC_2500)

        raw = bytes.fromhex(data[2:])
        assert raw[:4] == APPROVE_SELECTOR
        spender, amount = decode(["address", "uint256"], raw[4:])
        assert spender.lower() == UNISWAP_V3.router
        assert amount == USDC_2500

    def test_checksummed_spender(self):
        checksummed = Web3.to_checksum_address(UNISWAP_V3.router)
        assert encode_approve(checksummed, 1) == encode_approve(UNISWAP_V3.router, 1)

    def test_unlimited_allowance_fits(self):
        data = encode_approve(UNISWAP_V3.router, UINT256_MAX)
        assert data.endswith("f" * 64)


class TestApprovalAmount:
    """Tests for approval_amount()."""

    def test_exact_by_default(self):
        assert approval_amount(USDC_2500) == USDC_2500

    def test_max(self):
        assert approval_amount(1, ApprovalMode.MAX) == UINT256_MAX

    @pytest.mark.parametrize("amount", [0, -1])
    def test_rejects_non_positive(self, amount):
        with pytest.raises(ValueError, match="positive"):
            approval_amount(amount)
