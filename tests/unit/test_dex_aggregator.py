"""Tests for the DexAggregator facade and the module-level entry points."""

import httpx
import pytest
from eth_abi import decode
from web3 import Web3

from aggregator import dex_aggregator
from aggregator.config import UNISWAP_V2, UNISWAP_V3
from aggregator.constants import APPROVE_GAS_ESTIMATE
from aggregator.dex_aggregator import DexAggregator, SwapPlan, _parse_amount
from aggregator.encoding import APPROVE_SELECTOR
from aggregator.errors import RpcError, UnsupportedDexError
from aggregator.models.route import ApprovalMode
from aggregator.models.types import UINT256_MAX
from tests.helpers import (
    ONE_WETH,
    POOL_500,
    USDC,
    USDC_2500,
    WALLET,
    WETH,
    make_config,
    make_pool,
    make_quote,
)
from tests.helpers.fakes import FailingQuoteSource, FakeChainReader, StaticQuoteSource


def api_handler(request: httpx.Request) -> httpx.Response:
    """Serve canned 1inch and 0x quotes."""
    if request.url.host == "1inch.test":
        return httpx.Response(200, json={"toAmount": "2510000000", "gas": 190000})
    if request.url.host == "0x.test":
        return httpx.Response(503)
    return httpx.Response(404)


class TestParseAmount:
    """Tests for _parse_amount()."""

    def test_accepts_int_and_string(self):
        assert _parse_amount(ONE_WETH) == ONE_WETH
        assert _parse_amount(str(ONE_WETH)) == ONE_WETH

    @pytest.mark.parametrize("amount", [0, -5, "0", "abc", "1.5", None, True])
    def test_rejects_invalid(self, amount):
        with pytest.raises(ValueError):
            _parse_amount(amount)


class TestOperations:
    """Tests for the four operations on an aggregator with fake sources."""

    @pytest.mark.asyncio
    async def test_discover_pools_directly(self, populated_reader, config):
        async with DexAggregator(config, reader=populated_reader, sources=[]) as aggregator:
            pools = await aggregator.discover_pools_directly(WETH, USDC)

        assert len(pools) == 4
        assert pools[0].pool_address == POOL_500

    @pytest.mark.asyncio
    async def test_get_professional_quotes_parses_amount(self, config):
        source = StaticQuoteSource("static", [make_quote()])
        async with DexAggregator(config, reader=FakeChainReader(), sources=[source]) as aggregator:
            quotes = await aggregator.get_professional_quotes(WETH, USDC, "1000")

        assert len(quotes) == 1
        assert source.calls == [(WETH, USDC, 1000)]

    @pytest.mark.asyncio
    async def test_get_professional_quotes_rejects_zero_amount(self, config):
        async with DexAggregator(config, reader=FakeChainReader(), sources=[]) as aggregator:
            with pytest.raises(ValueError, match="positive"):
                await aggregator.get_professional_quotes(WETH, USDC, 0)

    @pytest.mark.asyncio
    async def test_all_sources_failing_gives_no_quotes(self, config):
        sources = [FailingQuoteSource(name) for name in ("onchain_v3", "1inch", "0x")]
        async with DexAggregator(config, reader=FakeChainReader(), sources=sources) as aggregator:
            assert await aggregator.get_professional_quotes(WETH, USDC, ONE_WETH) == []

    @pytest.mark.asyncio
    async def test_select_best_route_uses_config_thresholds(self):
        config = make_config(min_liquidity=10**20)
        quotes = [make_quote(amount_out=5, fee=500), make_quote(amount_out=9, fee=3000)]
        async with DexAggregator(config, reader=FakeChainReader(), sources=[]) as aggregator:
            route = await aggregator.select_best_route(
                quotes, [make_pool(fee=500), make_pool(fee=3000)]
            )

        # Nothing passes the raised floor, so the first quote is the fallback
        assert route.amount_out == 5

    @pytest.mark.asyncio
    async def test_select_best_route_without_quotes(self, config):
        async with DexAggregator(config, reader=FakeChainReader(), sources=[]) as aggregator:
            assert await aggregator.select_best_route([], []) is None

    @pytest.mark.asyncio
    async def test_execute_professional_swap(self, config):
        async with DexAggregator(config, reader=FakeChainReader(), sources=[]) as aggregator:
            tx = await aggregator.execute_professional_swap(make_quote(), WALLET, 50)

        assert tx.to == UNISWAP_V3.router
        assert tx.data.startswith("0x5ae401dc")

    @pytest.mark.asyncio
    async def test_execute_professional_swap_unsupported_dex(self, config):
        async with DexAggregator(config, reader=FakeChainReader(), sources=[]) as aggregator:
            with pytest.raises(UnsupportedDexError):
                await aggregator.execute_professional_swap(make_quote(dex_id="1inch"), WALLET)


class TestFindBestSwap:
    """End-to-end pipeline runs with fake chain and HTTP backends."""

    @pytest.mark.asyncio
    async def test_default_sources_pipeline(self, populated_reader, config):
        async with httpx.AsyncClient(transport=httpx.MockTransport(api_handler)) as client:
            aggregator = DexAggregator(config, reader=populated_reader, http_client=client)
            plan = await aggregator.find_best_swap(WETH, USDC, ONE_WETH)

        assert isinstance(plan, SwapPlan)
        # 1inch quotes best but never matches a pool; the 0.05% V3 pool is the
        # best quote backed by liquidity
        assert plan.route.dex_id == "uniswap_v3"
        assert plan.route.fee == 500
        assert plan.route.pool_address == POOL_500
        assert {quote.dex_id for quote in plan.quotes} == {
            "uniswap_v3",
            "uniswap_v2",
            "baseswap",
            "1inch",
        }
        assert len(plan.pools) == 4

    @pytest.mark.asyncio
    async def test_quotes_in_plan_are_sorted(self, populated_reader, config):
        async with httpx.AsyncClient(transport=httpx.MockTransport(api_handler)) as client:
            aggregator = DexAggregator(config, reader=populated_reader, http_client=client)
            plan = await aggregator.find_best_swap(WETH, USDC, ONE_WETH)

        amounts = [quote.amount_out for quote in plan.quotes]
        assert amounts == sorted(amounts, reverse=True)
        assert plan.quotes[0].dex_id == "1inch"

    @pytest.mark.asyncio
    async def test_no_quotes_returns_none(self, config):
        sources = [FailingQuoteSource("1inch")]
        async with DexAggregator(config, reader=FakeChainReader(), sources=sources) as aggregator:
            assert await aggregator.find_best_swap(WETH, USDC, ONE_WETH) is None

    @pytest.mark.asyncio
    async def test_off_chain_only_falls_back_to_best_quote(self, config, oneinch_quote):
        sources = [StaticQuoteSource("1inch", [oneinch_quote])]
        async with DexAggregator(config, reader=FakeChainReader(), sources=sources) as aggregator:
            plan = await aggregator.find_best_swap(WETH, USDC, ONE_WETH)

        assert plan.route == oneinch_quote
        assert plan.pools == []


class TestClientOwnership:
    """The aggregator closes only the HTTP client it created."""

    @pytest.mark.asyncio
    async def test_closes_own_client(self, config):
        aggregator = DexAggregator(config, reader=FakeChainReader(), sources=[])
        await aggregator.aclose()
        assert aggregator.http_client.is_closed

    @pytest.mark.asyncio
    async def test_leaves_shared_client_open(self, config):
        async with httpx.AsyncClient() as client:
            async with DexAggregator(config, reader=FakeChainReader(), http_client=client):
                pass
            assert not client.is_closed


class TestModuleLevelFunctions:
    """The module-level functions delegate to the default aggregator."""

    @pytest.fixture
    def default_aggregator(self, monkeypatch, populated_reader, config, oneinch_quote):
        aggregator = DexAggregator(
            config,
            reader=populated_reader,
            sources=[StaticQuoteSource("1inch", [oneinch_quote])],
        )
        monkeypatch.setattr(dex_aggregator, "_default_aggregator", aggregator)
        return aggregator

    def test_get_default_aggregator_returns_singleton(self, default_aggregator):
        assert dex_aggregator.get_default_aggregator() is default_aggregator

    def test_get_default_aggregator_builds_from_env(self, monkeypatch):
        monkeypatch.setattr(dex_aggregator, "_default_aggregator", None)
        monkeypatch.setenv("AGGREGATOR_RPC_URL", "http://localhost:8545")
        monkeypatch.setenv("AGGREGATOR_CHAIN_ID", "84532")

        aggregator = dex_aggregator.get_default_aggregator()

        assert aggregator.config.rpc_url == "http://localhost:8545"
        assert aggregator.config.chain_id == 84532
        assert dex_aggregator.get_default_aggregator() is aggregator

    @pytest.mark.asyncio
    async def test_full_flow(self, default_aggregator, oneinch_quote):
        pools = await dex_aggregator.discover_pools_directly(WETH, USDC)
        quotes = await dex_aggregator.get_professional_quotes(WETH, USDC, ONE_WETH)
        route = await dex_aggregator.select_best_route(quotes, pools)

        assert route == oneinch_quote
        with pytest.raises(UnsupportedDexError):
            await dex_aggregator.execute_professional_swap(route, WALLET)

    @pytest.mark.asyncio
    async def test_check_approval(self, default_aggregator, populated_reader):
        check = await dex_aggregator.check_approval(USDC, WALLET, "uniswap_v3", 1000)

        assert check.needs_approval
        assert ("get_allowance", USDC, WALLET, UNISWAP_V3.router) in populated_reader.calls


def decode_approve(data: str) -> tuple[str, int]:
    raw = bytes.fromhex(data[2:])
    assert raw[:4] == APPROVE_SELECTOR
    spender, amount = decode(["address", "uint256"], raw[4:])
    return spender.lower(), amount


class TestCheckApproval:
    """Tests for DexAggregator.check_approval()."""

    @pytest.mark.asyncio
    async def test_sufficient_allowance_needs_no_transaction(self, reader, config):
        reader.allowances[(USDC, WALLET, UNISWAP_V3.router)] = USDC_2500
        reader.balances[(USDC, WALLET)] = USDC_2500
        async with DexAggregator(config, reader=reader, sources=[]) as aggregator:
            check = await aggregator.check_approval(USDC, WALLET, "uniswap_v3", USDC_2500)

        assert not check.needs_approval
        assert check.transaction is None
        assert check.has_balance
        assert (check.allowance, check.spender) == (USDC_2500, UNISWAP_V3.router)

    @pytest.mark.asyncio
    async def test_low_allowance_builds_exact_approve(self, reader, config):
        reader.allowances[(USDC, WALLET, UNISWAP_V3.router)] = USDC_2500 - 1
        async with DexAggregator(config, reader=reader, sources=[]) as aggregator:
            check = await aggregator.check_approval(USDC, WALLET, "uniswap_v3", str(USDC_2500))

        tx = check.transaction
        assert check.needs_approval
        assert tx.to == USDC
        assert tx.value == 0
        assert tx.gas_estimate == APPROVE_GAS_ESTIMATE
        assert decode_approve(tx.data) == (UNISWAP_V3.router, USDC_2500)

    @pytest.mark.asyncio
    async def test_max_mode_approves_unlimited(self, reader, config):
        async with DexAggregator(config, reader=reader, sources=[]) as aggregator:
            check = await aggregator.check_approval(
                USDC, WALLET, "uniswap_v2", 1, mode=ApprovalMode.MAX
            )

        assert decode_approve(check.transaction.data) == (UNISWAP_V2.router, UINT256_MAX)

    @pytest.mark.asyncio
    async def test_checksummed_addresses_are_normalized(self, reader, config):
        reader.allowances[(USDC, WALLET, UNISWAP_V3.router)] = USDC_2500
        async with DexAggregator(config, reader=reader, sources=[]) as aggregator:
            check = await aggregator.check_approval(
                Web3.to_checksum_address(USDC),
                Web3.to_checksum_address(WALLET),
                "uniswap_v3",
                USDC_2500,
            )

        assert (check.token, check.owner) == (USDC, WALLET)
        assert not check.needs_approval

    @pytest.mark.asyncio
    async def test_short_balance_is_reported(self, reader, config):
        reader.balances[(USDC, WALLET)] = 10
        async with DexAggregator(config, reader=reader, sources=[]) as aggregator:
            check = await aggregator.check_approval(USDC, WALLET, "baseswap", 11)

        assert check.balance == 10
        assert not check.has_balance

    @pytest.mark.asyncio
    async def test_aggregator_dex_is_unsupported(self, reader, config):
        async with DexAggregator(config, reader=reader, sources=[]) as aggregator:
            with pytest.raises(UnsupportedDexError):
                await aggregator.check_approval(USDC, WALLET, "1inch", 1)
        assert reader.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "token, owner, amount",
        [(USDC, WALLET, 0), (USDC, WALLET, "abc"), ("0x1234", WALLET, 1), (USDC, "nope", 1)],
    )
    async def test_invalid_input_is_rejected(self, reader, config, token, owner, amount):
        async with DexAggregator(config, reader=reader, sources=[]) as aggregator:
            with pytest.raises(ValueError):
                await aggregator.check_approval(token, owner, "uniswap_v3", amount)

    @pytest.mark.asyncio
    async def test_read_failure_propagates(self, reader, config):
        reader.failing.add(USDC)
        async with DexAggregator(config, reader=reader, sources=[]) as aggregator:
            with pytest.raises(RpcError):
                await aggregator.check_approval(USDC, WALLET, "uniswap_v3", 1)
