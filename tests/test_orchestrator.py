"""Tests for swap quote orchestration."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from swapquote.engine.base import QuoteEngineError, QuoteEngineRevertError, SwapQuoteEngine
from swapquote.errors import InternalServerError, RevertAPIError, ValidationError, ValidationErrorCodes
from swapquote.tokens import ETH_TOKEN_ADDRESS
from swapquote.web.contracts.requests import RfqtRequestOptions
from swapquote.web.contracts.swap import MarketDepthResponse, TokenPriceRecord
from swapquote.web.services.orchestrator import QuoteOrchestrator, get_market_side

from factories import DAI, SELL_AMOUNT, WETH, make_quote, make_request

TAKER = "0x70a9f34f9b34c64957b9c401a97bfed35b95049e"


@pytest.fixture
def engine():
    mock = AsyncMock(spec=SwapQuoteEngine)
    mock.calculate_swap_quote.return_value = make_quote()
    mock.get_swap_quote_for_wrap.return_value = make_quote(quote_report=None)
    mock.get_swap_quote_for_unwrap.return_value = make_quote(quote_report=None)
    return mock


@pytest.fixture
def report_logger():
    return MagicMock()


@pytest.fixture
def orchestrator(engine, report_logger):
    return QuoteOrchestrator(engine=engine, chain_id=1, quote_report_logger=report_logger)


class TestDispatch:
    """Exactly one engine path per request."""

    @pytest.mark.asyncio
    async def test_ordinary_swap(self, orchestrator, engine):
        await orchestrator.calculate_swap_quote(make_request())

        engine.calculate_swap_quote.assert_awaited_once()
        engine.get_swap_quote_for_wrap.assert_not_awaited()
        engine.get_swap_quote_for_unwrap.assert_not_awaited()

        params = engine.calculate_swap_quote.call_args.args[0]
        assert params.sell_token_address == DAI
        assert params.buy_token_address == WETH
        assert params.is_meta_transaction is False

    @pytest.mark.asyncio
    async def test_wrap(self, orchestrator, engine):
        await orchestrator.calculate_swap_quote(make_request(sell_token=ETH_TOKEN_ADDRESS, buy_token=WETH))

        engine.get_swap_quote_for_wrap.assert_awaited_once()
        engine.calculate_swap_quote.assert_not_awaited()

        params = engine.get_swap_quote_for_wrap.call_args.args[0]
        assert params.sell_token_address == params.buy_token_address == WETH
        assert params.is_eth_sell is True

    @pytest.mark.asyncio
    async def test_unwrap(self, orchestrator, engine):
        await orchestrator.calculate_swap_quote(make_request(sell_token=WETH, buy_token=ETH_TOKEN_ADDRESS))

        engine.get_swap_quote_for_unwrap.assert_awaited_once()
        engine.calculate_swap_quote.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_eth_leg_becomes_weth(self, orchestrator, engine):
        await orchestrator.calculate_swap_quote(make_request(sell_token=DAI, buy_token=ETH_TOKEN_ADDRESS))

        params = engine.calculate_swap_quote.call_args.args[0]
        assert params.buy_token_address == WETH
        assert params.is_eth_buy is True

    @pytest.mark.asyncio
    async def test_same_token_rejected(self, orchestrator, engine):
        with pytest.raises(ValidationError) as exc_info:
            await orchestrator.calculate_swap_quote(make_request(sell_token=DAI, buy_token=DAI))

        assert exc_info.value.field_names == ["buyToken", "sellToken"]
        assert exc_info.value.fields[0].code == ValidationErrorCodes.REQUIRED_FIELD
        engine.calculate_swap_quote.assert_not_awaited()


class TestErrorMapping:
    """Engine failures surface as API errors."""

    @pytest.mark.asyncio
    async def test_insufficient_liquidity_on_buy(self, orchestrator, engine):
        engine.calculate_swap_quote.side_effect = QuoteEngineError("INSUFFICIENT_ASSET_LIQUIDITY")
        request = make_request(sell_amount=None, buy_amount=Decimal("1000"))

        with pytest.raises(ValidationError) as exc_info:
            await orchestrator.calculate_swap_quote(request)

        assert exc_info.value.field_names == ["buyAmount"]
        assert exc_info.value.fields[0].reason == "INSUFFICIENT_ASSET_LIQUIDITY"

    @pytest.mark.asyncio
    async def test_revert(self, orchestrator, engine):
        engine.calculate_swap_quote.side_effect = QuoteEngineRevertError("IncompleteFillError", {"a": 1})

        with pytest.raises(RevertAPIError) as exc_info:
            await orchestrator.calculate_swap_quote(make_request())

        assert isinstance(exc_info.value.__cause__, QuoteEngineRevertError)

    @pytest.mark.asyncio
    async def test_unknown_failure(self, orchestrator, engine):
        engine.calculate_swap_quote.side_effect = RuntimeError("node unreachable")

        with pytest.raises(InternalServerError) as exc_info:
            await orchestrator.calculate_swap_quote(make_request())

        assert exc_info.value.reason == "node unreachable"

    @pytest.mark.asyncio
    async def test_api_error_passes_through(self, orchestrator, engine):
        original = ValidationError.single("gasPrice", ValidationErrorCodes.VALUE_OUT_OF_RANGE, "too low")
        engine.calculate_swap_quote.side_effect = original

        with pytest.raises(ValidationError) as exc_info:
            await orchestrator.calculate_swap_quote(make_request())

        assert exc_info.value is original


class TestQuoteEndpoint:
    """Shaping of firm quotes."""

    @pytest.mark.asyncio
    async def test_internal_fields_stripped(self, orchestrator):
        response = await orchestrator.get_swap_quote(make_request())
        body = response.model_dump(by_alias=True)

        assert "quoteReport" not in body
        assert "decodedUniqueId" not in body
        assert body["guaranteedPrice"] == Decimal("0.0002475")
        assert response.price_comparisons is None

    @pytest.mark.asyncio
    async def test_price_comparisons(self, orchestrator):
        response = await orchestrator.get_swap_quote(make_request(include_price_comparisons=True))

        names = [c.name for c in response.price_comparisons]
        assert names == ["0x", "Uniswap_V2"]

    @pytest.mark.asyncio
    async def test_quote_report_logged_with_intent(self, orchestrator, report_logger):
        request = make_request(
            taker_address=TAKER,
            api_key="key",
            rfqt=RfqtRequestOptions(intent_on_filling=True, is_indicative=False),
        )

        await orchestrator.get_swap_quote(request)

        report_logger.log_quote_report.assert_called_once()
        kwargs = report_logger.log_quote_report.call_args.kwargs
        assert kwargs["submission_by"] == "taker"
        assert kwargs["decoded_unique_id"] == "a1b2c3d4e5-1600000000"
        assert kwargs["sell_amount"] == SELL_AMOUNT

    @pytest.mark.asyncio
    async def test_quote_report_not_logged_without_intent(self, orchestrator, report_logger):
        request = make_request(
            taker_address=TAKER,
            api_key="key",
            rfqt=RfqtRequestOptions(intent_on_filling=False, is_indicative=False),
        )

        await orchestrator.get_swap_quote(request)

        report_logger.log_quote_report.assert_not_called()


class TestPriceEndpoint:
    """Shaping of indicative prices."""

    @pytest.mark.asyncio
    async def test_validation_skipped(self, orchestrator, engine):
        await orchestrator.get_swap_price(make_request(endpoint="price"))

        params = engine.calculate_swap_quote.call_args.args[0]
        assert params.skip_validation is True

    @pytest.mark.asyncio
    async def test_price_subset(self, orchestrator):
        response = await orchestrator.get_swap_price(make_request(endpoint="price"))
        body = response.model_dump(by_alias=True)

        assert body["price"] == Decimal("0.00025")
        assert "guaranteedPrice" not in body
        assert "data" not in body
        assert "to" not in body
        assert "orders" not in body


class TestMarketData:
    @pytest.mark.asyncio
    async def test_token_prices_default_to_weth(self, orchestrator, engine):
        engine.get_token_prices.return_value = [TokenPriceRecord(symbol="DAI", price=Decimal("3846"))]

        response = await orchestrator.get_token_prices(None)

        base_asset, unit_amount = engine.get_token_prices.call_args.args
        assert base_asset.symbol == "WETH"
        assert unit_amount == Decimal("1")
        assert response.records[0].symbol == "DAI"

    @pytest.mark.asyncio
    async def test_token_prices_unknown_token(self, orchestrator):
        with pytest.raises(ValidationError) as exc_info:
            await orchestrator.get_token_prices("NOPE")
        assert exc_info.value.field_names == ["sellToken"]

    @pytest.mark.asyncio
    async def test_market_depth_eth_is_weth(self, orchestrator, engine):
        engine.calculate_market_depth.return_value = MarketDepthResponse(
            buy_token_address=DAI, sell_token_address=WETH
        )

        await orchestrator.get_market_depth({"buyToken": "DAI", "sellToken": "ETH", "sellAmount": "100"})

        params = engine.calculate_market_depth.call_args.args[0]
        assert params.sell_token == WETH
        assert params.num_samples == 50
        assert params.sample_distribution_base == 1.05

    @pytest.mark.asyncio
    async def test_market_depth_same_pair(self, orchestrator):
        with pytest.raises(ValidationError) as exc_info:
            await orchestrator.get_market_depth({"buyToken": "WETH", "sellToken": "ETH", "sellAmount": "1"})

        item = exc_info.value.fields[0]
        assert item.field == "buyToken"
        assert item.code == ValidationErrorCodes.INVALID_ADDRESS

    @pytest.mark.asyncio
    async def test_market_depth_samples_capped_by_config(self, engine):
        orchestrator = QuoteOrchestrator(engine=engine, chain_id=1, market_depth_max_samples=10)

        with pytest.raises(ValidationError) as exc_info:
            await orchestrator.get_market_depth(
                {"buyToken": "DAI", "sellToken": "WETH", "sellAmount": "100", "numSamples": "11"}
            )

        assert exc_info.value.field_names == ["numSamples"]
        engine.calculate_market_depth.assert_not_awaited()

    def test_list_tokens(self, orchestrator):
        symbols = [record.symbol for record in orchestrator.list_tokens().records]
        assert "WETH" in symbols
        assert "DAI" in symbols


class TestMarketSide:
    def test_sell(self):
        assert get_market_side(make_request()).value == "Sell"

    def test_buy(self):
        assert get_market_side(make_request(sell_amount=None, buy_amount=Decimal("1"))).value == "Buy"

    def test_neither(self):
        with pytest.raises(ValidationError):
            get_market_side(make_request(sell_amount=None))
