"""Swap quote orchestration.

Sends a canonical request down exactly one engine path (wrap, unwrap or an
ordinary swap), then shapes the result for the ``quote`` or ``price``
endpoint. Nothing here computes prices.
"""

import logging
import math
from decimal import Decimal
from typing import Mapping, Optional

from swapquote.engine.base import (
    CalculateSwapQuoteParams,
    MarketDepthParams,
    MarketOperation,
    SwapQuoteEngine,
)
from swapquote.errors import (
    ValidationError,
    ValidationErrorCodes,
    ValidationErrorItem,
)
from swapquote.price_comparison import get_price_comparison_from_quote, rename_native
from swapquote.quote_report import QuoteReportLogger
from swapquote.sources import parse_source_list
from swapquote.tokens import (
    WETH_SYMBOL,
    find_token_address_or_throw_api_error,
    get_token_metadata_if_exists,
    is_eth_symbol_or_address,
    list_tokens,
)
from swapquote.web.contracts.requests import CanonicalSwapRequest
from swapquote.web.contracts.swap import (
    INTERNAL_QUOTE_FIELDS,
    PRICE_RESPONSE_FIELDS,
    MarketDepthResponse,
    PriceComparison,
    SwapPriceResponse,
    SwapQuote,
    SwapQuoteResponse,
    TokenInfo,
    TokenListResponse,
    TokenPriceResponse,
)
from swapquote.web.services.error_classifier import ErrorClassifier
from swapquote.wrap import PairKind, classify_token_pair

logger = logging.getLogger(__name__)

# Recorded with quote reports for quotes the taker intends to fill
TAKER_SUBMISSION = "taker"


def get_market_side(request: CanonicalSwapRequest) -> MarketOperation:
    """Sell side if ``sellAmount`` was given, buy side if ``buyAmount`` was.

    Raises:
        ValidationError: unless exactly one amount is set
    """
    if (request.sell_amount is None) == (request.buy_amount is None):
        raise ValidationError(
            [
                ValidationErrorItem(
                    field=name,
                    code=ValidationErrorCodes.REQUIRED_FIELD,
                    reason="Exactly one of sellAmount or buyAmount must be provided",
                )
                for name in ("sellAmount", "buyAmount")
            ]
        )
    return MarketOperation.SELL if request.sell_amount is not None else MarketOperation.BUY


class QuoteOrchestrator:
    """Routes canonical swap requests to the quoting engine."""

    def __init__(
        self,
        engine: SwapQuoteEngine,
        chain_id: int,
        classifier: Optional[ErrorClassifier] = None,
        quote_report_logger: Optional[QuoteReportLogger] = None,
        market_depth_max_samples: int = 50,
        market_depth_default_distribution: float = 1.05,
    ):
        self.engine = engine
        self.chain_id = chain_id
        self.classifier = classifier or ErrorClassifier()
        self.quote_report_logger = quote_report_logger or QuoteReportLogger()
        self.market_depth_max_samples = market_depth_max_samples
        self.market_depth_default_distribution = market_depth_default_distribution

    async def calculate_swap_quote(self, request: CanonicalSwapRequest) -> SwapQuote:
        """Quote a canonical request on the engine path that matches its token pair.

        Raises:
            ValidationError: for equal tokens on an ordinary swap, or a
                classified engine failure
            RevertAPIError: if the engine's simulation reverted
            InternalServerError: for anything else the engine raised
        """
        pair = classify_token_pair(request.sell_token, request.buy_token, self.chain_id)

        if pair.tokens_must_differ and pair.sell_token_address == pair.buy_token_address:
            raise ValidationError(
                [
                    ValidationErrorItem(
                        field=name,
                        code=ValidationErrorCodes.REQUIRED_FIELD,
                        reason="buyToken and sellToken must be different",
                    )
                    for name in ("buyToken", "sellToken")
                ]
            )

        params = CalculateSwapQuoteParams(
            buy_token_address=pair.buy_token_address,
            sell_token_address=pair.sell_token_address,
            buy_amount=request.buy_amount,
            sell_amount=request.sell_amount,
            from_address=request.taker_address,
            is_eth_sell=pair.is_eth_sell,
            is_eth_buy=pair.is_eth_buy,
            slippage_percentage=request.slippage_percentage,
            gas_price=request.gas_price,
            excluded_sources=request.excluded_sources,
            included_sources=request.included_sources,
            affiliate_address=request.affiliate_address,
            api_key=request.api_key,
            rfqt=request.rfqt,
            skip_validation=request.skip_validation,
            affiliate_fee=request.affiliate_fee,
            include_price_comparisons=request.include_price_comparisons,
            should_sell_entire_balance=request.should_sell_entire_balance,
            is_meta_transaction=False,
        )

        try:
            if pair.kind == PairKind.UNWRAP:
                return await self.engine.get_swap_quote_for_unwrap(params)
            if pair.kind == PairKind.WRAP:
                return await self.engine.get_swap_quote_for_wrap(params)
            return await self.engine.calculate_swap_quote(params)
        except Exception as e:
            error = self.classifier.classify(e, request)
            if error is e:
                raise
            raise error from e

    async def get_swap_quote(self, request: CanonicalSwapRequest) -> SwapQuoteResponse:
        """Firm quote for the ``quote`` endpoint."""
        quote = await self.calculate_swap_quote(request)

        if request.rfqt is not None:
            logger.info(
                "firmQuoteServed %s",
                {
                    "taker": request.taker_address,
                    "apiKey": request.api_key,
                    "buyToken": request.buy_token,
                    "sellToken": request.sell_token,
                    "buyAmount": _format_amount(request.buy_amount),
                    "sellAmount": _format_amount(request.sell_amount),
                    "makers": [order.maker_address for order in quote.orders],
                },
            )
            if quote.quote_report is not None and request.rfqt.intent_on_filling:
                self.quote_report_logger.log_quote_report(
                    quote_report=quote.quote_report,
                    submission_by=TAKER_SUBMISSION,
                    decoded_unique_id=quote.decoded_unique_id,
                    buy_token_address=quote.buy_token_address,
                    sell_token_address=quote.sell_token_address,
                    buy_amount=request.buy_amount,
                    sell_amount=request.sell_amount,
                )

        response = SwapQuoteResponse(**quote.model_dump(exclude=INTERNAL_QUOTE_FIELDS))
        if request.include_price_comparisons and quote.quote_report is not None:
            response.price_comparisons = self._price_comparisons(request, quote)
        return response

    async def get_swap_price(self, request: CanonicalSwapRequest) -> SwapPriceResponse:
        """Indicative price for the ``price`` endpoint; on-chain validation is always skipped."""
        quote = await self.calculate_swap_quote(request.with_skip_validation())

        logger.info(
            "indicativeQuoteServed %s",
            {
                "taker": request.taker_address,
                "apiKey": request.api_key,
                "buyToken": request.buy_token,
                "sellToken": request.sell_token,
                "buyAmount": _format_amount(request.buy_amount),
                "sellAmount": _format_amount(request.sell_amount),
                "makers": [order.maker_address for order in quote.orders],
            },
        )

        response = SwapPriceResponse(**quote.model_dump(include=PRICE_RESPONSE_FIELDS))
        if request.include_price_comparisons and quote.quote_report is not None:
            response.price_comparisons = self._price_comparisons(request, quote)
        return response

    def _price_comparisons(
        self, request: CanonicalSwapRequest, quote: SwapQuote
    ) -> Optional[list[PriceComparison]]:
        side = get_market_side(request)
        comparisons = get_price_comparison_from_quote(self.chain_id, side, quote)
        if comparisons is None:
            return None
        return [rename_native(comparison) for comparison in comparisons]

    def list_tokens(self) -> TokenListResponse:
        """Tokens tradable on the configured chain."""
        return TokenListResponse(
            records=[
                TokenInfo(
                    symbol=metadata.symbol,
                    address=address,
                    name=metadata.name,
                    decimals=metadata.decimals,
                )
                for metadata, address in list_tokens(self.chain_id)
            ]
        )

    async def get_token_prices(self, sell_token: Optional[str]) -> TokenPriceResponse:
        """Price one unit of ``sell_token`` (default WETH) against every known token."""
        symbol_or_address = sell_token or WETH_SYMBOL
        base_asset = get_token_metadata_if_exists(symbol_or_address, self.chain_id)
        if base_asset is None:
            raise ValidationError.single(
                "sellToken",
                ValidationErrorCodes.VALUE_OUT_OF_RANGE,
                f"Could not find token {symbol_or_address}",
            )
        records = await self.engine.get_token_prices(base_asset, Decimal("1"))
        return TokenPriceResponse(records=records)

    async def get_market_depth(self, query: Mapping[str, str]) -> MarketDepthResponse:
        """Sampled market depth for a token pair.

        Native-asset legs are quoted as WETH.
        """
        buy_token = query.get("buyToken") or ""
        sell_token = query.get("sellToken") or ""
        buy_token = WETH_SYMBOL if is_eth_symbol_or_address(buy_token) else buy_token
        sell_token = WETH_SYMBOL if is_eth_symbol_or_address(sell_token) else sell_token

        if buy_token == sell_token:
            raise ValidationError.single(
                "buyToken",
                ValidationErrorCodes.INVALID_ADDRESS,
                f"Invalid pair {sell_token}/{buy_token}",
            )

        params = MarketDepthParams(
            buy_token=find_token_address_or_throw_api_error(buy_token, "buyToken", self.chain_id),
            sell_token=find_token_address_or_throw_api_error(sell_token, "sellToken", self.chain_id),
            sell_amount=_parse_depth_amount(query.get("sellAmount")),
            num_samples=self._parse_num_samples(query.get("numSamples")),
            sample_distribution_base=self._parse_distribution_base(
                query.get("sampleDistributionBase")
            ),
            excluded_sources=parse_source_list(query.get("excludedSources")),
            included_sources=parse_source_list(query.get("includedSources")),
        )
        try:
            return await self.engine.calculate_market_depth(params)
        except Exception as e:
            error = self.classifier.classify(e)
            if error is e:
                raise
            raise error from e

    def _parse_num_samples(self, raw: Optional[str]) -> int:
        num_samples = _parse_optional(raw, int, "numSamples", self.market_depth_max_samples)
        if not 1 <= num_samples <= self.market_depth_max_samples:
            raise ValidationError.single(
                "numSamples",
                ValidationErrorCodes.VALUE_OUT_OF_RANGE,
                f"numSamples must be between 1 and {self.market_depth_max_samples}",
            )
        return num_samples

    def _parse_distribution_base(self, raw: Optional[str]) -> float:
        base = _parse_optional(
            raw, float, "sampleDistributionBase", self.market_depth_default_distribution
        )
        if not math.isfinite(base) or base <= 0:
            raise ValidationError.single(
                "sampleDistributionBase",
                ValidationErrorCodes.VALUE_OUT_OF_RANGE,
                "sampleDistributionBase must be a positive number",
            )
        return base


def _format_amount(amount: Optional[Decimal]) -> Optional[str]:
    return str(amount) if amount is not None else None


def _parse_depth_amount(raw: Optional[str]) -> Decimal:
    amount = _parse_optional(raw, Decimal, "sellAmount", None)
    if amount is None or not amount.is_finite() or amount <= 0:
        raise ValidationError.single(
            "sellAmount", ValidationErrorCodes.INCORRECT_FORMAT, "sellAmount must be a positive number"
        )
    return amount


def _parse_optional(raw: Optional[str], parse, field_name: str, default):
    if raw is None or raw == "":
        return default
    try:
        return parse(raw)
    except (ValueError, ArithmeticError) as e:
        raise ValidationError.single(
            field_name, ValidationErrorCodes.INCORRECT_FORMAT, f"Invalid number: {raw}"
        ) from e
