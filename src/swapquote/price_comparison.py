"""Price comparisons against individual reference sources.

Uses the quote's provenance report to show what the same trade would have
returned had it been routed entirely through one source.
"""

import logging
from decimal import Decimal
from typing import Optional

from swapquote.engine.base import MarketOperation
from swapquote.sources import LiquiditySource
from swapquote.tokens import get_token_metadata_if_exists
from swapquote.web.contracts.swap import PriceComparison, QuoteReportEntry, SwapQuote

logger = logging.getLogger(__name__)

# Internal routing constructs, not comparable venues
EXCLUDED_COMPARISON_SOURCES = frozenset(
    {LiquiditySource.MULTI_HOP.value, LiquiditySource.MULTI_BRIDGE.value}
)

NATIVE_EXTERNAL_NAME = "0x"


def _to_unit_amount(amount: Decimal, decimals: int) -> Decimal:
    return amount / (Decimal(10) ** decimals)


def get_price_comparison_from_quote(
    chain_id: int, side: MarketOperation, quote: SwapQuote
) -> Optional[list[PriceComparison]]:
    """Compute price comparisons, or None if they cannot be computed.

    Errors are logged and swallowed so a comparison failure never fails the quote.
    """
    try:
        return _get_price_comparison_or_raise(chain_id, side, quote)
    except (ArithmeticError, ValueError) as e:
        logger.error(f"Error calculating price comparisons, skipping [{e}]")
        return None


def _get_price_comparison_or_raise(
    chain_id: int, side: MarketOperation, quote: SwapQuote
) -> Optional[list[PriceComparison]]:
    if quote.quote_report is None:
        return None

    buy_token = get_token_metadata_if_exists(quote.buy_token_address, chain_id)
    sell_token = get_token_metadata_if_exists(quote.sell_token_address, chain_id)
    if buy_token is None or sell_token is None or not quote.buy_amount or not quote.sell_amount:
        logger.warning("Missing data to generate price comparisons")
        return None

    is_selling = side == MarketOperation.SELL

    # Only samples that fill the whole requested amount are comparable
    full_trade_sources = [
        entry
        for entry in quote.quote_report.sources_considered
        if (
            entry.taker_amount == quote.sell_amount and entry.maker_amount > 0
            if is_selling
            else entry.maker_amount == quote.buy_amount and entry.taker_amount > 0
        )
        and entry.liquidity_source not in EXCLUDED_COMPARISON_SOURCES
    ]

    # Best sample per source: most received when selling, least paid when buying
    best_by_source: dict[str, QuoteReportEntry] = {}
    for entry in full_trade_sources:
        current = best_by_source.get(entry.liquidity_source)
        if current is None:
            best_by_source[entry.liquidity_source] = entry
        elif is_selling and entry.maker_amount > current.maker_amount:
            best_by_source[entry.liquidity_source] = entry
        elif not is_selling and entry.taker_amount < current.taker_amount:
            best_by_source[entry.liquidity_source] = entry

    quote_token_to_eth_rate = quote.buy_token_to_eth_rate if is_selling else quote.sell_token_to_eth_rate
    quote_token_decimals = buy_token.decimals if is_selling else sell_token.decimals

    comparisons = []
    for entry in best_by_source.values():
        unit_maker_amount = _to_unit_amount(entry.maker_amount, buy_token.decimals)
        unit_taker_amount = _to_unit_amount(entry.taker_amount, sell_token.decimals)
        if is_selling:
            price = unit_maker_amount / unit_taker_amount
            shortfall = quote.buy_amount - entry.maker_amount
        else:
            price = unit_taker_amount / unit_maker_amount
            shortfall = entry.taker_amount - quote.sell_amount

        source_gas_cost_wei = entry.gas * quote.gas_price
        # Rates are token units per ETH; an unknown (zero) rate contributes nothing
        savings_in_eth = Decimal("0")
        if quote_token_to_eth_rate > 0:
            savings_in_eth = _to_unit_amount(shortfall, quote_token_decimals) / quote_token_to_eth_rate
        savings_in_eth += _to_unit_amount(source_gas_cost_wei - quote.gas * quote.gas_price, 18)

        comparisons.append(
            PriceComparison(
                name=entry.liquidity_source,
                price=price.quantize(Decimal(10) ** -buy_token.decimals),
                gas=entry.gas,
                savings_in_eth=max(savings_in_eth, Decimal("0")),
                buy_amount=entry.maker_amount,
                sell_amount=entry.taker_amount,
            )
        )

    comparisons.sort(key=lambda c: c.name)
    return comparisons


def rename_native(comparison: PriceComparison) -> PriceComparison:
    """Show the reserved ``Native`` source under its public name."""
    if comparison.name == LiquiditySource.NATIVE.value:
        return comparison.model_copy(update={"name": NATIVE_EXTERNAL_NAME})
    return comparison
