"""Dry-run quoting engine with simulated liquidity.

Quotes are derived from a fixed ETH-denominated price table and a small set
of simulated liquidity sources, each with its own fee, depth and gas cost.
These are for local runs and tests only; they are not market data.
"""

import hashlib
import logging
import time
import uuid
from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_UP, Decimal
from typing import Optional

from swapquote.engine.base import (
    CalculateSwapQuoteParams,
    MarketDepthParams,
    QuoteEngineError,
    SwapQuoteEngine,
    SwapQuoterError,
)
from swapquote.sources import LiquiditySource
from swapquote.tokens import (
    NULL_ADDRESS,
    TokenMetadata,
    get_token_metadata_if_exists,
    get_wrapped_native_address,
    list_tokens,
)
from swapquote.web.contracts.swap import (
    MarketDepthResponse,
    MarketDepthSample,
    OrderInfo,
    QuoteReport,
    QuoteReportEntry,
    SourceProportion,
    SwapQuote,
    TokenPriceRecord,
)

logger = logging.getLogger(__name__)

EXCHANGE_PROXY_ADDRESS = "0xdef1c0ded9bec7f1a1670819833240f027b25eff"
SIMULATED_RFQ_MAKER = "0x56178a0d5f301baf6cf3e1cd53d9863437345bf9"

DEFAULT_GAS_PRICE = Decimal("50000000000")  # 50 gwei
PROTOCOL_FEE_MULTIPLIER = Decimal("70000")
WRAP_GAS = Decimal("60000")

WETH_DEPOSIT_SELECTOR = "0xd0e30db0"
WETH_WITHDRAW_SELECTOR = "0x2e1a7d4d"

# Simulated prices in ETH
SIMULATED_ETH_PRICES: dict[str, Decimal] = {
    "ETH": Decimal("1"),
    "WETH": Decimal("1"),
    "DAI": Decimal("0.00026"),
    "USDC": Decimal("0.00026"),
    "USDT": Decimal("0.00026"),
    "WBTC": Decimal("25.6"),
    "ZRX": Decimal("0.00016"),
    "MKR": Decimal("0.47"),
    "UNI": Decimal("0.0045"),
    "LINK": Decimal("0.0072"),
}


@dataclass(frozen=True)
class SimulatedSource:
    """A simulated liquidity source."""

    name: str
    fee_percent: Decimal
    depth_eth: Decimal  # Largest trade (in ETH value) the source can fill
    gas: Decimal
    maker_address: str


SIMULATED_SOURCES: list[SimulatedSource] = [
    SimulatedSource(
        name=LiquiditySource.UNISWAP_V2.value,
        fee_percent=Decimal("0.003"),
        depth_eth=Decimal("5000"),
        gas=Decimal("90000"),
        maker_address="0xdcd6011f4c6b80e470d9487f5871a0cba7c93f48",
    ),
    SimulatedSource(
        name=LiquiditySource.SUSHISWAP.value,
        fee_percent=Decimal("0.003"),
        depth_eth=Decimal("2000"),
        gas=Decimal("95000"),
        maker_address="0x47ed0262a0b688dcb836d254c6a2e96b6c48a9f5",
    ),
    SimulatedSource(
        name=LiquiditySource.BALANCER.value,
        fee_percent=Decimal("0.002"),
        depth_eth=Decimal("800"),
        gas=Decimal("120000"),
        maker_address="0xfe01821ca163844203220cd08e4f2b2fb43ae4e4",
    ),
    SimulatedSource(
        name=LiquiditySource.KYBER.value,
        fee_percent=Decimal("0.0025"),
        depth_eth=Decimal("1500"),
        gas=Decimal("250000"),
        maker_address="0x1c29670f7a77f1052d30813a0a4f632c78a02610",
    ),
    SimulatedSource(
        name=LiquiditySource.LIQUIDITY_PROVIDER.value,
        fee_percent=Decimal("0.001"),
        depth_eth=Decimal("3000"),
        gas=Decimal("100000"),
        maker_address="0x8c5a10f1e09c6fd2a4fbd6b5e0a4bea56d7dbee8",
    ),
    SimulatedSource(
        name=LiquiditySource.NATIVE.value,
        fee_percent=Decimal("0.0005"),
        depth_eth=Decimal("500"),
        gas=Decimal("150000"),
        maker_address=SIMULATED_RFQ_MAKER,
    ),
]


def _unit(amount: Decimal, decimals: int) -> Decimal:
    return amount / (Decimal(10) ** decimals)


def _base(amount: Decimal, decimals: int, rounding: str = ROUND_DOWN) -> Decimal:
    return (amount * (Decimal(10) ** decimals)).to_integral_value(rounding=rounding)


class DryRunQuoteEngine(SwapQuoteEngine):
    """
    Simulated quoting engine.

    Provides deterministic quotes with:
    - Per-source fees and depth
    - Quote reports for price comparisons
    - 1:1 wrap/unwrap quotes
    """

    def __init__(
        self,
        chain_id: int = 1,
        sources: Optional[list[SimulatedSource]] = None,
        prices: Optional[dict[str, Decimal]] = None,
    ):
        self.chain_id = chain_id
        self._sources = list(sources or SIMULATED_SOURCES)
        self._prices = dict(prices or SIMULATED_ETH_PRICES)

    def set_price(self, symbol: str, price_in_eth: Decimal) -> None:
        """Set simulated ETH price for a token."""
        self._prices[symbol.upper()] = price_in_eth

    def get_price(self, symbol: str) -> Optional[Decimal]:
        return self._prices.get(symbol.upper())

    async def calculate_swap_quote(self, params: CalculateSwapQuoteParams) -> SwapQuote:
        sell_token = self._token_or_raise(params.sell_token_address)
        buy_token = self._token_or_raise(params.buy_token_address)
        sources = self._active_sources(params)
        if not sources:
            raise QuoteEngineError(f"{SwapQuoterError.NO_OPTIMAL_PATH.value}: no sources left after filtering")

        is_selling = params.sell_amount is not None
        requested = params.sell_amount if is_selling else params.buy_amount

        considered: list[QuoteReportEntry] = []
        full_fills: list[tuple[SimulatedSource, QuoteReportEntry]] = []
        for source in sources:
            # Half-size sample is reported but never selected
            half_amount = (requested / 2).to_integral_value(rounding=ROUND_DOWN)
            half = self._fill(source, sell_token, buy_token, half_amount, is_selling)
            if half is not None:
                considered.append(half)
            fill = self._fill(source, sell_token, buy_token, requested, is_selling)
            if fill is not None:
                considered.append(fill)
                full_fills.append((source, fill))

        if not full_fills:
            raise QuoteEngineError(SwapQuoterError.INSUFFICIENT_ASSET_LIQUIDITY.value)

        if is_selling:
            source, best = max(full_fills, key=lambda pair: pair[1].maker_amount)
        else:
            source, best = min(full_fills, key=lambda pair: pair[1].taker_amount)

        logger.debug(
            f"Dry-run quote via {source.name}: {best.taker_amount} {sell_token.symbol} -> "
            f"{best.maker_amount} {buy_token.symbol}"
        )

        gas_price = params.gas_price or DEFAULT_GAS_PRICE
        uses_native = source.name == LiquiditySource.NATIVE.value
        protocol_fee = PROTOCOL_FEE_MULTIPLIER * gas_price if uses_native else Decimal("0")

        unit_sell = _unit(best.taker_amount, sell_token.decimals)
        unit_buy = _unit(best.maker_amount, buy_token.decimals)
        if is_selling:
            price = unit_buy / unit_sell
            guaranteed_price = price * (1 - params.slippage_percentage)
        else:
            price = unit_sell / unit_buy
            guaranteed_price = price * (1 + params.slippage_percentage)

        value = protocol_fee + (best.taker_amount if params.is_eth_sell else Decimal("0"))

        return SwapQuote(
            price=price.quantize(Decimal(10) ** -buy_token.decimals),
            guaranteed_price=guaranteed_price.quantize(Decimal(10) ** -buy_token.decimals),
            to=EXCHANGE_PROXY_ADDRESS,
            data=self._calldata(params, best),
            value=value,
            gas=source.gas,
            estimated_gas=source.gas,
            gas_price=gas_price,
            protocol_fee=protocol_fee,
            minimum_protocol_fee=protocol_fee,
            buy_token_address=params.buy_token_address,
            sell_token_address=params.sell_token_address,
            buy_amount=best.maker_amount,
            sell_amount=best.taker_amount,
            sources=[
                SourceProportion(name=s.name, proportion=Decimal("1") if s is source else Decimal("0"))
                for s in sources
            ],
            orders=[
                OrderInfo(
                    maker_address=source.maker_address,
                    source=source.name,
                    maker_amount=best.maker_amount,
                    taker_amount=best.taker_amount,
                )
            ],
            allowance_target=NULL_ADDRESS if params.is_eth_sell else EXCHANGE_PROXY_ADDRESS,
            sell_token_to_eth_rate=self._to_eth_rate(sell_token),
            buy_token_to_eth_rate=self._to_eth_rate(buy_token),
            quote_report=QuoteReport(sources_considered=considered, sources_delivered=[best]),
            decoded_unique_id=f"{uuid.uuid4().hex[:10]}-{int(time.time())}",
        )

    async def get_swap_quote_for_wrap(self, params: CalculateSwapQuoteParams) -> SwapQuote:
        return self._wrap_quote(params, WETH_DEPOSIT_SELECTOR, is_wrap=True)

    async def get_swap_quote_for_unwrap(self, params: CalculateSwapQuoteParams) -> SwapQuote:
        return self._wrap_quote(params, WETH_WITHDRAW_SELECTOR, is_wrap=False)

    async def get_token_prices(
        self, base_asset: TokenMetadata, unit_amount: Decimal
    ) -> list[TokenPriceRecord]:
        base_price = self._prices.get(base_asset.symbol)
        if base_price is None:
            raise QuoteEngineError(f"{SwapQuoterError.ASSET_UNAVAILABLE.value}: {base_asset.symbol}")

        records = []
        for metadata, _address in list_tokens(self.chain_id):
            token_price = self._prices.get(metadata.symbol)
            if metadata.symbol == base_asset.symbol or token_price is None:
                continue
            price = unit_amount * base_price / token_price
            records.append(
                TokenPriceRecord(
                    symbol=metadata.symbol,
                    price=price.quantize(Decimal(10) ** -metadata.decimals),
                )
            )
        return records

    async def calculate_market_depth(self, params: MarketDepthParams) -> MarketDepthResponse:
        sell_token = self._token_or_raise(params.sell_token)
        buy_token = self._token_or_raise(params.buy_token)
        sources = [
            s
            for s in self._sources
            if s.name != LiquiditySource.NATIVE.value
            and s.name not in params.excluded_sources
            and (not params.included_sources or s.name in params.included_sources)
        ]

        amounts = self._sample_amounts(params.sell_amount, params.num_samples, params.sample_distribution_base)
        asks = self._depth_side(sources, sell_token, buy_token, amounts)

        # Bids sample the reverse direction over an equivalent range
        sell_price = self._prices[sell_token.symbol]
        buy_price = self._prices[buy_token.symbol]
        reverse_max = _base(_unit(params.sell_amount, sell_token.decimals) * sell_price / buy_price, buy_token.decimals)
        reverse_amounts = self._sample_amounts(
            reverse_max, params.num_samples, params.sample_distribution_base
        )
        bids = self._depth_side(sources, buy_token, sell_token, reverse_amounts)

        return MarketDepthResponse(
            asks=asks,
            bids=bids,
            buy_token_address=params.buy_token,
            sell_token_address=params.sell_token,
        )

    def _token_or_raise(self, address: str) -> TokenMetadata:
        metadata = get_token_metadata_if_exists(address, self.chain_id)
        if metadata is None or metadata.symbol not in self._prices:
            raise QuoteEngineError(f"{SwapQuoterError.ASSET_UNAVAILABLE.value}: {address}")
        return metadata

    def _active_sources(self, params: CalculateSwapQuoteParams) -> list[SimulatedSource]:
        native_allowed = params.rfqt is not None
        native_only = params.rfqt is not None and params.rfqt.native_exclusively_rfqt
        active = []
        for source in self._sources:
            if source.name in params.excluded_sources:
                continue
            if params.included_sources and source.name not in params.included_sources:
                continue
            is_native = source.name == LiquiditySource.NATIVE.value
            if is_native and not native_allowed:
                continue
            if native_only and not is_native:
                continue
            active.append(source)
        return active

    def _fill(
        self,
        source: SimulatedSource,
        sell_token: TokenMetadata,
        buy_token: TokenMetadata,
        amount: Decimal,
        is_selling: bool,
    ) -> Optional[QuoteReportEntry]:
        sell_price = self._prices[sell_token.symbol]
        buy_price = self._prices[buy_token.symbol]
        if amount <= 0:
            return None

        if is_selling:
            eth_value = _unit(amount, sell_token.decimals) * sell_price
        else:
            eth_value = _unit(amount, buy_token.decimals) * buy_price
        if eth_value > source.depth_eth:
            return None

        # Price impact grows with trade size relative to depth
        cost = source.fee_percent + eth_value / (source.depth_eth * 20)

        if is_selling:
            maker_amount = _base(eth_value * (1 - cost) / buy_price, buy_token.decimals)
            taker_amount = amount
        else:
            maker_amount = amount
            taker_amount = _base(eth_value / (1 - cost) / sell_price, sell_token.decimals, ROUND_UP)

        if maker_amount <= 0 or taker_amount <= 0:
            return None

        return QuoteReportEntry(
            liquidity_source=source.name,
            maker_amount=maker_amount,
            taker_amount=taker_amount,
            gas=source.gas,
            maker_address=source.maker_address if source.name == LiquiditySource.NATIVE.value else None,
        )

    def _wrap_quote(self, params: CalculateSwapQuoteParams, selector: str, is_wrap: bool) -> SwapQuote:
        amount = params.sell_amount if params.sell_amount is not None else params.buy_amount
        weth = get_wrapped_native_address(self.chain_id)
        data = selector if is_wrap else f"{selector}{int(amount):064x}"
        return SwapQuote(
            price=Decimal("1"),
            guaranteed_price=Decimal("1"),
            to=weth,
            data=data,
            value=amount if is_wrap else Decimal("0"),
            gas=WRAP_GAS,
            estimated_gas=WRAP_GAS,
            gas_price=params.gas_price or DEFAULT_GAS_PRICE,
            buy_token_address=params.buy_token_address,
            sell_token_address=params.sell_token_address,
            buy_amount=amount,
            sell_amount=amount,
            sources=[SourceProportion(name="WETH", proportion=Decimal("1"))],
            allowance_target=NULL_ADDRESS,
            sell_token_to_eth_rate=Decimal("1"),
            buy_token_to_eth_rate=Decimal("1"),
        )

    def _to_eth_rate(self, token: TokenMetadata) -> Decimal:
        """Units of ``token`` per 1 ETH."""
        return (1 / self._prices[token.symbol]).quantize(Decimal(10) ** -token.decimals)

    def _depth_side(
        self,
        sources: list[SimulatedSource],
        sell_token: TokenMetadata,
        buy_token: TokenMetadata,
        amounts: list[Decimal],
    ) -> list[MarketDepthSample]:
        samples = []
        for bucket, amount in enumerate(amounts):
            fills = []
            for source in sources:
                fill = self._fill(source, sell_token, buy_token, amount, True)
                if fill is not None:
                    fills.append((source, fill))
            if not fills:
                continue
            source, best = max(fills, key=lambda pair: pair[1].maker_amount)
            price = _unit(best.maker_amount, buy_token.decimals) / _unit(best.taker_amount, sell_token.decimals)
            samples.append(
                MarketDepthSample(
                    price=price.quantize(Decimal(10) ** -buy_token.decimals),
                    bucket=bucket,
                    bucket_total=best.taker_amount,
                    source=source.name,
                )
            )
        return samples

    @staticmethod
    def _sample_amounts(max_amount: Decimal, num_samples: int, exp_base: float) -> list[Decimal]:
        """Exponentially spaced amounts up to ``max_amount``."""
        if num_samples <= 0 or max_amount <= 0:
            return []
        base = Decimal(str(exp_base))
        steps = [base**i for i in range(num_samples)]
        total = sum(steps)
        amounts = []
        running = Decimal("0")
        for step in steps:
            running += step
            amounts.append((max_amount * running / total).to_integral_value(rounding=ROUND_DOWN))
        return amounts

    @staticmethod
    def _calldata(params: CalculateSwapQuoteParams, fill: QuoteReportEntry) -> str:
        payload = (
            f"{params.sell_token_address}{params.buy_token_address}"
            f"{fill.taker_amount}{fill.maker_amount}{fill.liquidity_source}"
        )
        return "0x" + hashlib.sha256(payload.encode()).hexdigest()
