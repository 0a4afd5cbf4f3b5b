"""Abstract interface to the quoting engine.

The engine owns price computation and liquidity-source routing. The swap
core only decides which of its entry points to call and with what.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from swapquote.tokens import TokenMetadata
from swapquote.web.contracts.requests import AffiliateFee, RfqtRequestOptions
from swapquote.web.contracts.swap import MarketDepthResponse, SwapQuote, TokenPriceRecord


class SwapQuoterError(str, Enum):
    """Message prefixes the engine uses for well-known failures."""

    INSUFFICIENT_ASSET_LIQUIDITY = "INSUFFICIENT_ASSET_LIQUIDITY"
    ASSET_UNAVAILABLE = "ASSET_UNAVAILABLE"
    NO_OPTIMAL_PATH = "NO_OPTIMAL_PATH"


class MarketOperation(str, Enum):
    SELL = "Sell"
    BUY = "Buy"


class QuoteEngineError(Exception):
    """Engine failure; the message starts with a ``SwapQuoterError`` marker where one applies."""


class QuoteEngineRevertError(Exception):
    """An on-chain simulation of the quote reverted."""

    def __init__(self, name: str, revert_data: Optional[Any] = None):
        self.name = name
        self.revert_data = revert_data
        super().__init__(name)


@dataclass(frozen=True)
class CalculateSwapQuoteParams:
    """Everything the engine needs to build a single quote."""

    buy_token_address: str
    sell_token_address: str
    buy_amount: Optional[Decimal]
    sell_amount: Optional[Decimal]
    from_address: Optional[str]
    is_eth_sell: bool
    is_eth_buy: bool
    slippage_percentage: Decimal
    gas_price: Optional[Decimal]
    excluded_sources: frozenset[str]
    included_sources: frozenset[str]
    affiliate_address: Optional[str]
    api_key: Optional[str]
    rfqt: Optional[RfqtRequestOptions]
    skip_validation: bool
    affiliate_fee: AffiliateFee
    include_price_comparisons: bool
    should_sell_entire_balance: bool
    is_meta_transaction: bool = False


@dataclass(frozen=True)
class MarketDepthParams:
    buy_token: str
    sell_token: str
    sell_amount: Decimal
    num_samples: int
    sample_distribution_base: float
    excluded_sources: frozenset[str] = field(default_factory=frozenset)
    included_sources: frozenset[str] = field(default_factory=frozenset)


class SwapQuoteEngine(ABC):
    """Quoting engine entry points used by the orchestrator."""

    @abstractmethod
    async def calculate_swap_quote(self, params: CalculateSwapQuoteParams) -> SwapQuote:
        """Quote an ordinary multi-source swap."""

    @abstractmethod
    async def get_swap_quote_for_wrap(self, params: CalculateSwapQuoteParams) -> SwapQuote:
        """Quote wrapping the native asset."""

    @abstractmethod
    async def get_swap_quote_for_unwrap(self, params: CalculateSwapQuoteParams) -> SwapQuote:
        """Quote unwrapping to the native asset."""

    @abstractmethod
    async def get_token_prices(
        self, base_asset: TokenMetadata, unit_amount: Decimal
    ) -> list[TokenPriceRecord]:
        """Price ``unit_amount`` of ``base_asset`` against every known token."""

    @abstractmethod
    async def calculate_market_depth(self, params: MarketDepthParams) -> MarketDepthResponse:
        """Sample achievable prices at increasing trade sizes."""
