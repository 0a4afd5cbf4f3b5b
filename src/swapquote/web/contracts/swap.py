"""Swap quote, price and market data contracts.

Wire format is camelCase; Python attributes stay snake_case.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuoteReportEntry(CamelModel):
    """One fill considered (or delivered) while building a quote."""

    liquidity_source: str = Field(..., description="Source identifier, e.g. Uniswap or Native")
    maker_amount: Decimal = Field(..., description="Base units the taker receives")
    taker_amount: Decimal = Field(..., description="Base units the taker pays")
    gas: Decimal = Field(default=Decimal("0"), description="Estimated gas for this fill")
    maker_address: Optional[str] = Field(None, description="RFQ maker for Native fills")


class QuoteReport(CamelModel):
    """Provenance report describing how a quote was constructed."""

    sources_considered: list[QuoteReportEntry] = Field(default_factory=list)
    sources_delivered: list[QuoteReportEntry] = Field(default_factory=list)


class SourceProportion(CamelModel):
    name: str
    proportion: Decimal


class OrderInfo(CamelModel):
    """An order included in the quote."""

    maker_address: str
    source: str
    maker_amount: Decimal
    taker_amount: Decimal


class PriceComparison(CamelModel):
    """Price the same trade would get from a single reference source."""

    name: str
    price: Optional[Decimal] = None
    gas: Optional[Decimal] = None
    savings_in_eth: Optional[Decimal] = None
    buy_amount: Optional[Decimal] = None
    sell_amount: Optional[Decimal] = None


class SwapQuoteBase(CamelModel):
    """Fields shared by the engine result and the external response."""

    price: Decimal
    guaranteed_price: Decimal
    to: str
    data: str = "0x"
    value: Decimal = Decimal("0")
    gas: Decimal
    estimated_gas: Decimal
    gas_price: Decimal
    protocol_fee: Decimal = Decimal("0")
    minimum_protocol_fee: Decimal = Decimal("0")
    buy_token_address: str
    sell_token_address: str
    buy_amount: Decimal
    sell_amount: Decimal
    sources: list[SourceProportion] = Field(default_factory=list)
    orders: list[OrderInfo] = Field(default_factory=list)
    allowance_target: str
    sell_token_to_eth_rate: Decimal = Decimal("0")
    buy_token_to_eth_rate: Decimal = Decimal("0")


class SwapQuote(SwapQuoteBase):
    """Quote as returned by the quoting engine, including internal-only fields."""

    quote_report: Optional[QuoteReport] = None
    decoded_unique_id: Optional[str] = None


# Never leaves the service
INTERNAL_QUOTE_FIELDS = {"quote_report", "decoded_unique_id"}


class SwapQuoteResponse(SwapQuoteBase):
    """Firm quote returned to clients."""

    price_comparisons: Optional[list[PriceComparison]] = None


PRICE_RESPONSE_FIELDS = {
    "price",
    "value",
    "gas_price",
    "gas",
    "estimated_gas",
    "protocol_fee",
    "minimum_protocol_fee",
    "buy_token_address",
    "buy_amount",
    "sell_token_address",
    "sell_amount",
    "sources",
    "allowance_target",
    "sell_token_to_eth_rate",
    "buy_token_to_eth_rate",
}


class SwapPriceResponse(CamelModel):
    """Indicative price returned to clients."""

    price: Decimal
    value: Decimal
    gas_price: Decimal
    gas: Decimal
    estimated_gas: Decimal
    protocol_fee: Decimal
    minimum_protocol_fee: Decimal
    buy_token_address: str
    buy_amount: Decimal
    sell_token_address: str
    sell_amount: Decimal
    sources: list[SourceProportion] = Field(default_factory=list)
    allowance_target: str
    sell_token_to_eth_rate: Decimal
    buy_token_to_eth_rate: Decimal
    price_comparisons: Optional[list[PriceComparison]] = None


class TokenInfo(CamelModel):
    symbol: str
    address: str
    name: str
    decimals: int


class TokenListResponse(CamelModel):
    records: list[TokenInfo] = Field(default_factory=list)


class TokenPriceRecord(CamelModel):
    """Price of one unit of the base asset in terms of ``symbol``."""

    symbol: str
    price: Decimal


class TokenPriceResponse(CamelModel):
    records: list[TokenPriceRecord] = Field(default_factory=list)


class MarketDepthSample(CamelModel):
    """One point on a market depth curve."""

    price: Decimal
    bucket: int
    bucket_total: Decimal
    source: str


class MarketDepthResponse(CamelModel):
    asks: list[MarketDepthSample] = Field(default_factory=list)
    bids: list[MarketDepthSample] = Field(default_factory=list)
    buy_token_address: str
    sell_token_address: str


class RootResponse(BaseModel):
    message: str
