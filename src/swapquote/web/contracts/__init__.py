"""Request and response contracts for the swap API."""

from swapquote.web.contracts.requests import (
    AffiliateFee,
    CanonicalSwapRequest,
    RfqtRequestOptions,
)
from swapquote.web.contracts.swap import (
    MarketDepthResponse,
    PriceComparison,
    QuoteReport,
    QuoteReportEntry,
    SwapPriceResponse,
    SwapQuote,
    SwapQuoteResponse,
    TokenListResponse,
    TokenPriceResponse,
)

__all__ = [
    # Canonical request
    "AffiliateFee",
    "CanonicalSwapRequest",
    "RfqtRequestOptions",
    # Quote contracts
    "QuoteReport",
    "QuoteReportEntry",
    "SwapQuote",
    "SwapQuoteResponse",
    "SwapPriceResponse",
    "PriceComparison",
    # Market data contracts
    "MarketDepthResponse",
    "TokenListResponse",
    "TokenPriceResponse",
]
