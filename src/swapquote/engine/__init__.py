"""Quoting engine interface and the dry-run implementation."""

from swapquote.engine.base import (
    CalculateSwapQuoteParams,
    MarketDepthParams,
    MarketOperation,
    QuoteEngineError,
    QuoteEngineRevertError,
    SwapQuoteEngine,
    SwapQuoterError,
)
from swapquote.engine.dry_run import DryRunQuoteEngine

__all__ = [
    "CalculateSwapQuoteParams",
    "DryRunQuoteEngine",
    "MarketDepthParams",
    "MarketOperation",
    "QuoteEngineError",
    "QuoteEngineRevertError",
    "SwapQuoteEngine",
    "SwapQuoterError",
]
