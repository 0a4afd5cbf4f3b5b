"""Canonical, validated swap request values.

These are produced once per request by the parameter parser and never
mutated afterwards.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Literal, Optional

from swapquote.tokens import NULL_ADDRESS

Endpoint = Literal["price", "quote"]


@dataclass(frozen=True)
class AffiliateFee:
    """Fee taken on behalf of an integrator."""

    recipient: str = NULL_ADDRESS
    sell_token_percentage_fee: Decimal = Decimal("0")
    buy_token_percentage_fee: Decimal = Decimal("0")

    @property
    def is_active(self) -> bool:
        return self.recipient != NULL_ADDRESS


@dataclass(frozen=True)
class RfqtRequestOptions:
    """How a request participates in RFQ-T. ``None`` in a request means it does not."""

    intent_on_filling: bool
    is_indicative: bool
    native_exclusively_rfqt: bool = False


@dataclass(frozen=True)
class CanonicalSwapRequest:
    """A fully validated swap request.

    ``sell_token`` and ``buy_token`` are lowercase contract addresses; the
    native asset is represented by its ``0xeeee...`` sentinel.
    """

    endpoint: Endpoint
    sell_token: str
    buy_token: str
    sell_amount: Optional[Decimal] = None
    buy_amount: Optional[Decimal] = None
    taker_address: Optional[str] = None
    slippage_percentage: Decimal = Decimal("0.01")
    gas_price: Optional[Decimal] = None
    excluded_sources: frozenset[str] = field(default_factory=frozenset)
    included_sources: frozenset[str] = field(default_factory=frozenset)
    affiliate_address: Optional[str] = None
    affiliate_fee: AffiliateFee = field(default_factory=AffiliateFee)
    rfqt: Optional[RfqtRequestOptions] = None
    api_key: Optional[str] = None
    skip_validation: bool = False
    include_price_comparisons: bool = False
    should_sell_entire_balance: bool = False

    def with_skip_validation(self) -> "CanonicalSwapRequest":
        """Copy of this request with on-chain validation skipped."""
        return replace(self, skip_validation=True)
