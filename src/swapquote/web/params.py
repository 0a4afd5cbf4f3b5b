"""Swap request parameter parsing.

Raw query strings come in as an untyped mapping and leave as a
``CanonicalSwapRequest``. Checks run in a fixed order and the first failure
ends parsing; failures are never aggregated across checks.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError
from pydantic.alias_generators import to_camel

from swapquote.errors import (
    ValidationError,
    ValidationErrorCodes,
    ValidationErrorItem,
    ValidationErrorReasons,
)
from swapquote.rfqt import resolve_rfqt_options
from swapquote.sources import SourceFilterResolver
from swapquote.tokens import NULL_ADDRESS, find_token_address_or_throw_api_error
from swapquote.web.contracts.requests import AffiliateFee, CanonicalSwapRequest, Endpoint

logger = logging.getLogger(__name__)

API_KEY_HEADER = "0x-api-key"

ADDRESS_PATTERN = r"^0x[0-9a-fA-F]{40}$"
WHOLE_NUMBER_PATTERN = r"^\d+$"

_ADDRESS_FIELDS = {"takerAddress", "affiliateAddress", "feeRecipient"}


class RawSwapQuoteQuery(BaseModel):
    """Structural schema for ``/swap/v1/quote`` and ``/swap/v1/price`` query strings."""

    model_config = ConfigDict(alias_generator=to_camel, extra="ignore")

    sell_token: str = Field(..., min_length=1)
    buy_token: str = Field(..., min_length=1)
    sell_amount: Optional[str] = Field(None, pattern=WHOLE_NUMBER_PATTERN)
    buy_amount: Optional[str] = Field(None, pattern=WHOLE_NUMBER_PATTERN)
    gas_price: Optional[str] = Field(None, pattern=WHOLE_NUMBER_PATTERN)
    taker_address: Optional[str] = Field(None, pattern=ADDRESS_PATTERN)
    affiliate_address: Optional[str] = Field(None, pattern=ADDRESS_PATTERN)
    fee_recipient: Optional[str] = Field(None, pattern=ADDRESS_PATTERN)
    # Unparsable percentages fall back to defaults rather than failing here
    slippage_percentage: Optional[str] = None
    sell_token_percentage_fee: Optional[str] = None
    buy_token_percentage_fee: Optional[str] = None
    excluded_sources: Optional[str] = None
    included_sources: Optional[str] = None
    intent_on_filling: Optional[str] = None
    skip_validation: Optional[str] = None
    include_price_comparisons: Optional[str] = None
    should_sell_entire_balance: Optional[str] = None


def _parse_fraction(raw: Optional[str]) -> Optional[Decimal]:
    """Parse a decimal fraction, returning None for absent, unparsable or NaN input.

    Infinities are kept so range checks reject them.
    """
    if raw is None:
        return None
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        return None
    if value.is_nan():
        return None
    return value


def _parse_amount(raw: Optional[str], field_name: str) -> Optional[Decimal]:
    """Parse an amount; absence is allowed, malformed text is not."""
    if raw is None:
        return None
    try:
        value = Decimal(raw)
    except InvalidOperation as e:
        raise ValidationError.single(
            field_name, ValidationErrorCodes.INCORRECT_FORMAT, f"Invalid number: {raw}"
        ) from e
    if not value.is_finite():
        raise ValidationError.single(
            field_name, ValidationErrorCodes.INCORRECT_FORMAT, f"Invalid number: {raw}"
        )
    return value


def _is_true(raw: Optional[str]) -> bool:
    return raw == "true"


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


@dataclass(frozen=True)
class SlippagePolicy:
    """Default-substitution policy for ``slippagePercentage``.

    Absent, unparsable or non-positive values become ``default``; values
    above ``maximum`` are rejected.
    """

    default: Decimal = Decimal("0.01")
    maximum: Decimal = Decimal("1")

    def resolve(self, raw: Optional[str]) -> Decimal:
        value = _parse_fraction(raw)
        if value is None or value <= 0:
            if raw is not None:
                logger.debug(f"Using default slippage {self.default} instead of {raw!r}")
            return self.default
        if value > self.maximum:
            raise ValidationError.single(
                "slippagePercentage",
                ValidationErrorCodes.VALUE_OUT_OF_RANGE,
                ValidationErrorReasons.PERCENTAGE_OUT_OF_RANGE,
            )
        return value


def _schema_error_to_validation_error(error: SchemaError) -> ValidationError:
    items = []
    for detail in error.errors():
        field_name = str(detail["loc"][0]) if detail["loc"] else "query"
        if detail["type"] == "missing":
            code = ValidationErrorCodes.REQUIRED_FIELD
        elif field_name in _ADDRESS_FIELDS:
            code = ValidationErrorCodes.INVALID_ADDRESS
        else:
            code = ValidationErrorCodes.INCORRECT_FORMAT
        items.append(ValidationErrorItem(field=field_name, code=code, reason=detail["msg"]))
    return ValidationError(items)


class RequestParamParser:
    """Turns raw swap query parameters into a ``CanonicalSwapRequest``."""

    def __init__(
        self,
        chain_id: int,
        source_resolver: SourceFilterResolver,
        slippage_policy: Optional[SlippagePolicy] = None,
    ):
        self.chain_id = chain_id
        self.source_resolver = source_resolver
        self.slippage_policy = slippage_policy or SlippagePolicy()

    def parse(
        self,
        query: Mapping[str, str],
        headers: Mapping[str, str],
        endpoint: Endpoint,
    ) -> CanonicalSwapRequest:
        """Validate and normalize a swap request.

        Args:
            query: Raw query parameters
            headers: Request headers (``0x-api-key`` is read from here)
            endpoint: ``price`` or ``quote``

        Returns:
            The canonical request

        Raises:
            ValidationError: on the first failing check
        """
        raw = self._validate_schema(query)

        sell_amount = _parse_amount(raw.sell_amount, "sellAmount")
        buy_amount = _parse_amount(raw.buy_amount, "buyAmount")
        gas_price = _parse_amount(raw.gas_price, "gasPrice")

        slippage_percentage = self.slippage_policy.resolve(raw.slippage_percentage)

        affiliate_fee = self._parse_affiliate_fee(raw)

        api_key = _get_header(headers, API_KEY_HEADER)
        source_filters = self.source_resolver.resolve(
            excluded_sources=raw.excluded_sources,
            included_sources=raw.included_sources,
            intent_on_filling=raw.intent_on_filling,
            taker_address=raw.taker_address,
            api_key=api_key,
            endpoint=endpoint,
        )
        rfqt = resolve_rfqt_options(
            endpoint=endpoint,
            api_key=api_key,
            taker_address=raw.taker_address,
            intent_on_filling=raw.intent_on_filling,
            native_exclusively_rfqt=source_filters.native_exclusively_rfqt,
        )

        request = CanonicalSwapRequest(
            endpoint=endpoint,
            sell_token=find_token_address_or_throw_api_error(raw.sell_token, "sellToken", self.chain_id),
            buy_token=find_token_address_or_throw_api_error(raw.buy_token, "buyToken", self.chain_id),
            sell_amount=sell_amount,
            buy_amount=buy_amount,
            taker_address=raw.taker_address.lower() if raw.taker_address else None,
            slippage_percentage=slippage_percentage,
            gas_price=gas_price,
            excluded_sources=source_filters.excluded_sources,
            included_sources=source_filters.included_sources,
            affiliate_address=raw.affiliate_address,
            affiliate_fee=affiliate_fee,
            rfqt=rfqt,
            api_key=api_key,
            skip_validation=_is_true(raw.skip_validation),
            include_price_comparisons=_is_true(raw.include_price_comparisons),
            should_sell_entire_balance=_is_true(raw.should_sell_entire_balance),
        )

        logger.info(
            "swapRequest %s",
            {
                "type": "swapRequest",
                "endpoint": endpoint,
                "updatedExcludedSources": sorted(request.excluded_sources),
                "nativeExclusivelyRFQT": source_filters.native_exclusively_rfqt,
                "apiKey": api_key or "N/A",
            },
        )
        return request

    @staticmethod
    def _validate_schema(query: Mapping[str, str]) -> RawSwapQuoteQuery:
        try:
            raw = RawSwapQuoteQuery.model_validate(dict(query))
        except SchemaError as e:
            raise _schema_error_to_validation_error(e) from e

        if (raw.sell_amount is None) == (raw.buy_amount is None):
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
        return raw

    @staticmethod
    def _parse_affiliate_fee(raw: RawSwapQuoteQuery) -> AffiliateFee:
        sell_fee = _parse_fraction(raw.sell_token_percentage_fee) or Decimal("0")
        buy_fee = _parse_fraction(raw.buy_token_percentage_fee) or Decimal("0")

        if sell_fee != 0:
            raise ValidationError.single(
                "sellTokenPercentageFee",
                ValidationErrorCodes.UNSUPPORTED_OPTION,
                ValidationErrorReasons.ARGUMENT_NOT_YET_SUPPORTED,
            )
        if buy_fee > 1 or buy_fee < 0:
            raise ValidationError.single(
                "buyTokenPercentageFee",
                ValidationErrorCodes.VALUE_OUT_OF_RANGE,
                ValidationErrorReasons.PERCENTAGE_OUT_OF_RANGE,
            )

        if raw.fee_recipient:
            return AffiliateFee(
                recipient=raw.fee_recipient.lower(),
                sell_token_percentage_fee=sell_fee,
                buy_token_percentage_fee=buy_fee,
            )
        return AffiliateFee(recipient=NULL_ADDRESS)
