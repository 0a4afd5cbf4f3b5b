"""Liquidity source filtering.

Combines the caller's ``excludedSources``/``includedSources`` with the
exclusions implied by their API key. The excluded set is only ever widened.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from swapquote.errors import (
    ValidationError,
    ValidationErrorCodes,
    ValidationErrorItem,
    ValidationErrorReasons,
)

logger = logging.getLogger(__name__)

RFQT_INCLUDED_SOURCES = "RFQT"


class LiquiditySource(str, Enum):
    """Liquidity sources known to the quoting engine."""

    NATIVE = "Native"
    UNISWAP = "Uniswap"
    UNISWAP_V2 = "Uniswap_V2"
    ETH2DAI = "Eth2Dai"
    KYBER = "Kyber"
    CURVE = "Curve"
    LIQUIDITY_PROVIDER = "LiquidityProvider"
    MULTI_BRIDGE = "MultiBridge"
    BALANCER = "Balancer"
    CREAM = "CREAM"
    BANCOR = "Bancor"
    MSTABLE = "mStable"
    MOONISWAP = "Mooniswap"
    MULTI_HOP = "MultiHop"
    SHELL = "Shell"
    SWERVE = "Swerve"
    SNOWSWAP = "SnowSwap"
    SUSHISWAP = "SushiSwap"
    DODO = "DODO"
    CRYPTO_COM = "CryptoCom"


ALL_SOURCES: frozenset[str] = frozenset(source.value for source in LiquiditySource)

# Sources that are only visible to API keys on the PLP whitelist
PRIVILEGED_SOURCES: frozenset[str] = frozenset({LiquiditySource.LIQUIDITY_PROVIDER.value})

NON_RFQT_SOURCES: frozenset[str] = ALL_SOURCES - {LiquiditySource.NATIVE.value}


@dataclass(frozen=True)
class SourceFilters:
    """Final source filters for a request."""

    excluded_sources: frozenset[str] = field(default_factory=frozenset)
    included_sources: frozenset[str] = field(default_factory=frozenset)
    native_exclusively_rfqt: bool = False


def parse_source_list(raw: Optional[str]) -> frozenset[str]:
    """Parse a comma-separated source list, dropping unknown identifiers."""
    if raw is None:
        return frozenset()
    requested = [item.strip() for item in raw.split(",") if item.strip()]
    unknown = [item for item in requested if item not in ALL_SOURCES]
    if unknown:
        logger.debug(f"Ignoring unknown liquidity sources: {unknown}")
    return frozenset(item for item in requested if item in ALL_SOURCES)


def determine_excluded_sources(
    excluded_sources: Iterable[str],
    api_key: Optional[str],
    plp_api_keys: Iterable[str],
) -> frozenset[str]:
    """Widen ``excluded_sources`` with privileged sources the key may not use."""
    excluded = frozenset(excluded_sources)
    if api_key is None or api_key not in plp_api_keys:
        return excluded | PRIVILEGED_SOURCES
    return excluded


class SourceFilterResolver:
    """Resolves request source filters against the configured key whitelists."""

    def __init__(self, rfqt_api_keys: Iterable[str] = (), plp_api_keys: Iterable[str] = ()):
        self._rfqt_api_keys = frozenset(rfqt_api_keys)
        self._plp_api_keys = frozenset(plp_api_keys)

    def resolve(
        self,
        excluded_sources: Optional[str],
        included_sources: Optional[str],
        intent_on_filling: Optional[str],
        taker_address: Optional[str],
        api_key: Optional[str],
        endpoint: str,
    ) -> SourceFilters:
        """Compute final excluded/included sets and the RFQ-T exclusivity flag.

        Raises:
            ValidationError: conflicting filters or an ineligible
                ``includedSources=RFQT`` request
        """
        filters = self._parse_requested(
            excluded_sources, included_sources, intent_on_filling, taker_address, api_key, endpoint
        )

        excluded = determine_excluded_sources(filters.excluded_sources, api_key, self._plp_api_keys)
        included = filters.included_sources - excluded

        return SourceFilters(
            excluded_sources=excluded,
            included_sources=included,
            native_exclusively_rfqt=filters.native_exclusively_rfqt,
        )

    def _parse_requested(
        self,
        excluded_sources: Optional[str],
        included_sources: Optional[str],
        intent_on_filling: Optional[str],
        taker_address: Optional[str],
        api_key: Optional[str],
        endpoint: str,
    ) -> SourceFilters:
        if excluded_sources is not None and included_sources is not None:
            raise ValidationError(
                [
                    ValidationErrorItem(
                        field=name,
                        code=ValidationErrorCodes.INCORRECT_FORMAT,
                        reason=ValidationErrorReasons.CONFLICTING_FILTERING_ARGUMENTS,
                    )
                    for name in ("excludedSources", "includedSources")
                ]
            )

        if excluded_sources is not None:
            return SourceFilters(excluded_sources=parse_source_list(excluded_sources))

        if included_sources is None:
            return SourceFilters()

        if included_sources.strip() == RFQT_INCLUDED_SOURCES:
            self._check_rfqt_exclusive(intent_on_filling, taker_address, api_key, endpoint)
            return SourceFilters(excluded_sources=NON_RFQT_SOURCES, native_exclusively_rfqt=True)

        included = parse_source_list(included_sources)
        if not included:
            raise ValidationError.single(
                "includedSources",
                ValidationErrorCodes.INCORRECT_FORMAT,
                "Unrecognized input for includedSources",
            )
        return SourceFilters(included_sources=included)

    def _check_rfqt_exclusive(
        self,
        intent_on_filling: Optional[str],
        taker_address: Optional[str],
        api_key: Optional[str],
        endpoint: str,
    ) -> None:
        if not taker_address:
            raise ValidationError.single(
                "takerAddress",
                ValidationErrorCodes.REQUIRED_FIELD,
                ValidationErrorReasons.TAKER_ADDRESS_MISSING,
            )
        if not api_key:
            raise ValidationError.single(
                "0x-api-key",
                ValidationErrorCodes.REQUIRED_FIELD,
                ValidationErrorReasons.INVALID_API_KEY,
            )
        if api_key not in self._rfqt_api_keys:
            raise ValidationError.single(
                "0x-api-key",
                ValidationErrorCodes.FIELD_INVALID,
                ValidationErrorReasons.INVALID_API_KEY,
            )
        if endpoint == "quote" and intent_on_filling != "true":
            raise ValidationError.single(
                "intentOnFilling",
                ValidationErrorCodes.REQUIRED_FIELD,
                ValidationErrorReasons.REQUIRES_INTENT_ON_FILLING,
            )
