"""Classification of quoting-engine failures into API errors."""

import logging
from typing import Optional

from swapquote.engine.base import QuoteEngineRevertError, SwapQuoterError
from swapquote.errors import (
    APIError,
    InternalServerError,
    RevertAPIError,
    ValidationError,
    ValidationErrorCodes,
    is_api_error,
)
from swapquote.web.contracts.requests import CanonicalSwapRequest

logger = logging.getLogger(__name__)

_INSUFFICIENT_LIQUIDITY_PREFIXES = (
    SwapQuoterError.INSUFFICIENT_ASSET_LIQUIDITY.value,
    SwapQuoterError.NO_OPTIMAL_PATH.value,
)


class ErrorClassifier:
    """Maps any exception raised while quoting to exactly one ``APIError``."""

    def classify(self, exc: BaseException, request: Optional[CanonicalSwapRequest] = None) -> APIError:
        if is_api_error(exc):
            return exc

        if isinstance(exc, QuoteEngineRevertError):
            return RevertAPIError(exc)

        message = str(exc)

        if message.startswith(_INSUFFICIENT_LIQUIDITY_PREFIXES):
            has_buy_amount = request is not None and request.buy_amount is not None
            return ValidationError.single(
                "buyAmount" if has_buy_amount else "sellAmount",
                ValidationErrorCodes.VALUE_OUT_OF_RANGE,
                SwapQuoterError.INSUFFICIENT_ASSET_LIQUIDITY.value,
            )

        if message.startswith(SwapQuoterError.ASSET_UNAVAILABLE.value):
            return ValidationError.single("token", ValidationErrorCodes.VALUE_OUT_OF_RANGE, message)

        logger.info("Uncaught error: %s", message, exc_info=exc)
        return InternalServerError(message)
