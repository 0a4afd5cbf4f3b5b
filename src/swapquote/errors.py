"""API-facing error taxonomy.

Every failure the swap core surfaces to a client is one of the three
``APIError`` kinds below. They are raised by the core and turned into HTTP
responses by the handlers registered in ``register_exception_handlers``.
"""

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class GeneralErrorCodes(IntEnum):
    """Top-level error codes carried in every error body."""

    VALIDATION_ERROR = 100
    MALFORMED_JSON = 101
    NOT_IMPLEMENTED = 104
    TRANSACTION_INVALID = 105
    INVALID_API_KEY = 107
    INTERNAL_ERROR = 500


class ValidationErrorCodes(IntEnum):
    """Per-field validation codes."""

    REQUIRED_FIELD = 1000
    INCORRECT_FORMAT = 1001
    INVALID_ADDRESS = 1002
    ADDRESS_NOT_SUPPORTED = 1003
    VALUE_OUT_OF_RANGE = 1004
    INVALID_SIGNATURE_OR_HASH = 1005
    UNSUPPORTED_OPTION = 1006
    INVALID_ORDER = 1007
    INTERNAL_ERROR = 1008
    TOKEN_NOT_SUPPORTED = 1009
    FIELD_INVALID = 1010


class ValidationErrorReasons(str, Enum):
    """Stable reason strings for validation failures."""

    PERCENTAGE_OUT_OF_RANGE = "MUST_BE_LESS_THAN_OR_EQUAL_TO_ONE"
    ARGUMENT_NOT_YET_SUPPORTED = "ARGUMENT_NOT_YET_SUPPORTED"
    REQUIRES_INTENT_ON_FILLING = "REQUIRES_INTENT_ON_FILLING"
    TAKER_ADDRESS_MISSING = "TAKER_ADDRESS_MISSING"
    INVALID_API_KEY = "INVALID_API_KEY"
    CONFLICTING_FILTERING_ARGUMENTS = "CONFLICTING_FILTERING_ARGUMENTS"


@dataclass(frozen=True)
class ValidationErrorItem:
    """A single field/code/reason triple."""

    field: str
    code: ValidationErrorCodes
    reason: str

    def to_dict(self) -> dict:
        reason = self.reason.value if isinstance(self.reason, Enum) else self.reason
        return {"field": self.field, "code": int(self.code), "reason": reason}


class APIError(Exception):
    """Base class for errors that are safe to return to API clients."""

    status_code: int = 500
    general_code: GeneralErrorCodes = GeneralErrorCodes.INTERNAL_ERROR

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)

    def to_dict(self) -> dict[str, Any]:
        return {"code": int(self.general_code), "reason": self.reason}


class ValidationError(APIError):
    """Client-correctable failure on one or more request fields."""

    status_code = 400
    general_code = GeneralErrorCodes.VALIDATION_ERROR

    def __init__(self, fields: list[ValidationErrorItem]):
        self.fields = list(fields)
        super().__init__("Validation Failed")

    @classmethod
    def single(cls, field: str, code: ValidationErrorCodes, reason: Any) -> "ValidationError":
        """Build an error for exactly one field."""
        return cls([ValidationErrorItem(field=field, code=code, reason=reason)])

    @property
    def field_names(self) -> list[str]:
        return [item.field for item in self.fields]

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["validationErrors"] = [item.to_dict() for item in self.fields]
        return body


class RevertAPIError(APIError):
    """Upstream on-chain simulation reverted."""

    status_code = 400
    general_code = GeneralErrorCodes.TRANSACTION_INVALID

    def __init__(self, revert: Exception):
        self.revert = revert
        self.revert_data: Optional[Any] = getattr(revert, "revert_data", None)
        super().__init__(getattr(revert, "name", None) or str(revert) or type(revert).__name__)

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        if self.revert_data is not None:
            body["values"] = self.revert_data
        return body


class InternalServerError(APIError):
    """Unclassified failure; message forwarded for diagnostics only."""

    status_code = 500
    general_code = GeneralErrorCodes.INTERNAL_ERROR


def is_api_error(exc: BaseException) -> bool:
    """Check whether an exception is already one of the API-facing kinds."""
    return isinstance(exc, APIError)


async def _api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.reason)
    else:
        logger.debug("%s %s rejected: %s", request.method, request.url.path, exc.to_dict())
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """Map API errors onto HTTP responses."""
    app.add_exception_handler(APIError, _api_error_handler)
