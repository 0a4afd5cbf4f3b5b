"""RFQ-T eligibility.

Two independent checks live here: bearer-token access to the RFQ-T
registry listing, and whether a given quote request takes part in RFQ-T.
"""

import logging
import re
import threading
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional

from swapquote.web.contracts.requests import Endpoint, RfqtRequestOptions

logger = logging.getLogger(__name__)

BEARER_REGEX = re.compile(r"^Bearer\s(.{36})$")

# Counter label used when no Authorization header was sent
MISSING_AUTH_LABEL = "N/A"


class RegistryAccessCounter:
    """Process-wide count of registry fetch attempts, keyed by header value."""

    def __init__(self) -> None:
        self._counts: Counter[str] = Counter()
        self._lock = threading.Lock()

    def increment(self, label: str) -> int:
        with self._lock:
            self._counts[label] += 1
            return self._counts[label]

    def get(self, label: str) -> int:
        with self._lock:
            return self._counts[label]

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counts)


@dataclass(frozen=True)
class RegistryAccessResult:
    """Outcome of a registry access check. ``payload`` is only set when authorized."""

    authorized: bool
    payload: Optional[list[str]] = None


class RegistryGate:
    """Guards the RFQ-T registry listing with a fixed set of bearer tokens."""

    def __init__(
        self,
        passwords: Iterable[str],
        api_key_whitelist: Iterable[str],
        counter: Optional[RegistryAccessCounter] = None,
    ):
        self._passwords = frozenset(passwords)
        self._whitelist = tuple(api_key_whitelist)
        self.counter = counter or RegistryAccessCounter()

    def authorize(self, authorization: Optional[str]) -> RegistryAccessResult:
        """Check an ``Authorization`` header value.

        Every call is counted, whether or not it succeeds.
        """
        attempts = self.counter.increment(authorization or MISSING_AUTH_LABEL)

        if authorization is None:
            logger.debug("Registry fetch without Authorization header (attempt #%d)", attempts)
            return RegistryAccessResult(authorized=False)

        match = BEARER_REGEX.match(authorization)
        if not match:
            return RegistryAccessResult(authorized=False)

        if match.group(1) not in self._passwords:
            logger.info("Registry fetch with unknown bearer token rejected")
            return RegistryAccessResult(authorized=False)

        return RegistryAccessResult(authorized=True, payload=list(self._whitelist))


def resolve_rfqt_options(
    endpoint: Endpoint,
    api_key: Optional[str],
    taker_address: Optional[str],
    intent_on_filling: Optional[str],
    native_exclusively_rfqt: bool,
) -> Optional[RfqtRequestOptions]:
    """Decide how (and whether) a request participates in RFQ-T.

    Returns None unless an API key is present. A ``quote`` with a taker
    address gets firm options; a ``price`` always gets indicative ones.
    """
    if not api_key:
        return None

    if endpoint == "quote" and taker_address:
        return RfqtRequestOptions(
            intent_on_filling=intent_on_filling == "true",
            is_indicative=False,
            native_exclusively_rfqt=native_exclusively_rfqt,
        )
    if endpoint == "price":
        return RfqtRequestOptions(
            intent_on_filling=False,
            is_indicative=True,
            native_exclusively_rfqt=native_exclusively_rfqt,
        )
    return None
