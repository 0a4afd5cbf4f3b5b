"""Tests for RFQ-T registry access and request options."""

import pytest

from swapquote.rfqt import (
    MISSING_AUTH_LABEL,
    RegistryAccessCounter,
    RegistryGate,
    resolve_rfqt_options,
)

from conftest import REGISTRY_PASSWORD, RFQT_KEY, TAKER


@pytest.fixture
def gate():
    return RegistryGate(passwords=[REGISTRY_PASSWORD], api_key_whitelist=[RFQT_KEY, "second-key"])


class TestRegistryGate:
    """Tests for bearer-token access to the registry listing."""

    def test_valid_token(self, gate):
        result = gate.authorize(f"Bearer {REGISTRY_PASSWORD}")

        assert result.authorized is True
        assert result.payload == [RFQT_KEY, "second-key"]

    def test_missing_header(self, gate):
        result = gate.authorize(None)

        assert result.authorized is False
        assert result.payload is None
        assert gate.counter.get(MISSING_AUTH_LABEL) == 1

    @pytest.mark.parametrize(
        "header",
        [
            f"Basic {REGISTRY_PASSWORD}",
            f"Bearer  {REGISTRY_PASSWORD}",
            f"Bearer {REGISTRY_PASSWORD}x",
            "Bearer short",
            f"bearer {REGISTRY_PASSWORD}",
        ],
    )
    def test_malformed_header(self, gate, header):
        assert gate.authorize(header).authorized is False

    def test_unknown_password(self, gate):
        result = gate.authorize("Bearer " + "0" * 36)
        assert result.authorized is False

    def test_every_attempt_counted_once(self, gate):
        header = f"Bearer {REGISTRY_PASSWORD}"
        gate.authorize(header)
        gate.authorize(header)
        gate.authorize("Bearer wrong")

        assert gate.counter.get(header) == 2
        assert gate.counter.get("Bearer wrong") == 1
        assert sum(gate.counter.snapshot().values()) == 3

    def test_shared_counter(self):
        counter = RegistryAccessCounter()
        first = RegistryGate([REGISTRY_PASSWORD], [], counter=counter)
        second = RegistryGate([REGISTRY_PASSWORD], [], counter=counter)

        first.authorize(None)
        second.authorize(None)

        assert counter.get(MISSING_AUTH_LABEL) == 2


class TestResolveRfqtOptions:
    """Tests for per-request RFQ-T participation."""

    def test_no_api_key(self):
        assert resolve_rfqt_options("quote", None, TAKER, "true", False) is None

    def test_firm_quote(self):
        options = resolve_rfqt_options("quote", RFQT_KEY, TAKER, "true", False)

        assert options.intent_on_filling is True
        assert options.is_indicative is False

    def test_firm_quote_without_intent(self):
        options = resolve_rfqt_options("quote", RFQT_KEY, TAKER, None, False)
        assert options.intent_on_filling is False

    def test_quote_without_taker(self):
        assert resolve_rfqt_options("quote", RFQT_KEY, None, "true", False) is None

    def test_price_is_indicative(self):
        options = resolve_rfqt_options("price", RFQT_KEY, None, "true", True)

        assert options.is_indicative is True
        assert options.intent_on_filling is False
        assert options.native_exclusively_rfqt is True
