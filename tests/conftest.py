"""Pytest configuration and fixtures."""

import os
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"

from swapquote.config import Settings
from swapquote.engine import DryRunQuoteEngine
from swapquote.sources import SourceFilterResolver
from swapquote.web.params import RequestParamParser

RFQT_KEY = "rfqt-api-key"
PLP_KEY = "plp-api-key"
REGISTRY_PASSWORD = "2a9c2b6e-7e0b-4b6c-9f0a-0c2b7f3f8d11"
TAKER = "0x70a9f34f9b34c64957b9c401a97bfed35b95049e"


@pytest.fixture
def settings() -> Settings:
    """Settings with one key on each whitelist and one registry password."""
    return Settings(
        chain_id=1,
        rfqt_api_key_whitelist=RFQT_KEY,
        plp_api_key_whitelist=PLP_KEY,
        rfqt_registry_passwords=REGISTRY_PASSWORD,
        default_slippage_percentage=Decimal("0.01"),
    )


@pytest.fixture
def source_resolver() -> SourceFilterResolver:
    return SourceFilterResolver(rfqt_api_keys=[RFQT_KEY], plp_api_keys=[PLP_KEY])


@pytest.fixture
def parser(source_resolver) -> RequestParamParser:
    return RequestParamParser(chain_id=1, source_resolver=source_resolver)


@pytest.fixture
def engine() -> DryRunQuoteEngine:
    return DryRunQuoteEngine(chain_id=1)


@pytest.fixture
async def client(settings, engine):
    """Async test client against a fresh app."""
    from swapquote.api.app import create_app

    app = create_app(settings=settings, engine=engine)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
