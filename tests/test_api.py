"""Tests for the FastAPI endpoints."""

import pytest

from conftest import PLP_KEY, REGISTRY_PASSWORD, RFQT_KEY, TAKER

WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
SELL_1000_DAI = {"sellToken": "DAI", "buyToken": "WETH", "sellAmount": "1000000000000000000000"}


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "swapquote"

    @pytest.mark.asyncio
    async def test_detailed_health(self, client):
        response = await client.get("/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert "config" in data
        assert "environment" in data["config"]


class TestRootAndRegistry:
    @pytest.mark.asyncio
    async def test_root(self, client):
        response = await client.get("/swap/v1")

        assert response.status_code == 200
        assert response.json()["message"].startswith("This is the root of the Swap API.")

    @pytest.mark.asyncio
    async def test_registry_without_auth(self, client):
        response = await client.get("/swap/v1/rfq/registry")

        assert response.status_code == 401
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_registry_wrong_token(self, client):
        response = await client.get(
            "/swap/v1/rfq/registry", headers={"Authorization": "Bearer " + "f" * 36}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_registry_listing(self, client):
        response = await client.get(
            "/swap/v1/rfq/registry", headers={"Authorization": f"Bearer {REGISTRY_PASSWORD}"}
        )

        assert response.status_code == 200
        assert response.json() == [RFQT_KEY]


class TestQuoteEndpoint:
    """Tests for /swap/v1/quote."""

    @pytest.mark.asyncio
    async def test_quote(self, client):
        response = await client.get("/swap/v1/quote", params=SELL_1000_DAI)

        assert response.status_code == 200
        data = response.json()
        assert data["sellAmount"] == "1000000000000000000000"
        assert data["buyTokenAddress"] == WETH
        assert "guaranteedPrice" in data
        assert "quoteReport" not in data
        assert "decodedUniqueId" not in data
        assert "priceComparisons" not in data

    @pytest.mark.asyncio
    async def test_quote_with_price_comparisons(self, client):
        response = await client.get(
            "/swap/v1/quote", params={**SELL_1000_DAI, "includePriceComparisons": "true"}
        )

        assert response.status_code == 200
        names = [c["name"] for c in response.json()["priceComparisons"]]
        assert names == sorted(names)
        assert "LiquidityProvider" not in names

    @pytest.mark.asyncio
    async def test_plp_key_sees_privileged_source(self, client):
        response = await client.get(
            "/swap/v1/quote",
            params={**SELL_1000_DAI, "includePriceComparisons": "true"},
            headers={"0x-api-key": PLP_KEY},
        )

        names = [c["name"] for c in response.json()["priceComparisons"]]
        assert "LiquidityProvider" in names

    @pytest.mark.asyncio
    async def test_rfqt_only_quote(self, client):
        response = await client.get(
            "/swap/v1/quote",
            params={
                **SELL_1000_DAI,
                "includedSources": "RFQT",
                "takerAddress": TAKER,
                "intentOnFilling": "true",
            },
            headers={"0x-api-key": RFQT_KEY},
        )

        assert response.status_code == 200
        assert response.json()["orders"][0]["source"] == "Native"

    @pytest.mark.asyncio
    async def test_wrap(self, client):
        response = await client.get(
            "/swap/v1/quote",
            params={"sellToken": "ETH", "buyToken": "WETH", "sellAmount": "1000000000000000000"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["to"] == WETH
        assert data["data"] == "0xd0e30db0"
        assert data["value"] == "1000000000000000000"

    @pytest.mark.asyncio
    async def test_same_token(self, client):
        response = await client.get(
            "/swap/v1/quote", params={"sellToken": "DAI", "buyToken": "DAI", "sellAmount": "1"}
        )

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == 100
        assert [e["field"] for e in data["validationErrors"]] == ["buyToken", "sellToken"]

    @pytest.mark.asyncio
    async def test_slippage_out_of_range(self, client):
        response = await client.get(
            "/swap/v1/quote", params={**SELL_1000_DAI, "slippagePercentage": "2"}
        )

        assert response.status_code == 400
        error = response.json()["validationErrors"][0]
        assert error["field"] == "slippagePercentage"
        assert error["code"] == 1004
        assert error["reason"] == "MUST_BE_LESS_THAN_OR_EQUAL_TO_ONE"

    @pytest.mark.asyncio
    async def test_insufficient_liquidity(self, client):
        response = await client.get(
            "/swap/v1/quote",
            params={"sellToken": "WETH", "buyToken": "DAI", "sellAmount": "1" + "0" * 24},
        )

        assert response.status_code == 400
        error = response.json()["validationErrors"][0]
        assert error["field"] == "sellAmount"
        assert error["reason"] == "INSUFFICIENT_ASSET_LIQUIDITY"

    @pytest.mark.asyncio
    async def test_rfqt_exclusive_without_key(self, client):
        response = await client.get(
            "/swap/v1/quote",
            params={**SELL_1000_DAI, "includedSources": "RFQT", "takerAddress": TAKER},
        )

        assert response.status_code == 400
        assert response.json()["validationErrors"][0]["reason"] == "INVALID_API_KEY"


class TestPriceEndpoint:
    @pytest.mark.asyncio
    async def test_price(self, client):
        response = await client.get("/swap/v1/price", params=SELL_1000_DAI)

        assert response.status_code == 200
        data = response.json()
        assert "price" in data
        assert "guaranteedPrice" not in data
        assert "data" not in data
        assert "orders" not in data

    @pytest.mark.asyncio
    async def test_missing_buy_token(self, client):
        response = await client.get(
            "/swap/v1/price", params={"sellToken": "DAI", "sellAmount": "1"}
        )

        assert response.status_code == 400
        error = response.json()["validationErrors"][0]
        assert error["field"] == "buyToken"
        assert error["code"] == 1000


class TestMarketDataEndpoints:
    @pytest.mark.asyncio
    async def test_tokens(self, client):
        response = await client.get("/swap/v1/tokens")

        assert response.status_code == 200
        symbols = {record["symbol"] for record in response.json()["records"]}
        assert {"ETH", "WETH", "DAI"} <= symbols

    @pytest.mark.asyncio
    async def test_prices(self, client):
        response = await client.get("/swap/v1/prices")

        assert response.status_code == 200
        symbols = {record["symbol"] for record in response.json()["records"]}
        assert "DAI" in symbols
        assert "WETH" not in symbols

    @pytest.mark.asyncio
    async def test_prices_unknown_token(self, client):
        response = await client.get("/swap/v1/prices", params={"sellToken": "NOPE"})

        assert response.status_code == 400
        assert response.json()["validationErrors"][0]["field"] == "sellToken"

    @pytest.mark.asyncio
    async def test_depth(self, client):
        response = await client.get(
            "/swap/v1/depth",
            params={"buyToken": "DAI", "sellToken": "ETH", "sellAmount": "10000000000000000000", "numSamples": "5"},
        )

        assert response.status_code == 200
        data = response.json()
        assert len(data["asks"]) == 5
        assert data["sellTokenAddress"] == WETH

    @pytest.mark.asyncio
    async def test_depth_same_pair(self, client):
        response = await client.get(
            "/swap/v1/depth", params={"buyToken": "ETH", "sellToken": "WETH", "sellAmount": "1"}
        )

        assert response.status_code == 400
        assert response.json()["validationErrors"][0]["code"] == 1002

    @pytest.mark.asyncio
    @pytest.mark.parametrize("base", ["0", "-1", "nan", "inf"])
    async def test_depth_rejects_bad_distribution_base(self, client, base):
        response = await client.get(
            "/swap/v1/depth",
            params={
                "buyToken": "WETH",
                "sellToken": "DAI",
                "sellAmount": "1000000000000000000000",
                "numSamples": "2",
                "sampleDistributionBase": base,
            },
        )

        assert response.status_code == 400
        error = response.json()["validationErrors"][0]
        assert error["field"] == "sampleDistributionBase"
        assert error["code"] == 1004

    @pytest.mark.asyncio
    @pytest.mark.parametrize("num_samples", ["0", "-3", "51", "10000000"])
    async def test_depth_rejects_num_samples_out_of_range(self, client, num_samples):
        response = await client.get(
            "/swap/v1/depth",
            params={
                "buyToken": "WETH",
                "sellToken": "DAI",
                "sellAmount": "1000000000000000000000",
                "numSamples": num_samples,
            },
        )

        assert response.status_code == 400
        assert response.json()["validationErrors"][0]["field"] == "numSamples"

    @pytest.mark.asyncio
    async def test_depth_accepts_max_samples(self, client):
        response = await client.get(
            "/swap/v1/depth",
            params={
                "buyToken": "WETH",
                "sellToken": "DAI",
                "sellAmount": "1000000000000000000000",
                "numSamples": "50",
            },
        )

        assert response.status_code == 200


class TestDetailedHealth:
    @pytest.mark.asyncio
    async def test_reports_engine_and_registry_fetches(self, client):
        await client.get("/swap/v1/rfq/registry")

        data = (await client.get("/health/detailed")).json()

        assert data["engine"] == "DryRunQuoteEngine"
        assert data["chain_id"] == 1
        assert data["registry_fetches"] == 1

    @pytest.mark.asyncio
    async def test_reports_app_settings(self, client):
        data = (await client.get("/health/detailed")).json()

        # Fixture settings whitelist one key of each kind
        assert data["config"]["rfqt_api_keys"] == 1
        assert data["config"]["plp_api_keys"] == 1
        assert data["config"]["registry_passwords"] == "***"


class TestQuoteInputBounds:
    @pytest.mark.asyncio
    async def test_infinite_slippage_rejected(self, client):
        response = await client.get(
            "/swap/v1/quote", params={**SELL_1000_DAI, "slippagePercentage": "Infinity"}
        )

        assert response.status_code == 400
        error = response.json()["validationErrors"][0]
        assert error["field"] == "slippagePercentage"
        assert error["code"] == 1004
