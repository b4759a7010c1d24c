"""Unit tests for Pyth oracle — price response parsing and error handling."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from mirai_liquidation.config import PythConfig
from mirai_liquidation.errors import PriceUnavailable
from mirai_liquidation.oracles.pyth import PythOracle, scale_pyth_price

from ..factories import ASSETS, ETH, USD, WAD


@pytest.fixture()
def oracle() -> PythOracle:
    return PythOracle(
        PythConfig(
            hermes_url="https://hermes.example.com/v2/updates/price/latest",
            feeds={"ETH": "0xaaa111", "USD": "bbb222"},
        ),
        ASSETS,
    )


def _mock_session(status: int, data: dict | None = None) -> AsyncMock:
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=data or {})
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    mock_session.get = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


SAMPLE_RESPONSE = {
    "parsed": [
        {
            "id": "aaa111",
            "price": {"price": "200500000000", "expo": "-8"},
            "ema_price": {"price": "200000000000", "expo": "-8"},
        },
        {"id": "bbb222", "price": {"price": "100000000", "expo": "-8"}},
    ]
}


class TestScalePythPrice:
    def test_negative_exponent(self) -> None:
        assert scale_pyth_price(350000000, -8) == 35 * 10**17

    def test_positive_exponent(self) -> None:
        assert scale_pyth_price(2, 3) == 2000 * WAD

    def test_very_small_exponent_truncates(self) -> None:
        assert scale_pyth_price(123, -20) == 1


class TestPythOracleFetchPrices:
    @pytest.mark.asyncio
    async def test_prefers_ema_price(self, oracle: PythOracle) -> None:
        session = _mock_session(200, SAMPLE_RESPONSE)
        with patch(
            "mirai_liquidation.oracles.pyth.aiohttp.ClientSession",
            return_value=session,
        ):
            with patch("mirai_liquidation.oracles.pyth.aiohttp.TCPConnector"):
                prices = await oracle.fetch_prices()

        assert prices == {"ETH": 2000 * WAD, "USD": WAD}

    @pytest.mark.asyncio
    async def test_symbol_filter(self, oracle: PythOracle) -> None:
        session = _mock_session(200, SAMPLE_RESPONSE)
        with patch(
            "mirai_liquidation.oracles.pyth.aiohttp.ClientSession",
            return_value=session,
        ):
            with patch("mirai_liquidation.oracles.pyth.aiohttp.TCPConnector"):
                prices = await oracle.fetch_prices(["USD"])

        assert prices == {"USD": WAD}
        url = session.get.call_args[0][0]
        assert "ids[]=bbb222" in url
        assert "aaa111" not in url

    @pytest.mark.asyncio
    async def test_no_feeds_skips_request(self) -> None:
        oracle = PythOracle(PythConfig(feeds={}), ASSETS)
        with patch("mirai_liquidation.oracles.pyth.aiohttp.ClientSession") as cls:
            assert await oracle.fetch_prices() == {}
        cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_http_error_returns_empty(self, oracle: PythOracle) -> None:
        session = _mock_session(503)
        with patch(
            "mirai_liquidation.oracles.pyth.aiohttp.ClientSession",
            return_value=session,
        ):
            with patch("mirai_liquidation.oracles.pyth.aiohttp.TCPConnector"):
                assert await oracle.fetch_prices() == {}

    @pytest.mark.asyncio
    async def test_exception_returns_empty(self, oracle: PythOracle) -> None:
        with patch(
            "mirai_liquidation.oracles.pyth.aiohttp.ClientSession",
            side_effect=RuntimeError("network down"),
        ):
            with patch("mirai_liquidation.oracles.pyth.aiohttp.TCPConnector"):
                assert await oracle.fetch_prices() == {}

    @pytest.mark.asyncio
    async def test_snapshot_uses_asset_twap_window(self, oracle: PythOracle) -> None:
        session = _mock_session(200, SAMPLE_RESPONSE)
        with patch(
            "mirai_liquidation.oracles.pyth.aiohttp.ClientSession",
            return_value=session,
        ):
            with patch("mirai_liquidation.oracles.pyth.aiohttp.TCPConnector"):
                snapshot = await oracle.snapshot()

        quote = snapshot.get_price(ETH)
        assert quote.twap == 2000 * WAD
        assert quote.twap_period == ASSETS[ETH].twap_window
        assert snapshot.get_price(USD).twap == WAD
        with pytest.raises(PriceUnavailable):
            snapshot.get_price("0xusdc")
