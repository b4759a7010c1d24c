"""Pyth Network price oracle service."""
from __future__ import annotations

import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ..config import PythConfig
from ..models import AssetConfig
from ..wad import WAD
from .snapshot import PriceSnapshot

logger = logging.getLogger(__name__)


def scale_pyth_price(price_raw: int, expo: int) -> int:
    """Convert a Pyth ``price * 10^expo`` pair to 1e18 fixed point."""
    shift = 18 + expo
    if shift >= 0:
        return price_raw * 10**shift
    return price_raw // 10**-shift


class PythOracle:
    """Fetch EMA prices from Pyth Hermes and freeze them into a snapshot.

    The exponential moving average Hermes publishes stands in for the TWAP.
    """

    def __init__(self, config: PythConfig, assets: dict[str, AssetConfig]) -> None:
        self.hermes_url = config.hermes_url
        self.price_feeds = dict(config.feeds)
        self._assets = assets

    @staticmethod
    def _parse_entry(item: dict[str, Any]) -> int:
        price_data = item.get("ema_price") or item.get("price", {})
        price_raw = int(price_data.get("price", 0))
        expo = int(price_data.get("expo", 0))
        return scale_pyth_price(price_raw, expo)

    async def fetch_prices(self, symbols: list[str] | None = None) -> dict[str, int]:
        """Fetch current prices as ``symbol → price (1e18)``.

        Args:
            symbols: Optional list of symbols to fetch. If None, fetches all
                     configured feeds.
        """
        prices: dict[str, int] = {}

        feeds = self.price_feeds
        if symbols is not None:
            feeds = {k: v for k, v in self.price_feeds.items() if k in symbols}

        feed_ids = list(set(feeds.values()))
        if not feed_ids:
            return prices

        query_params = "&".join([f"ids[]={fid}" for fid in feed_ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return prices

                    data = await response.json()

            id_to_symbols: dict[str, list[str]] = {}
            for symbol, feed_id in feeds.items():
                id_to_symbols.setdefault(feed_id.lower().removeprefix("0x"), []).append(
                    symbol
                )

            for item in data.get("parsed", []):
                feed_id = str(item.get("id", "")).lower().removeprefix("0x")
                price = self._parse_entry(item)
                for symbol in id_to_symbols.get(feed_id, []):
                    prices[symbol] = price

            logger.info("Fetched %d prices from Pyth Network", len(prices))
            for symbol, price in sorted(prices.items()):
                logger.debug("  %s: $%.4f", symbol, price / WAD)

        except Exception as e:
            logger.error("Error fetching prices from Pyth: %s", e)

        return prices

    async def snapshot(self) -> PriceSnapshot:
        """Fetch all configured feeds and freeze them for evaluation."""
        prices = await self.fetch_prices()
        return PriceSnapshot.from_prices(prices, self._assets)
