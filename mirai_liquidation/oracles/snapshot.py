"""Fixed price snapshot implementing the PriceOracle protocol."""
from __future__ import annotations

from ..errors import PriceUnavailable
from ..models import AssetConfig, PriceQuote


class PriceSnapshot:
    """TWAP quotes frozen at one point in time, keyed by underlying."""

    def __init__(self, quotes: dict[str, PriceQuote]) -> None:
        self._quotes = dict(quotes)

    @classmethod
    def from_prices(
        cls, prices: dict[str, int], assets: dict[str, AssetConfig]
    ) -> PriceSnapshot:
        """Build a snapshot from ``symbol → price`` using each asset's TWAP window."""
        by_symbol = {a.symbol: a for a in assets.values()}
        quotes: dict[str, PriceQuote] = {}
        for symbol, price in prices.items():
            asset = by_symbol.get(symbol)
            if asset is None:
                continue
            quotes[asset.underlying] = PriceQuote(
                twap=price, twap_period=asset.twap_window
            )
        return cls(quotes)

    def get_price(self, underlying: str) -> PriceQuote:
        quote = self._quotes.get(underlying)
        if quote is None or quote.twap <= 0:
            raise PriceUnavailable(underlying)
        return quote

    def __len__(self) -> int:
        return len(self._quotes)
