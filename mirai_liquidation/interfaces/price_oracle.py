"""Price oracle protocol — TWAP lookup per asset."""
from typing import Protocol

from ..models import PriceQuote


class PriceOracle(Protocol):
    """Abstract interface for time-weighted asset prices."""

    def get_price(self, underlying: str) -> PriceQuote: ...
