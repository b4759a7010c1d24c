"""Registry of activated markets."""
from __future__ import annotations

from collections.abc import Iterable

from .errors import InvalidAsset
from .models import AssetConfig


class MarketRegistry:
    """Resolve asset configuration for activated underlyings."""

    def __init__(self, assets: Iterable[AssetConfig]) -> None:
        self._assets = {a.underlying: a for a in assets}

    @classmethod
    def from_config(cls, assets: dict[str, AssetConfig]) -> MarketRegistry:
        return cls(assets.values())

    def is_activated(self, underlying: str) -> bool:
        return underlying in self._assets

    def get_asset_config(self, underlying: str) -> AssetConfig:
        try:
            return self._assets[underlying]
        except KeyError:
            raise InvalidAsset(underlying) from None

    def underlyings(self) -> list[str]:
        return list(self._assets)
