"""Asset registry protocol — activated markets and their risk config."""
from typing import Protocol

from ..models import AssetConfig


class AssetRegistry(Protocol):
    """Abstract interface resolving asset configuration per underlying."""

    def get_asset_config(self, underlying: str) -> AssetConfig: ...

    def is_activated(self, underlying: str) -> bool: ...
