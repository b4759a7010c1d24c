"""Protocol interfaces for the liquidation evaluator's collaborators."""
from .asset_registry import AssetRegistry
from .ledger import AccountLedger
from .notifier import Notifier
from .price_oracle import PriceOracle

__all__ = ["AccountLedger", "AssetRegistry", "Notifier", "PriceOracle"]
