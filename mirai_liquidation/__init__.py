"""Liquidation health scoring and discount pricing for Mirai lending markets."""
from .errors import (
    ExcessiveRepay,
    InsufficientYield,
    InvalidAsset,
    LiquidationError,
    LiquidatorUnhealthy,
    NotInViolation,
    PriceUnavailable,
    SelfLiquidation,
)
from .ledger import InMemoryLedger
from .liquidation import LiquidationEvaluator
from .models import LiquidationChance, LiquidationEvent
from .registry import MarketRegistry

__all__ = [
    "ExcessiveRepay",
    "InMemoryLedger",
    "InsufficientYield",
    "InvalidAsset",
    "LiquidationChance",
    "LiquidationError",
    "LiquidationEvaluator",
    "LiquidationEvent",
    "LiquidatorUnhealthy",
    "MarketRegistry",
    "NotInViolation",
    "PriceUnavailable",
    "SelfLiquidation",
]
