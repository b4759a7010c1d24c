"""Data models — all frozen (immutable).

Amounts are integers in the asset's native units; values, prices and ratios
are integers in 1e18 fixed point.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AssetConfig:
    """Risk configuration of an activated market."""

    underlying: str
    symbol: str
    decimals: int = 18
    collateral_factor: int = 0
    borrow_factor: int = 10**18
    borrow_isolated: bool = False
    twap_window: int = 1800


@dataclass(frozen=True)
class PriceQuote:
    """Time-weighted average price of one asset."""

    twap: int
    twap_period: int


@dataclass(frozen=True)
class LiquidityStatus:
    """Risk-adjusted aggregate position of an account."""

    collateral_value: int
    liability_value: int
    num_borrows: int
    borrow_isolated: bool


@dataclass(frozen=True)
class LiquidationChance:
    """Pricing of one (liquidator, violator, underlying, collateral) tuple.

    ``base_discount``, ``discount`` and ``conversion_rate`` are only set
    when ``repay_amount > 0``.
    """

    repay_amount: int = 0
    yield_amount: int = 0
    health_factor: int = 0
    base_discount: int = 0
    discount: int = 0
    conversion_rate: int = 0

    @property
    def is_opportunity(self) -> bool:
        return self.repay_amount > 0


@dataclass(frozen=True)
class LiquidationEvent:
    """Record of an executed liquidation."""

    liquidator: str
    violator: str
    underlying: str
    collateral: str
    repay: int
    yield_amount: int
    health_score: int
    base_discount: int
    discount: int


@dataclass(frozen=True)
class Opportunity:
    """Best liquidation found for a violator during a scan."""

    violator: str
    underlying: str
    collateral: str
    chance: LiquidationChance
    yield_value: int
