"""Liquidation evaluator — health scoring, discount pricing and execution.

All arithmetic is integer 1e18 fixed point, rounding down, so results are
reproducible bit for bit across calls over the same state.
"""
from __future__ import annotations

import logging

from .config import ProtocolConstants
from .errors import (
    ExcessiveRepay,
    InsufficientYield,
    InvalidAsset,
    LiquidatorUnhealthy,
    NotInViolation,
    SelfLiquidation,
)
from .interfaces import AccountLedger, AssetRegistry, PriceOracle
from .models import AssetConfig, LiquidationChance, LiquidationEvent, LiquidityStatus
from .wad import MAX_UINT, WAD, decimals_scaler, from_wad, value_of

logger = logging.getLogger(__name__)

MAX_HEALTH_FACTOR = MAX_UINT


def health_factor(status: LiquidityStatus) -> int:
    """collateral / liability, or ``MAX_HEALTH_FACTOR`` with no liability."""
    if status.liability_value == 0:
        return MAX_HEALTH_FACTOR
    return status.collateral_value * WAD // status.liability_value


class LiquidationEvaluator:
    """Decide whether a violator can be liquidated and price the trade."""

    def __init__(
        self,
        ledger: AccountLedger,
        registry: AssetRegistry,
        oracle: PriceOracle,
        constants: ProtocolConstants | None = None,
    ) -> None:
        self._ledger = ledger
        self._registry = registry
        self._oracle = oracle
        self._constants = constants or ProtocolConstants()

    @property
    def constants(self) -> ProtocolConstants:
        return self._constants

    # ------------------------------------------------------------------
    # Liquidity
    # ------------------------------------------------------------------

    def _price(self, underlying: str) -> int:
        return self._oracle.get_price(underlying).twap

    def compute_liquidity(self, account: str) -> LiquidityStatus:
        """Aggregate risk-adjusted collateral and liability over entered markets."""
        collateral_value = 0
        liability_value = 0
        num_borrows = 0
        borrow_isolated = False

        for underlying in self._ledger.entered_markets(account):
            asset = self._registry.get_asset_config(underlying)
            balance = self._ledger.balance_of(account, underlying)
            owed = self._ledger.debt_of(account, underlying)
            if balance == 0 and owed == 0:
                continue

            price = self._price(underlying)

            if balance and asset.collateral_factor:
                value = value_of(balance, asset.decimals, price)
                collateral_value += value * asset.collateral_factor // WAD

            if owed:
                num_borrows += 1
                borrow_isolated = borrow_isolated or asset.borrow_isolated
                value = value_of(owed, asset.decimals, price)
                # Liabilities round up.
                liability_value += -(-value * WAD // asset.borrow_factor)

        return LiquidityStatus(
            collateral_value=collateral_value,
            liability_value=liability_value,
            num_borrows=num_borrows,
            borrow_isolated=borrow_isolated,
        )

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    def compute_discount(self, liquidator: str, health: int) -> tuple[int, int]:
        """Return ``(base_discount, discount)`` for a violation at ``health``.

        The base discount grows linearly as health drops below 1, capped at
        ``maximum_discount``. Liquidators with tracked average liquidity get
        a booster of ``discount_booster_slope`` times the base discount,
        capped at ``maximum_booster_discount``.
        """
        c = self._constants
        base_discount = min(WAD - health, c.maximum_discount)

        if self._ledger.average_liquidity(liquidator) <= 0:
            return base_discount, base_discount

        booster = base_discount * c.discount_booster_slope // WAD
        booster = min(booster, c.maximum_booster_discount)
        return base_discount, base_discount + booster

    def _conversion_rate(
        self, underlying: AssetConfig, collateral: AssetConfig, discount: int
    ) -> int:
        """Collateral units (1e18) received per unit of underlying repaid."""
        num = self._price(underlying.underlying) * decimals_scaler(underlying.decimals)
        den = self._price(collateral.underlying) * decimals_scaler(collateral.decimals)
        return num * (WAD + discount) // den

    def _max_repay(
        self,
        status: LiquidityStatus,
        underlying: AssetConfig,
        collateral: AssetConfig,
        discount: int,
    ) -> int | None:
        """Repay (underlying units) restoring the target health; None if unbounded."""
        target = self._constants.target_health_factor
        numerator = target * status.liability_value // WAD - status.collateral_value
        if numerator <= 0:
            return 0

        borrow_adj = target * WAD // underlying.borrow_factor
        collateral_adj = (WAD + discount) * collateral.collateral_factor // WAD
        if borrow_adj <= collateral_adj:
            return None

        repay_value = numerator * WAD // (borrow_adj - collateral_adj)
        unit_value = self._price(underlying.underlying) * decimals_scaler(
            underlying.decimals
        )
        return repay_value * WAD // unit_value

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def _resolve_assets(
        self, underlying: str, collateral: str
    ) -> tuple[AssetConfig, AssetConfig]:
        underlying_cfg = self._registry.get_asset_config(underlying)
        collateral_cfg = self._registry.get_asset_config(collateral)
        if collateral_cfg.collateral_factor == 0:
            raise InvalidAsset(collateral, "not usable as collateral")
        return underlying_cfg, collateral_cfg

    def check_liquidation(
        self, liquidator: str, violator: str, underlying: str, collateral: str
    ) -> LiquidationChance:
        """Evaluate a liquidation of ``violator``'s ``underlying`` debt.

        Returns a zero-repay chance when the violator is healthy or has
        nothing to repay or seize.

        Raises:
            SelfLiquidation: liquidator and violator are the same account.
            InvalidAsset: either asset is not activated, or ``collateral``
                cannot be used as collateral.
            PriceUnavailable: the oracle has no price for a required asset.
        """
        if liquidator == violator:
            raise SelfLiquidation(f"Account {violator} cannot liquidate itself")

        underlying_cfg, collateral_cfg = self._resolve_assets(underlying, collateral)

        status = self.compute_liquidity(violator)
        health = health_factor(status)
        if health >= WAD:
            return LiquidationChance(health_factor=health)

        base_discount, discount = self.compute_discount(liquidator, health)
        conversion_rate = self._conversion_rate(underlying_cfg, collateral_cfg, discount)

        owed = self._ledger.debt_of(violator, underlying)
        repay = self._max_repay(status, underlying_cfg, collateral_cfg, discount)
        repay = owed if repay is None else min(repay, owed)

        yield_amount = repay * conversion_rate // WAD
        collateral_balance = self._ledger.balance_of(violator, collateral)
        if yield_amount > collateral_balance:
            repay = collateral_balance * WAD // conversion_rate
            yield_amount = repay * conversion_rate // WAD

        if repay == 0:
            return LiquidationChance(health_factor=health)

        return LiquidationChance(
            repay_amount=repay,
            yield_amount=yield_amount,
            health_factor=health,
            base_discount=base_discount,
            discount=discount,
            conversion_rate=conversion_rate,
        )

    def liquidate(
        self,
        liquidator: str,
        violator: str,
        underlying: str,
        collateral: str,
        repay_amount: int,
        min_yield_amount: int,
    ) -> LiquidationEvent:
        """Execute a liquidation against freshly recomputed state.

        The liquidator takes over ``repay_amount`` of the violator's debt
        plus the reserves fee and receives the discounted collateral.
        """
        if repay_amount <= 0:
            raise ValueError(f"Repay amount must be positive, got {repay_amount}")
        if min_yield_amount < 0:
            raise ValueError(
                f"Minimum yield must not be negative, got {min_yield_amount}"
            )

        chance = self.check_liquidation(liquidator, violator, underlying, collateral)

        if chance.health_factor >= WAD:
            raise NotInViolation(violator, chance.health_factor)

        if repay_amount > chance.repay_amount:
            self._check_full_repay(chance, violator, underlying, collateral, repay_amount)

        yield_amount = repay_amount * chance.conversion_rate // WAD
        if yield_amount < min_yield_amount:
            raise InsufficientYield(yield_amount, min_yield_amount)

        fee = repay_amount * self._constants.underlying_reserves_fee // WAD

        with self._ledger.atomic():
            self._ledger.transfer_debt(
                underlying, violator, liquidator, repay_amount, fee=fee
            )
            self._ledger.transfer_balance(collateral, violator, liquidator, yield_amount)
            self._ledger.enter_market(liquidator, collateral)

            liquidator_health = health_factor(self.compute_liquidity(liquidator))
            if liquidator_health < WAD:
                raise LiquidatorUnhealthy(liquidator, liquidator_health)

            event = LiquidationEvent(
                liquidator=liquidator,
                violator=violator,
                underlying=underlying,
                collateral=collateral,
                repay=repay_amount,
                yield_amount=yield_amount,
                health_score=chance.health_factor,
                base_discount=chance.base_discount,
                discount=chance.discount,
            )
            self._ledger.record(event)

        logger.info(
            "Liquidated %s by %s: repay %d of %s, yield %d of %s "
            "(health %.4f, discount %.4f)",
            violator,
            liquidator,
            repay_amount,
            underlying,
            yield_amount,
            collateral,
            from_wad(chance.health_factor),
            from_wad(chance.discount),
        )
        return event

    def _check_full_repay(
        self,
        chance: LiquidationChance,
        violator: str,
        underlying: str,
        collateral: str,
        repay_amount: int,
    ) -> None:
        """Allow a repay above the bound only if it clears the whole debt."""
        owed = self._ledger.debt_of(violator, underlying)
        if repay_amount != owed or not chance.conversion_rate:
            raise ExcessiveRepay(repay_amount, chance.repay_amount)
        yield_amount = repay_amount * chance.conversion_rate // WAD
        if yield_amount > self._ledger.balance_of(violator, collateral):
            raise ExcessiveRepay(repay_amount, chance.repay_amount)
