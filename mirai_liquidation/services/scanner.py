"""Liquidation scanning — finds the best opportunity per watched account."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from ..config import AppConfig
from ..errors import LiquidationError
from ..interfaces import AccountLedger, Notifier, PriceOracle
from ..ledger import InMemoryLedger, load_state
from ..liquidation import LiquidationEvaluator, health_factor
from ..models import Opportunity
from ..notifications import TelegramNotifier
from ..oracles import PriceSnapshot, PythOracle
from ..registry import MarketRegistry
from ..wad import WAD, from_wad, value_of

logger = logging.getLogger(__name__)


class LiquidationScanner:
    """Orchestrates liquidation checks and alerting across watched accounts."""

    def __init__(
        self, config: AppConfig, notifiers: list[Notifier] | None = None
    ) -> None:
        self._config = config
        self._registry = MarketRegistry.from_config(config.assets)
        self._liquidator = config.scanner.liquidator

        self._pyth: PythOracle | None = None
        if config.price_oracle.provider == "pyth":
            self._pyth = PythOracle(config.price_oracle.pyth, config.assets)

        if notifiers is None:
            notifiers = []
            if config.notifications.telegram.enabled:
                notifiers.append(TelegramNotifier(config.notifications.telegram))
        self._notifiers = notifiers

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    async def load_prices(self) -> PriceSnapshot:
        if self._pyth is not None:
            return await self._pyth.snapshot()
        return PriceSnapshot.from_prices(
            self._config.price_oracle.static, self._config.assets
        )

    def load_ledger(self) -> InMemoryLedger:
        return load_state(self._config.scanner.state_file)

    def evaluator(
        self, ledger: AccountLedger, oracle: PriceOracle
    ) -> LiquidationEvaluator:
        return LiquidationEvaluator(
            ledger, self._registry, oracle, self._config.protocol
        )

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def _best_for(
        self,
        evaluator: LiquidationEvaluator,
        ledger: AccountLedger,
        oracle: PriceOracle,
        violator: str,
    ) -> Opportunity | None:
        markets = ledger.entered_markets(violator)
        borrowed = [u for u in markets if ledger.debt_of(violator, u) > 0]
        collaterals = [
            c
            for c in markets
            if ledger.balance_of(violator, c) > 0
            and self._registry.get_asset_config(c).collateral_factor > 0
        ]

        best: Opportunity | None = None
        for underlying in borrowed:
            for collateral in collaterals:
                chance = evaluator.check_liquidation(
                    self._liquidator, violator, underlying, collateral
                )
                if not chance.is_opportunity:
                    continue
                asset = self._registry.get_asset_config(collateral)
                yield_value = value_of(
                    chance.yield_amount, asset.decimals, oracle.get_price(collateral).twap
                )
                if best is None or yield_value > best.yield_value:
                    best = Opportunity(
                        violator=violator,
                        underlying=underlying,
                        collateral=collateral,
                        chance=chance,
                        yield_value=yield_value,
                    )
        return best

    def scan(self, ledger: AccountLedger, oracle: PriceOracle) -> list[Opportunity]:
        """Return the best liquidation for every watched account in violation."""
        evaluator = self.evaluator(ledger, oracle)
        accounts = list(self._config.scanner.accounts)
        if not accounts and isinstance(ledger, InMemoryLedger):
            accounts = ledger.accounts()

        opportunities: list[Opportunity] = []
        for account in accounts:
            if account == self._liquidator:
                continue
            try:
                health = health_factor(evaluator.compute_liquidity(account))
                if health >= WAD:
                    logger.debug("Account %s healthy", account)
                    continue

                logger.info(
                    "Account %s in violation (health %.4f)", account, from_wad(health)
                )
                best = self._best_for(evaluator, ledger, oracle, account)
            except LiquidationError as e:
                logger.warning("Skipping account %s: %s", account, e)
                continue

            if best is not None:
                opportunities.append(best)

        opportunities.sort(key=lambda o: o.yield_value, reverse=True)
        return opportunities

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    @staticmethod
    def _now_str() -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

    def _symbol(self, underlying: str) -> str:
        return self._registry.get_asset_config(underlying).symbol

    def _build_alert(self, opportunity: Opportunity) -> str:
        chance = opportunity.chance
        return (
            f"Liquidation opportunity\n"
            f"\n"
            f"Violator: {opportunity.violator}\n"
            f"Health Factor: {from_wad(chance.health_factor):.4f}\n"
            f"\n"
            f"Repay: {chance.repay_amount} {self._symbol(opportunity.underlying)}\n"
            f"Yield: {chance.yield_amount} {self._symbol(opportunity.collateral)}"
            f" (${from_wad(opportunity.yield_value):,.2f})\n"
            f"Discount: {from_wad(chance.discount) * 100:.2f}%"
            f" (base {from_wad(chance.base_discount) * 100:.2f}%)\n"
            f"\n"
            f"{self._now_str()} UTC"
        )

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    async def _send_alert(self, message: str, subject: str = "") -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_alert(message, subject=subject)
            except Exception as e:
                logger.error("Notifier send_alert failed: %s", e)

    async def check_and_alert(self) -> list[Opportunity]:
        """Scan once and alert on every opportunity found."""
        oracle = await self.load_prices()
        ledger = self.load_ledger()
        opportunities = self.scan(ledger, oracle)

        if not opportunities:
            logger.info("No liquidation opportunities found")

        for opportunity in opportunities:
            logger.info(
                "Opportunity — %s · repay %d %s · yield %d %s · $%.2f",
                opportunity.violator,
                opportunity.chance.repay_amount,
                self._symbol(opportunity.underlying),
                opportunity.chance.yield_amount,
                self._symbol(opportunity.collateral),
                from_wad(opportunity.yield_value),
            )
            await self._send_alert(
                self._build_alert(opportunity), subject="Liquidation opportunity"
            )

        return opportunities

    async def run_continuous(self, check_interval_minutes: int | None = None) -> None:
        """Run continuous scanning loop."""
        interval = check_interval_minutes or self._config.scanner.check_interval_minutes
        logger.info("Starting continuous scanning (every %d minutes)", interval)

        while True:
            try:
                await self.check_and_alert()
                await asyncio.sleep(interval * 60)
            except Exception as e:
                logger.error("Error in scanning loop: %s", e)
                await asyncio.sleep(60)
