"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from mirai_liquidation.config import (
    AppConfig,
    NotificationsConfig,
    PriceOracleConfig,
    ProtocolConstants,
    ScannerConfig,
    TelegramConfig,
)
from mirai_liquidation.ledger import InMemoryLedger
from mirai_liquidation.liquidation import LiquidationEvaluator
from mirai_liquidation.oracles import PriceSnapshot
from mirai_liquidation.registry import MarketRegistry

from .factories import ASSETS, ETH, LIQUIDATOR, USD, VIOLATOR, WAD, snapshot


# ---------------------------------------------------------------------------
# Evaluator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def constants() -> ProtocolConstants:
    return ProtocolConstants()


@pytest.fixture()
def registry() -> MarketRegistry:
    return MarketRegistry(ASSETS.values())


@pytest.fixture()
def prices() -> PriceSnapshot:
    return snapshot()


@pytest.fixture()
def ledger() -> InMemoryLedger:
    """Violator: 1 ETH collateral against 1700 USD debt (health ~0.94).

    Liquidator: 10 ETH of its own collateral.
    """
    ledger = InMemoryLedger()
    ledger.enter_market(VIOLATOR, ETH)
    ledger.set_balance(VIOLATOR, ETH, 1 * WAD)
    ledger.set_debt(VIOLATOR, USD, 1700 * WAD)

    ledger.enter_market(LIQUIDATOR, ETH)
    ledger.set_balance(LIQUIDATOR, ETH, 10 * WAD)
    return ledger


@pytest.fixture()
def evaluator(
    ledger: InMemoryLedger,
    registry: MarketRegistry,
    prices: PriceSnapshot,
    constants: ProtocolConstants,
) -> LiquidationEvaluator:
    return LiquidationEvaluator(ledger, registry, prices, constants)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        assets=dict(ASSETS),
        price_oracle=PriceOracleConfig(
            provider="static",
            static={"USD": WAD, "ETH": 2000 * WAD, "USDC": WAD, "JUNK": 3 * WAD},
        ),
        scanner=ScannerConfig(
            liquidator=LIQUIDATOR,
            state_file=str(tmp_path / "state.yaml"),
            accounts=(),
        ),
        notifications=NotificationsConfig(
            telegram=TelegramConfig(
                enabled=True, alert_bot_token="fake-token", chat_id="12345"
            ),
        ),
    )


SAMPLE_YAML = textwrap.dedent("""\
    protocol:
      target_health_factor: 1.25
      maximum_discount: 0.2
      maximum_booster_discount: 0.025
      discount_booster_slope: 2
      underlying_reserves_fee: 0.02
    assets:
      "0xeth":
        symbol: ETH
        decimals: 18
        collateral_factor: 0.8
        borrow_factor: 0.9
        twap_window: 600
      "0xusdc":
        symbol: USDC
        decimals: 6
        collateral_factor: 0.9
        borrow_factor: 0.95
    price_oracle:
      provider: static
      static: {ETH: 2000, USDC: 1}
      pyth:
        hermes_url: "https://hermes.example.com"
        feeds: {ETH: "aaa"}
    scanner:
      liquidator: "0xliquidator"
      state_file: state.yaml
      check_interval_minutes: 2
      accounts: ["0xviolator"]
    notifications:
      telegram:
        enabled: true
        alert_bot_token: "tok1"
        chat_id: "999"
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


SAMPLE_STATE = textwrap.dedent("""\
    accounts:
      "0xviolator":
        balances: {"0xeth": 1000000000000000000}
        debts: {"0xusd": 1700000000000000000000}
        entered_markets: ["0xeth"]
      "0xhealthy":
        balances: {"0xeth": 1000000000000000000}
        debts: {"0xusd": 100000000000000000000}
        entered_markets: ["0xeth"]
      "0xliquidator":
        balances: {"0xeth": 10000000000000000000}
        entered_markets: ["0xeth"]
        average_liquidity: 0
    reserves: {"0xusd": 5}
""")


@pytest.fixture()
def sample_state_path(tmp_path: Path) -> Path:
    state_file = tmp_path / "state.yaml"
    state_file.write_text(SAMPLE_STATE)
    return state_file
