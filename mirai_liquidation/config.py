"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .models import AssetConfig
from .wad import WAD, to_wad

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProtocolConstants:
    """Read-only liquidation constants, all in 1e18 fixed point."""

    target_health_factor: int = 125 * 10**16
    maximum_discount: int = 20 * 10**16
    maximum_booster_discount: int = 25 * 10**15
    discount_booster_slope: int = 2 * 10**18
    underlying_reserves_fee: int = 2 * 10**16


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "static"
    static: dict[str, int] = field(default_factory=dict)
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class ScannerConfig:
    liquidator: str = ""
    state_file: str = "state.yaml"
    accounts: tuple[str, ...] = ()
    check_interval_minutes: int = 5


@dataclass(frozen=True)
class TelegramConfig:
    enabled: bool = False
    alert_bot_token: str = ""
    chat_id: str = ""


@dataclass(frozen=True)
class NotificationsConfig:
    telegram: TelegramConfig = field(default_factory=TelegramConfig)


@dataclass(frozen=True)
class AppConfig:
    protocol: ProtocolConstants = field(default_factory=ProtocolConstants)
    assets: dict[str, AssetConfig] = field(default_factory=dict)
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)
    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)

    def symbol_map(self) -> dict[str, str]:
        """Map asset symbol → underlying address."""
        return {a.symbol: a.underlying for a in self.assets.values()}


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_protocol(raw: dict[str, Any]) -> ProtocolConstants:
    defaults = ProtocolConstants()

    def _get(key: str, default: int) -> int:
        return to_wad(raw[key]) if key in raw else default

    return ProtocolConstants(
        target_health_factor=_get(
            "target_health_factor", defaults.target_health_factor
        ),
        maximum_discount=_get("maximum_discount", defaults.maximum_discount),
        maximum_booster_discount=_get(
            "maximum_booster_discount", defaults.maximum_booster_discount
        ),
        discount_booster_slope=_get(
            "discount_booster_slope", defaults.discount_booster_slope
        ),
        underlying_reserves_fee=_get(
            "underlying_reserves_fee", defaults.underlying_reserves_fee
        ),
    )


def _build_assets(raw: dict[str, Any]) -> dict[str, AssetConfig]:
    assets: dict[str, AssetConfig] = {}
    for underlying, cfg in raw.items():
        assets[underlying] = AssetConfig(
            underlying=underlying,
            symbol=str(cfg.get("symbol", underlying)),
            decimals=int(cfg.get("decimals", 18)),
            collateral_factor=to_wad(cfg.get("collateral_factor", 0)),
            borrow_factor=to_wad(cfg.get("borrow_factor", 1)),
            borrow_isolated=bool(cfg.get("borrow_isolated", False)),
            twap_window=int(cfg.get("twap_window", 1800)),
        )
    return assets


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    pyth_raw = raw.get("pyth", {})
    return PriceOracleConfig(
        provider=raw.get("provider", "static"),
        static={k: to_wad(v) for k, v in raw.get("static", {}).items()},
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            feeds=dict(pyth_raw.get("feeds", {})),
        ),
    )


def _build_scanner(raw: dict[str, Any]) -> ScannerConfig:
    return ScannerConfig(
        liquidator=raw.get("liquidator", ""),
        state_file=raw.get("state_file", "state.yaml"),
        accounts=tuple(raw.get("accounts", [])),
        check_interval_minutes=int(raw.get("check_interval_minutes", 5)),
    )


def _build_notifications(raw: dict[str, Any]) -> NotificationsConfig:
    tg = raw.get("telegram") or {}
    return NotificationsConfig(
        telegram=TelegramConfig(
            enabled=bool(tg.get("enabled", False)),
            alert_bot_token=tg.get("alert_bot_token", ""),
            chat_id=str(tg.get("chat_id", "")),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            current working directory.
    """
    load_dotenv()

    if config_path is None:
        config_path = Path.cwd() / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        protocol=_build_protocol(raw.get("protocol", {})),
        assets=_build_assets(raw.get("assets", {})),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {})),
        scanner=_build_scanner(raw.get("scanner", {})),
        notifications=_build_notifications(raw.get("notifications", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.assets:
        raise ValueError("At least one asset must be configured")

    for asset in cfg.assets.values():
        if asset.borrow_factor <= 0 or asset.borrow_factor > WAD:
            raise ValueError(
                f"Asset '{asset.symbol}' borrow_factor must be in (0, 1]"
            )
        if not 0 <= asset.collateral_factor <= WAD:
            raise ValueError(
                f"Asset '{asset.symbol}' collateral_factor must be in [0, 1]"
            )
        if not 0 <= asset.decimals <= 18:
            raise ValueError(f"Asset '{asset.symbol}' decimals must be in [0, 18]")

    constants = cfg.protocol
    if constants.target_health_factor <= WAD:
        raise ValueError("target_health_factor must be greater than 1")
    if not 0 <= constants.maximum_discount < WAD:
        raise ValueError("maximum_discount must be in [0, 1)")
    if constants.maximum_booster_discount < 0:
        raise ValueError("maximum_booster_discount must not be negative")

    symbols = cfg.symbol_map()
    if cfg.price_oracle.provider not in ("static", "pyth"):
        raise ValueError(
            f"Unknown price oracle provider '{cfg.price_oracle.provider}'"
        )
    priced = (
        cfg.price_oracle.static
        if cfg.price_oracle.provider == "static"
        else cfg.price_oracle.pyth.feeds
    )
    for symbol in priced:
        if symbol not in symbols:
            raise ValueError(f"Price configured for unknown asset '{symbol}'")

    if cfg.scanner.accounts and not cfg.scanner.liquidator:
        raise ValueError("Scanner accounts configured without a liquidator")
