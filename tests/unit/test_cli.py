"""Unit tests for CLI argument parsing and output formatting."""
from __future__ import annotations

from mirai_liquidation.cli import build_parser, format_chance
from mirai_liquidation.models import LiquidationChance

WAD = 10**18


class TestBuildParser:
    def test_check_command(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["check", "0xv", "0xu", "0xc"])
        assert args.command == "check"
        assert (args.violator, args.underlying, args.collateral) == (
            "0xv",
            "0xu",
            "0xc",
        )
        assert args.liquidator is None

    def test_check_with_liquidator(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["check", "0xv", "0xu", "0xc", "--liquidator", "0xl"])
        assert args.liquidator == "0xl"

    def test_scan_command(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["scan"])
        assert args.command == "scan"

    def test_monitor_command_default_interval(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["monitor"])
        assert args.command == "monitor"
        assert args.interval is None

    def test_monitor_command_custom_interval(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["monitor", "10"])
        assert args.interval == 10

    def test_global_flags(self) -> None:
        parser = build_parser()
        args = parser.parse_args(
            ["--config", "/tmp/c.yaml", "--log-level", "DEBUG", "scan"]
        )
        assert args.config == "/tmp/c.yaml"
        assert args.log_level == "DEBUG"

    def test_no_command(self) -> None:
        parser = build_parser()
        args = parser.parse_args([])
        assert args.command is None


class TestFormatChance:
    def test_no_opportunity(self) -> None:
        text = format_chance(LiquidationChance(health_factor=2 * WAD))
        assert "No liquidation opportunity" in text
        assert "2.0000" in text

    def test_opportunity(self) -> None:
        chance = LiquidationChance(
            repay_amount=100,
            yield_amount=55,
            health_factor=9 * 10**17,
            base_discount=10**17,
            discount=12 * 10**16,
            conversion_rate=55 * 10**16,
        )
        text = format_chance(chance)
        assert "Repay amount:    100" in text
        assert "Yield amount:    55" in text
        assert "12.0000%" in text
