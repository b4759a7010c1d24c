"""Command-line interface for the Mirai liquidation evaluator."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .config import AppConfig, load_config
from .errors import LiquidationError
from .logging_setup import configure_logging
from .models import LiquidationChance
from .services import LiquidationScanner
from .wad import from_wad


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="mirai-liquidation",
        description="Evaluate and scan liquidations on a Mirai lending market",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in working directory)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    check_parser = sub.add_parser("check", help="Price a single liquidation")
    check_parser.add_argument("violator", help="Account to liquidate")
    check_parser.add_argument("underlying", help="Debt asset to repay")
    check_parser.add_argument("collateral", help="Collateral asset to seize")
    check_parser.add_argument(
        "--liquidator",
        default=None,
        help="Liquidator account (default: scanner.liquidator from config)",
    )

    sub.add_parser("scan", help="Single scan of watched accounts with alerts")

    monitor_parser = sub.add_parser("monitor", help="Continuous scanning loop")
    monitor_parser.add_argument(
        "interval",
        nargs="?",
        type=int,
        default=None,
        help="Check interval in minutes (overrides config)",
    )

    return parser


def format_chance(chance: LiquidationChance) -> str:
    """Render a liquidation chance for terminal output."""
    if not chance.is_opportunity:
        return (
            f"No liquidation opportunity "
            f"(health factor {from_wad(chance.health_factor):.4f})"
        )
    return "\n".join(
        [
            f"Repay amount:    {chance.repay_amount}",
            f"Yield amount:    {chance.yield_amount}",
            f"Health factor:   {from_wad(chance.health_factor):.6f}",
            f"Base discount:   {from_wad(chance.base_discount) * 100:.4f}%",
            f"Discount:        {from_wad(chance.discount) * 100:.4f}%",
            f"Conversion rate: {from_wad(chance.conversion_rate):.8f}",
        ]
    )


async def _check(config: AppConfig, args: argparse.Namespace) -> None:
    scanner = LiquidationScanner(config, notifiers=[])
    oracle = await scanner.load_prices()
    evaluator = scanner.evaluator(scanner.load_ledger(), oracle)
    liquidator = args.liquidator or config.scanner.liquidator
    try:
        chance = evaluator.check_liquidation(
            liquidator, args.violator, args.underlying, args.collateral
        )
    except LiquidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    print(format_chance(chance))


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "check":
        await _check(config, args)
        return

    scanner = LiquidationScanner(config)
    if args.command == "scan":
        await scanner.check_and_alert()
    elif args.command == "monitor":
        await scanner.run_continuous(args.interval)
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    asyncio.run(_run(args))
