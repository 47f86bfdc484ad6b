"""Command-line interface for the lending market client."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace

from .client import CometClient
from .config import AppConfig, load_config, load_registry
from .health import format_health_factor
from .logging_setup import configure_logging
from .models import Denomination, RateSample
from .services import AccountService, MarketService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="comet-client",
        description="Inspect lending markets: endpoints, rates and positions",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root, optional)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("networks", help="List registered chains and markets")

    for name, help_text in (
        ("resolve", "Show the endpoints a client would use"),
        ("rates", "Show utilization and supply/borrow rates"),
        ("position", "Assess an account's position"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--chain", type=int, default=None, help="Chain id (overrides config)")
        p.add_argument("--market", default=None, help="Market name (overrides config)")
        if name == "rates":
            p.add_argument(
                "--utilization",
                type=int,
                default=None,
                help="Raw utilization (1e18 = 100%%) to quote rates at",
            )
        if name == "position":
            p.add_argument("account", help="Account address")
            p.add_argument(
                "--denomination",
                default="usd",
                choices=[d.value for d in Denomination],
                help="Unit of the reported values (default: usd)",
            )

    return parser


def _load(args: argparse.Namespace) -> AppConfig:
    try:
        config = load_config(args.config)
    except FileNotFoundError:
        if args.config is not None:
            raise
        logger.debug("No config.yaml found, using defaults")
        config = AppConfig()
    client_cfg = config.client
    if getattr(args, "chain", None) is not None:
        # Another chain: the configured market and addresses no longer apply
        client_cfg = replace(
            client_cfg,
            chain_id=args.chain,
            ledger_address=None,
            rewards_address=None,
            configurator_address=None,
        )
    if getattr(args, "market", None):
        client_cfg = replace(client_cfg, market=args.market)
    return replace(config, client=client_cfg)


def _print_networks(config: AppConfig) -> int:
    registry = load_registry(config.registry_path)
    for chain_id in registry.chain_ids():
        network = registry.get_network(chain_id)
        print(f"{chain_id:>8}  {network.name}")
        for market in network.markets:
            print(f"          {market.name:<8} {market.ledger_address}")
    return 0


def _percent(value) -> str:
    # Compounded yields on extreme rates run to millions of digits
    return f"{value:.4f}" if value.adjusted() < 15 else f"{value:.4e}"


def _print_rate(label: str, sample: RateSample) -> None:
    print(f"{label:<7} APR {_percent(sample.apr)}%  APY {_percent(sample.apy)}%")


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command; returns the process exit code."""
    configure_logging(args.log_level)
    config = _load(args)

    if args.command == "networks":
        return _print_networks(config)

    client = CometClient.from_config(config)
    state = client.state

    if args.command == "resolve":
        print(f"chain:        {state.chain_id}")
        print(f"market:       {state.active_market or '-'}")
        print(f"ledger:       {state.ledger_address or '-'}")
        print(f"rewards:      {state.rewards_address or '-'}")
        print(f"configurator: {state.configurator_address or '-'}")
        return 0 if state.is_initialized else 1

    if args.command == "rates":
        market = MarketService(client)
        if args.utilization is None:
            result = await market.refresh_rates()
            if not result.ok:
                logger.error("Could not read rates: %s", result.error)
                return 1
            snapshot = result.unwrap()
            print(f"{state.active_market or state.ledger_address} on chain {state.chain_id}")
            print(f"Utilization {snapshot.utilization.percent:.2f}%")
            _print_rate("Supply", snapshot.supply)
            _print_rate("Borrow", snapshot.borrow)
            return 0

        supply, borrow = await asyncio.gather(
            market.get_supply_rate(args.utilization),
            market.get_borrow_rate(args.utilization),
        )
        for r in (supply, borrow):
            if not r.ok:
                logger.error("Could not read rates: %s", r.error)
                return 1
        _print_rate("Supply", supply.unwrap())
        _print_rate("Borrow", borrow.unwrap())
        return 0

    if args.command == "position":
        account = AccountService(client, config.health)
        result = await account.assess_position(args.account, Denomination(args.denomination))
        if not result.ok:
            logger.error("Could not assess position: %s", result.error)
            return 1
        a = result.unwrap()
        unit = "USD" if a.denomination is Denomination.USD else "base"
        print(f"Supplied:      {a.supplied_value:.2f} {unit}")
        print(f"Borrowed:      {a.borrowed_value:.2f} {unit}")
        print(f"Collateral:    {a.collateral_value:.2f} {unit}")
        print(f"Health factor: {format_health_factor(a.health_factor)} ({a.status.value})")
        if a.is_collateralized is not None:
            print(f"Collateralized (ledger): {'yes' if a.is_collateralized else 'no'}")
        return 0

    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
