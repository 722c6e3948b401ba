#!/usr/bin/env python3
"""
run_quote.py - CLI entrypoint for reserve lookups and venue comparison.

Usage:
    python run_quote.py resolve --pool-id 58oQChx4yWmvKdwLLZzBi4ChoCc2fqCUWBkwMihLYQo2
    python run_quote.py resolve --mint-a SOL --mint-b USDC
    python run_quote.py compare SOL USDC 1.5
"""

import asyncio
import json
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

import click

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from chains.providers import close_client_cache
from core.constants import COMMON_TOKENS
from core.exceptions import SwaplensError
from core.logging import get_logger, set_global_context, setup_logging
from dex.reserves.resolver import get_resolver
from dex.venues.aggregator import get_aggregator

logger = get_logger("swaplens.cli")

__version__ = "0.1.0"


def resolve_mint(value: str | None) -> str | None:
    """Accept a COMMON_TOKENS symbol (case-insensitive) or a raw mint."""
    if value is None:
        return None
    return COMMON_TOKENS.get(value.upper(), value)


def emit(payload: dict) -> None:
    click.echo(json.dumps(payload, indent=2))


@click.group()
@click.option(
    "--log-level",
    "-l",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=True,
    help="Use JSON log format",
)
def cli(log_level: str, json_logs: bool) -> None:
    """swaplens: read-only swap estimation for Solana pools and venues."""
    setup_logging(level=log_level, json_output=json_logs)
    set_global_context(service="swaplens", version=__version__)


@cli.command()
@click.option("--pool-id", "-p", default=None, help="Pool account address")
@click.option("--mint-a", "-a", default=None, help="First asset (mint or symbol)")
@click.option("--mint-b", "-b", default=None, help="Second asset (mint or symbol)")
@click.option("--rpc-url", default=None, help="Ledger RPC endpoint for this call")
def resolve(pool_id: str | None, mint_a: str | None, mint_b: str | None, rpc_url: str | None) -> None:
    """Resolve pool reserves by pool id or asset pair."""

    async def run() -> dict:
        resolver = get_resolver()
        try:
            reserves = await resolver.resolve(
                pool_id=pool_id,
                asset_a=resolve_mint(mint_a),
                asset_b=resolve_mint(mint_b),
                rpc_url=rpc_url,
            )
        finally:
            await resolver.registry.close()
            await close_client_cache()
        return reserves.to_dict()

    try:
        emit(asyncio.run(run()))
    except SwaplensError as e:
        logger.error(f"Reserve resolution failed: {e}", extra={"context": {"code": e.code.value}})
        click.echo(str(e), err=True)
        sys.exit(1)


@cli.command()
@click.argument("input_mint")
@click.argument("output_mint")
@click.argument("amount")
def compare(input_mint: str, output_mint: str, amount: str) -> None:
    """Compare quotes for AMOUNT of INPUT_MINT across all venues."""
    try:
        value = Decimal(amount)
    except InvalidOperation:
        raise click.BadParameter(f"not a number: {amount}", param_hint="AMOUNT")
    if not value.is_finite() or value <= 0:
        raise click.BadParameter("must be a positive number", param_hint="AMOUNT")

    async def run() -> dict:
        aggregator = get_aggregator()
        try:
            comparison = await aggregator.compare_venues(
                resolve_mint(input_mint),
                resolve_mint(output_mint),
                value,
            )
        finally:
            await aggregator.close()
        return comparison.to_dict()

    emit(asyncio.run(run()))


if __name__ == "__main__":
    cli()
