"""
dex/venues/aggregator.py - Cross-venue quote comparison.

Flow per comparison:
1. All adapters quote concurrently; the join waits for every venue
2. Best quote: greatest out_amount among rankable quotes
3. Efficiency of each quote relative to the best
4. Arbitrage scan over unordered pairs of rankable quotes

CONTRACT:
- compare_venues() never raises
- quotes has exactly one entry per adapter, in adapter order
- Tombstones never take part in ranking or arbitrage
"""

import asyncio
from dataclasses import replace
from decimal import Decimal
from itertools import combinations
from typing import Optional, Sequence

from core.constants import ARBITRAGE_THRESHOLD_PCT, VenueId
from core.logging import get_logger
from core.math import safe_decimal
from core.models import ArbitrageOpportunity, VenueComparison, VenueQuote
from core.time import now_ms
from dex.venues.base import VenueAdapter
from dex.venues.jupiter import JupiterAdapter
from dex.venues.meteora import MeteoraAdapter
from dex.venues.orca import OrcaAdapter
from dex.venues.raydium import RaydiumAdapter
from discovery.catalog import TokenCatalog

logger = get_logger(__name__)

HUNDRED = Decimal(100)


def default_adapters(catalog: Optional[TokenCatalog] = None) -> list[VenueAdapter]:
    return [
        JupiterAdapter(catalog=catalog),
        RaydiumAdapter(catalog=catalog),
        OrcaAdapter(catalog=catalog),
        MeteoraAdapter(catalog=catalog),
    ]


def find_best_quote(quotes: Sequence[VenueQuote]) -> VenueQuote:
    """
    Quote with the greatest out_amount among rankable quotes.

    Falls back to quotes[0] (keeping its error) when none is rankable. Ties
    keep the earlier quote.
    """
    best: Optional[VenueQuote] = None
    for quote in quotes:
        if quote.is_rankable and (best is None or quote.out_amount > best.out_amount):
            best = quote

    if best is not None:
        return best
    if quotes:
        return quotes[0]
    return VenueQuote.tombstone(VenueId.JUPITER.value, "No valid quotes")


def calculate_efficiencies(quotes: Sequence[VenueQuote], best_quote: VenueQuote) -> list[VenueQuote]:
    """Annotate each quote with out_amount / best.out_amount * 100."""
    if best_quote.out_amount == 0:
        return list(quotes)

    return [
        replace(
            quote,
            efficiency_pct=(
                quote.out_amount / best_quote.out_amount * HUNDRED
                if quote.out_amount > 0
                else Decimal("0")
            ),
        )
        for quote in quotes
    ]


def find_arbitrage_opportunities(
    quotes: Sequence[VenueQuote],
    threshold_pct: Decimal = ARBITRAGE_THRESHOLD_PCT,
) -> list[ArbitrageOpportunity]:
    """
    Venue pairs whose unit prices differ by more than threshold_pct.

    Sorted by spread_pct descending; equal spreads keep pair order.
    """
    valid = [q for q in quotes if q.is_rankable]
    opportunities: list[ArbitrageOpportunity] = []

    for first, second in combinations(valid, 2):
        price_1 = first.unit_price
        price_2 = second.unit_price
        buy_price = min(price_1, price_2)
        sell_price = max(price_1, price_2)
        spread = sell_price - buy_price
        spread_pct = spread / buy_price * HUNDRED

        if spread_pct <= threshold_pct:
            continue

        buy, sell = (second, first) if price_1 > price_2 else (first, second)
        opportunities.append(ArbitrageOpportunity(
            buy_venue_id=buy.venue_id,
            sell_venue_id=sell.venue_id,
            buy_price=buy_price,
            sell_price=sell_price,
            spread=spread,
            spread_pct=spread_pct,
            profit_estimate=spread * first.in_amount,
        ))

    opportunities.sort(key=lambda o: o.spread_pct, reverse=True)
    return opportunities


class VenueAggregator:
    """
    Compares one swap across every configured venue.

    Usage:
        aggregator = VenueAggregator()
        comparison = await aggregator.compare_venues(SOL, USDC, Decimal("1"))
    """

    def __init__(
        self,
        adapters: Optional[Sequence[VenueAdapter]] = None,
        catalog: Optional[TokenCatalog] = None,
    ):
        self.adapters = list(adapters) if adapters is not None else default_adapters(catalog)

    async def fetch_all_venue_quotes(self, input_mint: str, output_mint: str, amount) -> list[VenueQuote]:
        """One quote (or tombstone) per adapter, in adapter order."""
        amount = safe_decimal(amount)
        return list(await asyncio.gather(*(
            adapter.quote(input_mint, output_mint, amount) for adapter in self.adapters
        )))

    async def compare_venues(self, input_mint: str, output_mint: str, amount) -> VenueComparison:
        amount = safe_decimal(amount)
        quotes = await self.fetch_all_venue_quotes(input_mint, output_mint, amount)

        best_quote = find_best_quote(quotes)
        if quotes:
            best_index = next(i for i, q in enumerate(quotes) if q is best_quote)
            quotes = calculate_efficiencies(quotes, best_quote)
            best_quote = quotes[best_index]
        opportunities = find_arbitrage_opportunities(quotes)

        tombstones = [q.venue_id for q in quotes if q.is_tombstone]
        logger.info(
            "Venue comparison complete",
            extra={"context": {
                "input_mint": input_mint,
                "output_mint": output_mint,
                "amount": str(amount),
                "best_venue": best_quote.venue_id,
                "tombstones": tombstones,
                "arbitrage_count": len(opportunities),
            }},
        )

        return VenueComparison(
            input_mint=input_mint,
            output_mint=output_mint,
            amount=amount,
            timestamp_ms=now_ms(),
            quotes=tuple(quotes),
            best_quote=best_quote,
            arbitrage_opportunities=tuple(opportunities) if opportunities else None,
        )

    async def close(self) -> None:
        for adapter in self.adapters:
            await adapter.close()


# Global aggregator instance
_aggregator: Optional[VenueAggregator] = None


def get_aggregator() -> VenueAggregator:
    global _aggregator
    if _aggregator is None:
        _aggregator = VenueAggregator()
    return _aggregator


async def compare_venues(input_mint: str, output_mint: str, amount) -> VenueComparison:
    """Compare venues with the global aggregator."""
    return await get_aggregator().compare_venues(input_mint, output_mint, amount)


async def fetch_all_venue_quotes(input_mint: str, output_mint: str, amount) -> list[VenueQuote]:
    return await get_aggregator().fetch_all_venue_quotes(input_mint, output_mint, amount)
