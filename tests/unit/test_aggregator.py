"""
tests/unit/test_aggregator.py - Tests for dex/venues/aggregator.py

Best-quote selection, efficiency annotation, arbitrage detection and the
never-raises comparison contract.
"""

from decimal import Decimal

import httpx
import pytest

from core.models import VenueQuote
from dex.venues.aggregator import (
    VenueAggregator,
    calculate_efficiencies,
    find_arbitrage_opportunities,
    find_best_quote,
)
from dex.venues.jupiter import JupiterAdapter
from dex.venues.meteora import MeteoraAdapter
from dex.venues.orca import OrcaAdapter
from dex.venues.raydium import RaydiumAdapter
from discovery.catalog import TokenCatalog

IN_MINT = "InMint1111111111111111111111111111111111111"
OUT_MINT = "OutMint111111111111111111111111111111111111"


def q(venue: str, out: str, in_amount: str = "1") -> VenueQuote:
    return VenueQuote(venue_id=venue, in_amount=Decimal(in_amount), out_amount=Decimal(out))


def dead(venue: str, reason: str = "No quote available") -> VenueQuote:
    return VenueQuote.tombstone(venue, reason)


class StaticAdapter:
    """Adapter stand-in returning a fixed quote."""

    def __init__(self, venue_id: str, result: VenueQuote | Exception):
        self.venue_id = venue_id
        self.result = result
        self.calls = 0

    async def quote(self, input_mint, output_mint, amount):
        self.calls += 1
        return self.result

    async def close(self):
        pass


class TestFindBestQuote:

    def test_max_output_among_valid(self):
        quotes = [q("jupiter", "100"), q("raydium", "101"), dead("orca"), q("meteora", "99")]
        assert find_best_quote(quotes).venue_id == "raydium"

    def test_tombstones_never_win(self):
        tomb = VenueQuote(venue_id="orca", in_amount=Decimal("1"), out_amount=Decimal("500"), error_reason="stale")
        assert find_best_quote([q("jupiter", "100"), tomb]).venue_id == "jupiter"

    def test_all_tombstones_returns_first(self):
        quotes = [dead("jupiter", "timeout"), dead("raydium")]
        best = find_best_quote(quotes)

        assert best is quotes[0]
        assert best.error_reason == "timeout"

    def test_tie_keeps_first(self):
        quotes = [q("jupiter", "100"), q("raydium", "100")]
        assert find_best_quote(quotes).venue_id == "jupiter"

    def test_empty(self):
        assert find_best_quote([]).is_tombstone


class TestEfficiencies:

    def test_relative_to_best(self):
        quotes = [q("jupiter", "100"), q("raydium", "50"), dead("orca")]
        annotated = calculate_efficiencies(quotes, quotes[0])

        assert [a.efficiency_pct for a in annotated] == [Decimal("100"), Decimal("50"), Decimal("0")]
        assert quotes[0].efficiency_pct is None

    def test_skipped_when_best_is_empty(self):
        quotes = [dead("jupiter"), dead("raydium")]
        annotated = calculate_efficiencies(quotes, quotes[0])

        assert all(a.efficiency_pct is None for a in annotated)


class TestArbitrage:

    def test_spread_above_threshold(self):
        """Unit prices 100 and 100.6 give one opportunity at 0.6%."""
        opportunities = find_arbitrage_opportunities([q("jupiter", "100"), q("raydium", "100.6")])

        assert len(opportunities) == 1
        opp = opportunities[0]
        assert opp.spread_pct == Decimal("0.6")
        assert opp.buy_venue_id == "jupiter"
        assert opp.sell_venue_id == "raydium"
        assert opp.buy_price == Decimal("100")
        assert opp.sell_price == Decimal("100.6")
        assert opp.spread == Decimal("0.6")

    def test_spread_below_threshold(self):
        """Unit prices 100 and 100.2 give nothing."""
        assert find_arbitrage_opportunities([q("jupiter", "100"), q("raydium", "100.2")]) == []

    def test_exactly_threshold_excluded(self):
        assert find_arbitrage_opportunities([q("jupiter", "100"), q("raydium", "100.5")]) == []

    def test_buy_side_is_cheaper_venue_regardless_of_order(self):
        opp = find_arbitrage_opportunities([q("jupiter", "102"), q("raydium", "100")])[0]

        assert opp.buy_venue_id == "raydium"
        assert opp.sell_venue_id == "jupiter"

    def test_unit_price_uses_in_amount(self):
        """Same output for different input sizes is a price difference."""
        opportunities = find_arbitrage_opportunities([q("jupiter", "200", "2"), q("raydium", "200", "1.98")])

        assert len(opportunities) == 1
        assert opportunities[0].buy_venue_id == "jupiter"

    def test_profit_estimate_uses_first_quote_input(self):
        opp = find_arbitrage_opportunities([q("jupiter", "300", "3"), q("raydium", "102")])[0]

        # prices 100 and 102; first quote of the pair sold 3 units
        assert opp.profit_estimate == Decimal("6")

    def test_sorted_descending_and_stable(self):
        quotes = [q("a", "100"), q("b", "101"), q("c", "102"), q("d", "101")]
        opportunities = find_arbitrage_opportunities(quotes)
        pairs = [(o.buy_venue_id, o.sell_venue_id) for o in opportunities]

        spreads = [o.spread_pct for o in opportunities]
        assert spreads == sorted(spreads, reverse=True)
        assert pairs[0] == ("a", "c")
        # a/b and a/d share a spread: pair order is kept
        assert pairs.index(("a", "b")) < pairs.index(("a", "d"))

    def test_tombstones_excluded(self):
        quotes = [q("jupiter", "100"), dead("orca"), q("raydium", "100.1")]
        assert find_arbitrage_opportunities(quotes) == []


class TestCompareVenues:

    @pytest.mark.asyncio
    async def test_one_quote_per_venue_even_when_all_fail(self):
        adapters = [StaticAdapter(v, dead(v)) for v in ("jupiter", "raydium", "orca", "meteora")]
        comparison = await VenueAggregator(adapters=adapters).compare_venues(IN_MINT, OUT_MINT, "1")

        assert len(comparison.quotes) == 4
        assert comparison.best_quote.venue_id == "jupiter"
        assert comparison.best_quote.is_tombstone
        assert comparison.arbitrage_opportunities is None

    @pytest.mark.asyncio
    async def test_best_quote_carries_efficiency(self):
        adapters = [
            StaticAdapter("jupiter", q("jupiter", "100")),
            StaticAdapter("raydium", q("raydium", "100.8")),
        ]
        comparison = await VenueAggregator(adapters=adapters).compare_venues(IN_MINT, OUT_MINT, Decimal("1"))

        assert comparison.best_quote.venue_id == "raydium"
        assert comparison.best_quote.efficiency_pct == Decimal("100")
        assert comparison.best_quote in comparison.quotes
        assert len(comparison.arbitrage_opportunities) == 1
        assert comparison.amount == Decimal("1")

    @pytest.mark.asyncio
    async def test_one_venue_times_out(self):
        """Four venues, one times out: one tombstone, best from the rest."""
        catalog = TokenCatalog(static_table={IN_MINT: 6, OUT_MINT: 6}, catalog_url="https://c.test", timeout_seconds=1)

        def serve(body):
            return httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body)))

        def timeout(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        adapters = [
            JupiterAdapter(catalog=catalog, url="https://j.test", timeout_seconds=1,
                           client=serve({"inAmount": "1000000", "outAmount": "150000000"})),
            RaydiumAdapter(catalog=catalog, url="https://r.test", timeout_seconds=1,
                           client=serve({"success": True, "data": {"outputAmount": "151000000"}})),
            OrcaAdapter(catalog=catalog, url="https://o.test", timeout_seconds=1,
                        client=httpx.AsyncClient(transport=httpx.MockTransport(timeout))),
            MeteoraAdapter(catalog=catalog, url="https://m.test", timeout_seconds=1,
                           client=serve({"inAmount": "1000000", "outAmount": "150500000"})),
        ]
        comparison = await VenueAggregator(adapters=adapters).compare_venues(IN_MINT, OUT_MINT, "1.0")

        assert [x.venue_id for x in comparison.quotes] == ["jupiter", "raydium", "orca", "meteora"]
        orca = comparison.quotes[2]
        assert orca.is_tombstone and orca.error_reason
        assert comparison.best_quote.venue_id == "raydium"
        assert comparison.best_quote.out_amount == Decimal("151")
        # 150 vs 151 is 0.67%
        for opp in comparison.arbitrage_opportunities:
            assert "orca" not in (opp.buy_venue_id, opp.sell_venue_id)

    @pytest.mark.asyncio
    async def test_idempotent_against_static_backend(self):
        adapters = [
            StaticAdapter("jupiter", q("jupiter", "100")),
            StaticAdapter("raydium", dead("raydium")),
            StaticAdapter("orca", q("orca", "101")),
        ]
        aggregator = VenueAggregator(adapters=adapters)

        first = await aggregator.compare_venues(IN_MINT, OUT_MINT, "2")
        second = await aggregator.compare_venues(IN_MINT, OUT_MINT, "2")

        assert first.quotes == second.quotes
        assert first.best_quote == second.best_quote
        assert first.arbitrage_opportunities == second.arbitrage_opportunities

    @pytest.mark.asyncio
    async def test_fetch_all_keeps_adapter_order(self):
        adapters = [StaticAdapter("b", q("b", "1")), StaticAdapter("a", q("a", "2"))]
        quotes = await VenueAggregator(adapters=adapters).fetch_all_venue_quotes(IN_MINT, OUT_MINT, "1")

        assert [x.venue_id for x in quotes] == ["b", "a"]
        assert all(a.calls == 1 for a in adapters)

    @pytest.mark.asyncio
    async def test_to_dict_is_json_friendly(self):
        import json

        adapters = [StaticAdapter("jupiter", q("jupiter", "100")), StaticAdapter("orca", dead("orca"))]
        comparison = await VenueAggregator(adapters=adapters).compare_venues(IN_MINT, OUT_MINT, "1")

        payload = json.loads(json.dumps(comparison.to_dict()))
        assert payload["best_quote"]["venue_id"] == "jupiter"
        assert payload["quotes"][1]["error_reason"] == "No quote available"
        assert payload["arbitrage_opportunities"] is None
