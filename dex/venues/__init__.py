"""
dex/venues/ - Venue quote adapters and cross-venue comparison.

Adapters:
- jupiter: Jupiter aggregator (lite API)
- raydium: Raydium compute API
- orca: Orca Whirlpools
- meteora: Meteora dynamic AMM
"""

from dex.venues.aggregator import (
    VenueAggregator,
    calculate_efficiencies,
    compare_venues,
    default_adapters,
    fetch_all_venue_quotes,
    find_arbitrage_opportunities,
    find_best_quote,
    get_aggregator,
)
from dex.venues.base import VenueAdapter
from dex.venues.jupiter import JupiterAdapter
from dex.venues.meteora import MeteoraAdapter
from dex.venues.orca import OrcaAdapter
from dex.venues.raydium import RaydiumAdapter

__all__ = [
    "JupiterAdapter",
    "MeteoraAdapter",
    "OrcaAdapter",
    "RaydiumAdapter",
    "VenueAdapter",
    "VenueAggregator",
    "calculate_efficiencies",
    "compare_venues",
    "default_adapters",
    "fetch_all_venue_quotes",
    "find_arbitrage_opportunities",
    "find_best_quote",
    "get_aggregator",
]
