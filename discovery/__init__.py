"""
discovery/ - Off-ledger metadata sources.

Modules:
- catalog: Asset decimals (static table, cache, token list)
- registry: Raydium pool registry API client
"""

from discovery.catalog import DecimalCache, TokenCatalog, get_catalog, resolve_scale
from discovery.registry import RaydiumRegistry

__all__ = [
    "DecimalCache",
    "RaydiumRegistry",
    "TokenCatalog",
    "get_catalog",
    "resolve_scale",
]
