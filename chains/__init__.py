"""
chains/ - Ledger interaction layer.

Modules:
- providers: Solana JSON-RPC provider and endpoint-keyed client cache
- layouts: Fixed-offset decoders for pool, token and mint accounts
"""

from chains.providers import (
    AccountInfo,
    ClientCache,
    RPCResponse,
    RPCStats,
    SolanaRPCProvider,
    clear_client_cache,
    close_client_cache,
    get_endpoint,
    get_provider,
    set_endpoint,
)

__all__ = [
    "AccountInfo",
    "ClientCache",
    "RPCResponse",
    "RPCStats",
    "SolanaRPCProvider",
    "clear_client_cache",
    "close_client_cache",
    "get_endpoint",
    "get_provider",
    "set_endpoint",
]
