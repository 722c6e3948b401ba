"""
dex/reserves/ - Pool reserve resolution.

Modules:
- decoders: AMM v4, CLMM and registry reserve sources
- resolver: Pool id derivation and the ordered fallback chain
"""

from dex.reserves.decoders import (
    AmmV4Decoder,
    ClmmDecoder,
    DecodeContext,
    RegistryDecoder,
    ReserveDecoder,
    default_decoders,
)
from dex.reserves.resolver import (
    MintLiquidity,
    ReserveResolver,
    get_resolver,
    reserves_for_mint,
    resolve_reserves,
)

__all__ = [
    "AmmV4Decoder",
    "ClmmDecoder",
    "DecodeContext",
    "MintLiquidity",
    "RegistryDecoder",
    "ReserveDecoder",
    "ReserveResolver",
    "default_decoders",
    "get_resolver",
    "reserves_for_mint",
    "resolve_reserves",
]
