# PATH: core/constants.py
"""
Constants for swaplens.

Contains enums, defaults, endpoints and fixed thresholds.
Per-source URLs and timeouts can be overridden in config/sources.yaml;
everything else here is owned by the code and never read from config.
"""

from decimal import Decimal
from enum import Enum
from typing import Final


# =============================================================================
# ENUMS
# =============================================================================

class PoolKind(str, Enum):
    """Which source produced a reserve snapshot."""
    AMM_V4 = "amm_v4"
    CLMM = "clmm"
    REGISTRY = "registry"


class VenueId(str, Enum):
    """Quote venues queried by the aggregator."""
    JUPITER = "jupiter"
    RAYDIUM = "raydium"
    ORCA = "orca"
    METEORA = "meteora"


# =============================================================================
# UNITS
# =============================================================================

# Fallback when an asset is in neither the static table nor the catalog
DEFAULT_DECIMALS: Final[int] = 9

# Seconds to wait before retrying a failed catalog fetch
CATALOG_RETRY_COOLDOWN_S: Final[int] = 60

COMMON_TOKENS: Final[dict[str, str]] = {
    "SOL": "So11111111111111111111111111111111111111112",
    "USDC": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    "USDT": "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",
    "IMG": "znv3FZt2HFAvzYf5LxzVyryh3mBXWuTRRng25gEZAjh",
    "BONK": "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
    "JTO": "jtojtomepa8beP8AuQc6eXt5FriJwfFMwQx2v2f9mCL",
}

KNOWN_TOKEN_DECIMALS: Final[dict[str, int]] = {
    COMMON_TOKENS["SOL"]: 9,
    COMMON_TOKENS["USDC"]: 6,
    COMMON_TOKENS["USDT"]: 6,
    COMMON_TOKENS["BONK"]: 5,
    COMMON_TOKENS["IMG"]: 9,
    COMMON_TOKENS["JTO"]: 9,
}


# =============================================================================
# VENUE AGGREGATION
# =============================================================================

# Pairs with a spread at or below this percentage are not reported
ARBITRAGE_THRESHOLD_PCT: Final[Decimal] = Decimal("0.5")

DEFAULT_SLIPPAGE_BPS: Final[int] = 50


# =============================================================================
# LEDGER
# =============================================================================

DEFAULT_RPC_URL: Final[str] = "https://api.mainnet-beta.solana.com"
RPC_URL_ENV_VAR: Final[str] = "SOLANA_RPC_URL"
RPC_COMMITMENT: Final[str] = "confirmed"

AMM_V4_PROGRAM_ID: Final[str] = "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8"
CLMM_PROGRAM_ID: Final[str] = "CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK"

# CLMM fee rates are expressed in millionths
CLMM_FEE_RATE_DENOMINATOR: Final[Decimal] = Decimal(1_000_000)


# =============================================================================
# EXTERNAL SOURCES (defaults, see config/sources.yaml)
# =============================================================================

RAYDIUM_API_BASE: Final[str] = "https://api-v3.raydium.io"
TOKEN_CATALOG_URL: Final[str] = "https://token.jup.ag/all"

JUPITER_QUOTE_URL: Final[str] = "https://lite-api.jup.ag/swap/v1/quote"
RAYDIUM_QUOTE_URL: Final[str] = "https://transaction-v1.raydium.io/compute/swap-base-in"
ORCA_QUOTE_URL: Final[str] = "https://api.mainnet.orca.so/v1/whirlpool/quote"
METEORA_QUOTE_URL: Final[str] = "https://quote-api.meteora.ag/swap"

# Timeouts (seconds)
RPC_TIMEOUT_S: Final[float] = 30.0
REGISTRY_TIMEOUT_S: Final[float] = 5.0
CATALOG_TIMEOUT_S: Final[float] = 10.0
VENUE_TIMEOUT_S: Final[float] = 10.0
