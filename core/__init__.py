"""
core - Core utilities and models for swaplens.

This package contains:
- constants.py: Enums, endpoints and fixed thresholds
- exceptions.py: Typed exceptions with error codes
- models.py: Reserve and venue-quote value objects
- math.py: Decimal unit conversions and tick math (no float)
- validators.py: Address validation
- time.py: Millisecond clock helpers
- logging.py: Structured JSON logging
"""

from core.constants import PoolKind, VenueId
from core.exceptions import (
    AccountNotFoundError,
    DecodeFailure,
    ErrorCode,
    InfraError,
    InvalidAddressError,
    NotFoundError,
    RPCError,
    SwaplensError,
    UnresolvedPairError,
    ValidationError,
    VenueQuoteError,
)
from core.logging import get_logger, setup_logging
from core.models import (
    ArbitrageOpportunity,
    ClmmWindow,
    FeeSchedule,
    PoolReserves,
    VaultInfo,
    VenueComparison,
    VenueQuote,
)

__all__ = [
    # Constants
    "PoolKind",
    "VenueId",
    # Exceptions
    "AccountNotFoundError",
    "DecodeFailure",
    "ErrorCode",
    "InfraError",
    "InvalidAddressError",
    "NotFoundError",
    "RPCError",
    "SwaplensError",
    "UnresolvedPairError",
    "ValidationError",
    "VenueQuoteError",
    # Models
    "ArbitrageOpportunity",
    "ClmmWindow",
    "FeeSchedule",
    "PoolReserves",
    "VaultInfo",
    "VenueComparison",
    "VenueQuote",
    # Logging
    "get_logger",
    "setup_logging",
]
