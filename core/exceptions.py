# PATH: core/exceptions.py
"""
Typed exceptions for swaplens.

Every error carries an ErrorCode so callers (and logs) can tell an
exhausted fallback chain apart from an infra failure or bad input.
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Error codes surfaced in exceptions, logs and tombstone quotes."""
    # Infrastructure
    INFRA_RPC_ERROR = "INFRA_RPC_ERROR"
    INFRA_TIMEOUT = "INFRA_TIMEOUT"
    INFRA_HTTP_ERROR = "INFRA_HTTP_ERROR"

    # Input
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ADDRESS = "INVALID_ADDRESS"

    # Reserve resolution
    POOL_UNRESOLVED_PAIR = "POOL_UNRESOLVED_PAIR"
    POOL_ACCOUNT_NOT_FOUND = "POOL_ACCOUNT_NOT_FOUND"
    POOL_DECODE_FAILED = "POOL_DECODE_FAILED"
    POOL_NOT_FOUND = "POOL_NOT_FOUND"

    # Venue quotes
    QUOTE_HTTP_ERROR = "QUOTE_HTTP_ERROR"
    QUOTE_EMPTY = "QUOTE_EMPTY"
    QUOTE_REJECTED = "QUOTE_REJECTED"

    UNKNOWN = "UNKNOWN"


class SwaplensError(Exception):
    """Base exception for swaplens."""

    default_code = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str = "",
        code: Optional[ErrorCode] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def __str__(self):
        return f"[{self.code.value}] {self.message}"


# =============================================================================
# INFRA
# =============================================================================

class InfraError(SwaplensError):
    """Infrastructure-related errors (RPC, HTTP, timeouts)."""
    default_code = ErrorCode.INFRA_RPC_ERROR


class RPCError(InfraError):
    """Ledger RPC call failed or returned an error object."""
    default_code = ErrorCode.INFRA_RPC_ERROR


# =============================================================================
# INPUT
# =============================================================================

class ValidationError(SwaplensError):
    default_code = ErrorCode.VALIDATION_ERROR


class InvalidAddressError(ValidationError):
    """String is not a base58-encoded 32-byte address."""
    default_code = ErrorCode.INVALID_ADDRESS


# =============================================================================
# RESERVE RESOLUTION
# =============================================================================

class UnresolvedPairError(SwaplensError):
    """
    No pool exists for an asset pair.

    Recoverable: the caller can retry with a different pair or an
    explicit pool id.
    """
    default_code = ErrorCode.POOL_UNRESOLVED_PAIR


class AccountNotFoundError(SwaplensError):
    """Pool id does not exist on-ledger. Fatal for the call."""
    default_code = ErrorCode.POOL_ACCOUNT_NOT_FOUND


class DecodeFailure(SwaplensError):
    """
    A pool layout attempt did not match.

    Internal: always caught by the resolver and turned into a move to the
    next decoder. Never reaches callers.
    """
    default_code = ErrorCode.POOL_DECODE_FAILED


class NotFoundError(SwaplensError):
    """Every reserve source was exhausted."""
    default_code = ErrorCode.POOL_NOT_FOUND


# =============================================================================
# VENUE QUOTES
# =============================================================================

class VenueQuoteError(SwaplensError):
    """
    A single venue failed to produce a quote.

    Captured per venue as a tombstone quote; never propagated out of a
    comparison batch.
    """
    default_code = ErrorCode.QUOTE_EMPTY

    def __init__(
        self,
        message: str = "",
        venue_id: str = "",
        code: Optional[ErrorCode] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, code=code, details=details)
        self.venue_id = venue_id
