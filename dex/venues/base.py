"""
dex/venues/base.py - Shared plumbing for venue quote adapters.

Adapters agree only on their output (VenueQuote). Request parameters and
response fields are each venue's own business and live in its module.

CONTRACT:
- quote() never raises; any failure becomes a tombstone quote
- fetch() raises VenueQuoteError (or anything else) on failure
"""

from decimal import Decimal
from typing import Any, Optional

import httpx

from config import get_source
from core.exceptions import ErrorCode, VenueQuoteError
from core.logging import get_logger
from core.math import safe_decimal, to_base_units
from core.models import VenueQuote
from discovery.catalog import TokenCatalog, get_catalog

logger = get_logger(__name__)

NO_QUOTE_REASON = "No quote available"


class VenueAdapter:
    """Base class for one quote venue."""

    venue_id: str = ""

    def __init__(
        self,
        catalog: Optional[TokenCatalog] = None,
        url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        source = get_source(self.venue_id) if url is None or timeout_seconds is None else {}
        self.catalog = catalog or get_catalog()
        self.url = url or source["url"]
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else source["timeout_seconds"]
        self._client = client

    async def quote(self, input_mint: str, output_mint: str, amount: Decimal) -> VenueQuote:
        """Quote amount of input_mint, or a tombstone on any failure."""
        try:
            return await self.fetch(input_mint, output_mint, amount)
        except Exception as e:
            reason = getattr(e, "message", None) or str(e) or type(e).__name__
            logger.warning(
                f"{self.venue_id} quote failed: {reason}",
                extra={"context": {
                    "venue_id": self.venue_id,
                    "input_mint": input_mint,
                    "output_mint": output_mint,
                    "error_type": type(e).__name__,
                }},
            )
            return VenueQuote.tombstone(self.venue_id, reason)

    async def fetch(self, input_mint: str, output_mint: str, amount: Decimal) -> VenueQuote:
        raise NotImplementedError

    async def scales(self, input_mint: str, output_mint: str, amount: Decimal) -> tuple[int, int, str]:
        """(input decimals, output decimals, amount in input base units)."""
        in_decimals = await self.catalog.resolve_scale(input_mint)
        out_decimals = await self.catalog.resolve_scale(output_mint)
        return in_decimals, out_decimals, to_base_units(amount, in_decimals)

    async def get_json(self, params: dict[str, str]) -> Any:
        """
        GET the venue endpoint.

        Raises:
            VenueQuoteError: On transport failure, non-2xx status or a non-JSON body
        """
        try:
            if self._client is not None:
                resp = await self._client.get(self.url, params=params)
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds)) as client:
                    resp = await client.get(self.url, params=params)
        except httpx.HTTPError as e:
            raise VenueQuoteError(
                f"{self.venue_id} request failed: {e}",
                venue_id=self.venue_id,
                code=ErrorCode.QUOTE_HTTP_ERROR,
            ) from e

        if resp.is_error:
            raise VenueQuoteError(
                f"{self.venue_id} API error {resp.status_code}",
                venue_id=self.venue_id,
                code=ErrorCode.QUOTE_HTTP_ERROR,
                details={"status": resp.status_code},
            )

        try:
            return resp.json()
        except ValueError as e:
            raise VenueQuoteError(
                f"{self.venue_id} returned invalid JSON",
                venue_id=self.venue_id,
                code=ErrorCode.QUOTE_HTTP_ERROR,
            ) from e

    def no_quote(self) -> VenueQuoteError:
        return VenueQuoteError(NO_QUOTE_REASON, venue_id=self.venue_id, code=ErrorCode.QUOTE_EMPTY)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None


def abs_decimal(value: Any) -> Optional[Decimal]:
    """abs(value) as Decimal, or None when the venue omitted or garbled it."""
    if value is None or value == "":
        return None
    result = safe_decimal(value, default=None)
    return None if result is None else abs(result)
