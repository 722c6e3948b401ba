"""
discovery/catalog.py - Asset decimal resolution.

Resolution order for a mint:
1. Static KNOWN_TOKEN_DECIMALS table
2. DecimalCache (append-only, process-wide by default)
3. One bulk fetch of the token catalog, shared by concurrent callers
4. DEFAULT_DECIMALS

resolve_scale() never raises: missing data degrades to the default.
"""

import asyncio
import time
from typing import Any, Mapping

import httpx

from config import get_source
from core.constants import (
    CATALOG_RETRY_COOLDOWN_S,
    DEFAULT_DECIMALS,
    KNOWN_TOKEN_DECIMALS,
)
from core.logging import get_logger, log_fallback

logger = get_logger(__name__)


class DecimalCache:
    """
    Mint -> decimals, append-only.

    The first value written for a mint wins; later writes are ignored, so a
    cached scale never changes for the life of the cache.
    """

    def __init__(self, initial: Mapping[str, int] | None = None):
        self._scales: dict[str, int] = dict(initial or {})

    def get(self, mint: str) -> int | None:
        return self._scales.get(mint)

    def set_if_absent(self, mint: str, decimals: int) -> int:
        return self._scales.setdefault(mint, decimals)

    def __contains__(self, mint: object) -> bool:
        return mint in self._scales

    def __len__(self) -> int:
        return len(self._scales)


class TokenCatalog:
    """
    Decimal resolver backed by a remote token list.

    Usage:
        catalog = TokenCatalog()
        decimals = await catalog.resolve_scale(mint)
    """

    def __init__(
        self,
        cache: DecimalCache | None = None,
        static_table: Mapping[str, int] = KNOWN_TOKEN_DECIMALS,
        catalog_url: str | None = None,
        timeout_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
        default_decimals: int = DEFAULT_DECIMALS,
    ):
        source = get_source("catalog") if catalog_url is None or timeout_seconds is None else {}
        self.cache = cache if cache is not None else DecimalCache()
        self.static_table = static_table
        self.catalog_url = catalog_url or source["url"]
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else source["timeout_seconds"]
        self.default_decimals = default_decimals
        self._client = client
        self._lock = asyncio.Lock()
        self._loaded = False
        self._failed_at: float | None = None

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def resolve_scale(self, mint: str) -> int:
        """Decimals for mint. Never raises."""
        if mint in self.static_table:
            return self.static_table[mint]

        cached = self.cache.get(mint)
        if cached is not None:
            return cached

        await self.ensure_loaded()

        cached = self.cache.get(mint)
        if cached is not None:
            return cached

        logger.debug(
            "Unknown mint, using default decimals",
            extra={"context": {"mint": mint, "decimals": self.default_decimals}},
        )
        return self.default_decimals

    async def ensure_loaded(self) -> bool:
        """
        Fetch the catalog once.

        Concurrent callers wait on the same lock and see the loaded flag set
        by whoever fetched first. A failed fetch is retried only after the
        cooldown.
        """
        if self._loaded:
            return True

        async with self._lock:
            if self._loaded:
                return True
            if self._failed_at is not None and time.monotonic() - self._failed_at < CATALOG_RETRY_COOLDOWN_S:
                return False

            try:
                entries = await self._fetch_catalog()
            except (httpx.HTTPError, ValueError) as e:
                self._failed_at = time.monotonic()
                log_fallback(logger, "token catalog", e, url=self.catalog_url)
                return False

            added = self._populate(entries)
            self._loaded = True
            logger.info(
                "Token catalog loaded",
                extra={"context": {"entries": added, "url": self.catalog_url}},
            )
            return True

    async def _fetch_catalog(self) -> Any:
        if self._client is not None:
            resp = await self._client.get(self.catalog_url)
            resp.raise_for_status()
            return resp.json()

        async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds)) as client:
            resp = await client.get(self.catalog_url)
            resp.raise_for_status()
            return resp.json()

    def _populate(self, entries: Any) -> int:
        if not isinstance(entries, list):
            return 0

        added = 0
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            address = entry.get("address")
            decimals = entry.get("decimals")
            if address and isinstance(decimals, int) and not isinstance(decimals, bool) and decimals >= 0:
                self.cache.set_if_absent(address, decimals)
                added += 1
        return added


# Global catalog instance
_catalog: TokenCatalog | None = None


def get_catalog() -> TokenCatalog:
    global _catalog
    if _catalog is None:
        _catalog = TokenCatalog()
    return _catalog


async def resolve_scale(mint: str) -> int:
    """Decimals for mint using the global catalog."""
    return await get_catalog().resolve_scale(mint)
