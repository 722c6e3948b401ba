"""
discovery/registry.py - Raydium pool registry API client.

Three read-only lookups:
- pools/info/mint: pools for a mint (or a mint pair), used to derive a pool id
- pools/info/ids:  pool info by id, the last-resort reserve source
- pools/key/ids:   pool keys by id (vaults, config), used by the CLMM decoder

The API wraps results either as {"data": [...]} or, for paged endpoints,
{"data": {"data": [...]}}; pool_list() flattens both.
"""

from typing import Any

import httpx

from config import get_source
from core.exceptions import ErrorCode, InfraError
from core.logging import get_logger, log_fallback

logger = get_logger(__name__)

POOLS_BY_MINT_PATH = "/pools/info/mint"
POOLS_BY_ID_PATH = "/pools/info/ids"
POOL_KEYS_BY_ID_PATH = "/pools/key/ids"


def pool_list(body: Any) -> list[dict]:
    """Extract the list of pool entries from an API response body."""
    if not isinstance(body, dict):
        return []
    data = body.get("data")
    if isinstance(data, dict):
        data = data.get("data")
    if not isinstance(data, list):
        return []
    return [entry for entry in data if isinstance(entry, dict)]


def pool_entry_id(entry: dict) -> str | None:
    return entry.get("id") or entry.get("ammId")


class RaydiumRegistry:
    """
    Client for the Raydium v3 pool API.

    Usage:
        registry = RaydiumRegistry()
        pool_id = await registry.pool_id_for_pair(mint_a, mint_b)
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        source = get_source("raydium_api") if base_url is None or timeout_seconds is None else {}
        self.base_url = (base_url or source["url"]).rstrip("/")
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else source["timeout_seconds"]
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds))
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: dict[str, str]) -> list[dict]:
        """
        GET a registry endpoint.

        Raises:
            InfraError: On transport failure, non-2xx status or a non-JSON body
        """
        client = await self._get_client()
        url = f"{self.base_url}{path}"
        try:
            resp = await client.get(url, params=params)
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise InfraError(
                f"Registry request failed: {e}",
                code=ErrorCode.INFRA_HTTP_ERROR,
                details={"url": url, "params": params},
            ) from e
        return pool_list(body)

    async def pools_for_pair(self, mint_a: str, mint_b: str) -> list[dict]:
        return await self._get(
            POOLS_BY_MINT_PATH,
            {
                "mint1": mint_a,
                "mint2": mint_b,
                "poolType": "all",
                "poolSortField": "liquidity",
                "sortType": "desc",
                "pageSize": "10",
                "page": "1",
            },
        )

    async def pools_for_mint(self, mint: str) -> list[dict]:
        return await self._get(
            POOLS_BY_MINT_PATH,
            {
                "mint1": mint,
                "poolType": "all",
                "poolSortField": "liquidity",
                "sortType": "desc",
                "pageSize": "10",
                "page": "1",
            },
        )

    async def pools_by_id(self, pool_id: str) -> list[dict]:
        return await self._get(POOLS_BY_ID_PATH, {"ids": pool_id})

    async def pool_keys_by_id(self, pool_id: str) -> list[dict]:
        return await self._get(POOL_KEYS_BY_ID_PATH, {"ids": pool_id})

    async def pool_id_for_pair(self, mint_a: str, mint_b: str) -> str | None:
        """
        Id of the deepest pool for a mint pair.

        Returns None when the registry has no pool or cannot be reached.
        """
        try:
            pools = await self.pools_for_pair(mint_a, mint_b)
        except InfraError as e:
            log_fallback(logger, "pool id lookup", e, mint_a=mint_a, mint_b=mint_b)
            return None

        for entry in pools:
            pool_id = pool_entry_id(entry)
            if pool_id:
                logger.info(
                    "Resolved pool id",
                    extra={"context": {"pool_id": pool_id, "mint_a": mint_a, "mint_b": mint_b}},
                )
                return pool_id

        logger.warning(
            "No pool found for pair",
            extra={"context": {"mint_a": mint_a, "mint_b": mint_b}},
        )
        return None
