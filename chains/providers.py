"""
chains/providers.py - Solana JSON-RPC provider and client cache.

Provides read-only ledger access with:
- Lazy httpx.AsyncClient per provider
- Request timeout handling
- Latency and success tracking
- Process-wide memoization keyed by endpoint URL

Endpoint precedence per call:
  explicit override > set_endpoint() > SOLANA_RPC_URL > config default
"""

import base64
import os
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from chains.layouts import (
    MintInfo,
    TokenAccount,
    decode_mint,
    decode_token_account,
)
from config import get_source
from core.constants import RPC_COMMITMENT, RPC_TIMEOUT_S, RPC_URL_ENV_VAR
from core.exceptions import AccountNotFoundError, ErrorCode, RPCError
from core.logging import get_logger
from core.time import elapsed_ms, now_ms

logger = get_logger(__name__)


@dataclass
class RPCStats:
    """Statistics for an RPC endpoint."""
    url: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_latency_ms: int = 0
    last_error: str | None = None

    @property
    def avg_latency_ms(self) -> int:
        if self.successful_requests == 0:
            return 0
        return self.total_latency_ms // self.successful_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests


@dataclass
class RPCResponse:
    """Response from an RPC call."""
    result: Any
    latency_ms: int
    endpoint_used: str


@dataclass(frozen=True)
class AccountInfo:
    """Raw account as returned by getAccountInfo."""
    address: str
    data: bytes
    owner: str
    lamports: int


class SolanaRPCProvider:
    """
    Read-only Solana JSON-RPC client.

    One endpoint per provider; failover across endpoints is the caller's
    choice of URL, not something this class retries.
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: float = RPC_TIMEOUT_S,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._client = client
        self._request_id = 0
        self.stats = RPCStats(url=url)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                limits=httpx.Limits(max_connections=10),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def call(self, method: str, params: list | None = None) -> RPCResponse:
        """
        Make an RPC call.

        Raises:
            RPCError: On transport failure, non-2xx status or an RPC error object
        """
        client = await self._get_client()
        payload = {
            "jsonrpc": "2.0",
            "id": self._next_request_id(),
            "method": method,
            "params": params or [],
        }

        self.stats.total_requests += 1
        start_ms = now_ms()

        try:
            resp = await client.post(self.url, json=payload)
            resp.raise_for_status()
            body = resp.json()
        except httpx.TimeoutException as e:
            self._record_failure(f"Timeout: {e}")
            raise RPCError(
                f"RPC timeout calling {method}",
                code=ErrorCode.INFRA_TIMEOUT,
                details={"url": self.url, "method": method},
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            self._record_failure(str(e))
            raise RPCError(
                f"RPC transport error calling {method}: {e}",
                details={"url": self.url, "method": method},
            ) from e

        latency_ms = elapsed_ms(start_ms)

        if "error" in body:
            error = body["error"]
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            self._record_failure(message)
            raise RPCError(
                f"RPC error from {method}: {message}",
                details={"url": self.url, "method": method, "error": error},
            )

        self.stats.successful_requests += 1
        self.stats.total_latency_ms += latency_ms
        logger.debug(
            f"RPC {method} ok",
            extra={"context": {"method": method, "latency_ms": latency_ms}},
        )
        return RPCResponse(
            result=body.get("result"),
            latency_ms=latency_ms,
            endpoint_used=self.url,
        )

    def _record_failure(self, message: str) -> None:
        self.stats.failed_requests += 1
        self.stats.last_error = message
        logger.debug(
            f"RPC failed for {self.url}: {message}",
            extra={"context": {"url": self.url}},
        )

    async def get_account_info(self, address: str) -> AccountInfo | None:
        """
        Fetch raw account bytes.

        Returns:
            AccountInfo, or None if the account does not exist
        """
        response = await self.call(
            "getAccountInfo",
            [address, {"encoding": "base64", "commitment": RPC_COMMITMENT}],
        )
        value = (response.result or {}).get("value")
        if value is None:
            return None

        encoded, _encoding = value["data"]
        return AccountInfo(
            address=address,
            data=base64.b64decode(encoded),
            owner=value.get("owner", ""),
            lamports=value.get("lamports", 0),
        )

    async def _require_account(self, address: str, kind: str) -> AccountInfo:
        account = await self.get_account_info(address)
        if account is None:
            raise AccountNotFoundError(
                f"{kind} account not found: {address}",
                details={"address": address, "kind": kind},
            )
        return account

    async def get_token_account(self, address: str) -> TokenAccount:
        """Read an SPL token account (vault balance and mint)."""
        account = await self._require_account(address, "token")
        return decode_token_account(address, account.data)

    async def get_mint(self, address: str) -> MintInfo:
        """Read an SPL mint (supply and decimals)."""
        account = await self._require_account(address, "mint")
        return decode_mint(address, account.data)

    def get_stats_summary(self) -> dict:
        return {
            "url": self.url,
            "total_requests": self.stats.total_requests,
            "success_rate": round(self.stats.success_rate, 3),
            "avg_latency_ms": self.stats.avg_latency_ms,
            "last_error": self.stats.last_error,
        }


# =============================================================================
# CLIENT CACHE
# =============================================================================

ProviderFactory = Callable[[str], SolanaRPCProvider]


class ClientCache:
    """
    Memoizes one provider keyed by its endpoint URL.

    Providers for a per-call override URL are memoized on the side and never
    replace the default one. A provider that is replaced or dropped is kept
    until aclose() so its connection pool is closed rather than abandoned.
    """

    def __init__(
        self,
        default_url: str | None = None,
        env_var: str = RPC_URL_ENV_VAR,
        provider_factory: ProviderFactory | None = None,
    ):
        self._default_url = default_url
        self._env_var = env_var
        self._provider_factory = provider_factory or self._make_provider
        self._endpoint_override: str | None = None
        self._provider: SolanaRPCProvider | None = None
        self._provider_url: str | None = None
        self._call_providers: dict[str, SolanaRPCProvider] = {}
        self._retired: list[SolanaRPCProvider] = []

    @staticmethod
    def _make_provider(url: str) -> SolanaRPCProvider:
        source = get_source("rpc")
        return SolanaRPCProvider(url, timeout_seconds=source["timeout_seconds"])

    def _default(self) -> str:
        if self._default_url is None:
            self._default_url = get_source("rpc")["url"]
        return self._default_url

    def resolve_url(self, override: str | None = None) -> str:
        return (
            override
            or self._endpoint_override
            or os.getenv(self._env_var)
            or self._default()
        )

    def get_provider(self, override: str | None = None) -> SolanaRPCProvider:
        url = self.resolve_url(override)
        if override and url != self._provider_url:
            if url not in self._call_providers:
                self._call_providers[url] = self._provider_factory(url)
                logger.debug("RPC client created", extra={"context": {"url": url, "per_call": True}})
            return self._call_providers[url]

        if self._provider is None or self._provider_url != url:
            self._retire()
            self._provider = self._provider_factory(url)
            self._provider_url = url
            logger.debug("RPC client created", extra={"context": {"url": url}})
        return self._provider

    def set_endpoint(self, url: str | None) -> None:
        self._endpoint_override = url or None
        self.clear()

    def get_endpoint(self) -> str | None:
        return self._endpoint_override

    def _retire(self) -> None:
        if self._provider is not None:
            self._retired.append(self._provider)
        self._provider = None
        self._provider_url = None

    def clear(self) -> None:
        self._retire()
        self._retired.extend(self._call_providers.values())
        self._call_providers.clear()

    async def aclose(self) -> None:
        """Close every provider this cache has handed out."""
        self.clear()
        retired, self._retired = self._retired, []
        for provider in retired:
            await provider.close()


# Global cache instance
_client_cache = ClientCache()


def get_client_cache() -> ClientCache:
    return _client_cache


def get_provider(override: str | None = None) -> SolanaRPCProvider:
    """Provider from the global cache."""
    return _client_cache.get_provider(override)


def set_endpoint(url: str | None) -> None:
    """Set the global endpoint override and drop the memoized client."""
    _client_cache.set_endpoint(url)


def get_endpoint() -> str | None:
    """The global endpoint override, if one was set."""
    return _client_cache.get_endpoint()


def clear_client_cache() -> None:
    _client_cache.clear()


async def close_client_cache() -> None:
    await _client_cache.aclose()
