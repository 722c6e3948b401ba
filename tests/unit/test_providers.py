"""
tests/unit/test_providers.py - Tests for chains/providers.py

Covers the JSON-RPC provider (via httpx.MockTransport) and the endpoint
keyed client cache.
"""

import base64
import json

import httpx
import pytest

from chains import providers
from chains.providers import ClientCache, SolanaRPCProvider
from conftest import build_mint, build_token_account, make_address
from core.exceptions import AccountNotFoundError, ErrorCode, RPCError

RPC_URL = "https://rpc.test"


def account_value(data: bytes, owner: str = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA") -> dict:
    return {
        "data": [base64.b64encode(data).decode("ascii"), "base64"],
        "owner": owner,
        "lamports": 2_039_280,
        "executable": False,
    }


class RpcServer:
    """Answers getAccountInfo from a dict of address -> bytes."""

    def __init__(self, accounts: dict[str, bytes] | None = None):
        self.accounts = accounts or {}
        self.payloads: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.payloads.append(payload)
        address = payload["params"][0]
        data = self.accounts.get(address)
        value = account_value(data) if data is not None else None
        return httpx.Response(200, json={
            "jsonrpc": "2.0",
            "id": payload["id"],
            "result": {"context": {"slot": 1}, "value": value},
        })


def make_provider(handler) -> SolanaRPCProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SolanaRPCProvider(RPC_URL, timeout_seconds=1, client=client)


class TestSolanaRPCProvider:

    @pytest.mark.asyncio
    async def test_get_account_info_decodes_base64(self):
        address = make_address(7)
        server = RpcServer({address: b"\x01\x02\x03"})
        provider = make_provider(server)

        account = await provider.get_account_info(address)

        assert account.data == b"\x01\x02\x03"
        assert account.address == address
        assert account.lamports == 2_039_280
        params = server.payloads[0]["params"]
        assert server.payloads[0]["method"] == "getAccountInfo"
        assert params[1] == {"encoding": "base64", "commitment": "confirmed"}

    @pytest.mark.asyncio
    async def test_missing_account_is_none(self):
        provider = make_provider(RpcServer())
        assert await provider.get_account_info(make_address(9)) is None

    @pytest.mark.asyncio
    async def test_request_ids_increment(self):
        server = RpcServer()
        provider = make_provider(server)

        await provider.get_account_info(make_address(1))
        await provider.get_account_info(make_address(2))

        assert [p["id"] for p in server.payloads] == [1, 2]
        assert provider.stats.successful_requests == 2

    @pytest.mark.asyncio
    async def test_rpc_error_object_raises(self):
        def handler(request):
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "Invalid param"}})

        provider = make_provider(handler)
        with pytest.raises(RPCError, match="Invalid param") as exc_info:
            await provider.get_account_info(make_address(1))
        assert exc_info.value.code == ErrorCode.INFRA_RPC_ERROR
        assert provider.stats.failed_requests == 1

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        provider = make_provider(lambda request: httpx.Response(503, text="unavailable"))
        with pytest.raises(RPCError):
            await provider.get_account_info(make_address(1))

    @pytest.mark.asyncio
    async def test_timeout_raises_with_timeout_code(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        provider = make_provider(handler)
        with pytest.raises(RPCError) as exc_info:
            await provider.get_account_info(make_address(1))
        assert exc_info.value.code == ErrorCode.INFRA_TIMEOUT
        assert "Timeout" in provider.stats.last_error

    @pytest.mark.asyncio
    async def test_token_account_and_mint(self):
        vault, mint = make_address(3), make_address(4)
        provider = make_provider(RpcServer({
            vault: build_token_account(mint, make_address(5), 42),
            mint: build_mint(supply=1_000, decimals=6),
        }))

        token = await provider.get_token_account(vault)
        mint_info = await provider.get_mint(mint)

        assert (token.mint, token.amount) == (mint, 42)
        assert (mint_info.supply, mint_info.decimals) == (1_000, 6)

    @pytest.mark.asyncio
    async def test_missing_token_account_raises(self):
        provider = make_provider(RpcServer())
        with pytest.raises(AccountNotFoundError):
            await provider.get_token_account(make_address(3))

    @pytest.mark.asyncio
    async def test_stats_summary(self):
        provider = make_provider(RpcServer())
        await provider.get_account_info(make_address(1))

        summary = provider.get_stats_summary()
        assert summary["url"] == RPC_URL
        assert summary["total_requests"] == 1
        assert summary["success_rate"] == 1.0


class TestClientCache:

    @pytest.fixture
    def cache(self, monkeypatch):
        monkeypatch.delenv("SOLANA_RPC_URL", raising=False)
        return ClientCache(
            default_url="https://default.test",
            provider_factory=lambda url: SolanaRPCProvider(url, timeout_seconds=1),
        )

    def test_default_url(self, cache):
        assert cache.resolve_url() == "https://default.test"

    def test_precedence(self, cache, monkeypatch):
        """override > set_endpoint > environment > default."""
        monkeypatch.setenv("SOLANA_RPC_URL", "https://env.test")
        assert cache.resolve_url() == "https://env.test"

        cache.set_endpoint("https://global.test")
        assert cache.resolve_url() == "https://global.test"
        assert cache.resolve_url("https://call.test") == "https://call.test"

    def test_memoizes_per_url(self, cache):
        first = cache.get_provider()
        assert cache.get_provider() is first

        other = cache.get_provider("https://call.test")
        assert other is not first
        assert other.url == "https://call.test"
        assert cache.get_provider("https://call.test") is other
        assert cache.get_provider() is first

    def test_set_endpoint_drops_client(self, cache):
        first = cache.get_provider()
        cache.set_endpoint("https://global.test")

        second = cache.get_provider()
        assert second is not first
        assert second.url == "https://global.test"
        assert cache.get_endpoint() == "https://global.test"

    def test_clear(self, cache):
        first = cache.get_provider()
        cache.clear()
        assert cache.get_provider() is not first

    @pytest.mark.asyncio
    async def test_aclose_closes_dropped_clients(self, cache):
        first = cache.get_provider()
        per_call = cache.get_provider("https://call.test")
        await first._get_client()
        await per_call._get_client()

        cache.set_endpoint("https://global.test")
        current = cache.get_provider()
        await current._get_client()
        await cache.aclose()

        assert first._client is None
        assert per_call._client is None
        assert current._client is None

    def test_get_endpoint_unset(self, cache):
        assert cache.get_endpoint() is None
        cache.set_endpoint("")
        assert cache.get_endpoint() is None


class TestModuleLevelEndpoint:

    def test_set_and_get_endpoint(self):
        try:
            providers.set_endpoint("https://global.test")
            assert providers.get_endpoint() == "https://global.test"
            assert providers.get_provider().url == "https://global.test"
        finally:
            providers.set_endpoint(None)
            providers.clear_client_cache()

        assert providers.get_endpoint() is None
