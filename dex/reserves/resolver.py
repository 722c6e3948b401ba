"""
dex/reserves/resolver.py - Pool reserve resolution.

Pipeline:
1. Pool id: given, or derived from the asset pair via the registry
2. Pool account: one getAccountInfo; absent is fatal
3. Decoders in order until one produces a snapshot

CONTRACT:
- Never returns a partial snapshot
- NotFoundError only after every decoder has been tried
- Ledger transport failures propagate as RPCError
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from chains.providers import ClientCache, SolanaRPCProvider, get_client_cache
from core.exceptions import AccountNotFoundError, NotFoundError, SwaplensError, UnresolvedPairError
from core.logging import get_logger, log_fallback
from core.models import PoolReserves
from core.validators import require_address
from dex.reserves.decoders import DecodeContext, ReserveDecoder, default_decoders
from discovery.registry import RaydiumRegistry, pool_entry_id

logger = get_logger(__name__)


@dataclass(frozen=True)
class MintLiquidity:
    """Liquidity one pool holds for a single mint."""
    pool_id: str
    mint: str
    liquidity: int
    price: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pool_id": self.pool_id,
            "mint": self.mint,
            "liquidity": str(self.liquidity),
            "price": str(self.price),
        }


class ReserveResolver:
    """
    Resolves a pool (or an asset pair) to a PoolReserves snapshot.

    Usage:
        resolver = ReserveResolver()
        reserves = await resolver.resolve(pool_id="58oQ...")
        reserves = await resolver.resolve(asset_a=SOL, asset_b=USDC)
    """

    def __init__(
        self,
        provider: Optional[SolanaRPCProvider] = None,
        client_cache: Optional[ClientCache] = None,
        registry: Optional[RaydiumRegistry] = None,
        decoders: Optional[Sequence[ReserveDecoder]] = None,
    ):
        self._provider = provider
        self.client_cache = client_cache or get_client_cache()
        self.registry = registry or RaydiumRegistry()
        self.decoders = list(decoders) if decoders is not None else default_decoders()

    def provider_for(self, rpc_url: Optional[str] = None) -> SolanaRPCProvider:
        if self._provider is not None and rpc_url is None:
            return self._provider
        return self.client_cache.get_provider(rpc_url)

    async def resolve(
        self,
        pool_id: Optional[str] = None,
        asset_a: Optional[str] = None,
        asset_b: Optional[str] = None,
        rpc_url: Optional[str] = None,
    ) -> PoolReserves:
        """
        Resolve reserves for a pool.

        Raises:
            UnresolvedPairError: No pool_id and no pool found for the pair
            InvalidAddressError: pool_id is not a valid address
            AccountNotFoundError: pool account does not exist
            RPCError: Ledger transport failure
            NotFoundError: Every decoder failed
        """
        if not pool_id:
            pool_id = await self._pool_id_for_pair(asset_a, asset_b)
        require_address(pool_id, "pool_id")

        provider = self.provider_for(rpc_url)
        account = await provider.get_account_info(pool_id)
        if account is None:
            raise AccountNotFoundError(
                f"Pool account not found: {pool_id}",
                details={"pool_id": pool_id},
            )

        context = DecodeContext(
            pool_id=pool_id,
            provider=provider,
            registry=self.registry,
            asset_a=asset_a,
            asset_b=asset_b,
        )
        for decoder in self.decoders:
            reserves = await decoder.attempt(account, context)
            if reserves is not None:
                return reserves

        raise NotFoundError(
            f"No reserve source matched pool {pool_id}",
            details={"pool_id": pool_id, "tried": [d.name for d in self.decoders]},
        )

    async def _pool_id_for_pair(self, asset_a: Optional[str], asset_b: Optional[str]) -> str:
        if not asset_a or not asset_b:
            raise UnresolvedPairError(
                "Either pool_id or both assets are required",
                details={"asset_a": asset_a, "asset_b": asset_b},
            )

        pool_id = await self.registry.pool_id_for_pair(asset_a, asset_b)
        if not pool_id:
            raise UnresolvedPairError(
                f"No pool found for {asset_a} / {asset_b}",
                details={"asset_a": asset_a, "asset_b": asset_b},
            )
        return pool_id

    async def reserves_for_mint(self, mint: str, rpc_url: Optional[str] = None) -> Optional[MintLiquidity]:
        """
        Liquidity of the deepest registry pool holding mint.

        Returns None when no pool is found or the pool does not hold mint.
        """
        try:
            pools = await self.registry.pools_for_mint(mint)
            entry = pools[0] if pools else None
            pool_id = pool_entry_id(entry) if entry else None
            if not pool_id:
                logger.warning("No pool found for mint", extra={"context": {"mint": mint}})
                return None

            reserves = await self.resolve(
                pool_id=pool_id,
                asset_a=(entry.get("mintA") or {}).get("address"),
                asset_b=(entry.get("mintB") or {}).get("address"),
                rpc_url=rpc_url,
            )
        except SwaplensError as e:
            log_fallback(logger, "reserves for mint", e, mint=mint)
            return None

        liquidity = reserves.liquidity_for_mint(mint)
        if liquidity is None:
            logger.warning(
                "Mint not held by pool",
                extra={"context": {"mint": mint, "pool_id": pool_id}},
            )
            return None

        return MintLiquidity(pool_id=pool_id, mint=mint, liquidity=liquidity, price=reserves.mid_price)


# Global resolver instance
_resolver: Optional[ReserveResolver] = None


def get_resolver() -> ReserveResolver:
    global _resolver
    if _resolver is None:
        _resolver = ReserveResolver()
    return _resolver


async def resolve_reserves(
    pool_id: Optional[str] = None,
    asset_a: Optional[str] = None,
    asset_b: Optional[str] = None,
    rpc_url: Optional[str] = None,
) -> PoolReserves:
    """Resolve reserves with the global resolver."""
    return await get_resolver().resolve(pool_id=pool_id, asset_a=asset_a, asset_b=asset_b, rpc_url=rpc_url)


async def reserves_for_mint(mint: str, rpc_url: Optional[str] = None) -> Optional[MintLiquidity]:
    return await get_resolver().reserves_for_mint(mint, rpc_url=rpc_url)
