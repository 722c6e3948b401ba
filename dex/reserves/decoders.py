"""
dex/reserves/decoders.py - Reserve sources tried in order by the resolver.

Each decoder turns a pool account (plus whatever it needs from the ledger
or the registry) into a PoolReserves snapshot. attempt() never raises: a
layout mismatch, a missing key or a failed read is logged and reported as
None so the resolver can move on to the next decoder.

Order matters:
1. AmmV4Decoder    - exact 752-byte layout, self-contained
2. ClmmDecoder     - needs both mints and the registry's pool keys
3. RegistryDecoder - last resort, registry data with on-ledger balances
"""

import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from chains.layouts import decode_amm_v4, decode_clmm_pool
from chains.providers import AccountInfo, SolanaRPCProvider
from core.constants import AMM_V4_PROGRAM_ID, CLMM_FEE_RATE_DENOMINATOR, CLMM_PROGRAM_ID, PoolKind
from core.exceptions import DecodeFailure
from core.logging import get_logger, log_fallback
from core.math import ratio, safe_decimal, sqrt_price_x64_to_price, tick_index_to_price, to_base_units
from core.models import ClmmWindow, FeeSchedule, PoolReserves, VaultInfo
from discovery.registry import RaydiumRegistry

logger = get_logger(__name__)


@dataclass
class DecodeContext:
    """Everything a decoder may need beyond the pool account bytes."""
    pool_id: str
    provider: SolanaRPCProvider
    registry: RaydiumRegistry
    asset_a: Optional[str] = None
    asset_b: Optional[str] = None

    @property
    def has_assets(self) -> bool:
        return bool(self.asset_a and self.asset_b)


def build_reserves(
    pool_kind: PoolKind,
    pool_id: str,
    vault_a: VaultInfo,
    vault_b: VaultInfo,
    mid_price: Optional[Decimal] = None,
    **extra: Any,
) -> PoolReserves:
    """Assemble a snapshot; mid price defaults to vault_b / vault_a in raw units."""
    if mid_price is None:
        mid_price = ratio(vault_b.amount, vault_a.amount)
    return PoolReserves(
        pool_kind=pool_kind,
        pool_id=pool_id,
        vault_a=vault_a,
        vault_b=vault_b,
        mid_price=mid_price,
        depth=min(vault_a.amount, vault_b.amount),
        **extra,
    )


async def read_vaults(provider: SolanaRPCProvider, address_a: str, address_b: str) -> tuple[VaultInfo, VaultInfo]:
    """Read both vault token accounts concurrently. Either failure fails both."""
    token_a, token_b = await asyncio.gather(
        provider.get_token_account(address_a),
        provider.get_token_account(address_b),
    )
    return (
        VaultInfo(address=address_a, amount=token_a.amount, mint=token_a.mint),
        VaultInfo(address=address_b, amount=token_b.amount, mint=token_b.mint),
    )


class ReserveDecoder:
    """Base class for one reserve source."""

    name = "base"
    pool_kind: PoolKind
    # Owning program the account must belong to; None accepts any owner
    program_id: Optional[str] = None

    async def attempt(self, account: AccountInfo, context: DecodeContext) -> PoolReserves | None:
        """Decode reserves, or None if this source does not apply."""
        try:
            self.check_owner(account)
            reserves = await self.decode(account, context)
        except Exception as e:
            log_fallback(logger, self.name, e, pool_id=context.pool_id)
            return None

        logger.info(
            f"Reserves resolved via {self.name}",
            extra={"context": {
                "pool_id": context.pool_id,
                "pool_kind": reserves.pool_kind.value,
                "depth": str(reserves.depth),
            }},
        )
        return reserves

    def check_owner(self, account: AccountInfo) -> None:
        if self.program_id is not None and account.owner != self.program_id:
            raise DecodeFailure(
                f"{self.name}: account owned by {account.owner or 'unknown'}",
                details={"owner": account.owner, "expected": self.program_id},
            )

    async def decode(self, account: AccountInfo, context: DecodeContext) -> PoolReserves:
        raise NotImplementedError


# =============================================================================
# AMM V4
# =============================================================================

class AmmV4Decoder(ReserveDecoder):
    name = "amm_v4"
    pool_kind = PoolKind.AMM_V4
    program_id = AMM_V4_PROGRAM_ID

    async def decode(self, account: AccountInfo, context: DecodeContext) -> PoolReserves:
        state = decode_amm_v4(account.data)

        (vault_a, vault_b), lp_mint = await asyncio.gather(
            read_vaults(context.provider, state.base_vault, state.quote_vault),
            context.provider.get_mint(state.lp_mint),
        )

        fee_schedule = FeeSchedule(
            trade_fee_rate=ratio(state.trade_fee_numerator, state.trade_fee_denominator),
            protocol_fee_rate=ratio(state.swap_fee_numerator, state.swap_fee_denominator),
        )
        return build_reserves(
            self.pool_kind,
            context.pool_id,
            vault_a,
            vault_b,
            fee_schedule=fee_schedule,
            lp_supply=lp_mint.supply,
            raw_state=state,
        )


# =============================================================================
# CLMM
# =============================================================================

class ClmmDecoder(ReserveDecoder):
    """
    Concentrated-liquidity pools.

    Vault addresses and fee config come from the registry's pool keys; tick
    state comes from the pool account itself. Prices are human units of the
    pool's mint B per mint A, whichever order the caller named the assets
    in, using mint decimals read on-ledger.
    """

    name = "clmm"
    pool_kind = PoolKind.CLMM
    program_id = CLMM_PROGRAM_ID

    async def decode(self, account: AccountInfo, context: DecodeContext) -> PoolReserves:
        if not context.has_assets:
            raise DecodeFailure("clmm: both asset mints are required")

        keys = await self._pool_keys(context)
        vault = keys.get("vault") or {}
        vault_a_address, vault_b_address = vault.get("A"), vault.get("B")
        if not vault_a_address or not vault_b_address:
            raise DecodeFailure("clmm: pool keys carry no vaults", details={"pool_id": context.pool_id})

        state = decode_clmm_pool(account.data)
        if {context.asset_a, context.asset_b} != {state.mint_a, state.mint_b}:
            raise DecodeFailure(
                "clmm: pool does not trade the requested assets",
                details={"pool_id": context.pool_id, "mint_a": state.mint_a, "mint_b": state.mint_b},
            )

        mint_a, mint_b = await asyncio.gather(
            context.provider.get_mint(state.mint_a),
            context.provider.get_mint(state.mint_b),
        )
        vault_a, vault_b = await read_vaults(context.provider, vault_a_address, vault_b_address)

        current_price = sqrt_price_x64_to_price(state.sqrt_price_x64, mint_a.decimals, mint_b.decimals)
        lower_tick = state.tick_current - state.tick_spacing
        upper_tick = state.tick_current + state.tick_spacing
        window = ClmmWindow(
            current_price=current_price,
            tick_current=state.tick_current,
            tick_spacing=state.tick_spacing,
            nearest_lower_tick=lower_tick,
            nearest_upper_tick=upper_tick,
            lower_price=tick_index_to_price(lower_tick, mint_a.decimals, mint_b.decimals),
            upper_price=tick_index_to_price(upper_tick, mint_a.decimals, mint_b.decimals),
            liquidity=str(state.liquidity),
        )

        config = keys.get("config") or {}
        fee_schedule = FeeSchedule(
            trade_fee_rate=safe_decimal(config.get("tradeFeeRate")) / CLMM_FEE_RATE_DENOMINATOR,
            protocol_fee_rate=safe_decimal(config.get("protocolFeeRate")) / CLMM_FEE_RATE_DENOMINATOR,
        )
        return build_reserves(
            self.pool_kind,
            context.pool_id,
            vault_a,
            vault_b,
            mid_price=current_price,
            fee_schedule=fee_schedule,
            clmm_window=window,
            raw_state=state,
        )

    async def _pool_keys(self, context: DecodeContext) -> dict:
        for entry in await context.registry.pool_keys_by_id(context.pool_id):
            if isinstance(entry.get("vault"), dict):
                return entry
        raise DecodeFailure("clmm: pool keys not found", details={"pool_id": context.pool_id})


# =============================================================================
# REGISTRY FALLBACK
# =============================================================================

def entry_vaults(entry: dict) -> tuple[str | None, str | None]:
    """Vault addresses carried by a registry entry, in whichever shape it uses."""
    vault = entry.get("vault")
    if isinstance(vault, dict) and vault.get("A") and vault.get("B"):
        return vault["A"], vault["B"]
    return (
        entry.get("vaultA") or entry.get("baseVault"),
        entry.get("vaultB") or entry.get("quoteVault"),
    )


def _entry_mint(entry: dict, side: str) -> tuple[str, int | None]:
    mint = entry.get(f"mint{side}")
    if isinstance(mint, dict):
        decimals = mint.get("decimals")
        return mint.get("address", ""), decimals if isinstance(decimals, int) else None
    return (mint or ""), None


class RegistryDecoder(ReserveDecoder):
    """
    Last resort: the registry's own view of the pool.

    Balances are read on-ledger from the entry's vaults. When that read
    fails, the entry's reported mintAmountA/B are scaled to raw units
    instead.
    """

    name = "registry"
    pool_kind = PoolKind.REGISTRY

    async def decode(self, account: AccountInfo, context: DecodeContext) -> PoolReserves:
        entry = await self._find_entry(context)

        address_a, address_b = entry_vaults(entry)
        if not address_a or not address_b:
            address_a, address_b = await self._keyed_vaults(context)

        if not address_a or not address_b:
            raise DecodeFailure("registry: no vault addresses", details={"pool_id": context.pool_id})

        try:
            vault_a, vault_b = await read_vaults(context.provider, address_a, address_b)
        except Exception as e:
            log_fallback(logger, "registry vault read", e, pool_id=context.pool_id)
        else:
            return build_reserves(self.pool_kind, context.pool_id, vault_a, vault_b, raw_state=entry)

        vault_a, vault_b = self._reported_vaults(entry, address_a, address_b)
        return build_reserves(self.pool_kind, context.pool_id, vault_a, vault_b, raw_state=entry)

    async def _find_entry(self, context: DecodeContext) -> dict:
        for entry in await context.registry.pools_by_id(context.pool_id):
            return entry

        if context.has_assets:
            for entry in await context.registry.pools_for_pair(context.asset_a, context.asset_b):
                return entry

        raise DecodeFailure("registry: pool not found", details={"pool_id": context.pool_id})

    async def _keyed_vaults(self, context: DecodeContext) -> tuple[str | None, str | None]:
        for entry in await context.registry.pool_keys_by_id(context.pool_id):
            address_a, address_b = entry_vaults(entry)
            if address_a and address_b:
                return address_a, address_b
        return None, None

    def _reported_vaults(self, entry: dict, address_a: str, address_b: str) -> tuple[VaultInfo, VaultInfo]:
        mint_a, decimals_a = _entry_mint(entry, "A")
        mint_b, decimals_b = _entry_mint(entry, "B")
        amount_a = entry.get("mintAmountA")
        amount_b = entry.get("mintAmountB")
        if amount_a is None or amount_b is None or decimals_a is None or decimals_b is None:
            raise DecodeFailure("registry: no balances available", details={"entry_id": entry.get("id")})

        return (
            VaultInfo(address=address_a, amount=int(to_base_units(amount_a, decimals_a)), mint=mint_a),
            VaultInfo(address=address_b, amount=int(to_base_units(amount_b, decimals_b)), mint=mint_b),
        )


def default_decoders() -> list[ReserveDecoder]:
    return [AmmV4Decoder(), ClmmDecoder(), RegistryDecoder()]
