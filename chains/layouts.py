"""
chains/layouts.py - Binary account layouts.

Fixed-offset little-endian decoders for the account types the reserve
resolver reads:
- Raydium AMM v4 pool state (752 bytes)
- Raydium CLMM pool state (1544 bytes, only the leading fields we need)
- SPL token account (165 bytes, longer for Token-2022 extensions)
- SPL mint (82 bytes)

Size and non-zero-address checks are the only way to tell layouts apart,
so every decoder raises DecodeFailure on a mismatch instead of returning
half-parsed data.
"""

import struct
from dataclasses import dataclass

import base58

from core.exceptions import DecodeFailure

PUBKEY_LEN = 32
ZERO_PUBKEY = "11111111111111111111111111111111"

AMM_V4_SIZE = 752
CLMM_POOL_SIZE = 1544
TOKEN_ACCOUNT_MIN_SIZE = 165
MINT_MIN_SIZE = 82


# =============================================================================
# PRIMITIVES
# =============================================================================

def read_pubkey(data: bytes, offset: int) -> str:
    """Base58 public key at offset."""
    return base58.b58encode(data[offset:offset + PUBKEY_LEN]).decode("ascii")


def read_u8(data: bytes, offset: int) -> int:
    return data[offset]


def read_u16(data: bytes, offset: int) -> int:
    return struct.unpack_from("<H", data, offset)[0]


def read_i32(data: bytes, offset: int) -> int:
    return struct.unpack_from("<i", data, offset)[0]


def read_u64(data: bytes, offset: int) -> int:
    return struct.unpack_from("<Q", data, offset)[0]


def read_u128(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset:offset + 16], "little")


def is_zero_pubkey(key: str) -> bool:
    return key == ZERO_PUBKEY


def _require_size(data: bytes, expected: int, layout: str, exact: bool = True) -> None:
    ok = len(data) == expected if exact else len(data) >= expected
    if not ok:
        raise DecodeFailure(
            f"{layout}: unexpected account size {len(data)}",
            details={"layout": layout, "size": len(data), "expected": expected},
        )


def _require_keys(layout: str, **keys: str) -> None:
    zero = [name for name, key in keys.items() if is_zero_pubkey(key)]
    if zero:
        raise DecodeFailure(
            f"{layout}: zero address in {', '.join(zero)}",
            details={"layout": layout, "zero_fields": zero},
        )


# =============================================================================
# RAYDIUM AMM V4
# =============================================================================

# 32 leading u64 fields; indices of the ones we read
_AMM_U64_COUNT = 32
_AMM_STATUS = 0
_AMM_BASE_DECIMAL = 4
_AMM_QUOTE_DECIMAL = 5
_AMM_TRADE_FEE_NUM = 18
_AMM_TRADE_FEE_DEN = 19
_AMM_SWAP_FEE_NUM = 22
_AMM_SWAP_FEE_DEN = 23
_AMM_POOL_OPEN_TIME = 28

# 256..336 holds swap counters (u128/u64 mix), then public keys
_AMM_BASE_VAULT = 336
_AMM_QUOTE_VAULT = 368
_AMM_BASE_MINT = 400
_AMM_QUOTE_MINT = 432
_AMM_LP_MINT = 464
_AMM_OPEN_ORDERS = 496
_AMM_MARKET_ID = 528
_AMM_TARGET_ORDERS = 592
_AMM_OWNER = 688
_AMM_LP_RESERVE = 720


@dataclass(frozen=True)
class AmmV4State:
    status: int
    base_decimal: int
    quote_decimal: int
    trade_fee_numerator: int
    trade_fee_denominator: int
    swap_fee_numerator: int
    swap_fee_denominator: int
    pool_open_time: int
    base_vault: str
    quote_vault: str
    base_mint: str
    quote_mint: str
    lp_mint: str
    open_orders: str
    market_id: str
    target_orders: str
    owner: str
    lp_reserve: int


def decode_amm_v4(data: bytes) -> AmmV4State:
    """Decode an AMM v4 pool account. Raises DecodeFailure on mismatch."""
    _require_size(data, AMM_V4_SIZE, "amm_v4")

    fields = struct.unpack_from(f"<{_AMM_U64_COUNT}Q", data, 0)
    state = AmmV4State(
        status=fields[_AMM_STATUS],
        base_decimal=fields[_AMM_BASE_DECIMAL],
        quote_decimal=fields[_AMM_QUOTE_DECIMAL],
        trade_fee_numerator=fields[_AMM_TRADE_FEE_NUM],
        trade_fee_denominator=fields[_AMM_TRADE_FEE_DEN],
        swap_fee_numerator=fields[_AMM_SWAP_FEE_NUM],
        swap_fee_denominator=fields[_AMM_SWAP_FEE_DEN],
        pool_open_time=fields[_AMM_POOL_OPEN_TIME],
        base_vault=read_pubkey(data, _AMM_BASE_VAULT),
        quote_vault=read_pubkey(data, _AMM_QUOTE_VAULT),
        base_mint=read_pubkey(data, _AMM_BASE_MINT),
        quote_mint=read_pubkey(data, _AMM_QUOTE_MINT),
        lp_mint=read_pubkey(data, _AMM_LP_MINT),
        open_orders=read_pubkey(data, _AMM_OPEN_ORDERS),
        market_id=read_pubkey(data, _AMM_MARKET_ID),
        target_orders=read_pubkey(data, _AMM_TARGET_ORDERS),
        owner=read_pubkey(data, _AMM_OWNER),
        lp_reserve=read_u64(data, _AMM_LP_RESERVE),
    )

    _require_keys(
        "amm_v4",
        base_vault=state.base_vault,
        quote_vault=state.quote_vault,
        lp_mint=state.lp_mint,
    )
    if state.trade_fee_denominator == 0 or state.swap_fee_denominator == 0:
        raise DecodeFailure(
            "amm_v4: zero fee denominator",
            details={
                "trade_fee_denominator": state.trade_fee_denominator,
                "swap_fee_denominator": state.swap_fee_denominator,
            },
        )
    return state


# =============================================================================
# RAYDIUM CLMM
# =============================================================================

# 8-byte anchor discriminator, then bump (u8)
_CLMM_AMM_CONFIG = 9
_CLMM_OWNER = 41
_CLMM_MINT_0 = 73
_CLMM_MINT_1 = 105
_CLMM_VAULT_0 = 137
_CLMM_VAULT_1 = 169
_CLMM_DECIMALS_0 = 233
_CLMM_DECIMALS_1 = 234
_CLMM_TICK_SPACING = 235
_CLMM_LIQUIDITY = 237
_CLMM_SQRT_PRICE_X64 = 253
_CLMM_TICK_CURRENT = 269


@dataclass(frozen=True)
class ClmmPoolState:
    amm_config: str
    owner: str
    mint_a: str
    mint_b: str
    vault_a: str
    vault_b: str
    decimals_a: int
    decimals_b: int
    tick_spacing: int
    liquidity: int
    sqrt_price_x64: int
    tick_current: int


def decode_clmm_pool(data: bytes) -> ClmmPoolState:
    """Decode a CLMM pool account. Raises DecodeFailure on mismatch."""
    _require_size(data, CLMM_POOL_SIZE, "clmm")

    state = ClmmPoolState(
        amm_config=read_pubkey(data, _CLMM_AMM_CONFIG),
        owner=read_pubkey(data, _CLMM_OWNER),
        mint_a=read_pubkey(data, _CLMM_MINT_0),
        mint_b=read_pubkey(data, _CLMM_MINT_1),
        vault_a=read_pubkey(data, _CLMM_VAULT_0),
        vault_b=read_pubkey(data, _CLMM_VAULT_1),
        decimals_a=read_u8(data, _CLMM_DECIMALS_0),
        decimals_b=read_u8(data, _CLMM_DECIMALS_1),
        tick_spacing=read_u16(data, _CLMM_TICK_SPACING),
        liquidity=read_u128(data, _CLMM_LIQUIDITY),
        sqrt_price_x64=read_u128(data, _CLMM_SQRT_PRICE_X64),
        tick_current=read_i32(data, _CLMM_TICK_CURRENT),
    )

    _require_keys("clmm", vault_a=state.vault_a, vault_b=state.vault_b)
    if state.tick_spacing == 0:
        raise DecodeFailure("clmm: zero tick spacing")
    return state


# =============================================================================
# SPL TOKEN
# =============================================================================

@dataclass(frozen=True)
class TokenAccount:
    address: str
    mint: str
    owner: str
    amount: int


@dataclass(frozen=True)
class MintInfo:
    address: str
    supply: int
    decimals: int
    is_initialized: bool


def decode_token_account(address: str, data: bytes) -> TokenAccount:
    _require_size(data, TOKEN_ACCOUNT_MIN_SIZE, "token_account", exact=False)
    return TokenAccount(
        address=address,
        mint=read_pubkey(data, 0),
        owner=read_pubkey(data, 32),
        amount=read_u64(data, 64),
    )


def decode_mint(address: str, data: bytes) -> MintInfo:
    _require_size(data, MINT_MIN_SIZE, "mint", exact=False)
    return MintInfo(
        address=address,
        supply=read_u64(data, 36),
        decimals=read_u8(data, 44),
        is_initialized=bool(read_u8(data, 45)),
    )
