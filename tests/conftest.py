# PATH: tests/conftest.py
"""
Pytest configuration and fixtures for swaplens tests.

Byte builders produce accounts in the exact on-ledger layouts so decoders
and the resolver can be tested without a network.
"""

import struct
import sys
from pathlib import Path

import base58
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from chains.layouts import (  # noqa: E402
    AMM_V4_SIZE,
    CLMM_POOL_SIZE,
    MINT_MIN_SIZE,
    TOKEN_ACCOUNT_MIN_SIZE,
    MintInfo,
    TokenAccount,
)


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


# =============================================================================
# ADDRESSES AND LAYOUT BUILDERS
# =============================================================================

def make_address(seed: int) -> str:
    """Deterministic non-zero 32-byte address."""
    return base58.b58encode(bytes([seed]) * 32).decode("ascii")


def _put_key(buf: bytearray, offset: int, address: str) -> None:
    buf[offset:offset + 32] = base58.b58decode(address)


def build_amm_v4(
    base_vault: str,
    quote_vault: str,
    base_mint: str,
    quote_mint: str,
    lp_mint: str,
    trade_fee: tuple[int, int] = (25, 10_000),
    swap_fee: tuple[int, int] = (25, 10_000),
    lp_reserve: int = 0,
    size: int = AMM_V4_SIZE,
) -> bytes:
    buf = bytearray(size)
    if size < AMM_V4_SIZE:
        return bytes(buf)
    struct.pack_into("<Q", buf, 0, 6)  # status
    struct.pack_into("<Q", buf, 4 * 8, 9)
    struct.pack_into("<Q", buf, 5 * 8, 6)
    struct.pack_into("<QQ", buf, 18 * 8, *trade_fee)
    struct.pack_into("<QQ", buf, 22 * 8, *swap_fee)
    _put_key(buf, 336, base_vault)
    _put_key(buf, 368, quote_vault)
    _put_key(buf, 400, base_mint)
    _put_key(buf, 432, quote_mint)
    _put_key(buf, 464, lp_mint)
    struct.pack_into("<Q", buf, 720, lp_reserve)
    return bytes(buf)


def build_clmm(
    mint_a: str,
    mint_b: str,
    vault_a: str,
    vault_b: str,
    decimals_a: int = 9,
    decimals_b: int = 6,
    tick_spacing: int = 1,
    liquidity: int = 10**12,
    sqrt_price_x64: int = 2**64,
    tick_current: int = 0,
) -> bytes:
    buf = bytearray(CLMM_POOL_SIZE)
    _put_key(buf, 73, mint_a)
    _put_key(buf, 105, mint_b)
    _put_key(buf, 137, vault_a)
    _put_key(buf, 169, vault_b)
    buf[233] = decimals_a
    buf[234] = decimals_b
    struct.pack_into("<H", buf, 235, tick_spacing)
    buf[237:253] = liquidity.to_bytes(16, "little")
    buf[253:269] = sqrt_price_x64.to_bytes(16, "little")
    struct.pack_into("<i", buf, 269, tick_current)
    return bytes(buf)


def build_token_account(mint: str, owner: str, amount: int) -> bytes:
    buf = bytearray(TOKEN_ACCOUNT_MIN_SIZE)
    _put_key(buf, 0, mint)
    _put_key(buf, 32, owner)
    struct.pack_into("<Q", buf, 64, amount)
    return bytes(buf)


def build_mint(supply: int, decimals: int) -> bytes:
    buf = bytearray(MINT_MIN_SIZE)
    struct.pack_into("<Q", buf, 36, supply)
    buf[44] = decimals
    buf[45] = 1
    return bytes(buf)


# =============================================================================
# FAKE LEDGER
# =============================================================================

class FakeLedger:
    """
    In-memory token accounts and mints behind AsyncMock-compatible methods.

    Reading an unknown address raises the configured error, mimicking a
    missing account.
    """

    def __init__(self):
        self.tokens: dict[str, TokenAccount] = {}
        self.mints: dict[str, MintInfo] = {}
        self.token_reads: list[str] = []

    def add_token(self, address: str, mint: str, amount: int) -> None:
        self.tokens[address] = TokenAccount(address=address, mint=mint, owner=make_address(250), amount=amount)

    def add_mint(self, address: str, supply: int = 0, decimals: int = 9) -> None:
        self.mints[address] = MintInfo(address=address, supply=supply, decimals=decimals, is_initialized=True)

    async def get_token_account(self, address: str) -> TokenAccount:
        from core.exceptions import AccountNotFoundError

        self.token_reads.append(address)
        if address not in self.tokens:
            raise AccountNotFoundError(f"token account not found: {address}")
        return self.tokens[address]

    async def get_mint(self, address: str) -> MintInfo:
        from core.exceptions import AccountNotFoundError

        if address not in self.mints:
            raise AccountNotFoundError(f"mint account not found: {address}")
        return self.mints[address]


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def addresses():
    """Named deterministic addresses."""
    names = [
        "pool", "vault_a", "vault_b", "mint_a", "mint_b", "lp_mint",
        "other_vault_a", "other_vault_b",
    ]
    return {name: make_address(i + 1) for i, name in enumerate(names)}
