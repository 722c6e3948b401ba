# PATH: core/models.py
"""
Core data models for swaplens.

All models are request-scoped value objects: built fresh per call, frozen,
and handed to the caller. Human-readable amounts are Decimal, raw ledger
amounts are int. NO FLOATS.

TOMBSTONE CONTRACT:
  A VenueQuote with error_reason set marks a failed venue call. It keeps
  zero amounts and is excluded from best-quote ranking and arbitrage scans,
  but stays in VenueComparison.quotes so every configured venue is reported.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from core.constants import PoolKind


def _opt_str(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


# ============================================================================
# RESERVES
# ============================================================================

@dataclass(frozen=True)
class VaultInfo:
    """One side of a pool's holdings at the moment of the read."""
    address: str
    amount: int  # raw base units
    mint: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "amount": str(self.amount),
            "mint": self.mint,
        }


@dataclass(frozen=True)
class FeeSchedule:
    trade_fee_rate: Decimal
    protocol_fee_rate: Optional[Decimal] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trade_fee_rate": str(self.trade_fee_rate),
            "protocol_fee_rate": _opt_str(self.protocol_fee_rate),
        }


@dataclass(frozen=True)
class ClmmWindow:
    """Active tick window of a concentrated-liquidity pool."""
    current_price: Decimal
    tick_current: int
    tick_spacing: int
    nearest_lower_tick: int
    nearest_upper_tick: int
    lower_price: Decimal
    upper_price: Decimal
    liquidity: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_price": str(self.current_price),
            "tick_current": self.tick_current,
            "tick_spacing": self.tick_spacing,
            "nearest_lower_tick": self.nearest_lower_tick,
            "nearest_upper_tick": self.nearest_upper_tick,
            "lower_price": str(self.lower_price),
            "upper_price": str(self.upper_price),
            "liquidity": self.liquidity,
        }


@dataclass(frozen=True)
class PoolReserves:
    """
    Normalized reserve snapshot of one pool.

    mid_price is vault_b.amount / vault_a.amount in raw units (or the pool's
    own current price for CLMM); depth is min(vault_a.amount, vault_b.amount).
    """
    pool_kind: PoolKind
    pool_id: str
    vault_a: VaultInfo
    vault_b: VaultInfo
    mid_price: Decimal
    depth: int
    fee_schedule: Optional[FeeSchedule] = None
    clmm_window: Optional[ClmmWindow] = None
    lp_supply: Optional[int] = None
    raw_state: Any = field(default=None, compare=False, repr=False)

    def liquidity_for_mint(self, mint: str) -> Optional[int]:
        """Raw amount held for mint, or None if the pool does not hold it."""
        if self.vault_a.mint == mint:
            return self.vault_a.amount
        if self.vault_b.mint == mint:
            return self.vault_b.amount
        return None

    def oriented(self, input_mint: str) -> Tuple[int, int]:
        """(reserve_in, reserve_out) for a swap that sells input_mint."""
        if self.vault_a.mint == input_mint:
            return self.vault_a.amount, self.vault_b.amount
        return self.vault_b.amount, self.vault_a.amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pool_kind": self.pool_kind.value,
            "pool_id": self.pool_id,
            "vault_a": self.vault_a.to_dict(),
            "vault_b": self.vault_b.to_dict(),
            "mid_price": str(self.mid_price),
            "depth": str(self.depth),
            "fee_schedule": self.fee_schedule.to_dict() if self.fee_schedule else None,
            "clmm_window": self.clmm_window.to_dict() if self.clmm_window else None,
            "lp_supply": None if self.lp_supply is None else str(self.lp_supply),
        }


# ============================================================================
# VENUE QUOTES
# ============================================================================

@dataclass(frozen=True)
class VenueQuote:
    """Quote from one venue, normalized to human-readable units."""
    venue_id: str
    in_amount: Decimal
    out_amount: Decimal
    price_impact: Optional[Decimal] = None
    fee: Optional[Decimal] = None
    route: Tuple[str, ...] = ()
    pool_id: Optional[str] = None
    efficiency_pct: Optional[Decimal] = None
    error_reason: Optional[str] = None

    @classmethod
    def tombstone(cls, venue_id: str, reason: str) -> "VenueQuote":
        return cls(
            venue_id=venue_id,
            in_amount=Decimal("0"),
            out_amount=Decimal("0"),
            error_reason=reason,
        )

    @property
    def is_tombstone(self) -> bool:
        return self.error_reason is not None

    @property
    def is_rankable(self) -> bool:
        """Usable for ranking and arbitrage: no error, both amounts positive."""
        return not self.is_tombstone and self.out_amount > 0 and self.in_amount > 0

    @property
    def unit_price(self) -> Decimal:
        """Output received per unit of input."""
        if self.in_amount == 0:
            return Decimal("0")
        return self.out_amount / self.in_amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "venue_id": self.venue_id,
            "in_amount": str(self.in_amount),
            "out_amount": str(self.out_amount),
            "price_impact": _opt_str(self.price_impact),
            "fee": _opt_str(self.fee),
            "route": list(self.route),
            "pool_id": self.pool_id,
            "efficiency_pct": _opt_str(self.efficiency_pct),
            "error_reason": self.error_reason,
        }


@dataclass(frozen=True)
class ArbitrageOpportunity:
    """
    Cross-venue mispricing for one venue pair.

    profit_estimate is (sell_price - buy_price) * in_amount of the first quote
    of the pair. It ignores fees and slippage at trade size; treat it as an
    upper bound, not a realizable profit.
    """
    buy_venue_id: str
    sell_venue_id: str
    buy_price: Decimal
    sell_price: Decimal
    spread: Decimal
    spread_pct: Decimal
    profit_estimate: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "buy_venue_id": self.buy_venue_id,
            "sell_venue_id": self.sell_venue_id,
            "buy_price": str(self.buy_price),
            "sell_price": str(self.sell_price),
            "spread": str(self.spread),
            "spread_pct": str(self.spread_pct),
            "profit_estimate": str(self.profit_estimate),
        }


@dataclass(frozen=True)
class VenueComparison:
    input_mint: str
    output_mint: str
    amount: Decimal
    timestamp_ms: int
    quotes: Tuple[VenueQuote, ...]
    best_quote: VenueQuote
    arbitrage_opportunities: Optional[Tuple[ArbitrageOpportunity, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input_mint": self.input_mint,
            "output_mint": self.output_mint,
            "amount": str(self.amount),
            "timestamp_ms": self.timestamp_ms,
            "quotes": [q.to_dict() for q in self.quotes],
            "best_quote": self.best_quote.to_dict(),
            "arbitrage_opportunities": (
                [a.to_dict() for a in self.arbitrage_opportunities]
                if self.arbitrage_opportunities
                else None
            ),
        }
