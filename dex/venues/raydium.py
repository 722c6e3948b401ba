"""
dex/venues/raydium.py - Raydium compute API quotes (swap-base-in).

The API echoes no input amount, so in_amount is the requested amount.
Failures come back as 200 with success=false and a msg field.
"""

from decimal import Decimal

from core.constants import DEFAULT_SLIPPAGE_BPS, VenueId
from core.exceptions import ErrorCode, VenueQuoteError
from core.math import from_base_units, safe_decimal
from core.models import VenueQuote
from dex.venues.base import VenueAdapter

BPS = Decimal(10_000)


class RaydiumAdapter(VenueAdapter):
    venue_id = VenueId.RAYDIUM.value

    async def fetch(self, input_mint: str, output_mint: str, amount: Decimal) -> VenueQuote:
        in_decimals, out_decimals, amount_base = await self.scales(input_mint, output_mint, amount)

        body = await self.get_json({
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": amount_base,
            "slippageBps": str(DEFAULT_SLIPPAGE_BPS),
            "txVersion": "V0",
        })
        if not isinstance(body, dict):
            raise self.no_quote()
        if body.get("success") is False:
            raise VenueQuoteError(
                f"raydium rejected quote: {body.get('msg', 'unknown reason')}",
                venue_id=self.venue_id,
                code=ErrorCode.QUOTE_REJECTED,
            )

        data = body.get("data") or {}
        in_amount = from_base_units(amount_base, in_decimals)
        out_amount = from_base_units(data.get("outputAmount", 0), out_decimals)
        if not in_amount or not out_amount:
            raise self.no_quote()

        fee_bps = safe_decimal(data.get("feeBps"))
        pool_keys = data.get("poolKeys") or {}
        return VenueQuote(
            venue_id=self.venue_id,
            in_amount=in_amount,
            out_amount=out_amount,
            fee=fee_bps / BPS if fee_bps else None,
            pool_id=pool_keys.get("id") or data.get("id"),
        )
