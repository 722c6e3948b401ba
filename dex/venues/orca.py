"""
dex/venues/orca.py - Orca Whirlpool quotes.

Slippage is a percentage here, not basis points.
"""

from decimal import Decimal

from core.constants import DEFAULT_SLIPPAGE_BPS, VenueId
from core.math import from_base_units
from core.models import VenueQuote
from dex.venues.base import VenueAdapter, abs_decimal


class OrcaAdapter(VenueAdapter):
    venue_id = VenueId.ORCA.value

    async def fetch(self, input_mint: str, output_mint: str, amount: Decimal) -> VenueQuote:
        in_decimals, out_decimals, amount_base = await self.scales(input_mint, output_mint, amount)

        data = await self.get_json({
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": amount_base,
            "slippage": str(Decimal(DEFAULT_SLIPPAGE_BPS) / 100),
        })
        if not isinstance(data, dict):
            raise self.no_quote()

        in_amount = from_base_units(data.get("inAmount") or amount_base, in_decimals)
        out_amount = from_base_units(data.get("outAmount", 0), out_decimals)
        if not in_amount or not out_amount:
            raise self.no_quote()

        return VenueQuote(
            venue_id=self.venue_id,
            in_amount=in_amount,
            out_amount=out_amount,
            price_impact=abs_decimal(data.get("priceImpact")),
            pool_id=data.get("poolId"),
        )
