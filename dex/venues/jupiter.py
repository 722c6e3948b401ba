"""
dex/venues/jupiter.py - Jupiter aggregator quotes (lite API).

Response fields used: inAmount, outAmount (base units), priceImpactPct,
routePlan[].swapInfo.{ammKey, label}.
"""

from decimal import Decimal

from core.constants import DEFAULT_SLIPPAGE_BPS, VenueId
from core.math import from_base_units
from core.models import VenueQuote
from dex.venues.base import VenueAdapter, abs_decimal


class JupiterAdapter(VenueAdapter):
    venue_id = VenueId.JUPITER.value

    async def fetch(self, input_mint: str, output_mint: str, amount: Decimal) -> VenueQuote:
        in_decimals, out_decimals, amount_base = await self.scales(input_mint, output_mint, amount)

        data = await self.get_json({
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": amount_base,
            "slippageBps": str(DEFAULT_SLIPPAGE_BPS),
        })
        if not isinstance(data, dict):
            raise self.no_quote()

        in_amount = from_base_units(data.get("inAmount") or amount_base, in_decimals)
        out_amount = from_base_units(data.get("outAmount", 0), out_decimals)
        if not in_amount or not out_amount:
            raise self.no_quote()

        hops = [step.get("swapInfo") or {} for step in data.get("routePlan") or [] if isinstance(step, dict)]
        return VenueQuote(
            venue_id=self.venue_id,
            in_amount=in_amount,
            out_amount=out_amount,
            price_impact=abs_decimal(data.get("priceImpactPct")),
            route=tuple(hop["label"] for hop in hops if hop.get("label")),
            pool_id=hops[0].get("ammKey") if hops else None,
        )
