"""Black pricing of a vanilla Ibor caplet/floorlet with a strike smile."""

from __future__ import annotations

from typing import Optional

from ratecore.market.provider import CurveProvider
from ratecore.market.smile import SmileFunction
from ratecore.models.black import black_price
from ratecore.products.capfloor import CapFloorIbor

from .results import CurrencyAmount


def capfloor_black_price(
    capfloor: CapFloorIbor,
    forward: float,
    discount: float,
    volatility: float,
    strike: Optional[float] = None,
) -> float:
    """``N * tau * DF * Black(F, K, t_fix, sigma)``; ``strike`` overrides the contract strike."""
    option = float(
        black_price(
            forward,
            capfloor.strike if strike is None else strike,
            capfloor.fixing_time,
            volatility,
            is_call=capfloor.is_cap,
        )
    )
    return option * discount * capfloor.notional * capfloor.payment_year_fraction


class CapFloorIborBlackSmileMethod:
    """Present value of a caplet/floorlet with the smile volatility at its strike."""

    def forward_rate(self, capfloor: CapFloorIbor, provider: CurveProvider) -> float:
        return float(
            provider.simply_compounded_forward_rate(
                capfloor.index,
                capfloor.fixing_period_start_time,
                capfloor.fixing_period_end_time,
                capfloor.fixing_accrual_factor,
            )
        )

    def present_value(
        self, capfloor: CapFloorIbor, provider: CurveProvider, smile: SmileFunction
    ) -> CurrencyAmount:
        forward = self.forward_rate(capfloor, provider)
        discount = float(provider.discount_factor(capfloor.currency, capfloor.payment_time))
        volatility = smile.volatility(capfloor.strike)
        return CurrencyAmount(capfloor.currency, capfloor_black_price(capfloor, forward, discount, volatility))


__all__ = ["CapFloorIborBlackSmileMethod", "capfloor_black_price"]
