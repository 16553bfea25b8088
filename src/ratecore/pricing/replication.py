"""In-arrears Ibor caps/floors priced by static replication on the smile.

An in-arrears caplet pays ``(L - K)^+`` at the *start* of the fixing period.
Under the forward measure of the period end its value is
``E[(1 + d L) (L - K)^+]``, and

    (1 + d L)(L - K)^+ = (1 + d K)(L - K)^+ + d ((L - K)^+)^2
    ((L - K)^+)^2      = 2 * integral_K^inf (L - x)^+ dx

so the price is a strike-weighted strip of standard caplets. For floorlets
``(1 + d L)(K - L)^+ = (1 + d K)(K - L)^+ - d ((K - L)^+)^2`` gives a strip of
standard floorlets below the strike, entering with a minus sign.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from ratecore.core.errors import BudgetExceededError, PricingError, RateCoreError
from ratecore.core.schemas import ReplicationSettings
from ratecore.market.provider import CurveProvider
from ratecore.market.smile import SmileFunction
from ratecore.math.integration import RungeKuttaIntegrator1D
from ratecore.products.capfloor import CapFloorIbor

from .capfloor_black import CapFloorIborBlackSmileMethod, capfloor_black_price
from .results import CurrencyAmount

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _StandardOptionIntegrand:
    """Standard caplet/floorlet price as a function of its strike."""

    capfloor: CapFloorIbor
    forward: float
    discount: float
    smile: SmileFunction

    def __call__(self, strike: float) -> float:
        return capfloor_black_price(
            self.capfloor, self.forward, self.discount, self.smile.volatility(strike), strike=strike
        )


class CapFloorIborInArrearsReplicationMethod:
    """Replication pricer for in-arrears Ibor caplets and floorlets.

    Parameters
    ----------
    settings : ReplicationSettings, optional
        Tail convergence criterion, doubling cap, initial cutoff and the
        quadrature settings.
    """

    def __init__(self, settings: Optional[ReplicationSettings] = None) -> None:
        self.settings = settings or ReplicationSettings()
        self.integrator = RungeKuttaIntegrator1D.from_settings(self.settings.integrator)
        self._standard_method = CapFloorIborBlackSmileMethod()

    def present_value(
        self, capfloor: CapFloorIbor, provider: CurveProvider, smile: SmileFunction
    ) -> CurrencyAmount:
        """Present value of ``capfloor`` paid at its fixing-period start.

        Raises
        ------
        PricingError
            If the market data or the quadrature fail; the cause is chained.
        """
        standard = capfloor.standardized()
        try:
            amount = self._present_value(standard, provider, smile)
        except (RateCoreError, ArithmeticError, ValueError) as exc:
            raise PricingError(f"In-arrears replication failed for {capfloor}: {exc}") from exc
        if not math.isfinite(amount):
            raise PricingError(f"In-arrears replication produced a non-finite value: {amount}")
        return CurrencyAmount(capfloor.currency, amount)

    def _present_value(self, standard: CapFloorIbor, provider: CurveProvider, smile: SmileFunction) -> float:
        forward = self._standard_method.forward_rate(standard, provider)
        discount_start = float(provider.discount_factor(standard.currency, standard.fixing_period_start_time))
        discount_end = float(provider.discount_factor(standard.currency, standard.payment_time))
        accrual = standard.fixing_accrual_factor
        strike = standard.strike

        beta = (1.0 + accrual * forward) * discount_end / discount_start
        integrand = _StandardOptionIntegrand(standard, forward, discount_end, smile)
        strike_part = (1.0 + accrual * strike) * integrand(strike)

        if standard.is_cap:
            integral = self._cap_integral(integrand, standard, forward, smile)
            sign = 1.0
        else:
            integral = self.integrator.integrate(integrand, self.settings.floor_lower_fraction * strike, strike)
            sign = -1.0
        integral_part = 2.0 * accrual * integral
        return (strike_part + sign * integral_part) / beta

    def _cap_integral(
        self,
        integrand: _StandardOptionIntegrand,
        capfloor: CapFloorIbor,
        forward: float,
        smile: SmileFunction,
    ) -> float:
        settings = self.settings
        atm_std = smile.volatility(forward) * math.sqrt(max(capfloor.fixing_time, 0.0))
        upper = max(forward * math.exp(settings.sigma_cutoff * atm_std), capfloor.strike)
        integral = self.integrator.integrate(integrand, capfloor.strike, upper)

        remainder = integrand(upper) * upper
        doublings = 0
        while not self._tail_converged(remainder, integral) and doublings < settings.max_doublings:
            try:
                integral += self.integrator.integrate(integrand, upper, 2.0 * upper)
            except BudgetExceededError as exc:
                logger.warning(
                    "Replication tail on [%.6g, %.6g] exhausted the integration budget after %d doubling(s); "
                    "keeping integral=%.6e: %s",
                    upper,
                    2.0 * upper,
                    doublings,
                    integral,
                    exc,
                )
                return integral
            upper *= 2.0
            remainder = integrand(upper) * upper
            doublings += 1

        if not self._tail_converged(remainder, integral):
            logger.warning(
                "Replication upper bound doubled %d times without convergence: "
                "bound=%.6g remainder=%.3e integral=%.6e",
                doublings,
                upper,
                remainder,
                integral,
            )
        return integral

    def _tail_converged(self, remainder: float, integral: float) -> bool:
        size = abs(remainder)
        return size <= self.settings.absolute_error or size <= self.settings.relative_error * abs(integral)


__all__ = ["CapFloorIborInArrearsReplicationMethod"]
