"""Ibor caplet/floorlet contract."""

from __future__ import annotations

from dataclasses import dataclass, replace

from ratecore.core.errors import ConfigurationError


@dataclass(frozen=True)
class CapFloorIbor:
    """
    A single Ibor caplet or floorlet.

    The payoff ``notional * payment_year_fraction * max(w * (L - strike), 0)``
    with ``w = +1`` for a cap and ``-1`` for a floor is paid at
    ``payment_time``, where ``L`` is the ``index`` rate fixing at
    ``fixing_time`` over ``[fixing_period_start_time, fixing_period_end_time]``.

    Attributes:
        currency: Payment currency.
        payment_time: Payment time.
        payment_year_fraction: Accrual factor applied to the payoff.
        notional: Contract notional.
        fixing_time: Fixing (expiry) time.
        index: Name of the Ibor index.
        fixing_period_start_time: Start of the fixing period.
        fixing_period_end_time: End of the fixing period.
        fixing_accrual_factor: Accrual factor of the fixing period.
        strike: Positive strike rate.
        is_cap: True for a caplet, False for a floorlet.
    """

    currency: str
    payment_time: float
    payment_year_fraction: float
    notional: float
    fixing_time: float
    index: str
    fixing_period_start_time: float
    fixing_period_end_time: float
    fixing_accrual_factor: float
    strike: float
    is_cap: bool = True

    def __post_init__(self):
        if self.payment_time < 0.0:
            raise ConfigurationError(f"Payment time must be non-negative, got {self.payment_time}")
        if self.fixing_time < 0.0:
            raise ConfigurationError(f"Fixing time must be non-negative, got {self.fixing_time}")
        if self.fixing_period_end_time <= self.fixing_period_start_time:
            raise ConfigurationError("Fixing period end must be after its start")
        if self.fixing_accrual_factor <= 0.0 or self.payment_year_fraction <= 0.0:
            raise ConfigurationError("Accrual factors must be positive")
        if self.strike <= 0.0:
            raise ConfigurationError(f"Strike must be positive for lognormal pricing, got {self.strike}")

    def standardized(self) -> "CapFloorIbor":
        """Same contract paid at the end of the fixing period."""
        return replace(self, payment_time=self.fixing_period_end_time)

    def with_strike(self, strike: float) -> "CapFloorIbor":
        return replace(self, strike=strike)


__all__ = ["CapFloorIbor"]
