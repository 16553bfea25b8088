"""Contracts: calibration instruments and Ibor caps/floors."""

from .capfloor import CapFloorIbor
from .instruments import (
    Bond,
    Cash,
    CrossCurrencySwap,
    FixedCouponLeg,
    FixedFloatSwap,
    FixedPayment,
    FloatingRateNote,
    ForexForward,
    ForwardRateAgreement,
    IborCouponLeg,
    Instrument,
    InstrumentKind,
    InterestRateFuture,
    TenorSwap,
    instrument_kind,
    replace_rate,
)

__all__ = [
    "Bond",
    "CapFloorIbor",
    "Cash",
    "CrossCurrencySwap",
    "FixedCouponLeg",
    "FixedFloatSwap",
    "FixedPayment",
    "FloatingRateNote",
    "ForexForward",
    "ForwardRateAgreement",
    "IborCouponLeg",
    "Instrument",
    "InstrumentKind",
    "InterestRateFuture",
    "TenorSwap",
    "instrument_kind",
    "replace_rate",
]
