"""Calibration instruments as cashflow-time representations.

Every instrument is a frozen dataclass tagged with an :class:`InstrumentKind`.
Times are year fractions from the valuation date; curves are referenced by
name and resolved against a :class:`~ratecore.market.bundle.CurveBundle` at
valuation time.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import ClassVar, Sequence, Tuple, Union

from ratecore.core.errors import ConfigurationError


class InstrumentKind(str, Enum):
    """Tag of every supported calibration instrument."""

    CASH = "cash"
    FRA = "fra"
    FUTURE = "future"
    SWAP = "swap"
    BASIS_SWAP = "basis_swap"
    BOND = "bond"
    FRN = "frn"
    CROSS_CURRENCY_SWAP = "cross_currency_swap"
    FX_FORWARD = "fx_forward"


def _as_times(values: Sequence[float], what: str) -> Tuple[float, ...]:
    result = tuple(float(v) for v in values)
    if any(v < 0.0 for v in result):
        raise ConfigurationError(f"{what} must be non-negative")
    return result


def _require_name(name: str, what: str) -> None:
    if not name:
        raise ConfigurationError(f"{what} must name a curve")


def _check_period(start: float, end: float, accrual: float) -> None:
    if start < 0.0 or end <= start:
        raise ConfigurationError(f"Invalid accrual period [{start}, {end}]")
    if accrual <= 0.0:
        raise ConfigurationError(f"Accrual factor must be positive, got {accrual}")


@dataclass(frozen=True)
class FixedPayment:
    """A single known amount paid at ``time`` and discounted on ``curve_name``."""

    time: float
    amount: float
    curve_name: str

    def __post_init__(self):
        if self.time < 0.0:
            raise ConfigurationError(f"Payment time must be non-negative, got {self.time}")
        _require_name(self.curve_name, "FixedPayment.curve_name")


@dataclass(frozen=True)
class FixedCouponLeg:
    """Fixed coupons ``notional * coupon * year_fraction`` paid at ``payment_times``.

    Attributes:
        payment_times: Coupon payment times.
        year_fractions: Accrual factor of each coupon.
        coupon: Fixed rate.
        curve_name: Discounting curve.
        notional: Leg notional.
    """

    payment_times: Tuple[float, ...]
    year_fractions: Tuple[float, ...]
    coupon: float
    curve_name: str
    notional: float = 1.0

    def __post_init__(self):
        times = _as_times(self.payment_times, "Payment times")
        fractions = tuple(float(v) for v in self.year_fractions)
        if not times:
            raise ConfigurationError("A fixed leg needs at least one coupon")
        if len(times) != len(fractions):
            raise ConfigurationError(
                f"Got {len(times)} payment times but {len(fractions)} year fractions"
            )
        _require_name(self.curve_name, "FixedCouponLeg.curve_name")
        object.__setattr__(self, "payment_times", times)
        object.__setattr__(self, "year_fractions", fractions)

    @property
    def maturity(self) -> float:
        return self.payment_times[-1]


@dataclass(frozen=True)
class IborCouponLeg:
    """Floating coupons ``notional * (forward + spread) * year_fraction``.

    The forward of coupon ``i`` fixes over ``[fixing_start_times[i],
    fixing_end_times[i]]`` with accrual ``fixing_year_fractions[i]`` on
    ``forward_curve``; the coupon is paid at ``payment_times[i]`` and
    discounted on ``discount_curve``.
    """

    payment_times: Tuple[float, ...]
    year_fractions: Tuple[float, ...]
    fixing_start_times: Tuple[float, ...]
    fixing_end_times: Tuple[float, ...]
    fixing_year_fractions: Tuple[float, ...]
    discount_curve: str
    forward_curve: str
    spread: float = 0.0
    notional: float = 1.0

    def __post_init__(self):
        columns = {
            "payment_times": _as_times(self.payment_times, "Payment times"),
            "year_fractions": tuple(float(v) for v in self.year_fractions),
            "fixing_start_times": _as_times(self.fixing_start_times, "Fixing start times"),
            "fixing_end_times": _as_times(self.fixing_end_times, "Fixing end times"),
            "fixing_year_fractions": tuple(float(v) for v in self.fixing_year_fractions),
        }
        lengths = {len(v) for v in columns.values()}
        if lengths == {0}:
            raise ConfigurationError("A floating leg needs at least one coupon")
        if len(lengths) != 1:
            raise ConfigurationError(
                "Floating leg columns differ in length: "
                + ", ".join(f"{name}={len(values)}" for name, values in columns.items())
            )
        for start, end, accrual in zip(
            columns["fixing_start_times"], columns["fixing_end_times"], columns["fixing_year_fractions"]
        ):
            _check_period(start, end, accrual)
        _require_name(self.discount_curve, "IborCouponLeg.discount_curve")
        _require_name(self.forward_curve, "IborCouponLeg.forward_curve")
        for name, values in columns.items():
            object.__setattr__(self, name, values)

    @property
    def maturity(self) -> float:
        return self.payment_times[-1]


@dataclass(frozen=True)
class Cash:
    """Deposit accruing ``rate`` over ``[start_time, end_time]``."""

    kind: ClassVar[InstrumentKind] = InstrumentKind.CASH

    start_time: float
    end_time: float
    year_fraction: float
    rate: float
    curve_name: str

    def __post_init__(self):
        _check_period(self.start_time, self.end_time, self.year_fraction)
        _require_name(self.curve_name, "Cash.curve_name")

    @property
    def maturity(self) -> float:
        return self.end_time

    def curve_names(self) -> Tuple[str, ...]:
        return (self.curve_name,)


@dataclass(frozen=True)
class ForwardRateAgreement:
    """FRA on the forward of ``forward_curve`` over ``[fixing_start, fixing_end]``."""

    kind: ClassVar[InstrumentKind] = InstrumentKind.FRA

    fixing_start: float
    fixing_end: float
    year_fraction: float
    rate: float
    forward_curve: str

    def __post_init__(self):
        _check_period(self.fixing_start, self.fixing_end, self.year_fraction)
        _require_name(self.forward_curve, "ForwardRateAgreement.forward_curve")

    @property
    def maturity(self) -> float:
        return self.fixing_end

    def curve_names(self) -> Tuple[str, ...]:
        return (self.forward_curve,)


@dataclass(frozen=True)
class InterestRateFuture:
    """Rate future, quoted as a rate (``1 - price``), without convexity adjustment."""

    kind: ClassVar[InstrumentKind] = InstrumentKind.FUTURE

    fixing_start: float
    fixing_end: float
    year_fraction: float
    rate: float
    forward_curve: str

    def __post_init__(self):
        _check_period(self.fixing_start, self.fixing_end, self.year_fraction)
        _require_name(self.forward_curve, "InterestRateFuture.forward_curve")

    @property
    def maturity(self) -> float:
        return self.fixing_end

    def curve_names(self) -> Tuple[str, ...]:
        return (self.forward_curve,)


@dataclass(frozen=True)
class FixedFloatSwap:
    """Fixed-for-floating swap; its quote is the fixed coupon."""

    kind: ClassVar[InstrumentKind] = InstrumentKind.SWAP

    fixed_leg: FixedCouponLeg
    floating_leg: IborCouponLeg

    @property
    def rate(self) -> float:
        return self.fixed_leg.coupon

    @property
    def maturity(self) -> float:
        return max(self.fixed_leg.maturity, self.floating_leg.maturity)

    def curve_names(self) -> Tuple[str, ...]:
        return _unique(
            (self.fixed_leg.curve_name, self.floating_leg.discount_curve, self.floating_leg.forward_curve)
        )


@dataclass(frozen=True)
class TenorSwap:
    """Floating-for-floating basis swap; its quote is the receive-leg spread."""

    kind: ClassVar[InstrumentKind] = InstrumentKind.BASIS_SWAP

    pay_leg: IborCouponLeg
    receive_leg: IborCouponLeg

    @property
    def rate(self) -> float:
        return self.receive_leg.spread

    @property
    def maturity(self) -> float:
        return max(self.pay_leg.maturity, self.receive_leg.maturity)

    def curve_names(self) -> Tuple[str, ...]:
        return _unique(
            (
                self.pay_leg.discount_curve,
                self.pay_leg.forward_curve,
                self.receive_leg.discount_curve,
                self.receive_leg.forward_curve,
            )
        )


@dataclass(frozen=True)
class Bond:
    """Fixed-coupon bullet bond; its quote is the par coupon.

    Attributes:
        payment_times: Coupon times, the last one also repays the notional.
        year_fractions: Coupon accrual factors.
        coupon: Coupon rate.
        curve_name: Discounting (issuer) curve.
        settlement_time: Settlement time of the trade.
        accrued_year_fraction: Coupon accrual already elapsed at settlement;
            the par coupon is the one for which the clean price is 1.
    """

    kind: ClassVar[InstrumentKind] = InstrumentKind.BOND

    payment_times: Tuple[float, ...]
    year_fractions: Tuple[float, ...]
    coupon: float
    curve_name: str
    settlement_time: float = 0.0
    accrued_year_fraction: float = 0.0

    def __post_init__(self):
        times = _as_times(self.payment_times, "Payment times")
        fractions = tuple(float(v) for v in self.year_fractions)
        if not times:
            raise ConfigurationError("A bond needs at least one coupon")
        if len(times) != len(fractions):
            raise ConfigurationError(
                f"Got {len(times)} payment times but {len(fractions)} year fractions"
            )
        if self.settlement_time < 0.0 or times[0] <= self.settlement_time:
            raise ConfigurationError(f"Settlement time {self.settlement_time} must precede the first coupon")
        if self.accrued_year_fraction < 0.0:
            raise ConfigurationError("Accrued year fraction must be non-negative")
        _require_name(self.curve_name, "Bond.curve_name")
        object.__setattr__(self, "payment_times", times)
        object.__setattr__(self, "year_fractions", fractions)

    @property
    def rate(self) -> float:
        return self.coupon

    @property
    def maturity(self) -> float:
        return self.payment_times[-1]

    def curve_names(self) -> Tuple[str, ...]:
        return (self.curve_name,)


@dataclass(frozen=True)
class FloatingRateNote:
    """Floating leg plus notional exchanges; its quote is the floating spread."""

    kind: ClassVar[InstrumentKind] = InstrumentKind.FRN

    floating_leg: IborCouponLeg
    initial_payment: FixedPayment
    final_payment: FixedPayment

    @property
    def rate(self) -> float:
        return self.floating_leg.spread

    @property
    def notional(self) -> float:
        return self.floating_leg.notional

    @property
    def maturity(self) -> float:
        return max(self.floating_leg.maturity, self.final_payment.time)

    def curve_names(self) -> Tuple[str, ...]:
        return _unique(
            (
                self.floating_leg.discount_curve,
                self.floating_leg.forward_curve,
                self.initial_payment.curve_name,
                self.final_payment.curve_name,
            )
        )


@dataclass(frozen=True)
class CrossCurrencySwap:
    """Receive the foreign note, pay the domestic note; quote is the foreign spread.

    ``spot_fx`` converts one unit of foreign currency into domestic currency.
    """

    kind: ClassVar[InstrumentKind] = InstrumentKind.CROSS_CURRENCY_SWAP

    domestic_note: FloatingRateNote
    foreign_note: FloatingRateNote
    spot_fx: float

    def __post_init__(self):
        if self.spot_fx <= 0.0:
            raise ConfigurationError(f"Spot FX must be positive, got {self.spot_fx}")

    @property
    def rate(self) -> float:
        return self.foreign_note.rate

    @property
    def maturity(self) -> float:
        return max(self.domestic_note.maturity, self.foreign_note.maturity)

    def curve_names(self) -> Tuple[str, ...]:
        return _unique(self.domestic_note.curve_names() + self.foreign_note.curve_names())


@dataclass(frozen=True)
class ForexForward:
    """Exchange of a domestic amount against a foreign amount.

    The quote is the forward FX rate ``-domestic.amount / foreign.amount``.
    """

    kind: ClassVar[InstrumentKind] = InstrumentKind.FX_FORWARD

    domestic_payment: FixedPayment
    foreign_payment: FixedPayment
    spot_fx: float

    def __post_init__(self):
        if self.spot_fx <= 0.0:
            raise ConfigurationError(f"Spot FX must be positive, got {self.spot_fx}")
        if self.foreign_payment.amount == 0.0:
            raise ConfigurationError("Foreign amount of an FX forward must be non-zero")

    @property
    def rate(self) -> float:
        return -self.domestic_payment.amount / self.foreign_payment.amount

    @property
    def maturity(self) -> float:
        return max(self.domestic_payment.time, self.foreign_payment.time)

    def curve_names(self) -> Tuple[str, ...]:
        return _unique((self.domestic_payment.curve_name, self.foreign_payment.curve_name))


Instrument = Union[
    Cash,
    ForwardRateAgreement,
    InterestRateFuture,
    FixedFloatSwap,
    TenorSwap,
    Bond,
    FloatingRateNote,
    CrossCurrencySwap,
    ForexForward,
]


def _unique(names: Sequence[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(names))


def _replace_simple(instrument, rate: float):
    return replace(instrument, rate=rate)


def _replace_swap(instrument: FixedFloatSwap, rate: float) -> FixedFloatSwap:
    return replace(instrument, fixed_leg=replace(instrument.fixed_leg, coupon=rate))


def _replace_basis_swap(instrument: TenorSwap, rate: float) -> TenorSwap:
    return replace(instrument, receive_leg=replace(instrument.receive_leg, spread=rate))


def _replace_bond(instrument: Bond, rate: float) -> Bond:
    return replace(instrument, coupon=rate)


def _replace_frn(instrument: FloatingRateNote, rate: float) -> FloatingRateNote:
    return replace(instrument, floating_leg=replace(instrument.floating_leg, spread=rate))


def _replace_ccs(instrument: CrossCurrencySwap, rate: float) -> CrossCurrencySwap:
    return replace(instrument, foreign_note=_replace_frn(instrument.foreign_note, rate))


def _replace_fx_forward(instrument: ForexForward, rate: float) -> ForexForward:
    domestic = replace(instrument.domestic_payment, amount=-rate * instrument.foreign_payment.amount)
    return replace(instrument, domestic_payment=domestic)


_RATE_REPLACERS = {
    InstrumentKind.CASH: _replace_simple,
    InstrumentKind.FRA: _replace_simple,
    InstrumentKind.FUTURE: _replace_simple,
    InstrumentKind.SWAP: _replace_swap,
    InstrumentKind.BASIS_SWAP: _replace_basis_swap,
    InstrumentKind.BOND: _replace_bond,
    InstrumentKind.FRN: _replace_frn,
    InstrumentKind.CROSS_CURRENCY_SWAP: _replace_ccs,
    InstrumentKind.FX_FORWARD: _replace_fx_forward,
}


def instrument_kind(instrument) -> InstrumentKind:
    """Return the kind tag of ``instrument`` or raise for foreign objects."""
    kind = getattr(instrument, "kind", None)
    if not isinstance(kind, InstrumentKind):
        raise ConfigurationError(f"Unsupported instrument type: {type(instrument).__name__}")
    return kind


def replace_rate(instrument: Instrument, rate: float) -> Instrument:
    """Return a copy of ``instrument`` whose quoted rate (or spread) is ``rate``."""
    replacer = _RATE_REPLACERS.get(instrument_kind(instrument))
    if replacer is None:
        raise ConfigurationError(f"Cannot replace the rate of a {type(instrument).__name__}")
    return replacer(instrument, float(rate))


__all__ = [
    "Bond",
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
