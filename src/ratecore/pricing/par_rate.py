"""Par rates of calibration instruments and their zero-yield sensitivities.

Each instrument kind maps to one function returning ``(rate, sensitivity)``
where ``rate`` is the quote that prices the instrument at par on the given
curves and ``sensitivity`` holds ``d rate / d y(t)`` for every cashflow time
``t`` on every curve read. With ``D(t) = exp(-y(t) t)`` all derivatives follow
from ``dD/dy = -t D``.

Everything is written in ``jax.numpy`` so the rates can be traced by
``jax.jit`` and ``jax.jacfwd``.
"""

from __future__ import annotations

from typing import Callable, Dict, Tuple

import jax.numpy as jnp
from jax import Array

from ratecore.core.errors import ConfigurationError
from ratecore.market.bundle import CurveBundle
from ratecore.products.instruments import (
    Bond,
    Cash,
    CrossCurrencySwap,
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
)

from .sensitivity import CurveSensitivity

Valued = Tuple[Array, CurveSensitivity]


def _discount(bundle: CurveBundle, curve_name: str, times) -> Tuple[Array, Array]:
    t = jnp.asarray(times, dtype=jnp.float64)
    return t, bundle.get_curve(curve_name).discount_factor(t)


def _annuity(bundle: CurveBundle, curve_name: str, times, fractions, notional: float = 1.0) -> Valued:
    t, d = _discount(bundle, curve_name, times)
    weights = notional * jnp.asarray(fractions, dtype=jnp.float64)
    return jnp.sum(weights * d), CurveSensitivity.of(curve_name, t, -weights * t * d)


def _forward_rates(bundle: CurveBundle, curve_name: str, starts, ends, accruals):
    """Simple forwards and their derivatives w.r.t. the start and end yields."""
    t_start, d_start = _discount(bundle, curve_name, starts)
    t_end, d_end = _discount(bundle, curve_name, ends)
    accrual = jnp.asarray(accruals, dtype=jnp.float64)
    ratio = d_start / d_end
    forwards = (ratio - 1.0) / accrual
    return forwards, (t_start, -t_start * ratio / accrual), (t_end, t_end * ratio / accrual)


def _ibor_leg(bundle: CurveBundle, leg: IborCouponLeg, with_spread: bool = True) -> Valued:
    t_pay, d_pay = _discount(bundle, leg.discount_curve, leg.payment_times)
    forwards, (t_start, dfs), (t_end, dfe) = _forward_rates(
        bundle, leg.forward_curve, leg.fixing_start_times, leg.fixing_end_times, leg.fixing_year_fractions
    )
    weights = leg.notional * jnp.asarray(leg.year_fractions, dtype=jnp.float64)
    coupons = forwards + leg.spread if with_spread else forwards
    value = jnp.sum(weights * coupons * d_pay)
    sensitivity = (
        CurveSensitivity.of(leg.discount_curve, t_pay, -weights * coupons * t_pay * d_pay)
        + CurveSensitivity.of(leg.forward_curve, t_start, weights * d_pay * dfs)
        + CurveSensitivity.of(leg.forward_curve, t_end, weights * d_pay * dfe)
    )
    return value, sensitivity


def _ibor_annuity(bundle: CurveBundle, leg: IborCouponLeg) -> Valued:
    return _annuity(bundle, leg.discount_curve, leg.payment_times, leg.year_fractions, leg.notional)


def _payment(bundle: CurveBundle, payment: FixedPayment) -> Valued:
    t, d = _discount(bundle, payment.curve_name, payment.time)
    return payment.amount * d, CurveSensitivity.of(payment.curve_name, t, -payment.amount * t * d)


def _ratio(numerator: Valued, denominator: Valued) -> Valued:
    """``r = n / d`` with ``dr = (dn - r dd) / d``."""
    num, d_num = numerator
    den, d_den = denominator
    rate = num / den
    return rate, (d_num + d_den.scaled(-rate)).scaled(1.0 / den)


def _single_forward(bundle: CurveBundle, curve_name: str, start: float, end: float, accrual: float) -> Valued:
    forwards, (t_start, dfs), (t_end, dfe) = _forward_rates(bundle, curve_name, [start], [end], [accrual])
    sensitivity = CurveSensitivity.of(curve_name, t_start, dfs) + CurveSensitivity.of(curve_name, t_end, dfe)
    return forwards[0], sensitivity


def _cash(instrument: Cash, bundle: CurveBundle) -> Valued:
    return _single_forward(
        bundle, instrument.curve_name, instrument.start_time, instrument.end_time, instrument.year_fraction
    )


def _forward_rate_agreement(instrument: ForwardRateAgreement | InterestRateFuture, bundle: CurveBundle) -> Valued:
    return _single_forward(
        bundle, instrument.forward_curve, instrument.fixing_start, instrument.fixing_end, instrument.year_fraction
    )


def _swap(instrument: FixedFloatSwap, bundle: CurveBundle) -> Valued:
    fixed = instrument.fixed_leg
    annuity = _annuity(bundle, fixed.curve_name, fixed.payment_times, fixed.year_fractions, fixed.notional)
    return _ratio(_ibor_leg(bundle, instrument.floating_leg), annuity)


def _basis_swap(instrument: TenorSwap, bundle: CurveBundle) -> Valued:
    pay_value, pay_sens = _ibor_leg(bundle, instrument.pay_leg)
    receive_value, receive_sens = _ibor_leg(bundle, instrument.receive_leg, with_spread=False)
    numerator = (pay_value - receive_value, pay_sens + receive_sens.scaled(-1.0))
    return _ratio(numerator, _ibor_annuity(bundle, instrument.receive_leg))


def _bond(instrument: Bond, bundle: CurveBundle) -> Valued:
    # clean price 1 at settlement: D(ts) (1 + c a) = c A + D(Tn)
    name = instrument.curve_name
    t_settle, d_settle = _discount(bundle, name, instrument.settlement_time)
    t_final, d_final = _discount(bundle, name, instrument.maturity)
    annuity, annuity_sens = _annuity(bundle, name, instrument.payment_times, instrument.year_fractions)
    accrued = instrument.accrued_year_fraction
    numerator = (
        d_settle - d_final,
        CurveSensitivity.of(name, t_settle, -t_settle * d_settle) + CurveSensitivity.of(name, t_final, t_final * d_final),
    )
    denominator = (
        annuity - accrued * d_settle,
        annuity_sens + CurveSensitivity.of(name, t_settle, accrued * t_settle * d_settle),
    )
    return _ratio(numerator, denominator)


def _note_without_spread(bundle: CurveBundle, note: FloatingRateNote) -> Valued:
    """Value of the note's exchanges and floating coupons at zero spread."""
    initial, initial_sens = _payment(bundle, note.initial_payment)
    final, final_sens = _payment(bundle, note.final_payment)
    coupons, coupon_sens = _ibor_leg(bundle, note.floating_leg, with_spread=False)
    return initial + final + coupons, initial_sens + final_sens + coupon_sens


def _frn(instrument: FloatingRateNote, bundle: CurveBundle) -> Valued:
    value, sensitivity = _note_without_spread(bundle, instrument)
    return _ratio((-value, sensitivity.scaled(-1.0)), _ibor_annuity(bundle, instrument.floating_leg))


def _cross_currency_swap(instrument: CrossCurrencySwap, bundle: CurveBundle) -> Valued:
    # spot * V_foreign = V_domestic, solved for the foreign spread
    domestic, domestic_sens = _note_without_spread(bundle, instrument.domestic_note)
    domestic_spread, domestic_spread_sens = _ibor_annuity(bundle, instrument.domestic_note.floating_leg)
    domestic = domestic + instrument.domestic_note.rate * domestic_spread
    domestic_sens = domestic_sens + domestic_spread_sens.scaled(instrument.domestic_note.rate)

    foreign, foreign_sens = _note_without_spread(bundle, instrument.foreign_note)
    inverse_spot = 1.0 / instrument.spot_fx
    numerator = (
        domestic * inverse_spot - foreign,
        domestic_sens.scaled(inverse_spot) + foreign_sens.scaled(-1.0),
    )
    return _ratio(numerator, _ibor_annuity(bundle, instrument.foreign_note.floating_leg))


def _fx_forward(instrument: ForexForward, bundle: CurveBundle) -> Valued:
    domestic = instrument.domestic_payment
    foreign = instrument.foreign_payment
    t_dom, d_dom = _discount(bundle, domestic.curve_name, domestic.time)
    t_for, d_for = _discount(bundle, foreign.curve_name, foreign.time)
    rate = instrument.spot_fx * d_for / d_dom
    sensitivity = CurveSensitivity.of(foreign.curve_name, t_for, -t_for * rate) + CurveSensitivity.of(
        domestic.curve_name, t_dom, t_dom * rate
    )
    return rate, sensitivity


_PAR_RATE_CALCULATORS: Dict[InstrumentKind, Callable[..., Valued]] = {
    InstrumentKind.CASH: _cash,
    InstrumentKind.FRA: _forward_rate_agreement,
    InstrumentKind.FUTURE: _forward_rate_agreement,
    InstrumentKind.SWAP: _swap,
    InstrumentKind.BASIS_SWAP: _basis_swap,
    InstrumentKind.BOND: _bond,
    InstrumentKind.FRN: _frn,
    InstrumentKind.CROSS_CURRENCY_SWAP: _cross_currency_swap,
    InstrumentKind.FX_FORWARD: _fx_forward,
}


def supported_kinds() -> Tuple[InstrumentKind, ...]:
    return tuple(_PAR_RATE_CALCULATORS)


def resolve_calculator(instrument: Instrument) -> Callable[..., Valued]:
    """Look up the par-rate function of ``instrument``'s kind."""
    kind = instrument_kind(instrument)
    calculator = _PAR_RATE_CALCULATORS.get(kind)
    if calculator is None:
        raise ConfigurationError(f"No par-rate calculator for instrument kind {kind.value!r}")
    return calculator


def par_rate_and_sensitivity(instrument: Instrument, bundle: CurveBundle) -> Valued:
    """Par rate of ``instrument`` and its sensitivity to the curves' zero yields."""
    return resolve_calculator(instrument)(instrument, bundle)


def par_rate(instrument: Instrument, bundle: CurveBundle) -> Array:
    return par_rate_and_sensitivity(instrument, bundle)[0]


def par_rate_sensitivity(instrument: Instrument, bundle: CurveBundle) -> CurveSensitivity:
    return par_rate_and_sensitivity(instrument, bundle)[1]


__all__ = [
    "par_rate",
    "par_rate_and_sensitivity",
    "par_rate_sensitivity",
    "resolve_calculator",
    "supported_kinds",
]
