import math

import jax
import pytest

from ratecore.core import BisectionSettings, NonConvergenceError
from ratecore.models import black_price, black_vega, implied_volatility


@pytest.mark.fast
@pytest.mark.unit
def test_black_call_atm_approximation():
    # ATM: F * (2 N(s/2) - 1) ~ 0.4 F s
    p = float(black_price(0.05, 0.05, 1.0, 0.2))
    assert 0.0039 < p < 0.0040


@pytest.mark.fast
@pytest.mark.unit
def test_put_call_parity():
    call = float(black_price(0.04, 0.03, 2.0, 0.3, is_call=True))
    put = float(black_price(0.04, 0.03, 2.0, 0.3, is_call=False))
    assert math.isclose(call - put, 0.01, abs_tol=1e-15)


@pytest.mark.fast
@pytest.mark.unit
def test_zero_volatility_returns_intrinsic():
    assert float(black_price(0.04, 0.03, 1.0, 0.0)) == pytest.approx(0.01)
    assert float(black_price(0.04, 0.03, 0.0, 0.3, is_call=False)) == 0.0


@pytest.mark.fast
@pytest.mark.unit
def test_vega_matches_autodiff():
    vega = float(black_vega(0.05, 0.06, 1.5, 0.25))
    grad = float(jax.grad(lambda s: black_price(0.05, 0.06, 1.5, s))(0.25))
    assert math.isclose(vega, grad, rel_tol=1e-10)


@pytest.mark.fast
@pytest.mark.unit
@pytest.mark.parametrize(
    "forward, strike, expiry, sigma, is_call",
    [
        (0.03, 0.05, 5.0, 0.35, True),
        (0.03, 0.028, 0.5, 0.15, False),
        (0.02, 0.04, 10.0, 0.6, False),
    ],
)
def test_implied_volatility_round_trip(forward, strike, expiry, sigma, is_call):
    price = float(black_price(forward, strike, expiry, sigma, is_call=is_call))
    recovered = implied_volatility(price, forward, strike, expiry, is_call=is_call)
    assert math.isclose(recovered, sigma, abs_tol=1e-8)


@pytest.mark.fast
@pytest.mark.unit
def test_atm_implied_volatility_is_recovered_to_high_accuracy():
    price = float(black_price(0.05, 0.05, 1.0, 0.2))
    assert math.isclose(implied_volatility(price, 0.05, 0.05, 1.0), 0.2, abs_tol=1e-10)


@pytest.mark.fast
@pytest.mark.unit
def test_unattainable_price_does_not_converge():
    # a call is worth less than the forward
    with pytest.raises(NonConvergenceError, match="not bracketed") as excinfo:
        implied_volatility(0.06, 0.05, 0.05, 1.0)
    assert excinfo.value.iterate == 10.0
    assert excinfo.value.residual == pytest.approx(0.01, abs=1e-6)


@pytest.mark.fast
@pytest.mark.unit
def test_custom_bracket():
    settings = BisectionSettings(lower_volatility=0.1, upper_volatility=0.5)
    price = float(black_price(0.05, 0.05, 1.0, 0.3))
    assert math.isclose(implied_volatility(price, 0.05, 0.05, 1.0, settings=settings), 0.3, abs_tol=1e-10)
