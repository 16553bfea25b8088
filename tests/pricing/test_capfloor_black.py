"""Black smile pricing of standard caplets."""
import jax.numpy as jnp
import pytest

from ratecore.core import ConfigurationError
from ratecore.market import ConstantSmileFunction, InterpolatedSmileFunction
from ratecore.models import black_price
from ratecore.pricing import CapFloorIborBlackSmileMethod, CurrencyAmount, capfloor_black_price
from tests.pricing.sample_data import NOTIONAL, make_caplet


@pytest.mark.fast
def test_forward_rate_comes_from_index_curve(flat_provider):
    forward = CapFloorIborBlackSmileMethod().forward_rate(make_caplet(), flat_provider)
    assert jnp.isclose(forward, (jnp.exp(0.03 * 0.25) - 1.0) / 0.25)


@pytest.mark.fast
def test_present_value_is_discounted_black(flat_provider):
    method = CapFloorIborBlackSmileMethod()
    caplet = make_caplet(strike=0.028)
    forward = method.forward_rate(caplet, flat_provider)

    pv = method.present_value(caplet, flat_provider, ConstantSmileFunction(0.2))

    expected = NOTIONAL * 0.25 * jnp.exp(-0.03 * 1.25) * black_price(forward, 0.028, 1.0, 0.2)
    assert isinstance(pv, CurrencyAmount)
    assert pv.currency == "USD"
    assert jnp.isclose(pv.amount, expected, rtol=1e-12)


@pytest.mark.fast
def test_smile_is_read_at_the_strike(flat_provider):
    smile = InterpolatedSmileFunction([0.02, 0.04], [0.3, 0.2])
    method = CapFloorIborBlackSmileMethod()
    caplet = make_caplet(strike=0.035)
    at_strike = method.present_value(caplet, flat_provider, ConstantSmileFunction(0.225)).amount
    assert jnp.isclose(method.present_value(caplet, flat_provider, smile).amount, at_strike)


@pytest.mark.fast
def test_strike_override_and_floor(flat_provider):
    floorlet = make_caplet(strike=0.03, is_cap=False)
    low = capfloor_black_price(floorlet, 0.03, 0.95, 0.2, strike=0.02)
    high = capfloor_black_price(floorlet, 0.03, 0.95, 0.2)
    assert 0.0 < low < high


@pytest.mark.fast
@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"strike": 0.0}, "Strike must be positive"),
        ({"tenor": 0.0}, "Fixing period end"),
        ({"fixing_time": -1.0}, "non-negative"),
    ],
)
def test_invalid_contracts(overrides, message):
    with pytest.raises(ConfigurationError, match=message):
        make_caplet(**overrides)


@pytest.mark.fast
def test_standardized_and_with_strike():
    caplet = make_caplet(in_arrears=True)
    assert caplet.payment_time == caplet.fixing_period_start_time
    assert caplet.standardized().payment_time == caplet.fixing_period_end_time
    assert caplet.with_strike(0.05).strike == 0.05
    assert caplet.strike == 0.03


@pytest.mark.fast
def test_currency_amount_arithmetic():
    total = CurrencyAmount("USD", 1.5) + CurrencyAmount("USD", 2.0)
    assert total == CurrencyAmount("USD", 3.5)
    assert 2.0 * total == CurrencyAmount("USD", 7.0)
    with pytest.raises(ValueError, match="Cannot add EUR to USD"):
        total + CurrencyAmount("EUR", 1.0)
