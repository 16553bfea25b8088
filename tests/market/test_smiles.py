"""Tests for strike smiles."""
import pytest

from ratecore.core import ConfigurationError
from ratecore.market import (
    ConstantSmileFunction,
    ExtrapolationPolicy,
    InterpolatedSmileFunction,
    SABRSmileFunction,
    SmileFunction,
)
from ratecore.models import SABRParams

STRIKES = [0.01, 0.02, 0.04]
VOLS = [0.30, 0.25, 0.22]


@pytest.mark.fast
def test_constant_smile():
    smile = ConstantSmileFunction(0.2)
    assert isinstance(smile, SmileFunction)
    assert smile.volatility(0.05) == 0.2
    with pytest.raises(ConfigurationError, match="Strike must be positive"):
        smile.volatility(0.0)
    with pytest.raises(ConfigurationError):
        ConstantSmileFunction(-0.1)


@pytest.mark.fast
def test_interpolation_inside_quotes():
    smile = InterpolatedSmileFunction(STRIKES, VOLS)
    assert smile.volatility(0.02) == pytest.approx(0.25)
    assert smile.volatility(0.03) == pytest.approx(0.235)


@pytest.mark.fast
def test_flat_extrapolation():
    smile = InterpolatedSmileFunction(STRIKES, VOLS, ExtrapolationPolicy.FLAT)
    assert smile.volatility(0.001) == pytest.approx(0.30)
    assert smile.volatility(1.0) == pytest.approx(0.22)


@pytest.mark.fast
def test_linear_extrapolation_is_floored():
    smile = InterpolatedSmileFunction(STRIKES, VOLS, "linear", volatility_floor=0.05)
    # left slope -5 vol per unit strike
    assert smile.volatility(0.005) == pytest.approx(0.325)
    # right slope -1.5, floored far out
    assert smile.volatility(0.06) == pytest.approx(0.19)
    assert smile.volatility(1.0) == pytest.approx(0.05)


@pytest.mark.fast
def test_error_policy_rejects_out_of_range_strikes():
    smile = InterpolatedSmileFunction(STRIKES, VOLS, ExtrapolationPolicy.ERROR)
    assert smile.volatility(0.04) == pytest.approx(0.22)
    with pytest.raises(ConfigurationError, match="outside the quoted range"):
        smile.volatility(0.05)


@pytest.mark.fast
def test_single_quote_extrapolates_flat_under_linear_policy():
    smile = InterpolatedSmileFunction([0.03], [0.2], ExtrapolationPolicy.LINEAR)
    assert smile.volatility(0.01) == pytest.approx(0.2)
    assert smile.volatility(0.09) == pytest.approx(0.2)


@pytest.mark.fast
@pytest.mark.parametrize(
    "strikes, vols, message",
    [
        ([], [], "at least one quote"),
        ([0.01, 0.02], [0.2], "2 strikes but 1 volatilities"),
        ([0.02, 0.01], [0.2, 0.2], "strictly increasing"),
        ([0.0, 0.01], [0.2, 0.2], "positive"),
        ([0.01, 0.02], [0.2, -0.1], "non-negative"),
    ],
)
def test_invalid_quotes_are_rejected(strikes, vols, message):
    with pytest.raises(ConfigurationError, match=message):
        InterpolatedSmileFunction(strikes, vols)


@pytest.mark.fast
def test_sabr_smile_skews_down():
    smile = SABRSmileFunction(0.03, 2.0, SABRParams(alpha=0.2, beta=1.0, rho=-0.3, nu=0.4))
    low, atm, high = (smile.volatility(k) for k in (0.02, 0.03, 0.04))
    assert low > atm > high > 0.0
    with pytest.raises(ConfigurationError):
        SABRSmileFunction(-0.01, 2.0, SABRParams(0.2, 1.0, 0.0, 0.4))
