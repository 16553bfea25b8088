"""Tests for the interpolated and flat yield curves."""
import jax.numpy as jnp
import pytest

from ratecore.core import ConfigurationError
from ratecore.market import ConstantYieldCurve, DiscountCurve, YieldCurve
from ratecore.math import InterpolationMethod


@pytest.fixture
def curve():
    return YieldCurve(times=[1.0, 2.0, 5.0], yields=[0.02, 0.025, 0.03])


@pytest.mark.fast
def test_discount_factors_from_zero_yields(curve):
    assert jnp.isclose(curve.discount_factor(2.0), jnp.exp(-0.05))
    assert jnp.isclose(curve(0.0), 1.0)
    assert jnp.isclose(curve.zero_rate(3.5), 0.0275)
    assert curve.size == 3


@pytest.mark.fast
def test_flat_extrapolation_of_yields(curve):
    assert jnp.isclose(curve.zero_rate(0.25), 0.02)
    assert jnp.isclose(curve.discount_factor(10.0), jnp.exp(-0.3))


@pytest.mark.fast
def test_forward_rates(curve):
    continuous = curve.forward_rate(1.0, 2.0)
    assert jnp.isclose(continuous, (0.05 - 0.02) / 1.0)

    simple = curve.simply_compounded_forward_rate(1.0, 2.0, 1.0)
    assert jnp.isclose(simple, jnp.exp(0.03) - 1.0)


@pytest.mark.fast
def test_vectorised_evaluation(curve):
    times = jnp.array([0.5, 1.0, 3.0])
    assert curve.discount_factor(times).shape == (3,)
    assert curve.node_sensitivity(times).shape == (3, 3)


@pytest.mark.fast
def test_with_yields_keeps_nodes(curve):
    shifted = curve.with_yields(curve.yields + 0.01)
    assert jnp.array_equal(shifted.times, curve.times)
    assert shifted.interpolation is curve.interpolation
    assert jnp.isclose(shifted.zero_rate(2.0), 0.035)


@pytest.mark.fast
def test_spline_curve_matches_nodes():
    curve = YieldCurve([0.5, 1.0, 2.0, 5.0], [0.01, 0.015, 0.02, 0.03], "natural_cubic_spline")
    assert curve.interpolation is InterpolationMethod.NATURAL_CUBIC_SPLINE
    assert jnp.isclose(curve.zero_rate(2.0), 0.02)


@pytest.mark.fast
def test_invalid_nodes_are_rejected():
    with pytest.raises(ConfigurationError):
        YieldCurve([2.0, 1.0], [0.01, 0.02])
    with pytest.raises(ConfigurationError):
        YieldCurve([1.0, 2.0], [0.01])


@pytest.mark.fast
def test_constant_curve():
    flat = ConstantYieldCurve(0.03)
    assert isinstance(flat, DiscountCurve)
    assert jnp.isclose(flat.discount_factor(2.0), jnp.exp(-0.06))
    assert jnp.isclose(flat.forward_rate(1.0, 3.0), 0.03)
    assert jnp.isclose(flat.simply_compounded_forward_rate(0.0, 0.5, 0.5), (jnp.exp(0.015) - 1.0) / 0.5)
    assert flat.node_sensitivity([1.0, 2.0]).shape == (2, 0)
