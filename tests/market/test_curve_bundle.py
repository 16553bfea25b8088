"""Tests for named curve bundles."""
import jax.numpy as jnp
import pytest

from ratecore.core import ConfigurationError
from ratecore.market import ConstantYieldCurve, CurveBundle, CurveBundleBuilder, YieldCurve


def _bundle():
    return (
        CurveBundleBuilder()
        .add("USD-FUND", ConstantYieldCurve(0.01))
        .add("USD-LIBOR-3M", YieldCurve([1.0, 5.0], [0.02, 0.03]))
        .build()
    )


@pytest.mark.fast
def test_builder_keeps_insertion_order():
    bundle = _bundle()
    assert bundle.names == ("USD-FUND", "USD-LIBOR-3M")
    assert len(bundle) == 2
    assert "USD-FUND" in bundle
    assert jnp.isclose(bundle.discount_factor("USD-FUND", 2.0), jnp.exp(-0.02))
    assert jnp.isclose(bundle.zero_rate("USD-LIBOR-3M", 3.0), 0.025)


@pytest.mark.fast
def test_bundle_is_read_only():
    bundle = _bundle()
    with pytest.raises(TypeError):
        bundle["EUR"] = ConstantYieldCurve(0.0)


@pytest.mark.fast
def test_source_mapping_changes_do_not_leak():
    curves = {"USD": ConstantYieldCurve(0.01)}
    bundle = CurveBundle(curves)
    curves["EUR"] = ConstantYieldCurve(0.0)
    assert bundle.names == ("USD",)


@pytest.mark.fast
def test_with_curve_and_merge_return_new_bundles():
    bundle = _bundle()
    replaced = bundle.with_curve("USD-FUND", ConstantYieldCurve(0.02))
    assert jnp.isclose(replaced.zero_rate("USD-FUND", 1.0), 0.02)
    assert jnp.isclose(bundle.zero_rate("USD-FUND", 1.0), 0.01)

    merged = bundle.merge({"EUR-FUND": ConstantYieldCurve(0.0)})
    assert merged.names == ("USD-FUND", "USD-LIBOR-3M", "EUR-FUND")
    with pytest.raises(ConfigurationError, match="both bundles"):
        bundle.merge({"USD-FUND": ConstantYieldCurve(0.0)})


@pytest.mark.fast
def test_missing_curve_names_available_curves():
    with pytest.raises(ConfigurationError, match="USD-FUND"):
        _bundle().get_curve("GBP")


@pytest.mark.fast
@pytest.mark.parametrize("name", ["", "USD-FUND"])
def test_builder_rejects_empty_and_duplicate_names(name):
    builder = CurveBundleBuilder().add("USD-FUND", ConstantYieldCurve(0.01))
    with pytest.raises(ConfigurationError):
        builder.add(name, ConstantYieldCurve(0.02))
