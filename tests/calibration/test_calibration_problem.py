"""Validation and bookkeeping of calibration problems."""
import jax.numpy as jnp
import pytest

from ratecore.calibration import CalibrationProblem, CurveNodeSpec, ParameterBlock
from ratecore.core import ConfigurationError
from ratecore.market import ConstantYieldCurve
from ratecore.math import InterpolationMethod
from tests.calibration.sample_data import make_cash, make_fra, make_swap


def _deposits(curve="USD"):
    return [make_cash(t, curve) for t in (0.5, 1.0, 2.0)]


@pytest.mark.fast
@pytest.mark.unit
def test_layout_follows_declaration_order():
    instruments = [make_cash(t, "USD-FUND") for t in (0.5, 1.0)] + [make_fra(t, "USD-LIBOR-3M") for t in (0.5, 1.0, 1.5)]
    specs = [CurveNodeSpec("USD-FUND", [0.5, 1.0]), CurveNodeSpec("USD-LIBOR-3M", [0.5, 1.0, 1.5])]
    problem = CalibrationProblem(instruments, [0.01] * 5, specs)

    assert problem.layout == (ParameterBlock("USD-FUND", 0, 2), ParameterBlock("USD-LIBOR-3M", 2, 5))
    assert problem.n_parameters == 5
    assert problem.n_equations == 5
    assert problem.curve_names == ("USD-FUND", "USD-LIBOR-3M")

    x = jnp.arange(5.0)
    unpacked = problem.unpack(x)
    assert jnp.array_equal(unpacked["USD-LIBOR-3M"], jnp.array([2.0, 3.0, 4.0]))
    assert jnp.array_equal(problem.initial_guess(0.03), jnp.full(5, 0.03))


@pytest.mark.fast
@pytest.mark.unit
def test_bundle_puts_calibrated_curves_before_known_ones():
    instruments = [make_swap(t, "USD-FUND", "USD-LIBOR-3M") for t in (1.0, 2.0)]
    known = {"USD-FUND": ConstantYieldCurve(0.01)}
    problem = CalibrationProblem(instruments, [0.02, 0.02], [CurveNodeSpec("USD-LIBOR-3M", [1.0, 2.0])], known)

    bundle = problem.build_bundle(jnp.array([0.02, 0.025]))
    assert bundle.names == ("USD-LIBOR-3M", "USD-FUND")
    assert jnp.isclose(bundle.zero_rate("USD-LIBOR-3M", 1.5), 0.0225)


@pytest.mark.fast
@pytest.mark.unit
def test_model_rates_match_market_rates_on_consistent_curve():
    problem = CalibrationProblem(_deposits(), [0.0] * 3, [CurveNodeSpec("USD", [0.5, 1.0, 2.0])])
    rates = problem.model_rates(jnp.full(3, 0.02))
    # simple deposit rate of a flat continuously-compounded curve
    expected = (jnp.exp(0.02 * jnp.array([0.5, 1.0, 2.0])) - 1.0) / jnp.array([0.5, 1.0, 2.0])
    assert jnp.allclose(rates, expected)


@pytest.mark.fast
@pytest.mark.unit
def test_underdetermined_problem_is_rejected_before_solving():
    spec = CurveNodeSpec("USD", [0.25, 0.5, 1.0, 2.0])
    with pytest.raises(ConfigurationError, match="underdetermined: more nodes \\(4\\) than instruments \\(3\\)"):
        CalibrationProblem(_deposits(), [0.01, 0.01, 0.01], [spec])


@pytest.mark.fast
@pytest.mark.unit
@pytest.mark.parametrize(
    "instruments, rates, specs, known, message",
    [
        ([], [], [CurveNodeSpec("USD", [1.0])], None, "No calibration instruments"),
        (_deposits(), [0.01, 0.01], [CurveNodeSpec("USD", [1.0])], None, "Got 2 market rates for 3"),
        (_deposits(), [0.01, float("nan"), 0.01], [CurveNodeSpec("USD", [1.0])], None, "finite"),
        (_deposits(), [0.01] * 3, [], None, "No curves to calibrate"),
        (
            _deposits(),
            [0.01] * 3,
            [CurveNodeSpec("USD", [1.0]), CurveNodeSpec("USD", [2.0])],
            None,
            "Duplicate curve names",
        ),
        (
            _deposits(),
            [0.01] * 3,
            [CurveNodeSpec("USD", [1.0])],
            {"USD": ConstantYieldCurve(0.01)},
            "both known and calibrated",
        ),
        (_deposits("EUR"), [0.01] * 3, [CurveNodeSpec("USD", [1.0])], None, "unknown curve"),
        (
            _deposits(),
            [0.01] * 3,
            [CurveNodeSpec("USD", [1.0]), CurveNodeSpec("GBP", [1.0])],
            None,
            "not referenced",
        ),
    ],
)
def test_inconsistent_problems_are_rejected(instruments, rates, specs, known, message):
    with pytest.raises(ConfigurationError, match=message):
        CalibrationProblem(instruments, rates, specs, known)


@pytest.mark.fast
@pytest.mark.unit
def test_foreign_instrument_type_is_rejected():
    with pytest.raises(ConfigurationError, match="Unsupported instrument type"):
        CalibrationProblem([object()], [0.01], [CurveNodeSpec("USD", [1.0])])


@pytest.mark.fast
@pytest.mark.unit
@pytest.mark.parametrize(
    "times, message",
    [([], "no nodes"), ([1.0, 1.0], "strictly increasing"), ([-1.0, 1.0], "non-negative")],
)
def test_curve_node_spec_validation(times, message):
    with pytest.raises(ConfigurationError, match=message):
        CurveNodeSpec("USD", times)


@pytest.mark.fast
@pytest.mark.unit
def test_curve_node_spec_normalizes_inputs():
    spec = CurveNodeSpec("USD", [1, 2], "natural_cubic_spline")
    assert spec.node_times == (1.0, 2.0)
    assert spec.interpolation is InterpolationMethod.NATURAL_CUBIC_SPLINE
    assert spec.size == 2


@pytest.mark.fast
@pytest.mark.unit
def test_parameter_vector_length_is_checked():
    problem = CalibrationProblem(_deposits(), [0.01] * 3, [CurveNodeSpec("USD", [1.0, 2.0])])
    with pytest.raises(ConfigurationError, match="expected 2"):
        problem.unpack(jnp.zeros(3))
