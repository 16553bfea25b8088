"""Tests for the bracketing bisection root finder."""
import math

import pytest

from ratecore.core import BisectionSettings, ConfigurationError, NonConvergenceError, NonFiniteValueError
from ratecore.math import BisectionSingleRootFinder


@pytest.mark.fast
@pytest.mark.parametrize("lower, upper", [(0.0, 2.0), (1.0, 5.0)])
def test_finds_square_root(lower, upper):
    root = BisectionSingleRootFinder().get_root(lambda x: x * x - 2.0, lower, upper)
    assert math.isclose(root, math.sqrt(2.0), abs_tol=1e-11)


@pytest.mark.fast
def test_decreasing_function_is_handled():
    root = BisectionSingleRootFinder().get_root(lambda x: 1.0 - x**3, 0.0, 3.0)
    assert math.isclose(root, 1.0, abs_tol=1e-11)


@pytest.mark.fast
def test_endpoint_root_returns_immediately():
    calls = []

    def function(x):
        calls.append(x)
        return x - 1.0

    assert BisectionSingleRootFinder().get_root(function, 1.0, 4.0) == 1.0
    assert calls == [1.0]
    assert BisectionSingleRootFinder().get_root(lambda x: x - 4.0, 1.0, 4.0) == 4.0


@pytest.mark.fast
def test_unbracketed_root_does_not_converge():
    with pytest.raises(NonConvergenceError, match="not bracketed") as excinfo:
        BisectionSingleRootFinder().get_root(lambda x: x * x + 3.0, -1.0, 2.0)
    assert excinfo.value.iterate == -1.0
    assert excinfo.value.residual == 4.0
    assert excinfo.value.iterations == 0


@pytest.mark.fast
def test_empty_bracket_is_rejected():
    with pytest.raises(ConfigurationError, match="empty"):
        BisectionSingleRootFinder().get_root(lambda x: x, 1.0, 1.0)


@pytest.mark.fast
def test_attempt_cap_raises():
    settings = BisectionSettings(max_attempts=5)
    with pytest.raises(NonConvergenceError) as excinfo:
        BisectionSingleRootFinder(settings).get_root(lambda x: x - 0.3, 0.0, 1.0)
    assert excinfo.value.iterations == 5


@pytest.mark.fast
def test_non_finite_value_reports_point():
    def function(x):
        return math.inf if x > 0.5 else x - 0.7

    with pytest.raises(NonFiniteValueError) as excinfo:
        BisectionSingleRootFinder().get_root(function, 0.0, 1.0)
    assert excinfo.value.point == 1.0
