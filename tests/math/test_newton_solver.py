"""Tests for the damped Newton solver."""
import jax.numpy as jnp
import pytest

from ratecore.core import (
    BudgetExceededError,
    ConfigurationError,
    NewtonSettings,
    NonConvergenceError,
    NonFiniteValueError,
    SingularSystemError,
)
from ratecore.math import NewtonVectorRootFinder, autodiff_jacobian


def _circle_and_line(x):
    return jnp.array([x[0] ** 2 + x[1] ** 2 - 4.0, x[0] - x[1]])


@pytest.mark.fast
def test_solves_nonlinear_system():
    result = NewtonVectorRootFinder().solve(_circle_and_line, autodiff_jacobian(_circle_and_line), jnp.array([1.0, 0.5]))

    assert jnp.allclose(result.root, jnp.sqrt(2.0) * jnp.ones(2), atol=1e-12)
    assert result.residual_norm < 1e-10
    assert result.function_evaluations >= result.iterations + 1


@pytest.mark.fast
def test_get_root_returns_root_only():
    def linear(x):
        return jnp.array([2.0 * x[0] - 1.0])

    root = NewtonVectorRootFinder().get_root(linear, lambda x: jnp.array([[2.0]]), jnp.array([10.0]))
    assert jnp.isclose(root[0], 0.5)


@pytest.mark.fast
def test_converged_start_needs_no_iteration():
    def function(x):
        return x - 1.0

    result = NewtonVectorRootFinder().solve(function, lambda x: jnp.eye(2), jnp.ones(2))
    assert result.iterations == 0
    assert result.function_evaluations == 1


@pytest.mark.fast
def test_damping_rescues_overshooting_step():
    # arctan flattens out, so an undamped Newton step from 2.0 diverges
    def function(x):
        return jnp.arctan(x)

    jacobian = autodiff_jacobian(function)
    root = NewtonVectorRootFinder().get_root(function, jacobian, jnp.array([2.0]))
    assert abs(float(root[0])) < 1e-10

    with pytest.raises((NonConvergenceError, NonFiniteValueError, SingularSystemError)):
        NewtonVectorRootFinder(NewtonSettings(damping=False, max_iterations=20)).get_root(
            function, jacobian, jnp.array([2.0])
        )


@pytest.mark.fast
def test_overdetermined_consistent_system_uses_least_squares():
    def function(x):
        return jnp.array([x[0] - 1.0, 2.0 * (x[0] - 1.0), x[0] ** 2 - 1.0])

    root = NewtonVectorRootFinder().get_root(function, autodiff_jacobian(function), jnp.array([3.0]))
    assert jnp.isclose(root[0], 1.0, atol=1e-10)


@pytest.mark.fast
def test_underdetermined_system_is_rejected():
    def function(x):
        return jnp.array([x[0] + x[1]])

    with pytest.raises(ConfigurationError, match="underdetermined"):
        NewtonVectorRootFinder().solve(function, autodiff_jacobian(function), jnp.zeros(2))


@pytest.mark.fast
def test_singular_jacobian_is_reported():
    def function(x):
        return jnp.array([x[0] + x[1] - 1.0, 2.0 * x[0] + 2.0 * x[1] - 3.0])

    with pytest.raises(SingularSystemError) as excinfo:
        NewtonVectorRootFinder().solve(function, autodiff_jacobian(function), jnp.zeros(2))
    assert excinfo.value.condition_number > 1e14


@pytest.mark.fast
def test_jacobian_shape_mismatch_is_rejected():
    def function(x):
        return x - 1.0

    with pytest.raises(ConfigurationError, match="Jacobian has shape"):
        NewtonVectorRootFinder().solve(function, lambda x: jnp.eye(3), jnp.zeros(2))


@pytest.mark.fast
def test_non_finite_start_is_rejected():
    def function(x):
        return jnp.log(x)

    with pytest.raises(NonFiniteValueError):
        NewtonVectorRootFinder().solve(function, autodiff_jacobian(function), jnp.array([-1.0]))


@pytest.mark.fast
def test_iteration_cap_reports_last_iterate():
    def function(x):
        return jnp.exp(x) - 2.0

    settings = NewtonSettings(max_iterations=2, damping=False)
    with pytest.raises(NonConvergenceError) as excinfo:
        NewtonVectorRootFinder(settings).solve(function, autodiff_jacobian(function), jnp.array([5.0]))
    assert excinfo.value.iterations == 2
    assert excinfo.value.residual > settings.function_tolerance


@pytest.mark.fast
def test_time_budget_is_enforced():
    # a residual that never reaches zero keeps the solver busy
    def function(x):
        return jnp.array([x[0] ** 2 + 1.0])

    settings = NewtonSettings(time_budget=1e-9, max_iterations=10_000)
    with pytest.raises(BudgetExceededError):
        NewtonVectorRootFinder(settings).solve(function, autodiff_jacobian(function), jnp.array([1.0]))
