"""Newton iteration for systems of non-linear equations ``F(x) = 0``."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

import jax.numpy as jnp
import numpy as np

from ratecore.core.errors import (
    BudgetExceededError,
    ConfigurationError,
    NonConvergenceError,
    NonFiniteValueError,
    SingularSystemError,
)
from ratecore.core.schemas import NewtonSettings

from .functions import Array, JacobianFunction, VectorFunction, as_vector, check_finite

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewtonResult:
    """Outcome of a successful Newton solve."""

    root: Array
    residual: Array
    residual_norm: float
    iterations: int
    function_evaluations: int


class NewtonVectorRootFinder:
    """Damped Newton solver.

    Each step solves ``J(x_k) . delta = -F(x_k)`` (least squares when the
    system has more equations than unknowns) and backtracks on ``||F||`` when
    damping is enabled. The iteration stops once ``||F|| < function_tolerance``.

    Raises
    ------
    SingularSystemError
        Jacobian condition number above ``max_condition_number`` or a
        non-finite Newton step.
    NonConvergenceError
        Iteration cap reached or the step collapsed before the residual did.
    BudgetExceededError
        ``time_budget`` seconds elapsed.
    """

    def __init__(self, settings: Optional[NewtonSettings] = None) -> None:
        self.settings = settings or NewtonSettings()

    def get_root(self, function: VectorFunction, jacobian: JacobianFunction, start: Array) -> Array:
        """Return the root only; see :meth:`solve`."""
        return self.solve(function, jacobian, start).root

    def solve(self, function: VectorFunction, jacobian: JacobianFunction, start: Array) -> NewtonResult:
        settings = self.settings
        x = as_vector(start)
        fx = self._evaluate(function, x)
        evaluations = 1
        if fx.shape[0] < x.shape[0]:
            raise ConfigurationError(
                f"System is underdetermined: {fx.shape[0]} equations for {x.shape[0]} unknowns"
            )
        norm = _norm(fx)
        started = time.perf_counter()

        for iteration in range(settings.max_iterations):
            if norm < settings.function_tolerance:
                return NewtonResult(x, fx, norm, iteration, evaluations)
            if settings.time_budget is not None and time.perf_counter() - started > settings.time_budget:
                raise BudgetExceededError(
                    f"Newton solve exceeded its {settings.time_budget}s budget after {iteration} iterations",
                    iterate=x,
                    residual=norm,
                    iterations=iteration,
                )

            matrix = jnp.atleast_2d(jnp.asarray(jacobian(x), dtype=jnp.float64))
            if matrix.shape != (fx.shape[0], x.shape[0]):
                raise ConfigurationError(
                    f"Jacobian has shape {matrix.shape}, expected {(fx.shape[0], x.shape[0])}"
                )
            check_finite(matrix, "Jacobian entry")
            delta = self._newton_step(matrix, fx)

            fraction = 1.0
            candidate = x + delta
            f_candidate = function(candidate)
            evaluations += 1
            if settings.damping:
                while fraction > settings.min_damping and not _improves(f_candidate, norm):
                    fraction *= 0.5
                    candidate = x + fraction * delta
                    f_candidate = function(candidate)
                    evaluations += 1
            f_candidate = as_vector(f_candidate)
            check_finite(f_candidate)

            step_norm = fraction * _norm(delta)
            x, fx, norm = candidate, f_candidate, _norm(f_candidate)
            logger.debug(
                "Newton iteration %d: |F|=%.3e step=%.3e damping=%.4f",
                iteration + 1,
                norm,
                step_norm,
                fraction,
            )
            if norm >= settings.function_tolerance and step_norm <= settings.step_tolerance * (1.0 + _norm(x)):
                raise NonConvergenceError(
                    f"Newton iteration stalled at |F|={norm:.3e} after {iteration + 1} iterations",
                    iterate=x,
                    residual=norm,
                    iterations=iteration + 1,
                )

        if norm < settings.function_tolerance:
            return NewtonResult(x, fx, norm, settings.max_iterations, evaluations)
        raise NonConvergenceError(
            f"Newton solver failed to converge after {settings.max_iterations} iterations; |F|={norm:.3e}",
            iterate=x,
            residual=norm,
            iterations=settings.max_iterations,
        )

    def _evaluate(self, function: VectorFunction, x: Array) -> Array:
        values = as_vector(function(x))
        check_finite(values)
        return values

    def _newton_step(self, matrix: Array, fx: Array) -> Array:
        singular_values = np.asarray(jnp.linalg.svd(matrix, compute_uv=False))
        smallest = float(singular_values[-1])
        condition = float(singular_values[0]) / smallest if smallest > 0.0 else float("inf")
        if condition > self.settings.max_condition_number:
            raise SingularSystemError(
                f"Jacobian is singular or ill-conditioned (condition number {condition:.3e})",
                condition_number=condition,
            )
        if matrix.shape[0] == matrix.shape[1]:
            delta = jnp.linalg.solve(matrix, -fx)
        else:
            delta = jnp.linalg.lstsq(matrix, -fx)[0]
        try:
            check_finite(delta, "Newton step")
        except NonFiniteValueError as exc:
            raise SingularSystemError(str(exc), condition_number=condition) from exc
        return delta


def _norm(values: Array) -> float:
    return float(jnp.linalg.norm(values))


def _improves(values: Array, reference: float) -> bool:
    concrete = np.asarray(values)
    return bool(np.all(np.isfinite(concrete))) and float(np.linalg.norm(concrete)) < reference


__all__ = ["NewtonResult", "NewtonVectorRootFinder"]
