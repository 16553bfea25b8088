"""Residual and analytic Jacobian of a curve calibration problem."""

from __future__ import annotations

import jax
import jax.numpy as jnp

from ratecore.math.functions import Array, as_vector
from ratecore.pricing.par_rate import par_rate_and_sensitivity

from .problem import CalibrationProblem


class YieldCurveFinderFunction:
    """``F(x) = model par rates(x) - market rates``.

    The problem is static, so the whole evaluation is traced once and compiled
    with ``jax.jit``; it stays differentiable by ``jax.jacfwd``.
    """

    def __init__(self, problem: CalibrationProblem) -> None:
        self.problem = problem
        self._compiled = jax.jit(self._residual)

    def _residual(self, x: Array) -> Array:
        return self.problem.model_rates(x) - self.problem.market_rates

    def __call__(self, x: Array) -> Array:
        return self._compiled(as_vector(x))


class YieldCurveFinderJacobian:
    """Analytic Jacobian of :class:`YieldCurveFinderFunction`.

    Row ``i`` chains the instrument's closed-form sensitivities to the zero
    yields at its cashflow times with each calibrated curve's interpolator node
    sensitivities. Sensitivities to known curves are dropped.
    """

    def __init__(self, problem: CalibrationProblem) -> None:
        self.problem = problem
        self._compiled = jax.jit(self._jacobian)

    def _jacobian(self, x: Array) -> Array:
        problem = self.problem
        bundle = problem.build_bundle(x)
        rows = []
        for instrument in problem.instruments:
            _, sensitivity = par_rate_and_sensitivity(instrument, bundle)
            row = jnp.zeros((problem.n_parameters,))
            for block in problem.layout:
                if block.name not in sensitivity:
                    continue
                times, values = sensitivity.flattened(block.name)
                row = row.at[block.start : block.end].add(values @ bundle[block.name].node_sensitivity(times))
            rows.append(row)
        return jnp.stack(rows)

    def __call__(self, x: Array) -> Array:
        return self._compiled(as_vector(x))


__all__ = ["YieldCurveFinderFunction", "YieldCurveFinderJacobian"]
