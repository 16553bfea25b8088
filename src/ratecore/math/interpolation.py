"""One-dimensional interpolators used by the yield curves.

Both interpolators are linear in the node values, which is what makes the
analytic calibration Jacobian cheap: ``node_sensitivity`` returns the matrix
``d value(x_i) / d node_j``. Outside the knot range both extrapolate flat.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

import jax
import jax.numpy as jnp
import numpy as np

from ratecore.core.errors import ConfigurationError

from .functions import Array


class InterpolationMethod(str, Enum):
    """Interpolation schemes available for curve nodes."""

    LINEAR = "linear"
    NATURAL_CUBIC_SPLINE = "natural_cubic_spline"


@dataclass(frozen=True)
class InterpolatorData:
    """Knots and values prepared for repeated evaluation.

    Attributes:
        knots: Concrete, strictly increasing abscissae.
        values: Node values; may be a JAX tracer during differentiation.
        second_derivative_map: For splines, the matrix mapping ``values`` to
            the second derivatives at the knots. ``None`` for linear data.
    """

    knots: np.ndarray
    values: Array
    second_derivative_map: Optional[np.ndarray] = None

    @property
    def size(self) -> int:
        return int(self.knots.shape[0])


class Interpolator1D(ABC):
    """Base class of the curve interpolators."""

    method: InterpolationMethod

    def prepare(self, knots, values) -> InterpolatorData:
        knots_arr = np.asarray(knots, dtype=np.float64).reshape(-1)
        values_arr = jnp.asarray(values, dtype=jnp.float64).reshape(-1)
        _validate_knots(knots_arr, values_arr.shape[0])
        return InterpolatorData(knots_arr, values_arr, self._second_derivative_map(knots_arr))

    @abstractmethod
    def evaluate(self, data: InterpolatorData, x) -> Array:
        """Interpolated value(s) at ``x``."""

    def node_sensitivity(self, data: InterpolatorData, x) -> Array:
        """Return the ``len(x) x n`` matrix of derivatives w.r.t. the node values."""
        points = jnp.atleast_1d(jnp.asarray(x, dtype=jnp.float64))

        def values_at(node_values: Array) -> Array:
            return self.evaluate(replace(data, values=node_values), points)

        return jax.jacfwd(values_at)(data.values)

    def _second_derivative_map(self, knots: np.ndarray) -> Optional[np.ndarray]:
        return None


class LinearInterpolator1D(Interpolator1D):
    """Piecewise-linear interpolation with flat extrapolation."""

    method = InterpolationMethod.LINEAR

    def evaluate(self, data: InterpolatorData, x) -> Array:
        points = jnp.asarray(x, dtype=jnp.float64)
        if data.size == 1:
            return jnp.zeros_like(points) + data.values[0]
        return jnp.interp(points, jnp.asarray(data.knots), data.values)


class NaturalCubicSplineInterpolator1D(Interpolator1D):
    """Natural cubic spline (zero curvature at both ends) with flat extrapolation.

    The second derivatives solve the usual tridiagonal system. Since the knots
    are fixed, the system is factored once in ``prepare`` into a matrix ``Q``
    with ``M = Q @ values``, which keeps evaluation differentiable in the
    values.
    """

    method = InterpolationMethod.NATURAL_CUBIC_SPLINE

    def _second_derivative_map(self, knots: np.ndarray) -> np.ndarray:
        n = knots.shape[0]
        q = np.zeros((n, n))
        if n < 3:
            return q
        h = np.diff(knots)
        interior = n - 2
        system = np.zeros((interior, interior))
        rhs = np.zeros((interior, n))
        for row in range(interior):
            i = row + 1
            system[row, row] = (h[i - 1] + h[i]) / 3.0
            if row > 0:
                system[row, row - 1] = h[i - 1] / 6.0
            if row < interior - 1:
                system[row, row + 1] = h[i] / 6.0
            rhs[row, i - 1] = 1.0 / h[i - 1]
            rhs[row, i] = -1.0 / h[i - 1] - 1.0 / h[i]
            rhs[row, i + 1] = 1.0 / h[i]
        q[1:-1, :] = np.linalg.solve(system, rhs)
        return q

    def evaluate(self, data: InterpolatorData, x) -> Array:
        points = jnp.asarray(x, dtype=jnp.float64)
        if data.size == 1:
            return jnp.zeros_like(points) + data.values[0]

        knots = jnp.asarray(data.knots)
        y = data.values
        m = jnp.asarray(data.second_derivative_map) @ y

        clipped = jnp.clip(points, knots[0], knots[-1])
        i = jnp.clip(jnp.searchsorted(knots, clipped, side="right") - 1, 0, data.size - 2)
        left, right = knots[i], knots[i + 1]
        h = right - left
        a = right - clipped
        b = clipped - left
        return (
            m[i] * a**3 / (6.0 * h)
            + m[i + 1] * b**3 / (6.0 * h)
            + (y[i] / h - m[i] * h / 6.0) * a
            + (y[i + 1] / h - m[i + 1] * h / 6.0) * b
        )


_INTERPOLATORS = {
    InterpolationMethod.LINEAR: LinearInterpolator1D,
    InterpolationMethod.NATURAL_CUBIC_SPLINE: NaturalCubicSplineInterpolator1D,
}


def get_interpolator(method: InterpolationMethod | str) -> Interpolator1D:
    """Return the interpolator registered for ``method``."""
    try:
        key = InterpolationMethod(method)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown interpolation method: {method!r}") from exc
    return _INTERPOLATORS[key]()


def _validate_knots(knots: np.ndarray, n_values: int) -> None:
    if knots.shape[0] == 0:
        raise ConfigurationError("Interpolator needs at least one knot")
    if knots.shape[0] != n_values:
        raise ConfigurationError(f"Got {knots.shape[0]} knots but {n_values} values")
    if not np.all(np.isfinite(knots)):
        raise ConfigurationError("Knots must be finite")
    if np.any(np.diff(knots) <= 0.0):
        raise ConfigurationError("Knots must be strictly increasing")


__all__ = [
    "InterpolationMethod",
    "Interpolator1D",
    "InterpolatorData",
    "LinearInterpolator1D",
    "NaturalCubicSplineInterpolator1D",
    "get_interpolator",
]
