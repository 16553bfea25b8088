"""Interest-rate curves described by continuously-compounded zero yields."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Union, runtime_checkable

import jax.numpy as jnp
from jax import Array

from ratecore.math.interpolation import InterpolationMethod, InterpolatorData, get_interpolator

ArrayLike = Union[float, Array]


@runtime_checkable
class DiscountCurve(Protocol):
    """Anything that can produce discount factors."""

    def discount_factor(self, t: ArrayLike) -> ArrayLike:
        ...


@dataclass(frozen=True, eq=False)
class ConstantYieldCurve:
    """
    Flat continuously-compounded curve.

    Attributes:
        rate: Zero yield applied at every maturity.
    """

    rate: float = 0.0

    def zero_rate(self, t: ArrayLike) -> ArrayLike:
        return jnp.zeros_like(jnp.asarray(t, dtype=jnp.float64)) + self.rate

    def discount_factor(self, t: ArrayLike) -> ArrayLike:
        """Compute discount factor: DF(t) = exp(-r*t)."""
        t_arr = jnp.asarray(t, dtype=jnp.float64)
        return jnp.exp(-self.rate * t_arr)

    def __call__(self, t: ArrayLike) -> ArrayLike:
        return self.discount_factor(t)

    def forward_rate(self, t0: ArrayLike, t1: ArrayLike) -> ArrayLike:
        return jnp.zeros_like(jnp.asarray(t0, dtype=jnp.float64)) + self.rate

    def simply_compounded_forward_rate(self, start: ArrayLike, end: ArrayLike, accrual: ArrayLike) -> ArrayLike:
        return _simple_forward(self, start, end, accrual)

    def node_sensitivity(self, t: ArrayLike) -> Array:
        """A flat curve has no nodes: returns a ``len(t) x 0`` matrix."""
        points = jnp.atleast_1d(jnp.asarray(t, dtype=jnp.float64))
        return jnp.zeros((points.shape[0], 0))


@dataclass(frozen=True, eq=False)
class YieldCurve:
    """
    Zero-yield curve interpolated between nodes.

    Discount factors are ``DF(t) = exp(-y(t) * t)`` where ``y`` interpolates the
    node yields and is held flat beyond the first and last node.

    Attributes:
        times: Strictly increasing node times (year fractions).
        yields: Continuously-compounded zero yields at the nodes.
        interpolation: Interpolation scheme applied to the yields.

    Example:
        >>> curve = YieldCurve(times=[1.0, 5.0], yields=[0.02, 0.03])
        >>> curve.discount_factor(2.0)
    """

    times: Array
    yields: Array
    interpolation: InterpolationMethod = InterpolationMethod.LINEAR
    _data: InterpolatorData = field(init=False, repr=False)

    def __post_init__(self):
        method = InterpolationMethod(self.interpolation)
        data = get_interpolator(method).prepare(self.times, self.yields)
        object.__setattr__(self, "interpolation", method)
        object.__setattr__(self, "times", jnp.asarray(data.knots))
        object.__setattr__(self, "yields", data.values)
        object.__setattr__(self, "_data", data)

    @property
    def size(self) -> int:
        return self._data.size

    def zero_rate(self, t: ArrayLike) -> ArrayLike:
        """Interpolated continuously-compounded zero yield at ``t``."""
        return get_interpolator(self.interpolation).evaluate(self._data, t)

    def discount_factor(self, t: ArrayLike) -> ArrayLike:
        t_arr = jnp.asarray(t, dtype=jnp.float64)
        return jnp.exp(-self.zero_rate(t_arr) * t_arr)

    def __call__(self, t: ArrayLike) -> ArrayLike:
        """Alias for discount_factor(t)."""
        return self.discount_factor(t)

    def forward_rate(self, t0: ArrayLike, t1: ArrayLike) -> ArrayLike:
        """
        Continuously-compounded forward rate between t0 and t1.

        Args:
            t0: Start time(s)
            t1: End time(s), strictly after t0

        Returns:
            ``-ln(DF(t1)/DF(t0)) / (t1 - t0)``
        """
        t0_arr = jnp.asarray(t0, dtype=jnp.float64)
        t1_arr = jnp.asarray(t1, dtype=jnp.float64)
        return (self.zero_rate(t1_arr) * t1_arr - self.zero_rate(t0_arr) * t0_arr) / (t1_arr - t0_arr)

    def simply_compounded_forward_rate(self, start: ArrayLike, end: ArrayLike, accrual: ArrayLike) -> ArrayLike:
        """Return ``(DF(start)/DF(end) - 1) / accrual``."""
        return _simple_forward(self, start, end, accrual)

    def node_sensitivity(self, t: ArrayLike) -> Array:
        """Derivatives of ``zero_rate(t)`` with respect to the node yields."""
        return get_interpolator(self.interpolation).node_sensitivity(self._data, t)

    def with_yields(self, yields: ArrayLike) -> "YieldCurve":
        """Return a curve on the same nodes with new yields."""
        return YieldCurve(self.times, yields, self.interpolation)


def _simple_forward(curve, start: ArrayLike, end: ArrayLike, accrual: ArrayLike) -> ArrayLike:
    return (curve.discount_factor(start) / curve.discount_factor(end) - 1.0) / jnp.asarray(accrual, dtype=jnp.float64)


Curve = Union[YieldCurve, ConstantYieldCurve]

__all__ = ["ArrayLike", "ConstantYieldCurve", "Curve", "DiscountCurve", "YieldCurve"]
