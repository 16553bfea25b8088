"""Function abstractions shared by the root finders and the integrator."""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

import jax.numpy as jnp
import numpy as np

from ratecore.core.errors import NonFiniteValueError

Array = jnp.ndarray

ScalarFunction = Callable[[float], float]
VectorFunction = Callable[[Array], Array]
JacobianFunction = Callable[[Array], Array]


@runtime_checkable
class DifferentiableVectorFunction(Protocol):
    """A vector field ``F: R^n -> R^m`` that can also report its Jacobian."""

    def __call__(self, x: Array) -> Array:
        ...

    def jacobian(self, x: Array) -> Array:
        ...


def as_vector(x) -> Array:
    """Return ``x`` as a one-dimensional float64 array."""
    vector = jnp.atleast_1d(jnp.asarray(x, dtype=jnp.float64))
    if vector.ndim != 1:
        raise ValueError(f"Expected a vector, got shape {vector.shape}")
    return vector


def check_finite(values: Array, what: str = "function value") -> None:
    """Raise :class:`NonFiniteValueError` if ``values`` holds ``nan``/``inf``."""
    concrete = np.asarray(values)
    if not np.all(np.isfinite(concrete)):
        raise NonFiniteValueError(f"Non-finite {what}: {concrete}")


__all__ = [
    "Array",
    "DifferentiableVectorFunction",
    "JacobianFunction",
    "ScalarFunction",
    "VectorFunction",
    "as_vector",
    "check_finite",
]
