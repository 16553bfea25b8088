"""Jacobian providers for vector fields.

Every provider maps a vector function ``F: R^n -> R^m`` to a callable returning
the ``m x n`` Jacobian at a point, so the Newton solver does not care whether
the matrix comes from finite differences, forward-mode autodiff or a
closed-form calculator.
"""

from __future__ import annotations

from typing import Optional

import jax
import jax.numpy as jnp

from ratecore.core.schemas import FiniteDifferenceSettings, FiniteDifferenceType

from .functions import Array, JacobianFunction, VectorFunction, as_vector


class VectorFieldFirstOrderDifferentiator:
    """Finite-difference Jacobian of a vector field.

    Parameters
    ----------
    difference_type : FiniteDifferenceType or str
        ``forward``, ``central`` (default) or ``backward`` stencil.
    bump : float
        Absolute bump applied to each coordinate in turn.

    Example
    -------
    >>> differentiator = VectorFieldFirstOrderDifferentiator("central", 1e-6)
    >>> jac = differentiator.differentiate(lambda x: x**2)
    >>> jac(jnp.array([1.0, 2.0]))  # approximately diag(2, 4)
    """

    def __init__(
        self,
        difference_type: FiniteDifferenceType | str = FiniteDifferenceType.CENTRAL,
        bump: float = 1e-6,
    ) -> None:
        self.difference_type = FiniteDifferenceType(difference_type)
        if bump <= 0.0:
            raise ValueError(f"bump must be positive, got {bump}")
        self.bump = float(bump)

    @classmethod
    def from_settings(cls, settings: Optional[FiniteDifferenceSettings] = None) -> "VectorFieldFirstOrderDifferentiator":
        settings = settings or FiniteDifferenceSettings()
        return cls(settings.difference_type, settings.bump)

    def differentiate(self, function: VectorFunction) -> JacobianFunction:
        """Return ``x -> J(x)`` for ``function``."""

        def jacobian(x: Array) -> Array:
            point = as_vector(x)
            n = point.shape[0]
            columns = []
            if self.difference_type is FiniteDifferenceType.CENTRAL:
                for j in range(n):
                    up = jnp.asarray(function(point.at[j].add(self.bump)))
                    down = jnp.asarray(function(point.at[j].add(-self.bump)))
                    columns.append((up - down) / (2.0 * self.bump))
            else:
                base = jnp.asarray(function(point))
                sign = 1.0 if self.difference_type is FiniteDifferenceType.FORWARD else -1.0
                for j in range(n):
                    bumped = jnp.asarray(function(point.at[j].add(sign * self.bump)))
                    columns.append(sign * (bumped - base) / self.bump)
            return jnp.stack(columns, axis=1)

        return jacobian


def autodiff_jacobian(function: VectorFunction) -> JacobianFunction:
    """Forward-mode JAX Jacobian; ``function`` must be written in ``jax.numpy``."""
    jac = jax.jacfwd(function)

    def jacobian(x: Array) -> Array:
        return jnp.atleast_2d(jac(as_vector(x)))

    return jacobian


__all__ = ["VectorFieldFirstOrderDifferentiator", "autodiff_jacobian"]
