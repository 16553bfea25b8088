"""Exception hierarchy shared by the solvers, calibration and pricing code.

Configuration problems are raised before any iteration starts. Numerical
failures are split into non-convergence (the iteration budget ran out) and
arithmetic failures (singular systems, non-finite values), because the remedy
differs: the first needs a larger budget or a better start, the second needs
different inputs.
"""

from __future__ import annotations

from typing import Any, Optional


class RateCoreError(Exception):
    """Base class for every error raised by :mod:`ratecore`."""


class ConfigurationError(RateCoreError, ValueError):
    """Invalid, empty or inconsistent input detected before solving."""


class NonConvergenceError(RateCoreError, RuntimeError):
    """An iterative method exhausted its iteration cap without converging.

    Attributes
    ----------
    iterate:
        Last iterate reached by the method.
    residual:
        Residual (norm or scalar) at the last iterate.
    iterations:
        Number of iterations performed.
    """

    def __init__(
        self,
        message: str,
        *,
        iterate: Any = None,
        residual: Optional[float] = None,
        iterations: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.iterate = iterate
        self.residual = residual
        self.iterations = iterations


class BudgetExceededError(NonConvergenceError):
    """A wall-clock or function-evaluation budget was exhausted."""


class NumericalError(RateCoreError, ArithmeticError):
    """Arithmetic or domain failure inside a numerical method."""


class SingularSystemError(NumericalError):
    """The Jacobian is singular or too ill-conditioned to solve."""

    def __init__(self, message: str, *, condition_number: Optional[float] = None) -> None:
        super().__init__(message)
        self.condition_number = condition_number


class NonFiniteValueError(NumericalError):
    """A function returned ``nan`` or ``inf``."""

    def __init__(self, message: str, *, point: Optional[float] = None) -> None:
        super().__init__(message)
        self.point = point


class PricingError(RateCoreError, RuntimeError):
    """A present value could not be computed."""


__all__ = [
    "BudgetExceededError",
    "ConfigurationError",
    "NonConvergenceError",
    "NonFiniteValueError",
    "NumericalError",
    "PricingError",
    "RateCoreError",
    "SingularSystemError",
]
