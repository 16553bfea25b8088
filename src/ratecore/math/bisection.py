"""Bracketing bisection for scalar equations."""

from __future__ import annotations

import logging
import math
from typing import Optional

from ratecore.core.errors import ConfigurationError, NonConvergenceError, NonFiniteValueError
from ratecore.core.schemas import BisectionSettings

from .functions import ScalarFunction

logger = logging.getLogger(__name__)


class BisectionSingleRootFinder:
    """Find ``x`` in ``[lower, upper]`` with ``f(x) = 0``.

    The step starts at the bracket width, directed from the endpoint with a
    negative residual, and is halved on every attempt. The search ends as soon
    as the residual or the step falls below ``accuracy``.

    Parameters
    ----------
    settings : BisectionSettings, optional
        Accuracy, degenerate-width threshold and attempt cap.
    """

    def __init__(self, settings: Optional[BisectionSettings] = None) -> None:
        self.settings = settings or BisectionSettings()

    def get_root(self, function: ScalarFunction, lower: float, upper: float) -> float:
        accuracy = self.settings.accuracy
        if not lower < upper:
            raise ConfigurationError(f"Bracket is empty: lower={lower}, upper={upper}")

        f_lower = self._evaluate(function, lower)
        if abs(f_lower) < accuracy:
            return lower
        f_upper = self._evaluate(function, upper)
        if abs(f_upper) < accuracy:
            return upper
        if f_lower * f_upper > 0.0:
            closest, residual = (lower, f_lower) if abs(f_lower) <= abs(f_upper) else (upper, f_upper)
            raise NonConvergenceError(
                f"Root is not bracketed: f({lower})={f_lower:.6e}, f({upper})={f_upper:.6e}",
                iterate=closest,
                residual=abs(residual),
                iterations=0,
            )
        if upper - lower <= self.settings.zero:
            return lower

        if f_lower < 0.0:
            root, step = lower, upper - lower
        else:
            root, step = upper, lower - upper

        for attempt in range(1, self.settings.max_attempts + 1):
            step *= 0.5
            middle = root + step
            f_middle = self._evaluate(function, middle)
            if f_middle <= 0.0:
                root = middle
            if abs(step) < accuracy or abs(f_middle) < accuracy:
                logger.debug("Bisection converged after %d attempts at %.12g", attempt, middle)
                return middle

        raise NonConvergenceError(
            f"Bisection did not converge after {self.settings.max_attempts} attempts",
            iterate=root,
            residual=abs(self._evaluate(function, root)),
            iterations=self.settings.max_attempts,
        )

    @staticmethod
    def _evaluate(function: ScalarFunction, x: float) -> float:
        value = float(function(x))
        if not math.isfinite(value):
            raise NonFiniteValueError(f"Non-finite function value at x={x}: {value}", point=x)
        return value


__all__ = ["BisectionSingleRootFinder"]
