"""Adaptive one-dimensional quadrature."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from ratecore.core.errors import BudgetExceededError, NonFiniteValueError
from ratecore.core.schemas import IntegratorSettings

from .functions import ScalarFunction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntegrationResult:
    """Integral estimate and the number of integrand evaluations it took."""

    value: float
    evaluations: int


class _EvaluationCounter:
    """Evaluation count of a single :meth:`RungeKuttaIntegrator1D.solve` call."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.count = 0


class RungeKuttaIntegrator1D:
    """Step-doubling Simpson integrator.

    The range is split into ``minimum_steps`` equal panels. On each panel the
    Simpson estimate is compared with the sum of the two half-panel estimates;
    the panel is accepted (with a Richardson correction) once the difference
    is below ``absolute_tolerance`` or below ``relative_tolerance`` times the
    magnitude of the whole-range estimate from the initial panels, otherwise
    both halves are refined independently. Measuring the relative error
    against the whole range keeps panels whose own value is negligible from
    refining on round-off.

    The integrator holds settings only; every call keeps its own evaluation
    count, so one instance can be shared between threads.

    Parameters
    ----------
    absolute_tolerance, relative_tolerance : float
        Panel acceptance thresholds.
    minimum_steps : int
        Number of initial panels.
    max_depth : int
        Refinement depth at which a panel is accepted regardless of its error.
    max_evaluations : int
        Integrand evaluation budget for one call.
    """

    def __init__(
        self,
        absolute_tolerance: float = 1e-12,
        relative_tolerance: float = 1e-10,
        minimum_steps: int = 6,
        max_depth: int = 30,
        max_evaluations: int = 200000,
    ) -> None:
        if absolute_tolerance <= 0.0 or relative_tolerance <= 0.0:
            raise ValueError("Tolerances must be positive")
        if minimum_steps < 1:
            raise ValueError(f"minimum_steps must be positive, got {minimum_steps}")
        self.absolute_tolerance = float(absolute_tolerance)
        self.relative_tolerance = float(relative_tolerance)
        self.minimum_steps = int(minimum_steps)
        self.max_depth = int(max_depth)
        self.max_evaluations = int(max_evaluations)

    @classmethod
    def from_settings(cls, settings: Optional[IntegratorSettings] = None) -> "RungeKuttaIntegrator1D":
        settings = settings or IntegratorSettings()
        return cls(
            settings.absolute_tolerance,
            settings.relative_tolerance,
            settings.minimum_steps,
            settings.max_depth,
            settings.max_evaluations,
        )

    def integrate(self, function: ScalarFunction, lower: float, upper: float) -> float:
        """Integrate ``function`` over ``[lower, upper]``."""
        return self.solve(function, lower, upper).value

    def solve(self, function: ScalarFunction, lower: float, upper: float) -> IntegrationResult:
        """Integrate ``function`` over ``[lower, upper]`` and report the evaluation count.

        Raises
        ------
        BudgetExceededError
            If more than ``max_evaluations`` integrand values are needed.
        NonFiniteValueError
            If the integrand returns ``nan`` or ``inf``.
        """
        lower, upper = float(lower), float(upper)
        if lower == upper:
            return IntegrationResult(0.0, 0)
        if lower > upper:
            result = self.solve(function, upper, lower)
            return IntegrationResult(-result.value, result.evaluations)

        counter = _EvaluationCounter(self.max_evaluations)
        width = (upper - lower) / self.minimum_steps
        panels = []
        f_left = self._evaluate(function, lower, counter)
        for step in range(self.minimum_steps):
            left = lower + step * width
            right = upper if step == self.minimum_steps - 1 else left + width
            span = right - left
            f_middle = self._evaluate(function, left + 0.5 * span, counter)
            f_right = self._evaluate(function, right, counter)
            f_quarter = self._evaluate(function, left + 0.25 * span, counter)
            f_three_quarter = self._evaluate(function, left + 0.75 * span, counter)
            panels.append((left, span, f_left, f_quarter, f_middle, f_three_quarter, f_right))
            f_left = f_right

        estimate = abs(sum(_fine(*panel[1:]) for panel in panels))
        tolerance = max(self.absolute_tolerance, self.relative_tolerance * estimate)
        total = 0.0
        for panel in panels:
            total += self._panel(function, *panel, 0, tolerance, counter)
        return IntegrationResult(total, counter.count)

    def _panel(
        self,
        function: ScalarFunction,
        left: float,
        width: float,
        f_left: float,
        f_quarter: float,
        f_middle: float,
        f_three_quarter: float,
        f_right: float,
        depth: int,
        tolerance: float,
        counter: _EvaluationCounter,
    ) -> float:
        coarse = width * (f_left + 4.0 * f_middle + f_right) / 6.0
        fine = _fine(width, f_left, f_quarter, f_middle, f_three_quarter, f_right)

        difference = abs(fine - coarse)
        if difference <= tolerance:
            return fine + (fine - coarse) / 15.0
        if depth >= self.max_depth:
            logger.debug(
                "Maximum refinement depth %d reached on [%.6g, %.6g]; error estimate %.3e",
                depth,
                left,
                left + width,
                difference,
            )
            return fine + (fine - coarse) / 15.0

        half = 0.5 * width
        f_eighth = self._evaluate(function, left + 0.125 * width, counter)
        f_three_eighths = self._evaluate(function, left + 0.375 * width, counter)
        f_five_eighths = self._evaluate(function, left + 0.625 * width, counter)
        f_seven_eighths = self._evaluate(function, left + 0.875 * width, counter)
        return self._panel(
            function,
            left,
            half,
            f_left,
            f_eighth,
            f_quarter,
            f_three_eighths,
            f_middle,
            depth + 1,
            tolerance,
            counter,
        ) + self._panel(
            function,
            left + half,
            half,
            f_middle,
            f_five_eighths,
            f_three_quarter,
            f_seven_eighths,
            f_right,
            depth + 1,
            tolerance,
            counter,
        )

    @staticmethod
    def _evaluate(function: ScalarFunction, x: float, counter: _EvaluationCounter) -> float:
        counter.count += 1
        if counter.count > counter.limit:
            raise BudgetExceededError(
                f"Integrand evaluation budget of {counter.limit} exhausted",
                iterate=x,
                iterations=counter.count,
            )
        value = float(function(x))
        if not math.isfinite(value):
            raise NonFiniteValueError(f"Non-finite integrand value at x={x}: {value}", point=x)
        return value


def _fine(
    width: float, f_left: float, f_quarter: float, f_middle: float, f_three_quarter: float, f_right: float
) -> float:
    return width * (f_left + 2.0 * f_middle + 4.0 * (f_quarter + f_three_quarter) + f_right) / 12.0


__all__ = ["IntegrationResult", "RungeKuttaIntegrator1D"]
