"""Numerical building blocks: root finders, quadrature, interpolation, Jacobians."""

from .bisection import BisectionSingleRootFinder
from .differentiation import VectorFieldFirstOrderDifferentiator, autodiff_jacobian
from .functions import (
    Array,
    DifferentiableVectorFunction,
    JacobianFunction,
    ScalarFunction,
    VectorFunction,
    as_vector,
    check_finite,
)
from .integration import IntegrationResult, RungeKuttaIntegrator1D
from .interpolation import (
    InterpolationMethod,
    Interpolator1D,
    InterpolatorData,
    LinearInterpolator1D,
    NaturalCubicSplineInterpolator1D,
    get_interpolator,
)
from .newton import NewtonResult, NewtonVectorRootFinder

__all__ = [
    "Array",
    "BisectionSingleRootFinder",
    "DifferentiableVectorFunction",
    "IntegrationResult",
    "InterpolationMethod",
    "Interpolator1D",
    "InterpolatorData",
    "JacobianFunction",
    "LinearInterpolator1D",
    "NaturalCubicSplineInterpolator1D",
    "NewtonResult",
    "NewtonVectorRootFinder",
    "RungeKuttaIntegrator1D",
    "ScalarFunction",
    "VectorFunction",
    "VectorFieldFirstOrderDifferentiator",
    "as_vector",
    "autodiff_jacobian",
    "get_interpolator",
]
