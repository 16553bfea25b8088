"""Multi-curve calibration to par instruments."""

from .engine import CalibrationResult, CurveCalibrator, JacobianMethod
from .functions import YieldCurveFinderFunction, YieldCurveFinderJacobian
from .problem import CalibrationProblem, CurveNodeSpec, ParameterBlock

__all__ = [
    "CalibrationProblem",
    "CalibrationResult",
    "CurveCalibrator",
    "CurveNodeSpec",
    "JacobianMethod",
    "ParameterBlock",
    "YieldCurveFinderFunction",
    "YieldCurveFinderJacobian",
]
