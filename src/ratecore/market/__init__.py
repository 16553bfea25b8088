"""Market objects: curves, curve bundles, curve providers and smiles."""

from .bundle import CurveBundle, CurveBundleBuilder
from .curves import ConstantYieldCurve, Curve, DiscountCurve, YieldCurve
from .provider import CurveProvider, MulticurveProvider
from .smile import (
    ConstantSmileFunction,
    ExtrapolationPolicy,
    InterpolatedSmileFunction,
    SABRSmileFunction,
    SmileFunction,
)

__all__ = [
    "ConstantSmileFunction",
    "ConstantYieldCurve",
    "Curve",
    "CurveBundle",
    "CurveBundleBuilder",
    "CurveProvider",
    "DiscountCurve",
    "ExtrapolationPolicy",
    "InterpolatedSmileFunction",
    "MulticurveProvider",
    "SABRSmileFunction",
    "SmileFunction",
    "YieldCurve",
]
