"""Immutable, ordered collections of named curves."""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple

from ratecore.core.errors import ConfigurationError

from .curves import ArrayLike, Curve


class CurveBundle(Mapping[str, Curve]):
    """Read-only mapping from curve name to curve, in insertion order.

    Bundles are never mutated: :meth:`with_curve` and :meth:`merge` return new
    bundles. Use :class:`CurveBundleBuilder` to assemble one incrementally.
    """

    __slots__ = ("_curves",)

    def __init__(self, curves: Optional[Mapping[str, Curve]] = None) -> None:
        self._curves: Mapping[str, Curve] = MappingProxyType(dict(curves or {}))

    def __getitem__(self, name: str) -> Curve:
        return self._curves[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._curves)

    def __len__(self) -> int:
        return len(self._curves)

    def __repr__(self) -> str:
        return f"CurveBundle({list(self._curves)})"

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._curves)

    def get_curve(self, name: str) -> Curve:
        """Return the curve called ``name``; unknown names are a configuration error."""
        curve = self._curves.get(name)
        if curve is None:
            raise ConfigurationError(f"Curve {name!r} is not in the bundle (available: {list(self._curves)})")
        return curve

    def discount_factor(self, name: str, t: ArrayLike) -> ArrayLike:
        return self.get_curve(name).discount_factor(t)

    def zero_rate(self, name: str, t: ArrayLike) -> ArrayLike:
        return self.get_curve(name).zero_rate(t)

    def with_curve(self, name: str, curve: Curve) -> "CurveBundle":
        """Return a new bundle with ``name`` added or replaced."""
        curves = dict(self._curves)
        curves[name] = curve
        return CurveBundle(curves)

    def merge(self, other: Mapping[str, Curve]) -> "CurveBundle":
        """Return a new bundle holding both sets of curves; names must not collide."""
        clashes = sorted(set(self._curves) & set(other))
        if clashes:
            raise ConfigurationError(f"Curve names appear in both bundles: {clashes}")
        curves = dict(self._curves)
        curves.update(other)
        return CurveBundle(curves)


class CurveBundleBuilder:
    """Accumulates named curves and produces one :class:`CurveBundle`.

    Example:
        >>> bundle = (
        ...     CurveBundleBuilder()
        ...     .add("USD-OIS", YieldCurve([1.0, 5.0], [0.02, 0.025]))
        ...     .add("USD-3M", ConstantYieldCurve(0.03))
        ...     .build()
        ... )
    """

    def __init__(self) -> None:
        self._curves: Dict[str, Curve] = {}

    def add(self, name: str, curve: Curve) -> "CurveBundleBuilder":
        if not name:
            raise ConfigurationError("Curve name must be a non-empty string")
        if name in self._curves:
            raise ConfigurationError(f"Duplicate curve name: {name!r}")
        self._curves[name] = curve
        return self

    def add_all(self, curves: Mapping[str, Curve]) -> "CurveBundleBuilder":
        for name, curve in curves.items():
            self.add(name, curve)
        return self

    def build(self) -> CurveBundle:
        return CurveBundle(self._curves)


__all__ = ["CurveBundle", "CurveBundleBuilder"]
