"""Curve provider used by the pricers: currency -> discounting, index -> forwarding."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Protocol, runtime_checkable

from ratecore.core.errors import ConfigurationError

from .bundle import CurveBundle
from .curves import ArrayLike, Curve


@runtime_checkable
class CurveProvider(Protocol):
    """The two market queries the pricers need."""

    def discount_factor(self, currency: str, time: ArrayLike) -> ArrayLike:
        ...

    def simply_compounded_forward_rate(
        self, index: str, start: ArrayLike, end: ArrayLike, accrual: ArrayLike
    ) -> ArrayLike:
        ...


@dataclass(frozen=True)
class MulticurveProvider:
    """
    Resolve discounting and forward curves by currency and index over a bundle.

    Attributes:
        bundle: Curves by name.
        discounting: Currency code -> name of its discounting curve.
        forwards: Index name -> name of its forward curve.

    Example:
        >>> provider = MulticurveProvider(
        ...     bundle,
        ...     discounting={"USD": "USD-OIS"},
        ...     forwards={"USD-LIBOR-3M": "USD-3M"},
        ... )
        >>> provider.discount_factor("USD", 1.0)
    """

    bundle: CurveBundle
    discounting: Mapping[str, str] = field(default_factory=dict)
    forwards: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "discounting", MappingProxyType(dict(self.discounting)))
        object.__setattr__(self, "forwards", MappingProxyType(dict(self.forwards)))
        for kind, mapping in (("discounting", self.discounting), ("forward", self.forwards)):
            missing = sorted({name for name in mapping.values() if name not in self.bundle})
            if missing:
                raise ConfigurationError(f"Unknown {kind} curve(s): {missing}")

    def discounting_curve(self, currency: str) -> Curve:
        name = self.discounting.get(currency)
        if name is None:
            raise ConfigurationError(f"No discounting curve configured for currency {currency!r}")
        return self.bundle.get_curve(name)

    def forward_curve(self, index: str) -> Curve:
        name = self.forwards.get(index)
        if name is None:
            raise ConfigurationError(f"No forward curve configured for index {index!r}")
        return self.bundle.get_curve(name)

    def discount_factor(self, currency: str, time: ArrayLike) -> ArrayLike:
        return self.discounting_curve(currency).discount_factor(time)

    def simply_compounded_forward_rate(
        self, index: str, start: ArrayLike, end: ArrayLike, accrual: ArrayLike
    ) -> ArrayLike:
        """Forward of ``index`` fixing over ``[start, end]`` with the given accrual factor."""
        return self.forward_curve(index).simply_compounded_forward_rate(start, end, accrual)

    def with_bundle(self, bundle: CurveBundle) -> "MulticurveProvider":
        """Same currency/index mapping over another bundle (e.g. a calibrated one)."""
        return replace(self, bundle=bundle)


__all__ = ["CurveProvider", "MulticurveProvider"]
