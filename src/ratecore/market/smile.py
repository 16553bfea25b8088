"""Volatility smiles: strike -> Black volatility for a single expiry."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Sequence, runtime_checkable

import numpy as np

from ratecore.core.errors import ConfigurationError
from ratecore.models.sabr import SABRParams, hagan_implied_vol


@runtime_checkable
class SmileFunction(Protocol):
    """Black volatility as a function of strike, for strikes in ``(0, inf)``."""

    def volatility(self, strike: float) -> float:
        ...


class ExtrapolationPolicy(str, Enum):
    """Behaviour of an interpolated smile outside its quoted strikes."""

    FLAT = "flat"
    LINEAR = "linear"
    ERROR = "error"


def _check_strike(strike: float) -> float:
    value = float(strike)
    if not value > 0.0:
        raise ConfigurationError(f"Strike must be positive, got {strike}")
    return value


@dataclass(frozen=True)
class ConstantSmileFunction:
    """Flat smile."""

    sigma: float

    def __post_init__(self):
        if self.sigma < 0.0:
            raise ConfigurationError(f"Volatility must be non-negative, got {self.sigma}")

    def volatility(self, strike: float) -> float:
        _check_strike(strike)
        return float(self.sigma)


@dataclass(frozen=True, eq=False)
class InterpolatedSmileFunction:
    """
    Smile linearly interpolated between quoted strikes.

    Attributes:
        strikes: Strictly increasing positive strikes.
        volatilities: Black volatilities at ``strikes``.
        extrapolation: What to do outside ``[strikes[0], strikes[-1]]``:
            hold the end volatility (FLAT), extend the end slope down to
            ``volatility_floor`` (LINEAR) or raise (ERROR).
        volatility_floor: Lower bound for linearly extrapolated volatilities.
    """

    strikes: Sequence[float]
    volatilities: Sequence[float]
    extrapolation: ExtrapolationPolicy = ExtrapolationPolicy.FLAT
    volatility_floor: float = 1e-4

    def __post_init__(self):
        strikes = np.asarray(self.strikes, dtype=np.float64).reshape(-1)
        vols = np.asarray(self.volatilities, dtype=np.float64).reshape(-1)
        if strikes.size == 0:
            raise ConfigurationError("Smile needs at least one quote")
        if strikes.size != vols.size:
            raise ConfigurationError(f"Got {strikes.size} strikes but {vols.size} volatilities")
        if np.any(strikes <= 0.0) or np.any(np.diff(strikes) <= 0.0):
            raise ConfigurationError("Smile strikes must be positive and strictly increasing")
        if np.any(vols < 0.0) or not np.all(np.isfinite(vols)):
            raise ConfigurationError("Smile volatilities must be finite and non-negative")
        object.__setattr__(self, "strikes", strikes)
        object.__setattr__(self, "volatilities", vols)
        object.__setattr__(self, "extrapolation", ExtrapolationPolicy(self.extrapolation))

    def volatility(self, strike: float) -> float:
        k = _check_strike(strike)
        strikes, vols = self.strikes, self.volatilities
        if strikes[0] <= k <= strikes[-1]:
            return float(np.interp(k, strikes, vols))
        if self.extrapolation is ExtrapolationPolicy.ERROR:
            raise ConfigurationError(
                f"Strike {k} outside the quoted range [{strikes[0]}, {strikes[-1]}]"
            )
        # a single quote has no slope to extend
        if self.extrapolation is ExtrapolationPolicy.FLAT or strikes.size == 1:
            return float(vols[0] if k < strikes[0] else vols[-1])
        if k < strikes[0]:
            slope = (vols[1] - vols[0]) / (strikes[1] - strikes[0])
            value = vols[0] + slope * (k - strikes[0])
        else:
            slope = (vols[-1] - vols[-2]) / (strikes[-1] - strikes[-2])
            value = vols[-1] + slope * (k - strikes[-1])
        return float(max(value, self.volatility_floor))


@dataclass(frozen=True)
class SABRSmileFunction:
    """Hagan SABR smile for one forward and expiry."""

    forward: float
    expiry: float
    params: SABRParams

    def __post_init__(self):
        if self.forward <= 0.0:
            raise ConfigurationError(f"SABR forward must be positive, got {self.forward}")
        if self.expiry < 0.0:
            raise ConfigurationError(f"Expiry must be non-negative, got {self.expiry}")

    def volatility(self, strike: float) -> float:
        k = _check_strike(strike)
        return float(hagan_implied_vol(self.forward, k, self.expiry, self.params))


__all__ = [
    "ConstantSmileFunction",
    "ExtrapolationPolicy",
    "InterpolatedSmileFunction",
    "SABRSmileFunction",
    "SmileFunction",
]
