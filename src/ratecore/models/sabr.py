"""SABR (Stochastic Alpha Beta Rho) smile via Hagan's lognormal expansion.

The SABR model dynamics:
    dF = alpha * F^beta * dW_1
    d(alpha) = nu * alpha * dW_2
    corr(dW_1, dW_2) = rho
"""
from __future__ import annotations

from dataclasses import dataclass

import jax
import jax.numpy as jnp

from ratecore.core.errors import ConfigurationError

_SMALL_Z = 1e-7


@dataclass(frozen=True)
class SABRParams:
    """SABR model parameters.

    Attributes
    ----------
    alpha : float
        Initial volatility level, positive.
    beta : float
        CEV exponent in [0, 1].
    rho : float
        Spot/vol correlation in (-1, 1).
    nu : float
        Volatility of volatility, non-negative.
    """

    alpha: float
    beta: float
    rho: float
    nu: float

    def __post_init__(self) -> None:
        if self.alpha <= 0:
            raise ConfigurationError(f"alpha must be positive, got {self.alpha}")
        if not 0 <= self.beta <= 1:
            raise ConfigurationError(f"beta must be in [0, 1], got {self.beta}")
        if not -1 < self.rho < 1:
            raise ConfigurationError(f"rho must be in (-1, 1), got {self.rho}")
        if self.nu < 0:
            raise ConfigurationError(f"nu must be non-negative, got {self.nu}")


@jax.jit
def sabr_implied_volatility_hagan(forward, strike, expiry, alpha, beta, rho, nu):
    """Hagan et al. (2002) lognormal implied volatility.

    Parameters
    ----------
    forward, strike : float
        Positive forward and strike.
    expiry : float
        Time to expiry.
    alpha, beta, rho, nu : float
        SABR parameters.

    Returns
    -------
    float
        Black volatility; the at-the-money limit is taken smoothly.
    """
    forward = jnp.asarray(forward, dtype=jnp.float64)
    strike = jnp.asarray(strike, dtype=jnp.float64)
    one_minus_beta = 1.0 - beta

    log_fk = jnp.log(forward / strike)
    fk_pow = jnp.power(forward * strike, 0.5 * one_minus_beta)
    denominator = fk_pow * (
        1.0 + one_minus_beta**2 / 24.0 * log_fk**2 + one_minus_beta**4 / 1920.0 * log_fk**4
    )

    z = nu / alpha * fk_pow * log_fk
    small = jnp.abs(z) < _SMALL_Z
    safe_z = jnp.where(small, _SMALL_Z, z)
    x_z = jnp.log((jnp.sqrt(1.0 - 2.0 * rho * safe_z + safe_z**2) + safe_z - rho) / (1.0 - rho))
    z_over_x = jnp.where(small, 1.0 - 0.5 * rho * z, safe_z / x_z)

    correction = 1.0 + (
        one_minus_beta**2 / 24.0 * alpha**2 / fk_pow**2
        + 0.25 * rho * beta * nu * alpha / fk_pow
        + (2.0 - 3.0 * rho**2) / 24.0 * nu**2
    ) * expiry

    return alpha / denominator * z_over_x * correction


def hagan_implied_vol(forward: float, strike: float, expiry: float, params: SABRParams) -> float:
    """Convenience wrapper taking a :class:`SABRParams`."""
    return sabr_implied_volatility_hagan(forward, strike, expiry, params.alpha, params.beta, params.rho, params.nu)


__all__ = ["SABRParams", "hagan_implied_vol", "sabr_implied_volatility_hagan"]
