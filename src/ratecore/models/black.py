"""Black (1976) formula on a forward: price, vega and implied volatility."""

from __future__ import annotations

from functools import partial
from typing import Optional

import jax
import jax.numpy as jnp
from jax.scipy.stats import norm

from ratecore.core.schemas import BisectionSettings
from ratecore.math.bisection import BisectionSingleRootFinder


@jax.jit
def _d1d2(forward, strike, expiry, volatility):
    std = volatility * jnp.sqrt(jnp.maximum(expiry, 0.0))
    safe_std = jnp.where(std > 0.0, std, 1.0)
    d1 = (jnp.log(forward / strike) + 0.5 * safe_std**2) / safe_std
    return d1, d1 - safe_std, std


@partial(jax.jit, static_argnames=("is_call",))
def black_price(forward: float, strike: float, expiry: float, volatility: float, is_call: bool = True) -> float:
    """Undiscounted Black price of a call (``is_call``) or put on ``forward``.

    When ``volatility * sqrt(expiry)`` is zero the intrinsic value is returned.
    """
    omega = 1.0 if is_call else -1.0
    d1, d2, std = _d1d2(forward, strike, expiry, volatility)
    value = omega * (forward * norm.cdf(omega * d1) - strike * norm.cdf(omega * d2))
    intrinsic = jnp.maximum(omega * (forward - strike), 0.0)
    return jnp.where(std > 0.0, value, intrinsic)


@jax.jit
def black_vega(forward: float, strike: float, expiry: float, volatility: float) -> float:
    """Derivative of the undiscounted Black price with respect to volatility."""
    d1, _, std = _d1d2(forward, strike, expiry, volatility)
    return jnp.where(std > 0.0, forward * norm.pdf(d1) * jnp.sqrt(jnp.maximum(expiry, 0.0)), 0.0)


def implied_volatility(
    price: float,
    forward: float,
    strike: float,
    expiry: float,
    is_call: bool = True,
    settings: Optional[BisectionSettings] = None,
) -> float:
    """Invert :func:`black_price` by bisection.

    Parameters
    ----------
    price : float
        Undiscounted option price to match.
    forward, strike, expiry : float
        Contract data; ``expiry`` must be positive.
    is_call : bool
        Call or put.
    settings : BisectionSettings, optional
        Bracket (default ``[0, 10]``), accuracy and attempt cap.

    Returns
    -------
    float
        Volatility ``sigma`` in the bracket with ``black_price(sigma) = price``.

    Raises
    ------
    NonConvergenceError
        If the price is not attainable inside the bracket, or the bisection
        runs out of attempts.
    """
    settings = settings or BisectionSettings()
    target = float(price)

    def residual(volatility: float) -> float:
        return float(black_price(forward, strike, expiry, volatility, is_call=is_call)) - target

    finder = BisectionSingleRootFinder(settings)
    return finder.get_root(residual, settings.lower_volatility, settings.upper_volatility)


__all__ = ["black_price", "black_vega", "implied_volatility"]
