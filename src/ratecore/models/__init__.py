"""Closed-form option models."""

from .black import black_price, black_vega, implied_volatility
from .sabr import SABRParams, hagan_implied_vol, sabr_implied_volatility_hagan

__all__ = [
    "SABRParams",
    "black_price",
    "black_vega",
    "hagan_implied_vol",
    "implied_volatility",
    "sabr_implied_volatility_hagan",
]
