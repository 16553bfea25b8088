"""Pricers: par rates for calibration, Black and in-arrears caps/floors."""

from .capfloor_black import CapFloorIborBlackSmileMethod, capfloor_black_price
from .par_rate import (
    par_rate,
    par_rate_and_sensitivity,
    par_rate_sensitivity,
    resolve_calculator,
    supported_kinds,
)
from .replication import CapFloorIborInArrearsReplicationMethod
from .results import CurrencyAmount
from .sensitivity import CurveSensitivity

__all__ = [
    "CapFloorIborBlackSmileMethod",
    "CapFloorIborInArrearsReplicationMethod",
    "CurrencyAmount",
    "CurveSensitivity",
    "capfloor_black_price",
    "par_rate",
    "par_rate_and_sensitivity",
    "par_rate_sensitivity",
    "resolve_calculator",
    "supported_kinds",
]
