"""Ratecore: interest-rate curve calibration and smile replication pricing."""

from __future__ import annotations

import importlib
from types import ModuleType
from typing import Dict

import jax

jax.config.update("jax_enable_x64", True)

__all__ = [
    "calibration",
    "core",
    "market",
    "math",
    "models",
    "pricing",
    "products",
]

_MODULE_ALIASES: Dict[str, str] = {
    "calibration": "ratecore.calibration",
    "core": "ratecore.core",
    "market": "ratecore.market",
    "math": "ratecore.math",
    "models": "ratecore.models",
    "pricing": "ratecore.pricing",
    "products": "ratecore.products",
}


def __getattr__(name: str) -> ModuleType:
    if name in _MODULE_ALIASES:
        module = importlib.import_module(_MODULE_ALIASES[name])
        globals()[name] = module
        return module
    raise AttributeError(f"module 'ratecore' has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(__all__))
