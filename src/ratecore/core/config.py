"""Environment configuration for ratecore."""

from __future__ import annotations

import logging
from copy import deepcopy
from typing import Any, Mapping, MutableMapping

import jax
import numpy as np
from ml_collections import ConfigDict

__all__ = ["ConfigDict", "get_config", "get_default_config", "init_environment", "make_rng"]


def get_default_config() -> ConfigDict:
    """Return the canonical configuration for the ratecore stack."""
    cfg = ConfigDict()
    cfg.seed = 0

    cfg.logging = ConfigDict()
    cfg.logging.level = "INFO"
    cfg.logging.format = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    cfg.logging.datefmt = "%Y-%m-%d %H:%M:%S"
    cfg.logging.force = True

    cfg.jax = ConfigDict()
    cfg.jax.enable_x64 = True

    cfg.numerics = ConfigDict()

    cfg.numerics.newton = ConfigDict()
    cfg.numerics.newton.function_tolerance = 1e-10
    cfg.numerics.newton.step_tolerance = 1e-14
    cfg.numerics.newton.max_iterations = 100
    cfg.numerics.newton.damping = True
    cfg.numerics.newton.min_damping = 1.0 / 1024.0
    cfg.numerics.newton.max_condition_number = 1e14
    cfg.numerics.newton.time_budget = None

    cfg.numerics.finite_difference = ConfigDict()
    cfg.numerics.finite_difference.difference_type = "central"
    cfg.numerics.finite_difference.bump = 1e-6

    cfg.numerics.bisection = ConfigDict()
    cfg.numerics.bisection.accuracy = 1e-12
    cfg.numerics.bisection.zero = 1e-16
    cfg.numerics.bisection.max_attempts = 10000
    cfg.numerics.bisection.lower_volatility = 0.0
    cfg.numerics.bisection.upper_volatility = 10.0

    cfg.numerics.integrator = ConfigDict()
    cfg.numerics.integrator.absolute_tolerance = 1e-12
    cfg.numerics.integrator.relative_tolerance = 1e-10
    cfg.numerics.integrator.minimum_steps = 6
    cfg.numerics.integrator.max_depth = 30
    cfg.numerics.integrator.max_evaluations = 200000

    cfg.numerics.replication = ConfigDict()
    cfg.numerics.replication.relative_error = 1e-9
    cfg.numerics.replication.absolute_error = 1e-14
    cfg.numerics.replication.max_doublings = 10
    cfg.numerics.replication.sigma_cutoff = 6.0
    cfg.numerics.replication.floor_lower_fraction = 1e-10

    return cfg


def get_config(overrides: Mapping[str, Any] | None = None) -> ConfigDict:
    """Create a configuration, optionally applying ``overrides``."""
    cfg = get_default_config()
    if overrides:
        _deep_update(cfg, overrides)
    return cfg


def init_environment(config: ConfigDict | Mapping[str, Any] | None = None) -> ConfigDict:
    """Configure logging and the JAX precision flag based on ``config``.

    No process-wide random state is touched: the seed is recorded under
    ``runtime`` and generators are created on demand with :func:`make_rng`.
    """
    if config is None:
        cfg = get_default_config()
    elif isinstance(config, ConfigDict):
        cfg = config.copy_and_resolve_references()
    else:
        cfg = ConfigDict(deepcopy(dict(config)))

    seed = int(cfg.get("seed", 0))
    cfg.runtime = ConfigDict()
    cfg.runtime.seed = seed
    cfg.runtime.jax_key = jax.random.PRNGKey(seed)

    logging_cfg = cfg.get("logging", {})
    level = logging_cfg.get("level", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=logging_cfg.get("format", None),
        datefmt=logging_cfg.get("datefmt", None),
        force=logging_cfg.get("force", False),
    )

    jax_cfg = cfg.get("jax", {})
    enable_x64 = jax_cfg.get("enable_x64")
    if enable_x64 is not None:
        jax.config.update("jax_enable_x64", bool(enable_x64))

    return cfg


def make_rng(config: ConfigDict | None = None, offset: int = 0) -> np.random.Generator:
    """Return a freshly seeded generator; callers pass it on explicitly."""
    seed = 0
    if config is not None:
        runtime = config.get("runtime", None)
        seed = int(runtime.seed) if runtime is not None else int(config.get("seed", 0))
    return np.random.default_rng(seed + offset)


def _deep_update(target: MutableMapping[str, Any], updates: Mapping[str, Any]) -> None:
    for key, value in updates.items():
        if isinstance(value, Mapping):
            if key not in target or not isinstance(target[key], (ConfigDict, MutableMapping)):
                target[key] = ConfigDict()
            _deep_update(target[key], value)
        else:
            target[key] = value
