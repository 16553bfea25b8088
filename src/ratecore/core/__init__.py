"""Configuration, settings and error types shared across ratecore."""

from .config import ConfigDict, get_config, get_default_config, init_environment, make_rng
from .errors import (
    BudgetExceededError,
    ConfigurationError,
    NonConvergenceError,
    NonFiniteValueError,
    NumericalError,
    PricingError,
    RateCoreError,
    SingularSystemError,
)
from .schemas import (
    BisectionSettings,
    ConfigValidationError,
    FiniteDifferenceSettings,
    FiniteDifferenceType,
    IntegratorSettings,
    NewtonSettings,
    NumericsConfig,
    ReplicationSettings,
    load_config,
    numerics_from_config,
)

__all__ = [
    "BisectionSettings",
    "BudgetExceededError",
    "ConfigDict",
    "ConfigValidationError",
    "ConfigurationError",
    "FiniteDifferenceSettings",
    "FiniteDifferenceType",
    "IntegratorSettings",
    "NewtonSettings",
    "NonConvergenceError",
    "NonFiniteValueError",
    "NumericalError",
    "NumericsConfig",
    "PricingError",
    "RateCoreError",
    "ReplicationSettings",
    "SingularSystemError",
    "get_config",
    "get_default_config",
    "init_environment",
    "load_config",
    "make_rng",
    "numerics_from_config",
]
