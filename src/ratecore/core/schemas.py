"""Pydantic-based settings for the numerical methods and YAML helpers."""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)


class FiniteDifferenceType(str, Enum):
    """Finite-difference stencil used for numerical Jacobians."""

    FORWARD = "forward"
    CENTRAL = "central"
    BACKWARD = "backward"


class NewtonSettings(BaseModel):
    """Controls for :class:`~ratecore.math.newton.NewtonVectorRootFinder`."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    function_tolerance: float = Field(default=1e-10, gt=0.0, description="Target for the residual norm")
    step_tolerance: float = Field(
        default=1e-14, ge=0.0, description="Relative step size below which the iteration has stalled"
    )
    max_iterations: int = Field(default=100, gt=0, description="Iteration cap")
    damping: bool = Field(default=True, description="Backtrack on the residual norm")
    min_damping: float = Field(default=1.0 / 1024.0, gt=0.0, le=1.0, description="Smallest step fraction")
    max_condition_number: float = Field(default=1e14, gt=1.0, description="Singularity threshold")
    time_budget: Optional[float] = Field(default=None, gt=0.0, description="Wall-clock budget in seconds")


class FiniteDifferenceSettings(BaseModel):
    """Stencil and bump for finite-difference Jacobians."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    difference_type: FiniteDifferenceType = Field(default=FiniteDifferenceType.CENTRAL)
    bump: float = Field(default=1e-6, gt=0.0, description="Absolute bump applied to each coordinate")


class BisectionSettings(BaseModel):
    """Controls for the bisection root finder used for implied volatilities."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    accuracy: float = Field(default=1e-12, gt=0.0, description="Tolerance on residual and step")
    zero: float = Field(default=1e-16, ge=0.0, description="Bracket width treated as degenerate")
    max_attempts: int = Field(default=10000, gt=0, description="Attempt cap")
    lower_volatility: float = Field(default=0.0, ge=0.0)
    upper_volatility: float = Field(default=10.0, gt=0.0)

    @model_validator(mode="after")
    def validate_bracket(self) -> "BisectionSettings":
        if self.lower_volatility >= self.upper_volatility:
            raise ValueError("lower_volatility must be below upper_volatility")
        return self


class IntegratorSettings(BaseModel):
    """Controls for :class:`~ratecore.math.integration.RungeKuttaIntegrator1D`."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    absolute_tolerance: float = Field(
        default=1e-12, gt=0.0, description="Panel error accepted regardless of the integral size"
    )
    relative_tolerance: float = Field(
        default=1e-10, gt=0.0, description="Panel error as a fraction of the whole-range estimate"
    )
    minimum_steps: int = Field(default=6, gt=0)
    max_depth: int = Field(default=30, gt=0, le=60, description="Maximum panel refinement depth")
    max_evaluations: int = Field(default=200000, gt=0, description="Integrand evaluation budget")


class ReplicationSettings(BaseModel):
    """Controls for the in-arrears replication pricer."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    relative_error: float = Field(default=1e-9, gt=0.0, description="Tail-to-integral ratio target")
    absolute_error: float = Field(
        default=1e-14, ge=0.0, description="Tail contribution accepted regardless of the integral size"
    )
    max_doublings: int = Field(default=10, ge=0, description="Cap on upper-bound doublings")
    sigma_cutoff: float = Field(default=6.0, gt=0.0, description="Initial cutoff in ATM standard deviations")
    floor_lower_fraction: float = Field(
        default=1e-10, gt=0.0, lt=1.0, description="Lower floor integration bound as a fraction of the strike"
    )
    integrator: IntegratorSettings = Field(default_factory=IntegratorSettings)


class NumericsConfig(BaseModel):
    """Top-level container grouping every numerical setting."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    newton: NewtonSettings = Field(default_factory=NewtonSettings)
    finite_difference: FiniteDifferenceSettings = Field(default_factory=FiniteDifferenceSettings)
    bisection: BisectionSettings = Field(default_factory=BisectionSettings)
    integrator: IntegratorSettings = Field(default_factory=IntegratorSettings)
    replication: ReplicationSettings = Field(default_factory=ReplicationSettings)

    @field_validator("replication", mode="before")
    @classmethod
    def share_integrator(cls, value: Any, info: ValidationInfo) -> Any:
        # replication inherits the top-level integrator unless it names its own
        if isinstance(value, Mapping) and "integrator" not in value:
            integrator = info.data.get("integrator")
            if integrator is not None:
                return {**value, "integrator": integrator}
        return value


class ConfigValidationError(RuntimeError):
    """Raised when one or more configuration files fail validation."""

    def __init__(self, errors: list[tuple[Path, ValidationError]]):
        message_lines = ["Configuration validation failed:"]
        for path, error in errors:
            message_lines.append(f"- {path}: {error}")
        super().__init__("\n".join(message_lines))
        self.errors = errors


def _load_yaml(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration at {path} must contain a mapping")
    return data


def load_config(path: Path | str) -> NumericsConfig:
    """Load a YAML file into a :class:`NumericsConfig`.

    The file may either hold the numerics sections at top level or nest them
    under a ``numerics`` key.
    """
    payload = _load_yaml(Path(path))
    if "numerics" in payload:
        payload = payload["numerics"] or {}
    return NumericsConfig.model_validate(payload)


def numerics_from_config(cfg: Any) -> NumericsConfig:
    """Validate the ``numerics`` section of an environment ``ConfigDict``."""
    section = cfg.get("numerics", None) if cfg is not None else None
    if section is None:
        return NumericsConfig()
    payload = section.to_dict() if hasattr(section, "to_dict") else dict(section)
    return NumericsConfig.model_validate(payload)


def collect_and_validate(paths: Iterable[Path | str]) -> list[NumericsConfig]:
    """Validate every YAML file in ``paths``, reporting all failures at once."""
    errors: list[tuple[Path, ValidationError]] = []
    configs: list[NumericsConfig] = []
    for raw_path in paths:
        file = Path(raw_path)
        try:
            configs.append(load_config(file))
        except ValidationError as error:
            errors.append((file, error))
    if errors:
        raise ConfigValidationError(errors)
    return configs


__all__ = [
    "BisectionSettings",
    "ConfigValidationError",
    "FiniteDifferenceSettings",
    "FiniteDifferenceType",
    "IntegratorSettings",
    "NewtonSettings",
    "NumericsConfig",
    "ReplicationSettings",
    "collect_and_validate",
    "load_config",
    "numerics_from_config",
]
