"""Definition of a curve calibration problem and its parameter layout."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Tuple

import jax.numpy as jnp
import numpy as np

from ratecore.core.errors import ConfigurationError
from ratecore.market.bundle import CurveBundle, CurveBundleBuilder
from ratecore.market.curves import Curve, YieldCurve
from ratecore.math.functions import Array
from ratecore.math.interpolation import InterpolationMethod
from ratecore.pricing.par_rate import par_rate, resolve_calculator
from ratecore.products.instruments import Instrument


@dataclass(frozen=True)
class CurveNodeSpec:
    """
    An unknown curve: its name, node times and interpolation.

    Attributes:
        name: Curve name referenced by the instruments.
        node_times: Strictly increasing, non-negative node times.
        interpolation: Interpolation of the node yields.
    """

    name: str
    node_times: Tuple[float, ...]
    interpolation: InterpolationMethod = InterpolationMethod.LINEAR

    def __post_init__(self):
        if not self.name:
            raise ConfigurationError("Curve spec needs a name")
        times = tuple(float(t) for t in self.node_times)
        if not times:
            raise ConfigurationError(f"Curve {self.name!r} has no nodes")
        if any(not math.isfinite(t) or t < 0.0 for t in times):
            raise ConfigurationError(f"Curve {self.name!r} node times must be finite and non-negative")
        if any(b <= a for a, b in zip(times, times[1:])):
            raise ConfigurationError(f"Curve {self.name!r} node times must be strictly increasing")
        object.__setattr__(self, "node_times", times)
        object.__setattr__(self, "interpolation", InterpolationMethod(self.interpolation))

    @property
    def size(self) -> int:
        return len(self.node_times)


@dataclass(frozen=True)
class ParameterBlock:
    """Slice ``[start, end)`` of the parameter vector holding curve ``name``."""

    name: str
    start: int
    end: int


class CalibrationProblem:
    """Instruments, market quotes and the curves to solve for.

    Every consistency check happens here, before a solver is involved: empty
    inputs, mismatched lengths, duplicate or colliding curve names, curves
    nobody references, references to unknown curves, unsupported instrument
    kinds and systems with more nodes than instruments all raise
    :class:`ConfigurationError`.

    Parameters
    ----------
    instruments : sequence of Instrument
        Calibration instruments.
    market_rates : sequence of float
        Market quote of each instrument, in the same order.
    curve_specs : sequence of CurveNodeSpec
        Unknown curves in parameter-vector order.
    known_curves : mapping, optional
        Curves held fixed during the calibration.
    """

    def __init__(
        self,
        instruments: Sequence[Instrument],
        market_rates: Sequence[float],
        curve_specs: Sequence[CurveNodeSpec],
        known_curves: Optional[Mapping[str, Curve]] = None,
    ) -> None:
        self.instruments: Tuple[Instrument, ...] = tuple(instruments)
        rates = np.asarray(market_rates, dtype=np.float64).reshape(-1)
        self.curve_specs: Tuple[CurveNodeSpec, ...] = tuple(curve_specs)
        self.known_curves = known_curves if isinstance(known_curves, CurveBundle) else CurveBundle(known_curves)

        if not self.instruments:
            raise ConfigurationError("No calibration instruments given")
        if rates.shape[0] != len(self.instruments):
            raise ConfigurationError(
                f"Got {rates.shape[0]} market rates for {len(self.instruments)} instruments"
            )
        if not np.all(np.isfinite(rates)):
            raise ConfigurationError("Market rates must be finite")
        if not self.curve_specs:
            raise ConfigurationError("No curves to calibrate")

        names = [spec.name for spec in self.curve_specs]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate curve names: {duplicates}")
        collisions = sorted(set(names) & set(self.known_curves))
        if collisions:
            raise ConfigurationError(f"Curves are both known and calibrated: {collisions}")

        available = set(names) | set(self.known_curves)
        referenced = set()
        for position, instrument in enumerate(self.instruments):
            resolve_calculator(instrument)
            curve_names = instrument.curve_names()
            unknown = sorted(set(curve_names) - available)
            if unknown:
                raise ConfigurationError(
                    f"Instrument {position} ({instrument.kind.value}) references unknown curve(s) {unknown}"
                )
            referenced.update(curve_names)
        unused = [name for name in names if name not in referenced]
        if unused:
            raise ConfigurationError(f"Curve(s) {unused} are not referenced by any instrument")

        layout = []
        offset = 0
        for spec in self.curve_specs:
            layout.append(ParameterBlock(spec.name, offset, offset + spec.size))
            offset += spec.size
        self.layout: Tuple[ParameterBlock, ...] = tuple(layout)
        self.n_parameters = offset
        if self.n_parameters > len(self.instruments):
            raise ConfigurationError(
                f"Calibration is underdetermined: more nodes ({self.n_parameters}) "
                f"than instruments ({len(self.instruments)})"
            )
        self.market_rates = jnp.asarray(rates)

    @property
    def n_equations(self) -> int:
        return len(self.instruments)

    @property
    def curve_names(self) -> Tuple[str, ...]:
        return tuple(block.name for block in self.layout)

    def initial_guess(self, level: float = 0.01) -> Array:
        """Flat start vector with every node yield at ``level``."""
        return jnp.full((self.n_parameters,), float(level))

    def check_parameters(self, x) -> Array:
        vector = jnp.asarray(x, dtype=jnp.float64).reshape(-1)
        if vector.shape[0] != self.n_parameters:
            raise ConfigurationError(
                f"Parameter vector has {vector.shape[0]} entries, expected {self.n_parameters}"
            )
        return vector

    def unpack(self, x) -> Dict[str, Array]:
        """Split the parameter vector into node yields per curve."""
        vector = self.check_parameters(x)
        return {block.name: vector[block.start : block.end] for block in self.layout}

    def build_curves(self, x) -> Dict[str, YieldCurve]:
        yields = self.unpack(x)
        return {
            spec.name: YieldCurve(spec.node_times, yields[spec.name], spec.interpolation)
            for spec in self.curve_specs
        }

    def build_bundle(self, x) -> CurveBundle:
        """Calibrated curves (in declaration order) followed by the known curves."""
        return CurveBundleBuilder().add_all(self.build_curves(x)).add_all(self.known_curves).build()

    def model_rates(self, x) -> Array:
        bundle = self.build_bundle(x)
        return jnp.stack([jnp.asarray(par_rate(instrument, bundle)) for instrument in self.instruments])


__all__ = ["CalibrationProblem", "CurveNodeSpec", "ParameterBlock"]
