"""Point sensitivities of a value to the zero yields of named curves."""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional, Tuple

import jax.numpy as jnp
from jax import Array

Chunk = Tuple[Array, Array]


class CurveSensitivity:
    """Curve name -> derivatives with respect to the zero yield at given times.

    Each curve holds a tuple of ``(times, values)`` chunks: ``values[i]`` is the
    derivative of the measured quantity with respect to ``y(times[i])``.
    Chunks are kept as they come so that combining sensitivities never
    re-sorts or merges times. Instances are immutable.
    """

    __slots__ = ("_chunks",)

    def __init__(self, chunks: Optional[Mapping[str, Tuple[Chunk, ...]]] = None) -> None:
        self._chunks: Dict[str, Tuple[Chunk, ...]] = dict(chunks or {})

    @classmethod
    def of(cls, curve_name: str, times, values) -> "CurveSensitivity":
        times_arr = jnp.atleast_1d(jnp.asarray(times, dtype=jnp.float64))
        values_arr = jnp.atleast_1d(jnp.asarray(values, dtype=jnp.float64))
        if times_arr.shape != values_arr.shape:
            raise ValueError(f"times {times_arr.shape} and values {values_arr.shape} differ in shape")
        return cls({curve_name: ((times_arr, values_arr),)})

    def __iter__(self) -> Iterator[str]:
        return iter(self._chunks)

    def __contains__(self, curve_name: object) -> bool:
        return curve_name in self._chunks

    @property
    def curve_names(self) -> Tuple[str, ...]:
        return tuple(self._chunks)

    def chunks(self, curve_name: str) -> Tuple[Chunk, ...]:
        return self._chunks.get(curve_name, ())

    def plus(self, other: "CurveSensitivity") -> "CurveSensitivity":
        merged = dict(self._chunks)
        for name, chunks in other._chunks.items():
            merged[name] = merged.get(name, ()) + chunks
        return CurveSensitivity(merged)

    __add__ = plus

    def scaled(self, factor) -> "CurveSensitivity":
        return CurveSensitivity(
            {name: tuple((times, values * factor) for times, values in chunks) for name, chunks in self._chunks.items()}
        )

    def flattened(self, curve_name: str) -> Chunk:
        """Concatenate the chunks of ``curve_name`` into one ``(times, values)`` pair."""
        chunks = self.chunks(curve_name)
        if not chunks:
            empty = jnp.zeros((0,))
            return empty, empty
        return (
            jnp.concatenate([times for times, _ in chunks]),
            jnp.concatenate([values for _, values in chunks]),
        )

    def __repr__(self) -> str:
        sizes = {name: sum(int(t.shape[0]) for t, _ in chunks) for name, chunks in self._chunks.items()}
        return f"CurveSensitivity({sizes})"


__all__ = ["CurveSensitivity"]
