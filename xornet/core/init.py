"""Variance-scaled parameter initialisation."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .rng import UniformSource, make_generator
from .types import Array, Parameters, validate_topology

# Keeps ``log(u1)`` finite when the stream returns exactly zero.
_MIN_UNIFORM = 1e-12


def box_muller(u1: Array, u2: Array) -> Array:
    """Map paired uniforms onto standard-normal variates."""

    u1 = np.maximum(np.asarray(u1, dtype=np.float64), _MIN_UNIFORM)
    u2 = np.asarray(u2, dtype=np.float64)
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


def init_parameters(
    topology: Sequence[int], generator: UniformSource | None = None
) -> Parameters:
    """Draw He-scaled weights and zero biases for every connection.

    Weights are filled in row-major ``(from, to)`` order, each one consuming two
    consecutive draws of ``generator``. Without a generator an unseeded source
    is used and the result is not reproducible.
    """

    dims = validate_topology(topology)
    source = generator if generator is not None else make_generator(None)
    weights: list[Array] = []
    biases: list[Array] = []
    for fan_in, fan_out in zip(dims[:-1], dims[1:]):
        draws = source.uniform(2 * fan_in * fan_out).reshape(fan_in, fan_out, 2)
        scale = np.sqrt(2.0 / fan_in)
        weights.append(box_muller(draws[..., 0], draws[..., 1]) * scale)
        biases.append(np.zeros(fan_out, dtype=np.float64))
    return Parameters(weights=weights, biases=biases)


__all__ = ["box_muller", "init_parameters"]
