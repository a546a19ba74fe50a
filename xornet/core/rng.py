"""Seeded uniform random streams used for initialisation and data synthesis."""

from __future__ import annotations

from typing import Protocol

import numpy as np

from .types import Array

_MASK32 = 0xFFFFFFFF
_WARMUP_DRAWS = 10


def _to_int32(value: int) -> int:
    value &= _MASK32
    return value - (1 << 32) if value & 0x80000000 else value


class UniformSource(Protocol):
    """Anything that yields floats in ``[0, 1)``."""

    def random(self) -> float:
        """Return the next value of the stream."""

    def uniform(self, size: int) -> Array:
        """Return the next ``size`` values of the stream in draw order."""


class DeterministicGenerator:
    """Two-lane multiply-with-carry generator.

    The lanes are seeded by two different affine transforms of ``seed`` and are
    never zero, so the stream cannot stall. The first ten draws are discarded to
    decorrelate the output from the low bits of the seed. For a fixed seed the
    ``i``-th draw is identical on every platform.
    """

    def __init__(self, seed: int) -> None:
        seed = int(seed)
        self.seed = seed
        self._m_w = (seed * 1103515245 + 12345) & _MASK32 or 1
        self._m_z = (seed * 134775813 + 1) & _MASK32 or 1
        for _ in range(_WARMUP_DRAWS):
            self.random()

    def random(self) -> float:
        m_z = self._m_z
        m_w = self._m_w
        m_z = _to_int32(36969 * (m_z & 0xFFFF) + (_to_int32(m_z) >> 16))
        m_w = _to_int32(18000 * (m_w & 0xFFFF) + (_to_int32(m_w) >> 16))
        self._m_z = m_z
        self._m_w = m_w
        result = ((m_z << 16) + (m_w & 0xFFFF)) & _MASK32
        return result / 4294967296.0

    __call__ = random

    def uniform(self, size: int) -> Array:
        return np.fromiter((self.random() for _ in range(int(size))), dtype=np.float64, count=int(size))


class UnseededGenerator:
    """Non-reproducible source backed by numpy's default bit generator."""

    def __init__(self) -> None:
        self.seed = None
        self._rng = np.random.default_rng()

    def random(self) -> float:
        return float(self._rng.random())

    __call__ = random

    def uniform(self, size: int) -> Array:
        return self._rng.random(int(size))


def make_generator(seed: int | None) -> UniformSource:
    """Return a deterministic stream for ``seed`` or an unseeded one for ``None``."""

    if seed is None:
        return UnseededGenerator()
    return DeterministicGenerator(seed)


__all__ = ["DeterministicGenerator", "UniformSource", "UnseededGenerator", "make_generator"]
