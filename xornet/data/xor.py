"""Synthetic XOR datasets with controllable label noise."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from ..core.rng import DeterministicGenerator
from ..core.types import Array, DataPoint

CLEAN_XOR: Tuple[DataPoint, ...] = tuple(
    DataPoint(inputs=(float(a), float(b)), target=(float(a ^ b),), true_target=(float(a ^ b),))
    for a, b in ((0, 0), (0, 1), (1, 0), (1, 1))
)


def clean_xor_dataset() -> Tuple[DataPoint, ...]:
    """Return the four canonical XOR corners."""

    return CLEAN_XOR


def generate_dataset(num_samples: int, noise_level: float, seed: int) -> Tuple[DataPoint, ...]:
    """Sample ``num_samples`` points from the unit square labelled by quadrant XOR.

    Each sample consumes three draws of the seeded stream: ``x1``, ``x2`` and a
    noise draw; the label is flipped when the noise draw falls below
    ``noise_level``.
    """

    if isinstance(num_samples, bool) or int(num_samples) != num_samples or num_samples <= 0:
        raise ValueError(f"num_samples must be a positive integer, got {num_samples!r}")
    if not 0.0 <= noise_level <= 1.0:
        raise ValueError(f"noise_level must lie in [0, 1], got {noise_level!r}")

    rand = DeterministicGenerator(seed)
    points = []
    for _ in range(int(num_samples)):
        x1 = rand()
        x2 = rand()
        true_label = int(x1 >= 0.5) ^ int(x2 >= 0.5)
        is_noisy = rand() < noise_level
        label = 1 - true_label if is_noisy else true_label
        points.append(
            DataPoint(
                inputs=(x1, x2),
                target=(float(label),),
                true_target=(float(true_label),),
                is_noisy=is_noisy,
            )
        )
    return tuple(points)


def noise_fraction(dataset: Sequence[DataPoint]) -> float:
    """Fraction of points whose label was flipped."""

    if not dataset:
        return 0.0
    return sum(1 for point in dataset if point.is_noisy) / len(dataset)


def as_arrays(dataset: Sequence[DataPoint]) -> tuple[Array, Array]:
    """Stack a dataset into ``(inputs, targets)`` matrices."""

    inputs = np.asarray([p.inputs for p in dataset], dtype=np.float64)
    targets = np.asarray([p.target for p in dataset], dtype=np.float64)
    return inputs, targets


__all__ = ["CLEAN_XOR", "as_arrays", "clean_xor_dataset", "generate_dataset", "noise_fraction"]
