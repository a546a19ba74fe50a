"""Loss and accuracy evaluation over datasets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from ..core.activations import sigmoid
from ..core.losses import binary_cross_entropy, confidence_penalty
from ..core.network import Network
from ..core.types import DataPoint


@dataclass(frozen=True)
class CleanMetrics:
    loss: float
    accuracy: float


def training_loss(
    network: Network, dataset: Sequence[DataPoint], penalty_strength: float = 0.0
) -> float:
    """Mean per-example loss over ``dataset``, including the confidence penalty.

    Runs ``forward`` on ``network`` and therefore overwrites its intermediate
    values.
    """

    if not dataset:
        return 0.0
    total = 0.0
    for point in dataset:
        p = sigmoid(network.forward(point.inputs))
        loss = binary_cross_entropy(p, point.target)
        if penalty_strength > 0:
            loss += penalty_strength * confidence_penalty(p)
        total += loss
    return total / len(dataset)


def clean_metrics(network: Network, eval_set: Sequence[DataPoint]) -> CleanMetrics:
    """BCE and thresholded accuracy on ``eval_set`` using the true targets."""

    if not eval_set:
        return CleanMetrics(loss=0.0, accuracy=0.0)
    total = 0.0
    correct = 0
    for point in eval_set:
        p = sigmoid(network.forward(point.inputs))
        total += binary_cross_entropy(p, point.true_target)
        predicted = 1.0 if p[0] >= 0.5 else 0.0
        if predicted == point.true_target[0]:
            correct += 1
    return CleanMetrics(loss=total / len(eval_set), accuracy=correct / len(eval_set))


def format_metrics(metrics: Mapping[str, float]) -> str:
    return " ".join(f"{name}={value:.4f}" for name, value in sorted(metrics.items()))


__all__ = ["CleanMetrics", "clean_metrics", "format_metrics", "training_loss"]
