"""Binary cross-entropy with an optional confidence penalty."""

from __future__ import annotations

import numpy as np

from .activations import sigmoid, sigmoid_derivative
from .types import Array

EPSILON = 1e-7


def clamp_probabilities(p: Array) -> Array:
    """Clip probabilities into ``[EPSILON, 1 - EPSILON]``."""

    return np.clip(np.asarray(p, dtype=np.float64), EPSILON, 1.0 - EPSILON)


def binary_cross_entropy(predicted: Array, target: Array) -> float:
    """Mean BCE of probabilities ``predicted`` against 0/1 ``target``."""

    p = clamp_probabilities(np.atleast_1d(predicted))
    y = np.atleast_1d(np.asarray(target, dtype=np.float64))
    return float(np.mean(-(y * np.log(p) + (1.0 - y) * np.log(1.0 - p))))


def confidence_penalty(predicted: Array) -> float:
    """Mean of ``4 p (1 - p)``: 0 at ``p`` in {0, 1}, 1 at ``p = 0.5``."""

    p = np.atleast_1d(np.asarray(predicted, dtype=np.float64))
    return float(np.mean(4.0 * p * (1.0 - p)))


def bce_with_confidence_penalty(
    predicted: Array, target: Array, penalty_strength: float = 1.0
) -> float:
    """BCE plus ``penalty_strength`` times the confidence penalty."""

    return binary_cross_entropy(predicted, target) + penalty_strength * confidence_penalty(
        predicted
    )


def output_delta(logits: Array, target: Array, penalty_strength: float = 0.0) -> Array:
    """Gradient of the combined loss with respect to the output pre-activation.

    ``dL/dp = -y/p + (1-y)/(1-p)`` (plus ``4 s (1 - 2p)`` for a positive
    penalty strength ``s``), multiplied by ``dp/dz = p (1 - p)``. Only ``dL/dp``
    uses the clamped probability, so a fully saturated output yields a zero delta.
    """

    probs = sigmoid(logits)
    p = clamp_probabilities(probs)
    y = np.asarray(target, dtype=np.float64)
    grad = -y / p + (1.0 - y) / (1.0 - p)
    if penalty_strength > 0:
        grad = grad + penalty_strength * 4.0 * (1.0 - 2.0 * p)
    return grad * sigmoid_derivative(probs)


__all__ = [
    "EPSILON",
    "bce_with_confidence_penalty",
    "binary_cross_entropy",
    "clamp_probabilities",
    "confidence_penalty",
    "output_delta",
]
