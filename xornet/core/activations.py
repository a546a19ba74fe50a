"""Activation utilities for xornet."""

from __future__ import annotations

import numpy as np

from .types import Array


def sigmoid(x: Array) -> Array:
    """Return the logistic function ``1 / (1 + exp(-x))`` elementwise."""

    x = np.asarray(x, dtype=np.float64)
    flat = np.atleast_1d(x)
    out = np.empty_like(flat)
    pos = flat >= 0
    out[pos] = 1.0 / (1.0 + np.exp(-flat[pos]))
    exp_neg = np.exp(flat[~pos])
    out[~pos] = exp_neg / (1.0 + exp_neg)
    return out.reshape(x.shape)


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(np.asarray(x, dtype=np.float64), 0.0)


def sigmoid_derivative(output: Array) -> Array:
    """Derivative of the sigmoid expressed through its output ``p``."""

    output = np.asarray(output, dtype=np.float64)
    return output * (1.0 - output)


def relu_derivative(z: Array) -> Array:
    # Sub-gradient at exactly zero is 0.
    return (np.asarray(z) > 0).astype(np.float64)


__all__ = ["relu", "relu_derivative", "sigmoid", "sigmoid_derivative"]
