"""Dense ReLU network with manual backpropagation."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .activations import relu, relu_derivative, sigmoid
from .errors import ShapeError
from .init import init_parameters
from .losses import output_delta
from .rng import make_generator
from .types import Array, NetworkState, Topology, validate_topology


def _as_vector(values: Sequence[float] | Array, expected: int, what: str) -> Array:
    vec = np.asarray(values, dtype=np.float64)
    if vec.ndim != 1 or vec.shape[0] != expected:
        raise ShapeError(f"{what} must have length {expected}, got shape {vec.shape}")
    return vec


class Network:
    """Fully-connected network holding parameters and the last pass's scratch values.

    Hidden layers use ReLU; the output layer is linear and the sigmoid is only
    applied by the loss. Gradients start at zero so ``step`` before any
    ``backward`` leaves the parameters untouched.
    """

    def __init__(self, topology: Sequence[int], seed: int | None = None) -> None:
        self.topology: Topology = validate_topology(topology)
        self.seed = seed
        params = init_parameters(self.topology, make_generator(seed))
        self.weights: List[Array] = params.weights
        self.biases: List[Array] = params.biases
        self.pre_activations: List[Array] = []
        self.activations: List[Array] = []
        self.weight_grads: List[Array] = [np.zeros_like(w) for w in self.weights]
        self.bias_grads: List[Array] = [np.zeros_like(b) for b in self.biases]

    @classmethod
    def from_state(cls, topology: Sequence[int], state: NetworkState) -> "Network":
        """Build a disposable engine positioned at ``state``."""

        net = cls.__new__(cls)
        net.topology = validate_topology(topology)
        net.seed = None
        net.set_state(state)
        return net

    @property
    def num_connections(self) -> int:
        return len(self.topology) - 1

    def forward(self, inputs: Sequence[float] | Array) -> Array:
        x = _as_vector(inputs, self.topology[0], "Input")
        self.activations = [x.copy()]
        self.pre_activations = []
        activation = x
        last = self.num_connections - 1
        for idx, (W, b) in enumerate(zip(self.weights, self.biases)):
            z = activation @ W + b
            self.pre_activations.append(z)
            activation = z if idx == last else relu(z)
            self.activations.append(activation)
        return activation.copy()

    def predict_proba(self, inputs: Sequence[float] | Array) -> Array:
        return sigmoid(self.forward(inputs))

    def backward(
        self, target: Sequence[float] | Array, confidence_penalty: float = 0.0
    ) -> None:
        """Populate gradients for the example seen by the last ``forward``."""

        y = _as_vector(target, self.topology[-1], "Target")
        if confidence_penalty < 0:
            raise ValueError(f"confidence_penalty must be >= 0, got {confidence_penalty}")
        if len(self.activations) != len(self.topology):
            raise RuntimeError("backward() requires a preceding forward() call")

        delta = output_delta(self.pre_activations[-1], y, confidence_penalty)
        weight_grads: List[Array] = [np.zeros_like(w) for w in self.weights]
        bias_grads: List[Array] = [np.zeros_like(b) for b in self.biases]
        for idx in reversed(range(self.num_connections)):
            weight_grads[idx] = np.outer(self.activations[idx], delta)
            bias_grads[idx] = delta.copy()
            if idx > 0:
                delta = (self.weights[idx] @ delta) * relu_derivative(
                    self.pre_activations[idx - 1]
                )
        self.weight_grads = weight_grads
        self.bias_grads = bias_grads

    def step(self, learning_rate: float) -> None:
        if not learning_rate > 0:
            raise ValueError(f"learning_rate must be positive, got {learning_rate}")
        for idx in range(self.num_connections):
            self.weights[idx] -= learning_rate * self.weight_grads[idx]
            self.biases[idx] -= learning_rate * self.bias_grads[idx]

    def get_state(self) -> NetworkState:
        return NetworkState(
            weights=self.weights,
            biases=self.biases,
            pre_activations=self.pre_activations,
            activations=self.activations,
            weight_grads=self.weight_grads,
            bias_grads=self.bias_grads,
        ).copy()

    def set_state(self, state: NetworkState) -> None:
        self._check_state(state)
        state = state.copy()
        self.weights = list(state.weights)
        self.biases = list(state.biases)
        self.pre_activations = list(state.pre_activations)
        self.activations = list(state.activations)
        if state.weight_grads:
            self.weight_grads = list(state.weight_grads)
            self.bias_grads = list(state.bias_grads)
        else:
            self.weight_grads = [np.zeros_like(w) for w in self.weights]
            self.bias_grads = [np.zeros_like(b) for b in self.biases]

    def _check_state(self, state: NetworkState) -> None:
        dims = self.topology
        if len(state.weights) != len(dims) - 1 or len(state.biases) != len(dims) - 1:
            raise ShapeError(
                f"State has {len(state.weights)} connections, topology {list(dims)} needs "
                f"{len(dims) - 1}"
            )
        for idx, (in_dim, out_dim) in enumerate(zip(dims[:-1], dims[1:])):
            if np.shape(state.weights[idx]) != (in_dim, out_dim):
                raise ShapeError(
                    f"weights[{idx}] has shape {np.shape(state.weights[idx])}, "
                    f"expected {(in_dim, out_dim)}"
                )
            if np.shape(state.biases[idx]) != (out_dim,):
                raise ShapeError(
                    f"biases[{idx}] has shape {np.shape(state.biases[idx])}, "
                    f"expected {(out_dim,)}"
                )
            if state.weight_grads and np.shape(state.weight_grads[idx]) != (in_dim, out_dim):
                raise ShapeError(f"weight_grads[{idx}] does not match weights[{idx}]")
            if state.bias_grads and np.shape(state.bias_grads[idx]) != (out_dim,):
                raise ShapeError(f"bias_grads[{idx}] does not match biases[{idx}]")

    def parameter_count(self) -> int:
        return int(sum(w.size + b.size for w, b in zip(self.weights, self.biases)))


def create_network(topology: Sequence[int], seed: int | None = None) -> Network:
    """Construct a :class:`Network`; ``seed=None`` gives non-reproducible weights."""

    return Network(topology, seed=seed)


__all__ = ["Network", "create_network"]
