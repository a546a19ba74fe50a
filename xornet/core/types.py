"""Core typing contracts for xornet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

Array = np.ndarray
Topology = Tuple[int, ...]

_STATE_GROUPS = (
    "weights",
    "biases",
    "pre_activations",
    "activations",
    "weight_grads",
    "bias_grads",
)


def _copy_all(arrays: Sequence[Array]) -> List[Array]:
    return [np.array(a, dtype=np.float64, copy=True) for a in arrays]


def _same(left: Sequence[Array], right: Sequence[Array]) -> bool:
    if len(left) != len(right):
        return False
    return all(np.array_equal(a, b) for a, b in zip(left, right))


def validate_topology(topology: Sequence[int]) -> Topology:
    """Return ``topology`` as a tuple, raising ``ValueError`` if malformed."""

    dims = tuple(int(d) for d in topology)
    if len(dims) < 2:
        raise ValueError(f"Topology needs at least two layers, got {list(dims)}")
    if any(d < 1 for d in dims):
        raise ValueError(f"Layer widths must be positive, got {list(dims)}")
    return dims


@dataclass(eq=False)
class Parameters:
    """Weight matrices (``[from, to]``) and bias vectors per connection."""

    weights: List[Array]
    biases: List[Array]

    def copy(self) -> "Parameters":
        return Parameters(weights=_copy_all(self.weights), biases=_copy_all(self.biases))


@dataclass(frozen=True, eq=False)
class NetworkState:
    """Full export of a :class:`~xornet.core.network.Network`.

    Every group is stored as a tuple, so an exported state cannot gain, lose
    or swap arrays after construction. ``frozen()`` additionally flags the
    arrays themselves read-only.

    Attributes
    ----------
    weights, biases:
        Current parameters, one entry per connection.
    pre_activations:
        ``z`` values of every non-input layer from the last forward pass.
    activations:
        Post-activation values of every layer; entry 0 is the input itself.
    weight_grads, bias_grads:
        Gradients written by the last backward pass.
    """

    weights: Tuple[Array, ...]
    biases: Tuple[Array, ...]
    pre_activations: Tuple[Array, ...] = ()
    activations: Tuple[Array, ...] = ()
    weight_grads: Tuple[Array, ...] = ()
    bias_grads: Tuple[Array, ...] = ()

    def __post_init__(self) -> None:
        for name in _STATE_GROUPS:
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def copy(self) -> "NetworkState":
        return NetworkState(**{name: _copy_all(getattr(self, name)) for name in _STATE_GROUPS})

    def frozen(self) -> "NetworkState":
        """Return a deep copy whose arrays are flagged read-only."""

        state = self.copy()
        for name in _STATE_GROUPS:
            for arr in getattr(state, name):
                arr.setflags(write=False)
        return state

    def equals(self, other: "NetworkState") -> bool:
        return all(_same(getattr(self, name), getattr(other, name)) for name in _STATE_GROUPS)


@dataclass(frozen=True, eq=False)
class Snapshot:
    """Immutable record of the network at one training step."""

    step: int
    state: NetworkState
    loss: float
    clean_loss: float
    accuracy: float
    selected_index: int = 0

    def metrics(self) -> dict:
        return {
            "loss": float(self.loss),
            "clean_loss": float(self.clean_loss),
            "accuracy": float(self.accuracy),
        }


@dataclass(frozen=True)
class DataPoint:
    """A labelled sample; ``target`` may be flipped relative to ``true_target``."""

    inputs: Tuple[float, ...]
    target: Tuple[float, ...]
    true_target: Tuple[float, ...]
    is_noisy: bool = False


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`xornet.training.pipelines.run_pipeline`."""

    steps: int
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    snapshot_path: str = ""
    final_accuracy: float = 0.0


__all__ = [
    "Array",
    "DataPoint",
    "NetworkState",
    "Parameters",
    "RunResult",
    "Snapshot",
    "Topology",
    "validate_topology",
]
