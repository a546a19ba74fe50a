"""Epoch-by-epoch training with an append-only, navigable snapshot history."""

from __future__ import annotations

import numbers
import time
from dataclasses import dataclass, replace
from typing import Iterable, List, Mapping, Sequence, Tuple

import numpy as np

from ..core.errors import HistoryError
from ..core.losses import binary_cross_entropy
from ..core.network import Network
from ..core.types import Array, DataPoint, Snapshot, Topology, validate_topology
from ..data.xor import clean_xor_dataset, generate_dataset
from .metrics import clean_metrics, training_loss

RESET_SEED = 123


def _time_seed(modulus: int = 99999) -> int:
    return (time.time_ns() // 1_000_000) % modulus + 1


@dataclass(frozen=True)
class TrainingConfig:
    """Every tunable of a :class:`TrainingSession`."""

    topology: Tuple[int, ...] = (2, 4, 1)
    learning_rate: float = 0.5
    confidence_penalty: float = 0.0
    num_samples: int = 100
    noise_level: float = 0.0
    data_seed: int = 42
    reset_seed: int = RESET_SEED

    def __post_init__(self) -> None:
        object.__setattr__(self, "topology", validate_topology(self.topology))
        if not self.learning_rate > 0:
            raise ValueError(f"learning_rate must be positive, got {self.learning_rate}")
        if self.confidence_penalty < 0:
            raise ValueError(
                f"confidence_penalty must be >= 0, got {self.confidence_penalty}"
            )
        if isinstance(self.num_samples, bool) or int(self.num_samples) != self.num_samples:
            raise ValueError(f"num_samples must be an integer, got {self.num_samples!r}")
        if self.num_samples <= 0:
            raise ValueError(f"num_samples must be positive, got {self.num_samples}")
        if not 0.0 <= self.noise_level <= 1.0:
            raise ValueError(f"noise_level must lie in [0, 1], got {self.noise_level}")

    @classmethod
    def from_mapping(cls, config: Mapping[str, object]) -> "TrainingConfig":
        """Build from a ``{"data", "model", "train"}`` run config."""

        missing = {"data", "model", "train"} - set(config)
        if missing:
            raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")
        data_opts = dict(config["data"].get("options", {}))  # type: ignore[union-attr]
        model_cfg = dict(config["model"])  # type: ignore[arg-type]
        train_cfg = dict(config["train"])  # type: ignore[arg-type]
        defaults = cls()
        return cls(
            topology=tuple(model_cfg.get("topology", defaults.topology)),
            learning_rate=float(train_cfg.get("lr", defaults.learning_rate)),
            confidence_penalty=float(
                train_cfg.get("confidence_penalty", defaults.confidence_penalty)
            ),
            num_samples=int(data_opts.get("num_samples", defaults.num_samples)),
            noise_level=float(data_opts.get("noise_level", defaults.noise_level)),
            data_seed=int(data_opts.get("seed", defaults.data_seed)),
            reset_seed=int(model_cfg.get("seed", defaults.reset_seed)),
        )


@dataclass(frozen=True, eq=False)
class ExampleView:
    """One evaluation point traced through the network at a recorded step.

    ``pre_activations`` and ``activations`` come from a forward pass on the
    point itself; the gradients are the ones stored in the snapshot.
    """

    step: int
    index: int
    point: DataPoint
    probability: float
    loss: float
    pre_activations: Tuple[Array, ...]
    activations: Tuple[Array, ...]
    weight_grads: Tuple[Array, ...]
    bias_grads: Tuple[Array, ...]


def train_epoch(
    network: Network,
    dataset: Iterable[DataPoint],
    learning_rate: float,
    confidence_penalty: float = 0.0,
) -> Network:
    """One forward/backward/step cycle per example, in dataset order."""

    for point in dataset:
        network.forward(point.inputs)
        network.backward(point.target, confidence_penalty)
        network.step(learning_rate)
    return network


def capture_snapshot(
    step: int,
    network: Network,
    dataset: Sequence[DataPoint],
    eval_set: Sequence[DataPoint],
    confidence_penalty: float = 0.0,
    selected_index: int = 0,
) -> Snapshot:
    """Freeze ``network`` and attach its metrics.

    The state is exported before evaluation, so it holds the intermediate
    values of the pass that produced it.
    """

    state = network.get_state().frozen()
    loss = training_loss(network, dataset, confidence_penalty)
    clean = clean_metrics(network, eval_set)
    return Snapshot(
        step=step,
        state=state,
        loss=loss,
        clean_loss=clean.loss,
        accuracy=clean.accuracy,
        selected_index=selected_index,
    )


class TrainingSession:
    """Own a dataset and the snapshot history of one network.

    The dataset is generated from the config unless one is passed explicitly.
    ``history[i].step == i`` always holds and step 0 is the untrained network.
    ``network`` is an engine rehydrated at ``current_step``; queries that must
    not disturb it run on disposable engines.
    """

    def __init__(
        self,
        config: TrainingConfig | None = None,
        *,
        dataset: Sequence[DataPoint] | None = None,
        eval_set: Sequence[DataPoint] | None = None,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.config = config or TrainingConfig()
        self.eval_set: Tuple[DataPoint, ...] = tuple(eval_set or clean_xor_dataset())
        self.callbacks = list(callbacks or [])
        if dataset is None:
            dataset = generate_dataset(
                self.config.num_samples, self.config.noise_level, self.config.data_seed
            )
        elif not dataset:
            raise ValueError("dataset must contain at least one point")
        self.dataset: Tuple[DataPoint, ...] = tuple(dataset)
        self.selected_index = 0
        self.seed = self.config.reset_seed
        self._history: List[Snapshot] = []
        self.current_step = 0
        self.network: Network
        self.reset()

    # ------------------------------------------------------------------
    # Read access

    @property
    def topology(self) -> Topology:
        return self.config.topology

    @property
    def history(self) -> Tuple[Snapshot, ...]:
        return tuple(self._history)

    @property
    def current(self) -> Snapshot:
        return self._history[self.current_step]

    @property
    def frontier(self) -> int:
        return len(self._history) - 1

    @property
    def at_frontier(self) -> bool:
        return self.current_step == self.frontier

    def __len__(self) -> int:
        return len(self._history)

    # ------------------------------------------------------------------
    # Transitions

    def reset(self, seed: int | None = None) -> Snapshot:
        """Discard the history and start from a fresh network built with ``seed``.

        Without an explicit seed the configured reset seed is used, so repeated
        resets produce identical histories.
        """

        self.seed = self.config.reset_seed if seed is None else int(seed)
        network = Network(self.topology, seed=self.seed)
        snapshot = capture_snapshot(
            0, network, self.dataset, self.eval_set, self.config.confidence_penalty
        )
        self._history = [snapshot]
        self.current_step = 0
        self.selected_index = 0
        self.network = self._rehydrate(snapshot)
        return snapshot

    def randomize(self) -> Snapshot:
        return self.reset(seed=_time_seed())

    def advance(self) -> Snapshot:
        """Train one epoch from the frontier snapshot and append the result."""

        if not self.at_frontier:
            raise HistoryError(
                f"advance() is only valid at the frontier (step {self.frontier}), "
                f"currently at step {self.current_step}"
            )
        frontier = self._history[-1]
        network = train_epoch(
            self._rehydrate(frontier),
            self.dataset,
            self.config.learning_rate,
            self.config.confidence_penalty,
        )
        snapshot = capture_snapshot(
            frontier.step + 1,
            network,
            self.dataset,
            self.eval_set,
            self.config.confidence_penalty,
            self.selected_index,
        )
        self._history.append(snapshot)
        self.current_step = snapshot.step
        self.network = self._rehydrate(snapshot)
        self._emit_epoch(snapshot)
        return snapshot

    advance_epoch = advance

    def advance_epochs(self, epochs: int) -> Snapshot:
        if epochs < 0:
            raise ValueError(f"epochs must be >= 0, got {epochs}")
        for _ in range(epochs):
            self.advance()
        return self.current

    def go_to(self, step: int) -> Snapshot:
        """Replay the snapshot at ``step``; nothing is recomputed."""

        self.current_step = self._check_step(step)
        snapshot = self._history[self.current_step]
        self.network = self._rehydrate(snapshot)
        return snapshot

    def select_example(self, index: int) -> int:
        """Choose which evaluation point ``selected_view`` reports on."""

        if (
            isinstance(index, bool)
            or not isinstance(index, numbers.Integral)
            or not 0 <= index < len(self.eval_set)
        ):
            raise HistoryError(f"Example index {index!r} outside [0, {len(self.eval_set)})")
        self.selected_index = int(index)
        return self.selected_index

    # ------------------------------------------------------------------
    # Configuration

    def set_learning_rate(self, learning_rate: float) -> None:
        self.config = replace(self.config, learning_rate=float(learning_rate))

    def set_confidence_penalty(self, strength: float) -> None:
        self.config = replace(self.config, confidence_penalty=float(strength))

    def set_data_params(
        self,
        *,
        num_samples: int | None = None,
        noise_level: float | None = None,
        seed: int | None = None,
    ) -> bool:
        """Regenerate the dataset; any change resets the history to the fixed seed.

        Returns ``True`` when the dataset changed.
        """

        updated = replace(
            self.config,
            num_samples=self.config.num_samples if num_samples is None else num_samples,
            noise_level=self.config.noise_level if noise_level is None else noise_level,
            data_seed=self.config.data_seed if seed is None else int(seed),
        )
        changed = (
            updated.num_samples != self.config.num_samples
            or updated.noise_level != self.config.noise_level
            or updated.data_seed != self.config.data_seed
        )
        if not changed:
            return False
        self.config = updated
        self.dataset = generate_dataset(
            updated.num_samples, updated.noise_level, updated.data_seed
        )
        self.reset()
        return True

    def regenerate_data(self) -> int:
        """Switch to a time-derived data seed and return it."""

        seed = _time_seed(100000)
        if seed == self.config.data_seed:
            seed += 1
        self.set_data_params(seed=seed)
        return seed

    # ------------------------------------------------------------------
    # Read-only queries

    def rehydrate(self, step: int | None = None) -> Network:
        """Return a disposable engine positioned at ``step`` (default: current)."""

        step = self.current_step if step is None else self._check_step(step)
        return self._rehydrate(self._history[step])

    def predictions(self, inputs: Sequence[Sequence[float]] | None = None) -> Array:
        """Sigmoid outputs for ``inputs`` (default: the evaluation set)."""

        if inputs is None:
            inputs = [point.inputs for point in self.eval_set]
        network = self.rehydrate()
        return np.stack([network.predict_proba(x) for x in inputs])

    def selected_view(self, step: int | None = None) -> ExampleView:
        """Trace the selected evaluation point through the engine at ``step``."""

        step = self.current_step if step is None else self._check_step(step)
        snapshot = self._history[step]
        point = self.eval_set[self.selected_index]
        network = self._rehydrate(snapshot)
        probability = network.predict_proba(point.inputs)
        return ExampleView(
            step=step,
            index=self.selected_index,
            point=point,
            probability=float(probability[0]),
            loss=binary_cross_entropy(probability, point.true_target),
            pre_activations=tuple(network.pre_activations),
            activations=tuple(network.activations),
            weight_grads=snapshot.state.weight_grads,
            bias_grads=snapshot.state.bias_grads,
        )

    def decision_grid(self, resolution: int = 25) -> Array:
        """Probability of class 1 over a ``resolution x resolution`` grid of the unit square.

        Row ``i`` corresponds to ``x2 = i / (resolution - 1)``, column ``j`` to
        ``x1 = j / (resolution - 1)``.
        """

        if resolution < 2:
            raise ValueError(f"resolution must be >= 2, got {resolution}")
        if self.topology[0] != 2 or self.topology[-1] != 1:
            raise ValueError("decision_grid needs a 2-input, 1-output topology")
        network = self.rehydrate()
        axis = np.linspace(0.0, 1.0, resolution)
        grid = np.empty((resolution, resolution), dtype=np.float64)
        for i, x2 in enumerate(axis):
            for j, x1 in enumerate(axis):
                grid[i, j] = network.predict_proba((x1, x2))[0]
        return grid

    def loss_curve(self, metric: str = "loss") -> Array:
        if metric not in {"loss", "clean_loss", "accuracy"}:
            raise KeyError(f"Unknown metric: {metric}")
        return np.asarray([getattr(s, metric) for s in self._history], dtype=np.float64)

    def parameter_trace(self, kind: str, layer: int, *index: int) -> Array:
        """Value of one weight, bias or gradient across every recorded step."""

        attr = {
            "weight": "weights",
            "weight_grad": "weight_grads",
            "bias": "biases",
            "bias_grad": "bias_grads",
        }.get(kind)
        if attr is None:
            raise KeyError(f"Unknown parameter kind: {kind}")
        return np.asarray(
            [getattr(s.state, attr)[layer][index] for s in self._history], dtype=np.float64
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _check_step(self, step: int) -> int:
        if (
            isinstance(step, bool)
            or not isinstance(step, numbers.Integral)
            or not 0 <= step < len(self._history)
        ):
            raise HistoryError(
                f"Step {step!r} is outside the recorded history [0, {len(self._history)})"
            )
        return int(step)

    def _rehydrate(self, snapshot: Snapshot) -> Network:
        return Network.from_state(self.topology, snapshot.state)

    def _emit_epoch(self, snapshot: Snapshot) -> None:
        metrics = snapshot.metrics()
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(snapshot.step, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(snapshot.step, metrics)


__all__ = [
    "ExampleView",
    "RESET_SEED",
    "TrainingConfig",
    "TrainingSession",
    "capture_snapshot",
    "train_epoch",
]
