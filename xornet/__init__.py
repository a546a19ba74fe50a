"""xornet public API."""

from .core import activations, losses  # noqa: F401
from .core.errors import HistoryError, ShapeError, XornetError
from .core.network import Network, create_network
from .core.rng import DeterministicGenerator, make_generator
from .core.types import DataPoint, NetworkState, RunResult, Snapshot
from .data import CLEAN_XOR, generate_dataset
from .training.pipelines import load_preset, presets, run_pipeline
from .training.session import TrainingConfig, TrainingSession, train_epoch

advance_epoch = train_epoch

__all__ = [
    "CLEAN_XOR",
    "DataPoint",
    "DeterministicGenerator",
    "HistoryError",
    "Network",
    "NetworkState",
    "RunResult",
    "ShapeError",
    "Snapshot",
    "TrainingConfig",
    "TrainingSession",
    "XornetError",
    "activations",
    "advance_epoch",
    "create_network",
    "generate_dataset",
    "load_preset",
    "losses",
    "make_generator",
    "presets",
    "run_pipeline",
    "train_epoch",
]
