"""Training orchestration for xornet."""

from .metrics import CleanMetrics, clean_metrics, training_loss
from .pipelines import build_session, load_preset, presets, run_pipeline
from .session import (
    ExampleView,
    TrainingConfig,
    TrainingSession,
    capture_snapshot,
    train_epoch,
)

__all__ = [
    "CleanMetrics",
    "ExampleView",
    "TrainingConfig",
    "TrainingSession",
    "build_session",
    "capture_snapshot",
    "clean_metrics",
    "load_preset",
    "presets",
    "run_pipeline",
    "train_epoch",
    "training_loss",
]
