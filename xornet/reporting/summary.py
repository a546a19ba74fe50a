"""Run summaries computed straight from a snapshot history."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping, Sequence

import numpy as np

from ..core.types import Snapshot

_METRICS = ("loss", "clean_loss", "accuracy")


def compute_auc(points: Sequence[float]) -> float:
    """Trapezoid area under ``points`` with unit spacing between steps."""

    if len(points) < 2:
        return 0.0
    y = np.asarray(points, dtype=np.float64)
    return float(np.sum((y[1:] + y[:-1]) * 0.5))


def _first_step_at(history: Sequence[Snapshot], accuracy: float) -> int | None:
    for snapshot in history:
        if snapshot.accuracy >= accuracy:
            return snapshot.step
    return None


def summarize_history(history: Sequence[Snapshot], tail: int = 32) -> Mapping[str, object]:
    """Per-metric statistics plus convergence markers for ``history``.

    ``tail_auc`` covers the last ``tail`` steps only; ``converged_step`` is the
    first step with perfect clean accuracy, or ``None``.
    """

    if tail < 0:
        raise ValueError(f"tail must be >= 0, got {tail}")
    tail_window = min(tail, len(history))
    metrics: dict[str, Mapping[str, float]] = {}
    for name in _METRICS:
        values = np.asarray([getattr(s, name) for s in history], dtype=np.float64)
        if values.size == 0:
            continue
        window = values[len(values) - tail_window :]
        metrics[name] = {
            "min": float(values.min()),
            "max": float(values.max()),
            "mean": float(values.mean()),
            "last": float(values[-1]),
            "tail_auc": compute_auc(window.tolist()),
        }

    best = max(history, key=lambda s: (s.accuracy, -s.clean_loss), default=None)
    return {
        "version": 2,
        "steps": len(history),
        "final_step": history[-1].step if history else None,
        "tail_window": tail_window,
        "best_step": best.step if best is not None else None,
        "converged_step": _first_step_at(history, 1.0),
        "metrics": metrics,
    }


def write_summary(
    history: Sequence[Snapshot], out_summary_json: str | Path, *, tail: int = 32
) -> str:
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(
        json.dumps(summarize_history(history, tail), sort_keys=True, indent=2)
    )
    return str(out_path)


__all__ = ["compute_auc", "summarize_history", "write_summary"]
