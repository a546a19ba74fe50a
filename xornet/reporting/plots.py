"""Headless-safe plotting of training curves and decision surfaces."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Tuple

import numpy as np


def _pyplot():
    import matplotlib

    matplotlib.use("Agg", force=True)
    import matplotlib.pyplot as plt  # imported lazily for headless safety

    return plt


class PlotAdapter:
    """Collect per-step metrics and write ``loss.png`` on :meth:`close`."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, step: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots:
            return
        self._history.append(
            (int(step), float(metrics.get("loss", 0.0)), float(metrics.get("clean_loss", 0.0)))
        )

    __call__ = on_epoch

    def close(self) -> None:
        if not self.enable_plots or not self._history:
            return
        plt = _pyplot()
        steps, losses, clean = zip(*self._history)
        fig, ax = plt.subplots()
        ax.plot(steps, losses, label="train")
        ax.plot(steps, clean, label="clean")
        ax.set_xlabel("Step")
        ax.set_ylabel("Loss")
        ax.set_title("Training Curve")
        ax.legend()
        fig.savefig(self.run_dir / "loss.png")
        plt.close(fig)


def plot_decision_grid(grid: np.ndarray, path: str | Path) -> str:
    """Render a probability grid from ``TrainingSession.decision_grid``."""

    plt = _pyplot()
    fig, ax = plt.subplots()
    image = ax.imshow(grid, origin="lower", extent=(0.0, 1.0, 0.0, 1.0), vmin=0.0, vmax=1.0)
    fig.colorbar(image, ax=ax)
    ax.set_xlabel("x1")
    ax.set_ylabel("x2")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path)
    plt.close(fig)
    return str(path)


__all__ = ["PlotAdapter", "plot_decision_grid"]
