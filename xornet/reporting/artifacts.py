"""Run artifact helpers: manifests and parameter archives."""

from __future__ import annotations

import json
import os
import platform
import subprocess
import time
from pathlib import Path
from typing import Mapping, Sequence

import numpy as np

from ..core.types import Snapshot


def git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
        return out.decode().strip()
    except Exception:  # pragma: no cover - git may be unavailable in tests
        return "unknown"


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    dataset_provenance: Mapping[str, object],
) -> str:
    """Write a manifest JSON file capturing reproducibility metadata."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "git_sha": git_sha(),
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": config,
        "dataset": dict(dataset_provenance),
        "environment": {
            "python": platform.python_version(),
            "numpy": np.__version__,
            "run_tag": os.environ.get("XORNET_RUN_TAG", ""),
        },
    }
    path.write_text(json.dumps(manifest, indent=2))
    return str(path)


def save_snapshots(path: str | Path, history: Sequence[Snapshot]) -> str:
    """Store every snapshot's parameters and metrics in one ``.npz`` archive.

    Keys are ``s{step}_W{i}`` / ``s{step}_b{i}`` plus ``loss``, ``clean_loss``
    and ``accuracy`` vectors indexed by step.
    """

    payload: dict[str, np.ndarray] = {}
    for snapshot in history:
        for idx, (W, b) in enumerate(zip(snapshot.state.weights, snapshot.state.biases)):
            payload[f"s{snapshot.step}_W{idx}"] = np.asarray(W)
            payload[f"s{snapshot.step}_b{idx}"] = np.asarray(b)
    payload["loss"] = np.asarray([s.loss for s in history], dtype=np.float64)
    payload["clean_loss"] = np.asarray([s.clean_loss for s in history], dtype=np.float64)
    payload["accuracy"] = np.asarray([s.accuracy for s in history], dtype=np.float64)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as handle:
        np.savez_compressed(handle, **payload)
    return str(path)


__all__ = ["git_sha", "save_snapshots", "write_manifest"]
