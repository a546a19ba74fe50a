"""Preset configs and the batch runner that drives a :class:`TrainingSession`."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, Mapping, Sequence

from ..core.types import RunResult
from ..data import registry
from ..reporting.artifacts import save_snapshots, write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter, plot_decision_grid
from ..reporting.summary import write_summary
from .metrics import format_metrics
from .session import TrainingConfig, TrainingSession

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-clean": {
        "data": {"name": "clean_xor", "options": {}},
        "model": {"topology": [2, 4, 1], "seed": 123},
        "train": {
            "epochs": 500,
            "lr": 0.5,
            "confidence_penalty": 0.0,
            "stop_at_accuracy": 1.0,
            "run_dir": "runs/xor-clean",
            "enable_plots": False,
        },
    },
    "xor-noisy": {
        "data": {
            "name": "noisy_xor",
            "options": {"num_samples": 100, "noise_level": 0.2, "seed": 42},
        },
        "model": {"topology": [2, 4, 1], "seed": 123},
        "train": {
            "epochs": 100,
            "lr": 0.1,
            "confidence_penalty": 0.0,
            "run_dir": "runs/xor-noisy",
            "enable_plots": False,
        },
    },
    "xor-confidence": {
        "data": {
            "name": "noisy_xor",
            "options": {"num_samples": 100, "noise_level": 0.2, "seed": 42},
        },
        "model": {"topology": [2, 4, 1], "seed": 123},
        "train": {
            "epochs": 100,
            "lr": 0.1,
            "confidence_penalty": 0.5,
            "run_dir": "runs/xor-confidence",
            "enable_plots": False,
        },
    },
    "xor-deep": {
        "data": {
            "name": "noisy_xor",
            "options": {"num_samples": 200, "noise_level": 0.0, "seed": 7},
        },
        "model": {"topology": [2, 8, 8, 1], "seed": 123},
        "train": {
            "epochs": 60,
            "lr": 0.05,
            "confidence_penalty": 0.0,
            "run_dir": "runs/xor-deep",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_REQUIRED_SECTIONS = {"data", "model", "train"}


def read_config_file(path: str | Path) -> Mapping[str, object]:
    """Decode a JSON or YAML config file into a mapping."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    found: Dict[str, Mapping[str, object]] = {}
    if not _PRESET_DIR.exists():
        return found
    for file in sorted(_PRESET_DIR.iterdir()):
        if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
            continue
        data = read_config_file(file)
        missing = _REQUIRED_SECTIONS - set(data)
        if missing:
            raise KeyError(
                f"Preset {file.name} is missing required sections: {', '.join(sorted(missing))}"
            )
        found[file.stem] = json.loads(json.dumps(data))
    return found


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {
        name: deepcopy(cfg) for name, cfg in _PRESETS.items()
    }
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    available = presets()
    try:
        return available[name]
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def merge_config(base: Mapping[str, object], override: Mapping[str, object]) -> dict:
    """Recursively overlay ``override`` onto a copy of ``base``."""

    merged = deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_config(merged[key], value)  # type: ignore[arg-type]
        else:
            merged[key] = deepcopy(value)
    return merged


def build_session(
    config: Mapping[str, object], callbacks: Sequence[object] | None = None
) -> tuple[TrainingSession, registry.DatasetSpec]:
    """Materialise the dataset and session described by ``config``."""

    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    dataset = registry.get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    training_config = TrainingConfig.from_mapping(config)
    topology = training_config.topology
    if topology[0] != dataset.d_in:
        raise ValueError(f"Topology input width {topology[0]} but dataset has d_in={dataset.d_in}")
    if topology[-1] != dataset.d_out:
        raise ValueError(
            f"Topology output width {topology[-1]} but dataset has d_out={dataset.d_out}"
        )
    session = TrainingSession(training_config, dataset=dataset.points, callbacks=callbacks)
    return session, dataset


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Train for ``train.epochs`` steps and write metrics, manifest and summary."""

    train_cfg = dict(config["train"])  # type: ignore[arg-type]
    epochs = int(train_cfg.get("epochs", 1))
    if epochs < 0:
        raise ValueError(f"epochs must be >= 0, got {epochs}")
    stop_at = train_cfg.get("stop_at_accuracy")
    stop_at = float(stop_at) if stop_at is not None else None
    run_dir = _resolve_run_dir(train_cfg, str(dict(config["data"]).get("name", "data")))  # type: ignore[arg-type]
    run_dir.mkdir(parents=True, exist_ok=True)

    seed = int(dict(config["model"]).get("seed", 0))  # type: ignore[arg-type]
    jsonl = JsonlSink(run_dir / "metrics.jsonl", split="train", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", split="train")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    sinks = [jsonl, csv_sink, plots]

    session, dataset = build_session(config, callbacks=sinks)
    _print_startup_summary(
        dataset_name=dataset.name,
        samples=len(dataset),
        topology=session.topology,
        config=session.config,
        epochs=epochs,
        param_count=session.network.parameter_count(),
    )
    # Step 0 is recorded by reset(), not advance(), so report it here.
    for sink in sinks:
        sink.on_epoch(0, session.current.metrics())

    for _ in range(epochs):
        snapshot = session.advance()
        if stop_at is not None and snapshot.accuracy >= stop_at:
            break

    final = session.current
    print(f"step {final.step}: {format_metrics(final.metrics())}")
    plots.close()
    if plots.enable_plots and session.topology[0] == 2 and session.topology[-1] == 1:
        plot_decision_grid(session.decision_grid(), run_dir / "decision.png")

    snapshot_path = save_snapshots(run_dir / "snapshots.npz", session.history)
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=json.loads(json.dumps(config)),
        dataset_provenance=dataset.provenance,
    )
    summary_path = write_summary(
        session.history, run_dir / "summary.json", tail=int(train_cfg.get("summary_tail", 32))
    )
    (run_dir / "config.json").write_text(json.dumps(config, indent=2, sort_keys=True))

    return RunResult(
        steps=final.step,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
        snapshot_path=snapshot_path,
        final_accuracy=float(final.accuracy),
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _print_startup_summary(
    *,
    dataset_name: str,
    samples: int,
    topology: Sequence[int],
    config: TrainingConfig,
    epochs: int,
    param_count: int,
) -> None:
    print("=== xornet run ===")
    print(f"Dataset       : {dataset_name} ({samples} samples)")
    print(f"Topology      : {list(topology)}")
    print(f"Learning rate : {config.learning_rate}")
    print(f"Conf. penalty : {config.confidence_penalty}")
    print(f"Init seed     : {config.reset_seed}")
    print(f"Epochs        : {epochs}")
    print(f"Parameters    : {param_count}")
    print("==================")


__all__ = [
    "build_session",
    "load_preset",
    "merge_config",
    "presets",
    "read_config_file",
    "run_pipeline",
]
