import json
from pathlib import Path

import numpy as np
import pytest

from xornet.training import pipelines


def _config(run_dir: Path, **train_overrides) -> dict:
    config = {
        "data": {
            "name": "noisy_xor",
            "options": {"num_samples": 24, "noise_level": 0.2, "seed": 42},
        },
        "model": {"topology": [2, 4, 1], "seed": 123},
        "train": {
            "epochs": 5,
            "lr": 0.2,
            "confidence_penalty": 0.1,
            "run_dir": str(run_dir),
            "enable_plots": False,
        },
    }
    config["train"].update(train_overrides)
    return config


def test_pipeline_produces_artifacts(tmp_path):
    result = pipelines.run_pipeline(_config(tmp_path / "run"))
    assert result.steps == 5
    metrics = [
        json.loads(line) for line in Path(result.metrics_path).read_text().splitlines() if line
    ]
    assert [m["step"] for m in metrics] == list(range(6))
    assert all({"loss", "clean_loss", "accuracy", "sha", "seed"} <= set(m) for m in metrics)
    assert metrics[0]["seed"] == 123

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["dataset"]["type"] == "noisy_xor"
    assert manifest["config"]["train"]["epochs"] == 5

    summary = json.loads(Path(result.summary_path).read_text())
    assert summary["steps"] == 6
    assert summary["final_step"] == 5
    assert summary["metrics"]["loss"]["last"] == pytest.approx(metrics[-1]["loss"])
    assert set(summary["metrics"]) == {"loss", "clean_loss", "accuracy"}

    archive = np.load(result.snapshot_path)
    assert archive["loss"].shape == (6,)
    assert archive["s5_W0"].shape == (2, 4)
    assert (tmp_path / "run" / "metrics.csv").exists()
    assert (tmp_path / "run" / "config.json").exists()


def test_pipeline_is_deterministic(tmp_path):
    first = pipelines.run_pipeline(_config(tmp_path / "a"))
    second = pipelines.run_pipeline(_config(tmp_path / "b"))
    assert Path(first.metrics_path).read_bytes() == Path(second.metrics_path).read_bytes()
    assert Path(first.summary_path).read_bytes() == Path(second.summary_path).read_bytes()


def test_pipeline_stops_at_accuracy(tmp_path):
    config = {
        "data": {"name": "clean_xor", "options": {}},
        "model": {"topology": [2, 4, 1], "seed": 123},
        "train": {"epochs": 300, "lr": 0.5, "stop_at_accuracy": 1.0, "run_dir": str(tmp_path)},
    }
    result = pipelines.run_pipeline(config)
    assert result.final_accuracy == 1.0
    assert result.steps < 300


def test_pipeline_rejects_mismatched_topology(tmp_path):
    config = _config(tmp_path)
    config["model"]["topology"] = [3, 4, 1]
    with pytest.raises(ValueError):
        pipelines.run_pipeline(config)


def test_config_requires_sections():
    with pytest.raises(KeyError):
        pipelines.build_session({"data": {"name": "clean_xor"}, "model": {}})


def test_presets_are_loadable():
    names = set(pipelines.presets())
    assert {"xor-clean", "xor-noisy", "xor-confidence", "xor-deep", "xor-noisy-small"} <= names
    preset = pipelines.load_preset("xor-noisy")
    preset["train"]["lr"] = 99.0
    assert pipelines.load_preset("xor-noisy")["train"]["lr"] == 0.1
    with pytest.raises(KeyError):
        pipelines.load_preset("nope")


def test_merge_config_is_recursive():
    base = pipelines.load_preset("xor-noisy")
    merged = pipelines.merge_config(base, {"train": {"lr": 0.3}})
    assert merged["train"]["lr"] == 0.3
    assert merged["train"]["epochs"] == base["train"]["epochs"]
    assert base["train"]["lr"] == 0.1


def test_plots_written_when_enabled(tmp_path):
    pytest.importorskip("matplotlib")
    result = pipelines.run_pipeline(_config(tmp_path / "plots", epochs=2, enable_plots=True))
    run_dir = Path(result.metrics_path).parent
    assert (run_dir / "loss.png").exists()
    assert (run_dir / "decision.png").exists()
