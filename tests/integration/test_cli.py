import json
from pathlib import Path

import pytest

from cli.main import main


def test_cli_runs_preset(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--preset", "xor-noisy", "--epochs", "3", "--samples", "16", "--run-dir", "out"])
    run_dir = Path("out")
    assert (run_dir / "metrics.jsonl").exists()
    assert (run_dir / "manifest.json").exists()
    manifest = json.loads((run_dir / "manifest.json").read_text())
    assert manifest["config"]["data"]["options"]["num_samples"] == 16
    last_line = capsys.readouterr().out.strip().splitlines()[-1]
    assert json.loads(last_line)["steps"] == 3


def test_cli_dump_config_with_override(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    override = tmp_path / "override.json"
    override.write_text(json.dumps({"train": {"lr": 0.05}}))
    dump = tmp_path / "resolved.json"
    main(
        [
            "--preset",
            "xor-clean",
            "--config",
            str(override),
            "--epochs",
            "1",
            "--run-dir",
            "clean",
            "--dump-config",
            str(dump),
        ]
    )
    resolved = json.loads(dump.read_text())
    assert resolved["train"]["lr"] == 0.05
    assert resolved["data"]["name"] == "clean_xor"


def test_cli_lists_presets(capsys):
    with pytest.raises(SystemExit):
        main(["--list-presets"])
    assert "xor-clean" in capsys.readouterr().out.split()
