"""Command line entry point for xornet training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from xornet.training import pipelines


def _format_result(result) -> str:
    payload = {
        "steps": result.steps,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "summary": result.summary_path,
        "snapshots": result.snapshot_path,
        "accuracy": result.final_accuracy,
    }
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor-clean",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--epochs", type=int, help="Number of epochs to train")
    parser.add_argument("--lr", type=float, help="Learning rate")
    parser.add_argument(
        "--confidence-penalty", type=float, help="Confidence penalty strength (>= 0)"
    )
    parser.add_argument("--noise", type=float, help="Label noise level in [0, 1]")
    parser.add_argument("--samples", type=int, help="Number of noisy XOR samples")
    parser.add_argument("--data-seed", type=int, help="Seed for dataset generation")
    parser.add_argument("--seed", type=int, help="Seed for weight initialisation")
    parser.add_argument("--run-dir", type=Path, help="Directory for run artifacts")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write loss and decision-surface plots"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> dict:
    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))
    if args.config:
        override = pipelines.read_config_file(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = pipelines.merge_config(config, override)

    train = config.setdefault("train", {})
    model = config.setdefault("model", {})
    if args.epochs is not None:
        train["epochs"] = int(args.epochs)
    if args.lr is not None:
        train["lr"] = float(args.lr)
    if args.confidence_penalty is not None:
        train["confidence_penalty"] = float(args.confidence_penalty)
    if args.run_dir is not None:
        train["run_dir"] = str(args.run_dir)
    if args.enable_plots:
        train["enable_plots"] = True
    if args.seed is not None:
        model["seed"] = int(args.seed)

    if any(v is not None for v in (args.noise, args.samples, args.data_seed)):
        data = config.setdefault("data", {})
        if data.get("name") != "noisy_xor":
            data.clear()
            data["name"] = "noisy_xor"
        options = data.setdefault("options", {})
        if args.noise is not None:
            options["noise_level"] = float(args.noise)
        if args.samples is not None:
            options["num_samples"] = int(args.samples)
        if args.data_seed is not None:
            options["seed"] = int(args.data_seed)
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = resolve_config(args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()
