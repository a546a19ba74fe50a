"""Epochs-to-convergence on clean XOR for a range of initialisation seeds."""

from __future__ import annotations

import argparse
import csv
import json
import sys
from pathlib import Path
from statistics import mean


def sweep(seeds, epochs: int, lr: float, topology) -> list[dict]:
    from xornet.data import CLEAN_XOR
    from xornet.training.session import TrainingConfig, TrainingSession

    runs = []
    for seed in seeds:
        config = TrainingConfig(topology=tuple(topology), learning_rate=lr, reset_seed=seed)
        session = TrainingSession(config, dataset=CLEAN_XOR)
        first = None
        for _ in range(epochs):
            snapshot = session.advance()
            if first is None and snapshot.accuracy == 1.0:
                first = snapshot.step
        runs.append(
            {
                "seed": seed,
                "epochs_to_full_accuracy": first,
                "final_loss": session.current.loss,
                "final_accuracy": session.current.accuracy,
            }
        )
    return runs


def main(argv=None):
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    ap = argparse.ArgumentParser(description=__doc__)
    ap.add_argument("--seeds", nargs="+", type=int, default=[1, 2, 3, 7, 42, 123, 456])
    ap.add_argument("--epochs", type=int, default=300)
    ap.add_argument("--lr", type=float, default=0.5)
    ap.add_argument("--topology", nargs="+", type=int, default=[2, 4, 1])
    ap.add_argument("--out", type=str, default=".artifacts/seed-sweep")
    args = ap.parse_args(argv)

    out = Path(args.out)
    out.mkdir(parents=True, exist_ok=True)
    runs = sweep(args.seeds, args.epochs, args.lr, args.topology)
    (out / "results.jsonl").write_text("\n".join(json.dumps(r) for r in runs), encoding="utf-8")

    csv_path = out / "seed_sweep.csv"
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["seed", "epochs_to_full_accuracy", "final_loss", "final_accuracy"])
        for r in runs:
            w.writerow(
                [
                    r["seed"],
                    "" if r["epochs_to_full_accuracy"] is None else r["epochs_to_full_accuracy"],
                    f"{r['final_loss']:.6f}",
                    f"{r['final_accuracy']:.2f}",
                ]
            )

    converged = [r for r in runs if r["epochs_to_full_accuracy"] is not None]
    lines = [
        "### Clean XOR convergence by seed",
        "",
        f"- Topology: `{args.topology}`; LR: `{args.lr}`; Epoch budget: `{args.epochs}`",
        f"- Converged: {len(converged)}/{len(runs)}",
    ]
    if converged:
        avg = mean(r["epochs_to_full_accuracy"] for r in converged)
        lines.append(f"- Mean epochs to 100% (converged seeds): {avg:.1f}")
    lines += ["", "| Seed | Epochs to 100% | Final loss | Final acc |", "|---:|---:|---:|---:|"]
    for r in runs:
        reached = r["epochs_to_full_accuracy"]
        lines.append(
            f"| {r['seed']} | {'-' if reached is None else reached} | "
            f"{r['final_loss']:.4f} | {r['final_accuracy']:.2f} |"
        )
    md_path = out / "seed_sweep.md"
    md_path.write_text("\n".join(lines), encoding="utf-8")
    print("Wrote:", csv_path, md_path)


if __name__ == "__main__":
    main()
