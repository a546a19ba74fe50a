import json

import pytest

from xornet.core.types import NetworkState, Snapshot
from xornet.reporting.summary import compute_auc, summarize_history, write_summary


def _history(rows):
    empty = NetworkState(weights=(), biases=())
    return [
        Snapshot(step=i, state=empty, loss=loss, clean_loss=clean, accuracy=acc)
        for i, (loss, clean, acc) in enumerate(rows)
    ]


def test_compute_auc_trapezoid():
    assert compute_auc([1.0]) == 0.0
    assert compute_auc([0.0, 1.0, 1.0]) == pytest.approx(1.5)


def test_summary_reports_convergence_and_tail():
    history = _history(
        [(0.7, 0.7, 0.5), (0.5, 0.6, 0.75), (0.2, 0.3, 1.0), (0.1, 0.1, 1.0)]
    )
    summary = summarize_history(history, tail=2)
    assert summary["steps"] == 4
    assert summary["final_step"] == 3
    assert summary["converged_step"] == 2
    assert summary["best_step"] == 3
    assert summary["tail_window"] == 2
    loss = summary["metrics"]["loss"]
    assert loss["min"] == pytest.approx(0.1)
    assert loss["last"] == pytest.approx(0.1)
    assert loss["tail_auc"] == pytest.approx(0.15)


def test_summary_without_convergence_or_history(tmp_path):
    plateau = summarize_history(_history([(0.7, 0.7, 0.5), (0.6, 0.6, 0.75)]))
    assert plateau["converged_step"] is None
    assert plateau["best_step"] == 1

    empty = summarize_history([])
    assert empty["steps"] == 0
    assert empty["metrics"] == {}
    assert empty["best_step"] is None

    with pytest.raises(ValueError):
        summarize_history([], tail=-1)

    path = write_summary(_history([(0.7, 0.7, 0.5)]), tmp_path / "out" / "summary.json")
    assert json.loads(open(path).read())["final_step"] == 0
