from pathlib import Path

import cyclegrid.tracking as T
from cyclegrid.datasets import ExportArgs, run_export


def test_disabled_run_is_inactive():
    with T.tracked_run(False, run_name="x") as active:
        assert active is False


def test_enabled_without_mlflow_degrades(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(T, "_mlflow", lambda: None)
    with T.tracked_run(True, run_name="x", log_dir=tmp_path) as active:
        assert active is False
        T.log_params({"a": 1})
        T.log_metrics({"b": 2.0})
        T.log_artifacts([tmp_path / "nothing.txt"])


def test_export_inside_tracked_run_without_backend(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(T, "_mlflow", lambda: None)
    with T.tracked_run(True, run_name="corpus_export"):
        out = run_export(ExportArgs(out=tmp_path / "exp", max_length=2))
    assert (out / "manifest.json").exists()
