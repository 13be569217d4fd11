import json
from pathlib import Path

import pytest

from cyclegrid.datasets import ExportArgs, run_export
from cyclegrid.errors import InvalidArgument


def _hide_parquet_deps(monkeypatch: pytest.MonkeyPatch) -> None:
    import importlib

    real_find_spec = importlib.util.find_spec

    def fake_find_spec(name: str, package=None):  # type: ignore[override]
        if name in {"pandas", "pyarrow"}:
            return None
        return real_find_spec(name, package)

    monkeypatch.setattr(importlib.util, "find_spec", fake_find_spec)


def test_format_both_graceful_without_parquet_deps(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _hide_parquet_deps(monkeypatch)
    res = run_export(ExportArgs(out=tmp_path / "both", max_length=3, format="both"))
    assert (res / "plans.csv").exists()
    assert not (res / "plans.parquet").exists()
    manifest = json.loads((res / "manifest.json").read_text())
    assert manifest["parquet_written"] is False


def test_format_parquet_raises_without_deps(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _hide_parquet_deps(monkeypatch)
    out = tmp_path / "pq"
    with pytest.raises(RuntimeError):
        run_export(ExportArgs(out=out, max_length=3, format="parquet"))
    # no partial outputs
    assert not out.exists()


def test_parquet_round_trip(tmp_path: Path):
    pd = pytest.importorskip("pandas")
    pytest.importorskip("pyarrow")
    res = run_export(ExportArgs(out=tmp_path / "pq", max_length=4, format="parquet"))
    df = pd.read_parquet(res / "plans.parquet")
    assert len(df) == 17
    assert list(df["plan"][:3]) == ["N", "NE", "NS"]
    assert not (res / "plans.csv").exists()


@pytest.mark.parametrize("kwargs", [{"format": "xlsx"}, {"min_length": 0}, {"min_length": 3, "max_length": 2}])
def test_invalid_export_args(tmp_path: Path, kwargs):
    with pytest.raises(InvalidArgument):
        run_export(ExportArgs(out=tmp_path / "bad", **kwargs))
