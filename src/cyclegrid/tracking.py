"""
Optional MLflow tracking for export runs.

mlflow is imported lazily; when it is missing or misconfigured every helper
degrades to a logged no-op so exports never fail because of tracking.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional


def _mlflow() -> Optional[Any]:
    try:
        import mlflow  # type: ignore
    except ImportError:
        return None
    return mlflow


@contextmanager
def tracked_run(enabled: bool, run_name: str, log_dir: Optional[Path] = None) -> Iterator[bool]:
    """Open an MLflow run when enabled; yields whether tracking is active."""
    mlflow = _mlflow() if enabled else None
    if mlflow is None:
        if enabled:
            logging.warning("mlflow not installed; continuing without tracking")
        yield False
        return
    if log_dir is not None:
        mlflow.set_tracking_uri((log_dir.resolve() / "mlruns").as_uri())
    with mlflow.start_run(run_name=run_name):
        yield True


def _call(name: str, *args: Any, **kwargs: Any) -> None:
    mlflow = _mlflow()
    if mlflow is None or mlflow.active_run() is None:
        return
    try:
        getattr(mlflow, name)(*args, **kwargs)
    except Exception as e:  # tracking must never break an export
        logging.debug("mlflow.%s failed: %s: %s", name, type(e).__name__, e)


def log_params(params: Dict[str, object]) -> None:
    _call("log_params", params)


def log_metrics(metrics: Dict[str, float]) -> None:
    _call("log_metrics", metrics)


def log_artifacts(paths: Iterable[Path], artifact_path: Optional[str] = None) -> None:
    for p in paths:
        _call("log_artifact", str(p), artifact_path=artifact_path)
