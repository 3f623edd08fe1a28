"""
Experiment tracking for arena runs (optional MLflow backend).

MLflow is only imported when tracking is requested, so it stays an optional
dependency.
"""
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional


@contextmanager
def maybe_mlflow_run(enabled: bool, run_name: str, log_dir: Optional[Path] = None) -> Iterator[bool]:
    """Yield True when an MLflow run is active for the body of the block."""
    if not enabled:
        yield False
        return
    try:
        import mlflow  # type: ignore
    except ImportError:
        # Soft-fail: continue without tracking
        yield False
        return
    if log_dir is not None:
        mlflow.set_tracking_uri((log_dir / "mlruns").resolve().as_uri())
    with mlflow.start_run(run_name=run_name):
        yield True


def log_params(params: Dict[str, object]) -> None:
    try:
        import mlflow  # type: ignore
    except ImportError:
        return
    if mlflow.active_run() is not None:
        mlflow.log_params(params)


def log_metrics(metrics: Dict[str, float]) -> None:
    try:
        import mlflow  # type: ignore
    except ImportError:
        return
    if mlflow.active_run() is not None:
        mlflow.log_metrics(metrics)


def log_artifact(path: Path, artifact_path: Optional[str] = None) -> None:
    try:
        import mlflow  # type: ignore
    except ImportError:
        return
    if mlflow.active_run() is not None:
        mlflow.log_artifact(str(path), artifact_path=artifact_path)
