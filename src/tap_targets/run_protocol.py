"""Run folders for audit runs: ``<runs_root>/<stamp>_<slug>/{input,artifacts}``."""

from __future__ import annotations

import json
import os
import re
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class RunPaths:
    run_id: str
    run_dir: Path

    @property
    def input_dir(self) -> Path:
        return self.run_dir / "input"

    @property
    def artifacts_dir(self) -> Path:
        return self.run_dir / "artifacts"

    @property
    def report_path(self) -> Path:
        return self.artifacts_dir / "report.json"

    @property
    def manifest_path(self) -> Path:
        return self.run_dir / "manifest.json"

    @property
    def metrics_path(self) -> Path:
        return self.run_dir / "metrics.json"

    @property
    def summary_path(self) -> Path:
        return self.run_dir / "summary.md"


def slugify(value: str) -> str:
    return _NON_SLUG_RE.sub("-", value.strip().lower()).strip("-") or "run"


def create_run_id(name: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"{now.strftime('%Y%m%d_%H%M%S')}_{slugify(name)}"


def prepare_run_dir(runs_root: str | Path, name: str) -> RunPaths:
    """Create a fresh run folder; same-second runs get a numeric suffix."""
    root = Path(runs_root)
    root.mkdir(parents=True, exist_ok=True)

    base_id = create_run_id(name)
    run_id = base_id
    attempt = 1
    while (root / run_id).exists():
        attempt += 1
        run_id = f"{base_id}_{attempt}"

    paths = RunPaths(run_id=run_id, run_dir=root / run_id)
    paths.input_dir.mkdir(parents=True)
    paths.artifacts_dir.mkdir(parents=True)
    return paths


def copy_input_artifact(source: str | Path, input_dir: Path) -> Path:
    source = Path(source)
    destination = input_dir / source.name
    if source.resolve() != destination.resolve():
        shutil.copy2(source, destination)
    return destination


def write_json(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def update_latest_pointer(runs_root: str | Path, run_dir: Path) -> None:
    """Point ``<runs_root>/latest`` at ``run_dir``.

    Uses a relative symlink; where symlinks are unavailable ``latest`` is a
    directory holding ``latest_run.txt`` with the run folder name.
    """
    latest = Path(runs_root) / "latest"
    if latest.is_symlink() or latest.is_file():
        latest.unlink()
    elif latest.is_dir():
        shutil.rmtree(latest)

    try:
        latest.symlink_to(os.path.relpath(run_dir, latest.parent))
    except OSError:
        latest.mkdir(parents=True, exist_ok=True)
        (latest / "latest_run.txt").write_text(run_dir.name, encoding="utf-8")
