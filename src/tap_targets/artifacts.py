"""Read tap target artifacts and write audit reports."""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from tap_targets.contracts import TapTarget, TapTargetAuditResult, TapTargetConfig

logger = logging.getLogger(__name__)

SCHEMA_REPORT_V1 = "tap_targets.report.v1"


class ArtifactError(ValueError):
    """Raised when a tap target artifact document cannot be used."""


@dataclass
class TapTargetArtifacts:
    viewport_configured: bool
    tap_targets: List[TapTarget]
    source_sha256: str = ""


def canonical_json(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def sha256_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def parse_tap_target_artifacts(payload: Any) -> TapTargetArtifacts:
    """Build targets from a decoded artifact document.

    Expected shape::

        {"viewport": true,
         "tapTargets": [{"clientRects": [{"left": 0, "top": 0,
                                          "width": 10, "height": 10}],
                         "href": "", "snippet": "", "path": "",
                         "selector": ""}]}
    """
    if not isinstance(payload, dict):
        raise ArtifactError("Artifact document must be a JSON object")

    viewport = payload.get("viewport", payload.get("viewport_configured", True))
    if not isinstance(viewport, bool):
        raise ArtifactError(f"'viewport' must be a boolean, got: {viewport!r}")

    raw_targets = payload.get("tapTargets", payload.get("tap_targets"))
    if raw_targets is None:
        raise ArtifactError("Artifact document has no 'tapTargets' list")
    if not isinstance(raw_targets, list):
        raise ArtifactError("'tapTargets' must be a list")

    targets = []
    for index, raw in enumerate(raw_targets):
        if not isinstance(raw, dict):
            raise ArtifactError(f"Tap target {index} must be an object")
        try:
            targets.append(TapTarget.from_dict(raw))
        except (KeyError, TypeError, ValueError) as exc:
            raise ArtifactError(f"Tap target {index} is malformed: {exc}") from exc

    return TapTargetArtifacts(viewport_configured=viewport, tap_targets=targets)


def load_tap_target_artifacts(path: str | Path) -> TapTargetArtifacts:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ArtifactError(f"Cannot read {path}: {exc}") from exc
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ArtifactError(f"{path} is not valid JSON: {exc}") from exc

    artifacts = parse_tap_target_artifacts(payload)
    artifacts.source_sha256 = sha256_text(text)
    logger.info("Loaded %d tap targets from %s", len(artifacts.tap_targets), path)
    return artifacts


def result_to_payload(
    result: TapTargetAuditResult,
    config: Optional[TapTargetConfig] = None,
) -> Dict[str, Any]:
    if config is None:
        config = TapTargetConfig()
    return {
        "schema_version": SCHEMA_REPORT_V1,
        "passed": result.passed,
        "score": result.score,
        "display_value": result.display_value,
        "explanation": result.explanation,
        "counts": {
            "tap_targets": result.tap_target_count,
            "failing": result.failing_tap_target_count,
            "passing": result.passing_tap_target_count,
            "rows": len(result.items),
        },
        "details": {
            "type": "table",
            "headings": [heading.to_dict() for heading in result.headings],
            "items": [item.to_dict() for item in result.items],
        },
        "config": config.to_dict(),
    }


def write_report(path: Path, payload: Dict[str, Any]) -> str:
    """Write ``payload`` as JSON and return the sha256 of its canonical form."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    return sha256_text(canonical_json(payload))
