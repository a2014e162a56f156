#!/usr/bin/env python3
"""Audit a page's tap targets for size and overlap (tap target artifacts -> report)."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tap_targets import FINGER_SIZE_PX, MAX_ACCEPTABLE_OVERLAP_SCORE_RATIO
from tap_targets import TapTargetConfig, audit_tap_targets
from tap_targets.artifacts import (
    ArtifactError,
    load_tap_target_artifacts,
    result_to_payload,
    write_report,
)
from tap_targets.run_protocol import (
    copy_input_artifact,
    prepare_run_dir,
    update_latest_pointer,
    write_json,
    write_text,
)

logger = logging.getLogger("check_tap_targets")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check that tap targets are large enough and don't overlap"
    )
    parser.add_argument(
        "--input",
        required=True,
        help="Path to tap target artifacts JSON ({viewport, tapTargets})",
    )
    parser.add_argument("--name", default="tap_targets", help="Run name")
    parser.add_argument("--runs-dir", default="runs", help="Runs output root")
    parser.add_argument(
        "--finger-size-px",
        type=float,
        default=FINGER_SIZE_PX,
        help="Side of the simulated finger square in CSS px",
    )
    parser.add_argument(
        "--max-overlap-ratio",
        type=float,
        default=MAX_ACCEPTABLE_OVERLAP_SCORE_RATIO,
        help="Largest acceptable share of the finger landing on another target",
    )
    parser.add_argument(
        "--no-merge-touching-rects",
        action="store_true",
        help="Score each client rect of a wrapped link separately",
    )
    parser.add_argument(
        "--no-viewport",
        action="store_true",
        help="Treat the page as having no viewport config",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logs"
    )
    return parser


def _build_summary(
    *,
    run_id: str,
    elapsed_s: float,
    passed: bool,
    display_value: str,
    tap_target_count: int,
    failing_count: int,
    row_count: int,
    explanation: str | None,
) -> str:
    lines = [
        f"# Run {run_id}",
        "",
        f"- Status: **{'PASS' if passed else 'FAIL'}**",
        f"- Duration: {elapsed_s:.2f}s",
        f"- Tap targets: {tap_target_count}",
        f"- Failing targets: {failing_count}",
        f"- Overlap rows: {row_count}",
    ]
    if display_value:
        lines.append(f"- Score: {display_value}")
    if explanation:
        lines.append(f"- Explanation: {explanation}")
    lines.append("")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = TapTargetConfig(
        finger_size_px=float(args.finger_size_px),
        max_acceptable_overlap_score_ratio=float(args.max_overlap_ratio),
        merge_touching_rects=not args.no_merge_touching_rects,
    )
    try:
        config.validate()
        artifacts = load_tap_target_artifacts(args.input)
    except ArtifactError as exc:
        logger.error("Unusable input: %s", exc)
        return 2
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    started = time.perf_counter()
    run_paths = prepare_run_dir(args.runs_dir, args.name)
    copied_input = copy_input_artifact(args.input, run_paths.input_dir)

    result = audit_tap_targets(
        artifacts.tap_targets,
        viewport_configured=artifacts.viewport_configured and not args.no_viewport,
        config=config,
    )
    elapsed = time.perf_counter() - started

    report_path = run_paths.report_path
    report_sha = write_report(report_path, result_to_payload(result, config))

    write_json(
        run_paths.metrics_path,
        {
            "run_id": run_paths.run_id,
            "passed": result.passed,
            "score": result.score,
            "elapsed_s": round(elapsed, 3),
            "counts": {
                "tap_targets": result.tap_target_count,
                "failing": result.failing_tap_target_count,
                "passing": result.passing_tap_target_count,
                "rows": len(result.items),
            },
            "debug": result.debug,
        },
    )
    write_text(
        run_paths.summary_path,
        _build_summary(
            run_id=run_paths.run_id,
            elapsed_s=elapsed,
            passed=result.passed,
            display_value=result.display_value,
            tap_target_count=result.tap_target_count,
            failing_count=result.failing_tap_target_count,
            row_count=len(result.items),
            explanation=result.explanation,
        ),
    )
    write_json(
        run_paths.manifest_path,
        {
            "run_id": run_paths.run_id,
            "name": args.name,
            "created_utc": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "input": str(copied_input),
            "input_sha256": artifacts.source_sha256,
            "config": config.to_dict(),
            "artifacts": {
                "report": str(report_path),
                "report_sha256": report_sha,
                "metrics": str(run_paths.metrics_path),
                "summary": str(run_paths.summary_path),
            },
        },
    )
    update_latest_pointer(args.runs_dir, run_paths.run_dir)

    print(f"Run ID: {run_paths.run_id}")
    print(f"Run dir: {run_paths.run_dir}")
    print(f"Status: {'PASS' if result.passed else 'FAIL'}")
    print(f"Score: {result.display_value or 'n/a'}")
    if result.explanation:
        print(f"Explanation: {result.explanation}")
    for item in result.items:
        print(
            f"  {item.tap_target.selector or item.tap_target.snippet} ({item.size}) "
            f"overlaps {item.overlapping_target.selector or item.overlapping_target.snippet} "
            f"ratio={item.overlap_score_ratio:.2f}"
        )
    print(f"Report: {report_path}")
    return 0 if result.passed else 1


if __name__ == "__main__":
    raise SystemExit(main())
