"""
Tap target audit: checks that links, buttons, etc. are large enough and
don't overlap.

Runs the overlap pipeline over the page's tap targets and turns the surviving
failures into ranked report rows plus a pass/fail verdict and score.
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

from tap_targets.contracts import (
    NodeDetails,
    OverlapFailure,
    TableHeading,
    TapTarget,
    TapTargetAuditResult,
    TapTargetConfig,
    TapTargetTableItem,
)
from tap_targets.overlap import (
    filter_too_small,
    get_all_failures,
    merge_symmetric_failures,
)
from tap_targets.rect_geometry import largest_rect

logger = logging.getLogger(__name__)

AUDIT_ID = "tap-targets"
TITLE = "Tap targets are sized appropriately"
FAILURE_TITLE = "Tap targets are not sized appropriately"
DESCRIPTION = (
    "Interactive elements like buttons and links should be large enough "
    "(48x48px), and have enough space around them, to be easy enough to tap "
    "without overlapping onto other elements."
)
MISSING_VIEWPORT_EXPLANATION = "Tap targets are too small because of a missing viewport config"

TABLE_HEADINGS: Tuple[TableHeading, ...] = (
    TableHeading(key="tapTarget", item_type="node", text="Tap Target"),
    TableHeading(key="size", item_type="text", text="Size"),
    TableHeading(key="overlappingTarget", item_type="node", text="Overlapping Target"),
)


def target_to_node(target: TapTarget) -> NodeDetails:
    return NodeDetails(snippet=target.snippet, path=target.path, selector=target.selector)


def get_table_items(failures: Sequence[OverlapFailure]) -> List[TapTargetTableItem]:
    """Report rows for ``failures``, most severe first.

    The sort is stable, so rows with equal ratios keep their relative order.
    """
    items = []
    for failure in failures:
        largest = largest_rect(failure.tap_target.client_rects)
        width = math.floor(largest.width)
        height = math.floor(largest.height)
        items.append(
            TapTargetTableItem(
                tap_target=target_to_node(failure.tap_target),
                overlapping_target=target_to_node(failure.overlapping_target),
                size=f"{width}x{height}",
                width=width,
                height=height,
                tap_target_score=failure.tap_target_score,
                overlapping_target_score=failure.overlapping_target_score,
                overlap_score_ratio=failure.overlap_score_ratio,
            )
        )
    return sorted(items, key=lambda item: item.overlap_score_ratio, reverse=True)


def summarize(
    targets: Sequence[TapTarget],
    overlap_failures: Sequence[OverlapFailure],
) -> Tuple[int, int, int, float]:
    """Count passing and failing targets.

    ``overlap_failures`` must be the directional list from before symmetric
    merging: a target fails if it is the intended target of any failure.

    Returns:
        (tap_target_count, failing_count, passing_count, score)
    """
    tap_target_count = len(targets)
    failing_count = len({failure.tap_target for failure in overlap_failures})
    passing_count = tap_target_count - failing_count
    score = passing_count / tap_target_count if tap_target_count > 0 else 1.0
    return tap_target_count, failing_count, passing_count, score


def format_display_value(score: float) -> str:
    # Round half up
    percent = math.floor(score * 100 + 0.5)
    return f"{percent}% appropriately sized tap targets"


def audit_tap_targets(
    targets: Sequence[TapTarget],
    viewport_configured: bool = True,
    config: Optional[TapTargetConfig] = None,
) -> TapTargetAuditResult:
    """Run the tap target audit.

    Args:
        targets: Tap targets of the page, in document order.
        viewport_configured: Whether the page sets a mobile viewport. Without
            one every target renders too small and the audit fails outright.
        config: Audit thresholds.

    Returns:
        TapTargetAuditResult; ``passed`` is True when no overlap failure
        survives merging, independent of the score.
    """
    if config is None:
        config = TapTargetConfig()
    config.validate()

    if not viewport_configured:
        logger.warning("No viewport config, skipping tap target analysis")
        return TapTargetAuditResult(
            passed=False,
            score=0.0,
            display_value="",
            headings=list(TABLE_HEADINGS),
            items=[],
            tap_target_count=len(targets),
            explanation=MISSING_VIEWPORT_EXPLANATION,
        )

    too_small_targets = filter_too_small(targets, config)
    overlap_failures = get_all_failures(too_small_targets, targets, config)
    unique_failures = merge_symmetric_failures(overlap_failures)
    items = get_table_items(unique_failures)

    tap_target_count, failing_count, passing_count, score = summarize(targets, overlap_failures)
    result = TapTargetAuditResult(
        passed=len(items) == 0,
        score=score,
        display_value=format_display_value(score),
        headings=list(TABLE_HEADINGS),
        items=items,
        tap_target_count=tap_target_count,
        failing_tap_target_count=failing_count,
        passing_tap_target_count=passing_count,
        debug={
            "too_small_count": len(too_small_targets),
            "overlap_failure_count": len(overlap_failures),
            "merged_failure_count": len(unique_failures),
        },
    )

    logger.info(
        "Tap targets: %d total, %d too small, %d failing, score=%.2f",
        tap_target_count, len(too_small_targets), failing_count, score,
    )
    return result
