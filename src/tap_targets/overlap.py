"""
Overlap scoring for tap targets.

A target is too small when none of its client rects fits a finger. For each
too-small target a tap is simulated at the center of every tappable rect with
a finger-sized square; if too much of that square lands on another target,
the pair fails. Symmetric failures (A over B and B over A) are merged so each
physical overlap is reported once.
"""

import logging
from typing import List, Optional, Sequence
from urllib.parse import urlsplit

import numpy as np

from tap_targets.contracts import (
    ClientRectOverlap,
    OverlapFailure,
    Rect,
    TapTarget,
    TapTargetConfig,
)
from tap_targets.rect_geometry import (
    all_contained_within_each_other,
    centered_square,
    overlap_area,
    pairwise_overlap_areas,
)
from tap_targets.tappable_rects import get_tappable_rects

logger = logging.getLogger(__name__)


# ─── Size filter ─────────────────────────────────────────────────────────────


def meets_minimum_size(rect: Rect, config: Optional[TapTargetConfig] = None) -> bool:
    if config is None:
        config = TapTargetConfig()
    return rect.width >= config.finger_size_px and rect.height >= config.finger_size_px


def is_too_small(target: TapTarget, config: Optional[TapTargetConfig] = None) -> bool:
    """A target is too small if none of its client rects is finger-sized."""
    return not any(meets_minimum_size(cr, config) for cr in target.client_rects)


def filter_too_small(
    targets: Sequence[TapTarget],
    config: Optional[TapTargetConfig] = None,
) -> List[TapTarget]:
    return [target for target in targets if is_too_small(target, config)]


# ─── Pair scoring ────────────────────────────────────────────────────────────


def is_link_href(href: Optional[str], config: Optional[TapTargetConfig] = None) -> bool:
    """True for an absolute URL whose scheme is one of ``config.link_schemes``."""
    if config is None:
        config = TapTargetConfig()
    if not href or not isinstance(href, str):
        return False
    try:
        parts = urlsplit(href.strip())
    except ValueError:
        return False
    return parts.scheme.lower() in config.link_schemes and bool(parts.netloc)


def share_link_destination(
    a: TapTarget,
    b: TapTarget,
    config: Optional[TapTargetConfig] = None,
) -> bool:
    return is_link_href(a.href, config) and is_link_href(b.href, config) and a.href == b.href


def get_failure_for_rect_pair(
    tap_rect: Rect,
    other_rect: Rect,
    config: Optional[TapTargetConfig] = None,
) -> Optional[ClientRectOverlap]:
    """Simulate a tap at the center of ``tap_rect`` and score ``other_rect``.

    Returns:
        The scores when the overlap ratio reaches the failure threshold,
        otherwise None. A degenerate ``tap_rect`` cannot be tapped and never
        fails.
    """
    if config is None:
        config = TapTargetConfig()

    finger_rect = centered_square(tap_rect, config.finger_size_px)
    tap_target_score = overlap_area(finger_rect, tap_rect)
    if tap_target_score == 0:
        return None
    overlapping_score = overlap_area(finger_rect, other_rect)

    ratio = overlapping_score / tap_target_score
    if ratio < config.max_acceptable_overlap_score_ratio:
        return None
    return ClientRectOverlap(
        overlap_score_ratio=ratio,
        tap_target_score=tap_target_score,
        overlapping_target_score=overlapping_score,
    )


def get_failure_for_target_pair(
    tap_target: TapTarget,
    other: TapTarget,
    config: Optional[TapTargetConfig] = None,
) -> Optional[OverlapFailure]:
    """Worst overlap failure of ``tap_target`` against ``other``, if any.

    Args:
        tap_target: The too-small target the user means to tap.
        other: Any other target on the page.
        config: Audit thresholds.

    Returns:
        The failure with the highest overlap ratio across all rect pairs
        (first in iteration order on ties), or None.
    """
    if config is None:
        config = TapTargetConfig()

    if share_link_destination(tap_target, other, config):
        logger.debug("Skipping pair with shared destination %s", tap_target.href)
        return None

    tappable_rects = get_tappable_rects(tap_target.client_rects, config)
    if all_contained_within_each_other(tappable_rects, other.client_rects):
        # Nested on purpose, e.g. a delete button inside a list item
        logger.debug("Skipping nested pair %r, %r", tap_target.selector, other.selector)
        return None
    if not tappable_rects or not other.client_rects:
        return None

    finger_rects = [centered_square(tr, config.finger_size_px) for tr in tappable_rects]
    tap_scores = np.diagonal(pairwise_overlap_areas(finger_rects, tappable_rects))
    overlapping_scores = pairwise_overlap_areas(finger_rects, other.client_rects)

    tappable = tap_scores > 0
    ratios = np.divide(
        overlapping_scores,
        tap_scores[:, None],
        out=np.zeros_like(overlapping_scores),
        where=tappable[:, None],
    )
    failing = tappable[:, None] & (ratios >= config.max_acceptable_overlap_score_ratio)
    if not failing.any():
        return None

    # argmax picks the first maximum in row-major (tap rect, other rect) order
    worst = np.unravel_index(np.argmax(np.where(failing, ratios, -np.inf)), ratios.shape)
    return OverlapFailure(
        tap_target=tap_target,
        overlapping_target=other,
        tap_target_score=float(tap_scores[worst[0]]),
        overlapping_target_score=float(overlapping_scores[worst]),
        overlap_score_ratio=float(ratios[worst]),
    )


# ─── Aggregation ─────────────────────────────────────────────────────────────


def get_all_failures_for_target(
    tap_target: TapTarget,
    all_targets: Sequence[TapTarget],
    config: Optional[TapTargetConfig] = None,
) -> List[OverlapFailure]:
    failures = (
        get_failure_for_target_pair(tap_target, other, config)
        for other in all_targets
        if other is not tap_target
    )
    return [failure for failure in failures if failure is not None]


def get_all_failures(
    too_small_targets: Sequence[TapTarget],
    all_targets: Sequence[TapTarget],
    config: Optional[TapTargetConfig] = None,
) -> List[OverlapFailure]:
    """Directional failures for every too-small target, in input order."""
    failures: List[OverlapFailure] = []
    for target in too_small_targets:
        failures.extend(get_all_failures_for_target(target, all_targets, config))
    logger.debug(
        "%d overlap failures across %d too-small targets",
        len(failures), len(too_small_targets),
    )
    return failures


def merge_symmetric_failures(failures: Sequence[OverlapFailure]) -> List[OverlapFailure]:
    """Report only one failure when two targets overlap each other.

    The failure with the higher ratio wins; on equal ratios the one listed
    first wins.
    """
    merged: List[OverlapFailure] = []
    for index, failure in enumerate(failures):
        symmetric_index = _find_symmetric_index(failures, failure)
        if symmetric_index is None:
            merged.append(failure)
            continue

        symmetric = failures[symmetric_index]
        if failure.overlap_score_ratio > symmetric.overlap_score_ratio or (
            failure.overlap_score_ratio == symmetric.overlap_score_ratio
            and index < symmetric_index
        ):
            merged.append(failure)
    return merged


def _find_symmetric_index(
    failures: Sequence[OverlapFailure],
    failure: OverlapFailure,
) -> Optional[int]:
    for index, candidate in enumerate(failures):
        if (
            candidate.tap_target is failure.overlapping_target
            and candidate.overlapping_target is failure.tap_target
        ):
            return index
    return None
