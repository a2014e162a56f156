"""
Reduce a target's client rects to the regions a user can actually tap.

Inline elements report one client rect per line box, and those boxes can
overlap or nest. Scoring every raw rect would count the same physical area
twice, so the rects are reduced first.
"""
import logging
from typing import List, Optional, Sequence

from tap_targets.contracts import Rect, TapTargetConfig
from tap_targets.rect_geometry import (
    bounding_rect,
    rect_contains,
    rect_contains_point,
    rects_touch_or_overlap,
)

logger = logging.getLogger(__name__)


def get_tappable_rects(
    client_rects: Sequence[Rect],
    config: Optional[TapTargetConfig] = None,
) -> List[Rect]:
    """Collapse ``client_rects`` into the distinct tappable regions.

    Args:
        client_rects: Raw client rects of one target, in document order.
        config: Audit thresholds; ``merge_touching_rects`` controls fusing
            of aligned line boxes.

    Returns:
        Rects such that none is contained in another. Survivors keep their
        input order; merged boxes are appended after them.
    """
    if config is None:
        config = TapTargetConfig()

    rects = [cr for cr in client_rects if cr.area > 0]
    rects = filter_out_rects_contained_by_others(rects)
    if config.merge_touching_rects:
        merged = merge_touching_rects(rects, config.merge_alignment_tolerance_px)
        if len(merged) != len(rects):
            logger.debug("Merged %d client rects into %d", len(rects), len(merged))
            rects = filter_out_rects_contained_by_others(merged)
    return rects


def filter_out_rects_contained_by_others(rects: Sequence[Rect]) -> List[Rect]:
    """Drop rects wholly inside another kept rect.

    Of several identical rects only the first is kept.
    """
    kept = list(range(len(rects)))
    for i in range(len(rects)):
        for j in kept:
            if i == j:
                continue
            if j > i and rects[j] == rects[i]:
                continue
            if rect_contains(rects[j], rects[i]):
                kept.remove(i)
                break
    return [rects[i] for i in kept]


def merge_touching_rects(rects: Sequence[Rect], tolerance_px: float = 2.0) -> List[Rect]:
    """Fuse touching rects that line up on a shared edge.

    A pair is merged into its bounding box only if the box's center still
    falls inside one of the pair, so an L-shaped wrap is left alone.
    Repeats until no pair can be merged.
    """
    current = list(rects)
    while True:
        pair = _find_mergeable_pair(current, tolerance_px)
        if pair is None:
            return current
        i, j = pair
        replacement = bounding_rect([current[i], current[j]])
        current = [r for k, r in enumerate(current) if k not in (i, j)]
        current.append(replacement)


# ─── Internal helpers ────────────────────────────────────────────────────────

def _almost_equal(a: float, b: float, tolerance_px: float) -> bool:
    return abs(a - b) <= tolerance_px


def _find_mergeable_pair(rects: Sequence[Rect], tolerance_px: float):
    for i, a in enumerate(rects):
        for j, b in enumerate(rects):
            if i == j:
                continue
            lines_up_horizontally = _almost_equal(a.top, b.top, tolerance_px) or _almost_equal(
                a.bottom, b.bottom, tolerance_px
            )
            lines_up_vertically = _almost_equal(a.left, b.left, tolerance_px) or _almost_equal(
                a.right, b.right, tolerance_px
            )
            if not rects_touch_or_overlap(a, b):
                continue
            if not (lines_up_horizontally or lines_up_vertically):
                continue
            center = bounding_rect([a, b]).center
            if rect_contains_point(a, center) or rect_contains_point(b, center):
                return i, j
    return None
