"""
Axis-aligned rectangle helpers for tap target scoring.

Scalar helpers work on ``Rect`` values; ``pairwise_overlap_areas`` evaluates
whole rect grids with numpy, and ``all_contained_within`` falls back to a
Shapely union when no single rectangle encloses another.
"""
from typing import Sequence

import numpy as np
from shapely.geometry import LineString, Point, box
from shapely.ops import unary_union

from tap_targets.contracts import Rect, Vec2


def overlap_area(a: Rect, b: Rect) -> float:
    """Area of the intersection of ``a`` and ``b`` (0 when disjoint)."""
    overlap_x = max(0.0, min(a.right, b.right) - max(a.left, b.left))
    overlap_y = max(0.0, min(a.bottom, b.bottom) - max(a.top, b.top))
    return overlap_x * overlap_y


def rects_to_array(rects: Sequence[Rect]) -> np.ndarray:
    """(N, 4) array of ``[left, top, right, bottom]`` rows."""
    if not rects:
        return np.zeros((0, 4), dtype=float)
    return np.array([[r.left, r.top, r.right, r.bottom] for r in rects], dtype=float)


def pairwise_overlap_areas(rects_a: Sequence[Rect], rects_b: Sequence[Rect]) -> np.ndarray:
    """Overlap area for every (a, b) pair.

    Returns:
        (len(rects_a), len(rects_b)) array; entry [i, j] equals
        ``overlap_area(rects_a[i], rects_b[j])``.
    """
    a = rects_to_array(rects_a)[:, None, :]
    b = rects_to_array(rects_b)[None, :, :]
    overlap_x = np.minimum(a[..., 2], b[..., 2]) - np.maximum(a[..., 0], b[..., 0])
    overlap_y = np.minimum(a[..., 3], b[..., 3]) - np.maximum(a[..., 1], b[..., 1])
    return np.clip(overlap_x, 0.0, None) * np.clip(overlap_y, 0.0, None)


def centered_square(rect: Rect, side: float) -> Rect:
    """A ``side`` x ``side`` square sharing ``rect``'s center."""
    cx, cy = rect.center
    half = side / 2
    return Rect(left=cx - half, top=cy - half, width=side, height=side)


def rect_contains(outer: Rect, inner: Rect) -> bool:
    """True if ``inner`` lies within ``outer`` (shared edges count)."""
    return (
        outer.left <= inner.left
        and outer.top <= inner.top
        and inner.right <= outer.right
        and inner.bottom <= outer.bottom
    )


def rect_contains_point(rect: Rect, point: Vec2) -> bool:
    x, y = point
    return rect.left <= x <= rect.right and rect.top <= y <= rect.bottom


def rects_touch_or_overlap(a: Rect, b: Rect) -> bool:
    return (
        a.left <= b.right
        and b.left <= a.right
        and a.top <= b.bottom
        and b.top <= a.bottom
    )


def bounding_rect(rects: Sequence[Rect]) -> Rect:
    """Smallest rectangle enclosing every rect in ``rects``."""
    if not rects:
        raise ValueError("bounding_rect() needs at least one rect")
    return Rect.from_edges(
        min(r.left for r in rects),
        min(r.top for r in rects),
        max(r.right for r in rects),
        max(r.bottom for r in rects),
    )


def all_contained_within(rects_a: Sequence[Rect], rects_b: Sequence[Rect]) -> bool:
    """True if every rect in ``rects_a`` is enclosed by ``rects_b``.

    A rect counts as enclosed when a single rect of ``rects_b`` contains it,
    or when the union footprint of ``rects_b`` covers it (e.g. a badge that
    straddles two adjacent boxes of the same card). Vacuously true for an
    empty ``rects_a``.
    """
    footprint = None
    for rect in rects_a:
        if any(rect_contains(other, rect) for other in rects_b):
            continue
        if footprint is None:
            solid = [box(r.left, r.top, r.right, r.bottom) for r in rects_b if r.area > 0]
            if not solid:
                return False
            footprint = unary_union(solid)
        if not footprint.covers(_to_geometry(rect)):
            return False
    return True


def all_contained_within_each_other(
    rects_a: Sequence[Rect], rects_b: Sequence[Rect]
) -> bool:
    """True if one collection is enclosed by the other, in either direction."""
    return all_contained_within(rects_a, rects_b) or all_contained_within(rects_b, rects_a)


def largest_rect(rects: Sequence[Rect]) -> Rect:
    """Rect with the greatest area; the first one wins ties."""
    if not rects:
        raise ValueError("largest_rect() needs at least one rect")
    largest = rects[0]
    for rect in rects[1:]:
        if rect.area > largest.area:
            largest = rect
    return largest


# ─── Internal helpers ────────────────────────────────────────────────────────

def _to_geometry(rect: Rect):
    """Shapely geometry for ``rect``; degenerate rects become lines or points."""
    if rect.area > 0:
        return box(rect.left, rect.top, rect.right, rect.bottom)
    if rect.width == 0 and rect.height == 0:
        return Point(rect.left, rect.top)
    return LineString([(rect.left, rect.top), (rect.right, rect.bottom)])
