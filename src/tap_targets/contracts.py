"""Contracts for the tap target audit: rectangles, targets, failures, report rows."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

FINGER_SIZE_PX = 48
# Ratio of the finger area landing on an unintended target to the finger area
# landing on the intended one.
MAX_ACCEPTABLE_OVERLAP_SCORE_RATIO = 0.25

Vec2 = Tuple[float, float]


@dataclass(frozen=True)
class TapTargetConfig:
    """Thresholds for the tap target audit."""

    finger_size_px: float = FINGER_SIZE_PX
    max_acceptable_overlap_score_ratio: float = MAX_ACCEPTABLE_OVERLAP_SCORE_RATIO
    link_schemes: Tuple[str, ...] = ("http", "https")
    # Wrapped inline links: fuse aligned, touching client rects into one box
    merge_touching_rects: bool = True
    merge_alignment_tolerance_px: float = 2.0

    def validate(self) -> None:
        if self.finger_size_px <= 0:
            raise ValueError(
                f"finger_size_px must be > 0, got: {self.finger_size_px}"
            )
        if self.max_acceptable_overlap_score_ratio <= 0:
            raise ValueError(
                "max_acceptable_overlap_score_ratio must be > 0, got: "
                f"{self.max_acceptable_overlap_score_ratio}"
            )
        if not self.link_schemes:
            raise ValueError("link_schemes must name at least one scheme")
        if self.merge_alignment_tolerance_px < 0:
            raise ValueError(
                "merge_alignment_tolerance_px must be >= 0, got: "
                f"{self.merge_alignment_tolerance_px}"
            )

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["link_schemes"] = list(self.link_schemes)
        return payload


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in CSS pixels."""

    left: float
    top: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Rect size must be non-negative, got {self.width}x{self.height}"
            )

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Vec2:
        return (self.left + self.width / 2, self.top + self.height / 2)

    @classmethod
    def from_edges(cls, left: float, top: float, right: float, bottom: float) -> "Rect":
        return cls(left=left, top=top, width=right - left, height=bottom - top)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Rect":
        """Build from a client rect payload.

        Accepts either ``width``/``height`` or ``right``/``bottom`` next to
        ``left``/``top``; when both are present the explicit size wins.
        """
        left = float(payload["left"])
        top = float(payload["top"])
        if "width" in payload and "height" in payload:
            return cls(left, top, float(payload["width"]), float(payload["height"]))
        return cls.from_edges(left, top, float(payload["right"]), float(payload["bottom"]))

    def to_dict(self) -> Dict[str, float]:
        return {
            "left": self.left,
            "top": self.top,
            "width": self.width,
            "height": self.height,
            "right": self.right,
            "bottom": self.bottom,
        }


@dataclass(frozen=True, eq=False)
class TapTarget:
    """An interactive element and the boxes it occupies on the page.

    Equality and hashing are by identity: two targets with the same geometry
    and metadata are still different elements.
    """

    client_rects: Tuple[Rect, ...]
    href: str = ""
    snippet: str = ""
    path: str = ""
    selector: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TapTarget":
        raw_rects = payload.get("clientRects", payload.get("client_rects", []))
        href = payload.get("href")
        return cls(
            client_rects=tuple(Rect.from_dict(cr) for cr in raw_rects),
            href=href if isinstance(href, str) else "",
            snippet=str(payload.get("snippet", "") or ""),
            path=str(payload.get("path", "") or ""),
            selector=str(payload.get("selector", "") or ""),
        )


@dataclass(frozen=True)
class ClientRectOverlap:
    """Scores for a simulated tap on one client rect against another."""

    overlap_score_ratio: float
    tap_target_score: float
    overlapping_target_score: float


@dataclass(frozen=True)
class OverlapFailure:
    """A too-small target whose finger footprint lands on another target.

    Directional: ``tap_target`` is the one the user meant to tap.
    """

    tap_target: TapTarget
    overlapping_target: TapTarget
    tap_target_score: float
    overlapping_target_score: float
    overlap_score_ratio: float


@dataclass(frozen=True)
class NodeDetails:
    snippet: str
    path: str
    selector: str
    type: str = "node"

    def to_dict(self) -> Dict[str, str]:
        return {
            "type": self.type,
            "snippet": self.snippet,
            "path": self.path,
            "selector": self.selector,
        }


@dataclass(frozen=True)
class TapTargetTableItem:
    """One report row."""

    tap_target: NodeDetails
    overlapping_target: NodeDetails
    size: str
    width: int
    height: int
    tap_target_score: float
    overlapping_target_score: float
    overlap_score_ratio: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tapTarget": self.tap_target.to_dict(),
            "overlappingTarget": self.overlapping_target.to_dict(),
            "size": self.size,
            "width": self.width,
            "height": self.height,
            "tapTargetScore": self.tap_target_score,
            "overlappingTargetScore": self.overlapping_target_score,
            "overlapScoreRatio": self.overlap_score_ratio,
        }


@dataclass(frozen=True)
class TableHeading:
    key: str
    item_type: str
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.key, "itemType": self.item_type, "text": self.text}


@dataclass
class TapTargetAuditResult:
    """In-memory result of one audit run."""

    passed: bool
    score: float
    display_value: str
    headings: List[TableHeading]
    items: List[TapTargetTableItem]
    tap_target_count: int = 0
    failing_tap_target_count: int = 0
    passing_tap_target_count: int = 0
    explanation: Optional[str] = None
    debug: Dict[str, object] = field(default_factory=dict)


def to_rects(values: Sequence[Sequence[float]]) -> Tuple[Rect, ...]:
    """Build rects from ``(left, top, width, height)`` tuples."""
    return tuple(Rect(*(float(v) for v in value)) for value in values)
