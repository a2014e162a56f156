"""Public API for the tap target audit."""

from tap_targets.audit import audit_tap_targets
from tap_targets.contracts import (
    FINGER_SIZE_PX,
    MAX_ACCEPTABLE_OVERLAP_SCORE_RATIO,
    OverlapFailure,
    Rect,
    TapTarget,
    TapTargetAuditResult,
    TapTargetConfig,
)

__all__ = [
    "FINGER_SIZE_PX",
    "MAX_ACCEPTABLE_OVERLAP_SCORE_RATIO",
    "OverlapFailure",
    "Rect",
    "TapTarget",
    "TapTargetAuditResult",
    "TapTargetConfig",
    "audit_tap_targets",
]
