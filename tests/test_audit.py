"""Tests for the tap target audit entry point and report rows."""
import logging

import pytest

from conftest import make_target
from tap_targets import FINGER_SIZE_PX, TapTargetConfig, audit_tap_targets
from tap_targets.audit import (
    MISSING_VIEWPORT_EXPLANATION,
    TABLE_HEADINGS,
    format_display_value,
    get_table_items,
    summarize,
)
from tap_targets.contracts import OverlapFailure


def _failure(tap_target, overlapping_target, ratio):
    return OverlapFailure(
        tap_target=tap_target,
        overlapping_target=overlapping_target,
        tap_target_score=100.0,
        overlapping_target_score=100.0 * ratio,
        overlap_score_ratio=ratio,
    )


class TestScenarios:
    """End-to-end audit scenarios."""

    def test_finger_size_constant(self):
        assert FINGER_SIZE_PX == 48

    def test_no_overlap(self):
        targets = [make_target((0, 0, 60, 60)), make_target((500, 500, 60, 60))]
        result = audit_tap_targets(targets)
        assert result.passed
        assert result.items == []
        assert result.score == 1.0
        assert result.display_value == "100% appropriately sized tap targets"

    def test_clear_overlap(self, clear_overlap_targets):
        small, big = clear_overlap_targets
        result = audit_tap_targets([small, big])
        assert not result.passed
        assert len(result.items) == 1
        item = result.items[0]
        assert item.tap_target.selector == "a.small"
        assert item.overlapping_target.selector == "a.big"
        assert item.size == "20x20"
        assert item.overlap_score_ratio == pytest.approx(841 / 400)
        assert result.failing_tap_target_count == 1
        assert result.score == pytest.approx(0.5)
        assert result.display_value == "50% appropriately sized tap targets"

    def test_mutual_small_overlap_reports_one_row(self):
        a = make_target((0, 0, 20, 20), selector="a")
        b = make_target((20, 0, 20, 20), selector="b")
        result = audit_tap_targets([a, b])
        assert len(result.items) == 1
        assert result.items[0].tap_target.selector == "a"
        # Both targets failed before merging
        assert result.failing_tap_target_count == 2
        assert result.passing_tap_target_count == 0
        assert result.score == 0.0

    def test_nested_intentional(self):
        card = make_target((0, 0, 100, 100), selector="div.card")
        delete = make_target((60, 10, 30, 30), selector="button.delete")
        result = audit_tap_targets([card, delete])
        assert result.passed
        assert result.items == []
        assert result.score == 1.0

    def test_nested_small_targets_both_ways(self):
        """A too-small card holding a smaller button produces no rows."""
        card = make_target((0, 0, 40, 40), selector="div.card")
        delete = make_target((5, 5, 30, 30), selector="button.delete")
        result = audit_tap_targets([card, delete])
        assert result.passed
        assert result.items == []
        assert result.failing_tap_target_count == 0

    def test_same_destination(self):
        image = make_target((0, 0, 20, 20), href="https://example.com/p/1")
        caption = make_target((5, 5, 60, 60), href="https://example.com/p/1")
        assert audit_tap_targets([image, caption]).passed

    def test_empty_page(self):
        result = audit_tap_targets([])
        assert result.passed
        assert result.score == 1
        assert result.tap_target_count == 0
        assert result.items == []

    def test_missing_viewport(self, clear_overlap_targets):
        result = audit_tap_targets(list(clear_overlap_targets), viewport_configured=False)
        assert not result.passed
        assert result.score == 0.0
        assert result.items == []
        assert result.explanation == MISSING_VIEWPORT_EXPLANATION

    def test_missing_viewport_logs_warning(self, caplog, clear_overlap_targets):
        with caplog.at_level(logging.WARNING, logger="tap_targets.audit"):
            audit_tap_targets(list(clear_overlap_targets), viewport_configured=False)
        assert any(r.levelno == logging.WARNING for r in caplog.records)

    def test_invalid_config_rejected(self):
        with pytest.raises(ValueError):
            audit_tap_targets([], config=TapTargetConfig(finger_size_px=0))

    def test_headings(self):
        result = audit_tap_targets([])
        assert [h.key for h in result.headings] == ["tapTarget", "size", "overlappingTarget"]
        assert list(TABLE_HEADINGS) == result.headings

    @pytest.mark.parametrize("spacing", [0, 10, 20, 30, 45, 60])
    def test_score_bounds(self, spacing):
        targets = [make_target((i * spacing, 0, 20, 20)) for i in range(5)]
        result = audit_tap_targets(targets)
        assert 0.0 <= result.score <= 1.0
        assert (result.score == 1.0) == (len(result.items) == 0)

    def test_wrapped_link_merged(self):
        link = make_target((0, 0, 40, 20), (40, 0, 30, 20), selector="a.wrapped")
        neighbour = make_target((0, 24, 70, 20), selector="a.next")
        result = audit_tap_targets([link, neighbour])
        assert not result.passed
        assert result.items[0].tap_target.selector == "a.wrapped"


class TestTableItems:
    """Test report row construction and ranking."""

    def test_size_is_floored_largest_rect(self):
        target = make_target((0, 0, 5, 5), (10, 0, 20.9, 19.7))
        other = make_target((0, 0, 1, 1))
        items = get_table_items([_failure(target, other, 0.5)])
        assert items[0].size == "20x19"
        assert (items[0].width, items[0].height) == (20, 19)

    def test_sorted_by_ratio_stable(self):
        t = [make_target((0, 0, 10, 10), selector=f"t{i}") for i in range(4)]
        failures = [
            _failure(t[0], t[1], 0.5),
            _failure(t[1], t[2], 0.9),
            _failure(t[2], t[3], 0.5),
            _failure(t[3], t[0], 1.2),
        ]
        items = get_table_items(failures)
        assert [i.tap_target.selector for i in items] == ["t3", "t1", "t0", "t2"]

    def test_row_payload_keys(self):
        target = make_target((0, 0, 10, 10), selector="a")
        other = make_target((0, 0, 1, 1), selector="b")
        payload = get_table_items([_failure(target, other, 0.5)])[0].to_dict()
        assert payload["tapTarget"]["type"] == "node"
        assert payload["overlappingTarget"]["selector"] == "b"
        assert payload["size"] == "10x10"


class TestSummary:
    def test_failing_targets_counted_once(self):
        a, b, c = (make_target((0, 0, 10, 10)) for _ in range(3))
        failures = [_failure(a, b, 0.5), _failure(a, c, 0.5)]
        assert summarize([a, b, c], failures) == (3, 1, 2, pytest.approx(2 / 3))

    def test_empty(self):
        assert summarize([], []) == (0, 0, 0, 1.0)

    @pytest.mark.parametrize(
        "score,expected",
        [(1.0, "100%"), (0.875, "88%"), (2 / 3, "67%"), (0.0, "0%"), (0.125, "13%")],
    )
    def test_display_value_rounds_half_up(self, score, expected):
        assert format_display_value(score) == f"{expected} appropriately sized tap targets"
