"""
Shared test fixtures for the tap target audit tests.
"""
import json
import sys
from pathlib import Path

import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tap_targets.contracts import TapTarget, to_rects


def make_target(*rects, href="", selector=""):
    """TapTarget from ``(left, top, width, height)`` tuples."""
    return TapTarget(
        client_rects=to_rects(rects),
        href=href,
        snippet=f"<a>{selector}</a>" if selector else "",
        path=f"1,HTML,1,BODY,{selector}" if selector else "",
        selector=selector,
    )


@pytest.fixture
def clear_overlap_targets():
    """A 20x20 target with a 60x60 target covering its finger footprint."""
    small = make_target((0, 0, 20, 20), selector="a.small")
    big = make_target((5, 5, 60, 60), selector="a.big")
    return small, big


@pytest.fixture
def artifacts_payload():
    """Tap target artifacts with one overlapping pair and one clean target."""
    return {
        "viewport": True,
        "tapTargets": [
            {
                "clientRects": [{"left": 0, "top": 0, "width": 20, "height": 20}],
                "href": "https://example.com/small",
                "snippet": "<a class=\"small\">",
                "path": "1,HTML,1,BODY,0,A",
                "selector": "a.small",
            },
            {
                "clientRects": [
                    {"left": 5, "top": 5, "right": 65, "bottom": 65,
                     "width": 60, "height": 60}
                ],
                "href": "https://example.com/big",
                "snippet": "<a class=\"big\">",
                "path": "1,HTML,1,BODY,1,A",
                "selector": "a.big",
            },
            {
                "clientRects": [{"left": 500, "top": 500, "width": 60, "height": 60}],
                "snippet": "<button>",
                "path": "1,HTML,1,BODY,2,BUTTON",
                "selector": "button",
            },
        ],
    }


@pytest.fixture
def artifacts_file(tmp_path, artifacts_payload):
    path = tmp_path / "tap_targets.json"
    path.write_text(json.dumps(artifacts_payload), encoding="utf-8")
    return path
