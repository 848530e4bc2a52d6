"""Tests for viewport planning."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from config import MAX_MAP_EDGE_PX
from src.errors import DegenerateViewport, InsufficientPoints
from src.utils.geo_utils import BoundingBox, Coordinate, bounding_box
from src.viewport import CanvasSize, canvas_for_box, plan_viewport


def test_bounding_box_min_max():
    box = bounding_box([Coordinate(10.0, -5.0), Coordinate(12.0, 3.0), Coordinate(11.0, 0.0)])
    assert box == BoundingBox(min_lat=10.0, max_lat=12.0, min_lon=-5.0, max_lon=3.0)
    assert box.left == -5.0 and box.right == 3.0
    assert box.top == 10.0 and box.bottom == 12.0
    assert box.width == 8.0
    assert box.height == 2.0


def test_bounding_box_empty():
    with pytest.raises(ValueError):
        bounding_box([])


def test_landscape_pins_width():
    # 2 degrees wide, 1 tall
    box, size = plan_viewport([Coordinate(0.0, 0.0), Coordinate(1.0, 2.0)])
    assert size == CanvasSize(2500, 1250)
    assert box.width == 2.0


def test_portrait_pins_height():
    _, size = plan_viewport([Coordinate(0.0, 0.0), Coordinate(2.0, 1.0)])
    assert size == CanvasSize(1250, 2500)


def test_square_uses_max_edge_both_ways():
    _, size = plan_viewport([Coordinate(0.0, 0.0), Coordinate(1.0, 1.0)])
    assert size == CanvasSize(2500, 2500)


def test_short_edge_is_truncated():
    # ratio 3 -> 2500 / 3 = 833.33
    _, size = plan_viewport([Coordinate(0.0, 0.0), Coordinate(1.0, 3.0)])
    assert size == CanvasSize(2500, 833)


@pytest.mark.parametrize("lat_span,lon_span", [
    (0.01, 0.037), (0.5, 0.2), (3.0, 7.0), (0.0021, 0.0013), (1.0, 1.0001),
])
def test_aspect_ratio_preserved(lat_span, lon_span):
    _, size = plan_viewport([Coordinate(51.0, -0.5), Coordinate(51.0 + lat_span, -0.5 + lon_span)])
    ratio = ((-0.5 + lon_span) - (-0.5)) / ((51.0 + lat_span) - 51.0)
    assert max(size.width_px, size.height_px) == MAX_MAP_EDGE_PX
    assert 0 < size.width_px <= MAX_MAP_EDGE_PX
    assert 0 < size.height_px <= MAX_MAP_EDGE_PX
    if ratio > 1:
        assert size.height_px == int(MAX_MAP_EDGE_PX / ratio)
    else:
        assert size.width_px == int(MAX_MAP_EDGE_PX * ratio)


def test_zero_points():
    with pytest.raises(InsufficientPoints):
        plan_viewport([], name="m1")


def test_single_point_is_degenerate():
    with pytest.raises(DegenerateViewport) as exc_info:
        plan_viewport([Coordinate(51.5, -0.1)], name="m1")
    assert "m1" in str(exc_info.value)


def test_same_latitude_is_degenerate():
    with pytest.raises(DegenerateViewport):
        plan_viewport([Coordinate(51.5, -0.1), Coordinate(51.5, 0.3)])


def test_same_longitude_is_degenerate():
    with pytest.raises(DegenerateViewport):
        plan_viewport([Coordinate(51.5, -0.1), Coordinate(52.0, -0.1)])


@pytest.mark.parametrize("box", [
    BoundingBox(0.0, 1.0, 0.0, float("nan")),
    BoundingBox(0.0, float("nan"), 0.0, 1.0),
    BoundingBox(0.0, 1.0, 0.0, float("inf")),
])
def test_non_finite_box_is_degenerate(box):
    with pytest.raises(DegenerateViewport):
        canvas_for_box(box, name="m1")


def test_custom_max_edge():
    size = canvas_for_box(BoundingBox(0.0, 1.0, 0.0, 2.0), max_edge=640)
    assert size == CanvasSize(640, 320)
    assert size.as_param() == "640x320"
