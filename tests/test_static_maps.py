"""Tests for Static Maps request building."""

import sys
from pathlib import Path
from urllib.parse import parse_qsl, urlsplit

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.errors import CredentialMissing, DegenerateViewport, InvalidMarkerLabel, LookupFailure
from src.location_store import LocationCache
from src.map_spec import MapSpec, PointOfInterest
from src.static_maps import GoogleStaticMaps, marker_label
from src.utils.geo_utils import Coordinate
from src.viewport import CanvasSize

LOCATIONS = LocationCache({
    "index.home.raft": Coordinate(51.50, -0.20),
    "filled.count.soap": Coordinate(51.53, -0.10),
    "daring.lion.race": Coordinate(51.51, -0.18),
    "stock.gates.bind": Coordinate(51.52, -0.12),
})


def make_map(points=None, map_id="m1"):
    if points is None:
        points = (
            PointOfInterest("cafe", "Cafe", "daring.lion.race"),
            PointOfInterest("park", "park gates", "stock.gates.bind"),
        )
    return MapSpec(map_id, "Walk", "index.home.raft", "filled.count.soap", tuple(points))


def test_missing_key():
    with pytest.raises(CredentialMissing):
        GoogleStaticMaps("")


class TestMarkerLabel:
    def test_first_character_uppercased(self):
        assert marker_label(PointOfInterest("p", "park", "a.b.c")) == "P"

    def test_digit(self):
        assert marker_label(PointOfInterest("p", "7 Dials", "a.b.c")) == "7"

    def test_empty_title(self):
        with pytest.raises(InvalidMarkerLabel) as exc_info:
            marker_label(PointOfInterest("p1", "", "a.b.c"), "m1")
        assert "m1:p1" in str(exc_info.value)

    def test_unsupported_character(self):
        with pytest.raises(InvalidMarkerLabel):
            marker_label(PointOfInterest("p1", "*Star", "a.b.c"))


class TestPrepare:
    def test_request_contents(self):
        request = GoogleStaticMaps("key").prepare(make_map(), LOCATIONS)

        assert request.map_id == "m1"
        assert request.visible == (Coordinate(51.50, -0.20), Coordinate(51.53, -0.10))
        assert [m.label for m in request.markers] == ["C", "P"]
        assert request.markers[0].coordinate == Coordinate(51.51, -0.18)

    def test_size_ignores_from_and_to(self):
        # points span 0.01 lat x 0.06 lon -> landscape ratio 6
        request = GoogleStaticMaps("key").prepare(make_map(), LOCATIONS)
        box_width = -0.12 - -0.18
        box_height = 51.52 - 51.51
        assert request.size == CanvasSize(2500, int(2500 / (box_width / box_height)))

    def test_single_point_is_degenerate(self):
        spec = make_map([PointOfInterest("p1", "Park", "filled.count.soap")])
        with pytest.raises(DegenerateViewport):
            GoogleStaticMaps("key").prepare(spec, LOCATIONS)

    def test_unresolved_geocode(self):
        spec = make_map([PointOfInterest("p1", "Park", "never.seen.before")])
        with pytest.raises(LookupFailure) as exc_info:
            GoogleStaticMaps("key").prepare(spec, LOCATIONS)
        assert "never.seen.before" in str(exc_info.value)


class TestUrl:
    def test_query_parameters(self):
        maps = GoogleStaticMaps("secret")
        url = maps.url(maps.prepare(make_map(), LOCATIONS))

        parts = urlsplit(url)
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://maps.googleapis.com/maps/api/staticmap"

        params = parse_qsl(parts.query)
        values = dict(params)
        assert values["scale"] == "2"
        assert values["format"] == "png"
        assert values["maptype"] == "satellite"
        assert values["key"] == "secret"
        assert values["visible"] == "51.500000,-0.200000|51.530000,-0.100000"
        assert [v for k, v in params if k == "markers"] == [
            "label:C|51.510000,-0.180000",
            "label:P|51.520000,-0.120000",
        ]

    def test_url_is_deterministic(self):
        maps = GoogleStaticMaps("secret")
        assert maps.url(maps.prepare(make_map(), LOCATIONS)) == maps.url(maps.prepare(make_map(), LOCATIONS))

    def test_key_changes_url(self):
        request = GoogleStaticMaps("a").prepare(make_map(), LOCATIONS)
        assert request.url("a") != request.url("b")
