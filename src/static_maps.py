"""
Describe a map as a Google Static Maps request.

The request shows the map's ``from``/``to`` points as visible bounds,
one labelled marker per point of interest, satellite imagery, and a canvas
sized by the viewport planner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple

import requests

from config import MAP_FORMAT, MAP_SCALE, MAP_TYPE, STATIC_MAPS_URL
from src.errors import CredentialMissing, InvalidMarkerLabel, LookupFailure
from src.location_store import LocationCache
from src.map_spec import MapSpec, PointOfInterest
from src.utils.geo_utils import Coordinate
from src.viewport import CanvasSize, plan_viewport

logger = logging.getLogger(__name__)

# Marker labels must be a single uppercase character from {A-Z, 0-9}.
VALID_LABELS = set("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")


@dataclass(frozen=True)
class Marker:
    coordinate: Coordinate
    label: str

    def as_param(self) -> str:
        return f"label:{self.label}|{self.coordinate.as_param()}"


@dataclass(frozen=True)
class StaticMapRequest:
    """Everything the provider needs to render one map, minus the key."""
    map_id: str
    size: CanvasSize
    visible: Tuple[Coordinate, ...]
    markers: Tuple[Marker, ...]
    scale: int = MAP_SCALE
    image_format: str = MAP_FORMAT
    maptype: str = MAP_TYPE

    def params(self, api_key: str) -> List[Tuple[str, str]]:
        params = [
            ("size", self.size.as_param()),
            ("scale", str(self.scale)),
            ("format", self.image_format),
            ("maptype", self.maptype),
        ]
        if self.visible:
            params.append(("visible", "|".join(c.as_param() for c in self.visible)))
        params.extend(("markers", m.as_param()) for m in self.markers)
        params.append(("key", api_key))
        return params

    def url(self, api_key: str, base_url: str = STATIC_MAPS_URL) -> str:
        """Return the fully encoded request URL."""
        return requests.Request("GET", base_url, params=self.params(api_key)).prepare().url


def marker_label(point: PointOfInterest, map_id: str = "") -> str:
    """
    Derive a marker label from the first character of a point's title.

    Raises:
        InvalidMarkerLabel: If the title is empty or starts with a character
            the provider can't show as a label.
    """
    where = f"{map_id}:{point.id}" if map_id else point.id
    if not point.title:
        raise InvalidMarkerLabel("derive marker label", where, "title is empty")
    label = point.title[0].upper()
    if label not in VALID_LABELS:
        raise InvalidMarkerLabel("derive marker label", where, f"'{point.title[0]}' is not A-Z or 0-9")
    return label


def _lookup(locations: LocationCache, geocode: str, where: str) -> Coordinate:
    coord = locations.get(geocode)
    if coord is None:
        raise LookupFailure("get location from cache", where, f"'{geocode}' was never resolved")
    return coord


class GoogleStaticMaps:
    """Builds Static Maps requests and URLs for map specs."""

    def __init__(self, api_key: str, base_url: str = STATIC_MAPS_URL):
        """
        Raises:
            CredentialMissing: If ``api_key`` is empty.
        """
        if not api_key:
            raise CredentialMissing(
                "initialize Google Static Maps client", "GOOGLE_MAPS_API_KEY", "add it to .env file"
            )
        self.api_key = api_key
        self.base_url = base_url

    def prepare(self, spec: MapSpec, locations: LocationCache) -> StaticMapRequest:
        """
        Build the request for a map from already-resolved locations.

        Only the points of interest size the canvas; ``from``/``to`` are
        passed as visible bounds and the provider keeps them in frame.

        Raises:
            LookupFailure: If a referenced geocode isn't in ``locations``.
            InvalidMarkerLabel: If a point's title can't be used as a label.
            InsufficientPoints: If the map has no points of interest.
            DegenerateViewport: If the points have no latitude span.
        """
        visible = (
            _lookup(locations, spec.from_point, f"{spec.id}:from"),
            _lookup(locations, spec.to_point, f"{spec.id}:to"),
        )

        markers = []
        coords = []
        for point in spec.points:
            coord = _lookup(locations, point.geocode, f"{spec.id}:{point.id}")
            coords.append(coord)
            markers.append(Marker(coordinate=coord, label=marker_label(point, spec.id)))

        _, size = plan_viewport(coords, name=spec.id)

        return StaticMapRequest(
            map_id=spec.id,
            size=size,
            visible=visible,
            markers=tuple(markers),
        )

    def url(self, request: StaticMapRequest) -> str:
        return request.url(self.api_key, base_url=self.base_url)
