"""
Geographic value types.

Coordinates and bounding boxes shared by the resolver, planner and
static map request builder.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 latitude/longitude pair in degrees."""
    latitude: float
    longitude: float

    def as_param(self) -> str:
        """Format as the ``lat,lng`` pair used in map API query strings."""
        return f"{self.latitude:.6f},{self.longitude:.6f}"


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in degrees. ``top`` is the smaller latitude."""
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @property
    def left(self) -> float:
        return self.min_lon

    @property
    def right(self) -> float:
        return self.max_lon

    @property
    def top(self) -> float:
        return self.min_lat

    @property
    def bottom(self) -> float:
        return self.max_lat

    @property
    def width(self) -> float:
        """Longitude span in degrees."""
        return self.right - self.left

    @property
    def height(self) -> float:
        """Latitude span in degrees."""
        return self.bottom - self.top


def bounding_box(coords: Iterable[Coordinate]) -> BoundingBox:
    """
    Return the coordinate-wise min/max box around the given points.

    Raises:
        ValueError: If no coordinates are given.
    """
    coords = list(coords)
    if not coords:
        raise ValueError("Cannot compute bounding box of empty list")
    return BoundingBox(
        min_lat=min(c.latitude for c in coords),
        max_lat=max(c.latitude for c in coords),
        min_lon=min(c.longitude for c in coords),
        max_lon=max(c.longitude for c in coords),
    )


def coordinate_problem(lat: Any, lon: Any) -> Optional[str]:
    """
    Check raw latitude/longitude values before building a Coordinate.

    Returns:
        A description of what is wrong, or None if the pair is usable.
    """
    for value in (lat, lon):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return f"non-numeric coordinate {value!r}"
        if not math.isfinite(value):
            return f"non-finite coordinate {value!r}"
    if not -90.0 <= lat <= 90.0:
        return f"latitude {lat} outside [-90, 90]"
    if not -180.0 <= lon <= 180.0:
        return f"longitude {lon} outside [-180, 180]"
    return None
