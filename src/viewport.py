"""
Fit a set of coordinates into a pixel canvas.

The canvas keeps the bounding box's width/height ratio (in degrees) with its
longer edge pinned to the provider's maximum edge size.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from config import MAX_MAP_EDGE_PX
from src.errors import DegenerateViewport, InsufficientPoints
from src.utils.geo_utils import BoundingBox, Coordinate, bounding_box

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CanvasSize:
    width_px: int
    height_px: int

    def as_param(self) -> str:
        return f"{self.width_px}x{self.height_px}"


def canvas_for_box(box: BoundingBox, max_edge: int = MAX_MAP_EDGE_PX, name: str = "") -> CanvasSize:
    """
    Size a canvas for a bounding box.

    Landscape boxes get ``(max_edge, max_edge / ratio)``; portrait and square
    boxes get ``(max_edge * ratio, max_edge)``. Edges are truncated to whole
    pixels.

    Raises:
        DegenerateViewport: If the box has no latitude span, or the short edge
            truncates to less than one pixel, or the
            aspect ratio is not finite.
    """
    if box.height == 0:
        raise DegenerateViewport("plan viewport", name or "<points>", "all points share one latitude")

    ratio = box.width / box.height
    if not math.isfinite(ratio):
        raise DegenerateViewport("plan viewport", name or "<points>", f"aspect ratio {ratio} is not finite")

    if ratio > 1.0:
        # landscape
        width, height = max_edge, int(max_edge / ratio)
    else:
        # portrait
        width, height = int(max_edge * ratio), max_edge

    if width < 1 or height < 1:
        raise DegenerateViewport(
            "plan viewport", name or "<points>", f"canvas {width}x{height} has an empty edge"
        )
    return CanvasSize(width_px=width, height_px=height)


def plan_viewport(
    points: Sequence[Coordinate],
    max_edge: int = MAX_MAP_EDGE_PX,
    name: str = "",
) -> Tuple[BoundingBox, CanvasSize]:
    """
    Compute the bounding box and canvas size for a set of points.

    Args:
        points: Coordinates that must fit on the canvas.
        max_edge: Largest allowed edge in pixels.
        name: Identifier used in error messages (usually the map id).

    Raises:
        InsufficientPoints: If ``points`` is empty.
        DegenerateViewport: If the points span zero latitude (e.g. a single point).
    """
    if not points:
        raise InsufficientPoints("plan viewport", name or "<points>", "at least one point is required")

    box = bounding_box(points)
    size = canvas_for_box(box, max_edge=max_edge, name=name)
    logger.debug(f"Viewport {name or '<points>'}: {box} -> {size.as_param()}")
    return box, size
