"""
Geodesic rectangle construction.

Corners are found by composing two great-circle moves from the center,
so widths and heights stay true meters at any latitude.
"""

from typing import Any, Dict, Optional, Sequence

from .features import Feature, feature
from .geodesy import destination


def build_rect(
    center: Sequence[float],
    width: float,
    height: float,
    rotation_deg: float,
    properties: Optional[Dict[str, Any]] = None,
) -> Feature:
    """
    Rectangle Polygon feature centered at ``(lng, lat)``.

    The width axis runs along bearing *rotation_deg*, the height axis
    along ``rotation_deg + 90``.  The ring has 5 coordinates, first equal
    to last.  Zero width or height gives a degenerate (zero-area)
    polygon; it is returned as-is.
    """
    half_w = width / 2.0
    half_h = height / 2.0
    across = rotation_deg + 90

    ahead = destination(center, half_w, rotation_deg)
    behind = destination(center, -half_w, rotation_deg)

    tl = destination(ahead, half_h, across)
    tr = destination(ahead, -half_h, across)
    br = destination(behind, -half_h, across)
    bl = destination(behind, half_h, across)

    ring = [list(tl), list(tr), list(br), list(bl), list(tl)]
    return feature({"type": "Polygon", "coordinates": [ring]}, properties)
