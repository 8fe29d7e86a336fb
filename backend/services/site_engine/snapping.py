"""
Grid snapping and orthogonalization for freshly drawn or imported shapes.

Vertices are moved onto a square lattice anchored at a reference origin.
The lon/lat <-> meter conversion is linearized once around the origin
(two 0.01 degree probes), which holds for sites within a few kilometers
of the origin.  Further away the lattice drifts from true meters.

With ``orthogonal=True`` each vertex after the first in a ring is also
pinned to the previous output vertex's longitude or latitude, whichever
axis moved less, so every edge comes out horizontal or vertical.  This
is per-edge and greedy: it does not make the shape a rectangle, and a
closed ring can come out unclosed.  Callers needing closure re-close.
"""

import logging
import math
from typing import List, Sequence, Tuple

from .features import GEOMETRY_TYPES, Feature, copy_feature, feature
from .geodesy import distance_m

logger = logging.getLogger(__name__)

LngLat = Tuple[float, float]

_PROBE_DEG = 0.01


def local_scale(origin: Sequence[float]) -> Tuple[float, float]:
    """Meters per degree of ``(longitude, latitude)`` around *origin*."""
    north = distance_m(origin, (origin[0], origin[1] + _PROBE_DEG))
    east = distance_m(origin, (origin[0] + _PROBE_DEG, origin[1]))
    return east / _PROBE_DEG, north / _PROBE_DEG


def snap_lnglat(coord: Sequence[float], spacing_m: float,
                origin: Sequence[float] = (0.0, 0.0)) -> List[float]:
    """Snap one ``[lng, lat]`` to the nearest lattice node."""
    if spacing_m <= 0:
        raise ValueError(f"Snap spacing must be positive, got {spacing_m}")
    m_per_deg_lng, m_per_deg_lat = local_scale(origin)
    return _snap(coord, spacing_m, origin, m_per_deg_lng, m_per_deg_lat)


def _round_half_up(value: float) -> int:
    # ties go up (-2.5 -> -2), not to even
    return math.floor(value + 0.5)


def _snap(coord, spacing_m, origin, m_per_deg_lng, m_per_deg_lat) -> List[float]:
    x = (coord[0] - origin[0]) * m_per_deg_lng
    y = (coord[1] - origin[1]) * m_per_deg_lat
    sx = _round_half_up(x / spacing_m) * spacing_m
    sy = _round_half_up(y / spacing_m) * spacing_m
    return [origin[0] + sx / m_per_deg_lng, origin[1] + sy / m_per_deg_lat]


def _snap_path(path, spacing_m, origin, scale, orthogonal: bool) -> List[List[float]]:
    out = []
    for i, coord in enumerate(path):
        snapped = _snap(coord, spacing_m, origin, *scale)
        if orthogonal and i > 0:
            prev = out[-1]
            dx = snapped[0] - prev[0]
            dy = snapped[1] - prev[1]
            if abs(dx) > abs(dy):
                snapped = [snapped[0], prev[1]]  # horizontal
            else:
                snapped = [prev[0], snapped[1]]  # vertical
        out.append(snapped)
    return out


def snap_feature_to_grid(feat: Feature, spacing_m: float,
                         origin: Sequence[float] = (0.0, 0.0),
                         orthogonal: bool = False) -> Feature:
    """
    Return a copy of *feat* with every vertex snapped to the lattice.

    Polygon and MultiPolygon rings (holes included) and LineString /
    MultiLineString paths are snapped; other geometry types are copied
    unchanged.  A bare GeoJSON geometry is wrapped in a Feature first.
    The input is never modified.
    """
    if spacing_m <= 0:
        raise ValueError(f"Snap spacing must be positive, got {spacing_m}")

    kind = feat.get("type")
    if kind == "Feature":
        out = copy_feature(feat)
    elif kind in GEOMETRY_TYPES:
        out = feature(copy_feature(feat))
    else:
        raise ValueError(f"Expected a GeoJSON Feature or geometry, got type {kind!r}")
    geometry = out.get("geometry")
    if not geometry:
        return out

    scale = local_scale(origin)
    gtype = geometry.get("type")
    coords = geometry.get("coordinates")

    if gtype == "Polygon":
        geometry["coordinates"] = [
            _snap_path(ring, spacing_m, origin, scale, orthogonal) for ring in coords
        ]
    elif gtype == "MultiPolygon":
        geometry["coordinates"] = [
            [_snap_path(ring, spacing_m, origin, scale, orthogonal) for ring in polygon]
            for polygon in coords
        ]
    elif gtype == "LineString":
        geometry["coordinates"] = _snap_path(coords, spacing_m, origin, scale, orthogonal)
    elif gtype == "MultiLineString":
        geometry["coordinates"] = [
            _snap_path(line, spacing_m, origin, scale, orthogonal) for line in coords
        ]
    else:
        logger.debug(f"Snapping skipped for geometry type {gtype}")
    return out


def ring_is_closed(ring: Sequence[Sequence[float]], tol: float = 1e-12) -> bool:
    """True when the first and last vertices coincide (within *tol* degrees)."""
    if len(ring) < 2:
        return False
    return (abs(ring[0][0] - ring[-1][0]) <= tol
            and abs(ring[0][1] - ring[-1][1]) <= tol)
