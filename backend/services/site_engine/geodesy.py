"""
Spherical geodesy helpers.

Sites and blocks live in longitude/latitude, but every size the engine
deals with (block widths, aisles, clearances, turning radii) is in
meters.  Point-to-point work uses great-circle formulas directly; metric
buffers and areas are computed in a local azimuthal-equidistant
projection centered on the geometry, then mapped back to lon/lat.

The local projection is accurate for plant-scale extents (hundreds of
meters to a few kilometers).  It is not meant for continental geometry.
"""

import math
from typing import Optional, Sequence, Tuple

import numpy as np
import shapely
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry


# Mean earth radius (meters), same value the web-mapping tooling uses
EARTH_RADIUS_M = 6371008.8

LngLat = Tuple[float, float]


def destination(origin: Sequence[float], distance_m: float, bearing_deg: float) -> LngLat:
    """
    Point reached by travelling *distance_m* from *origin* along the
    great circle leaving at *bearing_deg* (clockwise from north).

    A negative distance travels along the reverse bearing.
    """
    lng1 = math.radians(origin[0])
    lat1 = math.radians(origin[1])
    bearing = math.radians(bearing_deg)
    delta = distance_m / EARTH_RADIUS_M

    lat2 = math.asin(
        math.sin(lat1) * math.cos(delta)
        + math.cos(lat1) * math.sin(delta) * math.cos(bearing)
    )
    lng2 = lng1 + math.atan2(
        math.sin(bearing) * math.sin(delta) * math.cos(lat1),
        math.cos(delta) - math.sin(lat1) * math.sin(lat2),
    )
    return (math.degrees(lng2), math.degrees(lat2))


def distance_m(a: Sequence[float], b: Sequence[float]) -> float:
    """Haversine distance between two ``(lng, lat)`` points, in meters."""
    dlat = math.radians(b[1] - a[1])
    dlng = math.radians(b[0] - a[0])
    lat1 = math.radians(a[1])
    lat2 = math.radians(b[1])
    h = (math.sin(dlat / 2) ** 2
         + math.sin(dlng / 2) ** 2 * math.cos(lat1) * math.cos(lat2))
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


class LocalProjection:
    """
    Spherical azimuthal-equidistant projection around *center*.

    ``forward`` maps lon/lat degrees to planar meters, ``inverse`` maps
    them back.  Both accept scalars or coordinate arrays, which is what
    ``shapely.transform(..., interleaved=False)`` hands over.
    """

    def __init__(self, center: Sequence[float]):
        self.center = (float(center[0]), float(center[1]))
        self._lng0 = math.radians(self.center[0])
        self._lat0 = math.radians(self.center[1])

    @classmethod
    def for_geometry(cls, geom: BaseGeometry) -> "LocalProjection":
        """Projection centered on the geometry's bounding-box center."""
        minx, miny, maxx, maxy = geom.bounds
        return cls(((minx + maxx) / 2.0, (miny + maxy) / 2.0))

    def forward(self, lng, lat):
        lam = np.radians(np.asarray(lng, dtype=float)) - self._lng0
        phi = np.radians(np.asarray(lat, dtype=float))
        sin0, cos0 = math.sin(self._lat0), math.cos(self._lat0)

        cos_c = np.clip(sin0 * np.sin(phi) + cos0 * np.cos(phi) * np.cos(lam), -1.0, 1.0)
        c = np.arccos(cos_c)
        sin_c = np.sin(c)
        # k -> 1 as c -> 0 (point at the center)
        k = np.where(sin_c > 1e-15, c / np.where(sin_c > 1e-15, sin_c, 1.0), 1.0)

        x = EARTH_RADIUS_M * k * np.cos(phi) * np.sin(lam)
        y = EARTH_RADIUS_M * k * (cos0 * np.sin(phi) - sin0 * np.cos(phi) * np.cos(lam))
        return x, y

    def inverse(self, x, y):
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        sin0, cos0 = math.sin(self._lat0), math.cos(self._lat0)

        rho = np.hypot(x, y)
        c = rho / EARTH_RADIUS_M
        sin_c, cos_c = np.sin(c), np.cos(c)
        safe_rho = np.where(rho > 0, rho, 1.0)

        phi = np.where(
            rho > 0,
            np.arcsin(np.clip(cos_c * sin0 + y * sin_c * cos0 / safe_rho, -1.0, 1.0)),
            self._lat0,
        )
        lam = self._lng0 + np.arctan2(x * sin_c, rho * cos0 * cos_c - y * sin0 * sin_c)
        return np.degrees(lam), np.degrees(phi)

    def project(self, geom: BaseGeometry) -> BaseGeometry:
        return shapely.transform(geom, self.forward, interleaved=False)

    def unproject(self, geom: BaseGeometry) -> BaseGeometry:
        return shapely.transform(geom, self.inverse, interleaved=False)


def buffer_meters(geom: BaseGeometry, meters: float,
                  quad_segs: int = 8) -> Optional[BaseGeometry]:
    """
    Grow (positive) or shrink (negative) *geom* by *meters*.

    Returns ``None`` when the result is empty or not polygonal, e.g. an
    inward offset larger than the shape.
    """
    if geom is None or geom.is_empty:
        return None
    if meters == 0:
        return geom

    projection = LocalProjection.for_geometry(geom)
    buffered = projection.project(geom).buffer(meters, quad_segs=quad_segs)
    if buffered.is_empty or buffered.geom_type not in ("Polygon", "MultiPolygon"):
        return None
    return projection.unproject(buffered)


def geodesic_area(geom: BaseGeometry) -> float:
    """Area of a lon/lat geometry in square meters."""
    if geom is None or geom.is_empty:
        return 0.0
    return LocalProjection.for_geometry(geom).project(geom).area


def geodesic_circle(center: Sequence[float], radius_m: float, steps: int = 64) -> Polygon:
    """Polygonal circle whose vertices are *radius_m* from *center*."""
    ring = [destination(center, radius_m, i * -360.0 / steps) for i in range(steps)]
    ring.append(ring[0])
    return Polygon(ring)


def vertex_centroid(polygon: Polygon) -> LngLat:
    """Mean of the exterior-ring vertices, closing vertex excluded."""
    coords = list(polygon.exterior.coords)
    if len(coords) > 1 and coords[0] == coords[-1]:
        coords = coords[:-1]
    n = len(coords)
    return (sum(c[0] for c in coords) / n, sum(c[1] for c in coords) / n)
