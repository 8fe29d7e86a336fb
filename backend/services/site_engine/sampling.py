"""
Regular lattices over a site's bounding box.

Both the candidate centers for block placement and the heat-map cells
come from the same lattice: it starts at the bounding box's minimum
corner, so the same site always yields the same points.
"""

from typing import List, Tuple

from shapely.geometry import Point, Polygon, box
from shapely.prepared import prep

from .features import to_shape
from .geodesy import distance_m

LngLat = Tuple[float, float]


def lattice_steps(bounds: Tuple[float, float, float, float],
                  step_m: float) -> Tuple[float, float]:
    """
    Convert a metric step into ``(dx, dy)`` degree steps for *bounds*.

    The x step is scaled from the geodesic length of the southern bbox
    edge, the y step from the western edge.  Returns ``(0, 0)`` for a
    bbox with no width or no height.
    """
    if step_m <= 0:
        raise ValueError(f"Lattice step must be positive, got {step_m}")
    west, south, east, north = bounds
    width_m = distance_m((west, south), (east, south))
    height_m = distance_m((west, south), (west, north))
    if width_m == 0 or height_m == 0:
        return 0.0, 0.0
    dx = step_m / width_m * (east - west)
    dy = step_m / height_m * (north - south)
    return dx, dy


def grid_centers(site, step_m: float) -> List[LngLat]:
    """
    Lattice points at *step_m* spacing that lie strictly inside *site*.

    Points are ordered column by column (west to east, then south to
    north within a column).
    """
    polygon = to_shape(site)
    if polygon is None or polygon.is_empty:
        return []

    bounds = polygon.bounds
    dx, dy = lattice_steps(bounds, step_m)
    if dx == 0 or dy == 0:
        return []

    west, south, east, north = bounds
    inside = prep(polygon)
    centers = []
    i = 0
    while west + i * dx <= east:
        x = west + i * dx
        j = 0
        while south + j * dy <= north:
            y = south + j * dy
            if inside.contains(Point(x, y)):
                centers.append((x, y))
            j += 1
        i += 1
    return centers


def square_cells(site, cell_m: float) -> List[Polygon]:
    """
    Square cells of side *cell_m* tiling the site's bounding box,
    kept when the cell center is covered by the site.
    """
    polygon = to_shape(site)
    if polygon is None or polygon.is_empty:
        return []

    bounds = polygon.bounds
    dx, dy = lattice_steps(bounds, cell_m)
    if dx == 0 or dy == 0:
        return []

    west, south, east, north = bounds
    covered = prep(polygon)
    cells = []
    i = 0
    while west + i * dx < east:
        x0 = west + i * dx
        j = 0
        while south + j * dy < north:
            y0 = south + j * dy
            center = Point(x0 + dx / 2.0, y0 + dy / 2.0)
            if covered.covers(center):
                cells.append(box(x0, y0, x0 + dx, y0 + dy))
            j += 1
        i += 1
    return cells
