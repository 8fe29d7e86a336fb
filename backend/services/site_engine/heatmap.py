"""
Proximity heat field: inverse distance from each cell to the nearest source.
"""

import logging
from typing import Sequence

from .features import FeatureCollection, feature, feature_collection, to_shape
from .geodesy import distance_m
from .sampling import square_cells
from .units import meters_to_km

logger = logging.getLogger(__name__)

# Keeps the value finite when a cell center sits on a source (km)
HEAT_EPSILON_KM = 0.001


def heat_value(nearest_km: float) -> float:
    return 1.0 / (nearest_km + HEAT_EPSILON_KM)


def generate_heat_squares(site, sources: Sequence[Sequence[float]],
                          cell_m: float) -> FeatureCollection:
    """
    Square cells of *cell_m* over the site, each with
    ``properties.value = 1 / (km to nearest source + 0.001)``.

    Empty collection when there is no site or no source.
    """
    polygon = to_shape(site)
    if polygon is None or polygon.is_empty or not sources:
        return feature_collection([])

    cells = []
    for cell in square_cells(polygon, cell_m):
        minx, miny, maxx, maxy = cell.bounds
        center = ((minx + maxx) / 2.0, (miny + maxy) / 2.0)
        nearest = min(distance_m(center, s) for s in sources)
        cells.append(feature(cell, {"value": heat_value(meters_to_km(nearest))}))

    logger.info(f"Heat field: {len(cells)} cells from {len(sources)} sources")
    return feature_collection(cells)
