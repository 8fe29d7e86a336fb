"""
Site Engine for plant layout generation.

Places rectangular process blocks inside a site polygon, checks the
result for clashes and clearances, snaps drawn shapes to a grid and
builds proximity heat fields.  Inputs and outputs are GeoJSON dicts in
longitude/latitude; metric work goes through shapely.
"""

from .features import feature, feature_collection, to_shape
from .generator import GenerationConfig, LayoutGenerator, generate_blocks
from .heatmap import generate_heat_squares
from .process_type import ProcessType
from .rectangles import build_rect
from .sampling import grid_centers, square_cells
from .snapping import ring_is_closed, snap_feature_to_grid, snap_lnglat
from .units import Mulberry32, km_to_meters, meters_to_km
from .validator import (
    ValidationIssue,
    ValidationThresholds,
    summarize_issues,
    validate_layout,
)

__all__ = [
    "feature",
    "feature_collection",
    "to_shape",
    "GenerationConfig",
    "LayoutGenerator",
    "generate_blocks",
    "generate_heat_squares",
    "ProcessType",
    "build_rect",
    "grid_centers",
    "square_cells",
    "ring_is_closed",
    "snap_feature_to_grid",
    "snap_lnglat",
    "Mulberry32",
    "km_to_meters",
    "meters_to_km",
    "ValidationIssue",
    "ValidationThresholds",
    "summarize_issues",
    "validate_layout",
]
