"""
Geometric layout checks.

Four independent passes over a site and its blocks:

* clash    : pairs of blocks that overlap
* aisle    : pairs closer together than the required aisle
* boundary : blocks closer to the site edge than the clearance
* turning  : a truck turning circle at the site centroid that does
             not fit inside the site (a coarse single-point proxy,
             not a path analysis)

A pass with a zero threshold is skipped.  Degenerate geometry results
(empty intersections, collapsed buffers) are treated as "no issue".
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from shapely.errors import GEOSException
from shapely.ops import unary_union

from .features import geometry_to_dict, iter_features, to_shape
from .geodesy import buffer_meters, geodesic_area, geodesic_circle, vertex_centroid

logger = logging.getLogger(__name__)

ISSUE_KINDS = ("clash", "aisle", "boundary", "turning")

TURNING_CIRCLE_STEPS = 64


@dataclass
class ValidationThresholds:
    """Validator limits in meters; ``0`` disables the related check."""

    min_aisle: float = 0.0
    boundary_clearance: float = 0.0
    turn_radius: float = 0.0


@dataclass
class ValidationIssue:
    """One failed check.  ``a``/``b`` index into the block list."""

    kind: str
    geometry: Optional[Dict[str, Any]] = None
    a: Optional[int] = None
    b: Optional[int] = None
    area: Optional[float] = None

    def to_dict(self) -> dict:
        out = {"kind": self.kind}
        if self.a is not None:
            out["a"] = self.a
        if self.b is not None:
            out["b"] = self.b
        if self.area is not None:
            out["area"] = round(self.area, 4)
        out["geom"] = self.geometry
        return out


def _polygonal_overlap(a, b):
    """Intersection of two shapes if it has polygonal content, else None."""
    try:
        inter = a.intersection(b)
    except GEOSException as e:
        logger.debug(f"Intersection failed, treated as no overlap: {e}")
        return None
    if inter.is_empty:
        return None
    if inter.geom_type == "GeometryCollection":
        polys = [g for g in inter.geoms if g.geom_type in ("Polygon", "MultiPolygon")]
        if not polys:
            return None
        inter = unary_union(polys)
    elif inter.geom_type not in ("Polygon", "MultiPolygon"):
        return None
    return inter


def check_clashes(shapes: List) -> List[ValidationIssue]:
    """Every unordered pair of overlapping blocks, in index order."""
    issues = []
    for i in range(len(shapes)):
        for j in range(i + 1, len(shapes)):
            a, b = shapes[i], shapes[j]
            if a is None or b is None or not a.intersects(b):
                continue
            inter = _polygonal_overlap(a, b)
            if inter is None:
                continue
            issues.append(ValidationIssue(
                kind="clash", a=i, b=j,
                area=geodesic_area(inter),
                geometry=geometry_to_dict(inter),
            ))
    return issues


def check_aisles(shapes: List, min_aisle: float) -> List[ValidationIssue]:
    """Pairs whose footprints, each grown by *min_aisle*, still meet."""
    if min_aisle <= 0:
        return []
    grown = [buffer_meters(s, min_aisle) if s is not None else None for s in shapes]
    issues = []
    for i in range(len(grown)):
        for j in range(i + 1, len(grown)):
            a, b = grown[i], grown[j]
            if a is None or b is None or not a.intersects(b):
                continue
            inter = _polygonal_overlap(a, b)
            if inter is None:
                continue
            issues.append(ValidationIssue(
                kind="aisle", a=i, b=j, geometry=geometry_to_dict(inter),
            ))
    return issues


def check_boundary(site, shapes: List, features: List[dict],
                   clearance: float) -> List[ValidationIssue]:
    """Blocks not inside the site shrunk by *clearance*."""
    if clearance <= 0:
        return []
    inset = buffer_meters(site, -clearance)
    if inset is None:
        logger.debug(f"Site collapses under a {clearance} m clearance; boundary check skipped")
        return []
    issues = []
    for i, s in enumerate(shapes):
        if s is None:
            continue
        if not s.within(inset):
            issues.append(ValidationIssue(
                kind="boundary", a=i, geometry=features[i].get("geometry"),
            ))
    return issues


def check_turning(site, turn_radius: float) -> List[ValidationIssue]:
    """Single issue when the turning circle at the centroid leaves the site."""
    if turn_radius <= 0:
        return []
    if site.geom_type != "Polygon":
        logger.debug(f"Turning check skipped for {site.geom_type} site")
        return []
    circle = geodesic_circle(vertex_centroid(site), turn_radius,
                             steps=TURNING_CIRCLE_STEPS)
    if circle.within(site):
        return []
    return [ValidationIssue(kind="turning", geometry=geometry_to_dict(circle))]


def validate_layout(site, blocks,
                    thresholds: Optional[ValidationThresholds] = None) -> List[ValidationIssue]:
    """
    Run all checks and return issues in a fixed order:
    clashes, aisles, boundary, turning (pairs in ascending index order).

    An empty list means the layout passes every enabled check.  No site
    yields an empty list.
    """
    thresholds = thresholds or ValidationThresholds()
    site_shape = to_shape(site)
    if site_shape is None or site_shape.is_empty:
        return []

    features = iter_features(blocks)
    shapes = [to_shape(f) for f in features]

    issues: List[ValidationIssue] = []
    issues += check_clashes(shapes)
    issues += check_aisles(shapes, thresholds.min_aisle)
    issues += check_boundary(site_shape, shapes, features, thresholds.boundary_clearance)
    issues += check_turning(site_shape, thresholds.turn_radius)

    logger.info(f"Validated {len(shapes)} blocks: {len(issues)} issues")
    return issues


def summarize_issues(issues: List[ValidationIssue]) -> Dict[str, int]:
    """Issue count per kind, every kind present (zero when clean)."""
    counts = Counter(issue.kind for issue in issues)
    return {kind: counts.get(kind, 0) for kind in ISSUE_KINDS}
