"""Grid snapping and orthogonal edge constraint.

The orthogonal mode is greedy per edge; the un-closing case below is
kept as documented behavior, not repaired.
"""

from copy import deepcopy

import pytest

from services.site_engine.features import feature
from services.site_engine.snapping import (
    local_scale,
    ring_is_closed,
    snap_feature_to_grid,
    snap_lnglat,
)

ORIGIN = (4.9, 52.37)


def from_meters(points, origin=ORIGIN):
    """Local-meter offsets -> [lng, lat] using the snapper's own scale."""
    m_lng, m_lat = local_scale(origin)
    return [[origin[0] + x / m_lng, origin[1] + y / m_lat] for x, y in points]


def to_meters(coords, origin=ORIGIN):
    m_lng, m_lat = local_scale(origin)
    return [((c[0] - origin[0]) * m_lng, (c[1] - origin[1]) * m_lat) for c in coords]


def polygon(points):
    return feature({"type": "Polygon", "coordinates": [from_meters(points)]})


def test_local_scale_around_amsterdam():
    m_lng, m_lat = local_scale(ORIGIN)
    assert m_lat == pytest.approx(111195, rel=1e-3)
    assert m_lng < m_lat


def test_snap_lnglat_to_nearest_node():
    coord = from_meters([(12.4, 7.6)])[0]
    snapped = to_meters([snap_lnglat(coord, 5, ORIGIN)])[0]
    assert snapped == pytest.approx((10.0, 10.0), abs=1e-6)


def test_snap_origin_is_fixed():
    assert snap_lnglat(list(ORIGIN), 5, ORIGIN) == list(ORIGIN)


def test_snap_polygon_vertices_on_lattice():
    feat = polygon([(0, 0), (52, 3), (49, 41), (-2, 38), (0, 0)])
    snapped = snap_feature_to_grid(feat, 5, ORIGIN)
    for x, y in to_meters(snapped["geometry"]["coordinates"][0]):
        assert x / 5 == pytest.approx(round(x / 5), abs=1e-6)
        assert y / 5 == pytest.approx(round(y / 5), abs=1e-6)


def test_input_feature_untouched():
    feat = polygon([(0, 0), (52, 3), (49, 41), (-2, 38), (0, 0)])
    before = deepcopy(feat)
    snap_feature_to_grid(feat, 5, ORIGIN, orthogonal=True)
    assert feat == before


@pytest.mark.parametrize("orthogonal", [False, True])
def test_snap_is_idempotent(orthogonal):
    feat = polygon([(0, 0), (52, 3), (49, 41), (-2, 38), (0, 0)])
    once = snap_feature_to_grid(feat, 5, ORIGIN, orthogonal)
    twice = snap_feature_to_grid(once, 5, ORIGIN, orthogonal)
    for a, b in zip(once["geometry"]["coordinates"][0], twice["geometry"]["coordinates"][0]):
        assert a == pytest.approx(b, abs=1e-12)


def test_orthogonal_edges_are_axis_aligned():
    feat = polygon([(0, 0), (52, 3), (49, 41), (-2, 38), (3, 17), (0, 0)])
    ring = snap_feature_to_grid(feat, 5, ORIGIN, orthogonal=True)["geometry"]["coordinates"][0]
    for prev, cur in zip(ring, ring[1:]):
        assert cur[0] == prev[0] or cur[1] == prev[1]


def test_rectangle_sketch_stays_closed():
    feat = polygon([(1, 1), (49, -2), (51, 39), (2, 41), (1, 1)])
    ring = snap_feature_to_grid(feat, 5, ORIGIN, orthogonal=True)["geometry"]["coordinates"][0]
    assert ring_is_closed(ring)
    meters = to_meters(ring)
    assert meters[2] == pytest.approx((50.0, 40.0), abs=1e-6)


def test_orthogonal_can_unclose_ring():
    # Triangle: the closing edge is forced horizontal and misses the start
    feat = polygon([(0, 0), (50, 0), (30, 60), (0, 0)])
    ring = snap_feature_to_grid(feat, 5, ORIGIN, orthogonal=True)["geometry"]["coordinates"][0]
    assert not ring_is_closed(ring)
    assert ring[-1][0] == ring[0][0]
    assert ring[-1][1] == ring[2][1]


def test_plain_snap_keeps_closed_ring_closed():
    feat = polygon([(0, 0), (52, 3), (49, 41), (-2, 38), (0, 0)])
    ring = snap_feature_to_grid(feat, 5, ORIGIN)["geometry"]["coordinates"][0]
    assert ring_is_closed(ring)


def test_multipolygon_structure_preserved():
    a = from_meters([(0, 0), (21, 0), (21, 19), (0, 19), (0, 0)])
    b = from_meters([(40, 40), (61, 40), (61, 62), (40, 62), (40, 40)])
    feat = feature({"type": "MultiPolygon", "coordinates": [[a], [b]]})
    out = snap_feature_to_grid(feat, 5, ORIGIN)
    coords = out["geometry"]["coordinates"]
    assert out["geometry"]["type"] == "MultiPolygon"
    assert len(coords) == 2
    assert [len(ring) for poly in coords for ring in poly] == [5, 5]
    assert to_meters(coords[1][0])[2] == pytest.approx((60.0, 60.0), abs=1e-6)


def test_linestring_snapped():
    feat = feature({"type": "LineString", "coordinates": from_meters([(1, 2), (33, 4)])})
    out = snap_feature_to_grid(feat, 5, ORIGIN, orthogonal=True)
    meters = to_meters(out["geometry"]["coordinates"])
    assert meters[0] == pytest.approx((0.0, 0.0), abs=1e-6)
    assert meters[1] == pytest.approx((35.0, 0.0), abs=1e-6)


def test_point_left_alone():
    feat = feature({"type": "Point", "coordinates": [4.90001, 52.37001]})
    assert snap_feature_to_grid(feat, 5, ORIGIN) == feat


def test_spacing_must_be_positive():
    with pytest.raises(ValueError):
        snap_feature_to_grid(polygon([(0, 0), (10, 0), (10, 10), (0, 0)]), 0, ORIGIN)


def test_bare_geometry_wrapped_and_snapped():
    geometry = {"type": "Polygon", "coordinates": [from_meters(
        [(1, 1), (49, -2), (51, 39), (2, 41), (1, 1)])]}
    before = deepcopy(geometry)
    out = snap_feature_to_grid(geometry, 5, ORIGIN)
    assert geometry == before
    assert out["type"] == "Feature"
    assert out["properties"] == {}
    assert to_meters(out["geometry"]["coordinates"][0])[1] == pytest.approx((50.0, 0.0), abs=1e-6)


def test_unknown_object_rejected():
    with pytest.raises(ValueError):
        snap_feature_to_grid({"type": "FeatureCollection", "features": []}, 5, ORIGIN)
