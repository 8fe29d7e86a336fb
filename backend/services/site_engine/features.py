"""
GeoJSON feature helpers.

The engine speaks plain GeoJSON dicts at its edges and converts to
shapely geometries for predicates, offsets and areas.
"""

from copy import deepcopy
from typing import Any, Dict, Iterable, List, Optional, Union

from shapely.geometry import mapping, shape
from shapely.geometry.base import BaseGeometry

Feature = Dict[str, Any]
FeatureCollection = Dict[str, Any]

GEOMETRY_TYPES = {
    "Point", "MultiPoint", "LineString", "MultiLineString",
    "Polygon", "MultiPolygon", "GeometryCollection",
}


def feature(geometry: Union[Dict[str, Any], BaseGeometry],
            properties: Optional[Dict[str, Any]] = None) -> Feature:
    """Wrap a geometry (dict or shapely) in a GeoJSON Feature."""
    if isinstance(geometry, BaseGeometry):
        geometry = geometry_to_dict(geometry)
    return {
        "type": "Feature",
        "geometry": geometry,
        "properties": dict(properties or {}),
    }


def feature_collection(features: Iterable[Feature] = ()) -> FeatureCollection:
    return {"type": "FeatureCollection", "features": list(features)}


def geometry_to_dict(geom: BaseGeometry) -> Dict[str, Any]:
    """shapely geometry -> GeoJSON geometry with plain list coordinates."""
    return _listify(mapping(geom))


def _listify(obj):
    if isinstance(obj, dict):
        return {k: _listify(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_listify(v) for v in obj]
    return obj


def to_shape(obj) -> Optional[BaseGeometry]:
    """
    Return a shapely geometry for a Feature, a bare GeoJSON geometry or
    an existing shapely geometry.  ``None`` and null geometries map to
    ``None``.
    """
    if obj is None:
        return None
    if isinstance(obj, BaseGeometry):
        return obj
    if obj.get("type") == "Feature":
        geometry = obj.get("geometry")
        return shape(geometry) if geometry else None
    return shape(obj)


def iter_features(collection) -> List[Feature]:
    """Features of a FeatureCollection, a plain list, or ``None``."""
    if collection is None:
        return []
    if isinstance(collection, dict):
        return list(collection.get("features") or [])
    return list(collection)


def copy_feature(obj: Feature) -> Feature:
    return deepcopy(obj)
