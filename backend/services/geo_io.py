"""Layout import (GeoJSON, KML, WKT) and GeoJSON export.

Import always yields a FeatureCollection whose geometries shapely can
read; anything else is rejected with ImportFormatError before it reaches
the site engine.
"""

import json
import logging
import time
from pathlib import Path
from typing import List, Optional

from fastkml import kml
from shapely import force_2d, wkt
from shapely.errors import ShapelyError
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from services.site_engine.features import (
    GEOMETRY_TYPES,
    FeatureCollection,
    feature,
    feature_collection,
    geometry_to_dict,
    iter_features,
    to_shape,
)

logger = logging.getLogger(__name__)


class ImportFormatError(ValueError):
    """Import text could not be parsed into features."""


# ---------- Import ----------

def parse_import_text(text: str) -> FeatureCollection:
    """
    Detect the format of *text* and convert it to a FeatureCollection.

    JSON when it starts with ``{`` or ``[``, KML when it contains
    ``<kml``, WKT otherwise.
    """
    body = (text or "").strip()
    if not body:
        raise ImportFormatError("Import failed: empty input")

    if body.startswith("{") or body.startswith("["):
        collection = _parse_geojson(body)
        fmt = "geojson"
    elif "<kml" in body:
        collection = _parse_kml(body)
        fmt = "kml"
    else:
        collection = _parse_wkt(body)
        fmt = "wkt"

    _check_geometries(collection)
    logger.info(f"Imported {len(collection['features'])} features ({fmt})")
    return collection


def _parse_geojson(body: str) -> FeatureCollection:
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise ImportFormatError(f"Import failed: invalid JSON ({e})") from e

    if isinstance(data, list):
        return feature_collection(_as_feature(item) for item in data)
    if not isinstance(data, dict):
        raise ImportFormatError("Import failed: JSON is not a GeoJSON object")

    gtype = data.get("type")
    if gtype == "FeatureCollection":
        return feature_collection(_as_feature(f) for f in iter_features(data))
    return feature_collection([_as_feature(data)])


def _as_feature(obj) -> dict:
    if not isinstance(obj, dict):
        raise ImportFormatError("Import failed: expected a GeoJSON object")
    gtype = obj.get("type")
    if gtype == "Feature":
        return feature(obj.get("geometry"), obj.get("properties"))
    if gtype in GEOMETRY_TYPES:
        return feature(obj)
    raise ImportFormatError(f"Import failed: unsupported GeoJSON type {gtype!r}")


def _kml_placemarks(container):
    """Placemarks of a parsed KML tree, depth first through Documents and Folders."""
    for item in getattr(container, "features", None) or []:
        if hasattr(item, "geometry"):
            yield item
        else:
            yield from _kml_placemarks(item)


def _flatten(geom) -> List[BaseGeometry]:
    """Multi-part KML geometries become one geometry per part."""
    if hasattr(geom, "geoms"):
        parts = []
        for part in geom.geoms:
            parts.extend(_flatten(part))
        return parts
    return [geom]


def _parse_kml(body: str) -> FeatureCollection:
    try:
        document = kml.KML.from_string(body.encode("utf-8"))
        features = []
        for placemark in _kml_placemarks(document):
            if placemark.geometry is None:
                logger.debug(f"KML placemark {placemark.name!r} has no geometry, skipped")
                continue
            props = {"name": placemark.name.strip()} if placemark.name else {}
            for geom in _flatten(force_2d(shape(placemark.geometry))):
                if not geom.is_empty:
                    features.append(feature(geometry_to_dict(geom), props))
    except Exception as e:
        raise ImportFormatError(f"Import failed: invalid KML ({e})") from e

    if not features:
        raise ImportFormatError("Import failed: KML contains no placemark geometry")
    return feature_collection(features)


def _parse_wkt(body: str) -> FeatureCollection:
    try:
        geom = wkt.loads(body)
    except (ShapelyError, ValueError) as e:
        raise ImportFormatError(f"Import failed: unrecognised text ({e})") from e
    return feature_collection([feature(geometry_to_dict(geom))])


def _check_geometries(collection: FeatureCollection):
    for i, f in enumerate(collection["features"]):
        if not f.get("geometry"):
            continue
        try:
            shape(f["geometry"])
        except (ShapelyError, ValueError, TypeError, KeyError, AttributeError) as e:
            raise ImportFormatError(f"Import failed: feature {i} has invalid geometry ({e})") from e


def site_from_import(collection: FeatureCollection) -> Optional[dict]:
    """First Polygon feature of an import, usable as the site."""
    for f in iter_features(collection):
        geometry = f.get("geometry") or {}
        if geometry.get("type") == "Polygon":
            return feature(geometry, {"role": "site"})
    return None


# ---------- Export ----------

def export_layout(site, blocks) -> FeatureCollection:
    """Site and blocks as one FeatureCollection tagged with ``role``."""
    out = []
    if site is not None:
        out.append(feature(to_shape(site), {"role": "site"}))
    for i, block in enumerate(iter_features(blocks)):
        props = dict(block.get("properties") or {})
        props.update({"role": "block", "id": i})
        out.append(feature(block.get("geometry"), props))
    return feature_collection(out)


def write_export(collection: FeatureCollection, directory: Path) -> Path:
    """Write *collection* as ``fb_layout_<ms>.geojson`` under *directory*."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"fb_layout_{int(time.time() * 1000)}.geojson"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(collection, f, indent=2)
    logger.info(f"Exported {len(collection['features'])} features to {path}")
    return path
