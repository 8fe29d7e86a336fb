"""Import parsing and GeoJSON export."""

import json

import pytest

from services.geo_io import (
    ImportFormatError,
    export_layout,
    parse_import_text,
    site_from_import,
    write_export,
)

SQUARE = [[4.89, 52.37], [4.891, 52.37], [4.891, 52.371], [4.89, 52.371], [4.89, 52.37]]

KML = """<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
  <Document>
    <Placemark>
      <name>Plot 7</name>
      <Polygon>
        <outerBoundaryIs><LinearRing><coordinates>
          4.89,52.37,0 4.891,52.37,0 4.891,52.371,0 4.89,52.371,0 4.89,52.37,0
        </coordinates></LinearRing></outerBoundaryIs>
      </Polygon>
    </Placemark>
    <Placemark>
      <name>Gate</name>
      <Point><coordinates>4.8905,52.37</coordinates></Point>
    </Placemark>
  </Document>
</kml>
"""


def test_geojson_feature_collection():
    text = json.dumps({
        "type": "FeatureCollection",
        "features": [{
            "type": "Feature",
            "properties": {"name": "site"},
            "geometry": {"type": "Polygon", "coordinates": [SQUARE]},
        }],
    })
    fc = parse_import_text(text)
    assert fc["type"] == "FeatureCollection"
    assert len(fc["features"]) == 1
    assert fc["features"][0]["properties"] == {"name": "site"}


def test_bare_geometry_is_wrapped():
    fc = parse_import_text(json.dumps({"type": "Polygon", "coordinates": [SQUARE]}))
    assert fc["features"][0]["type"] == "Feature"
    assert fc["features"][0]["geometry"]["type"] == "Polygon"


def test_kml_placemarks():
    fc = parse_import_text(KML)
    types = [f["geometry"]["type"] for f in fc["features"]]
    assert types == ["Polygon", "Point"]
    assert fc["features"][0]["properties"] == {"name": "Plot 7"}
    assert fc["features"][0]["geometry"]["coordinates"][0] == SQUARE
    assert fc["features"][1]["geometry"]["coordinates"] == [4.8905, 52.37]


def test_kml_coordinates_with_spaces_after_commas():
    text = """<kml xmlns="http://www.opengis.net/kml/2.2"><Placemark><Polygon>
      <outerBoundaryIs><LinearRing><coordinates>
        4.89, 52.37 4.891, 52.37 4.891, 52.371 4.89, 52.371 4.89, 52.37
      </coordinates></LinearRing></outerBoundaryIs>
    </Polygon></Placemark></kml>"""
    fc = parse_import_text(text)
    assert fc["features"][0]["geometry"]["coordinates"][0] == SQUARE
    assert site_from_import(fc) is not None


def test_kml_multigeometry_split_into_features():
    text = """<kml xmlns="http://www.opengis.net/kml/2.2"><Document><Folder>
      <Placemark><name>Yard</name><MultiGeometry>
        <Point><coordinates>4.8905,52.37</coordinates></Point>
        <LineString><coordinates>4.89,52.37 4.891,52.371</coordinates></LineString>
      </MultiGeometry></Placemark>
    </Folder></Document></kml>"""
    fc = parse_import_text(text)
    assert [f["geometry"]["type"] for f in fc["features"]] == ["Point", "LineString"]
    assert all(f["properties"] == {"name": "Yard"} for f in fc["features"])


def test_kml_without_placemarks_rejected():
    with pytest.raises(ImportFormatError):
        parse_import_text('<kml xmlns="http://www.opengis.net/kml/2.2"><Document/></kml>')


def test_wkt():
    fc = parse_import_text("POLYGON ((4.89 52.37, 4.891 52.37, 4.891 52.371, 4.89 52.37))")
    geometry = fc["features"][0]["geometry"]
    assert geometry["type"] == "Polygon"
    assert geometry["coordinates"][0][1] == [4.891, 52.37]


@pytest.mark.parametrize("text", [
    "",
    "   ",
    "{not json",
    '{"type": "Banana"}',
    "<kml><Placemark><Point><coordinates>x,y</coordinates></Point></Placemark></kml>",
    "certainly not a geometry",
    '{"type": "Polygon", "coordinates": [[[1, 2]]]}',
])
def test_unreadable_input_rejected(text):
    with pytest.raises(ImportFormatError):
        parse_import_text(text)


def test_import_error_is_value_error():
    assert issubclass(ImportFormatError, ValueError)


def test_site_from_import_takes_first_polygon():
    fc = parse_import_text(KML)
    site = site_from_import(fc)
    assert site["properties"] == {"role": "site"}
    assert site["geometry"]["coordinates"][0] == SQUARE
    assert site_from_import({"type": "FeatureCollection", "features": []}) is None


def test_export_tags_roles(square_site, block, center):
    site = square_site(100)
    layout = export_layout(site, [block(center, type_id="processing"), block(center)])
    roles = [f["properties"]["role"] for f in layout["features"]]
    assert roles == ["site", "block", "block"]
    assert layout["features"][1]["properties"] == {"role": "block", "id": 0, "type": "processing"}
    assert layout["features"][2]["properties"]["id"] == 1


def test_export_without_site(block, center):
    layout = export_layout(None, [block(center)])
    assert [f["properties"]["role"] for f in layout["features"]] == ["block"]


def test_write_export(tmp_path, square_site):
    layout = export_layout(square_site(50), [])
    path = write_export(layout, tmp_path / "out")
    assert path.parent == tmp_path / "out"
    assert path.name.startswith("fb_layout_")
    assert path.suffix == ".geojson"
    assert json.loads(path.read_text(encoding="utf-8")) == layout
