"""Process catalog loading and per-session type selection."""

import json

import pytest

from services import site_constants
from services.site_constants import (
    BUILTIN_PROCESS_TYPES,
    catalog_defaults,
    get_process_type,
    load_process_catalog,
    resolve_process_types,
)
from services.site_engine import ProcessType


def test_builtin_catalog():
    ids = [t.id for t in BUILTIN_PROCESS_TYPES]
    assert ids == ["receiving", "processing", "packaging", "utilities", "warehouse"]
    warehouse = BUILTIN_PROCESS_TYPES[-1]
    assert (warehouse.width, warehouse.height) == (80, 120)


def test_resolve_all_enabled_by_default():
    types = resolve_process_types()
    assert all(t.enabled for t in types)
    assert len(types) == len(site_constants.PROCESS_TYPES)


def test_resolve_subset_keeps_catalog_order():
    types = resolve_process_types(["warehouse", "receiving"])
    assert [t.id for t in types if t.enabled] == ["receiving", "warehouse"]
    assert len(types) == len(site_constants.PROCESS_TYPES)


def test_resolve_unknown_id():
    with pytest.raises(ValueError, match="bakery"):
        resolve_process_types(["receiving", "bakery"])


def test_get_process_type():
    assert get_process_type("utilities").width == 30
    assert get_process_type("nope") is None


def test_catalog_from_file(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps([
        {"id": "mixing", "label": "Mixing", "w": 25, "h": 35, "color": "#123456"},
        {"id": "cold", "width": 40, "height": 20},
    ]), encoding="utf-8")
    catalog = load_process_catalog(str(path))
    assert catalog == [
        ProcessType("mixing", "Mixing", 25, 35, "#123456"),
        ProcessType("cold", "cold", 40, 20),
    ]


def test_catalog_falls_back_on_bad_file(tmp_path, caplog):
    path = tmp_path / "broken.json"
    path.write_text("[{", encoding="utf-8")
    assert load_process_catalog(str(path)) == BUILTIN_PROCESS_TYPES
    assert "Using built-in catalog" in caplog.text
    assert load_process_catalog(str(tmp_path / "missing.json")) == BUILTIN_PROCESS_TYPES


def test_empty_path_uses_builtin():
    assert load_process_catalog("") == BUILTIN_PROCESS_TYPES


def test_catalog_defaults_shape():
    payload = catalog_defaults()
    assert set(payload) == {"process_types", "defaults", "heat_modes"}
    assert payload["defaults"]["aisle_width"] == 20.0
    assert payload["defaults"]["turn_radius"] == 12.5
    assert payload["heat_modes"] == {"flow": "Material Flow", "utilities": "Utilities"}
