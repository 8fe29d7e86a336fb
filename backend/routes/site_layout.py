"""
Site layout API route.

Stateless endpoints over the site engine: every request carries the
site and blocks it works on and gets a freshly computed result back.

Endpoints:
  GET  /api/site/process-types  Catalog and default parameters
  POST /api/site/generate       Place blocks inside a site
  POST /api/site/validate       Clash / aisle / boundary / turning checks
  POST /api/site/heatmap        Proximity heat squares
  POST /api/site/snap           Snap a drawn feature to the grid
  POST /api/site/import         GeoJSON / KML / WKT text to features
  POST /api/site/export         Tagged GeoJSON download
"""

import logging
from fastapi import APIRouter, HTTPException
from shapely.geometry import shape

from config import EXPORT_DIR
from schemas import (
    ExportRequest, ExportResponse,
    GenerateRequest, GenerateResponse,
    HeatmapRequest, HeatmapResponse,
    ImportRequest, ImportResponse,
    SnapRequest, SnapResponse,
    ValidateRequest, ValidateResponse,
)
from services.geo_io import (
    ImportFormatError,
    export_layout,
    parse_import_text,
    site_from_import,
    write_export,
)
from services.site_constants import catalog_defaults, resolve_process_types
from services.site_engine import (
    GenerationConfig,
    ProcessType,
    ValidationThresholds,
    feature_collection,
    generate_blocks,
    generate_heat_squares,
    ring_is_closed,
    snap_feature_to_grid,
    summarize_issues,
    validate_layout,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/site", tags=["site"])


def _require_polygon_site(site):
    """Reject a site that is present but not a single Polygon."""
    if site is None:
        return None
    geometry = site.get("geometry") if site.get("type") == "Feature" else site
    if not geometry or geometry.get("type") != "Polygon":
        raise HTTPException(status_code=400, detail="Site must be a Polygon")
    try:
        shape(geometry)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Invalid site geometry: {e}")
    return site


# ---------- Endpoints ----------

@router.get("/process-types")
async def process_types():
    """Process catalog with the default generation and check parameters."""
    return catalog_defaults()


@router.post("/generate", response_model=GenerateResponse)
async def generate(req: GenerateRequest):
    """Generate a fresh block layout for the site."""
    site = _require_polygon_site(req.site)
    try:
        if req.process_types is not None:
            types = [ProcessType.from_dict(t.model_dump()) for t in req.process_types]
        else:
            types = resolve_process_types(req.enabled_types)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    config = GenerationConfig(
        placement_margin=req.aisle_width,
        rotation=req.rotation,
        seed=req.seed,
        jitter=req.jitter,
        max_blocks=req.max_blocks,
    )
    try:
        blocks = generate_blocks(site, types, config)
    except Exception as e:
        logger.exception("Layout generation failed")
        raise HTTPException(status_code=500, detail=f"Layout generation failed: {e}")

    return GenerateResponse(blocks=blocks, count=len(blocks["features"]))


@router.post("/validate", response_model=ValidateResponse)
async def validate(req: ValidateRequest):
    """Run every layout check; an empty issue list means compliant."""
    site = _require_polygon_site(req.site)
    thresholds = ValidationThresholds(
        min_aisle=req.aisle_width,
        boundary_clearance=req.boundary_clearance,
        turn_radius=req.turn_radius,
    )
    try:
        issues = validate_layout(site, req.blocks, thresholds)
    except Exception as e:
        logger.exception("Layout validation failed")
        raise HTTPException(status_code=500, detail=f"Layout validation failed: {e}")

    return ValidateResponse(
        issues=[i.to_dict() for i in issues],
        summary=summarize_issues(issues),
        compliant=not issues,
    )


@router.post("/heatmap", response_model=HeatmapResponse)
async def heatmap(req: HeatmapRequest):
    """Inverse-distance heat squares over the site."""
    site = _require_polygon_site(req.site)
    if any(len(s) < 2 for s in req.sources):
        raise HTTPException(status_code=400, detail="Sources must be [lng, lat] pairs")
    try:
        squares = generate_heat_squares(site, req.sources, req.cell_size)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return HeatmapResponse(mode=req.mode, squares=squares, count=len(squares["features"]))


@router.post("/snap", response_model=SnapResponse)
async def snap(req: SnapRequest):
    """Snap a drawn feature to the grid, optionally forcing orthogonal edges."""
    try:
        snapped = snap_feature_to_grid(req.feature, req.spacing, req.origin, req.orthogonal)
    except (ValueError, TypeError, KeyError) as e:
        raise HTTPException(status_code=400, detail=f"Cannot snap feature: {e}")

    geometry = snapped.get("geometry") or {}
    closed = None
    if geometry.get("type") == "Polygon":
        closed = all(ring_is_closed(ring) for ring in geometry["coordinates"])
    return SnapResponse(feature=snapped, closed=closed)


@router.post("/import", response_model=ImportResponse)
async def import_layout(req: ImportRequest):
    """Parse GeoJSON / KML / WKT text; the first polygon is offered as site."""
    try:
        collection = parse_import_text(req.text)
    except ImportFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if req.snap:
        collection = feature_collection(
            snap_feature_to_grid(f, req.spacing, req.origin, req.orthogonal)
            for f in collection["features"]
        )
    return ImportResponse(features=collection, site=site_from_import(collection))


@router.post("/export", response_model=ExportResponse)
async def export(req: ExportRequest):
    """Tag site and blocks and write them as a downloadable GeoJSON file."""
    site = _require_polygon_site(req.site)
    layout = export_layout(site, req.blocks)
    try:
        path = write_export(layout, EXPORT_DIR)
    except OSError as e:
        logger.exception("Export write failed")
        raise HTTPException(status_code=500, detail=f"Export failed: {e}")
    return ExportResponse(layout=layout, download_url=f"/exports/{path.name}")
