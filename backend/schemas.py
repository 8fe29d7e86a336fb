"""Pydantic schemas for API request/response validation."""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional

from services.site_constants import (
    DEFAULT_AISLE_WIDTH_M,
    DEFAULT_BOUNDARY_CLEARANCE_M,
    DEFAULT_GRID_SIZE_M,
    DEFAULT_HEAT_CELL_M,
    DEFAULT_JITTER_M,
    DEFAULT_MAX_BLOCKS,
    DEFAULT_ORTHOGONAL,
    DEFAULT_ROTATION_DEG,
    DEFAULT_SEED,
    DEFAULT_TRUCK_TURN_RADIUS_M,
)


# ---------- Process types ----------
class ProcessTypeIn(BaseModel):
    id: str
    label: Optional[str] = None
    width: float = Field(..., ge=0, description="Footprint width in meters")
    height: float = Field(..., ge=0, description="Footprint height in meters")
    color: str = "#0ea5e9"
    enabled: bool = True


# ---------- Generation ----------
class GenerateRequest(BaseModel):
    site: Optional[Dict[str, Any]] = Field(None, description="Site Polygon feature")
    enabled_types: Optional[List[str]] = Field(
        default=None,
        description="Catalog ids to place; all when omitted",
    )
    process_types: Optional[List[ProcessTypeIn]] = Field(
        default=None,
        description="Explicit types, replacing the catalog",
    )
    aisle_width: float = Field(default=DEFAULT_AISLE_WIDTH_M, ge=0)
    rotation: float = DEFAULT_ROTATION_DEG
    seed: int = DEFAULT_SEED
    jitter: float = Field(default=DEFAULT_JITTER_M, ge=0)
    max_blocks: int = Field(default=DEFAULT_MAX_BLOCKS, ge=0)


class GenerateResponse(BaseModel):
    blocks: Dict[str, Any]
    count: int


# ---------- Validation ----------
class ValidateRequest(BaseModel):
    site: Optional[Dict[str, Any]] = None
    blocks: Dict[str, Any] = Field(default_factory=lambda: {"type": "FeatureCollection", "features": []})
    aisle_width: float = Field(default=DEFAULT_AISLE_WIDTH_M, ge=0,
                               description="Minimum clear aisle between blocks (m)")
    boundary_clearance: float = Field(default=DEFAULT_BOUNDARY_CLEARANCE_M, ge=0)
    turn_radius: float = Field(default=DEFAULT_TRUCK_TURN_RADIUS_M, ge=0)


class ValidateResponse(BaseModel):
    issues: List[Dict[str, Any]]
    summary: Dict[str, int]
    compliant: bool


# ---------- Heatmap ----------
class HeatmapRequest(BaseModel):
    site: Optional[Dict[str, Any]] = None
    sources: List[List[float]] = Field(default_factory=list, description="[[lng, lat], ...]")
    cell_size: float = Field(default=DEFAULT_HEAT_CELL_M, gt=0)
    mode: Literal["flow", "utilities"] = "flow"


class HeatmapResponse(BaseModel):
    mode: str
    squares: Dict[str, Any]
    count: int


# ---------- Snapping ----------
class SnapRequest(BaseModel):
    feature: Dict[str, Any]
    spacing: float = Field(default=DEFAULT_GRID_SIZE_M, gt=0)
    origin: List[float] = Field(default_factory=lambda: [0.0, 0.0], min_length=2, max_length=2)
    orthogonal: bool = DEFAULT_ORTHOGONAL


class SnapResponse(BaseModel):
    feature: Dict[str, Any]
    closed: Optional[bool] = None


# ---------- Import / Export ----------
class ImportRequest(BaseModel):
    text: str
    snap: bool = False
    spacing: float = Field(default=DEFAULT_GRID_SIZE_M, gt=0)
    origin: List[float] = Field(default_factory=lambda: [0.0, 0.0], min_length=2, max_length=2)
    orthogonal: bool = False


class ImportResponse(BaseModel):
    features: Dict[str, Any]
    site: Optional[Dict[str, Any]] = None


class ExportRequest(BaseModel):
    site: Optional[Dict[str, Any]] = None
    blocks: Dict[str, Any] = Field(default_factory=lambda: {"type": "FeatureCollection", "features": []})


class ExportResponse(BaseModel):
    layout: Dict[str, Any]
    download_url: str
