"""
Centralized site layout constants: process catalog and engine defaults.

The catalog is built in, or loaded from the JSON file named by
``PROCESS_CATALOG_PATH`` (a list of ``{id, label, width, height, color}``
objects, ``w``/``h`` accepted as short keys).
"""

import json
import logging
from typing import Dict, Iterable, List, Optional

from config import PROCESS_CATALOG_PATH
from services.site_engine import ProcessType

logger = logging.getLogger(__name__)

# ===========================================================================
# PROCESS TYPES (footprints in meters)
# ===========================================================================

BUILTIN_PROCESS_TYPES: List[ProcessType] = [
    ProcessType("receiving", "Receiving", 40, 40, "#6b7280"),
    ProcessType("processing", "Processing", 60, 80, "#2563eb"),
    ProcessType("packaging", "Packaging", 50, 60, "#10b981"),
    ProcessType("utilities", "Utilities", 30, 30, "#f59e0b"),
    ProcessType("warehouse", "Warehouse", 80, 120, "#7c3aed"),
]

# ===========================================================================
# ENGINE DEFAULTS
# ===========================================================================

DEFAULT_TRUCK_TURN_RADIUS_M = 12.5

DEFAULT_AISLE_WIDTH_M = 20.0
DEFAULT_ROTATION_DEG = 0.0
DEFAULT_SEED = 1
DEFAULT_JITTER_M = 0.0
DEFAULT_MAX_BLOCKS = 800
DEFAULT_BOUNDARY_CLEARANCE_M = 5.0

DEFAULT_GRID_SIZE_M = 5.0
DEFAULT_ORTHOGONAL = True

DEFAULT_HEAT_CELL_M = 10.0
HEAT_MODES = {
    "flow": "Material Flow",
    "utilities": "Utilities",
}


def load_process_catalog(path: Optional[str] = None) -> List[ProcessType]:
    """Catalog from *path* (JSON list), or the built-in one."""
    path = PROCESS_CATALOG_PATH if path is None else path
    if not path:
        return list(BUILTIN_PROCESS_TYPES)
    try:
        with open(path, "r", encoding="utf-8") as f:
            entries = json.load(f)
        catalog = [ProcessType.from_dict(e) for e in entries]
        logger.info(f"Loaded {len(catalog)} process types from {path}")
        return catalog
    except Exception as e:
        logger.warning(f"Could not load process catalog {path}: {e}. Using built-in catalog.")
        return list(BUILTIN_PROCESS_TYPES)


PROCESS_TYPES: List[ProcessType] = load_process_catalog()


def get_process_type(type_id: str) -> Optional[ProcessType]:
    for ptype in PROCESS_TYPES:
        if ptype.id == type_id:
            return ptype
    return None


def resolve_process_types(enabled_ids: Optional[Iterable[str]] = None) -> List[ProcessType]:
    """
    Catalog entries flagged enabled/disabled for one session, in catalog order.

    ``None`` enables everything.  Unknown ids raise ``ValueError``.
    """
    if enabled_ids is None:
        return [t.with_enabled(True) for t in PROCESS_TYPES]

    wanted = set(enabled_ids)
    unknown = wanted - {t.id for t in PROCESS_TYPES}
    if unknown:
        raise ValueError(f"Unknown process type(s): {', '.join(sorted(unknown))}")
    return [t.with_enabled(t.id in wanted) for t in PROCESS_TYPES]


def catalog_defaults() -> Dict:
    """Catalog plus default parameters, as served to the UI."""
    return {
        "process_types": [t.to_dict() for t in PROCESS_TYPES],
        "defaults": {
            "aisle_width": DEFAULT_AISLE_WIDTH_M,
            "rotation": DEFAULT_ROTATION_DEG,
            "seed": DEFAULT_SEED,
            "jitter": DEFAULT_JITTER_M,
            "max_blocks": DEFAULT_MAX_BLOCKS,
            "boundary_clearance": DEFAULT_BOUNDARY_CLEARANCE_M,
            "turn_radius": DEFAULT_TRUCK_TURN_RADIUS_M,
            "grid_size": DEFAULT_GRID_SIZE_M,
            "orthogonal": DEFAULT_ORTHOGONAL,
            "heat_cell": DEFAULT_HEAT_CELL_M,
        },
        "heat_modes": HEAT_MODES,
    }
