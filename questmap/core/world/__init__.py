"""
Deterministic world generation.

Derives terrain and POI placement from a world seed and grid coordinates:
- Grid projection of real-world positions
- Terrain classification with walkability and hazards
- Seeded POI scatter around a cell
"""

from .grid import (
    GRID_SIZE,
    snap_to_grid,
    cell_center,
    location_seed,
    grid_distance,
    within_interaction_range,
    clamp_move,
)
from .terrain import (
    Tile,
    TileInfo,
    TILE_INFO,
    StepEffect,
    classify,
    classify_region,
    tile_info,
    is_walkable,
    step_cost,
)
from .poi import POI, POICategory, poi_at, scatter_pois

__all__ = [
    "GRID_SIZE",
    "snap_to_grid",
    "cell_center",
    "location_seed",
    "grid_distance",
    "within_interaction_range",
    "clamp_move",
    "Tile",
    "TileInfo",
    "TILE_INFO",
    "StepEffect",
    "classify",
    "classify_region",
    "tile_info",
    "is_walkable",
    "step_cost",
    "POI",
    "POICategory",
    "poi_at",
    "scatter_pois",
]
