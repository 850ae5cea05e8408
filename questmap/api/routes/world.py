"""
World API routes.

Endpoints for:
- Classifying single cells and rectangular viewports
- Projecting real-world positions onto the grid
- Scattering POIs around the player's cell
"""
from fastapi import APIRouter, Query
from typing import Optional

from questmap.config import get_settings
from questmap.core.world import (
    cell_center,
    classify,
    classify_region,
    location_seed,
    scatter_pois,
    snap_to_grid,
    step_cost,
    tile_info,
)

router = APIRouter()

MAX_REGION_SIZE = 64
MAX_POI_RADIUS = 25


def _world_seed(seed: Optional[int]) -> int:
    return get_settings().WORLD_SEED if seed is None else seed


@router.get("/tiles/{x}/{y}")
async def get_tile(x: int, y: int, seed: Optional[int] = None):
    """Classify one cell and describe what stepping onto it does."""
    world_seed = _world_seed(seed)
    tile = classify(world_seed, x, y)
    return {
        "x": x,
        "y": y,
        "seed": world_seed,
        "tile": tile.value,
        "info": tile_info(tile).to_dict(),
        "step": step_cost(tile).to_dict(),
    }


@router.get("/region")
async def get_region(
    x: int = 0,
    y: int = 0,
    width: int = Query(16, ge=1, le=MAX_REGION_SIZE),
    height: int = Query(16, ge=1, le=MAX_REGION_SIZE),
    seed: Optional[int] = None,
):
    """
    Classify a viewport of cells.

    Rows are ordered by y starting at the origin; each row by x.
    """
    world_seed = _world_seed(seed)
    rows = classify_region(world_seed, x, y, width, height)
    return {
        "origin": {"x": x, "y": y},
        "width": width,
        "height": height,
        "seed": world_seed,
        "tiles": [[tile.value for tile in row] for row in rows],
    }


@router.get("/locate")
async def locate(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    seed: Optional[int] = None,
):
    """Project a latitude/longitude onto its grid cell and classify it."""
    world_seed = _world_seed(seed)
    x, y = snap_to_grid(lat, lng)
    tile = classify(world_seed, x, y)
    center_lat, center_lng = cell_center((x, y))
    return {
        "x": x,
        "y": y,
        "center": {"lat": center_lat, "lng": center_lng},
        "location_seed": location_seed(lat, lng),
        "tile": tile.value,
        "walkable": tile_info(tile).walkable,
    }


@router.get("/pois")
async def get_pois(
    x: int = 0,
    y: int = 0,
    radius: Optional[int] = Query(None, ge=0, le=MAX_POI_RADIUS),
    seed: Optional[int] = None,
):
    """Deterministic POIs in the square of cells around (x, y)."""
    settings = get_settings()
    world_seed = _world_seed(seed)
    pois = scatter_pois(
        world_seed,
        x,
        y,
        radius=settings.POI_RADIUS if radius is None else radius,
        spawn_chance=settings.POI_SPAWN_CHANCE,
    )
    return {
        "center": {"x": x, "y": y},
        "seed": world_seed,
        "pois": [poi.to_dict() for poi in pois],
    }
