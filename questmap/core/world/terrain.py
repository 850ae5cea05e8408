"""
Procedural terrain field.

Classifies any world cell into a Tile as a pure function of the world seed
and the cell coordinate. Nothing is cached or stored: the same inputs always
produce the same tile, on any machine, in any query order.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple
import bisect
import logging
import math

from questmap.core.rng import SeededRNG, derive_seed, validate_seed

logger = logging.getLogger(__name__)


# =============================================================================
# TILES
# =============================================================================

class Tile(str, Enum):
    """Terrain classification of one grid cell."""
    GRASS = "grass"
    WATER = "water"
    LAVA = "lava"
    MOUNTAIN = "mountain"
    FOREST = "forest"
    SAND = "sand"
    SNOW = "snow"
    SWAMP = "swamp"
    ROAD = "road"
    DUNGEON = "dungeon"


@dataclass(frozen=True)
class TileInfo:
    """Static attributes of a tile type."""
    display_name: str
    walkable: bool
    hazard_damage_per_step: Optional[int] = None
    movement_penalty: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "display_name": self.display_name,
            "walkable": self.walkable,
            "hazard_damage_per_step": self.hazard_damage_per_step,
            "movement_penalty": self.movement_penalty,
        }


TILE_INFO: Dict[Tile, TileInfo] = {
    Tile.GRASS: TileInfo("Grass", walkable=True),
    Tile.WATER: TileInfo("Water", walkable=False),
    Tile.LAVA: TileInfo("Lava", walkable=False, hazard_damage_per_step=10),
    Tile.MOUNTAIN: TileInfo("Mountain", walkable=False),
    Tile.FOREST: TileInfo("Forest", walkable=True),
    Tile.SAND: TileInfo("Sand", walkable=True),
    Tile.SNOW: TileInfo("Snow", walkable=True),
    Tile.SWAMP: TileInfo("Swamp", walkable=True, movement_penalty=True),
    Tile.ROAD: TileInfo("Road", walkable=True),
    Tile.DUNGEON: TileInfo("Dungeon", walkable=True),
}


# =============================================================================
# THRESHOLD TABLE
# =============================================================================

# (exclusive upper bound, tile), ascending. The final band is unbounded so
# every scalar maps to exactly one tile.
TERRAIN_BANDS: List[Tuple[float, Tile]] = [
    (-0.4, Tile.WATER),
    (-0.25, Tile.SAND),
    (0.15, Tile.GRASS),
    (0.35, Tile.FOREST),
    (0.5, Tile.ROAD),
    (0.65, Tile.SWAMP),
    (0.8, Tile.MOUNTAIN),
    (0.9, Tile.SNOW),
    (0.95, Tile.LAVA),
    (math.inf, Tile.DUNGEON),
]

_BAND_BOUNDS = [bound for bound, _ in TERRAIN_BANDS]

# Coordinate scale of the smooth signals
WORLD_SCALE = 0.1


# =============================================================================
# CLASSIFICATION
# =============================================================================

def terrain_value(seed: int, x: int, y: int) -> float:
    """
    Scalar terrain height for a cell, in [-2/3, 1).

    Two phase-shifted periodic signals over the scaled coordinate are
    averaged with a per-cell random value drawn from a coordinate-seeded
    stream.
    """
    noise = SeededRNG(derive_seed(seed, x, y)).next()

    world_x = (x + seed) * WORLD_SCALE
    world_y = (y + seed) * WORLD_SCALE

    n1 = math.sin(world_x * 0.5) * math.cos(world_y * 0.5)
    n2 = math.sin(world_x * 0.3 + 1) * math.cos(world_y * 0.3 + 1)
    return (n1 + n2 + noise) / 3


def tile_for_value(value: float) -> Tile:
    """Map a terrain scalar to its band."""
    return TERRAIN_BANDS[bisect.bisect_right(_BAND_BOUNDS, value)][1]


def classify(seed: int, x: int, y: int) -> Tile:
    """
    Classify the cell (x, y) of the world identified by seed.

    Raises:
        OutOfRangeSeedError: If the world seed is invalid
    """
    validate_seed(seed)
    return tile_for_value(terrain_value(seed, x, y))


def classify_region(seed: int, x0: int, y0: int, width: int, height: int) -> List[List[Tile]]:
    """
    Classify a rectangular viewport.

    Returns rows ordered by y, each row ordered by x, starting at (x0, y0).
    """
    validate_seed(seed)
    if width < 0 or height < 0:
        raise ValueError(f"Invalid region size: {width}x{height}")

    logger.debug(f"Classifying region seed={seed} origin=({x0}, {y0}) size={width}x{height}")
    return [
        [tile_for_value(terrain_value(seed, x, y)) for x in range(x0, x0 + width)]
        for y in range(y0, y0 + height)
    ]


def tile_info(tile: Tile) -> TileInfo:
    """Get the static attributes of a tile."""
    return TILE_INFO[tile]


def is_walkable(seed: int, x: int, y: int) -> bool:
    """Check whether a player may stand on a cell."""
    return TILE_INFO[classify(seed, x, y)].walkable


# =============================================================================
# MOVEMENT
# =============================================================================

@dataclass(frozen=True)
class StepEffect:
    """What happens when a player tries to step onto a tile."""
    tile: Tile
    allowed: bool
    hazard_damage: int = 0
    movement_penalty: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "tile": self.tile.value,
            "allowed": self.allowed,
            "hazard_damage": self.hazard_damage,
            "movement_penalty": self.movement_penalty,
        }


def step_cost(tile: Tile) -> StepEffect:
    """Walkability and hazard rules for stepping onto a tile."""
    info = TILE_INFO[tile]
    return StepEffect(
        tile=tile,
        allowed=info.walkable,
        hazard_damage=info.hazard_damage_per_step or 0,
        movement_penalty=info.movement_penalty,
    )
