"""
Projection of real-world positions onto the game grid.

A grid cell is GRID_SIZE degrees on each side (about 10 meters at the
equator). Cell indices are the integer coordinates every generator consumes.
"""
import math
from typing import Tuple

from questmap.core.rng import derive_seed

Coordinate = Tuple[int, int]

GRID_SIZE = 0.0001          # Degrees per cell
INTERACTION_RANGE = 3       # Cells within which a POI can be used
MAX_MOVE_DISTANCE = 5       # Cells a player may move per step


def snap_to_grid(latitude: float, longitude: float) -> Coordinate:
    """Project a latitude/longitude pair to the (x, y) cell containing it."""
    # Round away float noise before flooring so 0.0003 maps to cell 3, not 2
    x = math.floor(round(longitude / GRID_SIZE, 6))
    y = math.floor(round(latitude / GRID_SIZE, 6))
    return x, y


def cell_center(cell: Coordinate) -> Tuple[float, float]:
    """Latitude/longitude of the centre of a cell."""
    x, y = cell
    return (y + 0.5) * GRID_SIZE, (x + 0.5) * GRID_SIZE


def location_seed(latitude: float, longitude: float, precision: int = 4) -> int:
    """Deterministic 31-bit seed for a position at the given decimal precision."""
    scale = 10 ** precision
    return derive_seed(0, int(round(latitude * scale)), int(round(longitude * scale)))


def grid_distance(a: Coordinate, b: Coordinate) -> int:
    """Chebyshev distance between two cells."""
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def within_interaction_range(
    player: Coordinate,
    target: Coordinate,
    max_range: int = INTERACTION_RANGE,
) -> bool:
    """Check whether a target cell is close enough to interact with."""
    return grid_distance(player, target) <= max_range


def clamp_move(origin: Coordinate, target: Coordinate, max_distance: int = MAX_MOVE_DISTANCE) -> Coordinate:
    """Limit a requested move to at most max_distance cells along each axis."""
    dx = max(-max_distance, min(max_distance, target[0] - origin[0]))
    dy = max(-max_distance, min(max_distance, target[1] - origin[1]))
    return origin[0] + dx, origin[1] + dy
