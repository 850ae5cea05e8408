"""
Points of interest.

POIs are normally supplied by the world-content service; scatter_pois
offers a deterministic placement so every client sees the same POIs around
the same cell without storing them.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple

from questmap.core.rng import SeededRNG, derive_seed, validate_seed
from questmap.core.world.grid import Coordinate

DEFAULT_SCATTER_RADIUS = 6
DEFAULT_SPAWN_CHANCE = 0.15

# Keeps placement rolls independent of the terrain noise stream of the same cell
POI_SALT = 0x5851F42D


class POICategory(str, Enum):
    """Kinds of point of interest."""
    MONSTER = "monster"
    NPC = "npc"
    SHOP = "shop"
    TREASURE = "treasure"
    DUNGEON = "dungeon"
    QUEST = "quest"
    GUILD = "guild"
    CASTLE = "castle"


@dataclass(frozen=True)
class POI:
    """A coordinate tagged with a category that can trigger an encounter."""
    coordinate: Coordinate
    category: POICategory
    display_name: str
    optional_seed: Optional[int] = None
    poi_id: Optional[str] = None

    @property
    def id(self) -> str:
        """Stable identifier, used by callers to track visited POIs."""
        if self.poi_id:
            return self.poi_id
        return f"poi-{self.coordinate[0]}-{self.coordinate[1]}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "x": self.coordinate[0],
            "y": self.coordinate[1],
            "category": self.category.value,
            "display_name": self.display_name,
            "seed": self.optional_seed,
        }


# Cumulative category bands for scattered POIs: (exclusive upper bound, category)
SCATTER_CATEGORY_BANDS: List[Tuple[float, POICategory]] = [
    (0.35, POICategory.MONSTER),
    (0.55, POICategory.SHOP),
    (0.70, POICategory.NPC),
    (0.85, POICategory.TREASURE),
    (0.95, POICategory.DUNGEON),
    (1.0, POICategory.QUEST),
]

POI_NAMES: Dict[POICategory, List[str]] = {
    POICategory.MONSTER: ["Goblin", "Orc", "Skeleton", "Wolf", "Slime", "Bandit"],
    POICategory.SHOP: ["Blacksmith", "Alchemist", "Merchant", "Armorer"],
    POICategory.NPC: ["Traveler", "Guard", "Villager", "Sage", "Adventurer"],
    POICategory.TREASURE: ["Treasure Chest"],
    POICategory.DUNGEON: ["Dark Cave", "Ancient Ruins", "Abandoned Tower"],
    POICategory.QUEST: ["Quest Available"],
    POICategory.GUILD: ["Adventurers' Guild", "Order of Knights", "Mercenary League"],
    POICategory.CASTLE: ["Baron's Castle", "Old Fortress", "Haunted Castle"],
}


def _pick_category(roll: float) -> POICategory:
    for bound, category in SCATTER_CATEGORY_BANDS:
        if roll < bound:
            return category
    return SCATTER_CATEGORY_BANDS[-1][1]


def poi_at(seed: int, x: int, y: int, spawn_chance: float = DEFAULT_SPAWN_CHANCE) -> Optional[POI]:
    """
    Return the POI placed on a cell, or None when the cell is empty.

    The POI seed is the placement stream after its last draw, so the
    encounter materialized from it starts on fresh values.
    """
    rng = SeededRNG(derive_seed(seed ^ POI_SALT, x, y))

    if rng.next() >= spawn_chance:
        return None

    category = _pick_category(rng.next())
    name = rng.choice(POI_NAMES[category])
    return POI(
        coordinate=(x, y),
        category=category,
        display_name=name,
        optional_seed=rng.state,
    )


def scatter_pois(
    seed: int,
    center_x: int,
    center_y: int,
    radius: int = DEFAULT_SCATTER_RADIUS,
    spawn_chance: float = DEFAULT_SPAWN_CHANCE,
) -> List[POI]:
    """
    Place POIs in the square of cells around a centre cell.

    The centre cell itself never holds a POI. Each cell is decided by its
    own coordinate-seeded stream, so overlapping queries agree.
    """
    validate_seed(seed)
    if radius < 0:
        raise ValueError(f"Invalid radius: {radius}")

    pois = []
    for dx in range(-radius, radius + 1):
        for dy in range(-radius, radius + 1):
            if dx == 0 and dy == 0:
                continue
            poi = poi_at(seed, center_x + dx, center_y + dy, spawn_chance)
            if poi is not None:
                pois.append(poi)
    return pois
