"""
Encounter generation system.

Materializes POIs into fully specified encounter instances (monsters,
treasure, merchants, dungeons) and rolls wandering encounters while the
player moves. Every value is drawn from a seeded stream, so the same POI and
seed always produce the same instance.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple, Union, Callable
import logging

from questmap.core.errors import UnsupportedCategoryError
from questmap.core.rng import SeededRNG, derive_seed, validate_seed
from questmap.core.world.poi import POI, POICategory

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================

class MonsterTier(str, Enum):
    """Rarity/power band multiplying a monster's base stats."""
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"


class EncounterKind(str, Enum):
    """Kinds of wandering encounter triggered by movement."""
    BATTLE = "battle"
    TREASURE = "treasure"
    TRAP = "trap"
    MERCHANT = "merchant"
    EVENT = "event"


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class MonsterInstance:
    """A generated monster, alive for a single combat."""
    id: str
    name: str
    tier: MonsterTier
    level: int
    health: int
    damage: int
    armor: int
    xp_reward: int
    gold_reward: int

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "tier": self.tier.value,
            "level": self.level,
            "health": self.health,
            "damage": self.damage,
            "armor": self.armor,
            "xp_reward": self.xp_reward,
            "gold_reward": self.gold_reward,
        }


@dataclass(frozen=True)
class TreasureInstance:
    """Gold, experience and maybe an item found in a chest."""
    id: str
    name: str
    gold: int
    xp: int
    item: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "gold": self.gold,
            "xp": self.xp,
            "item": self.item,
        }


@dataclass(frozen=True)
class MerchantInstance:
    """A merchant's offer for this visit."""
    id: str
    name: str
    discount_percent: int
    special_item: bool

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "discount_percent": self.discount_percent,
            "special_item": self.special_item,
        }


@dataclass(frozen=True)
class TrapInstance:
    """A trap and the damage it deals when sprung."""
    name: str
    damage: int
    effect: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {"name": self.name, "damage": self.damage, "effect": self.effect}


@dataclass(frozen=True)
class DungeonInstance:
    """A dungeon entrance with its difficulty and the trap guarding it."""
    id: str
    name: str
    difficulty: int
    trap: TrapInstance

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "difficulty": self.difficulty,
            "trap": self.trap.to_dict(),
        }


@dataclass(frozen=True)
class EventInstance:
    """A narrative event offering the player a choice."""
    description: str
    choices: Tuple[str, ...] = ("accept", "decline", "investigate")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {"description": self.description, "choices": list(self.choices)}


EncounterInstance = Union[MonsterInstance, TreasureInstance, MerchantInstance, DungeonInstance]


@dataclass(frozen=True)
class WanderingEncounter:
    """Encounter triggered by a movement step."""
    kind: EncounterKind
    payload: Union[MonsterInstance, TreasureInstance, TrapInstance, MerchantInstance, EventInstance]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {"kind": self.kind.value, "data": self.payload.to_dict()}


# =============================================================================
# TABLES
# =============================================================================

# Tier bands checked from rarest to most common: (roll must exceed, tier)
TIER_BANDS: List[Tuple[float, MonsterTier]] = [
    (0.90, MonsterTier.LEGENDARY),
    (0.75, MonsterTier.RARE),
    (0.50, MonsterTier.UNCOMMON),
]

# Percent multipliers applied to (health, damage, armor)
TIER_MULTIPLIERS: Dict[MonsterTier, Tuple[int, int, int]] = {
    MonsterTier.COMMON: (100, 100, 100),
    MonsterTier.UNCOMMON: (120, 110, 110),
    MonsterTier.RARE: (150, 140, 130),
    MonsterTier.LEGENDARY: (200, 180, 150),
}

MAX_POI_MONSTER_LEVEL = 5
XP_PER_MONSTER_LEVEL = 25
GOLD_PER_MONSTER_LEVEL = 10
GOLD_BONUS_RANGE = (0, 19)

TREASURE_GOLD_RANGE = (10, 59)
TREASURE_XP_RANGE = (5, 34)
TREASURE_ITEM_THRESHOLD = 0.7
TREASURE_ITEMS = [
    "Healing Potion",
    "Gold Coins",
    "Precious Gem",
    "Magic Scroll",
    "Enchanted Ring",
]

MERCHANT_DISCOUNT_RANGE = (5, 24)

DUNGEON_DIFFICULTY_RANGE = (1, 3)

# (name, base damage, damage per level, effect)
TRAPS: List[Tuple[str, int, int, Optional[str]]] = [
    ("Spike Trap", 5, 2, None),
    ("Fire Trap", 8, 2, None),
    ("Poison Trap", 4, 1, "poison"),
    ("Pit Trap", 10, 3, None),
]

WANDERING_MONSTER_NAMES = ["Goblin", "Orc", "Skeleton", "Wolf", "Slime", "Bandit", "Giant Spider", "Kobold"]

WANDERING_EVENTS = [
    "A mysterious traveler offers a trade...",
    "You find an ancient altar...",
    "A fairy appears and offers a wish...",
    "You spot the tracks of a rare creature...",
    "A specter appears with a message...",
]

WANDERING_ENCOUNTER_WEIGHTS: List[Tuple[EncounterKind, int]] = [
    (EncounterKind.BATTLE, 50),
    (EncounterKind.TREASURE, 20),
    (EncounterKind.TRAP, 15),
    (EncounterKind.MERCHANT, 10),
    (EncounterKind.EVENT, 5),
]

DEFAULT_WANDERING_CHANCE = 0.15

# Keeps wandering rolls independent of the terrain/POI stream of the same cell
WANDERING_SALT = 0x2545F491

# Separates the combat dice stream from the stream that built the monster
COMBAT_SALT = 0x1B873593


# =============================================================================
# HELPERS
# =============================================================================

def roll_tier(roll: float) -> MonsterTier:
    """Map a tier roll in [0, 1) to its band."""
    for threshold, tier in TIER_BANDS:
        if roll > threshold:
            return tier
    return MonsterTier.COMMON


def monster_stats(level: int, tier: MonsterTier) -> Tuple[int, int, int]:
    """
    Base stats for a level scaled by the tier table.

    Returns:
        (health, damage, armor), each floored and positive
    """
    base_health = 20 + level * 10
    base_damage = 3 + level * 2
    base_armor = 8 + level

    health_pct, damage_pct, armor_pct = TIER_MULTIPLIERS[tier]
    return (
        base_health * health_pct // 100,
        base_damage * damage_pct // 100,
        base_armor * armor_pct // 100,
    )


def _build_monster(rng: SeededRNG, instance_id: str, name: str, level: int) -> MonsterInstance:
    tier = roll_tier(rng.next())
    health, damage, armor = monster_stats(level, tier)
    gold = GOLD_PER_MONSTER_LEVEL * level + rng.randint(*GOLD_BONUS_RANGE)

    return MonsterInstance(
        id=instance_id,
        name=name,
        tier=tier,
        level=level,
        health=health,
        damage=damage,
        armor=armor,
        xp_reward=XP_PER_MONSTER_LEVEL * level,
        gold_reward=gold,
    )


def _build_trap(rng: SeededRNG, level: int) -> TrapInstance:
    name, base, per_level, effect = rng.choice(TRAPS)
    return TrapInstance(name=name, damage=base + per_level * level, effect=effect)


def _weighted_select(rng: SeededRNG, table: List[Tuple[EncounterKind, int]]) -> EncounterKind:
    """Select an entry from table using weights."""
    total_weight = sum(weight for _, weight in table)
    roll = rng.randint(1, total_weight)

    cumulative = 0
    for kind, weight in table:
        cumulative += weight
        if roll <= cumulative:
            return kind

    return table[-1][0]


# =============================================================================
# ENCOUNTER GENERATOR
# =============================================================================

class EncounterGenerator:
    """
    Turns POIs into encounter instances.

    Holds no mutable state; one instance can serve any number of callers
    concurrently.
    """

    def __init__(self):
        self._handlers: Dict[POICategory, Callable[[POI, SeededRNG, str], EncounterInstance]] = {
            POICategory.MONSTER: self._materialize_monster,
            POICategory.TREASURE: self._materialize_treasure,
            POICategory.SHOP: self._materialize_merchant,
            POICategory.DUNGEON: self._materialize_dungeon,
        }

    @property
    def supported_categories(self) -> List[POICategory]:
        """Categories this generator can materialize."""
        return list(self._handlers)

    def effective_seed(self, poi: POI, fallback_seed: int) -> int:
        """The POI's own seed, or one derived from its coordinate."""
        validate_seed(fallback_seed)
        if poi.optional_seed is not None:
            return validate_seed(poi.optional_seed)
        x, y = poi.coordinate
        return derive_seed(fallback_seed, x, y)

    def combat_seed(self, poi: POI, fallback_seed: int) -> int:
        """Default dice seed for a fight against the monster behind a POI."""
        x, y = poi.coordinate
        return derive_seed(self.effective_seed(poi, fallback_seed) ^ COMBAT_SALT, x, y)

    def materialize(self, poi: POI, fallback_seed: int) -> EncounterInstance:
        """
        Materialize the encounter behind a POI.

        Args:
            poi: Point of interest to resolve
            fallback_seed: World seed used when the POI carries no seed

        Returns:
            Category-specific encounter instance

        Raises:
            UnsupportedCategoryError: If no generator exists for the category
            OutOfRangeSeedError: If either seed is outside [0, 2^31)
        """
        try:
            category = POICategory(poi.category)
        except ValueError:
            raise UnsupportedCategoryError(poi.category)

        handler = self._handlers.get(category)
        if handler is None:
            raise UnsupportedCategoryError(category)

        seed = self.effective_seed(poi, fallback_seed)
        instance = handler(poi, SeededRNG(seed), f"{category.value}-{seed}")

        logger.debug(f"Materialized {category.value} at {poi.coordinate} with seed={seed}")
        return instance

    def _materialize_monster(self, poi: POI, rng: SeededRNG, instance_id: str) -> MonsterInstance:
        level = max(1, int(rng.next() * MAX_POI_MONSTER_LEVEL) + 1)
        return _build_monster(rng, instance_id, poi.display_name, level)

    def _materialize_treasure(self, poi: POI, rng: SeededRNG, instance_id: str) -> TreasureInstance:
        gold = rng.randint(*TREASURE_GOLD_RANGE)
        xp = rng.randint(*TREASURE_XP_RANGE)
        item = None
        if rng.next() > TREASURE_ITEM_THRESHOLD:
            item = rng.choice(TREASURE_ITEMS)
        return TreasureInstance(id=instance_id, name=poi.display_name, gold=gold, xp=xp, item=item)

    def _materialize_merchant(self, poi: POI, rng: SeededRNG, instance_id: str) -> MerchantInstance:
        return MerchantInstance(
            id=instance_id,
            name=poi.display_name,
            discount_percent=rng.randint(*MERCHANT_DISCOUNT_RANGE),
            special_item=rng.next() > 0.5,
        )

    def _materialize_dungeon(self, poi: POI, rng: SeededRNG, instance_id: str) -> DungeonInstance:
        difficulty = rng.randint(*DUNGEON_DIFFICULTY_RANGE)
        return DungeonInstance(
            id=instance_id,
            name=poi.display_name,
            difficulty=difficulty,
            trap=_build_trap(rng, difficulty),
        )

    def roll_wandering_encounter(
        self,
        seed: int,
        x: int,
        y: int,
        player_level: int,
        step: int = 0,
        chance: float = DEFAULT_WANDERING_CHANCE,
    ) -> Optional[WanderingEncounter]:
        """
        Roll for a random encounter when a player moves onto a cell.

        Args:
            seed: World seed
            x, y: Destination cell
            player_level: Level used to scale monsters, traps and rewards
            step: Movement counter, so revisiting a cell can roll again
            chance: Probability that any encounter triggers

        Returns:
            WanderingEncounter, or None when nothing happens
        """
        validate_seed(seed)
        if player_level < 1:
            raise ValueError(f"Invalid player level: {player_level}")

        cell_seed = derive_seed(seed ^ WANDERING_SALT, x, y)
        rng = SeededRNG(derive_seed(cell_seed, step, 0))

        if rng.next() >= chance:
            return None

        kind = _weighted_select(rng, WANDERING_ENCOUNTER_WEIGHTS)
        instance_id = f"{kind.value}-{rng.state}"

        if kind == EncounterKind.BATTLE:
            level = max(1, player_level + rng.randint(-1, 1))
            name = rng.choice(WANDERING_MONSTER_NAMES)
            payload = _build_monster(rng, instance_id, name, level)
        elif kind == EncounterKind.TREASURE:
            gold = rng.randint(10, 50 * player_level + 9)
            xp = rng.randint(5, 20 * player_level + 4)
            item = rng.choice(TREASURE_ITEMS) if rng.next() > TREASURE_ITEM_THRESHOLD else None
            payload = TreasureInstance(id=instance_id, name="Hidden Cache", gold=gold, xp=xp, item=item)
        elif kind == EncounterKind.TRAP:
            payload = _build_trap(rng, player_level)
        elif kind == EncounterKind.MERCHANT:
            payload = MerchantInstance(
                id=instance_id,
                name="Traveling Merchant",
                discount_percent=rng.randint(*MERCHANT_DISCOUNT_RANGE),
                special_item=rng.next() > 0.5,
            )
        else:
            payload = EventInstance(description=rng.choice(WANDERING_EVENTS))

        logger.debug(f"Wandering encounter at ({x}, {y}) step={step}: {kind.value}")
        return WanderingEncounter(kind=kind, payload=payload)


# =============================================================================
# SINGLETON INSTANCE
# =============================================================================

_generator: Optional[EncounterGenerator] = None


def get_encounter_generator() -> EncounterGenerator:
    """Get the singleton encounter generator."""
    global _generator
    if _generator is None:
        _generator = EncounterGenerator()
    return _generator


def materialize(poi: POI, fallback_seed: int) -> EncounterInstance:
    """Materialize a POI with the shared generator."""
    return get_encounter_generator().materialize(poi, fallback_seed)


def roll_wandering_encounter(
    seed: int,
    x: int,
    y: int,
    player_level: int,
    step: int = 0,
    chance: float = DEFAULT_WANDERING_CHANCE,
) -> Optional[WanderingEncounter]:
    """Roll a wandering encounter with the shared generator."""
    return get_encounter_generator().roll_wandering_encounter(seed, x, y, player_level, step, chance)
