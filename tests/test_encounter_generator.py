"""Tests for the encounter generation system."""
import pytest

from questmap.core.encounter_generator import (
    DungeonInstance,
    EncounterGenerator,
    EncounterKind,
    MerchantInstance,
    MonsterInstance,
    MonsterTier,
    TIER_MULTIPLIERS,
    TRAPS,
    TreasureInstance,
    WanderingEncounter,
    get_encounter_generator,
    materialize,
    monster_stats,
    roll_tier,
    roll_wandering_encounter,
)
from questmap.core.errors import ErrorCode, OutOfRangeSeedError, UnsupportedCategoryError
from questmap.core.dice import roll_d20
from questmap.core.rng import SeededRNG, derive_seed
from questmap.core.world import POI, POICategory, scatter_pois

TIER_ORDER = [MonsterTier.COMMON, MonsterTier.UNCOMMON, MonsterTier.RARE, MonsterTier.LEGENDARY]


class TestMonsterTables:
    """Tests for tier bands and stat scaling."""

    @pytest.mark.parametrize("roll,tier", [
        (0.0, MonsterTier.COMMON),
        (0.5, MonsterTier.COMMON),
        (0.51, MonsterTier.UNCOMMON),
        (0.75, MonsterTier.UNCOMMON),
        (0.8, MonsterTier.RARE),
        (0.9, MonsterTier.RARE),
        (0.95, MonsterTier.LEGENDARY),
    ])
    def test_roll_tier(self, roll, tier):
        """Tier bands are exclusive at their lower edge."""
        assert roll_tier(roll) == tier

    def test_level_one_stats(self):
        """Base stats scaled by the tier multipliers, floored."""
        assert monster_stats(1, MonsterTier.COMMON) == (30, 5, 9)
        assert monster_stats(1, MonsterTier.UNCOMMON) == (36, 5, 9)
        assert monster_stats(1, MonsterTier.RARE) == (45, 7, 11)
        assert monster_stats(1, MonsterTier.LEGENDARY) == (60, 9, 13)

    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 10])
    def test_tier_monotonicity(self, level):
        """A rarer tier never has lower stats than a more common one."""
        stats = [monster_stats(level, tier) for tier in TIER_ORDER]
        for lower, higher in zip(stats, stats[1:]):
            assert all(h >= l for l, h in zip(lower, higher))

    def test_every_tier_has_multipliers(self):
        """The multiplier table covers all tiers."""
        assert set(TIER_MULTIPLIERS) == set(MonsterTier)


class TestMaterializeMonster:
    """Tests for monster POIs."""

    def test_reference_scenario_reproduces(self, monster_poi, world_seed):
        """Two independent materializations of the same POI are equal."""
        first = EncounterGenerator().materialize(monster_poi, world_seed)
        second = EncounterGenerator().materialize(monster_poi, world_seed)
        assert isinstance(first, MonsterInstance)
        assert first == second
        assert first.level == second.level
        assert first.tier == second.tier

    def test_derived_seed_used_without_poi_seed(self, monster_poi, world_seed):
        """With no POI seed the coordinate-derived seed is used."""
        generator = get_encounter_generator()
        seed = generator.effective_seed(monster_poi, world_seed)
        assert seed == derive_seed(world_seed, 10, 20)
        assert materialize(monster_poi, world_seed).id == f"monster-{seed}"

    def test_poi_seed_takes_precedence(self, make_poi):
        """A POI's own seed ignores the fallback seed."""
        poi = make_poi(POICategory.MONSTER, x=3, y=4, seed=777)
        assert materialize(poi, 1) == materialize(poi, 99999)

    def test_stats_consistent_with_tables(self, make_poi):
        """Generated monsters match the stat formulas and reward rules."""
        for seed in range(200):
            monster = materialize(make_poi(POICategory.MONSTER, seed=seed), 1)
            assert 1 <= monster.level <= 5
            assert (monster.health, monster.damage, monster.armor) == monster_stats(monster.level, monster.tier)
            assert monster.xp_reward == 25 * monster.level
            assert 10 * monster.level <= monster.gold_reward <= 10 * monster.level + 19
            assert monster.name == "Test POI"

    def test_all_tiers_appear(self, make_poi):
        """Across many seeds every tier shows up."""
        tiers = {materialize(make_poi(POICategory.MONSTER, seed=seed), 1).tier for seed in range(500)}
        assert tiers == set(MonsterTier)

    def test_invalid_seed_raises(self, make_poi, monster_poi):
        """Out-of-range POI and fallback seeds are rejected."""
        with pytest.raises(OutOfRangeSeedError):
            materialize(make_poi(POICategory.MONSTER, seed=-1), 1)
        with pytest.raises(OutOfRangeSeedError):
            materialize(monster_poi, 2 ** 31)


class TestMaterializeOtherCategories:
    """Tests for treasure, shop and dungeon POIs."""

    def test_treasure(self, make_poi):
        """Treasure stays inside its gold and xp ranges."""
        items = set()
        for seed in range(200):
            treasure = materialize(make_poi(POICategory.TREASURE, seed=seed), 1)
            assert isinstance(treasure, TreasureInstance)
            assert 10 <= treasure.gold <= 59
            assert 5 <= treasure.xp <= 34
            items.add(treasure.item)
        assert None in items
        assert len(items) > 1

    def test_shop(self, make_poi):
        """Shops become merchants with a bounded discount."""
        for seed in range(100):
            merchant = materialize(make_poi(POICategory.SHOP, seed=seed), 1)
            assert isinstance(merchant, MerchantInstance)
            assert 5 <= merchant.discount_percent <= 24

    def test_dungeon(self, make_poi):
        """Dungeons carry a difficulty and a trap scaled by it."""
        trap_damage = {(name, base, per_level) for name, base, per_level, _ in TRAPS}
        for seed in range(100):
            dungeon = materialize(make_poi(POICategory.DUNGEON, seed=seed), 1)
            assert isinstance(dungeon, DungeonInstance)
            assert 1 <= dungeon.difficulty <= 3
            assert any(
                dungeon.trap.name == name and dungeon.trap.damage == base + per_level * dungeon.difficulty
                for name, base, per_level in trap_damage
            )

    @pytest.mark.parametrize("category", [
        POICategory.NPC,
        POICategory.QUEST,
        POICategory.GUILD,
        POICategory.CASTLE,
    ])
    def test_unsupported_categories(self, make_poi, category):
        """Categories without a generator raise instead of substituting."""
        with pytest.raises(UnsupportedCategoryError) as exc_info:
            materialize(make_poi(category, seed=5), 1)
        assert exc_info.value.code == ErrorCode.ENCOUNTER_UNSUPPORTED_CATEGORY
        assert exc_info.value.details["category"] == category.value

    def test_supported_categories(self):
        """The dispatch table lists exactly the generated categories."""
        assert set(get_encounter_generator().supported_categories) == {
            POICategory.MONSTER,
            POICategory.TREASURE,
            POICategory.SHOP,
            POICategory.DUNGEON,
        }

    def test_to_dict(self, make_poi):
        """Instances serialize their enum values."""
        data = materialize(make_poi(POICategory.MONSTER, seed=42), 1).to_dict()
        assert data["tier"] in {tier.value for tier in MonsterTier}
        assert set(data) == {
            "id", "name", "tier", "level", "health", "damage", "armor", "xp_reward", "gold_reward",
        }


class TestWanderingEncounters:
    """Tests for per-move random encounters."""

    def test_deterministic(self, world_seed):
        """Same cell, step and level give the same result."""
        for step in range(20):
            assert roll_wandering_encounter(world_seed, 4, 9, 3, step=step) == \
                roll_wandering_encounter(world_seed, 4, 9, 3, step=step)

    def test_zero_chance(self, world_seed):
        """Nothing ever triggers at chance zero."""
        assert all(roll_wandering_encounter(world_seed, x, 0, 1, chance=0.0) is None for x in range(50))

    def test_certain_encounter(self, world_seed):
        """At chance one every move triggers an encounter."""
        kinds = set()
        for x in range(300):
            encounter = roll_wandering_encounter(world_seed, x, 1, 2, chance=1.0)
            assert isinstance(encounter, WanderingEncounter)
            kinds.add(encounter.kind)
        assert kinds == set(EncounterKind)

    def test_battle_level_near_player(self, world_seed):
        """Wandering monsters are within one level of the player."""
        for x in range(300):
            encounter = roll_wandering_encounter(world_seed, x, 2, 4, chance=1.0)
            if encounter.kind == EncounterKind.BATTLE:
                assert 3 <= encounter.payload.level <= 5

    def test_trigger_rate(self, world_seed):
        """About fifteen percent of moves trigger something."""
        hits = sum(
            roll_wandering_encounter(world_seed, x, y, 1) is not None
            for x in range(40)
            for y in range(25)
        )
        assert 80 <= hits <= 220

    def test_invalid_level(self, world_seed):
        """Player level must be positive."""
        with pytest.raises(ValueError):
            roll_wandering_encounter(world_seed, 0, 0, 0)

    def test_to_dict(self, world_seed):
        """Serialized encounters carry their kind and payload."""
        encounter = roll_wandering_encounter(world_seed, 1, 1, 1, chance=1.0)
        data = encounter.to_dict()
        assert data["kind"] == encounter.kind.value
        assert isinstance(data["data"], dict)


class TestScatteredPoiEncounters:
    """Tests for encounters materialized from scattered POIs."""

    @pytest.fixture
    def scattered(self, world_seed):
        """Every cell within ten of the origin, grouped by category."""
        by_category = {}
        for poi in scatter_pois(world_seed, 0, 0, radius=10, spawn_chance=1.0):
            by_category.setdefault(poi.category, []).append(poi)
        return by_category

    def test_monster_levels_and_tiers_vary(self, scattered, world_seed):
        """Placement draws do not leak into the monster's level or tier."""
        monsters = [materialize(poi, world_seed) for poi in scattered[POICategory.MONSTER]]
        assert {monster.level for monster in monsters} == {1, 2, 3, 4, 5}
        assert {monster.tier for monster in monsters} == set(MonsterTier)

    def test_treasure_gold_spread(self, scattered, world_seed):
        """Scattered treasure covers most of the gold range."""
        gold = [materialize(poi, world_seed).gold for poi in scattered[POICategory.TREASURE]]
        assert max(gold) - min(gold) >= 30

    def test_shop_discount_spread(self, scattered, world_seed):
        """Scattered shops cover most of the discount range."""
        discounts = [materialize(poi, world_seed).discount_percent for poi in scattered[POICategory.SHOP]]
        assert max(discounts) - min(discounts) >= 10

    def test_poi_seed_is_not_the_terrain_seed(self, world_seed):
        """A scattered POI's seed differs from the cell's terrain stream."""
        for poi in scatter_pois(world_seed, 0, 0, radius=3, spawn_chance=1.0):
            x, y = poi.coordinate
            assert poi.optional_seed != derive_seed(world_seed, x, y)


class TestCombatSeed:
    """Tests for the default combat dice seed."""

    def test_deterministic(self, monster_poi, world_seed):
        """Same POI, same combat seed."""
        generator = get_encounter_generator()
        assert generator.combat_seed(monster_poi, world_seed) == generator.combat_seed(monster_poi, world_seed)

    def test_differs_from_monster_seed(self, monster_poi, world_seed):
        """The dice never replay the stream that built the monster."""
        generator = get_encounter_generator()
        assert generator.combat_seed(monster_poi, world_seed) != generator.effective_seed(monster_poi, world_seed)

    def test_opening_roll_not_tied_to_level(self, world_seed):
        """First attack rolls spread over the die whatever the monster level."""
        generator = get_encounter_generator()
        rolls_by_level = {}
        for x in range(60):
            poi = POI(coordinate=(x, 0), category=POICategory.MONSTER, display_name="Wolf")
            monster = materialize(poi, world_seed)
            opening = roll_d20(SeededRNG(generator.combat_seed(poi, world_seed))).roll
            rolls_by_level.setdefault(monster.level, []).append(opening)

        assert any(roll > 4 for roll in rolls_by_level[1])
        assert any(roll < 17 for roll in rolls_by_level[5])
        all_rolls = {roll for rolls in rolls_by_level.values() for roll in rolls}
        assert len(all_rolls) >= 12
