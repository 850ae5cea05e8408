"""
QuestMap Engine - Test Configuration and Fixtures
Shared test utilities and fixtures for pytest.
"""
import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from questmap.core import combat_storage
from questmap.core.combat_resolver import CharacterStats
from questmap.core.encounter_generator import MonsterInstance, MonsterTier
from questmap.core.world import POI, POICategory


WORLD_SEED = 12345


# ==================== World Fixtures ====================

@pytest.fixture
def world_seed() -> int:
    """Seed of the reference world."""
    return WORLD_SEED


@pytest.fixture
def monster_poi() -> POI:
    """Monster POI without its own seed, at the reference coordinate."""
    return POI(coordinate=(10, 20), category=POICategory.MONSTER, display_name="Goblin")


@pytest.fixture
def make_poi():
    """Factory for POIs of any category."""
    def _make(category: POICategory, x: int = 0, y: int = 0, seed=None, name: str = "Test POI"):
        return POI(coordinate=(x, y), category=category, display_name=name, optional_seed=seed)
    return _make


# ==================== Combat Fixtures ====================

@pytest.fixture
def character() -> CharacterStats:
    """Mid-strength level 1 character."""
    return CharacterStats(level=1, attack_bonus=3, damage=10, armor=5, max_hp=40)


@pytest.fixture
def goblin() -> MonsterInstance:
    """Common level 1 monster with fixed stats."""
    return MonsterInstance(
        id="monster-test",
        name="Goblin",
        tier=MonsterTier.COMMON,
        level=1,
        health=30,
        damage=5,
        armor=9,
        xp_reward=25,
        gold_reward=15,
    )


@pytest.fixture
def make_monster():
    """Factory for monsters with custom stats."""
    def _make(health: int = 30, damage: int = 5, armor: int = 9, level: int = 1, tier=MonsterTier.COMMON):
        return MonsterInstance(
            id="monster-custom",
            name="Custom Monster",
            tier=tier,
            level=level,
            health=health,
            damage=damage,
            armor=armor,
            xp_reward=25 * level,
            gold_reward=10 * level,
        )
    return _make


# ==================== Cleanup Fixtures ====================

@pytest.fixture(autouse=True)
def cleanup_combats():
    """Drop stored combats after each test."""
    yield
    combat_storage.clear_combats()


# ==================== Test Categories ====================

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow running tests")
    config.addinivalue_line("markers", "combat: Combat system tests")
    config.addinivalue_line("markers", "world: World generation tests")
