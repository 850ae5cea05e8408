"""Tests for the in-memory combat storage."""
import time

import pytest

from questmap.core import combat_storage
from questmap.core.combat_resolver import CombatAction, resolve_round, start_combat
from questmap.core.errors import CombatNotFoundError


@pytest.fixture
def ongoing(character, goblin):
    """Stored combat that has not ended."""
    return combat_storage.save_combat(start_combat(character, goblin, seed=5, combat_id="ongoing"))


@pytest.fixture
def fled(character, goblin):
    """Stored combat that ended by fleeing."""
    state = start_combat(character, goblin, seed=5, combat_id="fled")
    state, _ = resolve_round(state, CombatAction.FLEE)
    return combat_storage.save_combat(state)


@pytest.mark.combat
class TestCombatStorage:
    """Tests for saving, reading and dropping combats."""

    def test_save_and_get(self, ongoing):
        assert combat_storage.get_combat("ongoing") is ongoing
        assert combat_storage.list_combat_ids() == ["ongoing"]

    def test_missing_combat(self):
        with pytest.raises(CombatNotFoundError):
            combat_storage.get_combat("nope")
        with pytest.raises(CombatNotFoundError):
            combat_storage.discard_combat("nope")

    def test_discard(self, fled):
        combat_storage.discard_combat("fled")
        assert "fled" not in combat_storage.active_combats
        assert "fled" not in combat_storage.finished_at

    def test_finish_time_recorded_once(self, fled):
        """Saving a finished state again keeps its original finish time."""
        ended = combat_storage.finished_at["fled"]
        combat_storage.save_combat(fled)
        assert combat_storage.finished_at["fled"] == ended


@pytest.mark.combat
class TestPruneFinished:
    """Tests for expiring finished combats."""

    def test_old_finished_combats_dropped(self, ongoing, fled):
        """Finished combats past their age are removed; ongoing ones stay."""
        dropped = combat_storage.prune_finished(600, now=time.monotonic() + 601)
        assert dropped == ["fled"]
        assert combat_storage.list_combat_ids() == ["ongoing"]
        assert combat_storage.finished_at == {}

    def test_recent_finished_combats_kept(self, fled):
        """A combat that just ended stays readable."""
        assert combat_storage.prune_finished(600) == []
        assert combat_storage.get_combat("fled") is fled

    def test_zero_age_drops_immediately(self, ongoing, fled):
        assert combat_storage.prune_finished(0) == ["fled"]
        assert combat_storage.get_combat("ongoing") is ongoing
