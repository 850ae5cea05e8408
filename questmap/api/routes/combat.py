"""
Combat API routes.

Opens an encounter against a materialized monster, then resolves it one
round at a time. The latest state of each encounter is kept in
combat_storage; the resolver returns a fresh state every round.
"""
from fastapi import APIRouter
from pydantic import BaseModel, Field
from typing import Optional
import logging

from questmap.api.routes.encounters import PlayerPosition, PoiRequest, ensure_in_range
from questmap.config import get_settings
from questmap.core import combat_storage
from questmap.core.combat_resolver import (
    CharacterStats,
    auto_resolve,
    resolve_round,
    start_combat,
)
from questmap.core.encounter_generator import MonsterInstance, get_encounter_generator
from questmap.core.errors import InvalidCombatStateError, ValidationError

router = APIRouter()
logger = logging.getLogger(__name__)


# =============================================================================
# Request/Response Models
# =============================================================================

class CharacterStatsRequest(BaseModel):
    """Combat snapshot of the character entering the fight."""
    level: int = Field(1, ge=1)
    attack_bonus: int = Field(0, ge=-10, le=30)
    damage: int = Field(..., ge=1)
    armor: int = Field(0, ge=0)
    max_hp: int = Field(..., ge=1)

    def to_stats(self) -> CharacterStats:
        return CharacterStats(
            level=self.level,
            attack_bonus=self.attack_bonus,
            damage=self.damage,
            armor=self.armor,
            max_hp=self.max_hp,
        )


class StartCombatRequest(BaseModel):
    """Request to start combat against the monster behind a POI."""
    character: CharacterStatsRequest
    poi: PoiRequest
    character_hp: Optional[int] = Field(None, description="Current HP; defaults to max_hp")
    world_seed: Optional[int] = None
    combat_seed: Optional[int] = Field(None, description="Dice seed; derived from the monster's seed when omitted")
    player: Optional[PlayerPosition] = Field(None, description="When given, the POI must be within interaction range")


class RoundRequest(BaseModel):
    """Request to resolve one round."""
    action: str = Field("attack", description="attack or flee")


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/start")
async def start(request: StartCombatRequest):
    """Materialize the monster and open a new encounter."""
    settings = get_settings()
    world_seed = settings.WORLD_SEED if request.world_seed is None else request.world_seed

    poi = request.poi.to_poi()
    ensure_in_range(request.player, poi)
    generator = get_encounter_generator()
    monster = generator.materialize(poi, world_seed)
    if not isinstance(monster, MonsterInstance):
        raise ValidationError("poi.category", f"Cannot fight a '{poi.category.value}' POI", poi.category.value)

    seed = request.combat_seed
    if seed is None:
        seed = generator.combat_seed(poi, world_seed)

    state = start_combat(
        request.character.to_stats(),
        monster,
        seed,
        character_hp=request.character_hp,
    )
    combat_storage.prune_finished(settings.FINISHED_COMBAT_TTL)
    combat_storage.save_combat(state)
    logger.info(f"Combat {state.combat_id} opened at {poi.coordinate} against {monster.name}")

    return {
        "combat_id": state.combat_id,
        "state": state.to_dict(),
    }


@router.post("/{combat_id}/round")
async def play_round(combat_id: str, request: RoundRequest):
    """Resolve one round with the chosen action."""
    state = combat_storage.get_combat(combat_id)
    new_state, results = resolve_round(state, request.action.lower())
    combat_storage.save_combat(new_state)

    return {
        "combat_id": combat_id,
        "results": [result.to_dict() for result in results],
        "state": new_state.to_dict(),
    }


@router.post("/{combat_id}/auto")
async def auto_play(combat_id: str):
    """Attack every round until the encounter ends or the round limit is hit."""
    state = combat_storage.get_combat(combat_id)
    if state.is_over:
        raise InvalidCombatStateError(
            f"Combat already ended in {state.outcome.value}",
            outcome=state.outcome.value,
        )

    new_state = auto_resolve(state, max_rounds=get_settings().MAX_COMBAT_ROUNDS)
    combat_storage.save_combat(new_state)

    return {
        "combat_id": combat_id,
        "results": [result.to_dict() for result in new_state.log[len(state.log):]],
        "state": new_state.to_dict(),
    }


@router.get("/{combat_id}")
async def get_combat(combat_id: str):
    """Current state of an encounter."""
    state = combat_storage.get_combat(combat_id)
    return {"combat_id": combat_id, "state": state.to_dict()}


@router.delete("/{combat_id}")
async def abandon_combat(combat_id: str):
    """Drop an encounter, finished or not."""
    state = combat_storage.discard_combat(combat_id)
    return {
        "combat_id": combat_id,
        "abandoned": True,
        "outcome": state.outcome.value,
    }
