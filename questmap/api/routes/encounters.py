"""
Encounter API routes.

Endpoints for:
- Materializing the encounter behind a POI
- Wandering encounter checks while the player moves
"""
from fastapi import APIRouter
from pydantic import BaseModel, Field
from typing import Optional

from questmap.config import get_settings
from questmap.core.encounter_generator import get_encounter_generator
from questmap.core.errors import UnsupportedCategoryError, ValidationError
from questmap.core.world import (
    POI,
    POICategory,
    classify,
    clamp_move,
    grid_distance,
    step_cost,
    within_interaction_range,
)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class PoiRequest(BaseModel):
    """A point of interest as supplied by the world-content service."""
    x: int
    y: int
    category: str = Field(..., description="monster, npc, shop, treasure, dungeon, quest, guild, castle")
    display_name: str = Field("", max_length=100)
    seed: Optional[int] = Field(None, description="POI seed; derived from the world seed when omitted")
    poi_id: Optional[str] = None

    def to_poi(self) -> POI:
        try:
            category = POICategory(self.category.lower())
        except ValueError:
            raise UnsupportedCategoryError(self.category)
        return POI(
            coordinate=(self.x, self.y),
            category=category,
            display_name=self.display_name or category.value.title(),
            optional_seed=self.seed,
            poi_id=self.poi_id,
        )


class PlayerPosition(BaseModel):
    """Cell the player currently stands on."""
    x: int
    y: int


class MaterializeRequest(BaseModel):
    """Request to materialize a POI."""
    poi: PoiRequest
    world_seed: Optional[int] = None
    player: Optional[PlayerPosition] = Field(None, description="When given, the POI must be within interaction range")


class WanderingCheckRequest(BaseModel):
    """Request to roll for a wandering encounter after a move."""
    x: int
    y: int
    player_level: int = Field(1, ge=1, le=100)
    step: int = Field(0, ge=0, description="Movement counter of the player")
    world_seed: Optional[int] = None
    origin: Optional[PlayerPosition] = Field(None, description="When given, the move is clamped to the per-step limit")


def ensure_in_range(player: Optional[PlayerPosition], poi: POI) -> None:
    """
    Reject interactions with POIs too far from the player.

    Raises:
        ValidationError: If the POI is outside the interaction range
    """
    if player is None:
        return
    position = (player.x, player.y)
    if not within_interaction_range(position, poi.coordinate):
        raise ValidationError(
            "poi",
            f"POI at {poi.coordinate} is out of interaction range",
            grid_distance(position, poi.coordinate),
        )


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/materialize")
async def materialize_poi(request: MaterializeRequest):
    """
    Materialize the encounter behind a POI.

    The same POI and world seed always produce the same instance.
    """
    world_seed = get_settings().WORLD_SEED if request.world_seed is None else request.world_seed
    poi = request.poi.to_poi()
    ensure_in_range(request.player, poi)

    generator = get_encounter_generator()
    instance = generator.materialize(poi, world_seed)

    return {
        "poi_id": poi.id,
        "category": poi.category.value,
        "seed": generator.effective_seed(poi, world_seed),
        "instance": instance.to_dict(),
    }


@router.post("/wandering")
async def check_wandering_encounter(request: WanderingCheckRequest):
    """
    Roll for a random encounter on the destination cell of a move.

    Moves longer than the per-step limit are shortened first. A blocked
    destination triggers nothing.
    """
    settings = get_settings()
    world_seed = settings.WORLD_SEED if request.world_seed is None else request.world_seed

    x, y = request.x, request.y
    if request.origin is not None:
        x, y = clamp_move((request.origin.x, request.origin.y), (x, y))

    step = step_cost(classify(world_seed, x, y))
    encounter = None
    if step.allowed:
        encounter = get_encounter_generator().roll_wandering_encounter(
            world_seed,
            x,
            y,
            player_level=request.player_level,
            step=request.step,
            chance=settings.WANDERING_ENCOUNTER_CHANCE,
        )

    return {
        "destination": {"x": x, "y": y},
        "step": step.to_dict(),
        "encounter_occurred": encounter is not None,
        "encounter": encounter.to_dict() if encounter else None,
    }
