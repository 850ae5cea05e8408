"""
Shared storage for active combat sessions.

Keeps the latest CombatState of each encounter opened through the HTTP API,
keyed by combat id. The resolver itself never touches this module; states
are swapped in after every resolved round. Finished encounters stay readable
until they are pruned.
"""
from typing import Dict, List, Optional
import logging
import time

from questmap.core.combat_resolver import CombatState
from questmap.core.errors import CombatNotFoundError

logger = logging.getLogger(__name__)


# In-memory storage for active combat sessions
active_combats: Dict[str, CombatState] = {}  # combat_id -> latest CombatState
finished_at: Dict[str, float] = {}           # combat_id -> monotonic time the outcome turned terminal


def save_combat(state: CombatState) -> CombatState:
    """Store a state as the latest for its combat id."""
    active_combats[state.combat_id] = state
    if state.is_over:
        finished_at.setdefault(state.combat_id, time.monotonic())
    return state


def get_combat(combat_id: str) -> CombatState:
    """
    Get the latest state of a combat.

    Raises:
        CombatNotFoundError: If no combat has this id
    """
    state = active_combats.get(combat_id)
    if state is None:
        raise CombatNotFoundError(combat_id)
    return state


def discard_combat(combat_id: str) -> CombatState:
    """
    Remove a combat and return its last state.

    Raises:
        CombatNotFoundError: If no combat has this id
    """
    state = active_combats.pop(combat_id, None)
    finished_at.pop(combat_id, None)
    if state is None:
        raise CombatNotFoundError(combat_id)
    logger.debug(f"Discarded combat {combat_id} at round {state.round} ({state.outcome.value})")
    return state


def prune_finished(max_age: float, now: Optional[float] = None) -> List[str]:
    """
    Drop finished combats older than max_age seconds.

    Ongoing combats are never pruned.

    Returns:
        Ids of the dropped combats
    """
    now = time.monotonic() if now is None else now
    expired = [combat_id for combat_id, ended in finished_at.items() if now - ended >= max_age]
    for combat_id in expired:
        active_combats.pop(combat_id, None)
        del finished_at[combat_id]

    if expired:
        logger.debug(f"Pruned {len(expired)} finished combat(s)")
    return expired


def list_combat_ids() -> List[str]:
    """Ids of every stored combat."""
    return list(active_combats)


def clear_combats() -> None:
    """Drop every stored combat."""
    active_combats.clear()
    finished_at.clear()
