"""
Combat Resolver.

Turn-based state machine for a single character fighting a generated
monster. Each call resolves one round and returns a new CombatState; the
state passed in is never modified, so an encounter can be replayed from any
earlier state and the same seed.

    ongoing -> victory | defeat | fled
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Dict, Any, Tuple, Union
import logging
import uuid

from questmap.core.dice import roll_d20
from questmap.core.encounter_generator import MonsterInstance
from questmap.core.errors import InvalidCombatStateError, ValidationError
from questmap.core.rng import SeededRNG, validate_seed

logger = logging.getLogger(__name__)

# Every full point of this much armor absorbs one point of damage
ARMOR_MITIGATION_DIVISOR = 4
CRITICAL_MULTIPLIER = 2
MIN_HIT_DAMAGE = 1
DEFAULT_MAX_ROUNDS = 1000


class CombatOutcome(str, Enum):
    """State of an encounter."""
    ONGOING = "ongoing"
    VICTORY = "victory"
    DEFEAT = "defeat"
    FLED = "fled"


class CombatAction(str, Enum):
    """Actions a character can choose at the start of a round."""
    ATTACK = "attack"
    FLEE = "flee"


class Actor(str, Enum):
    """Who acted in a round result."""
    CHARACTER = "character"
    MONSTER = "monster"


@dataclass(frozen=True)
class CharacterStats:
    """Combat snapshot of the active character."""
    level: int
    attack_bonus: int
    damage: int
    armor: int
    max_hp: int

    def __post_init__(self):
        if self.level < 1:
            raise ValidationError("level", "Character level must be at least 1", self.level)
        if self.damage < 1:
            raise ValidationError("damage", "Character damage must be positive", self.damage)
        if self.armor < 0:
            raise ValidationError("armor", "Character armor cannot be negative", self.armor)
        if self.max_hp < 1:
            raise ValidationError("max_hp", "Character max HP must be positive", self.max_hp)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CharacterStats":
        """Build from a character service payload."""
        return cls(
            level=data.get("level", 1),
            attack_bonus=data.get("attack_bonus", 0),
            damage=data["damage"],
            armor=data.get("armor", 0),
            max_hp=data["max_hp"],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "level": self.level,
            "attack_bonus": self.attack_bonus,
            "damage": self.damage,
            "armor": self.armor,
            "max_hp": self.max_hp,
        }


@dataclass(frozen=True)
class RoundResult:
    """Immutable record of one action within a round."""
    round: int
    actor: Actor
    action: CombatAction
    roll: Optional[int]
    hit: bool
    critical: bool
    damage: int
    character_hp: int
    monster_hp: int

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "round": self.round,
            "actor": self.actor.value,
            "action": self.action.value,
            "roll": self.roll,
            "hit": self.hit,
            "critical": self.critical,
            "damage": self.damage,
            "character_hp": self.character_hp,
            "monster_hp": self.monster_hp,
        }


@dataclass(frozen=True)
class CombatRewards:
    """Rewards earned on victory, applied by the caller."""
    xp: int
    gold: int

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {"xp": self.xp, "gold": self.gold}


@dataclass(frozen=True)
class CombatState:
    """
    Complete state of one encounter.

    Owned by a single caller; each resolved round yields a new value.
    """
    combat_id: str
    character: CharacterStats
    monster: MonsterInstance
    character_hp: int
    monster_hp: int
    rng_state: int
    round: int = 1
    log: Tuple[RoundResult, ...] = ()
    outcome: CombatOutcome = CombatOutcome.ONGOING
    rewards: Optional[CombatRewards] = None

    @property
    def is_over(self) -> bool:
        """True once a terminal outcome has been reached."""
        return self.outcome != CombatOutcome.ONGOING

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "combat_id": self.combat_id,
            "round": self.round,
            "outcome": self.outcome.value,
            "character": self.character.to_dict(),
            "character_hp": self.character_hp,
            "monster": self.monster.to_dict(),
            "monster_hp": self.monster_hp,
            "log": [entry.to_dict() for entry in self.log],
            "rewards": self.rewards.to_dict() if self.rewards else None,
        }


@dataclass(frozen=True)
class Strike:
    """Outcome of a single attack roll."""
    roll: int
    hit: bool
    critical: bool
    damage: int


def mitigated_damage(damage: int, armor: int, critical: bool = False) -> int:
    """Damage after armor mitigation; any hit deals at least one point."""
    dealt = max(MIN_HIT_DAMAGE, damage - armor // ARMOR_MITIGATION_DIVISOR)
    if critical:
        dealt *= CRITICAL_MULTIPLIER
    return dealt


def resolve_strike(rng: SeededRNG, attack_bonus: int, damage: int, defender_armor: int) -> Strike:
    """
    Roll one attack.

    A natural 1 always misses and a natural 20 always hits for double
    damage. Otherwise the attack hits when the total reaches the defender's
    armor.
    """
    d20 = roll_d20(rng, modifier=attack_bonus)

    if d20.natural_1:
        return Strike(roll=d20.roll, hit=False, critical=False, damage=0)

    critical = d20.natural_20
    if not critical and d20.total < defender_armor:
        return Strike(roll=d20.roll, hit=False, critical=False, damage=0)

    return Strike(
        roll=d20.roll,
        hit=True,
        critical=critical,
        damage=mitigated_damage(damage, defender_armor, critical),
    )


def start_combat(
    character: CharacterStats,
    monster: MonsterInstance,
    seed: int,
    character_hp: Optional[int] = None,
    combat_id: Optional[str] = None,
) -> CombatState:
    """
    Open an encounter between a character and a monster.

    Args:
        character: Combat snapshot of the character
        monster: Materialized monster
        seed: Seed of the combat dice stream
        character_hp: Current HP if the character is already hurt (defaults to max)
        combat_id: Identifier to use instead of a generated one

    Raises:
        OutOfRangeSeedError: If the seed is invalid
        ValidationError: If the character is already down
    """
    validate_seed(seed)

    hp = character.max_hp if character_hp is None else min(character_hp, character.max_hp)
    if hp <= 0:
        raise ValidationError("character_hp", "A character with no HP cannot start combat", character_hp)

    state = CombatState(
        combat_id=combat_id or str(uuid.uuid4()),
        character=character,
        monster=monster,
        character_hp=hp,
        monster_hp=monster.health,
        rng_state=seed,
    )
    logger.debug(f"Combat {state.combat_id} started against {monster.name} ({monster.tier.value}, level {monster.level})")
    return state


def resolve_round(
    state: CombatState,
    action: Union[CombatAction, str],
) -> Tuple[CombatState, List[RoundResult]]:
    """
    Resolve one round of combat.

    The character acts first. If the monster survives it strikes back.
    Fleeing ends the encounter immediately with no damage exchanged.

    Args:
        state: Current combat state (left untouched)
        action: "attack" or "flee"

    Returns:
        Tuple of (new state, round results appended this round)

    Raises:
        InvalidCombatStateError: If combat is over or the action is unknown
    """
    if state.is_over:
        raise InvalidCombatStateError(
            f"Combat already ended in {state.outcome.value}",
            outcome=state.outcome.value,
        )

    try:
        action = CombatAction(action)
    except ValueError:
        raise InvalidCombatStateError(f"Unknown combat action: {action}")

    if action == CombatAction.FLEE:
        result = RoundResult(
            round=state.round,
            actor=Actor.CHARACTER,
            action=CombatAction.FLEE,
            roll=None,
            hit=False,
            critical=False,
            damage=0,
            character_hp=state.character_hp,
            monster_hp=state.monster_hp,
        )
        logger.info(f"Combat {state.combat_id}: character fled in round {state.round}")
        return replace(state, log=state.log + (result,), outcome=CombatOutcome.FLED), [result]

    rng = SeededRNG(state.rng_state)
    character = state.character
    monster = state.monster
    results: List[RoundResult] = []

    # Character attacks
    strike = resolve_strike(rng, character.attack_bonus, character.damage, monster.armor)
    monster_hp = max(0, state.monster_hp - strike.damage)
    results.append(RoundResult(
        round=state.round,
        actor=Actor.CHARACTER,
        action=CombatAction.ATTACK,
        roll=strike.roll,
        hit=strike.hit,
        critical=strike.critical,
        damage=strike.damage,
        character_hp=state.character_hp,
        monster_hp=monster_hp,
    ))

    if monster_hp <= 0:
        rewards = CombatRewards(xp=monster.xp_reward, gold=monster.gold_reward)
        logger.info(f"Combat {state.combat_id}: victory over {monster.name} in round {state.round}")
        new_state = replace(
            state,
            monster_hp=0,
            rng_state=rng.state,
            log=state.log + tuple(results),
            outcome=CombatOutcome.VICTORY,
            rewards=rewards,
        )
        return new_state, results

    # Monster strikes back
    counter = resolve_strike(rng, monster.level, monster.damage, character.armor)
    character_hp = max(0, state.character_hp - counter.damage)
    results.append(RoundResult(
        round=state.round,
        actor=Actor.MONSTER,
        action=CombatAction.ATTACK,
        roll=counter.roll,
        hit=counter.hit,
        critical=counter.critical,
        damage=counter.damage,
        character_hp=character_hp,
        monster_hp=monster_hp,
    ))

    if character_hp <= 0:
        outcome = CombatOutcome.DEFEAT
        next_round = state.round
        logger.info(f"Combat {state.combat_id}: defeated by {monster.name} in round {state.round}")
    else:
        outcome = CombatOutcome.ONGOING
        next_round = state.round + 1

    new_state = replace(
        state,
        character_hp=character_hp,
        monster_hp=monster_hp,
        rng_state=rng.state,
        round=next_round,
        log=state.log + tuple(results),
        outcome=outcome,
    )
    return new_state, results


def auto_resolve(state: CombatState, max_rounds: int = DEFAULT_MAX_ROUNDS) -> CombatState:
    """
    Attack every round until the encounter ends or max_rounds are played.

    The returned state is still ongoing only if the round limit was hit.
    """
    for _ in range(max_rounds):
        if state.is_over:
            break
        state, _ = resolve_round(state, CombatAction.ATTACK)
    return state
