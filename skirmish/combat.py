"""
Attack resolution: hit chance from distance and cover, one roll to hit,
one roll for damage.

The resolver reads unit positions and grid cover but never mutates them;
the engine applies the returned AttackResult.
"""

import math
import random
import logging
from dataclasses import dataclass
from typing import Optional

from .config import Rules
from .errors import TargetOutOfRange
from .grid import Grid
from .units import Faction, Unit

logger = logging.getLogger(__name__)


@dataclass
class AttackResult:
    """Outcome of a single shot."""
    attacker_id: str
    target_id: str
    distance: int
    hit_chance: int
    roll: float
    hit: bool
    damage: int
    target_health_after: int

    @property
    def killed(self) -> bool:
        return self.target_health_after <= 0

    def to_dict(self) -> dict:
        return {
            "attacker_id": self.attacker_id,
            "target_id": self.target_id,
            "distance": self.distance,
            "hit_chance": self.hit_chance,
            "roll": round(self.roll, 2),
            "hit": self.hit,
            "damage": self.damage,
            "target_health_after": self.target_health_after,
            "killed": self.killed,
        }


def hit_chance(attacker_faction: Faction, distance: int, target_has_cover: bool,
               rules: Optional[Rules] = None) -> int:
    """Percent chance to hit, never below the rules' floor."""
    rules = rules or Rules()
    chance = rules.hit_base_for(attacker_faction) - distance * rules.distance_penalty
    if target_has_cover:
        chance -= rules.cover_penalty
    return max(rules.min_hit_chance, chance)


class CombatResolver:
    """Rolls attacks using one injectable random source."""

    def __init__(self, grid: Grid, rules: Optional[Rules] = None,
                 rng: Optional[random.Random] = None):
        self.grid = grid
        self.rules = rules or Rules()
        self.rng = rng or random.Random()

    def in_range(self, attacker: Unit, target: Unit) -> bool:
        return attacker.distance_to(target) <= self.rules.attack_range

    def hit_chance(self, attacker: Unit, target: Unit) -> int:
        return hit_chance(
            attacker.faction,
            attacker.distance_to(target),
            self.grid.has_cover(target.x, target.z),
            self.rules,
        )

    def roll_damage(self, faction: Faction) -> int:
        base, spread = self.rules.damage_for(faction)
        return base + math.floor(self.rng.random() * spread)

    def roll_attack(self, chance: int) -> tuple[float, bool]:
        """Draw in [0, 100); a hit is a draw strictly below the chance."""
        roll = self.rng.random() * 100
        return roll, roll < chance

    def resolve_attack(self, attacker: Unit, target: Unit) -> AttackResult:
        """
        Roll one attack.

        Raises TargetOutOfRange before drawing anything when the target is
        beyond attack range. Otherwise a hit happens iff a uniform draw in
        [0, 100) is strictly below the hit chance.
        """
        distance = attacker.distance_to(target)
        if distance > self.rules.attack_range:
            raise TargetOutOfRange(
                f"{target.id} is {distance} tiles away, max range {self.rules.attack_range}"
            )

        chance = self.hit_chance(attacker, target)
        roll, hit = self.roll_attack(chance)
        damage = self.roll_damage(attacker.faction) if hit else 0

        result = AttackResult(
            attacker_id=attacker.id,
            target_id=target.id,
            distance=distance,
            hit_chance=chance,
            roll=roll,
            hit=hit,
            damage=damage,
            target_health_after=target.health - damage,
        )
        logger.info(
            f"{attacker.id} -> {target.id}: {chance}% hit chance, rolled {roll:.1f} - "
            f"{'HIT for ' + str(damage) if hit else 'MISS'}"
        )
        return result
