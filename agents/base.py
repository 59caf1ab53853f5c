"""
Base unit policy: decides one action per unit per phase.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Protocol

from skirmish.config import Rules
from skirmish.errors import SkirmishError
from skirmish.grid import Grid
from skirmish.units import Faction, Unit, UnitRegistry

logger = logging.getLogger(__name__)


class World(Protocol):
    """What a policy may see and do. GameEngine satisfies this."""
    grid: Grid
    registry: UnitRegistry
    rules: Rules

    def execute_attack(self, attacker_id: str, target_id: str): ...

    def execute_move(self, unit_id: str, x: int, z: int): ...


@dataclass
class Decision:
    """A single unit's choice for the phase."""
    unit_id: str
    action: str  # "attack", "move" or "hold"
    target_id: Optional[str] = None
    x: Optional[int] = None
    z: Optional[int] = None
    reason: str = ""

    def to_dict(self) -> dict:
        return {
            "unit_id": self.unit_id,
            "action": self.action,
            "target_id": self.target_id,
            "x": self.x,
            "z": self.z,
            "reason": self.reason,
        }


@dataclass
class PolicyConfig:
    """Configuration for a unit policy."""
    faction: Faction
    name: str = "policy"


class UnitPolicy(ABC):
    """Walks a faction's roster in order and acts for every unit with action points."""

    def __init__(self, config: PolicyConfig):
        self.config = config
        self.faction = config.faction
        self.history: list[list[Decision]] = []
        self.phase_count = 0

    @abstractmethod
    def decide(self, unit: Unit, world: World) -> Decision:
        """Pick this unit's action for the phase."""
        pass

    def run_phase(self, world: World) -> list[Decision]:
        self.phase_count += 1
        phase_decisions = []

        # Snapshot ids: the opposing roster may shrink while we act
        for unit_id in list(world.registry.rosters[self.faction]):
            unit = world.registry.get_unit(unit_id)
            if unit is None or unit.action_points <= 0:
                continue
            decision = self.decide(unit, world)
            self._apply(decision, world)
            phase_decisions.append(decision)

        self.history.append(phase_decisions)
        return phase_decisions

    def _apply(self, decision: Decision, world: World):
        if decision.action == "attack":
            try:
                world.execute_attack(decision.unit_id, decision.target_id)
            except SkirmishError as e:
                decision.action = "hold"
                decision.reason = e.reason
                logger.debug(f"{decision.unit_id}: attack rejected, {e.reason}")
        elif decision.action == "move":
            if not world.grid.in_bounds(decision.x, decision.z) or \
                    world.grid.is_occupied(decision.x, decision.z):
                decision.action = "hold"
                decision.reason = f"path blocked at ({decision.x}, {decision.z})"
                logger.debug(f"{decision.unit_id}: {decision.reason}")
                return
            try:
                world.execute_move(decision.unit_id, decision.x, decision.z)
            except SkirmishError as e:
                decision.action = "hold"
                decision.reason = e.reason
                logger.debug(f"{decision.unit_id}: move rejected, {e.reason}")

    def last_decisions(self) -> list[Decision]:
        """Decisions from the most recent phase."""
        return self.history[-1] if self.history else []

    def reset(self):
        """Reset policy state for a new game."""
        self.history = []
        self.phase_count = 0
