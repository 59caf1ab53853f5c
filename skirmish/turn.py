"""
Turn sequencing: player phase, enemy phase, back to player phase.

Ending the player turn hands control to the enemy policy and returns it
once the enemy has acted and both sides' action points are refreshed. With
a Scheduler attached the hand-off is paced over logical time; without one
it completes before end_turn() returns.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .clock import Scheduler
from .config import Rules
from .units import Faction, UnitRegistry

logger = logging.getLogger(__name__)


class Phase(Enum):
    PLAYER = "player"
    ENEMY = "enemy"


@dataclass
class TurnState:
    """State of the current turn."""
    phase: Phase = Phase.PLAYER
    selected_unit_id: Optional[str] = None
    turn_number: int = 1

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value,
            "selected_unit_id": self.selected_unit_id,
            "turn_number": self.turn_number,
        }


class TurnController:
    """Phase state machine with action point refresh."""

    def __init__(
        self,
        registry: UnitRegistry,
        run_enemy_phase: Callable[[], None],
        rules: Optional[Rules] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self.registry = registry
        self.run_enemy_phase = run_enemy_phase
        self.rules = rules or Rules()
        self.scheduler = scheduler
        self.state = TurnState()

        # Callbacks for the engine's event stream
        self.on_phase_change: Optional[Callable[[Phase], None]] = None
        self.on_selection_change: Optional[Callable[[Optional[str], Optional[str]], None]] = None

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def selected_unit_id(self) -> Optional[str]:
        return self.state.selected_unit_id

    def select(self, unit_id: Optional[str]):
        previous = self.state.selected_unit_id
        if previous == unit_id:
            return
        self.state.selected_unit_id = unit_id
        if self.on_selection_change:
            self.on_selection_change(previous, unit_id)

    def select_first_player_unit(self):
        roster = self.registry.roster_of(Faction.PLAYER)
        self.select(roster[0].id if roster else None)

    def _set_phase(self, phase: Phase):
        self.state.phase = phase
        logger.info(f"Turn {self.state.turn_number}: {phase.value} phase")
        if self.on_phase_change:
            self.on_phase_change(phase)

    def end_turn(self) -> bool:
        """End the player phase. Ignored (returns False) during the enemy phase."""
        if self.state.phase is not Phase.PLAYER:
            return False

        self.select(None)
        self._set_phase(Phase.ENEMY)

        if self.scheduler is None:
            self._enemy_step()
        else:
            self.scheduler.schedule(self.rules.enemy_phase_delay_ms, self._enemy_step, "enemy phase")
        return True

    def _enemy_step(self):
        self.run_enemy_phase()
        if self.scheduler is None:
            self.begin_player_phase()
        else:
            self.scheduler.schedule(self.rules.player_phase_delay_ms, self.begin_player_phase, "player phase")

    def begin_player_phase(self):
        self.registry.refresh_action_points(Faction.ENEMY)
        self.registry.refresh_action_points(Faction.PLAYER)
        self.state.turn_number += 1
        self.select_first_player_unit()
        self._set_phase(Phase.PLAYER)
