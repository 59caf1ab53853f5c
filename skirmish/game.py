"""
Game engine: the command and query surface for a presentation layer.

Commands validate against the grid, the unit registry and the turn state,
then mutate and emit events. A rejected command changes nothing except
recording a COMMAND_REJECTED event.
"""

import random
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from .clock import Scheduler
from .combat import AttackResult, CombatResolver
from .config import Rules, Scenario, load_rules, load_scenario, seed_from_env
from .errors import InvalidCommand, SkirmishError
from .events import EventLog, EventType, GameEvent
from .grid import Grid, manhattan
from .turn import Phase, TurnController
from .units import Faction, Unit, UnitRegistry

logger = logging.getLogger(__name__)


class Outcome(Enum):
    VICTORY = "victory"
    DEFEAT = "defeat"


@dataclass
class CommandResult:
    """Reply to a command: accepted, or a no-op with a reason."""
    command: str
    accepted: bool
    reason: Optional[str] = None
    error: Optional[str] = None
    events: list[GameEvent] = field(default_factory=list)
    attack: Optional[AttackResult] = None

    def to_dict(self) -> dict:
        return {
            "command": self.command,
            "accepted": self.accepted,
            "reason": self.reason,
            "error": self.error,
            "events": [e.to_dict() for e in self.events],
            "attack": self.attack.to_dict() if self.attack else None,
        }


class GameEngine:
    """Owns the grid, the units, the turn state and the enemy policy."""

    def __init__(
        self,
        rules: Optional[Rules] = None,
        scenario: Optional[Scenario] = None,
        rng: Optional[random.Random] = None,
        scheduler: Optional[Scheduler] = None,
        policy=None,
        grid: Optional[Grid] = None,
    ):
        self.rules = rules or Rules()
        self.rng = rng if rng is not None else random.Random()
        scenario = scenario or Scenario.default(self.rules.grid_size)

        if grid is None:
            if scenario.cover is not None:
                grid = Grid(self.rules.grid_size, scenario.cover)
            else:
                grid = Grid.generate(self.rules.grid_size, self.rules.cover_probability, self.rng)
        self.grid = grid
        self.registry = UnitRegistry(self.grid, self.rules)
        self.combat = CombatResolver(self.grid, self.rules, self.rng)
        self.events = EventLog()
        self.scheduler = scheduler

        if policy is None:
            from agents import EnemyController
            policy = EnemyController()
        self.policy = policy

        self.turns = TurnController(
            self.registry,
            self._run_enemy_phase,
            rules=self.rules,
            scheduler=scheduler,
        )
        self.turns.on_phase_change = self._on_phase_change
        self.turns.on_selection_change = self._on_selection_change

        self.outcome: Optional[Outcome] = None
        self.scenario_name = scenario.name

        for placement in scenario.placements:
            unit = self.registry.create_unit(placement.faction, placement.x, placement.z)
            self._emit(EventType.UNIT_CREATED, **unit.to_dict())
        self.turns.select_first_player_unit()
        self.registry.check_consistency()

        logger.info(
            f"Session started: {self.grid.size}x{self.grid.size} grid, "
            f"{len(self.grid.cover_cells())} cover cells, "
            f"{len(self.registry.rosters[Faction.PLAYER])} soldiers vs "
            f"{len(self.registry.rosters[Faction.ENEMY])} enemies"
        )

    @classmethod
    def from_data(
        cls,
        data_path: Path | str | None = None,
        scenario: str = "default",
        seed: Optional[int] = None,
        scheduler: Optional[Scheduler] = None,
        policy=None,
    ) -> "GameEngine":
        """Build an engine from data/rules.yaml and data/scenarios/<scenario>.yaml."""
        rules = load_rules(data_path)
        layout = load_scenario(scenario, data_path, rules.grid_size)
        if seed is None:
            seed = seed_from_env()
        return cls(
            rules=rules,
            scenario=layout,
            rng=random.Random(seed),
            scheduler=scheduler,
            policy=policy,
        )

    # Event plumbing
    def _emit(self, event_type: EventType, **data) -> GameEvent:
        return self.events.emit(event_type, turn=self.turns.state.turn_number, **data)

    def subscribe(self, listener: Callable[[GameEvent], Any]):
        self.events.subscribe(listener)

    def _on_phase_change(self, phase: Phase):
        self._emit(EventType.PHASE_CHANGED, phase=phase.value)

    def _on_selection_change(self, previous: Optional[str], selected: Optional[str]):
        self._emit(EventType.SELECTION_CHANGED, previous=previous, selected=selected)

    # Commands
    def _run_command(self, command: str, action: Callable[[], Any]) -> CommandResult:
        start = len(self.events)
        try:
            payload = action()
        except SkirmishError as e:
            logger.debug(f"Rejected {command}: {e.reason}")
            self._emit(EventType.COMMAND_REJECTED, command=command, error=e.code, reason=e.reason)
            return CommandResult(
                command=command,
                accepted=False,
                reason=e.reason,
                error=e.code,
                events=self.events.since(start),
            )

        self.registry.check_consistency()
        return CommandResult(
            command=command,
            accepted=True,
            events=self.events.since(start),
            attack=payload if isinstance(payload, AttackResult) else None,
        )

    def select_unit(self, unit_id: Optional[str]) -> CommandResult:
        def action():
            self._require_player_control()
            if unit_id is not None:
                self._require_player_unit(unit_id)
            self.turns.select(unit_id)
        return self._run_command("select_unit", action)

    def request_move(self, unit_id: str, x: int, z: int) -> CommandResult:
        def action():
            self._require_player_control()
            unit = self._require_player_unit(unit_id)
            self.execute_move(unit.id, x, z)
            self.turns.select(unit.id)
        return self._run_command("request_move", action)

    def request_attack(self, attacker_id: str, target_id: str) -> CommandResult:
        def action():
            self._require_player_control()
            attacker = self._require_player_unit(attacker_id)
            result = self.execute_attack(attacker.id, target_id)
            if self.outcome is None:
                self.turns.select(attacker.id)
            return result
        return self._run_command("request_attack", action)

    def end_turn(self) -> CommandResult:
        def action():
            self._require_player_control()
            self.turns.end_turn()
        return self._run_command("end_turn", action)

    # Actions shared by player commands and policies
    def execute_move(self, unit_id: str, x: int, z: int):
        unit = self._require_unit(unit_id)
        origin = unit.position
        kind = self.registry.move_unit(unit, x, z)
        self._emit(
            EventType.UNIT_MOVED,
            unit_id=unit.id,
            from_x=origin[0],
            from_z=origin[1],
            x=unit.x,
            z=unit.z,
            kind=kind.value,
            action_points=unit.action_points,
        )
        return kind

    def execute_attack(self, attacker_id: str, target_id: str) -> AttackResult:
        attacker = self._require_unit(attacker_id)
        target = self._require_unit(target_id)
        if target.faction is attacker.faction:
            raise InvalidCommand(f"{attacker.id} cannot attack friendly unit {target.id}")
        if attacker.action_points < self.rules.attack_cost:
            raise InvalidCommand(f"{attacker.id} has no action points left")

        result = self.combat.resolve_attack(attacker, target)

        attacker.action_points -= self.rules.attack_cost
        target.health = result.target_health_after
        self._emit(EventType.ATTACK_RESOLVED, **result.to_dict(),
                   attacker_action_points=attacker.action_points)

        if result.killed:
            logger.info(f"{target.id} killed by {attacker.id}")
            self._remove(target)
        elif result.hit:
            self._emit(EventType.UNIT_DAMAGED, unit_id=target.id, damage=result.damage,
                       health=target.health)
        return result

    def _remove(self, unit: Unit):
        if not self.registry.remove_unit(unit):
            return
        self._emit(EventType.UNIT_REMOVED, unit_id=unit.id, faction=unit.faction.value,
                   x=unit.x, z=unit.z)
        if self.turns.selected_unit_id == unit.id:
            self.turns.select(None)
        self._check_game_end()

    def _check_game_end(self):
        if self.outcome is not None:
            return
        if not self.registry.rosters[Faction.ENEMY]:
            self.outcome = Outcome.VICTORY
        elif not self.registry.rosters[Faction.PLAYER]:
            self.outcome = Outcome.DEFEAT
        else:
            return
        logger.info(f"Session ended: {self.outcome.value.upper()}")
        self._emit(EventType.SESSION_ENDED, outcome=self.outcome.value)

    def _run_enemy_phase(self):
        if self.outcome is None:
            self.policy.run_enemy_phase(self)
        self.registry.check_consistency()

    # Validation
    def _require_player_control(self):
        if self.outcome is not None:
            raise InvalidCommand(f"session is over ({self.outcome.value})")
        if self.turns.phase is not Phase.PLAYER:
            raise InvalidCommand("not the player phase")

    def _require_unit(self, unit_id: str) -> Unit:
        unit = self.registry.get_unit(unit_id)
        if unit is None:
            raise InvalidCommand(f"no living unit with id {unit_id!r}")
        return unit

    def _require_player_unit(self, unit_id: str) -> Unit:
        unit = self._require_unit(unit_id)
        if unit.faction is not Faction.PLAYER:
            raise InvalidCommand(f"{unit.id} is not a player unit")
        return unit

    # Queries
    @property
    def is_over(self) -> bool:
        return self.outcome is not None

    def cell_info(self, x: int, z: int) -> dict:
        info = self.grid.cell(x, z).to_dict()
        unit = self.registry.unit_at(x, z)
        info["unit_id"] = unit.id if unit else None
        return info

    def unit_info(self, unit_id: str) -> Optional[dict]:
        unit = self.registry.get_unit(unit_id)
        if unit is None:
            return None
        info = unit.to_dict()
        info["in_cover"] = self.grid.has_cover(unit.x, unit.z)
        info["selected"] = self.turns.selected_unit_id == unit.id
        return info

    def turn_state(self) -> dict:
        state = self.turns.state.to_dict()
        state["outcome"] = self.outcome.value if self.outcome else None
        return state

    def reachable_cells(self, unit_id: str) -> list[dict]:
        """Cells the unit could move to now, tagged step or dash."""
        unit = self.registry.get_unit(unit_id)
        if unit is None:
            return []
        return [
            {"x": x, "z": z, "kind": kind.value, "cost": self.registry.move_cost(manhattan(unit.x, unit.z, x, z))}
            for x, z, kind in self.registry.reachable_cells(unit)
        ]

    def hit_chance(self, attacker_id: str, target_id: str) -> Optional[int]:
        """Preview the hit chance, or None if either unit is gone or out of range."""
        attacker = self.registry.get_unit(attacker_id)
        target = self.registry.get_unit(target_id)
        if attacker is None or target is None or not self.combat.in_range(attacker, target):
            return None
        return self.combat.hit_chance(attacker, target)

    def snapshot(self) -> dict:
        """Full state for a renderer to rebuild from."""
        return {
            "scenario": self.scenario_name,
            "grid_size": self.grid.size,
            "cover": sorted(self.grid.cover_cells()),
            "units": [u.to_dict() for f in Faction for u in self.registry.roster_of(f)],
            "turn": self.turn_state(),
        }
