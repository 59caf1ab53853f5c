"""
Unit state management for the skirmish engine.

The registry owns every living unit and the per-faction rosters. Grid cells,
rosters and the selection refer to units by id only; ids are resolved
through the registry.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

from .grid import Grid, manhattan
from .errors import CellOccupied, InvalidCommand, InvariantViolation, OutOfRange

if TYPE_CHECKING:
    from .config import Rules

logger = logging.getLogger(__name__)


class Faction(Enum):
    PLAYER = "player"
    ENEMY = "enemy"

    @property
    def opponent(self) -> "Faction":
        return Faction.ENEMY if self is Faction.PLAYER else Faction.PLAYER


class MoveKind(Enum):
    STEP = "step"
    DASH = "dash"


@dataclass
class Unit:
    """A soldier or enemy standing on the grid."""
    id: str
    faction: Faction
    x: int
    z: int
    health: int = 100
    action_points: int = 2
    max_action_points: int = 2

    @property
    def position(self) -> tuple[int, int]:
        return (self.x, self.z)

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    def distance_to(self, other: "Unit") -> int:
        return manhattan(self.x, self.z, other.x, other.z)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "faction": self.faction.value,
            "x": self.x,
            "z": self.z,
            "health": self.health,
            "action_points": self.action_points,
            "max_action_points": self.max_action_points,
        }


class UnitRegistry:
    """Creates, moves and removes units while keeping grid occupancy in sync."""

    def __init__(self, grid: Grid, rules: Optional["Rules"] = None):
        if rules is None:
            from .config import Rules
            rules = Rules()
        self.grid = grid
        self.rules = rules
        self.units: dict[str, Unit] = {}
        self.rosters: dict[Faction, list[str]] = {f: [] for f in Faction}
        self._counters: dict[Faction, int] = {f: 0 for f in Faction}

    def create_unit(self, faction: Faction, x: int, z: int) -> Unit:
        if self.grid.is_occupied(x, z):
            raise CellOccupied(x, z)

        self._counters[faction] += 1
        unit = Unit(
            id=f"{faction.value}-{self._counters[faction]}",
            faction=faction,
            x=x,
            z=z,
            health=self.rules.start_health,
            action_points=self.rules.max_action_points,
            max_action_points=self.rules.max_action_points,
        )
        self.grid.set_occupied(x, z, True)
        self.units[unit.id] = unit
        self.rosters[faction].append(unit.id)
        logger.debug(f"Created {unit.id} at ({x}, {z})")
        return unit

    # Movement
    def movement_allowance(self, unit: Unit) -> float:
        """Tiles the unit may cover right now; 0 when it cannot move."""
        if unit.action_points >= self.rules.dash_cost:
            return self.rules.dash_range
        if unit.action_points >= self.rules.step_cost:
            return self.rules.step_radius
        return 0

    def move_kind(self, distance: int) -> MoveKind:
        return MoveKind.DASH if distance > self.rules.step_radius else MoveKind.STEP

    def move_cost(self, distance: int) -> int:
        if self.move_kind(distance) is MoveKind.DASH:
            return self.rules.dash_cost
        return self.rules.step_cost

    def move_unit(self, unit: Unit, target_x: int, target_z: int) -> MoveKind:
        """Move a unit, spending 1 AP for a step or 2 for a dash."""
        # Bounds first so a bad coordinate never reaches the range check
        target_occupied = self.grid.is_occupied(target_x, target_z)

        if unit.action_points <= 0:
            raise InvalidCommand(f"{unit.id} has no action points left")

        distance = manhattan(unit.x, unit.z, target_x, target_z)
        allowance = self.movement_allowance(unit)
        if distance > allowance:
            raise OutOfRange(
                f"{unit.id} can move {allowance:g} tiles, ({target_x}, {target_z}) is {distance} away"
            )
        if target_occupied:
            raise CellOccupied(target_x, target_z)

        kind = self.move_kind(distance)
        self.grid.set_occupied(unit.x, unit.z, False)
        self.grid.set_occupied(target_x, target_z, True)
        unit.x = target_x
        unit.z = target_z
        unit.action_points -= self.move_cost(distance)
        logger.debug(f"{unit.id} {kind.value} to ({target_x}, {target_z}), {unit.action_points} AP left")
        return kind

    def reachable_cells(self, unit: Unit) -> list[tuple[int, int, MoveKind]]:
        """Free cells within the unit's current allowance, row-major."""
        allowance = self.movement_allowance(unit)
        if allowance <= 0:
            return []
        reachable = []
        for cell in self.grid.cells():
            distance = manhattan(unit.x, unit.z, cell.x, cell.z)
            if distance <= allowance and not cell.occupied:
                reachable.append((cell.x, cell.z, self.move_kind(distance)))
        return reachable

    # Lifecycle
    def remove_unit(self, unit: Unit) -> bool:
        """Free the unit's cell and drop it from its roster. No-op if already gone."""
        if self.units.get(unit.id) is not unit:
            return False
        self.grid.set_occupied(unit.x, unit.z, False)
        del self.units[unit.id]
        self.rosters[unit.faction].remove(unit.id)
        logger.debug(f"Removed {unit.id} from ({unit.x}, {unit.z})")
        return True

    def refresh_action_points(self, faction: Faction):
        for unit in self.roster_of(faction):
            unit.action_points = unit.max_action_points

    # Query methods
    def get_unit(self, unit_id: str) -> Optional[Unit]:
        return self.units.get(unit_id)

    def roster_of(self, faction: Faction) -> list[Unit]:
        return [self.units[uid] for uid in self.rosters[faction]]

    def nearest_to(self, unit: Unit, candidates: list[Unit]) -> Optional[Unit]:
        """Closest candidate by Manhattan distance; first in roster order wins ties."""
        nearest = None
        best = None
        for candidate in candidates:
            distance = unit.distance_to(candidate)
            if best is None or distance < best:
                best = distance
                nearest = candidate
        return nearest

    def unit_at(self, x: int, z: int) -> Optional[Unit]:
        for unit in self.units.values():
            if unit.x == x and unit.z == z:
                return unit
        return None

    def check_consistency(self):
        """Raise InvariantViolation if grid occupancy and unit positions disagree."""
        positions = [u.position for u in self.units.values()]
        if len(positions) != len(set(positions)):
            raise InvariantViolation(f"two living units share a cell: {sorted(positions)}")
        occupied = self.grid.occupied_cells()
        if occupied != set(positions):
            raise InvariantViolation(
                f"grid occupancy {sorted(occupied)} != unit positions {sorted(positions)}"
            )
        for faction, roster in self.rosters.items():
            for uid in roster:
                unit = self.units.get(uid)
                if unit is None or unit.faction is not faction or not unit.is_alive:
                    raise InvariantViolation(f"roster {faction.value} holds stale unit {uid}")

    def get_stats(self) -> dict:
        return {
            "total_units": len(self.units),
            "by_faction": {f.value: len(self.rosters[f]) for f in Faction},
        }
