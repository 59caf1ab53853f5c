"""
Turn-based tactical skirmish rules engine.

Core modules:
- grid: Square tile grid with occupancy and cover
- units: Unit state and faction rosters
- combat: Hit chance and damage resolution
- turn: Player/enemy phase sequencing
- clock: Logical scheduler for paced enemy phases
- events: Event stream for presentation layers
- game: Command/query surface tying it together
"""

from .grid import Grid, Cell, manhattan
from .units import UnitRegistry, Unit, Faction, MoveKind
from .combat import CombatResolver, AttackResult, hit_chance
from .config import Rules, Scenario, Placement, load_rules, load_scenario
from .clock import Scheduler
from .events import EventLog, EventType, GameEvent
from .errors import (
    SkirmishError, OutOfBounds, CellOccupied, OutOfRange, TargetOutOfRange,
    InvalidCommand, InvariantViolation,
)
from .turn import TurnController, TurnState, Phase
from .game import GameEngine, CommandResult, Outcome

__all__ = [
    # Grid
    "Grid", "Cell", "manhattan",
    # Units
    "UnitRegistry", "Unit", "Faction", "MoveKind",
    # Combat
    "CombatResolver", "AttackResult", "hit_chance",
    # Config
    "Rules", "Scenario", "Placement", "load_rules", "load_scenario",
    # Scheduling and events
    "Scheduler", "EventLog", "EventType", "GameEvent",
    # Errors
    "SkirmishError", "OutOfBounds", "CellOccupied", "OutOfRange", "TargetOutOfRange",
    "InvalidCommand", "InvariantViolation",
    # Turn Management
    "TurnController", "TurnState", "Phase",
    # Engine
    "GameEngine", "CommandResult", "Outcome",
]
