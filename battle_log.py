#!/usr/bin/env python3
"""
Live battle log - plays a headless session and prints events as they happen.

The player side is driven by the same greedy policy as the enemy, issuing
ordinary engine commands, so every rule check applies to both sides.
"""

import sys
import logging
from datetime import datetime
from pathlib import Path

# Load .env from project root (SKIRMISH_SEED, SKIRMISH_DATA_PATH)
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent / ".env")

from skirmish import GameEngine, GameEvent, EventType, Faction
from agents import GreedyPolicy, PolicyConfig

# Configuration
MAX_TURNS = 30
LOG_DIR = Path("logs")

logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)


class PlayerCommands:
    """Lets a policy act for the player through the engine's command API."""

    def __init__(self, engine: GameEngine):
        self.engine = engine
        self.grid = engine.grid
        self.registry = engine.registry
        self.rules = engine.rules

    def execute_attack(self, attacker_id: str, target_id: str):
        return self.engine.request_attack(attacker_id, target_id)

    def execute_move(self, unit_id: str, x: int, z: int):
        return self.engine.request_move(unit_id, x, z)


def log(source, message):
    """Print a battle log entry."""
    prefix = {
        "player": "PLAYER",
        "enemy": "ENEMY",
        "system": "SYSTEM",
        "combat": "COMBAT",
    }.get(source, source.upper())
    print(f"{prefix:>7}: {message}")
    sys.stdout.flush()


def print_event(event: GameEvent):
    data = event.data
    if event.type is EventType.UNIT_MOVED:
        side = data["unit_id"].split("-")[0]
        verb = "dashes" if data["kind"] == "dash" else "steps"
        log(side, f"{data['unit_id']} {verb} to ({data['x']}, {data['z']})")
    elif event.type is EventType.ATTACK_RESOLVED:
        outcome = f"HIT for {data['damage']}" if data["hit"] else "MISS"
        log("combat", f"{data['attacker_id']} -> {data['target_id']} "
                      f"({data['hit_chance']}%, rolled {data['roll']:.1f}): {outcome}")
    elif event.type is EventType.UNIT_REMOVED:
        log("combat", f"{data['unit_id']} is down")
    elif event.type is EventType.PHASE_CHANGED:
        log("system", f"turn {event.turn}: {data['phase']} phase")
    elif event.type is EventType.SESSION_ENDED:
        log("system", f"{data['outcome'].upper()}!")


def log_header(text):
    print(f"\n{'='*60}")
    print(f"  {text}")
    print(f"{'='*60}\n")


def run(max_turns: int = MAX_TURNS, save_log: bool = True) -> GameEngine:
    engine = GameEngine.from_data()
    engine.subscribe(print_event)
    player = GreedyPolicy(PolicyConfig(faction=Faction.PLAYER, name="autopilot"))
    commands = PlayerCommands(engine)

    log_header(f"SKIRMISH - {engine.scenario_name.upper()}")
    for turn in range(1, max_turns + 1):
        player.run_phase(commands)
        if engine.is_over:
            break
        engine.end_turn()
        if engine.is_over:
            break

    stats = engine.registry.get_stats()["by_faction"]
    log_header(f"RESULT: {engine.outcome.value.upper() if engine.outcome else 'UNDECIDED'}")
    print(f"Turns played: {engine.turns.state.turn_number}")
    print(f"Survivors - player: {stats['player']}, enemy: {stats['enemy']}")

    if save_log:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        engine.events.save(LOG_DIR / f"battle_{timestamp}.json")
    return engine


if __name__ == "__main__":
    run()
