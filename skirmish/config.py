"""
Rule constants and scenario layouts.

Rules are loaded from data/rules.yaml and the starting layout from
data/scenarios/<name>.yaml. Missing files or keys fall back to the built-in
defaults below, so the engine runs without any data directory at all.
"""

import os
import logging
import yaml
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

from .units import Faction

logger = logging.getLogger(__name__)

DATA_PATH_ENV = "SKIRMISH_DATA_PATH"
SEED_ENV = "SKIRMISH_SEED"


@dataclass
class Rules:
    """Balancing constants for a session."""
    grid_size: int = 12
    cover_probability: float = 0.2
    max_action_points: int = 2
    start_health: int = 100

    # Movement: one continuous range check, cost split at the step radius
    step_radius: float = 1.5
    dash_range: float = 3.0
    step_cost: int = 1
    dash_cost: int = 2

    # Attacks
    attack_range: int = 6
    attack_cost: int = 1
    distance_penalty: int = 5
    cover_penalty: int = 20
    min_hit_chance: int = 10
    hit_base: dict[str, int] = field(default_factory=lambda: {
        "player": 75,
        "enemy": 60,
    })
    # (base, spread): damage = base + floor(random * spread)
    damage: dict[str, tuple[int, int]] = field(default_factory=lambda: {
        "player": (25, 15),
        "enemy": (20, 10),
    })

    # Enemy AI only walks when the nearest soldier is farther than this
    approach_threshold: int = 2

    # Pacing for the enemy phase, in logical milliseconds
    enemy_phase_delay_ms: int = 500
    player_phase_delay_ms: int = 1000

    def hit_base_for(self, faction: Faction) -> int:
        return self.hit_base[faction.value]

    def damage_for(self, faction: Faction) -> tuple[int, int]:
        return self.damage[faction.value]

    @classmethod
    def from_dict(cls, data: dict) -> "Rules":
        """Build rules from a parsed YAML mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in (data or {}).items():
            if key not in known:
                logger.warning(f"Ignoring unknown rule: {key}")
                continue
            kwargs[key] = value

        rules = cls(**kwargs)
        # YAML gives lists; keep damage as (base, spread) tuples
        rules.damage = {k: tuple(v) for k, v in rules.damage.items()}
        for faction in Faction:
            if faction.value not in rules.hit_base or faction.value not in rules.damage:
                raise ValueError(f"rules missing hit_base/damage for {faction.value}")
        return rules


@dataclass
class Placement:
    faction: Faction
    x: int
    z: int


@dataclass
class Scenario:
    """Starting layout: which units stand where, and optional fixed cover."""
    name: str = "default"
    placements: list[Placement] = field(default_factory=list)
    cover: Optional[set[tuple[int, int]]] = None

    @classmethod
    def default(cls, grid_size: int = 12) -> "Scenario":
        """Three soldiers in the near corner, three enemies in the far one."""
        placements = []
        for i in range(3):
            placements.append(Placement(Faction.PLAYER, 1, i + 1))
            placements.append(Placement(Faction.ENEMY, grid_size - 2, grid_size - 2 - i))
        return cls(name="default", placements=placements)

    @classmethod
    def from_dict(cls, data: dict) -> "Scenario":
        placements = []
        for entry in data.get("units", []):
            placements.append(Placement(
                faction=Faction(entry["faction"]),
                x=int(entry["x"]),
                z=int(entry["z"]),
            ))
        cover = data.get("cover")
        return cls(
            name=data.get("name", "unnamed"),
            placements=placements,
            cover={(int(x), int(z)) for x, z in cover} if cover is not None else None,
        )


def resolve_data_path(data_path: Path | str | None = None) -> Path:
    """Explicit path, then $SKIRMISH_DATA_PATH, then ./data."""
    if data_path is not None:
        return Path(data_path)
    return Path(os.environ.get(DATA_PATH_ENV, "data"))


def seed_from_env() -> Optional[int]:
    value = os.environ.get(SEED_ENV)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning(f"{SEED_ENV}={value!r} is not an integer, ignoring")
        return None


def load_rules(data_path: Path | str | None = None) -> Rules:
    """Load rules.yaml, falling back to defaults."""
    rules_path = resolve_data_path(data_path) / "rules.yaml"
    if not rules_path.exists():
        logger.info(f"Rules file not found: {rules_path}, using defaults")
        return Rules()

    with open(rules_path) as f:
        data = yaml.safe_load(f) or {}

    rules = Rules.from_dict(data.get("rules", data))
    logger.info(f"Loaded rules from {rules_path}")
    return rules


def load_scenario(name: str = "default", data_path: Path | str | None = None,
                  grid_size: int = 12) -> Scenario:
    """Load scenarios/<name>.yaml, falling back to the built-in layout."""
    scenario_path = resolve_data_path(data_path) / "scenarios" / f"{name}.yaml"
    if not scenario_path.exists():
        if name != "default":
            raise FileNotFoundError(f"Scenario not found: {scenario_path}")
        return Scenario.default(grid_size)

    with open(scenario_path) as f:
        data = yaml.safe_load(f) or {}

    scenario = Scenario.from_dict(data.get("scenario", data))
    logger.info(f"Scenario loaded: {scenario.name} ({len(scenario.placements)} units)")
    return scenario
