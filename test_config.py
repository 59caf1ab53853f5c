"""Tests for rules and scenario loading."""

from pathlib import Path

import pytest
import yaml

from skirmish import Faction, GameEngine, Rules, load_rules, load_scenario
from skirmish.config import seed_from_env

DATA = Path(__file__).parent / "data"


def test_defaults_without_data_dir(tmp_path):
    rules = load_rules(tmp_path)
    assert rules == Rules()
    scenario = load_scenario("default", tmp_path)
    positions = [(p.faction, p.x, p.z) for p in scenario.placements]
    assert positions == [
        (Faction.PLAYER, 1, 1), (Faction.ENEMY, 10, 10),
        (Faction.PLAYER, 1, 2), (Faction.ENEMY, 10, 9),
        (Faction.PLAYER, 1, 3), (Faction.ENEMY, 10, 8),
    ]
    assert scenario.cover is None


def test_shipped_rules_match_defaults():
    assert load_rules(DATA) == Rules()


def test_partial_rules_file(tmp_path):
    (tmp_path / "rules.yaml").write_text(yaml.safe_dump({
        "rules": {"grid_size": 8, "damage": {"player": [30, 5], "enemy": [10, 1]}, "bogus": 1},
    }))
    rules = load_rules(tmp_path)
    assert rules.grid_size == 8
    assert rules.damage_for(Faction.PLAYER) == (30, 5)
    assert rules.attack_range == 6


def test_rules_need_both_factions(tmp_path):
    (tmp_path / "rules.yaml").write_text(yaml.safe_dump({"rules": {"hit_base": {"player": 80}}}))
    with pytest.raises(ValueError):
        load_rules(tmp_path)


def test_scenario_file_with_fixed_cover(tmp_path):
    (tmp_path / "scenarios").mkdir()
    (tmp_path / "scenarios" / "ambush.yaml").write_text(yaml.safe_dump({
        "scenario": {
            "name": "ambush",
            "cover": [[2, 2], [3, 3]],
            "units": [
                {"faction": "player", "x": 0, "z": 0},
                {"faction": "enemy", "x": 2, "z": 2},
            ],
        },
    }))
    engine = GameEngine.from_data(tmp_path, scenario="ambush", seed=1)
    assert engine.scenario_name == "ambush"
    assert engine.grid.cover_cells() == {(2, 2), (3, 3)}
    assert engine.unit_info("enemy-1")["in_cover"]


def test_missing_named_scenario(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_scenario("nowhere", tmp_path)


def test_shipped_scenarios_load():
    default = GameEngine.from_data(DATA, seed=5)
    assert len(default.registry.units) == 6
    crossfire = GameEngine.from_data(DATA, scenario="crossfire", seed=5)
    assert (5, 5) in crossfire.grid.cover_cells()


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("SKIRMISH_SEED", "42")
    assert seed_from_env() == 42
    monkeypatch.setenv("SKIRMISH_SEED", "not-a-number")
    assert seed_from_env() is None

    (tmp_path / "rules.yaml").write_text(yaml.safe_dump({"rules": {"grid_size": 9}}))
    monkeypatch.setenv("SKIRMISH_DATA_PATH", str(tmp_path))
    assert load_rules().grid_size == 9
