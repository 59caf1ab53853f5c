"""Tests for hit chance and attack resolution."""

import random

import pytest

from conftest import ScriptedRandom
from skirmish import CombatResolver, Faction, Grid, TargetOutOfRange, UnitRegistry, hit_chance


@pytest.mark.parametrize("faction,distance,cover,expected", [
    (Faction.PLAYER, 3, False, 60),
    (Faction.PLAYER, 1, False, 70),
    (Faction.PLAYER, 3, True, 40),
    (Faction.ENEMY, 3, False, 45),
    (Faction.ENEMY, 6, True, 10),
    (Faction.PLAYER, 6, True, 25),
    (Faction.ENEMY, 12, False, 10),
])
def test_hit_chance(faction, distance, cover, expected):
    assert hit_chance(faction, distance, cover) == expected


@pytest.mark.parametrize("faction", list(Faction))
@pytest.mark.parametrize("cover", [False, True])
def test_hit_chance_monotonic_with_floor(faction, cover):
    chances = [hit_chance(faction, d, cover) for d in range(0, 20)]
    assert chances == sorted(chances, reverse=True)
    assert min(chances) == 10


def setup_duel(attacker_pos, target_pos, cover=(), rolls=(), attacker=Faction.PLAYER):
    grid = Grid(12, cover=set(cover))
    registry = UnitRegistry(grid)
    shooter = registry.create_unit(attacker, *attacker_pos)
    target = registry.create_unit(attacker.opponent, *target_pos)
    rng = ScriptedRandom(rolls)
    return CombatResolver(grid, registry.rules, rng), shooter, target, rng


def test_hit_roll_below_chance():
    resolver, shooter, target, _ = setup_duel((1, 1), (4, 1), rolls=[0.5, 0.0])
    result = resolver.resolve_attack(shooter, target)
    assert result.hit_chance == 60
    assert result.roll == 50.0
    assert result.hit
    assert result.damage == 25
    assert result.target_health_after == 75
    assert not result.killed


def test_roll_equal_to_chance_misses():
    resolver, shooter, target, rng = setup_duel((1, 1), (6, 1), rolls=[0.5])
    result = resolver.resolve_attack(shooter, target)
    assert result.hit_chance == 50
    assert result.roll == 50.0
    assert not result.hit
    assert result.damage == 0
    assert result.target_health_after == 100
    assert rng.draws == 1


def test_cover_lowers_chance():
    resolver, shooter, target, _ = setup_duel((1, 1), (4, 1), cover={(4, 1)}, rolls=[0.45])
    result = resolver.resolve_attack(shooter, target)
    assert result.hit_chance == 40
    assert not result.hit


def test_resolver_does_not_mutate_units():
    resolver, shooter, target, _ = setup_duel((1, 1), (2, 1), rolls=[0.0, 0.99])
    result = resolver.resolve_attack(shooter, target)
    assert result.hit
    assert target.health == 100
    assert shooter.action_points == 2


def test_out_of_range_draws_nothing():
    resolver, shooter, target, rng = setup_duel((1, 1), (8, 1))
    with pytest.raises(TargetOutOfRange):
        resolver.resolve_attack(shooter, target)
    assert rng.draws == 0
    assert target.health == 100
    assert shooter.action_points == 2


@pytest.mark.parametrize("attacker,low,high", [
    (Faction.PLAYER, 25, 39),
    (Faction.ENEMY, 20, 29),
])
def test_damage_bounds(attacker, low, high):
    resolver, _, _, _ = setup_duel((1, 1), (2, 1), attacker=attacker)
    resolver.rng = random.Random(7)
    rolls = {resolver.roll_damage(attacker) for _ in range(2000)}
    assert min(rolls) == low
    assert max(rolls) == high
    assert all(isinstance(r, int) for r in rolls)


def test_damage_extremes():
    resolver, _, _, rng = setup_duel((1, 1), (2, 1))
    rng.push(0.0, 0.9999999)
    assert resolver.roll_damage(Faction.PLAYER) == 25
    assert resolver.roll_damage(Faction.PLAYER) == 39


def test_roll_attack_is_strict():
    resolver, _, _, rng = setup_duel((1, 1), (2, 1))
    rng.push(0.25, 0.25, 0.0)
    assert resolver.roll_attack(26) == (25.0, True)
    assert resolver.roll_attack(25) == (25.0, False)
    assert resolver.roll_attack(10) == (0.0, True)
    assert rng.draws == 3
