"""Shared fixtures: scripted randomness and small hand-built layouts."""

import random

import pytest

from skirmish import Faction, GameEngine, Grid, Placement, Rules, Scenario, UnitRegistry


class ScriptedRandom(random.Random):
    """random() returns queued values in order; fails loudly when exhausted."""

    def __init__(self, values=()):
        super().__init__(0)
        self.values = list(values)
        self.draws = 0

    def push(self, *values):
        self.values.extend(values)

    def random(self):
        if not self.values:
            raise AssertionError("unexpected random draw")
        self.draws += 1
        return self.values.pop(0)


def layout(*units, cover=(), name="test"):
    """layout(("player", 1, 1), ("enemy", 4, 1), cover={(4, 1)})"""
    return Scenario(
        name=name,
        placements=[Placement(Faction(f), x, z) for f, x, z in units],
        cover=set(cover),
    )


@pytest.fixture
def rules():
    return Rules()


@pytest.fixture
def rng():
    return ScriptedRandom()


@pytest.fixture
def grid():
    return Grid(12)


@pytest.fixture
def registry(grid, rules):
    return UnitRegistry(grid, rules)


@pytest.fixture
def make_engine(rng):
    def _make(*units, cover=(), scheduler=None, rules=None):
        return GameEngine(
            rules=rules,
            scenario=layout(*units, cover=cover),
            rng=rng,
            scheduler=scheduler,
        )
    return _make
