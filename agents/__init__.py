"""
Unit policies for the skirmish engine.

The enemy faction is driven by a greedy nearest-target policy.
"""

from .base import UnitPolicy, PolicyConfig, Decision
from .greedy import GreedyPolicy, EnemyController

__all__ = ["UnitPolicy", "PolicyConfig", "Decision", "GreedyPolicy", "EnemyController"]
