"""
Greedy policy: shoot the nearest opponent if in range, otherwise take one
step toward it.

No pathfinding, no cover seeking. Each unit makes a single decision per
phase.
"""

from skirmish.units import Faction, Unit

from .base import Decision, PolicyConfig, UnitPolicy, World


class GreedyPolicy(UnitPolicy):
    """
    Per unit, in roster order:

    - nearest opponent within attack range: attack it, or hold when short
      of action points for a shot
    - farther than the approach threshold: one tile along the axis with the
      larger gap (x wins ties); skipped if that tile is off-grid or taken
    - otherwise hold
    """

    def decide(self, unit: Unit, world: World) -> Decision:
        rules = world.rules
        opponents = world.registry.roster_of(self.faction.opponent)
        target = world.registry.nearest_to(unit, opponents)
        if target is None:
            return Decision(unit.id, "hold", reason="no opponents left")

        distance = unit.distance_to(target)
        if distance <= rules.attack_range:
            if unit.action_points < rules.attack_cost:
                return Decision(unit.id, "hold", target_id=target.id,
                                reason="not enough action points to fire")
            return Decision(unit.id, "attack", target_id=target.id,
                            reason=f"{target.id} at range {distance}")

        if distance > rules.approach_threshold and unit.action_points >= rules.step_cost:
            x, z = self.step_toward(unit, target)
            return Decision(unit.id, "move", target_id=target.id, x=x, z=z,
                            reason=f"closing on {target.id} ({distance} tiles)")

        return Decision(unit.id, "hold", target_id=target.id, reason="nothing to do")

    @staticmethod
    def step_toward(unit: Unit, target: Unit) -> tuple[int, int]:
        dx = target.x - unit.x
        dz = target.z - unit.z
        if abs(dx) >= abs(dz):
            return unit.x + (1 if dx > 0 else -1), unit.z
        return unit.x, unit.z + (1 if dz > 0 else -1)


class EnemyController(GreedyPolicy):
    """Greedy policy driving the enemy faction."""

    def __init__(self, config: PolicyConfig = None):
        super().__init__(config or PolicyConfig(faction=Faction.ENEMY, name="enemy"))

    def run_enemy_phase(self, world: World) -> list[Decision]:
        return self.run_phase(world)
