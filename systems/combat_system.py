"""
combat_system.py – Damage formulas shared by the agent and enemies.

Responsibilities:
- Incoming damage mitigation (strategy reduction + post-evade trait reduction)
- Outgoing damage multiplier (strategy multiplier + one-shot reflex bonus)
- Melee radius checks
- Lifesteal on connecting hits

Formulas:
    effective = raw * (1 - total_reduction)        total_reduction ∈ [0, 1]
    applied   = base_damage * damage_multiplier
    heal      = applied * lifesteal_fraction        per connecting hit

Reductions are additive, not multiplicative.
"""

from __future__ import annotations

import logging

from utils.helpers import clamp

logger = logging.getLogger(__name__)


class CombatResult:
    """Outcome of one hit for the caller (and telemetry) to react to."""

    __slots__ = (
        "target", "hit", "damage", "healed", "reflex_bonus", "killed",
    )

    def __init__(self, target=None):
        self.target = target
        self.hit = False
        self.damage = 0.0
        self.healed = 0.0
        self.reflex_bonus = False
        self.killed = False

    def __repr__(self) -> str:
        return (f"CombatResult(hit={self.hit}, damage={self.damage:.2f}, "
                f"healed={self.healed:.2f}, killed={self.killed})")


# ══════════════════════════════════════════════════════════
#  Formulas
# ══════════════════════════════════════════════════════════

def total_reduction(strategy_reduction: float, post_evade_open: bool,
                    post_evade_reduction: float) -> float:
    """Strategy reduction plus the post-evade trait bonus, clamped to [0, 1]."""
    total = strategy_reduction
    if post_evade_open:
        total += post_evade_reduction
    return clamp(total, 0.0, 1.0)


def mitigate(raw_damage: float, reduction: float) -> float:
    return max(0.0, raw_damage) * (1.0 - clamp(reduction, 0.0, 1.0))


def in_melee_reach(attacker, reach: float, target) -> bool:
    """True when *target* is within *reach* plus its body radius."""
    return attacker.distance_to(target) <= reach + target.radius


# ══════════════════════════════════════════════════════════
#  Agent swing resolution
# ══════════════════════════════════════════════════════════

class CombatSystem:
    """Resolves an agent's basic-attack swing against a crowd."""

    def resolve_swing(self, agent, enemies) -> list[CombatResult]:
        """Hit every live enemy in reach. Cooldown gating is the caller's job."""
        targets = [e for e in enemies
                   if e.alive and in_melee_reach(agent, agent.attack_range, e)]
        if not targets:
            return []

        multiplier = agent.damage_multiplier
        reflex = agent.consume_reflex_bonus()
        if reflex:
            multiplier += agent.modifiers.post_evade_damage_bonus

        applied = agent.damage * multiplier
        results: list[CombatResult] = []
        for enemy in targets:
            result = CombatResult(enemy)
            result.hit = True
            result.damage = enemy.take_damage(applied)
            result.reflex_bonus = reflex
            result.killed = not enemy.alive

            lifesteal = agent.modifiers.lifesteal_fraction
            if lifesteal > 0:
                result.healed = agent.heal(applied * lifesteal)

            results.append(result)
            logger.debug("Agent hit %s for %.1f (mult=%.2f)",
                         enemy.archetype, applied, multiplier)
        return results
