"""
agent.py – The single controllable unit driven by AgentAI.

The agent owns its combat numbers; AgentAI only flips them according
to the active strategy:

- damage_reduction   – strategy-granted (GUARD)
- damage_multiplier  – strategy-granted (BURST)
- attack_cooldown_max / move_speed – BURST and fatigue
- invulnerable       – EVADE dash i-frames
- post_evade_timer   – counter-attack window opened after an evade dash

Traits carried over from the previous run feed a TraitModifiers struct
that is recomputed whenever the active set changes.

Events:
    damage_taken(amount)        – after mitigation, never while invulnerable
    damage_dealt(CombatResult)  – once per connecting hit
    died(agent)                 – exactly once
"""

from __future__ import annotations

import logging
from typing import Iterable

from settings import (
    AGENT_MAX_HP, AGENT_DAMAGE, AGENT_MOVE_SPEED, AGENT_ATTACK_COOLDOWN,
    AGENT_ATTACK_RANGE, AGENT_RADIUS, AGENT_START_X, AGENT_START_Y,
)
from entities.character import Character
from systems.combat_system import CombatSystem, mitigate, total_reduction
from systems.trait_system import TraitModifiers, compute_modifiers, get_trait

logger = logging.getLogger(__name__)


class Agent(Character):
    """Player-directed combat unit."""

    def __init__(self, x: float = AGENT_START_X, y: float = AGENT_START_Y,
                 traits: Iterable[str] = ()):
        super().__init__(x, y, radius=AGENT_RADIUS, max_hp=AGENT_MAX_HP)

        # Offense
        self.damage = AGENT_DAMAGE
        self.attack_range = AGENT_ATTACK_RANGE
        self.base_attack_cooldown = AGENT_ATTACK_COOLDOWN
        self.attack_cooldown_max = AGENT_ATTACK_COOLDOWN
        self.attack_cooldown = 0.0
        self.damage_multiplier = 1.0

        # Movement
        self.base_speed = AGENT_MOVE_SPEED
        self.move_speed = AGENT_MOVE_SPEED

        # Defense
        self.damage_reduction = 0.0
        self.invulnerable = False

        # Post-evade counter window
        self.post_evade_timer = 0.0
        self._reflex_ready = False

        # Traits
        self.active_traits: set[str] = set()
        self.modifiers = TraitModifiers()
        for trait_id in traits:
            self.apply_trait(trait_id)

        self._combat = CombatSystem()

    # ── Properties ────────────────────────────────────────

    @property
    def post_evade_open(self) -> bool:
        return self.post_evade_timer > 0

    # ── Per-tick timers ───────────────────────────────────

    def update(self, dt: float):
        """Decrement attack cooldown and the post-evade window."""
        if self.attack_cooldown > 0:
            self.attack_cooldown = max(0.0, self.attack_cooldown - dt)
        if self.post_evade_timer > 0:
            self.post_evade_timer -= dt
            if self.post_evade_timer <= 0:
                self.close_post_evade_window()

    # ── Post-evade window ─────────────────────────────────

    def open_post_evade_window(self, duration: float):
        self.post_evade_timer = duration
        self._reflex_ready = True

    def close_post_evade_window(self):
        self.post_evade_timer = 0.0
        self._reflex_ready = False

    def consume_reflex_bonus(self) -> bool:
        """True once per open window when the Reflex Burst trait is active."""
        if (self._reflex_ready and self.post_evade_open
                and self.modifiers.post_evade_damage_bonus > 0):
            self._reflex_ready = False
            return True
        return False

    # ── Combat ────────────────────────────────────────────

    def take_damage(self, amount: float) -> float:
        """Apply mitigated damage. Returns the effective amount (0 if ignored)."""
        if not self.alive or self.invulnerable:
            return 0.0

        reduction = total_reduction(
            self.damage_reduction,
            self.post_evade_open,
            self.modifiers.post_evade_reduction,
        )
        effective = mitigate(amount, reduction)
        # Listeners see the hit before a killing blow fires "died"
        self.emit("damage_taken", effective)
        self._lose_health(effective)
        logger.debug("Agent took %.1f (raw %.1f, reduction %.2f) hp=%.1f",
                     effective, amount, reduction, self.hp)
        return effective

    def basic_attack(self, enemies) -> list:
        """Swing at every enemy in reach if the attack is off cooldown.

        Returns the list of CombatResult for connecting hits (possibly empty).
        """
        if not self.alive or self.attack_cooldown > 0:
            return []
        self.attack_cooldown = self.attack_cooldown_max

        results = self._combat.resolve_swing(self, enemies)
        for result in results:
            self.emit("damage_dealt", result)
        return results

    # ── Traits ────────────────────────────────────────────

    def apply_trait(self, trait_id: str) -> bool:
        """Activate *trait_id*. Re-applying or unknown ids are no-ops."""
        if trait_id in self.active_traits:
            return False
        if get_trait(trait_id) is None:
            logger.warning("Ignoring unknown trait %r", trait_id)
            return False
        self.active_traits.add(trait_id)
        self.modifiers = compute_modifiers(self.active_traits)
        logger.info("Trait activated: %s", trait_id)
        return True

    def remove_trait(self, trait_id: str) -> bool:
        if trait_id not in self.active_traits:
            return False
        self.active_traits.discard(trait_id)
        self.modifiers = compute_modifiers(self.active_traits)
        return True

    def has_trait(self, trait_id: str) -> bool:
        return trait_id in self.active_traits

    # ── Snapshot ──────────────────────────────────────────

    def get_state_snapshot(self) -> dict:
        snapshot = super().get_state_snapshot()
        snapshot.update({
            "invulnerable": self.invulnerable,
            "damage_reduction": self.damage_reduction,
            "damage_multiplier": self.damage_multiplier,
            "post_evade_timer": round(self.post_evade_timer, 1),
            "active_traits": sorted(self.active_traits),
        })
        return snapshot
