"""
enemy.py – Archetype-driven enemies fighting the agent.

Three archetypes share the Character body and a stat block from
settings.py; each owns a small distance-band state machine:

    RUSHER – closes to melee reach and swings on cooldown
    SNIPER – holds a firing band (flee < 150, approach > 240, slow orbit
             between) and fires projectiles while in range
    ELITE  – slow rusher with a longer melee; inside the charge band it
             telegraphs for 800 ms, then charges at the agent's position
             captured at telegraph end

Movement is issued through the arena (``apply_velocity``); all waits
are countdown fields decremented in ``update``.

Events:
    damage_taken(amount)
    projectile_fired(projectile)   – SNIPER only
    died(enemy)                    – exactly once
"""

from __future__ import annotations

import logging
from enum import Enum

from pygame.math import Vector2

from settings import (
    RUSHER_STATS, SNIPER_STATS, ELITE_STATS,
    SNIPER_FLEE_BELOW, SNIPER_APPROACH_ABOVE,
    SNIPER_ORBIT_DISTANCE, SNIPER_ORBIT_SPEED_MULT,
    ELITE_TELEGRAPH_TIME, ELITE_CHARGE_SPEED, ELITE_CHARGE_DURATION,
    ELITE_CHARGE_RANGE_MIN, ELITE_CHARGE_RANGE_MAX, ELITE_CHARGE_COOLDOWN,
)
from entities.character import Character
from ai import steering
from systems.projectile_system import Projectile

logger = logging.getLogger(__name__)


class EnemyArchetype(str, Enum):
    RUSHER = "rusher"
    SNIPER = "sniper"
    ELITE = "elite"


ARCHETYPE_STATS: dict[EnemyArchetype, dict] = {
    EnemyArchetype.RUSHER: RUSHER_STATS,
    EnemyArchetype.SNIPER: SNIPER_STATS,
    EnemyArchetype.ELITE: ELITE_STATS,
}


def _move(arena, entity, velocity: Vector2):
    if arena is not None:
        arena.apply_velocity(entity, velocity)
    else:
        entity.velocity = Vector2(velocity)


# ══════════════════════════════════════════════════════════
#  Base enemy
# ══════════════════════════════════════════════════════════

class Enemy(Character):
    """Shared stat block, damage intake and melee for every archetype."""

    archetype: EnemyArchetype = EnemyArchetype.RUSHER

    def __init__(self, x: float, y: float, stats: dict | None = None):
        block = dict(stats or ARCHETYPE_STATS[self.archetype])
        super().__init__(x, y, radius=block["radius"], max_hp=block["hp"])
        self.speed = block["speed"]
        self.damage = block["damage"]
        self.attack_range = block["attack_range"]
        self.attack_cooldown_max = block["attack_cooldown"]
        self.attack_cooldown = 0.0
        self.on("died", self._on_died)

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(hp={self.hp:.0f}/{self.max_hp}, "
                f"pos=({self.x:.0f}, {self.y:.0f}))")

    # ── Damage intake ─────────────────────────────────────

    def take_damage(self, amount: float) -> float:
        """Apply raw damage. Returns the amount applied (0 once dead)."""
        if not self.alive or amount <= 0:
            return 0.0
        lost = self._lose_health(amount)
        self.emit("damage_taken", lost)
        return lost

    def _on_died(self, _enemy):
        self.cancel_actions()

    def cancel_actions(self):
        """Drop any archetype sub-state in flight."""

    # ── Per-tick ──────────────────────────────────────────

    def update(self, agent, dt: float, arena=None):
        """One tick: timers first, then archetype behavior."""
        if not self.alive:
            return
        self._tick_timers(dt)
        if agent is None or not agent.alive:
            _move(arena, self, steering.stop())
            return
        self._behave(agent, dt, arena)

    def _tick_timers(self, dt: float):
        if self.attack_cooldown > 0:
            self.attack_cooldown = max(0.0, self.attack_cooldown - dt)

    def _behave(self, agent, dt: float, arena):
        raise NotImplementedError

    # ── Melee ─────────────────────────────────────────────

    def melee_reach(self, agent) -> float:
        return self.attack_range + agent.radius

    def try_melee(self, agent) -> bool:
        """Swing at *agent* if in reach and off cooldown."""
        if self.attack_cooldown > 0:
            return False
        if self.distance_to(agent) > self.melee_reach(agent):
            return False
        self.attack_cooldown = self.attack_cooldown_max
        agent.take_damage(self.damage)
        logger.debug("%s melee for %s", self.archetype.value, self.damage)
        return True

    def get_state_snapshot(self) -> dict:
        snapshot = super().get_state_snapshot()
        snapshot["archetype"] = self.archetype.value
        snapshot["attack_cooldown"] = round(self.attack_cooldown, 1)
        return snapshot


# ══════════════════════════════════════════════════════════
#  Archetypes
# ══════════════════════════════════════════════════════════

class RusherEnemy(Enemy):
    archetype = EnemyArchetype.RUSHER

    def _behave(self, agent, dt, arena):
        if self.distance_to(agent) <= self.melee_reach(agent):
            _move(arena, self, steering.stop())
        else:
            _move(arena, self, steering.seek(self.position, agent.position, self.speed))
        self.try_melee(agent)


class SniperEnemy(Enemy):
    """Ranged enemy; keeps its fired projectiles in ``projectiles``."""

    archetype = EnemyArchetype.SNIPER

    def __init__(self, x: float, y: float, stats: dict | None = None):
        super().__init__(x, y, stats)
        self.projectiles: list[Projectile] = []

    def _behave(self, agent, dt, arena):
        dist = self.distance_to(agent)
        if dist < SNIPER_FLEE_BELOW:
            velocity = steering.flee(self.position, agent.position, self.speed)
        elif dist > SNIPER_APPROACH_ABOVE:
            velocity = steering.seek(self.position, agent.position, self.speed)
        else:
            velocity = steering.orbit(
                self.position, agent.position,
                SNIPER_ORBIT_DISTANCE, self.speed * SNIPER_ORBIT_SPEED_MULT,
            )
        _move(arena, self, velocity)

        if dist <= self.attack_range and self.attack_cooldown <= 0:
            self.fire(agent)

    def fire(self, agent) -> Projectile:
        self.attack_cooldown = self.attack_cooldown_max
        projectile = Projectile(
            self.position,
            steering.heading(self.position, agent.position),
            self.damage,
            owner_id=id(self),
        )
        self.projectiles = [p for p in self.projectiles if p.active]
        self.projectiles.append(projectile)
        self.emit("projectile_fired", projectile)
        logger.debug("Sniper fired at distance %.0f", self.distance_to(agent))
        return projectile

    def cancel_actions(self):
        self.projectiles = [p for p in self.projectiles if p.active]


class EliteEnemy(Enemy):
    """Slow bruiser with a telegraphed charge.

    Sub-state: ``"chase"`` → ``"telegraph"`` → ``"charge"`` → ``"chase"``.
    """

    archetype = EnemyArchetype.ELITE

    def __init__(self, x: float, y: float, stats: dict | None = None):
        super().__init__(x, y, stats)
        self.state = "chase"
        self.telegraph_timer = 0.0
        self.charge_timer = 0.0
        self.charge_cooldown = 0.0
        self.charge_velocity = Vector2(0, 0)
        self.charge_target: Vector2 | None = None
        self._charge_hit = False

    @property
    def telegraphing(self) -> bool:
        return self.state == "telegraph"

    @property
    def charging(self) -> bool:
        return self.state == "charge"

    def _tick_timers(self, dt):
        super()._tick_timers(dt)
        if self.charge_cooldown > 0:
            self.charge_cooldown = max(0.0, self.charge_cooldown - dt)
        if self.state == "telegraph":
            self.telegraph_timer -= dt
        elif self.state == "charge":
            self.charge_timer -= dt

    def _behave(self, agent, dt, arena):
        if self.state == "telegraph":
            if self.telegraph_timer <= 0:
                self._start_charge(agent, arena)
            else:
                _move(arena, self, steering.stop())
            return

        if self.state == "charge":
            if self.charge_timer <= 0:
                self._end_charge(arena)
                return
            _move(arena, self, self.charge_velocity)
            if not self._charge_hit and self.distance_to(agent) <= self.melee_reach(agent):
                self._charge_hit = True
                agent.take_damage(self.damage)
                logger.debug("Elite charge connected")
            return

        # chase
        dist = self.distance_to(agent)
        if (self.charge_cooldown <= 0
                and ELITE_CHARGE_RANGE_MIN <= dist <= ELITE_CHARGE_RANGE_MAX):
            self.state = "telegraph"
            self.telegraph_timer = ELITE_TELEGRAPH_TIME
            _move(arena, self, steering.stop())
            logger.debug("Elite telegraphing charge")
            return

        if dist <= self.melee_reach(agent):
            _move(arena, self, steering.stop())
        else:
            _move(arena, self, steering.seek(self.position, agent.position, self.speed))
        self.try_melee(agent)

    def _start_charge(self, agent, arena):
        self.charge_target = Vector2(agent.position)
        self.charge_velocity = steering.seek(
            self.position, self.charge_target, ELITE_CHARGE_SPEED)
        self.state = "charge"
        self.charge_timer = ELITE_CHARGE_DURATION
        self._charge_hit = False
        _move(arena, self, self.charge_velocity)

    def _end_charge(self, arena):
        self.state = "chase"
        self.charge_timer = 0.0
        self.charge_cooldown = ELITE_CHARGE_COOLDOWN
        self.charge_velocity = Vector2(0, 0)
        _move(arena, self, steering.stop())

    def cancel_actions(self):
        self.state = "chase"
        self.telegraph_timer = 0.0
        self.charge_timer = 0.0
        self.charge_velocity = Vector2(0, 0)
        self.charge_target = None


ENEMY_CLASSES: dict[EnemyArchetype, type] = {
    EnemyArchetype.RUSHER: RusherEnemy,
    EnemyArchetype.SNIPER: SniperEnemy,
    EnemyArchetype.ELITE: EliteEnemy,
}


def create_enemy(archetype, x: float, y: float) -> Enemy:
    """Build an enemy by archetype name or enum member."""
    try:
        kind = EnemyArchetype(str(getattr(archetype, "value", archetype)).lower())
    except ValueError:
        raise ValueError(f"Unknown enemy archetype: {archetype!r}") from None
    return ENEMY_CLASSES[kind](x, y)
