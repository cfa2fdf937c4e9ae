"""
projectile_system.py – Sniper projectile system.

Handles:
- Projectile creation, movement, lifetime and out-of-bounds destruction
- Contact with the agent through the arena's overlap query
- Self-destruct on hit

Projectiles pass through an invulnerable agent (evade i-frames).
"""

from __future__ import annotations

import logging

import pygame
from pygame.math import Vector2

from settings import (
    ARENA_WIDTH, ARENA_HEIGHT,
    PROJECTILE_SPEED, PROJECTILE_RADIUS, PROJECTILE_LIFETIME,
)

logger = logging.getLogger(__name__)


class Projectile:
    """A single sniper shot.

    Attributes
    ----------
    position    : Vector2 – center
    velocity    : Vector2 – units/sec
    damage      : float   – damage applied on hit
    radius      : int     – collision radius
    timer       : float   – ms of life remaining
    active      : bool    – False after hit or expiry
    owner_id    : int     – id() of the firing enemy
    """

    __slots__ = (
        "position", "velocity", "damage", "radius",
        "lifetime", "timer", "active", "owner_id",
    )

    def __init__(self, origin, direction, damage: float,
                 speed: float = PROJECTILE_SPEED,
                 radius: int = PROJECTILE_RADIUS,
                 lifetime: float = PROJECTILE_LIFETIME,
                 owner_id: int = 0):
        self.position = Vector2(origin)
        self.velocity = Vector2(direction) * speed
        self.damage = damage
        self.radius = radius
        self.lifetime = lifetime
        self.timer = lifetime
        self.active = True
        self.owner_id = owner_id

    @property
    def rect(self) -> pygame.Rect:
        box = pygame.Rect(0, 0, self.radius * 2, self.radius * 2)
        box.center = (round(self.position.x), round(self.position.y))
        return box

    def update(self, dt: float):
        """Move and age the projectile (*dt* in ms)."""
        if not self.active:
            return
        self.position += self.velocity * (dt / 1000.0)
        self.timer -= dt

        if self.timer <= 0:
            self.active = False

        margin = 50
        if (self.position.x < -margin or self.position.x > ARENA_WIDTH + margin
                or self.position.y < -margin or self.position.y > ARENA_HEIGHT + margin):
            self.active = False

    def check_collision(self, target, arena) -> bool:
        """True (and deactivated) when overlapping a vulnerable *target*."""
        if not self.active or not target.alive:
            return False
        if id(target) == self.owner_id:
            return False
        if getattr(target, "invulnerable", False):
            return False
        if arena.overlaps(self.rect, target.rect):
            self.active = False
            return True
        return False


class ProjectileSystem:
    """Owns every in-flight projectile for the run."""

    def __init__(self):
        self.projectiles: list[Projectile] = []

    def add(self, projectile: Projectile):
        self.projectiles.append(projectile)

    def update(self, dt: float, agent, arena) -> int:
        """Advance all projectiles; returns how many hit the agent."""
        hits = 0
        for proj in self.projectiles:
            proj.update(dt)
            if proj.check_collision(agent, arena):
                agent.take_damage(proj.damage)
                hits += 1
        self.projectiles = [p for p in self.projectiles if p.active]
        return hits

    def clear(self):
        self.projectiles.clear()

    def __len__(self) -> int:
        return len(self.projectiles)
