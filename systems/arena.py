"""
arena.py – Headless physical world the AI steers through.

Provides the three services the decision core relies on:

    apply_velocity(entity, vector)  – movement sink
    integrate(entities, dt)         – position integration + bounds clamp
    overlaps(region_a, region_b)    – rect overlap query

plus the electric barrier hazards that sit on the arena floor.
Nothing here draws; regions are plain ``pygame.Rect`` objects.
"""

from __future__ import annotations

import logging

import pygame
from pygame.math import Vector2

from settings import (
    ARENA_WIDTH, ARENA_HEIGHT,
    BARRIER_DAMAGE_PER_SECOND, BARRIER_WIDTH, BARRIER_SEGMENTS,
)

logger = logging.getLogger(__name__)


class Arena:
    """Rectangular world with bounds clamping."""

    def __init__(self, width: int = ARENA_WIDTH, height: int = ARENA_HEIGHT):
        self.width = width
        self.height = height
        self.bounds = pygame.Rect(0, 0, width, height)

    # ── Movement sink ─────────────────────────────────────

    def apply_velocity(self, entity, vector) -> None:
        entity.velocity = Vector2(vector)

    def integrate(self, entities, dt: float) -> None:
        """Advance every live entity by its velocity (*dt* in ms)."""
        step = dt / 1000.0
        for entity in entities:
            if not entity.alive:
                continue
            entity.position += entity.velocity * step
            self.clamp(entity)

    def clamp(self, entity) -> None:
        """Keep the body fully inside the arena once it has entered.

        Freshly spawned enemies start outside the edge; they are only
        clamped on the axis where they are already inside.
        """
        r = entity.radius
        pos = entity.position
        if 0 <= pos.x <= self.width:
            pos.x = max(r, min(self.width - r, pos.x))
        if 0 <= pos.y <= self.height:
            pos.y = max(r, min(self.height - r, pos.y))

    # ── Overlap query ─────────────────────────────────────

    @staticmethod
    def overlaps(region_a: pygame.Rect, region_b: pygame.Rect) -> bool:
        return bool(pygame.Rect(region_a).colliderect(region_b))

    def contains(self, point) -> bool:
        return self.bounds.collidepoint(point)


# ══════════════════════════════════════════════════════════
#  Hazards
# ══════════════════════════════════════════════════════════

class ElectricBarrier:
    """Straight damaging segment. Hurts the agent while its body touches it."""

    def __init__(self, start, end, damage_per_second: float = BARRIER_DAMAGE_PER_SECOND,
                 width: int = BARRIER_WIDTH):
        self.start = Vector2(start)
        self.end = Vector2(end)
        self.damage_per_second = damage_per_second
        self.width = width
        self.active = True

    def touches(self, rect: pygame.Rect) -> bool:
        zone = pygame.Rect(rect).inflate(self.width, self.width)
        start = (round(self.start.x), round(self.start.y))
        end = (round(self.end.x), round(self.end.y))
        return bool(zone.clipline(start, end))

    def update(self, agent, dt: float) -> float:
        """Apply tick-scaled damage to *agent* on contact. Returns damage dealt."""
        if not self.active or not agent.alive or agent.invulnerable:
            return 0.0
        if not self.touches(agent.rect):
            return 0.0
        return agent.take_damage(self.damage_per_second * dt / 1000.0)

    def toggle(self, active: bool | None = None) -> None:
        self.active = (not self.active) if active is None else bool(active)


def build_barriers(segments=BARRIER_SEGMENTS) -> list[ElectricBarrier]:
    return [ElectricBarrier(start, end) for start, end in segments]
