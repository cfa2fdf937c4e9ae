"""
character.py – Shared base for every combatant in the arena.

Holds position / velocity (``pygame.math.Vector2``), a circular body
radius, and health bookkeeping. Subclass for Agent / Enemy specifics.

Health invariants:
- hp always stays inside [0, max_hp]
- the terminal "died" event fires exactly once
- once dead, every further damage call is a no-op
"""

from __future__ import annotations

import logging

import pygame
from pygame.math import Vector2

from utils.events import EventEmitter

logger = logging.getLogger(__name__)


class Character(EventEmitter):
    """Circular combatant with health and a "died" signal.

    Events:
        died(character) – fired once when hp reaches 0
    """

    def __init__(self, x: float, y: float, radius: float, max_hp: float):
        super().__init__()
        # Position / movement (integrated by the arena)
        self.position = Vector2(x, y)
        self.velocity = Vector2(0, 0)
        self.radius = radius

        # Health
        self.max_hp = max_hp
        self.hp = max_hp
        self._dead = False

    # ── Properties ────────────────────────────────────────

    @property
    def alive(self) -> bool:
        return not self._dead

    @property
    def x(self) -> float:
        return self.position.x

    @property
    def y(self) -> float:
        return self.position.y

    @property
    def hp_fraction(self) -> float:
        return self.hp / max(1e-9, self.max_hp)

    @property
    def rect(self) -> pygame.Rect:
        """Bounding box of the body circle, for overlap queries."""
        size = int(self.radius * 2)
        box = pygame.Rect(0, 0, size, size)
        box.center = (round(self.position.x), round(self.position.y))
        return box

    def distance_to(self, other) -> float:
        target = other.position if hasattr(other, "position") else other
        return self.position.distance_to(target)

    # ── Health ────────────────────────────────────────────

    def heal(self, amount: float) -> float:
        """Restore up to *amount* HP. Returns the HP actually restored."""
        if self._dead or amount <= 0:
            return 0.0
        before = self.hp
        self.hp = min(self.max_hp, self.hp + amount)
        return self.hp - before

    def _lose_health(self, amount: float) -> float:
        """Subtract *amount*, clamp at 0 and fire "died" once."""
        before = self.hp
        self.hp = max(0.0, self.hp - amount)
        if self.hp <= 0 and not self._dead:
            self.hp = 0.0
            self._dead = True
            self.velocity = Vector2(0, 0)
            logger.debug("%s died", self.__class__.__name__)
            self.emit("died", self)
        return before - self.hp

    # ── Serialization helpers ─────────────────────────────

    def get_state_snapshot(self) -> dict:
        return {
            "hp": round(self.hp, 2),
            "max_hp": self.max_hp,
            "x": round(self.position.x, 1),
            "y": round(self.position.y, 1),
            "vx": round(self.velocity.x, 1),
            "vy": round(self.velocity.y, 1),
            "alive": self.alive,
        }
