"""
enemy_factory.py – Timed wave spawning.

Waves are read from ``settings.WAVES``: each entry covers the run up to
its end second, spawns one enemy per interval, and picks the archetype
with a single uniform draw walked through the cumulative chances
(RUSHER takes whatever probability is left).

The random source is injectable so spawns are reproducible in tests.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from settings import ARENA_WIDTH, ARENA_HEIGHT, SPAWN_EDGE_MARGIN, WAVES
from entities.enemy import Enemy, EnemyArchetype, create_enemy

logger = logging.getLogger(__name__)


@dataclass
class WaveConfig:
    """One spawn wave."""

    end_second: float
    interval_ms: float
    chances: dict = field(default_factory=dict)

    def pick_archetype(self, roll: float) -> EnemyArchetype:
        """Walk the cumulative chances with one uniform *roll* in [0, 1)."""
        cumulative = 0.0
        for name, chance in self.chances.items():
            cumulative += chance
            if roll < cumulative:
                return EnemyArchetype(name)
        return EnemyArchetype.RUSHER


def default_waves() -> list[WaveConfig]:
    return [WaveConfig(end, interval, dict(chances)) for end, interval, chances in WAVES]


class EnemyFactory:
    """Spawns enemies on the arena edge according to the wave table."""

    SIDES = ("top", "right", "bottom", "left")

    def __init__(self, rng: random.Random | None = None,
                 waves: list[WaveConfig] | None = None,
                 width: int = ARENA_WIDTH, height: int = ARENA_HEIGHT,
                 margin: float = SPAWN_EDGE_MARGIN):
        self.rng = rng or random.Random()
        self.waves = waves or default_waves()
        self.width = width
        self.height = height
        self.margin = margin
        self.last_spawn_time = 0.0   # seconds
        self.spawned_count = 0

    def reset(self):
        self.last_spawn_time = 0.0
        self.spawned_count = 0

    def wave_for(self, elapsed_seconds: float) -> WaveConfig:
        for wave in self.waves:
            if elapsed_seconds < wave.end_second:
                return wave
        return self.waves[-1]

    def wave_index(self, elapsed_seconds: float) -> int:
        return self.waves.index(self.wave_for(elapsed_seconds)) + 1

    def spawn_wave(self, elapsed_seconds: float) -> list[Enemy]:
        """Return the enemies due at *elapsed_seconds* (zero or one)."""
        wave = self.wave_for(elapsed_seconds)
        if elapsed_seconds - self.last_spawn_time < wave.interval_ms / 1000.0:
            return []
        self.last_spawn_time = elapsed_seconds
        archetype = wave.pick_archetype(self.rng.random())
        return [self.spawn_enemy(archetype)]

    def spawn_enemy(self, archetype=EnemyArchetype.RUSHER) -> Enemy:
        x, y = self.edge_position()
        enemy = create_enemy(archetype, x, y)
        self.spawned_count += 1
        logger.debug("Spawned %s at (%.0f, %.0f)", enemy.archetype.value, x, y)
        return enemy

    def edge_position(self) -> tuple[float, float]:
        """Uniform point just outside a uniformly chosen arena edge."""
        side = self.SIDES[min(3, int(self.rng.random() * 4))]
        along = self.rng.random()
        if side == "top":
            return along * self.width, -self.margin
        if side == "right":
            return self.width + self.margin, along * self.height
        if side == "bottom":
            return along * self.width, self.height + self.margin
        return -self.margin, along * self.height
