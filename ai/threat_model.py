"""
threat_model.py – Scores live enemies relative to the agent.

    score = (1000 / (distance + 1)) * 2.0 + damage * 1.5
    score *= 0.5 when the enemy is below 30 % of its max HP

Scores are recomputed on every call; positions and HP change every
tick so nothing is cached. The only agent-side input besides position
is the sniper weight granted by the Threat Redirect trait.
"""

from __future__ import annotations

from dataclasses import dataclass

from pygame.math import Vector2

from settings import (
    THREAT_DISTANCE_WEIGHT, THREAT_DAMAGE_WEIGHT,
    THREAT_WOUNDED_FRACTION, THREAT_WOUNDED_MULT,
)
from entities.enemy import EnemyArchetype


@dataclass
class ThreatConfig:
    """Weights for the threat formula."""

    distance_weight: float = THREAT_DISTANCE_WEIGHT
    damage_weight: float = THREAT_DAMAGE_WEIGHT
    wounded_fraction: float = THREAT_WOUNDED_FRACTION
    wounded_mult: float = THREAT_WOUNDED_MULT


class ThreatModel:
    """Pure function of the current world state."""

    def __init__(self, config: ThreatConfig | None = None):
        self.cfg = config or ThreatConfig()

    def score(self, agent, enemy) -> float:
        cfg = self.cfg
        dist = Vector2(agent.position).distance_to(enemy.position)

        value = (1000.0 / (dist + 1.0)) * cfg.distance_weight
        value += enemy.damage * cfg.damage_weight

        if enemy.hp < enemy.max_hp * cfg.wounded_fraction:
            value *= cfg.wounded_mult

        if getattr(enemy, "archetype", None) == EnemyArchetype.SNIPER:
            modifiers = getattr(agent, "modifiers", None)
            if modifiers is not None:
                value *= modifiers.sniper_threat_weight

        return value

    def calculate_threats(self, agent, enemies) -> dict:
        """Map each live enemy to its score, in iteration order."""
        return {
            enemy: self.score(agent, enemy)
            for enemy in enemies
            if enemy.alive
        }

    def primary_threat(self, agent, enemies):
        """Highest-scoring enemy; the first maximal one wins ties."""
        best = None
        best_score = float("-inf")
        for enemy, value in self.calculate_threats(agent, enemies).items():
            if value > best_score:
                best_score = value
                best = enemy
        return best

    def top_threats(self, agent, enemies, count: int) -> list:
        threats = self.calculate_threats(agent, enemies)
        # sorted() is stable, so equal scores keep iteration order
        ranked = sorted(threats.items(), key=lambda item: item[1], reverse=True)
        return [enemy for enemy, _ in ranked[:max(0, count)]]
