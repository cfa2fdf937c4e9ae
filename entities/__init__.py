"""entities package – Character base, Agent, enemy archetypes and the wave factory."""

from .character import Character
from .agent import Agent
from .enemy import (
    Enemy, EnemyArchetype, RusherEnemy, SniperEnemy, EliteEnemy, create_enemy,
)
from .enemy_factory import EnemyFactory, WaveConfig
