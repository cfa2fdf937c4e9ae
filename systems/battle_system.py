"""
battle_system.py – Headless run lifecycle.

Owns one run: the agent and its AI, spawned enemies, projectiles,
barriers, the run timer and telemetry. ``update(dt)`` is the single
entry point per simulated step and always runs in this order:

    1. timers      – run clock, telemetry clock, strategy / low-HP time
    2. strategy    – AgentAI (which ticks the agent's own countdowns)
    3. entities    – spawns, enemies, projectiles, barriers, integration

Kills are recorded from each enemy's "died" event, i.e. inside the
same pass that dropped its HP to zero and before dead enemies are
pruned. The run ends exactly once: on agent death (defeat) or when
the timer completes (victory). Ending finalizes telemetry, resolves
growth, and saves a RunRecord if a repository was provided.

Events:
    run_ended(BattleSystem)
"""

from __future__ import annotations

import logging
import random

from settings import RUN_DURATION, LOW_HP_FRACTION
from ai.agent_ai import AgentAI
from ai.strategy import Strategy
from entities.agent import Agent
from entities.enemy_factory import EnemyFactory
from systems.arena import Arena, build_barriers
from systems.growth_resolver import GrowthResolver, GrowthResult
from systems.projectile_system import ProjectileSystem
from systems.run_recorder import RunRecord, RunRepository
from systems.run_timer import RunTimer
from systems.telemetry import Telemetry, TelemetryRecord, RunResult
from utils.events import EventEmitter

logger = logging.getLogger(__name__)


class BattleSystem(EventEmitter):
    """One timed run against the spawn waves."""

    def __init__(self, repository: RunRepository | None = None,
                 traits=None,
                 strategy: Strategy | str = Strategy.ENGAGE,
                 rng: random.Random | None = None,
                 duration: float = RUN_DURATION,
                 arena: Arena | None = None,
                 factory: EnemyFactory | None = None,
                 growth_resolver: GrowthResolver | None = None,
                 with_barriers: bool = True):
        super().__init__()
        self.repository = repository
        self.arena = arena or Arena()

        if traits is None:
            traits = repository.latest_traits() if repository is not None else []
        self.agent = Agent(traits=traits)
        self.agent_ai = AgentAI(self.agent, self.arena, strategy=strategy)

        self.factory = factory or EnemyFactory(rng)
        self.projectiles = ProjectileSystem()
        self.barriers = build_barriers() if with_barriers else []
        self.enemies: list = []

        self.timer = RunTimer(duration)
        self.telemetry = Telemetry()
        self.growth_resolver = growth_resolver or GrowthResolver()

        # Outcome (filled by end_run)
        self.result: RunResult | None = None
        self.final_telemetry: TelemetryRecord | None = None
        self.growth: GrowthResult | None = None
        self.run_record: RunRecord | None = None

        self.agent.on("damage_taken", self._on_agent_damaged)
        self.agent.on("damage_dealt", self._on_damage_dealt)
        self.agent.on("died", self._on_agent_died)
        self.timer.on("complete", self._on_timer_complete)
        self.timer.start()

        logger.info("Run started (%s, traits: %s)",
                    self.agent_ai.current_strategy.value,
                    ", ".join(sorted(self.agent.active_traits)) or "none")

    # ── Properties ────────────────────────────────────────

    @property
    def is_over(self) -> bool:
        return self.result is not None

    @property
    def current_strategy(self) -> Strategy:
        return self.agent_ai.current_strategy

    @property
    def elapsed_time(self) -> float:
        return self.timer.elapsed_time

    # ── Input ─────────────────────────────────────────────

    def set_strategy(self, strategy) -> bool:
        """Player strategy selection. Counted only when it actually changes."""
        if self.is_over:
            return False
        old = self.agent_ai.current_strategy
        if not self.agent_ai.set_strategy(strategy, self.agent):
            return False
        self.telemetry.record_strategy_change(old, self.agent_ai.current_strategy)
        return True

    def add_enemy(self, enemy):
        enemy.on("died", self._on_enemy_died)
        enemy.on("projectile_fired", self.projectiles.add)
        self.enemies.append(enemy)

    # ── Tick ──────────────────────────────────────────────

    def update(self, dt: float):
        if self.is_over:
            return

        # 1. Timers
        self.timer.update(dt)
        if self.is_over:
            return
        self.telemetry.advance(dt)
        self.telemetry.record_strategy_time(self.current_strategy, dt)
        if self.agent.hp_fraction <= LOW_HP_FRACTION:
            self.telemetry.record_time_below_hp30(dt)

        # 2. Strategy
        self.agent_ai.update(self.agent, self.enemies, dt)
        if self.agent_ai.event_evade_dash:
            self.telemetry.record_evade()
        if self.agent_ai.event_burst_activated:
            self.telemetry.record_burst_activation()
        if self.is_over:
            return

        # 3. Entities
        for enemy in self.factory.spawn_wave(self.timer.elapsed_time):
            self.add_enemy(enemy)

        for enemy in list(self.enemies):
            enemy.update(self.agent, dt, self.arena)
            if self.is_over:
                return

        self.projectiles.update(dt, self.agent, self.arena)
        for barrier in self.barriers:
            barrier.update(self.agent, dt)
        if self.is_over:
            return

        self.arena.integrate([self.agent] + self.enemies, dt)
        self.enemies = [e for e in self.enemies if e.alive]

    # ── Event handlers ────────────────────────────────────

    def _on_agent_damaged(self, amount: float):
        if not self.is_over:
            self.telemetry.record_damage_taken(amount)

    def _on_damage_dealt(self, result):
        if not self.is_over:
            self.telemetry.record_damage_dealt(result.damage)

    def _on_enemy_died(self, enemy):
        if not self.is_over:
            self.telemetry.record_kill(enemy.archetype, self.timer.elapsed_time)

    def _on_agent_died(self, _agent):
        self.end_run(victory=False)

    def _on_timer_complete(self):
        self.end_run(victory=True)

    # ── Run end ───────────────────────────────────────────

    def end_run(self, victory: bool):
        """Finalize, resolve growth and persist. Later calls are ignored."""
        if self.is_over:
            return
        self.result = RunResult.VICTORY if victory else RunResult.DEFEAT
        self.timer.is_complete = True

        self.final_telemetry = self.telemetry.finalize_run(
            self.timer.elapsed_time, self.result)
        self.growth = self.growth_resolver.resolve(self.final_telemetry)
        if self.repository is not None:
            self.run_record = self.repository.record_run(
                self.final_telemetry, self.growth)

        logger.info("Run %s at %.1fs: profile %s",
                    "complete" if victory else "failed",
                    self.timer.elapsed_time, self.growth.profile.profile_name)
        self.emit("run_ended", self)

    def get_debug_info(self) -> dict:
        info = self.agent_ai.get_debug_info()
        info.update({
            "elapsed": round(self.timer.elapsed_time, 2),
            "remaining": round(self.timer.remaining_time, 2),
            "enemies": len(self.enemies),
            "projectiles": len(self.projectiles),
            "agent": self.agent.get_state_snapshot(),
        })
        return info
