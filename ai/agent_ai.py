"""
agent_ai.py – Strategy state machine driving the agent.

One state per Strategy, each with its own private sub-state object, so
impossible combinations (e.g. burst active while fatigued) cannot be
represented:

    ENGAGE – seek the primary threat, dash-attack inside 200 units
    GUARD  – 50 % damage reduction, retreat when 3+ enemies crowd in
    EVADE  – regulate distance to the nearest enemy, dash away with
             i-frames, then open a counter-attack window
    BURST  – 1.5 s of fast, hard hits followed by 1 s of fatigue

Every wait is a countdown decremented at the top of ``update``; each
transition fires once when its countdown crosses zero. ``set_strategy``
is the only external transition and cancels whatever the outgoing
strategy still had running.

Event flags (``event_*``) are raised during one ``update`` and cleared
at the start of the next, for telemetry and presentation to read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from pygame.math import Vector2

from settings import (
    ENGAGE_DASH_COOLDOWN, ENGAGE_DASH_SPEED, ENGAGE_DASH_DURATION,
    ENGAGE_DASH_TRIGGER_RANGE,
    GUARD_DAMAGE_REDUCTION, GUARD_CROWD_RADIUS, GUARD_CROWD_COUNT,
    GUARD_RETREAT_SPEED_MULT, GUARD_ATTACK_HP_FRACTION,
    EVADE_DASH_COOLDOWN, EVADE_DASH_SPEED, EVADE_DASH_DURATION,
    EVADE_POST_WINDOW, EVADE_TRIGGER_RANGE, EVADE_SAFE_MIN, EVADE_SAFE_MAX,
    EVADE_ORBIT_DISTANCE, EVADE_FLEE_SPEED_MULT, EVADE_SEEK_SPEED_MULT,
    EVADE_ORBIT_SPEED_MULT,
    BURST_COOLDOWN, BURST_DURATION, BURST_FATIGUE_DURATION,
    BURST_DAMAGE_MULT, BURST_ATTACK_COOLDOWN_MULT,
    BURST_FATIGUE_COOLDOWN_MULT, BURST_FATIGUE_SPEED_MULT,
    BURST_HOLD_DISTANCE, BURST_TOO_CLOSE, BURST_TOO_FAR,
    BURST_FLEE_SPEED_MULT, BURST_SEEK_SPEED_MULT,
)
from ai import steering
from ai.strategy import Strategy
from ai.threat_model import ThreatModel

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════
#  Per-strategy sub-state
# ══════════════════════════════════════════════════════════

@dataclass
class EngageState:
    dash_timer: float = 0.0                  # ms left in the dash
    dash_velocity: Vector2 = field(default_factory=Vector2)

    @property
    def dashing(self) -> bool:
        return self.dash_timer > 0


@dataclass
class GuardState:
    retreating: bool = False


@dataclass
class EvadeState:
    dash_timer: float = 0.0                  # ms of i-frames left
    dash_velocity: Vector2 = field(default_factory=Vector2)

    @property
    def dashing(self) -> bool:
        return self.dash_timer > 0


class BurstPhase(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    FATIGUE = "fatigue"


@dataclass
class BurstState:
    phase: BurstPhase = BurstPhase.IDLE
    timer: float = 0.0                       # ms left in the current phase

    @property
    def active(self) -> bool:
        return self.phase is BurstPhase.ACTIVE

    @property
    def fatigued(self) -> bool:
        return self.phase is BurstPhase.FATIGUE


_STATE_TYPES = {
    Strategy.ENGAGE: EngageState,
    Strategy.GUARD: GuardState,
    Strategy.EVADE: EvadeState,
    Strategy.BURST: BurstState,
}


# ══════════════════════════════════════════════════════════
#  Agent AI
# ══════════════════════════════════════════════════════════

class AgentAI:
    """Turns the selected strategy into movement and ability use.

    Movement is issued through *arena* (``apply_velocity``); without an
    arena the velocity is written onto the agent directly.
    """

    def __init__(self, agent=None, arena=None,
                 threat_model: ThreatModel | None = None,
                 strategy: Strategy | str = Strategy.ENGAGE):
        self.agent = agent
        self.arena = arena
        self.threat_model = threat_model or ThreatModel()
        self.current_strategy = Strategy.parse(strategy)
        self.state = _STATE_TYPES[self.current_strategy]()
        self.special_cooldown = 0.0          # shared by every strategy

        # ── Per-update events ─────────────────────────────
        self.event_dash_attack: bool = False
        self.event_evade_dash: bool = False
        self.event_burst_activated: bool = False

        if agent is not None:
            self._enter_strategy(agent, self.current_strategy)

    # ── Strategy selection ────────────────────────────────

    def set_strategy(self, strategy, agent=None) -> bool:
        """Switch strategy. Returns False when *strategy* is already active."""
        new = Strategy.parse(strategy)
        if new is self.current_strategy:
            return False

        agent = agent or self.agent
        old = self.current_strategy
        if agent is not None:
            self._exit_strategy(agent, old)

        self.current_strategy = new
        self.state = _STATE_TYPES[new]()
        if agent is not None:
            self._enter_strategy(agent, new)

        logger.info("Strategy changed: %s -> %s", old.value, new.value)
        return True

    def _exit_strategy(self, agent, strategy: Strategy):
        state = self.state
        if strategy is Strategy.ENGAGE:
            if state.dashing:
                self._apply_velocity(agent, steering.stop())
        elif strategy is Strategy.GUARD:
            agent.damage_reduction = 0.0
        elif strategy is Strategy.EVADE:
            if state.dashing:
                agent.invulnerable = False
                self._apply_velocity(agent, steering.stop())
            agent.close_post_evade_window()
        elif strategy is Strategy.BURST:
            self._restore_burst_baseline(agent)

    def _enter_strategy(self, agent, strategy: Strategy):
        if strategy is Strategy.GUARD:
            agent.damage_reduction = self._guard_reduction(agent)

    # ── Main tick ─────────────────────────────────────────

    def update(self, agent, enemies, dt: float):
        """Advance one tick of *dt* milliseconds."""
        self.agent = agent
        self._clear_events()
        if not agent.alive:
            return

        # 1. Timers
        agent.update(dt)
        if self.special_cooldown > 0:
            self.special_cooldown -= dt
        hold = self._tick_strategy_timers(agent, dt)

        # 2. Strategy logic
        live = [e for e in enemies if e.alive]
        strategy = self.current_strategy
        if strategy is Strategy.ENGAGE:
            self._update_engage(agent, live, hold)
        elif strategy is Strategy.GUARD:
            self._update_guard(agent, live)
        elif strategy is Strategy.EVADE:
            self._update_evade(agent, live, hold)
        elif strategy is Strategy.BURST:
            self._update_burst(agent, live)

    def _clear_events(self):
        self.event_dash_attack = False
        self.event_evade_dash = False
        self.event_burst_activated = False

    def _tick_strategy_timers(self, agent, dt: float) -> bool:
        """Decrement sub-state countdowns and fire their transitions.

        Returns True when a dash ended this tick, so the stop holds for
        the rest of it.
        """
        state = self.state

        if isinstance(state, EngageState) and state.dashing:
            state.dash_timer -= dt
            if state.dash_timer <= 0:
                state.dash_timer = 0.0
                self._apply_velocity(agent, steering.stop())
                return True

        elif isinstance(state, EvadeState) and state.dashing:
            state.dash_timer -= dt
            if state.dash_timer <= 0:
                state.dash_timer = 0.0
                agent.invulnerable = False
                self._apply_velocity(agent, steering.stop())
                agent.open_post_evade_window(EVADE_POST_WINDOW)
                logger.debug("Evade dash finished, counter window open")
                return True

        elif isinstance(state, BurstState) and state.phase is not BurstPhase.IDLE:
            state.timer -= dt
            if state.timer <= 0:
                if state.active:
                    self._start_fatigue(agent)
                else:
                    state.phase = BurstPhase.IDLE
                    state.timer = 0.0
                    self._restore_burst_baseline(agent)
                    logger.debug("Burst fatigue over")

        return False

    # ── ENGAGE ────────────────────────────────────────────

    def _update_engage(self, agent, enemies, hold: bool):
        state: EngageState = self.state
        target = self.threat_model.primary_threat(agent, enemies)

        if state.dashing:
            self._apply_velocity(agent, state.dash_velocity)
        elif target is not None and not hold:
            self._apply_velocity(
                agent, steering.seek(agent.position, target.position, agent.move_speed))
            if (self.special_cooldown <= 0
                    and agent.distance_to(target) < ENGAGE_DASH_TRIGGER_RANGE):
                self._dash_attack(agent, target)
        elif target is None:
            self._apply_velocity(agent, steering.stop())

        agent.basic_attack(enemies)

    def _dash_attack(self, agent, target):
        state: EngageState = self.state
        self.special_cooldown = ENGAGE_DASH_COOLDOWN
        speed = ENGAGE_DASH_SPEED * (1.0 + agent.modifiers.dash_distance_bonus)
        state.dash_velocity = steering.seek(agent.position, target.position, speed)
        state.dash_timer = ENGAGE_DASH_DURATION
        self._apply_velocity(agent, state.dash_velocity)
        self.event_dash_attack = True
        logger.debug("Engage dash attack (speed %.0f)", speed)

    # ── GUARD ─────────────────────────────────────────────

    def _guard_reduction(self, agent) -> float:
        return GUARD_DAMAGE_REDUCTION + agent.modifiers.guard_reduction_bonus

    def _update_guard(self, agent, enemies):
        state: GuardState = self.state
        agent.damage_reduction = self._guard_reduction(agent)

        target = self.threat_model.primary_threat(agent, enemies)
        nearby = self.count_enemies_in_range(agent, enemies, GUARD_CROWD_RADIUS)
        state.retreating = target is not None and nearby >= GUARD_CROWD_COUNT

        if state.retreating:
            self._apply_velocity(agent, steering.flee(
                agent.position, target.position,
                agent.move_speed * GUARD_RETREAT_SPEED_MULT))
        else:
            self._apply_velocity(agent, steering.stop())

        if agent.hp > agent.max_hp * GUARD_ATTACK_HP_FRACTION:
            agent.basic_attack(enemies)

    # ── EVADE ─────────────────────────────────────────────

    def _update_evade(self, agent, enemies, hold: bool):
        state: EvadeState = self.state

        if state.dashing:
            self._apply_velocity(agent, state.dash_velocity)
            return

        nearest = self.find_nearest_enemy(agent, enemies)
        if nearest is not None and not hold:
            dist = agent.distance_to(nearest)
            if dist < EVADE_TRIGGER_RANGE and self.special_cooldown <= 0:
                self._dash_evade(agent, nearest)
                return

            if dist < EVADE_SAFE_MIN:
                velocity = steering.flee(agent.position, nearest.position,
                                         agent.move_speed * EVADE_FLEE_SPEED_MULT)
            elif dist > EVADE_SAFE_MAX:
                velocity = steering.seek(agent.position, nearest.position,
                                         agent.move_speed * EVADE_SEEK_SPEED_MULT)
            else:
                velocity = steering.orbit(agent.position, nearest.position,
                                          EVADE_ORBIT_DISTANCE,
                                          agent.move_speed * EVADE_ORBIT_SPEED_MULT)
            self._apply_velocity(agent, velocity)
        elif nearest is None:
            self._apply_velocity(agent, steering.stop())

        if agent.post_evade_open:
            agent.basic_attack(enemies)

    def _dash_evade(self, agent, threat):
        state: EvadeState = self.state
        self.special_cooldown = EVADE_DASH_COOLDOWN
        state.dash_velocity = steering.flee(agent.position, threat.position,
                                            EVADE_DASH_SPEED)
        state.dash_timer = EVADE_DASH_DURATION
        agent.invulnerable = True
        self._apply_velocity(agent, state.dash_velocity)
        self.event_evade_dash = True
        logger.debug("Evade dash")

    # ── BURST ─────────────────────────────────────────────

    def _update_burst(self, agent, enemies):
        state: BurstState = self.state

        if state.phase is BurstPhase.IDLE and self.special_cooldown <= 0:
            self._activate_burst(agent)
            return

        target = self.threat_model.primary_threat(agent, enemies)
        if target is not None:
            dist = agent.distance_to(target)
            if dist < BURST_TOO_CLOSE:
                velocity = steering.flee(agent.position, target.position,
                                         agent.move_speed * BURST_FLEE_SPEED_MULT)
            elif dist > BURST_TOO_FAR:
                velocity = steering.seek(agent.position, target.position,
                                         agent.move_speed * BURST_SEEK_SPEED_MULT)
            else:
                velocity = steering.orbit(agent.position, target.position,
                                          BURST_HOLD_DISTANCE, agent.move_speed)
            self._apply_velocity(agent, velocity)
        else:
            self._apply_velocity(agent, steering.stop())

        if state.active:
            agent.basic_attack(enemies)

    def _activate_burst(self, agent):
        state: BurstState = self.state
        state.phase = BurstPhase.ACTIVE
        state.timer = BURST_DURATION
        self.special_cooldown = BURST_COOLDOWN

        agent.attack_cooldown_max = agent.base_attack_cooldown * BURST_ATTACK_COOLDOWN_MULT
        agent.damage_multiplier = BURST_DAMAGE_MULT
        self.event_burst_activated = True
        logger.debug("Burst activated")

    def _start_fatigue(self, agent):
        state: BurstState = self.state
        state.phase = BurstPhase.FATIGUE
        state.timer = BURST_FATIGUE_DURATION

        agent.attack_cooldown_max = agent.base_attack_cooldown * BURST_FATIGUE_COOLDOWN_MULT
        agent.move_speed = agent.base_speed * BURST_FATIGUE_SPEED_MULT
        agent.damage_multiplier = 1.0
        logger.debug("Burst fatigue")

    @staticmethod
    def _restore_burst_baseline(agent):
        agent.attack_cooldown_max = agent.base_attack_cooldown
        agent.damage_multiplier = 1.0
        agent.move_speed = agent.base_speed

    # ── Helpers ───────────────────────────────────────────

    def _apply_velocity(self, agent, velocity):
        if self.arena is not None:
            self.arena.apply_velocity(agent, velocity)
        else:
            agent.velocity = Vector2(velocity)

    @staticmethod
    def count_enemies_in_range(agent, enemies, radius: float) -> int:
        return sum(1 for e in enemies if e.alive and agent.distance_to(e) <= radius)

    @staticmethod
    def find_nearest_enemy(agent, enemies):
        nearest = None
        best = float("inf")
        for enemy in enemies:
            if not enemy.alive:
                continue
            dist = agent.distance_to(enemy)
            if dist < best:
                best = dist
                nearest = enemy
        return nearest

    def get_debug_info(self) -> dict:
        info = {
            "strategy": self.current_strategy.value,
            "special_cooldown": round(max(0.0, self.special_cooldown), 1),
        }
        state = self.state
        if isinstance(state, (EngageState, EvadeState)):
            info["dashing"] = state.dashing
        elif isinstance(state, GuardState):
            info["retreating"] = state.retreating
        elif isinstance(state, BurstState):
            info["burst_phase"] = state.phase.value
            info["burst_timer"] = round(max(0.0, state.timer), 1)
        return info
