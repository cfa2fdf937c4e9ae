from __future__ import annotations

import pytest
from pygame.math import Vector2

from ai.agent_ai import AgentAI, BurstState, EngageState, EvadeState
from ai.strategy import Strategy
from entities.agent import Agent
from entities.enemy import RusherEnemy


def _rusher_at(agent: Agent, dx: float, dy: float = 0.0) -> RusherEnemy:
    return RusherEnemy(agent.x + dx, agent.y + dy)


def _advance(ai: AgentAI, agent: Agent, enemies, total: float, dt: float = 100) -> None:
    for _ in range(int(total // dt)):
        ai.update(agent, enemies, dt)


# ── ENGAGE ───────────────────────────────────────────────

def test_engage_dashes_when_primary_threat_is_close() -> None:
    agent = Agent()
    ai = AgentAI(agent)
    target = _rusher_at(agent, 150)

    ai.update(agent, [target], 16)

    assert ai.event_dash_attack
    assert ai.special_cooldown == 2000
    assert agent.velocity.length() == pytest.approx(420)
    assert agent.velocity.x > 0


def test_engage_does_not_dash_beyond_trigger_range() -> None:
    agent = Agent()
    ai = AgentAI(agent)

    ai.update(agent, [_rusher_at(agent, 250)], 16)

    assert not ai.event_dash_attack
    assert ai.special_cooldown <= 0
    assert agent.velocity.length() == pytest.approx(agent.move_speed)


def test_engage_dash_stops_once_after_its_duration() -> None:
    agent = Agent()
    ai = AgentAI(agent)
    enemies = [_rusher_at(agent, 150)]

    ai.update(agent, enemies, 100)
    ai.update(agent, enemies, 100)
    assert agent.velocity.length() == pytest.approx(420)

    ai.update(agent, enemies, 100)
    assert agent.velocity == Vector2(0, 0)

    ai.update(agent, enemies, 16)
    assert agent.velocity.length() == pytest.approx(agent.move_speed)


def test_overclock_charge_lengthens_the_dash() -> None:
    agent = Agent(traits=["T3_OVERCLOCK_CHARGE"])
    ai = AgentAI(agent)

    ai.update(agent, [_rusher_at(agent, 150)], 16)

    assert agent.velocity.length() == pytest.approx(525)


def test_engage_always_swings_regardless_of_dash() -> None:
    agent = Agent()
    ai = AgentAI(agent)
    target = _rusher_at(agent, 50)

    ai.update(agent, [target], 16)

    assert ai.event_dash_attack
    assert target.hp == pytest.approx(15)


def test_no_enemies_means_standing_still() -> None:
    agent = Agent()
    agent.velocity = Vector2(5, 5)
    ai = AgentAI(agent)

    ai.update(agent, [], 16)

    assert agent.velocity == Vector2(0, 0)


# ── GUARD ────────────────────────────────────────────────

def test_guard_retreats_from_a_crowd_of_three() -> None:
    agent = Agent()
    ai = AgentAI(agent, strategy=Strategy.GUARD)
    crowd = [_rusher_at(agent, 100), _rusher_at(agent, 0, 120), _rusher_at(agent, 0, -140)]

    ai.update(agent, crowd, 16)

    assert ai.state.retreating
    assert agent.velocity.length() == pytest.approx(70)
    assert agent.velocity.x < 0
    assert agent.damage_reduction == 0.5


def test_guard_holds_against_two() -> None:
    agent = Agent()
    agent.velocity = Vector2(10, 0)
    ai = AgentAI(agent, strategy=Strategy.GUARD)

    ai.update(agent, [_rusher_at(agent, 100), _rusher_at(agent, 0, 120)], 16)

    assert agent.velocity == Vector2(0, 0)
    assert agent.damage_reduction == 0.5


def test_guard_reduction_applies_on_switch_and_clears_on_exit() -> None:
    agent = Agent()
    ai = AgentAI(agent)

    ai.set_strategy(Strategy.GUARD)
    assert agent.damage_reduction == 0.5

    ai.set_strategy(Strategy.ENGAGE)
    assert agent.damage_reduction == 0.0


def test_adaptive_shield_strengthens_guard() -> None:
    agent = Agent(traits=["T5_ADAPTIVE_SHIELD"])
    ai = AgentAI(agent, strategy="guard")

    assert agent.damage_reduction == pytest.approx(0.65)
    ai.update(agent, [], 16)
    assert agent.damage_reduction == pytest.approx(0.65)


def test_guard_only_attacks_above_half_health() -> None:
    agent = Agent()
    ai = AgentAI(agent, strategy=Strategy.GUARD)
    target = _rusher_at(agent, 50)

    agent.hp = 50
    ai.update(agent, [target], 16)
    assert target.hp == 25

    agent.hp = 51
    ai.update(agent, [target], 16)
    assert target.hp == pytest.approx(15)


# ── EVADE ────────────────────────────────────────────────

def test_evade_dash_grants_iframes_and_opens_counter_window() -> None:
    agent = Agent()
    ai = AgentAI(agent, strategy=Strategy.EVADE)
    threat = _rusher_at(agent, 100)

    ai.update(agent, [threat], 16)

    assert ai.event_evade_dash
    assert agent.invulnerable
    assert ai.special_cooldown == 1000
    assert agent.velocity.length() == pytest.approx(520)
    assert agent.velocity.x < 0

    ai.update(agent, [threat], 60)
    assert agent.invulnerable
    ai.update(agent, [threat], 60)

    assert not agent.invulnerable
    assert agent.velocity == Vector2(0, 0)
    assert agent.post_evade_open
    assert agent.post_evade_timer == pytest.approx(800)


def test_evade_orbits_inside_the_safe_band() -> None:
    agent = Agent()
    ai = AgentAI(agent, strategy=Strategy.EVADE)
    threat = _rusher_at(agent, 250)

    ai.update(agent, [threat], 16)

    assert not ai.event_evade_dash
    assert agent.velocity.length() == pytest.approx(140 * 0.6)
    assert agent.velocity.x == pytest.approx(0, abs=1e-6)


def test_evade_approaches_when_too_far() -> None:
    agent = Agent()
    ai = AgentAI(agent, strategy=Strategy.EVADE)

    ai.update(agent, [_rusher_at(agent, 400)], 16)

    assert agent.velocity.length() == pytest.approx(140 * 0.8)
    assert agent.velocity.x > 0


def test_evade_flees_when_close_and_dash_on_cooldown() -> None:
    agent = Agent()
    ai = AgentAI(agent, strategy=Strategy.EVADE)
    ai.special_cooldown = 500

    ai.update(agent, [_rusher_at(agent, 120)], 16)

    assert not ai.event_evade_dash
    assert agent.velocity.length() == pytest.approx(140 * 1.2)
    assert agent.velocity.x < 0


def test_evade_targets_nearest_not_most_threatening() -> None:
    agent = Agent()
    ai = AgentAI(agent, strategy=Strategy.EVADE)
    ai.special_cooldown = 500
    near = _rusher_at(agent, 0, 120)
    far = _rusher_at(agent, 400)

    ai.update(agent, [far, near], 16)

    assert agent.velocity.y < 0


def test_leaving_evade_mid_dash_clears_iframes_and_window() -> None:
    agent = Agent()
    ai = AgentAI(agent, strategy=Strategy.EVADE)
    ai.update(agent, [_rusher_at(agent, 100)], 16)

    ai.set_strategy(Strategy.GUARD)

    assert not agent.invulnerable
    assert not agent.post_evade_open
    assert not isinstance(ai.state, EvadeState)


# ── BURST ────────────────────────────────────────────────

def test_burst_cycle_timeline() -> None:
    agent = Agent()
    ai = AgentAI(agent, strategy=Strategy.BURST)

    ai.update(agent, [], 100)                      # t = 0
    assert ai.event_burst_activated
    assert ai.state.active
    assert agent.damage_multiplier == pytest.approx(1.3)
    assert agent.attack_cooldown_max == pytest.approx(300)

    _advance(ai, agent, [], 1400)                  # t = 1400
    assert ai.state.active
    assert agent.damage_multiplier == pytest.approx(1.3)

    _advance(ai, agent, [], 100)                   # t = 1500
    assert ai.state.fatigued
    assert not ai.state.active
    assert agent.attack_cooldown_max == pytest.approx(900)
    assert agent.move_speed == pytest.approx(84)

    _advance(ai, agent, [], 900)                   # t = 2400
    assert ai.state.fatigued

    _advance(ai, agent, [], 100)                   # t = 2500
    assert not ai.state.active and not ai.state.fatigued
    assert agent.attack_cooldown_max == 600
    assert agent.move_speed == 140
    assert agent.damage_multiplier == 1.0

    _advance(ai, agent, [], 400)                   # t = 2900
    assert not ai.state.active

    ai.update(agent, [], 100)                      # t = 3000
    assert ai.event_burst_activated
    assert ai.state.active


def test_burst_attacks_only_while_active() -> None:
    agent = Agent()
    ai = AgentAI(agent, strategy=Strategy.BURST)
    target = _rusher_at(agent, 115)
    target.hp = target.max_hp = 1000

    ai.update(agent, [target], 100)                # activation tick, no swing
    assert target.hp == 1000

    target.position = agent.position + Vector2(60, 0)
    ai.update(agent, [target], 100)
    assert target.hp == pytest.approx(1000 - 13)

    _advance(ai, agent, [], 1400)                  # into fatigue
    agent.attack_cooldown = 0
    ai.update(agent, [target], 100)
    assert ai.state.fatigued
    assert target.hp == pytest.approx(1000 - 13)


def test_leaving_burst_restores_baseline_immediately() -> None:
    agent = Agent()
    ai = AgentAI(agent, strategy=Strategy.BURST)
    ai.update(agent, [], 100)
    _advance(ai, agent, [], 1500)
    assert ai.state.fatigued

    ai.set_strategy(Strategy.ENGAGE)

    assert isinstance(ai.state, EngageState)
    assert agent.move_speed == 140
    assert agent.attack_cooldown_max == 600
    assert agent.damage_multiplier == 1.0


def test_returning_to_burst_starts_fresh_but_keeps_shared_cooldown() -> None:
    agent = Agent()
    ai = AgentAI(agent, strategy=Strategy.BURST)
    ai.update(agent, [], 100)

    ai.set_strategy(Strategy.GUARD)
    ai.set_strategy(Strategy.BURST)
    ai.update(agent, [], 100)

    assert isinstance(ai.state, BurstState)
    assert not ai.state.active
    assert ai.special_cooldown == pytest.approx(2900)


# ── Switching ────────────────────────────────────────────

def test_set_strategy_reports_only_real_changes() -> None:
    agent = Agent()
    ai = AgentAI(agent)

    assert ai.set_strategy(Strategy.ENGAGE) is False
    assert ai.set_strategy("evade") is True
    assert ai.current_strategy is Strategy.EVADE


def test_leaving_engage_mid_dash_cancels_it_for_good() -> None:
    agent = Agent()
    ai = AgentAI(agent)
    enemies = [_rusher_at(agent, 150)]
    ai.update(agent, enemies, 16)
    assert ai.state.dashing

    ai.set_strategy(Strategy.BURST)

    assert agent.velocity == Vector2(0, 0)
    assert not isinstance(ai.state, EngageState)

    ai.set_strategy(Strategy.ENGAGE)
    ai.update(agent, enemies, 16)

    assert not ai.state.dashing
    assert not ai.event_dash_attack
    assert agent.velocity.length() == pytest.approx(agent.move_speed)
    assert agent.velocity.x > 0


def test_dead_agent_is_not_driven() -> None:
    agent = Agent()
    ai = AgentAI(agent)
    agent.take_damage(500)

    ai.update(agent, [_rusher_at(agent, 150)], 16)

    assert not ai.event_dash_attack
    assert ai.special_cooldown == 0


def test_event_flags_last_one_update() -> None:
    agent = Agent()
    ai = AgentAI(agent)
    enemies = [_rusher_at(agent, 150)]

    ai.update(agent, enemies, 16)
    ai.update(agent, enemies, 16)

    assert not ai.event_dash_attack
