from __future__ import annotations

import pygame
import pytest
from pygame.math import Vector2

from entities.agent import Agent
from entities.enemy import RusherEnemy
from systems.arena import Arena, ElectricBarrier, build_barriers


# ── Integration ──────────────────────────────────────────

def test_integrate_moves_by_velocity_in_seconds() -> None:
    arena = Arena()
    agent = Agent()
    arena.apply_velocity(agent, (140, -70))

    arena.integrate([agent], 500)

    assert agent.position == Vector2(960 + 70, 540 - 35)


def test_integrate_skips_the_dead() -> None:
    arena = Arena()
    rusher = RusherEnemy(500, 500)
    rusher.velocity = Vector2(100, 0)
    rusher.take_damage(100)
    rusher.velocity = Vector2(100, 0)

    arena.integrate([rusher], 1000)

    assert rusher.position == Vector2(500, 500)


def test_clamp_keeps_body_inside_walls() -> None:
    arena = Arena()
    agent = Agent(x=30, y=1070)

    arena.clamp(agent)

    assert agent.position == Vector2(40, 1040)


def test_clamp_leaves_offscreen_spawns_alone() -> None:
    arena = Arena()
    rusher = RusherEnemy(-50, 5)

    arena.clamp(rusher)

    assert rusher.position == Vector2(-50, 20)


def test_overlap_query() -> None:
    a = pygame.Rect(0, 0, 10, 10)

    assert Arena.overlaps(a, pygame.Rect(5, 5, 10, 10))
    assert not Arena.overlaps(a, pygame.Rect(10, 0, 10, 10))


def test_contains() -> None:
    arena = Arena(100, 100)

    assert arena.contains((50, 50))
    assert not arena.contains((150, 50))


# ── Electric barriers ────────────────────────────────────

def test_barrier_damage_scales_with_tick() -> None:
    barrier = ElectricBarrier((200, 200), (400, 400))
    agent = Agent(x=300, y=300)

    dealt = barrier.update(agent, 100)

    assert dealt == pytest.approx(2.0)
    assert agent.hp == pytest.approx(98.0)


def test_barrier_ignores_distant_agent() -> None:
    barrier = ElectricBarrier((200, 200), (400, 400))
    agent = Agent(x=600, y=300)

    assert barrier.update(agent, 100) == 0.0
    assert agent.hp == 100


def test_barrier_spares_invulnerable_agent() -> None:
    barrier = ElectricBarrier((200, 200), (400, 400))
    agent = Agent(x=300, y=300)
    agent.invulnerable = True

    assert barrier.update(agent, 100) == 0.0


def test_inactive_barrier_is_harmless() -> None:
    barrier = ElectricBarrier((200, 200), (400, 400))
    agent = Agent(x=300, y=300)

    barrier.toggle()
    assert barrier.update(agent, 100) == 0.0

    barrier.toggle(True)
    assert barrier.update(agent, 100) == pytest.approx(2.0)


def test_default_layout_keeps_center_clear() -> None:
    barriers = build_barriers()
    agent = Agent()

    assert len(barriers) == 4
    assert not any(b.touches(agent.rect) for b in barriers)
