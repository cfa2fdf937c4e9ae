from __future__ import annotations

import pytest
from pygame.math import Vector2

from entities.agent import Agent
from entities.enemy import (
    EliteEnemy, EnemyArchetype, RusherEnemy, SniperEnemy, create_enemy,
)
from systems.arena import Arena
from systems.projectile_system import Projectile, ProjectileSystem


def _advance(enemy, agent, total: float, dt: float = 100) -> None:
    for _ in range(int(total // dt)):
        enemy.update(agent, dt)


# ── Shared ───────────────────────────────────────────────

def test_factory_builds_each_archetype() -> None:
    assert isinstance(create_enemy("rusher", 0, 0), RusherEnemy)
    assert isinstance(create_enemy("SNIPER", 0, 0), SniperEnemy)
    assert isinstance(create_enemy(EnemyArchetype.ELITE, 0, 0), EliteEnemy)


def test_factory_rejects_unknown_archetype() -> None:
    with pytest.raises(ValueError):
        create_enemy("boss", 0, 0)


def test_stat_blocks_follow_archetype() -> None:
    elite = EliteEnemy(0, 0)

    assert (elite.max_hp, elite.speed, elite.damage) == (120, 90, 18)
    assert elite.attack_range == 30
    assert elite.radius == 35


def test_enemy_damage_short_circuits_once_dead() -> None:
    rusher = RusherEnemy(0, 0)
    deaths: list = []
    rusher.on("died", deaths.append)

    assert rusher.take_damage(10) == pytest.approx(10)
    assert rusher.take_damage(100) == pytest.approx(15)
    assert rusher.take_damage(100) == 0.0
    assert rusher.hp == 0
    assert deaths == [rusher]


def test_enemies_stand_down_when_agent_is_dead() -> None:
    agent = Agent()
    agent.take_damage(500)
    rusher = RusherEnemy(agent.x + 300, agent.y)

    rusher.update(agent, 16)

    assert rusher.velocity == Vector2(0, 0)


# ── Rusher ───────────────────────────────────────────────

def test_rusher_closes_in() -> None:
    agent = Agent()
    rusher = RusherEnemy(agent.x + 300, agent.y)

    rusher.update(agent, 16)

    assert rusher.velocity.x == pytest.approx(-120)


def test_rusher_swings_on_cooldown_inside_reach() -> None:
    agent = Agent()
    rusher = RusherEnemy(agent.x + 58, agent.y)   # 18 + agent radius 40

    rusher.update(agent, 16)
    assert agent.hp == 92
    assert rusher.velocity == Vector2(0, 0)

    _advance(rusher, agent, 900)
    assert agent.hp == 92

    rusher.update(agent, 100)
    assert agent.hp == 84


# ── Sniper ───────────────────────────────────────────────

def test_sniper_flees_when_crowded() -> None:
    agent = Agent()
    sniper = SniperEnemy(agent.x + 100, agent.y)

    sniper.update(agent, 16)

    assert sniper.velocity.x == pytest.approx(80)


def test_sniper_approaches_when_far() -> None:
    agent = Agent()
    sniper = SniperEnemy(agent.x + 300, agent.y)

    sniper.update(agent, 16)

    assert sniper.velocity.x == pytest.approx(-80)
    assert sniper.projectiles == []


def test_sniper_orbits_in_band_without_firing_out_of_range() -> None:
    agent = Agent()
    sniper = SniperEnemy(agent.x + 230, agent.y)

    sniper.update(agent, 16)

    assert sniper.velocity.length() == pytest.approx(40)
    assert sniper.projectiles == []


def test_sniper_fires_in_range_and_off_cooldown() -> None:
    agent = Agent()
    sniper = SniperEnemy(agent.x + 200, agent.y)
    fired: list = []
    sniper.on("projectile_fired", fired.append)

    sniper.update(agent, 16)
    sniper.update(agent, 16)

    assert len(sniper.projectiles) == 1
    assert fired == sniper.projectiles
    shot = sniper.projectiles[0]
    assert shot.damage == 12
    assert shot.velocity.x == pytest.approx(-300)
    assert sniper.attack_cooldown == pytest.approx(1500 - 16)


# ── Projectiles ──────────────────────────────────────────

def test_projectile_hits_agent_and_is_consumed() -> None:
    agent = Agent()
    system = ProjectileSystem()
    system.add(Projectile(agent.position + Vector2(60, 0), Vector2(-1, 0), 12))

    hits = system.update(100, agent, Arena())

    assert hits == 1
    assert agent.hp == 88
    assert len(system) == 0


def test_projectile_passes_through_invulnerable_agent() -> None:
    agent = Agent()
    agent.invulnerable = True
    system = ProjectileSystem()
    system.add(Projectile(agent.position, Vector2(1, 0), 12))

    assert system.update(16, agent, Arena()) == 0
    assert agent.hp == 100
    assert len(system) == 1


def test_projectile_expires_after_its_range() -> None:
    shot = Projectile((0, 0), Vector2(1, 0), 12)

    shot.update(800)
    assert shot.active
    shot.update(40)
    assert not shot.active
    assert shot.position.x == pytest.approx(252)


# ── Elite ────────────────────────────────────────────────

def test_elite_telegraphs_then_charges_at_locked_position() -> None:
    agent = Agent()
    elite = EliteEnemy(agent.x + 100, agent.y)

    elite.update(agent, 100)
    assert elite.telegraphing
    assert elite.velocity == Vector2(0, 0)

    _advance(elite, agent, 700)
    assert elite.telegraphing

    agent.position = Vector2(agent.x, agent.y + 200)
    elite.update(agent, 100)

    assert elite.charging
    assert elite.charge_target == agent.position
    assert elite.velocity.length() == pytest.approx(520)


def test_elite_charge_ends_into_cooldown() -> None:
    agent = Agent()
    elite = EliteEnemy(agent.x + 100, agent.y)
    elite.update(agent, 100)
    _advance(elite, agent, 800)
    assert elite.charging

    _advance(elite, agent, 300)
    assert elite.charging
    elite.update(agent, 100)

    assert elite.state == "chase"
    assert elite.charge_cooldown == pytest.approx(3000)
    assert elite.velocity == Vector2(0, 0)


def test_elite_charge_hits_once_on_contact() -> None:
    agent = Agent()
    elite = EliteEnemy(agent.x + 60, agent.y)
    elite.update(agent, 100)
    _advance(elite, agent, 800)
    assert elite.charging

    elite.update(agent, 100)
    assert agent.hp == 82
    elite.update(agent, 100)
    assert agent.hp == 82


def test_elite_outside_charge_band_chases() -> None:
    agent = Agent()
    elite = EliteEnemy(agent.x + 400, agent.y)

    elite.update(agent, 16)

    assert elite.state == "chase"
    assert elite.velocity.x == pytest.approx(-90)


def test_elite_death_cancels_telegraph() -> None:
    agent = Agent()
    elite = EliteEnemy(agent.x + 100, agent.y)
    elite.update(agent, 100)

    elite.take_damage(500)

    assert elite.state == "chase"
    assert elite.telegraph_timer == 0.0
