"""
settings.py - Balance constants for the tactical strategy arena.

All configurable values live here so they're easy to tweak
and easy to reference from any module.

Units: distances in arena units, speeds in units/second,
durations in milliseconds unless the name says otherwise.
"""

import os

# ── Arena ─────────────────────────────────────────────────
ARENA_WIDTH = 1920
ARENA_HEIGHT = 1080
SPAWN_EDGE_MARGIN = 50         # spawns sit this far outside the arena

# ── Run ───────────────────────────────────────────────────
RUN_DURATION = 120             # seconds
LOW_HP_FRACTION = 0.30         # "below 30 %" telemetry threshold

# ── Agent ─────────────────────────────────────────────────
AGENT_MAX_HP = 100
AGENT_DAMAGE = 10
AGENT_MOVE_SPEED = 140
AGENT_ATTACK_COOLDOWN = 600    # ms
AGENT_ATTACK_RANGE = 60
AGENT_RADIUS = 40
AGENT_START_X = ARENA_WIDTH // 2
AGENT_START_Y = ARENA_HEIGHT // 2

# ── ENGAGE ────────────────────────────────────────────────
ENGAGE_DASH_COOLDOWN = 2000
ENGAGE_DASH_SPEED = 420
ENGAGE_DASH_DURATION = 180
ENGAGE_DASH_TRIGGER_RANGE = 200

# ── GUARD ─────────────────────────────────────────────────
GUARD_DAMAGE_REDUCTION = 0.5
GUARD_CROWD_RADIUS = 150
GUARD_CROWD_COUNT = 3          # retreat at or above this many nearby
GUARD_RETREAT_SPEED_MULT = 0.5
GUARD_ATTACK_HP_FRACTION = 0.5

# ── EVADE ─────────────────────────────────────────────────
EVADE_DASH_COOLDOWN = 1000
EVADE_DASH_SPEED = 520
EVADE_DASH_DURATION = 120      # invulnerability window
EVADE_POST_WINDOW = 800        # counter-attack window
EVADE_TRIGGER_RANGE = 150
EVADE_SAFE_MIN = 150           # flee below
EVADE_SAFE_MAX = 300           # seek above
EVADE_ORBIT_DISTANCE = 250
EVADE_FLEE_SPEED_MULT = 1.2
EVADE_SEEK_SPEED_MULT = 0.8
EVADE_ORBIT_SPEED_MULT = 0.6
EVADE_SUCCESS_WINDOW = 500     # no damage within this window = success

# ── BURST ─────────────────────────────────────────────────
BURST_COOLDOWN = 3000          # covers burst + fatigue + buffer
BURST_DURATION = 1500
BURST_FATIGUE_DURATION = 1000
BURST_DAMAGE_MULT = 1.3
BURST_ATTACK_COOLDOWN_MULT = 0.5
BURST_FATIGUE_COOLDOWN_MULT = 1.5
BURST_FATIGUE_SPEED_MULT = 0.6
BURST_HOLD_DISTANCE = 115
BURST_TOO_CLOSE = 80
BURST_TOO_FAR = 150
BURST_FLEE_SPEED_MULT = 0.5
BURST_SEEK_SPEED_MULT = 1.1

# ── Steering ──────────────────────────────────────────────
ORBIT_INNER_FRACTION = 0.8
ORBIT_OUTER_FRACTION = 1.2
ORBIT_CORRECTION_SPEED_MULT = 0.7

# ── Threat model ──────────────────────────────────────────
THREAT_DISTANCE_WEIGHT = 2.0
THREAT_DAMAGE_WEIGHT = 1.5
THREAT_WOUNDED_FRACTION = 0.30
THREAT_WOUNDED_MULT = 0.5

# ── Enemy archetypes ──────────────────────────────────────
RUSHER_STATS = {
    "hp": 25,
    "speed": 120,
    "damage": 8,
    "attack_range": 18,
    "attack_cooldown": 1000,
    "radius": 20,
}
SNIPER_STATS = {
    "hp": 18,
    "speed": 80,
    "damage": 12,
    "attack_range": 220,
    "attack_cooldown": 1500,
    "radius": 18,
}
ELITE_STATS = {
    "hp": 120,
    "speed": 90,
    "damage": 18,
    "attack_range": 30,
    "attack_cooldown": 2000,
    "radius": 35,
}

# ── Sniper tuning ─────────────────────────────────────────
SNIPER_FLEE_BELOW = 150
SNIPER_APPROACH_ABOVE = 240
SNIPER_ORBIT_DISTANCE = 200
SNIPER_ORBIT_SPEED_MULT = 0.5
PROJECTILE_SPEED = 300.0
PROJECTILE_RANGE = 250.0
PROJECTILE_RADIUS = 8
PROJECTILE_LIFETIME = PROJECTILE_RANGE / PROJECTILE_SPEED * 1000.0   # ms

# ── Elite tuning ──────────────────────────────────────────
ELITE_TELEGRAPH_TIME = 800
ELITE_CHARGE_SPEED = 520
ELITE_CHARGE_DURATION = 400
ELITE_CHARGE_RANGE_MIN = 50
ELITE_CHARGE_RANGE_MAX = 150
ELITE_CHARGE_COOLDOWN = 3000

# ── Waves ─────────────────────────────────────────────────
# (end_second, spawn_interval_ms, {archetype: chance}); RUSHER takes the rest
WAVES = [
    (30, 3000, {}),
    (70, 2500, {"sniper": 0.4}),
    (RUN_DURATION, 2000, {"elite": 0.2, "sniper": 0.3}),
]

# ── Hazards ───────────────────────────────────────────────
BARRIER_DAMAGE_PER_SECOND = 20
BARRIER_WIDTH = 20
BARRIER_SEGMENTS = [
    ((200, 200), (400, 400)),
    ((1720, 200), (1520, 400)),
    ((200, 880), (400, 680)),
    ((1720, 880), (1520, 680)),
]

# ── Growth ────────────────────────────────────────────────
GROWTH_THRESHOLD = 60
SNIPER_TRAIT_THRESHOLD = 3
DODGE_TRAITS = ("T1_PHANTOM_TRACE", "T2_REFLEX_BURST")
AGGRESSION_TRAITS = ("T3_OVERCLOCK_CHARGE", "T4_BLOOD_EXCHANGE")
DEFENSE_TRAITS = ("T5_ADAPTIVE_SHIELD",)
SNIPER_TRAITS = ("T6_THREAT_REDIRECT",)

# ── Trait effects ─────────────────────────────────────────
PHANTOM_TRACE_REDUCTION = 0.5
REFLEX_BURST_BONUS = 0.4
OVERCLOCK_DASH_BONUS = 0.25
BLOOD_EXCHANGE_LIFESTEAL = 0.03
ADAPTIVE_SHIELD_REDUCTION = 0.15
THREAT_REDIRECT_SNIPER_WEIGHT = 0.5

# ── Persistence ───────────────────────────────────────────
RUNS_STORAGE_KEY = "tactical-arena-runs"
MAX_STORED_RUNS = 20
RUNS_FILE = os.environ.get(
    "TACTICAL_RUNS_PATH",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "run_history.json"),
)

# ── Simulation ────────────────────────────────────────────
SIM_TICK_MS = 1000 / 60
SIM_POLICY_INTERVAL = 8000     # ms between autopilot strategy switches
