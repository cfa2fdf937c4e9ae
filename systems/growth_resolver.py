"""
growth_resolver.py – Turns a finished run into a playstyle profile and traits.

Scores (each clamped to [0, 100]):

    dodge      = 0.6 * evade success rate %  + 0.4 * (evades / min * 20)
    aggression = 15 * bursts / min           + 0.5 * engage time %
    defense    = 0.7 * guard time %          - 0.3 * time below 30 % HP (% of run)

Profile name comes from which axes reach the threshold (60); trait
grants depend only on the thresholds, never on the name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from settings import (
    GROWTH_THRESHOLD, SNIPER_TRAIT_THRESHOLD,
    DODGE_TRAITS, AGGRESSION_TRAITS, DEFENSE_TRAITS, SNIPER_TRAITS,
)
from ai.strategy import Strategy
from systems.telemetry import TelemetryRecord
from utils.helpers import clamp, safe_ratio

logger = logging.getLogger(__name__)


@dataclass
class GrowthConfig:
    """Weights and thresholds for profile scoring."""

    threshold: float = GROWTH_THRESHOLD
    sniper_trait_threshold: int = SNIPER_TRAIT_THRESHOLD

    dodge_success_weight: float = 0.6
    dodge_rate_weight: float = 0.4
    dodge_rate_scale: float = 20.0

    aggression_burst_weight: float = 15.0
    aggression_engage_weight: float = 0.5

    defense_guard_weight: float = 0.7
    defense_low_hp_weight: float = 0.3


@dataclass(frozen=True)
class PlaystyleProfile:
    dodge_score: float
    aggression_score: float
    defense_score: float
    sniper_deaths: int
    profile_name: str

    def as_dict(self) -> dict:
        return {
            "dodge_score": self.dodge_score,
            "aggression_score": self.aggression_score,
            "defense_score": self.defense_score,
            "sniper_deaths": self.sniper_deaths,
            "profile_name": self.profile_name,
        }


@dataclass(frozen=True)
class GrowthResult:
    profile: PlaystyleProfile
    granted_traits: tuple = ()
    explanations: tuple = field(default=(), compare=False)


# Name lookup keyed by (dodge, aggression, defense) above-threshold flags
PROFILE_NAMES: dict[tuple[bool, bool, bool], str] = {
    (False, False, False): "Balanced",
    (True, False, False): "Dodge-Counter",
    (False, True, False): "Aggro-Burst",
    (False, False, True): "Shield-Control",
    (True, True, False): "Skirmisher",
    (True, False, True): "Tactician",
    (False, True, True): "Brawler",
    (True, True, True): "Master",
}


class GrowthResolver:
    """Stateless scorer; safe to reuse across runs."""

    def __init__(self, config: GrowthConfig | None = None):
        self.cfg = config or GrowthConfig()

    # ── Public ────────────────────────────────────────────

    def resolve(self, record: TelemetryRecord) -> GrowthResult:
        profile = self.calculate_profile(record)
        traits = self.traits_for_profile(profile)
        explanations = self.explain(record, profile)
        logger.info("Profile %s (dodge %.1f, aggression %.1f, defense %.1f) -> %s",
                    profile.profile_name, profile.dodge_score,
                    profile.aggression_score, profile.defense_score,
                    list(traits) or "no traits")
        return GrowthResult(profile, tuple(traits), tuple(explanations))

    def calculate_profile(self, record: TelemetryRecord) -> PlaystyleProfile:
        dodge = clamp(self.dodge_score(record), 0.0, 100.0)
        aggression = clamp(self.aggression_score(record), 0.0, 100.0)
        defense = clamp(self.defense_score(record), 0.0, 100.0)
        return PlaystyleProfile(
            dodge_score=dodge,
            aggression_score=aggression,
            defense_score=defense,
            sniper_deaths=int(record.kills_by_archetype.get("Sniper", 0)),
            profile_name=self.profile_name(dodge, aggression, defense),
        )

    # ── Axis scores (unclamped) ───────────────────────────

    @staticmethod
    def _per_minute(count: float, record: TelemetryRecord) -> float:
        return safe_ratio(count, record.run_duration / 60.0)

    def dodge_score(self, record: TelemetryRecord) -> float:
        cfg = self.cfg
        success_rate = record.evade_success_rate()
        evades_per_minute = self._per_minute(record.evade_count, record)
        return (cfg.dodge_success_weight * success_rate
                + cfg.dodge_rate_weight * evades_per_minute * cfg.dodge_rate_scale)

    def aggression_score(self, record: TelemetryRecord) -> float:
        cfg = self.cfg
        bursts_per_minute = self._per_minute(record.burst_activations, record)
        engage_pct = record.strategy_percentages()[Strategy.ENGAGE.value]
        return (cfg.aggression_burst_weight * bursts_per_minute
                + cfg.aggression_engage_weight * engage_pct)

    def defense_score(self, record: TelemetryRecord) -> float:
        cfg = self.cfg
        guard_pct = record.strategy_percentages()[Strategy.GUARD.value]
        low_hp_pct = safe_ratio(record.time_below_hp30, record.run_duration * 1000.0) * 100.0
        return cfg.defense_guard_weight * guard_pct - cfg.defense_low_hp_weight * low_hp_pct

    # ── Classification ────────────────────────────────────

    def profile_name(self, dodge: float, aggression: float, defense: float) -> str:
        t = self.cfg.threshold
        return PROFILE_NAMES[(dodge >= t, aggression >= t, defense >= t)]

    def traits_for_profile(self, profile: PlaystyleProfile) -> list[str]:
        t = self.cfg.threshold
        traits: list[str] = []
        if profile.dodge_score >= t:
            traits.extend(DODGE_TRAITS)
        if profile.aggression_score >= t:
            traits.extend(AGGRESSION_TRAITS)
        if profile.defense_score >= t:
            traits.extend(DEFENSE_TRAITS)
        if profile.sniper_deaths >= self.cfg.sniper_trait_threshold:
            traits.extend(SNIPER_TRAITS)
        return traits

    # ── Display text ──────────────────────────────────────

    def explain(self, record: TelemetryRecord, profile: PlaystyleProfile) -> list[str]:
        t = self.cfg.threshold
        lines: list[str] = []
        minutes = record.run_duration / 60.0

        if profile.dodge_score >= t:
            lines.append(
                f"Evade success {record.evade_success_rate():.0f}% "
                f"({record.evade_success_count}/{record.evade_count}) "
                f"-> evade-counter traits granted")
            lines.append(
                f"{safe_ratio(record.evade_count, minutes):.0f} evades per minute "
                f"-> evasion reinforced")

        if profile.aggression_score >= t:
            engage = record.strategy_percentages()[Strategy.ENGAGE.value]
            bursts = safe_ratio(record.burst_activations, minutes)
            lines.append(
                f"Engage held {engage:.0f}% with {bursts:.0f} bursts per minute "
                f"-> offensive traits granted")

        if profile.defense_score >= t:
            guard = record.strategy_percentages()[Strategy.GUARD.value]
            lines.append(f"Guard held {guard:.0f}% -> defensive trait granted")

        if profile.sniper_deaths >= self.cfg.sniper_trait_threshold:
            lines.append(
                f"{profile.sniper_deaths} sniper eliminations -> threat redirect granted")

        kills = record.kills_by_archetype
        if record.total_kills > 0:
            lines.append(
                f"Total kills: {record.total_kills} (Rusher: {kills.get('Rusher', 0)}, "
                f"Sniper: {kills.get('Sniper', 0)}, Elite: {kills.get('Elite', 0)})")
        return lines
