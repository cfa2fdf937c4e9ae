"""
telemetry.py – Per-run behavioral statistics.

Telemetry collects counters and durations while a run is live and
freezes them into a TelemetryRecord at run end. The record is handed
to the growth resolver exactly once and persisted with the run.

Units:
    strategy_time / time_below_hp30 – milliseconds
    run_duration / sniper_kill_time_avg – seconds

Evade success: an evade succeeds when no damage lands within 500 ms
of its start; any hit inside that window fails every pending evade.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from settings import EVADE_SUCCESS_WINDOW
from ai.strategy import Strategy
from utils.helpers import safe_ratio

logger = logging.getLogger(__name__)

KILL_BUCKETS = ("Rusher", "Sniper", "Elite", "Unknown")


class RunResult(str, Enum):
    VICTORY = "victory"
    DEFEAT = "defeat"


def kill_bucket(archetype) -> str:
    """Capitalised archetype bucket; anything unrecognised is "Unknown"."""
    if archetype is None:
        return "Unknown"
    name = str(getattr(archetype, "value", archetype)).strip().capitalize()
    return name if name in KILL_BUCKETS else "Unknown"


def _empty_strategy_time() -> dict:
    return {s.value: 0.0 for s in Strategy}


def _empty_kills() -> dict:
    return {bucket: 0 for bucket in KILL_BUCKETS}


def strategy_percentages(strategy_time: Mapping[str, float]) -> dict[str, float]:
    """Share of total strategy time per strategy, 0 for an empty run."""
    total = sum(strategy_time.values())
    return {
        s.value: safe_ratio(strategy_time.get(s.value, 0.0), total) * 100.0
        for s in Strategy
    }


# ══════════════════════════════════════════════════════════
#  Frozen record
# ══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TelemetryRecord:
    """Read-only snapshot of one finished run."""

    strategy_time: Mapping[str, float]
    strategy_switch_count: int
    time_below_hp30: float
    hits_taken_count: int
    damage_taken_total: float
    evade_count: int
    evade_success_count: int
    damage_dealt_total: float
    kills_by_archetype: Mapping[str, int]
    burst_activations: int
    sniper_kill_time_avg: float
    run_duration: float
    run_result: RunResult

    def __post_init__(self):
        object.__setattr__(self, "strategy_time",
                           MappingProxyType(dict(self.strategy_time)))
        object.__setattr__(self, "kills_by_archetype",
                           MappingProxyType(dict(self.kills_by_archetype)))
        object.__setattr__(self, "run_result", RunResult(self.run_result))

    # ── Derived ───────────────────────────────────────────

    @property
    def total_kills(self) -> int:
        return sum(self.kills_by_archetype.values())

    def strategy_percentages(self) -> dict[str, float]:
        return strategy_percentages(self.strategy_time)

    def evade_success_rate(self) -> float:
        return safe_ratio(self.evade_success_count, self.evade_count) * 100.0

    # ── Serialisation ─────────────────────────────────────

    def as_dict(self) -> dict:
        return {
            "strategy_time": dict(self.strategy_time),
            "strategy_switch_count": self.strategy_switch_count,
            "time_below_hp30": self.time_below_hp30,
            "hits_taken_count": self.hits_taken_count,
            "damage_taken_total": self.damage_taken_total,
            "evade_count": self.evade_count,
            "evade_success_count": self.evade_success_count,
            "damage_dealt_total": self.damage_dealt_total,
            "kills_by_archetype": dict(self.kills_by_archetype),
            "burst_activations": self.burst_activations,
            "sniper_kill_time_avg": self.sniper_kill_time_avg,
            "run_duration": self.run_duration,
            "run_result": self.run_result.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "TelemetryRecord":
        """Rebuild from ``as_dict`` output. Missing counters default to 0."""
        strategy_time = _empty_strategy_time()
        strategy_time.update(data.get("strategy_time", {}))
        kills = _empty_kills()
        kills.update(data.get("kills_by_archetype", {}))
        return cls(
            strategy_time=strategy_time,
            strategy_switch_count=int(data.get("strategy_switch_count", 0)),
            time_below_hp30=float(data.get("time_below_hp30", 0.0)),
            hits_taken_count=int(data.get("hits_taken_count", 0)),
            damage_taken_total=float(data.get("damage_taken_total", 0.0)),
            evade_count=int(data.get("evade_count", 0)),
            evade_success_count=int(data.get("evade_success_count", 0)),
            damage_dealt_total=float(data.get("damage_dealt_total", 0.0)),
            kills_by_archetype=kills,
            burst_activations=int(data.get("burst_activations", 0)),
            sniper_kill_time_avg=float(data.get("sniper_kill_time_avg", 0.0)),
            run_duration=float(data.get("run_duration", 0.0)),
            run_result=data.get("run_result", RunResult.VICTORY.value),
        )


# ══════════════════════════════════════════════════════════
#  Live collector
# ══════════════════════════════════════════════════════════

@dataclass
class TelemetryData:
    """Mutable counters while the run is live."""

    strategy_time: dict = field(default_factory=_empty_strategy_time)
    strategy_switch_count: int = 0
    time_below_hp30: float = 0.0
    hits_taken_count: int = 0
    damage_taken_total: float = 0.0
    evade_count: int = 0
    evade_success_count: int = 0
    damage_dealt_total: float = 0.0
    kills_by_archetype: dict = field(default_factory=_empty_kills)
    burst_activations: int = 0


class Telemetry:
    """Collects one run's statistics.

    Every recorder is a no-op (with a warning) once ``finalize_run``
    has been called.
    """

    def __init__(self, evade_success_window: float = EVADE_SUCCESS_WINDOW):
        self.evade_success_window = evade_success_window
        self.data = TelemetryData()
        self.elapsed_ms = 0.0
        self.record: TelemetryRecord | None = None
        self._pending_evades: list[float] = []      # start times, ms
        self._sniper_kill_times: list[float] = []   # seconds

    @property
    def finalized(self) -> bool:
        return self.record is not None

    def _writable(self, what: str) -> bool:
        if self.record is not None:
            logger.warning("Ignoring %s recorded after run was finalized", what)
            return False
        return True

    # ===========================================================
    #  Clock
    # ===========================================================

    def advance(self, dt: float):
        """Move the telemetry clock and settle evades past their window."""
        if not self._writable("clock advance"):
            return
        self.elapsed_ms += dt
        while (self._pending_evades
               and self.elapsed_ms - self._pending_evades[0] >= self.evade_success_window):
            self._pending_evades.pop(0)
            self.record_evade_success()

    # ===========================================================
    #  Recorders
    # ===========================================================

    def record_strategy_change(self, old: Strategy, new: Strategy):
        if not self._writable("strategy change"):
            return
        self.data.strategy_switch_count += 1
        logger.debug("Telemetry: strategy %s -> %s", Strategy.parse(old).value,
                     Strategy.parse(new).value)

    def record_strategy_time(self, strategy: Strategy, dt: float):
        if not self._writable("strategy time"):
            return
        self.data.strategy_time[Strategy.parse(strategy).value] += dt

    def record_damage_taken(self, amount: float):
        """Count a hit. Any pending evade inside its window fails."""
        if not self._writable("damage taken"):
            return
        self.data.hits_taken_count += 1
        self.data.damage_taken_total += amount
        if self._pending_evades:
            logger.debug("Telemetry: %d pending evade(s) failed",
                         len(self._pending_evades))
            self._pending_evades.clear()

    def record_time_below_hp30(self, dt: float):
        if not self._writable("low-hp time"):
            return
        self.data.time_below_hp30 += dt

    def record_evade(self):
        if not self._writable("evade"):
            return
        self.data.evade_count += 1
        self._pending_evades.append(self.elapsed_ms)

    def record_evade_success(self):
        if not self._writable("evade success"):
            return
        self.data.evade_success_count += 1

    def record_damage_dealt(self, amount: float):
        if not self._writable("damage dealt"):
            return
        self.data.damage_dealt_total += amount

    def record_kill(self, archetype, time_of_death: float | None = None) -> str:
        """Bucket a kill by archetype. Returns the bucket used."""
        bucket = kill_bucket(archetype)
        if not self._writable("kill"):
            return bucket
        self.data.kills_by_archetype[bucket] += 1
        if bucket == "Sniper":
            when = self.elapsed_ms / 1000.0 if time_of_death is None else time_of_death
            self._sniper_kill_times.append(when)
        return bucket

    def record_burst_activation(self):
        if not self._writable("burst activation"):
            return
        self.data.burst_activations += 1

    # ===========================================================
    #  Finalisation
    # ===========================================================

    def finalize_run(self, duration: float, result) -> TelemetryRecord:
        """Stamp duration (seconds) and result, then freeze.

        Calling again returns the existing record unchanged.
        """
        if self.record is not None:
            logger.warning("finalize_run called twice; keeping first record")
            return self.record

        # Evades still inside their window at the end count as clean
        for _ in self._pending_evades:
            self.data.evade_success_count += 1
        self._pending_evades.clear()

        sniper_avg = 0.0
        if self._sniper_kill_times:
            sniper_avg = sum(self._sniper_kill_times) / len(self._sniper_kill_times)

        d = self.data
        self.record = TelemetryRecord(
            strategy_time=d.strategy_time,
            strategy_switch_count=d.strategy_switch_count,
            time_below_hp30=d.time_below_hp30,
            hits_taken_count=d.hits_taken_count,
            damage_taken_total=d.damage_taken_total,
            evade_count=d.evade_count,
            evade_success_count=d.evade_success_count,
            damage_dealt_total=d.damage_dealt_total,
            kills_by_archetype=d.kills_by_archetype,
            burst_activations=d.burst_activations,
            sniper_kill_time_avg=sniper_avg,
            run_duration=float(duration),
            run_result=RunResult(result),
        )
        logger.info("Run finalized: %s after %.1fs, %d kills",
                    self.record.run_result.value, duration, self.record.total_kills)
        return self.record

    # ===========================================================
    #  Live helpers
    # ===========================================================

    def get_strategy_percentages(self) -> dict[str, float]:
        return strategy_percentages(self.data.strategy_time)

    def get_evade_success_rate(self) -> float:
        return safe_ratio(self.data.evade_success_count, self.data.evade_count) * 100.0

    def reset(self):
        self.data = TelemetryData()
        self.elapsed_ms = 0.0
        self.record = None
        self._pending_evades.clear()
        self._sniper_kill_times.clear()
