"""
run_recorder.py – Persistent history of finished runs.

The only persisted state is an ordered list of RunRecord, newest
first, capped at MAX_STORED_RUNS. It lives under one key of a small
key/value store:

    JsonFileStore – JSON object on disk (default: run_history.json)
    MemoryStore   – in-process dict, for tests and throwaway sessions

A missing or corrupt file, or a malformed entry, is treated as empty /
skipped with a warning; history problems never stop a run.
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

from settings import RUNS_FILE, RUNS_STORAGE_KEY, MAX_STORED_RUNS
from systems.telemetry import TelemetryRecord, RunResult

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════
#  Key/value stores
# ══════════════════════════════════════════════════════════

class KeyValueStore(Protocol):
    def get(self, key: str) -> Any: ...
    def set(self, key: str, value: Any) -> None: ...
    def delete(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store."""

    def __init__(self):
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """JSON object on disk, one entry per key. Values must be JSON-safe."""

    def __init__(self, path: str = RUNS_FILE):
        self.path = path

    def _load(self) -> dict:
        if not os.path.isfile(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Run history at %s unreadable (%s); starting empty",
                           self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Run history at %s has unexpected layout; starting empty",
                           self.path)
            return {}
        return data

    def _save(self, data: dict) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def get(self, key: str) -> Any:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


# ══════════════════════════════════════════════════════════
#  Record
# ══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RunRecord:
    """One finished run as persisted."""

    timestamp: float
    telemetry: TelemetryRecord
    playstyle_profile: str | None = None
    granted_traits: tuple = ()
    profile_scores: dict = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "granted_traits", tuple(self.granted_traits))

    @property
    def victory(self) -> bool:
        return self.telemetry.run_result is RunResult.VICTORY

    def as_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "telemetry": self.telemetry.as_dict(),
            "playstyle_profile": self.playstyle_profile,
            "granted_traits": list(self.granted_traits),
            "profile_scores": dict(self.profile_scores),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "RunRecord":
        return cls(
            timestamp=float(data["timestamp"]),
            telemetry=TelemetryRecord.from_dict(data["telemetry"]),
            playstyle_profile=data.get("playstyle_profile"),
            granted_traits=tuple(data.get("granted_traits") or ()),
            profile_scores=dict(data.get("profile_scores") or {}),
        )


# ══════════════════════════════════════════════════════════
#  Repository
# ══════════════════════════════════════════════════════════

class RunRepository:
    """Capped, newest-first run history over a key/value store."""

    def __init__(self, store: KeyValueStore | None = None,
                 key: str = RUNS_STORAGE_KEY,
                 max_runs: int = MAX_STORED_RUNS):
        self.store = store if store is not None else JsonFileStore()
        self.key = key
        self.max_runs = max_runs

    def _raw_runs(self) -> list:
        raw = self.store.get(self.key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Stored runs under %r are not a list; ignoring", self.key)
            return []
        return raw

    def save_run(self, record: RunRecord) -> None:
        """Prepend *record* and evict beyond the cap."""
        runs = [record.as_dict()] + self._raw_runs()
        del runs[self.max_runs:]
        self.store.set(self.key, runs)
        logger.info("Saved run (%s). Total runs: %d",
                    record.playstyle_profile or "no profile", len(runs))

    def record_run(self, telemetry: TelemetryRecord, growth=None,
                   timestamp: float | None = None) -> RunRecord:
        """Build a RunRecord from a finished run and save it."""
        profile = growth.profile if growth is not None else None
        record = RunRecord(
            timestamp=time.time() if timestamp is None else timestamp,
            telemetry=telemetry,
            playstyle_profile=profile.profile_name if profile else None,
            granted_traits=tuple(growth.granted_traits) if growth is not None else (),
            profile_scores={
                "dodge": profile.dodge_score,
                "aggression": profile.aggression_score,
                "defense": profile.defense_score,
            } if profile else {},
        )
        self.save_run(record)
        return record

    def get_all_runs(self) -> list[RunRecord]:
        runs: list[RunRecord] = []
        for entry in self._raw_runs():
            try:
                runs.append(RunRecord.from_dict(entry))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed run record: %s", exc)
        return runs

    def get_recent_runs(self, count: int = 5) -> list[RunRecord]:
        return self.get_all_runs()[:max(0, count)]

    def latest_traits(self) -> list[str]:
        """Traits granted by the most recent run (seeds the next agent)."""
        recent = self.get_recent_runs(1)
        if recent and recent[0].granted_traits:
            logger.info("Carrying traits from previous run: %s",
                        ", ".join(recent[0].granted_traits))
            return list(recent[0].granted_traits)
        return []

    def get_cumulative_stats(self) -> dict:
        runs = self.get_all_runs()
        if not runs:
            return {
                "total_runs": 0,
                "victories": 0,
                "avg_duration": 0.0,
                "total_kills": 0,
                "profile_distribution": {},
            }

        distribution: dict[str, int] = {}
        for run in runs:
            if run.playstyle_profile:
                distribution[run.playstyle_profile] = (
                    distribution.get(run.playstyle_profile, 0) + 1)

        return {
            "total_runs": len(runs),
            "victories": sum(1 for r in runs if r.victory),
            "avg_duration": sum(r.telemetry.run_duration for r in runs) / len(runs),
            "total_kills": sum(r.telemetry.total_kills for r in runs),
            "profile_distribution": distribution,
        }

    def clear_all(self) -> None:
        self.store.delete(self.key)
        logger.info("Cleared all stored runs")
