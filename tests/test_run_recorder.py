from __future__ import annotations

import json

import pytest

from systems.growth_resolver import GrowthResolver
from systems.run_recorder import JsonFileStore, MemoryStore, RunRecord, RunRepository
from systems.telemetry import RunResult, Telemetry


def _telemetry_builder(result=RunResult.VICTORY, duration: float = 120.0,
                       kills: int = 0, evades: int = 0):
    telemetry = Telemetry()
    telemetry.record_strategy_time("evade", duration * 1000)
    for _ in range(kills):
        telemetry.record_kill("rusher")
    for _ in range(evades):
        telemetry.record_evade()
    return telemetry.finalize_run(duration, result)


def _record_builder(timestamp: float = 1.0, **kwargs) -> RunRecord:
    record = _telemetry_builder(**kwargs)
    growth = GrowthResolver().resolve(record)
    return RunRecord(
        timestamp=timestamp,
        telemetry=record,
        playstyle_profile=growth.profile.profile_name,
        granted_traits=growth.granted_traits,
    )


# ── Round trip ───────────────────────────────────────────

def test_saved_run_reads_back_equal(repository) -> None:
    record = _record_builder(kills=4)

    repository.save_run(record)

    assert repository.get_recent_runs(1) == [record]


def test_file_store_round_trip(tmp_path) -> None:
    path = tmp_path / "history" / "runs.json"
    repository = RunRepository(JsonFileStore(str(path)))
    record = _record_builder(evades=12)

    repository.save_run(record)
    reopened = RunRepository(JsonFileStore(str(path)))

    assert reopened.get_recent_runs(1) == [record]
    stored = json.loads(path.read_text(encoding="utf-8"))
    assert list(stored) == ["tactical-arena-runs"]


def test_record_run_builds_from_growth(repository) -> None:
    telemetry = _telemetry_builder(evades=20)
    growth = GrowthResolver().resolve(telemetry)

    record = repository.record_run(telemetry, growth, timestamp=5.0)

    assert record.playstyle_profile == "Dodge-Counter"
    assert record.granted_traits == ("T1_PHANTOM_TRACE", "T2_REFLEX_BURST")
    assert record.profile_scores["dodge"] == 100.0
    assert repository.get_recent_runs(1) == [record]


# ── History shape ────────────────────────────────────────

def test_history_is_newest_first_and_capped(repository) -> None:
    for i in range(25):
        repository.save_run(_record_builder(timestamp=float(i)))

    runs = repository.get_all_runs()

    assert len(runs) == 20
    assert runs[0].timestamp == 24.0
    assert runs[-1].timestamp == 5.0


def test_recent_runs_count(repository) -> None:
    for i in range(3):
        repository.save_run(_record_builder(timestamp=float(i)))

    assert [r.timestamp for r in repository.get_recent_runs(2)] == [2.0, 1.0]
    assert repository.get_recent_runs(0) == []


def test_latest_traits_come_from_newest_run(repository) -> None:
    assert repository.latest_traits() == []

    repository.save_run(_record_builder(evades=20))
    assert repository.latest_traits() == ["T1_PHANTOM_TRACE", "T2_REFLEX_BURST"]

    repository.save_run(_record_builder())
    assert repository.latest_traits() == []


# ── Damaged storage ──────────────────────────────────────

def test_corrupt_file_reads_as_empty_and_is_overwritten(tmp_path) -> None:
    path = tmp_path / "runs.json"
    path.write_text("{not json", encoding="utf-8")
    repository = RunRepository(JsonFileStore(str(path)))

    assert repository.get_all_runs() == []

    repository.save_run(_record_builder())
    assert len(repository.get_all_runs()) == 1


def test_non_object_file_reads_as_empty(tmp_path) -> None:
    path = tmp_path / "runs.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert RunRepository(JsonFileStore(str(path))).get_all_runs() == []


def test_malformed_entries_are_skipped() -> None:
    store = MemoryStore()
    good = _record_builder()
    store.set("tactical-arena-runs", [
        "garbage",
        {"timestamp": "not a number", "telemetry": {}},
        {"telemetry": {}},
        good.as_dict(),
    ])

    runs = RunRepository(store).get_all_runs()

    assert runs == [good]


def test_non_list_value_is_ignored() -> None:
    store = MemoryStore()
    store.set("tactical-arena-runs", {"oops": True})

    assert RunRepository(store).get_all_runs() == []


# ── Aggregates ───────────────────────────────────────────

def test_cumulative_stats(repository) -> None:
    repository.save_run(_record_builder(kills=3, duration=120.0))
    repository.save_run(_record_builder(result=RunResult.DEFEAT, kills=1, duration=60.0))

    stats = repository.get_cumulative_stats()

    assert stats["total_runs"] == 2
    assert stats["victories"] == 1
    assert stats["avg_duration"] == pytest.approx(90.0)
    assert stats["total_kills"] == 4
    assert stats["profile_distribution"] == {"Balanced": 2}


def test_empty_history_stats(repository) -> None:
    assert repository.get_cumulative_stats()["total_runs"] == 0


def test_clear_all(repository) -> None:
    repository.save_run(_record_builder())

    repository.clear_all()

    assert repository.get_all_runs() == []
