"""
simulation_runner.py – Automated headless runs.

Runs N full runs back-to-back with an autopilot choosing strategies,
carrying granted traits from each run into the next through the run
repository, exactly as a player's consecutive sessions would.

Usage (from CLI):
    python main.py --simulate 10 --policy cycle

Policies:
    cycle  – step through ENGAGE → GUARD → EVADE → BURST on a fixed interval
    random – pick a random strategy on a fixed interval
    <name> – hold one strategy for the whole run (engage/guard/evade/burst)
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

import matplotlib
matplotlib.use("Agg")  # no display; charts go straight to disk
import matplotlib.pyplot as plt

from settings import SIM_TICK_MS, SIM_POLICY_INTERVAL, RUN_DURATION
from ai.strategy import Strategy
from systems.battle_system import BattleSystem
from systems.run_recorder import RunRepository

logger = logging.getLogger(__name__)

POLICIES = ("cycle", "random") + tuple(s.value for s in Strategy)


# ══════════════════════════════════════════════════════════
#  Per-run result
# ══════════════════════════════════════════════════════════

@dataclass
class RunSummary:
    """Lightweight record for one simulated run."""
    run_number: int = 0
    result: str = ""                # "victory" or "defeat"
    duration_sec: float = 0.0
    profile_name: str = ""
    dodge_score: float = 0.0
    aggression_score: float = 0.0
    defense_score: float = 0.0
    kills: int = 0
    strategy_switches: int = 0
    carried_traits: list = field(default_factory=list)
    granted_traits: list = field(default_factory=list)


# ══════════════════════════════════════════════════════════
#  Strategy autopilot
# ══════════════════════════════════════════════════════════

class StrategyPolicy:
    """Decides the strategy at fixed simulated intervals."""

    def __init__(self, name: str = "cycle", rng: random.Random | None = None,
                 interval: float = SIM_POLICY_INTERVAL):
        if name not in POLICIES:
            raise ValueError(f"Unknown policy: {name!r} (expected one of {POLICIES})")
        self.name = name
        self.rng = rng or random.Random()
        self.interval = interval
        self._timer = 0.0
        self._index = 0

    def initial(self) -> Strategy:
        if self.name == "random":
            return self.rng.choice(list(Strategy))
        if self.name == "cycle":
            return Strategy.ENGAGE
        return Strategy.parse(self.name)

    def step(self, dt: float) -> Strategy | None:
        """Return a new strategy when one is due, else None."""
        if self.name not in ("cycle", "random"):
            return None
        self._timer += dt
        if self._timer < self.interval:
            return None
        self._timer -= self.interval
        if self.name == "random":
            return self.rng.choice(list(Strategy))
        strategies = list(Strategy)
        self._index = (self._index + 1) % len(strategies)
        return strategies[self._index]


# ══════════════════════════════════════════════════════════
#  Simulation Runner
# ══════════════════════════════════════════════════════════

class SimulationRunner:
    """Run *n_runs* headless runs and report profile drift.

    Parameters
    ----------
    repository : RunRepository
        Where finished runs are stored and traits are carried from.
    n_runs : int
        How many runs to play.
    policy : str
        Autopilot policy name (see module docstring).
    seed : int | None
        Seeds spawning and the random policy for reproducible sessions.
    """

    def __init__(self, repository: RunRepository, n_runs: int = 10,
                 policy: str = "cycle", seed: int | None = None,
                 dt: float = SIM_TICK_MS, duration: float = RUN_DURATION) -> None:
        self._repository = repository
        self._n_runs = max(1, n_runs)
        self._policy_name = policy
        self._rng = random.Random(seed)
        self._dt = dt
        self._duration = duration
        self._results: list[RunSummary] = []

    @property
    def results(self) -> list[RunSummary]:
        return list(self._results)

    # ── Public entry point ────────────────────────────────

    def run(self) -> list[RunSummary]:
        """Execute all N runs, then print and return results."""
        for i in range(1, self._n_runs + 1):
            logger.info("=== Simulation run %d / %d ===", i, self._n_runs)
            result = self._run_one(i)
            self._results.append(result)
            logger.info(
                "Run %d: %s  dur=%.1fs  profile=%s  kills=%d  traits=%s",
                i, result.result, result.duration_sec, result.profile_name,
                result.kills, result.granted_traits or "-",
            )
        self._print_summary()
        return self._results

    # ── Single run ────────────────────────────────────────

    def _run_one(self, run_number: int) -> RunSummary:
        policy = StrategyPolicy(self._policy_name,
                                rng=random.Random(self._rng.random()))
        battle = BattleSystem(
            repository=self._repository,
            strategy=policy.initial(),
            rng=random.Random(self._rng.random()),
            duration=self._duration,
        )
        carried = sorted(battle.agent.active_traits)

        # The run timer guarantees termination; the cap only guards bad configs
        max_ticks = int(self._duration * 1000 / self._dt) + 10
        for _ in range(max_ticks):
            if battle.is_over:
                break
            choice = policy.step(self._dt)
            if choice is not None:
                battle.set_strategy(choice)
            battle.update(self._dt)

        if not battle.is_over:
            logger.warning("Run %d did not finish within %d ticks", run_number, max_ticks)
            battle.end_run(victory=True)

        record = battle.final_telemetry
        profile = battle.growth.profile
        return RunSummary(
            run_number=run_number,
            result=record.run_result.value,
            duration_sec=record.run_duration,
            profile_name=profile.profile_name,
            dodge_score=profile.dodge_score,
            aggression_score=profile.aggression_score,
            defense_score=profile.defense_score,
            kills=record.total_kills,
            strategy_switches=record.strategy_switch_count,
            carried_traits=carried,
            granted_traits=list(battle.growth.granted_traits),
        )

    # ── Summary printout ──────────────────────────────────

    def _print_summary(self) -> None:
        n = len(self._results)
        if n == 0:
            print("\nNo runs completed.")
            return

        print(f"\n{'=' * 64}")
        print(f"  Simulation Results  ({n} runs, policy={self._policy_name})")
        print(f"{'=' * 64}")

        victories = sum(1 for r in self._results if r.result == "victory")
        print(f"\n  Victories : {victories:>4d}  ({100 * victories / n:.1f}%)")
        print(f"  Defeats   : {n - victories:>4d}")
        print(f"  Avg duration : {sum(r.duration_sec for r in self._results) / n:.1f}s")
        print(f"  Avg kills    : {sum(r.kills for r in self._results) / n:.1f}")

        print(f"\n    {'#':>3s}  {'Result':<8s}  {'Profile':<15s}  "
              f"{'Dodge':>5s}  {'Aggro':>5s}  {'Def':>5s}  Traits")
        print(f"    {'-' * 58}")
        for r in self._results:
            print(f"    {r.run_number:>3d}  {r.result:<8s}  {r.profile_name:<15s}  "
                  f"{r.dodge_score:>5.1f}  {r.aggression_score:>5.1f}  "
                  f"{r.defense_score:>5.1f}  {', '.join(r.granted_traits) or '-'}")

        print(f"\n{'=' * 64}\n")


# ══════════════════════════════════════════════════════════
#  Chart
# ══════════════════════════════════════════════════════════

def plot_profile_history(results: list[RunSummary], filename: str = "profile_history.png"):
    """Save a line graph of the three profile scores per run. Returns the path."""
    if not results:
        return None

    x = [r.run_number for r in results]
    fig, ax = plt.subplots()
    ax.plot(x, [r.dodge_score for r in results], marker="o", label="Dodge")
    ax.plot(x, [r.aggression_score for r in results], marker="s", label="Aggression")
    ax.plot(x, [r.defense_score for r in results], marker="^", label="Defense")
    ax.axhline(60, color="grey", linestyle="--", linewidth=1)
    ax.set_xlabel("Run")
    ax.set_ylabel("Score")
    ax.set_ylim(0, 100)
    ax.set_title("Playstyle Profile per Run")
    ax.legend()
    ax.grid(True)

    fig.savefig(filename, dpi=100, bbox_inches="tight")
    plt.close(fig)
    logger.info("Profile chart saved to %s", filename)
    return filename
