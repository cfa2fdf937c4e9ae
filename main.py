"""
main.py - Entry point for the tactical strategy arena.

Runs headless simulated runs of the strategy AI against the spawn
waves, carrying granted traits from run to run through the stored
run history.

Run:
    python main.py --simulate 5 --policy cycle --chart profile.png
    python main.py --history runs.json --clear-history
"""
VERSION = "1.0.0"

import argparse
import logging
import sys

logger = logging.getLogger(__name__)

# ── Project imports ───────────────────────────────────────
from settings import RUNS_FILE
from ai.simulation_runner import SimulationRunner, POLICIES, plot_profile_history
from systems.run_recorder import JsonFileStore, RunRepository


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Tactical strategy arena – headless run simulator")
    parser.add_argument("--simulate", type=int, default=1, metavar="N",
                        help="number of runs to simulate (default: 1)")
    parser.add_argument("--policy", choices=POLICIES, default="cycle",
                        help="strategy autopilot (default: cycle)")
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for spawns and the random policy")
    parser.add_argument("--history", default=RUNS_FILE, metavar="PATH",
                        help="run history JSON file")
    parser.add_argument("--clear-history", action="store_true",
                        help="delete stored runs before simulating")
    parser.add_argument("--chart", default=None, metavar="PATH",
                        help="save a profile chart PNG after simulating")
    parser.add_argument("--verbose", action="store_true",
                        help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def print_history(repository: RunRepository):
    stats = repository.get_cumulative_stats()
    print(f"  Stored runs  : {stats['total_runs']}")
    print(f"  Victories    : {stats['victories']}")
    print(f"  Avg duration : {stats['avg_duration']:.1f}s")
    print(f"  Total kills  : {stats['total_kills']}")
    for name, count in sorted(stats["profile_distribution"].items(),
                              key=lambda item: item[1], reverse=True):
        print(f"    {name:<15s} {count:>3d}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    repository = RunRepository(JsonFileStore(args.history))
    if args.clear_history:
        repository.clear_all()

    if args.simulate > 0:
        runner = SimulationRunner(repository, n_runs=args.simulate,
                                  policy=args.policy, seed=args.seed)
        results = runner.run()
        if args.chart:
            plot_profile_history(results, args.chart)

    print_history(repository)
    return 0


# ── Run ───────────────────────────────────────────────────
if __name__ == "__main__":
    sys.exit(main())
