"""Baseline scenario: honest miners on a configurable topology."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dagtips.config import SimulationConfig
from dagtips.core.simulator import BlockCreationFailed, Simulator

if TYPE_CHECKING:
    from dagtips.metrics.results import SimulationResults


def run_baseline_scenario(
    config: SimulationConfig | None = None,
    drain: bool = True,
) -> Simulator:
    """Build and run a simulation, then shut the delivery pool down.

    With ``drain`` the outstanding deliveries are awaited first so the
    returned miners hold their final views. Without it, deliveries still in
    flight when the loop stops are abandoned.
    """
    if config is None:
        config = SimulationConfig()

    sim = Simulator.build(config)
    try:
        sim.run()
        if drain:
            sim.drain()
    finally:
        sim.shutdown(cancel_pending=not drain)

    return sim


def main() -> None:
    """Run the baseline scenario and print summary statistics."""
    import argparse
    import json
    import logging
    import time

    from dagtips.core.topology import FULL_MESH, RANDOM, RING

    policies = {"full-mesh": FULL_MESH, "random": RANDOM, "ring": RING}

    parser = argparse.ArgumentParser(description="Block DAG tip propagation simulator")
    parser.add_argument(
        "--blocks", type=int, default=10, help="Target block count, genesis included"
    )
    parser.add_argument("--miners", type=int, default=10, help="Number of miners")
    parser.add_argument(
        "--interval", type=float, default=3.0, help="Seconds between block creations"
    )
    parser.add_argument(
        "--delay", type=float, default=3.0, help="Base propagation delay in seconds"
    )
    parser.add_argument(
        "--jitter", type=float, default=0.1, help="Propagation jitter as a fraction of the delay"
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument(
        "--topology",
        choices=sorted(policies),
        default="full-mesh",
        help="Miner interconnection policy",
    )
    parser.add_argument(
        "--mesh-degree", type=int, default=4, help="Peers per miner for the random policy"
    )
    parser.add_argument(
        "--id-length", type=int, default=1, help="Maximum block id length (1 allows 26 blocks)"
    )
    parser.add_argument(
        "--no-drain",
        action="store_true",
        help="Abandon in-flight deliveries when the creation loop stops",
    )
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(threadName)s %(name)s: %(message)s",
    )

    try:
        config = SimulationConfig(
            block_count=args.blocks,
            miner_count=args.miners,
            creation_interval=args.interval,
            propagation_delay=args.delay,
            jitter_ratio=args.jitter,
            seed=args.seed,
            topology_policy=policies[args.topology],
            mesh_degree=args.mesh_degree,
            id_max_length=args.id_length,
        )
        sim = Simulator.build(config)
    except ValueError as exc:
        parser.error(str(exc))

    print(f"Running {config.block_count} blocks across {config.miner_count} miners...")
    start = time.time()
    failure: BlockCreationFailed | None = None
    try:
        try:
            sim.run()
        except BlockCreationFailed as exc:
            failure = exc
        if not args.no_drain:
            sim.drain()
    finally:
        sim.shutdown(cancel_pending=args.no_drain)
    run_time = time.time() - start
    if failure is None:
        print(f"Simulation completed in {run_time:.2f}s (wall clock)")
    else:
        print(f"Simulation stopped after {run_time:.2f}s (wall clock), partial results follow")

    results = sim.finalize_metrics()

    if args.json:
        print(json.dumps(results.to_dict(), indent=2))
    else:
        print_summary(sim, results)

    if failure is not None:
        parser.exit(1, f"{parser.prog}: error: {failure}: {failure.__cause__}\n")


def print_summary(sim: Simulator, results: SimulationResults) -> None:
    print("\n=== Simulation Statistics ===")
    print(f"Blocks created: {results.blocks_created}")
    print(f"Deliveries: {results.deliveries} ({results.duplicate_deliveries} duplicates)")
    print(f"Abandoned deliveries: {sim.scheduler.abandoned_deliveries}")
    print(f"Mean delivery delay: {results.mean_delivery_delay:.3f}s")
    print(f"Max delivery delay: {results.max_delivery_delay:.3f}s")
    print(f"Mean parents per block: {results.mean_parent_count:.2f}")

    print("\n=== Final Tips ===")
    for index, tips in results.tips_per_miner.items():
        print(f"Miner #{index}: {', '.join(tips)}")
    print(f"Converged: {results.converged}")


if __name__ == "__main__":
    main()
