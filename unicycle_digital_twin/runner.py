#!/usr/bin/env python3
"""
Command-line runner for the Unicycle Tracking Digital Twin.

Runs the closed-loop simulation headless for a fixed span of simulated
time and prints a performance summary.

Usage:
    python -m unicycle_digital_twin.runner --trajectory FIGURE_EIGHT --load --adaptive --duration 120
    python -m unicycle_digital_twin.runner --compare --duration 60
"""

import argparse
import sys

from unicycle_digital_twin.core.simulation.simulation_runner import (
    ControlConfig,
    SimulationConfig,
    UnicycleTwinRunner,
    compare_scenarios,
)
from unicycle_digital_twin.core.simulation.performance_analyzer import PerformanceAnalyzer
from unicycle_digital_twin.core.trajectories.reference_trajectory import TrajectoryType


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Unicycle Digital Twin - Adaptive Trajectory Tracking with Sigma-Modification",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "--trajectory",
        type=str,
        default=TrajectoryType.CIRCLE.value,
        choices=[t.value for t in TrajectoryType],
        help="Reference curve to track"
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=60.0,
        help="Simulated duration in seconds"
    )
    parser.add_argument(
        "--load",
        action="store_true",
        help="Transport a load (true mass = base + load)"
    )
    parser.add_argument(
        "--adaptive",
        action="store_true",
        help="Enable the sigma-modification mass adaptation"
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=1.0 / 60.0,
        help="Logical time step in seconds"
    )
    parser.add_argument(
        "--plot",
        type=str,
        default=None,
        metavar="PATH",
        help="Save scene and chart figures using PATH as base name"
    )
    parser.add_argument(
        "--compare",
        action="store_true",
        help="Run baseline / load / load+adaptive scenarios and compare"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output"
    )
    return parser


def run_compare(args: argparse.Namespace) -> None:
    config = SimulationConfig(dt=args.dt, verbose=not args.quiet)
    results = compare_scenarios(
        duration=args.duration,
        trajectory=TrajectoryType(args.trajectory),
        config=config,
    )

    print("\n" + "=" * 70)
    print(" SCENARIO COMPARISON")
    print("=" * 70)
    print(f"{'Scenario':<20} {'Err RMS (m)':<14} {'Err final (m)':<15} {'θ_m final':<12}")
    print("-" * 70)
    for name, res in results.items():
        print(f"{name:<20} {res['position_error_rms']:<14.4f} "
              f"{res['position_error_final']:<15.4f} {res['theta_m_final']:<12.4f}")
    print("=" * 70 + "\n")


def run_single(args: argparse.Namespace) -> None:
    config = SimulationConfig(
        dt=args.dt,
        enable_plotting=args.plot is not None,
        plot_path=args.plot,
        verbose=not args.quiet,
    )
    controls = ControlConfig(
        trajectory=TrajectoryType(args.trajectory),
        adaptive=args.adaptive,
        has_load=args.load,
    )
    runner = UnicycleTwinRunner(config, controls)
    results = runner.run_simulation(duration=args.duration)

    if results['n_samples'] == 0:
        print("Warning: no telemetry recorded; skipping performance report")
        return

    analyzer = PerformanceAnalyzer()
    metrics = analyzer.analyze(results['log_data'], true_mass=results['true_mass'])
    print()
    print(analyzer.generate_report(metrics))


def main(argv=None):
    args = build_parser().parse_args(argv)

    print("=" * 60)
    print(f"Initializing Unicycle Digital Twin (Trajectory: {args.trajectory})")
    print("=" * 60)

    try:
        if args.compare:
            run_compare(args)
        else:
            run_single(args)
    except KeyboardInterrupt:
        print("\nSimulation interrupted by user.")
        sys.exit(0)


if __name__ == "__main__":
    main()
