"""
Main entry point for the velocity controller simulation.

Run with: python -m velquad.main

Examples:
    python -m velquad.main                      # Run all scenarios
    python -m velquad.main --scenario forward
    python -m velquad.main --scenario box --no-plot
    python -m velquad.main --list-scenarios
    python -m velquad.main --config run.json --kp 3.0
    python -m velquad.main --log-level DEBUG    # Periodic controller dumps
"""

import argparse
import sys
from typing import Optional

from velquad.config import add_param_args, apply_overrides, load_params, save_params
from velquad.log import print_statistics
from velquad.logger import setup_logging
from velquad.params import Params, default_params
from velquad.scenarios import get_scenario, list_scenarios
from velquad.sim import run_sim
from velquad.types import SimLog


def run_scenario(name: str, params: Params, show_plots: bool = True) -> SimLog:
    """Run one named scenario and report on it."""
    spec = get_scenario(name)

    print("\n" + "=" * 60)
    print(f"{spec.name.upper()} SCENARIO")
    print("=" * 60)
    if spec.description:
        print(spec.description)

    log = run_sim(params, spec.command_fn(), spec.t_final)
    print_statistics(log, spec.name)

    if show_plots:
        from velquad.plots import plot_all
        plot_all(log, spec.name)

    return log


def main(argv: Optional[list] = None) -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Quadrotor Velocity Controller Simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m velquad.main                       # Run all scenarios
  python -m velquad.main --scenario forward    # Run only one scenario
  python -m velquad.main --no-plot             # Run without plots
        """,
    )

    parser.add_argument(
        "--scenario", "-s",
        type=str,
        default="all",
        help="Scenario to run (default: all)",
    )
    parser.add_argument(
        "--list-scenarios",
        action="store_true",
        help="List available scenarios and exit.",
    )
    parser.add_argument(
        "--no-plot",
        action="store_true",
        help="Disable plot display",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Load parameters from a JSON file",
    )
    parser.add_argument(
        "--save-config",
        type=str,
        default=None,
        help="Write the effective parameters to a JSON file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Console log level (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write DEBUG-level logs to this file",
    )
    add_param_args(parser)

    args = parser.parse_args(argv)

    if args.list_scenarios:
        print("Available scenarios:")
        for name in list_scenarios():
            s = get_scenario(name)
            print(f"  {name:<10s}  t_final={s.t_final:.1f}s  {s.description}")
        sys.exit(0)

    if args.scenario != "all" and args.scenario not in list_scenarios():
        parser.error(f"unknown scenario '{args.scenario}' (choose from {list_scenarios()} or all)")

    try:
        setup_logging(args.log_level, args.log_file)
        params = load_params(args.config) if args.config else default_params()
        params = apply_overrides(params, args)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))

    if args.save_config:
        save_params(params, args.save_config)
        print(f"Saved parameters to {args.save_config}")

    # Banner
    print("=" * 60)
    print("  VELQUAD: Quadrotor Velocity Controller")
    print("=" * 60)
    ctrl = params.controller
    print(f"\nVehicle: mass={params.vehicle.mass} kg, moi={params.vehicle.moi}")
    print(f"Gains (kp, ki, kd): x={ctrl.x.kp, ctrl.x.ki, ctrl.x.kd} "
          f"yaw={ctrl.yaw.kp, ctrl.yaw.ki, ctrl.yaw.kd}")
    print(f"Accel bounds: xy={ctrl.max_xy_accel} z={ctrl.max_z_accel} "
          f"yaw={ctrl.max_yaw_accel:.3f}")

    show_plots = not args.no_plot
    names = list_scenarios() if args.scenario == "all" else [args.scenario]
    for name in names:
        run_scenario(name, params, show_plots=show_plots)

    print("\n" + "=" * 60)
    print("SIMULATION COMPLETE")
    print("=" * 60)

    if show_plots:
        import matplotlib.pyplot as plt
        print("\nDisplaying plots... Close plot windows to exit.")
        plt.show()
    else:
        print("\nPlots disabled. Use without --no-plot to see visualizations.")


if __name__ == "__main__":
    main()
