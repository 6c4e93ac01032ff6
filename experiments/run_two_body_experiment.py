#!/usr/bin/env python3
"""
Two-Body Orbit Fit Experiment

Simulates a star-planet system, fits an ellipse to the planet's daily
positions once per detected orbit and reports period, semi-axes,
orientation and eccentricity. Plots of the orbit with its best-fit ellipse
and of the energy error are written to the output directory.
"""
import argparse
import logging
from typing import List, Optional

from experiments.experiment_utils import (
    get_config,
    run_experiment,
    plot_orbit_fit,
    plot_conservation,
    print_statistics,
    ensure_directory,
)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the script."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(levelname)s - %(message)s',
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    defaults = get_config()
    parser = argparse.ArgumentParser(description="Simulate a two-body orbit and fit ellipses per period")
    parser.add_argument("--scenario", choices=["circular", "eccentric", "launch"],
                        default=defaults["scenario"], help="Initial conditions to use")
    parser.add_argument("--radius", type=float, default=defaults["radius_au"],
                        help="Initial star-planet distance in AU")
    parser.add_argument("--speed-factor", type=float, default=defaults["speed_factor"],
                        help="Multiple of the circular speed (eccentric scenario)")
    parser.add_argument("--speed", type=float, default=defaults["speed"],
                        help="Launch speed in m/s (launch scenario)")
    parser.add_argument("--angle", type=float, default=defaults["angle_deg"],
                        help="Launch angle in degrees from +x (launch scenario)")
    parser.add_argument("--planet-mass", type=float, default=defaults["planet_mass"],
                        help="Planet mass in kg")
    parser.add_argument("--time-step", type=float, default=defaults["time_step"],
                        help="Physics sub-step in seconds")
    parser.add_argument("--sub-steps", type=int, default=defaults["sub_steps_per_call"],
                        help="Physics sub-steps per step() call")
    parser.add_argument("--periods", type=int, default=defaults["n_periods"],
                        help="Number of detected orbits to simulate")
    parser.add_argument("--max-calls", type=int, default=defaults["max_calls"],
                        help="Upper bound on step() calls")
    parser.add_argument("--integrator", choices=["semi_implicit_euler", "euler"],
                        default=defaults["integrator"], help="Integrator to use")
    parser.add_argument("--output-dir", type=str, default=defaults["output_dir"],
                        help="Directory for plots")
    parser.add_argument("--no-plots", action="store_true", help="Skip writing plots")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the experiment from the command line."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    config = get_config()
    config.update({
        "scenario": args.scenario,
        "radius_au": args.radius,
        "speed_factor": args.speed_factor,
        "speed": args.speed,
        "angle_deg": args.angle,
        "planet_mass": args.planet_mass,
        "time_step": args.time_step,
        "sub_steps_per_call": args.sub_steps,
        "n_periods": args.periods,
        "max_calls": args.max_calls,
        "integrator": args.integrator,
        "output_dir": args.output_dir,
        "plots": not args.no_plots,
    })

    logging.info(f"Running {config['scenario']} orbit with {config['integrator']} integrator")
    results = run_experiment(config)
    print_statistics(results)

    if config["plots"]:
        output_path = ensure_directory(config["output_dir"])
        prefix = f"{config['scenario'].capitalize()} ({config['integrator']})"
        plot_orbit_fit(results, output_path / f"orbit_fit_{config['integrator']}.png", prefix)
        plot_conservation(results, output_path / f"energy_{config['integrator']}.png", prefix)
        logging.info(f"Plots saved to {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
