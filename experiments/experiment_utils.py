import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import numpy as np
import matplotlib.pyplot as plt

from classical_integrators.base_integrator import BaseIntegrator
from classical_integrators.body import Body
from classical_integrators.euler import Euler
from classical_integrators.semi_implicit_euler import SemiImplicitEuler
from comparison_framework.metrics.energy_conservation import EnergyConservation, relative_energy_error
from comparison_framework.metrics.momentum_conservation import MomentumConservation
from comparison_framework.test_cases.two_body import (
    generate_two_body_system,
    generate_eccentric_orbit,
    generate_launch_orbit,
)
from simulation.config import SimulationConfig
from simulation.errors import InvalidConfigurationError, NonFiniteStateError
from simulation.two_body_system import TwoBodySystem
from simulation.units import EARTH_MASS, SUN_MASS, M_TO_AU, S_TO_DAYS

logger = logging.getLogger(__name__)


def get_config() -> Dict[str, Any]:
    """Return the default configuration for a two-body experiment."""
    return {
        "scenario": "circular",         # circular | eccentric | launch
        "radius_au": 1.0,
        "speed_factor": 1.2,            # eccentric scenario
        "speed": 30000.0,               # launch scenario, m/s
        "angle_deg": 90.0,              # launch scenario
        "star_mass": SUN_MASS,
        "planet_mass": EARTH_MASS,
        "time_step": 60.0,
        "sub_steps_per_call": 1000,
        "n_periods": 3,
        "max_calls": 20000,
        "integrator": "semi_implicit_euler",
        "output_dir": "results/two_body",
        "plots": True,
    }


def get_integrator(integrator_name: str, G: float) -> BaseIntegrator:
    """
    Initialise and return the appropriate integrator.
    Args:
        integrator_name: Name of the integrator to use
        G: Gravitational constant
    Returns:
        Initialised integrator instance
    """
    if integrator_name == 'semi_implicit_euler':
        return SemiImplicitEuler(G=G)
    elif integrator_name == 'euler':
        return Euler(G=G)
    else:
        raise ValueError(f"Unknown integrator: {integrator_name}")


def build_bodies(config: Dict[str, Any]) -> Tuple[Body, Body]:
    """Create the (star, planet) pair described by the experiment config."""
    scenario = config["scenario"]
    if scenario == "circular":
        return generate_two_body_system(
            radius_au=config["radius_au"],
            star_mass=config["star_mass"],
            planet_mass=config["planet_mass"],
        )
    elif scenario == "eccentric":
        return generate_eccentric_orbit(
            radius_au=config["radius_au"],
            speed_factor=config["speed_factor"],
            star_mass=config["star_mass"],
            planet_mass=config["planet_mass"],
        )
    elif scenario == "launch":
        return generate_launch_orbit(
            radius_au=config["radius_au"],
            speed=config["speed"],
            angle_deg=config["angle_deg"],
            star_mass=config["star_mass"],
            planet_mass=config["planet_mass"],
        )
    else:
        raise InvalidConfigurationError(f"Unknown scenario: {scenario}")


def build_system(config: Dict[str, Any]) -> TwoBodySystem:
    """Create a TwoBodySystem from an experiment config dictionary."""
    sim_config = SimulationConfig.from_dict(config)
    star, planet = build_bodies(config)
    integrator = get_integrator(config["integrator"], sim_config.gravitational_constant)
    return TwoBodySystem(star, planet, config=sim_config, integrator=integrator)


def period_report(system: TwoBodySystem) -> Dict[str, Any]:
    """Snapshot of the latest completed orbit in SI and presentation units."""
    fit = system.ellipse_fit
    return {
        "orbit": system.periods_completed,
        "world_time_days": system.world_time * S_TO_DAYS,
        "period_s": system.period,
        "period_days": system.period * S_TO_DAYS,
        "fit_status": system.fit_status.value,
        "fit_stale": system.fit_stale,
        "semi_major_axis_m": fit.a,
        "semi_major_axis_au": fit.a * M_TO_AU,
        "semi_minor_axis_au": fit.b * M_TO_AU,
        "center_au": (fit.h * M_TO_AU, fit.k * M_TO_AU),
        "theta_deg": float(np.degrees(fit.theta)),
        "eccentricity": fit.eccentricity,
        "n_intervals": len(system.interval_areas),
    }


def run_experiment(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Step a two-body system until the requested number of orbits completes.

    The host checks finiteness after every step() call; the simulation
    itself never sanitizes its state.

    Args:
        config: Experiment configuration (defaults from get_config())
    Returns:
        Dictionary with per-orbit reports, per-call energies/velocities/times,
        body trails and the final system
    Raises:
        NonFiniteStateError: if the body state stops being finite
    """
    cfg = get_config()
    if config:
        cfg.update(config)

    system = build_system(cfg)
    integrator = system.integrator
    masses = np.array([system.star.mass, system.planet.mass])

    times = [0.0]
    energies = [integrator.compute_energy(system.star, system.planet)]
    velocities = [np.array([system.star.velocity, system.planet.velocity])]
    reports = []

    start_time = time.time()
    calls = 0
    while system.periods_completed < cfg["n_periods"] and calls < cfg["max_calls"]:
        completed = system.step()
        calls += 1
        if not system.state_is_finite():
            raise NonFiniteStateError(
                f"Non-finite body state after {system.world_time:.6e} s of simulated time"
            )
        times.append(system.world_time)
        energies.append(integrator.compute_energy(system.star, system.planet))
        velocities.append(np.array([system.star.velocity, system.planet.velocity]))
        if completed:
            report = period_report(system)
            reports.append(report)
            logger.info(
                f"Orbit {report['orbit']}: period {report['period_days']:.5f} days, "
                f"a = {report['semi_major_axis_au']:.6f} AU, "
                f"e = {report['eccentricity']:.5f} ({report['fit_status']})"
            )
    computation_time = time.time() - start_time

    if system.periods_completed < cfg["n_periods"]:
        logger.warning(
            f"Stopped after {calls} calls with {system.periods_completed} of "
            f"{cfg['n_periods']} orbits completed"
        )

    return {
        "config": cfg,
        "system": system,
        "reports": reports,
        "times": np.array(times),
        "energies": np.array(energies),
        "velocities": np.array(velocities),
        "masses": masses,
        "star_trail": np.array(system.star.position_history).reshape(-1, 2),
        "planet_trail": np.array(system.planet.position_history).reshape(-1, 2),
        "calls": calls,
        "computation_time": computation_time,
    }


def ensure_directory(path) -> Path:
    """Create the directory if it does not exist and return it as a Path."""
    output_path = Path(path)
    output_path.mkdir(exist_ok=True, parents=True)
    return output_path


def plot_orbit_fit(results, output_path=None, title_prefix=""):
    """
    Plot the sampled trails of both bodies with the latest fitted ellipse.
    Args:
        results: Dictionary returned by run_experiment
        output_path: Where to save the figure (shown interactively if None)
        title_prefix: Prefix for the plot title
    """
    system = results["system"]
    planet_trail = results["planet_trail"] * M_TO_AU
    star_trail = results["star_trail"] * M_TO_AU

    plt.figure(figsize=(10, 10))
    if len(planet_trail):
        plt.plot(planet_trail[:, 0], planet_trail[:, 1], 'b.', markersize=2, label=system.planet.name)
    if len(star_trail):
        plt.plot(star_trail[:, 0], star_trail[:, 1], 'r.', markersize=2, label=system.star.name)
    if system.ellipse_fit.a > 0:
        ellipse = system.ellipse_fit.sample_points() * M_TO_AU
        plt.plot(ellipse[:, 0], ellipse[:, 1], '-', color='tab:orange', label='Best-fit ellipse')
    plt.axis('equal')
    plt.grid(True)
    plt.xlabel('x (AU)')
    plt.ylabel('y (AU)')
    plt.title(f'{title_prefix} Orbit and Ellipse Fit\n(Time: {system.world_time * S_TO_DAYS:.1f} days)')
    plt.legend()

    if output_path:
        plt.savefig(output_path, dpi=150)
        plt.close()
    else:
        plt.show()


def plot_conservation(results, output_path=None, title_prefix=""):
    """
    Plot the relative energy error over time.
    Args:
        results: Dictionary returned by run_experiment
        output_path: Where to save the figure (shown interactively if None)
        title_prefix: Prefix for the plot title
    """
    times_days = results["times"] * S_TO_DAYS
    energy_error = np.abs(relative_energy_error(results["energies"]))

    plt.figure(figsize=(12, 6))
    # Skip the initial point, its error is exactly zero on a log axis
    plt.plot(times_days[1:], energy_error[1:])
    plt.grid(True, alpha=0.3)
    plt.xlabel('Time (days)')
    plt.ylabel('|Relative Energy Error|')
    plt.title(f'{title_prefix} Energy Conservation')
    plt.yscale('log')

    if output_path:
        plt.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close()
    else:
        plt.show()


def print_statistics(results) -> Dict[str, float]:
    """
    Log summary statistics for an experiment and return the metric values.
    """
    energy_metric = EnergyConservation()
    momentum_metric = MomentumConservation()
    integrator_name = results["config"]["integrator"]

    energy_error = energy_metric.evaluate(integrator_name, results)
    momentum_error = momentum_metric.evaluate(integrator_name, results)

    logger.info(f"Computation time: {results['computation_time']:.2f} seconds")
    logger.info(f"Sub-step calls: {results['calls']}")
    logger.info(f"RMS relative energy error: {energy_error:.2e}")
    logger.info(f"Max relative momentum deviation: {momentum_error:.2e}")
    if len(results["times"]) > 2:
        drift = energy_metric.compute_drift(results)
        logger.info(f"Relative energy drift: {drift:.2e} per second")
    return {"energy_error": energy_error, "momentum_error": momentum_error}
