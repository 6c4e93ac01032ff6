import logging
import math

import numpy as np
import pytest

from classical_integrators.body import Body
from comparison_framework.test_cases.two_body import (
    circular_period,
    generate_eccentric_orbit,
    generate_two_body_system,
)
from orbit_fitting.conic_fit import fit_conic
from orbit_fitting.ellipse import ConicCoefficients, EllipseFit
from orbit_fitting.errors import InsufficientSamplesError, NotAnEllipseError
from simulation.config import SimulationConfig
from simulation.errors import InvalidConfigurationError
from simulation.two_body_system import FitStatus, TwoBodySystem, swept_areas
from simulation.units import AU_TO_M

HYPERBOLA = ConicCoefficients(1.0, 0.0, -1.0, 0.0, 0.0, -1.0)


class RecordingFitter:
    """Wraps a fitter and remembers the size of every sample set it receives."""

    def __init__(self, fitter=fit_conic):
        self.fitter = fitter
        self.calls = []

    def __call__(self, samples):
        self.calls.append(len(samples))
        return self.fitter(samples)


def run_until_periods(system, n_periods, max_calls=1000):
    for _ in range(max_calls):
        if system.periods_completed >= n_periods:
            return system
        system.step()
    raise AssertionError(f"only {system.periods_completed} periods after {max_calls} calls")


@pytest.fixture(scope="module")
def circular_run():
    star, planet = generate_two_body_system(radius_au=1.0)
    fitter = RecordingFitter()
    # 60 sub-steps per sampled day
    config = SimulationConfig(time_step=1440.0, sub_steps_per_call=100)
    system = TwoBodySystem(star, planet, config=config, fitter=fitter)

    first_period_time = None
    while system.periods_completed < 2:
        system.step()
        if first_period_time is None and system.periods_completed == 1:
            first_period_time = system.period
    return system, fitter, first_period_time


def test_first_detection_after_half_orbit(circular_run):
    # the angle starts at 0 and first wraps at +pi
    _, _, first_period = circular_run
    assert first_period == pytest.approx(0.5 * circular_period(1.0), rel=2e-3)


def test_period_follows_keplers_third_law(circular_run):
    system, _, _ = circular_run
    assert system.period == pytest.approx(circular_period(1.0), rel=2e-3)


def test_circular_orbit_fit(circular_run):
    system, _, _ = circular_run
    fit = system.ellipse_fit
    r = AU_TO_M
    assert system.fit_status is FitStatus.FITTED
    assert not system.fit_stale
    assert system.last_fit_error is None
    assert fit.eccentricity < 1e-3
    assert fit.a == pytest.approx(r, rel=1e-3)
    assert fit.b == pytest.approx(r, rel=1e-3)
    assert abs(fit.h) < 1e-3 * r
    assert abs(fit.k) < 1e-3 * r


def test_fitter_receives_one_orbit_of_daily_samples(circular_run):
    _, fitter, _ = circular_run
    half_orbit_days = 0.5 * circular_period(1.0) / 86400.0
    assert len(fitter.calls) == 2
    assert abs(fitter.calls[0] - half_orbit_days) <= 1
    assert abs(fitter.calls[1] - 2 * half_orbit_days) <= 1


def test_equal_areas_in_equal_times(circular_run):
    system, _, _ = circular_run
    areas = np.array(system.interval_areas)
    assert len(areas) > 300
    assert areas.std() / areas.mean() < 1e-3


def test_histories_bounded(circular_run):
    system, _, _ = circular_run
    assert 0 < len(system.planet.position_history) <= 2000
    assert len(system.star.position_history) == len(system.planet.position_history)


def test_angle_history_in_range(circular_run):
    system, _, _ = circular_run
    for angle in system.angle_history:
        assert -math.pi < angle <= math.pi


def test_eccentric_orbit_fit():
    star, planet = generate_eccentric_orbit(radius_au=1.0, speed_factor=1.2)
    config = SimulationConfig(time_step=3000.0, sub_steps_per_call=500)
    system = run_until_periods(TwoBodySystem(star, planet, config=config), 2)

    expected_e = 1.2 ** 2 - 1
    expected_a = AU_TO_M / (1 - expected_e)
    fit = system.ellipse_fit
    assert fit.eccentricity == pytest.approx(expected_e, rel=1e-2)
    assert fit.a == pytest.approx(expected_a, rel=1e-2)
    # periapsis on +x puts the center on -x
    assert fit.h == pytest.approx(-expected_a * expected_e, rel=2e-2)
    assert abs(fit.k) < 1e-2 * expected_a
    d_theta = fit.theta % math.pi
    assert min(d_theta, math.pi - d_theta) < 1e-2


def test_momentum_conserved_per_step():
    star, planet = generate_two_body_system()
    config = SimulationConfig(time_step=3600.0, sub_steps_per_call=50)
    system = TwoBodySystem(star, planet, config=config)
    scale = np.linalg.norm(planet.momentum)
    for _ in range(20):
        before = star.momentum + planet.momentum
        system.step()
        after = star.momentum + planet.momentum
        np.testing.assert_allclose(after, before, atol=1e-12 * scale)


def test_identical_runs_are_deterministic():
    systems = []
    for _ in range(2):
        star, planet = generate_eccentric_orbit()
        config = SimulationConfig(time_step=3600.0, sub_steps_per_call=300)
        system = TwoBodySystem(star, planet, config=config)
        for _ in range(5):
            system.step()
        systems.append(system)
    first, second = systems
    np.testing.assert_array_equal(first.planet.position, second.planet.position)
    np.testing.assert_array_equal(first.star.velocity, second.star.velocity)
    assert first.world_time == second.world_time
    np.testing.assert_array_equal(np.array(first.orbital_samples), np.array(second.orbital_samples))


def test_configured_sub_steps_are_honored():
    star, planet = generate_two_body_system()
    config = SimulationConfig(time_step=10.0, sub_steps_per_call=7)
    system = TwoBodySystem(star, planet, config=config)
    system.step()
    assert system.world_time == pytest.approx(70.0)


def test_samples_taken_once_per_day_bucket():
    # 0.1 s steps never land exactly on whole seconds after accumulation
    star, planet = generate_two_body_system()
    config = SimulationConfig(time_step=0.1, sub_steps_per_call=1000, sample_interval=1.0)
    system = TwoBodySystem(star, planet, config=config)
    system.step()
    system.step()
    expected = math.floor(system.world_time / 1.0)
    assert len(system.orbital_samples) == expected
    assert len(system.planet.position_history) == expected
    assert len(system.star.position_history) == expected


def test_position_history_trimmed_during_simulation():
    star, planet = generate_two_body_system()
    config = SimulationConfig(time_step=10.0, sub_steps_per_call=2500, sample_interval=10.0)
    system = TwoBodySystem(star, planet, config=config)
    system.step()
    assert len(system.orbital_samples) == 2500
    assert len(planet.position_history) <= 2000
    # newest entry is always the current position
    np.testing.assert_array_equal(planet.position_history[-1], planet.position)


def test_insufficient_samples_skips_fitter(caplog):
    star, planet = generate_two_body_system()
    fitter = RecordingFitter()
    config = SimulationConfig(time_step=6000.0, sub_steps_per_call=500,
                              sample_interval=100 * 86400.0)
    system = TwoBodySystem(star, planet, config=config, fitter=fitter)

    with caplog.at_level(logging.WARNING, logger="simulation.two_body_system"):
        run_until_periods(system, 1)

    assert fitter.calls == []
    assert system.fit_status is FitStatus.INSUFFICIENT_SAMPLES
    assert system.fit_stale
    assert isinstance(system.last_fit_error, InsufficientSamplesError)
    assert system.ellipse_fit == EllipseFit()
    assert system.period > 0
    assert "ellipse fit unavailable" in caplog.text


def test_not_an_ellipse_keeps_previous_fit():
    results = iter([None, HYPERBOLA])

    def flaky_fitter(samples):
        coefficients = next(results)
        return fit_conic(samples) if coefficients is None else coefficients

    star, planet = generate_two_body_system()
    config = SimulationConfig(time_step=6000.0, sub_steps_per_call=500)
    system = TwoBodySystem(star, planet, config=config, fitter=flaky_fitter)

    run_until_periods(system, 1)
    assert system.fit_status is FitStatus.FITTED
    good_fit = system.ellipse_fit

    run_until_periods(system, 2)
    assert system.fit_status is FitStatus.NOT_AN_ELLIPSE
    assert system.fit_stale
    assert isinstance(system.last_fit_error, NotAnEllipseError)
    assert system.ellipse_fit == good_fit

    # the simulation keeps running after a failed fit
    time_before = system.world_time
    system.step()
    assert system.world_time > time_before


def test_samples_cleared_after_each_period():
    star, planet = generate_two_body_system()
    config = SimulationConfig(time_step=6000.0, sub_steps_per_call=1)
    system = TwoBodySystem(star, planet, config=config)
    while system.step() == 0:
        pass
    # the completing sub-step consumed and cleared the samples
    assert system.orbital_samples == ()


def test_period_completion_is_logged(caplog):
    star, planet = generate_two_body_system()
    config = SimulationConfig(time_step=6000.0, sub_steps_per_call=500)
    system = TwoBodySystem(star, planet, config=config)
    with caplog.at_level(logging.INFO, logger="simulation.two_body_system"):
        run_until_periods(system, 1)
    assert "semi-major axis" in caplog.text
    assert "period" in caplog.text


def test_step_returns_number_of_completed_periods():
    star, planet = generate_two_body_system()
    config = SimulationConfig(time_step=6000.0, sub_steps_per_call=100)
    system = TwoBodySystem(star, planet, config=config)
    total = 0
    for _ in range(100):
        total += system.step()
    assert total == system.periods_completed
    assert total >= 1


def test_initial_state():
    star, planet = generate_two_body_system()
    system = TwoBodySystem(star, planet)
    assert system.world_time == 0.0
    assert system.period == 0.0
    assert system.ellipse_fit == EllipseFit()
    assert system.fit_status is FitStatus.PENDING
    assert system.orbital_samples == ()
    assert system.sub_steps_per_call == 1000
    assert system.angle_history == (0.0, 0.0, 0.0)


def test_non_finite_state_is_reported_not_repaired():
    star, planet = generate_two_body_system()
    system = TwoBodySystem(star, planet, config=SimulationConfig(sub_steps_per_call=1))
    assert system.state_is_finite()
    planet.position[0] = np.nan
    system.step()
    assert not system.state_is_finite()


def test_coincident_bodies_rejected():
    with pytest.raises(InvalidConfigurationError):
        TwoBodySystem(Body(mass=1.0, position=(5.0, 5.0)), Body(mass=1.0, position=(5.0, 5.0)))


def test_same_body_twice_rejected():
    body = Body(mass=1.0)
    with pytest.raises(InvalidConfigurationError):
        TwoBodySystem(body, body)


@pytest.mark.parametrize("kwargs", [
    {"time_step": 0.0},
    {"time_step": -60.0},
    {"time_step": float("nan")},
    {"sub_steps_per_call": 0},
    {"sub_steps_per_call": 2.5},
    {"sample_interval": 0.0},
    {"gravitational_constant": 0.0},
    {"history_limit": 100, "history_trim": 200},
    {"min_fit_samples": 4},
])
def test_invalid_config_rejected(kwargs):
    with pytest.raises(InvalidConfigurationError):
        SimulationConfig(**kwargs)


def test_config_from_dict_ignores_unknown_keys():
    config = SimulationConfig.from_dict({"time_step": 30.0, "scenario": "circular"})
    assert config.time_step == 30.0
    assert config.to_dict()["sub_steps_per_call"] == 1000


def test_history_policy_from_config_applied_to_bodies():
    star, planet = generate_two_body_system()
    TwoBodySystem(star, planet, config=SimulationConfig(history_limit=100, history_trim=10))
    assert planet.history_limit == 100
    assert star.history_trim == 10


def test_swept_areas():
    focus = np.array([0.0, 0.0])
    samples = [np.array([1.0, 0.0]), np.array([0.0, 1.0]), np.array([-2.0, 0.0])]
    assert swept_areas(focus, samples) == pytest.approx((0.5, 1.0))
    assert swept_areas(focus, samples[:1]) == ()
