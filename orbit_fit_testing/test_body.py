import numpy as np
import pytest

from classical_integrators.body import Body, HISTORY_LIMIT, HISTORY_TRIM
from simulation.errors import InvalidConfigurationError
from vector_math import vec2


def test_advance_uses_updated_velocity():
    body = Body(mass=2.0, position=(0.0, 0.0), velocity=(1.0, 0.0))
    body.advance(vec2.from_values(0.0, 2.0), 0.5)

    np.testing.assert_array_equal(body.velocity, [1.0, 1.0])
    # semi-implicit: position moves with the new velocity
    np.testing.assert_array_equal(body.position, [0.5, 0.5])
    np.testing.assert_array_equal(body.acceleration, [0.0, 2.0])


def test_advance_accepts_own_acceleration_buffer():
    body = Body(mass=1.0, velocity=(0.0, 0.0))
    vec2.assign(body.acceleration, 1.0, 0.0)
    body.advance(body.acceleration, 1.0)
    np.testing.assert_array_equal(body.velocity, [1.0, 0.0])
    np.testing.assert_array_equal(body.position, [1.0, 0.0])


def test_zero_time_step_does_not_move():
    body = Body(mass=1.0, position=(1.0, 2.0), velocity=(3.0, 4.0))
    body.advance(vec2.from_values(5.0, 5.0), 0.0)
    np.testing.assert_array_equal(body.position, [1.0, 2.0])
    np.testing.assert_array_equal(body.velocity, [3.0, 4.0])


@pytest.mark.parametrize("mass", [0.0, -1.0, float("nan"), float("inf")])
def test_invalid_mass_rejected(mass):
    with pytest.raises(InvalidConfigurationError):
        Body(mass=mass)


def test_mass_is_read_only():
    body = Body(mass=1.0)
    with pytest.raises(AttributeError):
        body.mass = 2.0


def test_history_stores_copies():
    body = Body(mass=1.0, position=(1.0, 1.0))
    body.record_position()
    body.position[0] = 99.0
    np.testing.assert_array_equal(body.position_history[0], [1.0, 1.0])


def test_history_is_trimmed_by_oldest_entries():
    body = Body(mass=1.0)
    for i in range(HISTORY_LIMIT):
        vec2.assign(body.position, float(i), 0.0)
        body.record_position()
    assert len(body.position_history) == HISTORY_LIMIT
    before = [p[0] for p in body.position_history]

    vec2.assign(body.position, float(HISTORY_LIMIT), 0.0)
    body.record_position()

    after = [p[0] for p in body.position_history]
    assert len(after) == HISTORY_LIMIT + 1 - HISTORY_TRIM
    assert after == (before + [float(HISTORY_LIMIT)])[HISTORY_TRIM:]


def test_history_never_exceeds_limit():
    body = Body(mass=1.0, history_limit=50, history_trim=10)
    for _ in range(500):
        body.record_position()
        assert len(body.position_history) <= 50


def test_invalid_history_policy_rejected():
    with pytest.raises(InvalidConfigurationError):
        Body(mass=1.0, history_limit=5, history_trim=10)


def test_momentum_and_kinetic_energy():
    body = Body(mass=3.0, velocity=(2.0, 0.0))
    np.testing.assert_array_equal(body.momentum, [6.0, 0.0])
    assert body.kinetic_energy == pytest.approx(6.0)


def test_is_finite():
    body = Body(mass=1.0)
    assert body.is_finite()
    body.velocity[1] = np.inf
    assert not body.is_finite()
