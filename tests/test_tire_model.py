"""
Unit tests for the saturating tire model.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest

from config.physics_config import DEFAULT_VEHICLE_CONFIG
from vehicle.state import LATERAL, LONGITUDINAL, VehicleState, Wheel
from vehicle.tire_model import TireModel

GRIP = DEFAULT_VEHICLE_CONFIG.tire.TIRE_GRIP


def test_slip_ratio_saturates():
    tires = TireModel(DEFAULT_VEHICLE_CONFIG)
    loads = np.full(4, 4000.0)
    ratio = tires.slip_ratio([1e6, -1e6, 0.0, 0.5 * GRIP * 4000.0], loads)
    assert ratio[0] == 1.0, "Drive request beyond grip should read as full spin"
    assert ratio[1] == -1.0, "Brake request beyond grip should read as lock-up"
    assert ratio[2] == 0.0, "A free-rolling wheel has no slip"
    assert ratio[3] == pytest.approx(0.5)


def test_slip_ratio_unloaded_wheel():
    tires = TireModel(DEFAULT_VEHICLE_CONFIG)
    ratio = tires.slip_ratio(np.full(4, 1000.0), np.zeros(4))
    assert np.all(ratio == 0.0)


def test_forces_bounded_by_grip():
    """|F| never exceeds grip * normal load on either axis."""
    tires = TireModel(DEFAULT_VEHICLE_CONFIG)
    load = 5000.0
    limit = GRIP * load

    for slip in np.linspace(-1.0, 1.0, 41):
        assert abs(tires.longitudinal_force(slip, load)) <= limit
    for angle in np.linspace(-np.pi / 2, np.pi / 2, 41):
        assert abs(tires.lateral_force(angle, load)) <= limit

    # The curve approaches the limit at full slip
    assert abs(tires.longitudinal_force(1.0, load)) > 0.9 * limit


def test_force_signs():
    tires = TireModel(DEFAULT_VEHICLE_CONFIG)
    assert tires.longitudinal_force(0.3, 4000.0) > 0.0
    assert tires.longitudinal_force(-0.3, 4000.0) < 0.0
    # Sliding left produces a force to the right
    assert tires.lateral_force(0.1, 4000.0) < 0.0
    assert tires.lateral_force(-0.1, 4000.0) > 0.0
    assert tires.lateral_force(0.0, 4000.0) == 0.0


def test_slip_angle_zero_when_slow():
    tires = TireModel(DEFAULT_VEHICLE_CONFIG)
    angle = tires.slip_angle([0.2, 10.0, 10.0, -10.0], [0.5, 0.0, 1.0, 1.0])
    assert angle[0] == 0.0, "Below MIN_SLIP_SPEED the slip angle is zero"
    assert angle[1] == 0.0
    assert angle[2] == pytest.approx(np.arctan2(1.0, 10.0))
    # Uses |u| so the angle stays within +/- pi/2
    assert angle[3] == pytest.approx(np.arctan2(1.0, 10.0))


def test_rolling_request_fades_brake_at_rest():
    tires = TireModel(DEFAULT_VEHICLE_CONFIG)
    requested = tires.rolling_request([-1000.0, -1000.0, 1000.0, -1000.0],
                                      [0.0, 10.0, 0.0, 0.5])
    assert requested[0] == 0.0, "A stopped wheel cannot be braked backwards"
    assert requested[1] == -1000.0
    assert requested[2] == 1000.0, "Drive requests are never faded"
    assert requested[3] == pytest.approx(-1000.0 * 0.5 / DEFAULT_VEHICLE_CONFIG.tire.MIN_SLIP_SPEED)


def test_update_straight_line():
    """Rolling straight with a drive request gives pure forward force."""
    tires = TireModel(DEFAULT_VEHICLE_CONFIG)
    state = VehicleState.spawn(DEFAULT_VEHICLE_CONFIG)
    state.velocity = np.array([0.0, 0.0, 10.0])
    loads = np.full(4, 3500.0)

    fx, fy = tires.update(state, np.full(4, 500.0), loads)
    assert np.all(fx > 0.0)
    assert fy == pytest.approx(np.zeros(4))
    assert state.tire_force[:, LONGITUDINAL] == pytest.approx(fx)
    assert np.all(state.slip_angle == 0.0)


def test_update_steered_wheels_push_left():
    """Front wheels steered left at speed generate a leftward body force."""
    tires = TireModel(DEFAULT_VEHICLE_CONFIG)
    state = VehicleState.spawn(DEFAULT_VEHICLE_CONFIG)
    state.velocity = np.array([0.0, 0.0, 15.0])
    state.wheel_steer_angle[Wheel.FL] = 0.1
    state.wheel_steer_angle[Wheel.FR] = 0.1

    fx, fy = tires.update(state, np.zeros(4), np.full(4, 3500.0))
    assert fy[Wheel.FL] > 0.0 and fy[Wheel.FR] > 0.0
    assert fy[Wheel.RL] == pytest.approx(0.0)
    assert state.slip_angle[Wheel.FL] < 0.0
    assert state.tire_force[Wheel.FL, LATERAL] > 0.0


def test_contact_velocity_with_yaw_rate():
    """Yaw rate adds velocity at the wheels: v = v_cg + omega x r."""
    config = DEFAULT_VEHICLE_CONFIG
    tires = TireModel(config)
    state = VehicleState.spawn(config)
    state.angular_velocity = np.array([0.0, 1.0, 0.0])

    u, w = tires.contact_velocity(state)
    half_t = config.vehicle.TRACK_WIDTH / 2
    half_l = config.vehicle.WHEELBASE / 2
    # Turning left in place: left wheels move backward, right wheels forward
    assert u[Wheel.FL] == pytest.approx(-half_t)
    assert u[Wheel.FR] == pytest.approx(half_t)
    # Front moves left, rear moves right
    assert w[Wheel.FL] == pytest.approx(half_l)
    assert w[Wheel.RL] == pytest.approx(-half_l)
