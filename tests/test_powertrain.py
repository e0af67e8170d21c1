"""
Unit tests for the engine, gearbox, shifting and steering.
"""

import math
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest

from config.physics_config import DEFAULT_VEHICLE_CONFIG
from vehicle.powertrain import Drivetrain, EngineModel, RPM_PER_RAD_S
from vehicle.state import VehicleState, Wheel

CURVE = ((0.0, 0.0), (1500.0, 280.0), (4500.0, 420.0), (6500.0, 390.0))


def make_state():
    return VehicleState.spawn(DEFAULT_VEHICLE_CONFIG)


def test_torque_interpolation():
    """Torque is linearly interpolated between bracketing curve points."""
    engine = EngineModel(CURVE)
    torque = engine.torque(3000.0, 1.0)
    assert torque == pytest.approx(350.0), f"Expected lerp(280, 420, 0.5) = 350, got {torque}"
    assert engine.torque(1500.0, 1.0) == pytest.approx(280.0)
    assert engine.torque(5500.0, 1.0) == pytest.approx(405.0)


def test_torque_clamped_outside_curve():
    """RPM outside the curve uses the end-point torque."""
    engine = EngineModel(CURVE)
    assert engine.torque(-500.0, 1.0) == pytest.approx(0.0)
    assert engine.torque(9000.0, 1.0) == pytest.approx(390.0)


def test_torque_scales_with_throttle():
    engine = EngineModel(CURVE)
    assert engine.torque(4500.0, 0.5) == pytest.approx(210.0)
    assert engine.torque(4500.0, 0.0) == 0.0
    # Throttle is clamped to [0, 1]
    assert engine.torque(4500.0, 2.0) == pytest.approx(420.0)


def test_power_and_peak_torque():
    engine = EngineModel(CURVE)
    rpm, torque = engine.peak_torque()
    assert (rpm, torque) == (4500.0, 420.0)
    expected_kw = 420.0 * 4500.0 / RPM_PER_RAD_S / 1000.0
    assert engine.power_kw(4500.0) == pytest.approx(expected_kw)


def test_empty_curve_rejected():
    with pytest.raises(ValueError):
        EngineModel(())


def test_gear_ratio_includes_final_drive():
    drivetrain = Drivetrain(DEFAULT_VEHICLE_CONFIG)
    p = DEFAULT_VEHICLE_CONFIG.drivetrain
    assert drivetrain.num_gears == len(p.GEAR_RATIOS)
    assert drivetrain.gear_ratio(1) == pytest.approx(p.GEAR_RATIOS[0] * p.FINAL_DRIVE)
    assert drivetrain.gear_ratio(5) == pytest.approx(p.GEAR_RATIOS[4] * p.FINAL_DRIVE)


def test_wheel_force_and_brake():
    """wheel_force = (engine_torque - brake_force) * ratio / radius"""
    config = DEFAULT_VEHICLE_CONFIG
    drivetrain = Drivetrain(config)
    ratio = drivetrain.gear_ratio(2)
    radius = config.tire.WHEEL_RADIUS

    assert drivetrain.wheel_force(300.0, 0.0, 2) == pytest.approx(300.0 * ratio / radius)

    braking = drivetrain.wheel_force(0.0, 1.0, 2)
    assert braking == pytest.approx(-config.drivetrain.BRAKE_MAX_FORCE * ratio / radius)
    assert braking < 0.0, "Brake alone should request a retarding force"


def test_wheel_force_split_sums_to_total():
    drivetrain = Drivetrain(DEFAULT_VEHICLE_CONFIG)
    split = drivetrain.wheel_force_split(1000.0)
    assert split.shape == (4,)
    assert split.sum() == pytest.approx(1000.0)


def test_rpm_from_speed_clamped():
    config = DEFAULT_VEHICLE_CONFIG
    drivetrain = Drivetrain(config)
    p = config.drivetrain

    assert drivetrain.rpm_from_speed(0.0, 1) == p.IDLE_RPM
    assert drivetrain.rpm_from_speed(200.0, 1) == p.MAX_RPM

    expected = 10.0 / config.tire.WHEEL_RADIUS * drivetrain.gear_ratio(1) * RPM_PER_RAD_S
    assert drivetrain.rpm_from_speed(10.0, 1) == pytest.approx(expected)
    # Direction does not matter
    assert drivetrain.rpm_from_speed(-10.0, 1) == pytest.approx(expected)


def test_upshift_resets_rpm():
    drivetrain = Drivetrain(DEFAULT_VEHICLE_CONFIG)
    p = DEFAULT_VEHICLE_CONFIG.drivetrain
    state = make_state()
    state.engine_rpm = p.SHIFT_UP_RPM + 100.0

    assert drivetrain.shift(state) == 1
    assert state.gear == 2
    assert state.engine_rpm == p.POST_UPSHIFT_RPM

    # Re-evaluating at the reset RPM must not shift again
    assert drivetrain.shift(state) == 0, "Shift logic is hunting"
    assert state.gear == 2


def test_downshift_resets_rpm():
    drivetrain = Drivetrain(DEFAULT_VEHICLE_CONFIG)
    p = DEFAULT_VEHICLE_CONFIG.drivetrain
    state = make_state()
    state.gear = 3
    state.engine_rpm = p.SHIFT_DOWN_RPM - 100.0

    assert drivetrain.shift(state) == -1
    assert state.gear == 2
    assert state.engine_rpm == p.POST_DOWNSHIFT_RPM
    assert drivetrain.shift(state) == 0


def test_no_shift_past_either_end():
    drivetrain = Drivetrain(DEFAULT_VEHICLE_CONFIG)
    state = make_state()

    state.gear = drivetrain.num_gears
    state.engine_rpm = 6400.0
    assert drivetrain.shift(state) == 0
    assert state.gear == drivetrain.num_gears

    state.gear = 1
    state.engine_rpm = 1000.0
    assert drivetrain.shift(state) == 0
    assert state.gear == 1


def test_update_rpm_follows_speed_and_shifts():
    config = DEFAULT_VEHICLE_CONFIG
    drivetrain = Drivetrain(config)
    state = make_state()
    # Yaw 0 faces +z; 16 m/s in 1st is past the upshift point
    state.velocity = np.array([0.0, 0.0, 16.0])

    assert drivetrain.update_rpm(state) == 1
    assert state.gear == 2
    assert state.engine_rpm == config.drivetrain.POST_UPSHIFT_RPM

    drivetrain.update_rpm(state)
    expected = drivetrain.rpm_from_speed(16.0, 2)
    assert state.engine_rpm == pytest.approx(expected)
    assert state.gear == 2


def test_steering_authority():
    drivetrain = Drivetrain(DEFAULT_VEHICLE_CONFIG)
    s = DEFAULT_VEHICLE_CONFIG.steering
    assert drivetrain.steering_authority(0.0) == pytest.approx(1.0)
    assert drivetrain.steering_authority(s.STEER_SPEED_CAP / 2) == pytest.approx(0.5)
    assert drivetrain.steering_authority(s.STEER_SPEED_CAP) == pytest.approx(s.MIN_STEER_AUTHORITY)
    assert drivetrain.steering_authority(10 * s.STEER_SPEED_CAP) == pytest.approx(s.MIN_STEER_AUTHORITY)


def test_steering_step_and_clamp():
    drivetrain = Drivetrain(DEFAULT_VEHICLE_CONFIG)
    s = DEFAULT_VEHICLE_CONFIG.steering
    state = make_state()

    assert drivetrain.steer(state, 1) == pytest.approx(s.STEERING_STEP)

    for _ in range(50):
        drivetrain.steer(state, 1)
    assert state.steering_angle == pytest.approx(s.STEERING_CLAMP)

    # Holding at the clamp is idempotent
    drivetrain.steer(state, 1)
    assert state.steering_angle == pytest.approx(s.STEERING_CLAMP)

    for _ in range(100):
        drivetrain.steer(state, -1)
    assert state.steering_angle == pytest.approx(-s.STEERING_CLAMP)


def test_steering_returns_to_center():
    drivetrain = Drivetrain(DEFAULT_VEHICLE_CONFIG)
    s = DEFAULT_VEHICLE_CONFIG.steering
    state = make_state()
    state.steering_angle = 0.3

    drivetrain.steer(state, 0)
    assert state.steering_angle == pytest.approx(0.3 * s.STEER_RETURN_FACTOR)

    for _ in range(100):
        drivetrain.steer(state, 0)
    assert state.steering_angle == 0.0, "Small angles should snap to zero"
    assert np.all(state.wheel_steer_angle == 0.0)


def test_steering_holds_when_both_controls_held():
    drivetrain = Drivetrain(DEFAULT_VEHICLE_CONFIG)
    state = make_state()
    for _ in range(10):
        drivetrain.steer(state, 1, True)
    held_angle = state.steering_angle

    drivetrain.steer(state, 0, True)
    assert state.steering_angle == held_angle, "Cancelling steer inputs must not self-center"

    drivetrain.steer(state, 0, False)
    assert state.steering_angle == pytest.approx(held_angle * DEFAULT_VEHICLE_CONFIG.steering.STEER_RETURN_FACTOR)


def test_ackermann_inner_wheel_turns_tighter():
    drivetrain = Drivetrain(DEFAULT_VEHICLE_CONFIG)

    left, right = drivetrain.ackermann_angles(0.3)
    assert left > 0.3 > right > 0.0, f"Left turn: inner (left) wheel should turn tighter, got {left}, {right}"

    mirrored_left, mirrored_right = drivetrain.ackermann_angles(-0.3)
    assert mirrored_left == pytest.approx(-right)
    assert mirrored_right == pytest.approx(-left)

    assert drivetrain.ackermann_angles(0.0) == (0.0, 0.0)


def test_ackermann_geometry():
    config = DEFAULT_VEHICLE_CONFIG
    drivetrain = Drivetrain(config)
    L = config.vehicle.WHEELBASE
    T = config.vehicle.TRACK_WIDTH
    delta = 0.2
    radius = L / math.tan(delta)

    left, right = drivetrain.ackermann_angles(delta)
    assert left == pytest.approx(math.atan(L / (radius - T / 2)))
    assert right == pytest.approx(math.atan(L / (radius + T / 2)))


def test_steer_sets_front_wheel_angles_only():
    drivetrain = Drivetrain(DEFAULT_VEHICLE_CONFIG)
    state = make_state()
    for _ in range(5):
        drivetrain.steer(state, 1)

    left, right = drivetrain.ackermann_angles(state.steering_angle)
    assert state.wheel_steer_angle[Wheel.FL] == pytest.approx(left)
    assert state.wheel_steer_angle[Wheel.FR] == pytest.approx(right)
    assert state.wheel_steer_angle[Wheel.RL] == 0.0
    assert state.wheel_steer_angle[Wheel.RR] == 0.0
