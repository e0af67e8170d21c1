"""
Unit tests for driver input ramps.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from config.physics_config import DEFAULT_VEHICLE_CONFIG
from vehicle.controls import ControlInput, NO_INPUT, RawInput, coerce_input, ramp
from vehicle.state import VehicleState


def make():
    return ControlInput(DEFAULT_VEHICLE_CONFIG.controls), VehicleState.spawn(DEFAULT_VEHICLE_CONFIG)


def test_ramp_clamped():
    assert ramp(0.95, True, 0.1, 0.2) == 1.0
    assert ramp(0.1, False, 0.1, 0.2) == 0.0
    assert ramp(0.5, True, 0.1, 0.2) == pytest.approx(0.6)
    assert ramp(0.5, False, 0.1, 0.2) == pytest.approx(0.3)


def test_throttle_ramps_up_and_down():
    controls, state = make()
    p = DEFAULT_VEHICLE_CONFIG.controls
    held = RawInput(accelerate=True)

    for _ in range(3):
        controls.update(state, held)
    assert state.throttle == pytest.approx(3 * p.THROTTLE_RAMP_UP)

    controls.update(state, NO_INPUT)
    assert state.throttle == pytest.approx(3 * p.THROTTLE_RAMP_UP - p.THROTTLE_RAMP_DOWN)

    for _ in range(50):
        controls.update(state, held)
    assert state.throttle == 1.0, "Throttle must saturate at 1"

    for _ in range(50):
        controls.update(state, NO_INPUT)
    assert state.throttle == 0.0, "Throttle must not go negative"


def test_brake_ramps_independently():
    controls, state = make()
    p = DEFAULT_VEHICLE_CONFIG.controls

    controls.update(state, RawInput(accelerate=True, brake=True))
    assert state.throttle == pytest.approx(p.THROTTLE_RAMP_UP)
    assert state.brake == pytest.approx(p.BRAKE_RAMP_UP)


def test_steer_input_not_ramped():
    controls, state = make()
    assert controls.update(state, RawInput(steer_left=True)) == (1, True)
    assert controls.update(state, RawInput(steer_right=True)) == (-1, True)
    assert controls.update(state, NO_INPUT) == (0, False)


def test_both_steer_controls_cancel_but_count_as_held():
    controls, state = make()
    steer_input, steer_held = controls.update(state, RawInput(steer_left=True, steer_right=True))
    assert steer_input == 0
    assert steer_held, "Holding both steer controls is still holding steering"


def test_coerce_input():
    assert coerce_input(None) is NO_INPUT
    raw = RawInput(brake=True)
    assert coerce_input(raw) is raw

    mapped = coerce_input({'accelerate': 1, 'steer_right': True})
    assert mapped == RawInput(accelerate=True, steer_right=True)
    assert mapped.steer_input == -1
