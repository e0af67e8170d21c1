"""
Tests for the engine dyno tool (no plotting).
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest

from config.physics_config import DEFAULT_VEHICLE_CONFIG
from vehicle_dyno import EngineDyno


def test_run_test_sweeps_idle_to_limiter(capsys):
    dyno = EngineDyno(DEFAULT_VEHICLE_CONFIG)
    results = dyno.run_test(throttle=1.0, rpm_step=500)
    p = DEFAULT_VEHICLE_CONFIG.drivetrain

    assert results['rpm'][0] == p.IDLE_RPM
    assert results['rpm'][-1] <= p.MAX_RPM
    assert np.max(results['torque_nm']) == pytest.approx(420.0)
    assert np.all(results['power_kw'] >= 0.0)
    assert "DYNO TEST RESULTS" in capsys.readouterr().out


def test_throttle_sweep_scales_torque():
    dyno = EngineDyno(DEFAULT_VEHICLE_CONFIG)
    dyno.run_throttle_sweep([0.5, 1.0])
    half, full = dyno.test_results
    assert half['torque_nm'] == pytest.approx(full['torque_nm'] * 0.5)


def test_gear_speeds_increase_with_gear():
    dyno = EngineDyno(DEFAULT_VEHICLE_CONFIG)
    table = dyno.gear_speeds()
    assert len(table) == len(DEFAULT_VEHICLE_CONFIG.drivetrain.GEAR_RATIOS)

    top_speeds = [high for _, _, high, _ in table]
    assert top_speeds == sorted(top_speeds)
    for gear, low, high, shift in table:
        assert low < shift <= high, f"Gear {gear}: shift point outside its range"


def test_dyno_reports_engine_power_and_peak(capsys):
    dyno = EngineDyno(DEFAULT_VEHICLE_CONFIG)
    results = dyno.run_test(throttle=0.5, rpm_step=250)

    expected = [dyno.engine.power_kw(rpm, 0.5) for rpm in results['rpm']]
    assert results['power_kw'] == pytest.approx(expected)

    rpm, torque = dyno.engine.peak_torque()
    out = capsys.readouterr().out
    assert f"Peak Torque:  {torque * 0.5:.1f} Nm @ {rpm:.0f} RPM" in out
