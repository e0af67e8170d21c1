"""
Engine and drivetrain simulation
================================

EngineModel maps engine RPM and throttle to torque through a piecewise
linear torque curve. Drivetrain turns that torque into a drive force at the
contact patches, closes the RPM loop from the resulting vehicle speed,
shifts gears automatically with hysteresis, and owns the steering stage
(rate-limited wheel angle plus Ackermann geometry for the front wheels).

Default engine (see config.physics_config.DrivetrainParams):
- Torque curve: 0 Nm @ 0, 280 Nm @ 1500, 420 Nm @ 4500, 390 Nm @ 6500 RPM
- Idle 1000 RPM, limiter 6500 RPM
- 5 gears: 3.67, 2.10, 1.36, 1.03, 0.84, final drive 3.9
- Upshift above 6000 RPM (RPM reset to 3000),
  downshift below 2000 RPM (RPM reset to 4000)

Usage Example:
    engine = EngineModel(config.drivetrain.TORQUE_CURVE)
    drivetrain = Drivetrain(config)

    torque = engine.torque(state.engine_rpm, state.throttle)
    force = drivetrain.wheel_force(torque, state.brake, state.gear)
    ...
    drivetrain.update_rpm(state)  # after integration
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np

from config.physics_config import VehicleConfig
from vehicle.state import VehicleState, Wheel

# Engine RPM per rad/s of shaft speed: 60 / (2 * pi)
RPM_PER_RAD_S = 60.0 / (2.0 * math.pi)


class EngineModel:
    """
    Torque-curve engine.

    Torque at a given RPM is linearly interpolated between the two curve
    points that bracket it. Below the first point or above the last, the
    end-point torque is used. The result is scaled by throttle.
    """

    def __init__(self, torque_curve: Sequence[Tuple[float, float]]) -> None:
        """
        Args:
            torque_curve: (rpm, torque Nm) points in ascending RPM order
        """
        if len(torque_curve) == 0:
            raise ValueError("torque curve must contain at least one point")
        self._torque_rpm = np.array([p[0] for p in torque_curve], dtype=np.float64)
        self._torque_nm = np.array([p[1] for p in torque_curve], dtype=np.float64)

    def torque(self, rpm: float, throttle: float) -> float:
        """
        Get engine torque at an RPM and throttle position.

        Args:
            rpm: Engine speed (RPM)
            throttle: Throttle position [0.0 = closed, 1.0 = wide open]

        Returns:
            Engine torque in Nm
        """
        throttle = min(1.0, max(0.0, throttle))
        # np.interp holds the end values outside the curve
        max_torque = float(np.interp(rpm, self._torque_rpm, self._torque_nm))
        return max_torque * throttle

    def power_kw(self, rpm: float, throttle: float = 1.0) -> float:
        """
        Power output in kilowatts.

        P = T * (2 * pi * RPM / 60)
        """
        return self.torque(rpm, throttle) * (rpm / RPM_PER_RAD_S) / 1000.0

    def peak_torque(self) -> Tuple[float, float]:
        """(rpm, torque) of the highest curve point."""
        i = int(np.argmax(self._torque_nm))
        return float(self._torque_rpm[i]), float(self._torque_nm[i])


class Drivetrain:
    """
    Gearbox, drive force, RPM feedback, automatic shifting and steering.

    Gears are numbered 1..N. The shift logic is a state machine over those
    gear indices: it can move up from every gear but the top one and down
    from every gear but the first.
    """

    def __init__(self, config: VehicleConfig) -> None:
        self.params = config.drivetrain
        self.steering = config.steering
        self.wheel_radius = config.tire.WHEEL_RADIUS
        self.wheelbase = config.vehicle.WHEELBASE
        self.track_width = config.vehicle.TRACK_WIDTH
        self.epsilon = config.integration.EPSILON
        self.torque_split = np.array(self.params.TORQUE_SPLIT, dtype=np.float64)

    @property
    def num_gears(self) -> int:
        return len(self.params.GEAR_RATIOS)

    def gear_ratio(self, gear: int) -> float:
        """
        Overall ratio (gear ratio * final drive) for a gear number.

        Args:
            gear: Gear number, 1-based
        """
        return self.params.GEAR_RATIOS[gear - 1] * self.params.FINAL_DRIVE

    def brake_force(self, brake: float) -> float:
        """Brake torque subtracted from engine torque before the gearbox."""
        return self.params.BRAKE_MAX_FORCE * brake

    def wheel_torque(self, engine_torque: float, brake: float, gear: int) -> float:
        """wheel_torque = (engine_torque - brake_force) * ratio"""
        return (engine_torque - self.brake_force(brake)) * self.gear_ratio(gear)

    def wheel_force(self, engine_torque: float, brake: float, gear: int) -> float:
        """
        Total longitudinal force requested at the contact patches (N).

        Positive drives the vehicle forward, negative retards it. The tire
        model decides how much of it the road accepts.
        """
        return self.wheel_torque(engine_torque, brake, gear) / self.wheel_radius

    def wheel_force_split(self, total_force: float) -> np.ndarray:
        """Per-wheel share of the requested force [FL, FR, RL, RR]."""
        return self.torque_split * total_force

    def rpm_from_speed(self, longitudinal_speed: float, gear: int) -> float:
        """
        Engine RPM implied by vehicle speed in a gear, clamped to [idle, max].
        """
        wheel_omega = abs(longitudinal_speed) / self.wheel_radius  # rad/s
        rpm = wheel_omega * self.gear_ratio(gear) * RPM_PER_RAD_S
        return min(self.params.MAX_RPM, max(self.params.IDLE_RPM, rpm))

    def shift(self, state: VehicleState) -> int:
        """
        Apply at most one automatic gear change.

        Upshift above SHIFT_UP_RPM, downshift below SHIFT_DOWN_RPM. After a
        shift RPM jumps to the post-shift value, which lies between the two
        thresholds and therefore cannot re-trigger a shift.

        Returns:
            +1 for an upshift, -1 for a downshift, 0 otherwise
        """
        p = self.params
        if state.engine_rpm > p.SHIFT_UP_RPM and state.gear < self.num_gears:
            state.gear += 1
            state.engine_rpm = p.POST_UPSHIFT_RPM
            return 1
        if state.engine_rpm < p.SHIFT_DOWN_RPM and state.gear > 1:
            state.gear -= 1
            state.engine_rpm = p.POST_DOWNSHIFT_RPM
            return -1
        return 0

    def update_rpm(self, state: VehicleState) -> int:
        """
        Recompute RPM from the integrated vehicle speed, then shift.

        Returns:
            Shift direction, see shift()
        """
        longitudinal_speed, _ = state.body_velocity()
        state.engine_rpm = self.rpm_from_speed(longitudinal_speed, state.gear)
        return self.shift(state)

    def steering_authority(self, speed: float) -> float:
        """
        Fraction of STEERING_STEP available at a speed.

        1.0 at rest, falling linearly to MIN_STEER_AUTHORITY at STEER_SPEED_CAP.
        """
        s = self.steering
        reduction = min(1.0 - s.MIN_STEER_AUTHORITY, max(0.0, speed / s.STEER_SPEED_CAP))
        return 1.0 - reduction

    def steer(self, state: VehicleState, steer_input: int, steer_held: Optional[bool] = None) -> float:
        """
        Advance the steering angle by one tick and set the wheel angles.

        With input, the angle moves by STEERING_STEP scaled by speed
        authority and stays within STEERING_CLAMP. With both steer controls
        held the inputs cancel and the angle holds. With neither held it
        decays toward zero and snaps to zero below STEER_EPSILON.

        Args:
            state: Vehicle state
            steer_input: Steering request in {-1, 0, 1}
            steer_held: Whether any steer control is held; defaults to
                        steer_input != 0

        Returns:
            New steering angle (rad)
        """
        s = self.steering
        if steer_held is None:
            steer_held = steer_input != 0
        if steer_input != 0:
            angle = state.steering_angle + steer_input * s.STEERING_STEP * self.steering_authority(state.speed)
        elif steer_held:
            angle = state.steering_angle
        else:
            angle = state.steering_angle * s.STEER_RETURN_FACTOR
            if abs(angle) < s.STEER_EPSILON:
                angle = 0.0
        state.steering_angle = min(s.STEERING_CLAMP, max(-s.STEERING_CLAMP, angle))

        left, right = self.ackermann_angles(state.steering_angle)
        state.wheel_steer_angle[Wheel.FL] = left
        state.wheel_steer_angle[Wheel.FR] = right
        state.wheel_steer_angle[Wheel.RL] = 0.0
        state.wheel_steer_angle[Wheel.RR] = 0.0
        return state.steering_angle

    def ackermann_angles(self, steering_angle: float) -> Tuple[float, float]:
        """
        Front (left, right) wheel angles for a steering angle.

        The inner wheel turns tighter than the outer one:
            inner/outer = atan(L / (L / tan(delta) -/+ T / 2))
        Positive angles steer left.
        """
        tan_delta = math.tan(steering_angle)
        if abs(tan_delta) < self.epsilon:
            return 0.0, 0.0

        turn_radius = self.wheelbase / tan_delta
        half_track = self.track_width / 2.0
        return (self._wheel_angle(turn_radius - half_track),
                self._wheel_angle(turn_radius + half_track))

    def _wheel_angle(self, radius: float) -> float:
        if abs(radius) < self.epsilon:
            return math.copysign(math.pi / 2.0, radius)
        return math.atan(self.wheelbase / radius)
