"""
Rigid-body integration for the vehicle.

Semi-implicit Euler: velocity is advanced from the summed forces first, then
position is advanced with the new velocity. The body is ground-constrained;
vertical velocity stays zero, and pitch/roll are a cosmetic lean that never
feeds back into the forces.
"""

from __future__ import annotations

import math

import numpy as np
import numpy.typing as npt

from config.physics_config import VehicleConfig
from vehicle.state import FRONT_WHEELS, LEFT_WHEELS, REAR_WHEELS, RIGHT_WHEELS, VehicleState, heading_vectors

TWO_PI = 2.0 * math.pi


class VehicleIntegrator:
    """Turns body-frame wheel forces into motion."""

    def __init__(self, config: VehicleConfig) -> None:
        self.mass = config.vehicle.MASS
        self.inertia = config.vehicle.MASS * config.vehicle.INERTIA_FACTOR
        self.wheelbase = config.vehicle.WHEELBASE
        self.track_width = config.vehicle.TRACK_WIDTH
        self.cg_height = config.vehicle.CG_HEIGHT
        self.wheel_radius = config.tire.WHEEL_RADIUS
        self.aero = config.aerodynamics
        self.params = config.integration
        self.filter_alpha = config.suspension.LOAD_FILTER_ALPHA

    def aero_drag(self, speed: float) -> float:
        """Drag magnitude (N): 0.5 * AERO_DRAG * v^2"""
        return 0.5 * self.aero.AERO_DRAG * speed * speed

    def aero_lift(self, speed: float) -> float:
        """Lift (N): 0.5 * AERO_LIFT * v^2. Negative values are downforce."""
        return 0.5 * self.aero.AERO_LIFT * speed * speed

    def yaw_moment(self, fx: npt.NDArray[np.float64], fy: npt.NDArray[np.float64]) -> float:
        """
        Yaw torque about the CG from body-frame wheel forces (Nm), left positive.

        tau = L/2 * (Fy_front - Fy_rear) + T/2 * (Fx_right - Fx_left)
        """
        front_lat = fy[list(FRONT_WHEELS)].sum()
        rear_lat = fy[list(REAR_WHEELS)].sum()
        left_long = fx[list(LEFT_WHEELS)].sum()
        right_long = fx[list(RIGHT_WHEELS)].sum()
        return float(self.wheelbase / 2.0 * (front_lat - rear_lat)
                     + self.track_width / 2.0 * (right_long - left_long))

    def step(
        self,
        state: VehicleState,
        fx: npt.NDArray[np.float64],
        fy: npt.NDArray[np.float64],
        wheel_speed: npt.NDArray[np.float64],
        dt: float,
    ) -> None:
        """
        Advance the state by dt.

        Args:
            state: Vehicle state, updated in place
            fx: Body-frame longitudinal force per wheel (N)
            fy: Body-frame lateral force per wheel (N), left positive
            wheel_speed: Contact patch speed along each wheel heading (m/s)
            dt: Time step (s), already clamped
        """
        p = self.params
        eps = p.EPSILON
        forward, left = heading_vectors(state.yaw)
        v_long, v_lat = state.body_velocity()
        speed = state.speed

        fx_total = float(fx.sum())
        fy_total = float(fy.sum())

        # Drag opposes the longitudinal motion
        if abs(v_long) > eps:
            fx_total -= math.copysign(self.aero_drag(speed), v_long)

        ax = fx_total / self.mass
        ay = fy_total / self.mass

        new_long = v_long + ax * dt
        new_lat = v_lat + ay * dt

        # Lateral grip can stop a sideways slide but never reverse it in one step
        if v_lat * (new_lat - v_lat) < 0.0 and abs(new_lat - v_lat) > abs(v_lat):
            new_lat = 0.0

        # No reverse gear: retarding forces stop the car, they don't back it up
        if new_long < 0.0 and new_long < v_long:
            new_long = min(0.0, v_long)

        # Realized body accelerations drive the lean and next tick's load transfer
        if dt > eps:
            ax = (new_long - v_long) / dt
            ay = (new_lat - v_lat) / dt

        velocity = new_long * forward + new_lat * left

        # Rolling resistance and speed-dependent drag as a velocity decay
        damping = 1.0 - (self.aero.ROLLING_RESISTANCE + self.aero.DRAG_COEFFICIENT * speed) * dt
        velocity *= min(1.0, max(0.0, damping))
        velocity[1] = 0.0
        state.velocity = velocity

        # Angular: (pitch, yaw, roll). Pitch is nose-down positive (dives
        # under braking), roll is right-side-down positive (leans out of a
        # left turn).
        torque = np.array([
            -self.mass * ax * self.cg_height,
            self.yaw_moment(fx, fy),
            self.mass * ay * self.cg_height,
        ])
        state.angular_velocity = (state.angular_velocity + torque / self.inertia * dt) * p.ANGULAR_DAMPING

        state.position = state.position + state.velocity * dt
        state.yaw += state.yaw_rate * dt

        pitch_rate, _, roll_rate = state.angular_velocity
        state.pitch = (state.pitch + pitch_rate * dt * p.LEAN_SCALE) * p.LEAN_RETURN
        state.roll = (state.roll + roll_rate * dt * p.LEAN_SCALE) * p.LEAN_RETURN
        state.pitch = min(p.MAX_LEAN, max(-p.MAX_LEAN, state.pitch))
        state.roll = min(p.MAX_LEAN, max(-p.MAX_LEAN, state.roll))

        state.wheel_spin = np.mod(state.wheel_spin + wheel_speed / self.wheel_radius * dt, TWO_PI)

        # Low-pass filter so load transfer does not oscillate
        alpha = self.filter_alpha
        state.long_accel = state.long_accel * (1.0 - alpha) + ax * alpha
        state.lat_accel = state.lat_accel * (1.0 - alpha) + ay * alpha
