"""
Simplified saturating tire model.

Each axis follows the same curve:
    F = sin(arctan(S * x)) * grip * Fz

where x is the slip ratio (longitudinal) or the slip angle in radians
(lateral) and S is SLIP_STIFFNESS. sin(arctan(.)) rises linearly for small
slip and flattens towards 1, so neither axis can exceed grip * Fz. The two
axes are computed independently, without a friction circle.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from config.physics_config import VehicleConfig
from vehicle.state import LATERAL, LONGITUDINAL, VehicleState, wheel_offsets


class TireModel:
    """
    Tire forces for the four wheels.

    Slip ratio here is the requested drive/brake force measured against the
    grip the load allows:
        -1.0 = braking request at or beyond grip (lock-up)
         0.0 = no request (free rolling)
        +1.0 = drive request at or beyond grip (wheelspin)
    """

    def __init__(self, config: VehicleConfig) -> None:
        self.params = config.tire
        self.epsilon = config.integration.EPSILON
        self.x_pos, self.y_pos = wheel_offsets(config.vehicle.WHEELBASE,
                                               config.vehicle.TRACK_WIDTH)

    def grip_load(self, normal_load: npt.ArrayLike) -> npt.NDArray[np.float64]:
        return self.params.TIRE_GRIP * np.asarray(normal_load, dtype=np.float64)

    def slip_ratio(self, wheel_force: npt.ArrayLike, normal_load: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Requested force over available grip, clamped to [-1, 1]. Zero for an unloaded wheel."""
        grip = self.grip_load(normal_load)
        force = np.asarray(wheel_force, dtype=np.float64)
        loaded = grip > self.epsilon
        ratio = np.divide(force, grip, out=np.zeros_like(grip), where=loaded)
        return np.clip(ratio, -1.0, 1.0)

    def slip_angle(self, u: npt.ArrayLike, w: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """
        Slip angle from contact patch velocity in the wheel frame.

        Args:
            u: Velocity along the wheel heading (m/s)
            w: Velocity across the wheel, left positive (m/s)

        Returns:
            atan2(w, |u|) in rad, zero below MIN_SLIP_SPEED
        """
        u = np.asarray(u, dtype=np.float64)
        w = np.asarray(w, dtype=np.float64)
        # Stationary wheels have no meaningful slip angle
        moving = np.hypot(u, w) > self.params.MIN_SLIP_SPEED
        return np.where(moving, np.arctan2(w, np.abs(u)), 0.0)

    def _curve(self, slip: npt.ArrayLike) -> npt.NDArray[np.float64]:
        return np.sin(np.arctan(self.params.SLIP_STIFFNESS * np.asarray(slip, dtype=np.float64)))

    def longitudinal_force(self, slip_ratio: npt.ArrayLike, normal_load: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Traction (+) or braking (-) force along the wheel heading (N)."""
        return self._curve(slip_ratio) * self.grip_load(normal_load)

    def lateral_force(self, slip_angle: npt.ArrayLike, normal_load: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """
        Cornering force across the wheel (N), left positive.

        Negated so that a wheel sliding to the left is pushed back to the right.
        """
        return -self._curve(slip_angle) * self.grip_load(normal_load)

    def rolling_request(self, wheel_forces: npt.ArrayLike, u: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """
        Limit retarding requests to wheels that are rolling forward.

        Brakes can only slow a wheel to zero, not reverse it: a retarding
        request fades out linearly below MIN_SLIP_SPEED. Drive requests pass
        through unchanged.
        """
        force = np.asarray(wheel_forces, dtype=np.float64)
        rolling = np.clip(np.asarray(u, dtype=np.float64) / self.params.MIN_SLIP_SPEED, 0.0, 1.0)
        return np.where(force < 0.0, force * rolling, force)

    def contact_velocity(self, state: VehicleState) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Contact patch velocities in each wheel's steered frame.

        Returns:
            (u, w): along-heading and across-heading components per wheel
        """
        v_long, v_lat = state.body_velocity()
        omega = state.yaw_rate

        # v = v_cg + omega x r
        u_body = v_long - omega * self.y_pos
        w_body = v_lat + omega * self.x_pos

        steer = state.wheel_steer_angle
        cos_s = np.cos(steer)
        sin_s = np.sin(steer)
        u = u_body * cos_s + w_body * sin_s
        w = -u_body * sin_s + w_body * cos_s
        return u, w

    def update(
        self,
        state: VehicleState,
        wheel_forces: npt.ArrayLike,
        normal_loads: npt.ArrayLike,
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Compute slip and tire forces for all wheels.

        Writes slip_ratio, slip_angle and tire_force to the state.

        Args:
            state: Vehicle state
            wheel_forces: Requested longitudinal force per wheel (N)
            normal_loads: Suspension force per wheel (N)

        Returns:
            (fx, fy): per-wheel forces rotated into the body frame (N),
            x forward, y left
        """
        u, w = self.contact_velocity(state)
        requested = self.rolling_request(wheel_forces, u)

        state.slip_ratio = self.slip_ratio(requested, normal_loads)
        state.slip_angle = self.slip_angle(u, w)

        f_long = self.longitudinal_force(state.slip_ratio, normal_loads)
        f_lat = self.lateral_force(state.slip_angle, normal_loads)
        state.tire_force[:, LATERAL] = f_lat
        state.tire_force[:, LONGITUDINAL] = f_long

        # Rotate forces to body frame
        steer = state.wheel_steer_angle
        cos_s = np.cos(steer)
        sin_s = np.sin(steer)
        fx = f_long * cos_s - f_lat * sin_s
        fy = f_long * sin_s + f_lat * cos_s
        return fx, fy
