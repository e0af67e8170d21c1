"""
Suspension and load transfer.

Per-wheel spring-damper model. There is no terrain raycast: each wheel's
suspension length follows the vehicle attitude implied by weight transfer,
and the spring-damper force that results is the normal load the tire model
sees.

Load Transfer Model:
- Uses rigid-body approximation with filtered accelerations
- Longitudinal: front/rear weight transfer during braking/acceleration
- Lateral: left/right weight transfer during cornering
- Accelerations are low-pass filtered (LOAD_FILTER_ALPHA) by the integrator
  before they reach this model, which prevents oscillations
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from config.physics_config import VehicleConfig
from vehicle.state import VehicleState, Wheel


class SuspensionModel:
    """
    Spring-damper per wheel, driven by weight transfer.

    Force law (per wheel):
        compression = clamp(rest_length - length, 0, travel)
        force = max(stiffness * compression - damping * extension_rate, 0)

    A spring cannot pull, so the force is never negative.
    """

    def __init__(self, config: VehicleConfig) -> None:
        self.params = config.suspension
        self.mass = config.vehicle.MASS
        self.wheelbase = config.vehicle.WHEELBASE
        self.track_width = config.vehicle.TRACK_WIDTH
        self.cg_height = config.vehicle.CG_HEIGHT
        self.front_bias = config.vehicle.FRONT_WEIGHT_BIAS
        self.gravity = config.integration.GRAVITY
        self.epsilon = config.integration.EPSILON

    def compression(self, length: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Compression clamped to [0, travel]."""
        p = self.params
        return np.clip(p.REST_LENGTH - np.asarray(length, dtype=np.float64), 0.0, p.TRAVEL)

    def force(self, length: npt.ArrayLike, extension_rate: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """
        Spring-damper force for suspension lengths and extension rates.

        Args:
            length: Current suspension length (m)
            extension_rate: d(length)/dt (m/s), positive while extending

        Returns:
            Non-negative force (N)
        """
        p = self.params
        spring = p.STIFFNESS * self.compression(length)
        damper = p.DAMPING * np.asarray(extension_rate, dtype=np.float64)
        return np.maximum(spring - damper, 0.0)

    def wheel_loads(self, long_accel: float, lat_accel: float, lift: float = 0.0) -> npt.NDArray[np.float64]:
        """
        Compute per-wheel loads using a rigid-body load transfer model.

        Args:
            long_accel: Body-frame longitudinal acceleration (m/s^2), forward positive
            lat_accel: Body-frame lateral acceleration (m/s^2), left positive
            lift: Aerodynamic lift (N), reduces total vertical load

        Returns:
            Load for each wheel [FL, FR, RL, RR] in Newtons, never negative
        """
        total = max(self.mass * self.gravity - lift, 0.0)
        front_axle = total * self.front_bias
        rear_axle = total - front_axle

        # Positive long_accel moves load from the front axle to the rear
        lon_transfer = self.mass * long_accel * self.cg_height / self.wheelbase
        front_axle -= lon_transfer
        rear_axle += lon_transfer

        # Acceleration to the left (left turn) loads the outside (right) wheels
        lat_transfer = self.mass * lat_accel * self.cg_height / self.track_width

        loads = np.empty(4)
        loads[Wheel.FL] = front_axle / 2.0 - lat_transfer / 2.0
        loads[Wheel.FR] = front_axle / 2.0 + lat_transfer / 2.0
        loads[Wheel.RL] = rear_axle / 2.0 - lat_transfer / 2.0
        loads[Wheel.RR] = rear_axle / 2.0 + lat_transfer / 2.0

        # A wheel can unload completely but never pull the body down
        return np.maximum(loads, 0.0)

    def attitude_lengths(self, loads: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Suspension lengths that carry the given loads on the springs alone."""
        p = self.params
        compression = np.clip(np.asarray(loads, dtype=np.float64) / p.STIFFNESS, 0.0, p.TRAVEL)
        return p.REST_LENGTH - compression

    def settle(self, state: VehicleState) -> None:
        """Place the suspension at static equilibrium (no transfer, no motion)."""
        loads = self.wheel_loads(0.0, 0.0)
        state.suspension_length = self.attitude_lengths(loads)
        state.normal_load = self.force(state.suspension_length, np.zeros(4))

    def update(self, state: VehicleState, dt: float, lift: float = 0.0) -> npt.NDArray[np.float64]:
        """
        Move each wheel to the attitude implied by weight transfer and
        compute the resulting normal loads.

        Args:
            state: Vehicle state (suspension_length and normal_load are updated)
            dt: Time step (s)
            lift: Aerodynamic lift (N)

        Returns:
            Normal load per wheel [FL, FR, RL, RR] (N)
        """
        loads = self.wheel_loads(state.long_accel, state.lat_accel, lift)
        new_length = self.attitude_lengths(loads)

        if dt > self.epsilon:
            extension_rate = (new_length - state.suspension_length) / dt
        else:
            extension_rate = np.zeros(4)

        state.suspension_length = new_length
        state.normal_load = self.force(new_length, extension_rate)
        return state.normal_load
