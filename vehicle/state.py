"""
Vehicle state record and its read-only snapshot.

VehicleState is the single mutable record of the simulation. Only the
components in this package write to it. Collaborators (renderer, camera,
HUD, telemetry) receive a VehicleSnapshot: a frozen copy whose arrays are
read-only, taken after the tick has completed.

Per-wheel arrays always have 4 entries, indexed by Wheel:
    FL = 0, FR = 1, RL = 2, RR = 3
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import IntEnum
import math

import numpy as np
import numpy.typing as npt

from config.physics_config import VehicleConfig


class Wheel(IntEnum):
    """Index of each wheel in the per-wheel arrays."""
    FL = 0
    FR = 1
    RL = 2
    RR = 3


WHEEL_NAMES = ('fl', 'fr', 'rl', 'rr')
FRONT_WHEELS = (Wheel.FL, Wheel.FR)
REAR_WHEELS = (Wheel.RL, Wheel.RR)
LEFT_WHEELS = (Wheel.FL, Wheel.RL)
RIGHT_WHEELS = (Wheel.FR, Wheel.RR)

# Column of tire_force holding each component
LATERAL = 0
LONGITUDINAL = 1


def heading_vectors(yaw: float) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Unit forward and left vectors in world space for a heading.

    World frame: y is up, yaw 0 faces +z, positive yaw turns left.
    """
    sin_yaw = math.sin(yaw)
    cos_yaw = math.cos(yaw)
    forward = np.array([sin_yaw, 0.0, cos_yaw])
    left = np.array([cos_yaw, 0.0, -sin_yaw])
    return forward, left


def wheel_offsets(wheelbase: float, track_width: float) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Contact patch positions relative to the CG in the body frame.

    Returns:
        (x, y): x forward, y to the left, indexed by Wheel
    """
    half_l = wheelbase / 2.0
    half_t = track_width / 2.0
    x = np.array([half_l, half_l, -half_l, -half_l])
    y = np.array([half_t, -half_t, half_t, -half_t])
    return x, y


def _zeros4() -> npt.NDArray[np.float64]:
    return np.zeros(4)


@dataclass(eq=False)
class VehicleState:
    """
    Mutable simulation state.

    Orientation:
    - yaw: heading (rad), integrated from angular_velocity[1]
    - pitch, roll: cosmetic body lean (rad), never fed back into forces

    angular_velocity holds (pitch rate, yaw rate, roll rate).
    tire_force rows are (lateral, longitudinal) in each wheel's frame.
    """
    position: npt.NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    yaw: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0
    velocity: npt.NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    angular_velocity: npt.NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))

    steering_angle: float = 0.0
    gear: int = 1
    engine_rpm: float = 0.0
    engine_torque: float = 0.0
    throttle: float = 0.0
    brake: float = 0.0

    # Per-wheel [FL, FR, RL, RR]
    suspension_length: npt.NDArray[np.float64] = field(default_factory=_zeros4)
    normal_load: npt.NDArray[np.float64] = field(default_factory=_zeros4)
    slip_ratio: npt.NDArray[np.float64] = field(default_factory=_zeros4)
    slip_angle: npt.NDArray[np.float64] = field(default_factory=_zeros4)
    tire_force: npt.NDArray[np.float64] = field(default_factory=lambda: np.zeros((4, 2)))
    wheel_spin: npt.NDArray[np.float64] = field(default_factory=_zeros4)
    wheel_steer_angle: npt.NDArray[np.float64] = field(default_factory=_zeros4)

    # Filtered body-frame accelerations driving next tick's load transfer
    long_accel: float = 0.0
    lat_accel: float = 0.0

    time: float = 0.0

    @classmethod
    def spawn(cls, config: VehicleConfig) -> VehicleState:
        """
        Create the state a freshly spawned (or reset) vehicle starts from.

        All scalars are zero except gear (1st) and engine RPM (idle);
        suspension sits at rest length.
        """
        return cls(
            position=np.array(config.spawn.POSITION, dtype=np.float64),
            yaw=float(config.spawn.YAW),
            gear=1,
            engine_rpm=float(config.drivetrain.IDLE_RPM),
            suspension_length=np.full(4, config.suspension.REST_LENGTH),
        )

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    @property
    def yaw_rate(self) -> float:
        return float(self.angular_velocity[1])

    def body_velocity(self) -> tuple[float, float]:
        """Velocity as (longitudinal, lateral) components in the body frame."""
        forward, left = heading_vectors(self.yaw)
        return float(self.velocity @ forward), float(self.velocity @ left)

    def snapshot(self) -> VehicleSnapshot:
        """Frozen copy of this state with read-only arrays."""
        values = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, np.ndarray):
                value = value.copy()
                value.flags.writeable = False
            values[f.name] = value
        return VehicleSnapshot(**values)


@dataclass(frozen=True, eq=False)
class VehicleSnapshot:
    """
    Read-only view of VehicleState, safe to hand to rendering or another thread.

    Fields mirror VehicleState; see its docstring for conventions.
    """
    position: npt.NDArray[np.float64]
    yaw: float
    pitch: float
    roll: float
    velocity: npt.NDArray[np.float64]
    angular_velocity: npt.NDArray[np.float64]
    steering_angle: float
    gear: int
    engine_rpm: float
    engine_torque: float
    throttle: float
    brake: float
    suspension_length: npt.NDArray[np.float64]
    normal_load: npt.NDArray[np.float64]
    slip_ratio: npt.NDArray[np.float64]
    slip_angle: npt.NDArray[np.float64]
    tire_force: npt.NDArray[np.float64]
    wheel_spin: npt.NDArray[np.float64]
    wheel_steer_angle: npt.NDArray[np.float64]
    long_accel: float
    lat_accel: float
    time: float

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    @property
    def speed_kmh(self) -> float:
        return self.speed * 3.6

    @property
    def yaw_rate(self) -> float:
        return float(self.angular_velocity[1])

    @property
    def forward(self) -> npt.NDArray[np.float64]:
        return heading_vectors(self.yaw)[0]

    @property
    def longitudinal_speed(self) -> float:
        return float(self.velocity @ self.forward)

    def wheel_data(self) -> list[dict[str, float]]:
        """Per-wheel telemetry dicts in FL, FR, RL, RR order."""
        return [
            {
                'slip_ratio': float(self.slip_ratio[i]),
                'slip_angle': float(self.slip_angle[i]),
                'normal_force': float(self.normal_load[i]),
                'suspension_length': float(self.suspension_length[i]),
                'lateral_force': float(self.tire_force[i, LATERAL]),
                'longitudinal_force': float(self.tire_force[i, LONGITUDINAL]),
            }
            for i in range(4)
        ]
