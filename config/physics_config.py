"""
Physics configuration for the vehicle dynamics simulation.

This module centralizes every tunable coefficient used by the simulation
and provides a single source of truth for vehicle, tire, suspension and
drivetrain parameters.

Default values describe a 1500 kg arcade-tuned road car with a five-speed
gearbox. They are chosen for plausible handling at 60 Hz, not for
engineering accuracy.

All groups are frozen: a VehicleConfig is built once at startup and
validated immediately, so a bad value fails before the first tick.
"""

from dataclasses import dataclass, field, fields
import math
from typing import Tuple


class ConfigError(ValueError):
    """Raised when a VehicleConfig holds a value the simulation cannot run with."""


@dataclass(frozen=True)
class VehicleParams:
    """
    Chassis parameters.
    """
    MASS: float = 1500.0  # Vehicle mass (kg)
    WHEELBASE: float = 2.6  # Front to rear axle distance (m)
    TRACK_WIDTH: float = 1.7  # Left to right wheel distance (m)

    # Center of gravity
    CG_HEIGHT: float = 0.3  # CG height used for load transfer (m)
    FRONT_WEIGHT_BIAS: float = 0.55  # Static fraction of weight on front axle

    # Effective yaw inertia = MASS * INERTIA_FACTOR
    INERTIA_FACTOR: float = 1.0


@dataclass(frozen=True)
class TireParams:
    """
    Tire parameters for the slip-based arcade tire model.

    Force shaping: F = sin(atan(SLIP_STIFFNESS * slip)) * TIRE_GRIP * load
    The shaping asymptotes to 1, so TIRE_GRIP * load is the force ceiling
    on each axis.
    """
    WHEEL_RADIUS: float = 0.35  # Wheel radius (m)
    TIRE_GRIP: float = 1.1  # Grip coefficient (force per unit normal load)
    SLIP_STIFFNESS: float = 3.0  # Initial slope of the force curve
    MIN_SLIP_SPEED: float = 1.0  # Below this contact speed slip angle is 0 (m/s)


@dataclass(frozen=True)
class SuspensionParams:
    """
    Per-wheel spring-damper parameters.

    Static front wheel load is ~4000 N, which compresses a 35000 N/m
    spring by ~0.115 m, leaving room for load transfer inside TRAVEL.
    """
    STIFFNESS: float = 35000.0  # Spring rate per wheel (N/m)
    DAMPING: float = 2500.0  # Damper rate per wheel (N*s/m)
    REST_LENGTH: float = 0.3  # Unloaded suspension length (m)
    TRAVEL: float = 0.2  # Maximum compression (m)

    # Low-pass filter applied to accelerations feeding load transfer
    # (0.15 = 85% previous value, 15% new value)
    LOAD_FILTER_ALPHA: float = 0.15


@dataclass(frozen=True)
class DrivetrainParams:
    """
    Engine and gearbox parameters.

    TORQUE_CURVE is a sequence of (rpm, torque Nm) control points in
    ascending RPM order. Torque between points is linearly interpolated and
    clamped to the end points outside the curve.
    """
    TORQUE_CURVE: Tuple[Tuple[float, float], ...] = (
        (0.0, 0.0),
        (1500.0, 280.0),
        (4500.0, 420.0),  # Peak torque
        (6500.0, 390.0),
    )

    # Gear ratios, 1st gear first
    GEAR_RATIOS: Tuple[float, ...] = (3.67, 2.10, 1.36, 1.03, 0.84)
    FINAL_DRIVE: float = 3.9

    # Share of the drive force requested at each wheel [FL, FR, RL, RR]
    TORQUE_SPLIT: Tuple[float, float, float, float] = (0.25, 0.25, 0.25, 0.25)

    # RPM limits
    IDLE_RPM: float = 1000.0
    MAX_RPM: float = 6500.0

    # Automatic shifting with hysteresis
    SHIFT_UP_RPM: float = 6000.0
    SHIFT_DOWN_RPM: float = 2000.0
    POST_UPSHIFT_RPM: float = 3000.0
    POST_DOWNSHIFT_RPM: float = 4000.0

    # Brake torque subtracted from engine torque at full brake (Nm)
    BRAKE_MAX_FORCE: float = 4500.0


@dataclass(frozen=True)
class AerodynamicsParams:
    """
    Aerodynamic and resistance parameters.
    """
    AERO_DRAG: float = 0.8  # Drag force = 0.5 * AERO_DRAG * v^2 (kg/m)
    AERO_LIFT: float = 0.3  # Lift force = 0.5 * AERO_LIFT * v^2 (kg/m), negative = downforce

    # Multiplicative velocity decay per second:
    # v *= 1 - (ROLLING_RESISTANCE + DRAG_COEFFICIENT * speed) * dt
    DRAG_COEFFICIENT: float = 0.0005  # (1/m)
    ROLLING_RESISTANCE: float = 0.015  # (1/s)


@dataclass(frozen=True)
class SteeringParams:
    """
    Steering system parameters. Rates are per tick.
    """
    STEERING_CLAMP: float = 0.45  # Max steering angle (rad) (~26 degrees)
    STEERING_STEP: float = 0.04  # Steering change per tick at full authority (rad)
    STEER_SPEED_CAP: float = 30.0  # Speed where authority bottoms out (m/s)
    MIN_STEER_AUTHORITY: float = 0.2  # Authority left at STEER_SPEED_CAP
    STEER_RETURN_FACTOR: float = 0.8  # Self-centering decay per tick
    STEER_EPSILON: float = 0.01  # Snap to zero below this angle (rad)


@dataclass(frozen=True)
class ControlParams:
    """
    Pedal ramp rates, applied once per tick.
    """
    THROTTLE_RAMP_UP: float = 0.1
    THROTTLE_RAMP_DOWN: float = 0.2
    BRAKE_RAMP_UP: float = 0.1
    BRAKE_RAMP_DOWN: float = 0.2


@dataclass(frozen=True)
class IntegrationParams:
    """
    Integrator settings.

    MAX_DT bounds the explicit step: a stalled frame is simulated as one
    MAX_DT step instead of one huge step.
    """
    MAX_DT: float = 0.1  # Largest simulated step (s)
    ANGULAR_DAMPING: float = 0.95  # Angular velocity multiplier per tick

    # Cosmetic body lean (pitch/roll)
    LEAN_SCALE: float = 0.5  # Fraction of pitch/roll rate integrated into lean
    MAX_LEAN: float = 0.08  # Lean clamp (rad)
    LEAN_RETURN: float = 0.9  # Lean relaxation per tick

    GRAVITY: float = 9.81  # (m/s^2)
    EPSILON: float = 1e-6  # Division guard


@dataclass(frozen=True)
class SpawnParams:
    """
    Spawn pose, restored by reset().
    """
    POSITION: Tuple[float, float, float] = (10.0, 0.0, 0.0)  # World (x, y up, z)
    YAW: float = 0.0  # Heading (rad), 0 faces +z


@dataclass(frozen=True)
class VehicleConfig:
    """
    Complete vehicle configuration combining all parameter groups.

    Usage:
        config = VehicleConfig()
        print(config.vehicle.MASS)  # 1500.0
        print(config.drivetrain.GEAR_RATIOS[0])  # 3.67

    Invalid values raise ConfigError on construction.
    """
    vehicle: VehicleParams = field(default_factory=VehicleParams)
    tire: TireParams = field(default_factory=TireParams)
    suspension: SuspensionParams = field(default_factory=SuspensionParams)
    drivetrain: DrivetrainParams = field(default_factory=DrivetrainParams)
    aerodynamics: AerodynamicsParams = field(default_factory=AerodynamicsParams)
    steering: SteeringParams = field(default_factory=SteeringParams)
    controls: ControlParams = field(default_factory=ControlParams)
    integration: IntegrationParams = field(default_factory=IntegrationParams)
    spawn: SpawnParams = field(default_factory=SpawnParams)

    def __post_init__(self):
        """Validate configuration."""
        validate_config(self)


def _require(condition, name, message):
    if not condition:
        raise ConfigError(f"{name}: {message}")


def validate_config(config: VehicleConfig) -> None:
    """
    Check every value the simulation divides by, indexes with or clamps to.

    Raises:
        ConfigError: naming the first offending field
    """
    for group in (config.vehicle, config.tire, config.suspension,
                  config.aerodynamics, config.steering, config.controls,
                  config.integration):
        for f in fields(group):
            value = getattr(group, f.name)
            _require(math.isfinite(value), f"{type(group).__name__}.{f.name}",
                     f"must be finite, got {value}")

    vehicle = config.vehicle
    _require(vehicle.MASS > 0, 'vehicle.MASS', f"must be positive, got {vehicle.MASS}")
    _require(vehicle.WHEELBASE > 0, 'vehicle.WHEELBASE', "must be positive")
    _require(vehicle.TRACK_WIDTH > 0, 'vehicle.TRACK_WIDTH', "must be positive")
    _require(vehicle.CG_HEIGHT >= 0, 'vehicle.CG_HEIGHT', "must not be negative")
    _require(0.0 < vehicle.FRONT_WEIGHT_BIAS < 1.0, 'vehicle.FRONT_WEIGHT_BIAS',
             "must lie strictly between 0 and 1")
    _require(vehicle.INERTIA_FACTOR > 0, 'vehicle.INERTIA_FACTOR', "must be positive")

    tire = config.tire
    _require(tire.WHEEL_RADIUS > 0, 'tire.WHEEL_RADIUS',
             f"must be positive, got {tire.WHEEL_RADIUS}")
    _require(tire.TIRE_GRIP > 0, 'tire.TIRE_GRIP', "must be positive")
    _require(tire.SLIP_STIFFNESS > 0, 'tire.SLIP_STIFFNESS', "must be positive")
    _require(tire.MIN_SLIP_SPEED >= 0, 'tire.MIN_SLIP_SPEED', "must not be negative")

    suspension = config.suspension
    _require(suspension.STIFFNESS > 0, 'suspension.STIFFNESS', "must be positive")
    _require(suspension.DAMPING >= 0, 'suspension.DAMPING', "must not be negative")
    _require(suspension.REST_LENGTH > 0, 'suspension.REST_LENGTH', "must be positive")
    _require(suspension.TRAVEL > 0, 'suspension.TRAVEL', "must be positive")
    _require(suspension.TRAVEL <= suspension.REST_LENGTH, 'suspension.TRAVEL',
             "cannot exceed REST_LENGTH")
    _require(0.0 < suspension.LOAD_FILTER_ALPHA <= 1.0, 'suspension.LOAD_FILTER_ALPHA',
             "must lie in (0, 1]")

    _validate_drivetrain(config.drivetrain)

    aero = config.aerodynamics
    # AERO_LIFT may be negative (downforce)
    for name in ('AERO_DRAG', 'DRAG_COEFFICIENT', 'ROLLING_RESISTANCE'):
        _require(getattr(aero, name) >= 0, f'aerodynamics.{name}', "must not be negative")

    steering = config.steering
    _require(steering.STEERING_CLAMP > 0, 'steering.STEERING_CLAMP', "must be positive")
    _require(steering.STEERING_STEP > 0, 'steering.STEERING_STEP', "must be positive")
    _require(steering.STEER_SPEED_CAP > 0, 'steering.STEER_SPEED_CAP', "must be positive")
    _require(0.0 <= steering.MIN_STEER_AUTHORITY <= 1.0, 'steering.MIN_STEER_AUTHORITY',
             "must lie in [0, 1]")
    _require(0.0 <= steering.STEER_RETURN_FACTOR < 1.0, 'steering.STEER_RETURN_FACTOR',
             "must lie in [0, 1)")
    _require(steering.STEER_EPSILON >= 0, 'steering.STEER_EPSILON', "must not be negative")

    controls = config.controls
    for f in fields(controls):
        _require(getattr(controls, f.name) > 0, f'controls.{f.name}', "must be positive")

    integration = config.integration
    _require(integration.MAX_DT > 0, 'integration.MAX_DT',
             f"must be positive, got {integration.MAX_DT}")
    _require(0.0 < integration.ANGULAR_DAMPING <= 1.0, 'integration.ANGULAR_DAMPING',
             "must lie in (0, 1]")
    _require(0.0 <= integration.LEAN_RETURN <= 1.0, 'integration.LEAN_RETURN',
             "must lie in [0, 1]")
    _require(integration.MAX_LEAN >= 0, 'integration.MAX_LEAN', "must not be negative")
    _require(integration.GRAVITY > 0, 'integration.GRAVITY', "must be positive")
    _require(integration.EPSILON > 0, 'integration.EPSILON', "must be positive")

    spawn = config.spawn
    _require(len(spawn.POSITION) == 3, 'spawn.POSITION', "must have 3 components")
    _require(all(math.isfinite(v) for v in spawn.POSITION) and math.isfinite(spawn.YAW),
             'spawn', "pose must be finite")


def _validate_drivetrain(drivetrain: DrivetrainParams) -> None:
    curve = drivetrain.TORQUE_CURVE
    _require(len(curve) > 0, 'drivetrain.TORQUE_CURVE', "must contain at least one point")
    for point in curve:
        _require(len(point) == 2 and all(math.isfinite(v) for v in point),
                 'drivetrain.TORQUE_CURVE', f"invalid point {point!r}")
    rpms = [rpm for rpm, _ in curve]
    _require(all(a < b for a, b in zip(rpms, rpms[1:])), 'drivetrain.TORQUE_CURVE',
             "RPM points must be strictly ascending")

    ratios = drivetrain.GEAR_RATIOS
    _require(len(ratios) > 0, 'drivetrain.GEAR_RATIOS', "must contain at least one gear")
    _require(all(math.isfinite(r) and r > 0 for r in ratios), 'drivetrain.GEAR_RATIOS',
             "all ratios must be positive")
    _require(math.isfinite(drivetrain.FINAL_DRIVE) and drivetrain.FINAL_DRIVE > 0,
             'drivetrain.FINAL_DRIVE', "must be positive")

    split = drivetrain.TORQUE_SPLIT
    _require(len(split) == 4 and all(s >= 0 for s in split), 'drivetrain.TORQUE_SPLIT',
             "must hold 4 non-negative shares [FL, FR, RL, RR]")
    _require(abs(sum(split) - 1.0) < 1e-6, 'drivetrain.TORQUE_SPLIT', "shares must sum to 1")

    idle, max_rpm = drivetrain.IDLE_RPM, drivetrain.MAX_RPM
    _require(0 <= idle < max_rpm, 'drivetrain.IDLE_RPM',
             f"must be non-negative and below MAX_RPM ({idle} >= {max_rpm})")
    down, up = drivetrain.SHIFT_DOWN_RPM, drivetrain.SHIFT_UP_RPM
    _require(idle <= down < up <= max_rpm, 'drivetrain.SHIFT_DOWN_RPM',
             "shift thresholds must satisfy IDLE <= DOWN < UP <= MAX")
    # A reset value outside the thresholds would re-trigger a shift on the next tick
    for name in ('POST_UPSHIFT_RPM', 'POST_DOWNSHIFT_RPM'):
        value = getattr(drivetrain, name)
        _require(down <= value <= up, f'drivetrain.{name}',
                 f"must lie within [SHIFT_DOWN_RPM, SHIFT_UP_RPM], got {value}")
    _require(drivetrain.BRAKE_MAX_FORCE >= 0, 'drivetrain.BRAKE_MAX_FORCE',
             "must not be negative")


# ============================================================================
# Preset Configurations
# ============================================================================

def sport_config() -> VehicleConfig:
    """
    Sport setup: firmer springs, more grip, shorter steering response.
    """
    return VehicleConfig(
        tire=TireParams(TIRE_GRIP=1.25),
        suspension=SuspensionParams(STIFFNESS=45000.0, DAMPING=3000.0),
        steering=SteeringParams(STEERING_STEP=0.05),
    )


def track_config() -> VehicleConfig:
    """
    Track setup: stiff suspension, low CG, high grip, extra aero drag.
    """
    return VehicleConfig(
        vehicle=VehicleParams(CG_HEIGHT=0.25),
        tire=TireParams(TIRE_GRIP=1.4),
        suspension=SuspensionParams(STIFFNESS=60000.0, DAMPING=3500.0, TRAVEL=0.15),
        aerodynamics=AerodynamicsParams(AERO_DRAG=1.0, AERO_LIFT=-0.8),
    )


def rwd_config() -> VehicleConfig:
    """
    Rear-wheel drive: all drive force requested at the rear tires.
    """
    return VehicleConfig(
        vehicle=VehicleParams(FRONT_WEIGHT_BIAS=0.5),
        drivetrain=DrivetrainParams(TORQUE_SPLIT=(0.0, 0.0, 0.5, 0.5)),
    )


_PRESETS = {
    'stock': VehicleConfig,
    'sport': sport_config,
    'track': track_config,
    'rwd': rwd_config,
}

PRESET_NAMES = tuple(_PRESETS)


def get_vehicle_config(preset: str = 'stock') -> VehicleConfig:
    """
    Build a named preset configuration.

    Args:
        preset: 'stock', 'sport', 'track' or 'rwd'

    Returns:
        Validated VehicleConfig
    """
    if preset not in _PRESETS:
        raise ValueError(f"Unknown preset '{preset}'. Choose from: {list(_PRESETS)}")
    return _PRESETS[preset]()


DEFAULT_VEHICLE_CONFIG = VehicleConfig()
