"""
Arcade vehicle dynamics simulation.

VehicleSimulation owns one VehicleState and the components that update it.
Each tick runs a fixed pipeline:

    controls -> steering -> engine / drivetrain -> suspension -> tires
             -> integrator -> RPM feedback and shifting

and returns a read-only VehicleSnapshot for rendering, HUD and telemetry.

Classes:
- VehicleSimulation: the facade the host loop drives with tick(dt, input)

See Also:
- powertrain.py: engine torque curve, gearbox, steering
- suspension.py: weight transfer and normal loads
- tire_model.py: saturating tire forces
- integrator.py: semi-implicit Euler integration
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional

from config.physics_config import DEFAULT_VEHICLE_CONFIG, VehicleConfig
from vehicle.controls import ControlInput, RawInput, coerce_input
from vehicle.integrator import VehicleIntegrator
from vehicle.powertrain import Drivetrain, EngineModel
from vehicle.state import VehicleSnapshot, VehicleState
from vehicle.suspension import SuspensionModel
from vehicle.tire_model import TireModel


class VehicleSimulation:
    """
    Single-vehicle simulation.

    Not thread-safe: call tick(), reset() and get_state() from one thread.
    The snapshots they return are copies and may be handed to any thread.

    Usage Example:
        sim = VehicleSimulation()
        snapshot = sim.tick(1 / 60, RawInput(accelerate=True))
        print(snapshot.speed_kmh, snapshot.gear)
    """

    def __init__(self, config: Optional[VehicleConfig] = None) -> None:
        """
        Args:
            config: Vehicle parameters (default: DEFAULT_VEHICLE_CONFIG)
        """
        self.config = config if config is not None else DEFAULT_VEHICLE_CONFIG

        self.controls = ControlInput(self.config.controls)
        self.engine = EngineModel(self.config.drivetrain.TORQUE_CURVE)
        self.drivetrain = Drivetrain(self.config)
        self.suspension = SuspensionModel(self.config)
        self.tires = TireModel(self.config)
        self.integrator = VehicleIntegrator(self.config)

        self.state = self._spawn_state()

    def _spawn_state(self) -> VehicleState:
        state = VehicleState.spawn(self.config)
        # Start at static ride height so the first tick sees no damper spike
        self.suspension.settle(state)
        return state

    def clamp_dt(self, dt: float) -> float:
        """
        Clamp a frame time to [0, MAX_DT].

        +inf becomes MAX_DT, NaN and negative values become 0.
        """
        max_dt = self.config.integration.MAX_DT
        dt = float(dt)
        if math.isnan(dt):
            return 0.0
        return min(max_dt, max(0.0, dt))

    def tick(
        self,
        dt: float,
        raw_input: RawInput | Mapping[str, Any] | None = None,
    ) -> VehicleSnapshot:
        """
        Advance the simulation by one frame.

        Args:
            dt: Elapsed wall-clock time (s); clamped to [0, MAX_DT]
            raw_input: Controls held this frame (RawInput, flag mapping or None)

        Returns:
            Snapshot of the state after the tick. A zero dt leaves the state
            untouched and returns its current snapshot.
        """
        dt = self.clamp_dt(dt)
        if dt <= 0.0:
            return self.state.snapshot()

        state = self.state
        raw = coerce_input(raw_input)

        steer_input, steer_held = self.controls.update(state, raw)
        self.drivetrain.steer(state, steer_input, steer_held)

        state.engine_torque = self.engine.torque(state.engine_rpm, state.throttle)
        total_force = self.drivetrain.wheel_force(state.engine_torque, state.brake, state.gear)
        wheel_forces = self.drivetrain.wheel_force_split(total_force)

        lift = self.integrator.aero_lift(state.speed)
        normal_loads = self.suspension.update(state, dt, lift)

        wheel_speed, _ = self.tires.contact_velocity(state)
        fx, fy = self.tires.update(state, wheel_forces, normal_loads)

        self.integrator.step(state, fx, fy, wheel_speed, dt)
        self.drivetrain.update_rpm(state)

        state.time += dt
        return state.snapshot()

    def reset(self) -> None:
        """Return to the spawn state. Calling it twice is the same as once."""
        self.state = self._spawn_state()

    def get_state(self) -> VehicleSnapshot:
        return self.state.snapshot()
