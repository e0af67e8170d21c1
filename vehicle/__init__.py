"""
Vehicle dynamics core.

This package contains the single-vehicle simulation and its components:
- VehicleSimulation: tick/reset/get_state facade (car_dynamics.py)
- ControlInput, RawInput: driver input ramps (controls.py)
- EngineModel, Drivetrain: torque curve, gearbox, steering (powertrain.py)
- SuspensionModel: weight transfer and normal loads (suspension.py)
- TireModel: saturating tire forces (tire_model.py)
- VehicleIntegrator: semi-implicit Euler integration (integrator.py)
- VehicleState, VehicleSnapshot: mutable state and its read-only copy (state.py)
"""

from .car_dynamics import VehicleSimulation
from .controls import ControlInput, RawInput, NO_INPUT
from .powertrain import EngineModel, Drivetrain
from .suspension import SuspensionModel
from .tire_model import TireModel
from .integrator import VehicleIntegrator
from .state import VehicleState, VehicleSnapshot, Wheel, WHEEL_NAMES

__all__ = [
    'VehicleSimulation',
    'ControlInput',
    'RawInput',
    'NO_INPUT',
    'EngineModel',
    'Drivetrain',
    'SuspensionModel',
    'TireModel',
    'VehicleIntegrator',
    'VehicleState',
    'VehicleSnapshot',
    'Wheel',
    'WHEEL_NAMES',
]
