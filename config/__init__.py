"""
Configuration module for the vehicle dynamics simulation.

This module provides centralized configuration for:
- Physics parameters and presets (physics_config.py)
"""

from .physics_config import (
    VehicleConfig,
    VehicleParams,
    TireParams,
    SuspensionParams,
    DrivetrainParams,
    AerodynamicsParams,
    SteeringParams,
    ControlParams,
    IntegrationParams,
    SpawnParams,
    ConfigError,
    validate_config,
    get_vehicle_config,
    sport_config,
    track_config,
    rwd_config,
    PRESET_NAMES,
    DEFAULT_VEHICLE_CONFIG,
)

__all__ = [
    'VehicleConfig',
    'VehicleParams',
    'TireParams',
    'SuspensionParams',
    'DrivetrainParams',
    'AerodynamicsParams',
    'SteeringParams',
    'ControlParams',
    'IntegrationParams',
    'SpawnParams',
    'ConfigError',
    'validate_config',
    'get_vehicle_config',
    'sport_config',
    'track_config',
    'rwd_config',
    'PRESET_NAMES',
    'DEFAULT_VEHICLE_CONFIG',
]
