"""
Telemetry module for the vehicle simulation.

This module provides CSV telemetry logging:
- TelemetryLogger: one row per logged tick (logger.py)
"""

from .logger import TelemetryLogger, TELEMETRY_FIELDS

__all__ = ['TelemetryLogger', 'TELEMETRY_FIELDS']
