"""
Utility modules for the vehicle simulation tools.

This package provides shared utility functions for:
- Display utilities (format_controls, format_gear)
"""

from .display import format_controls, format_gear

__all__ = ['format_controls', 'format_gear']
