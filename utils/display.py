"""
Display utilities for the vehicle simulation.

This module provides shared utility functions for formatting and displaying
information about the vehicle's state and controls.
"""


def format_controls(snapshot):
    """
    Format pedal and steering state for display.

    Args:
        snapshot: VehicleSnapshot (or any object with throttle, brake and
                  steering_angle attributes)

    Returns:
        Human-readable control description
    """
    steering = snapshot.steering_angle

    # Describe steering (positive angles steer left)
    if steering > 0.05:
        steer_desc = f"LEFT({steering:.2f})"
    elif steering < -0.05:
        steer_desc = f"RIGHT({-steering:.2f})"
    else:
        steer_desc = f"STRAIGHT({steering:.2f})"

    # Describe pedals
    if snapshot.brake > 0.1:
        pedal_desc = f"BRAKE({snapshot.brake:.2f})"
    elif snapshot.throttle > 0.1:
        pedal_desc = f"GAS({snapshot.throttle:.2f})"
    else:
        pedal_desc = "COAST"

    return f"{steer_desc} + {pedal_desc}"


def format_gear(gear, rpm):
    """Gear and RPM as shown on the HUD, e.g. '3 @ 4200 rpm'."""
    return f"{gear} @ {rpm:.0f} rpm"
