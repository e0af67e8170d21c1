"""
Driver input handling.

The host layer turns key events into four boolean flags (RawInput). Each
tick ControlInput turns those flags into continuous pedal positions with
ramped response, and a signed steering request that the steering stage
in Drivetrain rate-limits.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from config.physics_config import ControlParams
from vehicle.state import VehicleState


@dataclass(frozen=True)
class RawInput:
    """Logical controls held down this tick."""
    accelerate: bool = False
    brake: bool = False
    steer_left: bool = False
    steer_right: bool = False

    @classmethod
    def from_mapping(cls, flags: Mapping[str, Any]) -> RawInput:
        """Build from a mapping with any subset of the four flag names."""
        return cls(
            accelerate=bool(flags.get('accelerate', False)),
            brake=bool(flags.get('brake', False)),
            steer_left=bool(flags.get('steer_left', False)),
            steer_right=bool(flags.get('steer_right', False)),
        )

    @property
    def steer_input(self) -> int:
        """+1 for left, -1 for right, 0 for none or both."""
        return int(bool(self.steer_left)) - int(bool(self.steer_right))

    @property
    def steer_held(self) -> bool:
        """True while either steer control is down, even if they cancel out."""
        return bool(self.steer_left or self.steer_right)


NO_INPUT = RawInput()


def coerce_input(raw: RawInput | Mapping[str, Any] | None) -> RawInput:
    """Accept a RawInput, a flag mapping or None (nothing held)."""
    if raw is None:
        return NO_INPUT
    if isinstance(raw, RawInput):
        return raw
    return RawInput.from_mapping(raw)


def ramp(value: float, held: bool, rate_up: float, rate_down: float) -> float:
    """Move a pedal toward 1 while held and toward 0 otherwise, clamped to [0, 1]."""
    if held:
        value += rate_up
    else:
        value -= rate_down
    return min(1.0, max(0.0, value))


class ControlInput:
    """
    Converts held controls into throttle, brake and a steering request.

    Throttle and brake are written to the state; the steering request and
    whether any steer control is held are returned for Drivetrain.steer().
    """

    def __init__(self, params: ControlParams) -> None:
        self.params = params

    def update(self, state: VehicleState, raw: RawInput) -> Tuple[int, bool]:
        """
        Advance pedal ramps by one tick.

        Args:
            state: Vehicle state (throttle and brake are updated in place)
            raw: Controls held this tick

        Returns:
            (steer_input, steer_held): request in {-1, 0, 1} and whether
            either steer control is held
        """
        p = self.params
        state.throttle = ramp(state.throttle, raw.accelerate,
                              p.THROTTLE_RAMP_UP, p.THROTTLE_RAMP_DOWN)
        state.brake = ramp(state.brake, raw.brake,
                           p.BRAKE_RAMP_UP, p.BRAKE_RAMP_DOWN)
        return raw.steer_input, raw.steer_held
