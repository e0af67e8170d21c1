"""
CSV telemetry logging.

CSV Format:
    One row per logged tick: simulation time, pose, speed, drivetrain
    state, pedals, steering and per-wheel data (slip ratio, slip angle,
    normal force, suspension length) for FL, FR, RL, RR.
"""

import csv
from datetime import datetime

from vehicle.state import WHEEL_NAMES

_WHEEL_COLUMNS = ('slip_ratio', 'slip_angle', 'normal_force', 'suspension_length')

TELEMETRY_FIELDS = [
    'time', 'x', 'z', 'yaw', 'speed_kmh', 'yaw_rate',
    'gear', 'rpm', 'engine_torque', 'throttle', 'brake', 'steering',
    'long_accel', 'lat_accel',
] + [f'{name}_{column}' for name in WHEEL_NAMES for column in _WHEEL_COLUMNS]


class TelemetryLogger:
    """Log vehicle telemetry data to CSV file."""

    def __init__(self, filename=None, log_interval=1):
        """
        Initialize telemetry logger.

        Args:
            filename: Output CSV filename (None = auto-generate)
            log_interval: Log every N frames (default: 1 = every frame)
        """
        if log_interval < 1:
            raise ValueError(f"log_interval must be >= 1, got {log_interval}")

        if filename is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"telemetry_{timestamp}.csv"

        self.filename = str(filename)
        self.log_interval = log_interval
        self.frame_count = 0
        self.rows_written = 0
        self.file = None
        self.writer = None

        self._open_file()

    def _open_file(self):
        """Open CSV file and write header."""
        self.file = open(self.filename, 'w', newline='')
        self.writer = csv.DictWriter(self.file, fieldnames=TELEMETRY_FIELDS)
        self.writer.writeheader()
        self.file.flush()

    def log_frame(self, snapshot):
        """
        Log a single frame of telemetry data.

        Args:
            snapshot: VehicleSnapshot returned by VehicleSimulation.tick()
        """
        self.frame_count += 1

        # Only log every N frames
        if self.frame_count % self.log_interval != 0:
            return

        row = {
            'time': f"{snapshot.time:.4f}",
            'x': f"{snapshot.position[0]:.4f}",
            'z': f"{snapshot.position[2]:.4f}",
            'yaw': f"{snapshot.yaw:.4f}",
            'speed_kmh': f"{snapshot.speed_kmh:.2f}",
            'yaw_rate': f"{snapshot.yaw_rate:.4f}",
            'gear': snapshot.gear,
            'rpm': f"{snapshot.engine_rpm:.0f}",
            'engine_torque': f"{snapshot.engine_torque:.1f}",
            'throttle': f"{snapshot.throttle:.3f}",
            'brake': f"{snapshot.brake:.3f}",
            'steering': f"{snapshot.steering_angle:.4f}",
            'long_accel': f"{snapshot.long_accel:.3f}",
            'lat_accel': f"{snapshot.lat_accel:.3f}",
        }

        # Add wheel data
        for name, wheel in zip(WHEEL_NAMES, snapshot.wheel_data()):
            row[f'{name}_slip_ratio'] = f"{wheel['slip_ratio']:.6f}"
            row[f'{name}_slip_angle'] = f"{wheel['slip_angle']:.6f}"
            row[f'{name}_normal_force'] = f"{wheel['normal_force']:.2f}"
            row[f'{name}_suspension_length'] = f"{wheel['suspension_length']:.5f}"

        self.writer.writerow(row)
        self.file.flush()  # Ensure data is written immediately
        self.rows_written += 1

    def close(self):
        """Close the log file."""
        if self.file:
            self.file.close()
            self.file = None
            print(f"\n✓ Telemetry logged to: {self.filename}")
