#!/usr/bin/env python3
"""
Engine Dynamometer (Dyno) for the simulated vehicle
===================================================

Sweeps the configured torque curve from idle to the limiter and reports
torque, power and per-gear road speeds. Optionally draws a dyno sheet with
matplotlib.

Usage:
    python vehicle_dyno.py

    # Another preset, part throttle
    python vehicle_dyno.py --preset sport --throttle 0.8

    # Save dyno sheet
    python vehicle_dyno.py --save dyno_sheet.png

Requirements:
    pip install matplotlib numpy
"""

import argparse

import numpy as np

from config.physics_config import PRESET_NAMES, get_vehicle_config
from vehicle.powertrain import Drivetrain, EngineModel, RPM_PER_RAD_S


class EngineDyno:
    """
    Engine dynamometer for testing and analysis.

    Measures torque and power across the RPM range of a vehicle
    configuration at one or more throttle positions.
    """

    def __init__(self, config):
        """
        Args:
            config: VehicleConfig whose engine and gearbox are tested
        """
        self.config = config
        self.engine = EngineModel(config.drivetrain.TORQUE_CURVE)
        self.drivetrain = Drivetrain(config)
        self.test_results = []

    def run_test(self, throttle=1.0, rpm_step=100):
        """
        Run a full dyno test from idle to the limiter.

        Args:
            throttle: Throttle position [0.0 - 1.0]
            rpm_step: RPM increment

        Returns:
            dict: Test results with RPM, torque, power data (numpy arrays)
        """
        p = self.config.drivetrain
        print(f"Running dyno test @ {throttle*100:.0f}% throttle...")
        print(f"RPM Range: {p.IDLE_RPM:.0f} - {p.MAX_RPM:.0f} RPM")

        rpm_range = np.arange(p.IDLE_RPM, p.MAX_RPM + rpm_step, rpm_step)
        rpm_range = rpm_range[rpm_range <= p.MAX_RPM]

        torque = np.array([self.engine.torque(rpm, throttle) for rpm in rpm_range])
        power_kw = np.array([self.engine.power_kw(rpm, throttle) for rpm in rpm_range])

        results = {
            'throttle': throttle,
            'rpm': rpm_range,
            'torque_nm': torque,
            'power_kw': power_kw,
            'power_hp': power_kw * 1.341,  # 1 kW = 1.341 hp
        }
        self.test_results.append(results)
        self._print_summary(results)
        return results

    def _print_summary(self, results):
        """Print test summary statistics."""
        if len(results['rpm']) == 0:
            return

        # Peak of the configured curve, at this throttle
        peak_torque_rpm, _ = self.engine.peak_torque()
        peak_torque = self.engine.torque(peak_torque_rpm, results['throttle'])
        peak_power_kw = np.max(results['power_kw'])
        peak_power_hp = np.max(results['power_hp'])
        peak_power_rpm = results['rpm'][np.argmax(results['power_kw'])]
        mass = self.config.vehicle.MASS

        print("\n" + "="*60)
        print("DYNO TEST RESULTS")
        print("="*60)
        print(f"Peak Torque:  {peak_torque:.1f} Nm @ {peak_torque_rpm:.0f} RPM")
        print(f"Peak Power:   {peak_power_hp:.1f} hp ({peak_power_kw:.1f} kW) @ {peak_power_rpm:.0f} RPM")
        print(f"Power/Weight: {peak_power_kw / (mass / 1000.0):.1f} kW/tonne")
        print("="*60 + "\n")

    def run_throttle_sweep(self, throttle_positions=None):
        """
        Run multiple tests at different throttle positions.

        Args:
            throttle_positions: List of throttle positions to test
        """
        if throttle_positions is None:
            throttle_positions = [0.25, 0.50, 0.75, 1.0]

        for throttle in throttle_positions:
            self.run_test(throttle=throttle)

    def gear_speeds(self):
        """
        Road speed range of each gear between idle and the limiter.

        Returns:
            list of (gear, min_kmh, max_kmh, shift_up_kmh)
        """
        p = self.config.drivetrain
        radius = self.config.tire.WHEEL_RADIUS
        table = []
        for gear in range(1, self.drivetrain.num_gears + 1):
            ratio = self.drivetrain.gear_ratio(gear)

            def kmh(rpm):
                return rpm / RPM_PER_RAD_S / ratio * radius * 3.6

            table.append((gear, kmh(p.IDLE_RPM), kmh(p.MAX_RPM), kmh(p.SHIFT_UP_RPM)))
        return table

    def print_gear_table(self):
        print("GEAR SPEEDS")
        print("-"*60)
        print(f"{'Gear':>4}  {'Ratio':>6}  {'Idle km/h':>10}  {'Shift km/h':>10}  {'Limiter km/h':>12}")
        for gear, low, high, shift in self.gear_speeds():
            print(f"{gear:>4}  {self.drivetrain.gear_ratio(gear):>6.2f}  {low:>10.1f}  {shift:>10.1f}  {high:>12.1f}")
        print("-"*60 + "\n")


def create_dyno_sheet(dyno, save_path=None):
    """Torque and power curves for every test run, with the gear table."""
    import matplotlib.pyplot as plt

    fig, (ax_curve, ax_gears) = plt.subplots(1, 2, figsize=(14, 6),
                                             gridspec_kw={'width_ratios': [2, 1]})
    ax_power = ax_curve.twinx()

    for results in dyno.test_results:
        label = f"{results['throttle']*100:.0f}%"
        ax_curve.plot(results['rpm'], results['torque_nm'], '-', linewidth=2, label=f"Torque {label}")
        ax_power.plot(results['rpm'], results['power_kw'], '--', linewidth=2, label=f"Power {label}")

    ax_curve.set_xlabel('Engine Speed (RPM)', fontsize=12)
    ax_curve.set_ylabel('Torque (Nm)', fontsize=12)
    ax_power.set_ylabel('Power (kW)', fontsize=12)
    ax_curve.grid(True, alpha=0.3)
    ax_curve.legend(loc='upper left')
    ax_power.legend(loc='lower right')
    ax_curve.set_title('Dyno Sheet', fontsize=14, fontweight='bold')

    for gear, low, high, shift in dyno.gear_speeds():
        ax_gears.plot([low, high], [gear, gear], linewidth=6)
        ax_gears.plot([shift], [gear], 'k|', markersize=14)
    ax_gears.set_xlabel('Road Speed (km/h)', fontsize=12)
    ax_gears.set_ylabel('Gear', fontsize=12)
    ax_gears.set_title('Gear Speeds (| = upshift)', fontsize=12)
    ax_gears.invert_yaxis()
    ax_gears.grid(True, alpha=0.3)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"✓ Dyno sheet saved to: {save_path}")
    else:
        plt.show()
    plt.close(fig)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Engine dynamometer for the simulated vehicle',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python vehicle_dyno.py
  python vehicle_dyno.py --throttle 0.8
  python vehicle_dyno.py --save dyno_sheet.png
  python vehicle_dyno.py --sweep --no-plot
        """)

    parser.add_argument('--preset', choices=PRESET_NAMES, default='stock',
                       help='Vehicle configuration preset (default: stock)')
    parser.add_argument('--throttle', type=float, default=1.0,
                       help='Throttle position for test (0.0-1.0, default: 1.0)')
    parser.add_argument('--save', type=str, default=None,
                       help='Save dyno sheet to file (e.g., dyno_sheet.png)')
    parser.add_argument('--sweep', action='store_true',
                       help='Run throttle sweep (25%%, 50%%, 75%%, 100%%)')
    parser.add_argument('--no-plot', action='store_true',
                       help='Print results only')

    args = parser.parse_args()

    print("="*70)
    print(f"ENGINE DYNAMOMETER ({args.preset})")
    print("="*70)
    print()

    dyno = EngineDyno(get_vehicle_config(args.preset))

    if args.sweep:
        print("Running throttle sweep test...")
        dyno.run_throttle_sweep()
    else:
        dyno.run_test(throttle=args.throttle)

    dyno.print_gear_table()

    if not args.no_plot:
        create_dyno_sheet(dyno, save_path=args.save)


if __name__ == '__main__':
    main()
