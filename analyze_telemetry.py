"""
Analyze telemetry data logged from play_human.py --log

This script reads CSV telemetry files and provides analysis.
Useful for debugging vehicle dynamics issues or understanding driving behavior.

Usage:
    python analyze_telemetry.py telemetry_20250113_123456.csv
    python analyze_telemetry.py telemetry_20250113_123456.csv --all --plot
"""

import argparse
import csv
import math
import statistics

WHEELS = ['fl', 'fr', 'rl', 'rr']
WHEEL_LABELS = ['Front Left', 'Front Right', 'Rear Left', 'Rear Right']


def load_telemetry(filename):
    """Load telemetry CSV file. Returns a list of rows, or None on error."""
    try:
        data = []
        with open(filename, 'r', newline='') as f:
            reader = csv.DictReader(f)
            for row in reader:
                # Convert numeric fields
                for key in row:
                    try:
                        row[key] = float(row[key])
                    except (TypeError, ValueError):
                        pass
                data.append(row)
    except FileNotFoundError:
        print(f"✗ File not found: {filename}")
        return None
    except (OSError, csv.Error) as e:
        print(f"✗ Error loading file: {e}")
        return None

    if not data:
        print(f"✗ No telemetry rows in: {filename}")
        return None

    print(f"✓ Loaded telemetry: {filename}")
    print(f"  Total frames: {len(data)}")
    print(f"  Duration: {data[-1]['time'] - data[0]['time']:.2f} s")
    return data


def count_shifts(data):
    """(upshifts, downshifts) seen in the gear column."""
    ups = downs = 0
    for prev, row in zip(data, data[1:]):
        if row['gear'] > prev['gear']:
            ups += 1
        elif row['gear'] < prev['gear']:
            downs += 1
    return ups, downs


def analyze_summary(data):
    """Print summary statistics."""
    print("\n" + "="*60)
    print("SUMMARY STATISTICS")
    print("="*60)

    # Speed
    speeds = [row['speed_kmh'] for row in data]
    print(f"\nSpeed (km/h):")
    print(f"  Mean: {statistics.mean(speeds):.2f}")
    print(f"  Max: {max(speeds):.2f}")
    print(f"  Min: {min(speeds):.2f}")

    # Drivetrain
    rpms = [row['rpm'] for row in data]
    ups, downs = count_shifts(data)
    print(f"\nDrivetrain:")
    print(f"  RPM mean: {statistics.mean(rpms):.0f}, max: {max(rpms):.0f}")
    print(f"  Highest gear: {int(max(row['gear'] for row in data))}")
    print(f"  Upshifts: {ups}, downshifts: {downs}")

    # Steering
    steering = [row['steering'] for row in data]
    print(f"\nSteering (rad):")
    print(f"  Mean: {statistics.mean(steering):.4f}")
    print(f"  Std: {statistics.stdev(steering) if len(steering) > 1 else 0:.4f}")
    print(f"  Max left: {max(steering):.4f}")
    print(f"  Max right: {min(steering):.4f}")

    # Pedals
    gas_count = sum(1 for row in data if row['throttle'] > 0 and row['brake'] == 0)
    brake_count = sum(1 for row in data if row['brake'] > 0)
    coast_count = len(data) - gas_count - brake_count
    print(f"\nPedals:")
    print(f"  Gas frames: {gas_count} ({gas_count/len(data)*100:.1f}%)")
    print(f"  Brake frames: {brake_count} ({brake_count/len(data)*100:.1f}%)")
    print(f"  Coast frames: {coast_count} ({coast_count/len(data)*100:.1f}%)")


def analyze_wheels(data):
    """Analyze wheel telemetry."""
    print("\n" + "="*60)
    print("WHEEL ANALYSIS")
    print("="*60)

    for wheel, name in zip(WHEELS, WHEEL_LABELS):
        print(f"\n{name} ({wheel.upper()}):")

        sa_values = [abs(row[f'{wheel}_slip_angle']) * 180 / math.pi for row in data]
        print(f"  Slip Angle: mean={statistics.mean(sa_values):.2f}°, max={max(sa_values):.2f}°")

        sr_values = [abs(row[f'{wheel}_slip_ratio']) for row in data]
        print(f"  Slip Ratio: mean={statistics.mean(sr_values):.3f}, max={max(sr_values):.3f}")

        nf_values = [row[f'{wheel}_normal_force'] / 1000.0 for row in data]
        print(f"  Load: mean={statistics.mean(nf_values):.2f}kN, max={max(nf_values):.2f}kN, min={min(nf_values):.2f}kN")

        susp_values = [row[f'{wheel}_suspension_length'] * 1000.0 for row in data]
        print(f"  Suspension: mean={statistics.mean(susp_values):.1f}mm, max={max(susp_values):.1f}mm, min={min(susp_values):.1f}mm")


def analyze_suspension(data):
    """Analyze suspension behavior."""
    print("\n" + "="*60)
    print("SUSPENSION DYNAMICS")
    print("="*60)

    # Longer suspension means less load; right minus left is positive when leaning left
    front_roll = [(row['fr_suspension_length'] - row['fl_suspension_length']) * 1000.0 / 2.0 for row in data]
    rear_roll = [(row['rr_suspension_length'] - row['rl_suspension_length']) * 1000.0 / 2.0 for row in data]
    print(f"\nBody Roll (suspension difference):")
    print(f"  Front: mean={statistics.mean(front_roll):.2f}mm, max={max(front_roll, key=abs):.2f}mm")
    print(f"  Rear: mean={statistics.mean(rear_roll):.2f}mm, max={max(rear_roll, key=abs):.2f}mm")

    pitch_diff = [((row['fl_suspension_length'] + row['fr_suspension_length']) / 2.0 -
                   (row['rl_suspension_length'] + row['rr_suspension_length']) / 2.0) * 1000.0
                  for row in data]
    print(f"\nBody Pitch (front-rear difference):")
    print(f"  Mean: {statistics.mean(pitch_diff):.2f}mm")
    print(f"  Max nose-down: {min(pitch_diff):.2f}mm")
    print(f"  Max nose-up: {max(pitch_diff):.2f}mm")


def find_interesting_moments(data):
    """Find interesting moments in the telemetry."""
    print("\n" + "="*60)
    print("INTERESTING MOMENTS")
    print("="*60)

    max_speed_row = max(data, key=lambda r: r['speed_kmh'])
    print(f"\nMax Speed: {max_speed_row['speed_kmh']:.2f} km/h")
    print(f"  Time: {max_speed_row['time']:.2f} s")
    print(f"  Gear: {int(max_speed_row['gear'])}")

    for wheel in WHEELS:
        sa_col = f'{wheel}_slip_angle'
        max_sa_row = max(data, key=lambda r: abs(r[sa_col]))
        max_sa = max_sa_row[sa_col] * 180 / math.pi
        if abs(max_sa) > 5:
            print(f"\nMax Slip Angle ({wheel.upper()}): {max_sa:+.2f}°")
            print(f"  Time: {max_sa_row['time']:.2f} s")
            print(f"  Speed: {max_sa_row['speed_kmh']:.2f} km/h")

    for wheel in WHEELS:
        nf_col = f'{wheel}_normal_force'
        min_nf_row = min(data, key=lambda r: r[nf_col])
        min_nf = min_nf_row[nf_col] / 1000.0
        if min_nf < 1.5:
            print(f"\nMin Load ({wheel.upper()}): {min_nf:.2f} kN")
            print(f"  Time: {min_nf_row['time']:.2f} s")
            print(f"  Speed: {min_nf_row['speed_kmh']:.2f} km/h")


def plot_telemetry(data, output=None):
    """Speed, RPM/gear and per-wheel load over time."""
    import matplotlib.pyplot as plt

    t = [row['time'] for row in data]
    fig, (ax1, ax2, ax3) = plt.subplots(3, 1, figsize=(12, 10), sharex=True)

    ax1.plot(t, [row['speed_kmh'] for row in data], 'b-', linewidth=2)
    ax1.set_ylabel('Speed (km/h)', fontsize=12)
    ax1.grid(True, alpha=0.3)

    ax2.plot(t, [row['rpm'] for row in data], 'r-', linewidth=2, label='RPM')
    ax2.set_ylabel('Engine Speed (RPM)', fontsize=12, color='r')
    ax2_gear = ax2.twinx()
    ax2_gear.step(t, [row['gear'] for row in data], 'g-', where='post', label='Gear')
    ax2_gear.set_ylabel('Gear', fontsize=12, color='g')
    ax2.grid(True, alpha=0.3)

    for wheel, name in zip(WHEELS, WHEEL_LABELS):
        ax3.plot(t, [row[f'{wheel}_normal_force'] for row in data], label=name)
    ax3.set_xlabel('Time (s)', fontsize=12)
    ax3.set_ylabel('Normal Load (N)', fontsize=12)
    ax3.legend(loc='best')
    ax3.grid(True, alpha=0.3)

    plt.tight_layout()
    if output:
        plt.savefig(output, dpi=150, bbox_inches='tight')
        print(f"\n✓ Plot saved to: {output}")
    else:
        plt.show()
    plt.close(fig)


def main():
    parser = argparse.ArgumentParser(description='Analyze telemetry data from play_human.py')
    parser.add_argument('filename', type=str, help='CSV telemetry file to analyze')
    parser.add_argument('--summary', action='store_true', help='Show summary statistics (default if no flags)')
    parser.add_argument('--wheels', action='store_true', help='Show wheel analysis')
    parser.add_argument('--suspension', action='store_true', help='Show suspension dynamics')
    parser.add_argument('--moments', action='store_true', help='Find interesting moments')
    parser.add_argument('--all', action='store_true', help='Show all analyses')
    parser.add_argument('--plot', action='store_true', help='Plot speed, RPM and wheel loads')
    parser.add_argument('--output', type=str, default=None, help='Save the plot to a file instead of showing it')

    args = parser.parse_args()

    data = load_telemetry(args.filename)
    if data is None:
        return

    # If no specific analysis requested, show summary
    show_all = args.all or not (args.summary or args.wheels or args.suspension or args.moments)

    if show_all or args.summary:
        analyze_summary(data)

    if show_all or args.wheels:
        analyze_wheels(data)

    if show_all or args.suspension:
        analyze_suspension(data)

    if show_all or args.moments:
        find_interesting_moments(data)

    if args.plot:
        plot_telemetry(data, args.output)

    print("\n" + "="*60)
    print("Analysis complete!")
    print("="*60)


if __name__ == '__main__':
    main()
