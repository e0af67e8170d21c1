"""
Human-controlled vehicle simulation with arcade-style keyboard controls.

This script uses Pygame to handle continuous key presses (key-down) and key
releases, feeds them to VehicleSimulation every frame with the measured
frame time, and draws a top-down view with a HUD.

Usage:
    python play_human.py
    python play_human.py --preset sport --log
    python play_human.py --log --log-file session.csv --log-interval 5

Controls:
    - Steering:   A/Q/Left, D/Right
    - Gas:        W, Z, Up Arrow
    - Brake:      S, Down Arrow, Space
    - Reset:      R
    - Quit:       ESC
"""

import argparse
import math
import time

import numpy as np
import pygame

from config.physics_config import PRESET_NAMES, get_vehicle_config
from telemetry.logger import TelemetryLogger
from utils.display import format_controls, format_gear
from vehicle.car_dynamics import VehicleSimulation
from vehicle.controls import RawInput
from vehicle.state import heading_vectors, wheel_offsets

SCREEN_W, SCREEN_H = 900, 700
INFO_AREA_HEIGHT = 110
PIXELS_PER_METER = 12.0
GRID_SPACING = 10.0  # m

ACCELERATE_KEYS = (pygame.K_w, pygame.K_z, pygame.K_UP)
BRAKE_KEYS = (pygame.K_s, pygame.K_DOWN, pygame.K_SPACE)
LEFT_KEYS = (pygame.K_a, pygame.K_q, pygame.K_LEFT)
RIGHT_KEYS = (pygame.K_d, pygame.K_RIGHT)


def parse_args():
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description='Drive the vehicle simulation as a human')
    parser.add_argument('--preset', choices=PRESET_NAMES, default='stock',
                        help='Vehicle configuration preset (default: stock)')
    parser.add_argument('--fps', type=int, default=60,
                        help='Display FPS (default: 60)')
    parser.add_argument('--log', action='store_true',
                        help='Log telemetry to CSV')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Telemetry CSV filename (default: telemetry_<timestamp>.csv)')
    parser.add_argument('--log-interval', type=int, default=1,
                        help='Log every N frames (default: 1)')
    return parser.parse_args()


def read_keys(keys):
    """Map the pygame key-down state to the four logical controls."""
    return RawInput(
        accelerate=any(keys[k] for k in ACCELERATE_KEYS),
        brake=any(keys[k] for k in BRAKE_KEYS),
        steer_left=any(keys[k] for k in LEFT_KEYS),
        steer_right=any(keys[k] for k in RIGHT_KEYS),
    )


def world_to_screen(point, camera):
    """
    Project a world (x, z) point onto the screen, camera-centred.

    Forward at yaw 0 (+z) points up the screen and +x (left of the car at
    yaw 0) points to the screen's left.
    """
    cx = SCREEN_W / 2
    cy = INFO_AREA_HEIGHT + (SCREEN_H - INFO_AREA_HEIGHT) / 2
    return (cx - (point[0] - camera[0]) * PIXELS_PER_METER,
            cy - (point[2] - camera[2]) * PIXELS_PER_METER)


def draw_grid(screen, camera):
    """Ground grid so motion is visible."""
    half_w = SCREEN_W / PIXELS_PER_METER / 2
    half_h = SCREEN_H / PIXELS_PER_METER / 2
    color = (60, 60, 60)

    x = math.floor((camera[0] - half_w) / GRID_SPACING) * GRID_SPACING
    while x <= camera[0] + half_w:
        top = world_to_screen((x, 0.0, camera[2] + half_h), camera)
        bottom = world_to_screen((x, 0.0, camera[2] - half_h), camera)
        pygame.draw.line(screen, color, top, bottom)
        x += GRID_SPACING

    z = math.floor((camera[2] - half_h) / GRID_SPACING) * GRID_SPACING
    while z <= camera[2] + half_h:
        left = world_to_screen((camera[0] + half_w, 0.0, z), camera)
        right = world_to_screen((camera[0] - half_w, 0.0, z), camera)
        pygame.draw.line(screen, color, left, right)
        z += GRID_SPACING


def draw_vehicle(screen, snapshot, config):
    """Body outline plus the four wheels at their steer angles."""
    camera = snapshot.position
    forward, left = heading_vectors(snapshot.yaw)
    length = config.vehicle.WHEELBASE + 1.6
    width = config.vehicle.TRACK_WIDTH + 0.2

    def body_point(x, y):
        return world_to_screen(snapshot.position + forward * x + left * y, camera)

    hull = [body_point(length / 2, width / 2), body_point(length / 2, -width / 2),
            body_point(-length / 2, -width / 2), body_point(-length / 2, width / 2)]
    pygame.draw.polygon(screen, (200, 30, 30), hull)

    x_pos, y_pos = wheel_offsets(config.vehicle.WHEELBASE, config.vehicle.TRACK_WIDTH)
    half_tire = config.tire.WHEEL_RADIUS
    for i in range(4):
        steer = snapshot.wheel_steer_angle[i]
        dx = math.cos(steer) * half_tire
        dy = math.sin(steer) * half_tire
        # Tire color shows slip: white when gripping, yellow when saturated
        slip = min(1.0, abs(snapshot.slip_ratio[i]))
        color = (255, 255, int(255 * (1.0 - slip)))
        pygame.draw.line(screen, color,
                         body_point(x_pos[i] + dx, y_pos[i] + dy),
                         body_point(x_pos[i] - dx, y_pos[i] - dy), 4)


def render_info(screen, font, snapshot, preset, fps):
    """Render text overlay onto the pygame screen."""
    w, _ = screen.get_size()
    screen.fill((0, 0, 0), (0, 0, w, INFO_AREA_HEIGHT))

    def draw_text(text, y, color=(255, 255, 255)):
        text_surf = font.render(text, True, color)
        screen.blit(text_surf, (10, y))

    def draw_text_right(text, y, color=(255, 255, 255)):
        text_surf = font.render(text, True, color)
        screen.blit(text_surf, (w - text_surf.get_width() - 10, y))

    draw_text(f"VEHICLE SIMULATION ({preset})", 10, (0, 255, 100))
    draw_text(f"Controls: {format_controls(snapshot)}", 30, (0, 255, 0))
    draw_text(f"Gear: {format_gear(snapshot.gear, snapshot.engine_rpm)}", 50)
    draw_text("W/Z/Up gas | S/Down/Space brake | A/Q/D steer | R reset | ESC quit", 80, (100, 100, 255))

    draw_text_right(f"Speed: {snapshot.speed_kmh:.1f} km/h", 10, (255, 255, 100))
    draw_text_right(f"Torque: {snapshot.engine_torque:.0f} Nm", 30)
    draw_text_right(f"Time: {snapshot.time:.1f} s  FPS: {fps:.0f}", 50)


def play_human(args):
    """Drive the vehicle with the keyboard until ESC or window close."""
    config = get_vehicle_config(args.preset)
    sim = VehicleSimulation(config)

    pygame.init()
    pygame.font.init()
    font = pygame.font.Font(None, 24)
    screen = pygame.display.set_mode((SCREEN_W, SCREEN_H))
    pygame.display.set_caption("Vehicle Simulation - Human Player")
    clock = pygame.time.Clock()

    logger = None
    if args.log:
        logger = TelemetryLogger(args.log_file, args.log_interval)

    print("=" * 60)
    print("VEHICLE SIMULATION - HUMAN PLAYER (Arcade Controls)")
    print("=" * 60)
    print(f"Preset: {args.preset}")
    print(f"Mass: {config.vehicle.MASS:.0f} kg, gears: {len(config.drivetrain.GEAR_RATIOS)}")
    if logger:
        print(f"Telemetry: {logger.filename} (every {args.log_interval} frame(s))")
    print("=" * 60)
    print("\nKEYBOARD CONTROLS:")
    print("  - Steering:   A / Q / Left, D / Right")
    print("  - Gas:        W / Z or Up Arrow")
    print("  - Brake:      S / Down Arrow / Space")
    print("  - Reset:      R")
    print("  - Quit:       ESC")
    print("=" * 60)

    top_speed = 0.0
    last_time = time.perf_counter()
    running = True

    try:
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                if event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_r:
                        print("Resetting vehicle...")
                        sim.reset()
            if not running:
                break

            now = time.perf_counter()
            dt = now - last_time
            last_time = now

            raw = read_keys(pygame.key.get_pressed())
            snapshot = sim.tick(dt, raw)
            top_speed = max(top_speed, snapshot.speed_kmh)

            if logger:
                logger.log_frame(snapshot)

            screen.fill((25, 25, 25))
            draw_grid(screen, snapshot.position)
            draw_vehicle(screen, snapshot, config)
            render_info(screen, font, snapshot, args.preset, clock.get_fps())
            pygame.display.flip()

            clock.tick(args.fps)

    except KeyboardInterrupt:
        print("\nInterrupted by user")
    finally:
        if logger:
            logger.close()
        pygame.quit()

    final = sim.get_state()
    distance = float(np.linalg.norm(final.position - np.array(config.spawn.POSITION)))
    print("\n" + "=" * 60)
    print("SESSION SUMMARY")
    print("=" * 60)
    print(f"Simulated time: {final.time:.1f} s")
    print(f"Top speed: {top_speed:.1f} km/h")
    print(f"Distance from spawn: {distance:.1f} m")
    print("=" * 60)


if __name__ == "__main__":
    args = parse_args()
    play_human(args)
