"""
Lunar Lander Descent Visualization Module.

Plots the telemetry of a single round: altitude, vertical velocity against
the operator target, throttle, fuel, attitude and the ground track over the
generated terrain.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend for batch processing
import matplotlib.pyplot as plt
import numpy as np

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from lander_sim import constants as C
from lander_sim.main import run_simulation


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DescentData:
    """Container for processed telemetry used in plotting.

    Attributes:
        time: Time array in seconds
        position: Position [n x 3] in the landing-zone frame (m)
        velocity: Velocity [n x 3] in the landing-zone frame (m/s)
        omega: Body angular velocity [n x 3] (rad/s)
        fuel: Remaining descent fuel (kg)
        throttle: Throttle command (0-1)
        target: Vertical velocity target (m/s)
        tilt_deg: Tilt from upright (deg)
        distance: Planar distance to the landing zone center (m)
    """
    time: np.ndarray
    position: np.ndarray
    velocity: np.ndarray
    omega: np.ndarray
    fuel: np.ndarray
    throttle: np.ndarray
    target: np.ndarray
    tilt_deg: np.ndarray
    distance: np.ndarray

    @property
    def altitude(self) -> np.ndarray:
        return self.position[:, 2]

    @property
    def horizontal_speed(self) -> np.ndarray:
        return np.hypot(self.velocity[:, 0], self.velocity[:, 1])


# =============================================================================
# Configuration
# =============================================================================

def configure_plot_style() -> None:
    """Configure matplotlib defaults for telemetry plots."""
    plt.rcParams.update({
        'figure.figsize': (10, 6),
        'figure.dpi': 100,
        'savefig.dpi': 150,
        'axes.grid': True,
        'axes.axisbelow': True,
        'grid.alpha': 0.3,
        'font.size': 11,
        'axes.titlesize': 13,
        'axes.labelsize': 12,
        'legend.fontsize': 10,
        'lines.linewidth': 1.8,
        'xtick.direction': 'in',
        'ytick.direction': 'in',
    })


# =============================================================================
# Data Processing
# =============================================================================

def extract_log_data(log) -> DescentData:
    """Extract simulation log data for plotting.

    Raises:
        ValueError: If the log holds no samples
    """
    if len(log.time) == 0:
        raise ValueError("Simulation log is empty")

    def stack(*series):
        return np.column_stack([np.asarray(s, dtype=float) for s in series])

    return DescentData(
        time=np.asarray(log.time, dtype=float),
        position=stack(log.position_x, log.position_y, log.position_z),
        velocity=stack(log.velocity_x, log.velocity_y, log.velocity_z),
        omega=stack(log.omega_x, log.omega_y, log.omega_z),
        fuel=np.asarray(log.fuel_mass, dtype=float),
        throttle=np.asarray(log.throttle, dtype=float),
        target=np.asarray(log.vertical_velocity_target, dtype=float),
        tilt_deg=np.asarray(log.tilt_deg, dtype=float),
        distance=np.asarray(log.distance_to_zone, dtype=float),
    )


def _save(fig, output_dir: str, name: str) -> str:
    plt.tight_layout()
    path = os.path.join(output_dir, name)
    fig.savefig(path, bbox_inches='tight')
    plt.close(fig)
    return path


# =============================================================================
# Plots
# =============================================================================

def plot_altitude_profile(data: DescentData, output_dir: str) -> str:
    """Altitude above the landing zone surface vs time."""
    fig, ax = plt.subplots()
    ax.fill_between(data.time, 0, data.altitude, alpha=0.25, color='#1f77b4')
    ax.plot(data.time, data.altitude, 'b-', label='Altitude')
    ax.scatter([data.time[-1]], [data.altitude[-1]], c='red', s=80, marker='x',
               zorder=5, label=f'Final ({data.altitude[-1]:.1f} m)')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Altitude (m)')
    ax.set_title('Altitude Profile', fontweight='bold')
    ax.legend(loc='upper right')
    return _save(fig, output_dir, '01_altitude_profile.png')


def plot_vertical_velocity(data: DescentData, output_dir: str) -> str:
    """Vertical velocity against the controller target."""
    fig, ax = plt.subplots()
    ax.plot(data.time, data.velocity[:, 2], 'b-', label='Vertical velocity')
    ax.plot(data.time, data.target, 'k--', label='Target')
    ax.axhspan(-C.MAX_VERTICAL_SPEED, C.MAX_VERTICAL_SPEED, color='green',
               alpha=0.1, label='Safe touchdown band')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Velocity (m/s)')
    ax.set_title('Rate of Descent', fontweight='bold')
    ax.legend(loc='lower right')
    return _save(fig, output_dir, '02_vertical_velocity.png')


def plot_throttle_history(data: DescentData, output_dir: str) -> str:
    fig, ax = plt.subplots()
    ax.plot(data.time, data.throttle, 'r-')
    ax.set_ylim(-0.05, 1.05)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Throttle (-)')
    ax.set_title('Descent Engine Throttle', fontweight='bold')
    return _save(fig, output_dir, '03_throttle.png')


def plot_fuel_profile(data: DescentData, output_dir: str) -> str:
    fig, ax = plt.subplots()
    ax.plot(data.time, data.fuel, 'g-')
    ax.set_ylim(0, None)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Fuel (kg)')
    ax.set_title('Descent Fuel Remaining', fontweight='bold')
    return _save(fig, output_dir, '04_fuel.png')


def plot_attitude(data: DescentData, output_dir: str) -> str:
    """Tilt and angular speed with their landing limits."""
    fig, (ax1, ax2) = plt.subplots(2, 1, sharex=True)
    ax1.plot(data.time, data.tilt_deg, 'm-')
    ax1.axhline(np.degrees(C.MAX_TILT), color='k', linestyle='--', label='Limit')
    ax1.set_ylabel('Tilt (deg)')
    ax1.legend(loc='upper right')
    ax2.plot(data.time, np.linalg.norm(data.omega, axis=1), 'c-')
    ax2.axhline(C.MAX_ANGULAR_SPEED, color='k', linestyle='--')
    ax2.set_ylabel('|omega| (rad/s)')
    ax2.set_xlabel('Time (s)')
    ax1.set_title('Attitude', fontweight='bold')
    return _save(fig, output_dir, '05_attitude.png')


def plot_ground_track(data: DescentData, output_dir: str, terrain=None) -> str:
    """Ground track in the landing-zone frame, over the terrain when given."""
    fig, ax = plt.subplots(figsize=(8, 8))
    x, y = data.position[:, 0], data.position[:, 1]

    if terrain is not None:
        zone = terrain.landing_zone
        z = terrain.height_map.z
        w = terrain.height_map.width
        # Terrain frame -> landing-zone frame
        extent = [-zone[0], w - 1 - zone[0], -zone[1], w - 1 - zone[1]]
        mesh = ax.imshow(z.T, origin='lower', extent=extent, cmap='gray')
        fig.colorbar(mesh, ax=ax, label='Height (m)')
        radius = terrain.radius
    else:
        radius = C.LANDING_ZONE_RADIUS

    ax.add_patch(plt.Circle((0.0, 0.0), radius, fill=False, color='yellow',
                            linewidth=2, label='Landing zone'))
    ax.plot(x, y, 'r-', label='Track')
    ax.scatter([x[0]], [y[0]], c='blue', s=60, zorder=5, label='Start')
    ax.scatter([x[-1]], [y[-1]], c='red', s=80, marker='x', zorder=5, label='Touchdown')
    ax.set_aspect('equal')
    ax.set_xlabel('X (m)')
    ax.set_ylabel('Y (m)')
    ax.set_title('Ground Track', fontweight='bold')
    ax.legend(loc='upper right')
    return _save(fig, output_dir, '06_ground_track.png')


def plot_dashboard(data: DescentData, output_dir: str) -> str:
    fig, axes = plt.subplots(2, 2, figsize=(12, 8))
    axes[0, 0].plot(data.time, data.altitude, 'b-')
    axes[0, 0].set_title('Altitude (m)')
    axes[0, 1].plot(data.time, data.velocity[:, 2], 'b-', label='v_z')
    axes[0, 1].plot(data.time, data.horizontal_speed, 'g-', label='|v_xy|')
    axes[0, 1].legend(loc='lower right')
    axes[0, 1].set_title('Velocity (m/s)')
    axes[1, 0].plot(data.time, data.throttle, 'r-')
    axes[1, 0].set_title('Throttle')
    axes[1, 1].plot(data.time, data.distance, 'k-')
    axes[1, 1].set_title('Distance to zone (m)')
    for ax in axes.flat:
        ax.set_xlabel('Time (s)')
    fig.suptitle('Descent Dashboard', fontweight='bold')
    return _save(fig, output_dir, '07_dashboard.png')


def generate_all_plots(log, output_dir: str = "plots", terrain=None) -> List[str]:
    """Generate all telemetry plots.

    Args:
        log: SimulationLog from a round
        output_dir: Directory to save plots (created if doesn't exist)
        terrain: Optional Terrain for the ground track background

    Returns:
        List of paths to saved plot files

    Example:
        >>> from lander_sim.main import run_simulation
        >>> from scripts.plot_generator import generate_all_plots
        >>> result = run_simulation()
        >>> generate_all_plots(result.log, "plots", result.terrain)
    """
    os.makedirs(output_dir, exist_ok=True)
    configure_plot_style()
    data = extract_log_data(log)

    saved_files = []
    plot_functions = [
        plot_altitude_profile,
        plot_vertical_velocity,
        plot_throttle_history,
        plot_fuel_profile,
        plot_attitude,
        plot_dashboard,
    ]
    for plot_func in plot_functions:
        saved_files.append(plot_func(data, output_dir))
    saved_files.append(plot_ground_track(data, output_dir, terrain))
    return saved_files


def main(output_dir: Optional[str] = None) -> None:
    """Run one headless round and plot it."""
    print("=" * 60)
    print("  Lunar Lander Descent Visualization")
    print("=" * 60)

    result = run_simulation(verbose=True)
    output_dir = output_dir or "plots"
    saved_files = generate_all_plots(result.log, output_dir, result.terrain)

    print(f"\nGenerated {len(saved_files)} plots in '{output_dir}/'")
    for i, path in enumerate(saved_files, 1):
        print(f"  {i:2d}. {os.path.basename(path)}")


if __name__ == "__main__":
    main()
