"""
Lunar Lander Simulation - Vehicle State

This module defines the single vehicle state dataclass that contains all
mutable lander variables. Engine, RCS and inertia figures are vehicle
constants and live in constants.py.
"""

from dataclasses import dataclass, field
import numpy as np

from . import constants as C
from .frames import compute_tilt


@dataclass
class VehicleState:
    """
    Vehicle state for the lunar lander.

    Attributes:
        r: Position in landing-zone frame (m) [3], +Z up
        v: Velocity in landing-zone frame (m/s) [3]
        q: Orientation quaternion [w, x, y, z] (unit quaternion)
        omega: Angular velocity in body frame (rad/s) [3]
        dry_mass: Descent stage structure (kg)
        payload_mass: Ascent stage and its fuel (kg)
        fuel_mass: Remaining descent fuel (kg), never negative
        t: Simulation time (s)
    """

    r: np.ndarray = field(default_factory=lambda: np.zeros(3))
    v: np.ndarray = field(default_factory=lambda: np.zeros(3))
    q: np.ndarray = field(default_factory=lambda: np.array([1.0, 0.0, 0.0, 0.0]))
    omega: np.ndarray = field(default_factory=lambda: np.zeros(3))
    dry_mass: float = C.DRY_MASS
    payload_mass: float = C.PAYLOAD_MASS
    fuel_mass: float = C.INITIAL_FUEL_MASS
    t: float = 0.0

    def __post_init__(self):
        """Ensure arrays are numpy arrays with correct dtype."""
        for attr in ['r', 'v', 'q', 'omega']:
            setattr(self, attr, np.asarray(getattr(self, attr), dtype=np.float64))
        self.fuel_mass = float(self.fuel_mass)

    def copy(self) -> 'VehicleState':
        """Create a deep copy of the state."""
        return VehicleState(
            r=self.r.copy(),
            v=self.v.copy(),
            q=self.q.copy(),
            omega=self.omega.copy(),
            dry_mass=self.dry_mass,
            payload_mass=self.payload_mass,
            fuel_mass=self.fuel_mass,
            t=self.t
        )

    @property
    def total_mass(self) -> float:
        """Dry + payload + remaining fuel (kg)."""
        return self.dry_mass + self.payload_mass + self.fuel_mass

    @property
    def altitude(self) -> float:
        """Height above the landing-zone surface (m)."""
        return float(self.r[2])

    @property
    def vertical_speed(self) -> float:
        """Vertical speed magnitude (m/s)."""
        return float(abs(self.v[2]))

    @property
    def horizontal_speed(self) -> float:
        """Horizontal speed magnitude (m/s)."""
        return float(np.hypot(self.v[0], self.v[1]))

    @property
    def tilt(self) -> float:
        """Tilt from upright (rad)."""
        return compute_tilt(self.q)

    @property
    def angular_speed(self) -> float:
        """Magnitude of angular velocity (rad/s)."""
        return float(np.linalg.norm(self.omega))

    @property
    def distance_from_landing_zone(self) -> float:
        """Planar distance from the landing-zone center (m)."""
        return float(np.hypot(self.r[0], self.r[1]))

    def __str__(self) -> str:
        """Human-readable state summary."""
        return (
            f"VehicleState(t={self.t:.2f}s, "
            f"alt={self.altitude:.1f}m, "
            f"vz={self.v[2]:.2f}m/s, "
            f"fuel={self.fuel_mass:.1f}kg)"
        )


def create_initial_state(position: np.ndarray,
                         vertical_velocity: float = C.INIT_VERTICAL_VELOCITY) -> VehicleState:
    """
    Create the state for the start of a round.

    Args:
        position: Start position in landing-zone frame (m), from the terrain
        vertical_velocity: Initial vertical velocity (m/s)

    Returns:
        VehicleState upright, with a full descent fuel reserve.
    """
    return VehicleState(
        r=np.array(position, dtype=np.float64),
        v=np.array([0.0, 0.0, vertical_velocity]),
        q=C.INITIAL_QUATERNION.copy(),
        omega=C.INITIAL_OMEGA.copy(),
        fuel_mass=C.INITIAL_FUEL_MASS,
        t=0.0
    )
