"""
Lunar Lander Simulation - Fuel consumption and inertia computations.
"""

import numpy as np

from . import constants as C


def compute_fuel_consumed(throttle: float, dt: float,
                          burn_rate: float = C.FUEL_BURN_RATE) -> float:
    """
    Fuel burned over one step at the given throttle (kg).
    """
    return float(np.clip(throttle, 0.0, 1.0)) * burn_rate * dt


def update_fuel(fuel_mass: float, throttle: float, dt: float,
                burn_rate: float = C.FUEL_BURN_RATE) -> float:
    """
    Euler update for fuel mass, floored at zero.
    """
    return max(fuel_mass - compute_fuel_consumed(throttle, dt, burn_rate), 0.0)


def is_fuel_exhausted(fuel_mass: float) -> bool:
    """True if no descent fuel remains."""
    return fuel_mass <= 0.0


def get_fuel_fraction(fuel_mass: float) -> float:
    """
    Fraction of the initial descent fuel remaining.
    """
    return min(1.0, max(0.0, fuel_mass) / C.INITIAL_FUEL_MASS)


def compute_inertia(total_mass: float) -> np.ndarray:
    """
    Principal moments of inertia [Ixx, Iyy, Izz] in body frame (kg*m^2).

    The lander is modelled as a solid cylinder, so inertia scales linearly
    with total mass.
    """
    return total_mass * C.INERTIA_PROFILE
