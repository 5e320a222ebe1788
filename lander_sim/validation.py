"""
Lunar Lander Simulation - Validation Checks

This module implements per-tick state validation checks:
- Finite position, velocity, orientation and angular velocity
- Fuel mass never negative
- Quaternion norm check
- Fuel monotonicity between ticks

A failure ends the round with a reason instead of letting NaN propagate.
"""

from typing import Optional

import numpy as np

from . import constants as C
from .state import VehicleState


class ValidationError(Exception):
    """Raised when a state validation check fails."""
    pass


def check_finite(state: VehicleState) -> bool:
    """
    Verify no state component is NaN or infinite.

    Returns:
        True if valid, raises ValidationError otherwise
    """
    for name in ('r', 'v', 'q', 'omega'):
        value = getattr(state, name)
        if not np.all(np.isfinite(value)):
            raise ValidationError(f"Non-finite {name}: {value}")
    if not np.isfinite(state.fuel_mass):
        raise ValidationError(f"Non-finite fuel mass: {state.fuel_mass}")
    return True


def check_fuel_valid(fuel_mass: float) -> bool:
    if fuel_mass < 0.0:
        raise ValidationError(f"Negative fuel mass: {fuel_mass:.6f} kg")
    return True


def check_fuel_monotonic(previous: float, current: float) -> bool:
    """Fuel may only stay the same or decrease."""
    if current > previous:
        raise ValidationError(
            f"Fuel mass increased: {previous:.6f} -> {current:.6f} kg"
        )
    return True


def check_quaternion_norm(q: np.ndarray, tolerance: float = None) -> bool:
    """
    Verify quaternion is unit-normalized.

    Args:
        q: Quaternion [w, x, y, z]
        tolerance: Allowable deviation from 1.0

    Returns:
        True if valid, raises ValidationError otherwise
    """
    if tolerance is None:
        tolerance = C.QUATERNION_NORM_TOL

    norm = np.linalg.norm(q)
    if abs(norm - 1.0) > tolerance:
        raise ValidationError(
            f"Quaternion norm violation: |q| = {norm:.10f}, "
            f"deviation = {abs(norm - 1.0):.2e}, tolerance = {tolerance:.2e}"
        )
    return True


def validate_state(state: VehicleState,
                   previous: Optional[VehicleState] = None) -> bool:
    """
    Run all state checks.

    Args:
        state: State after a tick
        previous: State before the tick, for monotonicity checks

    Raises:
        ValidationError: On the first failed check
    """
    check_finite(state)
    check_fuel_valid(state.fuel_mass)
    check_quaternion_norm(state.q)
    if previous is not None:
        check_fuel_monotonic(previous.fuel_mass, state.fuel_mass)
    return True
