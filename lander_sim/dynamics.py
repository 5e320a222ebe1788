"""
Lunar Lander Simulation - Flight Dynamics

This module implements the fixed-step equations of motion:
- Descent engine thrust along body +Z: v += R(q)·ẑ · throttle · T / m · dt
- RCS strafe in the body XY plane: v += R(q)·(sx, sy, 0) · F / m · dt
- Gravity: v_z += g · dt
- RCS torque: ω += τ / (m · I_profile) · dt, then ω *= damping
- Kinematics: r += v · dt, q = q ⊗ q_xyz(ω · dt)

The terms are applied in exactly this order with the total mass taken at the
start of the tick. The step is a semi-implicit Euler scheme matched to the
30 Hz game loop, not an RK4 integrator.
"""

from typing import NamedTuple

import numpy as np

from . import constants as C
from .control import VerticalVelocityController
from .frames import (
    quaternion_multiply,
    quaternion_normalize,
    quaternion_from_euler_xyz,
    quaternion_to_rotation_matrix,
    compute_tilt
)
from .mass import compute_inertia, is_fuel_exhausted, update_fuel
from .state import VehicleState


class StepResult(NamedTuple):
    """Outcome of one dynamics step."""
    state: VehicleState
    throttle: float


def compute_thrust_acceleration(q: np.ndarray, throttle: float, m: float,
                                thrust: float = C.DCS_THRUST) -> np.ndarray:
    """
    Descent engine acceleration in landing-zone frame (m/s^2).

    Thrust acts along body +Z.
    """
    R = quaternion_to_rotation_matrix(q)
    return R @ C.BODY_Z_AXIS * throttle * thrust / m


def compute_strafe_acceleration(q: np.ndarray, strafe: np.ndarray, m: float,
                                thrust: float = C.RCS_THRUST) -> np.ndarray:
    """
    RCS translation acceleration in landing-zone frame (m/s^2).

    Args:
        q: Orientation quaternion
        strafe: [x, y] strafe command in body frame, each in [-1, 1]
        m: Total mass (kg)
    """
    R = quaternion_to_rotation_matrix(q)
    body = np.array([strafe[0], strafe[1], 0.0])
    return R @ body * thrust / m


def compute_gravity_acceleration() -> np.ndarray:
    """Constant lunar gravity along landing-zone Z (m/s^2)."""
    return np.array([0.0, 0.0, C.MOON_GRAVITY])


def compute_angular_acceleration(rotation: np.ndarray, m: float,
                                 torque: float = C.RCS_TORQUE) -> np.ndarray:
    """
    Angular acceleration from RCS torque commands (rad/s^2, body frame).

    Inertia is diagonal, so each axis is independent and there is no
    gyroscopic coupling term.

    Args:
        rotation: [pitch, roll, yaw] commands about body X, Y, Z in [-1, 1]
        m: Total mass (kg)
    """
    return np.asarray(rotation, dtype=np.float64) * torque / compute_inertia(m)


def apply_angular_damping(omega: np.ndarray,
                          damping: float = C.ANGULAR_DAMPING) -> np.ndarray:
    return omega * damping


def integrate_orientation(q: np.ndarray, omega: np.ndarray, dt: float) -> np.ndarray:
    """
    Advance orientation by one tick of body angular velocity.

    The increment is composed on the right (body frame): q = q ⊗ Δq.
    """
    increment = quaternion_from_euler_xyz(omega * dt)
    return quaternion_normalize(quaternion_multiply(q, increment))


def step(state: VehicleState, controller: VerticalVelocityController,
         controls, dt: float) -> StepResult:
    """
    Advance the lander by one fixed step.

    Args:
        state: Current vehicle state (not modified)
        controller: Rate-of-descent controller (its PID state advances)
        controls: ControlSnapshot with strafe [x, y] and rotation [pitch, roll, yaw]
        dt: Time step (s)

    Returns:
        StepResult(new state, throttle used this tick)
    """
    new = state.copy()
    m = state.total_mass
    throttle = 0.0

    # 1. Descent engine
    if not is_fuel_exhausted(new.fuel_mass):
        throttle = controller.compute_throttle(new.v[2], m, compute_tilt(new.q), dt)
        new.v = new.v + compute_thrust_acceleration(new.q, throttle, m) * dt
        new.fuel_mass = update_fuel(new.fuel_mass, throttle, dt)

    # 2. Strafe
    new.v = new.v + compute_strafe_acceleration(new.q, controls.strafe, m) * dt

    # 3. Gravity
    new.v = new.v + compute_gravity_acceleration() * dt

    # 4. Torque
    new.omega = new.omega + compute_angular_acceleration(controls.rotation, m) * dt

    # 5. Damping
    new.omega = apply_angular_damping(new.omega)

    # 6. Kinematics
    new.r = new.r + new.v * dt
    new.q = integrate_orientation(new.q, new.omega, dt)
    new.t = state.t + dt

    return StepResult(new, throttle)
