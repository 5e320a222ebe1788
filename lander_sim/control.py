"""
Lunar Lander Simulation - Rate-of-Descent Control

This module implements the descent engine throttle loop:
- Scalar PID law on vertical velocity error
- Signed gravity term (MOON_GRAVITY + control)
- Tilt compensation (thrust projected on the vertical)
- Throttle saturation to [0, 1]
"""

import logging
from typing import Optional, Tuple

import numpy as np

from . import constants as C
from .types import ControlOutput

logger = logging.getLogger(__name__)


class PidController:
    """
    Scalar PID controller.

    No anti-windup: the integral accumulates freely while the throttle is
    saturated.
    """

    def __init__(self, kp: float, ki: float, kd: float):
        self.kp = kp
        self.ki = ki
        self.kd = kd
        self.integral = 0.0
        self.prev_error = 0.0

    def update(self, setpoint: float, measured: float, dt: float) -> float:
        """
        Advance the PID one step.

        Args:
            setpoint: Desired value
            measured: Current value
            dt: Time step (s), must be positive

        Returns:
            kp*e + ki*integral + kd*derivative
        """
        if not dt > 0:
            raise ValueError(f"PID time step must be positive, got {dt}")

        error = setpoint - measured
        self.integral += error * dt
        derivative = (error - self.prev_error) / dt
        self.prev_error = error

        return self.kp * error + self.ki * self.integral + self.kd * derivative

    def reset(self):
        self.integral = 0.0
        self.prev_error = 0.0


class VerticalVelocityController:
    """
    Holds a target vertical velocity by commanding descent engine throttle.

    The operator nudges the target with adjust_target(); everything else is
    closed loop.
    """

    def __init__(self, target: float, thrust: float = C.DCS_THRUST,
                 kp: float = C.KP_VERTICAL_VELOCITY,
                 ki: float = C.KI_VERTICAL_VELOCITY,
                 kd: float = C.KD_VERTICAL_VELOCITY,
                 target_range: Optional[Tuple[float, float]] = None):
        self.pid = PidController(kp, ki, kd)
        self.thrust = thrust
        self.target_range = target_range
        self._target = self._bounded(target)

    def _bounded(self, target: float) -> float:
        if self.target_range is None:
            return target
        low, high = self.target_range
        return min(max(target, low), high)

    @property
    def target(self) -> float:
        """Target vertical velocity (m/s, +Z up)."""
        return self._target

    def adjust_target(self, delta: float) -> float:
        """
        Shift the target vertical velocity.

        Returns:
            New target (clamped to target_range when one is set)
        """
        if delta:
            self._target = self._bounded(self._target + delta)
            logger.info(f"Vertical velocity target: {self._target:+.1f} m/s")
        return self._target

    def compute_throttle(self, current: float, mass: float, tilt: float,
                         dt: float) -> float:
        """
        Throttle in [0, 1] needed to drive vertical velocity to target.

        throttle = mass * (g + u) / (thrust * cos(tilt)), g = MOON_GRAVITY

        Args:
            current: Current vertical velocity (m/s)
            mass: Total vehicle mass (kg)
            tilt: Tilt from upright (rad)
            dt: Time step (s)

        Returns:
            Throttle command, clipped to [0, 1]
        """
        return self.compute(current, mass, tilt, dt)['throttle']

    def compute(self, current: float, mass: float, tilt: float,
                dt: float) -> ControlOutput:
        """Same as compute_throttle but also returns the loop internals."""
        control = self.pid.update(self._target, current, dt)
        total_acceleration = C.MOON_GRAVITY + control
        force = mass * total_acceleration
        vertical_thrust = self.thrust * np.cos(tilt)

        with np.errstate(divide='ignore', invalid='ignore'):
            raw = force / vertical_thrust if abs(vertical_thrust) >= C.MIN_VERTICAL_THRUST else np.nan

        if not np.isfinite(raw):
            # Engine cannot act on the vertical (tilted ~90 deg)
            throttle = 1.0 if force > 0 else 0.0
            saturated = True
        else:
            throttle = float(np.clip(raw, 0.0, 1.0))
            saturated = bool(throttle != raw)

        return {
            'throttle': throttle,
            'target': self._target,
            'error': self._target - current,
            'control': control,
            'required_force': force,
            'saturated': saturated,
        }

    def reset(self):
        self.pid.reset()
