"""
Lunar Lander Simulation - Lander

Couples the vehicle state with its rate-of-descent controller and exposes
the per-tick operations used by the game loop.
"""

import logging
from typing import Optional

import numpy as np

from . import constants as C
from .control import VerticalVelocityController
from .controls import ControlSnapshot
from .dynamics import step as dynamics_step
from .landing import LandingReport, LandingThresholds, evaluate
from .state import VehicleState, create_initial_state
from .types import TelemetryFrame
from .validation import validate_state

logger = logging.getLogger(__name__)


class Lander:
    """
    A lunar module in flight over the landing zone.

    Args:
        position: Start position in the landing-zone frame (m)
        vertical_velocity: Initial vertical velocity (m/s)
        target: Initial vertical velocity target (m/s)
        landing_zone_radius: Radius used for the distance criterion (m)
        controller: Optional preconfigured controller
    """

    def __init__(self, position: np.ndarray,
                 vertical_velocity: float = C.INIT_VERTICAL_VELOCITY,
                 target: float = C.INIT_VERTICAL_VELOCITY_TARGET,
                 landing_zone_radius: float = C.LANDING_ZONE_RADIUS,
                 controller: Optional[VerticalVelocityController] = None):
        self.state = create_initial_state(position, vertical_velocity)
        self.controller = controller if controller is not None else VerticalVelocityController(target)
        self.landing_zone_radius = landing_zone_radius
        self.throttle = 0.0

    @classmethod
    def from_config(cls, position: np.ndarray, config) -> 'Lander':
        controller = VerticalVelocityController(
            config.init_vertical_velocity_target,
            kp=config.kp, ki=config.ki, kd=config.kd,
            target_range=config.vertical_velocity_target_range,
        )
        return cls(position,
                   vertical_velocity=config.init_vertical_velocity,
                   landing_zone_radius=config.landing_zone_radius,
                   controller=controller)

    def step(self, dt: float, controls: Optional[ControlSnapshot] = None) -> VehicleState:
        """
        Apply the operator target delta, then advance the dynamics one tick.

        Raises:
            ValidationError: If the new state fails validation; the lander
                keeps its previous state
        """
        if controls is None:
            controls = ControlSnapshot.idle()
        self.controller.adjust_target(controls.target_delta)
        result = dynamics_step(self.state, self.controller, controls, dt)
        validate_state(result.state, self.state)
        self.state = result.state
        self.throttle = result.throttle
        return self.state

    def has_landed(self) -> bool:
        return self.state.r[2] <= 0.0

    def stop(self):
        """Freeze the lander in place after touchdown."""
        self.state.v = np.zeros(3)
        self.state.omega = np.zeros(3)
        self.throttle = 0.0

    def evaluate(self, thresholds: Optional[LandingThresholds] = None,
                 rng: Optional[np.random.Generator] = None) -> LandingReport:
        return evaluate(self.state, thresholds, self.landing_zone_radius, rng)

    def telemetry(self) -> TelemetryFrame:
        s = self.state
        return {
            'time': s.t,
            'position': s.r.copy(),
            'velocity': s.v.copy(),
            'orientation': s.q.copy(),
            'angular_velocity': s.omega.copy(),
            'fuel_mass': s.fuel_mass,
            'throttle': self.throttle,
            'vertical_velocity_target': self.controller.target,
            'tilt': s.tilt,
            'course': -s.r,
        }

    def __str__(self) -> str:
        return f"Lander({self.state}, target={self.controller.target:+.1f}m/s)"
