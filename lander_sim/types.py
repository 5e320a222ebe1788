"""
Lunar Lander Simulation - Type Definitions

This module provides TypedDict definitions for structured return types,
improving type safety and IDE support.
"""

from typing import List, Optional, TypedDict

import numpy as np
from numpy.typing import NDArray


class ControlOutput(TypedDict):
    """Return type for the rate-of-descent controller."""
    throttle: float  # Throttle command (0.0 to 1.0)
    target: float  # Target vertical velocity (m/s)
    error: float  # target - current (m/s)
    control: float  # PID output (m/s^2)
    required_force: float  # mass * (gravity + control) (N)
    saturated: bool  # Whether the throttle was clipped


class TelemetryFrame(TypedDict):
    """Per-tick telemetry record emitted to the sink."""
    time: float  # Simulation time (s)
    position: NDArray[np.float64]  # Landing-zone frame (m)
    velocity: NDArray[np.float64]  # Landing-zone frame (m/s)
    orientation: NDArray[np.float64]  # Quaternion [w, x, y, z]
    angular_velocity: NDArray[np.float64]  # Body frame (rad/s)
    fuel_mass: float  # kg
    throttle: float  # 0.0 to 1.0
    vertical_velocity_target: float  # m/s
    tilt: float  # rad
    course: NDArray[np.float64]  # Vector from lander to zone center (m)


class LandingCriterionDict(TypedDict):
    """One row of a landing report."""
    kind: str
    max: float
    actual: float
    ok: bool
    score: float


class LandingReportDict(TypedDict):
    """Plain-data landing report emitted once per round."""
    status: str  # LANDED, MISSED or CRASHED
    banner: str  # Display text for the status
    remark: str
    score: float
    first_failure: Optional[str]
    criteria: List[LandingCriterionDict]
