"""
Lunar Lander Simulation - Configuration

This module provides a SimulationConfig dataclass for dependency injection,
allowing different round parameters to be passed without modifying global
constants.

Numeric knobs carry bounds. Each bound is a tagged variant (ParameterBound
with a ClampKind) so the clamping policy stays data-driven:
  - FIXED_RANGE: clamp to a constant [low, high]
  - FRACTION_OF: clamp to [low, fraction * <other parameter>]
  - NONE: pass through unchanged
"""

import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Dict, Optional, Tuple

import numpy as np

from . import constants as C

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when a configuration cannot produce a consistent round."""
    pass


@dataclass(frozen=True)
class SimulationConfig:
    """
    Immutable configuration for one round.

    Using frozen=True ensures configs cannot be accidentally modified.
    Create new configs via dataclass replace() if needed.

    Section grouping:
      1. Simulation timing
      2. Rate-of-descent controller
      3. Terrain
      4. Lander initial conditions
      5. Landing thresholds
      6. Input conditioning
      7. Seed
      8. Misc
    """

    # ── 1. Simulation timing ─────────────────────────────────────────────
    dt: float = C.DT
    max_time: float = C.MAX_TIME
    realtime: bool = False

    # ── 2. Rate-of-descent controller ────────────────────────────────────
    kp: float = C.KP_VERTICAL_VELOCITY
    ki: float = C.KI_VERTICAL_VELOCITY
    kd: float = C.KD_VERTICAL_VELOCITY
    # None leaves the operator target unbounded
    vertical_velocity_target_range: Optional[Tuple[float, float]] = None
    vertical_velocity_step: float = C.VERTICAL_VELOCITY_STEP

    # ── 3. Terrain ───────────────────────────────────────────────────────
    landscape_width: int = C.LANDSCAPE_WIDTH
    noise_scale: float = C.NOISE_SCALE
    z_scale: float = C.Z_SCALE
    landing_zone_radius: float = C.LANDING_ZONE_RADIUS
    landing_zone_min_distance: float = C.LANDING_ZONE_MIN_DISTANCE
    landing_zone_max_distance: float = C.LANDING_ZONE_MAX_DISTANCE

    # ── 4. Lander initial conditions ─────────────────────────────────────
    init_altitude: float = C.INIT_ALTITUDE
    init_vertical_velocity: float = C.INIT_VERTICAL_VELOCITY
    init_vertical_velocity_target: float = C.INIT_VERTICAL_VELOCITY_TARGET

    # ── 5. Landing thresholds ────────────────────────────────────────────
    max_vertical_speed: float = C.MAX_VERTICAL_SPEED
    max_horizontal_speed: float = C.MAX_HORIZONTAL_SPEED
    max_tilt: float = C.MAX_TILT
    max_angular_speed: float = C.MAX_ANGULAR_SPEED

    # ── 6. Input conditioning ────────────────────────────────────────────
    joystick_dead_zone: float = C.JOYSTICK_DEAD_ZONE
    button_repeat_interval: float = C.BUTTON_REPEAT_INTERVAL

    # ── 7. Seed ──────────────────────────────────────────────────────────
    seed: int = 0
    regenerate_seed: bool = True

    # ── 8. Misc ──────────────────────────────────────────────────────────
    verbose: bool = True

    @property
    def blend_radius(self) -> int:
        """Outer radius of the landing-zone blend ring (grid cells)."""
        return int(self.landing_zone_radius) + C.LANDING_ZONE_BLEND_MARGIN


class ClampKind(Enum):
    """Clamping strategy for a numeric parameter."""
    NONE = "none"
    FIXED_RANGE = "fixed_range"
    FRACTION_OF = "fraction_of"


@dataclass(frozen=True)
class ParameterBound:
    """Bound applied to one SimulationConfig field."""
    kind: ClampKind = ClampKind.NONE
    low: float = -np.inf
    high: float = np.inf
    reference: Optional[str] = None
    fraction: float = 1.0

    @classmethod
    def fixed(cls, low: float, high: float) -> 'ParameterBound':
        return cls(ClampKind.FIXED_RANGE, low=low, high=high)

    @classmethod
    def fraction_of(cls, reference: str, fraction: float,
                    low: float = 0.0) -> 'ParameterBound':
        return cls(ClampKind.FRACTION_OF, low=low, reference=reference,
                   fraction=fraction)

    def limits(self, config: SimulationConfig) -> Tuple[float, float]:
        """Resolve (low, high) against the current config."""
        if self.kind == ClampKind.FIXED_RANGE:
            return self.low, self.high
        if self.kind == ClampKind.FRACTION_OF:
            return self.low, self.fraction * float(getattr(config, self.reference))
        return -np.inf, np.inf

    def apply(self, value: float, config: SimulationConfig) -> float:
        if self.kind == ClampKind.NONE:
            return value
        low, high = self.limits(config)
        return float(np.clip(value, low, high))


# Order matters: fields referenced by FRACTION_OF bounds are clamped first.
PARAMETER_BOUNDS: Dict[str, ParameterBound] = {
    'landscape_width': ParameterBound.fixed(100, 1000),
    'landing_zone_min_distance': ParameterBound.fraction_of('landscape_width', 0.5),
    'landing_zone_max_distance': ParameterBound.fraction_of('landscape_width', 0.5),
    'landing_zone_radius': ParameterBound.fixed(5.0, 50.0),
    'init_altitude': ParameterBound.fixed(100.0, 1000.0),
    'init_vertical_velocity': ParameterBound.fixed(-20.0, 0.0),
    'init_vertical_velocity_target': ParameterBound.fixed(-20.0, 0.0),
    'joystick_dead_zone': ParameterBound.fixed(0.0, 1.0),
    'seed': ParameterBound(),
}


def clamp_config(config: SimulationConfig) -> SimulationConfig:
    """
    Clamp every bounded parameter into its allowed range.

    Args:
        config: Requested configuration

    Returns:
        New configuration with out-of-range values clamped
    """
    for name, bound in PARAMETER_BOUNDS.items():
        value = getattr(config, name)
        clamped = bound.apply(value, config)
        if isinstance(value, int) and not isinstance(value, bool):
            clamped = int(clamped)
        if clamped != value:
            logger.warning(f"Clamped parameter {name}: {value} -> {clamped}")
            config = replace(config, **{name: clamped})
    return config


def validate_config(config: SimulationConfig) -> SimulationConfig:
    """
    Reject configurations that would produce an inconsistent round.

    Raises:
        ConfigurationError: On any inconsistent value
    """
    if not config.dt > 0:
        raise ConfigurationError(f"Time step dt must be positive, got {config.dt}")
    if not config.max_time > 0:
        raise ConfigurationError(f"max_time must be positive, got {config.max_time}")

    min_width = 2 * config.blend_radius + 1
    if config.landscape_width < min_width:
        raise ConfigurationError(
            f"Landscape width {config.landscape_width} is below the minimum "
            f"{min_width} required by blend radius {config.blend_radius}"
        )

    if config.landing_zone_min_distance > config.landing_zone_max_distance:
        raise ConfigurationError(
            f"Landing zone min distance {config.landing_zone_min_distance} "
            f"exceeds max distance {config.landing_zone_max_distance}"
        )

    for name in ('max_vertical_speed', 'max_horizontal_speed',
                 'max_tilt', 'max_angular_speed', 'landing_zone_radius'):
        if not getattr(config, name) > 0:
            raise ConfigurationError(f"{name} must be positive, got {getattr(config, name)}")

    target_range = config.vertical_velocity_target_range
    if target_range is not None and target_range[0] > target_range[1]:
        raise ConfigurationError(f"Invalid vertical velocity target range {target_range}")

    for f in fields(config):
        value = getattr(config, f.name)
        if isinstance(value, float) and not np.isfinite(value):
            raise ConfigurationError(f"{f.name} must be finite, got {value}")

    return config


def next_round_config(config: SimulationConfig,
                      rng: Optional[np.random.Generator] = None) -> SimulationConfig:
    """
    Resolve the configuration for the next round.

    Clamps and validates the config, and draws a fresh seed when
    regenerate_seed is set so every round gets new terrain.
    """
    config = validate_config(clamp_config(config))
    if config.regenerate_seed:
        if rng is None:
            rng = np.random.default_rng()
        config = replace(config, seed=int(rng.integers(0, 2**63 - 1)))
    return config


def create_default_config() -> SimulationConfig:
    """Create a SimulationConfig with default values from constants."""
    return SimulationConfig()


def create_test_config(dt: float = C.DT, seed: int = 7,
                       **overrides) -> SimulationConfig:
    """Create a deterministic config suitable for testing.

    Any keyword arg accepted by SimulationConfig can be passed as an override.
    """
    defaults = dict(dt=dt, seed=seed, regenerate_seed=False, realtime=False,
                    verbose=False)
    defaults.update(overrides)
    return SimulationConfig(**defaults)
