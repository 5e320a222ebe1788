"""
Lunar Lander Simulation - Physical Constants and Vehicle Parameters

This module defines the lunar environment, the Apollo lunar module estimates,
controller gains, terrain generation constants and landing thresholds used
throughout the simulation.

Frame convention: landing-zone frame, +Z up, origin at the landing-zone
center on the zone surface.
"""

import numpy as np

# =============================================================================
# LUNAR ENVIRONMENT
# =============================================================================

# Moon gravitational acceleration along +Z (m/s^2)
MOON_GRAVITY = -1.62

# =============================================================================
# VEHICLE PARAMETERS - APOLLO LUNAR MODULE
# =============================================================================

# Descent stage structure (kg)
DRY_MASS = 2150.0

# The payload is the ascent stage and ascent fuel (kg)
PAYLOAD_MASS = 2150.0 + 2400.0

# Descent fuel mass (kg).
# The real vehicle carried 8,200 kg, most of it spent braking from 15 km.
# The simulation picks up at ~200 m with a small reserve left.
INITIAL_FUEL_MASS = 600.0

# Descent engine (DCS) thrust at full throttle (N)
DCS_THRUST = 45000.0

# Descent fuel burn rate at full throttle (kg/s)
FUEL_BURN_RATE = 15.0

# RCS strafe thrust (N): sixteen 440 N thrusters in quads, two per direction
RCS_THRUST = 880.0

# RCS torque (N*m): 440 N thrusters roughly 2 m from the center of mass
RCS_TORQUE = 3700.0

# Per-unit-mass inertia profile (m^2), cylinder of radius 2.1 m and height 7 m.
# Multiplied by total mass to get the diagonal inertia tensor.
INERTIA_PROFILE = np.array([
    (3.0 * 2.1 * 2.1 + 7.0 * 7.0) / 12.0,
    (3.0 * 2.1 * 2.1 + 7.0 * 7.0) / 12.0,
    (2.1 * 2.1) / 2.0,
])

# Angular velocity damping per tick (gameplay concession)
ANGULAR_DAMPING = 0.999

# Body axes
BODY_Z_AXIS = np.array([0.0, 0.0, 1.0])
WORLD_UP = np.array([0.0, 0.0, 1.0])

# =============================================================================
# RATE-OF-DESCENT CONTROLLER
# =============================================================================

KP_VERTICAL_VELOCITY = 0.8
KI_VERTICAL_VELOCITY = 0.05
KD_VERTICAL_VELOCITY = 0.3

# Change in target vertical velocity per button tap (m/s)
VERTICAL_VELOCITY_STEP = 1.0

# Below this thrust*cos(tilt) the throttle saturates instead of dividing (N)
MIN_VERTICAL_THRUST = 1e-6

# =============================================================================
# TERRAIN
# =============================================================================

LANDSCAPE_WIDTH = 200
NOISE_SCALE = 0.1
Z_SCALE = 2.0

LANDING_ZONE_RADIUS = 20.0
LANDING_ZONE_MIN_DISTANCE = 30.0
LANDING_ZONE_MAX_DISTANCE = 70.0

# Blend ring width beyond the flat disk (grid cells)
LANDING_ZONE_BLEND_MARGIN = 3

# =============================================================================
# INITIAL CONDITIONS
# =============================================================================

INIT_ALTITUDE = 200.0
INIT_VERTICAL_VELOCITY = 0.0
INIT_VERTICAL_VELOCITY_TARGET = -6.0

INITIAL_QUATERNION = np.array([1.0, 0.0, 0.0, 0.0])
INITIAL_OMEGA = np.zeros(3)

# =============================================================================
# LANDING THRESHOLDS
# =============================================================================

MAX_VERTICAL_SPEED = 3.0     # m/s
MAX_HORIZONTAL_SPEED = 1.0   # m/s
MAX_TILT = 0.25              # rad
MAX_ANGULAR_SPEED = 0.25     # rad/s

# =============================================================================
# INPUT
# =============================================================================

JOYSTICK_DEAD_ZONE = 0.10
BUTTON_REPEAT_INTERVAL = 0.1  # s
YAW_BUTTON_MAGNITUDE = 0.5

# =============================================================================
# SIMULATION PARAMETERS
# =============================================================================

# Fixed game step (s), ~30 Hz
DT = 0.033

# Safety limit on round length for headless runs (s)
MAX_TIME = 600.0

# =============================================================================
# NUMERICAL TOLERANCES
# =============================================================================

QUATERNION_NORM_TOL = 1e-6
ZERO_TOLERANCE = 1e-10

# =============================================================================

def print_config():
    """Print configuration summary."""
    print("="*60)
    print("Lunar Lander Configuration (Apollo LM estimates)")
    print("="*60)
    print(f"Dry mass: {DRY_MASS:,.0f} kg")
    print(f"Payload mass: {PAYLOAD_MASS:,.0f} kg")
    print(f"Descent fuel: {INITIAL_FUEL_MASS:,.0f} kg")
    print(f"DCS thrust: {DCS_THRUST/1e3:.1f} kN")
    print(f"Burn rate: {FUEL_BURN_RATE:.1f} kg/s")
    print(f"RCS thrust / torque: {RCS_THRUST:.0f} N / {RCS_TORQUE:.0f} N·m")
    print(f"Gravity: {MOON_GRAVITY:.2f} m/s²")
    print(f"RoD gains: Kp={KP_VERTICAL_VELOCITY}, Ki={KI_VERTICAL_VELOCITY}, "
          f"Kd={KD_VERTICAL_VELOCITY}")
    print("="*60)


if __name__ == "__main__":
    print_config()
