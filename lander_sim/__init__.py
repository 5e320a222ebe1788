"""
Lunar Lander Simulation Package

A real-time simulation of an Apollo-style lunar module landing on
procedurally generated terrain, flown with a gamepad and scored against
ordered landing criteria.

Modules:
    - constants: Lunar environment, vehicle parameters and thresholds
    - config: Round configuration and parameter bounds
    - state: Vehicle state dataclass
    - frames: Quaternion operations
    - mass: Fuel consumption and inertia
    - control: Rate-of-descent PID controller
    - dynamics: Fixed-step equations of motion
    - lander: Vehicle state plus controller
    - terrain: Height map generation and landing zone carving
    - controls: Gamepad input conditioning
    - landing: Landing evaluation
    - validation: State validation checks
    - main: Game loop entry point
"""

from .state import VehicleState, create_initial_state
from .main import run_simulation, GameSession, RoundResult, SimulationLog
from .config import SimulationConfig, create_default_config, create_test_config
from .controls import Controls, ControlSnapshot
from .lander import Lander
from .landing import LandingReport, LandingStatus, evaluate
from .terrain import Terrain, create_terrain

__version__ = "0.1.0"
__author__ = "Lunar Lander Simulation Team"

__all__ = [
    'VehicleState',
    'create_initial_state',
    'run_simulation',
    'GameSession',
    'RoundResult',
    'SimulationLog',
    'SimulationConfig',
    'create_default_config',
    'create_test_config',
    'Controls',
    'ControlSnapshot',
    'Lander',
    'LandingReport',
    'LandingStatus',
    'evaluate',
    'Terrain',
    'create_terrain',
]
