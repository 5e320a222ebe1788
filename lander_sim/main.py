"""
Lunar Lander Simulation - Main Entry Point

This module implements the game loop with:
- Round setup (seed, terrain, lander placement)
- Fixed 33 ms tick: snapshot inputs, step dynamics, log, check reset
- Landing evaluation once the lander touches down
- Telemetry logging and an optional telemetry sink

Coordinate Frames:
- Position/Velocity: landing-zone frame, origin at the zone center, +Z up
- Attitude: Body frame aligned with vehicle axes
- Quaternion convention: [w, x, y, z] (scalar-first)
"""

import csv
import logging
import os
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Optional, Tuple

import numpy as np

from .config import SimulationConfig, create_default_config, next_round_config
from .controls import ControlSnapshot, Controls
from .lander import Lander
from .landing import LandingReport, LandingThresholds, PRESS_START_BANNER
from .state import VehicleState
from .terrain import Terrain, create_terrain
from .types import TelemetryFrame
from .validation import ValidationError

# Configure module logger
logger = logging.getLogger(__name__)

REASON_TOUCHDOWN = "Touchdown"
REASON_RESET = "Reset requested"
REASON_MAX_TIME = "Maximum simulation time reached"
REASON_STOPPED = "Session stopped"

Sink = Callable[[Any], None]


@dataclass
class SimulationLog:
    """Container for logged telemetry."""
    time: List[float] = field(default_factory=list)
    position_x: List[float] = field(default_factory=list)
    position_y: List[float] = field(default_factory=list)
    position_z: List[float] = field(default_factory=list)
    velocity_x: List[float] = field(default_factory=list)
    velocity_y: List[float] = field(default_factory=list)
    velocity_z: List[float] = field(default_factory=list)
    quat_w: List[float] = field(default_factory=list)
    quat_x: List[float] = field(default_factory=list)
    quat_y: List[float] = field(default_factory=list)
    quat_z: List[float] = field(default_factory=list)
    omega_x: List[float] = field(default_factory=list)
    omega_y: List[float] = field(default_factory=list)
    omega_z: List[float] = field(default_factory=list)
    fuel_mass: List[float] = field(default_factory=list)
    throttle: List[float] = field(default_factory=list)
    vertical_velocity_target: List[float] = field(default_factory=list)
    tilt_deg: List[float] = field(default_factory=list)
    course_x: List[float] = field(default_factory=list)
    course_y: List[float] = field(default_factory=list)
    distance_to_zone: List[float] = field(default_factory=list)

    def append(self, frame: TelemetryFrame):
        """Log data from current timestep."""
        self.time.append(frame['time'])
        r, v = frame['position'], frame['velocity']
        self.position_x.append(r[0])
        self.position_y.append(r[1])
        self.position_z.append(r[2])
        self.velocity_x.append(v[0])
        self.velocity_y.append(v[1])
        self.velocity_z.append(v[2])
        q = frame['orientation']
        self.quat_w.append(q[0])
        self.quat_x.append(q[1])
        self.quat_y.append(q[2])
        self.quat_z.append(q[3])
        omega = frame['angular_velocity']
        self.omega_x.append(omega[0])
        self.omega_y.append(omega[1])
        self.omega_z.append(omega[2])
        self.fuel_mass.append(frame['fuel_mass'])
        self.throttle.append(frame['throttle'])
        self.vertical_velocity_target.append(frame['vertical_velocity_target'])
        self.tilt_deg.append(np.degrees(frame['tilt']))
        course = frame['course']
        self.course_x.append(course[0])
        self.course_y.append(course[1])
        self.distance_to_zone.append(float(np.hypot(course[0], course[1])))

    def __len__(self) -> int:
        return len(self.time)

    def to_csv(self, filename: str):
        """Write logged telemetry to CSV for offline analysis."""
        os.makedirs(os.path.dirname(filename) or '.', exist_ok=True)
        columns = [
            ('time', self.time),
            ('pos_x', self.position_x), ('pos_y', self.position_y), ('pos_z', self.position_z),
            ('vel_x', self.velocity_x), ('vel_y', self.velocity_y), ('vel_z', self.velocity_z),
            ('quat_w', self.quat_w), ('quat_x', self.quat_x),
            ('quat_y', self.quat_y), ('quat_z', self.quat_z),
            ('omega_x', self.omega_x), ('omega_y', self.omega_y), ('omega_z', self.omega_z),
            ('fuel_kg', self.fuel_mass), ('throttle', self.throttle),
            ('vv_target_mps', self.vertical_velocity_target), ('tilt_deg', self.tilt_deg),
            ('course_x', self.course_x), ('course_y', self.course_y),
            ('distance_to_zone_m', self.distance_to_zone),
        ]

        with open(filename, 'w', newline='') as fh:
            writer = csv.writer(fh)
            writer.writerow([name for name, _ in columns])
            for i in range(len(self.time)):
                writer.writerow([values[i] for _, values in columns])


@dataclass
class RoundResult:
    """Outcome of one round."""
    state: VehicleState
    log: SimulationLog
    report: Optional[LandingReport]
    reason: str
    seed: int
    terrain: Terrain
    steps: int = 0

    @property
    def landed(self) -> bool:
        return self.report is not None


def simulation_step(lander: Lander, controls: ControlSnapshot,
                    dt: float) -> Tuple[VehicleState, TelemetryFrame]:
    """
    Execute one tick.

    Execution order:
    1. Operator target delta -> controller
    2. Rate-of-descent throttle and descent engine
    3. Strafe, gravity, torque, damping
    4. Position and orientation update
    5. State validation (raises ValidationError, lander state unchanged)

    Returns:
        (new_state, telemetry_frame)
    """
    state = lander.step(dt, controls)
    return state, lander.telemetry()


def check_termination(state: VehicleState, max_time: float) -> tuple:
    """
    Check if the round should end.

    Returns:
        (should_terminate, reason) tuple
    """
    if state.r[2] <= 0.0:
        return True, REASON_TOUCHDOWN
    if state.t >= max_time:
        return True, REASON_MAX_TIME
    return False, None


class GameSession:
    """
    Runs rounds against a shared Controls object.

    Args:
        config: Base configuration; a fresh seed is drawn per round when
            config.regenerate_seed is set
        controls: Input state shared with the input listener
        sink: Optional callable receiving telemetry frames and landing
            report dicts
        rng: Generator used to draw round seeds
        sleep: Sleep function used for pacing and waiting
        clock: Monotonic clock (s)
    """

    def __init__(self, config: Optional[SimulationConfig] = None,
                 controls: Optional[Controls] = None,
                 sink: Optional[Sink] = None,
                 rng: Optional[np.random.Generator] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config if config is not None else create_default_config()
        self.controls = controls if controls is not None else Controls.from_config(self.config)
        self.sink = sink
        self._seed_rng = rng if rng is not None else np.random.default_rng()
        self._sleep = sleep
        self._clock = clock
        self._stop = threading.Event()
        self.terrain: Optional[Terrain] = None
        self.lander: Optional[Lander] = None
        self.banner: Optional[str] = None

    def stop(self):
        """Ask any waiting or running round to finish."""
        self._stop.set()

    def _emit(self, record):
        if self.sink is not None:
            self.sink(record)

    def _wait_for_reset(self, lander: Lander, dt: float) -> bool:
        """Idle one tick at a time until the operator presses start or reset."""
        while not self._stop.is_set():
            if self.controls.take_reset_request():
                return True
            self._emit(lander.telemetry())
            self._sleep(dt)
        return False

    def _pace(self, next_tick: float, dt: float) -> float:
        """Sleep until the next tick boundary; returns the one after it."""
        delay = next_tick - self._clock()
        if delay > 0:
            self._sleep(delay)
        return next_tick + dt

    def setup_round(self) -> Tuple[SimulationConfig, np.random.Generator]:
        """Resolve the round config and build terrain and lander."""
        self.config = next_round_config(self.config, self._seed_rng)
        config = self.config
        rng = np.random.default_rng(config.seed)

        self.terrain = create_terrain(rng, config)
        self.lander = Lander.from_config(self.terrain.start_position, config)
        self.controls.soft_reset()
        logger.info(f"Round start: seed={config.seed}, "
                    f"target={config.init_vertical_velocity_target:+.1f} m/s")
        return config, rng

    def run_round(self, wait_for_start: bool = True) -> RoundResult:
        """
        Play one round.

        Returns:
            RoundResult; report is None if the round ended without a landing
        """
        config, rng = self.setup_round()
        lander = self.lander
        log = SimulationLog()

        if wait_for_start:
            self.banner = PRESS_START_BANNER[0]
            if not self._wait_for_reset(lander, config.dt):
                return RoundResult(lander.state, log, None, REASON_STOPPED,
                                   config.seed, self.terrain)
            self.controls.soft_reset()
        self.banner = None

        reason, steps = self._fly(lander, config, log)

        report = None
        if reason == REASON_TOUCHDOWN:
            report = lander.evaluate(LandingThresholds.from_config(config), rng)
            self.banner = report.banner
            self._emit(report.to_dict())
            logger.info(f"{report.banner}: {report.remark} (score {report.score:.2f})")
            lander.stop()
        else:
            logger.info(f"Round ended without landing: {reason}")

        if config.verbose:
            _print_summary(lander.state, report, reason, steps)

        return RoundResult(lander.state, log, report, reason, config.seed,
                           self.terrain, steps)

    def _fly(self, lander: Lander, config: SimulationConfig,
             log: SimulationLog) -> Tuple[str, int]:
        dt = config.dt
        steps = 0
        next_tick = self._clock() + dt

        if config.verbose:
            print("\n" + "=" * 64)
            print(f"LUNAR LANDER    | dt={dt}s | seed={config.seed}")
            print("=" * 64)
            print(f"{'Time (s)':^10} | {'Alt (m)':^10} | {'Vz (m/s)':^10} | {'Fuel (kg)':^10} | {'Thr':^6}")
            print("-" * 64)

        while not self._stop.is_set():
            if config.realtime:
                next_tick = self._pace(next_tick, dt)

            steps += 1
            try:
                state, frame = simulation_step(lander, self.controls.snapshot(), dt)
            except ValidationError as e:
                reason = f"Validation failure: {e}"
                logger.error(f"{reason} at t={lander.state.t:.2f}s")
                return reason, steps

            log.append(frame)
            self._emit(frame)
            logger.debug(f"Tick {steps}: {state}, throttle={lander.throttle:.3f}")

            if config.verbose and steps % int(round(5.0 / dt)) == 0:
                _print_status(state, lander.throttle)

            if self.controls.take_reset_request():
                logger.info("Round reset by operator")
                return REASON_RESET, steps

            done, reason = check_termination(state, config.max_time)
            if done:
                return reason, steps

        return REASON_STOPPED, steps

    def run_forever(self, max_rounds: Optional[int] = None) -> List[RoundResult]:
        """
        Play rounds until stopped.

        After a landing the report stays up until the operator resets.
        """
        results = []
        while not self._stop.is_set():
            result = self.run_round(wait_for_start=True)
            results.append(result)
            if result.reason == REASON_STOPPED:
                break
            if result.landed:
                if not self._wait_for_reset(self.lander, self.config.dt):
                    break
            if max_rounds is not None and len(results) >= max_rounds:
                break
        return results


def run_simulation(config: Optional[SimulationConfig] = None,
                   controls: Optional[Controls] = None,
                   sink: Optional[Sink] = None,
                   rng: Optional[np.random.Generator] = None,
                   verbose: Optional[bool] = None) -> RoundResult:
    """
    Run one headless round without waiting for a start button.

    Args:
        config: SimulationConfig instance. If None a default is created.
        controls: Input state; idle controls when None
        sink: Optional telemetry sink
        rng: Generator used to draw the seed when config.regenerate_seed
        verbose: Print progress. Overrides config.verbose if given.

    Returns:
        RoundResult
    """
    if config is None:
        config = create_default_config()
    if verbose is not None and verbose != config.verbose:
        config = replace(config, verbose=verbose)

    start_time = time.time()
    session = GameSession(config, controls, sink, rng)
    result = session.run_round(wait_for_start=False)
    elapsed = time.time() - start_time

    logger.info(f"Simulation complete: {result.steps} steps in {elapsed:.2f}s ({result.reason})")
    return result


def _print_status(state: VehicleState, throttle: float):
    """Print a formatted status row."""
    msg = (f"{state.t:10.1f} | {state.r[2]:10.1f} | "
           f"{state.v[2]:10.2f} | {state.fuel_mass:10.1f} | {throttle:6.2f}")
    print(msg)
    logger.info(msg)


def _print_summary(state: VehicleState, report: Optional[LandingReport],
                   reason: str, steps: int):
    print("-" * 64)
    print(f"ROUND ENDED: {reason}")
    print("-" * 64)
    print(f"Final Time:     {state.t:.2f} s")
    print(f"Fuel Remaining: {state.fuel_mass:.1f} kg")
    print(f"Steps:          {steps:,}")
    if report is not None:
        print("-" * 64)
        print(report)
    print("=" * 64)
