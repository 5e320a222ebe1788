"""
Lunar Lander Simulation - Input Conditioning

This module turns raw gamepad samples into lander commands:
- Analog axes with dead-zone suppression (strafe, pitch, roll)
- Two-button directional yaw
- Edge-triggered button counters with an optional repeat deadline
- A lock-guarded Controls object shared between the input thread and the
  tick loop, read through consistent snapshots

Gamepad samples arrive as JSON objects {"axes": [...], "buttons": [...]}.
"""

import json
import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Union

import numpy as np

from . import constants as C
from .config import ConfigurationError

logger = logging.getLogger(__name__)


class InputDecodeError(ValueError):
    """Raised when a gamepad sample is missing fields or malformed."""
    pass


def read_axis(raw: float, dead_zone: float = C.JOYSTICK_DEAD_ZONE) -> float:
    """
    Condition one analog axis.

    Returns 0 inside the dead zone, else the raw value clipped to [-1, 1].
    """
    if abs(raw) < dead_zone:
        return 0.0
    return float(np.clip(raw, -1.0, 1.0))


def directional_value(positive: bool, negative: bool,
                      magnitude: float = C.YAW_BUTTON_MAGNITUDE) -> float:
    """Map a pair of opposing buttons to +magnitude, -magnitude or 0."""
    if positive and not negative:
        return magnitude
    if negative and not positive:
        return -magnitude
    return 0.0


class Button:
    """
    Edge-triggered button with a press counter.

    A false -> true transition counts one press. With a repeat interval, a
    button still held once the deadline has passed is treated as released,
    so the next pressed sample counts again.
    """

    def __init__(self, repeat_interval: Optional[float] = None):
        self.repeat_interval = repeat_interval
        self.pressed = False
        self.count = 0
        self.deadline: Optional[float] = None

    def update(self, pressed: bool, now: float) -> bool:
        """
        Feed one sample.

        Args:
            pressed: Current button state
            now: Sample time (s, monotonic)

        Returns:
            True if this sample counted as a new press
        """
        if self.pressed and self.deadline is not None and now >= self.deadline:
            self.pressed = False
            self.deadline = None

        if pressed == self.pressed:
            return False

        self.pressed = pressed
        if not pressed:
            self.deadline = None
            return False

        self.count += 1
        if self.repeat_interval is not None:
            self.deadline = now + self.repeat_interval
        return True

    def get_and_reset(self) -> int:
        """Return the number of presses since the last call and clear it."""
        count = self.count
        self.count = 0
        return count

    def reset(self, hard: bool = False):
        self.count = 0
        if hard:
            self.pressed = False
            self.deadline = None


@dataclass(frozen=True)
class GamepadMap:
    """Axis and button indices of a gamepad."""
    axis_strafe_x: int = 0
    axis_strafe_y: int = 1
    axis_roll: int = 2
    axis_pitch: int = 3
    button_yaw_left: int = 4
    button_yaw_right: int = 5
    button_vertical_velocity_up: int = 12
    button_vertical_velocity_down: int = 13
    button_start: int = 9

    def __post_init__(self):
        for name, idx in vars(self).items():
            if isinstance(idx, bool) or not isinstance(idx, int) or idx < 0:
                raise ConfigurationError(f"Gamepad {name} must be a non-negative integer, got {idx!r}")


@dataclass(frozen=True)
class GamepadSample:
    """One decoded gamepad message."""
    axes: List[float] = field(default_factory=list)
    buttons: List[float] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Union[bytes, str, dict]) -> 'GamepadSample':
        """
        Decode a {"axes": [...], "buttons": [...]} message.

        Raises:
            InputDecodeError: If the payload is not valid JSON, a field is
                missing, or a value is not a finite number
        """
        if isinstance(payload, (bytes, bytearray)):
            try:
                payload = payload.decode('utf-8')
            except UnicodeDecodeError as e:
                raise InputDecodeError(f"Gamepad message is not UTF-8: {e}") from e
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as e:
                raise InputDecodeError(f"Gamepad message is not valid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise InputDecodeError(f"Gamepad message must be an object, got {type(payload).__name__}")

        return cls(axes=cls._numbers(payload, 'axes'),
                   buttons=cls._numbers(payload, 'buttons'))

    @staticmethod
    def _numbers(payload: dict, key: str) -> List[float]:
        if key not in payload:
            raise InputDecodeError(f"Gamepad message is missing '{key}'")
        values = payload[key]
        if not isinstance(values, list):
            raise InputDecodeError(f"Gamepad '{key}' must be a list")
        out = []
        for i, value in enumerate(values):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InputDecodeError(f"Gamepad {key}[{i}] is not a number: {value!r}")
            if not np.isfinite(value):
                raise InputDecodeError(f"Gamepad {key}[{i}] is not finite: {value!r}")
            out.append(float(value))
        return out

    def axis(self, idx: int) -> float:
        if not 0 <= idx < len(self.axes):
            raise InputDecodeError(f"Gamepad message has no axis {idx}")
        return float(np.clip(self.axes[idx], -1.0, 1.0))

    def button(self, idx: int) -> bool:
        if not 0 <= idx < len(self.buttons):
            raise InputDecodeError(f"Gamepad message has no button {idx}")
        return self.buttons[idx] > 0.0


class Gamepad:
    """
    Gamepad configuration: an index map plus an optional dead zone.

    Pitch and roll axes are inverted so that pushing the stick forward
    pitches the lander forward.
    """

    def __init__(self, map: Optional[GamepadMap] = None,
                 joystick_dead_zone: Optional[float] = None):
        self.map = map if map is not None else GamepadMap()
        self.joystick_dead_zone = joystick_dead_zone

    @classmethod
    def from_dict(cls, data: dict) -> 'Gamepad':
        try:
            mapping = GamepadMap(**data['map'])
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"Invalid gamepad map: {e}") from e
        dead_zone = data.get('joystick_dead_zone')
        if dead_zone is not None:
            try:
                dead_zone = float(dead_zone)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid joystick_dead_zone: {dead_zone!r}") from e
            if not np.isfinite(dead_zone):
                raise ConfigurationError(f"joystick_dead_zone must be finite, got {dead_zone!r}")
        return cls(mapping, dead_zone)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> 'Gamepad':
        path = Path(path)
        try:
            with open(path) as f:
                data = json.load(f)
        except OSError as e:
            raise ConfigurationError(f"Failed to open gamepad config {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to load gamepad config {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Gamepad config {path} must be a JSON object")
        return cls.from_dict(data)

    def dead_zone(self, default: float = C.JOYSTICK_DEAD_ZONE) -> float:
        if self.joystick_dead_zone is None:
            return default
        return self.joystick_dead_zone

    def _axis(self, sample: GamepadSample, idx: int, default_dead_zone: float) -> float:
        return read_axis(sample.axis(idx), self.dead_zone(default_dead_zone))

    def read_strafe_x(self, sample, dead_zone=C.JOYSTICK_DEAD_ZONE):
        return self._axis(sample, self.map.axis_strafe_x, dead_zone)

    def read_strafe_y(self, sample, dead_zone=C.JOYSTICK_DEAD_ZONE):
        return self._axis(sample, self.map.axis_strafe_y, dead_zone)

    def read_pitch(self, sample, dead_zone=C.JOYSTICK_DEAD_ZONE):
        return -self._axis(sample, self.map.axis_pitch, dead_zone)

    def read_roll(self, sample, dead_zone=C.JOYSTICK_DEAD_ZONE):
        return -self._axis(sample, self.map.axis_roll, dead_zone)

    def read_yaw_left(self, sample):
        return sample.button(self.map.button_yaw_left)

    def read_yaw_right(self, sample):
        return sample.button(self.map.button_yaw_right)

    def read_vertical_velocity_up(self, sample):
        return sample.button(self.map.button_vertical_velocity_up)

    def read_vertical_velocity_down(self, sample):
        return sample.button(self.map.button_vertical_velocity_down)

    def read_start(self, sample):
        return sample.button(self.map.button_start)


@dataclass(frozen=True)
class ControlSnapshot:
    """
    Operator commands for one tick.

    Attributes:
        strafe: [x, y] body-frame translation command in [-1, 1]
        rotation: [pitch, roll, yaw] torque command about body X, Y, Z
        target_delta: Change in vertical velocity target (m/s)
    """
    strafe: np.ndarray = field(default_factory=lambda: np.zeros(2))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    target_delta: float = 0.0

    @classmethod
    def idle(cls) -> 'ControlSnapshot':
        return cls()


class Controls:
    """
    Thread-safe operator input state.

    The input listener writes samples; the tick loop reads snapshot() once
    per tick. All fields are guarded by one lock.
    """

    def __init__(self, gamepad: Optional[Gamepad] = None,
                 dead_zone: float = C.JOYSTICK_DEAD_ZONE,
                 repeat_interval: Optional[float] = C.BUTTON_REPEAT_INTERVAL,
                 vertical_velocity_step: float = C.VERTICAL_VELOCITY_STEP,
                 clock: Callable[[], float] = time.monotonic):
        self.gamepad = gamepad if gamepad is not None else Gamepad()
        self.dead_zone = self.gamepad.dead_zone(dead_zone)
        self.vertical_velocity_step = vertical_velocity_step
        self._clock = clock
        self._lock = threading.Lock()

        self._strafe = np.zeros(2)
        self._rotation = np.zeros(3)
        self._vv_up = Button(repeat_interval)
        self._vv_down = Button(repeat_interval)
        self._start = Button()
        self._reset_requested = False

    @classmethod
    def from_config(cls, config, gamepad: Optional[Gamepad] = None,
                    clock: Callable[[], float] = time.monotonic) -> 'Controls':
        return cls(gamepad=gamepad,
                   dead_zone=config.joystick_dead_zone,
                   repeat_interval=config.button_repeat_interval,
                   vertical_velocity_step=config.vertical_velocity_step,
                   clock=clock)

    def update_from_sample(self, sample: GamepadSample, now: Optional[float] = None):
        """
        Apply one decoded sample.

        Raises:
            InputDecodeError: If the sample lacks an index named by the map
        """
        pad = self.gamepad
        # Read everything before taking the lock so a bad sample changes nothing
        strafe = np.array([pad.read_strafe_x(sample, self.dead_zone),
                           pad.read_strafe_y(sample, self.dead_zone)])
        yaw = directional_value(pad.read_yaw_left(sample), pad.read_yaw_right(sample))
        rotation = np.array([pad.read_pitch(sample, self.dead_zone),
                             pad.read_roll(sample, self.dead_zone),
                             yaw])
        up = pad.read_vertical_velocity_up(sample)
        down = pad.read_vertical_velocity_down(sample)
        start = pad.read_start(sample)

        if now is None:
            now = self._clock()

        with self._lock:
            self._strafe = strafe
            self._rotation = rotation
            self._vv_up.update(up, now)
            self._vv_down.update(down, now)
            if self._start.update(start, now):
                self._reset_requested = True

    def update_from_payload(self, payload: Union[bytes, str, dict],
                            now: Optional[float] = None) -> bool:
        """
        Decode and apply a raw gamepad message.

        Malformed messages are logged and dropped; the previous input state
        persists.

        Returns:
            True if the sample was applied
        """
        try:
            sample = GamepadSample.from_payload(payload)
            self.update_from_sample(sample, now)
        except InputDecodeError as e:
            logger.warning(f"Dropped gamepad message: {e}")
            return False
        return True

    def snapshot(self) -> ControlSnapshot:
        """
        Read a consistent view of the inputs for one tick.

        Drains the vertical-velocity button counters into target_delta.
        """
        with self._lock:
            taps = self._vv_up.get_and_reset() - self._vv_down.get_and_reset()
            return ControlSnapshot(
                strafe=self._strafe.copy(),
                rotation=self._rotation.copy(),
                target_delta=taps * self.vertical_velocity_step
            )

    def request_reset(self):
        with self._lock:
            self._reset_requested = True

    def take_reset_request(self) -> bool:
        """Return True once per reset request and clear it."""
        with self._lock:
            requested = self._reset_requested
            self._reset_requested = False
            return requested

    def soft_reset(self):
        """Clear counters and the reset flag; keep button debounce state."""
        with self._lock:
            for button in (self._vv_up, self._vv_down, self._start):
                button.reset(hard=False)
            self._reset_requested = False

    def hard_reset(self):
        """Clear all input state, including held buttons and analog values."""
        with self._lock:
            for button in (self._vv_up, self._vv_down, self._start):
                button.reset(hard=True)
            self._strafe = np.zeros(2)
            self._rotation = np.zeros(3)
            self._reset_requested = False

    def on_device_advertised(self):
        """A new gamepad connected; forget everything from the old one."""
        logger.info("Gamepad advertised, resetting controls")
        self.hard_reset()
