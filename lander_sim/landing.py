"""
Lunar Lander Simulation - Landing Evaluation

Classifies a grounded lander against ordered criteria:
  1. Vertical speed      |v_z|          <= 3.0 m/s
  2. Horizontal speed    |(v_x, v_y)|   <= 1.0 m/s
  3. Tilt                                <= 0.25 rad
  4. Angular speed       |omega|        <= 0.25 rad/s
  5. Distance from zone  |(x, y)|       <= landing zone radius

Each criterion scores 2 * (max - actual) / max; the report score is the sum.
The first failing criterion decides the status (MISSED for distance,
CRASHED for anything else) and the remark.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np

from . import constants as C
from .state import VehicleState
from .types import LandingReportDict

logger = logging.getLogger(__name__)


class LandingStatus(Enum):
    LANDED = "landed"
    MISSED = "missed"
    CRASHED = "crashed"

    @property
    def banner(self) -> str:
        return _BANNERS[self][0]

    @property
    def color(self) -> Tuple[float, float, float]:
        """Banner RGB color."""
        return _BANNERS[self][1]


_BANNERS = {
    LandingStatus.LANDED: ("LANDED", (0.0, 1.0, 0.0)),
    LandingStatus.MISSED: ("MISSED", (1.0, 1.0, 0.0)),
    LandingStatus.CRASHED: ("YOU DIED", (1.0, 0.0, 0.0)),
}

PRESS_START_BANNER = ("PRESS START", (1.0, 0.0, 1.0))


class CriterionKind(Enum):
    VERTICAL_SPEED = "vertical_speed"
    HORIZONTAL_SPEED = "horizontal_speed"
    TILT = "tilt"
    ANGULAR_SPEED = "angular_speed"
    DISTANCE_FROM_TARGET = "distance_from_target"


REMARKS: Dict[CriterionKind, List[str]] = {
    CriterionKind.VERTICAL_SPEED: [
        "You've redefined the term 'lunar impactor'.",
        "NASA's crater department thanks you for the new research subject.",
    ],
    CriterionKind.HORIZONTAL_SPEED: [
        "You landed... sideways. The ground wasn't ready for that level of enthusiasm.",
    ],
    CriterionKind.TILT: [
        "You came in like a majestic leaning tower of 'nope'.",
    ],
    CriterionKind.ANGULAR_SPEED: [
        "You were still spinning on landing. Were you trying for a celebratory twirl?",
    ],
    CriterionKind.DISTANCE_FROM_TARGET: [
        "You stuck the landing - on the wrong part of the moon.",
    ],
}

SUCCESS_REMARK = "The eagle has landed."


@dataclass(frozen=True)
class LandingThresholds:
    """Upper limits for a safe landing."""
    max_vertical_speed: float = C.MAX_VERTICAL_SPEED
    max_horizontal_speed: float = C.MAX_HORIZONTAL_SPEED
    max_tilt: float = C.MAX_TILT
    max_angular_speed: float = C.MAX_ANGULAR_SPEED

    @classmethod
    def from_config(cls, config) -> 'LandingThresholds':
        return cls(
            max_vertical_speed=config.max_vertical_speed,
            max_horizontal_speed=config.max_horizontal_speed,
            max_tilt=config.max_tilt,
            max_angular_speed=config.max_angular_speed,
        )


@dataclass(frozen=True)
class LandingCriterion:
    kind: CriterionKind
    max: float
    actual: float

    @property
    def ok(self) -> bool:
        return self.actual <= self.max

    @property
    def score(self) -> float:
        """Contribution to the report score; negative when failed."""
        return 2.0 * (self.max - self.actual) / self.max


@dataclass(frozen=True)
class LandingReport:
    status: LandingStatus
    remark: str
    score: float
    criteria: Tuple[LandingCriterion, ...]
    first_failure: Optional[CriterionKind] = None

    @property
    def banner(self) -> str:
        return self.status.banner

    def to_dict(self) -> LandingReportDict:
        return {
            'status': self.status.name,
            'banner': self.status.banner,
            'remark': self.remark,
            'score': float(self.score),
            'first_failure': self.first_failure.value if self.first_failure else None,
            'criteria': [
                {
                    'kind': c.kind.value,
                    'max': float(c.max),
                    'actual': float(c.actual),
                    'ok': c.ok,
                    'score': float(c.score),
                }
                for c in self.criteria
            ],
        }

    def __str__(self) -> str:
        lines = [f"{self.status.banner}: {self.remark} (score {self.score:.2f})"]
        for c in self.criteria:
            mark = "ok" if c.ok else "FAIL"
            lines.append(f"  {c.kind.value:<22} {c.actual:8.3f} / {c.max:<8.3f} {mark}")
        return "\n".join(lines)


def choose_remark(kind: Optional[CriterionKind],
                  rng: Optional[np.random.Generator] = None) -> str:
    """
    Pick the remark for the first failing criterion.

    Without an rng the first remark of the list is used.
    """
    if kind is None:
        return SUCCESS_REMARK
    options = REMARKS[kind]
    if rng is None or len(options) == 1:
        return options[0]
    return options[int(rng.integers(len(options)))]


def landing_criteria(state: VehicleState, thresholds: LandingThresholds,
                     zone_radius: float) -> Tuple[LandingCriterion, ...]:
    """Build the ordered criteria for a state."""
    return (
        LandingCriterion(CriterionKind.VERTICAL_SPEED,
                         thresholds.max_vertical_speed, state.vertical_speed),
        LandingCriterion(CriterionKind.HORIZONTAL_SPEED,
                         thresholds.max_horizontal_speed, state.horizontal_speed),
        LandingCriterion(CriterionKind.TILT,
                         thresholds.max_tilt, state.tilt),
        LandingCriterion(CriterionKind.ANGULAR_SPEED,
                         thresholds.max_angular_speed, state.angular_speed),
        LandingCriterion(CriterionKind.DISTANCE_FROM_TARGET,
                         float(zone_radius), state.distance_from_landing_zone),
    )


def evaluate(state: VehicleState,
             thresholds: Optional[LandingThresholds] = None,
             zone_radius: float = C.LANDING_ZONE_RADIUS,
             rng: Optional[np.random.Generator] = None) -> LandingReport:
    """
    Evaluate a grounded lander.

    Args:
        state: Final vehicle state, must have r_z <= 0
        thresholds: Landing limits (defaults from constants)
        zone_radius: Landing zone radius (m)
        rng: Generator used to pick among remarks

    Returns:
        LandingReport

    Raises:
        ValueError: If the lander has not touched down
    """
    if state.r[2] > 0.0:
        raise ValueError(f"Cannot evaluate a lander in flight (altitude {state.r[2]:.2f} m)")
    if thresholds is None:
        thresholds = LandingThresholds()

    criteria = landing_criteria(state, thresholds, zone_radius)

    first_failure = None
    score = 0.0
    for criterion in criteria:
        if not criterion.ok and first_failure is None:
            first_failure = criterion.kind
        score += criterion.score

    if first_failure is None:
        status = LandingStatus.LANDED
    elif first_failure == CriterionKind.DISTANCE_FROM_TARGET:
        status = LandingStatus.MISSED
    else:
        status = LandingStatus.CRASHED

    report = LandingReport(
        status=status,
        remark=choose_remark(first_failure, rng),
        score=score,
        criteria=criteria,
        first_failure=first_failure,
    )
    logger.info(f"Landing evaluated: {status.name}, score {score:.2f}")
    return report
