"""Tests for landing evaluation."""

import numpy as np
import pytest

from lander_sim import constants as C
from lander_sim.frames import quaternion_from_axis_angle
from lander_sim.landing import (
    CriterionKind,
    LandingCriterion,
    LandingStatus,
    LandingThresholds,
    REMARKS,
    SUCCESS_REMARK,
    choose_remark,
    evaluate,
    landing_criteria,
)
from lander_sim.state import VehicleState

RADIUS = C.LANDING_ZONE_RADIUS


def grounded(vz=-1.0, r=(0.0, 0.0, 0.0), vxy=(0.0, 0.0), q=None, omega=(0.0, 0.0, 0.0)):
    kwargs = dict(r=np.array(r), v=np.array([vxy[0], vxy[1], vz]), omega=np.array(omega))
    if q is not None:
        kwargs['q'] = q
    return VehicleState(**kwargs)


class TestScenarios:

    def test_gentle_touchdown_landed(self):
        report = evaluate(grounded(vz=-2.9), zone_radius=RADIUS)
        assert report.status == LandingStatus.LANDED
        assert report.first_failure is None
        assert report.remark == SUCCESS_REMARK
        assert report.banner == "LANDED"

    def test_hard_touchdown_crashed(self):
        report = evaluate(grounded(vz=-5.0), zone_radius=RADIUS)
        assert report.status == LandingStatus.CRASHED
        assert report.first_failure == CriterionKind.VERTICAL_SPEED
        assert report.remark in REMARKS[CriterionKind.VERTICAL_SPEED]
        assert report.banner == "YOU DIED"

    def test_off_target_missed(self):
        report = evaluate(grounded(vz=-0.5, r=(2 * RADIUS, 0.0, 0.0)), zone_radius=RADIUS)
        assert report.status == LandingStatus.MISSED
        assert report.first_failure == CriterionKind.DISTANCE_FROM_TARGET
        assert report.remark == REMARKS[CriterionKind.DISTANCE_FROM_TARGET][0]
        assert report.banner == "MISSED"

    def test_sideways_crashed(self):
        report = evaluate(grounded(vxy=(1.5, 0.0)), zone_radius=RADIUS)
        assert report.status == LandingStatus.CRASHED
        assert report.first_failure == CriterionKind.HORIZONTAL_SPEED

    def test_tilted_crashed(self):
        q = quaternion_from_axis_angle(np.array([0.0, 1.0, 0.0]), 0.4)
        report = evaluate(grounded(q=q), zone_radius=RADIUS)
        assert report.status == LandingStatus.CRASHED
        assert report.first_failure == CriterionKind.TILT

    def test_spinning_crashed(self):
        report = evaluate(grounded(omega=(0.0, 0.0, 0.5)), zone_radius=RADIUS)
        assert report.first_failure == CriterionKind.ANGULAR_SPEED
        assert report.status == LandingStatus.CRASHED

    def test_first_failure_wins(self):
        report = evaluate(grounded(vz=-10.0, r=(100.0, 0.0, 0.0)), zone_radius=RADIUS)
        assert report.status == LandingStatus.CRASHED
        assert report.first_failure == CriterionKind.VERTICAL_SPEED

    def test_threshold_boundary_passes(self):
        report = evaluate(grounded(vz=-3.0), zone_radius=RADIUS)
        assert report.status == LandingStatus.LANDED

    def test_distance_is_planar(self):
        report = evaluate(grounded(r=(RADIUS - 1.0, 0.0, -5.0)), zone_radius=RADIUS)
        assert report.status == LandingStatus.LANDED


class TestScore:

    def test_perfect_score(self):
        report = evaluate(grounded(vz=0.0), zone_radius=RADIUS)
        assert report.score == pytest.approx(10.0)

    def test_score_is_sum_of_criteria(self):
        state = grounded(vz=-1.5, vxy=(0.3, 0.4), r=(5.0, 0.0, 0.0))
        report = evaluate(state, zone_radius=RADIUS)
        expected = (2 * (3.0 - 1.5) / 3.0 + 2 * (1.0 - 0.5) / 1.0 + 2.0 + 2.0
                    + 2 * (RADIUS - 5.0) / RADIUS)
        assert report.score == pytest.approx(expected)

    def test_failed_criterion_scores_negative(self):
        c = LandingCriterion(CriterionKind.VERTICAL_SPEED, 3.0, 6.0)
        assert not c.ok
        assert c.score == pytest.approx(-2.0)

    @pytest.mark.parametrize("kind, limit, make_state", [
        (CriterionKind.VERTICAL_SPEED, C.MAX_VERTICAL_SPEED, lambda x: grounded(vz=-x)),
        (CriterionKind.HORIZONTAL_SPEED, C.MAX_HORIZONTAL_SPEED, lambda x: grounded(vz=0.0, vxy=(x, 0.0))),
        (CriterionKind.TILT, C.MAX_TILT,
         lambda x: grounded(vz=0.0, q=quaternion_from_axis_angle(np.array([0.0, 1.0, 0.0]), x))),
        (CriterionKind.ANGULAR_SPEED, C.MAX_ANGULAR_SPEED, lambda x: grounded(vz=0.0, omega=(0.0, 0.0, x))),
        (CriterionKind.DISTANCE_FROM_TARGET, RADIUS, lambda x: grounded(vz=0.0, r=(x, 0.0, 0.0))),
    ])
    def test_score_monotone_in_each_criterion(self, kind, limit, make_state):
        reports = [evaluate(make_state(x), zone_radius=RADIUS)
                   for x in np.linspace(0.0, 2.5 * limit, 11)]
        actuals = [next(c.actual for c in r.criteria if c.kind == kind) for r in reports]
        assert all(b > a for a, b in zip(actuals, actuals[1:]))
        scores = [r.score for r in reports]
        assert all(b < a for a, b in zip(scores, scores[1:]))

    def test_evaluation_is_deterministic(self):
        state = grounded(vz=-4.0, vxy=(0.2, 0.1), omega=(0.01, 0.0, 0.0))
        a = evaluate(state, zone_radius=RADIUS, rng=np.random.default_rng(9))
        b = evaluate(state, zone_radius=RADIUS, rng=np.random.default_rng(9))
        assert a == b


def test_criteria_order():
    kinds = [c.kind for c in landing_criteria(grounded(), LandingThresholds(), RADIUS)]
    assert kinds == [
        CriterionKind.VERTICAL_SPEED,
        CriterionKind.HORIZONTAL_SPEED,
        CriterionKind.TILT,
        CriterionKind.ANGULAR_SPEED,
        CriterionKind.DISTANCE_FROM_TARGET,
    ]


def test_custom_thresholds():
    thresholds = LandingThresholds(max_vertical_speed=1.0)
    report = evaluate(grounded(vz=-2.0), thresholds, RADIUS)
    assert report.status == LandingStatus.CRASHED


def test_evaluate_in_flight_raises():
    with pytest.raises(ValueError):
        evaluate(VehicleState(r=np.array([0.0, 0.0, 0.5])))


def test_choose_remark():
    assert choose_remark(None) == SUCCESS_REMARK
    rng = np.random.default_rng(1)
    for _ in range(20):
        assert choose_remark(CriterionKind.VERTICAL_SPEED, rng) in REMARKS[CriterionKind.VERTICAL_SPEED]
    assert choose_remark(CriterionKind.TILT) == REMARKS[CriterionKind.TILT][0]


def test_choose_remark_uses_all_options():
    rng = np.random.default_rng(2)
    seen = {choose_remark(CriterionKind.VERTICAL_SPEED, rng) for _ in range(50)}
    assert seen == set(REMARKS[CriterionKind.VERTICAL_SPEED])


def test_status_banner_colors():
    assert LandingStatus.LANDED.color == (0.0, 1.0, 0.0)
    assert LandingStatus.MISSED.color == (1.0, 1.0, 0.0)
    assert LandingStatus.CRASHED.color == (1.0, 0.0, 0.0)


def test_report_to_dict():
    report = evaluate(grounded(vz=-5.0), zone_radius=RADIUS)
    d = report.to_dict()
    assert d['status'] == 'CRASHED'
    assert d['banner'] == 'YOU DIED'
    assert d['first_failure'] == 'vertical_speed'
    assert len(d['criteria']) == 5
    assert d['criteria'][0] == {
        'kind': 'vertical_speed', 'max': 3.0, 'actual': 5.0, 'ok': False,
        'score': pytest.approx(2 * (3.0 - 5.0) / 3.0),
    }


def test_report_str():
    text = str(evaluate(grounded(vz=-5.0), zone_radius=RADIUS))
    assert text.startswith("YOU DIED")
    assert "FAIL" in text
