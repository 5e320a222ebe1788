import numpy as np
import pytest

from lander_sim import constants as C
from lander_sim.control import PidController, VerticalVelocityController

MASS = C.DRY_MASS + C.PAYLOAD_MASS + C.INITIAL_FUEL_MASS
DT = C.DT


class TestPidController:

    def test_first_update(self):
        pid = PidController(0.8, 0.05, 0.3)
        out = pid.update(-6.0, 0.0, DT)
        e = -6.0
        assert out == pytest.approx(0.8 * e + 0.05 * e * DT + 0.3 * e / DT)
        assert pid.integral == pytest.approx(e * DT)
        assert pid.prev_error == e

    def test_derivative_uses_previous_error(self):
        pid = PidController(0.0, 0.0, 1.0)
        pid.update(1.0, 0.0, 0.5)
        assert pid.update(1.0, 0.5, 0.5) == pytest.approx((0.5 - 1.0) / 0.5)

    def test_integral_has_no_windup_limit(self):
        pid = PidController(0.0, 1.0, 0.0)
        for _ in range(10000):
            out = pid.update(100.0, 0.0, 1.0)
        assert pid.integral == pytest.approx(1e6)
        assert out == pytest.approx(1e6)

    @pytest.mark.parametrize("dt", [0.0, -0.1])
    def test_non_positive_dt_raises(self, dt):
        with pytest.raises(ValueError):
            PidController(1.0, 1.0, 1.0).update(1.0, 0.0, dt)

    def test_reset(self):
        pid = PidController(1.0, 1.0, 1.0)
        pid.update(1.0, 0.0, 1.0)
        pid.reset()
        assert pid.integral == 0.0
        assert pid.prev_error == 0.0


class TestVerticalVelocityController:

    def test_initial_target(self):
        assert VerticalVelocityController(-6.0).target == -6.0

    def test_adjust_target_accumulates(self):
        ctrl = VerticalVelocityController(-6.0)
        ctrl.adjust_target(1.0)
        ctrl.adjust_target(1.0)
        assert ctrl.target == -4.0
        ctrl.adjust_target(-0.5)
        assert ctrl.target == -4.5

    def test_adjust_target_unbounded_by_default(self):
        ctrl = VerticalVelocityController(0.0)
        ctrl.adjust_target(500.0)
        assert ctrl.target == 500.0

    def test_adjust_target_clamped_to_range(self):
        ctrl = VerticalVelocityController(-6.0, target_range=(-10.0, 0.0))
        ctrl.adjust_target(20.0)
        assert ctrl.target == 0.0
        ctrl.adjust_target(-50.0)
        assert ctrl.target == -10.0

    def test_initial_target_clamped_to_range(self):
        assert VerticalVelocityController(-30.0, target_range=(-10.0, 0.0)).target == -10.0

    def test_throttle_formula(self):
        ctrl = VerticalVelocityController(0.0, kp=1.0, ki=0.0, kd=0.0)
        tilt = 0.1
        throttle = ctrl.compute_throttle(-2.0, MASS, tilt, DT)
        expected = MASS * (C.MOON_GRAVITY + 2.0) / (C.DCS_THRUST * np.cos(tilt))
        assert 0.0 < expected < 1.0
        assert throttle == pytest.approx(expected)

    def test_falling_too_fast_saturates_full(self):
        ctrl = VerticalVelocityController(-1.0)
        assert ctrl.compute_throttle(-10.0, MASS, 0.0, DT) == 1.0

    def test_rising_cuts_engine(self):
        ctrl = VerticalVelocityController(-6.0)
        assert ctrl.compute_throttle(5.0, MASS, 0.0, DT) == 0.0

    def test_tilt_requires_more_throttle(self):
        upright = VerticalVelocityController(0.0, kp=1.0, ki=0.0, kd=0.0)
        tilted = VerticalVelocityController(0.0, kp=1.0, ki=0.0, kd=0.0)
        a = upright.compute_throttle(-2.0, MASS, 0.0, DT)
        b = tilted.compute_throttle(-2.0, MASS, 0.5, DT)
        assert b > a

    def test_throttle_always_in_unit_interval(self):
        rng = np.random.default_rng(0)
        for _ in range(500):
            ctrl = VerticalVelocityController(rng.uniform(-50, 50))
            throttle = ctrl.compute_throttle(
                rng.uniform(-100, 100),
                rng.uniform(1.0, 20000.0),
                rng.uniform(0.0, np.pi / 2 - 1e-9),
                rng.uniform(1e-3, 1.0),
            )
            assert 0.0 <= throttle <= 1.0

    def test_near_horizontal_tilt_guarded(self):
        ctrl = VerticalVelocityController(-1.0)
        assert ctrl.compute_throttle(-10.0, MASS, np.pi / 2, DT) == 1.0
        ctrl = VerticalVelocityController(-6.0)
        assert ctrl.compute_throttle(5.0, MASS, np.pi / 2, DT) == 0.0

    def test_compute_reports_internals(self):
        ctrl = VerticalVelocityController(-1.0)
        out = ctrl.compute(-10.0, MASS, 0.0, DT)
        assert out['throttle'] == 1.0
        assert out['saturated'] is True
        assert out['error'] == pytest.approx(9.0)
        assert out['required_force'] == pytest.approx(MASS * (C.MOON_GRAVITY + out['control']))

    def test_non_positive_dt_raises(self):
        with pytest.raises(ValueError):
            VerticalVelocityController(-6.0).compute_throttle(0.0, MASS, 0.0, 0.0)
