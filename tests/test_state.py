import numpy as np
import pytest

from lander_sim import constants as C
from lander_sim.frames import quaternion_from_axis_angle
from lander_sim.state import VehicleState, create_initial_state


def test_default_state():
    s = VehicleState()
    assert s.r.dtype == np.float64
    assert s.total_mass == pytest.approx(C.DRY_MASS + C.PAYLOAD_MASS + C.INITIAL_FUEL_MASS)
    assert s.tilt == 0.0


def test_lists_become_arrays():
    s = VehicleState(r=[1, 2, 3], v=[0, 0, -1])
    assert isinstance(s.r, np.ndarray)
    assert s.r.dtype == np.float64
    assert s.altitude == 3.0


def test_speed_properties():
    s = VehicleState(v=np.array([3.0, 4.0, -2.5]), omega=np.array([0.0, 0.3, 0.4]))
    assert s.vertical_speed == 2.5
    assert s.horizontal_speed == pytest.approx(5.0)
    assert s.angular_speed == pytest.approx(0.5)


def test_distance_is_planar():
    s = VehicleState(r=np.array([3.0, 4.0, 100.0]))
    assert s.distance_from_landing_zone == pytest.approx(5.0)


def test_tilt_property():
    q = quaternion_from_axis_angle(np.array([1.0, 0.0, 0.0]), 0.15)
    assert VehicleState(q=q).tilt == pytest.approx(0.15)


def test_copy_is_independent():
    s = VehicleState(r=np.array([1.0, 2.0, 3.0]))
    c = s.copy()
    c.r[0] = 99.0
    c.fuel_mass = 0.0
    assert s.r[0] == 1.0
    assert s.fuel_mass == C.INITIAL_FUEL_MASS


def test_create_initial_state():
    s = create_initial_state(np.array([10.0, -5.0, 200.0]), vertical_velocity=-2.0)
    np.testing.assert_array_equal(s.r, [10.0, -5.0, 200.0])
    np.testing.assert_array_equal(s.v, [0.0, 0.0, -2.0])
    np.testing.assert_array_equal(s.q, [1.0, 0.0, 0.0, 0.0])
    np.testing.assert_array_equal(s.omega, np.zeros(3))
    assert s.fuel_mass == C.INITIAL_FUEL_MASS
    assert s.t == 0.0


def test_str():
    assert "alt=200.0m" in str(create_initial_state(np.array([0.0, 0.0, 200.0])))
