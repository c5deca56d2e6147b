import numpy as np
import pytest
from openchannel import Channel, ConfigurationError, DomainError, critical_depth, normal_depth
from openchannel.constants import MANNING_SI, GRAVITY_SI
from openchannel.depth import solve_normal_depth
from conftest import G_US


def test_quickstart_normal_depth_reproduces_discharge(quickstart, channel):
    yn = normal_depth(S0=0.001, n=0.045, Q=250, y_guess=1.0, Cm=quickstart['Cm'], w=100, m=0)

    assert yn == pytest.approx(1.711, abs=0.005)
    assert channel.normal_flow(yn) == pytest.approx(250, rel=1e-6)


def test_normal_depth_without_guess(quickstart):
    yn = normal_depth(S0=0.001, n=0.045, Q=250, y_guess=None, Cm=quickstart['Cm'], w=100, m=0)
    assert yn == pytest.approx(1.711, abs=0.005)


def test_quickstart_critical_depth_matches_closed_form(channel):
    yc = critical_depth(Q=250, y_guess=1.0, g=G_US, w=100, m=0)

    assert yc == pytest.approx((2.5**2 / G_US) ** (1 / 3), rel=1e-7)
    assert yc == pytest.approx(0.579, abs=0.001)
    assert channel.froude(yc, 250, G_US) == pytest.approx(1.0, abs=1e-6)


@pytest.mark.parametrize('w, m', [(10, 2), (0, 1), (5, 0.5)])
def test_normal_depth_trapezoid_and_triangle(w, m):
    Q = 40.0
    yn = normal_depth(S0=0.0005, n=0.02, Q=Q, y_guess=None, Cm=MANNING_SI, w=w, m=m)
    channel = Channel(bed_slope=0.0005, roughness=0.02, width=w, side_slope=m, Cm=MANNING_SI)

    assert channel.normal_flow(yn) == pytest.approx(Q, rel=1e-6)


def test_critical_depth_triangle_closed_form():
    Q, m = 15.0, 1.5
    yc = critical_depth(Q=Q, y_guess=None, g=GRAVITY_SI, w=0, m=m)

    assert yc == pytest.approx((2 * Q**2 / (GRAVITY_SI * m**2)) ** 0.2, rel=1e-7)


def test_critical_depth_trapezoid_gives_unit_froude():
    yc = critical_depth(Q=60.0, y_guess=2.0, g=GRAVITY_SI, w=8, m=2)
    channel = Channel(bed_slope=0.001, roughness=0.03, width=8, side_slope=2)

    assert channel.froude(yc, 60.0, GRAVITY_SI) == pytest.approx(1.0, abs=1e-6)


def test_normal_depth_grows_with_discharge():
    depths = [normal_depth(S0=0.001, n=0.03, Q=Q, y_guess=None, Cm=1.0, w=20, m=1) for Q in (5, 50, 500)]
    assert np.all(np.diff(depths) > 0)


@pytest.mark.parametrize('S0', [0.0, -0.001])
def test_normal_depth_requires_positive_slope(S0):
    with pytest.raises(ConfigurationError):
        normal_depth(S0=S0, n=0.03, Q=10, y_guess=1.0, Cm=1.0, w=5, m=0)


def test_invalid_inputs_raise_domain_errors(channel):
    with pytest.raises(DomainError):
        solve_normal_depth(channel, -5.0)
    with pytest.raises(DomainError):
        critical_depth(Q=0.0, y_guess=1.0, g=G_US, w=100, m=0)
    with pytest.raises(DomainError):
        normal_depth(S0=0.001, n=0.0, Q=10, y_guess=1.0, Cm=1.0, w=5, m=0)


def test_unit_systems():
    from openchannel import UnitSystem

    assert UnitSystem.SI.manning_constant == 1.0
    assert UnitSystem.US.manning_constant == 1.486
    assert UnitSystem.US.gravity == pytest.approx(32.174, abs=1e-3)
