import numpy as np
import pytest
from openchannel import Channel, Hydrograph
from openchannel.constants import MANNING_US

G_US = 32.2

QUICKSTART = dict(S0=0.001, n=0.045, Cm=MANNING_US, g=G_US, w=100, m=0)


def quickstart_wave(t):
    if t < 18000:
        return 250 + 375 * (1 - np.cos(2 * np.pi * t / 18000))
    return 250.0


@pytest.fixture
def quickstart():
    return dict(QUICKSTART)


@pytest.fixture
def channel():
    return Channel(bed_slope=0.001, roughness=0.045, width=100, side_slope=0, Cm=MANNING_US)


@pytest.fixture
def inflow():
    return Hydrograph(quickstart_wave).series(duration=30000, time_step=25)


@pytest.fixture
def routing_args(quickstart, inflow):
    return dict(quickstart,
                baseflow=250,
                inflow_series=inflow,
                downstream_series=None,
                tresolution=25,
                xresolution=1000,
                numnodes=31)
