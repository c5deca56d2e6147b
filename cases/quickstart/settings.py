from math import cos, pi
from openchannel.constants import UnitSystem

############                Channel (US customary units)        ############

width = 100
side_slope = 0
roughness = 0.045
S_0 = 0.001
Cm = UnitSystem.US.manning_constant
g = UnitSystem.US.gravity

############                Profile                             ############

profile_step = 100
profile_length = 20000

############                Routing                             ############

spatial_step = 1000
number_of_nodes = 31
time_step = 25
duration = 30000

wave_type = 'Dynamic'
scheme = 'MacCormack'
boundary_mode = 'QQ'

monitor_nodes = [0, 10, 20, 30]
monitor_steps = [0, 360, 720, 1080]

############                Inflow Hydrograph Function          ############

baseflow = 250


def hydrograph(t):
    period = 18000
    amplitude = 375

    if t < period:
        return baseflow + amplitude * (1 - cos(2 * pi * t / period))
    else:
        return baseflow
