import logging
from openchannel import Hydrograph, compute_profile, critical_depth, normal_depth, route_wave
from openchannel.results import monitor_frame, profile_frame
from settings import *

logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')

yn = normal_depth(S0=S_0, n=roughness, Q=baseflow, y_guess=1.0, Cm=Cm, w=width, m=side_slope)
yc = critical_depth(Q=baseflow, y_guess=1.0, g=g, w=width, m=side_slope)
print(f'Normal depth = {yn:.4f} ft, critical depth = {yc:.4f} ft')

# M1 backwater behind a control twice the normal depth
profile = compute_profile(S0=S_0, n=roughness, Q=baseflow, y0=2 * yn, Cm=Cm, g=g, w=width, m=side_slope,
                          stepdist=profile_step, totaldist=profile_length, direction='upstream')
print(profile_frame(profile).iloc[::20].to_string(index=False))

inflow = Hydrograph(hydrograph).series(duration=duration, time_step=time_step)

series = route_wave(S0=S_0, n=roughness, Cm=Cm, g=g, w=width, m=side_slope, baseflow=baseflow,
                    inflow_series=inflow, downstream_series=None,
                    tresolution=time_step, xresolution=spatial_step, numnodes=number_of_nodes,
                    monitor_nodes=monitor_nodes, monitor_steps=monitor_steps,
                    wave_type=wave_type, scheme=scheme, boundary_mode=boundary_mode)

df = monitor_frame(series)
peaks = df[df['monitor_type'] == 'node'].groupby('node')['flow'].max()
print(peaks.to_string())
print('Simulation finished successfully.')
