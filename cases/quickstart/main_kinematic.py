import logging
from openchannel import Boundary, Channel, Hydrograph, SchemeKind, WaveRouter
from openchannel.results import save_results
from settings import *

logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')

channel = Channel(bed_slope=S_0, roughness=roughness, width=width, side_slope=side_slope, Cm=Cm)

us = Boundary(condition='flow_hydrograph',
              series=Hydrograph(hydrograph).series(duration=duration, time_step=time_step))

ds = Boundary(condition='free_outflow', allow_free=True)

router = WaveRouter(channel=channel,
                    baseflow=baseflow,
                    upstream_boundary=us,
                    downstream_boundary=ds,
                    time_step=time_step,
                    spatial_step=spatial_step,
                    number_of_nodes=number_of_nodes,
                    scheme=SchemeKind.KINEMATIC,
                    g=g)

router.run()
summary = save_results(router, folder_path='results/kinematic')
print(f"Peak attenuation = {summary['attenuation_percentage']:.2f}%")
print('Simulation finished successfully.')
