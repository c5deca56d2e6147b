from .boundary import Boundary, BoundaryMode
from .channel import Channel
from .constants import UnitSystem
from .cross_section import TrapezoidalSection
from .depth import normal_depth, critical_depth
from .errors import (FlowError, DomainError, ConfigurationError, ConvergenceError, DivergenceError,
                     StabilityError)
from .hydrograph import Hydrograph
from .newton_raphson import newton_raphson
from .profile import Direction, Profile, ProfilePoint, compute_profile, standard_step
from .sampler import MonitorSeries, MonitorSpec, SeriesTable, sample_grid, sample_profile
from .solver import SchemeKind, WaveRouter, route_wave
from .results import profile_frame, series_frame, monitor_frame, routing_summary, save_results
