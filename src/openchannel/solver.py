import logging
from enum import Enum
import numpy as np
from scipy.constants import g as g_si
from . import hydraulics, kinematic, lax, maccormack
from .boundary import Boundary, BoundaryMode
from .channel import Channel
from .constants import TOLERANCE, MAX_ITER
from .depth import solve_normal_depth
from .errors import ConfigurationError, StabilityError
from .sampler import MonitorSpec, sample_grid

logger = logging.getLogger(__name__)


class SchemeKind(Enum):
    KINEMATIC = 'kinematic'
    LAX = 'lax'
    MACCORMACK = 'maccormack'

    @classmethod
    def resolve(cls, wave_type: str = 'Dynamic', scheme: str = 'MacCormack'):
        """Maps a wave type ('Kinematic' or 'Dynamic') and a dynamic scheme name to a scheme."""
        if isinstance(wave_type, cls):
            return wave_type

        wave = str(wave_type).lower()
        if wave == 'kinematic':
            return cls.KINEMATIC
        if wave != 'dynamic':
            raise ConfigurationError(f"Invalid wave type '{wave_type}'. Options: 'Kinematic', 'Dynamic'.")

        name = str(scheme).lower().replace('_', '').replace('-', '').replace(' ', '')
        if name == 'maccormack':
            return cls.MACCORMACK
        if name in ('lax', 'laxdiffusive'):
            return cls.LAX

        raise ConfigurationError(f"Invalid scheme '{scheme}'. Options: 'MacCormack', 'Lax'.")

    @classmethod
    def coerce(cls, value):
        """Accepts a SchemeKind, 'Kinematic', or the name of a dynamic scheme ('MacCormack', 'Lax')."""
        if isinstance(value, cls):
            return value
        if str(value).lower() == 'kinematic':
            return cls.KINEMATIC
        return cls.resolve('Dynamic', value)


SCHEMES = {
    SchemeKind.KINEMATIC: kinematic.advance,
    SchemeKind.LAX: lax.advance,
    SchemeKind.MACCORMACK: maccormack.advance,
}


class WaveRouter:
    """
    Routes a flood wave through a single prismatic reach with an explicit
    finite-difference scheme.

    The router owns the space-time grid: ``flow``, ``depth`` and ``area`` are
    arrays of shape (time levels, nodes) indexed [k, i]. Row 0 is the uniform
    steady state of the baseflow. A row is written only once it has been
    computed and validated in full; rows after ``time_level`` hold NaN.

    Attributes
    ----------
    time_level : int
        Last committed time level.

    """
    def __init__(self,
                 channel: Channel,
                 baseflow: float,
                 upstream_boundary: Boundary,
                 downstream_boundary: Boundary,
                 time_step: int | float,
                 spatial_step: int | float,
                 number_of_nodes: int,
                 scheme: SchemeKind | str = SchemeKind.MACCORMACK,
                 g: float = g_si,
                 tolerance: float = TOLERANCE,
                 max_iter: int = MAX_ITER):
        """
        Initializes the class.

        Parameters
        ----------
        channel : Channel
            The channel on which the simulation is performed.
        baseflow : float
            Steady flow rate at t=0.
        upstream_boundary : Boundary
            Prescribed flow or depth at node 0. Its series length sets the number of time levels.
        downstream_boundary : Boundary
            Prescribed flow, depth or free outflow at the last node.
        time_step : float
            Time step for the simulation in seconds.
        spatial_step : float
            Distance between nodes.
        number_of_nodes : int
            Number of spatial nodes (at least 3).
        scheme : SchemeKind or str
            The update rule, or its name: 'Kinematic', 'MacCormack' or 'Lax'.

        """
        if not np.isfinite(time_step) or time_step <= 0:
            raise ConfigurationError(f"Time step must be positive, got {time_step}.")
        if not np.isfinite(spatial_step) or spatial_step <= 0:
            raise ConfigurationError(f"Spatial step must be positive, got {spatial_step}.")
        if int(number_of_nodes) != number_of_nodes or number_of_nodes < 3:
            raise ConfigurationError(f"At least 3 spatial nodes are required, got {number_of_nodes}.")
        if upstream_boundary.condition == 'free_outflow' or len(upstream_boundary) < 2:
            raise ConfigurationError("The upstream boundary must prescribe at least two time levels.")
        if downstream_boundary.series is not None and len(downstream_boundary) != len(upstream_boundary):
            raise ConfigurationError("Upstream and downstream series must have the same length.")

        self.channel = channel
        self.section = channel.section
        self.g = g
        self.baseflow = baseflow
        self.upstream_boundary = upstream_boundary
        self.downstream_boundary = downstream_boundary
        self.scheme = SchemeKind.coerce(scheme)
        self.tolerance = tolerance
        self.max_iter = max_iter

        self.time_step, self.spatial_step = time_step, spatial_step
        self.number_of_nodes = int(number_of_nodes)
        self.max_timelevels = len(upstream_boundary)
        self.num_celerity = self.spatial_step / self.time_step

        self.flow = np.full(shape=(self.max_timelevels, self.number_of_nodes), fill_value=np.nan, dtype=np.float64)
        self.depth = np.full_like(self.flow, np.nan)
        self.area = np.full_like(self.flow, np.nan)

        self.time_level = 0
        self._stop_requested = False

        self.initialize_t0()
        self.check_courant()

    @property
    def completed_steps(self) -> int:
        return self.time_level

    @property
    def completed(self) -> bool:
        return self.time_level == self.max_timelevels - 1

    @property
    def times(self) -> np.ndarray:
        return np.arange(self.max_timelevels) * self.time_step

    @property
    def distances(self) -> np.ndarray:
        return np.arange(self.number_of_nodes) * self.spatial_step

    @property
    def velocity(self) -> np.ndarray:
        return self.flow / self.area

    def initialize_t0(self) -> None:
        """
        Sets time level 0 to uniform flow at the normal depth of the baseflow,
        with node 0 taking the first value of the upstream series.

        """
        y_base = solve_normal_depth(self.channel, self.baseflow, tolerance=self.tolerance, max_iter=self.max_iter)

        self.depth[0, :] = y_base
        self.flow[0, :] = self.baseflow
        self.area[0, :] = self.channel.area(y_base)

        value = self.upstream_boundary.value_at(0)

        if self.upstream_boundary.condition_type():
            if not np.isclose(value, self.baseflow, rtol=1e-6):
                logger.warning("Initial inflow (%g) differs from the baseflow (%g).", value, self.baseflow)
            self.flow[0, 0] = value
        else:
            if not np.isclose(value, y_base, rtol=1e-6):
                logger.warning("Initial upstream depth (%g) differs from the normal depth (%g).", value, y_base)
            self.depth[0, 0] = value
            self.area[0, 0] = self.channel.area(value)

    def _boundary_depth(self, boundary: Boundary):
        maximum = boundary.prescribed_maximum()
        if maximum is None:
            return None
        if boundary.condition_type():
            return solve_normal_depth(self.channel, maximum, tolerance=self.tolerance, max_iter=self.max_iter)
        return maximum

    def celerity(self, y, Q=None):
        """Wave speed of the selected scheme at depth y (and flow Q for dynamic schemes)."""
        if self.scheme is SchemeKind.KINEMATIC:
            return self.channel.kinematic_celerity(y)

        if Q is None:
            Q = self.channel.normal_flow(y)
        return self.channel.dynamic_celerity(y, Q, self.g)

    def check_courant(self) -> None:
        """
        Checks the Courant condition for the baseflow and for the largest
        prescribed boundary values, assuming uniform flow.

        Raises
        ------
        ConfigurationError
            If the Courant number exceeds one.

        """
        depths = [self.depth[0, 1]]
        for boundary in (self.upstream_boundary, self.downstream_boundary):
            y = self._boundary_depth(boundary)
            if y is not None:
                depths.append(y)

        analytical_celerity = max(float(self.celerity(y)) for y in depths)
        courant = analytical_celerity / self.num_celerity

        if courant > 1.0:
            raise ConfigurationError(
                f"Courant number = {courant:.3f} > 1 for the {self.scheme.value} scheme. "
                f"Use a time step below {self.spatial_step / analytical_celerity:.4g} "
                f"or a spatial step above {analytical_celerity * self.time_step:.4g}."
            )

        logger.debug("Courant number = %.3f", courant)

    def last_row(self) -> dict:
        k = self.time_level
        return {'flow': self.flow[k].copy(), 'depth': self.depth[k].copy(), 'area': self.area[k].copy()}

    def require_physical(self, Q, A, k: int, offset: int = 0, stage: str = None) -> None:
        """Raises StabilityError at the first node where A is not positive or Q, A are not finite."""
        bad = ~(np.isfinite(Q) & np.isfinite(A) & (A > 0))
        if np.any(bad):
            i = int(np.argmax(bad)) + offset
            where = f" ({stage})" if stage else ""
            raise StabilityError(
                f"Non-physical state at node {i}, time level {k}{where}: A={A[i - offset]}, Q={Q[i - offset]}.",
                step=k, node=i, last_row=self.last_row()
            )

    def check_cfl_all(self, k: int, Q, y) -> None:
        analytical_celerity = self.celerity(y, Q)
        i = int(np.argmax(analytical_celerity))

        if analytical_celerity[i] > self.num_celerity:
            raise StabilityError(
                f'CFL condition failed at i={i}, k={k}. CFL number = {analytical_celerity[i]/self.num_celerity}',
                step=k, node=i, last_row=self.last_row()
            )

    def flux(self, Q, A):
        """Momentum flux Q^2/A + g I1."""
        y = self.section.depth_from_area(A)
        return hydraulics.pressure_flux(Q=Q, A=A, I1=self.section.first_moment(y), g=self.g)

    def source(self, Q, A):
        """Momentum source g A (S0 - Sf)."""
        y = self.section.depth_from_area(A)
        return hydraulics.momentum_source(Q=Q,
                                          A=A,
                                          n=self.channel.roughness,
                                          R=self.section.hydraulic_radius(y),
                                          bed_slope=self.channel.bed_slope,
                                          g=self.g,
                                          Cm=self.channel.Cm)

    def spatial_diff(self, ip1, im1):
        return 0.5 * (ip1 - im1) / self.spatial_step

    def cell_avg(self, ip1, im1):
        return 0.5 * (ip1 + im1)

    def compute_upstream_node(self, k, Q, A, F, S, Q_new, A_new):
        """
        MacCormack upstream boundary: a prescribed flow closes the node with
        one-sided continuity, a prescribed depth with one-sided momentum.

        """
        value = self.upstream_boundary.value_at(k)
        ratio = self.time_step / self.spatial_step

        if self.upstream_boundary.condition_type():
            Q_new[0] = value
            A_new[0] = A[0] - ratio * (Q[1] - Q[0])
        else:
            A_new[0] = self.channel.area(value)
            Q_new[0] = Q[0] - ratio * (F[1] - F[0]) + self.time_step * S[0]

    def compute_downstream_node(self, k, Q, A, F, S, Q_new, A_new):
        """
        MacCormack downstream boundary. Without a prescribed value the node
        copies its upstream neighbour (zero gradient).

        """
        value = self.downstream_boundary.value_at(k)
        ratio = self.time_step / self.spatial_step

        if value is None:
            A_new[-1] = A_new[-2]
            Q_new[-1] = Q_new[-2]
        elif self.downstream_boundary.condition_type():
            Q_new[-1] = value
            A_new[-1] = A[-1] - ratio * (Q[-1] - Q[-2])
        else:
            A_new[-1] = self.channel.area(value)
            Q_new[-1] = Q[-1] - ratio * (F[-1] - F[-2]) + self.time_step * S[-1]

    def stop(self) -> None:
        """Requests termination before the next time level is computed."""
        self._stop_requested = True

    def run(self, should_stop=None):
        """
        Marches the grid in time until the last time level, or until a stop
        is requested.

        Parameters
        ----------
        should_stop : callable, optional
            Called with the router before each time level; returning True
            stops the run after the last committed level.

        Returns
        -------
        WaveRouter
            self

        """
        advance = SCHEMES[self.scheme]
        logger.info("Routing %d time levels over %d nodes with the %s scheme.",
                    self.max_timelevels - 1, self.number_of_nodes, self.scheme.value)

        while self.time_level < self.max_timelevels - 1:
            if self._stop_requested or (should_stop is not None and should_stop(self)):
                logger.info("Routing stopped at time level #%d of %d.", self.time_level, self.max_timelevels - 1)
                break

            k = self.time_level + 1
            Q_new, A_new = advance(self, k)

            self.require_physical(Q_new, A_new, k)
            y_new = self.section.depth_from_area(A_new)
            self.check_cfl_all(k, Q_new, y_new)

            self.flow[k] = Q_new
            self.area[k] = A_new
            self.depth[k] = y_new
            self.time_level = k

            logger.debug("Time level #%d committed.", k)
        else:
            logger.info("Routing completed: %d time levels.", self.time_level)

        return self


def route_wave(S0: float, n: float, Cm: float, g: float, w: float, m: float, baseflow: float,
               inflow_series, downstream_series, tresolution: float, xresolution: float, numnodes: int,
               monitor_nodes=None, monitor_steps=None, wave_type: str = 'Dynamic', scheme: str = 'MacCormack',
               boundary_mode: str = 'QQ', tolerance: float = TOLERANCE, max_iter: int = MAX_ITER):
    """Routes a flood wave and returns the monitored series.

    Args:
        S0 (float): Bed slope, must be positive.
        n (float): Manning's roughness coefficient.
        Cm (float): Unit constant of Manning's equation.
        g (float): Gravitational acceleration.
        w (float): Bottom width.
        m (float): Side slope.
        baseflow (float): Steady flow rate defining the initial condition.
        inflow_series (array-like): Upstream flow (or depth) at every time level, starting at t=0.
        downstream_series (array-like): Downstream flow or depth at every time level, NaN for
        free outflow. None for free outflow throughout.
        tresolution (float): Time step.
        xresolution (float): Spatial step.
        numnodes (int): Number of nodes.
        monitor_nodes (list[int]): Nodes whose full time series is returned.
        monitor_steps (list[int]): Time levels whose full spatial profile is returned.
        wave_type (str): 'Kinematic' or 'Dynamic'.
        scheme (str): 'MacCormack' or 'Lax', for dynamic waves.
        boundary_mode (str): 'QQ', 'Qy', 'yQ' or 'yy'.

    Returns:
        MonitorSeries: node_series and timestep_series.
    """
    channel = Channel(bed_slope=S0, roughness=n, width=w, side_slope=m, Cm=Cm)
    mode = BoundaryMode.coerce(boundary_mode)

    upstream = Boundary(condition=mode.upstream_condition, series=inflow_series)
    if downstream_series is None:
        downstream = Boundary(condition='free_outflow', allow_free=True)
    else:
        downstream = Boundary(condition=mode.downstream_condition, series=downstream_series, allow_free=True)

    router = WaveRouter(channel=channel,
                        baseflow=baseflow,
                        upstream_boundary=upstream,
                        downstream_boundary=downstream,
                        time_step=tresolution,
                        spatial_step=xresolution,
                        number_of_nodes=numnodes,
                        scheme=SchemeKind.resolve(wave_type, scheme),
                        g=g,
                        tolerance=tolerance,
                        max_iter=max_iter)
    router.run()

    spec = MonitorSpec(nodes=() if monitor_nodes is None else monitor_nodes,
                       steps=() if monitor_steps is None else monitor_steps)
    return sample_grid(router, spec)
