import logging
from dataclasses import dataclass
import numpy as np
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def _as_indices(values) -> tuple:
    if values is None:
        return ()
    return tuple(int(v) for v in np.atleast_1d(values))


def _readonly(array) -> np.ndarray:
    array = np.array(array)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class MonitorSpec:
    """Nodes whose time series, and time levels whose spatial profile, are retained."""
    nodes: tuple = ()
    steps: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, 'nodes', _as_indices(self.nodes))
        object.__setattr__(self, 'steps', _as_indices(self.steps))


@dataclass(frozen=True)
class SeriesTable:
    """
    Columns of sampled grid values. Node monitors hold one row per
    (node, time level) pair in node order; timestep monitors one row per
    (time level, node) pair in time order.
    """
    monitor_type: str
    step: np.ndarray
    node: np.ndarray
    time: np.ndarray
    distance: np.ndarray
    flow: np.ndarray
    depth: np.ndarray
    velocity: np.ndarray
    area: np.ndarray

    def __len__(self):
        return self.step.size


@dataclass(frozen=True)
class MonitorSeries:
    node_series: SeriesTable
    timestep_series: SeriesTable


def _table(router, monitor_type, steps, nodes) -> SeriesTable:
    steps = np.asarray(steps, dtype=np.int64)
    nodes = np.asarray(nodes, dtype=np.int64)

    flow = router.flow[steps, nodes]
    area = router.area[steps, nodes]

    return SeriesTable(monitor_type=monitor_type,
                       step=_readonly(steps),
                       node=_readonly(nodes),
                       time=_readonly(steps * router.time_step),
                       distance=_readonly(nodes * router.spatial_step),
                       flow=_readonly(flow),
                       depth=_readonly(router.depth[steps, nodes]),
                       velocity=_readonly(flow / area),
                       area=_readonly(area))


def sample_grid(router, spec: MonitorSpec) -> MonitorSeries:
    """
    Extracts the monitored series from a routed grid.

    Parameters
    ----------
    router : WaveRouter
        A router whose run has finished (completely or early).
    spec : MonitorSpec
        Requested node and time level indices.

    Returns
    -------
    MonitorSeries

    """
    for i in spec.nodes:
        if not 0 <= i < router.number_of_nodes:
            raise ConfigurationError(f"Monitor node {i} is outside the grid (0..{router.number_of_nodes - 1}).")
    for k in spec.steps:
        if not 0 <= k < router.max_timelevels:
            raise ConfigurationError(f"Monitor step {k} is outside the grid (0..{router.max_timelevels - 1}).")

    committed = np.arange(router.time_level + 1)

    node_steps = np.tile(committed, len(spec.nodes))
    node_nodes = np.repeat(np.array(spec.nodes, dtype=np.int64), committed.size)

    steps = []
    for k in spec.steps:
        if k > router.time_level:
            logger.warning("Monitor step %d was not computed (last time level: %d); skipped.", k, router.time_level)
        else:
            steps.append(k)

    all_nodes = np.arange(router.number_of_nodes)
    step_steps = np.repeat(np.array(steps, dtype=np.int64), all_nodes.size)
    step_nodes = np.tile(all_nodes, len(steps))

    return MonitorSeries(node_series=_table(router, 'node', node_steps, node_nodes),
                         timestep_series=_table(router, 'timestep', step_steps, step_nodes))


def sample_profile(profile, stations) -> dict:
    """Interpolates depth, bed elevation and water surface of a profile at the given stations.

    Args:
        profile (Profile): A standard-step profile.
        stations (array-like): Stations within the profile's extent.

    Returns:
        dict: 'x', 'y', 'z' and 'stage' arrays.
    """
    x = profile.column('x')
    order = np.argsort(x)
    x = x[order]

    stations = np.atleast_1d(np.asarray(stations, dtype=np.float64))
    if np.any(stations < x[0]) or np.any(stations > x[-1]):
        raise ConfigurationError(f"Stations must lie within [{x[0]:g}, {x[-1]:g}].")

    y = np.interp(stations, x, profile.column('y')[order])
    z = np.interp(stations, x, profile.column('z')[order])

    return {'x': stations, 'y': y, 'z': z, 'stage': y + z}
