import logging
import numpy as np
import pytest
from openchannel import (Boundary, BoundaryMode, ConfigurationError, DomainError, SchemeKind, StabilityError,
                         WaveRouter, normal_depth, route_wave)
from openchannel.constants import MANNING_US
from openchannel.depth import solve_normal_depth
from conftest import G_US


def make_router(channel, inflow, scheme, downstream=None, time_step=25):
    if downstream is None:
        downstream = Boundary(condition='free_outflow', allow_free=True)

    return WaveRouter(channel=channel,
                      baseflow=250,
                      upstream_boundary=Boundary(condition='flow_hydrograph', series=inflow),
                      downstream_boundary=downstream,
                      time_step=time_step,
                      spatial_step=1000,
                      number_of_nodes=31,
                      scheme=scheme,
                      g=G_US)


def test_scheme_resolution():
    assert SchemeKind.resolve('Kinematic') is SchemeKind.KINEMATIC
    assert SchemeKind.resolve('kinematic', 'Lax') is SchemeKind.KINEMATIC
    assert SchemeKind.resolve('Dynamic') is SchemeKind.MACCORMACK
    assert SchemeKind.resolve('Dynamic', 'Lax') is SchemeKind.LAX
    assert SchemeKind.resolve('dynamic', 'maccormack') is SchemeKind.MACCORMACK

    with pytest.raises(ConfigurationError):
        SchemeKind.resolve('Diffusive')
    with pytest.raises(ConfigurationError):
        SchemeKind.resolve('Dynamic', 'Preissmann')


def test_boundary_modes():
    mode = BoundaryMode.coerce('Qy')
    assert mode.upstream_condition == 'flow_hydrograph'
    assert mode.downstream_condition == 'depth_hydrograph'
    assert BoundaryMode.coerce('yQ').upstream_condition == 'depth_hydrograph'

    with pytest.raises(ConfigurationError):
        BoundaryMode.coerce('QX')


def test_boundary_validation():
    with pytest.raises(DomainError):
        Boundary(condition='flow_hydrograph', series=[100, np.nan, 100])
    with pytest.raises(DomainError):
        Boundary(condition='flow_hydrograph', series=[100, -1, 100])
    with pytest.raises(ConfigurationError):
        Boundary(condition='free_outflow')

    ds = Boundary(condition='flow_hydrograph', series=[100, np.nan, 120], allow_free=True)
    assert ds.value_at(1) is None
    assert ds.value_at(2) == 120
    assert ds.prescribed_maximum() == 120


def test_maccormack_quickstart(routing_args, inflow):
    series = route_wave(monitor_nodes=[0, 15, 30], monitor_steps=[0, 360, 1200], **routing_args)
    node = series.node_series

    assert node.monitor_type == 'node'
    assert len(node) == 3 * inflow.size
    assert np.all(node.depth > 0)

    at_inlet = node.node == 0
    assert np.array_equal(node.flow[at_inlet], inflow)

    # Attenuated peak reaches the outlet
    at_outlet = node.node == 30
    assert 250 < np.max(node.flow[at_outlet]) < 1000


def test_maccormack_conserves_mass(channel, inflow):
    from openchannel.results import routing_summary

    router = make_router(channel, inflow, SchemeKind.MACCORMACK).run()
    summary = routing_summary(router)

    assert router.completed
    assert np.all(router.depth > 0)
    assert abs(summary['mass_imbalance']) < 0.02 * summary['inflow_volume']


def test_kinematic_mass_conservation_is_exact(channel, inflow):
    # Stop while the wave is inside the reach so that the storage change is large
    router = make_router(channel, inflow, SchemeKind.KINEMATIC).run(should_stop=lambda r: r.time_level >= 400)

    K = router.time_level
    dx, dt = router.spatial_step, router.time_step
    storage_change = dx * (np.sum(router.area[K, 1:]) - np.sum(router.area[0, 1:]))
    net_inflow = dt * np.sum(router.flow[:K, 0] - router.flow[:K, -1])

    assert K == 400
    assert net_inflow > 1e5
    assert storage_change == pytest.approx(net_inflow, rel=1e-6)


def test_kinematic_flow_is_manning_flow(channel, inflow):
    router = make_router(channel, inflow, SchemeKind.KINEMATIC).run()
    assert np.allclose(router.flow, channel.normal_flow(router.depth), rtol=1e-6)


def test_lax_run_completes(channel, inflow):
    router = make_router(channel, inflow, SchemeKind.LAX).run()

    assert router.completed
    assert np.all(router.depth > 0)
    assert np.array_equal(router.flow[:, 0], inflow)


@pytest.mark.parametrize('scheme', [SchemeKind.LAX, SchemeKind.MACCORMACK, SchemeKind.KINEMATIC])
def test_steady_state_is_preserved(channel, scheme):
    yn = normal_depth(S0=0.001, n=0.045, Q=250, y_guess=1.0, Cm=MANNING_US, w=100, m=0)
    downstream = Boundary(condition='depth_hydrograph', series=np.full(201, yn), allow_free=True)

    router = make_router(channel, np.full(201, 250.0), scheme, downstream=downstream).run()

    assert np.allclose(router.flow, 250, rtol=1e-5)
    assert np.allclose(router.depth, yn, rtol=1e-5)


def test_courant_violation_is_rejected(channel, inflow):
    with pytest.raises(ConfigurationError, match='Courant'):
        make_router(channel, inflow, SchemeKind.MACCORMACK, time_step=100)


def test_invalid_router_configuration(routing_args):
    with pytest.raises(ConfigurationError):
        route_wave(**dict(routing_args, numnodes=2))
    with pytest.raises(ConfigurationError):
        route_wave(**dict(routing_args, downstream_series=np.full(10, 250.0)))
    with pytest.raises(ConfigurationError):
        route_wave(**dict(routing_args, S0=0.0))
    with pytest.raises(ConfigurationError):
        route_wave(**dict(routing_args, boundary_mode='QZ'))


def test_baseflow_mismatch_is_logged(channel, caplog):
    with caplog.at_level(logging.WARNING, logger='openchannel.solver'):
        make_router(channel, np.full(11, 300.0), SchemeKind.KINEMATIC)

    assert 'differs from the baseflow' in caplog.text


def test_early_stop(channel, inflow):
    router = make_router(channel, inflow, SchemeKind.MACCORMACK)
    router.run(should_stop=lambda r: r.time_level >= 100)

    assert router.completed_steps == 100
    assert not router.completed
    assert np.all(np.isfinite(router.flow[:101]))
    assert np.all(np.isnan(router.flow[101:]))

    router.stop()
    router.run()
    assert router.completed_steps == 100


def test_non_physical_state_raises_stability_error(channel, inflow):
    router = make_router(channel, inflow, SchemeKind.LAX)

    with pytest.raises(StabilityError) as info:
        router.require_physical(np.array([250.0, np.nan, 250.0]), np.array([170.0, 170.0, 170.0]), k=1)

    assert info.value.step == 1
    assert info.value.node == 1
    assert np.array_equal(info.value.last_row['flow'], router.flow[0])


def test_routing_is_deterministic(routing_args):
    first = route_wave(monitor_nodes=[10, 30], monitor_steps=[600], **routing_args)
    second = route_wave(monitor_nodes=[10, 30], monitor_steps=[600], **routing_args)

    assert np.array_equal(first.node_series.flow, second.node_series.flow)
    assert np.array_equal(first.timestep_series.depth, second.timestep_series.depth)


def test_lax_conserves_mass(channel, inflow):
    from openchannel.results import routing_summary

    router = make_router(channel, inflow, SchemeKind.LAX).run(should_stop=lambda r: r.time_level >= 400)

    K = router.time_level
    dx, dt = router.spatial_step, router.time_step

    def storage(row):
        return dx * (np.sum(row) - 0.5 * (row[0] + row[-1]))

    storage_change = storage(router.area[K]) - storage(router.area[0])
    net_inflow = dt * np.sum(router.flow[:K, 0] - router.flow[:K, -1])

    assert net_inflow > 1e5
    assert storage_change == pytest.approx(net_inflow, rel=1e-6)
    assert abs(routing_summary(router)['mass_imbalance_percentage']) < 0.5


def test_scheme_names_are_accepted_by_router(channel, inflow):
    assert make_router(channel, inflow, 'Lax').scheme is SchemeKind.LAX
    assert make_router(channel, inflow, 'MacCormack').scheme is SchemeKind.MACCORMACK
    assert make_router(channel, inflow, 'Kinematic').scheme is SchemeKind.KINEMATIC

    with pytest.raises(ConfigurationError):
        make_router(channel, inflow, 'Preissmann')


SCHEME_KINDS = [SchemeKind.KINEMATIC, SchemeKind.LAX, SchemeKind.MACCORMACK]


@pytest.fixture
def inflow_depth(channel, inflow):
    return np.array([solve_normal_depth(channel, q) for q in inflow])


def route_with(channel, upstream, downstream, scheme):
    return WaveRouter(channel=channel,
                      baseflow=250,
                      upstream_boundary=upstream,
                      downstream_boundary=downstream,
                      time_step=25,
                      spatial_step=1000,
                      number_of_nodes=31,
                      scheme=scheme,
                      g=G_US).run()


@pytest.mark.parametrize('scheme', SCHEME_KINDS)
def test_prescribed_upstream_depth(channel, inflow_depth, scheme):
    router = route_with(channel,
                        Boundary(condition='depth_hydrograph', series=inflow_depth),
                        Boundary(condition='free_outflow', allow_free=True),
                        scheme)

    assert router.completed
    assert np.allclose(router.depth[:, 0], inflow_depth, rtol=1e-9)
    assert np.all(router.depth > 0)
    assert 250 < np.max(router.flow[:, -1]) < 1000


@pytest.mark.parametrize('scheme', SCHEME_KINDS)
def test_prescribed_downstream_discharge(channel, inflow, scheme):
    outflow = make_router(channel, inflow, scheme).run().flow[:, -1].copy()
    downstream = Boundary(condition='flow_hydrograph', series=outflow, allow_free=True)

    router = make_router(channel, inflow, scheme, downstream=downstream).run()

    assert router.completed
    assert np.array_equal(router.flow[:, -1], outflow)
    assert np.array_equal(router.flow[:, 0], inflow)
    assert np.all(router.depth > 0)


@pytest.mark.parametrize('scheme', SCHEME_KINDS)
def test_prescribed_depths_at_both_ends(channel, inflow_depth, scheme):
    upstream = Boundary(condition='depth_hydrograph', series=inflow_depth)
    free = route_with(channel, upstream, Boundary(condition='free_outflow', allow_free=True), scheme)
    stage = free.depth[:, -1].copy()

    router = route_with(channel, upstream, Boundary(condition='depth_hydrograph', series=stage, allow_free=True),
                        scheme)

    assert router.completed
    assert np.allclose(router.depth[:, 0], inflow_depth, rtol=1e-9)
    assert np.allclose(router.depth[:, -1], stage, rtol=1e-9)
    assert np.all(router.depth > 0)


@pytest.mark.parametrize('wave_type, scheme', [('Kinematic', 'MacCormack'), ('Dynamic', 'Lax'),
                                               ('Dynamic', 'MacCormack')])
def test_route_wave_with_upstream_depth_series(routing_args, inflow_depth, wave_type, scheme):
    args = dict(routing_args, inflow_series=inflow_depth)
    series = route_wave(monitor_nodes=[0], monitor_steps=[], wave_type=wave_type, scheme=scheme,
                        boundary_mode='yQ', **args)

    assert np.allclose(series.node_series.depth, inflow_depth, rtol=1e-9)


def test_run_rejects_ponding_beyond_courant_limit(channel):
    # Outflow held at the baseflow: the reach fills and the gravity wave
    # speed outgrows the Courant limit checked before the run
    times = np.arange(3000) * 70.0
    inflow = 250 + 750 * np.minimum(times / 3600, 1.0)
    downstream = Boundary(condition='flow_hydrograph', series=np.full(times.size, 250.0), allow_free=True)

    router = make_router(channel, inflow, SchemeKind.MACCORMACK, downstream=downstream, time_step=70)

    with pytest.raises(StabilityError) as info:
        router.run()

    error = info.value
    assert error.step == router.time_level + 1
    assert error.node is not None
    assert np.all(np.isnan(router.flow[error.step]))
    assert np.array_equal(error.last_row['depth'], router.depth[router.time_level])
