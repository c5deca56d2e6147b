"""
Kinematic wave update.

Continuity is advanced in flow area with an explicit upwind difference,

    A_i^(k+1) = A_i^k - dt/dx * (Q_i^k - Q_(i-1)^k),

and the momentum equation is reduced to S0 = Sf, so the discharge at every
node is the Manning discharge of the new depth.
"""
import numpy as np
from .depth import solve_normal_depth


def compute_upstream_node(router, k, Q_new, A_new):
    channel = router.channel
    value = router.upstream_boundary.value_at(k)

    if router.upstream_boundary.condition_type():
        y = solve_normal_depth(channel, value, y_guess=router.depth[k-1, 0],
                               tolerance=router.tolerance, max_iter=router.max_iter)
        Q_new[0] = value
        A_new[0] = channel.area(y)
    else:
        Q_new[0] = channel.normal_flow(value)
        A_new[0] = channel.area(value)


def compute_downstream_node(router, k, Q_new, A_new):
    channel = router.channel
    value = router.downstream_boundary.value_at(k)

    # Free outflow: the upwind update needs no downstream information
    if value is None:
        return

    if router.downstream_boundary.condition_type():
        y = solve_normal_depth(channel, value, y_guess=router.depth[k-1, -1],
                               tolerance=router.tolerance, max_iter=router.max_iter)
        Q_new[-1] = value
        A_new[-1] = channel.area(y)
    else:
        Q_new[-1] = channel.normal_flow(value)
        A_new[-1] = channel.area(value)


def advance(router, k):
    """Computes time level k from time level k-1. Returns (Q, A) for all nodes."""
    Q, A = router.flow[k-1], router.area[k-1]
    ratio = router.time_step / router.spatial_step

    Q_new = np.empty_like(Q)
    A_new = np.empty_like(A)

    A_new[1:] = A[1:] - ratio * (Q[1:] - Q[:-1])
    router.require_physical(Q[1:], A_new[1:], k, offset=1)

    Q_new[1:] = router.channel.normal_flow(router.section.depth_from_area(A_new[1:]))

    compute_upstream_node(router, k, Q_new, A_new)
    compute_downstream_node(router, k, Q_new, A_new)

    return Q_new, A_new
