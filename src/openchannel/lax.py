"""
Lax diffusive scheme for the conservative Saint-Venant equations.

Interior nodes are replaced by the average of their neighbours, which adds
the numerical diffusion that keeps the scheme stable for Courant numbers up
to one. In flux form the interior update is

    U_i' = U_i - dt/dx * (F_(i+1/2) - F_(i-1/2)) + dt * S,
    F_(i+1/2) = (F_i + F_(i+1)) / 2 - dx/(2 dt) * (U_(i+1) - U_i),

and the end nodes are closed as half cells on the same interface flux, so
the scheme conserves volume over the whole reach.
"""
import numpy as np


def new_area(router, A_im1, A_ip1, Q_im1, Q_ip1):
    avg_A = router.cell_avg(ip1=A_ip1, im1=A_im1)

    dQ_dx = router.spatial_diff(
        ip1=Q_ip1,
        im1=Q_im1,
    )

    return -dQ_dx * router.time_step + avg_A


def new_flow(router, Q_im1, Q_ip1, F_im1, F_ip1, S_im1, S_ip1):
    avg_Q = router.cell_avg(ip1=Q_ip1, im1=Q_im1)
    avg_S = router.cell_avg(ip1=S_ip1, im1=S_im1)

    dF_dx = router.spatial_diff(
        ip1=F_ip1,
        im1=F_im1
    )

    return (-dF_dx + avg_S) * router.time_step + avg_Q


def interface_flux(router, U_i, U_ip1, F_i, F_ip1):
    """Numerical flux between nodes i and i+1."""
    return router.cell_avg(ip1=F_ip1, im1=F_i) - 0.5 * router.spatial_step / router.time_step * (U_ip1 - U_i)


def compute_upstream_node(router, k, Q, A, F, S, Q_new, A_new):
    """
    Half-cell balance at node 0. A prescribed flow enters the continuity
    balance as the boundary flux; a prescribed depth fixes the area and the
    flow follows from the momentum balance.

    """
    value = router.upstream_boundary.value_at(k)
    ratio = 2.0 * router.time_step / router.spatial_step

    if router.upstream_boundary.condition_type():
        mass_flux = interface_flux(router, A[0], A[1], Q[0], Q[1])
        Q_new[0] = value
        A_new[0] = A[0] - ratio * (mass_flux - Q[0])
    else:
        momentum_flux = interface_flux(router, Q[0], Q[1], F[0], F[1])
        A_new[0] = router.channel.area(value)
        Q_new[0] = Q[0] - ratio * (momentum_flux - F[0]) + router.time_step * S[0]


def compute_downstream_node(router, k, Q, A, F, S, Q_new, A_new):
    """
    Half-cell balance at the last node. Free outflow leaves with the flow and
    momentum flux of the last node (zero gradient).

    """
    value = router.downstream_boundary.value_at(k)
    ratio = 2.0 * router.time_step / router.spatial_step
    momentum_flux = interface_flux(router, Q[-2], Q[-1], F[-2], F[-1])

    if value is not None and not router.downstream_boundary.condition_type():
        A_new[-1] = router.channel.area(value)
        Q_new[-1] = Q[-1] - ratio * (F[-1] - momentum_flux) + router.time_step * S[-1]
        return

    mass_flux = interface_flux(router, A[-2], A[-1], Q[-2], Q[-1])
    A_new[-1] = A[-1] - ratio * (Q[-1] - mass_flux)

    if value is None:
        Q_new[-1] = Q[-1] - ratio * (F[-1] - momentum_flux) + router.time_step * S[-1]
    else:
        Q_new[-1] = value


def advance(router, k):
    """Computes time level k from time level k-1. Returns (Q, A) for all nodes."""
    Q, A = router.flow[k-1], router.area[k-1]
    F, S = router.flux(Q, A), router.source(Q, A)

    Q_new = np.empty_like(Q)
    A_new = np.empty_like(A)

    A_new[1:-1] = new_area(router, A_im1=A[:-2], A_ip1=A[2:], Q_im1=Q[:-2], Q_ip1=Q[2:])
    Q_new[1:-1] = new_flow(router, Q_im1=Q[:-2], Q_ip1=Q[2:], F_im1=F[:-2], F_ip1=F[2:],
                           S_im1=S[:-2], S_ip1=S[2:])

    router.require_physical(Q_new[1:-1], A_new[1:-1], k, offset=1)

    compute_upstream_node(router, k, Q, A, F, S, Q_new, A_new)
    compute_downstream_node(router, k, Q, A, F, S, Q_new, A_new)

    return Q_new, A_new
