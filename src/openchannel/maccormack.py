"""
MacCormack predictor-corrector scheme for the conservative Saint-Venant equations.

    predictor:  U_p(i) = U(i) - dt/dx * (F(i+1) - F(i)) + dt * S(i)
    corrector:  U_c(i) = U(i) - dt/dx * (F_p(i) - F_p(i-1)) + dt * S_p(i)
    new value:  U(i)   = (U_p(i) + U_c(i)) / 2

with U = (A, Q), F = (Q, Q^2/A + g I1) and S = (0, g A (S0 - Sf)).
"""
import numpy as np


def advance(router, k):
    """Computes time level k from time level k-1. Returns (Q, A) for all nodes."""
    Q, A = router.flow[k-1], router.area[k-1]
    F, S = router.flux(Q, A), router.source(Q, A)
    ratio = router.time_step / router.spatial_step
    dt = router.time_step

    # Predictor at nodes 0 .. N-2, forward differences
    A_p = A[:-1] - ratio * (Q[1:] - Q[:-1])
    Q_p = Q[:-1] - ratio * (F[1:] - F[:-1]) + dt * S[:-1]
    router.require_physical(Q_p, A_p, k, stage='predictor')

    F_p, S_p = router.flux(Q_p, A_p), router.source(Q_p, A_p)

    # Corrector at nodes 1 .. N-2, backward differences on the predicted state
    A_c = A[1:-1] - ratio * (Q_p[1:] - Q_p[:-1])
    Q_c = Q[1:-1] - ratio * (F_p[1:] - F_p[:-1]) + dt * S_p[1:]

    Q_new = np.empty_like(Q)
    A_new = np.empty_like(A)

    A_new[1:-1] = 0.5 * (A_p[1:] + A_c)
    Q_new[1:-1] = 0.5 * (Q_p[1:] + Q_c)

    router.require_physical(Q_new[1:-1], A_new[1:-1], k, offset=1, stage='corrector')

    router.compute_upstream_node(k, Q, A, F, S, Q_new, A_new)
    router.compute_downstream_node(k, Q, A, F, S, Q_new, A_new)

    return Q_new, A_new
