import numpy as np
from scipy.constants import g as g_si


def normal_flow(bed_slope, area: float = None, roughness: float = None, hydraulic_radius: float = None,
                K: float = None, Cm: float = 1.0):
    if K is None:
        K = conveyance(A=area, n=roughness, R=hydraulic_radius, Cm=Cm)

    Q = K * np.abs(bed_slope)**0.5

    if bed_slope < 0:
        Q = -Q

    return Q

def conveyance(A, n: float, R, Cm: float = 1.0):
    """Computes conveyance.

    Args:
        A (float): Flow area.
        n (float): Roughness.
        R (float): Hydraulic radius.
        Cm (float): Unit constant of Manning's equation.

    Returns:
        float: K
    """
    return Cm * A * R**(2/3) / n

def dK_dy(A, T, n: float, R, dR_dy, Cm: float = 1.0):
    """Derivative of conveyance w.r.t. flow depth.

    Args:
        A (float): Flow area.
        T (float): Top width (dA/dy).
        n (float): Roughness.
        R (float): Hydraulic radius.
        dR_dy (float): dR/dy.
        Cm (float): Unit constant of Manning's equation.

    Returns:
        float: dK/dy
    """
    return Cm * (T * R**(2/3) + A * 2./3. * R**(2/3-1) * dR_dy) / n

def dQn_dy(bed_slope, dK_dy_):
    dQn = dK_dy_ * np.abs(bed_slope)**0.5
    if bed_slope < 0:
        dQn = -dQn

    return dQn

def Sf(Q, A=None, n: float = None, R=None, K=None, Cm: float = 1.0):
    """Computes friction slope using Manning's equation.

    Args:
        Q (float): Flow rate
        A (float): Cross-sectional flow area.
        n (float): Manning's roughness coefficient.
        R (float): Hydraulic radius.
        K (float, optional): Conveyance, used instead of A, n and R if given.

    Returns:
        float: Friction slope.
    """
    if K is None:
        K = conveyance(A=A, n=n, R=R, Cm=Cm)

    return Q * np.abs(Q) / K**2

def dSf_dy(Q, K, dK_dy_):
    """Computes the derivative of Sf w.r.t. flow depth at constant Q.

    Args:
        Q (float): Flow rate
        K (float): Conveyance
        dK_dy_ (float): dK/dy

    Returns:
        float: dSf/dy
    """
    return -2 * Sf(Q=Q, K=K) * (dK_dy_ / K)

def froude_num(T, A, Q, g: float = g_si):
    """Computes the Froude number.

    Args:
        T (float): Top width.
        A (float): Flow area.
        Q (float): Flow rate.
        g (float): Gravitational acceleration.

    Returns:
        float: The Froude number.
    """
    V = Q/A
    D = A/T
    return V / np.sqrt(g*D)

def critical_residual(T, A, Q, g: float = g_si):
    """1 - Fr^2, which vanishes at critical depth."""
    return 1.0 - Q**2 * T / (g * A**3)

def d_critical_residual_dy(T, A, Q, dT_dy, g: float = g_si):
    """Derivative of 1 - Fr^2 w.r.t. flow depth, using dA/dy = T."""
    return -(Q**2 / g) * (dT_dy * A - 3.0 * T**2) / A**4

def specific_energy(y, A, Q, g: float = g_si):
    """E = y + V^2 / 2g."""
    V = Q/A
    return y + V**2 / (2.0 * g)

def pressure_flux(Q, A, I1, g: float = g_si):
    """Momentum flux of the conservative Saint-Venant equations, Q^2/A + g*I1."""
    return Q**2 / A + g * I1

def momentum_source(Q, A, n: float, R, bed_slope: float, g: float = g_si, Cm: float = 1.0):
    """Gravity minus friction term of the momentum equation, g*A*(S0 - Sf)."""
    return g * A * (bed_slope - Sf(Q=Q, A=A, n=n, R=R, Cm=Cm))

def dynamic_celerity(T, A, Q, g: float = g_si):
    """Largest characteristic speed of the Saint-Venant equations, |V| + sqrt(g*A/T)."""
    return np.abs(Q/A) + np.sqrt(g * A / T)

def kinematic_celerity(T, dQn_dy_):
    """Kinematic wave speed dQ/dA = (dQ/dy) / T."""
    return dQn_dy_ / T
