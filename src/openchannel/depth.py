"""
Normal and critical depth of prismatic trapezoidal channels.

Both depths are found with :func:`newton_raphson` on analytic residuals:

* normal depth:   (Cm/n) A R^(2/3) S0^(1/2) - Q = 0
* critical depth: 1 - Q^2 B / (g A^3) = 0, i.e. Fr = 1
"""
import numpy as np
from . import hydraulics
from .channel import Channel
from .constants import TOLERANCE, MAX_ITER
from .cross_section import TrapezoidalSection
from .errors import ConfigurationError, DomainError
from .newton_raphson import newton_raphson


def check_discharge(Q):
    if not np.isfinite(Q) or Q <= 0:
        raise DomainError(f"Discharge must be positive, got {Q}.")


def normal_depth_guess(channel: Channel, Q: float) -> float:
    """Wide-channel approximation, or the exact closed form for a triangular channel."""
    S0, n, Cm = channel.bed_slope, channel.roughness, channel.Cm
    w, m = channel.width, channel.side_slope

    if w > 0:
        return (Q * n / (Cm * w * np.sqrt(S0))) ** 0.6

    # Triangle: A = m y^2, R = m y / (2 sqrt(1 + m^2))
    c = Cm / n * np.sqrt(S0) * m * (m / (2.0 * np.sqrt(1.0 + m**2))) ** (2/3)
    return (Q / c) ** 0.375


def critical_depth_guess(section: TrapezoidalSection, Q: float, g: float) -> float:
    """Rectangular closed form (q^2/g)^(1/3), or the triangular one (2Q^2/(g m^2))^(1/5)."""
    if section.b > 0:
        q = Q / section.b
        return (q**2 / g) ** (1/3)

    return (2.0 * Q**2 / (g * section.m**2)) ** 0.2


def solve_normal_depth(channel: Channel, Q: float, y_guess: float = None,
                       tolerance: float = TOLERANCE, max_iter: int = MAX_ITER) -> float:
    """Computes the normal flow depth of a channel for a given flow rate."""
    if channel.bed_slope <= 0:
        raise ConfigurationError(
            f"Normal depth does not exist for a zero or adverse bed slope (S0={channel.bed_slope})."
        )
    check_discharge(Q)

    if y_guess is None:
        y_guess = normal_depth_guess(channel, Q)

    def f(y):
        return channel.normal_flow(y) - Q

    return newton_raphson(f, channel.dQn_dy, y_guess, tolerance=tolerance, max_iter=max_iter)


def solve_critical_depth(section: TrapezoidalSection, Q: float, g: float, y_guess: float = None,
                         tolerance: float = TOLERANCE, max_iter: int = MAX_ITER) -> float:
    """Computes the critical depth of a section for a given flow rate."""
    check_discharge(Q)
    if not np.isfinite(g) or g <= 0:
        raise DomainError(f"Gravitational acceleration must be positive, got {g}.")

    if y_guess is None:
        y_guess = critical_depth_guess(section, Q, g)

    def f(y):
        A, P, R, T = section.properties(y)
        return hydraulics.critical_residual(T=T, A=A, Q=Q, g=g)

    def df(y):
        A, P, R, T = section.properties(y)
        return hydraulics.d_critical_residual_dy(T=T, A=A, Q=Q, dT_dy=section.dT_dy, g=g)

    return newton_raphson(f, df, y_guess, tolerance=tolerance, max_iter=max_iter)


def normal_depth(S0: float, n: float, Q: float, y_guess: float, Cm: float, w: float, m: float,
                 tolerance: float = TOLERANCE, max_iter: int = MAX_ITER) -> float:
    """Computes the normal depth.

    Args:
        S0 (float): Bed slope, must be positive.
        n (float): Manning's roughness coefficient.
        Q (float): Flow rate.
        y_guess (float): Initial guess. None selects the wide-channel approximation.
        Cm (float): Unit constant of Manning's equation (1.0 SI, 1.486 US customary).
        w (float): Bottom width.
        m (float): Side slope.

    Returns:
        float: Normal depth.

    Raises:
        ConfigurationError: If S0 <= 0.
        ConvergenceError: If Newton-Raphson fails.
    """
    channel = Channel(bed_slope=S0, roughness=n, width=w, side_slope=m, Cm=Cm)
    return solve_normal_depth(channel, Q, y_guess=y_guess, tolerance=tolerance, max_iter=max_iter)


def critical_depth(Q: float, y_guess: float, g: float, w: float, m: float,
                   tolerance: float = TOLERANCE, max_iter: int = MAX_ITER) -> float:
    """Computes the critical depth.

    Args:
        Q (float): Flow rate.
        y_guess (float): Initial guess. None selects a closed-form estimate.
        g (float): Gravitational acceleration.
        w (float): Bottom width.
        m (float): Side slope.

    Returns:
        float: Critical depth.
    """
    section = TrapezoidalSection(b=w, m=m)
    return solve_critical_depth(section, Q, g, y_guess=y_guess, tolerance=tolerance, max_iter=max_iter)
