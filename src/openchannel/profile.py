"""
Steady gradually-varied flow profiles by the standard-step method.

Starting from a control section of known depth, the profile is marched in
fixed steps. At each step the depth of the target section is found with
Newton-Raphson from the energy balance between the two sections::

    z_t + y_t + V_t^2/2g = z_c + y_c + V_c^2/2g +/- Sf_avg * dx

where the friction loss is added when marching upstream and subtracted when
marching downstream, and ``Sf_avg`` is the mean of the friction slopes of the
control section and of the current Newton iterate of the target section.
"""
import logging
from dataclasses import dataclass
from enum import Enum
import numpy as np
from .channel import Channel
from .constants import TOLERANCE, MAX_ITER, MIN_DEPTH
from .depth import solve_normal_depth, solve_critical_depth, check_discharge
from .errors import ConvergenceError, DivergenceError, DomainError
from .newton_raphson import newton_raphson

logger = logging.getLogger(__name__)


class Direction(Enum):
    UPSTREAM = 'upstream'
    DOWNSTREAM = 'downstream'

    @classmethod
    def coerce(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise DomainError(f"Invalid march direction '{value}'. Options: 'upstream', 'downstream'.") from None


@dataclass(frozen=True)
class ProfilePoint:
    x: float
    z: float
    y: float
    Sf: float
    V: float
    A: float
    E: float
    Fr: float

    @property
    def stage(self) -> float:
        return self.z + self.y

    @property
    def head(self) -> float:
        """Total energy head z + E."""
        return self.z + self.E


@dataclass(frozen=True)
class Profile:
    """Immutable result of a standard-step computation."""
    points: tuple
    discharge: float
    stepdist: float
    direction: Direction
    normal_depth: float = None
    critical_depth: float = None

    def __len__(self):
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def __getitem__(self, index):
        return self.points[index]

    def column(self, name: str) -> np.ndarray:
        """Returns one attribute of all points (e.g. 'y', 'x', 'Fr') as an array."""
        return np.array([getattr(p, name) for p in self.points], dtype=np.float64)


def _make_point(channel: Channel, x, z, y, Q, g) -> ProfilePoint:
    A = channel.area(y)
    V = Q / A
    return ProfilePoint(x=float(x),
                        z=float(z),
                        y=float(y),
                        Sf=float(channel.friction_slope(y, Q)),
                        V=float(V),
                        A=float(A),
                        E=float(channel.specific_energy(y, Q, g)),
                        Fr=float(channel.froude(y, Q, g)))


def standard_step(channel: Channel, Q: float, y0: float, g: float, stepdist: float, totaldist: float,
                  direction=None, x0: float = 0.0, z0: float = 0.0, tolerance: float = TOLERANCE,
                  max_iter: int = MAX_ITER, min_depth: float = MIN_DEPTH) -> Profile:
    """
    Marches a water-surface profile away from a control section.

    Parameters
    ----------
    channel : Channel
        The channel.
    Q : float
        Steady flow rate.
    y0 : float
        Depth at the control section.
    g : float
        Gravitational acceleration.
    stepdist : float
        Length of each step.
    totaldist : float
        Total distance covered; the profile has floor(totaldist/stepdist) steps.
    direction : Direction or str, optional
        'upstream' or 'downstream'. If None, subcritical control sections are
        marched upstream and supercritical ones downstream.
    x0, z0 : float
        Station and bed elevation of the control section.

    Returns
    -------
    Profile

    Raises
    ------
    DivergenceError
        If the depth vanishes, the flow regime changes, or a step cannot be solved.

    """
    check_discharge(Q)
    if not np.isfinite(y0) or y0 <= 0:
        raise DomainError(f"Control depth must be positive, got {y0}.")
    if not np.isfinite(stepdist) or stepdist <= 0:
        raise DomainError(f"Step length must be positive, got {stepdist}.")
    if not np.isfinite(totaldist) or totaldist < stepdist:
        raise DomainError(f"Total distance ({totaldist}) must be at least one step ({stepdist}).")

    yc = solve_critical_depth(channel.section, Q, g, tolerance=tolerance, max_iter=max_iter)
    yn = solve_normal_depth(channel, Q, tolerance=tolerance, max_iter=max_iter) if channel.bed_slope > 0 else None

    control = _make_point(channel, x0, z0, y0, Q, g)
    subcritical = control.Fr < 1.0

    if direction is None:
        direction = Direction.UPSTREAM if subcritical else Direction.DOWNSTREAM
    else:
        direction = Direction.coerce(direction)

    # Upstream: bed rises and the target carries the friction loss
    sign = 1.0 if direction is Direction.UPSTREAM else -1.0
    dx = -sign * stepdist
    dz = sign * channel.bed_slope * stepdist

    number_of_steps = int(np.floor(totaldist / stepdist + 1e-9))
    logger.info("Standard-step profile: %d steps of %g %s from y0=%g (yc=%g, yn=%s).",
                number_of_steps, stepdist, direction.value, y0, yc, yn)

    points = [control]
    for step in range(1, number_of_steps + 1):
        control = points[-1]
        z_t = control.z + dz
        H_c = control.head

        def f(y):
            A, P, R, T = channel.section.properties(y)
            E_t = y + (Q / A)**2 / (2.0 * g)
            Sf_t = channel.friction_slope(y, Q)
            return z_t + E_t - H_c - sign * 0.5 * (control.Sf + Sf_t) * stepdist

        def df(y):
            A, P, R, T = channel.section.properties(y)
            dE_dy = 1.0 - Q**2 * T / (g * A**3)
            return dE_dy - sign * 0.5 * stepdist * channel.dSf_dy(y, Q)

        try:
            y_t = newton_raphson(f, df, control.y, tolerance=tolerance, max_iter=max_iter)
        except ConvergenceError as err:
            raise DivergenceError(
                f"Standard step #{step} could not be solved at x={control.x + dx:g} "
                f"(last depth {control.y:g}, critical depth {yc:g}).",
                step=step, last_point=control
            ) from err

        if y_t < min_depth:
            raise DivergenceError(f"Depth vanished at step #{step} (y={y_t:g}).", step=step, last_point=control)

        target = _make_point(channel, control.x + dx, z_t, y_t, Q, g)

        if (target.Fr < 1.0) != subcritical:
            raise DivergenceError(
                f"Flow regime changed at step #{step} (Fr {control.Fr:.3f} -> {target.Fr:.3f}); "
                "the standard-step method is not applicable across a hydraulic jump.",
                step=step, last_point=control
            )

        logger.debug("Step #%d: x = %g, y = %.6f, Fr = %.4f", step, target.x, target.y, target.Fr)
        points.append(target)

    return Profile(points=tuple(points),
                   discharge=float(Q),
                   stepdist=float(stepdist),
                   direction=direction,
                   normal_depth=yn,
                   critical_depth=yc)


def compute_profile(S0: float, n: float, Q: float, y0: float, Cm: float, g: float, w: float, m: float,
                    stepdist: float, totaldist: float, direction=None, x0: float = 0.0, z0: float = 0.0,
                    tolerance: float = TOLERANCE, max_iter: int = MAX_ITER) -> Profile:
    """Computes a gradually-varied flow profile with the standard-step method.

    Args:
        S0 (float): Bed slope.
        n (float): Manning's roughness coefficient.
        Q (float): Flow rate.
        y0 (float): Depth at the control section.
        Cm (float): Unit constant of Manning's equation.
        g (float): Gravitational acceleration.
        w (float): Bottom width.
        m (float): Side slope.
        stepdist (float): Step length.
        totaldist (float): Total profile length.
        direction (str, optional): 'upstream', 'downstream' or None (chosen from the Froude number).

    Returns:
        Profile: The computed profile, control section first.
    """
    channel = Channel(bed_slope=S0, roughness=n, width=w, side_slope=m, Cm=Cm)
    return standard_step(channel, Q, y0, g, stepdist, totaldist, direction=direction, x0=x0, z0=z0,
                         tolerance=tolerance, max_iter=max_iter)
