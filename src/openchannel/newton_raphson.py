import logging
import numpy as np
from .constants import TOLERANCE, MAX_ITER
from .errors import ConvergenceError, DomainError

logger = logging.getLogger(__name__)


def newton_raphson(f, df, x0: float, tolerance: float = TOLERANCE, max_iter: int = MAX_ITER,
                   min_slope: float = 1e-12) -> float:
    """
    Finds a positive root of f with a damped Newton-Raphson iteration.

    A step that would make the iterate non-positive is halved until the
    iterate is positive again.

    Parameters
    ----------
    f : callable
        Residual function f(x).
    df : callable
        Derivative f'(x).
    x0 : float
        Initial guess, must be positive.
    tolerance : float
        Absolute tolerance, applied to both |f(x)| and the step size.
    max_iter : int
        Maximum number of iterations.
    min_slope : float
        |f'(x)| below this value is treated as a degenerate slope.

    Returns
    -------
    float
        The root.

    Raises
    ------
    ConvergenceError
        If max_iter is exceeded, the slope degenerates or f is not finite.

    """
    if not np.isfinite(x0) or x0 <= 0:
        raise DomainError(f"Initial guess must be positive, got {x0}.")

    x = float(x0)
    fx = f(x)

    if not np.isfinite(fx):
        raise ConvergenceError(f"Residual is not finite at the initial guess x={x}.", iterations=0, last_value=x)
    if abs(fx) < tolerance:
        return x

    for iteration in range(1, max_iter + 1):
        dfx = df(x)

        if not np.isfinite(dfx):
            raise ConvergenceError(f"Derivative is not finite at x={x}.", iterations=iteration, last_value=x)
        if abs(dfx) < min_slope:
            raise ConvergenceError(f"Degenerate slope f'({x})={dfx}.", iterations=iteration, last_value=x)

        delta = -fx / dfx
        x_new = x + delta
        while x_new <= 0:
            delta *= 0.5
            x_new = x + delta

        fx_new = f(x_new)
        if not np.isfinite(fx_new):
            raise ConvergenceError(f"Residual is not finite at x={x_new}.", iterations=iteration, last_value=x)

        logger.debug("Iteration #%d: x = %.10g, f(x) = %.3e", iteration, x_new, fx_new)

        if abs(fx_new) < tolerance or abs(x_new - x) < tolerance:
            return x_new

        x, fx = x_new, fx_new

    raise ConvergenceError(f"Convergence within {max_iter} iterations couldn't be achieved.",
                           iterations=max_iter, last_value=x)
