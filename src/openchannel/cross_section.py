import numpy as np
from .errors import DomainError


def _check_depth(y):
    y = np.asarray(y, dtype=np.float64)
    if not np.all(np.isfinite(y)) or np.any(y <= 0.0):
        raise DomainError(f"Flow depth must be positive and finite, got {y}.")


class TrapezoidalSection:
    """
    Prismatic cross-section with a trapezoidal geometry.

    Handles:
    1. Simple trapezoid
    2. Rectangle (m = 0)
    3. Triangle (b = 0)

    All methods accept a scalar depth or a NumPy array of depths; array input
    returns arrays of the same shape.

    Parameters:
    - b: Bottom width (>= 0)
    - m: Side slope, horizontal run per unit rise (>= 0)
    """

    def __init__(self, b: float, m: float):
        b, m = float(b), float(m)

        if b < 0.0 or m < 0.0:
            raise DomainError(f"Bottom width and side slope must be non-negative (b={b}, m={m}).")
        if b == 0.0 and m == 0.0:
            raise DomainError("A section with zero bottom width and vertical walls has no flow area.")

        self.b = b
        self.m = m

        self._wall_factor = np.sqrt(1.0 + self.m**2)

    def properties(self, y) -> tuple:
        """Return (A, P, R, T) using analytical formulas."""
        _check_depth(y)

        T = self.b + 2.0 * self.m * y
        A = (self.b + T) / 2.0 * y
        P = self.b + 2.0 * y * self._wall_factor
        R = A / P

        return A, P, R, T

    def area(self, y):
        """Return wetted area (A)."""
        return self.properties(y)[0]

    def wetted_perimeter(self, y):
        """Return wetted perimeter (P)."""
        return self.properties(y)[1]

    def hydraulic_radius(self, y):
        """Return hydraulic radius (R)."""
        return self.properties(y)[2]

    def top_width(self, y):
        """Return top width (T), which is also dA/dy."""
        return self.properties(y)[3]

    def dA_dy(self, y):
        return self.top_width(y)

    @property
    def dT_dy(self) -> float:
        return 2.0 * self.m

    @property
    def dP_dy(self) -> float:
        return 2.0 * self._wall_factor

    def dR_dy(self, y):
        """Derivative of the hydraulic radius w.r.t. depth: (T P - A dP/dy) / P^2."""
        A, P, R, T = self.properties(y)
        return (T * P - A * self.dP_dy) / P**2

    def first_moment(self, y):
        """
        First moment of the wetted area about the free surface, I1.

        g * I1 is the hydrostatic pressure force term of the conservative
        momentum equation; d(I1)/dy = A.
        """
        _check_depth(y)
        return y**2 * (self.b / 2.0 + self.m * y / 3.0)

    def depth_from_area(self, A):
        """Inverts A(y) = y (b + m y) for the positive root."""
        A = np.asarray(A, dtype=np.float64)
        if not np.all(np.isfinite(A)) or np.any(A <= 0.0):
            raise DomainError(f"Flow area must be positive and finite, got {A}.")

        # Rationalised root, also valid for m = 0 and b = 0
        y = 2.0 * A / (self.b + np.sqrt(self.b**2 + 4.0 * self.m * A))

        return float(y) if y.ndim == 0 else y
