from enum import Enum
from scipy.constants import g, foot

# Manning's unit constant (Cm)
MANNING_SI = 1.0
MANNING_US = 1.486

GRAVITY_SI = g
GRAVITY_US = g / foot

# Newton-Raphson defaults
TOLERANCE = 1e-8
MAX_ITER = 100

# Smallest depth accepted while marching a profile
MIN_DEPTH = 1e-6


class UnitSystem(Enum):
    """Pairs of (Cm, g) for the supported unit systems."""
    SI = (MANNING_SI, GRAVITY_SI)
    US = (MANNING_US, GRAVITY_US)

    @property
    def manning_constant(self) -> float:
        return self.value[0]

    @property
    def gravity(self) -> float:
        return self.value[1]
