from enum import Enum
import numpy as np
from .errors import ConfigurationError, DomainError


class BoundaryMode(Enum):
    """
    Kinds of the prescribed boundary series: the first letter refers to the
    upstream series and the second to the downstream one (Q = discharge,
    y = depth).
    """
    QQ = 'QQ'
    QY = 'Qy'
    YQ = 'yQ'
    YY = 'yy'

    @classmethod
    def coerce(cls, value):
        if isinstance(value, cls):
            return value
        for mode in cls:
            if mode.value == value:
                return mode
        raise ConfigurationError(f"Invalid boundary mode '{value}'. Options: 'QQ', 'Qy', 'yQ', 'yy'.")

    @property
    def upstream_condition(self) -> str:
        return 'flow_hydrograph' if self.value[0] == 'Q' else 'depth_hydrograph'

    @property
    def downstream_condition(self) -> str:
        return 'flow_hydrograph' if self.value[1] == 'Q' else 'depth_hydrograph'


class Boundary:
    """Contains the necessary functionality for upstream and downstream boundary handling.
    """
    def __init__(self, condition: str, series=None, allow_free: bool = False):
        """Initializes a channel boundary

        Args:
            condition (str): Boundary condition type: 'flow_hydrograph', 'depth_hydrograph' or 'free_outflow'.
            series (array-like, optional): Prescribed value at every time level. NaN entries
            mean free outflow at that time level, which requires allow_free. Defaults to None.
            allow_free (bool, optional): Whether free outflow may be used. Defaults to False.
        """
        if condition not in ['flow_hydrograph', 'depth_hydrograph', 'free_outflow']:
            raise ConfigurationError("Invalid boundary condition.")

        if condition == 'free_outflow':
            if not allow_free:
                raise ConfigurationError("Free outflow is only possible at the downstream boundary.")
            self.series = None

        else:
            if series is None:
                raise ConfigurationError(f"A series must be provided for a '{condition}' boundary.")

            series = np.array(series, dtype=np.float64).flatten()
            prescribed = ~np.isnan(series)

            if not allow_free and not np.all(prescribed):
                raise DomainError("The upstream boundary series must not contain missing values.")
            if np.any(~np.isfinite(series[prescribed])) or np.any(series[prescribed] <= 0):
                raise DomainError(f"Prescribed boundary values must be positive ({condition}).")

            series.setflags(write=False)
            self.series = series

        self.condition = condition

    def __len__(self):
        return 0 if self.series is None else self.series.size

    def value_at(self, k: int):
        """Prescribed value at time level k, or None for free outflow."""
        if self.series is None:
            return None

        value = self.series[k]
        return None if np.isnan(value) else float(value)

    def condition_type(self) -> bool:
        """Returns True if the boundary prescribes the flow rate, and False otherwise.
        """
        return self.condition == 'flow_hydrograph'

    def prescribed_maximum(self):
        """Largest prescribed value, or None if nothing is prescribed."""
        if self.series is None or np.all(np.isnan(self.series)):
            return None

        return float(np.nanmax(self.series))
