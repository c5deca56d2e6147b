import numpy as np
from .errors import DomainError


class Hydrograph:
    def __init__(self, function = None, table: np.ndarray = None):
        """Creates a hydrograph object.

        Args:
            function (callable, optional): f(t). Defaults to None.
            table (np.ndarray, optional): Should contain time (in seconds) in the first column
            and corresponding values in the second. Defaults to None.
        """
        self.table = None if table is None else np.asarray(table, dtype=np.float64)
        self.used_function = self.interpolate_hydrograph if function is None else function

    def interpolate_hydrograph(self, time):
        if self.table is None:
            raise DomainError("Hydrograph is not defined.")

        return float(np.interp(time, self.table[:, 0], self.table[:, 1]))

    def get_at(self, time):
        return self.used_function(time)

    def series(self, duration: float, time_step: float) -> np.ndarray:
        """Samples the hydrograph at t = 0, dt, 2dt, ... up to and including the duration.

        Args:
            duration (float): Simulated time in seconds.
            time_step (float): Time step in seconds.

        Returns:
            np.ndarray: Values at each time level.
        """
        if time_step <= 0 or duration < time_step:
            raise DomainError("The duration must cover at least one positive time step.")

        number_of_steps = int(round(duration / time_step))
        times = np.arange(number_of_steps + 1) * time_step
        return np.array([self.get_at(t) for t in times], dtype=np.float64)

    def set_table(self, table: np.ndarray):
        """Time (in seconds) in the first column and corresponding values in the second.

        Args:
            table (np.ndarray): NumPy array containing the hydrograph.
        """
        self.table = np.asarray(table, dtype=np.float64)
        self.used_function = self.interpolate_hydrograph

    def set_function(self, func):
        self.used_function = func
