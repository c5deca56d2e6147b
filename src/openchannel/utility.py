import os
import numpy as np


def create_directory_if_not_exists(directory):
    """
    Checks if a directory exists and creates it if it doesn't.

    Attributes
    ----------
    directory : str
        The path to the directory to check.
    """
    if not os.path.exists(directory):
        os.makedirs(directory)


def seconds_to_hms(seconds: float):
    if seconds < 0:
        return "0:00:00"

    total_seconds = int(seconds)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    remaining_seconds = total_seconds % 60

    return f"{hours}:{minutes:02d}:{remaining_seconds:02d}"


def median_volume_time(times, values):
    """Time at which half of the cumulative (trapezoidal) volume of a series has passed."""
    times = np.asarray(times, dtype=np.float64)
    values = np.asarray(values, dtype=np.float64)

    increments = 0.5 * (values[1:] + values[:-1]) * np.diff(times)
    cumulative = np.concatenate(([0.0], np.cumsum(increments)))

    return float(times[np.argmax(cumulative >= 0.5 * cumulative[-1])])
