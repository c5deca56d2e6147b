"""
Tabulation and export of computed results.

Profiles and monitored series are converted to pandas DataFrames; routed
grids are written as CSV files (time in the index, distance in the columns)
together with a plain-text summary of the routing.
"""
import logging
import os
import numpy as np
import pandas as pd
from scipy.integrate import trapezoid
from .sampler import MonitorSeries, SeriesTable
from .utility import create_directory_if_not_exists, median_volume_time, seconds_to_hms

logger = logging.getLogger(__name__)

SERIES_COLUMNS = ['step', 'node', 'time', 'distance', 'flow', 'depth', 'velocity', 'area']
PROFILE_COLUMNS = ['x', 'z', 'y', 'Sf', 'V', 'A', 'E', 'Fr']


def profile_frame(profile) -> pd.DataFrame:
    """One row per profile point, control section first, with the water surface added as 'stage'."""
    df = pd.DataFrame({name: profile.column(name) for name in PROFILE_COLUMNS})
    df['stage'] = df['z'] + df['y']
    return df


def series_frame(table: SeriesTable) -> pd.DataFrame:
    df = pd.DataFrame({name: getattr(table, name) for name in SERIES_COLUMNS})
    df.attrs['monitor_type'] = table.monitor_type
    return df


def monitor_frame(series: MonitorSeries) -> pd.DataFrame:
    """Both monitored tables stacked, tagged by a 'monitor_type' column."""
    frames = []
    for table in (series.node_series, series.timestep_series):
        df = series_frame(table)
        df.insert(0, 'monitor_type', table.monitor_type)
        frames.append(df)

    return pd.concat(frames, ignore_index=True)


def routing_summary(router) -> dict:
    """
    Volume balance and peak statistics of the committed part of a routed grid.

    Returns
    -------
    dict
        inflow_volume, outflow_volume, storage_change, mass_imbalance
        (inflow - outflow - storage change), mass_imbalance_percentage (of
        inflow), peak_inflow, peak_outflow, attenuation_percentage,
        median_entry_time, median_arrival_time and median_travel_time.

    """
    k = router.time_level
    times = router.times[:k + 1]
    Q_in = router.flow[:k + 1, 0]
    Q_out = router.flow[:k + 1, -1]

    if k > 0:
        inflow_volume = float(trapezoid(Q_in, times))
        outflow_volume = float(trapezoid(Q_out, times))
    else:
        inflow_volume = outflow_volume = 0.0

    distances = router.distances
    storage_change = float(trapezoid(router.area[k], distances) - trapezoid(router.area[0], distances))
    mass_imbalance = inflow_volume - outflow_volume - storage_change

    peak_inflow = float(np.max(Q_in))
    peak_outflow = float(np.max(Q_out))

    if k > 0:
        entry = median_volume_time(times, Q_in)
        arrival = median_volume_time(times, Q_out)
    else:
        entry = arrival = 0.0

    return {
        'time_levels': k,
        'inflow_volume': inflow_volume,
        'outflow_volume': outflow_volume,
        'storage_change': storage_change,
        'mass_imbalance': mass_imbalance,
        'mass_imbalance_percentage': mass_imbalance / inflow_volume * 100 if inflow_volume > 0 else 0.0,
        'peak_inflow': peak_inflow,
        'peak_outflow': peak_outflow,
        'attenuation_percentage': (peak_inflow - peak_outflow) / peak_inflow * 100,
        'median_entry_time': entry,
        'median_arrival_time': arrival,
        'median_travel_time': arrival - entry,
    }


def save_results(router, series: MonitorSeries = None, folder_path: str = 'results') -> dict:
    """
    Saves the routed grid as CSV files and a Data.txt summary.

    Parameters
    ----------
    router : WaveRouter
        A router whose run has finished.
    series : MonitorSeries, optional
        Monitored series to save alongside the grid.
    folder_path : str
        Output directory, created if needed.

    Returns
    -------
    dict
        The routing summary.

    """
    create_directory_if_not_exists(folder_path)

    k = router.time_level
    arrays_2d = {
        "area": router.area,
        "flow": router.flow,
        "velocity": router.velocity,
        "depth": router.depth,
    }

    for name, arr in arrays_2d.items():
        df = pd.DataFrame(arr[:k + 1], index=router.times[:k + 1], columns=router.distances)
        df.index.name = "Time"
        df.columns.name = "Distance"
        df.to_csv(os.path.join(folder_path, f"{name}.csv"))

    if series is not None:
        monitor_frame(series).to_csv(os.path.join(folder_path, "monitors.csv"), index=False)

    summary = routing_summary(router)

    with open(os.path.join(folder_path, 'Data.txt'), 'w') as output_file:
        output_file.write(f'Scheme = {router.scheme.value}\n')
        output_file.write(f'Spatial step = {router.spatial_step}\n')
        output_file.write(f'Time step = {router.time_step} s\n')
        output_file.write(f'Simulation duration = {seconds_to_hms(k * router.time_step)}\n')

        output_file.write(f'Inflow volume = {summary["inflow_volume"]:.2f}\n')
        output_file.write(f'Outflow volume = {summary["outflow_volume"]:.2f}\n')
        output_file.write(f'Storage change = {summary["storage_change"]:.2f}\n')
        output_file.write(f'Mass imbalance (inflow - outflow - storage change) = {summary["mass_imbalance"]:.2f} '
                          f'= {summary["mass_imbalance_percentage"]:.4f}% of inflow.\n')

        output_file.write(f'Peak inflow = {summary["peak_inflow"]:.2f}\n')
        output_file.write(f'Peak outflow = {summary["peak_outflow"]:.2f}\n')
        output_file.write(f'Attenuation = {summary["attenuation_percentage"]:.2f}%\n')

        output_file.write(f'Median volume entry time = {seconds_to_hms(summary["median_entry_time"])}\n')
        output_file.write(f'Median volume arrival time = {seconds_to_hms(summary["median_arrival_time"])}\n')
        output_file.write(f'Median volume travel time = {seconds_to_hms(summary["median_travel_time"])}\n')

    logger.info("Results saved to %s.", folder_path)
    return summary
