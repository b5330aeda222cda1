r"""Day-level table of outbreak statistics and environmental samples, and its persistence."""

import os

import pandas as pd

from .. import constants

DAY_COLUMNS = ['nT', 'ATE', 'GME', 'MDE', 'q75', 'q95', 'injuries', 'fatalities', 'n_states']


def build_day_table(day_samples, outbreak_days=None):
    r"""
    Build a table with one row per sampled day.

    Parameters
    ----------
    day_samples : list
        List of ``torclimo.models.DaySample`` objects.
    outbreak_days : list, optional
        List of ``torclimo.models.OutbreakDay`` objects whose statistics are joined to outbreak rows by date.

    Returns
    -------
    pandas.DataFrame
        Table with "date", "kind", "status" and "message" columns, outbreak statistics when provided, and one "<field>_<aggregation>" column per sample (NaN where a day was not sampled).
    """

    stats = {}
    if outbreak_days is not None:
        for day in outbreak_days:
            stats[day.date] = {
                'nT': day.nT, 'ATE': day.ATE, 'GME': day.GME, 'MDE': day.MDE, 'q75': day.q75, 'q95': day.q95,
                'injuries': day.injuries, 'fatalities': day.fatalities, 'n_states': day.n_states,
                'area_km2': day.footprint.area_km2 if day.footprint is not None else float('nan'),
                'centroid_lon': day.footprint.centroid_lon if day.footprint is not None else float('nan'),
                'centroid_lat': day.footprint.centroid_lat if day.footprint is not None else float('nan'),
            }

    rows = []
    for sample in day_samples:
        row = sample.to_dict()
        row['message'] = sample.message
        if sample.kind == constants.OUTBREAK_KIND:
            row.update(stats.get(sample.date, {}))
        rows.append(row)

    table = pd.DataFrame(rows)
    if len(table) == 0:
        return pd.DataFrame(columns=['date', 'kind', 'status', 'message'])
    table['date'] = pd.to_datetime(table['date'])

    # Fixed leading columns, then day statistics, then samples
    leading = ['date', 'kind', 'status', 'message']
    stat_columns = [i for i in DAY_COLUMNS + ['area_km2', 'centroid_lon', 'centroid_lat'] if i in table.columns]
    sample_columns = sorted(i for i in table.columns if i not in leading and i not in stat_columns)
    return table[leading + stat_columns + sample_columns].reset_index(drop=True)


def write_day_table(table, path):
    r"""
    Write a day-level table to a CSV or parquet file, chosen from the file extension.

    Parameters
    ----------
    table : pandas.DataFrame
        Table as returned by ``build_day_table``.
    path : str
        Output path ending in ".csv" or ".parquet". Parquet files require pyarrow.
    """

    extension = os.path.splitext(str(path))[1].lower()
    if extension == '.csv':
        table.to_csv(path, index=False, date_format='%Y-%m-%d')
    elif extension == '.parquet':
        table.to_parquet(path, index=False)
    else:
        raise ValueError("path must end in '.csv' or '.parquet'.")


def read_day_table(path):
    r"""
    Read a day-level table written by ``write_day_table``.

    Parameters
    ----------
    path : str
        Path ending in ".csv" or ".parquet".

    Returns
    -------
    pandas.DataFrame
        Day-level table with a datetime "date" column.
    """

    extension = os.path.splitext(str(path))[1].lower()
    if extension == '.csv':
        table = pd.read_csv(path, float_precision='round_trip', dtype={'kind': str, 'status': str, 'message': str})
        if 'message' in table.columns:
            table['message'] = table['message'].fillna('')
    elif extension == '.parquet':
        table = pd.read_parquet(path)
    else:
        raise ValueError("path must end in '.csv' or '.parquet'.")
    table['date'] = pd.to_datetime(table['date'])
    return table


def status_summary(table):
    r"""
    Number of days of each kind per sampling status.

    Parameters
    ----------
    table : pandas.DataFrame
        Day-level table.

    Returns
    -------
    pandas.DataFrame
        Counts indexed by kind, with one column per status ("ok", "missing", "out_of_range").
    """

    counts = table.groupby(['kind', 'status']).size().unstack(fill_value=0)
    return counts.reindex(columns=list(constants.ALL_STATUSES), fill_value=0)
