r"""Year-to-year summaries and linear trends of outbreak activity."""

import warnings

import numpy as np
import pandas as pd
from scipy import stats


def annual_summary(days, start_year, end_year):
    r"""
    Summarize outbreak days by year.

    Parameters
    ----------
    days : pandas.DataFrame
        Day-level DataFrame indexed by date, containing "nT" and "ATE" columns (e.g., ``OutbreakDataset.big_days``).
    start_year : int
        First year of the summary.
    end_year : int
        Last year of the summary (inclusive).

    Returns
    -------
    pandas.DataFrame
        One row per year, with columns "n_days" (number of days), "nT" (number of tornadoes on those days), "ATE" (total energy of those days), and "mean_nT" (tornadoes per day, NaN for years without days). Years without any day are included with zero counts.
    """

    if end_year < start_year:
        raise ValueError("end_year must be greater than or equal to start_year.")

    years = pd.DatetimeIndex(days.index).year
    grouped = days.groupby(years)
    summary = pd.DataFrame({
        'n_days': grouped.size(),
        'nT': grouped['nT'].sum(),
        'ATE': grouped['ATE'].sum(),
    })
    summary = summary.reindex(range(start_year, end_year + 1), fill_value=0)
    summary.index.name = 'year'
    summary['n_days'] = summary['n_days'].astype(int)
    summary['nT'] = summary['nT'].astype(int)
    summary['ATE'] = summary['ATE'].astype(float)
    summary['mean_nT'] = summary['nT'].where(summary['n_days'] > 0) / summary['n_days'].where(summary['n_days'] > 0)
    return summary


def linear_trend(years, values, log=False):
    r"""
    Least-squares linear trend of a yearly series.

    Parameters
    ----------
    years : list or numpy.ndarray
        Years of the series.
    values : list or numpy.ndarray
        Values of the series. Non-finite values are ignored.
    log : bool
        Whether to fit the trend to the natural logarithm of the values. Non-positive values are then ignored. Default is False.

    Returns
    -------
    dict
        Dictionary containing "slope" (per year), "intercept", "rvalue", "pvalue", "stderr" and "n" (number of years used).
    """

    years = np.asarray(years, dtype=float)
    values = np.asarray(values, dtype=float)
    if years.shape != values.shape:
        raise ValueError("years and values must have the same length.")

    mask = np.isfinite(years) & np.isfinite(values)
    if log:
        nonpositive = mask & (values <= 0)
        if np.any(nonpositive):
            warnings.warn(f"Ignoring {int(nonpositive.sum())} non-positive values for the logarithmic trend.")
        mask = mask & (values > 0)
    if mask.sum() < 3:
        raise ValueError("At least 3 valid years are required to compute a trend.")

    y = np.log(values[mask]) if log else values[mask]
    result = stats.linregress(years[mask], y)
    return {
        'slope': float(result.slope),
        'intercept': float(result.intercept),
        'rvalue': float(result.rvalue),
        'pvalue': float(result.pvalue),
        'stderr': float(result.stderr),
        'n': int(mask.sum()),
    }


def trend_table(summary, columns=('n_days', 'nT', 'ATE'), log=False):
    r"""
    Linear trends of several columns of an annual summary.

    Parameters
    ----------
    summary : pandas.DataFrame
        Annual summary indexed by year, as returned by ``annual_summary``.
    columns : list or tuple
        Columns to compute trends for. Default is ("n_days", "nT", "ATE").
    log : bool
        Whether to fit trends to the natural logarithm of each column. Default is False.

    Returns
    -------
    pandas.DataFrame
        One row per column with the output of ``linear_trend``.
    """

    rows = {column: linear_trend(summary.index.values, summary[column].values, log=log) for column in columns}
    return pd.DataFrame(rows).transpose()
