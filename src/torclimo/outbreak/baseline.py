r"""Random draws of non-outbreak baseline days with an outbreak-matched seasonal cycle."""

import numpy as np
import pandas as pd


def month_weights(dates):
    r"""
    Empirical month-of-year frequency of a set of dates.

    Parameters
    ----------
    dates : list or pandas.DatetimeIndex
        Dates of outbreak days.

    Returns
    -------
    numpy.ndarray
        Array of length 12 summing to 1, where element 0 is January. Months without any date have a weight of zero.
    """

    months = pd.DatetimeIndex(pd.to_datetime(list(dates))).month
    if len(months) == 0:
        raise ValueError("At least one date is required to compute month weights.")
    counts = np.bincount(np.asarray(months) - 1, minlength=12).astype(float)
    return counts / counts.sum()


def sample_baseline_days(n, start, end, weights, exclude=(), seed=None):
    r"""
    Draw distinct baseline days whose month distribution matches the given weights.

    A month is drawn with probability given by ``weights``, then a date is drawn uniformly among the dates of that month within the study interval. Dates in ``exclude`` and dates already drawn are rejected until ``n`` distinct dates are found.

    Parameters
    ----------
    n : int
        Number of baseline days to draw.
    start : datetime.date
        First date of the study interval (inclusive).
    end : datetime.date
        Last date of the study interval (inclusive).
    weights : list or numpy.ndarray
        Length 12 month weights, as returned by ``month_weights``.
    exclude : iterable of datetime.date
        Dates that can never be drawn (e.g., medium outbreak days).
    seed : int or numpy.random.Generator, optional
        Seed or generator for reproducible draws.

    Returns
    -------
    list
        Sorted list of ``datetime.date`` objects.
    """

    # Error check
    weights = np.asarray(weights, dtype=float)
    if weights.shape != (12,):
        raise ValueError("weights must contain exactly 12 elements, one per calendar month.")
    if np.any(weights < 0) or weights.sum() <= 0:
        raise ValueError("weights must be non-negative and sum to a positive value.")
    weights = weights / weights.sum()
    if n < 0:
        raise ValueError("n must be non-negative.")

    # Candidate dates of the study interval, grouped by month
    exclude = set(pd.Timestamp(i).date() for i in exclude)
    interval = pd.date_range(pd.Timestamp(start), pd.Timestamp(end), freq='D')
    candidates = {month: [i.date() for i in interval if i.month == month] for month in range(1, 13)}

    # Make sure enough distinct dates can be drawn
    available = sum(len([i for i in candidates[month] if i not in exclude])
                    for month in range(1, 13) if weights[month - 1] > 0)
    if available < n:
        raise ValueError(f"Only {available} eligible dates are available, cannot draw {n} baseline days.")

    rng = np.random.default_rng(seed)
    drawn = set()
    while len(drawn) < n:
        month = int(rng.choice(12, p=weights)) + 1
        pool = candidates[month]
        if len(pool) == 0:
            continue
        date = pool[int(rng.integers(len(pool)))]
        if date in exclude or date in drawn:
            continue
        drawn.add(date)

    return sorted(drawn)
