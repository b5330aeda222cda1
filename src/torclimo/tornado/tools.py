import datetime

import numpy as np
import pandas as pd

from .. import constants
from ..exceptions import DataIntegrityError


def perc_matrix(perc=constants.PERC_MATRIX):
    r"""
    Return the rating-to-wind-bin area fraction matrix, with each row normalized to sum to 1.

    Parameters
    ----------
    perc : list or tuple
        Nested 6x6 sequence of fractions of path area of each rating (rows) within each wind speed bin (columns).

    Returns
    -------
    numpy.ndarray
        6x6 array whose rows sum to 1.
    """

    perc = np.array(perc, dtype=float)
    if perc.shape != (6, 6):
        raise ValueError("perc must be a 6x6 matrix.")
    row_sums = perc.sum(axis=1)
    if np.any(row_sums <= 0):
        raise ValueError("Every row of perc must have positive mass.")
    return perc / row_sums[:, None]


def wind_midpoints(thresholds=constants.WIND_THRESHOLDS, offset=constants.TOP_BIN_OFFSET):
    r"""
    Midpoint wind speed of each bin. The last, open-ended bin uses the last threshold plus ``offset``.
    """

    thresholds = np.array(thresholds, dtype=float)
    midpoints = thresholds[:-1] + np.diff(thresholds) / 2.0
    return np.append(midpoints, thresholds[-1] + offset)


def energy_weights(perc=constants.PERC_MATRIX, thresholds=constants.WIND_THRESHOLDS, offset=constants.TOP_BIN_OFFSET):
    r"""
    Calculate the cubed wind speed expectation (EW3) of each damage rating.

    Parameters
    ----------
    perc : list or tuple
        6x6 area fraction matrix. Default is ``constants.PERC_MATRIX``.
    thresholds : list or tuple
        Lower wind speed (m/s) of each of the 6 bins. Default is ``constants.WIND_THRESHOLDS``.
    offset : float
        Offset (m/s) above the last threshold used as the midpoint of the top bin. Default is 7.5.

    Returns
    -------
    numpy.ndarray
        Array of 6 values, EW3 for ratings 0 through 5, in m^3/s^3.
    """

    return perc_matrix(perc) @ wind_midpoints(thresholds, offset)**3


def impute_rating(mag, length):
    r"""
    Resolve unrated (-9) tornadoes to a concrete rating.

    Unrated tornadoes with a path length at or below 5 statute miles are assigned a rating of 0, all others a rating of 1.

    Parameters
    ----------
    mag : int or numpy.ndarray
        Damage rating(s), -9 if unrated.
    length : float or numpy.ndarray
        Path length(s) in statute miles.

    Returns
    -------
    numpy.ndarray
        Integer ratings with no unrated entries.
    """

    mag = np.asarray(mag).astype(int)
    length = np.asarray(length, dtype=float)
    imputed = np.where(length <= constants.SHORT_PATH_MILES, 0, 1)
    return np.where(mag == constants.UNRATED, imputed, mag)


def check_ratings(mag):
    r"""
    Raise a ``DataIntegrityError`` if any rating falls outside of 0 through 5.
    """

    mag = np.atleast_1d(np.asarray(mag))
    bad = ~np.isin(mag, list(constants.RATINGS))
    if np.any(bad):
        raise DataIntegrityError(f"Tornado ratings must be between 0 and 5 after imputation, found: {sorted(set(mag[bad].tolist()))}")
    return mag.astype(int)


def correct_width(width, year, cutoff_year=constants.WIDTH_CUTOFF_YEAR):
    r"""
    Scale widths reported as mean widths (year at or after ``cutoff_year``) by pi/4 to approximate the maximum width convention of earlier years.
    """

    width = np.asarray(width, dtype=float)
    year = np.asarray(year)
    return np.where(year >= cutoff_year, width * np.pi / 4.0, width)


def fill_zeros(values):
    r"""
    Replace zero values with the minimum positive value of the array.

    Parameters
    ----------
    values : numpy.ndarray
        Array of non-negative values (e.g., path lengths or widths).

    Returns
    -------
    numpy.ndarray
        Copy of the array with zeros replaced.
    """

    values = np.array(values, dtype=float)
    positive = values[values > 0]
    if len(positive) == 0:
        raise DataIntegrityError("Cannot replace zero values, no positive value found in the dataset.")
    values[values == 0] = np.min(positive)
    return values


def energy_dissipation(mag, length_m, width_m, weights=None):
    r"""
    Estimate the energy dissipation of tornadoes from their damage rating and path area.

    Parameters
    ----------
    mag : int or numpy.ndarray
        Resolved damage rating(s), 0 through 5.
    length_m : float or numpy.ndarray
        Path length(s) in meters.
    width_m : float or numpy.ndarray
        Path width(s) in meters, already corrected for the width convention.
    weights : numpy.ndarray, optional
        EW3 per rating. Default is ``energy_weights()``.

    Returns
    -------
    numpy.ndarray
        Energy dissipation in Watts (EW3 multiplied by path area).
    """

    if weights is None:
        weights = energy_weights()
    area = np.asarray(length_m, dtype=float) * np.asarray(width_m, dtype=float)
    scalar = np.ndim(mag) == 0 and np.ndim(area) == 0
    mag = check_ratings(mag)
    energy = np.asarray(weights)[mag] * area
    if scalar:
        return float(energy[0])
    return energy


def convective_day(time):
    r"""
    Return the 06:00-to-06:00 convective day a local event time belongs to.

    Events before 06:00 local time belong to the previous calendar day's storm system.

    Parameters
    ----------
    time : datetime.datetime
        Local civil time of the event.

    Returns
    -------
    datetime.date
        Date of the convective day.
    """

    if time.hour < constants.CONVECTIVE_DAY_HOUR:
        return (time - datetime.timedelta(hours=24)).date()
    return (time - datetime.timedelta(hours=constants.CONVECTIVE_DAY_HOUR)).date()


def convective_days(times):
    r"""
    Vectorized ``convective_day``.

    Parameters
    ----------
    times : pandas.Series or list
        Local civil event times.

    Returns
    -------
    pandas.Series
        Midnight timestamps of each event's convective day.
    """

    times = pd.Series(pd.to_datetime(times))
    hours = np.where(times.dt.hour < constants.CONVECTIVE_DAY_HOUR, 24, constants.CONVECTIVE_DAY_HOUR)
    return (times - pd.to_timedelta(hours, unit='h')).dt.normalize()
