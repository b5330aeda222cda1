r"""Angular correlation screen between a rotated two-variable combination and a reference series."""

import numpy as np
import pandas as pd
from scipy import stats

from ..utils import all_nan, is_number

# Relative standard deviation below which a series is treated as constant
ZERO_VARIANCE_TOL = 1e-12


def standardize(values, log=False):
    r"""
    Convert a series to zero mean and unit variance.

    Parameters
    ----------
    values : list or numpy.ndarray
        Values to standardize.
    log : bool
        Whether to take the natural logarithm of the values first. Values must then be positive. Default is False.

    Returns
    -------
    numpy.ndarray
        Standardized values (sample standard deviation). A constant series returns all NaNs.
    """

    values = np.asarray(values, dtype=float)
    if log:
        if np.any(values[np.isfinite(values)] <= 0):
            raise ValueError("All values must be positive to be log-transformed.")
        values = np.log(values)
    std = np.nanstd(values, ddof=1)
    if not np.isfinite(std) or std == 0:
        return np.full(values.shape, np.nan)
    return (values - np.nanmean(values)) / std


def pearson(a, b, conf_level=0.95):
    r"""
    Pearson correlation with a Fisher z-transform p-value and confidence interval.

    Parameters
    ----------
    a : numpy.ndarray
        First series.
    b : numpy.ndarray
        Second series, of the same length.
    conf_level : float
        Confidence level of the interval. Default is 0.95.

    Returns
    -------
    tuple
        Correlation coefficient, two-sided p-value, lower and upper confidence bounds. All are NaN if either series has zero variance or fewer than 4 values are given.
    """

    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    n = len(a)
    nan_output = (np.nan, np.nan, np.nan, np.nan)
    if n < 4:
        return nan_output

    da = a - a.mean()
    db = b - b.mean()
    sa = np.sqrt(np.sum(da**2))
    sb = np.sqrt(np.sum(db**2))
    if sa <= ZERO_VARIANCE_TOL * np.sqrt(n) * np.max(np.abs(a)) or sb <= ZERO_VARIANCE_TOL * np.sqrt(n) * np.max(np.abs(b)):
        return nan_output
    r = float(np.clip(np.sum(da * db) / (sa * sb), -1.0, 1.0))

    # Fisher z-transform, normal approximation
    se = 1.0 / np.sqrt(n - 3)
    z_crit = stats.norm.ppf(0.5 + conf_level / 2.0)
    with np.errstate(divide='ignore'):
        z = np.arctanh(r)
    p_value = float(2.0 * stats.norm.sf(abs(z) / se))
    ci_low = float(np.tanh(z - z_crit * se))
    ci_high = float(np.tanh(z + z_crit * se))
    return r, p_value, ci_low, ci_high


def correlation_screen(x, y, ref, start=1, stop=180, step=1, conf_level=0.95):
    r"""
    Correlate the rotated combination cos(angle) * x + sin(angle) * y with a reference series at every angle.

    Parameters
    ----------
    x : list or numpy.ndarray
        First standardized variable (e.g., log of the number of tornadoes per day).
    y : list or numpy.ndarray
        Second standardized variable, of the same length (e.g., log of the median energy per day).
    ref : list or numpy.ndarray
        Reference series, of the same length (e.g., maximum CAPE per day).
    start : int or float
        First angle in degrees. Default is 1.
    stop : int or float
        Last angle in degrees (inclusive). Default is 180. Use ``start=-90, stop=270`` for the directional variant.
    step : int or float
        Angular resolution in degrees. Default is 1.
    conf_level : float
        Confidence level of the correlation intervals. Default is 0.95.

    Returns
    -------
    pandas.DataFrame
        Correlation profile indexed by angle (degrees), with columns "r", "p_value", "ci_low" and "ci_high". Angles at which the combination has zero variance are NaN.

    Notes
    -----
    Rows with a non-finite value in any of the three series are dropped before the screen, so every angle uses the same days.
    """

    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    ref = np.asarray(ref, dtype=float)
    if not (x.shape == y.shape == ref.shape) or x.ndim != 1:
        raise ValueError("x, y and ref must be 1-dimensional with the same length.")
    if not all(is_number(value) for value in [start, stop, step, conf_level]):
        raise TypeError("start, stop, step and conf_level must be numbers.")
    if step <= 0 or stop < start:
        raise ValueError("step must be positive and stop must be greater than or equal to start.")
    if not 0 < conf_level < 1:
        raise ValueError("conf_level must be between 0 and 1.")

    # Complete cases only
    mask = np.isfinite(x) & np.isfinite(y) & np.isfinite(ref)
    x, y, ref = x[mask], y[mask], ref[mask]

    angles = np.arange(start, stop + step / 2.0, step)
    if float(start).is_integer() and float(step).is_integer():
        angles = np.round(angles).astype(int)
    profile = np.full((len(angles), 4), np.nan)
    scale = np.std(x) + np.std(y) if len(x) > 0 else 0.0
    for i, angle in enumerate(angles):
        theta = np.deg2rad(angle)
        proj = np.cos(theta) * x + np.sin(theta) * y

        # x and y cancel out at this angle
        if len(proj) == 0 or np.std(proj) <= ZERO_VARIANCE_TOL * scale:
            continue
        profile[i] = pearson(proj, ref, conf_level=conf_level)

    return pd.DataFrame(profile, index=pd.Index(angles, name='angle'), columns=['r', 'p_value', 'ci_low', 'ci_high'])


def strongest_angles(profile):
    r"""
    Angle(s) of maximum absolute correlation in a correlation profile.

    Parameters
    ----------
    profile : pandas.DataFrame
        Output of ``correlation_screen``.

    Returns
    -------
    list
        Angles (degrees) at which abs(r) is maximal. Empty if every correlation is NaN.
    """

    abs_r = profile['r'].abs()
    if all_nan(abs_r.values):
        return []
    return profile.index[np.isclose(abs_r.values, abs_r.max(), rtol=0, atol=1e-12)].tolist()


def significant_angles(profile, alpha=0.05):
    r"""
    Angles whose correlation p-value is at or below a significance threshold.

    Parameters
    ----------
    profile : pandas.DataFrame
        Output of ``correlation_screen``.
    alpha : float
        Significance threshold. Default is 0.05.

    Returns
    -------
    list
        Significant angles (degrees), in increasing order.
    """

    return profile.index[profile['p_value'] <= alpha].tolist()


def screen_summary(profile, alpha=0.05):
    r"""
    Summarize a correlation profile.

    Parameters
    ----------
    profile : pandas.DataFrame
        Output of ``correlation_screen``.
    alpha : float
        Significance threshold. Default is 0.05.

    Returns
    -------
    dict
        Dictionary containing "strongest_angles", "max_abs_r", "r_at_strongest", "significant_angles" and "n_significant".
    """

    strongest = strongest_angles(profile)
    significant = significant_angles(profile, alpha=alpha)
    return {
        'strongest_angles': strongest,
        'max_abs_r': float(profile['r'].abs().max()) if len(strongest) > 0 else np.nan,
        'r_at_strongest': [float(profile.loc[angle, 'r']) for angle in strongest],
        'significant_angles': significant,
        'n_significant': len(significant),
    }
