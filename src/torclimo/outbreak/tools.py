import numpy as np
import pandas as pd
import shapely
import shapely.geometry as sgeom

from ..exceptions import DataIntegrityError, GeometryError
from ..models import Footprint
from ..utils import equal_area_projection, project_points, unproject_points


def geometric_mean(values):
    r"""
    Geometric mean, exp(mean(log(values))).

    Parameters
    ----------
    values : list or numpy.ndarray
        Strictly positive values.

    Returns
    -------
    float
        Geometric mean of the values.
    """

    values = np.asarray(values, dtype=float)
    if len(values) == 0:
        raise ValueError("Cannot compute the geometric mean of an empty array.")
    if np.any(~(values > 0)):
        raise DataIntegrityError("All energies must be positive to compute a geometric mean.")
    return float(np.exp(np.mean(np.log(values))))


def day_statistics(energy):
    r"""
    Calculate day-level energy statistics for one convective day.

    Parameters
    ----------
    energy : list or numpy.ndarray
        Energy dissipation of each tornado of the day.

    Returns
    -------
    dict
        Dictionary containing "nT" (count), "ATE" (total energy), "GME" (geometric mean energy), "MDE" (median energy), "q75" and "q95" (upper quantiles, linear interpolation).
    """

    energy = np.asarray(energy, dtype=float)
    return {
        'nT': len(energy),
        'ATE': float(np.sum(energy)),
        'GME': geometric_mean(energy),
        'MDE': float(np.median(energy)),
        'q75': float(np.quantile(energy, 0.75)),
        'q95': float(np.quantile(energy, 0.95)),
    }


def aggregate_days(Tors):
    r"""
    Group energy-tagged tornadoes by convective day and calculate day-level statistics.

    Parameters
    ----------
    Tors : pandas.DataFrame
        Tornado DataFrame containing at least "cday" and "energy" columns (e.g., ``TornadoDataset.Tors``). Columns "inj", "fat" and "st" are aggregated when present.

    Returns
    -------
    pandas.DataFrame
        One row per convective day, indexed by date, with columns nT, ATE, GME, MDE, q75, q95, injuries, fatalities, n_states, year and month.
    """

    energy = Tors['energy'].values.astype(float)
    if np.any(~(energy > 0)):
        raise DataIntegrityError("All energies must be positive to compute a geometric mean.")

    # Group by convective day
    Tors = Tors.assign(log_energy=np.log(energy))
    groups = Tors.groupby('cday', sort=True)
    days = pd.DataFrame({
        'nT': groups.size(),
        'ATE': groups['energy'].sum(),
        'GME': np.exp(groups['log_energy'].mean()),
        'MDE': groups['energy'].median(),
        'q75': groups['energy'].quantile(0.75),
        'q95': groups['energy'].quantile(0.95),
    })

    # Casualties and states affected
    days['injuries'] = groups['inj'].sum() if 'inj' in Tors.columns else 0
    days['fatalities'] = groups['fat'].sum() if 'fat' in Tors.columns else 0
    days['n_states'] = groups['st'].nunique() if 'st' in Tors.columns else 0

    days.index = pd.DatetimeIndex(days.index, name='date')
    days['year'] = days.index.year
    days['month'] = days.index.month
    return days


def rank_days(days, metric='ATE', n=None, ascending=False):
    r"""
    Rank days by a metric, breaking ties by date ascending.

    Parameters
    ----------
    days : pandas.DataFrame
        Day-level DataFrame indexed by date, as returned by ``aggregate_days``.
    metric : str
        Column to rank by. Default is "ATE".
    n : int, optional
        Number of top days to return. Default is all days.
    ascending : bool
        Whether to rank in ascending order (True) or descending order (False). Default is False.

    Returns
    -------
    pandas.DataFrame
        Ranked days with a 1-based "rank" index and a "date" column.
    """

    if metric not in days.columns:
        raise ValueError(f"Metric '{metric}' is not available. Options are: {', '.join(days.columns)}.")

    ranked = days.reset_index().sort_values([metric, 'date'], ascending=[ascending, True], kind='stable')
    if n is not None:
        ranked = ranked.iloc[:n]
    ranked.index = pd.RangeIndex(1, len(ranked) + 1, name='rank')
    return ranked


def build_footprint(lons, lats, projection=None):
    r"""
    Build the convex hull footprint of a day's tornadoes.

    Parameters
    ----------
    lons : list or numpy.ndarray
        Longitude of each tornado, in degrees.
    lats : list or numpy.ndarray
        Latitude of each tornado, in degrees.
    projection : cartopy.crs.Projection, optional
        Planar projection in which the hull, its area and centroid are computed. Default is an Albers equal-area projection over the contiguous US.

    Returns
    -------
    torclimo.models.Footprint
        Footprint containing the projected hull, the hull in lon/lat, its area (km^2) and centroid.

    Notes
    -----
    A single tornado yields a Point hull and two tornadoes (or collinear tornadoes) a LineString hull. Both are valid footprints with zero area.
    """

    lons = np.atleast_1d(np.asarray(lons, dtype=float))
    lats = np.atleast_1d(np.asarray(lats, dtype=float))
    if len(lons) == 0 or len(lons) != len(lats):
        raise GeometryError("A footprint requires at least one point, with equal numbers of longitudes and latitudes.")
    if projection is None:
        projection = equal_area_projection()

    # Convex hull in the planar projection
    x, y = project_points(lons, lats, projection)
    hull = sgeom.MultiPoint(list(zip(x, y))).convex_hull
    centroid = hull.centroid

    # Back to lon/lat for sampling against grids
    centroid_lon, centroid_lat = unproject_points([centroid.x], [centroid.y], projection)
    hull_geo = shapely.transform(hull, lambda xy: np.column_stack(unproject_points(xy[:, 0], xy[:, 1], projection)))

    return Footprint(hull=hull, hull_geo=hull_geo, area_km2=abs(hull.area) / 1e6,
                     centroid_lon=float(centroid_lon[0]), centroid_lat=float(centroid_lat[0]))
