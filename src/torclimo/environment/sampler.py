r"""Sampling of gridded environmental fields within outbreak day footprints and baseline regions."""

import warnings
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime as dt

import numpy as np
import shapely
import xarray as xr
from shapely.geometry.base import BaseGeometry

from .. import constants
from ..exceptions import GeometryError, SamplingEmptyError, SourceUnavailableError
from ..models import FootprintSample, DaySample
from ..utils import region_polygon
from .source import as_date

AGGREGATION_FUNCTIONS = {
    'mean': np.mean,
    'max': np.max,
    'min': np.min,
}

LAT_NAMES = ('lat', 'latitude', 'gridlat_221')
LON_NAMES = ('lon', 'longitude', 'gridlon_221')


def prepare_fields(raw):
    r"""
    Apply ingestion conventions to freshly fetched fields.

    Convective inhibition is negated so it is stored as a positive magnitude of inhibition. Bulk shear magnitude ("shear") is derived pointwise on the full grid from the "ustm" and "vstm" components, before any spatial aggregation.

    Parameters
    ----------
    raw : dict
        Dictionary of field name to ``xarray.DataArray``, as returned by ``GridSource.fetch``.

    Returns
    -------
    dict
        New dictionary of prepared fields.
    """

    fields = dict(raw)
    if 'cin' in fields:
        fields['cin'] = -fields['cin']
    if 'ustm' in fields and 'vstm' in fields:
        fields['shear'] = np.hypot(fields['ustm'], fields['vstm'])
    return fields


def grid_coordinates(grid):
    r"""
    Longitude & latitude of every cell center of a 2D grid.

    Parameters
    ----------
    grid : xarray.DataArray
        2D field with 1D or 2D latitude & longitude coordinates.

    Returns
    -------
    tuple
        2D arrays of longitude (-180 to 180) and latitude, with the same shape as the grid.
    """

    lat_name = [i for i in LAT_NAMES if i in grid.coords]
    lon_name = [i for i in LON_NAMES if i in grid.coords]
    if len(lat_name) == 0 or len(lon_name) == 0:
        raise ValueError(f"Grid must have latitude & longitude coordinates named one of {LAT_NAMES} and {LON_NAMES}.")

    lats, lons = xr.broadcast(grid[lat_name[0]], grid[lon_name[0]])
    lats = lats.transpose(*grid.dims).values
    lons = lons.transpose(*grid.dims).values
    lons = np.where(lons > 180, lons - 360, lons)
    return lons, lats


def check_footprint(footprint):
    r"""
    Raise a ``GeometryError`` if no sampling can proceed over the footprint.
    """

    if footprint is None:
        raise GeometryError("No footprint was provided.")
    if not isinstance(footprint, BaseGeometry):
        raise GeometryError("Footprint must be a shapely geometry.")
    if footprint.is_empty:
        raise GeometryError("Footprint is empty.")
    if not footprint.is_valid:
        raise GeometryError("Footprint is not a valid geometry.")


def sample_footprint(fields, footprint, names=constants.SAMPLE_FIELDS, aggregations=constants.AGGREGATIONS, date=None):
    r"""
    Aggregate gridded fields over all cells whose center falls within a footprint.

    Parameters
    ----------
    fields : dict
        Prepared fields (refer to ``prepare_fields``).
    footprint : shapely.geometry
        Footprint in longitude & latitude.
    names : list or tuple
        Fields to sample. Default is ("cape", "helicity", "cin", "shear").
    aggregations : list or tuple
        Aggregations to compute, any of "mean", "max" and "min". Default is all three.
    date : datetime.date, optional
        Date recorded on each sample.

    Returns
    -------
    tuple
        One ``torclimo.models.FootprintSample`` per field and aggregation, ordered by field then aggregation.
    """

    check_footprint(footprint)
    samples = []
    for name in names:
        if name not in fields:
            raise ValueError(f"Field '{name}' is not available. Fields are: {', '.join(fields.keys())}.")
        grid = fields[name]
        lons, lats = grid_coordinates(grid)

        # Cells whose center lies inside or on the footprint
        mask = shapely.intersects_xy(footprint, lons, lats)
        values = np.asarray(grid.values, dtype=float)[mask]
        values = values[np.isfinite(values)]
        if len(values) == 0:
            raise SamplingEmptyError(f"No valid '{name}' grid cells fall within the footprint.")

        for aggregation in aggregations:
            value = float(AGGREGATION_FUNCTIONS[aggregation](values))
            samples.append(FootprintSample(date=date, field=name, aggregation=aggregation, value=value))
    return tuple(samples)


class EnvironmentalSampler():

    r"""
    Creates an instance of an EnvironmentalSampler object, sampling gridded fields for outbreak and baseline days.

    Parameters
    ----------
    source : torclimo.environment.GridSource
        Source of gridded fields.
    fields : list or tuple
        Fields to sample. Default is ("cape", "helicity", "cin", "shear").
    aggregations : list or tuple
        Aggregations to compute. Default is ("mean", "max", "min").
    workers : int
        Maximum number of days sampled concurrently. Default is 8.

    Notes
    -----
    Days outside of the source coverage are flagged "out_of_range" and never fetched. Days whose grid data is unavailable or whose footprint contains no grid cell are flagged "missing" and a warning is issued; the rest of the run continues.
    """

    def __init__(self, source, fields=constants.SAMPLE_FIELDS, aggregations=constants.AGGREGATIONS, workers=8):

        # Error check
        for aggregation in aggregations:
            if aggregation not in AGGREGATION_FUNCTIONS:
                raise ValueError(f"Aggregation '{aggregation}' is not available. Options are: {', '.join(AGGREGATION_FUNCTIONS.keys())}.")
        if isinstance(workers, int) == False or workers < 1:
            raise ValueError("workers must be a positive integer.")

        self.source = source
        self.fields = tuple(fields)
        self.aggregations = tuple(aggregations)
        self.workers = workers

    def sample(self, date, footprint, kind=constants.OUTBREAK_KIND):
        r"""
        Sample all fields over a footprint for a single day.

        Parameters
        ----------
        date : datetime.date
            Date to sample.
        footprint : shapely.geometry
            Footprint in longitude & latitude.
        kind : str
            Kind of day, "outbreak" or "baseline". Default is "outbreak".

        Returns
        -------
        torclimo.models.DaySample
            Outcome of sampling for this day.
        """

        date = as_date(date)
        if not self.source.available(date):
            return DaySample(date=date, kind=kind, status=constants.STATUS_OUT_OF_RANGE,
                             message=f'{date} is outside of the source coverage.')
        check_footprint(footprint)

        try:
            fields = prepare_fields(self.source.fetch(date))
            samples = sample_footprint(fields, footprint, self.fields, self.aggregations, date=date)
        except (SourceUnavailableError, SamplingEmptyError) as e:
            warnings.warn(f"Environmental sampling failed for {date}: {e}")
            return DaySample(date=date, kind=kind, status=constants.STATUS_MISSING, message=str(e))

        return DaySample(date=date, kind=kind, status=constants.STATUS_OK, samples=samples)

    def sample_days(self, requests):
        r"""
        Sample many days concurrently.

        Parameters
        ----------
        requests : list
            List of (date, footprint, kind) tuples.

        Returns
        -------
        list
            List of ``torclimo.models.DaySample`` objects, in the same order as ``requests``.
        """

        timer_start = dt.now()
        print(f'--> Starting to sample environmental fields for {len(requests)} days')

        results = [None] * len(requests)
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = {executor.submit(self.sample, *request): i for i, request in enumerate(requests)}
            for future, i in futures.items():
                results[i] = future.result()

        counts = {status: sum(1 for i in results if i.status == status) for status in constants.ALL_STATUSES}
        print(f'--> Completed sampling {len(results)} days: {counts[constants.STATUS_OK]} ok, '
              f'{counts[constants.STATUS_MISSING]} missing, {counts[constants.STATUS_OUT_OF_RANGE]} out of range (%.2f seconds)' %
              (dt.now()-timer_start).total_seconds())
        return results

    def sample_outbreak_days(self, outbreak_days):
        r"""
        Sample every outbreak day over its own footprint.

        Parameters
        ----------
        outbreak_days : list
            List of ``torclimo.models.OutbreakDay`` objects with footprints (refer to ``OutbreakDataset.get_outbreak_days``).

        Returns
        -------
        list
            List of ``torclimo.models.DaySample`` objects, in the same order as ``outbreak_days``.
        """

        requests = []
        for day in outbreak_days:
            if day.footprint is None:
                raise GeometryError(f"Outbreak day {day.date} has no footprint.")
            requests.append((day.date, day.footprint.hull_geo, constants.OUTBREAK_KIND))
        return self.sample_days(requests)

    def sample_baseline_days(self, baseline_days):
        r"""
        Sample every baseline day over its fixed region.

        Parameters
        ----------
        baseline_days : list
            List of ``torclimo.models.BaselineDay`` objects (refer to ``OutbreakDataset.sample_baseline_days``).

        Returns
        -------
        list
            List of ``torclimo.models.DaySample`` objects, in the same order as ``baseline_days``.
        """

        requests = [(day.date, region_polygon(day.region), constants.BASELINE_KIND) for day in baseline_days]
        return self.sample_days(requests)
