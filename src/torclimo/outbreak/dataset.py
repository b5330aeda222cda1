r"""Functionality for grouping tornadoes into convective days and outbreak days."""

import datetime
from datetime import datetime as dt

import pandas as pd

from .. import constants
from ..models import OutbreakDay, BaselineDay
from ..utils import region_polygon
from ..analysis.trends import annual_summary
from .tools import aggregate_days, rank_days, build_footprint
from .baseline import month_weights, sample_baseline_days


class OutbreakDataset():

    r"""
    Creates an instance of an OutbreakDataset object, grouping tornadoes into convective days.

    Parameters
    ----------
    tornadoes : torclimo.tornado.TornadoDataset
        Energy-tagged tornado dataset.
    med_thresh : int
        Minimum number of tornadoes for a convective day to count as a medium outbreak day. Default is 10.
    big_thresh : int
        Minimum number of tornadoes for a convective day to count as a big outbreak day. Must be greater than or equal to ``med_thresh``. Default is 30.
    projection : cartopy.crs.Projection, optional
        Planar projection for footprints. Default is an Albers equal-area projection over the contiguous US.

    Returns
    -------
    OutbreakDataset
        An instance of OutbreakDataset.

    Notes
    -----
    Day-level statistics are stored in the ``days`` DataFrame (one row per convective day). ``med_days`` and ``big_days`` are its subsets meeting each threshold, so every big day is also a medium day.
    """

    def __repr__(self):

        summary = ["<torclimo.outbreak.OutbreakDataset>"]
        summary.append("Dataset Summary:")
        summary.append(f'{" "*4}Number of convective days: {len(self.days)}')
        summary.append(f'{" "*4}Medium outbreak days (>= {self.med_thresh} tornadoes): {len(self.med_days)}')
        summary.append(f'{" "*4}Big outbreak days (>= {self.big_thresh} tornadoes): {len(self.big_days)}')
        return "\n".join(summary)

    def __init__(self, tornadoes, med_thresh=constants.MED_THRESH, big_thresh=constants.BIG_THRESH, projection=None):

        # Error check
        if isinstance(med_thresh, int) == False or isinstance(big_thresh, int) == False:
            raise TypeError("med_thresh and big_thresh must be of type int.")
        if med_thresh < 1:
            raise ValueError("med_thresh must be at least 1.")
        if big_thresh < med_thresh:
            raise ValueError("big_thresh must be greater than or equal to med_thresh.")

        timer_start = dt.now()
        print('--> Starting to group tornadoes into convective days')

        self.tornadoes = tornadoes
        self.med_thresh = med_thresh
        self.big_thresh = big_thresh
        self.projection = projection

        self.days = aggregate_days(tornadoes.Tors)
        self.med_days = self.days.loc[self.days['nT'] >= med_thresh]
        self.big_days = self.days.loc[self.days['nT'] >= big_thresh]

        print(f'--> Completed grouping {len(self.days)} convective days (%.2f seconds)' %
              (dt.now()-timer_start).total_seconds())

    def get_days(self, kind='big'):
        r"""
        Retrieve day-level statistics for a class of days.

        Parameters
        ----------
        kind : str
            "all" for every convective day, "med" for medium outbreak days, or "big" for big outbreak days. Default is "big".

        Returns
        -------
        pandas.DataFrame
            Day-level statistics indexed by date.
        """

        if kind == 'all':
            return self.days
        elif kind == 'med':
            return self.med_days
        elif kind == 'big':
            return self.big_days
        raise ValueError("kind must be 'all', 'med' or 'big'.")

    def get_convective_day(self, date):
        r"""
        Retrieve a convective day and its tornadoes. Refer to ``TornadoDataset.get_convective_day``.
        """

        return self.tornadoes.get_convective_day(date)

    def get_footprint(self, date):
        r"""
        Build the convex hull footprint of the tornadoes of a convective day.

        Parameters
        ----------
        date : datetime.date or datetime.datetime
            Date of the convective day.

        Returns
        -------
        torclimo.models.Footprint
            Footprint of this day's tornadoes.
        """

        subset = self.tornadoes.get_day_events(date)
        if len(subset) == 0:
            raise ValueError(f"No tornadoes found on the convective day of {pd.Timestamp(date):%Y-%m-%d}.")
        return build_footprint(subset['slon'].values, subset['slat'].values, self.projection)

    def get_outbreak_day(self, date, footprint=True):
        r"""
        Retrieve an OutbreakDay record for a medium (or big) outbreak day.

        Parameters
        ----------
        date : datetime.date or datetime.datetime
            Date of the convective day.
        footprint : bool
            Whether to build the day's footprint. Default is True.

        Returns
        -------
        torclimo.models.OutbreakDay
            Day-level statistics for this date.

        Notes
        -----
        Days with fewer than ``med_thresh`` tornadoes are not outbreak days. Use ``get_footprint`` to build the footprint of any convective day.
        """

        key = pd.Timestamp(date).normalize()
        if key not in self.days.index:
            raise ValueError(f"No tornadoes found on the convective day of {key:%Y-%m-%d}.")
        if key not in self.med_days.index:
            raise ValueError(f"The convective day of {key:%Y-%m-%d} has fewer than {self.med_thresh} tornadoes and is not an outbreak day.")
        row = self.med_days.loc[key]
        return OutbreakDay(date=key.date(), nT=int(row['nT']), ATE=float(row['ATE']), GME=float(row['GME']),
                           MDE=float(row['MDE']), q75=float(row['q75']), q95=float(row['q95']),
                           injuries=int(row['injuries']), fatalities=int(row['fatalities']),
                           n_states=int(row['n_states']),
                           footprint=self.get_footprint(key) if footprint else None)

    def get_outbreak_days(self, kind='big', footprint=True):
        r"""
        Retrieve OutbreakDay records for every day of a class, ordered by date.

        Parameters
        ----------
        kind : str
            "med" or "big". Default is "big".
        footprint : bool
            Whether to build each day's footprint. Default is True.

        Returns
        -------
        list
            List of ``torclimo.models.OutbreakDay`` objects.
        """

        if kind not in ['med', 'big']:
            raise ValueError("kind must be 'med' or 'big'.")
        return [self.get_outbreak_day(date, footprint=footprint) for date in self.get_days(kind).index]

    def rank_days(self, metric='ATE', n=None, kind='all', ascending=False):
        r"""
        Ranks convective days by a specified metric. Ties are broken by date, earliest first.

        Parameters
        ----------
        metric : str
            Column of ``days`` to rank by ("nT", "ATE", "GME", "MDE", "q75", "q95", "injuries", "fatalities", "n_states"). Default is "ATE".
        n : int, optional
            Number of days to return. Default is all days.
        kind : str
            "all", "med" or "big". Default is "all".
        ascending : bool
            Whether to return rank in ascending order (True) or descending order (False). Default is False.

        Returns
        -------
        pandas.DataFrame
            Ranked days with a 1-based rank index.
        """

        return rank_days(self.get_days(kind), metric=metric, n=n, ascending=ascending)

    def month_weights(self, kind='big'):
        r"""
        Month-of-year frequency of outbreak days, as a length 12 array summing to 1.
        """

        return month_weights(self.get_days(kind).index)

    def sample_baseline_days(self, n, start=None, end=None, kind='big', region='conus', seed=None):
        r"""
        Draw random non-outbreak baseline days with the same seasonal cycle as outbreak days.

        Parameters
        ----------
        n : int
            Number of distinct baseline days to draw.
        start : datetime.date, optional
            First date of the study interval. Default is January 1st of the first year of the dataset.
        end : datetime.date, optional
            Last date of the study interval. Default is December 31st of the last year of the dataset.
        kind : str
            Class of outbreak days whose month frequency is matched, "med" or "big". Default is "big".
        region : str
            Name of the fixed region baseline days are sampled over (refer to ``constants.REGIONS``). Default is "conus".
        seed : int, optional
            Seed for reproducible draws.

        Returns
        -------
        list
            List of ``torclimo.models.BaselineDay`` objects, ordered by date. No date is a medium or big outbreak day.
        """

        # Validate region before drawing
        region_polygon(region)

        years = self.tornadoes.Tors['yr']
        if start is None:
            start = datetime.date(int(years.min()), 1, 1)
        if end is None:
            end = datetime.date(int(years.max()), 12, 31)

        exclude = set(i.date() for i in self.med_days.index) | set(i.date() for i in self.big_days.index)
        dates = sample_baseline_days(n, start, end, self.month_weights(kind), exclude=exclude, seed=seed)
        return [BaselineDay(date=date, region=region) for date in dates]

    def annual_summary(self, kind='big', start_year=None, end_year=None):
        r"""
        Per-year number of outbreak days, tornadoes and total energy. Refer to ``torclimo.analysis.annual_summary``.
        """

        years = self.tornadoes.Tors['yr']
        if start_year is None:
            start_year = int(years.min())
        if end_year is None:
            end_year = int(years.max())
        return annual_summary(self.get_days(kind), start_year=start_year, end_year=end_year)
