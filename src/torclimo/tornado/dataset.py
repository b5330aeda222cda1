r"""Functionality for reading and energy-tagging the SPC tornado dataset."""

from datetime import datetime as dt
from io import BytesIO

import numpy as np
import pandas as pd
import requests

from .. import constants
from ..models import Event, ConvectiveDay
from .tools import (impute_rating, check_ratings, correct_width, fill_zeros, energy_weights,
                    energy_dissipation, convective_days)


class TornadoDataset():

    r"""
    Creates an instance of a TornadoDataset object containing energy-tagged tornado data.

    Parameters
    ----------
    mag_thresh : int
        Minimum threshold for tornado rating, applied after unrated tornadoes are imputed. Default is 0.
    tornado_path : str or pandas.DataFrame
        Source to read tornado data from. Default is "spc", which reads from the online Storm Prediction Center (SPC) 1950-present tornado database. Can change this to a local file, or a DataFrame in the SPC column layout.
    year_range : list or tuple, optional
        Start and end years (inclusive) to keep. Default is all years.
    drop_segments : bool
        Whether to drop state segment entries (``sg == 2``) so each tornado is counted once. Default is True.
    width_cutoff_year : int
        First year whose widths are mean widths and get scaled by pi/4. Default is 1995.

    Returns
    -------
    TornadoDataset
        An instance of TornadoDataset.

    Notes
    -----
    The ``Tors`` attribute holds a DataFrame with one row per tornado. On top of the SPC columns, it contains:

    * **time** - local civil time of the tornado.
    * **cday** - convective day (06:00 to 06:00 local) the tornado belongs to.
    * **mag_raw** - rating as reported, -9 if unrated. **mag** holds the imputed rating.
    * **length_m**, **width_m**, **area_m2** - path dimensions in meters, width corrected and zeros replaced by the minimum positive value across the full catalog, before ``year_range`` and ``mag_thresh`` are applied.
    * **energy** - energy dissipation in Watts.
    """

    def __repr__(self):

        summary = ["<torclimo.tornado.TornadoDataset>"]
        summary.append("Dataset Summary:")
        summary.append(f'{" "*4}Number of tornadoes: {len(self.Tors)}')
        summary.append(f'{" "*4}Number of convective days: {self.Tors["cday"].nunique()}')
        summary.append(f'{" "*4}Years: {int(self.Tors["yr"].min())}-{int(self.Tors["yr"].max())}')
        summary.append(f'{" "*4}Unrated tornadoes imputed: {int((self.Tors["mag_raw"] == constants.UNRATED).sum())}')
        return "\n".join(summary)

    def __init__(self, mag_thresh=0, tornado_path='spc', year_range=None, drop_segments=True,
                 width_cutoff_year=constants.WIDTH_CUTOFF_YEAR):

        # Error check
        if isinstance(mag_thresh, int) == False:
            raise TypeError("mag_thresh must be of type int.")
        elif mag_thresh not in constants.RATINGS:
            raise ValueError("mag_thresh must be between 0 and 5.")
        if year_range is not None and len(year_range) != 2:
            raise ValueError("year_range must be a tuple or list with 2 elements: (start_year, end_year)")

        # Read in tornado dataset
        timer_start = dt.now()
        if isinstance(tornado_path, pd.DataFrame):
            Tors = tornado_path.copy()
        else:
            print('--> Starting to read in tornado track data')
            Tors = self.__read(tornado_path, timer_start)

        # Construct local civil time
        Tors = Tors.reset_index(drop=True)
        Tors['time'] = pd.to_datetime(pd.DataFrame({'year': Tors['yr'], 'month': Tors['mo'], 'day': Tors['dy']})) + \
            pd.to_timedelta(Tors['time'].astype(str))

        # Keep each tornado only once
        if drop_segments and 'sg' in Tors.columns:
            Tors = Tors[Tors['sg'] != 2]

        # Clean up lat/lons
        Tors = Tors[(Tors['slat'] != 0) | (Tors['slon'] != 0)]
        Tors = Tors[(Tors['slat'] >= 20) & (Tors['slat'] <= 50)]
        Tors = Tors[(Tors['slon'] >= -130) & (Tors['slon'] <= -65)]
        Tors = Tors.assign(elat=np.where(Tors['elat'] == 0, Tors['slat'], Tors['elat']),
                           elon=np.where(Tors['elon'] == 0, Tors['slon'], Tors['elon']))
        Tors = Tors.reset_index(drop=True)
        if len(Tors) == 0:
            raise RuntimeError("No tornadoes were found given the requested criteria.")

        # Resolve unrated tornadoes
        Tors['mag_raw'] = Tors['mag'].astype(int)
        Tors['mag'] = check_ratings(impute_rating(Tors['mag_raw'].values, Tors['len'].values))

        # Path dimensions in meters, correcting widths and replacing zeros with the minimum positive value of the full catalog
        width = correct_width(Tors['wid'].values * constants.YARDS_TO_METERS, Tors['yr'].values, width_cutoff_year)
        Tors['length_m'] = fill_zeros(Tors['len'].values * constants.MILES_TO_METERS)
        Tors['width_m'] = fill_zeros(width)
        Tors['area_m2'] = Tors['length_m'] * Tors['width_m']

        # Filter by year and rating
        if year_range is not None:
            Tors = Tors[(Tors['yr'] >= int(year_range[0])) & (Tors['yr'] <= int(year_range[1]))]
        Tors = Tors[Tors['mag'] >= mag_thresh].reset_index(drop=True)
        if len(Tors) == 0:
            raise RuntimeError("No tornadoes were found given the requested criteria.")

        # Energy dissipation and convective day
        self.weights = energy_weights()
        Tors['energy'] = energy_dissipation(Tors['mag'].values, Tors['length_m'].values, Tors['width_m'].values,
                                            weights=self.weights)
        Tors['cday'] = convective_days(Tors['time'])

        self.Tors = Tors.sort_values('time', kind='stable').reset_index(drop=True)

    @classmethod
    def from_events(cls, events, **kwargs):
        r"""
        Create a TornadoDataset from a list of Event objects.

        Parameters
        ----------
        events : list
            List of ``torclimo.models.Event`` objects.
        **kwargs
            Keyword arguments passed to ``TornadoDataset``.

        Returns
        -------
        TornadoDataset
            An instance of TornadoDataset.
        """

        rows = []
        for event in events:
            rows.append({
                'yr': event.time.year, 'mo': event.time.month, 'dy': event.time.day,
                'time': event.time.strftime('%H:%M:%S'), 'st': event.state, 'mag': event.mag,
                'inj': event.injuries, 'fat': event.fatalities, 'slat': event.lat, 'slon': event.lon,
                'elat': 0.0, 'elon': 0.0, 'len': event.length, 'wid': event.width, 'sg': 1,
            })
        columns = ['yr', 'mo', 'dy', 'time', 'st', 'mag', 'inj', 'fat', 'slat', 'slon', 'elat', 'elon', 'len', 'wid', 'sg']
        return cls(tornado_path=pd.DataFrame(rows, columns=columns), **kwargs)

    def __read(self, tornado_path, timer_start):

        if tornado_path == 'spc':
            # Find most recent year
            yrnow = timer_start.year
            for year_diff in [0, 1, 2, 3, 4, 5]:
                yrlast = yrnow - year_diff
                url = f"https://www.spc.noaa.gov/wcm/data/1950-{yrlast}_actual_tornadoes.csv"
                request = requests.get(url, timeout=60)
                if request.status_code == 200:
                    Tors = pd.read_csv(BytesIO(request.content), on_bad_lines='skip')
                    print(f'--> Completed reading in tornado data for 1950-{yrlast} (%.2f seconds)' % (
                        dt.now()-timer_start).total_seconds())
                    return Tors
            raise RuntimeError("Error: No SPC tornado dataset available within the last 5 years.")

        Tors = pd.read_csv(tornado_path, on_bad_lines='skip')
        print('--> Completed reading in tornado data from local file (%.2f seconds)' %
              (dt.now()-timer_start).total_seconds())
        return Tors

    def events(self):
        r"""
        Return every tornado in the dataset as an Event object, ordered by time.

        Returns
        -------
        list
            List of ``torclimo.models.Event`` objects. ``mag`` holds the rating as reported (-9 if unrated).
        """

        return [self.__to_event(row) for row in self.Tors.itertuples(index=False)]

    def get_day_events(self, date):
        r"""
        Retrieve all tornadoes of a convective day.

        Parameters
        ----------
        date : datetime.date or datetime.datetime
            Date of the convective day.

        Returns
        -------
        pandas.DataFrame
            Subset of ``Tors`` belonging to this convective day.
        """

        return self.Tors.loc[self.Tors['cday'] == pd.Timestamp(date).normalize()]

    def get_convective_day(self, date):
        r"""
        Retrieve a convective day and its tornadoes, ordered by time.

        Parameters
        ----------
        date : datetime.date or datetime.datetime
            Date of the convective day.

        Returns
        -------
        torclimo.models.ConvectiveDay
            Immutable convective day.
        """

        subset = self.get_day_events(date)
        if len(subset) == 0:
            raise ValueError(f"No tornadoes found on the convective day of {pd.Timestamp(date):%Y-%m-%d}.")
        events = tuple(self.__to_event(row) for row in subset.itertuples(index=False))
        return ConvectiveDay(date=pd.Timestamp(date).date(), events=events)

    def __to_event(self, row):

        return Event(time=row.time.to_pydatetime(), lon=float(row.slon), lat=float(row.slat),
                     length=float(row.len), width=float(row.wid), mag=int(row.mag_raw),
                     injuries=int(row.inj), fatalities=int(row.fat), state=str(row.st))
