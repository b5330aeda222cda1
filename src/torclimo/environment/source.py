r"""Sources of gridded reanalysis fields, addressed by date."""

import os

import pandas as pd
import requests
import xarray as xr
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .. import constants
from ..exceptions import SourceUnavailableError
from ..utils import add_prop

#3 attempts in total, waiting 0s, 2s and 4s between them
DEFAULT_RETRY = Retry(
    total=2,
    backoff_factor=2,
    status_forcelist=[429, 500, 502, 503, 504],
    allowed_methods=["GET", "HEAD"],
    raise_on_status=False,
)

DEFAULT_TIMEOUT = 120


def create_session(retry=None):
    r"""
    Build a ``requests.Session`` with a retry adapter mounted.

    Parameters
    ----------
    retry : urllib3.util.retry.Retry, optional
        Custom retry strategy. Default is ``DEFAULT_RETRY``.

    Returns
    -------
    requests.Session
        Session retrying transient failures with exponential backoff.
    """

    session = requests.Session()
    adapter = HTTPAdapter(max_retries=retry or DEFAULT_RETRY)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def open_grid_file(path, engine=None):
    r"""
    Default decoder, opening a gridded file with xarray and loading it into memory.
    """

    with xr.open_dataset(path, engine=engine) as ds:
        return ds.load()


def as_date(date):
    return pd.Timestamp(date).date()


class GridSource():

    r"""
    Base class for sources of gridded fields at one fixed analysis time per day.

    Parameters
    ----------
    start : datetime.date
        First date available from the source.
    end : datetime.date
        Last date available from the source. Later dates are structurally excluded from environmental analysis.
    field_map : dict, optional
        Mapping of canonical field names ("cape", "cin", "helicity", "ustm", "vstm") to variable names in the decoded files. Entries override the defaults of ``constants.NARR_FIELDS``.
    analysis_hour : int
        Hour (UTC) of the analysis sampled for each day. Default is 18.
    """

    def __init__(self, start=constants.NARR_START, end=constants.NARR_END, field_map=None,
                 analysis_hour=constants.ANALYSIS_HOUR):

        self.start = as_date(start)
        self.end = as_date(end)
        if self.end < self.start:
            raise ValueError("end must be on or after start.")
        if analysis_hour not in range(24):
            raise ValueError("analysis_hour must be between 0 and 23.")
        self.field_map = add_prop(field_map, constants.NARR_FIELDS)
        self.analysis_hour = analysis_hour

    def available(self, date):
        r"""
        Whether the date falls within the source's coverage.
        """

        return self.start <= as_date(date) <= self.end

    def fetch(self, date):
        r"""
        Retrieve all fields for a date.

        Parameters
        ----------
        date : datetime.date
            Requested date.

        Returns
        -------
        dict
            Dictionary of canonical field name to 2D ``xarray.DataArray`` with latitude & longitude coordinates.
        """

        if not self.available(date):
            raise SourceUnavailableError(f"{as_date(date)} is outside of the source coverage ({self.start} to {self.end}).")
        return self.extract_fields(self.load(as_date(date)))

    def load(self, date):
        raise NotImplementedError("Grid sources must implement load(date), returning an xarray.Dataset.")

    def extract_fields(self, ds):
        r"""
        Select the mapped variables of a decoded dataset, keyed by canonical field name.
        """

        fields = {}
        for name, variable in self.field_map.items():
            if variable not in ds.variables:
                raise SourceUnavailableError(f"Variable '{variable}' for field '{name}' is not in the decoded file.")
            fields[name] = ds[variable].squeeze(drop=True)
            if fields[name].ndim != 2:
                raise SourceUnavailableError(f"Field '{name}' is not 2-dimensional after selecting the analysis time.")
        return fields


class LocalGridSource(GridSource):

    r"""
    Grid source reading one local file per day.

    Parameters
    ----------
    path_template : str
        Path of each day's file, formatted with ``date`` and ``hour`` (e.g., "narr/{date:%Y%m%d}_{hour:02d}.nc").
    decoder : callable, optional
        Function taking a path and returning an ``xarray.Dataset``. Default opens the file with xarray.
    **kwargs
        Keyword arguments passed to ``GridSource``.
    """

    def __init__(self, path_template, decoder=None, **kwargs):

        super().__init__(**kwargs)
        self.path_template = path_template
        self.decoder = decoder or open_grid_file

    def load(self, date):

        path = self.path_template.format(date=date, hour=self.analysis_hour)
        if not os.path.isfile(path):
            raise SourceUnavailableError(f"Grid file {path} does not exist.")
        try:
            return self.decoder(path)
        except (OSError, ValueError) as e:
            raise SourceUnavailableError(f"Unable to decode grid file {path}.") from e


class NarrSource(GridSource):

    r"""
    Grid source downloading North American Regional Reanalysis (NARR) files from NCEI.

    Parameters
    ----------
    cache_dir : str
        Directory where downloaded files are kept, so repeated runs skip the download.
    url_template : str, optional
        URL of each day's file, formatted with ``date`` and ``hour``. Default is ``constants.NARR_URL``.
    decoder : callable, optional
        Function taking a path and returning an ``xarray.Dataset``. Default opens the file with xarray; GRIB files require the cfgrib engine (e.g., ``lambda path: open_grid_file(path, engine='cfgrib')``).
    session : requests.Session, optional
        Session to download with. Default is a session retrying transient failures with exponential backoff.
    timeout : int
        Timeout of each request in seconds. Default is 120.
    **kwargs
        Keyword arguments passed to ``GridSource``.

    Notes
    -----
    NARR coverage on NCEI ends in October 2014. Dates after ``end`` are reported as out of range rather than missing.
    """

    def __init__(self, cache_dir, url_template=constants.NARR_URL, decoder=None, session=None,
                 timeout=DEFAULT_TIMEOUT, **kwargs):

        super().__init__(**kwargs)
        self.cache_dir = cache_dir
        self.url_template = url_template
        self.decoder = decoder or open_grid_file
        self.session = session or create_session()
        self.timeout = timeout

    def url(self, date):
        return self.url_template.format(date=as_date(date), hour=self.analysis_hour)

    def download(self, date):
        r"""
        Download the file of a date into the cache directory, unless already cached.

        Returns
        -------
        str
            Local path of the file.
        """

        url = self.url(date)
        path = os.path.join(self.cache_dir, os.path.basename(url))
        if os.path.isfile(path):
            return path

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise SourceUnavailableError(f"Unable to reach {url}.") from e
        if response.status_code != 200:
            raise SourceUnavailableError(f"Request for {url} failed with status {response.status_code}.")

        # Cached files are always complete downloads
        os.makedirs(self.cache_dir, exist_ok=True)
        tmp_path = f'{path}.part'
        with open(tmp_path, 'wb') as f:
            f.write(response.content)
        os.replace(tmp_path, path)
        return path

    def load(self, date):

        path = self.download(date)
        try:
            return self.decoder(path)
        except (OSError, ValueError) as e:
            raise SourceUnavailableError(f"Unable to decode grid file {path}.") from e
