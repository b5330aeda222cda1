"""Tests for gridded field sources"""

import os
import datetime as dt
import numpy as np
import pytest
import requests
import xarray as xr
from torclimo.environment import GridSource, LocalGridSource, NarrSource, create_session
from torclimo.exceptions import SourceUnavailableError

def small_grid():

    lats = np.array([35.0, 36.0])
    lons = np.array([-97.0, -96.0])
    data = {name: (('lat', 'lon'), np.ones((2, 2))) for name in ['cape', 'cin', 'hlcy', 'ustm', 'vstm']}
    return xr.Dataset(data, coords={'lat': lats, 'lon': lons})

class FakeResponse:

    def __init__(self, status_code, content=b''):
        self.status_code = status_code
        self.content = content

class FakeSession:

    #Records requested URLs and replays a fixed response
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.response

def test_source_coverage():
    """Test date coverage of grid sources"""

    source = GridSource()
    assert source.available(dt.date(1979, 1, 1))
    assert source.available(dt.date(2014, 10, 1))
    assert not source.available(dt.date(2014, 10, 2))
    assert not source.available(dt.date(1978, 12, 31))
    assert source.available('2011-04-27')

    #Dates out of range are never loaded
    with pytest.raises(SourceUnavailableError):
        source.fetch(dt.date(2015, 1, 1))

    #The base class does not load files
    with pytest.raises(NotImplementedError):
        source.fetch(dt.date(2011, 4, 27))

    #Invalid arguments
    with pytest.raises(ValueError):
        GridSource(start=dt.date(2000, 1, 2), end=dt.date(2000, 1, 1))
    with pytest.raises(ValueError):
        GridSource(analysis_hour=24)

def test_field_map():
    """Test mapping of decoded variables to field names"""

    source = GridSource(field_map={'helicity': 'srh'})
    assert source.field_map['helicity'] == 'srh'
    assert source.field_map['cape'] == 'cape'

    #Mapped variable missing from the decoded file
    with pytest.raises(SourceUnavailableError):
        source.extract_fields(small_grid())

    fields = source.extract_fields(small_grid().rename({'hlcy': 'srh'}))
    assert sorted(fields.keys()) == ['cape', 'cin', 'helicity', 'ustm', 'vstm']

    #Fields with more than one level
    grid = small_grid().expand_dims(level=[1000, 850])
    with pytest.raises(SourceUnavailableError):
        GridSource().extract_fields(grid)

def test_local_source(tmp_path):
    """Test reading local grid files"""

    template = os.path.join(str(tmp_path), 'narr_{date:%Y%m%d}_{hour:02d}.nc')
    path = os.path.join(str(tmp_path), 'narr_20110427_18.nc')
    with open(path, 'w') as f:
        f.write('placeholder')

    decoded = []
    def decoder(path):
        decoded.append(path)
        return small_grid()

    source = LocalGridSource(template, decoder=decoder)
    fields = source.fetch(dt.date(2011, 4, 27))
    assert decoded == [path]
    assert fields['cape'].shape == (2, 2)

    #File not found
    with pytest.raises(SourceUnavailableError):
        source.fetch(dt.date(2011, 4, 28))

    #File that cannot be decoded
    def bad_decoder(path):
        raise ValueError("not a grid file")
    source = LocalGridSource(template, decoder=bad_decoder)
    with pytest.raises(SourceUnavailableError):
        source.fetch(dt.date(2011, 4, 27))

def test_narr_url(tmp_path):
    """Test NARR file URLs"""

    source = NarrSource(str(tmp_path), session=FakeSession())
    url = source.url(dt.date(2011, 4, 27))
    assert url.startswith('https://www.ncei.noaa.gov/')
    assert url.endswith('/201104/20110427/narr-a_221_20110427_1800_000.grb')

    source = NarrSource(str(tmp_path), session=FakeSession(), analysis_hour=0)
    assert source.url(dt.date(2011, 4, 27)).endswith('narr-a_221_20110427_0000_000.grb')

def test_narr_download(tmp_path):
    """Test downloading and caching NARR files"""

    session = FakeSession(response=FakeResponse(200, b'GRIB'))
    source = NarrSource(str(tmp_path / 'cache'), session=session, decoder=lambda path: small_grid())

    path = source.download(dt.date(2011, 4, 27))
    assert os.path.isfile(path)
    with open(path, 'rb') as f:
        assert f.read() == b'GRIB'
    assert not os.path.isfile(f'{path}.part')

    #Cached files are not requested again
    fields = source.fetch(dt.date(2011, 4, 27))
    assert len(session.urls) == 1
    assert fields['cape'].shape == (2, 2)

def test_narr_download_errors(tmp_path):
    """Test unavailable NARR files"""

    source = NarrSource(str(tmp_path), session=FakeSession(response=FakeResponse(404)))
    with pytest.raises(SourceUnavailableError):
        source.fetch(dt.date(2011, 4, 27))
    assert not os.listdir(str(tmp_path))

    source = NarrSource(str(tmp_path), session=FakeSession(error=requests.ConnectionError("unreachable")))
    with pytest.raises(SourceUnavailableError):
        source.fetch(dt.date(2011, 4, 27))

def test_create_session():
    """Test the retrying session"""

    session = create_session()
    adapter = session.get_adapter('https://www.ncei.noaa.gov/')
    assert adapter.max_retries.total == 2
    assert 503 in adapter.max_retries.status_forcelist
