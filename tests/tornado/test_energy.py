"""Tests for the tornado energy dissipation model"""

import datetime as dt
import numpy as np
import pandas as pd
import pytest
import torclimo.tornado as tornado
from torclimo.exceptions import DataIntegrityError
from torclimo.models import Event

def test_perc_matrix():
    """Test normalization of the area fraction matrix"""

    #Every row sums to 1, including the published EF2 row
    perc = tornado.perc_matrix()
    np.testing.assert_almost_equal(perc.sum(axis=1), np.ones(6), decimal=12)
    np.testing.assert_almost_equal(perc[1], [0.772, 0.228, 0, 0, 0, 0], decimal=12)

    #Check malformed matrices
    with pytest.raises(ValueError):
        tornado.perc_matrix([[1.0, 0.0], [0.0, 1.0]])
    with pytest.raises(ValueError):
        tornado.perc_matrix(np.zeros((6, 6)))

def test_wind_midpoints():
    """Test wind speed bin midpoints"""

    validate_array = np.array([33.755, 44.035, 55.21, 67.505, 81.81, 96.91])
    np.testing.assert_almost_equal(tornado.wind_midpoints(), validate_array, decimal=6)

def test_energy_weights():
    """Test cubed wind speed expectation per rating"""

    weights = tornado.energy_weights()
    assert len(weights) == 6
    np.testing.assert_almost_equal(weights[0], 38460.44784388, decimal=4)
    np.testing.assert_almost_equal(weights[1], 49159.80245286, decimal=4)
    np.testing.assert_almost_equal(weights[3], 86478.10237339, decimal=4)

    #Stronger ratings always dissipate more energy per unit area
    assert np.all(np.diff(weights) > 0)

def test_impute_rating():
    """Test resolution of unrated tornadoes"""

    mag = np.array([-9, -9, -9, 2, 0])
    length = np.array([3.0, 5.0, 12.0, 1.0, 40.0])
    np.testing.assert_array_equal(tornado.impute_rating(mag, length), [0, 0, 1, 2, 0])

    #Single values
    assert tornado.impute_rating(-9, 5.01) == 1

def test_check_ratings():
    """Test rejection of out of range ratings"""

    np.testing.assert_array_equal(tornado.check_ratings([0, 5, 3]), [0, 5, 3])
    with pytest.raises(DataIntegrityError):
        tornado.check_ratings([0, 6])
    with pytest.raises(DataIntegrityError):
        tornado.check_ratings([-9])

def test_correct_width():
    """Test the mean width correction"""

    np.testing.assert_almost_equal(tornado.correct_width(100, 2000), 78.5398, decimal=4)
    np.testing.assert_almost_equal(tornado.correct_width(100, 1995), 78.5398, decimal=4)
    np.testing.assert_almost_equal(tornado.correct_width(100, 1994), 100, decimal=4)

    #Arrays of widths and years
    np.testing.assert_almost_equal(tornado.correct_width([100, 100], [1990, 2011]), [100, 78.5398], decimal=4)

def test_fill_zeros():
    """Test replacement of zero path dimensions"""

    np.testing.assert_almost_equal(tornado.fill_zeros([0.0, 3.0, 2.0, 0.0]), [2.0, 3.0, 2.0, 2.0], decimal=6)
    with pytest.raises(DataIntegrityError):
        tornado.fill_zeros([0.0, 0.0])

def test_energy_dissipation():
    """Test energy dissipation of single tornadoes"""

    #1 mile by 50 yards
    length_m = 1 * 1609.344
    width_m = 50 * 0.9144
    np.testing.assert_almost_equal(length_m * width_m, 73579.20768, decimal=4)

    energy = tornado.energy_dissipation(1, length_m, width_m)
    assert isinstance(energy, float)
    np.testing.assert_approx_equal(energy, 3617139314.19, significant=9)

    #Arrays
    energy = tornado.energy_dissipation(np.arange(6), np.full(6, length_m), np.full(6, width_m))
    assert len(energy) == 6
    assert np.all(np.diff(energy) > 0)

    #Unresolved ratings are rejected
    with pytest.raises(DataIntegrityError):
        tornado.energy_dissipation(-9, length_m, width_m)

def test_convective_day():
    """Test assignment of events to convective days"""

    #Events before 06:00 belong to the previous day
    assert tornado.convective_day(dt.datetime(2011, 4, 28, 5, 59)) == dt.date(2011, 4, 27)
    assert tornado.convective_day(dt.datetime(2011, 4, 28, 6, 0)) == dt.date(2011, 4, 28)
    assert tornado.convective_day(dt.datetime(2011, 4, 28, 0, 0)) == dt.date(2011, 4, 27)
    assert tornado.convective_day(dt.datetime(2011, 4, 28, 23, 59)) == dt.date(2011, 4, 28)

    #Year boundary
    assert tornado.convective_day(dt.datetime(2000, 1, 1, 2, 0)) == dt.date(1999, 12, 31)

def test_convective_days():
    """Test vectorized assignment of events to convective days"""

    times = [dt.datetime(2011, 4, 28, 5, 59), dt.datetime(2011, 4, 28, 6, 0), dt.datetime(2000, 3, 1, 1, 0)]
    cdays = tornado.convective_days(times)
    for time, cday in zip(times, cdays):
        assert cday.date() == tornado.convective_day(time)
    assert cdays.iloc[2] == pd.Timestamp('2000-02-29')

def test_outbreak_energy():
    """Test total energy of a small outbreak built from events"""

    #Three tornadoes rated 1, 1 and 3, each 1 mile long and 50 yards wide, before the width cutoff
    events = [Event(time=dt.datetime(1990, 4, 2, 14 + i), lon=-97.0 + i, lat=35.0 + 0.5 * i,
                    length=1.0, width=50.0, mag=mag) for i, mag in enumerate([1, 1, 3])]
    dataset = tornado.TornadoDataset.from_events(events)

    assert len(dataset.Tors) == 3
    assert dataset.Tors['cday'].nunique() == 1
    np.testing.assert_approx_equal(dataset.Tors['energy'].sum(), 13597268882.68, significant=6)

def test_event_width_correction():
    """Test the mean width correction of tornadoes built from events"""

    events = [Event(time=dt.datetime(1990, 4, 2, 14), lon=-97.0, lat=35.0, length=1.0, width=50.0, mag=1),
              Event(time=dt.datetime(2000, 5, 3, 18), lon=-97.5, lat=35.5, length=2.0, width=100.0, mag=2)]
    Tors = tornado.TornadoDataset.from_events(events).Tors

    np.testing.assert_almost_equal(Tors['width_m'].values, [50 * 0.9144, 100 * 0.9144 * np.pi / 4], decimal=8)
    np.testing.assert_almost_equal(Tors['length_m'].values, [1609.344, 2 * 1609.344], decimal=8)
    np.testing.assert_approx_equal(Tors['area_m2'].iloc[1], 2 * 1609.344 * 100 * 0.9144 * np.pi / 4, significant=10)
