"""Tests for yearly summaries and trends"""

import numpy as np
import pandas as pd
import pytest
import torclimo.analysis as analysis

def test_annual_summary():
    """Test yearly summary of outbreak days"""

    days = pd.DataFrame({'nT': [40, 60, 35], 'ATE': [1.0e12, 3.0e12, 2.0e12]},
                        index=pd.DatetimeIndex(['2000-04-02', '2000-05-10', '2003-05-04'], name='date'))
    summary = analysis.annual_summary(days, 1999, 2004)

    assert summary.index.name == 'year'
    assert summary.index.tolist() == list(range(1999, 2005))
    assert summary['n_days'].tolist() == [0, 2, 0, 0, 1, 0]
    assert summary['nT'].tolist() == [0, 100, 0, 0, 35, 0]
    np.testing.assert_almost_equal(summary.loc[2000, 'ATE'], 4.0e12, decimal=0)
    np.testing.assert_almost_equal(summary.loc[2000, 'mean_nT'], 50.0, decimal=8)
    assert np.isnan(summary.loc[1999, 'mean_nT'])

    with pytest.raises(ValueError):
        analysis.annual_summary(days, 2004, 1999)

def test_linear_trend():
    """Test linear trends of yearly series"""

    years = np.arange(1980, 2011)
    trend = analysis.linear_trend(years, 2.0 * years + 1.0)
    np.testing.assert_almost_equal(trend['slope'], 2.0, decimal=8)
    np.testing.assert_almost_equal(trend['intercept'], 1.0, decimal=4)
    np.testing.assert_almost_equal(trend['rvalue'], 1.0, decimal=8)
    assert trend['n'] == 31

    #Missing years are ignored
    values = 2.0 * years + 1.0
    values[3] = np.nan
    assert analysis.linear_trend(years, values)['n'] == 30

    with pytest.raises(ValueError):
        analysis.linear_trend([2000, 2001], [1.0, 2.0])
    with pytest.raises(ValueError):
        analysis.linear_trend([2000, 2001, 2002], [1.0, 2.0])

def test_log_trend():
    """Test trends of the logarithm of yearly series"""

    years = np.arange(2000, 2010)
    values = 3.0 * np.exp(0.05 * (years - 2000))
    trend = analysis.linear_trend(years, values, log=True)
    np.testing.assert_almost_equal(trend['slope'], 0.05, decimal=8)

    #Years without activity cannot be log-transformed
    values[2] = 0.0
    with pytest.warns(UserWarning):
        trend = analysis.linear_trend(years, values, log=True)
    assert trend['n'] == 9
    np.testing.assert_almost_equal(trend['slope'], 0.05, decimal=8)

def test_trend_table():
    """Test trends of several summary columns"""

    days = pd.DataFrame({'nT': [40, 60, 35, 80], 'ATE': [1.0e12, 3.0e12, 2.0e12, 5.0e12]},
                        index=pd.DatetimeIndex(['2000-04-02', '2001-05-10', '2002-05-04', '2003-04-27'], name='date'))
    summary = analysis.annual_summary(days, 2000, 2003)
    table = analysis.trend_table(summary)

    assert table.index.tolist() == ['n_days', 'nT', 'ATE']
    assert 'slope' in table.columns
    np.testing.assert_almost_equal(table.loc['n_days', 'slope'], 0.0, decimal=8)
