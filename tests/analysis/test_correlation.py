"""Tests for the angular correlation screen"""

import numpy as np
import pytest
from scipy import stats
import torclimo.analysis as analysis

def sample_series(n=200, seed=3):

    #Two independent variables and a reference driven by both
    rng = np.random.default_rng(seed)
    x = rng.normal(size=n)
    y = rng.normal(size=n)
    ref = 0.8 * x + 0.6 * y + rng.normal(scale=0.5, size=n)
    return x, y, ref

def test_standardize():
    """Test standardization of series"""

    values = analysis.standardize([1.0, 2.0, 3.0, 4.0])
    np.testing.assert_almost_equal(np.mean(values), 0.0, decimal=12)
    np.testing.assert_almost_equal(np.std(values, ddof=1), 1.0, decimal=12)

    #Logarithm first
    values = analysis.standardize([1.0, np.e, np.e**2], log=True)
    np.testing.assert_almost_equal(values, [-1.0, 0.0, 1.0], decimal=12)
    with pytest.raises(ValueError):
        analysis.standardize([1.0, 0.0, 2.0], log=True)

    #Constant series
    assert np.all(np.isnan(analysis.standardize([5.0, 5.0, 5.0])))

def test_pearson():
    """Test correlation with Fisher z-transform statistics"""

    x, y, ref = sample_series()
    r, p_value, ci_low, ci_high = analysis.pearson(x, ref)

    np.testing.assert_almost_equal(r, np.corrcoef(x, ref)[0, 1], decimal=10)
    z = np.arctanh(r) * np.sqrt(len(x) - 3)
    np.testing.assert_almost_equal(p_value, 2 * stats.norm.sf(abs(z)), decimal=10)
    assert ci_low < r < ci_high

    #Too few values or zero variance
    assert np.all(np.isnan(analysis.pearson([1.0, 2.0, 3.0], [3.0, 1.0, 2.0])))
    assert np.all(np.isnan(analysis.pearson(np.ones(10), np.arange(10.0))))

def test_screen_axes():
    """Test the screen along each variable's axis"""

    x, y, ref = sample_series()
    profile = analysis.correlation_screen(x, y, ref, start=0, stop=180)

    #Inclusive angle range
    assert profile.index.tolist() == list(range(0, 181))
    assert profile.columns.tolist() == ['r', 'p_value', 'ci_low', 'ci_high']

    np.testing.assert_almost_equal(profile.loc[0, 'r'], np.corrcoef(x, ref)[0, 1], decimal=10)
    np.testing.assert_almost_equal(profile.loc[90, 'r'], np.corrcoef(y, ref)[0, 1], decimal=10)
    np.testing.assert_almost_equal(profile.loc[180, 'r'], -profile.loc[0, 'r'], decimal=10)

    #Default range
    profile = analysis.correlation_screen(x, y, ref)
    assert profile.index[0] == 1
    assert profile.index[-1] == 180
    assert len(profile) == 180

    #Directional variant with a coarse step
    profile = analysis.correlation_screen(x, y, ref, start=-90, stop=270, step=5)
    assert len(profile) == 73

def test_screen_peak():
    """Test the angle of strongest correlation"""

    x, y, ref = sample_series()
    profile = analysis.correlation_screen(x, y, ref)

    #Reference built with weights (0.8, 0.6), about 37 degrees
    strongest = analysis.strongest_angles(profile)
    assert len(strongest) == 1
    assert 25 <= strongest[0] <= 50

    summary = analysis.screen_summary(profile)
    assert summary['strongest_angles'] == strongest
    np.testing.assert_almost_equal(summary['max_abs_r'], abs(profile.loc[strongest[0], 'r']), decimal=12)
    assert summary['n_significant'] == len(analysis.significant_angles(profile))
    assert strongest[0] in summary['significant_angles']

def test_screen_ties():
    """Test tied strongest angles"""

    x, y, ref = sample_series()
    profile = analysis.correlation_screen(x, y, x, start=0, stop=180)
    assert analysis.strongest_angles(profile) == [0, 180]

def test_screen_zero_variance():
    """Test angles where the combination cancels out"""

    x, y, ref = sample_series()
    profile = analysis.correlation_screen(x, x, ref)

    #cos(135) x + sin(135) x is zero everywhere
    assert np.isnan(profile.loc[135, 'r'])
    assert np.isnan(profile.loc[135, 'p_value'])
    assert not np.isnan(profile.loc[45, 'r'])

    #Every angle without variance
    profile = analysis.correlation_screen(np.ones(20), np.ones(20), ref[:20])
    assert profile['r'].isna().all()
    assert analysis.strongest_angles(profile) == []
    assert np.isnan(analysis.screen_summary(profile)['max_abs_r'])

def test_screen_complete_cases():
    """Test removal of incomplete rows"""

    x, y, ref = sample_series()
    x_missing = x.copy()
    ref_missing = ref.copy()
    x_missing[5] = np.nan
    ref_missing[10] = np.inf

    profile = analysis.correlation_screen(x_missing, y, ref_missing, start=0, stop=0)
    mask = np.ones(len(x), dtype=bool)
    mask[[5, 10]] = False
    np.testing.assert_almost_equal(profile.loc[0, 'r'], np.corrcoef(x[mask], ref[mask])[0, 1], decimal=10)

def test_screen_errors():
    """Test invalid screen arguments"""

    x, y, ref = sample_series()
    with pytest.raises(ValueError):
        analysis.correlation_screen(x, y[:-1], ref)
    with pytest.raises(ValueError):
        analysis.correlation_screen(x, y, ref, step=0)
    with pytest.raises(ValueError):
        analysis.correlation_screen(x, y, ref, start=90, stop=10)
    with pytest.raises(ValueError):
        analysis.correlation_screen(x, y, ref, conf_level=1.5)

    #Angles and confidence level must be numbers
    with pytest.raises(TypeError):
        analysis.correlation_screen(x, y, ref, start='1')
    with pytest.raises(TypeError):
        analysis.correlation_screen(x, y, ref, step=None)
    with pytest.raises(TypeError):
        analysis.correlation_screen(x, y, ref, conf_level=True)
