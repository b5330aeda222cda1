r"""A collection of relevant constants used throughout torclimo scripts."""

import datetime

#Fraction of path area of each damage rating (rows, EF0-EF5) assigned to each wind speed bin (columns)
PERC_MATRIX = (
    (1.000, 0.000, 0.000, 0.000, 0.000, 0.000),
    (0.772, 0.228, 0.000, 0.000, 0.000, 0.000),
    (0.616, 0.268, 0.115, 0.000, 0.000, 0.000),
    (0.529, 0.271, 0.133, 0.067, 0.000, 0.000),
    (0.543, 0.238, 0.131, 0.056, 0.032, 0.000),
    (0.538, 0.223, 0.119, 0.070, 0.033, 0.017),
)

#Lower wind speed threshold of each bin, in m/s (65, 86, 111, 136, 166, 200 mph)
WIND_THRESHOLDS = (29.06, 38.45, 49.62, 60.80, 74.21, 89.41)

#Offset added to the last threshold to form the midpoint of the open-ended top bin, in m/s
TOP_BIN_OFFSET = 7.5

#Accepted damage ratings, and the catalog sentinel for unrated tornadoes
RATINGS = frozenset([0, 1, 2, 3, 4, 5])
UNRATED = -9

#Unrated tornadoes with path length at or below this (statute miles) are imputed EF0, otherwise EF1
SHORT_PATH_MILES = 5.0

#Starting this year widths are reported as mean width; scaled by pi/4 to match earlier maximum widths
WIDTH_CUTOFF_YEAR = 1995

#Unit conversions
MILES_TO_METERS = 1609.344
YARDS_TO_METERS = 0.9144

#Hour (local) at which a convective day begins
CONVECTIVE_DAY_HOUR = 6

#Default day count thresholds for medium and big outbreak days
MED_THRESH = 10
BIG_THRESH = 30

#North American Regional Reanalysis archive coverage
NARR_START = datetime.date(1979, 1, 1)
NARR_END = datetime.date(2014, 10, 1)
NARR_URL = 'https://www.ncei.noaa.gov/data/north-american-regional-reanalysis/access/3-hourly/{date:%Y%m}/{date:%Y%m%d}/narr-a_221_{date:%Y%m%d}_{hour:02d}00_000.grb'
ANALYSIS_HOUR = 18

#Canonical field names, mapped to their variable names in decoded NARR files
NARR_FIELDS = {
    'cape': 'cape',
    'cin': 'cin',
    'helicity': 'hlcy',
    'ustm': 'ustm',
    'vstm': 'vstm',
}

#Fields sampled by default (shear is derived from ustm & vstm)
SAMPLE_FIELDS = ('cape', 'helicity', 'cin', 'shear')
AGGREGATIONS = ('mean', 'max', 'min')

#Per-day sampling status
STATUS_OK = 'ok'
STATUS_MISSING = 'missing'
STATUS_OUT_OF_RANGE = 'out_of_range'
ALL_STATUSES = (STATUS_OK, STATUS_MISSING, STATUS_OUT_OF_RANGE)

#Kinds of sampled days
OUTBREAK_KIND = 'outbreak'
BASELINE_KIND = 'baseline'

#Fixed sampling regions for baseline days, as (lon, lat) vertices
REGIONS = {
    'conus': [(-125.0, 24.0), (-66.5, 24.0), (-66.5, 49.5), (-125.0, 49.5)],
    'tornado_alley': [(-104.0, 29.0), (-100.0, 27.5), (-97.5, 26.0), (-94.0, 29.5), (-89.0, 30.2), (-85.0, 30.5),
                      (-82.0, 36.6), (-84.8, 39.1), (-87.5, 41.7), (-90.1, 43.5), (-96.5, 45.9), (-104.0, 45.0)],
}
