"""
===========================
Tornado Outbreak Energetics
===========================
This sample script illustrates how to use torclimo to find tornado outbreak days, rank them by energy, and sample their severe weather environment.
"""

import datetime as dt
from torclimo import tornado, outbreak, environment, analysis

###########################################
# Reading In The Tornado Dataset
# ------------------------------
#
# By default, this reads in the 1950-present tornado database from the Storm Prediction Center (SPC) website, unless you specify a local file path using ``tornado_path``.
#
# Each tornado is tagged with its energy dissipation, estimated from its damage rating and path area. Unrated tornadoes are imputed a rating based on their path length.

tornadoes = tornado.TornadoDataset(year_range=(1994, 2013))
print(tornadoes)

###########################################
# Grouping Tornadoes Into Outbreak Days
# -------------------------------------
# Tornadoes are grouped into 06:00-to-06:00 local convective days. Days with at least 10 tornadoes are medium outbreak days, and days with at least 30 tornadoes are big outbreak days.

outbreaks = outbreak.OutbreakDataset(tornadoes, med_thresh=10, big_thresh=30)
print(outbreaks)

###########################################
# Let's rank the 10 big outbreak days with the highest accumulated tornado energy:

print(outbreaks.rank_days('ATE', n=10, kind='big')[['date', 'nT', 'ATE', 'GME']])

###########################################
# Sampling The Environment
# ------------------------
# Outbreak days are sampled over the convex hull of their tornadoes, and baseline days (non-outbreak days with the same seasonal cycle) over a fixed region. Grid files are downloaded from the North American Regional Reanalysis (NARR) archive and cached locally; GRIB files require the cfgrib engine.

source = environment.NarrSource('narr_cache', decoder=lambda path: environment.open_grid_file(path, engine='cfgrib'))
sampler = environment.EnvironmentalSampler(source)

outbreak_days = outbreaks.get_outbreak_days('big')
baseline_days = outbreaks.sample_baseline_days(len(outbreak_days), start=dt.date(1994, 1, 1),
                                               end=dt.date(2013, 12, 31), seed=0)

day_samples = sampler.sample_outbreak_days(outbreak_days) + sampler.sample_baseline_days(baseline_days)
table = environment.build_day_table(day_samples, outbreak_days)
environment.write_day_table(table, 'outbreak_days.csv')
print(environment.status_summary(table))

###########################################
# Correlation Screen
# ------------------
# Finally, let's correlate a rotated combination of the (log) number of tornadoes and (log) median energy per day with the maximum CAPE within each outbreak footprint.

ok = table.loc[(table['kind'] == 'outbreak') & (table['status'] == 'ok')]
profile = analysis.correlation_screen(analysis.standardize(ok['nT'], log=True),
                                      analysis.standardize(ok['MDE'], log=True),
                                      ok['cape_max'])
print(analysis.screen_summary(profile))
