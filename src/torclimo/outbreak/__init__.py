r"""Functionality for grouping tornadoes into convective days, outbreak days and baseline days."""

from .dataset import OutbreakDataset
from .tools import geometric_mean, day_statistics, aggregate_days, rank_days, build_footprint
from .baseline import month_weights, sample_baseline_days
