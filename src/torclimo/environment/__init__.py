r"""Functionality for sampling the severe weather environment of outbreak and baseline days."""

from .source import GridSource, LocalGridSource, NarrSource, create_session, open_grid_file
from .sampler import EnvironmentalSampler, prepare_fields, grid_coordinates, check_footprint, sample_footprint
from .table import build_day_table, write_day_table, read_day_table, status_summary
