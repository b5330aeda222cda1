r"""Functionality for reading tornado data and estimating tornado energy dissipation."""

from .dataset import TornadoDataset
from .tools import (perc_matrix, wind_midpoints, energy_weights, impute_rating, check_ratings, correct_width,
                    fill_zeros, energy_dissipation, convective_day, convective_days)
