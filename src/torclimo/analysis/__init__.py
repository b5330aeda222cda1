r"""Functionality for correlation screens and trend analyses of outbreak days."""

from .correlation import standardize, pearson, correlation_screen, strongest_angles, significant_angles, screen_summary
from .trends import annual_summary, linear_trend, trend_table
