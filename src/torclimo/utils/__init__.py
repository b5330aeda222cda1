r"""Utility functions that are used across modules."""

from .generic_utils import *
