r"""Exceptions raised across torclimo modules.

Errors local to a single day (``SourceUnavailableError``, ``SamplingEmptyError``) are caught by
the environmental sampler and recorded as missing data for that day. ``DataIntegrityError`` signals a
corrupted input assumption and is never caught internally.
"""


class DataIntegrityError(ValueError):
    r"""Out-of-range damage rating, or non-positive energy feeding a geometric mean."""


class GeometryError(ValueError):
    r"""Footprint from which no sampling can proceed (no points, empty or invalid geometry)."""


class SourceUnavailableError(RuntimeError):
    r"""Gridded data for a requested date is missing, unreachable or cannot be decoded."""


class SamplingEmptyError(RuntimeError):
    r"""No grid cell centers fall within a sampling footprint."""
