r"""Immutable value types passed between torclimo components."""

import datetime
from dataclasses import dataclass, field
from typing import Optional, Tuple

from . import constants


@dataclass(frozen=True)
class Event:
    r"""
    A single tornado from the catalog.

    Times are local civil times as recorded in the catalog. Path length is in statute miles and
    width in yards; ``mag`` is the (E)F rating, or -9 when unrated.
    """

    time: datetime.datetime
    lon: float
    lat: float
    length: float
    width: float
    mag: int
    injuries: int = 0
    fatalities: int = 0
    state: str = ''

    @property
    def rated(self):
        return self.mag != constants.UNRATED


@dataclass(frozen=True)
class ConvectiveDay:
    r"""All events belonging to one 06:00-to-06:00 local convective day, ordered by time."""

    date: datetime.date
    events: Tuple[Event, ...]

    def __len__(self):
        return len(self.events)


@dataclass(frozen=True)
class Footprint:
    r"""
    Sampling footprint of a day's events.

    ``hull`` is in the planar equal-area projection, ``hull_geo`` is the same hull in lon/lat. A single
    event yields a Point hull and two events a LineString hull, both with zero area.
    """

    hull: object
    hull_geo: object
    area_km2: float
    centroid_lon: float
    centroid_lat: float


@dataclass(frozen=True)
class OutbreakDay:
    r"""Day-level statistics of a convective day that meets an outbreak threshold."""

    date: datetime.date
    nT: int
    ATE: float
    GME: float
    MDE: float
    q75: float
    q95: float
    injuries: int = 0
    fatalities: int = 0
    n_states: int = 0
    footprint: Optional[Footprint] = None


@dataclass(frozen=True)
class FootprintSample:
    r"""Statistic of one gridded field over one day's footprint."""

    date: datetime.date
    field: str
    aggregation: str
    value: float

    @property
    def column(self):
        return f'{self.field}_{self.aggregation}'


@dataclass(frozen=True)
class BaselineDay:
    r"""Randomly drawn non-outbreak day, sampled over a fixed region instead of a hull."""

    date: datetime.date
    region: str = 'conus'


@dataclass(frozen=True)
class DaySample:
    r"""
    Outcome of environmental sampling for one day.

    ``status`` is one of "ok", "missing" (grid data unavailable or no cells in the footprint) or
    "out_of_range" (date outside the grid source's coverage, never fetched).
    """

    date: datetime.date
    kind: str
    status: str
    samples: Tuple[FootprintSample, ...] = field(default_factory=tuple)
    message: str = ''

    @property
    def ok(self):
        return self.status == constants.STATUS_OK

    def value(self, field_name, aggregation):
        r"""Return the sampled value for a field and aggregation, or NaN if it was not sampled."""
        for sample in self.samples:
            if sample.field == field_name and sample.aggregation == aggregation:
                return sample.value
        return float('nan')

    def to_dict(self):
        output = {'date': self.date, 'kind': self.kind, 'status': self.status}
        for sample in self.samples:
            output[sample.column] = sample.value
        return output
