r"""Utility functions that are used across modules."""

import zipfile
from io import BytesIO

import numpy as np
import shapefile
import shapely.geometry as sgeom
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union
from cartopy import crs as ccrs

from .. import constants

# ===========================================================================================================
# Public utilities
# ===========================================================================================================


def add_prop(input_prop, default_prop):
    r"""
    Overrides default property dictionary elements with those passed as input arguments.

    Parameters
    ----------
    input_prop : dict
        Dictionary to use for overriding default entries.
    default_prop : dict
        Dictionary containing default entries.

    Returns
    -------
    dict
        Copy of the default dictionary overriden by entries in input_prop.
    """

    prop = dict(default_prop)
    if input_prop is None:
        return prop
    for key in input_prop.keys():
        prop[key] = input_prop[key]
    return prop


def all_nan(arr):
    r"""
    Determine whether the entire array is filled with NaNs.

    Parameters
    ----------
    arr : list or numpy.ndarray
        List or array to be checked.

    Returns
    -------
    bool
        Returns whether the array is filled with all NaNs.
    """

    # Convert array to numpy array
    arr_copy = np.asarray(arr, dtype=float)

    # Check if there are non-NaN values in the array
    return len(arr_copy[~np.isnan(arr_copy)]) == 0


def is_number(value):
    r"""
    Determine whether the provided value is a number.

    Parameters
    ----------
    value
        A value to check the type of.

    Returns
    -------
    bool
        Returns True if the value is a number, otherwise False.
    """

    return isinstance(value, (int, np.integer, float, np.floating)) and not isinstance(value, bool)


def equal_area_projection():
    r"""
    Return the planar equal-area projection used for tornado footprints.

    Returns
    -------
    cartopy.crs.AlbersEqualArea
        Albers equal-area projection centered over the contiguous United States.
    """

    return ccrs.AlbersEqualArea(central_longitude=-96.0, central_latitude=23.0,
                                standard_parallels=(29.5, 45.5))


def project_points(lons, lats, projection):
    r"""
    Project longitude & latitude coordinates onto a planar projection.

    Parameters
    ----------
    lons : list or numpy.ndarray
        Longitudes in degrees.
    lats : list or numpy.ndarray
        Latitudes in degrees.
    projection : cartopy.crs.Projection
        Destination projection.

    Returns
    -------
    tuple
        Arrays of x and y coordinates in projection units (meters).
    """

    lons = np.atleast_1d(np.asarray(lons, dtype=float))
    lats = np.atleast_1d(np.asarray(lats, dtype=float))
    out = projection.transform_points(ccrs.PlateCarree(), lons, lats)
    return out[:, 0], out[:, 1]


def unproject_points(x, y, projection):
    r"""
    Inverse of ``project_points``, returning longitude & latitude arrays.
    """

    x = np.atleast_1d(np.asarray(x, dtype=float))
    y = np.atleast_1d(np.asarray(y, dtype=float))
    out = ccrs.PlateCarree().transform_points(projection, x, y)
    return out[:, 0], out[:, 1]


def region_polygon(region):
    r"""
    Retrieve a sampling region as a shapely geometry in longitude & latitude.

    Parameters
    ----------
    region : str or shapely.geometry
        Either a region name in ``constants.REGIONS`` ("conus" or "tornado_alley"), or a shapely geometry
        which is returned unchanged.

    Returns
    -------
    shapely.geometry.base.BaseGeometry
        Region geometry.
    """

    if isinstance(region, str):
        if region.lower() not in constants.REGIONS:
            raise ValueError(f"Region '{region}' is not available. Options are: {', '.join(constants.REGIONS.keys())}.")
        return sgeom.Polygon(constants.REGIONS[region.lower()])
    if isinstance(region, BaseGeometry):
        return region
    raise TypeError("region must be of type str or a shapely geometry.")


def read_region(path, field, values):
    r"""
    Build a sampling region from the union of shapefile records (e.g., a set of states).

    Parameters
    ----------
    path : str
        Path to a shapefile (".shp") or a zip archive containing one.
    field : str
        Attribute name to match records against (e.g., "STUSPS").
    values : list
        Attribute values of the records to include.

    Returns
    -------
    shapely.geometry.base.BaseGeometry
        Union of the matching record geometries, in the coordinates of the shapefile.
    """

    # Open shapefile, either directly or from a zip archive
    if str(path).endswith('.zip'):
        with zipfile.ZipFile(path) as archive:
            members = archive.namelist()
            stems = [i.rsplit('.', 1)[0] for i in members if i.endswith('.shp')]
            if len(stems) == 0:
                raise ValueError("No shapefile found in zip archive.")
            data = {}
            for key in ['shp', 'dbf', 'shx']:
                data[key] = BytesIO(archive.read(f'{stems[0]}.{key}'))
        orig_reader = shapefile.Reader(shp=data['shp'], dbf=data['dbf'], shx=data['shx'])
    else:
        orig_reader = shapefile.Reader(str(path))
    reader = BasicReader(orig_reader)

    # Union all requested records
    values = set(values)
    geometries = [record.geometry for record in reader.records()
                  if record.attributes.get(field) in values and record.geometry is not None]
    reader.close()
    if len(geometries) == 0:
        raise ValueError(f"No records found with '{field}' in the requested values.")
    return unary_union(geometries)


r"""
The two classes below are a modified version of Cartopy's shapereader functionality, reading an already-open
pyshp Reader instead of expecting a local shapefile path.
"""

class Record:
    """
    A single logical entry from a shapefile, combining the attributes with their associated geometry. Adapted from Cartopy's Record class.
    """

    def __init__(self, shape, attributes, fields):
        self._shape = shape
        self._geometry = None
        self.attributes = attributes
        self._fields = fields

    @property
    def geometry(self):
        """
        A shapely.geometry instance for this Record, or ``None`` for a null shape.
        """
        if not self._geometry and self._shape.shapeType != shapefile.NULL:
            self._geometry = sgeom.shape(self._shape)
        return self._geometry


class BasicReader:
    """
    Modified version of Cartopy's BasicReader class, wrapping an already-open pyshp Reader.
    """

    def __init__(self, reader):
        # Validate the shapefile
        self._reader = reader
        if reader.shp is None or reader.shx is None or reader.dbf is None:
            raise ValueError("Unable to open shapefile")

        self._fields = self._reader.fields

    def close(self):
        return self._reader.close()

    def __len__(self):
        return len(self._reader)

    def records(self):
        """
        Return a list of :class:`~Record` instances.
        """
        # Ignore the "DeletionFlag" field which always comes first
        to_return = []
        fields = self._reader.fields[1:]
        for shape_record in self._reader.iterShapeRecords():
            attributes = shape_record.record.as_dict()
            to_return.append(Record(shape_record.shape, attributes, fields))
        return to_return
