"""projection.py: Conversions between Humminbird coordinates and degrees.

Humminbird devices store a position as a projected "east" and "north" integer
pair. The east value is a linear scale of the longitude. The north value is a
Mercator northing on the International 1924 ellipsoid, taken from the
geocentric rather than the geodetic latitude.

The following formulas show how to convert between degrees and the projected
values:

longitude = east / EAST_SCALE * 180
latitude = geocentric_to_geodetic(gudermannian(north))

"""

import math
import sys

#: equatorial axis of the International 1924 ellipsoid in meters
i1924_equ_axis = 6378388.0
#: cosine of the angular eccentricity of the ellipsoid
cos_ae = 0.9966349016452
cos2_ae = cos_ae * cos_ae
#: i1924_equ_axis * pi
EAST_SCALE = 20038297.0
#: range of the 32-bit projected values
INT32_MIN = -0x80000000
INT32_MAX = 0x7FFFFFFF


def geodetic_to_geocentric(gd_lat):
    """Return the geocentric latitude of a geodetic latitude.

    :param gd_lat: geodetic latitude in degrees
    :type gd_lat: float
    :return: geocentric latitude in degrees
    :rtype: float

    """
    gdr = gd_lat * math.pi / 180.0
    return math.atan(cos2_ae * math.tan(gdr)) * 180.0 / math.pi


def geocentric_to_geodetic(gc_lat):
    """Return the geodetic latitude of a geocentric latitude.

    :param gc_lat: geocentric latitude in degrees
    :type gc_lat: float
    :return: geodetic latitude in degrees
    :rtype: float

    """
    gcr = gc_lat * math.pi / 180.0
    return math.atan(math.tan(gcr) / cos2_ae) * 180.0 / math.pi


def gudermannian(north):
    """Return the latitude in degrees of a projected north value."""
    norm_x = north / i1924_equ_axis
    return math.atan(math.sinh(norm_x)) * 180.0 / math.pi


def inverse_gudermannian(lat):
    """Return the projected north value of a latitude in degrees."""
    x_r = lat / 180.0 * math.pi
    # The tangent is zero at the south pole
    tangent = max(math.tan(math.pi / 4.0 + x_r / 2.0), sys.float_info.min)
    guder = math.log(tangent)
    return guder * i1924_equ_axis


def round_half_up(value):
    """Round to the nearest integer, with halves rounded towards +infinity.

    The devices and the desktop software round this way, while the builtin
    ``round`` rounds halves to even.

    """
    return math.floor(value + 0.5)


def to_degrees(east, north):
    """Return the (latitude, longitude) in degrees of a projected position."""
    latitude = geocentric_to_geodetic(gudermannian(north))
    longitude = east / EAST_SCALE * 180.0
    return latitude, longitude


def to_projected(latitude, longitude):
    """Return the rounded (east, north) projected values of a position."""
    east = round_half_up(longitude / 180.0 * EAST_SCALE)
    north = round_half_up(inverse_gudermannian(geodetic_to_geocentric(latitude)))
    # The south pole projects to minus infinity
    north = min(max(north, INT32_MIN), INT32_MAX)
    return east, north
