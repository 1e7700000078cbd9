"""Module for reading and writing Humminbird fishfinder files.

   Humminbird fishfinders and chartplotters store their data in files of fixed
   size records:

   ========= ==============================
    ``.hwr``  waypoints and routes
    ``.ht``   a single track
   ========= ==============================

   All records start with a 32-bit signature that identifies the record type.
   Multi-byte values are big-endian. Positions are stored as projected east and
   north integers on the International 1924 ellipsoid.

   The data is converted to and from the ``gpxpy`` object model. Depths are
   kept in the Garmin GPX extensions.

   This file is part of the pyhumminbird distribution.

   This program is free software: you can redistribute it and/or modify it under
   the terms of the GNU General Public License as published by the Free Software
   Foundation, version 3.

   This program is distributed in the hope that it will be useful, but WITHOUT
   ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS
   FOR A PARTICULAR PURPOSE. See the GNU General Public License for more
   details.

   You should have received a copy of the GNU General Public License along with
   this program. If not, see <http://www.gnu.org/licenses/>.

"""

from . import logger as mod_logger
from . import reader as mod_reader
from . import writer as mod_writer


def read(path, callback=None):
    """Read a Humminbird waypoint, route, or track file.

    :param path: path of the file
    :type path: str or os.PathLike
    :param callback: optional callback function
    :type callback: function or None
    :return: the waypoints, routes, and tracks of the file
    :rtype: gpxpy.gpx.GPX
    :raises FormatError: if the file is corrupt or of an unknown kind

    """
    mod_logger.log.info(f"Reading {path}")
    with open(path, 'rb') as file:
        return mod_reader.HumminbirdReader(file, callback=callback).read()


def write(path, gpx, synthesize_shortnames=False, creation_time=None, callback=None):
    """Write the waypoints and routes of a GPX document to a ``.hwr`` file.

    :param path: path of the file
    :type path: str or os.PathLike
    :param gpx: GPX document
    :type gpx: gpxpy.gpx.GPX
    :param synthesize_shortnames: derive the names from the descriptions
    :type synthesize_shortnames: bool
    :param creation_time: POSIX timestamp of the routes, defaults to now
    :type creation_time: int or None
    :param callback: optional callback function
    :type callback: function or None
    :return: None
    :raises CapacityError: if a route has more than 50 points

    """
    mod_logger.log.info(f"Writing waypoints and routes to {path}")
    with open(path, 'wb') as file:
        writer = mod_writer.HumminbirdWriter(file,
                                             synthesize_shortnames=synthesize_shortnames,
                                             creation_time=creation_time,
                                             callback=callback)
        writer.write(gpx)


def write_tracks(path, gpx, callback=None):
    """Write the tracks of a GPX document to a ``.ht`` file.

    :raises CapacityError: if a track has too many points

    """
    mod_logger.log.info(f"Writing tracks to {path}")
    with open(path, 'wb') as file:
        mod_writer.HumminbirdTrackWriter(file, callback=callback).write(gpx)
