"""reader.py: Decoder of Humminbird waypoint, route, and track files."""

import os
import gpxpy.gpx
from . import datatype as mod_datatype
from . import error as mod_error
from . import gpx as mod_gpx
from . import index as mod_index
from . import logger as mod_logger


def filter_freak_values(points):
    """Filter the freak values of differential track points.

    Every once in a while the delta values are 32767 followed by -32768. This
    is an encoding defect of the device, not a jump, so the pair is replaced by
    -1 followed by 0. East and north are filtered independently.

    :param points: track points, modified in place
    :type points: list[TrkPoint]
    :return: None

    """
    for point, next_point in zip(points, points[1:]):
        if point.deltaeast == 32767 and next_point.deltaeast == -32768:
            point.deltaeast = -1
            next_point.deltaeast = 0
        if point.deltanorth == 32767 and next_point.deltanorth == -32768:
            point.deltanorth = -1
            next_point.deltanorth = 0


class HumminbirdReader:
    """Humminbird file reader.

    A Humminbird file is a sequence of records, each starting with a 32-bit
    signature. Waypoint records come before the route records that refer to
    them. A track record is always the last record; whatever follows it is
    padding.

    >>> with open('waypoints.hwr', 'rb') as file:
    ...     gpx = HumminbirdReader(file).read()

    :param file: binary stream positioned at the first record
    :type file: io.BufferedIOBase
    :param callback: optional callback function
    :type callback: function or None

    """

    def __init__(self, file, callback=None):
        self.file = file
        self.callback = callback
        self.gpx = mod_gpx.new_gpx()
        self.waypoint_index = mod_index.WaypointIndex()
        self.total = self.get_size()

    def get_size(self):
        """Return the size of the stream in bytes."""
        position = self.file.tell()
        size = self.file.seek(0, os.SEEK_END)
        self.file.seek(position)
        return size

    def read_data(self, size, description):
        data = self.file.read(size)
        if len(data) < size:
            raise mod_error.FormatError(f"Unexpected end of file reading {description}")
        return data

    def read_datatype(self, datatype_class, description):
        datatype = datatype_class()
        datatype.unpack(self.read_data(datatype_class.get_size(), description))
        mod_logger.log.debug(f"{type(datatype).__name__}: {str(datatype)}")
        return datatype

    def read_points(self, point_class, count):
        """Read ``count`` consecutive track points."""
        if count <= 0:
            return []
        size = point_class.get_size()
        data = self.read_data(size * count, "track points")
        points = []
        for offset in range(0, len(data), size):
            point = point_class()
            point.unpack(data[offset:offset + size])
            points.append(point)
        return points

    def read(self):
        """Decode all records.

        :return: the waypoints, routes, and tracks of the file
        :rtype: gpxpy.gpx.GPX
        :raises FormatError: if the stream is truncated or a signature is unknown

        """
        size = mod_datatype.Signature.get_size()
        while True:
            data = self.file.read(size)
            if not data:
                break
            if len(data) < size:
                raise mod_error.FormatError("Unexpected end of file reading record header")
            signature = mod_datatype.Signature()
            signature.unpack(data)
            record = signature.get_record()
            if record == 'wpt':
                self.read_waypoint()
            elif record == 'rte':
                self.read_route()
            elif record == 'trk':
                self.read_track()
                # Don't continue. The rest of the file is all zeroes
                break
            elif record == 'trk_old':
                self.read_track_old()
                break
            else:
                raise mod_error.FormatError(f'Invalid record header "{signature}" (no or unknown humminbird file)')
            self.update_progress()
        self.update_progress()
        return self.gpx

    def update_progress(self):
        if self.callback is not None:
            self.callback(self, self.file.tell(), self.total)

    def read_waypoint(self):
        wpt = self.read_datatype(mod_datatype.Wpt, "waypoint")
        if not wpt.is_point():
            mod_logger.log.debug(f"Skipping {wpt.get_status()} waypoint {wpt.num}")
            return
        posn = wpt.get_posn().as_degrees()
        name = wpt.get_name()
        mod_logger.log.info(f"Adding waypoint {name}")
        waypoint = gpxpy.gpx.GPXWaypoint(latitude=posn.lat,
                                         longitude=posn.lon,
                                         elevation=0.0,  # It's from a fishfinder
                                         time=wpt.get_datetime(),
                                         name=name,
                                         symbol=wpt.get_icon())
        mod_gpx.set_depth(waypoint, wpt.get_depth())
        self.gpx.waypoints.append(waypoint)
        self.waypoint_index.register(wpt.num, waypoint)

    def read_route(self):
        rte = self.read_datatype(mod_datatype.Rte, "route")
        route = None
        for num in rte.get_points():
            waypoint = self.waypoint_index.get(num)
            if waypoint is None:
                mod_logger.log.debug(f"Skipping unknown waypoint {num}")
                continue
            if route is None:
                route = gpxpy.gpx.GPXRoute(name=rte.get_name())
                mod_logger.log.info(f"Adding route {route.name}")
                self.gpx.routes.append(route)
            route.points.append(mod_gpx.route_point_from_waypoint(waypoint))

    def read_track(self):
        trk_hdr = self.read_datatype(mod_datatype.TrkHdr, "track header")
        max_points = trk_hdr.get_max_points()
        num_points = trk_hdr.num_points
        if num_points == max_points + 1:
            num_points -= 1
        if num_points > max_points:
            raise mod_error.CapacityError(f"Too many track points! ({num_points})")
        # num_points includes the start position in the header
        points = self.read_points(mod_datatype.TrkPoint, num_points - 1)
        filter_freak_values(points)
        self.add_track(trk_hdr, trk_hdr.get_name(), points)

    def read_track_old(self):
        trk_hdr = self.read_datatype(mod_datatype.TrkHdrOld, "track header")
        max_points = trk_hdr.get_max_points()
        if trk_hdr.num_points > max_points:
            raise mod_error.CapacityError(f"Too many track points! ({trk_hdr.num_points})")
        points = self.read_points(mod_datatype.TrkPointOld, trk_hdr.num_points - 1)
        # The name is not in the header, but in the last 20 bytes of the file
        self.file.seek(trk_hdr.name_offset, os.SEEK_SET)
        name = trk_hdr.from_cstring(self.file.read(trk_hdr.file_size - trk_hdr.name_offset))
        self.add_track(trk_hdr, name, points)

    def add_track(self, trk_hdr, name, points):
        """Accumulate the differential points onto the start position.

        The last point gets the time of the header, unless it is zero. That
        happens if the device had no fix when the track was saved.

        """
        mod_logger.log.info(f"Adding track {name}")
        track = gpxpy.gpx.GPXTrack(name=name, number=trk_hdr.trk_num)
        segment = gpxpy.gpx.GPXTrackSegment()
        track.segments.append(segment)
        start = trk_hdr.get_start_posn()
        accum_east = start.east
        accum_north = start.north
        # No depth info in the header
        segment.points.append(self.new_track_point(accum_east, accum_north))
        for idx, point in enumerate(points):
            accum_east += point.deltaeast
            accum_north += point.deltanorth
            trk_point = self.new_track_point(accum_east, accum_north)
            mod_gpx.set_depth(trk_point, point.get_depth())
            if idx == len(points) - 1 and trk_hdr.time != 0:
                trk_point.time = trk_hdr.get_datetime()
            segment.points.append(trk_point)
        self.gpx.tracks.append(track)

    def new_track_point(self, east, north):
        posn = mod_datatype.ProjectedPosition(east, north).as_degrees()
        return gpxpy.gpx.GPXTrackPoint(latitude=posn.lat,
                                       longitude=posn.lon,
                                       elevation=0.0)
