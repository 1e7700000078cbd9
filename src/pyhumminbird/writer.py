"""writer.py: Encoder of Humminbird waypoint, route, and track files.

Waypoints and routes go into one ``.hwr`` file, written by
``HumminbirdWriter``. Tracks go into a separate ``.ht`` file, written by
``HumminbirdTrackWriter``.

Routes and tracks are written in three phases: a head, one call per point,
and a tail. The record is only flushed at the tail, because the point count
and the bounding box are only known after all points have been seen.

"""

import time
from . import datatype as mod_datatype
from . import error as mod_error
from . import gpx as mod_gpx
from . import index as mod_index
from . import logger as mod_logger
from . import mkshort as mod_mkshort

#: characters that never make it into a name field
badchars = "\r\n\t"


def int16(value):
    """Return the value truncated to a signed 16-bit integer."""
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def get_projected(point):
    posn = mod_datatype.DegreePosition(lat=point.latitude, lon=point.longitude)
    return posn.as_projected()


class HumminbirdWriter:
    """Humminbird waypoint and route writer.

    Every waypoint is written once, even if it is also a member of one or
    more routes. The routes refer to the number of the written waypoint.

    :param file: binary stream
    :type file: io.BufferedIOBase
    :param synthesize_shortnames: derive the names from the descriptions
    :type synthesize_shortnames: bool
    :param creation_time: POSIX timestamp of the routes, defaults to now
    :type creation_time: int or None
    :param callback: optional callback function
    :type callback: function or None

    """

    def __init__(self, file, synthesize_shortnames=False, creation_time=None, callback=None):
        self.file = file
        self.synthesize_shortnames = synthesize_shortnames
        self.creation_time = int(time.time()) if creation_time is None else int(creation_time)
        self.callback = callback
        self.identity_index = mod_index.IdentityIndex()
        self.wpt_num = 0
        self.rte_num = 0
        self.rte = None
        self.wptname_sh = mod_mkshort.MakeShort(length=mod_datatype.Wpt._name_size - 1,
                                                badchars=badchars,
                                                mustupper=False,
                                                mustuniq=False,
                                                whitespace_ok=True,
                                                repeating_whitespace_ok=True,
                                                defname='WPT')
        self.rtename_sh = mod_mkshort.MakeShort(length=mod_datatype.Rte._name_size - 1,
                                                badchars=badchars,
                                                mustupper=False,
                                                mustuniq=False,
                                                whitespace_ok=True,
                                                repeating_whitespace_ok=True,
                                                defname='Route')

    def write_datatype(self, magic, datatype):
        signature = mod_datatype.Signature(magic)
        signature.pack()
        datatype.pack()
        mod_logger.log.debug(f"{signature} {type(datatype).__name__}: {str(datatype)}")
        self.file.write(signature.get_data() + datatype.get_data())

    def write_waypoint(self, waypoint):
        """Write the waypoint, unless a waypoint with the same identity was
        written before.

        """
        if waypoint not in self.identity_index:
            self.identity_index.assign(waypoint, self.wpt_num)
            self._write_waypoint(waypoint)

    def _write_waypoint(self, waypoint):
        wpt = mod_datatype.Wpt(num=self.wpt_num)
        self.wpt_num += 1
        if self.synthesize_shortnames:
            name = self.wptname_sh.mkshort_from_wpt(waypoint)
        else:
            name = self.wptname_sh.mkshort(waypoint.name)
        mod_logger.log.info(f"Writing waypoint {name}")
        wpt.set_name(name)
        wpt.set_icon(waypoint.symbol)
        wpt.set_depth(mod_gpx.get_depth(waypoint))
        wpt.set_datetime(waypoint.time)
        wpt.set_posn(get_projected(waypoint))
        self.write_datatype(mod_datatype.Signature.wpt_magic, wpt)

    def route_head(self, route):
        self.rte = None
        if route.points:
            self.rte = mod_datatype.Rte()

    def route_point(self, point):
        if self.rte is None:
            return
        num = self.identity_index.get(point)
        if num is None:
            mod_logger.log.warning("Missing waypoint reference in route, point dropped from route.")
            return
        if self.rte.count >= self.rte.max_points:
            raise mod_error.CapacityError(f"Sorry, routes are limited to {self.rte.max_points} points! "
                                          "Simplify the route to reduce the number of route points.")
        self.rte.add_point(num)

    def route_tail(self, route):
        if self.rte is not None and self.rte.count > 0:
            self.rte.num = self.rte_num
            self.rte_num += 1
            self.rte.time = self.creation_time
            name = self.rtename_sh.mkshort(route.name)
            mod_logger.log.info(f"Writing route {name}")
            self.rte.set_name(name)
            self.write_datatype(mod_datatype.Signature.rte_magic, self.rte)
        self.rte = None

    def write(self, gpx):
        """Write the waypoints and routes of a GPX document.

        All waypoints are written first, then the route points that are not
        waypoints yet, and finally the routes that refer to them.

        :param gpx: GPX document
        :type gpx: gpxpy.gpx.GPX
        :return: None

        """
        route_points = [point for route in gpx.routes for point in route.points]
        total = len(gpx.waypoints) + len(route_points) + len(gpx.routes)
        current = 0
        for waypoint in gpx.waypoints + route_points:
            self.write_waypoint(waypoint)
            current += 1
            self.update_progress(current, total)
        for route in gpx.routes:
            self.route_head(route)
            for point in route.points:
                self.route_point(point)
            self.route_tail(route)
            current += 1
            self.update_progress(current, total)

    def update_progress(self, current, total):
        if self.callback is not None:
            self.callback(self, current, total)


class HumminbirdTrackWriter:
    """Humminbird track writer.

    Each track is written as a record of fixed size. The first point is stored
    in the header, the following points as 16-bit differences to their
    predecessor, and the unused slots are filled with zeroes.

    :param file: binary stream
    :type file: io.BufferedIOBase
    :param callback: optional callback function
    :type callback: function or None

    """

    def __init__(self, file, callback=None):
        self.file = file
        self.callback = callback
        self.trk_hdr = None
        self.trk_points = []
        self.last_east = 0
        self.last_north = 0
        self.last_time = None
        self.trkname_sh = mod_mkshort.MakeShort(length=mod_datatype.TrkHdr._name_size - 1,
                                                badchars=badchars,
                                                mustupper=False,
                                                mustuniq=False,
                                                whitespace_ok=True,
                                                repeating_whitespace_ok=True,
                                                defname='Track')

    def track_head(self, track):
        self.trk_hdr = None
        self.trk_points = []
        self.last_time = None
        if any(segment.points for segment in track.segments):
            name = self.trkname_sh.mkshort(track.name)
            mod_logger.log.info(f"Writing track {name}")
            self.trk_hdr = mod_datatype.TrkHdr(trk_num=track.number or 0)
            self.trk_hdr.set_name(name)

    def track_point(self, point):
        if self.trk_hdr is None:
            return
        posn = get_projected(point)
        if point.time is not None:
            self.last_time = point.time
        if self.trk_hdr.num_points == 0:
            # It's the first point. That info goes in the header
            self.trk_hdr.start_east = posn.east
            self.trk_hdr.start_north = posn.north
            self.trk_hdr.set_bbox(posn.east, posn.north)
        else:
            if len(self.trk_points) >= self.trk_hdr.get_max_points():
                raise mod_error.CapacityError(f"Too many track points! ({self.trk_hdr.num_points + 1})")
            trk_point = mod_datatype.TrkPoint(deltaeast=int16(posn.east - self.last_east),
                                              deltanorth=int16(posn.north - self.last_north))
            trk_point.set_depth(mod_gpx.get_depth(point))
            self.trk_points.append(trk_point)
            self.trk_hdr.extend_bbox(posn.east, posn.north)
        self.last_east = posn.east
        self.last_north = posn.north
        self.trk_hdr.num_points += 1

    def track_tail(self, track):
        if self.trk_hdr is None:
            return
        self.trk_hdr.end_east = self.last_east
        self.trk_hdr.end_north = self.last_north
        self.trk_hdr.set_datetime(self.last_time)
        signature = mod_datatype.Signature(mod_datatype.Signature.trk_magic)
        signature.pack()
        self.trk_hdr.pack()
        mod_logger.log.debug(f"{signature} TrkHdr: {str(self.trk_hdr)}")
        data = bytearray(signature.get_data() + self.trk_hdr.get_data())
        for trk_point in self.trk_points:
            trk_point.pack()
            data += trk_point.get_data()
        unused = self.trk_hdr.get_max_points() - len(self.trk_points)
        data += bytes(unused * mod_datatype.TrkPoint.get_size())
        # Odd but true. The format doesn't fit an integer number of entries
        data += bytes(2)
        self.file.write(bytes(data))
        self.trk_hdr = None
        self.trk_points = []

    def write(self, gpx):
        """Write the tracks of a GPX document.

        :param gpx: GPX document
        :type gpx: gpxpy.gpx.GPX
        :return: None

        """
        total = len(gpx.tracks)
        for current, track in enumerate(gpx.tracks, start=1):
            self.track_head(track)
            for point in mod_gpx.track_points(track):
                self.track_point(point)
            self.track_tail(track)
            if self.callback is not None:
                self.callback(self, current, total)
