"""gpx.py: Helpers to hold Humminbird data in ``gpxpy`` objects.

Waypoints, routes and tracks are decoded into and encoded from the ``gpxpy``
object model. GPX has no depth element, so the depth is stored in the Garmin
extensions, like Garmin devices do:

- waypoints and route points: ``gpxx:WaypointExtension/gpxx:Depth``
- track points: ``gpxtpx:TrackPointExtension/gpxtpx:depth``

"""

import copy
import gpxpy
import gpxpy.gpx
import xml.etree.ElementTree as ET

gpxx = 'http://www.garmin.com/xmlschemas/GpxExtensions/v3'
gpxtpx = 'http://www.garmin.com/xmlschemas/TrackPointExtension/v2'
creator = "Pyhumminbird"


def new_gpx():
    """Return an empty GPX document with the Garmin extension namespaces."""
    gpx = gpxpy.gpx.GPX()
    gpx.creator = creator
    gpx.nsmap = {'gpxx': gpxx,
                 'gpxtpx': gpxtpx}
    return gpx


def _find_extension(point, name):
    return next((extension for extension in point.extensions if extension.tag.endswith(name)), None)


def get_depth(point):
    """Return the depth in meters of a point, or None.

    :param point: waypoint, route point, or track point
    :type point: gpxpy.gpx.GPXWaypoint or gpxpy.gpx.GPXRoutePoint or gpxpy.gpx.GPXTrackPoint
    :return: depth
    :rtype: float or None

    """
    for name in ('WaypointExtension', 'TrackPointExtension'):
        extension = _find_extension(point, name)
        if extension is not None:
            depth = next((child for child in extension if child.tag.endswith(('Depth', 'depth'))), None)
            if depth is not None and depth.text:
                return float(depth.text)
    return None


def set_depth(point, depth):
    """Store the depth in meters in the extensions of a point.

    A depth of None removes nothing and adds nothing.

    """
    if depth is None:
        return
    if isinstance(point, gpxpy.gpx.GPXTrackPoint):
        uri, name, tag = gpxtpx, 'TrackPointExtension', 'depth'
    else:
        uri, name, tag = gpxx, 'WaypointExtension', 'Depth'
    extension = _find_extension(point, name)
    if extension is None:
        extension = ET.Element(f'{{{uri}}}{name}')
        point.extensions.append(extension)
    element = next((child for child in extension if child.tag.endswith(tag)), None)
    if element is None:
        element = ET.SubElement(extension, f'{{{uri}}}{tag}')
    element.text = str(depth)


def route_point_from_waypoint(waypoint):
    """Return a route point that is an independent copy of a waypoint."""
    point = gpxpy.gpx.GPXRoutePoint(latitude=waypoint.latitude,
                                    longitude=waypoint.longitude,
                                    elevation=waypoint.elevation,
                                    time=waypoint.time,
                                    name=waypoint.name,
                                    description=waypoint.description,
                                    symbol=waypoint.symbol,
                                    comment=waypoint.comment)
    point.extensions = copy.deepcopy(waypoint.extensions)
    return point


def track_points(track):
    """Yield the points of all segments of a track in order."""
    for segment in track.segments:
        yield from segment.points
