"""index.py: Cross-reference tables of a single read or write session.

Routes refer to waypoints by number. While reading, the ``WaypointIndex`` maps
the device number of each waypoint to the waypoint it was decoded into. While
writing, the ``IdentityIndex`` maps the identity of each written waypoint to
the number it was assigned, so that a waypoint shared by the waypoint list and
one or more routes is written only once.

"""

from . import logger as mod_logger


def wpt_to_id(waypoint):
    """Return the identity key of a waypoint.

    Two waypoint objects with the same name and the same coordinates (to nine
    decimals) denote the same physical point.

    :param waypoint: waypoint or route point
    :type waypoint: gpxpy.gpx.GPXWaypoint or gpxpy.gpx.GPXRoutePoint
    :return: identity key
    :rtype: str

    """
    name = waypoint.name or ''
    return f"{name}\x01{waypoint.latitude:.9f}\x01{waypoint.longitude:.9f}"


class WaypointIndex:
    """Map of device waypoint numbers to decoded waypoints."""

    def __init__(self):
        self.waypoints = {}

    def __len__(self):
        return len(self.waypoints)

    def __contains__(self, num):
        return num in self.waypoints

    def register(self, num, waypoint):
        mod_logger.log.debug(f"Register waypoint {num}")
        self.waypoints[num] = waypoint

    def get(self, num):
        """Return the waypoint registered under the number, or None."""
        return self.waypoints.get(num)


class IdentityIndex:
    """Map of waypoint identity keys to assigned output numbers."""

    def __init__(self):
        self.numbers = {}

    def __len__(self):
        return len(self.numbers)

    def __contains__(self, waypoint):
        return wpt_to_id(waypoint) in self.numbers

    def assign(self, waypoint, num):
        key = wpt_to_id(waypoint)
        mod_logger.log.debug(f"Assign number {num} to {key!r}")
        self.numbers[key] = num

    def get(self, waypoint):
        """Return the number assigned to the waypoint, or None."""
        return self.numbers.get(wpt_to_id(waypoint))
