#!/usr/bin/env python3
"""Pyhumminbird

   This is a console user application for reading and writing the waypoint,
   route, and track files of Humminbird fishfinders.

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

import argparse
from datetime import datetime
import gpxpy
import gpxpy.gpx
import json
import logging
import sys
from tabulate import tabulate
from tqdm import tqdm
from . import __version__
from . import error as mod_error
from . import gpx as mod_gpx
from . import humminbird as mod_humminbird
from . import logger as mod_logger

logging_levels = {
    0: logging.NOTSET,
    1: logging.WARNING,
    2: logging.INFO,
    3: logging.DEBUG,
}

mod_logger.log.addHandler(logging.StreamHandler())


def point_to_dict(point):
    """Return a dictionary with the properties of a waypoint, route point, or
    track point.

    """
    return {'name': point.name,
            'latitude': point.latitude,
            'longitude': point.longitude,
            'depth': mod_gpx.get_depth(point),
            'time': point.time,
            'symbol': point.symbol,
            }


class DateTimeEncoder(json.JSONEncoder):
    """Custom encoder to serialize datetimes in ISO 8601 format."""

    def default(self, o):
        if isinstance(o, datetime):
            return o.isoformat()
        else:
            return super().default(o)


class ProgressBar(tqdm):

    def update_to(self, object, current, total):
        self.total = total
        self.update(current - self.n)


class Pyhumminbird:

    def __init__(self, path):
        self.path = path

    def read(self, args):
        if args.progress:
            with ProgressBar(unit='B', unit_scale=True) as progress_bar:
                return mod_humminbird.read(self.path, callback=progress_bar.update_to)
        else:
            return mod_humminbird.read(self.path)

    def info(self, args):
        gpx = self.read(args)
        info = "File information\n"
        info += "================\n"
        info += f"Waypoints: {len(gpx.waypoints)}\n"
        info += f"Routes: {len(gpx.routes)}\n"
        info += f"Tracks: {len(gpx.tracks)}\n"
        args.filename.write(info)
        records = [{'type': 'route', 'name': route.name, 'points': len(route.points)} for route in gpx.routes]
        records += [{'type': 'track', 'name': track.name, 'points': track.get_points_no()} for track in gpx.tracks]
        if records:
            args.filename.write("\n")
            args.filename.write(f"{tabulate(records, headers='keys', tablefmt='plain')}\n")

    def get_waypoints(self, args):
        gpx = self.read(args)
        if args.format == 'txt':
            waypoints = [point_to_dict(waypoint) for waypoint in gpx.waypoints]
            args.filename.write(f"{tabulate(waypoints, headers='keys', tablefmt='plain')}\n")
        elif args.format == 'json':
            waypoints = [point_to_dict(waypoint) for waypoint in gpx.waypoints]
            json.dump(waypoints, args.filename, cls=DateTimeEncoder)
        elif args.format == 'gpx':
            output = mod_gpx.new_gpx()
            output.waypoints = gpx.waypoints
            args.filename.write(f"{output.to_xml()}\n")
        else:
            sys.exit(f"Output format {args.format} is not supported")

    def get_routes(self, args):
        gpx = self.read(args)
        if args.format == 'txt':
            for route in gpx.routes:
                points = [point_to_dict(point) for point in route.points]
                args.filename.write(f"{route.name}\n")
                args.filename.write(f"{tabulate(points, headers='keys', tablefmt='plain')}\n\n")
        elif args.format == 'json':
            routes = [{'name': route.name,
                       'points': [point_to_dict(point) for point in route.points]}
                      for route in gpx.routes]
            json.dump(routes, args.filename, cls=DateTimeEncoder)
        elif args.format == 'gpx':
            output = mod_gpx.new_gpx()
            output.routes = gpx.routes
            args.filename.write(f"{output.to_xml()}\n")
        else:
            sys.exit(f"Output format {args.format} is not supported")

    def get_tracks(self, args):
        gpx = self.read(args)
        if args.format == 'txt':
            for track in gpx.tracks:
                points = [point_to_dict(point) for point in mod_gpx.track_points(track)]
                args.filename.write(f"{track.name}\n")
                args.filename.write(f"{tabulate(points, headers='keys', tablefmt='plain')}\n\n")
        elif args.format == 'json':
            tracks = [{'name': track.name,
                       'number': track.number,
                       'points': [point_to_dict(point) for point in mod_gpx.track_points(track)]}
                      for track in gpx.tracks]
            json.dump(tracks, args.filename, cls=DateTimeEncoder)
        elif args.format == 'gpx':
            output = mod_gpx.new_gpx()
            output.tracks = gpx.tracks
            args.filename.write(f"{output.to_xml()}\n")
        else:
            sys.exit(f"Output format {args.format} is not supported")

    def put_waypoints(self, args):
        gpx = gpxpy.parse(args.filename)
        kwargs = {'synthesize_shortnames': args.synthesize_shortnames,
                  'creation_time': args.route_time}
        if args.progress:
            with ProgressBar() as progress_bar:
                mod_humminbird.write(self.path, gpx, callback=progress_bar.update_to, **kwargs)
        else:
            mod_humminbird.write(self.path, gpx, **kwargs)

    def put_tracks(self, args):
        gpx = gpxpy.parse(args.filename)
        if args.progress:
            with ProgressBar() as progress_bar:
                mod_humminbird.write_tracks(self.path, gpx, callback=progress_bar.update_to)
        else:
            mod_humminbird.write_tracks(self.path, gpx)


parser = argparse.ArgumentParser(
    formatter_class=argparse.RawDescriptionHelpFormatter,
    description="""Command line application to read and write Humminbird files.

Pyhumminbird decodes the waypoints and routes of a Humminbird ``.hwr`` file and
the track of a ``.ht`` file, and prints them as a table, JSON, or GPS Exchange
Format (GPX). It encodes the waypoints and routes, or the tracks, of a GPX file
into a Humminbird file.

The Humminbird file is specified with the -f FILE option.
""")
parser.add_argument('-v',
                    '--verbosity',
                    action='count',
                    default=0,
                    help="Increase output verbosity")
parser.add_argument('-D',
                    '--debug',
                    action='store_const',
                    const=3,
                    default=0,
                    help="Enable debugging")
parser.add_argument('--version',
                    action='store_true',
                    help="Dump version and exit")
parser.add_argument('--progress',
                    action=argparse.BooleanOptionalAction,
                    default=True,
                    help="Show progress bar")
parser.add_argument('-f',
                    '--file',
                    help="Set the Humminbird file")
subparsers = parser.add_subparsers(help="Command help")
info = subparsers.add_parser('info', help="Return a summary of the file")
info.set_defaults(command='info')
info.add_argument('filename',
                  nargs='?',
                  type=argparse.FileType(mode='w'),
                  default=sys.stdout,
                  help="Set output file")
get_waypoints = subparsers.add_parser('get-waypoints', help="Read waypoints")
get_waypoints.set_defaults(command='get_waypoints')
get_waypoints.add_argument('-t',
                           '--format',
                           choices=['txt', 'json', 'gpx'],
                           default='txt',
                           help="Set output format. ``txt`` returns a table. ``json`` returns a JSON string of the waypoints. ``gpx`` returns a string in GPS Exchange Format (GPX).")
get_waypoints.add_argument('filename',
                           nargs='?',
                           type=argparse.FileType(mode='w'),
                           default=sys.stdout,
                           help="Set output file")
get_routes = subparsers.add_parser('get-routes', help="Read routes")
get_routes.set_defaults(command='get_routes')
get_routes.add_argument('-t',
                        '--format',
                        choices=['txt', 'json', 'gpx'],
                        default='txt',
                        help="Set output format. ``txt`` returns a table per route. ``json`` returns a JSON string of the routes. ``gpx`` returns a string in GPS Exchange Format (GPX).")
get_routes.add_argument('filename',
                        nargs='?',
                        type=argparse.FileType(mode='w'),
                        default=sys.stdout,
                        help="Set output file")
get_tracks = subparsers.add_parser('get-tracks', help="Read tracks")
get_tracks.set_defaults(command='get_tracks')
get_tracks.add_argument('-t',
                        '--format',
                        choices=['txt', 'json', 'gpx'],
                        default='txt',
                        help="Set output format. ``txt`` returns a table per track. ``json`` returns a JSON string of the tracks. ``gpx`` returns a string in GPS Exchange Format (GPX).")
get_tracks.add_argument('filename',
                        nargs='?',
                        type=argparse.FileType(mode='w'),
                        default=sys.stdout,
                        help="Set output file")
put_waypoints = subparsers.add_parser('put-waypoints', help="Write waypoints and routes")
put_waypoints.set_defaults(command='put_waypoints')
put_waypoints.add_argument('--synthesize-shortnames',
                           action='store_true',
                           help="Derive the names from the descriptions")
put_waypoints.add_argument('--route-time',
                           type=int,
                           default=None,
                           help="Set the time of the routes in seconds since the epoch (default: now)")
put_waypoints.add_argument('filename',
                           nargs='?',
                           type=argparse.FileType(mode='r'),
                           default=sys.stdin,
                           help="Set input GPX file")
put_tracks = subparsers.add_parser('put-tracks', help="Write tracks")
put_tracks.set_defaults(command='put_tracks')
put_tracks.add_argument('filename',
                        nargs='?',
                        type=argparse.FileType(mode='r'),
                        default=sys.stdin,
                        help="Set input GPX file")


def main():
    args = parser.parse_args()
    logging_level = logging_levels.get(max(args.verbosity, args.debug))
    mod_logger.log.setLevel(logging_level)
    mod_logger.log.info(f"Version {__version__}")
    if hasattr(args, 'command'):
        if args.file is None:
            parser.error("the following arguments are required: -f/--file")
        app = Pyhumminbird(args.file)
        command = getattr(app, args.command)
        try:
            command(args)
        except (mod_error.HumminbirdError, gpxpy.gpx.GPXException, OSError) as e:
            sys.exit(f"{e}")
    elif args.version:
        print(f"pyhumminbird version {__version__}")
    else:
        parser.print_usage()


if __name__ == '__main__':
    main()
