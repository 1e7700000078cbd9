from datetime import datetime, timezone
import io
import gpxpy.gpx
import pytest
from pyhumminbird import datatype as mod_datatype
from pyhumminbird import error as mod_error
from pyhumminbird import gpx as mod_gpx
from pyhumminbird import projection
from pyhumminbird.reader import HumminbirdReader, filter_freak_values

Signature = mod_datatype.Signature


def pack_record(magic, datatype):
    signature = Signature(magic)
    signature.pack()
    datatype.pack()
    return signature.get_data() + datatype.get_data()


def pack_points(points):
    data = b''
    for point in points:
        point.pack()
        data += point.get_data()
    return data


def waypoint_record(num, name, status=1, lat=45.0, lon=-93.0, depth=0, time=0, icon=255):
    east, north = projection.to_projected(lat, lon)
    wpt = mod_datatype.Wpt(num=num, status=status, icon=icon, depth=depth, time=time,
                           east=east, north=north)
    wpt.set_name(name)
    return pack_record(Signature.wpt_magic, wpt)


def route_record(name, points, count=None):
    rte = mod_datatype.Rte(count=len(points) if count is None else count, points=points)
    rte.set_name(name)
    return pack_record(Signature.rte_magic, rte)


def read(data):
    return HumminbirdReader(io.BytesIO(data)).read()


def test_empty_stream():
    gpx = read(b'')
    assert gpx.waypoints == []
    assert gpx.routes == []
    assert gpx.tracks == []


def test_read_waypoint():
    data = waypoint_record(0, 'Dock', lat=45.5, lon=-93.25, depth=1234, time=1600000000, icon=3)
    gpx = read(data)
    assert len(gpx.waypoints) == 1
    waypoint = gpx.waypoints[0]
    assert waypoint.name == 'Dock'
    assert waypoint.latitude == pytest.approx(45.5, abs=1e-5)
    assert waypoint.longitude == pytest.approx(-93.25, abs=1e-5)
    assert waypoint.elevation == 0.0
    assert waypoint.symbol == 'Fish'
    assert waypoint.time == datetime.fromtimestamp(1600000000, tz=timezone.utc)
    assert mod_gpx.get_depth(waypoint) == pytest.approx(12.34)


def test_read_waypoint_without_depth_or_time():
    gpx = read(waypoint_record(0, 'Buoy'))
    waypoint = gpx.waypoints[0]
    assert mod_gpx.get_depth(waypoint) is None
    assert waypoint.time is None
    assert waypoint.symbol is None


def test_second_waypoint_magic():
    wpt = mod_datatype.Wpt(num=1)
    wpt.set_name('New')
    gpx = read(pack_record(Signature.wpt_2013_magic, wpt))
    assert [waypoint.name for waypoint in gpx.waypoints] == ['New']


def test_non_point_waypoints_are_skipped():
    data = (waypoint_record(0, 'Group', status=16)
            + waypoint_record(1, 'Body', status=17)
            + waypoint_record(2, 'Unused', status=0)
            + waypoint_record(3, 'Temporary', status=2)
            + waypoint_record(4, 'Invalid', status=63))
    gpx = read(data)
    assert [waypoint.name for waypoint in gpx.waypoints] == ['Temporary']


def test_read_route():
    data = (waypoint_record(5, 'A', lat=10.0, lon=20.0)
            + waypoint_record(6, 'B', lat=10.1, lon=20.1)
            + route_record('Trip', [6, 5]))
    gpx = read(data)
    assert len(gpx.routes) == 1
    route = gpx.routes[0]
    assert route.name == 'Trip'
    assert [point.name for point in route.points] == ['B', 'A']
    assert all(isinstance(point, gpxpy.gpx.GPXRoutePoint) for point in route.points)


def test_route_points_are_copies():
    data = waypoint_record(5, 'A', depth=250) + route_record('Trip', [5, 5])
    gpx = read(data)
    first, second = gpx.routes[0].points
    assert first is not second
    first.name = 'Changed'
    assert gpx.waypoints[0].name == 'A'
    assert second.name == 'A'
    assert mod_gpx.get_depth(second) == pytest.approx(2.5)


def test_unresolved_route_points_are_skipped():
    data = waypoint_record(5, 'A') + route_record('Partial', [9, 5, 7])
    gpx = read(data)
    assert [point.name for point in gpx.routes[0].points] == ['A']


def test_route_without_resolved_points_is_omitted():
    data = (waypoint_record(5, 'A')
            + route_record('Dangling', [9, 8])
            + route_record('Empty', [], count=0)
            + route_record('Negative', [5], count=-1))
    gpx = read(data)
    assert gpx.routes == []


def test_route_refers_to_earlier_waypoints_only():
    data = route_record('Early', [5]) + waypoint_record(5, 'A')
    gpx = read(data)
    assert gpx.routes == []
    assert len(gpx.waypoints) == 1


def test_unknown_magic():
    with pytest.raises(mod_error.FormatError, match='Invalid record header "0xDEADBEEF"'):
        read(b'\xde\xad\xbe\xef' + bytes(32))


def test_unknown_magic_after_records():
    with pytest.raises(mod_error.FormatError):
        read(waypoint_record(0, 'A') + b'\x00\x00\x00\x00')


def test_truncated_waypoint():
    with pytest.raises(mod_error.FormatError, match='Unexpected end of file'):
        read(waypoint_record(0, 'A')[:20])


def test_truncated_signature():
    with pytest.raises(mod_error.FormatError):
        read(waypoint_record(0, 'A') + b'\x02\x02')


def track_record(points, start=(1000, 2000), time=0, num_points=None, name='Lake'):
    trk_hdr = mod_datatype.TrkHdr(trk_num=3,
                                  num_points=len(points) + 1 if num_points is None else num_points,
                                  time=time,
                                  start_east=start[0],
                                  start_north=start[1])
    trk_hdr.set_name(name)
    return pack_record(Signature.trk_magic, trk_hdr) + pack_points(points)


def test_read_track():
    points = [mod_datatype.TrkPoint(10, -20, 150),
              mod_datatype.TrkPoint(-5, 5, 0)]
    gpx = read(track_record(points, time=1600000000))
    track = gpx.tracks[0]
    assert track.name == 'Lake'
    assert track.number == 3
    trk_points = list(mod_gpx.track_points(track))
    assert len(trk_points) == 3
    expected = [(1000, 2000), (1010, 1980), (1005, 1985)]
    for point, (east, north) in zip(trk_points, expected):
        lat, lon = projection.to_degrees(east, north)
        assert point.latitude == pytest.approx(lat)
        assert point.longitude == pytest.approx(lon)
    # The header has no depth or time
    assert mod_gpx.get_depth(trk_points[0]) is None
    assert trk_points[0].time is None
    assert mod_gpx.get_depth(trk_points[1]) == pytest.approx(1.5)
    assert trk_points[1].time is None
    assert mod_gpx.get_depth(trk_points[2]) is None
    assert trk_points[2].time == datetime.fromtimestamp(1600000000, tz=timezone.utc)


def test_track_without_time():
    gpx = read(track_record([mod_datatype.TrkPoint(1, 1, 0)], time=0))
    assert all(point.time is None for point in mod_gpx.track_points(gpx.tracks[0]))


def test_track_with_header_point_only():
    gpx = read(track_record([], num_points=1))
    assert gpx.tracks[0].get_points_no() == 1


def test_track_ends_reading():
    data = (waypoint_record(0, 'Before')
            + track_record([mod_datatype.TrkPoint(1, 1, 0)])
            + waypoint_record(1, 'After')
            + b'\xde\xad\xbe\xef' * 8)
    gpx = read(data)
    assert [waypoint.name for waypoint in gpx.waypoints] == ['Before']
    assert len(gpx.tracks) == 1


def test_filter_freak_values():
    points = [mod_datatype.TrkPoint(32767, 3, 0),
              mod_datatype.TrkPoint(-32768, 32767, 0),
              mod_datatype.TrkPoint(4, -32768, 0),
              mod_datatype.TrkPoint(32767, 5, 0)]
    filter_freak_values(points)
    assert [(point.deltaeast, point.deltanorth) for point in points] == [(-1, 3), (0, -1), (4, 0), (32767, 5)]


def test_freak_values_are_filtered_on_read():
    points = [mod_datatype.TrkPoint(32767, 0, 0),
              mod_datatype.TrkPoint(-32768, 0, 0)]
    gpx = read(track_record(points, start=(1000, 2000)))
    trk_points = list(mod_gpx.track_points(gpx.tracks[0]))
    lat, lon = projection.to_degrees(999, 2000)
    assert trk_points[1].longitude == pytest.approx(lon)
    assert trk_points[2].longitude == pytest.approx(lon)


def test_track_capacity_quirk():
    max_points = mod_datatype.TrkHdr.get_max_points()
    data = track_record([], num_points=max_points + 1) + bytes((max_points - 1) * 6)
    gpx = read(data)
    assert gpx.tracks[0].get_points_no() == max_points


def test_track_capacity_exceeded():
    max_points = mod_datatype.TrkHdr.get_max_points()
    data = track_record([], num_points=max_points + 2) + bytes(max_points * 6)
    with pytest.raises(mod_error.CapacityError):
        read(data)


def test_truncated_track_points():
    with pytest.raises(mod_error.FormatError):
        read(track_record([], num_points=5) + bytes(6))


def legacy_track_file(points, name, start=(1000, 2000), time=0):
    trk_hdr = mod_datatype.TrkHdrOld(trk_num=1,
                                     num_points=len(points) + 1,
                                     time=time,
                                     start_east=start[0],
                                     start_north=start[1])
    data = pack_record(Signature.trk_old_magic, trk_hdr) + pack_points(points)
    data += bytes(mod_datatype.TrkHdrOld.name_offset - len(data))
    data += mod_datatype.TrkHdrOld.to_cstring(name, 20)
    return data


def test_read_legacy_track():
    points = [mod_datatype.TrkPointOld(32767, 0),
              mod_datatype.TrkPointOld(-32768, 10)]
    data = legacy_track_file(points, 'Old track', time=1500000000)
    assert len(data) == 8048
    gpx = read(data)
    track = gpx.tracks[0]
    assert track.name == 'Old track'
    trk_points = list(mod_gpx.track_points(track))
    assert len(trk_points) == 3
    # No freak value filter for the legacy format
    lat, lon = projection.to_degrees(1000 + 32767, 2000)
    assert trk_points[1].longitude == pytest.approx(lon)
    lat, lon = projection.to_degrees(999, 2010)
    assert trk_points[2].latitude == pytest.approx(lat)
    assert trk_points[2].longitude == pytest.approx(lon)
    assert all(mod_gpx.get_depth(point) is None for point in trk_points)
    assert trk_points[2].time == datetime.fromtimestamp(1500000000, tz=timezone.utc)


def test_legacy_track_name_is_at_the_end_of_the_file():
    data = bytearray(legacy_track_file([mod_datatype.TrkPointOld(1, 1)], 'First'))
    data[8028:8048] = mod_datatype.TrkHdrOld.to_cstring('Second', 20)
    gpx = read(bytes(data))
    assert gpx.tracks[0].name == 'Second'


def test_legacy_track_capacity_exceeded():
    trk_hdr = mod_datatype.TrkHdrOld(num_points=2000)
    data = pack_record(Signature.trk_old_magic, trk_hdr) + bytes(8016)
    with pytest.raises(mod_error.CapacityError):
        read(data)


def test_progress_callback():
    data = waypoint_record(0, 'A') + waypoint_record(1, 'B')
    calls = []
    HumminbirdReader(io.BytesIO(data), callback=lambda object, current, total: calls.append((current, total))).read()
    assert calls[-1] == (len(data), len(data))
    assert calls[0] == (36, len(data))
