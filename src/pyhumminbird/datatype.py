from datetime import datetime, timezone
import rawutil
from . import projection as mod_projection


class DataType():
    """Base datatype.

    Datatypes must derive from the DataType base class. It uses the ``rawutil``
    module to pack and unpack binary data. Each subclass must define a _fields
    attribute. _fields must be a list of 2-tuples, containing a field name and a
    field type. The field type must be a ``rawutil`` `format character
    <https://github.com/Tyulis/rawutil#elements>`_.

    All multi-byte values of the Humminbird formats are big-endian.

    """
    byteorder = 'big'
    #: binary data
    data = bytes()
    #: character encoding of the fixed-width name fields
    encoding = 'utf-8'

    @classmethod
    def get_keys(cls):
        """Return the list of keys of the structure fields.

        :return: list of _field keys
        :rtype: list[str]

        """
        keys = list(zip(*cls._fields))[0]
        return keys

    @classmethod
    def get_format(cls):
        """Return the format string of the structure fields.

        :return: ``rawutil`` format string
        :rtype: str

        """
        fmt_chars = list(zip(*cls._fields))[1]
        fmt = ' '.join(fmt_chars)
        return fmt

    @classmethod
    def get_struct(cls):
        """Return a ``rawutil.Struct`` object with the structure fields.

        The struct is built once per class, since track blocks unpack
        thousands of points with the same layout.

        :return: struct object
        :rtype: ``rawutil.Struct``

        """
        struct = cls.__dict__.get('_struct')
        if struct is None:
            struct = rawutil.Struct(cls.get_format(),
                                    names=cls.get_keys())
            struct.setbyteorder(cls.byteorder)
            cls._struct = struct
        return struct

    @classmethod
    def get_size(cls):
        """Return the size in bytes of the packed structure.

        :return: size of the structure
        :rtype: int

        """
        size = cls.__dict__.get('_size')
        if size is None:
            datatype = cls()
            datatype.pack()
            size = len(datatype.get_data())
            cls._size = size
        return size

    def get_dict(self):
        """Return a dictionary with the datatype properties.

        :return: dictionary with datatype properties
        :rtype: dict
        """
        keys = self.get_keys()
        return {key: self.__dict__.get(key) for key in keys}

    def get_values(self):
        """Return the list of values of the datatype properties.

        :return: list of values
        :rtype: list

        """
        return list(self.get_dict().values())

    def get_data(self):
        """Return the packed data.

        :return: packed data
        :rtype: bytes

        """

        return self.data

    def unpack(self, data):
        """Unpack binary data according to the structure.

        :param data: binary data
        :type data: bytes
        :return: None

        """
        struct = self.get_struct()
        values = struct.unpack(data)
        self.data = data
        self.__dict__.update(values._asdict())

    def pack(self):
        """Pack the datatype properties in the format defined by the structure."""
        struct = self.get_struct()
        values = self.get_values()
        self.data = struct.pack(*values)

    @classmethod
    def from_cstring(cls, data):
        """Return the string of a fixed-width, null-padded name field."""
        return data.split(b'\x00', 1)[0].decode(cls.encoding, errors='replace')

    @classmethod
    def to_cstring(cls, string, size):
        """Return a fixed-width name field.

        The name is truncated at a character boundary so that at least one
        terminating null byte remains.

        """
        data = string.encode(cls.encoding)[:size - 1]
        data = data.decode(cls.encoding, errors='ignore').encode(cls.encoding)
        return data.ljust(size, b'\x00')

    def __str__(self):
        return str(self.get_dict())

    def __repr__(self):
        keys = self.get_keys()
        values = map(str, self.get_values())
        kwargs = ', '.join(map('='.join, zip(keys, values)))
        return f"{self.__class__.__name__}({kwargs})"


class Signature(DataType):
    """Every record starts with a 32-bit signature.

    The signature is probably a struct of a format byte (1 = track, 2 =
    waypoint, 3 = route), a version byte, and the 16-bit record length. The new
    track signature lacks the length, because it wouldn't fit (it would be
    0x200008). They are only used as a plain magic number.

    """
    _fields = [('magic', 'I'),
               ]
    trk_magic = 0x01030000
    trk_old_magic = 0x01021F70
    wpt_magic = 0x02020024
    wpt_2013_magic = 0x02030024  # no visible difference with wpt_magic
    rte_magic = 0x03030088
    _record = {trk_magic: 'trk',
               trk_old_magic: 'trk_old',
               wpt_magic: 'wpt',
               wpt_2013_magic: 'wpt',
               rte_magic: 'rte',
               }

    def __init__(self, magic=0):
        self.magic = magic

    def __str__(self):
        return f'0x{self.magic:08X}'

    def get_record(self):
        """Return the record type of the magic number, or None if unknown."""
        return self._record.get(self.magic)


class Time(DataType):
    _fields = [('time', 'I'),  # POSIX timestamp in UTC, invalid if 0
               ]

    def __init__(self, time=0):
        self.time = time

    def __str__(self):
        datetime = self.get_datetime()
        return str(datetime)

    def get_datetime(self):
        """Return a datetime object of the time.

        The ``time`` member indicates the number of seconds since 12:00 am
        January 1, 1970 UTC. A value of 0 means that no time is available,
        which happens when the device had no fix while saving the record.

        """
        if self.is_valid():
            return datetime.fromtimestamp(self.time, tz=timezone.utc)

    def set_datetime(self, datetime):
        if datetime is None:
            self.time = 0
        else:
            if datetime.tzinfo is None:
                datetime = datetime.replace(tzinfo=timezone.utc)
            self.time = max(0, int(datetime.timestamp())) & 0xFFFFFFFF

    def is_valid(self):
        return self.time != 0


class ProjectedPosition(DataType):
    """The Projected Position type is used to indicate latitude and longitude
    as projected east and north values on the International 1924 ellipsoid.

    """
    _fields = [('east', 'i'),   # linear longitude
               ('north', 'i'),  # Mercator northing of the geocentric latitude
               ]

    def __init__(self, east=0, north=0):
        self.east = east
        self.north = north

    def __str__(self):
        return f'{self.east}, {self.north}'

    def as_degrees(self):
        lat, lon = mod_projection.to_degrees(self.east, self.north)
        return DegreePosition(lat=lat, lon=lon)


class DegreePosition(DataType):
    """The Degree Position type is used to indicate geodetic latitude and
    longitude in degrees. North latitudes and East longitudes are indicated with
    positive numbers; South latitudes and West longitudes are indicated with
    negative numbers.

    """
    _fields = [('lat', 'd'),  # latitude in degrees
               ('lon', 'd'),  # longitude in degrees
               ]

    def __init__(self, lat=0, lon=0):
        self.lat = lat
        self.lon = lon

    def __str__(self):
        return f'{self.lat:.5f}, {self.lon:.5f}'

    def as_projected(self):
        east, north = mod_projection.to_projected(self.lat, self.lon)
        return ProjectedPosition(east=east, north=north)


class Icon(DataType):
    _fields = [('icon', 'B'),  # icon index, 255 if the waypoint has no icon
               ]
    _icon = [
        'Normal',                # 0
        'House',                 # 1
        'Red cross',             # 2
        'Fish',                  # 3
        'Duck',                  # 4
        'Anchor',                # 5
        'Buoy',                  # 6
        'Airport',               # 7
        'Camping',               # 8
        'Danger',                # 9
        'Fuel',                  # 10
        'Rock',                  # 11
        'Weed',                  # 12
        'Wreck',                 # 13
        'Phone',                 # 14
        'Coffee',                # 15
        'Beer',                  # 16
        'Mooring',               # 17
        'Pier',                  # 18
        'Slip',                  # 19
        'Ramp',                  # 20
        'Circle',                # 21
        'Diamond',               # 22
        'Flag',                  # 23
        'Pattern',               # 24
        'Shower',                # 25
        'Water tap',             # 26
        'Tree',                  # 27
        'Camera',                # 28
        'Skull and crossbones',  # 29
    ]
    no_icon = 255

    def __init__(self, icon=255):
        self.icon = icon

    def __str__(self):
        return f'{self.get_icon()}'

    def get_icon(self):
        """Return the icon name, or None if the index is out of the table."""
        if self.icon < len(self._icon):
            return self._icon[self.icon]

    def set_icon(self, descr):
        """Set the icon from an icon description.

        A description that matches no icon is substituted by the first icon
        ("Normal"). A missing description is stored as 255.

        """
        if descr is None:
            self.icon = self.no_icon
        else:
            icon = self.find_icon(descr)
            self.icon = 0 if icon is None else icon

    @classmethod
    def find_icon(cls, descr):
        """Return the index of the icon matching the description.

        An exact case-insensitive match is preferred. Otherwise the first icon
        whose name is part of the description (i.e. "Diamond" in "Diamond,
        Green"), or the other way around, is returned.

        :param descr: icon description
        :type descr: str
        :return: icon index or None
        :rtype: int or None

        """
        descr = descr.casefold()
        names = [name.casefold() for name in cls._icon]
        icon = next((idx for idx, name in enumerate(names) if name == descr), None)
        if icon is None:
            icon = next((idx for idx, name in enumerate(names) if name in descr or descr in name), None)
        return icon


class Record(DataType):
    """Base class of the records with a name and a time field."""
    _name_size = 20

    def get_name(self):
        return self.from_cstring(self.name)

    def set_name(self, name):
        self.name = self.to_cstring(name, self._name_size)

    def get_datetime(self):
        return Time(self.time).get_datetime()

    def set_datetime(self, datetime):
        time = Time()
        time.set_datetime(datetime)
        self.time = time.time


class Wpt(Record):
    """The waypoint record is 32 bytes long, excluding the signature."""
    _name_size = 12
    _fields = [('num', 'H'),                 # ascending number, used by routes
               ('zero', 'H'),                # always zero
               ('status', 'B'),              # see _status
               ('icon', 'B'),                # icon index
               ('depth', 'H'),               # depth in centimeters, 0 if unknown
               ('time', 'I'),                # POSIX timestamp in UTC
               ('east', 'i'),                # projected east
               ('north', 'i'),               # projected north
               ('name', f'{_name_size}s'),   # null-padded name
               ]
    # In newer versions, this is an enum (though it looks like a bitfield) that
    # describes a sub-status
    _status = {0: 'unused',
               1: 'permanent',
               2: 'temporary',
               3: 'man_overboard',
               16: 'group_header',
               17: 'group_body',
               63: 'group_invalid',
               }

    def __init__(self, num=0, status=1, icon=255, depth=0, time=0, east=0,
                 north=0, name=bytes(12)):
        self.num = num
        self.zero = 0
        self.status = status
        self.icon = icon
        self.depth = depth
        self.time = time
        self.east = east
        self.north = north
        self.name = name

    def get_status(self):
        """Return the status name."""
        return self._status.get(self.status, 'unknown')

    def is_point(self):
        """Return whether the record is a real point.

        Only permanent, temporary, and man-overboard waypoints are points. The
        other statuses describe unused slots and waypoint groups.

        """
        return self.status in (1, 2, 3)

    def get_posn(self):
        return ProjectedPosition(self.east, self.north)

    def set_posn(self, posn):
        self.east = posn.east
        self.north = posn.north

    def get_icon(self):
        return Icon(self.icon).get_icon()

    def set_icon(self, descr):
        icon = Icon()
        icon.set_icon(descr)
        self.icon = icon.icon

    def get_depth(self):
        """Return the depth in meters, or None if unknown.

        A ``depth`` of zero means no depth data, not zero depth.

        """
        if self.depth != 0:
            return self.depth / 100.0

    def set_depth(self, depth):
        if depth is None:
            self.depth = 0
        else:
            self.depth = mod_projection.round_half_up(depth * 100.0) & 0xFFFF


class Rte(Record):
    """The route record is 132 bytes long, excluding the signature.

    The route refers to up to 50 waypoints by their number.

    """
    max_points = 50
    _fields = [('num', 'H'),                  # route number
               ('zero', 'H'),
               ('status', 'B'),
               ('unknown0', 'B'),
               ('unknown1', 'B'),
               ('count', 'b'),                # number of points
               ('time', 'I'),                 # POSIX timestamp in UTC
               ('name', '20s'),               # null-padded name
               ('points', f'({max_points}H)'),  # waypoint numbers
               ]

    def __init__(self, num=0, count=0, time=0, name=bytes(20), points=()):
        self.num = num
        self.zero = 0
        self.status = 0
        self.unknown0 = 0
        self.unknown1 = 0
        self.count = count
        self.time = time
        self.name = name
        self.points = list(points) + [0] * (self.max_points - len(points))

    def get_points(self):
        """Return the waypoint numbers of the route."""
        count = min(max(self.count, 0), self.max_points)
        return self.points[:count]

    def add_point(self, num):
        self.points[self.count] = num
        self.count += 1


class TrkHdr(Record):
    """The track header is 64 bytes long, excluding the signature.

    A track record has a fixed size of 131080 bytes: the signature, the header,
    a fixed-size array of differential track points, and a 16-bit zero.

    """
    record_size = 131080
    _fields = [('trk_num', 'H'),      # track number
               ('zero', 'H'),
               ('num_points', 'H'),   # number of points, including the start
               ('unknown', 'H'),      # always zero so far
               ('time', 'I'),         # POSIX timestamp in UTC
               ('start_east', 'i'),   # start of track
               ('start_north', 'i'),
               ('end_east', 'i'),     # end of track
               ('end_north', 'i'),
               ('sw_east', 'i'),      # south-west corner of the bounding box
               ('sw_north', 'i'),
               ('ne_east', 'i'),      # north-east corner of the bounding box
               ('ne_north', 'i'),
               ('name', '20s'),       # null-padded name
               ]

    def __init__(self, trk_num=0, num_points=0, time=0, start_east=0,
                 start_north=0, end_east=0, end_north=0, sw_east=0,
                 sw_north=0, ne_east=0, ne_north=0, name=bytes(20)):
        self.trk_num = trk_num
        self.zero = 0
        self.num_points = num_points
        self.unknown = 0
        self.time = time
        self.start_east = start_east
        self.start_north = start_north
        self.end_east = end_east
        self.end_north = end_north
        self.sw_east = sw_east
        self.sw_north = sw_north
        self.ne_east = ne_east
        self.ne_north = ne_north
        self.name = name

    @classmethod
    def get_max_points(cls):
        """Return the number of point slots of the track record."""
        return (cls.record_size - Signature.get_size() - cls.get_size()) // TrkPoint.get_size()

    def get_start_posn(self):
        return ProjectedPosition(self.start_east, self.start_north)

    def set_bbox(self, east, north):
        """Set the bounding box to a single position."""
        self.sw_east = self.ne_east = east
        self.sw_north = self.ne_north = north

    def extend_bbox(self, east, north):
        """Expand the bounding box to include the position."""
        self.sw_east = min(self.sw_east, east)
        self.ne_east = max(self.ne_east, east)
        self.sw_north = min(self.sw_north, north)
        self.ne_north = max(self.ne_north, north)


class TrkPoint(DataType):
    _fields = [('deltaeast', 'h'),   # east relative to the previous point
               ('deltanorth', 'h'),  # north relative to the previous point
               ('depth', 'H'),       # depth in centimeters, 0 if unknown
               ]

    def __init__(self, deltaeast=0, deltanorth=0, depth=0):
        self.deltaeast = deltaeast
        self.deltanorth = deltanorth
        self.depth = depth

    def get_depth(self):
        if self.depth != 0:
            return self.depth / 100.0

    def set_depth(self, depth):
        if depth is None:
            self.depth = 0
        else:
            self.depth = mod_projection.round_half_up(depth * 100.0) & 0xFFFF


class TrkHdrOld(Record):
    """The legacy track header is 28 bytes long, excluding the signature.

    Legacy track files are always 8048 bytes long, which is the value of the
    second 16-bit word of the signature. The track name is not in the header,
    but in the last 20 bytes of the file.

    """
    file_size = 8048
    name_offset = file_size - 20
    _fields = [('trk_num', 'H'),
               ('zero', 'H'),
               ('num_points', 'H'),
               ('unknown', 'H'),
               ('time', 'I'),
               ('start_east', 'i'),
               ('start_north', 'i'),
               ('end_east', 'i'),
               ('end_north', 'i'),
               ]

    def __init__(self, trk_num=0, num_points=0, time=0, start_east=0,
                 start_north=0, end_east=0, end_north=0):
        self.trk_num = trk_num
        self.zero = 0
        self.num_points = num_points
        self.unknown = 0
        self.time = time
        self.start_east = start_east
        self.start_north = start_north
        self.end_east = end_east
        self.end_north = end_north

    @classmethod
    def get_max_points(cls):
        overhead = cls.get_size() + Signature.get_size() + cls._name_size
        return (cls.file_size - overhead) // TrkPointOld.get_size()

    def get_start_posn(self):
        return ProjectedPosition(self.start_east, self.start_north)


class TrkPointOld(DataType):
    _fields = [('deltaeast', 'h'),
               ('deltanorth', 'h'),
               ]

    def __init__(self, deltaeast=0, deltanorth=0):
        self.deltaeast = deltaeast
        self.deltanorth = deltanorth

    def get_depth(self):
        """Legacy track points carry no depth."""
        return None
