"""
Geo point formats and distances

A geo point is a Point(lat, lon) in python. Elasticsearch accepts several encodings of a point:
- GeoPointObject: {"lat": 41.12, "lon": -71.34}
- GeoPointString: "41.12,-71.34"
- GeoPointHash: "drm3btev3e86" (a 12 character geohash, which is parsed to the centre of its cell)
- GeoPointArray: [-71.34, 41.12] (note the lon, lat order, as in GeoJSON). This is the default.
"""

from enum import Enum
from typing import Any, NamedTuple

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from elastictypes.errors import FormatParseError
from elastictypes.formats import FieldFormat


class Point(NamedTuple):
    lat: float
    lon: float

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        # A bare Point field is (de)serialized with the default geo point format
        def validate(value: Any) -> "Point":
            if isinstance(value, Point):
                return value
            return DefaultGeoPointFormat.parse(value)

        return core_schema.no_info_plain_validator_function(
            validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda value: DefaultGeoPointFormat.format(value), when_used="json"
            ),
        )


class GeoPointFormat(FieldFormat):
    @classmethod
    def parse(cls, raw: Any) -> Point:
        raise NotImplementedError()

    @classmethod
    def format(cls, value: Point) -> Any:
        raise NotImplementedError()


def _point(raw: Any, format_name: str, lat: Any, lon: Any) -> Point:
    try:
        return Point(float(lat), float(lon))
    except (TypeError, ValueError):
        raise FormatParseError(raw, format_name, "latitude and longitude should be numbers")


class GeoPointObject(GeoPointFormat):
    format_name = "geo_point_object"

    @classmethod
    def parse(cls, raw: Any) -> Point:
        if not isinstance(raw, dict) or set(raw.keys()) != {"lat", "lon"}:
            raise FormatParseError(raw, cls.name(), "expected an object with lat and lon")
        return _point(raw, cls.name(), raw["lat"], raw["lon"])

    @classmethod
    def format(cls, value: Point) -> dict[str, float]:
        return {"lat": value.lat, "lon": value.lon}


class GeoPointString(GeoPointFormat):
    format_name = "geo_point_string"

    @classmethod
    def parse(cls, raw: Any) -> Point:
        if not isinstance(raw, str) or raw.count(",") != 1:
            raise FormatParseError(raw, cls.name(), "expected a string 'lat,lon'")
        lat, lon = raw.split(",")
        return _point(raw, cls.name(), lat.strip(), lon.strip())

    @classmethod
    def format(cls, value: Point) -> str:
        return f"{value.lat},{value.lon}"


class GeoPointArray(GeoPointFormat):
    format_name = "geo_point_array"

    @classmethod
    def parse(cls, raw: Any) -> Point:
        if not isinstance(raw, (list, tuple)) or len(raw) != 2:
            raise FormatParseError(raw, cls.name(), "expected an array [lon, lat]")
        return _point(raw, cls.name(), raw[1], raw[0])

    @classmethod
    def format(cls, value: Point) -> list[float]:
        return [value.lon, value.lat]


GEOHASH_ALPHABET = "0123456789bcdefghjkmnpqrstuvwxyz"
GEOHASH_PRECISION = 12


def geohash_encode(lat: float, lon: float, precision: int = GEOHASH_PRECISION) -> str:
    """Encode a point as a geohash: bits alternate between longitude and latitude, 5 bits per character"""
    lat_range, lon_range = [-90.0, 90.0], [-180.0, 180.0]
    result = []
    bits, nbits, even = 0, 0, True
    while len(result) < precision:
        interval, value = (lon_range, lon) if even else (lat_range, lat)
        mid = (interval[0] + interval[1]) / 2
        if value >= mid:
            bits = bits * 2 + 1
            interval[0] = mid
        else:
            bits = bits * 2
            interval[1] = mid
        even = not even
        nbits += 1
        if nbits == 5:
            result.append(GEOHASH_ALPHABET[bits])
            bits, nbits = 0, 0
    return "".join(result)


def geohash_decode(geohash: str) -> Point:
    """Decode a geohash to the centre of its cell. Raises ValueError for invalid characters"""
    lat_range, lon_range = [-90.0, 90.0], [-180.0, 180.0]
    even = True
    for c in geohash.lower():
        index = GEOHASH_ALPHABET.find(c)
        if index == -1:
            raise ValueError(f"Invalid geohash character {c!r}")
        for shift in range(4, -1, -1):
            interval = lon_range if even else lat_range
            mid = (interval[0] + interval[1]) / 2
            if (index >> shift) & 1:
                interval[0] = mid
            else:
                interval[1] = mid
            even = not even
    return Point((lat_range[0] + lat_range[1]) / 2, (lon_range[0] + lon_range[1]) / 2)


class GeoPointHash(GeoPointFormat):
    """Geohash with 12 characters, which is precise to a few centimeters"""

    format_name = "geo_point_hash"

    @classmethod
    def parse(cls, raw: Any) -> Point:
        if not isinstance(raw, str) or not raw:
            raise FormatParseError(raw, cls.name(), "expected a geohash string")
        try:
            return geohash_decode(raw)
        except ValueError as e:
            raise FormatParseError(raw, cls.name(), str(e))

    @classmethod
    def format(cls, value: Point) -> str:
        return geohash_encode(value.lat, value.lon)


DefaultGeoPointFormat = GeoPointArray


class DistanceUnit(str, Enum):
    inches = "in"
    feet = "ft"
    yards = "yd"
    miles = "mi"
    nautical_miles = "NM"
    kilometers = "km"
    meters = "m"
    centimeters = "cm"
    millimeters = "mm"


class Distance(NamedTuple):
    """A distance such as 50m, used e.g. for the precision of geo shapes"""

    value: float
    unit: DistanceUnit

    def __str__(self) -> str:
        value = int(self.value) if float(self.value).is_integer() else self.value
        return f"{value}{self.unit.value}"
