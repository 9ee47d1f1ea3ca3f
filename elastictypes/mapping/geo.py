"""
Geo mappings: geo_point and geo_shape

    class Shop(BaseModel):
        location: GeoPoint[GeoPointString]     # {"type": "geo_point"}, sent as "52.37,4.89"
        area: GeoShape                         # {"type": "geo_shape"}, a GeoJSON dict
"""

import functools
from enum import Enum
from typing import Annotated, Any, ClassVar

from elastictypes.formats import formatted
from elastictypes.geo import DefaultGeoPointFormat, Distance, GeoPointFormat, Point
from elastictypes.mapping.field import FieldMapping


class GeoPointMapping(FieldMapping):
    """
    The format of a geo point mapping only determines how documents are serialized,
    elasticsearch accepts all geo point formats for every geo_point field.
    """

    data_type = "geo_point"
    attributes = ("geohash", "geohash_precision", "geohash_prefix", "ignore_malformed", "lat_lon")

    format: ClassVar[type[GeoPointFormat]] = DefaultGeoPointFormat
    geohash: ClassVar[bool | None] = None
    geohash_precision: ClassVar[int | None] = None
    geohash_prefix: ClassVar[bool | None] = None
    ignore_malformed: ClassVar[bool | None] = None
    lat_lon: ClassVar[bool | None] = None


@functools.lru_cache(maxsize=None)
def geo_point_mapping(point_format: type[GeoPointFormat]) -> type[GeoPointMapping]:
    if point_format is GeoPointMapping.format:
        return GeoPointMapping
    return type(f"{point_format.__name__}Mapping", (GeoPointMapping,), dict(format=point_format))


class GeoPoint:
    """GeoPoint[F] is a Point field with geo point format F, GeoPoint[M] a Point field with mapping M"""

    def __class_getitem__(cls, item: Any) -> Any:
        if isinstance(item, type) and issubclass(item, GeoPointMapping):
            return formatted(Point, item)
        if isinstance(item, type) and issubclass(item, GeoPointFormat):
            return formatted(Point, geo_point_mapping(item))
        raise TypeError(f"GeoPoint[...] expects a GeoPointFormat or GeoPointMapping subclass, not {item!r}")


class GeoTree(str, Enum):
    geohash = "geohash"
    quadtree = "quadtree"


class GeoStrategy(str, Enum):
    recursive = "recursive"
    term = "term"


class GeoOrientation(str, Enum):
    #: Counter clockwise (the GeoJSON and OGC standard)
    ccw = "ccw"
    cw = "cw"


class GeoShapeMapping(FieldMapping):
    data_type = "geo_shape"
    attributes = (
        "tree",
        "precision",
        "tree_levels",
        "strategy",
        "distance_error_pct",
        "orientation",
        "points_only",
    )

    tree: ClassVar[GeoTree | None] = None
    precision: ClassVar[Distance | None] = None
    tree_levels: ClassVar[int | None] = None
    strategy: ClassVar[GeoStrategy | None] = None
    distance_error_pct: ClassVar[float | None] = None
    orientation: ClassVar[GeoOrientation | None] = None
    points_only: ClassVar[bool | None] = None


GeoShape = Annotated[dict[str, Any], GeoShapeMapping]
