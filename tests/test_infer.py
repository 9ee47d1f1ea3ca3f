from collections.abc import Sequence
from datetime import date, datetime
from enum import Enum, IntEnum
from ipaddress import IPv4Address, IPv6Address
from typing import Annotated, Any, Literal, Optional

import pytest
from pydantic import BaseModel

from elastictypes.date import EpochMillis
from elastictypes.errors import ConflictingOverride, UnsupportedShape
from elastictypes.geo import GeoPointHash, Point
from elastictypes.mapping import field_mapping
from elastictypes.mapping.core import (
    BooleanMapping,
    DefaultStringMapping,
    DoubleMapping,
    Ip,
    IpMapping,
    Keyword,
    KeywordMapping,
    LongMapping,
    Text,
    TextMapping,
)
from elastictypes.mapping.date import Date, DateMapping
from elastictypes.mapping.field import DefaultMapping, WrappedMapping, unwrap
from elastictypes.mapping.geo import GeoPoint, GeoPointMapping, GeoShape, GeoShapeMapping
from elastictypes.mapping.infer import mapping_for
from tests.tools import Author, AuthorMapping


class Color(str, Enum):
    red = "red"


class Level(IntEnum):
    low = 1


@pytest.mark.parametrize(
    "tp,expected",
    [
        (bool, BooleanMapping),
        (int, LongMapping),
        (float, DoubleMapping),
        (str, DefaultStringMapping),
        (datetime, DateMapping),
        (date, DateMapping),
        (IPv4Address, IpMapping),
        (IPv6Address, IpMapping),
        (Point, GeoPointMapping),
        (Color, KeywordMapping),
        (Level, KeywordMapping),
        (dict, DefaultMapping),
        (dict[str, int], DefaultMapping),
        (Any, DefaultMapping),
        (Text, TextMapping),
        (Keyword, KeywordMapping),
        (Ip, IpMapping),
        (GeoShape, GeoShapeMapping),
        (Literal["a", "b"], KeywordMapping),
        (Literal[1, 2], LongMapping),
    ],
)
def test_default_mappings(tp, expected):
    assert mapping_for(tp) is expected


def test_bool_is_not_int():
    class Flag(int):
        pass

    assert mapping_for(bool) is BooleanMapping
    assert mapping_for(Flag) is LongMapping


@pytest.mark.parametrize(
    "tp",
    [
        list[str],
        Optional[str],
        str | None,
        set[str],
        frozenset[str],
        tuple[str, ...],
        Sequence[str],
        list[Optional[list[str | None]]],
        Optional[list[Optional[str]]],
    ],
)
def test_container_transparency(tp):
    mapping = mapping_for(tp)
    assert issubclass(mapping, WrappedMapping)
    assert unwrap(mapping) is DefaultStringMapping
    assert mapping.data_type == "text"
    assert field_mapping(mapping) == field_mapping(DefaultStringMapping)


def test_container_of_formatted_and_documents():
    assert field_mapping(mapping_for(list[Date[EpochMillis]])) == {"type": "date", "format": "epoch_millis"}
    assert unwrap(mapping_for(Optional[GeoPoint[GeoPointHash]])).format is GeoPointHash
    assert field_mapping(mapping_for(list[Author])) == field_mapping(Author.__elastic_mapping__)
    assert issubclass(mapping_for(Author), AuthorMapping)
    assert mapping_for(list[Keyword]).data_type == "keyword"


def test_override_in_annotation():
    assert mapping_for(Annotated[str, KeywordMapping]) is KeywordMapping
    assert mapping_for(Annotated[list[str], KeywordMapping]) is KeywordMapping
    assert mapping_for(Annotated[int, "some other metadata"]) is LongMapping
    with pytest.raises(ConflictingOverride):
        mapping_for(Annotated[str, KeywordMapping, TextMapping], "Doc", "title")


def test_unsupported():
    class Plain(BaseModel):
        x: int

    for tp in [bytes, object, Plain, int | str, list[int | str], Literal["a", 1]]:
        with pytest.raises(UnsupportedShape):
            mapping_for(tp, "Doc", "field")
    with pytest.raises(UnsupportedShape) as e:
        mapping_for(complex, "Doc", "value")
    assert "Doc" in str(e.value)
    assert "'value'" in str(e.value)
