"""
Infer the field mapping of a python type

Resolution order:
- A FieldMapping subclass in the Annotated metadata of the type (Annotated[str, KeywordMapping])
- Containers (list, tuple, set, Sequence, ...) and optionals map to the mapping of their items:
  elasticsearch has no separate array type, so a container is invisible in the mapping
- dict, Mapping and Any leave the mapping to elasticsearch (DefaultMapping)
- Document types decorated with @elastic_type map to their object mapping
- Otherwise, the first class in the MRO of the type that is in DEFAULT_MAPPINGS
"""

import collections.abc
import types
from datetime import date, datetime
from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from typing import Annotated, Any, Literal, Union, get_args, get_origin

from elastictypes.errors import ConflictingOverride, UnsupportedShape
from elastictypes.geo import Point
from elastictypes.mapping.core import BooleanMapping, DefaultStringMapping, DoubleMapping, IpMapping, KeywordMapping, LongMapping
from elastictypes.mapping.date import DateMapping
from elastictypes.mapping.field import DefaultMapping, FieldMapping, unwrap, wrapped
from elastictypes.mapping.geo import GeoPointMapping

DEFAULT_MAPPINGS: dict[type, type[FieldMapping]] = {
    bool: BooleanMapping,
    int: LongMapping,
    float: DoubleMapping,
    str: DefaultStringMapping,
    datetime: DateMapping,
    date: DateMapping,
    IPv4Address: IpMapping,
    IPv6Address: IpMapping,
    Point: GeoPointMapping,
}

CONTAINERS = {
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Collection,
    collections.abc.Iterable,
}

MAPPINGS = {dict, collections.abc.Mapping, collections.abc.MutableMapping}


def is_mapping_class(value: Any) -> bool:
    return isinstance(value, type) and issubclass(value, FieldMapping)


def override_of(metadata: Any, type_name: str = "?", field_name: str = "?") -> type[FieldMapping] | None:
    """The mapping class among the annotation metadata, if any"""
    overrides = list(dict.fromkeys(m for m in metadata if is_mapping_class(m)))
    if len(overrides) > 1:
        names = ", ".join(m.__name__ for m in overrides)
        raise ConflictingOverride(type_name, f"field {field_name!r} has more than one mapping: {names}")
    return overrides[0] if overrides else None


def document_mapping_of(tp: Any) -> type[FieldMapping] | None:
    """The object mapping of a type decorated with @elastic_type (not inherited from a decorated parent)"""
    if isinstance(tp, type):
        return tp.__dict__.get("__elastic_mapping__")
    return None


def mapping_for(tp: Any, type_name: str = "?", field_name: str = "?") -> type[FieldMapping]:
    """Resolve the mapping class for a field of type tp (in type type_name, used in error messages)"""
    origin = get_origin(tp)
    if origin is Annotated:
        inner, *metadata = get_args(tp)
        override = override_of(metadata, type_name, field_name)
        if override is not None:
            return override
        return mapping_for(inner, type_name, field_name)

    if tp is Any or tp in MAPPINGS or origin in MAPPINGS:
        return DefaultMapping

    if origin in (Union, types.UnionType):
        return _union_mapping(tp, type_name, field_name)

    if origin is Literal:
        return _literal_mapping(tp, type_name, field_name)

    if tp in CONTAINERS or origin in CONTAINERS:
        args = [a for a in get_args(tp) if a is not Ellipsis]
        if not args:
            return wrapped(DefaultMapping)
        return wrapped(_common_mapping(args, tp, type_name, field_name))

    mapping = document_mapping_of(tp)
    if mapping is not None:
        return mapping

    if isinstance(tp, type):
        if issubclass(tp, Enum):
            return KeywordMapping
        for cls in tp.__mro__:
            if cls in DEFAULT_MAPPINGS:
                return DEFAULT_MAPPINGS[cls]

    raise UnsupportedShape(type_name, f"cannot infer a mapping for field {field_name!r} of type {tp!r}")


def _common_mapping(args: list[Any], tp: Any, type_name: str, field_name: str) -> type[FieldMapping]:
    mappings = list(dict.fromkeys(unwrap(mapping_for(a, type_name, field_name)) for a in args))
    if len(mappings) > 1:
        raise UnsupportedShape(type_name, f"field {field_name!r} of type {tp!r} combines types with different mappings")
    return mappings[0]


def _union_mapping(tp: Any, type_name: str, field_name: str) -> type[FieldMapping]:
    args = get_args(tp)
    values = [a for a in args if a is not type(None)]
    mapping = _common_mapping(values, tp, type_name, field_name)
    if len(values) < len(args):
        return wrapped(mapping)
    return mapping


def _literal_mapping(tp: Any, type_name: str, field_name: str) -> type[FieldMapping]:
    values = get_args(tp)
    if all(isinstance(v, (str, Enum)) for v in values):
        return KeywordMapping
    if all(isinstance(v, bool) for v in values):
        return BooleanMapping
    if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return LongMapping
    raise UnsupportedShape(type_name, f"cannot infer a mapping for field {field_name!r} of type {tp!r}")
