"""
Field mappings

A field mapping describes how elasticsearch indexes one field, e.g. {"type": "keyword", "ignore_above": 256}.
Mappings are classes without state: the parameters are class attributes, so a custom mapping is a subclass:

    class EmailMapping(TextMapping):
        analyzer = "email"

The fragment of a mapping is {"type": data_type} followed by all attributes that are not None,
in the order of the `attributes` tuple.
"""

import functools
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from elastictypes.formats import FieldFormat


class FieldMapping:
    #: The elasticsearch data type, e.g. "keyword"
    data_type: ClassVar[str] = "object"
    #: Names of the class attributes that are part of the mapping fragment, in serialization order
    attributes: ClassVar[tuple[str, ...]] = ()
    #: Format used to (de)serialize values of fields with this mapping, if any
    format: ClassVar[type[FieldFormat] | None] = None

    @classmethod
    def mapping(cls) -> "FieldMapping":
        return cls()

    @classmethod
    def fragment(cls) -> dict[str, Any]:
        result: dict[str, Any] = {"type": cls.data_type}
        for attribute in cls.attributes:
            value = getattr(cls, attribute, None)
            if value is not None:
                result[attribute] = cls.to_wire(value)
        return result

    @classmethod
    def to_wire(cls, value: Any) -> Any:
        """Convert an attribute value to its json representation"""
        if isinstance(value, type) and issubclass(value, FieldMapping):
            return value.fragment()
        if isinstance(value, type) and issubclass(value, FieldFormat):
            return value.name()
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, datetime) and cls.format is not None:
            return cls.format.format(value)
        if isinstance(value, dict):
            return {k: cls.to_wire(v) for (k, v) in value.items()}
        if isinstance(value, (list, tuple)) and not hasattr(value, "_fields"):
            return [cls.to_wire(v) for v in value]
        if isinstance(value, (str, int, float, bool)):
            return value
        return str(value)

    def __eq__(self, other):
        return type(self) is type(other)

    def __hash__(self):
        return hash(type(self))

    def __repr__(self):
        return f"{type(self).__name__}()"


class DefaultMapping(FieldMapping):
    """Leave the mapping to elasticsearch: {"type": "object"} without further attributes"""

    data_type = "object"


class WrappedMapping(FieldMapping):
    """
    Mapping of a container (list, set, optional, ...) of values with mapping `inner`.
    Elasticsearch has no array type, so this is identical to the inner mapping.
    """

    inner: ClassVar[type[FieldMapping]]

    @classmethod
    def fragment(cls) -> dict[str, Any]:
        return cls.inner.fragment()


@functools.lru_cache(maxsize=None)
def wrapped(inner: type[FieldMapping]) -> type[FieldMapping]:
    """The mapping of a container of `inner` values. Wrapping a wrapped mapping returns it unchanged"""
    if issubclass(inner, WrappedMapping):
        return inner
    return type(
        f"Wrapped{inner.__name__}",
        (WrappedMapping,),
        dict(inner=inner, data_type=inner.data_type, format=inner.format, __module__=inner.__module__),
    )


def unwrap(mapping: type[FieldMapping]) -> type[FieldMapping]:
    while issubclass(mapping, WrappedMapping):
        mapping = mapping.inner
    return mapping
