"""
Object mappings

An object mapping describes a composite field (or a whole document) with a properties mapping of its children:

    {"type": "nested", "dynamic": "strict", "properties": {"title": {"type": "text"}, ...}}

Embedded in another mapping, the fragment has the attributes in a fixed order: type, dynamic, include_in_all,
enabled (only for data_type "object"), properties. For a document (the root of an index mapping),
serialize_type() only gives the properties.
"""

from enum import Enum
from typing import Any, ClassVar

from class_doc import extract_docs_from_cls_obj

from elastictypes.mapping.field import FieldMapping
from elastictypes.mapping.ser import StructSerializer

#: A single embedded sub-document
OBJECT = "object"
#: An array of sub-documents that can be queried independently
NESTED = "nested"


class Dynamic(Enum):
    #: New fields are added to the mapping
    true = True

    #: New fields are ignored, they are kept in the source but not indexed or searchable
    false = False

    #: New fields cause an exception, the document is rejected
    strict = "strict"


for field, doc in extract_docs_from_cls_obj(Dynamic).items():
    Dynamic[field].__doc__ = "\n".join(doc)


class ObjectMapping(FieldMapping):
    """
    Mapping of a composite type.

    Subclasses either set `properties` (a dict of name -> FieldMapping class), or implement
    props_len() and serialize_props() themselves. In both cases props_len() must be the number of
    properties that serialize_props() emits.
    """

    #: Name of the indexed type
    name: ClassVar[str | None] = None
    data_type = NESTED
    dynamic: ClassVar[Dynamic | bool | str | None] = None
    enabled: ClassVar[bool | None] = None
    include_in_all: ClassVar[bool | None] = None
    properties: ClassVar[dict[str, type[FieldMapping]]] = {}

    @classmethod
    def props_len(cls) -> int:
        return len(cls.properties)

    @classmethod
    def serialize_props(cls, state: StructSerializer) -> None:
        for name, mapping in cls.properties.items():
            state.serialize_field(name, mapping.fragment())

    @classmethod
    def properties_fragment(cls) -> dict[str, Any]:
        state = StructSerializer(cls.__name__, cls.props_len())
        cls.serialize_props(state)
        return state.end()

    @classmethod
    def property_names(cls) -> list[str]:
        return list(cls.properties_fragment().keys())

    @classmethod
    def field_fragment(cls) -> dict[str, Any]:
        """The mapping of this type as a field of another type"""
        result: dict[str, Any] = {"type": cls.data_type}
        if cls.dynamic is not None:
            result["dynamic"] = Dynamic(cls.dynamic).value
        if cls.include_in_all is not None:
            result["include_in_all"] = cls.include_in_all
        if cls.enabled is not None and cls.data_type == OBJECT:
            result["enabled"] = cls.enabled
        result["properties"] = cls.properties_fragment()
        return result

    @classmethod
    def fragment(cls) -> dict[str, Any]:
        return cls.field_fragment()

    @classmethod
    def serialize_type(cls) -> dict[str, Any]:
        """The mapping of this type as a document, i.e. the root of an index mapping"""
        return {"properties": cls.properties_fragment()}


def implements_properties(mapping: type[ObjectMapping]) -> bool:
    """Does this mapping define its own properties (rather than inheriting the empty default)?"""
    for cls in mapping.__mro__:
        if cls is ObjectMapping:
            return False
        if {"properties", "props_len", "serialize_props"} & cls.__dict__.keys():
            return True
    return False
