"""
Elasticsearch mappings: field mappings, object mappings and their json representation

- field_mapping(M) gives the mapping of a field, e.g. {"type": "keyword"} or for an object mapping
  {"type": "nested", "properties": {...}}
- document_mapping(X) gives the mapping of a document type (or ObjectMapping) X as the root of an index mapping,
  i.e. only {"properties": {...}}
"""

import json
from typing import Any

from elastictypes.mapping.field import FieldMapping, unwrap
from elastictypes.mapping.object import ObjectMapping


def _mapping_class(target: Any) -> type[FieldMapping]:
    if isinstance(target, FieldMapping):
        return type(target)
    if isinstance(target, type):
        if issubclass(target, FieldMapping):
            return target
        mapping = target.__dict__.get("__elastic_mapping__")
        if mapping is not None:
            return mapping
    raise TypeError(f"{target!r} is not a field mapping or a document type")


def field_mapping(target: Any) -> dict[str, Any]:
    """The mapping of a field with this mapping (class or instance) or document type"""
    return _mapping_class(target).fragment()


def document_mapping(target: Any) -> dict[str, Any]:
    """The mapping of a document type or ObjectMapping subclass as a document"""
    mapping = unwrap(_mapping_class(target))
    if not issubclass(mapping, ObjectMapping):
        raise TypeError(f"{target!r} is not an object mapping, it cannot be the mapping of a document")
    return mapping.serialize_type()


def to_json(target: Any, field: bool = False, **kwargs) -> str:
    """The json of the document mapping of the target, or of its field mapping if field is True"""
    mapping = _mapping_class(target)
    if field or not issubclass(unwrap(mapping), ObjectMapping):
        return json.dumps(field_mapping(mapping), **kwargs)
    return json.dumps(document_mapping(mapping), **kwargs)
