"""
Derive elasticsearch mappings for pydantic models

    @elastic_type(index="articles")
    class Article(BaseModel):
        id: Annotated[str, Id()]
        title: str
        tags: list[Keyword] = []
        published: Date[EpochMillis]
        internal: str = Field(exclude=True)

    mapping_of(Article).serialize_type()
    # {"properties": {"id": {...}, "title": {...}, "tags": {"type": "keyword"}, "published": {...}}}

The mapping is derived once, when the class is defined, from the same field metadata that pydantic uses to
serialize instances: the alias of a field is its name in the mapping, excluded fields are not mapped, and
computed fields are. So the properties of the mapping and the keys of to_source(doc) are always the same.

Type-level annotations are the keyword arguments of elastic_type (see ANNOTATIONS):
- index: the index name, either a literal string, or Expr("method") / a callable to compute it per document.
  Default: the lower-cased class name
- ty: the name of the indexed type. Default: _doc
- id: Expr("method") or a callable to compute the document id. Takes precedence over an Id() field
- mapping: an ObjectMapping subclass. If it defines its own properties it is used as is, otherwise it is
  used as the base class of the derived mapping (e.g. to set dynamic or data_type)

Field-level annotations are given in Annotated metadata: a FieldMapping subclass overrides the inferred mapping,
Id() marks the field that holds the document id.
"""

import logging
from typing import Annotated, Any, Callable, NamedTuple, get_args, get_origin, get_type_hints

from pydantic import BaseModel, RootModel
from pydantic_core import PydanticUndefined

from elastictypes.errors import ConflictingOverride, MalformedAnnotation, UnsupportedShape
from elastictypes.mapping.field import FieldMapping
from elastictypes.mapping.infer import mapping_for, override_of
from elastictypes.mapping.object import Dynamic, ObjectMapping, implements_properties

log = logging.getLogger("elastictypes.derive")

DEFAULT_TYPE_NAME = "_doc"


class Id:
    """
    Mark the field that holds the document id: Annotated[str, Id()].
    If expr is given, the id is expr(value) rather than the value itself.
    """

    def __init__(self, expr: Callable[[Any], Any] | None = None):
        if expr is not None and not callable(expr):
            raise TypeError(f"Id expr should be callable, not {expr!r}")
        self.expr = expr

    def __repr__(self):
        return f"Id(expr={self.expr!r})" if self.expr else "Id()"


class Expr:
    """A value computed per document by calling the method with the given name, e.g. index=Expr("index_for")"""

    def __init__(self, method: str):
        self.method = method

    def __repr__(self):
        return f"Expr({self.method!r})"


class FieldDescriptor(NamedTuple):
    name: str
    wire_name: str
    annotation: Any
    mapping: type[FieldMapping] | None
    id: Id | None


class DocumentBinding(NamedTuple):
    """The resolved type-level information of a document type"""

    mapping: type[ObjectMapping]
    index: str | Callable[[Any], str]
    ty: str
    id: Callable[[Any], Any] | None
    fields: tuple[str, ...]
    computed_fields: tuple[str, ...]
    #: wire name -> field name, for the fields that are renamed in the source
    renamed: dict[str, str]


# Type-level annotations: resolvers take the type name and the annotation value, and return the resolved value


def _computed(type_name: str, key: str, value: Any) -> Callable[[Any], Any]:
    if isinstance(value, Expr):
        if not isinstance(value.method, str) or not value.method.isidentifier():
            raise MalformedAnnotation(type_name, f"{key}: {value!r} should name a method")
        method = value.method

        def call(doc: Any) -> Any:
            return getattr(doc, method)()

        return call
    if callable(value) and not isinstance(value, type):
        return value
    raise MalformedAnnotation(type_name, f"{key} should be an Expr or a callable, not {value!r}")


def resolve_index(type_name: str, value: Any) -> str | Callable[[Any], str]:
    if isinstance(value, str):
        if not value:
            raise MalformedAnnotation(type_name, "index name should not be empty")
        return value
    return _computed(type_name, "index", value)


def resolve_ty(type_name: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise MalformedAnnotation(type_name, f"ty should be a non-empty string, not {value!r}")
    return value


def resolve_id(type_name: str, value: Any) -> Callable[[Any], Any]:
    return _computed(type_name, "id", value)


def resolve_mapping(type_name: str, value: Any) -> type[ObjectMapping]:
    if not (isinstance(value, type) and issubclass(value, ObjectMapping)):
        raise MalformedAnnotation(type_name, f"mapping should be an ObjectMapping subclass, not {value!r}")
    if value.dynamic is not None:
        try:
            Dynamic(value.dynamic)
        except ValueError:
            dynamic = value.dynamic
            raise MalformedAnnotation(type_name, f"{value.__name__}.dynamic should be a Dynamic value, not {dynamic!r}")
    return value


ANNOTATIONS: dict[str, Callable[[str, Any], Any]] = {
    "index": resolve_index,
    "ty": resolve_ty,
    "id": resolve_id,
    "mapping": resolve_mapping,
}


def elastic_type(cls: type | None = None, /, **annotations: Any) -> Any:
    """
    Class decorator that derives the elasticsearch mapping of a pydantic model.
    Use as @elastic_type or @elastic_type(index=..., ty=..., id=..., mapping=...)
    """
    if cls is None:
        return lambda cls: derive(cls, annotations)
    return derive(cls, annotations)


def derive(cls: Any, annotations: dict[str, Any]) -> Any:
    type_name = getattr(cls, "__name__", repr(cls))
    _check_shape(cls, type_name)

    resolved: dict[str, Any] = {}
    for key, value in annotations.items():
        resolver = ANNOTATIONS.get(key)
        if resolver is None:
            log.warning(f"{type_name}: ignoring unknown annotation {key}={value!r}")
            continue
        resolved[key] = resolver(type_name, value)

    fields = list(_fields(cls, type_name))
    if not fields:
        raise UnsupportedShape(type_name, "a document type needs at least one serialized field")

    base = resolved.get("mapping", ObjectMapping)
    if base.__dict__.get("__elastic_document__") is not None:
        other = base.__elastic_document__
        raise ConflictingOverride(type_name, f"mapping {base.__name__} is already used for {other.__name__}")

    ty = resolved.get("ty") or base.name or DEFAULT_TYPE_NAME
    wire_names = [f.wire_name for f in fields]
    if implements_properties(base):
        mapping = base
        names = mapping.property_names()
        if names != wire_names:
            raise ConflictingOverride(
                type_name, f"the properties of mapping {base.__name__} ({names}) differ from the fields ({wire_names})"
            )
        log.debug(f"{type_name}: using mapping {base.__name__}")
    else:
        properties: dict[str, type[FieldMapping]] = {}
        for f in fields:
            properties[f.wire_name] = f.mapping or mapping_for(f.annotation, type_name, f.name)
            log.debug(f"{type_name}.{f.name}: {f.wire_name} -> {properties[f.wire_name].__name__}")
        namespace = dict(properties=properties, name=ty, __module__=cls.__module__, __qualname__=f"{type_name}Mapping")
        mapping = type(f"{type_name}Mapping", (base,), namespace)
    mapping.__elastic_document__ = cls

    cls.__elastic_mapping__ = mapping
    cls.__elastic_binding__ = DocumentBinding(
        mapping=mapping,
        index=resolved.get("index", type_name.lower()),
        ty=ty,
        id=resolved.get("id") or _id_field(fields, type_name),
        fields=tuple(wire_names),
        computed_fields=tuple(f.wire_name for f in fields if f.name in cls.model_computed_fields),
        renamed={f.wire_name: f.name for f in fields if f.wire_name != f.name and f.name in cls.model_fields},
    )
    return cls


def _check_shape(cls: Any, type_name: str) -> None:
    if not isinstance(cls, type) or not issubclass(cls, BaseModel):
        raise UnsupportedShape(type_name, "only pydantic models (subclasses of BaseModel) can be document types")
    if issubclass(cls, RootModel):
        raise UnsupportedShape(type_name, "a RootModel is not a record of fields")
    if cls.__pydantic_generic_metadata__.get("parameters"):
        raise UnsupportedShape(type_name, "generic models are not supported, parametrize the model first")
    if not cls.__pydantic_complete__:
        raise UnsupportedShape(type_name, "the model has unresolved annotations")


def _metadata(annotation: Any) -> tuple[Any, ...]:
    if get_origin(annotation) is Annotated:
        return get_args(annotation)[1:]
    return ()


def _fields(cls: type[BaseModel], type_name: str):
    """Yield a descriptor for each field that pydantic serializes, in the order pydantic serializes them"""
    for name, info in cls.model_fields.items():
        if info.exclude is True:
            log.debug(f"{type_name}.{name}: excluded from serialization, not mapped")
            continue
        annotation = Annotated[(info.annotation, *info.metadata)] if info.metadata else info.annotation
        yield _descriptor(name, info.serialization_alias or name, annotation, type_name)
    for name, computed in cls.model_computed_fields.items():
        return_type = computed.return_type
        if return_type is PydanticUndefined:
            prop = computed.wrapped_property
            fget = getattr(prop, "fget", None) or getattr(prop, "func", None)
            return_type = get_type_hints(fget, include_extras=True).get("return", PydanticUndefined)
        if return_type is PydanticUndefined:
            raise MalformedAnnotation(type_name, f"computed field {name!r} needs a return type annotation")
        yield _descriptor(name, computed.alias or name, return_type, type_name)


def _descriptor(name: str, wire_name: str, annotation: Any, type_name: str) -> FieldDescriptor:
    metadata = _metadata(annotation)
    ids = [m for m in metadata if isinstance(m, Id)]
    return FieldDescriptor(
        name=name,
        wire_name=wire_name,
        annotation=annotation,
        mapping=override_of(metadata, type_name, name),
        id=ids[0] if ids else None,
    )


def _id_field(fields: list[FieldDescriptor], type_name: str) -> Callable[[Any], Any] | None:
    marked = [f for f in fields if f.id is not None]
    if len(marked) > 1:
        names = ", ".join(f.name for f in marked)
        raise ConflictingOverride(type_name, f"only one field can be the id, found Id() on {names}")
    if not marked:
        return None
    name, expr = marked[0].name, marked[0].id.expr

    def get_id(doc: Any) -> Any:
        value = getattr(doc, name)
        return expr(value) if expr is not None and value is not None else value

    return get_id


def binding_of(doc_or_cls: Any) -> DocumentBinding:
    cls = doc_or_cls if isinstance(doc_or_cls, type) else type(doc_or_cls)
    binding = cls.__dict__.get("__elastic_binding__")
    if binding is None:
        raise TypeError(f"{cls.__name__} is not a document type, decorate it with @elastic_type")
    return binding


def mapping_of(doc_or_cls: Any) -> type[ObjectMapping]:
    """The object mapping of a document type (or of the type of a document)"""
    return binding_of(doc_or_cls).mapping


def index_name(doc_or_cls: Any) -> str:
    """
    The index of a document. A document type (rather than a document) can only be given if the
    index name does not depend on the document.
    """
    index = binding_of(doc_or_cls).index
    if isinstance(index, str):
        return index
    if isinstance(doc_or_cls, type):
        raise TypeError(f"The index of {doc_or_cls.__name__} is computed per document, give a document")
    return index(doc_or_cls)


def type_name(doc_or_cls: Any) -> str:
    return binding_of(doc_or_cls).ty


def document_id(doc: Any) -> str | None:
    """The id of a document, or None if the document type has no id (in which case elastic assigns one)"""
    get_id = binding_of(doc).id
    if get_id is None:
        return None
    value = get_id(doc)
    return None if value is None else str(value)


def to_source(doc: BaseModel) -> dict[str, Any]:
    """The document as it is sent to elasticsearch (the _source)"""
    binding_of(doc)
    return doc.model_dump(mode="json", by_alias=True)


def from_source(cls: type[BaseModel], source: dict[str, Any]) -> Any:
    """Create a document from its _source (ignoring the values of computed fields)"""
    binding = binding_of(cls)
    data = {binding.renamed.get(k, k): v for (k, v) in source.items() if k not in binding.computed_fields}
    return cls.model_validate(data, by_name=True)
