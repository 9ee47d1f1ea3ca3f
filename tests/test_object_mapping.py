import pytest

from elastictypes.errors import MappingSerializationError
from elastictypes.mapping import document_mapping, field_mapping, to_json
from elastictypes.mapping.core import KeywordMapping, LongMapping, TextMapping
from elastictypes.mapping.field import wrapped
from elastictypes.mapping.object import NESTED, OBJECT, Dynamic, ObjectMapping, implements_properties
from elastictypes.mapping.ser import StructSerializer


class ChildMapping(ObjectMapping):
    data_type = OBJECT
    properties = {"name": KeywordMapping}


class ParentMapping(ObjectMapping):
    dynamic = Dynamic.strict
    include_in_all = False
    properties = {"title": TextMapping, "child": ChildMapping, "count": LongMapping}


def test_object_mapping_defaults():
    assert ObjectMapping.data_type == NESTED
    assert ObjectMapping.dynamic is None
    assert ObjectMapping.enabled is None
    assert ObjectMapping.include_in_all is None
    assert field_mapping(ObjectMapping) == {"type": "nested", "properties": {}}


def test_embedded_shape():
    fragment = field_mapping(ParentMapping)
    assert fragment == {
        "type": "nested",
        "dynamic": "strict",
        "include_in_all": False,
        "properties": {
            "title": {"type": "text"},
            "child": {"type": "object", "properties": {"name": {"type": "keyword"}}},
            "count": {"type": "long"},
        },
    }
    assert list(fragment) == ["type", "dynamic", "include_in_all", "properties"]
    assert list(fragment["properties"]) == ["title", "child", "count"]


def test_attribute_order():
    class AllMapping(ObjectMapping):
        data_type = OBJECT
        enabled = False
        include_in_all = True
        dynamic = True
        properties = {"x": LongMapping}

    assert list(field_mapping(AllMapping).items()) == [
        ("type", "object"),
        ("dynamic", True),
        ("include_in_all", True),
        ("enabled", False),
        ("properties", {"x": {"type": "long"}}),
    ]


def test_dynamic_values():
    for value, expected in [(Dynamic.true, True), (Dynamic.false, False), (Dynamic.strict, "strict"), ("strict", "strict")]:

        class DynamicMapping(ObjectMapping):
            dynamic = value

        assert field_mapping(DynamicMapping)["dynamic"] == expected
    assert Dynamic.strict.__doc__ == "New fields cause an exception, the document is rejected"


def test_enabled_suppressed_under_nested():
    class NestedDisabled(ObjectMapping):
        data_type = NESTED
        enabled = False

    class ObjectDisabled(NestedDisabled):
        data_type = OBJECT

    assert "enabled" not in field_mapping(NestedDisabled)
    assert field_mapping(ObjectDisabled)["enabled"] is False


def test_document_root_shape():
    for mapping in [ParentMapping, ChildMapping, wrapped(ParentMapping)]:
        root = document_mapping(mapping)
        assert list(root) == ["properties"]
        for key in ["type", "dynamic", "enabled", "include_in_all"]:
            assert key not in root
    assert document_mapping(ParentMapping)["properties"] == field_mapping(ParentMapping)["properties"]
    assert to_json(ChildMapping) == '{"properties": {"name": {"type": "keyword"}}}'
    assert to_json(ChildMapping, field=True) == '{"type": "object", "properties": {"name": {"type": "keyword"}}}'
    with pytest.raises(TypeError):
        document_mapping(KeywordMapping)


def test_wrapped_object_mapping():
    assert field_mapping(wrapped(ParentMapping)) == field_mapping(ParentMapping)
    assert field_mapping(wrapped(wrapped(ChildMapping))) == field_mapping(ChildMapping)


class HandWritten(ObjectMapping):
    @classmethod
    def props_len(cls):
        return 2

    @classmethod
    def serialize_props(cls, state):
        state.serialize_field("a", KeywordMapping.fragment())
        state.serialize_field("b", LongMapping.fragment())


class Undercounted(HandWritten):
    @classmethod
    def props_len(cls):
        return 1


def test_cardinality():
    for mapping in [ParentMapping, ChildMapping, HandWritten]:
        assert len(document_mapping(mapping)["properties"]) == mapping.props_len()
    assert HandWritten.property_names() == ["a", "b"]
    with pytest.raises(MappingSerializationError):
        document_mapping(Undercounted)
    with pytest.raises(MappingSerializationError):
        field_mapping(Undercounted)


def test_struct_serializer():
    state = StructSerializer("Test", 1)
    state.serialize_field("a", 1)
    with pytest.raises(MappingSerializationError):
        state.serialize_field("a", 2)
    assert state.end() == {"a": 1}
    with pytest.raises(MappingSerializationError):
        StructSerializer("Test", 1).end()


def test_implements_properties():
    assert not implements_properties(ObjectMapping)
    assert implements_properties(ParentMapping)
    assert implements_properties(HandWritten)
    assert implements_properties(Undercounted)

    class Settings(ObjectMapping):
        dynamic = Dynamic.strict

    assert not implements_properties(Settings)
