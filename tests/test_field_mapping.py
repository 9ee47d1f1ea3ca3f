from elastictypes.mapping import field_mapping, to_json
from elastictypes.mapping.core import (
    BooleanMapping,
    DefaultStringMapping,
    DoubleMapping,
    IntegerMapping,
    IpMapping,
    KeywordMapping,
    KeywordSubField,
    ScaledFloatMapping,
    TextMapping,
)
from elastictypes.mapping.date import DateMapping
from elastictypes.mapping.field import DefaultMapping, WrappedMapping, unwrap, wrapped


def test_default_mapping():
    assert field_mapping(DefaultMapping) == {"type": "object"}
    assert DefaultMapping.data_type == "object"
    assert to_json(DefaultMapping) == '{"type": "object"}'


def test_core_mappings():
    assert field_mapping(BooleanMapping) == {"type": "boolean"}
    assert field_mapping(IntegerMapping) == {"type": "integer"}
    assert field_mapping(DoubleMapping) == {"type": "double"}
    assert field_mapping(KeywordMapping) == {"type": "keyword"}
    assert field_mapping(TextMapping) == {"type": "text"}
    assert field_mapping(IpMapping) == {"type": "ip"}
    assert field_mapping(DefaultStringMapping) == {
        "type": "text",
        "fields": {"keyword": {"type": "keyword", "ignore_above": 256}},
    }


def test_mapping_attributes_in_order():
    class TitleMapping(TextMapping):
        search_analyzer = "standard"
        analyzer = "dutch"
        fields = {"raw": KeywordSubField, "exact": KeywordMapping}
        norms = False

    fragment = field_mapping(TitleMapping)
    assert fragment == {
        "type": "text",
        "analyzer": "dutch",
        "fields": {"raw": {"type": "keyword", "ignore_above": 256}, "exact": {"type": "keyword"}},
        "norms": False,
        "search_analyzer": "standard",
    }
    assert list(fragment) == ["type", "analyzer", "fields", "norms", "search_analyzer"]

    class PriceMapping(ScaledFloatMapping):
        scaling_factor = 100
        coerce = False
        null_value = 0

    assert list(field_mapping(PriceMapping).items()) == [
        ("type", "scaled_float"),
        ("coerce", False),
        ("null_value", 0),
        ("scaling_factor", 100),
    ]


def test_mapping_instances():
    assert KeywordMapping.mapping() == KeywordMapping()
    assert KeywordMapping.mapping() != TextMapping.mapping()
    assert field_mapping(KeywordMapping.mapping()) == {"type": "keyword"}
    assert repr(KeywordMapping.mapping()) == "KeywordMapping()"


def test_wrapped_mapping():
    for mapping in [KeywordMapping, DefaultStringMapping, DateMapping, DefaultMapping]:
        w = wrapped(mapping)
        assert issubclass(w, WrappedMapping)
        assert w.data_type == mapping.data_type
        assert field_mapping(w) == field_mapping(mapping)
        assert to_json(w) == to_json(mapping)
        # wrapping is idempotent and cached
        assert wrapped(w) is w
        assert wrapped(mapping) is w
        assert unwrap(w) is mapping
