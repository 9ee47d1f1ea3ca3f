"""
Mappings for the core elasticsearch data types: boolean, numbers, strings and ip addresses

See https://www.elastic.co/guide/en/elasticsearch/reference/current/mapping-types.html
"""

from ipaddress import IPv4Address, IPv6Address
from typing import Annotated, ClassVar

from elastictypes.mapping.field import FieldMapping


class BooleanMapping(FieldMapping):
    data_type = "boolean"
    attributes = ("boost", "doc_values", "index", "store", "null_value")

    boost: ClassVar[float | None] = None
    doc_values: ClassVar[bool | None] = None
    index: ClassVar[bool | None] = None
    store: ClassVar[bool | None] = None
    null_value: ClassVar[bool | None] = None


class NumberMapping(FieldMapping):
    attributes = (
        "coerce",
        "boost",
        "doc_values",
        "ignore_malformed",
        "include_in_all",
        "index",
        "null_value",
        "store",
    )

    coerce: ClassVar[bool | None] = None
    boost: ClassVar[float | None] = None
    doc_values: ClassVar[bool | None] = None
    ignore_malformed: ClassVar[bool | None] = None
    include_in_all: ClassVar[bool | None] = None
    index: ClassVar[bool | None] = None
    null_value: ClassVar[int | float | None] = None
    store: ClassVar[bool | None] = None


class IntegerMapping(NumberMapping):
    data_type = "integer"


class LongMapping(NumberMapping):
    data_type = "long"


class ShortMapping(NumberMapping):
    data_type = "short"


class ByteMapping(NumberMapping):
    data_type = "byte"


class FloatMapping(NumberMapping):
    data_type = "float"


class DoubleMapping(NumberMapping):
    data_type = "double"


class HalfFloatMapping(NumberMapping):
    data_type = "half_float"


class ScaledFloatMapping(NumberMapping):
    """A float stored as a long, scaled by scaling_factor (which elasticsearch requires)"""

    data_type = "scaled_float"
    attributes = NumberMapping.attributes + ("scaling_factor",)

    scaling_factor: ClassVar[float | None] = None


class TextMapping(FieldMapping):
    """Full text, analyzed"""

    data_type = "text"
    attributes = (
        "analyzer",
        "boost",
        "eager_global_ordinals",
        "fielddata",
        "fields",
        "include_in_all",
        "index",
        "index_options",
        "norms",
        "position_increment_gap",
        "store",
        "search_analyzer",
        "search_quote_analyzer",
        "similarity",
        "term_vector",
    )

    analyzer: ClassVar[str | None] = None
    boost: ClassVar[float | None] = None
    eager_global_ordinals: ClassVar[bool | None] = None
    fielddata: ClassVar[bool | None] = None
    #: Multi-fields: name -> mapping class
    fields: ClassVar[dict[str, type[FieldMapping]] | None] = None
    include_in_all: ClassVar[bool | None] = None
    index: ClassVar[bool | None] = None
    index_options: ClassVar[str | None] = None
    norms: ClassVar[bool | None] = None
    position_increment_gap: ClassVar[int | None] = None
    store: ClassVar[bool | None] = None
    search_analyzer: ClassVar[str | None] = None
    search_quote_analyzer: ClassVar[str | None] = None
    similarity: ClassVar[str | None] = None
    term_vector: ClassVar[str | None] = None


class KeywordMapping(FieldMapping):
    """Exact values, e.g. for filtering, sorting and aggregation"""

    data_type = "keyword"
    attributes = (
        "boost",
        "doc_values",
        "eager_global_ordinals",
        "fields",
        "include_in_all",
        "ignore_above",
        "index",
        "index_options",
        "norms",
        "normalizer",
        "null_value",
        "store",
        "similarity",
    )

    boost: ClassVar[float | None] = None
    doc_values: ClassVar[bool | None] = None
    eager_global_ordinals: ClassVar[bool | None] = None
    fields: ClassVar[dict[str, type[FieldMapping]] | None] = None
    include_in_all: ClassVar[bool | None] = None
    ignore_above: ClassVar[int | None] = None
    index: ClassVar[bool | None] = None
    index_options: ClassVar[str | None] = None
    norms: ClassVar[bool | None] = None
    normalizer: ClassVar[str | None] = None
    null_value: ClassVar[str | None] = None
    store: ClassVar[bool | None] = None
    similarity: ClassVar[str | None] = None


class KeywordSubField(KeywordMapping):
    ignore_above = 256


class DefaultStringMapping(TextMapping):
    """The mapping elasticsearch itself uses for new string fields: text, with a keyword sub-field"""

    fields = {"keyword": KeywordSubField}


class IpMapping(FieldMapping):
    data_type = "ip"
    attributes = ("boost", "doc_values", "index", "store", "null_value")

    boost: ClassVar[float | None] = None
    doc_values: ClassVar[bool | None] = None
    index: ClassVar[bool | None] = None
    store: ClassVar[bool | None] = None
    null_value: ClassVar[str | None] = None


Text = Annotated[str, TextMapping]
Keyword = Annotated[str, KeywordMapping]
Integer = Annotated[int, IntegerMapping]
Long = Annotated[int, LongMapping]
Short = Annotated[int, ShortMapping]
Byte = Annotated[int, ByteMapping]
Float = Annotated[float, FloatMapping]
Double = Annotated[float, DoubleMapping]
Boolean = Annotated[bool, BooleanMapping]
Ip = Annotated[IPv4Address | IPv6Address, IpMapping]
