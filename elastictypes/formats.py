"""
Field formats: interchangeable wire encodings for one kind of value

A format converts between the value used in python (e.g. a datetime) and the value that is sent to
and received from elasticsearch (e.g. "20150703T145502.478Z" or 1435935302478). Several formats exist for
the same value type, and which one is used is a static property of how a field is declared
(e.g. Date[EpochMillis]), so both the mapping ({"type": "date", "format": "epoch_millis"}) and the
serialization of documents follow from that one declaration.

Contract for every format: parse(format(v)) == v for values v at the precision of the format.
format(parse(s)) need not return s verbatim.
"""

from typing import Annotated, Any, ClassVar

from pydantic import BeforeValidator, PlainSerializer


class FieldFormat:
    """
    Base class for field formats. Formats are never instantiated, all methods are classmethods.
    """

    #: The wire-visible name of this format, e.g. basic_date_time
    format_name: ClassVar[str]

    @classmethod
    def name(cls) -> str:
        return cls.format_name

    @classmethod
    def parse(cls, raw: Any) -> Any:
        """Parse a wire value, raising FormatParseError if it is malformed"""
        raise NotImplementedError()

    @classmethod
    def format(cls, value: Any) -> Any:
        """Render a value to its wire representation"""
        raise NotImplementedError()

    @classmethod
    def coerce(cls, value: Any) -> Any:
        """Normalize a value that is already of the right python type"""
        return value


def formatted(value_type: type, mapping: type) -> Any:
    """
    Create an annotated type for a field of value_type that is mapped with the given mapping,
    and that is (de)serialized by the format of that mapping.

    Values of value_type are accepted as they are, anything else is parsed by the format.
    In json mode (which is what we send to elastic) values are rendered with the format.
    """
    fmt: type[FieldFormat] = mapping.format

    def _validate(value: Any) -> Any:
        if isinstance(value, value_type):
            return fmt.coerce(value)
        return fmt.parse(value)

    return Annotated[value_type, mapping, BeforeValidator(_validate), PlainSerializer(fmt.format, when_used="json")]
