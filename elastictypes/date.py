"""
Date formats

Dates in elasticsearch are exposed as formatted strings (or numbers, for epoch_millis).
In python, dates are always timezone aware datetimes in UTC. Naive datetimes are assumed to be in UTC.

Formats:
- StrictDateOptionalTime (strict_date_optional_time, the default, equal to the pydantic datetime serialization)
- BasicDateTime (basic_date_time: yyyyMMdd'T'HHmmss.SSSZ)
- BasicDateTimeNoMillis (basic_date_time_no_millis: yyyyMMdd'T'HHmmssZ)
- EpochMillis (epoch_millis: milliseconds since the epoch, possibly negative)
- PatternDateFormat subclasses (or date_format(pattern)) for custom joda-style patterns

See https://www.elastic.co/guide/en/elasticsearch/reference/current/mapping-date-format.html
"""

import re
from datetime import UTC, datetime, timedelta
from typing import Any, Callable, ClassVar

from elastictypes.errors import FormatParseError
from elastictypes.formats import FieldFormat

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
EPOCH_MILLIS = re.compile(r"-?[0-9]+")


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class DateFormat(FieldFormat):
    @classmethod
    def parse(cls, raw: Any) -> datetime:
        raise NotImplementedError()

    @classmethod
    def format(cls, value: datetime) -> str:
        raise NotImplementedError()

    @classmethod
    def coerce(cls, value: datetime) -> datetime:
        return to_utc(value)


class EpochMillis(DateFormat):
    """
    Milliseconds since the epoch. This is the cheapest format to parse, so a good choice for timestamps.

    Negative values count back from the epoch: -100 is 100ms before the epoch, i.e. 1969-12-31T23:59:59.900Z
    (the millisecond part is always positive, so seconds and millis are found by floor division)
    """

    format_name = "epoch_millis"

    @classmethod
    def parse(cls, raw: Any) -> datetime:
        if isinstance(raw, bool) or not isinstance(raw, (int, str)):
            raise FormatParseError(raw, cls.name(), "expected an integer or a string of digits")
        if isinstance(raw, str) and not EPOCH_MILLIS.fullmatch(raw):
            raise FormatParseError(raw, cls.name(), "not an integer")
        millis = int(raw)
        seconds, millis = divmod(millis, 1000)
        try:
            return EPOCH + timedelta(seconds=seconds, milliseconds=millis)
        except OverflowError:
            raise FormatParseError(raw, cls.name(), "out of range")

    @classmethod
    def format(cls, value: datetime) -> str:
        millis = (to_utc(value) - EPOCH) // timedelta(milliseconds=1)
        return str(millis)


class StrictDateOptionalTime(DateFormat):
    """
    ISO 8601 date with an optional time, e.g. 2015-07-03 or 2015-07-03T14:55:02.478Z.
    Formatted with millisecond precision in UTC.
    """

    format_name = "strict_date_optional_time"

    @classmethod
    def parse(cls, raw: Any) -> datetime:
        if not isinstance(raw, str):
            raise FormatParseError(raw, cls.name(), "expected a string")
        try:
            return to_utc(datetime.fromisoformat(raw))
        except ValueError as e:
            raise FormatParseError(raw, cls.name(), str(e))

    @classmethod
    def format(cls, value: datetime) -> str:
        return to_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# Supported joda pattern letters: (regex, formatter)
_PATTERN_TOKENS: dict[str, tuple[str, Callable[[datetime], str]]] = {
    "yyyy": (r"(?P<year>[0-9]{4})", lambda d: f"{d.year:04d}"),
    "MM": (r"(?P<month>[0-9]{2})", lambda d: f"{d.month:02d}"),
    "dd": (r"(?P<day>[0-9]{2})", lambda d: f"{d.day:02d}"),
    "HH": (r"(?P<hour>[0-9]{2})", lambda d: f"{d.hour:02d}"),
    "mm": (r"(?P<minute>[0-9]{2})", lambda d: f"{d.minute:02d}"),
    "ss": (r"(?P<second>[0-9]{2})", lambda d: f"{d.second:02d}"),
    "SSS": (r"(?P<millis>[0-9]{3})", lambda d: f"{d.microsecond // 1000:03d}"),
    "Z": (r"(?P<offset>Z|[+-][0-9]{2}:?[0-9]{2})", lambda d: "Z"),
}


def _literal(text: str) -> tuple[str, Callable[[datetime], str]]:
    return re.escape(text), lambda d: text


def compile_pattern(pattern: str) -> tuple[re.Pattern, list[Callable[[datetime], str]]]:
    """
    Compile a joda-style date pattern into a regular expression (for parsing) and a list of formatters.
    Text between single quotes is literal, as is any character that is not a letter.
    """
    regex: list[str] = []
    formatters: list[Callable[[datetime], str]] = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "'":
            end = pattern.find("'", i + 1)
            if end == -1:
                raise ValueError(f"Unterminated quote in date pattern {pattern!r}")
            token = _literal(pattern[i + 1 : end] or "'")
            i = end + 1
        elif c.isalpha():
            end = i
            while end < len(pattern) and pattern[end] == c:
                end += 1
            letters = pattern[i:end]
            if letters not in _PATTERN_TOKENS:
                raise ValueError(f"Unsupported element {letters!r} in date pattern {pattern!r}")
            token = _PATTERN_TOKENS[letters]
            i = end
        else:
            token = _literal(c)
            i += 1
        regex.append(token[0])
        formatters.append(token[1])
    return re.compile("".join(regex)), formatters


def _offset(offset: str | None) -> timedelta:
    if not offset or offset == "Z":
        return timedelta(0)
    digits = offset[1:].replace(":", "")
    delta = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
    return -delta if offset[0] == "-" else delta


class PatternDateFormat(DateFormat):
    """
    A date format given by a joda-style pattern, such as yyyy-MM-dd'T'HH:mm:ssZ.
    Subclasses set `pattern` and optionally `format_name` (which defaults to the pattern itself)
    """

    pattern: ClassVar[str]
    _regex: ClassVar[re.Pattern]
    _formatters: ClassVar[list[Callable[[datetime], str]]]

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if "pattern" in cls.__dict__:
            cls._regex, cls._formatters = compile_pattern(cls.pattern)
            if "format_name" not in cls.__dict__:
                cls.format_name = cls.pattern

    @classmethod
    def parse(cls, raw: Any) -> datetime:
        if not isinstance(raw, str):
            raise FormatParseError(raw, cls.name(), "expected a string")
        m = cls._regex.fullmatch(raw)
        if not m:
            raise FormatParseError(raw, cls.name(), f"does not match {cls.pattern}")
        parts = m.groupdict()
        try:
            value = datetime(
                int(parts.get("year") or 1970),
                int(parts.get("month") or 1),
                int(parts.get("day") or 1),
                int(parts.get("hour") or 0),
                int(parts.get("minute") or 0),
                int(parts.get("second") or 0),
                int(parts.get("millis") or 0) * 1000,
                tzinfo=UTC,
            )
        except ValueError as e:
            raise FormatParseError(raw, cls.name(), str(e))
        return value - _offset(parts.get("offset"))

    @classmethod
    def format(cls, value: datetime) -> str:
        value = to_utc(value)
        return "".join(f(value) for f in cls._formatters)


class BasicDateTime(PatternDateFormat):
    pattern = "yyyyMMdd'T'HHmmss.SSSZ"
    format_name = "basic_date_time"


class BasicDateTimeNoMillis(PatternDateFormat):
    pattern = "yyyyMMdd'T'HHmmssZ"
    format_name = "basic_date_time_no_millis"


def date_format(pattern: str, name: str | None = None) -> type[PatternDateFormat]:
    """Create a date format class from a joda-style pattern"""
    namespace: dict[str, Any] = {"pattern": pattern}
    if name is not None:
        namespace["format_name"] = name
    return type("PatternDateFormat", (PatternDateFormat,), namespace)


DefaultDateFormat = StrictDateOptionalTime
