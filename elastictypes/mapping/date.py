"""
Date mappings

Declare a date field with the format to use for it, the mapping and the document serialization both follow:

    class Event(BaseModel):
        timestamp: Date[EpochMillis]        # {"type": "date", "format": "epoch_millis"}, sent as "1435935302478"
        published: Date[MyDateMapping]      # a DateMapping subclass, e.g. with a different format or null_value
        created: datetime                   # strict_date_optional_time
"""

import functools
from datetime import datetime
from typing import Any, ClassVar

from elastictypes.date import DateFormat, DefaultDateFormat
from elastictypes.formats import formatted
from elastictypes.mapping.field import FieldMapping


class DateMapping(FieldMapping):
    data_type = "date"
    attributes = (
        "format",
        "boost",
        "doc_values",
        "include_in_all",
        "index",
        "store",
        "ignore_malformed",
        "null_value",
    )

    format: ClassVar[type[DateFormat]] = DefaultDateFormat
    boost: ClassVar[float | None] = None
    doc_values: ClassVar[bool | None] = None
    include_in_all: ClassVar[bool | None] = None
    index: ClassVar[bool | None] = None
    store: ClassVar[bool | None] = None
    ignore_malformed: ClassVar[bool | None] = None
    #: Value to index instead of null, rendered with the format of this mapping
    null_value: ClassVar[datetime | None] = None


@functools.lru_cache(maxsize=None)
def date_mapping(date_format: type[DateFormat]) -> type[DateMapping]:
    """The default date mapping for a date format"""
    if date_format is DateMapping.format:
        return DateMapping
    return type(f"{date_format.__name__}DateMapping", (DateMapping,), dict(format=date_format))


class Date:
    """
    Date[F] is a datetime field with date format F, Date[M] a datetime field with DateMapping subclass M
    """

    def __class_getitem__(cls, item: Any) -> Any:
        if isinstance(item, type) and issubclass(item, DateMapping):
            return formatted(datetime, item)
        if isinstance(item, type) and issubclass(item, DateFormat):
            return formatted(datetime, date_mapping(item))
        raise TypeError(f"Date[...] expects a DateFormat or DateMapping subclass, not {item!r}")
