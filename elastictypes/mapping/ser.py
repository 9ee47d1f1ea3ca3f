from typing import Any

from elastictypes.errors import MappingSerializationError


class StructSerializer:
    """
    Collect the entries of a json object whose number of entries is declared before the first entry.
    end() fails if the number of entries differs from the declared length.
    """

    def __init__(self, name: str, length: int):
        self.name = name
        self.length = length
        self.entries: dict[str, Any] = {}

    def serialize_field(self, key: str, value: Any) -> None:
        if key in self.entries:
            raise MappingSerializationError(f"{self.name}: property {key!r} serialized twice")
        self.entries[key] = value

    def end(self) -> dict[str, Any]:
        if len(self.entries) != self.length:
            raise MappingSerializationError(
                f"{self.name} declared {self.length} properties, but serialized {len(self.entries)}"
            )
        return self.entries
