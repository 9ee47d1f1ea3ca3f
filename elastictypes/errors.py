"""
Errors raised by elastictypes

- MappingDerivationError (and subclasses) are raised while deriving the mapping of a document type,
  i.e. when the class is defined. A type that fails to derive has no mapping at all.
- FormatParseError is raised when a field value cannot be parsed with its declared format
- PathTemplateError is raised for malformed url templates, or when a template cannot be filled in

None of these are worth retrying: they depend only on their input.
Errors raised by the elasticsearch client are not wrapped.
"""


class ElasticTypesError(Exception):
    pass


class MappingDerivationError(ElasticTypesError):
    """The mapping for a type could not be derived"""

    def __init__(self, type_name: str, constraint: str):
        self.type_name = type_name
        self.constraint = constraint
        super().__init__(f"Cannot derive mapping for {type_name}: {constraint}")


class UnsupportedShape(MappingDerivationError):
    """The type is not a plain record of fields (or a field has a type we cannot map)"""


class ConflictingOverride(MappingDerivationError):
    """Two explicit overrides that cannot both hold"""


class MalformedAnnotation(MappingDerivationError):
    """An annotation value has the wrong shape"""


class MappingSerializationError(ElasticTypesError):
    """A properties mapping emitted a different number of properties than it declared"""


class FormatParseError(ElasticTypesError, ValueError):
    """A value could not be parsed with the given field format"""

    def __init__(self, input, format_name: str, reason: str | None = None):
        self.input = input
        self.format_name = format_name
        self.reason = reason
        message = f"Cannot parse {input!r} as {format_name}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PathTemplateError(ElasticTypesError, ValueError):
    """A url template is malformed or cannot be filled in"""

    def __init__(self, template: str, reason: str):
        self.template = template
        self.reason = reason
        super().__init__(f"Invalid url template {template!r}: {reason}")
