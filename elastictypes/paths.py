"""
Url templates with {param} placeholders, as used in the elasticsearch REST API spec

    >>> parse_path_params("/{index}/_alias/{name}")
    ['index', 'name']
    >>> parse_path_parts("/{index}/_alias/{name}")
    ['/', '/_alias/']
    >>> UrlTemplate("/{index}/_doc/{id}").build(index="articles", id="a b")
    '/articles/_doc/a%20b'

parse_path_parts gives the literal text before each placeholder, followed by the text after the last
placeholder if that is not empty (or never, with trailing=False).
"""

import re
from typing import Any
from urllib.parse import quote

from elastictypes.errors import PathTemplateError

PARAM_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def tokenize(template: str) -> tuple[list[str], list[str], str]:
    """
    Scan a url template, returning (literals, params, rest): literals[i] is the text before params[i],
    rest the text after the last placeholder
    """
    literals: list[str] = []
    params: list[str] = []
    start = 0
    i = 0
    while i < len(template):
        c = template[i]
        if c == "}":
            raise PathTemplateError(template, f"unbalanced '}}' at position {i}")
        if c == "{":
            end = template.find("}", i + 1)
            if end == -1:
                raise PathTemplateError(template, f"unclosed '{{' at position {i}")
            name = template[i + 1 : end]
            if "{" in name:
                raise PathTemplateError(template, f"nested '{{' at position {i + 1 + name.index('{')}")
            if not PARAM_NAME.fullmatch(name):
                raise PathTemplateError(template, f"invalid parameter name {name!r} at position {i}")
            if name in params:
                raise PathTemplateError(template, f"duplicate parameter {name!r}")
            literals.append(template[start:i])
            params.append(name)
            start = i = end + 1
        else:
            i += 1
    return literals, params, template[start:]


def parse_path_params(url: str) -> list[str]:
    """The names of the placeholders in the url template, from left to right"""
    return tokenize(url)[1]


def parse_path_parts(url: str, trailing: bool = True) -> list[str]:
    """The literal text between the placeholders in the url template"""
    literals, _, rest = tokenize(url)
    if trailing and rest:
        literals.append(rest)
    return literals


def _quote(template: str, name: str, value: Any) -> str:
    if isinstance(value, (list, tuple)):
        value = ",".join(quote(str(v), safe="") for v in value)
    else:
        value = quote(str(value), safe="")
    if not value:
        raise PathTemplateError(template, f"parameter {name!r} is empty")
    return value


class UrlTemplate:
    def __init__(self, template: str):
        self.template = template
        self.literals, self.params, self.rest = tokenize(template)

    @property
    def parts(self) -> list[str]:
        return self.literals + [self.rest] if self.rest else list(self.literals)

    def build(self, **params: Any) -> str:
        """Fill in the parameters, quoting the values. A list value is joined with commas (e.g. multiple indices)"""
        missing = [p for p in self.params if params.get(p) is None]
        if missing:
            raise PathTemplateError(self.template, f"missing parameter(s) {', '.join(missing)}")
        extra = sorted(set(params) - set(self.params))
        if extra:
            raise PathTemplateError(self.template, f"unknown parameter(s) {', '.join(extra)}")
        result = []
        for literal, name in zip(self.literals, self.params):
            result.append(literal)
            result.append(_quote(self.template, name, params[name]))
        result.append(self.rest)
        return "".join(result)

    def __str__(self):
        return self.template

    def __repr__(self):
        return f"UrlTemplate({self.template!r})"

    def __eq__(self, other):
        return isinstance(other, UrlTemplate) and other.template == self.template

    def __hash__(self):
        return hash(self.template)
