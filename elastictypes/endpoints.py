"""
Endpoints of the elasticsearch REST API

An endpoint is one (method, url template) overload of an API call: indices.delete_alias has overloads
DELETE /{index}/_alias/{name} and DELETE /{index}/_aliases/{name}.
Endpoints can be read from the elasticsearch REST API spec (rest-api-spec/api/*.json), which has one file per call:

    {"indices.delete_alias": {"methods": ["DELETE"], "url": {"paths": ["/{index}/_alias/{name}", ...]}}}

Newer versions of the spec list methods per path:

    {"indices.delete_alias": {"url": {"paths": [{"path": "/{index}/_alias/{name}", "methods": ["DELETE"]}]}}}
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable, Literal

from pydantic import BaseModel, field_validator

from elastictypes.paths import UrlTemplate, tokenize

HttpMethod = Literal["GET", "PUT", "POST", "DELETE", "HEAD"]
NON_IDENTIFIER = re.compile(r"\W")


class Endpoint(BaseModel):
    name: str
    method: HttpMethod
    template: str

    @field_validator("method", mode="before")
    @classmethod
    def upper_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @field_validator("template")
    @classmethod
    def valid_template(cls, value: str) -> str:
        tokenize(value)
        return value

    @property
    def url_template(self) -> UrlTemplate:
        return UrlTemplate(self.template)

    @property
    def params(self) -> list[str]:
        return self.url_template.params

    @property
    def function_name(self) -> str:
        """e.g. indices_delete_alias__delete_index_name for indices.delete_alias DELETE /{index}/_alias/{name}"""
        endpoint = NON_IDENTIFIER.sub("_", self.name)
        return "_".join([f"{endpoint}_", self.method.lower(), *self.params])

    def url(self, **params: Any) -> str:
        return self.url_template.build(**params)


def parse_spec(spec: dict[str, Any]) -> list[Endpoint]:
    """Parse the endpoints from (the contents of) a REST API spec file"""
    endpoints = []
    for name, definition in spec.items():
        if not isinstance(definition, dict) or "url" not in definition:
            logging.debug(f"Skipping {name}: not an endpoint definition")
            continue
        methods = definition.get("methods", [])
        url = definition["url"]
        paths = url.get("paths") or ([url["path"]] if url.get("path") else [])
        for path in paths:
            if isinstance(path, dict):
                for method in path.get("methods", methods):
                    endpoints.append(Endpoint(name=name, method=method, template=path["path"]))
            else:
                for method in methods:
                    endpoints.append(Endpoint(name=name, method=method, template=path))
    return endpoints


def load_spec(path: Path | str) -> list[Endpoint]:
    """Load the endpoints from a REST API spec file, or from all spec files in a directory"""
    path = Path(path)
    if path.is_dir():
        files: Iterable[Path] = sorted(f for f in path.glob("*.json") if not f.name.startswith("_"))
    else:
        files = [path]
    endpoints = []
    for file in files:
        endpoints += parse_spec(json.loads(file.read_text()))
    return endpoints


# Endpoints used by the client for documents and their mappings
CREATE_INDEX = Endpoint(name="indices.create", method="PUT", template="/{index}")
DELETE_INDEX = Endpoint(name="indices.delete", method="DELETE", template="/{index}")
PUT_MAPPING = Endpoint(name="indices.put_mapping", method="PUT", template="/{index}/_mapping")
INDEX_DOCUMENT = Endpoint(name="index", method="PUT", template="/{index}/{type}/{id}")
CREATE_DOCUMENT = Endpoint(name="index", method="POST", template="/{index}/{type}")
GET_DOCUMENT = Endpoint(name="get", method="GET", template="/{index}/{type}/{id}")
DELETE_DOCUMENT = Endpoint(name="delete", method="DELETE", template="/{index}/{type}/{id}")
