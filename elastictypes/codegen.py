"""
Generate python functions for elasticsearch endpoints

Each endpoint overload becomes an async function named after its endpoint, method and path parameters,
e.g. indices.delete_alias DELETE /{index}/_alias/{name} becomes

    async def indices_delete_alias__delete_index_name(index, name, *, body=None, params=None, client=None):
        ...

Overloads of one endpoint with the same method and parameters get a numeric suffix
(indices_delete_alias__delete_index_name_2 for /{index}/_aliases/{name}), in the order of the endpoints.
"""

import keyword
import logging
from pathlib import Path
from typing import Iterable

from elastictypes.endpoints import Endpoint

HEADER = '''"""
Elasticsearch endpoints

Generated by elastictypes codegen, do not edit
"""

from typing import Any

from elasticsearch import AsyncElasticsearch

from elastictypes.client import send
from elastictypes.paths import UrlTemplate
'''

FUNCTION = '''

async def {function}({args}*, body: Any = None, params: dict | None = None, client: AsyncElasticsearch | None = None) -> Any:
    """{endpoint}: {method} {template}"""
    path = UrlTemplate({template!r}).build({build})
    return await send({method!r}, path, body=body, params=params, client=client)
'''


def _arg(param: str) -> str:
    return f"{param}_" if keyword.iskeyword(param) else param


def function_names(endpoints: Iterable[Endpoint]) -> list[tuple[str, Endpoint]]:
    """Assign a unique function name to each distinct endpoint overload"""
    seen: set[tuple[str, str, str]] = set()
    counts: dict[str, int] = {}
    result = []
    for endpoint in endpoints:
        key = (endpoint.name, endpoint.method, endpoint.template)
        if key in seen:
            logging.debug(f"Skipping duplicate endpoint {endpoint.method} {endpoint.template} ({endpoint.name})")
            continue
        seen.add(key)
        name = endpoint.function_name
        counts[name] = counts.get(name, 0) + 1
        if counts[name] > 1:
            name = f"{name}_{counts[name]}"
        result.append((name, endpoint))
    return result


def render_function(name: str, endpoint: Endpoint) -> str:
    params = endpoint.params
    args = "".join(f"{_arg(p)}: str, " for p in params)
    build = "**{" + ", ".join(f"{p!r}: {_arg(p)}" for p in params) + "}" if params else ""
    return FUNCTION.format(
        function=name,
        args=args,
        endpoint=endpoint.name,
        method=endpoint.method,
        template=endpoint.template,
        build=build,
    )


def render_module(endpoints: Iterable[Endpoint]) -> str:
    """Python source of a module with one function per endpoint overload"""
    return HEADER + "".join(render_function(name, endpoint) for (name, endpoint) in function_names(endpoints))


def write_module(endpoints: Iterable[Endpoint], path: Path | str) -> None:
    source = render_module(endpoints)
    Path(path).write_text(source)
    logging.info(f"Wrote endpoint functions to {path}")
