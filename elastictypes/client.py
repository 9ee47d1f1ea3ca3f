"""
Send document types and documents to elasticsearch

All functions are async and use the connection from elastictypes.connection.es(), unless a client is given.
Errors from elasticsearch (e.g. NotFoundError for a missing document) are not caught.
"""

import logging
from typing import Any, Iterable, Literal

import elasticsearch.helpers
from elasticsearch import AsyncElasticsearch
from elasticsearch.helpers import BulkIndexError
from pydantic import BaseModel

from elastictypes.config import get_settings
from elastictypes.connection import es
from elastictypes.derive import document_id, from_source, index_name, to_source, type_name
from elastictypes.endpoints import (
    CREATE_DOCUMENT,
    CREATE_INDEX,
    DELETE_DOCUMENT,
    DELETE_INDEX,
    GET_DOCUMENT,
    INDEX_DOCUMENT,
    PUT_MAPPING,
)
from elastictypes.mapping import document_mapping

HEADERS = {"accept": "application/json", "content-type": "application/json"}


async def send(
    method: str,
    path: str,
    body: Any = None,
    params: dict | None = None,
    client: AsyncElasticsearch | None = None,
) -> Any:
    """Send a request to elasticsearch and return the (json) body of the response"""
    client = client or es()
    logging.debug(f"{method} {path}")
    response = await client.perform_request(method, path, headers=HEADERS, body=body, params=params)
    return response.body


async def create_index(cls: type[BaseModel], index: str | None = None, client: AsyncElasticsearch | None = None) -> Any:
    """Create the index for a document type, with the mapping of the document type"""
    index = index or index_name(cls)
    body = {"mappings": document_mapping(cls)}
    return await send(CREATE_INDEX.method, CREATE_INDEX.url(index=index), body=body, client=client)


async def put_mapping(cls: type[BaseModel], index: str | None = None, client: AsyncElasticsearch | None = None) -> Any:
    """Update the mapping of an existing index"""
    index = index or index_name(cls)
    return await send(PUT_MAPPING.method, PUT_MAPPING.url(index=index), body=document_mapping(cls), client=client)


async def delete_index(index: str | type[BaseModel], client: AsyncElasticsearch | None = None) -> Any:
    if not isinstance(index, str):
        index = index_name(index)
    return await send(DELETE_INDEX.method, DELETE_INDEX.url(index=index), client=client)


async def index_document(
    doc: BaseModel, refresh: bool | Literal["wait_for"] | None = None, client: AsyncElasticsearch | None = None
) -> Any:
    """Create or overwrite a document. If the document type has no id, elasticsearch assigns one"""
    index, ty, id = index_name(doc), type_name(doc), document_id(doc)
    params = None if refresh is None else {"refresh": _refresh(refresh)}
    if id is None:
        url = CREATE_DOCUMENT.url(index=index, type=ty)
        return await send(CREATE_DOCUMENT.method, url, body=to_source(doc), params=params, client=client)
    url = INDEX_DOCUMENT.url(index=index, type=ty, id=id)
    return await send(INDEX_DOCUMENT.method, url, body=to_source(doc), params=params, client=client)


async def get_document(
    cls: type[BaseModel], id: str, index: str | None = None, client: AsyncElasticsearch | None = None
) -> Any:
    """Retrieve a document by id"""
    url = GET_DOCUMENT.url(index=index or index_name(cls), type=type_name(cls), id=id)
    response = await send(GET_DOCUMENT.method, url, client=client)
    return from_source(cls, response["_source"])


async def delete_document(
    cls: type[BaseModel], id: str, index: str | None = None, client: AsyncElasticsearch | None = None
) -> Any:
    url = DELETE_DOCUMENT.url(index=index or index_name(cls), type=type_name(cls), id=id)
    return await send(DELETE_DOCUMENT.method, url, client=client)


def _refresh(refresh: bool | str) -> str:
    return refresh if isinstance(refresh, str) else str(refresh).lower()


def bulk_actions(
    docs: Iterable[BaseModel], op_type: Literal["index", "create"] = "index"
) -> Iterable[dict[str, Any]]:
    """
    Bulk actions for the documents, to be used with elasticsearch.helpers.(async_)bulk

    about op_type:
        - use "index" to create or overwrite documents
        - use "create" to create documents, fail if they already exist
    """
    for doc in docs:
        action: dict[str, Any] = {"_op_type": op_type, "_index": index_name(doc)}
        id = document_id(doc)
        if id is not None:
            action["_id"] = id
        action["_source"] = to_source(doc)
        yield action


async def bulk_index(
    docs: Iterable[BaseModel],
    op_type: Literal["index", "create"] = "index",
    batch_size: int | None = None,
    refresh: bool | Literal["wait_for"] = False,
    client: AsyncElasticsearch | None = None,
) -> int:
    """
    Index documents in bulk, in batches of batch_size (default: the bulk_batch_size setting).
    Returns the number of documents sent.
    """
    batch_size = batch_size or get_settings().bulk_batch_size
    client = client or es()
    n = 0
    actions: list[dict] = []
    for action in bulk_actions(docs, op_type=op_type):
        actions.append(action)
        if len(actions) >= batch_size:
            await bulk_helper_with_errors(client, actions, refresh=refresh)
            n += len(actions)
            actions = []

    if len(actions) > 0:
        await bulk_helper_with_errors(client, actions, refresh=refresh)
        n += len(actions)
    return n


async def bulk_helper_with_errors(client: AsyncElasticsearch, actions: list[dict], **kwargs) -> None:
    """
    elastic bulk but logging the reason for the first error if any
    """
    try:
        await elasticsearch.helpers.async_bulk(client, actions, **kwargs)
    except BulkIndexError as e:
        if e.errors:
            _, error = list(e.errors[0].items())[0]
            reason = error.get("error", {}).get("reason", error)
            logging.error(f"Bulk indexing failed for {len(e.errors)} document(s), first error: {reason}")
            e.args = e.args + (f"First error: {reason}",)
        raise
