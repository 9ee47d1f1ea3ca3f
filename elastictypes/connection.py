"""
Connection between elastictypes and the elasticsearch backend

Mapping and serialization never need a connection. Only the functions in client.py do,
and they get it from es(). Use elastic_connection() once to open (and close) the connection:

    async with elastic_connection():
        await put_mapping(MyDocument)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from elasticsearch import AsyncElasticsearch

from elastictypes.config import get_settings


class ElasticConnections:
    elastic: AsyncElasticsearch | None

    def __init__(self, elastic: AsyncElasticsearch | None = None):
        self.elastic = elastic


CONNECTIONS = ElasticConnections(elastic=None)


@asynccontextmanager
async def elastic_connection() -> AsyncGenerator[AsyncElasticsearch, None]:
    """
    Start (and afterwards close) the elasticsearch connection used by es()
    """
    try:
        yield await _start_elastic()
    finally:
        await _close_elastic()


def es() -> AsyncElasticsearch:
    """
    Use this function to access the elasticsearch connection.
    """
    if CONNECTIONS.elastic is None:
        raise ConnectionError("Elasticsearch connection not initialized")
    return CONNECTIONS.elastic


def connect_elastic() -> AsyncElasticsearch:
    """
    Create an elasticsearch client using the settings (without checking that it can connect)
    """
    settings = get_settings()
    kwargs = {}
    if settings.request_timeout is not None:
        kwargs["request_timeout"] = settings.request_timeout

    if settings.elastic_password:
        return AsyncElasticsearch(
            settings.elastic_host,
            basic_auth=(settings.elastic_username, settings.elastic_password),
            verify_certs=bool(settings.elastic_verify_ssl),
            **kwargs,
        )
    return AsyncElasticsearch(settings.elastic_host or None, **kwargs)


async def _start_elastic() -> AsyncElasticsearch:
    """
    Check whether we can connect with elastic
    """
    settings = get_settings()
    logging.debug(
        f"Connecting with elasticsearch at {settings.elastic_host}, password? {'yes' if settings.elastic_password else 'no'} "
    )
    elastic = connect_elastic()
    if not await elastic.ping():
        await elastic.close()
        raise ConnectionError(f"Cannot connect to elasticsearch server {settings.elastic_host}")
    CONNECTIONS.elastic = elastic
    return elastic


async def _close_elastic() -> None:
    if CONNECTIONS.elastic is not None:
        await CONNECTIONS.elastic.close()
        CONNECTIONS.elastic = None
