from typing import Any

import pytest

from elastictypes.config import get_settings
from elastictypes.connection import CONNECTIONS


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


class FakeResponse:
    def __init__(self, body: Any):
        self.body = body


class FakeElasticsearch:
    """
    Stand-in for AsyncElasticsearch that records requests, and stores documents that are PUT to /index/type/id
    """

    def __init__(self):
        self.requests: list[dict[str, Any]] = []
        self.documents: dict[tuple[str, str], dict] = {}
        self.closed = False

    async def perform_request(self, method, path, *, headers=None, body=None, params=None):
        self.requests.append(dict(method=method, path=path, headers=headers, body=body, params=params))
        parts = path.strip("/").split("/")
        if len(parts) == 3 and method == "PUT":
            self.documents[parts[0], parts[2]] = body
            return FakeResponse({"_index": parts[0], "_id": parts[2], "result": "created"})
        if len(parts) == 2 and method == "POST":
            id = f"generated-{len(self.documents) + 1}"
            self.documents[parts[0], id] = body
            return FakeResponse({"_index": parts[0], "_id": id, "result": "created"})
        if len(parts) == 3 and method == "GET":
            source = self.documents[parts[0], parts[2]]
            return FakeResponse({"_index": parts[0], "_id": parts[2], "found": True, "_source": source})
        if len(parts) == 3 and method == "DELETE":
            del self.documents[parts[0], parts[2]]
            return FakeResponse({"_index": parts[0], "_id": parts[2], "result": "deleted"})
        return FakeResponse({"acknowledged": True})

    async def ping(self):
        return True

    async def close(self):
        self.closed = True


@pytest.fixture()
def elastic():
    fake = FakeElasticsearch()
    CONNECTIONS.elastic = fake  # type: ignore
    yield fake
    CONNECTIONS.elastic = None


@pytest.fixture()
def settings():
    """The (cached) settings, restored after the test"""
    settings = get_settings()
    saved = settings.model_dump()
    yield settings
    for key, value in saved.items():
        setattr(settings, key, value)
