from datetime import UTC, datetime

import pytest
from elasticsearch.helpers import BulkIndexError

from elastictypes import client
from elastictypes.connection import CONNECTIONS, elastic_connection, es
from elastictypes.mapping import document_mapping
from tests.tools import Article, Event

PUBLISHED = datetime(2015, 7, 3, 14, 55, 2, 478000, tzinfo=UTC)


def event(sequence: int) -> Event:
    return Event(source="sensor", sequence=sequence, timestamp=datetime(2020, 1, 2, tzinfo=UTC))


def test_no_connection():
    with pytest.raises(ConnectionError):
        es()


@pytest.mark.anyio
async def test_create_index(elastic):
    await client.create_index(Article)
    [request] = elastic.requests
    assert (request["method"], request["path"]) == ("PUT", "/articles")
    assert request["body"] == {"mappings": document_mapping(Article)}
    assert request["headers"]["content-type"] == "application/json"

    await client.create_index(Event, index="events-test")
    assert elastic.requests[-1]["path"] == "/events-test"


@pytest.mark.anyio
async def test_put_mapping(elastic):
    await client.put_mapping(Article)
    await client.put_mapping(Event, index="events-2020.01.02")
    assert [(r["method"], r["path"]) for r in elastic.requests] == [
        ("PUT", "/articles/_mapping"),
        ("PUT", "/events-2020.01.02/_mapping"),
    ]
    assert elastic.requests[0]["body"] == document_mapping(Article)


@pytest.mark.anyio
async def test_delete_index(elastic):
    await client.delete_index(Article)
    await client.delete_index("other")
    assert [(r["method"], r["path"]) for r in elastic.requests] == [("DELETE", "/articles"), ("DELETE", "/other")]


@pytest.mark.anyio
async def test_index_get_delete_document(elastic):
    doc = Article(id="a/1", title="Hello", published=PUBLISHED, tags=["x"])
    result = await client.index_document(doc, refresh=True)
    assert result["result"] == "created"
    request = elastic.requests[-1]
    assert (request["method"], request["path"]) == ("PUT", "/articles/_doc/a%2F1")
    assert request["params"] == {"refresh": "true"}
    assert request["body"]["published"] == "1435935302478"

    assert elastic.documents["articles", "a%2F1"]["tags"] == ["x"]

    await client.delete_document(Article, "a/1")
    assert (elastic.requests[-1]["method"], elastic.requests[-1]["path"]) == ("DELETE", "/articles/_doc/a%2F1")
    assert elastic.documents == {}


@pytest.mark.anyio
async def test_get_document(elastic):
    doc = Article(id="a1", title="Hello", published=PUBLISHED)
    await client.index_document(doc)
    assert elastic.requests[-1]["params"] is None
    assert await client.get_document(Article, "a1") == doc
    assert (elastic.requests[-1]["method"], elastic.requests[-1]["path"]) == ("GET", "/articles/_doc/a1")

    await client.index_document(doc.model_copy(update={"title": "Other"}))
    copy = await client.get_document(Article, "a1", index="articles")
    assert copy.title == "Other"
    assert copy.title_length == 5


@pytest.mark.anyio
async def test_index_computed_index_and_id(elastic):
    await client.index_document(event(3), refresh="wait_for")
    request = elastic.requests[-1]
    assert (request["method"], request["path"]) == ("PUT", "/events-2020.01.02/event/sensor-3")
    assert request["params"] == {"refresh": "wait_for"}
    assert request["body"]["timestamp"] == "1577923200000"


@pytest.mark.anyio
async def test_index_without_id(elastic):
    from pydantic import BaseModel

    from elastictypes.derive import elastic_type

    @elastic_type(index="logs")
    class LogLine(BaseModel):
        message: str

    result = await client.index_document(LogLine(message="hi"))
    assert result["_id"] == "generated-1"
    request = elastic.requests[-1]
    assert (request["method"], request["path"], request["body"]) == ("POST", "/logs/_doc", {"message": "hi"})


def test_bulk_actions():
    doc = Article(id="a1", title="Hello", published=PUBLISHED)
    actions = list(client.bulk_actions([doc, event(1)], op_type="create"))
    assert [(a["_op_type"], a["_index"], a["_id"]) for a in actions] == [
        ("create", "articles", "a1"),
        ("create", "events-2020.01.02", "sensor-1"),
    ]
    assert actions[0]["_source"]["title"] == "Hello"
    assert actions[1]["_source"] == {
        "source": "sensor",
        "sequence": 1,
        "timestamp": "1577923200000",
        "place": None,
    }


@pytest.mark.anyio
async def test_bulk_index(elastic, settings, monkeypatch):
    batches = []

    async def async_bulk(es_client, actions, **kwargs):
        assert es_client is elastic
        batches.append((list(actions), kwargs))
        return len(actions), []

    monkeypatch.setattr("elasticsearch.helpers.async_bulk", async_bulk, raising=False)
    settings.bulk_batch_size = 2
    n = await client.bulk_index([event(i) for i in range(5)])
    assert n == 5
    assert [len(actions) for actions, _ in batches] == [2, 2, 1]
    assert batches[0][1] == {"refresh": False}
    assert [a["_id"] for actions, _ in batches for a in actions] == [f"sensor-{i}" for i in range(5)]

    batches.clear()
    assert await client.bulk_index([event(1)], batch_size=10, refresh=True) == 1
    assert batches[0][1] == {"refresh": True}
    assert await client.bulk_index([]) == 0


@pytest.mark.anyio
async def test_bulk_errors(elastic, monkeypatch, caplog):
    async def async_bulk(es_client, actions, **kwargs):
        errors = [{"index": {"_id": "sensor-1", "error": {"type": "mapper_parsing_exception", "reason": "bad date"}}}]
        raise BulkIndexError("1 document(s) failed to index.", errors)

    monkeypatch.setattr("elasticsearch.helpers.async_bulk", async_bulk, raising=False)
    with pytest.raises(BulkIndexError) as e:
        await client.bulk_index([event(1)])
    assert "First error: bad date" in e.value.args
    assert "bad date" in caplog.text


@pytest.mark.anyio
async def test_elastic_connection(monkeypatch):
    from tests.conftest import FakeElasticsearch

    fake = FakeElasticsearch()
    monkeypatch.setattr("elastictypes.connection.connect_elastic", lambda: fake)
    async with elastic_connection() as connection:
        assert connection is fake
        assert es() is fake
    assert fake.closed
    assert CONNECTIONS.elastic is None
