import asyncio

import aiohttp
import pytest

from catalog_browser.sparql_client import SparqlClient, SparqlQueryError


class FakeResponse:
    def __init__(self, status=200, payload=None, text="", error=None):
        self.status = status
        self.payload = payload
        self._text = text
        self.error = error

    async def __aenter__(self):
        if self.error is not None:
            raise self.error
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def text(self):
        return self._text

    async def json(self, content_type="application/json"):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.requests = []
        self.closed = False

    def post(self, url, data=None, headers=None, timeout=None):
        self.requests.append({"url": url, "data": data, "headers": headers})
        return self.response

    async def close(self):
        self.closed = True


@pytest.mark.asyncio
async def test_select_posts_form_encoded_query():
    payload = {"results": {"bindings": [{"storeLabel": {"type": "literal", "value": "A"}}]}}
    session = FakeSession(FakeResponse(payload=payload))
    async with SparqlClient("http://graphdb/repositories/shop", session=session) as client:
        bindings = await client.select("SELECT * WHERE { ?s ?p ?o }")

    assert bindings == payload["results"]["bindings"]
    request = session.requests[0]
    assert request["url"] == "http://graphdb/repositories/shop"
    assert request["data"] == {"query": "SELECT * WHERE { ?s ?p ?o }"}
    assert request["headers"]["Accept"] == "application/sparql-results+json"
    assert request["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
    assert not session.closed


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(status=500, text="boom"),
        FakeResponse(error=aiohttp.ClientConnectionError("refused")),
        FakeResponse(error=asyncio.TimeoutError()),
        FakeResponse(payload=ValueError("not json")),
        FakeResponse(payload={"head": {}}),
        FakeResponse(payload={"results": {"bindings": "nope"}}),
        FakeResponse(payload={"results": {"bindings": ["oops"]}}),
        FakeResponse(payload={"results": {"bindings": [{"title": "A"}]}}),
    ],
)
async def test_failures_become_query_errors(response):
    client = SparqlClient("http://graphdb", session=FakeSession(response))
    with pytest.raises(SparqlQueryError):
        await client.select("SELECT * WHERE { ?s ?p ?o }")


@pytest.mark.asyncio
async def test_select_requires_open_client():
    with pytest.raises(RuntimeError):
        await SparqlClient("http://graphdb").select("SELECT * WHERE { ?s ?p ?o }")


@pytest.mark.asyncio
async def test_owned_session_is_closed():
    async with SparqlClient("http://graphdb") as client:
        session = client._session  # pylint: disable=W0212
        assert session is not None
    assert session.closed
