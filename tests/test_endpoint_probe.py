import pytest
import requests

from catalog_browser.endpoint_probe import EndpointProbe


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self.payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


@pytest.fixture
def captured(monkeypatch):
    calls = []

    def install(response):
        def fake_post(**kwargs):
            calls.append(kwargs)
            if isinstance(response, Exception):
                raise response
            return response

        monkeypatch.setattr(requests, "post", fake_post)
        return calls

    return install


def test_ping_sends_ask(captured):
    calls = captured(FakeResponse(payload={"head": {}, "boolean": True}))
    assert EndpointProbe("http://graphdb/repositories/shop").ping() is True
    assert calls[0]["url"] == "http://graphdb/repositories/shop"
    assert calls[0]["data"] == {"query": "ASK { ?s ?p ?o }"}


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(status_code=404),
        requests.exceptions.ConnectionError("refused"),
        FakeResponse(payload=ValueError("bad json")),
        FakeResponse(payload={"results": {}}),
    ],
)
def test_ping_failures(captured, response):
    captured(response)
    assert EndpointProbe("http://graphdb").ping() is False
