import time

import httpx
import pytest

from core.errors import FetchError
from services.plex_client import PlexArtworkClient
from tests.conftest import TOKEN


def test_build_url(artwork_client):
    assert artwork_client.build_url("/library/1/thumb") == "http://plex.test:32400/library/1/thumb"
    assert artwork_client.build_url("library/1/thumb") == "http://plex.test:32400/library/1/thumb"


def test_fetch_sends_token(artwork_client, fake_plex):
    fake_plex.serve_image("/art", b"bytes")

    assert artwork_client.fetch("/art") == b"bytes"
    assert fake_plex.requests[0].url.params["X-Plex-Token"] == TOKEN


@pytest.mark.parametrize("status", [401, 404, 500, 503])
def test_error_status_raises(artwork_client, fake_plex, status):
    fake_plex.serve_status("/art", status)
    with pytest.raises(FetchError):
        artwork_client.fetch("/art")


def test_empty_body_raises(artwork_client, fake_plex):
    fake_plex.serve_image("/art", b"")
    with pytest.raises(FetchError):
        artwork_client.fetch("/art")


def test_timeout_raises_fetch_error():
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with httpx.Client(transport=httpx.MockTransport(slow)) as client:
        plex = PlexArtworkClient("http://plex.test", TOKEN, timeout=0.1, client=client)
        with pytest.raises(FetchError, match="Timed out"):
            plex.fetch("/art")


def test_redirect_is_followed(fake_plex, artwork_client):
    fake_plex.routes["/library/metadata/1/thumb"] = lambda request: httpx.Response(
        302, headers={"Location": "http://plex.test:32400/photo/real.jpg"}
    )
    fake_plex.serve_image("/photo/real.jpg", b"real-bytes")

    assert artwork_client.fetch("/library/metadata/1/thumb") == b"real-bytes"
    assert [r.url.path for r in fake_plex.requests] == ["/library/metadata/1/thumb", "/photo/real.jpg"]


def test_redirect_followed_without_injected_client(monkeypatch):
    def handler(request):
        if request.url.path == "/thumb":
            return httpx.Response(301, headers={"Location": "/moved"})
        return httpx.Response(200, content=b"moved-bytes")

    real_client = httpx.Client

    def client_with_mock(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(httpx, "Client", client_with_mock)
    plex = PlexArtworkClient("http://plex.test", TOKEN, timeout=5.0)

    assert plex.fetch("/thumb") == b"moved-bytes"


def test_slow_body_hits_overall_deadline():
    def trickle():
        for _ in range(20):
            time.sleep(0.05)
            yield b"x" * 10

    def slow_body(request):
        return httpx.Response(200, content=trickle())

    with httpx.Client(transport=httpx.MockTransport(slow_body)) as client:
        plex = PlexArtworkClient("http://plex.test", TOKEN, timeout=0.2, client=client)
        with pytest.raises(FetchError, match="Timed out"):
            plex.fetch("/art")
