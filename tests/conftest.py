"""Shared fixtures for the now-playing renderer tests."""
from __future__ import annotations

from io import BytesIO
from typing import Callable, Dict, List

import httpx
import pytest
from PIL import Image

from services.plex_client import PlexArtworkClient
from services.poster_workflow import PosterWorkflow
from services.publisher import ArtworkPublisher

PLEX_HOST = "http://plex.test:32400"
TOKEN = "secret-token"
CANVAS = (90, 160)


def make_png(size=(40, 20), color=(200, 30, 30, 255), mode="RGBA") -> bytes:
    img = Image.new(mode, size, color)
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


PLACEHOLDER = make_png((1, 1), (0, 0, 0, 0))


def make_payload(event: str, media_type: str, thumb: str = "", grandparent: str = "", title: str = "Demo") -> Dict:
    return {
        "event": event,
        "Metadata": {"type": media_type, "title": title, "thumb": thumb, "grandparentThumb": grandparent},
    }


class FakePlex:
    """Records requests and serves artwork from a path → response map."""

    def __init__(self) -> None:
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def serve_image(self, path: str, data: bytes) -> None:
        self.routes[path] = lambda request: httpx.Response(200, content=data)

    def serve_status(self, path: str, status: int) -> None:
        self.routes[path] = lambda request: httpx.Response(status, content=b"error")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404)
        return handler(request)


@pytest.fixture
def fake_plex() -> FakePlex:
    return FakePlex()


@pytest.fixture
def artwork_client(fake_plex):
    client = httpx.Client(transport=httpx.MockTransport(fake_plex))
    yield PlexArtworkClient(PLEX_HOST, TOKEN, timeout=5.0, client=client)
    client.close()


@pytest.fixture
def output_path(tmp_path):
    return tmp_path / "output" / "now-playing.png"


@pytest.fixture
def publisher(output_path):
    pub = ArtworkPublisher(output_path)
    pub.ensure_directory()
    return pub


@pytest.fixture
def workflow(artwork_client, publisher):
    return PosterWorkflow(
        canvas_width=CANVAS[0],
        canvas_height=CANVAS[1],
        fetcher=artwork_client,
        publisher=publisher,
        placeholder=PLACEHOLDER,
    )
