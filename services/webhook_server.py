"""HTTP surface: Plex webhook receiver and the static file server."""
from __future__ import annotations

import itertools
import json
import threading
from pathlib import Path
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool

from core.errors import ReceiverDecodeError
from core.models import PlaybackNotification
from services.poster_workflow import PosterWorkflow
from utils.logger import get_logger

logger = get_logger(__name__)

PAYLOAD_FIELD = "payload"


class SequenceCounter:
    """Hands out receipt order numbers to concurrent requests."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            return next(self._counter)


async def parse_notification(request: Request, sequence: int) -> PlaybackNotification:
    """Decode the form-encoded Plex webhook into a PlaybackNotification."""
    try:
        form = await request.form()
    except Exception as exc:  # noqa: BLE001
        raise ReceiverDecodeError(f"Failed to parse form data: {exc}") from exc

    raw = form.get(PAYLOAD_FIELD)
    if not raw or not isinstance(raw, str):
        raise ReceiverDecodeError("Missing payload")

    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise ReceiverDecodeError(f"Invalid JSON payload: {exc}") from exc

    return PlaybackNotification.from_payload(payload, sequence=sequence)


def create_webhook_app(workflow: PosterWorkflow) -> FastAPI:
    app = FastAPI(title="Now Playing webhook")
    app.state.workflow = workflow
    app.state.sequence = SequenceCounter()

    @app.post("/webhook")
    async def webhook(request: Request) -> JSONResponse:
        sequence = app.state.sequence.next()
        try:
            notification = await parse_notification(request, sequence)
        except ReceiverDecodeError as exc:
            logger.warning(f"Rejected webhook #{sequence}: {exc}")
            return JSONResponse({"status": "error", "detail": str(exc)}, status_code=400)

        logger.debug(f"Webhook #{sequence}: {notification.raw_event} / {notification.raw_type}")
        # Fetch and Pillow work is blocking; keep it off the event loop.
        result = await run_in_threadpool(app.state.workflow.handle, notification)

        body: Dict[str, Any] = {
            "status": "ok" if result.success else "failed",
            "action": type(result.decision).__name__,
            "published": result.published,
        }
        if result.message:
            body["detail"] = result.message
        return JSONResponse(body)

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    return app


def create_static_app(output_dir: Path | str) -> FastAPI:
    """Serve the output directory (e.g. ``/now-playing.png``)."""
    app = FastAPI(title="Now Playing static", docs_url=None, redoc_url=None, openapi_url=None)
    app.mount("/", StaticFiles(directory=str(output_dir)), name="output")
    return app
