"""Now-playing workflow: classify, fetch, composite and publish."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Optional, Protocol

from PIL import Image, UnidentifiedImageError

from core.config import AppConfig
from core.errors import ConfigurationError, DecodeError, PosterError
from core.models import (
    Ignore,
    PlaybackNotification,
    ShowArtwork,
    ShowBlank,
    WorkflowResult,
)
from services.classifier import classify
from services.compositor import composite, encode_png
from services.publisher import ArtworkPublisher
from utils.logger import get_logger

logger = get_logger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class ArtworkFetcher(Protocol):
    def fetch(self, reference: str) -> bytes:
        ...


def load_placeholder(path: Path | str) -> bytes:
    """Read the blank/placeholder image once at startup."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"Placeholder image not readable: {path} ({exc})") from exc
    if not data:
        raise ConfigurationError(f"Placeholder image is empty: {path}")
    if not data.startswith(PNG_SIGNATURE):
        raise ConfigurationError(f"Placeholder image must be a PNG: {path}")
    return data


def decode_image(data: bytes) -> Image.Image:
    try:
        image = Image.open(BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise DecodeError(f"Artwork is not a readable image: {exc}") from exc
    return image


class PosterWorkflow:
    """
    Turns one playback notification into at most one publish.

    Per-event failures are logged and reported in the WorkflowResult; the
    published file is only touched by a fully rendered image.
    """

    def __init__(
        self,
        canvas_width: int,
        canvas_height: int,
        fetcher: ArtworkFetcher,
        publisher: ArtworkPublisher,
        placeholder: bytes,
    ) -> None:
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.fetcher = fetcher
        self.publisher = publisher
        self.placeholder = placeholder

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        fetcher: ArtworkFetcher,
        publisher: Optional[ArtworkPublisher] = None,
    ) -> "PosterWorkflow":
        return cls(
            canvas_width=config.canvas_width,
            canvas_height=config.canvas_height,
            fetcher=fetcher,
            publisher=publisher or ArtworkPublisher(config.output_path),
            placeholder=load_placeholder(config.placeholder_path),
        )

    def handle(self, notification: PlaybackNotification) -> WorkflowResult:
        decision = classify(notification)
        label = notification.title or notification.raw_type or "unknown"

        if isinstance(decision, Ignore):
            logger.debug(f"Ignoring notification ({decision.reason})")
            return WorkflowResult(decision=decision, success=True, message=decision.reason)

        try:
            if isinstance(decision, ShowBlank):
                logger.info("Media stopped, showing placeholder")
                published = self.publisher.publish(self.placeholder, notification.sequence)
            else:
                logger.info(f"Now playing: {label} ({notification.raw_type})")
                published = self._render_artwork(decision, notification.sequence)
        except PosterError as exc:
            logger.error(f"{type(exc).__name__} while handling {notification.raw_event} for {label}: {exc}")
            return WorkflowResult(decision=decision, success=False, message=str(exc))

        message = "" if published else "superseded by a newer event"
        return WorkflowResult(decision=decision, success=True, published=published, message=message)

    def _render_artwork(self, decision: ShowArtwork, sequence: Optional[int]) -> bool:
        data = self.fetcher.fetch(decision.reference)
        image = decode_image(data)
        canvas = composite(image, self.canvas_width, self.canvas_height)
        return self.publisher.publish(encode_png(canvas), sequence)
