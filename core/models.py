from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

from core.errors import ReceiverDecodeError


class EventKind(str, Enum):
    PLAY = "media.play"
    RESUME = "media.resume"
    STOP = "media.stop"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> "EventKind":
        for kind in (cls.PLAY, cls.RESUME, cls.STOP):
            if value == kind.value:
                return kind
        return cls.OTHER


class MediaKind(str, Enum):
    MOVIE = "movie"
    EPISODE = "episode"
    OTHER = "other"     # trailer, clip, track, photo...

    @classmethod
    def parse(cls, value: str) -> "MediaKind":
        for kind in (cls.MOVIE, cls.EPISODE):
            if value == kind.value:
                return kind
        return cls.OTHER


@dataclass(frozen=True)
class PlaybackNotification:
    """
    One Plex webhook event, reduced to what the renderer needs.
    Created per request and discarded once classified.
    """
    event: EventKind
    media_kind: MediaKind
    thumb: str = ""                  # Episode/movie level artwork path
    grandparent_thumb: str = ""      # Show level artwork path (episodes only)
    title: str = ""
    raw_event: str = ""
    raw_type: str = ""
    sequence: Optional[int] = None   # Receipt order, used to drop stale renders

    @classmethod
    def from_payload(cls, payload: Any, sequence: Optional[int] = None) -> "PlaybackNotification":
        """
        Build a notification from the decoded Plex JSON payload:
        {"event": "...", "Metadata": {"type", "title", "thumb", "grandparentThumb"}}
        """
        if not isinstance(payload, Mapping):
            raise ReceiverDecodeError("Payload must be a JSON object")

        metadata = payload.get("Metadata") or {}
        if not isinstance(metadata, Mapping):
            raise ReceiverDecodeError("Payload 'Metadata' must be a JSON object")

        raw_event = _as_text(payload.get("event"))
        raw_type = _as_text(metadata.get("type"))
        return cls(
            event=EventKind.parse(raw_event),
            media_kind=MediaKind.parse(raw_type),
            thumb=_as_text(metadata.get("thumb")),
            grandparent_thumb=_as_text(metadata.get("grandparentThumb")),
            title=_as_text(metadata.get("title")),
            raw_event=raw_event,
            raw_type=raw_type,
            sequence=sequence,
        )


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class ShowArtwork:
    reference: str


@dataclass(frozen=True)
class ShowBlank:
    pass


@dataclass(frozen=True)
class Ignore:
    reason: str = ""


RenderDecision = Union[ShowArtwork, ShowBlank, Ignore]


@dataclass
class WorkflowResult:
    """Outcome of handling a single notification."""
    decision: RenderDecision
    success: bool
    published: bool = False
    message: str = ""
