from __future__ import annotations

from core.models import (
    EventKind,
    Ignore,
    MediaKind,
    PlaybackNotification,
    RenderDecision,
    ShowArtwork,
    ShowBlank,
)

_DISPLAYED_MEDIA = (MediaKind.MOVIE, MediaKind.EPISODE)
_START_EVENTS = (EventKind.PLAY, EventKind.RESUME)


def classify(notification: PlaybackNotification) -> RenderDecision:
    """
    Decide what a notification does to the published artwork.

    Trailers, clips and music are never displayed. Episodes prefer the
    show-level art (grandparentThumb) over the episode still when present.
    """
    if notification.media_kind not in _DISPLAYED_MEDIA:
        return Ignore(f"media type {notification.raw_type!r}")

    if notification.event in _START_EVENTS:
        reference = notification.thumb
        if notification.media_kind is MediaKind.EPISODE and notification.grandparent_thumb:
            reference = notification.grandparent_thumb
        return ShowArtwork(reference)

    if notification.event is EventKind.STOP:
        return ShowBlank()

    return Ignore(f"event {notification.raw_event!r}")
