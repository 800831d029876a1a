"""Error types raised across the now-playing pipeline."""


class PosterError(Exception):
    """Base class for every error raised by the pipeline."""


class ReceiverDecodeError(PosterError):
    """Inbound webhook request could not be turned into a notification."""


class FetchError(PosterError):
    """Artwork could not be retrieved from the Plex server."""


class DecodeError(PosterError):
    """Fetched bytes are not an image Pillow can read."""


class CompositeError(PosterError):
    """Image or canvas geometry is degenerate."""


class PublishError(PosterError):
    """Writing or renaming the published file failed."""


class ConfigurationError(PosterError):
    """Startup configuration is missing or invalid. Fatal."""
