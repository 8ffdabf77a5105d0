"""Error taxonomy for the link preview pipeline.

These exceptions are raised inside component internals only. Each component
boundary converts them into state values (``PreviewFailure``, ``ImageError``,
``LoaderFailed``) before anything reaches its caller.
"""


class RichlinksError(Exception):
    """Base class for richlinks errors."""


class InvalidURLError(RichlinksError):
    """Raw link failed structural validation."""


class FetchError(RichlinksError):
    """Metadata fetch failed, timed out, or returned an unusable response."""


class ImageLoadError(RichlinksError):
    """Thumbnail fetch or decode failed."""


class LoaderSetupError(RichlinksError):
    """Image loading pipeline could not be constructed."""
