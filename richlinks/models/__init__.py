"""Pydantic models and state types for richlinks."""

from __future__ import annotations

from .config import (
    DisplayConfig,
    FetchConfig,
    ImageConfig,
    RichlinksConfig,
)
from .links import (
    LinkMetadata,
    ParsedURL,
)
from .states import (
    FailureReason,
    ImageEmpty,
    ImageError,
    ImageLoadState,
    ImageLoading,
    ImageSuccess,
    LoadedImage,
    PreviewFailure,
    PreviewLoading,
    PreviewState,
    PreviewSuccess,
    is_terminal_image,
    is_terminal_preview,
)

__all__ = [
    "DisplayConfig",
    "FailureReason",
    "FetchConfig",
    "ImageConfig",
    "ImageEmpty",
    "ImageError",
    "ImageLoadState",
    "ImageLoading",
    "ImageSuccess",
    "LinkMetadata",
    "LoadedImage",
    "ParsedURL",
    "PreviewFailure",
    "PreviewLoading",
    "PreviewState",
    "PreviewSuccess",
    "RichlinksConfig",
    "is_terminal_image",
    "is_terminal_preview",
]
