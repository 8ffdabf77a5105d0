"""Render states for link previews and thumbnails.

Both state families are closed unions of frozen dataclasses. Consumers branch
with ``isinstance`` and finish with ``assert_never`` so a new variant shows up
as a type error at every unhandled site.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from PIL import Image

from .links import LinkMetadata


class FailureReason(str, Enum):
    """Why a preview ended in the failure state."""

    INVALID_URL = "invalid-url"
    FETCH_ERROR = "fetch-error"


@dataclass(frozen=True)
class PreviewLoading:
    pass


@dataclass(frozen=True)
class PreviewSuccess:
    metadata: LinkMetadata


@dataclass(frozen=True)
class PreviewFailure:
    reason: FailureReason
    detail: str = ""


PreviewState = Union[PreviewLoading, PreviewSuccess, PreviewFailure]


@dataclass(frozen=True)
class LoadedImage:
    """A decoded thumbnail, already cropped to its target frame."""

    url: str
    format: str | None
    original_size: tuple[int, int]
    image: Image.Image = field(repr=False, compare=False)

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


@dataclass(frozen=True)
class ImageEmpty:
    pass


@dataclass(frozen=True)
class ImageLoading:
    pass


@dataclass(frozen=True)
class ImageSuccess:
    image: LoadedImage


@dataclass(frozen=True)
class ImageError:
    reason: str


ImageLoadState = Union[ImageEmpty, ImageLoading, ImageSuccess, ImageError]


def is_terminal_preview(state: PreviewState) -> bool:
    return isinstance(state, (PreviewSuccess, PreviewFailure))


def is_terminal_image(state: ImageLoadState) -> bool:
    return isinstance(state, (ImageSuccess, ImageError))
