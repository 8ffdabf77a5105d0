"""Layout selection and terminal rendering for link preview cards."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union, assert_never

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table
from rich.text import Text

from .errors import LoaderSetupError
from .models.states import (
    ImageEmpty,
    ImageError,
    ImageLoading,
    ImageLoadState,
    ImageSuccess,
    LoadedImage,
    PreviewFailure,
    PreviewLoading,
    PreviewState,
    PreviewSuccess,
)

INVALID_LINK_MESSAGE = "Provided link is invalid"
UNTITLED = "Untitled"

BROKEN_IMAGE_GLYPH = "\u25a8"
LINK_OFF_GLYPH = "\u2300"
TITLE_MAX_CHARS = 96
_HALF_BLOCK = "\u2580"


@dataclass(frozen=True)
class LoadingLayout:
    pass


@dataclass(frozen=True)
class SuccessLayout:
    title: str
    host: str
    image_url: str | None
    link: str


@dataclass(frozen=True)
class FailureLayout:
    link: str
    message: str = INVALID_LINK_MESSAGE


Layout = Union[LoadingLayout, SuccessLayout, FailureLayout]


def select_layout(state: PreviewState, link: str, *, untitled: str = UNTITLED) -> Layout:
    """Map a preview state to the layout that should be drawn for it."""
    if isinstance(state, PreviewLoading):
        return LoadingLayout()
    if isinstance(state, PreviewSuccess):
        metadata = state.metadata
        title = (metadata.title or "").strip() or untitled
        if len(title) > TITLE_MAX_CHARS:
            title = title[: TITLE_MAX_CHARS - 1].rstrip() + "\u2026"
        return SuccessLayout(
            title=title,
            host=metadata.host,
            image_url=metadata.image_url,
            link=link,
        )
    if isinstance(state, PreviewFailure):
        return FailureLayout(link=link)
    assert_never(state)


def render_image(image: LoadedImage) -> Text:
    """Draw a decoded image with upper-half blocks, two pixel rows per line."""
    pixels = image.image
    width, height = pixels.size
    text = Text(no_wrap=True, overflow="crop")
    for y in range(0, height - 1, 2):
        for x in range(width):
            top = pixels.getpixel((x, y))
            bottom = pixels.getpixel((x, y + 1))
            text.append(_HALF_BLOCK, style=f"rgb({top[0]},{top[1]},{top[2]}) on rgb({bottom[0]},{bottom[1]},{bottom[2]})")
        if y + 2 < height - 1:
            text.append("\n")
    return text


def render_thumbnail(
    state: ImageLoadState,
    setup_error: LoaderSetupError | None = None,
    *,
    spinner: str = "dots",
) -> RenderableType:
    if setup_error is not None:
        return Text(LINK_OFF_GLYPH, style="dim")
    if isinstance(state, ImageEmpty):
        return Text("")
    if isinstance(state, ImageLoading):
        return Spinner(spinner)
    if isinstance(state, ImageError):
        return Text(BROKEN_IMAGE_GLYPH, style="dim")
    if isinstance(state, ImageSuccess):
        return render_image(state.image)
    assert_never(state)


def render_layout(
    layout: Layout,
    thumbnail: RenderableType | None = None,
    *,
    spinner: str = "dots",
    width: int | None = None,
) -> Panel:
    """Render a layout as a rounded card."""
    if isinstance(layout, LoadingLayout):
        body: RenderableType = Spinner(spinner, text=Text("Loading preview", style="dim"))
        return Panel(body, width=width, border_style="dim")

    if isinstance(layout, SuccessLayout):
        grid = Table.grid(padding=(0, 1))
        grid.add_column(no_wrap=True)
        grid.add_column(ratio=1)
        details = Group(
            Text(layout.title, style="bold", overflow="ellipsis"),
            Text(layout.host, style="dim"),
        )
        grid.add_row(thumbnail if thumbnail is not None else Text(""), details)
        return Panel(grid, width=width, border_style="cyan")

    if isinstance(layout, FailureLayout):
        message = Text.assemble(
            (f"{LINK_OFF_GLYPH} ", "bold red"),
            (layout.message, "bold"),
            justify="center",
        )
        raw = Text(layout.link, style="dim", justify="center")
        return Panel(Group(message, raw), width=width, border_style="red")

    assert_never(layout)
