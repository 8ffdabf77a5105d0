"""Tests for layout selection and card rendering."""

import io

from PIL import Image
from rich.console import Console
from rich.spinner import Spinner

from richlinks.errors import LoaderSetupError
from richlinks.models import (
    FailureReason,
    ImageEmpty,
    ImageError,
    ImageLoading,
    ImageSuccess,
    LinkMetadata,
    LoadedImage,
    PreviewFailure,
    PreviewLoading,
    PreviewSuccess,
)
from richlinks.renderer import (
    BROKEN_IMAGE_GLYPH,
    INVALID_LINK_MESSAGE,
    LINK_OFF_GLYPH,
    TITLE_MAX_CHARS,
    FailureLayout,
    LoadingLayout,
    SuccessLayout,
    render_image,
    render_layout,
    render_thumbnail,
    select_layout,
)


def _text(renderable) -> str:
    console = Console(file=io.StringIO(), width=80, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


def _loaded(width=4, height=4) -> LoadedImage:
    return LoadedImage(
        url="https://example.com/img.png",
        format="PNG",
        original_size=(40, 20),
        image=Image.new("RGB", (width, height), (10, 20, 30)),
    )


def test_select_layout_maps_every_state() -> None:
    link = "https://example.com/article"
    metadata = LinkMetadata(title="Example", host="example.com", image_url="https://example.com/img.png")

    assert select_layout(PreviewLoading(), link) == LoadingLayout()
    assert select_layout(PreviewSuccess(metadata), link) == SuccessLayout(
        title="Example",
        host="example.com",
        image_url="https://example.com/img.png",
        link=link,
    )
    assert select_layout(PreviewFailure(FailureReason.FETCH_ERROR, "boom"), link) == FailureLayout(link=link)


def test_select_layout_fills_in_missing_title() -> None:
    layout = select_layout(PreviewSuccess(LinkMetadata(title="  ", host="example.com")), "https://example.com")
    assert layout.title == "Untitled"

    custom = select_layout(PreviewSuccess(LinkMetadata(host="example.com")), "https://example.com", untitled="(none)")
    assert custom.title == "(none)"


def test_select_layout_shortens_long_titles() -> None:
    metadata = LinkMetadata(title="word " * 60, host="example.com")
    layout = select_layout(PreviewSuccess(metadata), "https://example.com")

    assert len(layout.title) <= TITLE_MAX_CHARS
    assert layout.title.endswith("…")


def test_failure_layout_shows_raw_link() -> None:
    output = _text(render_layout(select_layout(PreviewFailure(FailureReason.INVALID_URL), "not a url")))

    assert INVALID_LINK_MESSAGE in output
    assert "not a url" in output
    assert LINK_OFF_GLYPH in output


def test_success_layout_shows_title_host_and_thumbnail() -> None:
    layout = SuccessLayout(title="Example", host="example.com", image_url=None, link="https://example.com")
    output = _text(render_layout(layout, render_thumbnail(ImageError("missing image url"))))

    assert "Example" in output
    assert "example.com" in output
    assert BROKEN_IMAGE_GLYPH in output


def test_loading_layout_uses_spinner() -> None:
    panel = render_layout(LoadingLayout(), spinner="line")

    assert isinstance(panel.renderable, Spinner)
    assert "Loading preview" in _text(panel)


def test_render_thumbnail_per_state() -> None:
    assert isinstance(render_thumbnail(ImageLoading()), Spinner)
    assert _text(render_thumbnail(ImageError("nope"))).strip() == BROKEN_IMAGE_GLYPH
    assert _text(render_thumbnail(ImageEmpty())).strip() == ""
    assert _text(render_thumbnail(ImageSuccess(_loaded()))).strip() != ""


def test_render_thumbnail_setup_failure_wins_over_state() -> None:
    output = _text(render_thumbnail(ImageLoading(), LoaderSetupError("boom")))

    assert output.strip() == LINK_OFF_GLYPH


def test_render_image_draws_two_pixel_rows_per_line() -> None:
    text = render_image(_loaded(width=5, height=6))

    lines = text.plain.split("\n")
    assert len(lines) == 3
    assert all(line == "▀" * 5 for line in lines)
    assert "rgb(10,20,30)" in str(text.spans[0].style)
