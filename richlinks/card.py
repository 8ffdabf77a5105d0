"""The link preview card: preview state, thumbnail and rendering for one link."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from rich.panel import Panel

from .fetcher import MetadataFetcher
from .image_loader import LoaderFactory, Thumbnail
from .models.config import DisplayConfig
from .models.states import ImageLoadState, PreviewLoading, PreviewState, PreviewSuccess
from .opener import open_link
from .preview import PreviewStateMachine
from .renderer import Layout, render_layout, render_thumbnail, select_layout

log = logging.getLogger(__name__)


class LinkPreviewCard:
    """One widget instance: a link, its preview state machine and its thumbnail."""

    def __init__(
        self,
        link: str,
        *,
        fetcher: MetadataFetcher,
        loader_factory: LoaderFactory,
        opener: Callable[[str], None] = open_link,
        display: DisplayConfig | None = None,
        show_images: bool = True,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._link = link
        self._opener = opener
        self._display = display or DisplayConfig()
        self._show_images = show_images
        self._on_change = on_change
        self._started = False
        self._thumbnail = Thumbnail(loader_factory, on_change=self._thumbnail_changed)
        self._machine = PreviewStateMachine(fetcher, on_change=self._preview_changed)

    @property
    def link(self) -> str:
        return self._link

    @property
    def state(self) -> PreviewState:
        return self._machine.state

    @property
    def thumbnail(self) -> Thumbnail:
        return self._thumbnail

    @property
    def layout(self) -> Layout:
        return select_layout(self._machine.state, self._link, untitled=self._display.untitled_text)

    @property
    def settled(self) -> bool:
        if not self._machine.settled:
            return False
        if self._show_images and isinstance(self._machine.state, PreviewSuccess):
            return self._thumbnail.settled
        return True

    def start(self) -> asyncio.Task | None:
        """Launch the pipeline for the current link. Needs a running event loop."""
        self._started = True
        return self._machine.on_link_change(self._link)

    def set_link(self, link: str) -> asyncio.Task | None:
        """Point the card at a new link; an unchanged link keeps its state."""
        if self._started and link == self._link:
            return None
        self._link = link
        return self.start()

    def activate(self) -> bool:
        """Open the link if the card is showing a successful preview."""
        if not isinstance(self._machine.state, PreviewSuccess):
            return False
        self._opener(self._link)
        return True

    async def wait(self) -> PreviewState:
        state = await self._machine.wait()
        if self._show_images and isinstance(state, PreviewSuccess):
            await self._thumbnail.wait()
        return self._machine.state

    def close(self) -> None:
        self._machine.close()
        self._thumbnail.hide()

    def render(self) -> Panel:
        layout = self.layout
        thumbnail = None
        if self._show_images:
            thumbnail = render_thumbnail(
                self._thumbnail.state,
                self._thumbnail.setup_error,
                spinner=self._display.spinner,
            )
        return render_layout(layout, thumbnail, spinner=self._display.spinner, width=self._display.card_width)

    def _preview_changed(self, state: PreviewState) -> None:
        if isinstance(state, PreviewSuccess) and self._show_images:
            self._thumbnail.show(state.metadata.image_url)
        elif isinstance(state, PreviewLoading):
            self._thumbnail.hide()
        self._notify()

    def _thumbnail_changed(self, state: ImageLoadState) -> None:
        log.debug("Thumbnail for %r -> %s", self._link, type(state).__name__)
        self._notify()

    def _notify(self) -> None:
        if self._on_change:
            self._on_change()
