"""Thumbnail loading with placeholder and fallback states."""

from __future__ import annotations

import asyncio
import io
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from typing import Union

import httpx
from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import ImageLoadError, LoaderSetupError
from .models.config import ImageConfig
from .models.states import (
    ImageEmpty,
    ImageError,
    ImageLoading,
    ImageLoadState,
    ImageSuccess,
    LoadedImage,
    is_terminal_image,
)

log = logging.getLogger(__name__)

MISSING_IMAGE_URL = "missing image url"


def decode_image(url: str, body: bytes, frame: tuple[int, int]) -> LoadedImage:
    """Decode ``body`` and crop it to fill ``frame`` (width, height in pixels)."""
    try:
        with Image.open(io.BytesIO(body)) as img:
            img.load()
            fmt = img.format
            original_size = img.size
            fitted = ImageOps.fit(img.convert("RGB"), frame, method=Image.Resampling.LANCZOS)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageLoadError(f"cannot decode image from {url}: {e}") from e
    return LoadedImage(url=url, format=fmt, original_size=original_size, image=fitted)


class ImageLoader:
    """Load one thumbnail URL as a stream of ImageLoadState values.

    An empty or missing URL fails fast: the stream still opens with
    ``ImageLoading`` but resolves to ``ImageError`` without touching the
    network.
    """

    def __init__(self, config: ImageConfig | None = None, client: httpx.AsyncClient | None = None) -> None:
        self._config = config or ImageConfig()
        self._client = client

    @property
    def frame(self) -> tuple[int, int]:
        # Each terminal row shows two pixel rows.
        return (self._config.frame_width, self._config.frame_height * 2)

    async def load(self, url: str | None) -> AsyncIterator[ImageLoadState]:
        yield ImageLoading()

        if not url or not url.strip():
            yield ImageError(MISSING_IMAGE_URL)
            return

        try:
            body = await self.fetch(url)
            image = decode_image(url, body, self.frame)
        except ImageLoadError as e:
            log.info("Thumbnail unavailable: %s", e)
            yield ImageError(str(e))
            return

        yield ImageSuccess(image)

    async def fetch(self, url: str) -> bytes:
        """Download the image body, enforcing the configured size limit."""
        if self._client is not None:
            return await self._fetch_with(self._client, url)
        async with httpx.AsyncClient(timeout=self._config.timeout_seconds, follow_redirects=True) as client:
            return await self._fetch_with(client, url)

    async def _fetch_with(self, client: httpx.AsyncClient, url: str) -> bytes:
        try:
            async with client.stream("GET", url) as response:
                response.raise_for_status()
                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) > self._config.max_bytes:
                        raise ImageLoadError(f"image at {url} exceeds {self._config.max_bytes} bytes")
        except httpx.HTTPStatusError as e:
            raise ImageLoadError(f"HTTP {e.response.status_code} for {url}") from e
        except httpx.HTTPError as e:
            raise ImageLoadError(f"error fetching {url}: {e}") from e
        except httpx.InvalidURL as e:
            raise ImageLoadError(f"bad image url {url!r}: {e}") from e
        return bytes(body)


@dataclass(frozen=True)
class LoaderReady:
    stream: AsyncIterator[ImageLoadState]


@dataclass(frozen=True)
class LoaderFailed:
    error: LoaderSetupError


LoaderSetup = Union[LoaderReady, LoaderFailed]
LoaderFactory = Callable[[], ImageLoader]


def start_image_load(url: str | None, loader_factory: LoaderFactory) -> LoaderSetup:
    """Build the loading pipeline for ``url``, reporting setup failure as a value."""
    try:
        loader = loader_factory()
        stream = loader.load(url)
    except Exception as e:
        log.error("Image loader setup failed for %r: %s", url, e)
        return LoaderFailed(LoaderSetupError(str(e) or type(e).__name__))
    return LoaderReady(stream)


ThumbnailListener = Callable[[ImageLoadState], None]


class Thumbnail:
    """Drive one visible thumbnail through its ImageLoadState lifecycle."""

    def __init__(self, loader_factory: LoaderFactory, *, on_change: ThumbnailListener | None = None) -> None:
        self._loader_factory = loader_factory
        self._listeners: list[ThumbnailListener] = [on_change] if on_change else []
        self._state: ImageLoadState = ImageEmpty()
        self._setup_error: LoaderSetupError | None = None
        self._url: str | None = None
        self._generation = 0
        self._task: asyncio.Task | None = None

    @property
    def state(self) -> ImageLoadState:
        return self._state

    @property
    def setup_error(self) -> LoaderSetupError | None:
        return self._setup_error

    @property
    def url(self) -> str | None:
        return self._url

    @property
    def settled(self) -> bool:
        return self._setup_error is not None or is_terminal_image(self._state)

    def add_listener(self, listener: ThumbnailListener) -> None:
        self._listeners.append(listener)

    def show(self, url: str | None) -> asyncio.Task | None:
        """Start loading ``url``; supersedes any load already running."""
        self._generation += 1
        token = self._generation
        self._cancel_in_flight()
        self._url = url
        self._reset()

        setup = start_image_load(url, self._loader_factory)
        if isinstance(setup, LoaderFailed):
            self._setup_error = setup.error
            self._notify()
            return None

        self._task = asyncio.get_running_loop().create_task(
            self._drive(token, setup.stream),
            name=f"richlinks-thumbnail-{token}",
        )
        return self._task

    def hide(self) -> None:
        self._generation += 1
        self._cancel_in_flight()
        self._reset()

    async def wait(self) -> ImageLoadState:
        task = self._task
        if task is not None:
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
        return self._state

    async def _drive(self, token: int, stream: AsyncIterator[ImageLoadState]) -> None:
        try:
            async for state in stream:
                if token != self._generation:
                    log.debug("Dropping thumbnail state for stale generation %d", token)
                    break
                self._set_state(state)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            log.exception("Thumbnail stream failed for %r", self._url)
            if token == self._generation:
                self._set_state(ImageError(str(e) or type(e).__name__))
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

    def _cancel_in_flight(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    def _reset(self) -> None:
        changed = self._setup_error is not None or not isinstance(self._state, ImageEmpty)
        self._setup_error = None
        self._state = ImageEmpty()
        if changed:
            self._notify()

    def _set_state(self, state: ImageLoadState) -> None:
        self._state = state
        self._notify()

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self._state)
