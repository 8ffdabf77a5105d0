"""Metadata fetching: the collaborator that turns a URL into LinkMetadata."""

from __future__ import annotations

import logging
from typing import Protocol
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from .errors import FetchError
from .link_utils import validate_url
from .models.config import FetchConfig
from .models.links import LinkMetadata, ParsedURL

log = logging.getLogger(__name__)

_HTML_TYPES = ("text/html", "application/xhtml+xml")

_TITLE_META = (
    {"property": "og:title"},
    {"name": "twitter:title"},
)
_DESCRIPTION_META = (
    {"property": "og:description"},
    {"name": "twitter:description"},
    {"name": "description"},
)
_IMAGE_META = (
    {"property": "og:image"},
    {"property": "og:image:url"},
    {"name": "twitter:image"},
    {"name": "twitter:image:src"},
)


class MetadataFetcher(Protocol):
    """Anything that can asynchronously describe a validated URL."""

    async def __call__(self, url: ParsedURL) -> LinkMetadata: ...


def _meta_content(soup: BeautifulSoup, candidates: tuple[dict[str, str], ...]) -> str | None:
    for attrs in candidates:
        tag = soup.find("meta", attrs=attrs)
        if tag is None:
            continue
        content = (tag.get("content") or "").strip()
        if content:
            return content
    return None


def _resolve_image_url(base_url: str, image_url: str | None) -> str | None:
    if not image_url or image_url.startswith("data:"):
        return None
    if image_url.startswith("//"):
        scheme = base_url.split(":", 1)[0]
        return f"{scheme}:{image_url}"
    return urljoin(base_url, image_url)


def display_host(host: str) -> str:
    """Host as shown on a card: lower-cased, without a leading www."""
    host = host.lower()
    return host[4:] if host.startswith("www.") else host


def parse_html_metadata(html: str, final_url: str) -> LinkMetadata:
    """Extract title, description and thumbnail from an HTML document."""
    soup = BeautifulSoup(html, "html.parser")

    title = _meta_content(soup, _TITLE_META)
    if not title and soup.title and soup.title.string:
        title = soup.title.string.strip() or None

    description = _meta_content(soup, _DESCRIPTION_META)

    image = _meta_content(soup, _IMAGE_META)
    if not image:
        link_tag = soup.find("link", rel="image_src")
        if link_tag is not None:
            image = (link_tag.get("href") or "").strip() or None

    parsed = validate_url(final_url)
    host = display_host(parsed.host) if parsed else ""

    return LinkMetadata(
        title=title,
        host=host,
        image_url=_resolve_image_url(final_url, image),
        description=description,
        url=final_url,
    )


class HttpMetadataFetcher:
    """Fetch link metadata over HTTP and parse Open Graph / Twitter card tags.

    The fetcher owns its ``httpx.AsyncClient`` unless one is passed in; use it
    as an async context manager (or call ``aclose``) to release the client.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        client: httpx.AsyncClient | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or FetchConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            transport=transport,
            timeout=self._config.timeout_seconds,
            follow_redirects=self._config.follow_redirects,
            headers={"User-Agent": self._config.user_agent},
        )

    async def __aenter__(self) -> HttpMetadataFetcher:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __call__(self, url: ParsedURL) -> LinkMetadata:
        if url.scheme not in ("http", "https"):
            raise FetchError(f"unsupported scheme: {url.scheme}")

        target = url.geturl()
        try:
            async with self._client.stream("GET", target) as response:
                response.raise_for_status()
                content_type = response.headers.get("content-type", "").split(";", 1)[0].strip().lower()
                final_url = str(response.url)

                if content_type.startswith("image/"):
                    parsed = validate_url(final_url) or url
                    return LinkMetadata(host=display_host(parsed.host), image_url=final_url, url=final_url)

                if content_type and content_type not in _HTML_TYPES:
                    raise FetchError(f"unsupported content type {content_type!r} for {target}")

                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) >= self._config.max_bytes:
                        del body[self._config.max_bytes :]
                        break
                encoding = response.charset_encoding or "utf-8"
        except httpx.TimeoutException as e:
            log.warning("Timeout fetching metadata for %s", target)
            raise FetchError(f"timeout fetching {target}") from e
        except httpx.HTTPStatusError as e:
            log.warning("HTTP %d fetching metadata for %s", e.response.status_code, target)
            raise FetchError(f"HTTP {e.response.status_code} for {target}") from e
        except httpx.HTTPError as e:
            log.warning("Error fetching metadata for %s: %s", target, e)
            raise FetchError(str(e) or type(e).__name__) from e

        try:
            html = bytes(body).decode(encoding, errors="replace")
        except LookupError:
            html = bytes(body).decode("utf-8", errors="replace")
        return parse_html_metadata(html, final_url)
