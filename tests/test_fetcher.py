"""Tests for HTML metadata extraction and the HTTP fetcher."""

import asyncio

import httpx
import pytest

from richlinks.errors import FetchError
from richlinks.fetcher import HttpMetadataFetcher, display_host, parse_html_metadata
from richlinks.link_utils import validate_url
from richlinks.models import FetchConfig, LinkMetadata

ARTICLE_HTML = """
<html>
  <head>
    <title>Fallback title</title>
    <meta property="og:title" content="Example">
    <meta property="og:description" content="An example article">
    <meta property="og:image" content="/img.png">
  </head>
  <body><p>hello</p></body>
</html>
"""


def _fetch(link, handler, config=None):
    async def scenario():
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
        async with client:
            fetcher = HttpMetadataFetcher(config, client=client)
            return await fetcher(validate_url(link))

    return asyncio.run(scenario())


def _html(body: str, status: int = 200, content_type: str = "text/html; charset=utf-8"):
    def handler(request):
        return httpx.Response(status, text=body, headers={"content-type": content_type})

    return handler


def test_parse_html_metadata_prefers_open_graph() -> None:
    metadata = parse_html_metadata(ARTICLE_HTML, "https://www.example.com/article")

    assert metadata == LinkMetadata(
        title="Example",
        host="example.com",
        image_url="https://www.example.com/img.png",
        description="An example article",
        url="https://www.example.com/article",
    )


def test_parse_html_metadata_falls_back_to_twitter_and_title() -> None:
    html = """
    <html><head>
      <title>  Plain title  </title>
      <meta name="twitter:image" content="//cdn.example.net/card.jpg">
      <meta name="description" content="plain description">
    </head></html>
    """
    metadata = parse_html_metadata(html, "https://blog.example.org/post")

    assert metadata.title == "Plain title"
    assert metadata.image_url == "https://cdn.example.net/card.jpg"
    assert metadata.description == "plain description"
    assert metadata.host == "blog.example.org"


def test_parse_html_metadata_drops_inline_images_and_missing_fields() -> None:
    html = '<html><head><meta property="og:image" content="data:image/png;base64,AAAA"></head></html>'
    metadata = parse_html_metadata(html, "https://example.com/")

    assert metadata.title is None
    assert metadata.image_url is None
    assert metadata.description is None


def test_parse_html_metadata_uses_image_src_link() -> None:
    html = '<html><head><link rel="image_src" href="thumb.jpg"></head></html>'
    metadata = parse_html_metadata(html, "https://example.com/docs/page")

    assert metadata.image_url == "https://example.com/docs/thumb.jpg"


def test_display_host_strips_www() -> None:
    assert display_host("WWW.Example.com") == "example.com"
    assert display_host("api.example.com") == "api.example.com"


def test_fetcher_returns_metadata_for_html_page() -> None:
    metadata = _fetch("https://example.com/article", _html(ARTICLE_HTML))

    assert metadata.title == "Example"
    assert metadata.host == "example.com"
    assert metadata.image_url == "https://example.com/img.png"


def test_fetcher_follows_redirects_and_reports_final_host() -> None:
    def handler(request):
        if request.url.host == "short.example":
            return httpx.Response(301, headers={"location": "https://www.example.com/article"})
        return httpx.Response(200, text=ARTICLE_HTML, headers={"content-type": "text/html"})

    metadata = _fetch("https://short.example/abc", handler)

    assert metadata.host == "example.com"
    assert metadata.url == "https://www.example.com/article"


def test_fetcher_describes_direct_image_links() -> None:
    def handler(request):
        return httpx.Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})

    metadata = _fetch("https://example.com/img.png", handler)

    assert metadata.title is None
    assert metadata.image_url == "https://example.com/img.png"
    assert metadata.host == "example.com"


@pytest.mark.parametrize("status", [404, 500, 503])
def test_fetcher_raises_fetch_error_for_non_2xx(status) -> None:
    with pytest.raises(FetchError, match=f"HTTP {status}"):
        _fetch("https://example.com/article", _html("nope", status=status))


def test_fetcher_raises_fetch_error_on_timeout() -> None:
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(FetchError, match="timeout"):
        _fetch("https://example.com/article", handler)


def test_fetcher_rejects_unsupported_content_type() -> None:
    with pytest.raises(FetchError, match="unsupported content type"):
        _fetch("https://example.com/file.zip", _html("PK", content_type="application/zip"))


def test_fetcher_rejects_non_http_schemes() -> None:
    def handler(request):
        raise AssertionError("should not be called")

    with pytest.raises(FetchError, match="unsupported scheme"):
        _fetch("ftp://files.example.com/readme", handler)


def test_fetcher_truncates_large_documents() -> None:
    html = "<html><head><title>Early title</title></head><body>" + ("x" * 5000) + "</body></html>"
    metadata = _fetch("https://example.com/big", _html(html), FetchConfig(max_bytes=200))

    assert metadata.title == "Early title"


def test_fetcher_sends_configured_user_agent() -> None:
    seen = []

    def handler(request):
        seen.append(request.headers.get("user-agent"))
        return httpx.Response(200, text=ARTICLE_HTML, headers={"content-type": "text/html"})

    async def scenario():
        fetcher = HttpMetadataFetcher(FetchConfig(user_agent="richlinks-test/1.0"), transport=httpx.MockTransport(handler))
        async with fetcher:
            return await fetcher(validate_url("https://example.com/article"))

    metadata = asyncio.run(scenario())

    assert metadata.title == "Example"
    assert seen == ["richlinks-test/1.0"]
