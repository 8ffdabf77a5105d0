"""Preview and validate commands."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import httpx
import rich_click as click
from rich.console import Group
from rich.live import Live
from rich.markup import escape
from rich.table import Table

from ..card import LinkPreviewCard
from ..config import get_settings
from ..fetcher import HttpMetadataFetcher
from ..image_loader import ImageLoader
from ..errors import InvalidURLError
from ..link_utils import extract_urls_from_text, parse_url
from ..models.config import RichlinksConfig
from ..models.states import (
    ImageEmpty,
    ImageError,
    ImageLoading,
    ImageSuccess,
    PreviewFailure,
    PreviewLoading,
    PreviewSuccess,
)
from ._console import console, status_icon


def _render_cards(cards: list[LinkPreviewCard]) -> Group:
    return Group(*(card.render() for card in cards))


async def _run_previews(
    links: list[str],
    settings: RichlinksConfig,
    *,
    show_images: bool = True,
    live: bool = True,
) -> list[LinkPreviewCard]:
    """Run one card per link until every card has settled."""
    async with (
        HttpMetadataFetcher(settings.fetch) as fetcher,
        httpx.AsyncClient(timeout=settings.image.timeout_seconds, follow_redirects=True) as image_client,
    ):
        cards = [
            LinkPreviewCard(
                link,
                fetcher=fetcher,
                loader_factory=lambda: ImageLoader(settings.image, client=image_client),
                display=settings.display,
                show_images=show_images,
            )
            for link in links
        ]
        for card in cards:
            card.start()

        try:
            if live:
                refresh = settings.display.refresh_per_second
                with Live(_render_cards(cards), console=console, refresh_per_second=refresh) as view:
                    while not all(card.settled for card in cards):
                        await asyncio.sleep(1 / refresh)
                        view.update(_render_cards(cards))
                    view.update(_render_cards(cards))
            else:
                await asyncio.gather(*(card.wait() for card in cards))
        finally:
            for card in cards:
                if not card.settled:
                    card.close()

    return cards


def _card_summary(card: LinkPreviewCard) -> dict[str, Any]:
    state = card.state
    summary: dict[str, Any] = {"link": card.link}
    if isinstance(state, PreviewLoading):
        summary["state"] = "loading"
    elif isinstance(state, PreviewSuccess):
        summary["state"] = "success"
        summary["metadata"] = state.metadata.model_dump()
        thumb = card.thumbnail.state
        if card.thumbnail.setup_error is not None:
            summary["thumbnail"] = {"state": "unavailable", "detail": str(card.thumbnail.setup_error)}
        elif isinstance(thumb, ImageSuccess):
            width, height = thumb.image.original_size
            summary["thumbnail"] = {"state": "success", "format": thumb.image.format, "width": width, "height": height}
        elif isinstance(thumb, ImageError):
            summary["thumbnail"] = {"state": "error", "detail": thumb.reason}
        elif isinstance(thumb, (ImageEmpty, ImageLoading)):
            summary["thumbnail"] = {"state": "skipped" if isinstance(thumb, ImageEmpty) else "loading"}
    elif isinstance(state, PreviewFailure):
        summary["state"] = "failure"
        summary["reason"] = state.reason.value
        summary["detail"] = state.detail
    return summary


@click.command()
@click.argument("links", nargs=-1)
@click.option("--text", "-t", help="Preview every link found in this text")
@click.option("--open", "open_links", is_flag=True, help="Open successfully previewed links in the browser")
@click.option("--no-images", is_flag=True, help="Skip thumbnail loading")
@click.option("--json", "as_json", is_flag=True, help="Print final states as JSON")
def preview(links: tuple[str, ...], text: str | None, open_links: bool, no_images: bool, as_json: bool):
    """Render rich preview cards for one or more links."""
    candidates = list(links) + [url for url in extract_urls_from_text(text) if url not in links]
    if not candidates:
        raise click.UsageError("Provide at least one link, or --text containing links.")

    settings = get_settings()
    cards = asyncio.run(_run_previews(candidates, settings, show_images=not no_images, live=not as_json))

    if as_json:
        click.echo(json.dumps([_card_summary(card) for card in cards], indent=2))

    if open_links:
        for card in cards:
            card.activate()

    if any(isinstance(card.state, PreviewFailure) for card in cards):
        sys.exit(1)


@click.command()
@click.argument("link")
def validate(link: str):
    """Check whether LINK is a well-formed absolute URL."""
    try:
        parsed = parse_url(link)
    except InvalidURLError as e:
        console.print(f"{status_icon(False)} Invalid link: {escape(link)}")
        console.print(f"  [dim]{escape(str(e))}[/dim]")
        sys.exit(1)

    table = Table(show_header=False)
    table.add_column("Part", style="bold")
    table.add_column("Value")
    table.add_row("URL", escape(parsed.geturl()))
    table.add_row("Scheme", parsed.scheme)
    table.add_row("Host", escape(parsed.host))
    table.add_row("Port", str(parsed.port) if parsed.port is not None else "-")
    table.add_row("Path", escape(parsed.path) or "/")
    table.add_row("Query", escape(parsed.query) or "-")
    table.add_row("Fragment", escape(parsed.fragment) or "-")

    console.print(f"{status_icon(True)} Valid link")
    console.print(table)
