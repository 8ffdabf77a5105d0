"""Open previewed links in the user's browser."""

import logging

import click

log = logging.getLogger(__name__)


def open_link(link: str) -> None:
    """Fire-and-forget launch of ``link``; failures are logged, not raised."""
    try:
        code = click.launch(link)
    except Exception as e:
        log.error("Could not open %s: %s", link, e)
        return
    if code != 0:
        log.error("Opening %s exited with code %d", link, code)
