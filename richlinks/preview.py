"""Preview state machine: one link, one fetch, one terminal state."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from .fetcher import MetadataFetcher
from .errors import InvalidURLError
from .link_utils import parse_url
from .models.links import LinkMetadata, ParsedURL
from .models.states import (
    FailureReason,
    PreviewFailure,
    PreviewLoading,
    PreviewState,
    PreviewSuccess,
    is_terminal_preview,
)

log = logging.getLogger(__name__)

StateListener = Callable[[PreviewState], None]


class PreviewStateMachine:
    """
    Own the Loading/Success/Failure state for one preview slot.

    Every call to ``on_link_change`` bumps a generation token. The fetch task it
    launches carries the token it was issued for and its result is applied only
    if that token is still current, so a late answer for a superseded link can
    never overwrite the state of the link that replaced it.
    """

    def __init__(self, fetcher: MetadataFetcher, *, on_change: StateListener | None = None) -> None:
        self._fetcher = fetcher
        self._listeners: list[StateListener] = [on_change] if on_change else []
        self._state: PreviewState = PreviewLoading()
        self._link: str | None = None
        self._generation = 0
        self._task: asyncio.Task | None = None

    @property
    def state(self) -> PreviewState:
        return self._state

    @property
    def link(self) -> str | None:
        return self._link

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def settled(self) -> bool:
        return is_terminal_preview(self._state)

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def on_link_change(self, link: str) -> asyncio.Task | None:
        """Restart the pipeline for ``link``; returns the fetch task, if any."""
        self._generation += 1
        token = self._generation
        self._link = link
        self._cancel_in_flight()
        self._set_state(PreviewLoading())

        try:
            parsed = parse_url(link)
        except InvalidURLError as e:
            log.debug("Rejected invalid link %r: %s", link, e)
            self._set_state(PreviewFailure(FailureReason.INVALID_URL, str(e)))
            return None

        self._task = asyncio.get_running_loop().create_task(
            self._fetch(token, parsed),
            name=f"richlinks-preview-{token}",
        )
        return self._task

    async def wait(self) -> PreviewState:
        """Wait for the current fetch (if any) and return the resulting state."""
        task = self._task
        if task is not None:
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
        return self._state

    def close(self) -> None:
        """Tear down: supersede and cancel whatever is in flight."""
        self._generation += 1
        self._cancel_in_flight()

    async def _fetch(self, token: int, url: ParsedURL) -> None:
        try:
            metadata = await self._fetcher(url)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            log.warning("Metadata fetch failed for %s: %s", url, e)
            outcome: PreviewState = PreviewFailure(FailureReason.FETCH_ERROR, str(e) or type(e).__name__)
        else:
            if isinstance(metadata, LinkMetadata):
                outcome = PreviewSuccess(metadata)
            else:
                log.warning("Fetcher returned %s instead of LinkMetadata for %s", type(metadata).__name__, url)
                outcome = PreviewFailure(FailureReason.FETCH_ERROR, "unparseable metadata")
        self._apply(token, outcome)

    def _apply(self, token: int, outcome: PreviewState) -> bool:
        if token != self._generation:
            log.debug("Discarding stale result for generation %d (current %d)", token, self._generation)
            return False
        self._set_state(outcome)
        return True

    def _cancel_in_flight(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    def _set_state(self, state: PreviewState) -> None:
        self._state = state
        log.debug("Preview %r -> %s", self._link, type(state).__name__)
        for listener in self._listeners:
            listener(state)
