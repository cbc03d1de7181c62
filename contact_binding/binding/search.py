"""
Debounced global search.

Each query change bumps a monotonic generation counter. A response is
applied only if its generation is still the latest, so results always follow
query-issue order regardless of arrival order. Superseded debounce timers are
always cancelled; superseded in-flight requests are cancelled too when
`cancel_in_flight` is set, otherwise they resolve and are discarded.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

import structlog

from contact_binding.config import get_settings

from .types import ContactRecord, SearchResultSet

logger = structlog.get_logger()


class SearchGlobal(Protocol):
    """Cross-scope search collaborator."""

    def __call__(self, query: str) -> Awaitable[Sequence[ContactRecord]]:
        ...


ResultsListener = Callable[[SearchResultSet], None]


class SearchController:
    """Latest-query-wins wrapper around the global search collaborator."""

    def __init__(
        self,
        search: SearchGlobal,
        *,
        debounce_seconds: float | None = None,
        min_query_length: int | None = None,
        cancel_in_flight: bool | None = None,
        on_results: ResultsListener | None = None,
    ):
        settings = get_settings()
        self._search = search
        self._debounce_seconds = (
            settings.search_debounce_seconds if debounce_seconds is None else debounce_seconds
        )
        self._min_query_length = (
            settings.search_min_query_length if min_query_length is None else min_query_length
        )
        self._cancel_in_flight = (
            settings.search_cancel_in_flight if cancel_in_flight is None else cancel_in_flight
        )
        self._on_results = on_results

        self._generation = 0
        self._results = SearchResultSet.empty()
        self._pending = False
        self._debounce_task: asyncio.Task[None] | None = None
        self._debounce_elapsed: asyncio.Future[None] | None = None
        self._in_flight: set[asyncio.Task[None]] = set()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def results(self) -> SearchResultSet:
        return self._results

    @property
    def pending(self) -> bool:
        """True while a search for the latest query has not resolved yet."""
        return self._pending

    def on_query_change(self, text: str, *, bound: bool = False) -> None:
        """
        Register a new query.

        A bound draft suppresses the search: editing a bound name is a
        divergence, not a fresh search. A query that needs searching must be
        registered from a running loop; without one this raises before any
        state is touched.
        """
        suppressed = bound or len(text) < self._min_query_length
        loop = None if suppressed else asyncio.get_running_loop()

        self._generation += 1
        generation = self._generation
        self._cancel_superseded()

        if loop is None:
            self._pending = False
            self._set_results(SearchResultSet.empty(text, generation))
            return

        self._pending = True
        elapsed: asyncio.Future[None] = loop.create_future()
        task = loop.create_task(self._run(text, generation, elapsed))
        task.add_done_callback(lambda _: elapsed.cancel())
        self._debounce_task = task
        self._debounce_elapsed = elapsed

    def reset(self) -> None:
        """Cancel all pending work and clear the result set."""
        self._generation += 1
        if self._debounce_task is not None:
            self._debounce_task.cancel()
            self._debounce_task = None
        for task in list(self._in_flight):
            task.cancel()
        self._pending = False
        self._set_results(SearchResultSet.empty(generation=self._generation))

    async def wait_debounced(self) -> None:
        """Wait until the current debounce timer has fired (or was cancelled)."""
        elapsed = self._debounce_elapsed
        if elapsed is None:
            return
        await asyncio.wait({elapsed})

    async def drain(self) -> None:
        """Wait for the debounce timer and every in-flight request to finish."""
        await self.wait_debounced()
        while self._in_flight:
            await asyncio.wait(set(self._in_flight))

    # ---------------------------------------------------------------------
    # Internals
    # ---------------------------------------------------------------------

    def _cancel_superseded(self) -> None:
        if self._debounce_task is not None:
            self._debounce_task.cancel()
            self._debounce_task = None
        if self._cancel_in_flight:
            for task in list(self._in_flight):
                task.cancel()

    async def _run(self, text: str, generation: int, elapsed: asyncio.Future[None]) -> None:
        await asyncio.sleep(self._debounce_seconds)

        # Past the debounce window: from here on this is an in-flight request.
        task = asyncio.current_task()
        if task is not None:
            if self._debounce_task is task:
                self._debounce_task = None
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)
        if not elapsed.done():
            elapsed.set_result(None)

        logger.debug("Issuing global search", query_length=len(text), generation=generation)
        try:
            records = list(await self._search(text))
        except asyncio.CancelledError:
            # Superseding work bumps the generation before cancelling, so a
            # matching generation means the collaborator cancelled itself.
            if generation == self._generation:
                logger.warning(
                    "Global search cancelled by collaborator, treating as no matches",
                    query_length=len(text),
                    generation=generation,
                )
                self._apply(text, generation, [])
            raise
        except Exception as exc:
            logger.warning(
                "Global search failed, treating as no matches",
                query_length=len(text),
                generation=generation,
                error=str(exc),
            )
            records = []

        self._apply(text, generation, records)

    def _apply(self, text: str, generation: int, records: list[ContactRecord]) -> None:
        if generation != self._generation:
            logger.debug(
                "Discarding stale search results",
                generation=generation,
                latest_generation=self._generation,
            )
            return
        self._pending = False
        try:
            self._set_results(
                SearchResultSet(query=text, generation=generation, records=tuple(records))
            )
        except Exception:
            # Runs inside a detached task; nobody awaits it to see the error.
            logger.exception("Search results listener failed", generation=generation)

    def _set_results(self, results: SearchResultSet) -> None:
        self._results = results
        if self._on_results is not None:
            self._on_results(results)
