from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any, Protocol

from onair.core.models import Event, Filter, NowPlaying
from onair.core.store import PolledField, ViewStateStore
from onair.runtime.upstream import UpstreamError


logger = logging.getLogger(__name__)


class TelemetrySource(Protocol):
    def now_on_air(self) -> NowPlaying | None: ...

    def events_by_type(self, filters: Filter) -> list[Event]: ...

    def spots_stats(self, page: int = 1, limit: int = 50) -> Any: ...


class PollingEngine:
    """Two independent refresh cycles feeding one :class:`ViewStateStore`.

    Each tick dispatches a fresh fetch task without waiting for the previous
    one. Blocking HTTP calls run in a worker thread; every store write happens
    back on the event loop. Responses older than the one already applied for
    the same field are dropped by the store.
    """

    def __init__(
        self,
        store: ViewStateStore,
        client: TelemetrySource,
        *,
        now_playing_interval_ms: int = 3000,
        events_interval_ms: int = 7000,
    ):
        self.store = store
        self.client = client
        self.now_playing_interval = now_playing_interval_ms / 1000.0
        self.events_interval = events_interval_ms / 1000.0
        self._timers: list[asyncio.Task[None]] = []
        self._inflight: set[asyncio.Task[Any]] = set()

    @property
    def running(self) -> bool:
        return any(not timer.done() for timer in self._timers)

    def start(self) -> None:
        self.stop()
        self._dispatch(self.poll_now_playing())
        self._dispatch(self.poll_events())
        self._timers = [
            asyncio.create_task(self._every(self.now_playing_interval, self.poll_now_playing)),
            asyncio.create_task(self._every(self.events_interval, self.poll_events)),
        ]
        logger.info(
            "Polling started (now-on-air every %.1fs, events every %.1fs)",
            self.now_playing_interval,
            self.events_interval,
        )

    def stop(self) -> None:
        for timer in self._timers:
            timer.cancel()
        self._timers = []

    def refresh(self) -> None:
        self._dispatch(self.poll_now_playing())
        self._dispatch(self.poll_events())

    def apply_filter(self, event_type: str, limit: Any, order: Any) -> asyncio.Task[None]:
        filters = self.store.apply_filter(event_type, limit, order)
        logger.info("Filter applied: type=%s limit=%d order=%s", filters.type, filters.limit, filters.order.value)
        return self._dispatch(self.poll_events())

    def load_spots(self, page: int | None = None, limit: int | None = None) -> asyncio.Task[None]:
        if page is not None or limit is not None:
            self.store.set_spots_page(page or self.store.spots_page, limit)
        return self._dispatch(self.poll_spots())

    async def drain(self) -> None:
        """Wait until every fetch dispatched so far has settled."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def poll_now_playing(self) -> None:
        sequence = self.store.next_sequence(PolledField.NOW_PLAYING)
        try:
            item = await asyncio.to_thread(self.client.now_on_air)
        except UpstreamError as exc:
            logger.warning("now-on-air fetch failed: %s", exc)
            self.store.mark_failed()
            return
        self.store.apply_now_playing(item, sequence)

    async def poll_events(self) -> None:
        filters = self.store.filter
        sequence = self.store.next_sequence(PolledField.EVENTS)
        try:
            events = await asyncio.to_thread(self.client.events_by_type, filters)
        except UpstreamError as exc:
            logger.warning("events fetch failed (type=%s): %s", filters.type, exc)
            self.store.mark_failed()
            return
        self.store.apply_events(events, sequence)

    async def poll_spots(self) -> None:
        page, limit = self.store.spots_page, self.store.spots_limit
        sequence = self.store.next_sequence(PolledField.SPOTS)
        try:
            payload = await asyncio.to_thread(self.client.spots_stats, page, limit)
        except UpstreamError as exc:
            logger.warning("spot statistics fetch failed (page=%d): %s", page, exc)
            self.store.mark_failed()
            return
        self.store.apply_spots(payload, sequence)

    def _dispatch(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        task = asyncio.create_task(coro)
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _every(self, interval: float, poll: Callable[[], Coroutine[Any, Any, None]]) -> None:
        while True:
            await asyncio.sleep(interval)
            self._dispatch(poll())
