from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from enum import Enum
from typing import Any

from onair.core.formatting import utc_now
from onair.core.models import (
    ConnectionStatus,
    Event,
    Filter,
    NowPlaying,
    PageState,
    SortDirection,
    SortKey,
    SortSpec,
    parse_limit,
)
from onair.core.projection import EventsProjection, clamp_page, page_count, project_events


logger = logging.getLogger(__name__)

Listener = Callable[["ViewStateStore"], None]


class PolledField(str, Enum):
    NOW_PLAYING = "now_playing"
    EVENTS = "events"
    SPOTS = "spots"


class ViewStateStore:
    """Single mutable snapshot behind the dashboard.

    Every mutation goes through a method here, finishes its own bookkeeping
    (page resets included) and only then notifies listeners, so a render never
    observes a half-applied change.
    """

    def __init__(self, *, page_size: int = 25):
        self.filter = Filter()
        self.events: tuple[Event, ...] = ()
        self.now_playing: NowPlaying | None = None
        self.last_fetched_at: datetime | None = None
        self.sort = SortSpec()
        self.pages = PageState(page=1, page_size=max(1, page_size))
        self.connection = ConnectionStatus.OFFLINE

        self.spots_payload: Any = None
        self.spots_page = 1
        self.spots_limit = 50

        self._dispatched: dict[PolledField, int] = {field: 0 for field in PolledField}
        self._applied: dict[PolledField, int] = {field: 0 for field in PolledField}
        self._listeners: list[Listener] = []

    # -- listeners -------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # -- request sequencing ----------------------------------------------

    def next_sequence(self, field: PolledField) -> int:
        self._dispatched[field] += 1
        return self._dispatched[field]

    def _accept(self, field: PolledField, sequence: int | None) -> bool:
        if sequence is None:
            return True
        if sequence <= self._applied[field]:
            logger.debug("Dropping stale %s response #%d (applied #%d)", field.value, sequence, self._applied[field])
            return False
        self._applied[field] = sequence
        return True

    # -- poll outcomes ---------------------------------------------------

    def apply_now_playing(self, item: NowPlaying | None, sequence: int | None = None) -> bool:
        accepted = self._accept(PolledField.NOW_PLAYING, sequence)
        if accepted:
            self.now_playing = item
            self.last_fetched_at = utc_now()
        self.connection = ConnectionStatus.CONNECTED
        self._notify()
        return accepted

    def apply_events(self, events: Sequence[Event], sequence: int | None = None) -> bool:
        accepted = self._accept(PolledField.EVENTS, sequence)
        if accepted:
            self.events = tuple(events)
            self.pages.page = self._current_page()
        self.connection = ConnectionStatus.CONNECTED
        self._notify()
        return accepted

    def apply_spots(self, payload: Any, sequence: int | None = None) -> bool:
        accepted = self._accept(PolledField.SPOTS, sequence)
        if accepted:
            self.spots_payload = payload
        self.connection = ConnectionStatus.CONNECTED
        self._notify()
        return accepted

    def mark_failed(self) -> None:
        self.connection = ConnectionStatus.RECONNECTING
        self._notify()

    def set_connection(self, status: ConnectionStatus) -> None:
        self.connection = status
        self._notify()

    # -- interaction handlers --------------------------------------------

    def apply_filter(self, event_type: str, limit: Any, order: Any) -> Filter:
        normalized_type = str(event_type or "").strip() or self.filter.type
        try:
            normalized_order = SortDirection(str(order).strip().lower())
        except ValueError:
            normalized_order = SortDirection.DESC
        self.filter = Filter(type=normalized_type, limit=parse_limit(limit), order=normalized_order)
        self.pages.page = 1
        self._notify()
        return self.filter

    def sort_by(self, key: SortKey | str) -> SortSpec:
        key = SortKey(key)
        if key == self.sort.key:
            direction = SortDirection.ASC if self.sort.direction == SortDirection.DESC else SortDirection.DESC
            self.sort = SortSpec(key=key, direction=direction)
        else:
            self.sort = SortSpec(key=key, direction=SortDirection.ASC)
        self.pages.page = 1
        self._notify()
        return self.sort

    def set_page(self, page: int) -> int:
        self.pages.page = clamp_page(int(page), len(self.events), self.pages.page_size)
        self._notify()
        return self.pages.page

    def next_page(self) -> int:
        return self.set_page(self._current_page() + 1)

    def prev_page(self) -> int:
        return self.set_page(self._current_page() - 1)

    def _current_page(self) -> int:
        return clamp_page(self.pages.page, len(self.events), self.pages.page_size)

    def set_page_size(self, page_size: int) -> None:
        self.pages.page_size = max(1, int(page_size))
        self.pages.page = 1
        self._notify()

    def set_spots_page(self, page: int, limit: int | None = None) -> None:
        self.spots_page = max(1, int(page))
        if limit is not None:
            self.spots_limit = parse_limit(limit)
        self._notify()

    # -- projections -----------------------------------------------------

    @property
    def page_count(self) -> int:
        return page_count(len(self.events), self.pages.page_size)

    def project(self) -> EventsProjection:
        return project_events(self.events, self.sort, self.pages.page, self.pages.page_size)
