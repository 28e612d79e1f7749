"""Pure sort/paginate projection of the events view.

Nothing here touches a rendering surface; the TUI and the CLI both call
:func:`project_events` and format the result themselves.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from onair.core.models import Event, SortDirection, SortKey, SortSpec


@dataclass(frozen=True)
class EventsProjection:
    total: int
    page: int
    page_count: int
    rows: tuple[Event, ...]

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    @property
    def total_label(self) -> str:
        return f"{self.total} events"

    @property
    def page_label(self) -> str:
        return f"Page {self.page}/{self.page_count}"


def parse_timestamp(value: str | None) -> float:
    """Seconds since the epoch; anything unparsable sorts as epoch 0."""
    text = (value or "").strip()
    if not text:
        return 0.0
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.timestamp()


def page_count(total: int, page_size: int) -> int:
    return max(1, math.ceil(total / max(1, page_size)))


def clamp_page(page: int, total: int, page_size: int) -> int:
    return max(1, min(page, page_count(total, page_size)))


def sort_events(events: Sequence[Event], sort: SortSpec) -> list[Event]:
    # sorted() is stable, and stays stable with reverse=True, so ties keep
    # their original relative order in both directions.
    if sort.key == SortKey.PLAY_TIME:
        key = lambda event: parse_timestamp(event.play_time)  # noqa: E731
    else:
        field = sort.key.value
        key = lambda event: getattr(event, field)  # noqa: E731
    return sorted(events, key=key, reverse=sort.direction == SortDirection.DESC)


def paginate(rows: Sequence[Event], page: int, page_size: int) -> list[Event]:
    size = max(1, page_size)
    start = size * (max(1, page) - 1)
    end = min(size * max(1, page), len(rows))
    return list(rows[start:end])


def project_events(events: Sequence[Event], sort: SortSpec, page: int, page_size: int) -> EventsProjection:
    total = len(events)
    if total == 0:
        return EventsProjection(total=0, page=1, page_count=1, rows=())

    current = clamp_page(page, total, page_size)
    ordered = sort_events(events, sort)
    return EventsProjection(
        total=total,
        page=current,
        page_count=page_count(total, page_size),
        rows=tuple(paginate(ordered, current, page_size)),
    )
