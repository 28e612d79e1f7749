from __future__ import annotations

from onair.core.models import Event, SortDirection, SortKey, SortSpec
from onair.core.projection import page_count, paginate, parse_timestamp, project_events, sort_events


def _events() -> list[Event]:
    return [
        Event(play_time="2024-01-01T10:00:00Z", event_type="SONG", artist="B", title="Same", filename="1.mp3"),
        Event(play_time="2024-01-01T12:00:00Z", event_type="SONG", artist="a", title="Alpha", filename="2.mp3"),
        Event(play_time="not a time", event_type="AD", artist="C", title="Same", filename="3.mp3"),
        Event(play_time="2024-01-01T11:00:00Z", event_type="ID", artist="A", title="Zulu", filename="4.mp3"),
        Event(play_time="2024-01-01T09:00:00Z", event_type="SONG", artist="D", title="Same", filename="5.mp3"),
    ]


def test_play_time_desc_orders_by_parsed_timestamp() -> None:
    events = [
        Event(play_time="2024-01-01T10:00:00Z", event_type="SONG", artist="A", title="Z"),
        Event(play_time="2024-01-01T11:00:00Z", event_type="SONG", artist="B", title="A"),
    ]
    projection = project_events(events, SortSpec(SortKey.PLAY_TIME, SortDirection.DESC), page=1, page_size=25)
    assert list(projection.rows) == [events[1], events[0]]


def test_unparsable_play_time_sorts_as_epoch_zero() -> None:
    assert parse_timestamp("not a time") == 0.0
    assert parse_timestamp("") == 0.0
    ordered = sort_events(_events(), SortSpec(SortKey.PLAY_TIME, SortDirection.ASC))
    assert ordered[0].filename == "3.mp3"


def test_string_keys_compare_case_sensitively() -> None:
    ordered = sort_events(_events(), SortSpec(SortKey.ARTIST, SortDirection.ASC))
    assert [event.artist for event in ordered] == ["A", "B", "C", "D", "a"]


def test_title_asc_and_desc_reverse_except_ties_which_keep_original_order() -> None:
    events = _events()
    asc = sort_events(events, SortSpec(SortKey.TITLE, SortDirection.ASC))
    desc = sort_events(events, SortSpec(SortKey.TITLE, SortDirection.DESC))

    assert [event.filename for event in asc] == ["2.mp3", "1.mp3", "3.mp3", "5.mp3", "4.mp3"]
    assert [event.filename for event in desc] == ["4.mp3", "1.mp3", "3.mp3", "5.mp3", "2.mp3"]


def test_sorting_never_mutates_the_received_sequence() -> None:
    events = _events()
    before = list(events)
    sort_events(events, SortSpec(SortKey.FILENAME, SortDirection.DESC))
    assert events == before


def test_projection_is_idempotent() -> None:
    events = _events()
    sort = SortSpec(SortKey.EVENT_TYPE, SortDirection.ASC)
    assert project_events(events, sort, 2, 2) == project_events(events, sort, 2, 2)


def test_pages_cover_every_event_exactly_once() -> None:
    events = _events()
    sort = SortSpec(SortKey.TITLE, SortDirection.ASC)
    full = sort_events(events, sort)
    pages = page_count(len(events), 2)

    collected: list[Event] = []
    for page in range(1, pages + 1):
        collected.extend(project_events(events, sort, page, 2).rows)

    assert pages == 3
    assert collected == full


def test_empty_events_project_to_empty_state() -> None:
    projection = project_events([], SortSpec(), page=4, page_size=25)
    assert projection.is_empty
    assert projection.rows == ()
    assert projection.page_label == "Page 1/1"
    assert projection.total_label == "0 events"


def test_out_of_range_page_clamps_to_last_page() -> None:
    events = _events()
    projection = project_events(events, SortSpec(SortKey.TITLE, SortDirection.ASC), page=9, page_size=2)
    assert projection.page == 3
    assert [event.filename for event in projection.rows] == ["4.mp3"]


def test_paginate_slices_partial_last_page() -> None:
    rows = _events()
    assert paginate(rows, 3, 2) == rows[4:5]
    assert paginate(rows, 1, 10) == rows
