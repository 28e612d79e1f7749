from __future__ import annotations

import pytest

from onair.core.models import Event, Filter, NowPlaying, parse_events_payload, parse_limit, parse_now_playing_payload


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("9999", 500),
        ("500", 500),
        ("1", 1),
        ("120", 120),
        (" 75 ", 75),
        ("-5", 50),
        ("0", 50),
        ("abc", 50),
        ("", 50),
        (None, 50),
    ],
)
def test_parse_limit_clamps_and_falls_back(raw, expected) -> None:
    assert parse_limit(raw) == expected


def test_filter_query_serializes_all_fields() -> None:
    assert Filter().query() == {"type": "SONG", "limit": "50", "order": "desc"}


def test_event_coerces_missing_and_null_fields_to_text() -> None:
    event = Event.model_validate({"play_time": None, "artist": "A", "title": 12, "extra": "ignored"})
    assert event.play_time == ""
    assert event.artist == "A"
    assert event.title == "12"
    assert event.filename == ""
    assert not hasattr(event, "extra")


def test_parse_events_payload_accepts_list_or_items_object() -> None:
    rows = [{"title": "One"}, {"title": "Two"}]
    assert [event.title for event in parse_events_payload(rows)] == ["One", "Two"]
    assert [event.title for event in parse_events_payload({"items": rows})] == ["One", "Two"]
    assert parse_events_payload({"unexpected": rows}) == []
    assert parse_events_payload(None) == []
    assert parse_events_payload([{"title": "ok"}, "junk"]) == [Event(title="ok")]


def test_parse_now_playing_payload_treats_falsy_body_as_absent() -> None:
    assert parse_now_playing_payload(None) is None
    assert parse_now_playing_payload({}) is None
    item = parse_now_playing_payload({"title": "Live", "artist": "Band", "event_type": "SONG"})
    assert item == NowPlaying(title="Live", artist="Band", event_type="SONG")
