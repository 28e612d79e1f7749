from __future__ import annotations

from pathlib import Path

from onair.core.export import events_to_csv, export_filename, write_events_csv
from onair.core.models import Event


def test_empty_export_is_header_only() -> None:
    assert events_to_csv([]) == "time,type,artist,title,filename"


def test_export_quotes_delimiters_quotes_and_newlines() -> None:
    events = [
        Event(play_time="2024-01-01T10:00:00Z", event_type="SONG", artist="Crosby, Stills", title='Say "hi"', filename="a.mp3"),
        Event(play_time="2024-01-01T11:00:00Z", event_type="AD", artist="", title="two\nlines", filename="b.mp3"),
    ]
    lines = events_to_csv(events).split("\n", 1)
    assert lines[0] == "time,type,artist,title,filename"
    assert lines[1] == (
        '2024-01-01T10:00:00Z,SONG,"Crosby, Stills","Say ""hi""",a.mp3\n'
        '2024-01-01T11:00:00Z,AD,,"two\nlines",b.mp3'
    )


def test_export_keeps_received_order() -> None:
    events = [Event(title="Z"), Event(title="A")]
    rows = events_to_csv(events).split("\n")[1:]
    assert rows == [",,,Z,", ",,,A,"]


def test_export_filename_embeds_lowercased_type_and_stamp() -> None:
    assert export_filename("SONG", 1700000000123) == "events_song_1700000000123.csv"


def test_write_events_csv_never_overwrites_previous_export(tmp_path: Path) -> None:
    first = write_events_csv(tmp_path / "exports", [Event(title="one")], "AD")
    second = write_events_csv(tmp_path / "exports", [Event(title="two")], "AD")

    assert first != second
    assert first.name.startswith("events_ad_")
    assert first.read_text(encoding="utf-8").endswith(",,,one,")
    assert second.read_text(encoding="utf-8").endswith(",,,two,")
