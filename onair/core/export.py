from __future__ import annotations

import csv
import io
import time
from collections.abc import Sequence
from pathlib import Path

from onair.core.models import EXPORT_HEADER, Event


def events_to_csv(events: Sequence[Event]) -> str:
    """Serialize every fetched event, in received order, with a header row.

    Fields holding a comma, quote, or newline are quoted with inner quotes
    doubled. Rows are joined by ``\\n`` with no trailing newline.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(EXPORT_HEADER)
    for event in events:
        writer.writerow([event.play_time, event.event_type, event.artist, event.title, event.filename])
    return buffer.getvalue().removesuffix("\n")


def export_filename(filter_type: str, stamp_ms: int | None = None) -> str:
    if stamp_ms is None:
        stamp_ms = time.time_ns() // 1_000_000
    return f"events_{filter_type.lower()}_{stamp_ms}.csv"


def write_events_csv(export_dir: Path, events: Sequence[Event], filter_type: str) -> Path:
    export_dir.mkdir(parents=True, exist_ok=True)
    stamp_ms = time.time_ns() // 1_000_000
    target = export_dir / export_filename(filter_type, stamp_ms)
    while target.exists():
        stamp_ms += 1
        target = export_dir / export_filename(filter_type, stamp_ms)
    target.write_text(events_to_csv(events), encoding="utf-8")
    return target
