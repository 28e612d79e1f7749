from __future__ import annotations

from typing import Any

from rich.text import Text

from onair.core.formatting import format_time
from onair.core.models import ConnectionStatus, Event, NowPlaying, SortDirection, SortSpec


CONNECTION_STYLES = {
    ConnectionStatus.CONNECTED: "green",
    ConnectionStatus.RECONNECTING: "yellow",
    ConnectionStatus.OFFLINE: "grey50",
}

COLUMN_LABELS = {
    "play_time": "Time",
    "event_type": "Type",
    "artist": "Artist",
    "title": "Title",
    "filename": "Filename",
}


def _progress_bar(ratio: float, width: int = 18) -> str:
    ratio = max(0.0, min(1.0, ratio))
    done = int(ratio * width)
    return f"{'█' * done}{'░' * (width - done)} {ratio * 100:5.1f}%"


def _column_key_value(column_key: Any) -> str:
    if column_key is None:
        return ""
    if hasattr(column_key, "value"):
        value = column_key.value
        return "" if value is None else str(value)
    return str(column_key)


def _connection_badge(status: ConnectionStatus) -> str:
    style = CONNECTION_STYLES.get(status, "grey50")
    return f"[{style}]●[/] {status.value}"


def _sort_caption(sort: SortSpec) -> str:
    arrow = "▲" if sort.direction == SortDirection.ASC else "▼"
    return f"Sorted by {COLUMN_LABELS.get(sort.key.value, sort.key.value)} {arrow}"


def _event_cells(event: Event) -> tuple[Text, ...]:
    # DataTable renders str cells as markup; upstream text must stay literal.
    values = (format_time(event.play_time), event.event_type, event.artist, event.title, event.filename)
    return tuple(Text(value) for value in values)


def _now_playing_lines(item: NowPlaying | None) -> list[str]:
    if item is None:
        return ["No data"]
    return [
        item.title or "(untitled)",
        item.artist,
        f"{item.event_type} • {format_time(item.play_time)}",
    ]


def _now_playing_text(item: NowPlaying | None) -> Text:
    lines = _now_playing_lines(item)
    if item is None:
        return Text(lines[0], style="dim")
    text = Text(lines[0], style="bold")
    text.append(f"\n{lines[1]}")
    text.append(f"\n{lines[2]}", style="dim")
    return text


def _spot_rows(payload: Any) -> tuple[list[str], list[dict[str, Any]]]:
    """Columns (in first-seen order) and rows of a spot statistics payload."""
    rows = payload
    if isinstance(payload, dict):
        rows = payload.get("items")
    if not isinstance(rows, list):
        return [], []

    columns: list[str] = []
    records: list[dict[str, Any]] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        records.append(row)
        for key in row:
            if key not in columns:
                columns.append(key)
    return columns, records


def _spot_cells(row: dict[str, Any], columns: list[str]) -> list[Text]:
    return [Text(str(row.get(column, ""))) for column in columns]
