from __future__ import annotations

from datetime import UTC, datetime


def format_time(value: str | datetime | None) -> str:
    """Local, human readable rendering of a timestamp; unparsable input is echoed back."""
    if value is None or value == "":
        return ""
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip())
        except ValueError:
            return str(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def utc_now() -> datetime:
    return datetime.now(UTC)
