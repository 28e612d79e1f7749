from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


EVENT_TYPES: tuple[str, ...] = ("SONG", "AD", "ID", "PROMO", "JINGLE", "NEWS")

LIMIT_MIN = 1
LIMIT_MAX = 500
LIMIT_FALLBACK = 50

EXPORT_HEADER: tuple[str, ...] = ("time", "type", "artist", "title", "filename")


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortKey(str, Enum):
    PLAY_TIME = "play_time"
    EVENT_TYPE = "event_type"
    ARTIST = "artist"
    TITLE = "title"
    FILENAME = "filename"


class ConnectionStatus(str, Enum):
    OFFLINE = "offline"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


class Filter(BaseModel):
    type: str = Field(default="SONG", min_length=1)
    limit: int = Field(default=LIMIT_FALLBACK, ge=LIMIT_MIN, le=LIMIT_MAX)
    order: SortDirection = SortDirection.DESC

    def query(self) -> dict[str, str]:
        return {"type": self.type, "limit": str(self.limit), "order": self.order.value}


class AiredItem(BaseModel):
    """Fields shared by historical events and the now-on-air item.

    Values are kept as strings; ``None`` and missing keys become ``""`` and
    unknown upstream keys are ignored.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    play_time: str = ""
    event_type: str = ""
    artist: str = ""
    title: str = ""
    filename: str = ""

    @field_validator("play_time", "event_type", "artist", "title", "filename", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)


class Event(AiredItem):
    pass


class NowPlaying(AiredItem):
    pass


@dataclass
class SortSpec:
    key: SortKey = SortKey.PLAY_TIME
    direction: SortDirection = SortDirection.DESC


@dataclass
class PageState:
    page: int = 1
    page_size: int = 25


def parse_limit(raw: Any) -> int:
    """Clamp a user-entered limit to [1, 500]; non-numeric or non-positive input yields 50."""
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return LIMIT_FALLBACK
    if not math.isfinite(value):
        return LIMIT_MAX if value > 0 else LIMIT_FALLBACK
    number = int(value)
    if number < LIMIT_MIN:
        return LIMIT_FALLBACK
    return min(LIMIT_MAX, number)


def parse_events_payload(payload: Any) -> list[Event]:
    if isinstance(payload, dict):
        payload = payload.get("items")
    if not isinstance(payload, list):
        return []
    return [Event.model_validate(item) for item in payload if isinstance(item, dict)]


def parse_now_playing_payload(payload: Any) -> NowPlaying | None:
    if not payload or not isinstance(payload, dict):
        return None
    return NowPlaying.model_validate(payload)
