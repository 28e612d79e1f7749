from __future__ import annotations

import http.client
import json
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

from onair.core.models import Event, Filter, NowPlaying, parse_events_payload, parse_now_playing_payload


NOW_ON_AIR_PATH = "/now-on-air"
EVENTS_BY_TYPE_PATH = "/events/by-type"
SPOTS_STATS_PATH = "/stats/spots/all"


class UpstreamError(RuntimeError):
    pass


class UpstreamTransportError(UpstreamError):
    pass


@dataclass
class RawResponse:
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def content_type(self) -> str:
        for name, value in self.headers.items():
            if name.lower() == "content-type":
                return value
        return ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass
class UpstreamResponse:
    status: int
    headers: dict[str, str]
    body: Any


def fetch_raw(url: str, timeout: float = 10.0) -> RawResponse:
    """GET ``url`` and return status, headers and body bytes as received.

    Non-2xx answers are returned, not raised; only transport failures raise.
    """
    try:
        request = urllib.request.Request(url=url, method="GET", headers={"Accept": "application/json"})
        with urllib.request.urlopen(request, timeout=timeout) as response:
            return RawResponse(status=response.status, headers=dict(response.headers.items()), body=response.read())
    except urllib.error.HTTPError as exc:
        try:
            body = exc.read() if exc.fp is not None else b""
        except (http.client.HTTPException, OSError):
            body = b""
        return RawResponse(status=exc.code, headers=dict(exc.headers.items()) if exc.headers else {}, body=body)
    except urllib.error.URLError as exc:
        raise UpstreamTransportError(str(exc.reason)) from exc
    except (http.client.HTTPException, TimeoutError, OSError) as exc:
        raise UpstreamTransportError(str(exc) or type(exc).__name__) from exc
    except ValueError as exc:
        raise UpstreamTransportError(f"Invalid upstream URL {url!r}: {exc}") from exc


def build_url(base_url: str, path: str, query: dict[str, str] | None = None) -> str:
    url = f"{base_url.rstrip('/')}{path}"
    params = {key: value for key, value in (query or {}).items() if value not in (None, "")}
    if params:
        url = f"{url}?{urlencode(params)}"
    return url


@dataclass
class UpstreamClient:
    base_url: str
    timeout_seconds: float = 10.0

    def fetch(self, path: str, query: dict[str, str] | None = None) -> UpstreamResponse:
        raw = fetch_raw(build_url(self.base_url, path, query), timeout=self.timeout_seconds)
        text = raw.body.decode("utf-8", errors="replace")
        if not raw.ok:
            raise UpstreamError(f"HTTP {raw.status}: {text[:200]}")

        if "application/json" not in raw.content_type:
            return UpstreamResponse(status=raw.status, headers=raw.headers, body=text)
        if not text.strip():
            return UpstreamResponse(status=raw.status, headers=raw.headers, body=None)
        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise UpstreamError(f"Malformed JSON from {path}: {exc}") from exc
        return UpstreamResponse(status=raw.status, headers=raw.headers, body=body)

    def fetch_json(self, path: str, query: dict[str, str] | None = None) -> Any:
        response = self.fetch(path, query)
        if isinstance(response.body, str):
            raise UpstreamError(f"Expected a JSON body from {path}")
        return response.body

    def now_on_air(self) -> NowPlaying | None:
        return parse_now_playing_payload(self.fetch_json(NOW_ON_AIR_PATH))

    def events_by_type(self, filters: Filter) -> list[Event]:
        return parse_events_payload(self.fetch_json(EVENTS_BY_TYPE_PATH, filters.query()))

    def spots_stats(self, page: int = 1, limit: int = 50) -> Any:
        return self.fetch_json(SPOTS_STATS_PATH, {"page": str(page), "limit": str(limit)})
