from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.testclient import TestClient

from onair.core.config import Settings
from onair.relay.routes import build_relay_router
from onair.runtime import upstream
from onair.runtime.upstream import RawResponse, UpstreamTransportError


def _build_client(tmp_path: Path) -> TestClient:
    settings = Settings(
        _env_file=None,
        ONAIR_UPSTREAM_BASE_URL="https://radio.example",
        ONAIR_EXPORT_DIR=str(tmp_path / "exports"),
        ONAIR_STATE_DIR=str(tmp_path / "state"),
    )
    app = FastAPI()
    app.include_router(build_relay_router(settings=settings))
    return TestClient(app)


def _record_upstream(monkeypatch, response: RawResponse) -> list[str]:
    seen: list[str] = []

    def fake_fetch_raw(url: str, timeout: float = 10.0) -> RawResponse:
        seen.append(url)
        return response

    monkeypatch.setattr(upstream, "fetch_raw", fake_fetch_raw)
    return seen


def test_options_preflight_is_empty_204_with_cors_headers(tmp_path: Path) -> None:
    client = _build_client(tmp_path)
    for path in ("/api/now-on-air", "/api/events/by-type", "/api/stats/spots/all"):
        resp = client.options(path)
        assert resp.status_code == 204
        assert resp.content == b""
        assert resp.headers["access-control-allow-origin"] == "*"
        assert resp.headers["access-control-allow-methods"] == "GET,OPTIONS"
        assert resp.headers["access-control-allow-headers"] == "Content-Type, Authorization"


def test_now_on_air_mirrors_status_body_and_content_type(tmp_path: Path, monkeypatch) -> None:
    body = b'{"title": "Live", "artist": "Band"}'
    seen = _record_upstream(
        monkeypatch,
        RawResponse(status=200, headers={"Content-Type": "application/json; charset=utf-8"}, body=body),
    )
    client = _build_client(tmp_path)

    resp = client.get("/api/now-on-air", params={"type": "AD"})
    assert resp.status_code == 200
    assert resp.content == body
    assert resp.headers["content-type"] == "application/json; charset=utf-8"
    assert resp.headers["cache-control"] == "no-store"
    assert resp.headers["access-control-allow-origin"] == "*"
    assert seen == ["https://radio.example/now-on-air"]


def test_events_relay_forwards_only_whitelisted_params(tmp_path: Path, monkeypatch) -> None:
    seen = _record_upstream(monkeypatch, RawResponse(status=200, headers={}, body=b"[]"))
    client = _build_client(tmp_path)

    resp = client.get("/api/events/by-type", params={"type": "SONG", "limit": "25", "order": "asc", "page": "3"})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/json"
    assert seen == ["https://radio.example/events/by-type?type=SONG&limit=25&order=asc"]


def test_spots_relay_forwards_page_and_limit(tmp_path: Path, monkeypatch) -> None:
    seen = _record_upstream(monkeypatch, RawResponse(status=200, headers={}, body=b"{}"))
    client = _build_client(tmp_path)

    client.get("/api/stats/spots/all", params={"page": "2", "limit": "10", "type": "AD"})
    client.get("/api/stats/spots/all")
    assert seen == [
        "https://radio.example/stats/spots/all?page=2&limit=10",
        "https://radio.example/stats/spots/all",
    ]


def test_upstream_error_status_is_passed_through(tmp_path: Path, monkeypatch) -> None:
    _record_upstream(
        monkeypatch,
        RawResponse(status=503, headers={"Content-Type": "application/json"}, body=b'{"detail": "maintenance"}'),
    )
    client = _build_client(tmp_path)

    resp = client.get("/api/now-on-air")
    assert resp.status_code == 503
    assert resp.json() == {"detail": "maintenance"}


def test_transport_failure_maps_to_bad_gateway(tmp_path: Path, monkeypatch) -> None:
    def failing_fetch_raw(url: str, timeout: float = 10.0) -> RawResponse:
        raise UpstreamTransportError("connection refused")

    monkeypatch.setattr(upstream, "fetch_raw", failing_fetch_raw)
    client = _build_client(tmp_path)

    resp = client.get("/api/events/by-type", params={"type": "SONG"})
    assert resp.status_code == 502
    assert resp.json() == {"error": "Bad Gateway", "detail": "connection refused"}


def test_protocol_failure_upstream_maps_to_bad_gateway(tmp_path: Path, monkeypatch) -> None:
    import http.client

    def raise_incomplete_read(request, timeout=10.0):  # noqa: ANN001
        raise http.client.IncompleteRead(b"[")

    monkeypatch.setattr(upstream.urllib.request, "urlopen", raise_incomplete_read)
    client = _build_client(tmp_path)

    resp = client.get("/api/events/by-type", params={"type": "SONG"})
    assert resp.status_code == 502
    assert resp.json()["error"] == "Bad Gateway"
