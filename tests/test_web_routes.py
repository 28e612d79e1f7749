from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.testclient import TestClient

from onair.core.config import Settings
from onair.web.routes import build_web_router


def _build_client(tmp_path: Path, **overrides: str) -> TestClient:
    settings = Settings(
        _env_file=None,
        ONAIR_EXPORT_DIR=str(tmp_path / "exports"),
        ONAIR_STATE_DIR=str(tmp_path / "state"),
        **overrides,
    )
    app = FastAPI()
    app.include_router(build_web_router(settings=settings))
    return TestClient(app)


def test_dashboard_page_wires_relay_endpoints(tmp_path: Path) -> None:
    client = _build_client(tmp_path)

    resp = client.get("/web")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    page = resp.text
    assert "/api/now-on-air" in page
    assert "/api/events/by-type" in page
    assert "/api/stats/spots/all" in page
    assert 'id="events-tbody"' in page
    assert 'data-sort="play_time"' in page
    assert "time', 'type', 'artist', 'title', 'filename'" in page


def test_dashboard_page_embeds_configured_intervals(tmp_path: Path) -> None:
    client = _build_client(
        tmp_path,
        ONAIR_NOW_PLAYING_INTERVAL_MS="1500",
        ONAIR_EVENTS_INTERVAL_MS="9000",
        ONAIR_DEFAULT_PAGE_SIZE="50",
    )

    page = client.get("/").text
    assert '"nowPlayingIntervalMs": 1500' in page
    assert '"eventsIntervalMs": 9000' in page
    assert '"pageSize": 50' in page


def test_app_serves_health_and_dashboard(tmp_path: Path) -> None:
    from onair.app.api import create_app

    settings = Settings(
        _env_file=None,
        ONAIR_EXPORT_DIR=str(tmp_path / "exports"),
        ONAIR_STATE_DIR=str(tmp_path / "state"),
    )
    with TestClient(create_app(settings)) as client:
        health = client.get("/health")
        assert health.status_code == 200
        assert health.json()["status"] == "ok"
        assert client.get("/web/").headers["cache-control"] == "no-store"
