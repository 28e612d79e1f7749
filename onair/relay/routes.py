"""Same-origin relay endpoints in front of the upstream broadcast API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from fastapi import APIRouter, Request
from fastapi.responses import Response

from onair.core.config import Settings
from onair.runtime import upstream
from onair.runtime.upstream import UpstreamTransportError, build_url


logger = logging.getLogger(__name__)

CORS_PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


@dataclass(frozen=True)
class RelayRoute:
    path: str
    upstream_path: str
    forwarded_params: tuple[str, ...] = ()


RELAY_ROUTES: tuple[RelayRoute, ...] = (
    RelayRoute(path="/api/now-on-air", upstream_path=upstream.NOW_ON_AIR_PATH),
    RelayRoute(
        path="/api/events/by-type",
        upstream_path=upstream.EVENTS_BY_TYPE_PATH,
        forwarded_params=("type", "limit", "order"),
    ),
    RelayRoute(
        path="/api/stats/spots/all",
        upstream_path=upstream.SPOTS_STATS_PATH,
        forwarded_params=("page", "limit"),
    ),
)


def build_relay_router(*, settings: Settings) -> APIRouter:
    router = APIRouter()

    def _preflight() -> Response:
        return Response(status_code=204, headers=CORS_PREFLIGHT_HEADERS)

    def _relay(route: RelayRoute, request: Request) -> Response:
        query = {name: request.query_params.get(name, "") for name in route.forwarded_params}
        target = build_url(settings.upstream_base_url, route.upstream_path, query)

        try:
            raw = upstream.fetch_raw(target, timeout=settings.request_timeout_seconds)
        except UpstreamTransportError as exc:
            logger.warning("Relay %s -> %s failed: %s", route.path, target, exc)
            return Response(
                content=json.dumps({"error": "Bad Gateway", "detail": str(exc)}),
                status_code=502,
                media_type="application/json",
            )

        return Response(
            content=raw.body,
            status_code=raw.status,
            headers={
                "Content-Type": raw.content_type or "application/json",
                "Cache-Control": "no-store",
                "Access-Control-Allow-Origin": "*",
            },
        )

    def _register(route: RelayRoute) -> None:
        def relay_get(request: Request) -> Response:
            return _relay(route, request)

        def relay_options() -> Response:
            return _preflight()

        router.add_api_route(route.path, relay_get, methods=["GET"], include_in_schema=True)
        router.add_api_route(route.path, relay_options, methods=["OPTIONS"], include_in_schema=False)

    for route in RELAY_ROUTES:
        _register(route)

    return router
