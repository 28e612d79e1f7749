from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from onair.core.config import Settings
from onair.web.page_dashboard import dashboard_js, dashboard_section_html
from onair.web.page_shell import config_js, head_html, header_html, shared_js


def build_web_router(*, settings: Settings) -> APIRouter:
    router = APIRouter()

    @router.get("/", response_class=HTMLResponse, include_in_schema=False)
    @router.get("/web", response_class=HTMLResponse)
    @router.get("/web/", response_class=HTMLResponse)
    def web_home() -> HTMLResponse:
        return HTMLResponse(_web_page_html(settings), headers={"Cache-Control": "no-store"})

    return router


def _client_config(settings: Settings) -> dict[str, object]:
    return {
        "nowPlayingIntervalMs": settings.now_playing_interval_ms,
        "eventsIntervalMs": settings.events_interval_ms,
        "pageSize": settings.default_page_size,
    }


def _web_page_html(settings: Settings) -> str:
    return (
        '<!doctype html>\n<html lang="en" class="dark">\n  <head>\n'
        + head_html()
        + "\n  </head>\n"
        + '  <body class="bg-slate-950 text-slate-200 font-sans text-sm leading-relaxed min-h-screen">\n'
        + '    <div class="max-w-[1400px] mx-auto px-5 py-4">\n'
        + header_html()
        + "\n"
        + dashboard_section_html()
        + "\n"
        + "    </div>\n"
        + '    <div id="toast-container" class="fixed bottom-5 right-5 z-50 flex flex-col gap-2 pointer-events-none"></div>\n'
        + "    <script>\n"
        + config_js(_client_config(settings))
        + "\n"
        + shared_js()
        + "\n"
        + dashboard_js()
        + "\n"
        + "    </script>\n"
        + "  </body>\n</html>\n"
    )
