from __future__ import annotations

import asyncio
import logging

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Footer, Header, Input, Label, Select, Static

from onair.core.config import Settings
from onair.core.export import write_events_csv
from onair.core.formatting import format_time
from onair.core.models import EVENT_TYPES, SortKey
from onair.core.store import ViewStateStore
from onair.runtime.polling import PollingEngine
from onair.runtime.upstream import UpstreamClient
from onair.tui.common import (
    COLUMN_LABELS,
    _column_key_value,
    _connection_badge,
    _event_cells,
    _now_playing_text,
    _progress_bar,
    _sort_caption,
)
from onair.tui.screens import SpotStatsScreen


logger = logging.getLogger(__name__)

PAGE_SIZES = (10, 25, 50, 100)


class OnAirTUIApp(App[None]):
    CSS = """
    Screen {
      layout: vertical;
    }

    #top {
      height: auto;
    }

    #now-pane {
      width: 1fr;
      height: auto;
      border: solid $accent;
      margin: 0 1 0 1;
      padding: 0 1;
    }

    #filter-pane {
      width: 2fr;
      height: auto;
      border: solid $accent;
      margin: 0 1 0 0;
      padding: 0 1;
    }

    #events-pane {
      height: 1fr;
      border: solid $accent;
      margin: 0 1 1 1;
      padding: 0 1;
    }

    .pane-title {
      text-style: bold;
      color: $accent;
      height: auto;
      margin-top: 1;
    }

    #noa-card {
      height: 3;
    }

    #noa-updated,
    #connection-status,
    #sort-caption,
    #events-total,
    #page-label {
      color: $text-muted;
      height: auto;
    }

    #filter-row,
    #pager,
    #actions {
      height: 3;
      align-horizontal: left;
    }

    #filter-row Select {
      width: 20;
      margin-right: 1;
    }

    #filter-limit {
      width: 12;
      margin-right: 1;
    }

    #pager Button,
    #actions Button {
      margin-right: 1;
      min-width: 10;
    }

    #pager Static {
      width: auto;
      padding: 1 1 0 0;
    }

    #page-size {
      width: 16;
    }

    #events-table {
      height: 1fr;
    }
    """

    BINDINGS = [
        Binding("r", "manual_refresh", "Refresh"),
        Binding("a", "apply_filter", "Apply Filter"),
        Binding("left", "prev_page", "Prev Page"),
        Binding("right", "next_page", "Next Page"),
        Binding("e", "export", "Export CSV"),
        Binding("s", "show_spots", "Spot Stats"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, settings: Settings):
        super().__init__()
        self.settings = settings
        self.client = UpstreamClient(settings.client_base_url, timeout_seconds=settings.request_timeout_seconds)
        self.store = ViewStateStore(page_size=settings.default_page_size)
        self.engine = PollingEngine(
            self.store,
            self.client,
            now_playing_interval_ms=settings.now_playing_interval_ms,
            events_interval_ms=settings.events_interval_ms,
        )
        self._unsubscribe = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal(id="top"):
            with Vertical(id="now-pane"):
                yield Label("Now On Air", classes="pane-title")
                yield Static("No data", id="noa-card", markup=False)
                yield Static(_progress_bar(0.0), id="noa-progress")
                yield Static("Updated: -", id="noa-updated")
            with Vertical(id="filter-pane"):
                yield Label("Recent Events", classes="pane-title")
                with Horizontal(id="filter-row"):
                    yield Select(
                        [(value, value) for value in EVENT_TYPES],
                        value=self.store.filter.type,
                        allow_blank=False,
                        id="filter-type",
                    )
                    yield Input(value=str(self.store.filter.limit), placeholder="limit", id="filter-limit")
                    yield Select(
                        [("desc", "desc"), ("asc", "asc")],
                        value=self.store.filter.order.value,
                        allow_blank=False,
                        id="filter-order",
                    )
                    yield Button("Apply (A)", id="apply-filter", variant="primary")
                yield Static(_connection_badge(self.store.connection), id="connection-status")
        with Vertical(id="events-pane"):
            yield Static("", id="sort-caption")
            yield DataTable(id="events-table", cursor_type="row")
            with Horizontal(id="pager"):
                yield Button("◀", id="page-prev")
                yield Static("Page 1/1", id="page-label")
                yield Button("▶", id="page-next")
                yield Select(
                    [(f"{size} / page", size) for size in sorted({*PAGE_SIZES, self.store.pages.page_size})],
                    value=self.store.pages.page_size,
                    allow_blank=False,
                    id="page-size",
                )
                yield Static("0 events", id="events-total")
            with Horizontal(id="actions"):
                yield Button("Refresh (R)", id="refresh")
                yield Button("Export CSV (E)", id="export", variant="success")
                yield Button("Spot Stats (S)", id="spots")
                yield Button("Quit (Q)", id="quit", variant="error")
        yield Footer()

    async def on_mount(self) -> None:
        table = self.query_one("#events-table", DataTable)
        for key in SortKey:
            table.add_column(COLUMN_LABELS[key.value], key=key.value)

        self.sub_title = self.client.base_url
        self._unsubscribe = self.store.subscribe(self._on_store_changed)
        self._render_all()
        self.engine.start()

    def on_unmount(self) -> None:
        self.engine.stop()
        if self._unsubscribe is not None:
            self._unsubscribe()

    def _on_store_changed(self, _: ViewStateStore) -> None:
        self._render_all()

    def _render_all(self) -> None:
        self._render_connection()
        self._render_now_playing()
        self._render_events()

    def _render_connection(self) -> None:
        self.query_one("#connection-status", Static).update(_connection_badge(self.store.connection))

    def _render_now_playing(self) -> None:
        self.query_one("#noa-card", Static).update(_now_playing_text(self.store.now_playing))
        # No elapsed time is exposed upstream, so progress always reads zero.
        self.query_one("#noa-progress", Static).update(_progress_bar(0.0))
        updated = format_time(self.store.last_fetched_at) if self.store.last_fetched_at else "-"
        self.query_one("#noa-updated", Static).update(f"Updated: {updated}")

    def _render_events(self) -> None:
        projection = self.store.project()
        table = self.query_one("#events-table", DataTable)
        table.clear(columns=False)

        if projection.is_empty:
            table.add_row("(no events)", "-", "-", "-", "-")
        else:
            for event in projection.rows:
                table.add_row(*_event_cells(event))

        self.query_one("#sort-caption", Static).update(_sort_caption(self.store.sort))
        self.query_one("#events-total", Static).update(projection.total_label)
        self.query_one("#page-label", Static).update(projection.page_label)

    @on(DataTable.HeaderSelected, "#events-table")
    def on_header_selected(self, event: DataTable.HeaderSelected) -> None:
        key = _column_key_value(event.column_key)
        if key not in COLUMN_LABELS:
            return
        self.store.sort_by(key)

    @on(Select.Changed, "#page-size")
    def on_page_size_changed(self, event: Select.Changed) -> None:
        if not isinstance(event.value, int):
            return
        self.store.set_page_size(int(event.value))

    @on(Input.Submitted, "#filter-limit")
    def on_limit_submitted(self) -> None:
        self.action_apply_filter()

    @on(Button.Pressed, "#apply-filter")
    def on_apply_pressed(self) -> None:
        self.action_apply_filter()

    def action_apply_filter(self) -> None:
        event_type = self.query_one("#filter-type", Select).value
        order = self.query_one("#filter-order", Select).value
        limit_input = self.query_one("#filter-limit", Input)
        self.engine.apply_filter(
            event_type if isinstance(event_type, str) else "",
            limit_input.value,
            order if isinstance(order, str) else "desc",
        )
        limit_input.value = str(self.store.filter.limit)

    @on(Button.Pressed, "#page-prev")
    def on_prev_pressed(self) -> None:
        self.action_prev_page()

    @on(Button.Pressed, "#page-next")
    def on_next_pressed(self) -> None:
        self.action_next_page()

    def action_prev_page(self) -> None:
        self.store.prev_page()

    def action_next_page(self) -> None:
        self.store.next_page()

    @on(Button.Pressed, "#refresh")
    def on_refresh_pressed(self) -> None:
        self.action_manual_refresh()

    def action_manual_refresh(self) -> None:
        self.engine.refresh()

    @on(Button.Pressed, "#export")
    async def on_export_pressed(self) -> None:
        await self.action_export()

    async def action_export(self) -> None:
        events = list(self.store.events)
        try:
            target = await asyncio.to_thread(
                write_events_csv, self.settings.export_path, events, self.store.filter.type
            )
        except OSError as exc:
            logger.error("CSV export failed: %s", exc)
            self.notify(f"Export failed: {exc}", severity="error")
            return
        logger.info("Exported %d events to %s", len(events), target)
        self.notify(f"Exported {len(events)} events to {target}", severity="information")

    @on(Button.Pressed, "#spots")
    def on_spots_pressed(self) -> None:
        self.action_show_spots()

    def action_show_spots(self) -> None:
        self.push_screen(SpotStatsScreen(store=self.store, engine=self.engine))

    @on(Button.Pressed, "#quit")
    def on_quit_pressed(self) -> None:
        self.exit()


def run_tui(settings: Settings) -> None:
    app = OnAirTUIApp(settings=settings)
    app.run()
