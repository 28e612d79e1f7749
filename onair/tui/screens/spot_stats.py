from __future__ import annotations

import json

from rich.text import Text
from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Input, Label, Static

from onair.core.store import ViewStateStore
from onair.runtime.polling import PollingEngine
from onair.tui.common import _spot_cells, _spot_rows


class SpotStatsScreen(ModalScreen[None]):
    CSS = """
    SpotStatsScreen {
      align: center middle;
    }

    #spots-root {
      width: 96%;
      height: 94%;
      border: heavy $accent;
      background: $panel;
      padding: 0 1;
    }

    #spots-title {
      text-style: bold;
      color: $accent;
      height: auto;
      margin-top: 1;
    }

    #spots-subtitle {
      color: $text-muted;
      height: auto;
      margin-bottom: 1;
    }

    #spots-table {
      height: 1fr;
    }

    #spots-raw {
      height: 1fr;
      border: round $secondary;
      padding: 0 1;
      overflow: auto;
      display: none;
    }

    #spots-actions {
      height: 3;
      align-horizontal: left;
      padding-top: 1;
    }

    #spots-actions Button {
      margin-right: 1;
      min-width: 10;
    }

    #spots-limit {
      width: 12;
      margin-right: 1;
    }
    """

    BINDINGS = [
        Binding("left", "prev_page", "Prev Page"),
        Binding("right", "next_page", "Next Page"),
        Binding("r", "reload", "Reload"),
        Binding("escape", "close", "Close"),
    ]

    def __init__(self, *, store: ViewStateStore, engine: PollingEngine):
        super().__init__()
        self.store = store
        self.engine = engine
        self._unsubscribe = None
        self._rendered: tuple[object, int, int] | None = None

    def compose(self) -> ComposeResult:
        with Container(id="spots-root"):
            yield Label("Spot Statistics", id="spots-title")
            yield Static("Loading...", id="spots-subtitle")
            yield DataTable(id="spots-table", cursor_type="row")
            yield Static("", id="spots-raw", markup=False)
            with Horizontal(id="spots-actions"):
                yield Button("◀ Prev", id="spots-prev")
                yield Button("Next ▶", id="spots-next")
                yield Input(value=str(self.store.spots_limit), placeholder="limit", id="spots-limit")
                yield Button("Reload (R)", id="spots-reload", variant="primary")
                yield Button("Close (Esc)", id="spots-close", variant="error")

    def on_mount(self) -> None:
        self._unsubscribe = self.store.subscribe(self._on_store_changed)
        self._render_spots()
        self.engine.load_spots()

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()

    def _on_store_changed(self, store: ViewStateStore) -> None:
        if (store.spots_payload, store.spots_page, store.spots_limit) == self._rendered:
            return
        self._render_spots()

    def _render_spots(self) -> None:
        payload = self.store.spots_payload
        self._rendered = (payload, self.store.spots_page, self.store.spots_limit)
        table = self.query_one("#spots-table", DataTable)
        raw = self.query_one("#spots-raw", Static)
        subtitle = self.query_one("#spots-subtitle", Static)

        columns, rows = _spot_rows(payload)
        table.clear(columns=True)
        if columns:
            table.display = True
            raw.display = False
            table.add_columns(*(Text(column) for column in columns))
            for row in rows:
                table.add_row(*_spot_cells(row, columns))
        elif payload is not None:
            table.display = False
            raw.display = True
            raw.update(json.dumps(payload, indent=2, sort_keys=True))
        else:
            table.display = True
            raw.display = False

        status = self.store.connection.value
        subtitle.update(
            f"Page {self.store.spots_page} · limit {self.store.spots_limit} · {len(rows)} rows · {status}"
        )

    def action_prev_page(self) -> None:
        self.engine.load_spots(page=max(1, self.store.spots_page - 1))

    def action_next_page(self) -> None:
        self.engine.load_spots(page=self.store.spots_page + 1)

    def action_reload(self) -> None:
        limit = self.query_one("#spots-limit", Input).value
        self.engine.load_spots(page=self.store.spots_page, limit=limit)
        self.query_one("#spots-limit", Input).value = str(self.store.spots_limit)

    def action_close(self) -> None:
        self.dismiss(None)

    @on(Button.Pressed, "#spots-prev")
    def on_prev_pressed(self) -> None:
        self.action_prev_page()

    @on(Button.Pressed, "#spots-next")
    def on_next_pressed(self) -> None:
        self.action_next_page()

    @on(Input.Submitted, "#spots-limit")
    @on(Button.Pressed, "#spots-reload")
    def on_reload_pressed(self) -> None:
        self.action_reload()

    @on(Button.Pressed, "#spots-close")
    def on_close_pressed(self) -> None:
        self.action_close()
