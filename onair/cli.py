from __future__ import annotations

import argparse
import logging
import subprocess
import sys
import threading
import time
import webbrowser
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from onair.core.config import Settings


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ONAIR station telemetry (no subcommand runs relay API + TUI)")
    subparsers = parser.add_subparsers(dest="command", required=False)

    all_parser = subparsers.add_parser("all", help="Run the relay API and the TUI together")
    all_parser.add_argument("--host", default=None)
    all_parser.add_argument("--port", type=int, default=None)

    api_parser = subparsers.add_parser("api", help="Run the relay API and browser dashboard")
    api_parser.add_argument("--host", default=None)
    api_parser.add_argument("--port", type=int, default=None)

    tui_parser = subparsers.add_parser("tui", help="Run the Textual dashboard")
    tui_parser.add_argument(
        "--base-url",
        default=None,
        help="Poll this base URL instead of the configured upstream/relay",
    )

    web_parser = subparsers.add_parser("web", help="Serve the browser dashboard and open it")
    web_parser.add_argument("--host", default=None)
    web_parser.add_argument("--port", type=int, default=None)
    web_parser.add_argument("--no-open", action="store_true")

    export_parser = subparsers.add_parser("export", help="Fetch recent events once and write them as CSV")
    export_parser.add_argument("--type", dest="event_type", default="SONG")
    export_parser.add_argument("--limit", default="50")
    export_parser.add_argument("--order", default="desc")
    export_parser.add_argument("--output-dir", default=None, help="Directory for the CSV (default ONAIR_EXPORT_DIR)")

    test_parser = subparsers.add_parser("test", help="Run all tests with pytest")
    test_parser.add_argument(
        "pytest_args",
        nargs=argparse.REMAINDER,
        help="Optional extra pytest args; use `--` before args (e.g. onair test -- -k relay)",
    )

    return parser


def run_tests(args: argparse.Namespace) -> int:
    cmd = [sys.executable, "-m", "pytest"]
    if args.pytest_args:
        cmd.extend(args.pytest_args)
    print("Running:", " ".join(cmd))
    return subprocess.call(cmd)


def run_export(args: argparse.Namespace) -> int:
    from onair.core.config import get_settings
    from onair.core.export import write_events_csv
    from onair.core.logs import configure_logging
    from onair.core.store import ViewStateStore
    from onair.runtime.upstream import UpstreamClient, UpstreamError

    settings = get_settings()
    configure_logging(settings.log_level)

    store = ViewStateStore(page_size=settings.default_page_size)
    filters = store.apply_filter(args.event_type, args.limit, args.order)
    client = UpstreamClient(settings.client_base_url, timeout_seconds=settings.request_timeout_seconds)
    try:
        store.apply_events(client.events_by_type(filters))
    except UpstreamError as exc:
        print(f"Export failed: {exc}", file=sys.stderr)
        return 1

    output_dir = Path(args.output_dir).expanduser() if args.output_dir else settings.export_path
    target = write_events_csv(output_dir, store.events, filters.type)
    print(f"Wrote {len(store.events)} events to {target}")
    return 0

def _local_tui_base_url(host: str, port: int) -> str:
    if host in {"0.0.0.0", "::", "::0", "[::]"}:
        host = "127.0.0.1"
    return f"http://{host}:{port}"


def _wait_for_api_ready(base_url: str, timeout_seconds: float = 30.0) -> None:
    from onair.runtime.upstream import UpstreamTransportError, fetch_raw

    deadline = time.monotonic() + timeout_seconds
    health_url = f"{base_url.rstrip('/')}/health"
    while time.monotonic() < deadline:
        try:
            if fetch_raw(health_url, timeout=2).ok:
                return
        except UpstreamTransportError:
            pass
        time.sleep(0.5)
    raise RuntimeError(f"Timed out waiting for the relay at {health_url}")


def _stop_process(process: subprocess.Popen[str]) -> None:
    if process.poll() is not None:
        return
    process.terminate()
    try:
        process.wait(timeout=10)
    except subprocess.TimeoutExpired:
        process.kill()


def _tui_settings(base_url: str | None = None, relay_url: str | None = None) -> Settings:
    from onair.core.config import get_settings

    settings = get_settings()
    if relay_url:
        return settings.model_copy(update={"use_relay": True, "api_base_url": relay_url})
    if base_url:
        return settings.model_copy(update={"use_relay": False, "upstream_base_url": base_url})
    return settings


def _serve(settings: Settings, host: str, port: int) -> None:
    import uvicorn

    from onair.app.api import create_app
    from onair.core.logs import configure_logging

    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())


def _open_dashboard(url: str) -> None:
    try:
        webbrowser.open(url)
    except webbrowser.Error as exc:
        logger.warning("Could not open a browser for %s: %s", url, exc)


def run_web(args: argparse.Namespace) -> int:
    from onair.core.config import get_settings

    settings = get_settings()
    host = args.host or settings.web_host
    port = args.port or settings.web_port
    url = f"{_local_tui_base_url(host, port)}/web"
    print(f"ONAIR dashboard at {url} (relaying {settings.upstream_base_url})")
    if not args.no_open:
        # uvicorn needs a moment to bind.
        opener = threading.Timer(0.7, _open_dashboard, args=(url,))
        opener.daemon = True
        opener.start()
    _serve(settings, host, port)
    return 0


def run_all(args: argparse.Namespace) -> int:
    from onair.core.config import get_settings
    from onair.core.logs import configure_logging
    from onair.tui.app import run_tui

    settings = get_settings()
    host = getattr(args, "host", None) or settings.api_host
    port = getattr(args, "port", None) or settings.api_port
    relay_url = _local_tui_base_url(host, port)

    log_path: Path = settings.state_path / "combined_api.log"
    cmd = [sys.executable, "-m", "onair", "api", "--host", host, "--port", str(port)]

    print(f"Starting relay API in background on {host}:{port} (logs: {log_path})")
    with log_path.open("a", encoding="utf-8") as log_file:
        api_process = subprocess.Popen(cmd, stdout=log_file, stderr=subprocess.STDOUT, text=True)
        try:
            try:
                _wait_for_api_ready(relay_url)
            except RuntimeError as exc:
                print(f"Failed to start API: {exc}", file=sys.stderr)
                return 1

            configure_logging(settings.log_level, settings.state_path / "onair_tui.log")
            run_tui(_tui_settings(relay_url=relay_url))
            return 0
        finally:
            _stop_process(api_process)


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    if args.command in {None, "all"}:
        raise SystemExit(run_all(args))

    if args.command == "api":
        from onair.core.config import get_settings

        settings = get_settings()
        _serve(settings, args.host or settings.api_host, args.port or settings.api_port)
        return

    if args.command == "tui":
        from onair.core.logs import configure_logging
        from onair.tui.app import run_tui

        settings = _tui_settings(base_url=args.base_url)
        configure_logging(settings.log_level, settings.state_path / "onair_tui.log")
        run_tui(settings)
        return

    if args.command == "web":
        raise SystemExit(run_web(args))

    if args.command == "export":
        raise SystemExit(run_export(args))

    if args.command == "test":
        raise SystemExit(run_tests(args))

    parser.print_help()


if __name__ == "__main__":
    main()
