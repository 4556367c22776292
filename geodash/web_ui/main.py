"""NiceGUI entrypoint for the GeoDash web runtime."""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from fastapi import Request
from nicegui import app, ui

from geodash.app.settings import DashboardSettings
from geodash.utils.logging import configure_root
from geodash.web_ui.runtime import POPSTATE_EVENT, POPSTATE_SCRIPT, WebSession
from geodash.web_ui.views import render_page

NAV_LINKS = (("/", "Overview"), ("/daily", "Daily"), ("/readings", "Readings"))


def _install_theme() -> None:
    """Install global CSS/theme tokens for the web runtime."""
    ui.add_head_html(
        """
<link rel="preconnect" href="https://fonts.googleapis.com">
<link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>
<link href="https://fonts.googleapis.com/css2?family=Space+Grotesk:wght@400;500;700&family=IBM+Plex+Mono:wght@400;500&display=swap" rel="stylesheet">
<style>
:root {
  --geodash-bg-a: #eef6f1;
  --geodash-bg-b: #f4f1ea;
  --geodash-card: rgba(255, 255, 255, 0.9);
  --geodash-border: #d1dbe5;
  --geodash-accent: #3b82f6;
  --geodash-highlight: #fef3c7;
  --geodash-muted: #6b7280;
}
body {
  font-family: 'Space Grotesk', sans-serif;
  background: radial-gradient(circle at top left, var(--geodash-bg-a), var(--geodash-bg-b));
}
.geodash-page { max-width: 1280px; margin: 0 auto; padding: 14px; }
.geodash-card {
  background: var(--geodash-card);
  border: 1px solid var(--geodash-border);
  border-radius: 12px;
}
.geodash-mono { font-family: 'IBM Plex Mono', monospace; }
.geodash-table-scroll { max-height: 420px; overflow-y: auto; }
.geodash-table { width: 100%; border-collapse: collapse; }
.geodash-table th, .geodash-table td { padding: 4px 8px; border-bottom: 1px solid var(--geodash-border); }
.geodash-table tr.hidden { display: none; }
.geodash-table tr.highlight { background: var(--geodash-highlight); }
.gateway-badge { border-radius: 8px; padding: 1px 8px; font-size: 12px; background: #e0e7ff; }
.muted { color: var(--geodash-muted); }
</style>
        """
    )


def _parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse CLI args for web runtime startup."""
    parser = argparse.ArgumentParser(description="Run the GeoDash NiceGUI dashboard.")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--api-url", default=None, help="Base URL of the data API.")
    parser.add_argument(
        "--serve-api",
        action="store_true",
        help="Mount the data API into this process (api-url defaults to this server).",
    )
    parser.add_argument("--reload", action="store_true")
    parser.add_argument("--smoke-test", action="store_true")
    return parser.parse_args(argv)


def _build_ui(settings: DashboardSettings) -> None:
    """Register the NiceGUI pages; every route serves the same shell."""

    async def shell(request: Request) -> None:
        initial = request.url.path + (f"?{request.url.query}" if request.url.query else "")
        session = WebSession(settings, initial, render_page=render_page)
        client = ui.context.client

        ui.add_body_html(POPSTATE_SCRIPT)
        ui.on(POPSTATE_EVENT, lambda e: session.on_popstate(e.args))
        ui.keyboard(on_key=lambda e: session.on_key(e.key.name) if e.action.keydown else None)

        with ui.header().classes("items-center gap-2"):
            ui.label("GeoDash").classes("text-h6")
            for href, label in NAV_LINKS:
                ui.button(label, on_click=lambda _, h=href: session.follow(h)).props(
                    "flat color=white no-caps"
                )
        container = ui.column().classes("w-full")
        session.attach(container, client)
        client.on_disconnect(session.close)

        await client.connected()
        session.start()

    for path in ("/", "/daily", "/readings"):
        ui.page(path)(shell)


def main(argv: Optional[list] = None) -> None:
    """CLI entrypoint for the NiceGUI runtime."""
    args = _parse_args(argv)
    level = configure_root()
    settings = DashboardSettings.from_env().with_overrides(
        host=args.host,
        port=args.port,
        api_url=args.api_url,
    )
    if args.serve_api:
        from rest_api.app import router as api_router

        app.include_router(api_router)
        if args.api_url is None:
            settings = settings.with_overrides(api_url=f"http://{settings.host}:{settings.port}")

    if args.smoke_test:
        print("web-smoke-ok", settings.api_url, logging.getLevelName(level))
        return
    _install_theme()
    _build_ui(settings)
    ui.run(
        host=settings.host,
        port=settings.port,
        title="GeoDash",
        reload=args.reload,
        show=False,
        storage_secret=settings.storage_secret,
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
