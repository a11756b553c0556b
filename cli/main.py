"""Tag Audit CLI: entry-point for running analyses and the API server.

Usage:
    python cli/main.py --help

Commands:
    analyze   → fetch a page and print its resource summary
    serve     → run the HTTP API (and the static front end, if configured)
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from tagaudit.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import json
from typing import Optional

import typer

from tagaudit.analyzer import analyze_url, failure_payload, report_payload
from tagaudit.config import settings
from tagaudit.log import configure_logging
from tagaudit.scraper.fetcher import FetchError, normalize_url

from cli.rendering import render_report

app = typer.Typer(
    name="tagaudit",
    help="Tag Audit CLI.",
    no_args_is_help=True,
)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Override TAGAUDIT_LOG_LEVEL (DEBUG, INFO, ...)."
    ),
) -> None:
    """Tag Audit: list and size the resources a web page loads."""
    configure_logging(log_level)


# ---------------------------------------------------------------------------
# Analyze
# ---------------------------------------------------------------------------

@app.command("analyze")
def analyze(
    url: str = typer.Argument(..., help="Page to analyse (scheme optional)."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON payload."),
    max_sized: int = typer.Option(
        settings.max_sized_resources,
        "--max-sized",
        help="How many resources to probe for their size.",
    ),
) -> None:
    """Fetch URL, collect its resources and print the summary."""
    if not as_json:
        typer.echo(f"[analyze] Fetching {url!r} …")
    try:
        report = asyncio.run(analyze_url(url, max_sized=max_sized))
    except FetchError as exc:
        if as_json:
            typer.echo(json.dumps(failure_payload(normalize_url(url), exc), indent=2))
        else:
            typer.echo(f"[analyze] {exc.category}: {exc.user_message}")
            for attempt in exc.attempts:
                typer.echo(f"  {attempt.strategy:<15} {attempt.url}  {attempt.error}")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(report_payload(report), indent=2))
        return
    typer.echo(render_report(report))


# ---------------------------------------------------------------------------
# Serve
# ---------------------------------------------------------------------------

@app.command("serve")
def serve(
    host: str = typer.Option(settings.host, help="Interface to bind."),
    port: int = typer.Option(settings.port, help="Port to listen on."),
    reload: bool = typer.Option(False, help="Reload on code changes."),
) -> None:
    """Run the Tag Audit API with uvicorn."""
    import uvicorn  # noqa: PLC0415

    typer.echo(f"[serve] Listening on http://{host}:{port}")
    uvicorn.run("tagaudit.api.app:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
