"""
Command-line interface for rss-brief.

Uses Typer to serve the web app, refresh the timeline, print a briefing and
manage subscriptions. Loads a .env file for API key configuration.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import NoReturn

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
import typer

from .analyzers import Synthesizer
from .config import AppConfig, load_config
from .core.errors import RssBriefError
from .core.state import AppState
from .llm.providers.factory import create_provider
from .llm.tracing import flush, setup_langfuse
from .output.renderer import display_date
from .utils.logging import setup_llm_logger, setup_logging

app = typer.Typer(add_completion=False, help="Aggregate RSS feeds and brief them with a language model.")
feeds_app = typer.Typer(add_completion=False, help="Manage feed subscriptions.")
app.add_typer(feeds_app, name="feeds")
console = Console()

DEFAULT_CONFIG = Path("config.yaml")

ConfigOption = typer.Option(None, "--config", "-c", exists=True, dir_okay=False, help="YAML config file.")
LogLevelOption = typer.Option(None, "--log-level", help="Logging level.")
ApiKeyOption = typer.Option(
    None,
    "--api-key",
    help="Override provider API key (or set the provider's key env var / .env).",
)


def _bootstrap(
    config: Path | None,
    log_level: str | None = None,
    api_key: str | None = None,
) -> tuple[AppConfig, logging.Logger | None]:
    load_dotenv()
    if config is None and DEFAULT_CONFIG.exists():
        config = DEFAULT_CONFIG
    cfg = load_config(str(config) if config else None)

    if api_key:
        cfg.provider.api_key = api_key
    if log_level:
        cfg.logging.level = log_level

    setup_logging(cfg.logging)
    llm_logger = setup_llm_logger(cfg.logging)
    setup_langfuse(cfg.langfuse)
    return cfg, llm_logger


def _fail(exc: Exception) -> NoReturn:
    message = exc.message if isinstance(exc, RssBriefError) else str(exc)
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(code=1)


@app.command()
def serve(
    config: Path | None = ConfigOption,
    host: str | None = typer.Option(None, "--host", help="Bind address."),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port."),
    debug: bool | None = typer.Option(None, "--debug/--no-debug"),
    log_level: str | None = LogLevelOption,
    api_key: str | None = ApiKeyOption,
):
    """Run the web app (JSON API and article grid)."""
    from .web.app import create_app

    cfg, llm_logger = _bootstrap(config, log_level, api_key)
    if host:
        cfg.server.host = host
    if port:
        cfg.server.port = port
    if debug is not None:
        cfg.server.debug = debug

    web = create_app(cfg, llm_logger=llm_logger)
    try:
        web.run(host=cfg.server.host, port=cfg.server.port, debug=cfg.server.debug)
    finally:
        flush()


@app.command()
def refresh(
    config: Path | None = ConfigOption,
    limit: int = typer.Option(30, "--limit", "-n", help="Rows to print."),
    log_level: str | None = LogLevelOption,
):
    """Aggregate every subscription and print the newest articles."""
    cfg, _ = _bootstrap(config, log_level)
    state = AppState.from_config(cfg)
    asyncio.run(state.refresh())

    table = Table(title=f"{len(state.articles)} articles from the last {cfg.feeds.recency_window_hours:g} hours")
    table.add_column("Date", style="dim", no_wrap=True)
    table.add_column("Feed", style="cyan")
    table.add_column("Title")
    for item in state.articles[:limit]:
        table.add_row(display_date(item), item.feed_title, item.article.title)
    console.print(table)
    flush()


@app.command()
def brief(
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
    api_key: str | None = ApiKeyOption,
):
    """Refresh the timeline, then print the morning briefing."""
    cfg, llm_logger = _bootstrap(config, log_level, api_key)
    try:
        provider = create_provider(cfg.provider, cfg.logging, llm_logger)
    except ValueError as exc:
        _fail(exc)

    state = AppState.from_config(cfg)
    synthesizer = Synthesizer(cfg, provider, llm_logger=llm_logger)

    async def _run():
        await state.refresh()
        return await synthesizer.brief(state.articles)

    try:
        result = asyncio.run(_run())
    except RssBriefError as exc:
        _fail(exc)
    finally:
        flush()

    if result is None:
        console.print("No articles from the last day or two, nothing to brief.")
        return
    console.rule(f"[bold]{result.greeting}")
    for paragraph in result.paragraphs:
        console.print(paragraph)
        console.print()
    console.print(f"[bold]Key takeaway:[/bold] {result.key_takeaway}")


@feeds_app.command("list")
def list_feeds(config: Path | None = ConfigOption):
    """List subscriptions."""
    cfg, _ = _bootstrap(config)
    state = AppState.from_config(cfg)
    table = Table()
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("URL")
    table.add_column("Category")
    for sub in state.subscriptions:
        table.add_row(sub.id, sub.title, sub.url, sub.category or "")
    console.print(table)


@feeds_app.command("add")
def add_feed(
    url: str = typer.Argument(..., help="Feed URL."),
    title: str | None = typer.Option(None, "--title", help="Display title (defaults to the feed's own)."),
    category: str | None = typer.Option(None, "--category"),
    config: Path | None = ConfigOption,
):
    """Validate a feed by fetching it, then subscribe."""
    cfg, _ = _bootstrap(config)
    state = AppState.from_config(cfg)
    try:
        sub = asyncio.run(state.add_feed(url, title=title, category=category))
    except RssBriefError as exc:
        _fail(exc)
    console.print(f"Subscribed to [cyan]{sub.title}[/cyan] ({sub.id})")


@feeds_app.command("remove")
def remove_feed(
    subscription_id: str = typer.Argument(..., help="Subscription ID."),
    config: Path | None = ConfigOption,
):
    """Unsubscribe. Unknown IDs are ignored."""
    cfg, _ = _bootstrap(config)
    state = AppState.from_config(cfg)
    if state.remove_feed(subscription_id):
        console.print(f"Removed {subscription_id}")
    else:
        console.print(f"No subscription with id {subscription_id}")


if __name__ == "__main__":
    app()
