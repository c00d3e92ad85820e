"""
Command-line interface for site2feed.

Uses Typer to provide commands for generating, inspecting, serving and
managing feeds. Supports loading .env files for API key configuration.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .config import AppConfig, load_config
from .errors import Site2FeedError
from .feed.parser import parse as parse_feed
from .logging_utils import setup_logging
from .runner import generate_feed_sync
from .store import FeedStore, new_saved_feed

try:
    from dotenv import load_dotenv
except Exception:  # noqa: BLE001
    load_dotenv = None

app = typer.Typer(add_completion=False)
feeds_app = typer.Typer(add_completion=False, help="Manage saved feeds.")
app.add_typer(feeds_app, name="feeds")
console = Console()


def _load(config: Path | None, log_level: str | None = None) -> AppConfig:
    # Load environment variables from .env if available
    if load_dotenv is not None:
        load_dotenv()
    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    setup_logging(cfg.logging)
    return cfg


@app.command()
def generate(
    url: str = typer.Argument(..., help="Website to turn into a feed."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the feed here instead of stdout."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    save: bool = typer.Option(False, "--save/--no-save", help="Keep the result in the feed store."),
    api_key: str | None = typer.Option(
        None,
        "--api-key",
        envvar="OPENROUTER_API_KEY",
        help="Override provider API key (or set OPENROUTER_API_KEY / .env).",
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Generate an RSS feed for URL."""
    cfg = _load(config, log_level)
    if api_key:
        cfg.provider.api_key = api_key

    try:
        result = generate_feed_sync(url, cfg)
    except Site2FeedError as exc:
        console.print(f"[bold red]Generation failed:[/] {exc}")
        raise typer.Exit(code=1) from exc

    if output is not None:
        output.write_text(result.xml, encoding="utf-8")
        console.print(f"Feed written: {output} ({len(result.channel.items)} items)")
    else:
        typer.echo(result.xml)

    if result.status != "ok":
        console.print(f"[yellow]Warning:[/] {result.channel.title}")
    if save:
        store = FeedStore(cfg.store.path)
        store.save(new_saved_feed(url, result.xml))
        console.print(f"Saved to {store.path}")


@app.command()
def parse(
    path: Path = typer.Argument(..., exists=True, readable=True, help="RSS file to read."),
):
    """Show the channel and items of an RSS file."""
    try:
        channel = parse_feed(path.read_text(encoding="utf-8"))
    except Site2FeedError as exc:
        console.print(f"[bold red]{exc}[/]")
        raise typer.Exit(code=1) from exc

    console.print(f"[bold]{channel.title}[/] {channel.link}")
    if channel.description:
        console.print(channel.description)
    table = Table("Title", "Link", "Date", "Image")
    for item in channel.items:
        table.add_row(item.title, item.link, item.pub_date, item.image_url or "")
    console.print(table)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
):
    """Serve the generation endpoint over HTTP."""
    import uvicorn

    from .server import create_app

    cfg = _load(config)
    uvicorn.run(
        create_app(cfg),
        host=host or cfg.server.host,
        port=port or cfg.server.port,
        log_level=cfg.logging.level.lower(),
    )


@feeds_app.command("list")
def list_feeds(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
):
    """List saved feeds."""
    cfg = _load(config)
    table = Table("ID", "URL", "Created", "Items", "Type")
    for feed in FeedStore(cfg.store.path).list():
        created = datetime.fromtimestamp(feed.created_at / 1000).strftime("%Y-%m-%d %H:%M")
        table.add_row(feed.id, feed.url, created, str(len(feed.parsed_channel.items)), feed.type)
    console.print(table)


@feeds_app.command("delete")
def delete_feed(
    feed_id: str = typer.Argument(...),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
):
    """Delete a saved feed by ID."""
    cfg = _load(config)
    if not FeedStore(cfg.store.path).delete(feed_id):
        console.print(f"[red]No saved feed with id {feed_id}[/]")
        raise typer.Exit(code=1)
    console.print(f"Deleted {feed_id}")


if __name__ == "__main__":
    app()
