"""Main entry point for Feedbell daemon - just wiring, no logic."""

import asyncio
import logging
import signal
import sys
from typing import List

import typer
import uvicorn
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .api import create_app
from .broadcaster import Broadcaster
from .config import Config, config_dir
from .defaults import ensure_config
from .fetchers import FeedFetcher, RSSFetcher, YouTubeFetcher
from .locking import DaemonLock
from .notifier import DiscordNotifier
from .orchestrator import DaemonOrchestrator
from .registry import DestinationRegistry
from .scheduler import FeedScheduler
from .watermark import WatermarkStore

# Load environment variables from ~/.config/feedbell/.env
dotenv_path = config_dir() / ".env"
if dotenv_path.exists():
    load_dotenv(dotenv_path)

console = Console()
app = typer.Typer(help="Poll RSS and YouTube feeds and post new items to Discord")


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_fetchers(config: Config, store: WatermarkStore) -> List[FeedFetcher]:
    fetchers: List[FeedFetcher] = []
    if config.rss_url:
        fetchers.append(RSSFetcher(config.rss_url, store, timeout=config.request_timeout))
    if config.youtube_channel_id:
        fetchers.append(
            YouTubeFetcher(config.youtube_channel_id, store, timeout=config.request_timeout)
        )
    return fetchers


def build_orchestrator(config: Config) -> DaemonOrchestrator:
    """Construct every component once, with explicit dependencies."""
    console.print("🔧 Initializing components...")
    store = WatermarkStore(config.watermark_dir)
    registry = DestinationRegistry(config.registry_path)
    notifier = DiscordNotifier(config.discord_token, timeout=config.request_timeout)
    broadcaster = Broadcaster(
        sender=notifier,
        styles=config.styles(),
        max_workers=config.delivery_workers,
    )
    return DaemonOrchestrator(
        fetchers=build_fetchers(config, store),
        broadcaster=broadcaster,
        registry=registry,
        console=console,
    )


def load_config() -> Config:
    try:
        console.print("📂 Loading configuration...")
        return Config.from_file()
    except Exception as e:
        console.print(f"[bold red]❌ Fatal error: {e}[/bold red]")
        sys.exit(1)


async def run_daemon(config: Config, orchestrator: DaemonOrchestrator) -> None:
    """Run the scheduler and the liveness API in one event loop."""
    feed_scheduler = FeedScheduler(
        orchestrator, interval_minutes=config.poll_interval, console=console
    )

    def signal_handler(sig, frame) -> None:
        console.print("\n[yellow]Received shutdown signal, stopping scheduler...[/yellow]")
        feed_scheduler.shutdown(wait=False)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        feed_scheduler.start()
        console.print(
            f"[green]✅ Scheduler started - checking feeds every {config.poll_interval} minutes[/green]"
        )

        api_config = uvicorn.Config(
            create_app(orchestrator.registry),
            host=config.api_host,
            port=config.api_port,
            log_level="warning",
            access_log=False,
        )
        api_server = uvicorn.Server(api_config)
        console.print(
            f"[green]✅ Health endpoint on http://{config.api_host}:{config.api_port}/health[/green]"
        )
        console.print("[dim]Press Ctrl+C to stop[/dim]\n")
        await api_server.serve()
    finally:
        feed_scheduler.shutdown(wait=True)


@app.command()
def run(
    once: bool = typer.Option(False, "--once", help="Run one cycle and exit"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Start the daemon (or run a single poll-and-deliver cycle)."""
    setup_logging(verbose)
    config = load_config()

    with DaemonLock():
        orchestrator = build_orchestrator(config)

        if once:
            console.print("[bold blue]Starting Feedbell (--once mode)[/bold blue]")
            stats = orchestrator.run_once()
            if stats["errors"] and stats["total_delivered"] == 0:
                sys.exit(1)
            return

        console.print("[bold blue]Starting Feedbell daemon[/bold blue]")
        asyncio.run(run_daemon(config, orchestrator))


@app.command()
def init() -> None:
    """Create default config files under ~/.config/feedbell."""
    ensure_config()


def _registry() -> DestinationRegistry:
    # Subscription management does not need a token or feeds
    try:
        config = Config.from_file(validate=False)
    except Exception as e:
        console.print(f"[bold red]❌ Failed to read configuration: {e}[/bold red]")
        raise typer.Exit(1)
    return DestinationRegistry(config.registry_path)


@app.command()
def subscribe(
    guild_id: str = typer.Argument(..., help="Discord server id"),
    channel_id: str = typer.Argument(..., help="Channel to post notifications in"),
) -> None:
    """Post new items for a server into a channel (replaces any previous one)."""
    _registry().register(guild_id, channel_id)
    console.print(f"[green]✅ Server {guild_id} will receive news in channel {channel_id}[/green]")


@app.command()
def unsubscribe(guild_id: str = typer.Argument(..., help="Discord server id")) -> None:
    """Stop posting new items for a server."""
    if _registry().unregister(guild_id):
        console.print(f"[green]✅ Server {guild_id} unsubscribed[/green]")
    else:
        console.print(f"[yellow]ℹ️ Server {guild_id} has no subscription[/yellow]")


@app.command()
def subscriptions() -> None:
    """List subscribed servers and their channels."""
    destinations = _registry().snapshot()
    if not destinations:
        console.print("[yellow]No subscriptions yet.[/yellow]")
        return

    table = Table(title="Subscriptions")
    table.add_column("Server", style="cyan")
    table.add_column("Channel", style="green")
    for guild_id, channel_id in sorted(destinations.items()):
        table.add_row(guild_id, channel_id)
    console.print(table)


if __name__ == "__main__":
    app()
