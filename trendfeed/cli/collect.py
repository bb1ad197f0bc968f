"""Collect command implementation."""

import asyncio
from typing import Optional

import typer

from ..ingestion import build_adapters
from ..pipeline import CollectionOrchestrator, print_collection_summary
from .common import console, load_config, with_store


def collect_command(
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Wall-clock limit for the whole cycle in seconds. Default: from config",
        min=1,
    ),
) -> None:
    """Collect articles from every active media source."""
    config = load_config()
    if timeout is None:
        timeout = config.config.collection.timeout_seconds

    async def run(store):
        orchestrator = CollectionOrchestrator(store, build_adapters(config), timeout=timeout)
        return await orchestrator.run_cycle()

    try:
        summary = asyncio.run(with_store(config, run))
    except KeyboardInterrupt:
        console.print("\n[yellow]Collection interrupted by user[/yellow]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Collection failed: {e}[/red]")
        raise typer.Exit(1)

    # Per-source failures are reported, not treated as a failed command.
    print_collection_summary(summary, console)
