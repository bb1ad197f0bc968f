"""Helpers shared by CLI commands."""

import logging
from typing import Awaitable, Callable, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..config import Config
from ..db import PostgresStore, open_pool
from ..errors import ConfigurationError

console = Console()

T = TypeVar("T")


def setup_logging(verbose: bool = False) -> None:
    """Route library logs through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def load_config() -> Config:
    """Load the configuration or exit with a hint."""
    config = Config()
    try:
        config.config
    except FileNotFoundError:
        console.print("[red]Config file not found. Run 'trendfeed init' first.[/red]")
        raise typer.Exit(1)
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    return config


async def with_store(config: Config, func: Callable[[PostgresStore], Awaitable[T]]) -> T:
    """Run ``func`` with a store backed by a freshly opened pool."""
    async with open_pool(config.get_db_config()) as pool:
        return await func(PostgresStore(pool))
