"""Init command implementation."""

import asyncio
from pathlib import Path

import typer
from rich.panel import Panel

from ..config import ConfigModel, save_config
from ..db import init_database, validate_connection
from .common import console


def init_command(
    config_dir: Path = typer.Option(
        Path.home() / ".config" / "trendfeed",
        "--config-dir",
        "-c",
        help="Configuration directory",
    ),
    db_host: str = typer.Option("localhost", "--db-host", help="Postgres host"),
    db_port: int = typer.Option(5432, "--db-port", help="Postgres port"),
    db_name: str = typer.Option("trendfeed", "--db-name", help="Database name"),
    db_user: str = typer.Option("trendfeed_user", "--db-user", help="Database user"),
    seed_sources: bool = typer.Option(
        True,
        "--seed-sources/--no-seed-sources",
        help="Seed the Qiita, Zenn, note and Hatena media sources",
    ),
) -> None:
    """Initialize trendfeed configuration and database."""
    console.print(Panel.fit("trendfeed - Initialization", style="bold blue"))

    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / "config.yaml"

    config = ConfigModel(
        postgres={
            "host": db_host,
            "port": db_port,
            "database": db_name,
            "user": db_user,
            "password_env": "TRENDFEED_DB_PASSWORD",
        },
    )

    if config_path.exists():
        console.print(f"[yellow]Config already exists, keeping it: {config_path}[/yellow]")
    else:
        save_config(config, config_path)
        console.print(f"✅ Created config: {config_path}")

    console.print("\n[bold]Testing database connection...[/bold]")
    db_config = config.postgres.model_dump()

    if not asyncio.run(validate_connection(db_config)):
        console.print(
            "[red]❌ Database connection failed![/red]\n"
            "Please ensure Postgres is running and credentials are correct.\n"
            "Set the password via environment variable: [bold]export TRENDFEED_DB_PASSWORD=your_password[/bold]"
        )
        raise typer.Exit(1)

    console.print("✅ Database connection successful")

    console.print("\n[bold]Initializing database schema...[/bold]")
    try:
        asyncio.run(init_database(db_config, seed=seed_sources))
        console.print("✅ Database schema initialized")
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        Panel(
            f"[green]✅ trendfeed initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n\n"
            f"Next steps:\n"
            f"1. Set database password: [bold]export TRENDFEED_DB_PASSWORD=your_password[/bold]\n"
            f"2. Set Qiita token: [bold]export QIITA_ACCESS_TOKEN=your_token[/bold]\n"
            f"3. Run: [bold]trendfeed collect[/bold]",
            style="green",
        )
    )
