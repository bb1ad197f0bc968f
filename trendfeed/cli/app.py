"""Main CLI application."""

import typer
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

from .articles import articles_command, show_command
from .collect import collect_command
from .common import setup_logging
from .init import init_command
from .sources import sources_app
from .tags import tags_command
from .trends import trends_command

app = typer.Typer(
    name="trendfeed",
    help="trendfeed - Tech article aggregator for Qiita, Zenn, note and Hatena Blog",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    setup_logging(verbose)


# Register commands
app.command("init")(init_command)
app.command("collect")(collect_command)
app.command("articles")(articles_command)
app.command("show")(show_command)
app.command("tags")(tags_command)
app.command("trends")(trends_command)
app.add_typer(sources_app, name="sources", help="Inspect media sources and crawl logs")


if __name__ == "__main__":
    app()
