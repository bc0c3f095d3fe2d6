"""Command-line interface for the activity tracker.

Provides commands for:
- Parsing activity text into tags, priority and a clean title
- Looking up activity and tag suggestions from the backend
"""

import asyncio
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from activity_tracker import __version__
from activity_tracker.integrations.suggestion_client import SuggestionClient
from activity_tracker.parsing.input_parser import InputParser, format_input_help
from activity_tracker.schemas import Suggestion
from activity_tracker.services.autocomplete_service import AutoCompleteService
from activity_tracker.utils.config import APIConfig, AutoCompleteConfig, configure_logging, load_config

console = Console()


# --- Utility Functions ---


def get_priority_style(priority: int | None) -> str:
    """Get rich style for priority level."""
    styles = {
        1: "bold red",
        2: "yellow",
        3: "green",
    }
    return styles.get(priority, "dim")


async def fetch_suggestions(
    api_config: APIConfig,
    autocomplete_config: AutoCompleteConfig,
    query: str,
) -> tuple[tuple[Suggestion, ...], str | None]:
    """Run a single search and return (suggestions, error message)."""
    # One-shot lookup: nothing to debounce
    one_shot = autocomplete_config.model_copy(update={"debounce_ms": 0})
    async with SuggestionClient.from_config(api_config) as client:
        async with AutoCompleteService(client, one_shot) as service:
            if query:
                await service.perform_search(query)
            else:
                await service.get_initial_suggestions()
            return service.suggestions, service.error


# --- Main CLI Group ---


@click.group()
@click.version_option(version=__version__, prog_name="Activity Tracker")
@click.option("--config", "-c", type=click.Path(exists=True), help="Path to config file")
@click.pass_context
def cli(ctx, config):
    """Activity Tracker - parse activity input and browse suggestions.

    Use 'tracker <command> --help' for more information about a command.
    """
    ctx.ensure_object(dict)

    config_path = config if config else None
    ctx.obj["config"] = load_config(config_path)
    configure_logging(ctx.obj["config"].logging.level)


@cli.command("parse")
@click.argument("text")
def parse_command(text):
    """Parse activity TEXT into tags, priority and title."""
    parsed = InputParser.parse(text)

    table = Table(title="Parsed Activity", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Title", escape(parsed.clean_text) or "[dim](empty)[/dim]")
    table.add_row("Tags", escape(", ".join(f"#{t}" for t in parsed.tags)) or "-")
    priority_style = get_priority_style(parsed.priority)
    table.add_row(
        "Priority",
        f"[{priority_style}]{parsed.priority}[/{priority_style}]" if parsed.priority else "-",
    )
    table.add_row("Focus", str(parsed.focus_rating) if parsed.focus_rating else "-")

    console.print(table)


@cli.command("markers")
def markers_command():
    """Show the markers understood in activity text."""
    console.print(format_input_help(), markup=False)


@cli.command("suggest")
@click.argument("query", required=False, default="")
@click.option("--limit", "-n", type=click.IntRange(1, 50), help="Maximum suggestions to show")
@click.pass_context
def suggest_command(ctx, query, limit):
    """Show suggestions for QUERY (recent items when omitted)."""
    config = ctx.obj["config"]
    autocomplete_config = config.autocomplete
    if limit:
        autocomplete_config = autocomplete_config.model_copy(update={"max_suggestions": limit})

    suggestions, error = asyncio.run(
        fetch_suggestions(config.api, autocomplete_config, query.strip())
    )

    if error:
        console.print(f"[red]{error}[/red]")
        sys.exit(1)

    if not suggestions:
        console.print("[dim]No suggestions found.[/dim]")
        return

    table = Table(title=f"Suggestions ({len(suggestions)})")
    table.add_column("Type", width=8)
    table.add_column("Text", style="white", min_width=20, max_width=50)
    table.add_column("Uses", justify="right", width=5)

    for suggestion in suggestions:
        type_style = "magenta" if suggestion.type == "tag" else "cyan"
        text = f"#{suggestion.text}" if suggestion.type == "tag" else suggestion.text
        table.add_row(
            f"[{type_style}]{suggestion.type}[/{type_style}]",
            escape(text),
            str(suggestion.frequency),
        )

    console.print(table)


if __name__ == "__main__":
    cli()
