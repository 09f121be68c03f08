"""Utility functions for the Docs Catalog CLI."""

import json

import click
from rich.console import Console
from rich.table import Table

from docs_catalog.models.documents import DocumentInfo

console = Console()


def echo_error(message: str) -> None:
    """Print error message."""
    console.print(f"[red]✗ {message}[/red]")


def echo_warning(message: str) -> None:
    """Print warning message."""
    console.print(f"[yellow]⚠ {message}[/yellow]")


def echo_info(message: str) -> None:
    """Print info message."""
    console.print(f"[blue]ℹ {message}[/blue]")


def print_documents(
    documents: list[DocumentInfo], title: str = "Documents", output_format: str = "table"
) -> None:
    """Print documents as a rich table or as JSON."""
    if output_format == "json":
        payload = [d.model_dump(mode="json", by_alias=True) for d in documents]
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    if not documents:
        console.print(f"[yellow]No {title.lower()} found.[/yellow]")
        return

    table = Table(title=title)
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Category", style="magenta")
    table.add_column("Tags", style="dim")

    for document in documents:
        table.add_row(
            document.id, document.title, document.category, ", ".join(document.tags)
        )

    console.print(table)
