"""Main CLI entry point for Docs Catalog."""

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import click

from docs_catalog import __version__
from docs_catalog.core.catalog import DocumentCatalog, create_catalog
from docs_catalog.core.exceptions import CatalogError, DocumentNotFoundError
from docs_catalog.core.logging import setup_logging
from docs_catalog.core.utils import top_level_category
from docs_catalog.models.config import CatalogSettings

from .utils import echo_error, echo_info, echo_warning, print_documents

T = TypeVar("T")

OUTPUT_FORMAT = click.option(
    "--format",
    "output_format",
    default="table",
    type=click.Choice(["table", "json"]),
    help="Output format",
)


def build_settings(
    config_path: Path | None,
    docs_path: Path | None,
    owner: str | None,
    repo: str | None,
    branch: str | None,
    verbose: bool,
) -> CatalogSettings:
    """Load settings from file and environment, then apply CLI overrides."""
    settings = CatalogSettings.load_from_file(config_path)

    repository_overrides = {
        key: value
        for key, value in {"owner": owner, "repo": repo, "branch": branch}.items()
        if value
    }
    updates: dict = {}
    if repository_overrides:
        updates["repository"] = settings.repository.model_copy(
            update=repository_overrides
        )
    if docs_path is not None:
        updates["docs_path"] = docs_path
    if verbose:
        updates["log_level"] = "DEBUG"

    return settings.model_copy(update=updates) if updates else settings


def run_with_catalog(
    ctx: click.Context, operation: Callable[[DocumentCatalog], Awaitable[T]]
) -> T:
    """Create the configured catalog, run ``operation`` and close it."""
    settings: CatalogSettings = ctx.obj["settings"]

    async def runner() -> T:
        catalog = create_catalog(settings)
        try:
            return await operation(catalog)
        finally:
            aclose = getattr(catalog, "aclose", None)
            if aclose is not None:
                await aclose()

    try:
        return asyncio.run(runner())
    except DocumentNotFoundError as e:
        echo_error(e.message)
        echo_info("Run 'docs-catalog list' to see available document ids")
        ctx.exit(1)
    except CatalogError as e:
        echo_error(e.message)
        ctx.exit(1)


@click.group()
@click.version_option(__version__, "-v", "--version", prog_name="docs-catalog")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    help="YAML settings file (default: ~/.docs-catalog/config.yaml)",
)
@click.option(
    "--docs-path",
    type=click.Path(path_type=Path, file_okay=False),
    help="Local document folder; GitHub is used when it does not exist",
)
@click.option("--owner", help="GitHub repository owner")
@click.option("--repo", help="GitHub repository name")
@click.option("--branch", help="GitHub branch")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path, docs_path, owner, repo, branch, verbose):
    """Docs Catalog - browse guidelines, recommendations and ADRs.

    Documents come from a local folder (--docs-path) or from a GitHub
    repository.

    Examples:
        docs-catalog list                         # List all documents
        docs-catalog list --category adrs         # Only ADRs
        docs-catalog search "unit testing"        # Search titles and paths
        docs-catalog tag dotnet                   # Documents tagged 'dotnet'
        docs-catalog get 0001-adopt-dotnet        # Print a document
        docs-catalog serve                        # Run the MCP server
    """
    ctx.ensure_object(dict)
    settings = build_settings(config_path, docs_path, owner, repo, branch, verbose)
    if verbose:
        setup_logging(settings.log_level)
    if docs_path is not None and not settings.uses_local_docs:
        echo_warning(f"Not a directory, reading documents from GitHub: {docs_path}")
    ctx.obj["settings"] = settings


@cli.command("list")
@click.option("--category", help="Only documents in this top-level category")
@OUTPUT_FORMAT
@click.pass_context
def list_command(ctx, category, output_format):
    """List all documents."""
    documents = run_with_catalog(ctx, lambda catalog: catalog.list_documents())
    if category:
        wanted = category.casefold()
        documents = [d for d in documents if top_level_category(d).casefold() == wanted]
    print_documents(documents, "Documents", output_format)


@cli.command()
@click.argument("query")
@OUTPUT_FORMAT
@click.pass_context
def search(ctx, query, output_format):
    """Search documents by title, id and path (case-insensitive)."""
    documents = run_with_catalog(ctx, lambda catalog: catalog.search(query))
    print_documents(documents, "Search results", output_format)


@cli.command()
@click.argument("tag")
@OUTPUT_FORMAT
@click.pass_context
def tag(ctx, tag, output_format):
    """List documents carrying TAG."""
    documents = run_with_catalog(ctx, lambda catalog: catalog.search_by_tag(tag))
    print_documents(documents, f"Documents tagged '{tag}'", output_format)


@cli.command()
@click.argument("document_id")
@click.pass_context
def get(ctx, document_id):
    """Print the raw Markdown of a document."""
    content = run_with_catalog(ctx, lambda catalog: catalog.get_content(document_id))
    click.echo(content)


@cli.command()
@click.pass_context
def serve(ctx):
    """Run the MCP server over stdio."""
    from docs_catalog.mcp_server.main import main as serve_mcp

    asyncio.run(serve_mcp(ctx.obj["settings"]))


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
