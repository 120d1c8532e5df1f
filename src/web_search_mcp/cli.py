import asyncio
import json
import logging

import typer  # type: ignore
from rich.console import Console  # type: ignore
from rich.table import Table  # type: ignore

# Ensure providers are registered
import web_search_mcp.providers  # noqa: F401
from web_search_mcp.base import SearchResponse
from web_search_mcp.config import Settings
from web_search_mcp.logs import configure_logging
from web_search_mcp.registry import get_all_providers, list_providers
from web_search_mcp.server import build_http_client, build_search_service, create_server
from web_search_mcp.text import truncate_text

app = typer.Typer(help="web-search-mcp: DuckDuckGo web search over MCP")
console = Console(stderr=True)
logger = logging.getLogger(__name__)


def _load_settings() -> Settings:
    try:
        settings = Settings.from_env()
    except RuntimeError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=2) from e
    configure_logging(settings.log_level)
    return settings


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Run the MCP server when no command is given."""
    if ctx.invoked_subcommand is None:
        serve()


@app.command("serve")
def serve() -> None:
    """Serve the web_search tool over MCP stdio."""
    settings = _load_settings()
    server = create_server(settings)
    logger.info("Web search MCP server running name=%s", settings.server_name)
    server.run(transport="stdio")


@app.command("providers")
def providers_command() -> None:
    """List available search providers."""
    providers = list_providers()
    if not providers:
        console.print("[yellow]No providers found.[/yellow]")
        return

    table = Table(title="Available Providers")
    table.add_column("Name", style="cyan")
    table.add_column("Class", style="green")

    all_providers = get_all_providers()
    for name in providers:
        table.add_row(name, all_providers[name].__name__)

    console.print(table)


@app.command("search")
def search(
    query: str = typer.Argument(..., help="Search query"),
    max_results: int | None = typer.Option(
        None, "--max-results", "-n", help="Number of results (1-20)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw tool response"),
) -> None:
    """Run one search and print the results."""
    settings = _load_settings()

    with console.status(f"Searching for '{query}'..."):
        response = asyncio.run(_run_search(settings, query, max_results))

    if as_json:
        typer.echo(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))
    elif response.success:
        _print_results(response)
    else:
        console.print(f"[red]Search failed:[/red] {response.error}")

    if not response.success:
        raise typer.Exit(code=1)


async def _run_search(
    settings: Settings, query: str, max_results: int | None
) -> SearchResponse:
    http_client = build_http_client(settings)
    try:
        service = build_search_service(settings, http_client=http_client)
        return await service.search(query, max_results)
    finally:
        await http_client.aclose()


def _print_results(response: SearchResponse) -> None:
    table = Table(title=f"Results for '{response.query}' ({response.result_count})")
    table.add_column("Title", style="bold cyan")
    table.add_column("Snippet", style="white")
    table.add_column("URL", style="blue underline")

    for res in response.results:
        table.add_row(res.title, truncate_text(res.snippet, 200), res.url)

    Console().print(table)


if __name__ == "__main__":
    app()
