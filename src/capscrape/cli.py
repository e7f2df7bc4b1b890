"""CLI for capscrape."""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from capscrape import __version__
from capscrape.core.errors import DiscoveryError, SnapshotReadError, SnapshotWriteError
from capscrape.core.models import CrawlConfig, RegistryData, format_timestamp
from capscrape.engine.crawler import CrawlOrchestrator
from capscrape.log import setup_logging
from capscrape.query import available_providers, get_provider, summarize
from capscrape.storage.filesystem import FilesystemStorage

console = Console()

DEFAULT_OUTPUT = CrawlConfig().output_path


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]capscrape[/bold] version {__version__}")
        raise typer.Exit()


async def _run_crawler(config: CrawlConfig) -> None:
    """Run the crawler asynchronously."""
    crawler = CrawlOrchestrator(config, storage=FilesystemStorage())

    if not config.quiet:
        console.print()
        console.print(
            Panel(
                f"[bold green]Index:[/bold green] {config.index_url}\n"
                f"[bold cyan]Concurrency:[/bold cyan] {config.max_concurrency}\n"
                f"[bold yellow]Output:[/bold yellow] {config.output_path}",
                title="[bold]capscrape[/bold]",
                border_style="blue",
            )
        )
        console.print()

    try:
        snapshot = await crawler.crawl()

    except DiscoveryError as e:
        console.print(f"\n[red]Discovery failed: {e}[/red]")
        raise typer.Exit(1)

    except SnapshotWriteError as e:
        console.print(f"\n[red]Could not write snapshot: {e}[/red]")
        raise typer.Exit(1)

    report = crawler.report
    if config.quiet:
        return

    console.print()
    console.print(
        Panel(
            f"[bold green]Providers:[/bold green] {len(snapshot.providers)}\n"
            f"[bold yellow]Skipped:[/bold yellow] {report.skipped}\n"
            f"[bold red]Failed:[/bold red] {report.failed}\n"
            f"[bold cyan]Output:[/bold cyan] {config.output_path}",
            title="[bold green]Crawl Complete![/bold green]",
            border_style="green",
        )
    )

    if report.failures:
        console.print()
        console.print("[red]Failed URLs:[/red]")
        for failed in report.failures[:5]:
            console.print(f"  [dim]-[/dim] {failed['url']}")
        if len(report.failures) > 5:
            console.print(f"  [dim]... and {len(report.failures) - 5} more[/dim]")

    if report.warnings:
        console.print()
        console.print("[yellow]Skipped pages:[/yellow]")
        for skipped in report.warnings:
            console.print(f"  [dim]-[/dim] {skipped['reason']}")


def _load_snapshot(path: Path) -> Optional[RegistryData]:
    try:
        return asyncio.run(FilesystemStorage().load_snapshot(path))
    except SnapshotReadError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _no_data(path: Path) -> None:
    console.print(
        f"[yellow]No data yet:[/yellow] {path} does not exist. "
        "Run [bold]capscrape crawl[/bold] first."
    )


app = typer.Typer(
    name="capscrape",
    help="Crawl provider docs into a model capability registry.",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback()
def common(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """Crawl provider docs into a model capability registry."""


@app.command()
def crawl(
    output: Annotated[
        Path,
        typer.Option(
            "-o",
            "--output",
            envvar="CAPSCRAPE_OUTPUT",
            help="Snapshot path",
        ),
    ] = DEFAULT_OUTPUT,
    base_url: Annotated[
        str,
        typer.Option(
            "--base-url",
            help="Documentation site root",
        ),
    ] = CrawlConfig.base_url,
    index_path: Annotated[
        str,
        typer.Option(
            "--index-path",
            help="Path of the provider index page",
        ),
    ] = CrawlConfig.index_path,
    concurrency: Annotated[
        int,
        typer.Option(
            "-c",
            "--concurrency",
            min=1,
            help="Maximum concurrent requests",
        ),
    ] = CrawlConfig.max_concurrency,
    retries: Annotated[
        int,
        typer.Option(
            "-r",
            "--retries",
            min=0,
            help="Retries per failed request",
        ),
    ] = CrawlConfig.max_retries,
    timeout: Annotated[
        float,
        typer.Option(
            "-t",
            "--timeout",
            help="Per-request timeout in seconds",
        ),
    ] = CrawlConfig.timeout,
    verbose: Annotated[
        bool,
        typer.Option(
            "-v",
            "--verbose",
            help="Verbose output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "-q",
            "--quiet",
            help="Only print warnings and errors (for scripting/CI)",
        ),
    ] = False,
) -> None:
    """Crawl every provider page and write the snapshot.

    \b
    Examples:
        capscrape crawl
        capscrape crawl -o ./data/data.json -c 3
    """
    config = CrawlConfig(
        base_url=base_url,
        index_path=index_path,
        output_path=output,
        max_concurrency=concurrency,
        max_retries=retries,
        timeout=timeout,
        verbose=verbose,
        quiet=quiet,
    )
    setup_logging(verbose=config.verbose, quiet=config.quiet)

    asyncio.run(_run_crawler(config))


@app.command("providers")
def providers(
    output: Annotated[
        Path,
        typer.Option("-o", "--output", envvar="CAPSCRAPE_OUTPUT", help="Snapshot path"),
    ] = DEFAULT_OUTPUT,
) -> None:
    """List the providers in the snapshot."""
    data = _load_snapshot(output)
    if data is None:
        _no_data(output)
        return

    table = Table(
        title=f"[bold]Providers[/bold] (updated {format_timestamp(data.updated_at)})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Provider", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Models", justify="right")
    table.add_column("Columns", style="yellow")

    for summary in summarize(data):
        table.add_row(
            summary.provider,
            summary.display_name,
            str(summary.model_count),
            ", ".join(summary.columns),
        )

    console.print()
    console.print(table)
    console.print(f"[dim]{len(data.providers)} providers[/dim]")


@app.command("show")
def show(
    slug: Annotated[str, typer.Argument(help="Provider slug (e.g. openai)")],
    output: Annotated[
        Path,
        typer.Option("-o", "--output", envvar="CAPSCRAPE_OUTPUT", help="Snapshot path"),
    ] = DEFAULT_OUTPUT,
) -> None:
    """Show one provider's models and capabilities."""
    data = _load_snapshot(output)
    if data is None:
        _no_data(output)
        return

    provider = get_provider(data, slug)
    if provider is None:
        console.print(f"[red]Provider {slug!r} not found.[/red]")
        console.print(f"Available: {', '.join(available_providers(data)) or '-'}")
        raise typer.Exit(1)

    table = Table(
        title=f"[bold]{provider.display_name}[/bold]",
        caption=provider.url,
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Model", style="cyan")
    for column in provider.columns:
        table.add_column(column, justify="center")

    for model in provider.models:
        table.add_row(
            model.model,
            *("[green]yes[/green]" if model.supports(c) else "[dim]-[/dim]" for c in provider.columns),
        )

    console.print()
    console.print(table)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
