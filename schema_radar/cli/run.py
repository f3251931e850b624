"""CLI commands."""
from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from schema_radar import __version__, logging_config
from schema_radar.config.settings import Settings
from schema_radar.crawler.page_discovery import discover_pages
from schema_radar.crawler.site_analyzer import analyze_site
from schema_radar.errors import InvalidURLError, categorize_exception, user_message
from schema_radar.fetcher.strategy import validate_url
from schema_radar.pipeline import analyze_url
from schema_radar.report.formatter import (
    OUTPUT_FORMATS,
    OutputFormat,
    format_report,
    format_site_report,
)

app = typer.Typer(
    add_completion=False,
    help="Schema Radar - Extract Schema.org structured data from web pages",
)
console = Console()


def _load_settings(render: bool = False, verbose: bool = False) -> Settings:
    settings = Settings.from_env()
    if render:
        settings.render.enabled = True
    level = "DEBUG" if verbose else settings.logging.level
    logging_config.configure(json_output=settings.logging.json_output, level=level)
    return settings


def _check_output(output: str) -> OutputFormat:
    if output not in OUTPUT_FORMATS:
        console.print(f"[red]Error:[/red] Invalid output format '{output}'. Use cli, json, or markdown.")
        raise typer.Exit(1)
    return output  # type: ignore[return-value]


def _fail(exc: Exception, settings: Settings, verbose: bool = False) -> None:
    category = categorize_exception(exc)
    console.print(f"\n[red]Error:[/red] {user_message(category, str(exc), settings.debug)}")
    if verbose:
        console.print(f"[dim]{type(exc).__name__}: {exc}[/dim]", markup=False)
    raise typer.Exit(1)


def _emit(report: str, output_format: OutputFormat, save: str | None) -> None:
    if save:
        save_path = Path(save)
        save_path.write_text(report, encoding="utf-8")
        console.print(f"\n[green]Report saved to:[/green] {save_path}")
    else:
        console.print("")
        if output_format == "cli":
            # CLI format uses Rich markup
            console.print(report)
        else:
            # JSON/Markdown - print raw
            console.print(report, markup=False, highlight=False, soft_wrap=True)


@app.command()
def run(
    target: str = typer.Argument(..., help="URL to analyze"),
    output: str = typer.Option(
        "cli",
        "--output",
        "-o",
        help="Output format: cli, json, markdown",
    ),
    save: str | None = typer.Option(
        None,
        "--save",
        "-s",
        help="Save report to file",
    ),
    render: bool = typer.Option(
        False,
        "--render",
        "-r",
        help="Render with a headless browser (also enabled by SCHEMA_RADAR_ENABLE_JS_RENDERING)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed extraction information",
    ),
) -> None:
    """Extract every structured-data candidate from a URL.

    Examples:
        schema-radar run https://example.com
        schema-radar run https://example.com -o json
        schema-radar run https://example.com --render -o markdown -s report.md
    """
    output_format = _check_output(output)
    settings = _load_settings(render, verbose)

    console.print(Panel.fit(
        f"[bold cyan]Schema Radar[/bold cyan]\n[dim]Analyzing:[/dim] {target}",
        border_style="cyan",
    ))

    try:
        with console.status("[bold blue]Fetching and extracting...", spinner="dots"):
            result = analyze_url(target, settings)
    except Exception as e:
        _fail(e, settings, verbose)

    if verbose:
        console.print(
            f"[dim]Fetched {len(result.html):,} characters via {result.render_method}, "
            f"{len(result.schemas)} candidates[/dim]"
        )

    _emit(format_report(result.to_dict(), output_format), output_format, save)


@app.command()
def discover(
    target: str = typer.Argument(..., help="Site URL to discover pages on"),
    max_pages: int = typer.Option(10, "--max-pages", "-n", min=1, help="Maximum pages to list"),
) -> None:
    """List the important pages of a site and their classification.

    Example:
        schema-radar discover https://example.com -n 5
    """
    settings = _load_settings()

    try:
        target = validate_url(target)
    except InvalidURLError as e:
        _fail(e, settings)

    with console.status("[bold blue]Discovering pages...", spinner="dots"):
        pages = discover_pages(target, max_pages, settings.fetcher)

    table = Table(title=f"Pages on {target}")
    table.add_column("Type", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("URL")
    for page in pages:
        table.add_row(page.page_type, f"{page.weight:.2f}", page.url)
    console.print(table)


@app.command()
def site(
    target: str = typer.Argument(..., help="Site URL to analyze"),
    max_pages: int = typer.Option(10, "--max-pages", "-n", min=1, help="Maximum pages to analyze"),
    output: str = typer.Option(
        "cli",
        "--output",
        "-o",
        help="Output format: cli, json, markdown",
    ),
    save: str | None = typer.Option(None, "--save", "-s", help="Save report to file"),
    render: bool = typer.Option(False, "--render", "-r", help="Render each page with a headless browser"),
) -> None:
    """Discover the important pages of a site and extract structured data from each.

    Example:
        schema-radar site https://example.com -n 5 -o markdown
    """
    output_format = _check_output(output)
    settings = _load_settings(render)

    try:
        with console.status("[bold blue]Analyzing site...", spinner="dots"):
            analysis = analyze_site(target, settings, max_pages=max_pages)
    except Exception as e:
        _fail(e, settings)

    _emit(format_site_report(analysis.to_dict(), output_format), output_format, save)

    if not analysis.successful:
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]Schema Radar[/bold] v{__version__}")
    console.print("[dim]Schema.org structured data extractor[/dim]")


if __name__ == "__main__":
    app()
