"""Report formatting utilities."""
from __future__ import annotations

import json
from typing import Literal

OutputFormat = Literal["cli", "json", "markdown"]

OUTPUT_FORMATS = ("cli", "json", "markdown")

_SOURCE_COLORS = {"JSON-LD": "green", "Microdata": "blue", "RDFa": "magenta", "Rendered": "yellow"}

_RENDER_LABELS = {
    "rendered": "Browser-rendered (JavaScript executed)",
    "static": "Static HTML",
}


def format_report(results: dict, output: OutputFormat = "cli") -> str:
    """Format a single-page analysis for output.

    Args:
        results: ``AnalysisResult.to_dict()`` output
        output: Output format - 'cli', 'json', or 'markdown'

    Returns:
        Formatted string representation of results
    """
    if output == "json":
        return _format_json(results)
    elif output == "markdown":
        return _format_markdown(results)
    else:
        return _format_cli(results)


def format_site_report(site: dict, output: OutputFormat = "cli") -> str:
    """Format a multi-page ``SiteAnalysis.to_dict()`` for output."""
    if output == "json":
        return _format_json(site)
    elif output == "markdown":
        return _format_site_markdown(site)
    else:
        return _format_site_cli(site)


def _format_json(results: dict) -> str:
    """Format results as JSON."""
    return json.dumps(results, ensure_ascii=False, indent=2, default=str)


def _counts(results: dict) -> list[tuple[str, int]]:
    return [
        ("JSON-LD", len(results.get("json_ld", []))),
        ("Microdata", len(results.get("microdata", []))),
        ("RDFa", len(results.get("rdfa", []))),
        ("Rendered", len(results.get("rendered", []))),
    ]


def _format_cli(results: dict) -> str:
    """Format results for terminal display with Rich-compatible markup."""
    lines = []
    url = results.get("url", "")
    final_url = results.get("final_url", url)
    method = results.get("render_method", "static")

    lines.append("[bold cyan]Structured Data Report[/bold cyan]")
    lines.append(f"[dim]URL:[/dim] {url}")
    if final_url and final_url != url:
        lines.append(f"[dim]Final URL:[/dim] {final_url}")
    lines.append(f"[dim]Fetched:[/dim] {_RENDER_LABELS.get(method, method)}")
    if results.get("render_error"):
        lines.append(f"[yellow]Render fell back to static:[/yellow] {results['render_error']}")
    lines.append("")

    lines.append(f"[bold]Candidates:[/bold] {results.get('all_schemas_count', 0)}")
    for source, count in _counts(results):
        color = _SOURCE_COLORS[source]
        lines.append(f"  [{color}]{source:10}[/{color}] {count}")
    lines.append("")

    schemas = results.get("schemas", [])
    if schemas:
        lines.append("[bold]Types Found:[/bold]")
        for schema in schemas:
            lines.append(f"  • {schema.get('@type') or '[dim](untyped)[/dim]'}")
        lines.append("")
    else:
        lines.append("[red]✗ No structured data found[/red]")
        lines.append("")

    matched = results.get("matched", [])
    if matched:
        lines.append("[bold green]Target Types:[/bold green]")
        for match in matched:
            color = _SOURCE_COLORS.get(match.get("source"), "white")
            validation = match.get("validation") or {}
            mark = "[red]✗[/red]" if validation.get("is_valid") is False else "[green]✓[/green]"
            lines.append(
                f"  {mark} {match.get('type')} "
                f"[{color}]({match.get('source')} #{match.get('source_index')})[/{color}]"
            )
            for issue in validation.get("issues", []):
                lines.append(f"      [red]-[/red] {issue.get('message')}")
            for recommendation in validation.get("recommendations", []):
                lines.append(f"      [dim]- {recommendation.get('message')}[/dim]")
            for warning in validation.get("non_standard", []):
                lines.append(f"      [yellow]-[/yellow] {warning.get('message')}")
        lines.append("")

    js = results.get("js_dependency")
    if js:
        percent = js.get("percent_js_rendered", 0)
        color = "red" if js.get("is_js_dependent") else "green"
        lines.append("[bold]JavaScript Dependency:[/bold]")
        lines.append(f"  Rendered-only markup: [{color}]{percent}%[/{color}]")
        critical = js.get("critical_content_only_in_js", [])
        if critical:
            lines.append(f"  [yellow]![/yellow] Only present after rendering: {', '.join(critical)}")
        if js.get("schema_js_injected"):
            lines.append("  [yellow]![/yellow] JSON-LD blocks are injected by JavaScript")

    return "\n".join(lines).rstrip()


def _format_markdown(results: dict) -> str:
    """Format results as Markdown."""
    lines = []
    url = results.get("url", "")
    method = results.get("render_method", "static")

    lines.append("# Structured Data Report")
    lines.append("")
    if url:
        lines.append(f"**URL:** {url}")
    lines.append(f"**Fetched:** {_RENDER_LABELS.get(method, method)}")
    if results.get("render_error"):
        lines.append(f"**Render fallback:** {results['render_error']}")
    lines.append("")

    lines.append("## Candidates")
    lines.append("")
    lines.append("| Source | Count |")
    lines.append("|--------|-------|")
    for source, count in _counts(results):
        lines.append(f"| {source} | {count} |")
    lines.append("")

    schemas = results.get("schemas", [])
    if schemas:
        lines.append("## Types Found")
        lines.append("")
        for schema in schemas:
            lines.append(f"- `{schema.get('@type') or '(untyped)'}`")
        lines.append("")

    matched = results.get("matched", [])
    if matched:
        lines.append("## Target Types")
        lines.append("")
        lines.append("| Type | Source | Index | Valid | Issues |")
        lines.append("|------|--------|-------|-------|--------|")
        for match in matched:
            validation = match.get("validation") or {}
            valid = {True: "✅", False: "❌"}.get(validation.get("is_valid"), "-")
            issues = "; ".join(i.get("message", "") for i in validation.get("issues", [])) or "-"
            lines.append(
                f"| {match.get('type')} | {match.get('source')} | {match.get('source_index')} "
                f"| {valid} | {issues} |"
            )
        lines.append("")

    js = results.get("js_dependency")
    if js:
        lines.append("## JavaScript Dependency")
        lines.append("")
        lines.append(f"- Rendered-only markup: **{js.get('percent_js_rendered', 0)}%**")
        lines.append(f"- Static size: {js.get('static_size', 0):,} / rendered size: {js.get('rendered_size', 0):,}")
        critical = js.get("critical_content_only_in_js", [])
        if critical:
            lines.append(f"- ⚠️ Only present after rendering: {', '.join(critical)}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def _format_site_cli(site: dict) -> str:
    lines = [
        "[bold cyan]Site Structured Data Report[/bold cyan]",
        f"[dim]Site:[/dim] {site.get('base_url', '')}",
        f"[dim]Pages:[/dim] {site.get('pages_succeeded', 0)}/{site.get('pages_analyzed', 0)} analyzed",
        "",
    ]

    for page in site.get("pages", []):
        label = f"{page.get('page_type', 'other'):9}"
        if page.get("success"):
            types = page.get("analysis", {}).get("schemas", [])
            summary = ", ".join(s.get("@type", "") for s in types if s.get("@type")) or "[dim]none[/dim]"
            lines.append(f"  [green]✓[/green] {label} {page.get('url')}  {summary}")
        else:
            lines.append(f"  [red]✗[/red] {label} {page.get('url')}  [red]{page.get('error')}[/red]")
    lines.append("")

    types = site.get("schema_types", {})
    if types:
        lines.append("[bold]Types Across Site:[/bold]")
        for schema_type, count in types.items():
            lines.append(f"  {schema_type:30} {count}")

    return "\n".join(lines).rstrip()


def _format_site_markdown(site: dict) -> str:
    lines = [
        "# Site Structured Data Report",
        "",
        f"**Site:** {site.get('base_url', '')}",
        f"**Pages analyzed:** {site.get('pages_succeeded', 0)}/{site.get('pages_analyzed', 0)}",
        "",
        "| Page | Type | Weight | Schemas |",
        "|------|------|--------|---------|",
    ]
    for page in site.get("pages", []):
        if page.get("success"):
            types = page.get("analysis", {}).get("schemas", [])
            cell = ", ".join(s.get("@type", "") for s in types if s.get("@type")) or "none"
        else:
            cell = f"❌ {page.get('error')}"
        lines.append(f"| {page.get('url')} | {page.get('page_type')} | {page.get('weight')} | {cell} |")
    lines.append("")

    types = site.get("schema_types", {})
    if types:
        lines.append("## Types Across Site")
        lines.append("")
        for schema_type, count in types.items():
            lines.append(f"- `{schema_type}`: {count}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"
