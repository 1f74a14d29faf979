"""CLI command: aisast status — configuration and detection model summary."""

from __future__ import annotations

import click
from rich.console import Console

from aisast import __version__
from aisast.analysis.providers import build_provider
from aisast.scanner.catalog import rule_count, supported_languages

console = Console()


@click.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the active configuration and whether enrichment is available."""
    config = ctx.obj["config"]
    llm = config.llm

    console.print(f"[bold]aisast[/bold] {__version__}")
    console.print(
        f"Catalog: {rule_count()} rules for {', '.join(supported_languages())} "
        "[dim](static, no training)[/dim]"
    )

    if build_provider(llm) is not None:
        console.print(
            f"Enrichment: [green]{llm.provider}[/green] "
            f"model [cyan]{llm.resolved_model}[/cyan] at {llm.resolved_base_url}"
        )
    elif not llm.enabled:
        console.print("Enrichment: [yellow]disabled[/yellow]")
    else:
        console.print(f"Enrichment: [yellow]no credentials for {llm.provider}[/yellow]")

    console.print(
        f"Limits: {llm.timeout:g}s per call, {llm.deadline:g}s per scan, "
        f"{llm.max_concurrency} concurrent"
    )
    console.print(f"SonarQube: {config.sonarqube.url}")

    problems = config.validate()
    if problems:
        console.print("\n[red]Configuration problems:[/red]")
        for problem in problems:
            console.print(f"  - {problem}")
        raise SystemExit(1)
