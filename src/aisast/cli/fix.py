"""CLI command: aisast fix <file> — apply fixes to one source file."""

from __future__ import annotations

import asyncio
import difflib
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from aisast.fixes.models import BatchFixResult
from aisast.pipeline import ScanPipeline
from aisast.scanner.catalog import language_for_path

console = Console(stderr=True)


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--language", "-l", default=None, help="Language override (default: from extension).")
@click.option("--write", "-w", is_flag=True, help="Write the fixed code back to FILE.")
@click.option("--enrich/--no-enrich", default=False, help="Ask the configured LLM for fixes the catalog lacks.")
@click.pass_context
def fix(
    ctx: click.Context,
    file: str,
    language: str | None,
    write: bool,
    enrich: bool,
) -> None:
    """Fix the vulnerabilities found in FILE."""
    config = ctx.obj["config"]
    path = Path(file)
    text = path.read_text(encoding="utf-8")
    lang = language or language_for_path(path)

    pipeline = ScanPipeline(config) if enrich else ScanPipeline(config, provider=None)
    batch = asyncio.run(_fix(pipeline, text, lang, str(path), enrich))

    if not batch.results:
        console.print("[green]No findings.[/green]")
        return

    _print_results(batch)

    if write:
        if batch.fixed_code != text:
            path.write_text(batch.fixed_code, encoding="utf-8")
            console.print(f"\nWrote [cyan]{path}[/cyan]")
    else:
        diff = difflib.unified_diff(
            text.splitlines(keepends=True),
            batch.fixed_code.splitlines(keepends=True),
            fromfile=str(path),
            tofile=f"{path} (fixed)",
        )
        sys.stdout.writelines(diff)

    console.print(f"\n{batch.fixed_count} fixed, {batch.failed_count} need review")


async def _fix(
    pipeline: ScanPipeline,
    text: str,
    language: str,
    file_name: str,
    enrich: bool,
) -> BatchFixResult:
    result = await pipeline.scan(text, language, file_name, enrich=enrich)
    suggestions = {}
    if enrich and pipeline.bridge.enabled:
        # AI fixes are only applied unattended above the auto-fix threshold
        threshold = pipeline.config.llm.confidence_threshold
        confident = []
        for finding in result.findings:
            if finding.confidence >= threshold:
                confident.append(finding)
            else:
                finding.suggested_fix = None
        suggestions = await pipeline.collect_suggestions(confident, text, language)
    return pipeline.fix_all(result.findings, text, suggestions)


def _print_results(batch: BatchFixResult) -> None:
    table = Table(title="Fixes", show_lines=False)
    table.add_column("Line", justify="right")
    table.add_column("Status", style="bold")
    table.add_column("Source")
    table.add_column("Change / reason", max_width=70)

    for result in batch.results:
        line = str(result.changes[0].line) if result.changes else "-"
        if result.success:
            status = "[green]fixed[/green]"
            detail = (result.fixed_line or "").strip()
        else:
            status = "[red]failed[/red]"
            detail = result.reason or ""
        table.add_row(
            line,
            status,
            result.source.value if result.source else "-",
            detail,
        )

    console.print(table)
