"""CLI command: aisast scan <path> — static security analysis."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from aisast.pipeline import ScanPipeline
from aisast.scanner.engine import ScanEngine
from aisast.scanner.models import DirectoryScanResult, ScanResult, Severity

console = Console(stderr=True)

SEVERITY_COLORS = {
    Severity.CRITICAL: "red",
    Severity.HIGH: "magenta",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
}


@click.command()
@click.argument("path", type=click.Path(exists=True))
@click.option("--language", "-l", default=None, help="Language override (default: from extension).")
@click.option("--enrich/--no-enrich", default=False, help="Ask the configured LLM to enrich findings.")
@click.option("--json", "as_json", is_flag=True, help="Print findings as JSON on stdout.")
@click.pass_context
def scan(
    ctx: click.Context,
    path: str,
    language: str | None,
    enrich: bool,
    as_json: bool,
) -> None:
    """Scan a file or directory for security vulnerabilities."""
    config = ctx.obj["config"]
    engine = ScanEngine(
        exclude_patterns=config.scan.exclude_patterns,
        max_file_size=config.scan.max_file_size,
    )

    if not as_json:
        console.print(f"[bold]aisast[/bold] scanning [cyan]{path}[/cyan]\n")

    if Path(path).is_dir():
        result = engine.scan(path, language)
    else:
        file_result = engine.scan_file(path, language)
        result = DirectoryScanResult(
            directory=str(Path(path).resolve().parent),
            files=[file_result],
            files_scanned=1,
            duration=file_result.duration,
        )

    if enrich:
        pipeline = ScanPipeline(config)
        if not pipeline.bridge.enabled:
            console.print("[yellow]Enrichment unavailable: no provider configured.[/yellow]")
        else:
            asyncio.run(_enrich(pipeline, result.files))

    findings = result.findings
    if as_json:
        click.echo(json.dumps(_to_json(result), indent=2))
    elif not findings:
        console.print("[green]No findings.[/green]")
        _print_summary(result)
        return
    else:
        findings.sort(key=lambda f: (f.severity.rank, f.file_name, f.line))

        table = Table(title="Findings", show_lines=False)
        table.add_column("Severity", style="bold", width=10)
        table.add_column("File", style="cyan")
        table.add_column("Line", justify="right")
        table.add_column("Type")
        table.add_column("Conf.", justify="right")
        table.add_column("Match", max_width=50)

        for finding in findings:
            color = SEVERITY_COLORS.get(finding.severity, "white")
            table.add_row(
                f"[{color}]{finding.severity.value}[/{color}]",
                _shorten_path(finding.file_name, result.directory),
                str(finding.line),
                finding.type,
                str(finding.confidence),
                finding.matched_text[:50],
            )

        console.print(table)
        _print_summary(result)

    critical_count = sum(1 for f in findings if f.severity == Severity.CRITICAL)
    if critical_count > 0:
        if not as_json:
            console.print(f"\n[red]{critical_count} critical finding(s)[/red]")
        sys.exit(1)


async def _enrich(pipeline: ScanPipeline, files: list[ScanResult]) -> None:
    for file_result in files:
        if not file_result.findings:
            continue
        text = Path(file_result.file_name).read_text(encoding="utf-8", errors="ignore")
        file_result.enrichment = await pipeline.bridge.enrich_all(
            file_result.findings, text, file_result.language
        )


def _to_json(result: DirectoryScanResult) -> dict:
    return {
        "directory": result.directory,
        "filesScanned": result.files_scanned,
        "filesSkipped": result.files_skipped,
        "duration": result.duration,
        "vulnerabilities": [f.to_dict() for f in result.findings],
    }


def _print_summary(result: DirectoryScanResult) -> None:
    console.print(
        f"\nScanned {result.files_scanned} files "
        f"({result.files_skipped} skipped) "
        f"in {result.duration:.2f}s"
    )
    console.print(f"Total findings: {len(result.findings)}")


def _shorten_path(file_path: str, base_dir: str) -> str:
    """Shorten file path relative to scan directory."""
    if file_path.startswith(base_dir):
        return file_path[len(base_dir) :].lstrip("/")
    return file_path
