"""CLI command: aisast catalog [language] — list detection rules."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from aisast.cli.scan import SEVERITY_COLORS
from aisast.scanner.catalog import entries_for, normalize_language, supported_languages

console = Console()


@click.command()
@click.argument("language", required=False)
def catalog(language: str | None) -> None:
    """List the detection rules, for one LANGUAGE or all of them."""
    languages = [normalize_language(language)] if language else supported_languages()

    table = Table(title="Detection rules", show_lines=False)
    table.add_column("Rule", style="cyan")
    table.add_column("Type")
    table.add_column("Severity", style="bold")
    table.add_column("Auto-fix", justify="center")

    count = 0
    for lang in languages:
        for pattern in entries_for(lang):
            color = SEVERITY_COLORS.get(pattern.severity, "white")
            table.add_row(
                pattern.rule_id,
                pattern.type,
                f"[{color}]{pattern.severity.value}[/{color}]",
                "yes" if pattern.has_fix else "-",
            )
            count += 1

    console.print(table)
    console.print(f"{count} rule(s)")
