"""CLI command: aisast server — start the dashboard API."""

from __future__ import annotations

import click
from rich.console import Console

console = Console(stderr=True)


@click.command()
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to listen on (default: 8480).",
)
@click.pass_context
def server(ctx: click.Context, port: int | None) -> None:
    """Start the aisast web API."""
    try:
        import uvicorn
    except ImportError:
        console.print(
            "[red]Web dependencies not installed.[/red]\n"
            "Install with: pip install aisast[web]"
        )
        raise SystemExit(1)

    config = ctx.obj["config"]
    if port is not None:
        config.web.port = port

    console.print(
        f"[bold]aisast[/bold] API starting on "
        f"[cyan]http://{config.web.host}:{config.web.port}/api[/cyan]"
    )

    from aisast.web.app import create_app

    app = create_app(config)
    uvicorn.run(app, host=config.web.host, port=config.web.port, log_level="info")
