"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from aisast import __version__
from aisast.config import AisastConfig
from aisast.errors import ConfigError


@click.group()
@click.version_option(version=__version__, prog_name="aisast")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a YAML config file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """aisast — static security scanning with optional AI enrichment and fixes."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = AisastConfig.load(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    config.verbose = verbose

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose


def _register_commands() -> None:
    from aisast.cli.catalog import catalog  # noqa: F811
    from aisast.cli.fix import fix  # noqa: F811
    from aisast.cli.scan import scan  # noqa: F811
    from aisast.cli.server import server  # noqa: F811
    from aisast.cli.status import status  # noqa: F811

    main.add_command(scan)
    main.add_command(fix)
    main.add_command(catalog)
    main.add_command(status)
    main.add_command(server)


_register_commands()
