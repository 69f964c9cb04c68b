"""Main CLI application."""

import os
from typing import Annotated

import typer

from injector.cli.commands import admin, config, init, schedule, status, upkeep

app = typer.Typer(
    name="injector",
    help="Gauge injector - scheduled reward injections into gauges",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Gauge injector command line."""
    from injector.logging import configure_logging

    level = "DEBUG" if verbose else os.environ.get("INJECTOR_LOG_LEVEL", "WARNING")
    configure_logging(level=level, use_rich=True)


for module in (init, config, status, schedule, upkeep, admin):
    module.register(app)


if __name__ == "__main__":
    app()
