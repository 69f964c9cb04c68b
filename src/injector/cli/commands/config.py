"""Configuration management commands."""

from pathlib import Path
from typing import Annotated

import click
import typer

from injector.cli.console import console, error, success


def register(app: typer.Typer) -> None:
    """Register the config command."""

    @app.command()
    def config(
        action: Annotated[
            str | None,
            typer.Argument(help="Action: show, validate"),
        ] = None,
        path: Annotated[
            Path | None,
            typer.Option(
                "--path",
                "-p",
                help="Path to config file (default: $INJECTOR_HOME/config.toml)",
            ),
        ] = None,
    ) -> None:
        """Manage configuration."""
        if action is None:
            ctx = click.get_current_context()
            click.echo(ctx.get_help())
            raise typer.Exit(0)

        from rich.syntax import Syntax
        from rich.table import Table

        from injector.addresses import is_zero_address
        from injector.cli.runtime import load_app_config
        from injector.config.paths import get_config_path

        expanded_path = path.expanduser() if path else get_config_path()

        if action == "show":
            if not expanded_path.exists():
                error(f"Config file not found: {expanded_path}")
                console.print("Run 'injector init' to create one")
                raise typer.Exit(1)

            content = expanded_path.read_text()
            syntax = Syntax(content, "toml", theme="monokai", line_numbers=True)
            console.print(f"[bold]Config file: {expanded_path}[/bold]\n")
            console.print(syntax)

        elif action == "validate":
            if not expanded_path.exists():
                error(f"Config file not found: {expanded_path}")
                raise typer.Exit(1)

            config_obj = load_app_config(expanded_path)
            injector = config_obj.injector

            table = Table(title="Configuration Summary")
            table.add_column("Setting", style="cyan")
            table.add_column("Value", style="green")

            table.add_row("Injector", injector.address)
            table.add_row("Owner", injector.owner)
            table.add_row(
                "Keeper",
                "[dim]not configured[/dim]"
                if is_zero_address(injector.keeper_address)
                else injector.keeper_address,
            )
            table.add_row("Token", injector.inject_token)
            table.add_row("Min wait", f"{injector.min_wait_period_seconds}s")
            table.add_row("State", str(injector.state_path))
            table.add_row("Poll interval", f"{config_obj.keeper.poll_interval}s")

            success("Configuration is valid!")
            console.print()
            console.print(table)

        else:
            error(f"Unknown action: {action}")
            console.print("Valid actions: show, validate")
            raise typer.Exit(1)
