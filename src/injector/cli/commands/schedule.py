"""Schedule management commands.

Schedule files are TOML with one [[recipients]] table per gauge:

    [[recipients]]
    address = "0x..."
    amount_per_period = 1000
    max_periods = 4
"""

import tomllib
from pathlib import Path
from typing import Annotated, Any

import click
import typer

from injector.cli.console import confirm_or_cancel, console, error, success


def parse_schedule_file(path: Path) -> tuple[list[str], list[int], list[int]]:
    """Read a schedule file into parallel address/amount/period lists.

    Raises:
        ValueError: If the file is not valid TOML or a table is incomplete.
    """
    with path.open("rb") as f:
        data: dict[str, Any] = tomllib.load(f)

    addresses: list[str] = []
    amounts: list[int] = []
    periods: list[int] = []
    for i, recipient in enumerate(data.get("recipients", [])):
        try:
            addresses.append(recipient["address"])
            amounts.append(recipient["amount_per_period"])
            periods.append(recipient["max_periods"])
        except KeyError as e:
            raise ValueError(f"recipients[{i}] is missing {e.args[0]!r}") from None
    return addresses, amounts, periods


def register(app: typer.Typer) -> None:
    """Register the schedule command."""

    @app.command()
    def schedule(
        action: Annotated[
            str | None,
            typer.Argument(help="Action: set, clear"),
        ] = None,
        file: Annotated[
            Path | None,
            typer.Option("--file", "-f", help="Schedule file (TOML) for set"),
        ] = None,
        validated: Annotated[
            bool,
            typer.Option(
                "--validated",
                help="Require the current schedule to be finished and the new "
                "one to match the balance exactly",
            ),
        ] = False,
        force: Annotated[
            bool,
            typer.Option("--force", help="Skip confirmation for clear"),
        ] = False,
        caller: Annotated[
            str | None,
            typer.Option("--as", help="Calling address (default: configured owner)"),
        ] = None,
        config: Annotated[
            Path | None,
            typer.Option("--config", "-c", help="Path to configuration file"),
        ] = None,
    ) -> None:
        """Replace the recipient schedule.

        Examples:
            injector schedule set --file schedule.toml
            injector schedule set --file schedule.toml --validated
            injector schedule clear
        """
        if action is None:
            ctx = click.get_current_context()
            click.echo(ctx.get_help())
            raise typer.Exit(0)

        from rich.markup import escape

        from injector.cli.runtime import load_app_config, open_store, run_mutation

        if action == "set":
            if file is None:
                error("--file is required for set")
                raise typer.Exit(1)
            try:
                addresses, amounts, periods = parse_schedule_file(file.expanduser())
            except (OSError, ValueError) as e:
                error(f"Cannot read schedule file: {escape(str(e))}")
                raise typer.Exit(1) from None
        elif action == "clear":
            if not confirm_or_cancel("Remove every recipient from the schedule?", force):
                return
            addresses, amounts, periods = [], [], []
        else:
            error(f"Unknown action: {action}")
            console.print("Valid actions: set, clear")
            raise typer.Exit(1)

        app_config = load_app_config(config)
        store = open_store(app_config)
        who = caller or app_config.injector.owner

        if validated:
            run_mutation(
                store,
                lambda injector: injector.set_validated_recipient_list(
                    who, addresses, amounts, periods
                ),
            )
        else:
            run_mutation(
                store,
                lambda injector: injector.set_recipient_list(
                    who, addresses, amounts, periods
                ),
            )
        success(f"Schedule set with {len(addresses)} recipient(s)")
