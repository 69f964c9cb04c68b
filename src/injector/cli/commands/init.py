"""Init command for creating the config file and local state."""

from pathlib import Path
from typing import Annotated

import typer

from injector.cli.console import console, dim, error, fail, success


def register(app: typer.Typer) -> None:
    """Register the init command."""

    @app.command()
    def init(
        address: Annotated[
            str,
            typer.Option("--address", help="Custodial address of the injector"),
        ],
        owner: Annotated[
            str,
            typer.Option("--owner", help="Owner address"),
        ],
        token: Annotated[
            str,
            typer.Option("--token", help="Address of the asset to disburse"),
        ],
        keeper: Annotated[
            str | None,
            typer.Option("--keeper", help="Automation caller address"),
        ] = None,
        min_wait: Annotated[
            int | None,
            typer.Option(
                "--min-wait",
                help="Minimum seconds between injections (default: one week)",
            ),
        ] = None,
        path: Annotated[
            Path | None,
            typer.Option(
                "--path",
                "-p",
                help="Path to config file (default: $INJECTOR_HOME/config.toml)",
            ),
        ] = None,
        state: Annotated[
            Path | None,
            typer.Option(
                "--state",
                help="Path to state file (default: $INJECTOR_HOME/state.json)",
            ),
        ] = None,
    ) -> None:
        """Create a config file and an empty local deployment."""
        from pydantic import ValidationError

        from injector.config import ConfigWriter, load_config
        from injector.config.paths import get_config_path
        from injector.store import StateError, StateStore

        config_path = path.expanduser() if path else get_config_path()
        if config_path.exists():
            error(f"Config file already exists at {config_path}")
            console.print("Use --path to specify a different location")
            raise typer.Exit(1)

        writer = ConfigWriter(config_path)
        try:
            writer.write_initial(
                address=address,
                owner=owner,
                inject_token=token,
                keeper_address=keeper,
                min_wait_period_seconds=min_wait,
            )
            if state is not None:
                writer.set_injector_value("state_path", str(state.expanduser()))
            config = load_config(config_path)
        except (ValueError, ValidationError) as e:
            config_path.unlink(missing_ok=True)
            fail(e)
        success(f"Created config file at {config_path}")

        store = StateStore(config.injector.state_path)
        try:
            store.initialize(config.injector)
        except StateError as e:
            fail(e)
        dim(f"Created state file at {store.path}")

        console.print(
            "Add gauges with [cyan]injector gauge add[/cyan], then fund with "
            "[cyan]injector fund[/cyan]"
        )
