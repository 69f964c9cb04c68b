"""Owner commands and local-chain helpers."""

from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import click
import typer

from injector.cli.console import console, error, success

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to configuration file"),
]
CallerOption = Annotated[
    str | None,
    typer.Option("--as", help="Calling address (default: configured owner)"),
]

SETTINGS = ("keeper", "min-wait", "token")


def _owner_call(
    config: Path | None, caller: str | None, call: Callable[..., object]
) -> object:
    """Run `call(injector, who)` as a persisted owner entrypoint."""
    from injector.cli.runtime import load_app_config, open_store, run_mutation

    app_config = load_app_config(config)
    store = open_store(app_config)
    who = caller or app_config.injector.owner
    return run_mutation(store, lambda injector: call(injector, who))


def _chain_change(config: Path | None, change: Callable[..., object]) -> object:
    """Apply a direct change to the local chain, outside any entrypoint."""
    from injector.cli.console import fail
    from injector.cli.runtime import load_app_config, open_store
    from injector.errors import LedgerError
    from injector.store import StateError

    app_config = load_app_config(config)
    store = open_store(app_config)
    try:
        return store.mutate(change)
    except (LedgerError, StateError, ValueError) as e:
        fail(e)


def register(app: typer.Typer) -> None:
    """Register owner and local-chain commands."""

    @app.command()
    def pause(caller: CallerOption = None, config: ConfigOption = None) -> None:
        """Pause automated and manual injection."""
        _owner_call(config, caller, lambda injector, who: injector.pause(who))
        success("Injector paused")

    @app.command()
    def unpause(caller: CallerOption = None, config: ConfigOption = None) -> None:
        """Resume injection."""
        _owner_call(config, caller, lambda injector, who: injector.unpause(who))
        success("Injector unpaused")

    @app.command("set")
    def set_value(
        key: Annotated[str, typer.Argument(help="Setting: keeper, min-wait, token")],
        value: Annotated[str, typer.Argument(help="New value")],
        caller: CallerOption = None,
        config: ConfigOption = None,
    ) -> None:
        """Change a runtime setting (keeper address, min wait, inject token)."""
        if key == "keeper":
            _owner_call(
                config,
                caller,
                lambda injector, who: injector.set_keeper_address(who, value),
            )
        elif key == "min-wait":
            try:
                seconds = int(value)
            except ValueError:
                error(f"min-wait must be an integer, got {value!r}")
                raise typer.Exit(1) from None
            _owner_call(
                config,
                caller,
                lambda injector, who: injector.set_min_wait_period(who, seconds),
            )
        elif key == "token":
            _owner_call(
                config,
                caller,
                lambda injector, who: injector.set_inject_token(who, value),
            )
        else:
            error(f"Unknown setting: {key}")
            console.print(f"Valid settings: {', '.join(SETTINGS)}")
            raise typer.Exit(1)
        success(f"Updated {key}")

    @app.command()
    def withdraw(
        amount: Annotated[int, typer.Argument(help="Amount of the inject token")],
        to: Annotated[
            str | None,
            typer.Option("--to", help="Recipient (default: owner)"),
        ] = None,
        caller: CallerOption = None,
        config: ConfigOption = None,
    ) -> None:
        """Withdraw inject token from the injector."""
        _owner_call(
            config, caller, lambda injector, who: injector.withdraw(who, amount, to)
        )
        success(f"Withdrew {amount}")

    @app.command()
    def sweep(
        token: Annotated[str, typer.Argument(help="Token address")],
        to: Annotated[str, typer.Option("--to", help="Recipient")],
        force: Annotated[
            bool,
            typer.Option("--force", "-f", help="Skip confirmation"),
        ] = False,
        caller: CallerOption = None,
        config: ConfigOption = None,
    ) -> None:
        """Move the injector's whole balance of any token."""
        from injector.cli.console import confirm_or_cancel

        if not confirm_or_cancel(f"Sweep the entire {token} balance to {to}?", force):
            return
        amount = _owner_call(
            config, caller, lambda injector, who: injector.sweep(who, token, to)
        )
        success(f"Swept {amount}")

    @app.command("transfer-ownership")
    def transfer_ownership(
        new_owner: Annotated[str, typer.Argument(help="Proposed owner")],
        caller: CallerOption = None,
        config: ConfigOption = None,
    ) -> None:
        """Propose a new owner; takes effect when they accept."""
        _owner_call(
            config,
            caller,
            lambda injector, who: injector.transfer_ownership(who, new_owner),
        )
        success(f"Ownership transfer proposed to {new_owner}")

    @app.command("accept-ownership")
    def accept_ownership(
        caller: Annotated[str, typer.Option("--as", help="Proposed owner address")],
        config: ConfigOption = None,
    ) -> None:
        """Accept a pending ownership transfer.

        The owner in the config file is updated to match, so later commands
        default to calling as the new owner.
        """
        from injector.config import ConfigWriter
        from injector.config.paths import get_config_path

        _owner_call(
            config, caller, lambda injector, who: injector.accept_ownership(who)
        )
        config_path = config.expanduser() if config else get_config_path()
        if config_path.exists():
            ConfigWriter(config_path).set_injector_value("owner", caller)
        success(f"Ownership accepted by {caller.lower()}")

    @app.command()
    def fund(
        amount: Annotated[int, typer.Argument(help="Amount to mint")],
        config: ConfigOption = None,
    ) -> None:
        """Mint inject token to the injector on the local chain."""

        def mint(injector):
            injector.chain.token(injector.inject_token).mint(injector.address, amount)
            return injector.get_balance()

        balance = _chain_change(config, mint)
        success(f"Funded {amount}; balance is now {balance}")

    @app.command()
    def gauge(
        action: Annotated[
            str | None,
            typer.Argument(help="Action: add, kill"),
        ] = None,
        address: Annotated[
            str | None,
            typer.Argument(help="Gauge address"),
        ] = None,
        distributor: Annotated[
            str | None,
            typer.Option(
                "--distributor",
                help="Reward distributor for the inject token (default: injector)",
            ),
        ] = None,
        config: ConfigOption = None,
    ) -> None:
        """Manage gauges on the local chain."""
        if action is None:
            ctx = click.get_current_context()
            click.echo(ctx.get_help())
            raise typer.Exit(0)
        if address is None:
            error("A gauge address is required")
            raise typer.Exit(1)

        if action == "add":

            def add(injector):
                new = injector.chain.add_gauge(address)
                new.set_reward_distributor(
                    injector.inject_token, distributor or injector.address
                )
                return new.address

            added = _chain_change(config, add)
            success(f"Added gauge {added}")

        elif action == "kill":

            def kill(injector):
                injector.chain.gauge(address).killed = True

            _chain_change(config, kill)
            success(f"Killed gauge {address.lower()}")

        else:
            error(f"Unknown action: {action}")
            console.print("Valid actions: add, kill")
            raise typer.Exit(1)

    @app.command()
    def token(
        address: Annotated[str, typer.Argument(help="Token address")],
        symbol: Annotated[str, typer.Option("--symbol", help="Symbol")] = "TOKEN",
        config: ConfigOption = None,
    ) -> None:
        """Deploy another token on the local chain."""
        added = _chain_change(
            config, lambda injector: injector.chain.add_token(address, symbol).address
        )
        success(f"Added token {added}")
