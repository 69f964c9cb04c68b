"""Injection commands: automation check/perform, manual inject, watcher."""

from pathlib import Path
from typing import Annotated

import typer

from injector.cli.console import console, dim, info, success, warning

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to configuration file"),
]


def register(app: typer.Typer) -> None:
    """Register the upkeep commands."""

    @app.command()
    def check(config: ConfigOption = None) -> None:
        """Run the automation check and print its payload."""
        from injector.cli.console import fail
        from injector.cli.runtime import load_app_config, load_injector, open_store
        from injector.errors import InjectorError, LedgerError

        app_config = load_app_config(config)
        injector = load_injector(open_store(app_config))
        try:
            needed, payload = injector.check_upkeep()
        except (InjectorError, LedgerError) as e:
            fail(e)

        if needed:
            success("Upkeep needed")
        else:
            dim("No upkeep needed")
        console.print(payload.decode(), markup=False)

    @app.command()
    def perform(
        data: Annotated[
            str | None,
            typer.Option(
                "--data",
                help="Payload from 'injector check' (default: run the check now)",
            ),
        ] = None,
        caller: Annotated[
            str | None,
            typer.Option("--as", help="Calling address (default: configured keeper)"),
        ] = None,
        config: ConfigOption = None,
    ) -> None:
        """Perform upkeep as the automation caller."""
        from injector.cli.console import fail
        from injector.cli.runtime import load_app_config, open_store, run_mutation
        from injector.config import ConfigError

        app_config = load_app_config(config)
        store = open_store(app_config)
        if caller is None:
            try:
                caller = app_config.require_keeper()
            except ConfigError as e:
                fail(e)
        who = caller

        def apply(injector):
            payload = data.encode() if data is not None else injector.check_upkeep()[1]
            return injector.perform_upkeep(who, payload)

        injected = run_mutation(store, apply)
        _report(injected)

    @app.command()
    def inject(
        gauges: Annotated[
            list[str],
            typer.Argument(help="Gauge addresses to inject into"),
        ],
        caller: Annotated[
            str | None,
            typer.Option("--as", help="Calling address (default: configured owner)"),
        ] = None,
        config: ConfigOption = None,
    ) -> None:
        """Manually inject into the given gauges as the owner."""
        from injector.cli.runtime import load_app_config, open_store, run_mutation

        app_config = load_app_config(config)
        store = open_store(app_config)
        who = caller or app_config.injector.owner

        injected = run_mutation(store, lambda injector: injector.inject_funds(who, gauges))
        _report(injected)

    @app.command()
    def watch(
        interval: Annotated[
            float | None,
            typer.Option("--interval", "-i", help="Seconds between polls"),
        ] = None,
        once: Annotated[
            bool,
            typer.Option("--once", help="Run a single poll and exit"),
        ] = False,
        config: ConfigOption = None,
    ) -> None:
        """Poll for upkeep and perform it as the configured keeper."""
        import asyncio

        from injector.cli.console import fail
        from injector.cli.runtime import load_app_config, open_store
        from injector.config import ConfigError
        from injector.errors import InjectorError, LedgerError
        from injector.keeper import KeeperWatcher, StoredUpkeepTarget
        from injector.logging import configure_logging

        app_config = load_app_config(config)
        store = open_store(app_config)
        try:
            keeper = app_config.require_keeper()
        except ConfigError as e:
            fail(e)

        if app_config.logging.log_to_file or app_config.logging.level:
            configure_logging(
                level=app_config.logging.level,
                use_rich=True,
                log_to_file=app_config.logging.log_to_file,
                retention_days=app_config.logging.retention_days,
            )

        watcher = KeeperWatcher(
            StoredUpkeepTarget(store),
            keeper,
            poll_interval=interval or app_config.keeper.poll_interval,
            heartbeat_every=app_config.keeper.heartbeat_every,
        )

        @watcher.on_injected
        async def report(injected: list[str]) -> None:
            _report(injected)

        if once:
            try:
                injected = asyncio.run(watcher.run_once())
            except (InjectorError, LedgerError) as e:
                fail(e)
            if not injected:
                dim("Nothing to inject")
            return

        async def run() -> None:
            await watcher.start()
            try:
                while watcher.running:
                    await asyncio.sleep(1)
            finally:
                await watcher.stop()

        info(f"Watching as keeper {keeper} (Ctrl+C to stop)")
        try:
            asyncio.run(run())
        except KeyboardInterrupt:
            dim("Stopped")


def _report(injected: list[str]) -> None:
    if not injected:
        warning("No gauges injected")
        return
    success(f"Injected {len(injected)} gauge(s)")
    for address in injected:
        console.print(f"  {address}")
