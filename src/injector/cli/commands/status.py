"""Status command: schedule, balances and readiness at a glance."""

from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated

import typer

from injector.cli.console import console, create_table, dim


def _format_timestamp(ts: int) -> str:
    if ts == 0:
        return "[dim]never[/dim]"
    return datetime.fromtimestamp(ts, UTC).strftime("%Y-%m-%d %H:%M:%S")


def register(app: typer.Typer) -> None:
    """Register the status command."""

    @app.command()
    def status(
        config: Annotated[
            Path | None,
            typer.Option("--config", "-c", help="Path to configuration file"),
        ] = None,
    ) -> None:
        """Show the schedule, balances and why each gauge is or isn't ready."""
        from injector.addresses import is_zero_address
        from injector.cli.runtime import load_app_config, load_injector, open_store

        app_config = load_app_config(config)
        injector = load_injector(open_store(app_config))

        summary = create_table(
            "Injector", [("Setting", "cyan"), ("Value", {"overflow": "fold"})]
        )
        summary.add_row("Address", injector.address)
        summary.add_row("Owner", injector.owner)
        if not is_zero_address(injector.pending_owner):
            summary.add_row("Pending owner", injector.pending_owner)
        summary.add_row("Keeper", injector.keeper_address)
        summary.add_row("Token", injector.inject_token)
        summary.add_row("Min wait", f"{injector.min_wait_period_seconds}s")
        summary.add_row("Paused", "[yellow]yes[/yellow]" if injector.paused else "no")
        summary.add_row("Balance", str(injector.get_balance()))
        summary.add_row("Obligation", str(injector.total_obligation()))
        delta = injector.balance_delta()
        summary.add_row(
            "Delta",
            f"[green]{delta}[/green]" if delta == 0 else f"[yellow]{delta}[/yellow]",
        )
        console.print(summary)

        watch_list = injector.get_watch_list()
        if not watch_list:
            dim("No recipients scheduled")
            return

        decisions = {d.address: d for d in injector.explain_readiness()}
        table = create_table(
            "Schedule",
            [
                ("Gauge", {"style": "cyan", "overflow": "fold"}),
                ("Amount", "green"),
                ("Periods", ""),
                ("Last injection", ""),
                ("Ready", ""),
            ],
        )
        for address in watch_list:
            entry = injector.get_account_info(address)
            decision = decisions.get(address)
            if decision is None or decision.ready:
                ready = "[green]ready[/green]"
            else:
                ready = ", ".join(r.value for r in decision.reasons)
            table.add_row(
                address,
                str(entry.amount_per_period),
                f"{entry.period_number}/{entry.max_periods}",
                _format_timestamp(entry.last_injection_timestamp),
                ready,
            )
        console.print(table)
