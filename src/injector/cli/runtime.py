"""Shared bootstrap helpers for CLI command handlers."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import typer
from pydantic import ValidationError
from rich.markup import escape

from injector.cli.console import console, dim, error, fail
from injector.config import AppConfig, load_config
from injector.errors import InjectorError, LedgerError
from injector.events import EventLog, InjectorEvent
from injector.gauge_injector import GaugeInjector
from injector.store import StateError, StateStore

_T = TypeVar("_T")


def load_app_config(path: Path | None) -> AppConfig:
    """Load config or exit with a readable error."""
    try:
        return load_config(path.expanduser() if path else None)
    except FileNotFoundError as e:
        error(str(e))
        console.print("Run 'injector init' to create one")
        raise typer.Exit(1) from None
    except ValidationError as e:
        error("Configuration validation failed:")
        for err in e.errors():
            loc = ".".join(str(x) for x in err["loc"])
            console.print(f"  [yellow]{loc}[/yellow]: {escape(err['msg'])}")
        raise typer.Exit(1) from None
    except ValueError as e:
        error(f"Error loading config: {escape(str(e))}")
        raise typer.Exit(1) from None


def open_store(config: AppConfig) -> StateStore:
    store = StateStore(config.injector.state_path)
    if not store.exists():
        error(f"State file not found: {store.path}")
        console.print("Run 'injector init' to create one")
        raise typer.Exit(1)
    return store


def load_injector(store: StateStore) -> GaugeInjector:
    try:
        return store.load()
    except StateError as e:
        fail(e)


def print_events(events: list[InjectorEvent]) -> None:
    for event in events:
        style = "yellow" if event.durable else "cyan"
        details = ", ".join(f"{k}={v}" for k, v in event.payload.items())
        console.print(
            f"[{style}]{event.type.value}[/{style}] [dim]{escape(details)}[/dim]"
        )


def run_mutation(store: StateStore, mutate: Callable[[GaugeInjector], _T]) -> _T:
    """Apply an entrypoint to the stored injector and print the emitted events.

    Core failures print in red and exit with status 1. Durable events
    published by the failed call are still shown.
    """
    events = EventLog(store.clock)
    try:
        result = store.mutate(mutate, events=events)
    except (InjectorError, LedgerError, StateError) as e:
        print_events(events.events)
        fail(e)
    print_events(events.events)
    if not events.events:
        dim("No changes")
    return result
