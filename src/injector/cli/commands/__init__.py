"""CLI command modules."""

from injector.cli.commands import admin, config, init, schedule, status, upkeep

__all__ = [
    "admin",
    "config",
    "init",
    "schedule",
    "status",
    "upkeep",
]
