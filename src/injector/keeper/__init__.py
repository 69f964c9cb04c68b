"""Local automation: polls readiness and performs upkeep as the keeper."""

from injector.keeper.watcher import KeeperWatcher, StoredUpkeepTarget, UpkeepTarget

__all__ = ["KeeperWatcher", "StoredUpkeepTarget", "UpkeepTarget"]
