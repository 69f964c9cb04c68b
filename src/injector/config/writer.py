"""Configuration writer for modifying config.toml while preserving formatting.

Uses tomlkit to preserve comments, formatting, and ordering in TOML files.
"""

import logging
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit import TOMLDocument, comment, nl, table

from injector.addresses import normalize_address
from injector.config.paths import get_config_path

logger = logging.getLogger(__name__)

# Keys under [injector] that hold addresses and are normalized on write.
_ADDRESS_KEYS = frozenset({"address", "owner", "keeper_address", "inject_token"})


class ConfigWriter:
    """Writer for modifying config.toml while preserving formatting."""

    def __init__(self, config_path: Path | None = None):
        self.config_path = config_path or get_config_path()
        self._doc: TOMLDocument | None = None

    def _load(self) -> TOMLDocument:
        """Load the config file, creating it if it doesn't exist."""
        if self._doc is not None:
            return self._doc

        if self.config_path.exists():
            content = self.config_path.read_text()
            self._doc = tomlkit.parse(content)
        else:
            self._doc = tomlkit.document()

        return self._doc

    def _save(self) -> None:
        """Save the config file."""
        if self._doc is None:
            return

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(tomlkit.dumps(self._doc))
        logger.debug(f"Saved config to {self.config_path}")

    def _ensure_injector_table(self, doc: TOMLDocument):
        """Ensure [injector] table exists and return it."""
        if "injector" not in doc:
            doc["injector"] = table()
        return doc["injector"]

    def write_initial(
        self,
        *,
        address: str,
        owner: str,
        inject_token: str,
        keeper_address: str | None = None,
        min_wait_period_seconds: int | None = None,
    ) -> bool:
        """Write a starter config.

        Returns:
            True if written, False if a config file already exists.
        """
        if self.config_path.exists():
            return False

        doc = tomlkit.document()
        doc.add(comment("Gauge injector configuration"))
        doc.add(nl())

        injector = table()
        injector["address"] = normalize_address(address)
        injector["owner"] = normalize_address(owner)
        injector["inject_token"] = normalize_address(inject_token)
        if keeper_address:
            injector["keeper_address"] = normalize_address(keeper_address)
        if min_wait_period_seconds is not None:
            injector["min_wait_period_seconds"] = min_wait_period_seconds
        doc["injector"] = injector

        logging_table = table()
        logging_table["log_to_file"] = False
        doc["logging"] = logging_table

        self._doc = doc
        self._save()
        logger.info("config_initialized", extra={"config.path": str(self.config_path)})
        return True

    def set_injector_value(self, key: str, value: Any) -> bool:
        """Set a key under [injector].

        Returns:
            True if the value changed, False if it was already set to `value`.
        """
        if key in _ADDRESS_KEYS:
            value = normalize_address(value)

        doc = self._load()
        injector = self._ensure_injector_table(doc)
        if injector.get(key) == value:
            return False

        injector[key] = value
        self._save()
        logger.info("config_value_updated", extra={"config.key": key})
        return True
