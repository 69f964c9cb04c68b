"""Tests for logging configuration and utilities."""

import json
import logging
import os
import time

from injector.logging import (
    ComponentFormatter,
    JSONLHandler,
    SecretRedactor,
    prune_old_logs,
    record_extras,
)


class TestSecretRedactor:
    """Tests for SecretRedactor class."""

    def test_redacts_private_key(self):
        redactor = SecretRedactor()
        key = "0x4c0883a69102937d6231471b5dbb6204fe512961708279f22b6bb2e4c1f5e7a1"
        result = redactor.redact(f"signing with {key}")
        assert "0x4c" in result
        assert key not in result
        assert "e7a1" in result

    def test_leaves_addresses_alone(self):
        redactor = SecretRedactor()
        address = "0x" + "ab" * 20
        assert redactor.redact(f"gauge {address}") == f"gauge {address}"

    def test_redacts_rpc_url_key(self):
        redactor = SecretRedactor()
        text = "rpc=https://mainnet.infura.io/v3/abcdef0123456789abcdef0123456789"
        result = redactor.redact(text)
        assert "https://mainnet.infura.io/v3/" in result
        assert "abcdef0123456789abcdef0123456789" not in result

    def test_redacts_env_assignment(self):
        redactor = SecretRedactor()
        result = redactor.redact("KEEPER_PRIVATE_KEY=supersecretvalue1234")
        assert "KEEPER_PRIVATE_KEY=" in result
        assert "supersecretvalue1234" not in result

    def test_disabled(self):
        redactor = SecretRedactor(enabled=False)
        text = "KEEPER_PRIVATE_KEY=supersecretvalue1234"
        assert redactor.redact(text) == text


class TestJSONLHandler:
    """Tests for JSONLHandler."""

    def test_writes_structured_entry(self, tmp_path):
        handler = JSONLHandler(tmp_path)
        record = logging.LogRecord(
            "injector.scheduling.executor",
            logging.INFO,
            __file__,
            1,
            "injection_batch_complete",
            None,
            None,
        )
        record.__dict__["injection.injected"] = 2
        handler.emit(record)
        handler.close()

        [log_file] = list(tmp_path.glob("*.jsonl"))
        entry = json.loads(log_file.read_text().strip())
        assert entry["level"] == "INFO"
        assert entry["component"] == "scheduling"
        assert entry["message"] == "injection_batch_complete"
        assert entry["extra"] == {"injection.injected": 2}

    def test_record_extras_only_returns_extra_fields(self):
        logger = logging.getLogger("injector.test")
        records = []

        class Collect(logging.Handler):
            def emit(self, record):
                records.append(record)

        handler = Collect()
        logger.addHandler(handler)
        try:
            logger.warning("caller_rejected", extra={"caller": "0x1"})
        finally:
            logger.removeHandler(handler)

        assert record_extras(records[0]) == {"caller": "0x1"}


class TestComponentFormatter:
    """Tests for ComponentFormatter."""

    def test_shortens_logger_name(self):
        formatter = ComponentFormatter("%(component)s | %(message)s")
        record = logging.LogRecord(
            "injector.keeper.watcher", logging.INFO, __file__, 1, "tick", None, None
        )
        assert formatter.format(record) == "keeper | tick"


class TestPruneOldLogs:
    """Tests for prune_old_logs()."""

    def test_deletes_only_old_jsonl_files(self, tmp_path):
        old = tmp_path / "2020-01-01.jsonl"
        new = tmp_path / "2099-01-01.jsonl"
        other = tmp_path / "notes.txt"
        for path in (old, new, other):
            path.write_text("{}\n")
        ancient = time.time() - 30 * 86400
        os.utime(old, (ancient, ancient))
        os.utime(other, (ancient, ancient))

        assert prune_old_logs(tmp_path, retention_days=7) == 1
        assert not old.exists()
        assert new.exists()
        assert other.exists()

    def test_missing_directory(self, tmp_path):
        assert prune_old_logs(tmp_path / "nope") == 0
