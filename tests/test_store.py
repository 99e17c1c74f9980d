"""
==============================================================================
Persistence Tests
==============================================================================

Tests for the blob store and the ledger/config repositories.

==============================================================================
"""

import json
import re
from datetime import timedelta

import pytest

from barcodelink.db import ITEMS_KEY, SETTINGS_KEY
from barcodelink.ledger import LedgerEntry
from barcodelink.schemas.config import AppConfig


class TestBlobStore:
    """Tests for the key-value table."""

    def test_missing_key_loads_none(self, store):
        assert store.load("nothing-here") is None

    def test_save_and_overwrite(self, store):
        store.save("k", "one")
        store.save("k", "two")
        assert store.load("k") == "two"

    def test_delete(self, store):
        store.save("k", "one")
        store.delete("k")
        assert store.load("k") is None


class TestLedgerRepository:
    """Tests for ledger blob encoding."""

    def test_round_trip_preserves_entries(self, ledger_repository, ts):
        entries = [
            LedgerEntry(code="B", quantity=3, last_seen_at=ts(2.5), synced=True, revision=3),
            LedgerEntry(code="A", last_seen_at=ts(0)),
        ]

        assert ledger_repository.save_entries(entries) is True
        loaded = ledger_repository.load_entries()

        assert loaded == entries

    def test_stored_record_shape(self, ledger_repository, store, ts):
        entry = LedgerEntry(code="123", quantity=2, last_seen_at=ts(0))
        ledger_repository.save_entries([entry])

        records = json.loads(store.load(ITEMS_KEY))

        assert records == [{
            "id": entry.id,
            "code": "123",
            "timestamp": 1718020800000,
            "quantity": 2,
            "synced": False,
            "revision": 1,
        }]

    @pytest.mark.parametrize("millis", [1, 123, 290, 999])
    def test_millisecond_timestamps_exact(self, ledger_repository, store, ts, millis):
        entry = LedgerEntry(code="123", last_seen_at=ts(0) + timedelta(milliseconds=millis))
        ledger_repository.save_entries([entry])

        records = json.loads(store.load(ITEMS_KEY))

        assert records[0]["timestamp"] == 1718020800000 + millis
        assert ledger_repository.load_entries()[0].last_seen_at == entry.last_seen_at

    def test_records_without_revision_load(self, ledger_repository, store):
        store.save(ITEMS_KEY, json.dumps([
            {"id": "x1", "code": "123", "timestamp": 1718020800000, "quantity": 4, "synced": True}
        ]))

        loaded = ledger_repository.load_entries()

        assert loaded[0].revision == 1
        assert loaded[0].quantity == 4

    def test_nothing_stored_loads_empty(self, ledger_repository):
        assert ledger_repository.load_entries() == []

    def test_corrupt_blob_loads_empty(self, ledger_repository, store):
        store.save(ITEMS_KEY, "{not json")
        assert ledger_repository.load_entries() == []

    def test_invalid_records_load_empty(self, ledger_repository, store):
        store.save(ITEMS_KEY, json.dumps([{"code": "", "quantity": 0}]))
        assert ledger_repository.load_entries() == []


class TestConfigRepository:
    """Tests for configuration persistence."""

    def test_defaults_when_absent(self, config_repository, settings):
        config = config_repository.load()

        assert config.remote_target == settings.default_remote_target
        assert config.auto_sync is False
        assert re.fullmatch(r"DEV-\d{1,4}", config.device_id)

    def test_save_and_load(self, config_repository):
        config = AppConfig(remote_target="https://example.com/scans", auto_sync=True, device_id="DEV-9")

        assert config_repository.save(config) is True
        assert config_repository.load() == config

    def test_invalid_blob_falls_back_to_defaults(self, config_repository, store, settings):
        store.save(SETTINGS_KEY, '{"auto_sync": "maybe"}')
        assert config_repository.load().remote_target == settings.default_remote_target
