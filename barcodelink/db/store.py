"""
==============================================================================
Blob Store Module
==============================================================================

Key-value persistence for the ledger and the user configuration.

This module implements:
- BlobStore: load(key) / save(key, blob) on the kv_store table
- LedgerRepository: JSON encoding of ledger snapshots
- ConfigRepository: JSON encoding of AppConfig

Failure Policy:
--------------
- Load failures (unreadable table, corrupt JSON, invalid records) fall back
  to an empty ledger or the default configuration and are logged.
- Save failures are logged and reported to the caller as False. They are
  not retried; the in-memory state stays authoritative.

==============================================================================
"""

from __future__ import annotations

import json
import logging
from typing import Iterable, List, Optional

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError

from barcodelink.config import Settings
from barcodelink.db.database import DatabaseManager
from barcodelink.db.models import ITEMS_KEY, SETTINGS_KEY, StoredBlob
from barcodelink.ledger.models import LedgerEntry
from barcodelink.schemas.config import AppConfig
from barcodelink.schemas.ledger import StoredLedgerEntry


# Module logger
logger = logging.getLogger(__name__)

_stored_entries = TypeAdapter(List[StoredLedgerEntry])


class BlobStore:
    """
    Synchronous key-value store backed by the kv_store table.

    Example:
        >>> store = BlobStore(db_manager)
        >>> store.save("barcodelink_items", "[]")
        >>> store.load("barcodelink_items")
        '[]'
    """

    def __init__(self, db_manager: DatabaseManager) -> None:
        self._db_manager = db_manager

    def load(self, key: str) -> Optional[str]:
        """
        Load a blob.

        Raises:
            SQLAlchemyError: If the store cannot be read
        """
        with self._db_manager.session_scope() as session:
            row = session.get(StoredBlob, key)
            return row.value if row is not None else None

    def save(self, key: str, blob: str) -> None:
        """
        Insert or overwrite a blob.

        Raises:
            SQLAlchemyError: If the store cannot be written
        """
        with self._db_manager.session_scope() as session:
            row = session.get(StoredBlob, key)
            if row is None:
                session.add(StoredBlob(key=key, value=blob))
            else:
                row.value = blob

    def delete(self, key: str) -> None:
        with self._db_manager.session_scope() as session:
            row = session.get(StoredBlob, key)
            if row is not None:
                session.delete(row)


class LedgerRepository:
    """Ledger snapshot persistence under the items key."""

    def __init__(self, store: BlobStore, key: str = ITEMS_KEY) -> None:
        self._store = store
        self._key = key

    def load_entries(self) -> List[LedgerEntry]:
        """
        Load persisted entries in ledger order.

        Returns:
            Stored entries, or an empty list if nothing usable is stored
        """
        try:
            blob = self._store.load(self._key)
        except SQLAlchemyError as e:
            logger.warning(f"⚠️ Failed to load ledger, starting empty: {e}")
            return []

        if not blob:
            return []

        try:
            records = _stored_entries.validate_json(blob)
        except ValidationError as e:
            logger.warning(f"⚠️ Stored ledger is corrupt, starting empty: {e}")
            return []

        entries = [record.to_entry() for record in records]
        logger.info(f"📦 Loaded {len(entries)} ledger entries")
        return entries

    def save_entries(self, entries: Iterable[LedgerEntry]) -> bool:
        """
        Persist a ledger snapshot.

        Returns:
            True if saved, False if the write failed
        """
        records = [StoredLedgerEntry.from_entry(entry).model_dump() for entry in entries]

        try:
            self._store.save(self._key, json.dumps(records))
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"⚠️ Failed to save ledger ({len(records)} entries): {e}")
            return False

        return True


class ConfigRepository:
    """User configuration persistence under the settings key."""

    def __init__(self, store: BlobStore, settings: Settings, key: str = SETTINGS_KEY) -> None:
        self._store = store
        self._settings = settings
        self._key = key

    def load(self) -> AppConfig:
        """
        Load the stored configuration.

        Returns:
            Stored configuration, or defaults when absent or unreadable
        """
        try:
            blob = self._store.load(self._key)
        except SQLAlchemyError as e:
            logger.warning(f"⚠️ Failed to load settings, using defaults: {e}")
            return AppConfig.defaults(self._settings)

        if not blob:
            return AppConfig.defaults(self._settings)

        try:
            return AppConfig.model_validate_json(blob)
        except ValidationError as e:
            logger.warning(f"⚠️ Stored settings are invalid, using defaults: {e}")
            return AppConfig.defaults(self._settings)

    def save(self, config: AppConfig) -> bool:
        """
        Persist configuration.

        Returns:
            True if saved, False if the write failed
        """
        try:
            self._store.save(self._key, config.model_dump_json())
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"⚠️ Failed to save settings: {e}")
            return False

        return True
