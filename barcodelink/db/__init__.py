"""
==============================================================================
Database Package
==============================================================================

SQLAlchemy infrastructure for the key-value persistence adapter.

Architecture:
------------
├── database.py   - DatabaseManager class, session factory
├── models.py     - StoredBlob ORM model (kv_store table)
├── store.py      - BlobStore, LedgerRepository, ConfigRepository
└── init_db.py    - DatabaseInitializer for setup

==============================================================================
"""

from .database import DatabaseManager, Base, get_database_manager
from .models import StoredBlob, ITEMS_KEY, SETTINGS_KEY
from .store import BlobStore, LedgerRepository, ConfigRepository
from .init_db import DatabaseInitializer, init_db

__all__ = [
    "DatabaseManager",
    "Base",
    "get_database_manager",
    "StoredBlob",
    "ITEMS_KEY",
    "SETTINGS_KEY",
    "BlobStore",
    "LedgerRepository",
    "ConfigRepository",
    "DatabaseInitializer",
    "init_db",
]
