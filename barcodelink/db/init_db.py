"""
==============================================================================
Database Initialization Module
==============================================================================

Database setup utilities.

Initialization Flow:
-------------------
1. Verify the database is reachable
2. Create all tables from ORM models
3. Log initialization status

Usage:
------
    from barcodelink.db import init_db

    init_db(db_manager)

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from barcodelink.db.database import DatabaseManager, get_database_manager

# Registers the ORM models on Base.metadata
from barcodelink.db import models  # noqa: F401


# Module logger
logger = logging.getLogger(__name__)


class DatabaseInitializer:
    """
    Database initialization manager.

    Attributes:
        _db_manager: DatabaseManager instance

    Example:
        >>> initializer = DatabaseInitializer(db_manager)
        >>> initializer.initialize()
    """

    def __init__(self, db_manager: Optional[DatabaseManager] = None) -> None:
        self._db_manager = db_manager or get_database_manager()

    def create_tables(self) -> None:
        """Create all tables that don't exist yet."""
        self._db_manager.create_tables()

    def initialize(self) -> bool:
        """
        Run full initialization.

        Returns:
            True if the database is reachable and tables exist
        """
        logger.info("🔧 Initializing database...")

        if not self._db_manager.verify_connection():
            logger.error("❌ Database not reachable, running without durable storage")
            return False

        self.create_tables()
        logger.info("✅ Database initialization complete")
        return True


def init_db(db_manager: Optional[DatabaseManager] = None) -> bool:
    """
    Initialize the database.

    Returns:
        True if initialization succeeded
    """
    return DatabaseInitializer(db_manager).initialize()
