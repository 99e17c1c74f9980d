"""
==============================================================================
Scan Runtime Module
==============================================================================

Composition root for one running BarcodeLink instance.

Object Graph:
------------
    ScanRuntime
    ├── DatabaseManager ─▶ BlobStore ─┬─▶ LedgerRepository ─▶ SessionController
    │                                 └─▶ ConfigRepository ─▶ ConfigService
    ├── BarcodeDecoder ──────────────────────────────────────▶ SessionController
    ├── ConnectivityMonitor ─▶ SyncCoordinator ─▶ SyncService
    └── LedgerExporter

The runtime is created at application startup and stored on app.state;
request handlers reach it through the get_runtime dependency.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from barcodelink.config import Settings, get_settings
from barcodelink.db import (
    BlobStore,
    ConfigRepository,
    DatabaseManager,
    LedgerRepository,
    init_db,
)
from barcodelink.ledger import ScanDebouncer
from barcodelink.scanner import BarcodeDecoder
from barcodelink.services.config_service import ConfigService
from barcodelink.services.sync_service import SyncService
from barcodelink.session import SessionController
from barcodelink.sync import ConnectivityMonitor, RemoteWriterFactory, SyncCoordinator
from barcodelink.utils import LedgerExporter


# Module logger
logger = logging.getLogger(__name__)


class ScanRuntime:
    """
    Owns every long-lived component.

    Example:
        >>> runtime = ScanRuntime(settings)
        >>> runtime.controller.start(CaptureMode.SERIES)
        >>> await runtime.aclose()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        db_manager: Optional[DatabaseManager] = None,
        decoder: Optional[BarcodeDecoder] = None,
        writers: Optional[RemoteWriterFactory] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.db_manager = db_manager or DatabaseManager(self.settings)
        self.database_ready = init_db(self.db_manager)

        store = BlobStore(self.db_manager)
        self.config_service = ConfigService(ConfigRepository(store, self.settings))

        self.decoder = decoder or BarcodeDecoder(self.settings.camera_index)
        self.controller = SessionController(
            debouncer=ScanDebouncer(self.settings.suppression_window_ms),
            repository=LedgerRepository(store),
            decoder=self.decoder,
        )

        self.connectivity = ConnectivityMonitor()
        self.coordinator = SyncCoordinator(
            self.connectivity,
            writers=writers or RemoteWriterFactory(timeout=self.settings.sync_timeout_seconds),
            timeout=self.settings.sync_timeout_seconds,
        )
        self.sync_service = SyncService(self.controller, self.coordinator, self.config_service)
        self.controller.add_listener(self.sync_service.on_entry)

        self.exporter = LedgerExporter(self.settings.export_path)

        logger.info(f"✅ Runtime ready ({len(self.controller.snapshot())} ledger entries)")

    @property
    def durability_degraded(self) -> bool:
        return (
            not self.database_ready
            or self.controller.durability_degraded
            or self.config_service.durability_degraded
        )

    async def aclose(self) -> None:
        """Stop capture, let background syncs finish and release resources."""
        if self.controller.is_capturing:
            handle = self.controller.live_handle
            self.controller.stop()
            if handle is not None:
                await handle.wait_closed()
        await self.sync_service.aclose()
        self.db_manager.dispose()
        logger.info("✅ Runtime closed")
