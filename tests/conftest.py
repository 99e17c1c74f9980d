"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides test settings, database, session controller and client fixtures.

Every test gets its own SQLite file under tmp_path, so ledger and settings
blobs never leak between tests.

==============================================================================
"""

import asyncio

import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Generator, List, Optional, Sequence

from fastapi.testclient import TestClient

from barcodelink.config import Settings
from barcodelink.db import BlobStore, ConfigRepository, DatabaseManager, LedgerRepository, init_db
from barcodelink.ledger import LedgerEntry, ScanDebouncer
from barcodelink.main import Application
from barcodelink.session import SessionController
from barcodelink.sync import RemoteWriter


# ============================================================================
# TIME HELPERS
# ============================================================================

T0 = datetime(2024, 6, 10, 12, 0, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    """Timestamp `seconds` after T0."""
    return T0 + timedelta(seconds=seconds)


@pytest.fixture
def ts() -> Callable[[float], datetime]:
    """Build timestamps relative to a fixed T0."""
    return at


# ============================================================================
# SETTINGS / DATABASE FIXTURES
# ============================================================================

@pytest.fixture
def remote_file(tmp_path: Path) -> Path:
    """Target file for file-share syncs."""
    remote_dir = tmp_path / "remote"
    remote_dir.mkdir()
    return remote_dir / "scans.txt"


@pytest.fixture
def settings(tmp_path: Path, remote_file: Path) -> Settings:
    """Settings pointing at a temporary database and directories."""
    return Settings(
        debug=False,
        database_url=f"sqlite:///{tmp_path / 'db' / 'test.db'}",
        export_directory=str(tmp_path / "exports"),
        default_remote_target=str(remote_file),
        default_auto_sync=False,
        sync_timeout_seconds=2.0,
    )


@pytest.fixture
def db_manager(settings: Settings) -> Generator[DatabaseManager, None, None]:
    """Initialized database manager for each test."""
    settings.ensure_directories()
    manager = DatabaseManager(settings)
    init_db(manager)
    yield manager
    manager.drop_tables()
    manager.dispose()


@pytest.fixture
def store(db_manager: DatabaseManager) -> BlobStore:
    return BlobStore(db_manager)


@pytest.fixture
def ledger_repository(store: BlobStore) -> LedgerRepository:
    return LedgerRepository(store)


@pytest.fixture
def config_repository(store: BlobStore, settings: Settings) -> ConfigRepository:
    return ConfigRepository(store, settings)


# ============================================================================
# CORE FIXTURES
# ============================================================================

@pytest.fixture
def controller(ledger_repository: LedgerRepository) -> SessionController:
    """Idle session controller backed by the test database."""
    return SessionController(
        debouncer=ScanDebouncer(window_ms=2000),
        repository=ledger_repository,
    )


class FakeWriter(RemoteWriter):
    """
    Remote writer double.

    Records every write. When `block` is set, writes wait on `release`
    after signalling `started`.
    """

    def __init__(self, block: bool = False, error: Optional[Exception] = None) -> None:
        self.calls: List[Sequence[LedgerEntry]] = []
        self.targets: List[str] = []
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        if not block:
            self.release.set()
        self.error = error

    async def write(self, snapshot, target, device_id=""):
        self.calls.append(tuple(snapshot))
        self.targets.append(target)
        self.started.set()
        await self.release.wait()
        # Yield once while the in-flight flag is held
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error


@pytest.fixture
def writer_factory() -> Callable[..., FakeWriter]:
    return FakeWriter


# ============================================================================
# CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def application(settings: Settings) -> Application:
    """Application instance built with test settings."""
    return Application(settings)


@pytest.fixture
def client(application: Application) -> Generator[TestClient, None, None]:
    """Test client with the application lifespan running."""
    with TestClient(application.app) as test_client:
        yield test_client
