"""
==============================================================================
Sync Package
==============================================================================

Reconciliation of the ledger with a remote target.

Classes:
--------
- SyncCoordinator: Single-flight remote writes
- SyncAttempt, SyncOutcome: Attempt records
- ConnectivityMonitor: Online/offline flag
- RemoteWriter, FileShareWriter, HttpRemoteWriter, RemoteWriterFactory

==============================================================================
"""

from .connectivity import ConnectivityMonitor
from .writers import FileShareWriter, HttpRemoteWriter, RemoteWriter, RemoteWriterFactory
from .coordinator import SyncAttempt, SyncCoordinator, SyncOutcome

__all__ = [
    "ConnectivityMonitor",
    "FileShareWriter",
    "HttpRemoteWriter",
    "RemoteWriter",
    "RemoteWriterFactory",
    "SyncAttempt",
    "SyncCoordinator",
    "SyncOutcome",
]
