"""
==============================================================================
Remote Writers Module
==============================================================================

Transports that overwrite the remote copy of the ledger.

The remote is a flat overwrite target, not an append log: every write
carries the complete snapshot. A writer makes exactly one attempt and
raises on any failure; retries are left to the user.

Target Resolution:
-----------------
- http://..., https://...    -> HttpRemoteWriter (PUT JSON document)
- anything else              -> FileShareWriter (local path, mounted share
                                or UNC path; export text, replaced whole)

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import httpx

from barcodelink.core import exceptions
from barcodelink.ledger.models import LedgerEntry, utc_now
from barcodelink.utils.exporter import LedgerExporter


# Module logger
logger = logging.getLogger(__name__)


class RemoteWriter:
    """Base class for remote ledger writers."""

    async def write(
        self,
        snapshot: Sequence[LedgerEntry],
        target: str,
        device_id: str = "",
    ) -> None:
        """
        Overwrite the remote ledger with snapshot.

        Raises:
            AppException: SYNC_TRANSPORT_ERROR on any failure
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release transport resources."""


class FileShareWriter(RemoteWriter):
    """
    Writes the export text to a file path.

    The file is written to a temporary sibling and then moved over the
    target, so readers never see a half-written ledger.
    """

    def __init__(self, exporter: Optional[LedgerExporter] = None) -> None:
        self._exporter = exporter or LedgerExporter()

    async def write(
        self,
        snapshot: Sequence[LedgerEntry],
        target: str,
        device_id: str = "",
    ) -> None:
        content = self._exporter.render(snapshot)
        path = Path(target)

        replace = asyncio.ensure_future(asyncio.to_thread(self._replace_file, path, content))
        try:
            await asyncio.shield(replace)
        except asyncio.CancelledError:
            # The worker thread cannot be interrupted; finish before giving up the target
            await asyncio.wait({replace})
            raise
        except OSError as e:
            raise exceptions.sync_transport_error(str(e), target) from e

        logger.info(f"📤 Wrote {len(snapshot)} entries to {target}")

    @staticmethod
    def _replace_file(path: Path, content: str) -> None:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp.write(content)

        try:
            os.replace(tmp.name, path)
        except OSError:
            os.unlink(tmp.name)
            raise


class HttpRemoteWriter(RemoteWriter):
    """
    PUTs the ledger as JSON to an HTTP endpoint.

    Any non-2xx response is a remote rejection.

    Payload:
        {"device_id": "DEV-42", "exported_at": "...Z",
         "items": [{"id", "code", "quantity", "timestamp", "synced"}]}
    """

    def __init__(
        self,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
        exporter: Optional[LedgerExporter] = None,
    ) -> None:
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._exporter = exporter or LedgerExporter()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    def build_payload(self, snapshot: Sequence[LedgerEntry], device_id: str) -> Dict[str, Any]:
        return {
            "device_id": device_id,
            "exported_at": self._exporter.format_timestamp(utc_now()),
            "items": [
                {
                    "id": entry.id,
                    "code": entry.code,
                    "quantity": entry.quantity,
                    "timestamp": self._exporter.format_timestamp(entry.last_seen_at),
                    "synced": entry.synced,
                }
                for entry in snapshot
            ],
        }

    async def write(
        self,
        snapshot: Sequence[LedgerEntry],
        target: str,
        device_id: str = "",
    ) -> None:
        client = self._get_client()
        payload = self.build_payload(snapshot, device_id)

        try:
            response = await client.put(target, json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise exceptions.sync_transport_error(f"Timeout: {e}", target) from e
        except httpx.HTTPStatusError as e:
            raise exceptions.sync_transport_error(
                f"Remote rejected write with HTTP {e.response.status_code}", target
            ) from e
        except httpx.HTTPError as e:
            raise exceptions.sync_transport_error(f"HTTP error: {e}", target) from e

        logger.info(f"📤 PUT {len(snapshot)} entries to {target} ({response.status_code})")

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


class RemoteWriterFactory:
    """Picks and caches a writer per target scheme."""

    def __init__(self, timeout: float = 15.0) -> None:
        self._timeout = timeout
        self._http: Optional[HttpRemoteWriter] = None
        self._file: Optional[FileShareWriter] = None

    def for_target(self, target: str) -> RemoteWriter:
        if target.lower().startswith(("http://", "https://")):
            if self._http is None:
                self._http = HttpRemoteWriter(timeout=self._timeout)
            return self._http

        if self._file is None:
            self._file = FileShareWriter()
        return self._file

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
