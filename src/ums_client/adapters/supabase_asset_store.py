"""Supabase Storage asset store."""

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from urllib.parse import quote

import httpx
from supabase import Client

from ums_client.domain.uploads import (
    TERMINAL_EVENTS,
    UploadCompleted,
    UploadEvent,
    UploadFailed,
    UploadProgress,
)
from ums_client.errors import UploadError
from ums_client.services.uploads import AssetStore

logger = logging.getLogger(__name__)


@dataclass
class QueuedUploadHandle:
    """Upload handle fed by a background transfer task."""

    name: str
    queue: asyncio.Queue[UploadEvent]
    transfer: asyncio.Task[None]

    async def events(self) -> AsyncIterator[UploadEvent]:
        """Yield queued events until the terminal one."""
        while True:
            event = await self.queue.get()
            yield event
            if isinstance(event, TERMINAL_EVENTS):
                return


@dataclass
class SupabaseAssetStore(AssetStore):
    """Streams objects into a Supabase Storage bucket with progress events."""

    client: Client
    http_client: httpx.AsyncClient
    supabase_url: str
    supabase_key: str
    bucket: str
    max_bytes: int
    chunk_bytes: int = 256 * 1024
    timeout: float = 30.0

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        client: Client,
        supabase_url: str,
        supabase_key: str,
        bucket: str,
        max_bytes: int,
        chunk_bytes: int,
    ) -> "SupabaseAssetStore":
        """Create an asset store with a managed httpx session."""
        return cls(
            client=client,
            http_client=httpx.AsyncClient(),
            supabase_url=supabase_url,
            supabase_key=supabase_key,
            bucket=bucket,
            max_bytes=max_bytes,
            chunk_bytes=chunk_bytes,
        )

    def begin_upload(self, data: bytes, suggested_name: str) -> QueuedUploadHandle:
        """Start streaming the object; must run inside an event loop."""
        queue: asyncio.Queue[UploadEvent] = asyncio.Queue()
        transfer = asyncio.get_running_loop().create_task(
            self._transfer(queue, data, suggested_name)
        )
        return QueuedUploadHandle(name=suggested_name, queue=queue, transfer=transfer)

    def public_url(self, name: str) -> str:
        """Return the retrieval URL for a stored object."""
        return self.client.storage.from_(self.bucket).get_public_url(name)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _transfer(
        self, queue: asyncio.Queue[UploadEvent], data: bytes, name: str
    ) -> None:
        total = len(data)
        try:
            if total > self.max_bytes:
                raise UploadError(
                    f"{name} is {total} bytes, limit is {self.max_bytes} bytes"
                )
            response = await self.http_client.post(
                self._object_url(name),
                content=self._chunks(queue, data),
                headers={
                    "Authorization": f"Bearer {self.supabase_key}",
                    "apikey": self.supabase_key,
                    "Content-Type": "application/octet-stream",
                    "Content-Length": str(total),
                    "x-upsert": "false",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            url = self.public_url(name)
        except (UploadError, httpx.HTTPError) as exc:
            logger.warning("Storage upload of %s failed: %s", name, exc)
            queue.put_nowait(UploadFailed(cause=str(exc)))
            return
        except Exception as exc:
            logger.exception("Storage upload of %s broke", name)
            queue.put_nowait(UploadFailed(cause=str(exc)))
            return
        queue.put_nowait(UploadCompleted(url=url))

    async def _chunks(
        self, queue: asyncio.Queue[UploadEvent], data: bytes
    ) -> AsyncIterator[bytes]:
        total = len(data)
        sent = 0
        for start in range(0, total, self.chunk_bytes):
            chunk = data[start : start + self.chunk_bytes]
            yield chunk
            sent += len(chunk)
            queue.put_nowait(UploadProgress(bytes_transferred=sent, total_bytes=total))

    def _object_url(self, name: str) -> str:
        base = self.supabase_url.rstrip("/")
        return f"{base}/storage/v1/object/{self.bucket}/{quote(name)}"
