"""Upload progress tracking for the profile avatar."""

import asyncio
import logging
import math
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass, field, replace
from typing import Protocol
from uuid import UUID, uuid4

from ums_client.domain.uploads import (
    TERMINAL_EVENTS,
    UploadCompleted,
    UploadEvent,
    UploadFailed,
    UploadProgress,
    UploadStatus,
    UploadTask,
)
from ums_client.services.drafts import ProfileDraft

logger = logging.getLogger(__name__)

UPLOAD_FAILED_MESSAGE = "Error uploading image (file size must be less than 2 MB)"
UPLOAD_SUCCEEDED_MESSAGE = "Image uploaded successfully"


class UploadHandle(Protocol):
    """Event stream for one object transfer."""

    name: str

    def events(self) -> AsyncIterator[UploadEvent]:
        """Yield progress events, then exactly one terminal event."""


class AssetStore(Protocol):
    """Interface for remote blob storage."""

    def begin_upload(self, data: bytes, suggested_name: str) -> UploadHandle:
        """Start transferring an object and return its event handle."""


def unique_object_name(filename: str, now_ms: int | None = None) -> str:
    """Prefix a file name with a millisecond timestamp."""
    stamp = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    return f"{stamp}{filename}"


def progress_percent(bytes_transferred: int, total_bytes: int) -> int:
    """Return transfer progress rounded half-up to a whole percent."""
    return math.floor(bytes_transferred / total_bytes * 100 + 0.5)


@dataclass
class UploadTracker:
    """State machine turning asset-store events into editor status.

    Only the most recently started task is tracked. Events are applied with the
    id of the task that produced them, so a replaced task that keeps delivering
    events can neither move the new task's percent nor write into the draft.
    """

    asset_store: AssetStore
    draft: ProfileDraft
    _task: UploadTask | None = field(default=None, init=False)
    _pumps: set[asyncio.Task[None]] = field(default_factory=set, init=False)
    _current_pump: asyncio.Task[None] | None = field(default=None, init=False)

    @property
    def task(self) -> UploadTask | None:
        """Return the tracked task snapshot, if any."""
        return self._task

    @property
    def status(self) -> UploadStatus:
        return self._task.status if self._task else UploadStatus.IDLE

    @property
    def percent(self) -> int:
        return self._task.percent if self._task else 0

    @property
    def message(self) -> str:
        """Return the status line shown under the avatar."""
        if self._task is None:
            return ""
        if self._task.status is UploadStatus.FAILED:
            return UPLOAD_FAILED_MESSAGE
        if self._task.status is UploadStatus.SUCCEEDED:
            return UPLOAD_SUCCEEDED_MESSAGE
        if self._task.percent > 0:
            return f"Uploading: {self._task.percent} %"
        return ""

    def select_file(self, data: bytes, filename: str) -> UploadTask:
        """Begin uploading a newly selected file, abandoning any previous one.

        Must be called from a running event loop; events are consumed by a
        background task.
        """
        stored_name = unique_object_name(filename)
        task = self.start(filename, stored_name)
        handle = self.asset_store.begin_upload(data, stored_name)
        pump = asyncio.get_running_loop().create_task(self._consume(task.id, handle))
        self._pumps.add(pump)
        pump.add_done_callback(self._pumps.discard)
        self._current_pump = pump
        return task

    def start(self, source_name: str, stored_name: str) -> UploadTask:
        """Reset tracking to a fresh task in the uploading state."""
        if self._task is not None and self._task.status is UploadStatus.UPLOADING:
            logger.info("Abandoning upload %s", self._task.stored_name)
        self._task = UploadTask(
            id=uuid4(),
            source_name=source_name,
            stored_name=stored_name,
            status=UploadStatus.UPLOADING,
        )
        self._current_pump = None
        return self._task

    def apply(self, task_id: UUID, event: UploadEvent) -> bool:
        """Apply an event produced by the given task.

        Returns False when the event was ignored.
        """
        task = self._task
        if task is None or task.id != task_id:
            return False
        if task.status is not UploadStatus.UPLOADING:
            return False

        if isinstance(event, UploadProgress):
            if event.total_bytes <= 0:
                return False
            percent = progress_percent(event.bytes_transferred, event.total_bytes)
            percent = min(100, max(task.percent, percent))
            self._task = replace(task, percent=percent)
        elif isinstance(event, UploadCompleted):
            self._task = replace(
                task,
                status=UploadStatus.SUCCEEDED,
                percent=100,
                result_url=event.url,
            )
            self.draft.merge_picture_url(event.url)
        elif isinstance(event, UploadFailed):
            logger.warning("Upload %s failed: %s", task.stored_name, event.cause)
            self._task = replace(task, status=UploadStatus.FAILED, error=event.cause)
        return True

    async def wait(self) -> UploadTask | None:
        """Wait until the current task's event stream has been drained."""
        if self._current_pump is not None:
            await asyncio.shield(self._current_pump)
        return self._task

    async def close(self) -> None:
        """Cancel every background consumer and return to idle."""
        pumps = list(self._pumps)
        for pump in pumps:
            pump.cancel()
        await asyncio.gather(*pumps, return_exceptions=True)
        self._pumps.clear()
        self._current_pump = None
        self._task = None

    async def _consume(self, task_id: UUID, handle: UploadHandle) -> None:
        try:
            async for event in handle.events():
                self.apply(task_id, event)
                if isinstance(event, TERMINAL_EVENTS):
                    return
        except Exception as exc:
            logger.exception("Upload stream %s broke", handle.name)
            self.apply(task_id, UploadFailed(cause=str(exc)))
