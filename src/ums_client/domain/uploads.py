"""Domain models for avatar uploads."""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID


class UploadStatus(StrEnum):
    """Lifecycle of a tracked upload."""

    IDLE = "idle"
    UPLOADING = "uploading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadProgress:
    """Bytes handed to the storage transport so far."""

    bytes_transferred: int
    total_bytes: int


@dataclass(frozen=True)
class UploadCompleted:
    """Terminal event carrying the durable retrieval URL."""

    url: str


@dataclass(frozen=True)
class UploadFailed:
    """Terminal event carrying the failure cause."""

    cause: str


UploadEvent = UploadProgress | UploadCompleted | UploadFailed
TERMINAL_EVENTS = (UploadCompleted, UploadFailed)


@dataclass(frozen=True)
class UploadTask:
    """Snapshot of one upload attempt."""

    id: UUID
    source_name: str
    stored_name: str
    status: UploadStatus
    percent: int = 0
    result_url: str | None = None
    error: str | None = None
