"""Pydantic models for video queue data structures.

These are the wire and domain shapes shared by discovery, the record
store, the queue view and the HTTP API. Field names follow the JSON the
API speaks (camelCase), so the models serialize without aliases.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

# Marker carried by discovered files that are not in the store yet.
# Never persisted.
UNPROCESSED = "unprocessed"


class VideoStatus(str, Enum):
    """Persisted video states.

    Any state may move to any other; the worker that calls the status
    update is responsible for sensible transitions:
        pending → processing   (worker picks the file up)
        processing → completed (transcode finished)
        * → pending            (manual re-run)
    """

    PENDING = "pending"  # Enqueued, waiting for a worker
    PROCESSING = "processing"  # A worker is transcoding it
    COMPLETED = "completed"  # Terminal; record is retained

    @classmethod
    def values(cls) -> List[str]:
        return [s.value for s in cls]


# Display and sort priority of the queue view. Lower sorts first;
# anything not listed sorts after all of these.
STATUS_PRIORITY = {
    VideoStatus.PROCESSING.value: 1,
    VideoStatus.PENDING.value: 2,
    VideoStatus.COMPLETED.value: 3,
}
OTHER_PRIORITY = 4


class VideoItem(BaseModel):
    """A tracked unit of video-processing work.

    Used both for stored records and for transient discovery results
    (status ``unprocessed``).
    """

    id: str = Field(..., min_length=1, description="Stable identifier (base filename)")
    path: str = Field(..., min_length=1, description="Filesystem location, dedup key")
    resolution: Optional[str] = Field(default=None, description="e.g. 1920x1080")
    bitrate: Optional[str] = Field(default=None, description="e.g. 8000k")
    status: str = Field(default=VideoStatus.PENDING.value, description="Queue state")
    originalSize: int = Field(default=0, ge=0, description="Size in bytes")  # noqa: N815


class StatusUpdate(BaseModel):
    """Body of a status transition request."""

    status: VideoStatus


class QueueGroups(BaseModel):
    """One page of the queue, partitioned by status."""

    pending: List[VideoItem] = Field(default_factory=list)
    processing: List[VideoItem] = Field(default_factory=list)
    completed: List[VideoItem] = Field(default_factory=list)
    # Rows whose status was written by something other than this service
    other: List[VideoItem] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)

    def page_length(self) -> int:
        return len(self.pending) + len(self.processing) + len(self.completed) + len(self.other)


class Pagination(BaseModel):
    """Pagination metadata; requested values are echoed next to the clamped ones."""

    page: int = Field(..., ge=1)
    pageSize: int = Field(..., ge=1)  # noqa: N815
    total: int = Field(..., ge=0)
    pages: int = Field(..., ge=0)
    requestedPage: int  # noqa: N815
    requestedPageSize: int  # noqa: N815


class QueueView(BaseModel):
    """Full response of the queue endpoint."""

    queue: QueueGroups
    pagination: Pagination
