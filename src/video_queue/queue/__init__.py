"""Video queue state: record store, path cache, discovery and queue views."""

from .backends import MembershipCache, RecordStore
from .cache import PathCache
from .discovery import discover_unprocessed, iter_media_files
from .models import (
    UNPROCESSED,
    Pagination,
    QueueGroups,
    QueueView,
    StatusUpdate,
    VideoItem,
    VideoStatus,
)
from .sql_backend import VideoStore
from .views import QueueParams, build_queue_view, group_by_status, load_queue_view

__all__ = [
    "MembershipCache",
    "RecordStore",
    "PathCache",
    "VideoStore",
    "discover_unprocessed",
    "iter_media_files",
    "UNPROCESSED",
    "Pagination",
    "QueueGroups",
    "QueueView",
    "StatusUpdate",
    "VideoItem",
    "VideoStatus",
    "QueueParams",
    "build_queue_view",
    "group_by_status",
    "load_queue_view",
]
