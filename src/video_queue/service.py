"""Queue operations wired over one record store and one path cache.

The service owns the cache; nothing in the core keeps process-wide
state. The API builds one instance per process, tests build their own.
"""

import asyncio
import logging
from typing import List, Optional, Union

from .errors import DuplicateVideoError, InvalidRequestError, VideoNotFoundError
from .models import AppConfig
from .queue.backends import MembershipCache, RecordStore
from .queue.cache import PathCache
from .queue.discovery import discover_unprocessed
from .queue.models import QueueView, VideoItem, VideoStatus
from .queue.views import QueueParams, load_queue_view

logger = logging.getLogger(__name__)


class VideoQueueService:
    """Discovery, enqueue, status transitions and the queue view.

    Args:
        store: Record store (source of truth)
        cache: Membership cache; a fresh PathCache if omitted
        config: Application config; defaults if omitted
    """

    def __init__(
        self,
        store: RecordStore,
        cache: Optional[MembershipCache] = None,
        config: Optional[AppConfig] = None,
    ):
        self.config = config or AppConfig()
        self.store = store
        self.cache = cache if cache is not None else PathCache()
        self.videos_dir = self.config.discovery.videos_dir
        self.extensions = list(self.config.discovery.extensions)
        # Serializes check-then-insert so two requests cannot queue one path
        self._enqueue_lock = asyncio.Lock()

    async def startup(self) -> int:
        """Build the path cache from the store. Call once before serving."""
        return await self.cache.rebuild(self.store)

    async def discover(self, root: Optional[str] = None) -> List[VideoItem]:
        """Media files under root (default: configured videos_dir) not yet queued."""
        return await asyncio.to_thread(
            discover_unprocessed, root or self.videos_dir, self.cache, self.extensions
        )

    async def get_queue(
        self,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        status: Optional[str] = None,
    ) -> QueueView:
        params = QueueParams.resolve(
            page,
            page_size,
            status,
            default_page_size=self.config.pagination.default_page_size,
            max_page_size=self.config.pagination.max_page_size,
        )
        return await load_queue_view(self.store, params)

    async def enqueue(self, item: VideoItem) -> VideoItem:
        """Insert item as 'pending' whatever status it carries.

        Raises:
            DuplicateVideoError: path or id already stored
        """
        pending = item.model_copy(update={"status": VideoStatus.PENDING.value})

        async with self._enqueue_lock:
            if self.cache.contains(pending.path):
                raise DuplicateVideoError(pending.id, pending.path)
            existing = await self.store.find_existing(pending.id, pending.path)
            if existing is not None:
                # Row written elsewhere; the store just confirmed its path
                self.cache.add(existing.path)
                raise DuplicateVideoError(pending.id, pending.path)

            stored = await self.store.insert(pending)
            self.cache.add(stored.path)

        logger.info("Queued %s (%s)", stored.id, stored.path)
        return stored

    async def update_status(self, video_id: str, status: Union[str, VideoStatus]) -> VideoStatus:
        """Overwrite the status of one stored video.

        Raises:
            InvalidRequestError: status is not a VideoStatus value
            VideoNotFoundError: no video has this id
        """
        try:
            new_status = VideoStatus(status)
        except ValueError:
            raise InvalidRequestError(
                "status", status, f"expected one of {', '.join(VideoStatus.values())}"
            )

        await self.store.update_status(video_id, new_status.value)
        logger.info("Video %s -> %s", video_id, new_status.value)
        return new_status

    async def get_video(self, video_id: str) -> VideoItem:
        video = await self.store.get(video_id)
        if video is None:
            raise VideoNotFoundError(video_id)
        return video
